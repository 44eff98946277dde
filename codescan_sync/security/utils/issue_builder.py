#
# Copyright 2026 ABSA Group Limited
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
#

"""Issue title / body / label construction from :class:`IssueMetadata`, and
the reverse mapping from a stored issue body back to metadata.
"""

import re

from codescan_sync.shared.templates import render_markdown_template

from .constants import (
    DEFAULT_SEVERITY,
    INTERNAL_SEVERITIES,
    LABEL_RULE_PREFIX,
    LABEL_SECURITY_ALERT,
    LABEL_SEVERITY_PREFIX,
    SECMETA_SCHEMA,
    SECMETA_SOURCE,
    IssueStatus,
)
from .models import IssueMetadata
from .secmeta import load_secmeta, render_secmeta
from .templates import ISSUE_BODY_TEMPLATE

DESCRIPTION_RE = re.compile(r"\*\*Description:\*\* (.+)")


def build_issue_title(metadata: IssueMetadata) -> str:
    return f"[{metadata.severity.upper()}] {metadata.rule_name or metadata.rule_id}"


def build_issue_labels(metadata: IssueMetadata) -> list[str]:
    return [
        LABEL_SECURITY_ALERT,
        f"{LABEL_SEVERITY_PREFIX}{metadata.severity}",
        f"{LABEL_RULE_PREFIX}{metadata.rule_id}",
    ]


def build_secmeta(metadata: IssueMetadata, status: IssueStatus) -> dict[str, str]:
    return {
        "schema": SECMETA_SCHEMA,
        "source": SECMETA_SOURCE,
        "alert_id": metadata.alert_id,
        "fingerprint": metadata.fingerprint,
        "rule_id": metadata.rule_id,
        "branch": metadata.branch,
        "severity": metadata.severity,
        "status": str(status),
        "rule_name": metadata.rule_name,
        "file": metadata.affected_file,
        "line": "" if metadata.line is None else str(metadata.line),
        "column": "" if metadata.column is None else str(metadata.column),
        "url": metadata.url,
    }


def build_issue_body(metadata: IssueMetadata, status: IssueStatus = IssueStatus.CREATED) -> str:
    """Hidden secmeta block followed by the human-readable details."""
    values = {
        "description": metadata.description,
        "rule_id": metadata.rule_id,
        "rule_name": metadata.rule_name,
        "severity_upper": metadata.severity.upper(),
        "affected_file": metadata.affected_file,
        "line": metadata.line,
        "column": metadata.column,
        "branch": metadata.branch,
    }
    human_body = render_markdown_template(ISSUE_BODY_TEMPLATE, values, missing="N/A").strip() + "\n"
    if metadata.url:
        human_body += f"\n[View Alert]({metadata.url})\n"
    return render_secmeta(build_secmeta(metadata, status)) + "\n\n" + human_body


def _int_or_none(raw: str | None) -> int | None:
    try:
        return int(raw) if raw else None
    except ValueError:
        return None


def metadata_from_issue_body(body: str | None) -> IssueMetadata:
    """Recover the metadata of a tracked issue from its body.

    Missing fields come back empty; an unknown severity falls back to
    ``medium``.
    """
    secmeta = load_secmeta(body)
    severity = (secmeta.get("severity") or "").lower()
    if severity not in INTERNAL_SEVERITIES:
        severity = DEFAULT_SEVERITY
    desc = DESCRIPTION_RE.search(body or "")
    return IssueMetadata(
        alert_id=secmeta.get("alert_id", ""),
        fingerprint=secmeta.get("fingerprint", ""),
        rule_id=secmeta.get("rule_id", ""),
        rule_name=secmeta.get("rule_name", ""),
        severity=severity,
        description=desc.group(1).strip() if desc else "",
        affected_file=secmeta.get("file", ""),
        branch=secmeta.get("branch", ""),
        line=_int_or_none(secmeta.get("line")),
        column=_int_or_none(secmeta.get("column")),
        url=secmeta.get("url", ""),
    )


def status_from_issue(body: str | None, state: str) -> IssueStatus:
    """Status recorded in secmeta, else ``created`` for open and ``fixed`` for closed issues."""
    raw = load_secmeta(body).get("status", "")
    try:
        return IssueStatus(raw)
    except ValueError:
        return IssueStatus.CREATED if (state or "").lower() == "open" else IssueStatus.FIXED
