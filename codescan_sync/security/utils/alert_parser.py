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

"""Alert data parsing – turning raw Code Scanning alert dicts into
:class:`Alert` snapshots, deriving the branch from a ref, the stable
fingerprint, the internal severity, and the issue metadata shared by the
webhook and reconciliation paths.
"""

from typing import Any

from .constants import BRANCH_REF_PREFIX, DEFAULT_SEVERITY, FINGERPRINT_SEPARATOR, SEVERITY_MAP
from .models import Alert, IssueMetadata


def compute_fingerprint(rule_id: str, path: str) -> str:
    """Stable identity of a finding: ``<rule_id>-<path>``.

    The numeric alert id is deliberately not part of it, and neither is the
    branch. No escaping is applied, so ids or paths containing the separator
    may collide.
    """
    return f"{rule_id}{FINGERPRINT_SEPARATOR}{path}"


def branch_from_ref(ref: str | None) -> str:
    """``refs/heads/feature/x`` -> ``feature/x``; other refs are returned unchanged."""
    return (ref or "").removeprefix(BRANCH_REF_PREFIX)


def map_severity(scanner_severity: str | None) -> str:
    """Map a scanner severity to the internal one; unknown values map to ``medium``."""
    return SEVERITY_MAP.get(str(scanner_severity or "").strip().lower(), DEFAULT_SEVERITY)


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def is_complete_alert(raw: dict[str, Any]) -> bool:
    """True when *raw* carries everything needed to compute identity and branch."""
    if raw.get("number", raw.get("id")) is None:
        return False
    rule = raw.get("rule") or {}
    instance = raw.get("most_recent_instance") or {}
    location = instance.get("location") or {}
    return all(
        isinstance(v, str) and v
        for v in (rule.get("id"), location.get("path"), instance.get("ref"))
    )


def parse_alert(raw: dict[str, Any]) -> Alert:
    """Build an :class:`Alert` from a REST or webhook alert object.

    Raises ``ValueError`` when the number, rule id, location path or ref is
    missing.
    """
    number = raw.get("number", raw.get("id"))
    if not is_complete_alert(raw):
        raise ValueError(f"incomplete code scanning alert: number={number!r}")

    rule = raw["rule"]
    instance = raw["most_recent_instance"]
    location = instance["location"]
    rule_id = str(rule["id"])

    return Alert(
        number=int(number),
        rule_id=rule_id,
        rule_name=str(rule.get("name") or rule_id),
        rule_description=str(rule.get("description") or "No description available"),
        rule_severity=str(rule.get("severity") or ""),
        path=str(location["path"]),
        ref=str(instance["ref"]),
        state=str(raw.get("state") or "open").lower(),
        start_line=_optional_int(location.get("start_line")),
        start_column=_optional_int(location.get("start_column")),
        html_url=str(raw.get("html_url") or ""),
        url=str(raw.get("url") or ""),
    )


def build_issue_metadata(alert: Alert, *, branch: str | None = None) -> IssueMetadata:
    """Field mapping used for every issue creation, whichever channel saw the alert first.

    *branch* overrides the branch derived from the alert's most recent
    instance (webhook events carry their own ``ref``).
    """
    return IssueMetadata(
        alert_id=str(alert.number),
        fingerprint=compute_fingerprint(alert.rule_id, alert.path),
        rule_id=alert.rule_id,
        rule_name=alert.rule_name,
        severity=map_severity(alert.rule_severity),
        description=alert.rule_description,
        affected_file=alert.path,
        branch=branch if branch is not None else branch_from_ref(alert.ref),
        line=alert.start_line,
        column=alert.start_column,
        url=alert.html_url,
    )
