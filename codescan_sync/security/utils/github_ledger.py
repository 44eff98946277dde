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

"""GitHub Issues adapter for the issue ledger.

Issues are created and edited through PyGithub; the open Code Scanning
alerts are listed with ``requests`` against the REST endpoint (paginated via
the ``Link`` header). Identity lives in the hidden secmeta block of each
issue body, which is also where status changes are recorded. Lookups list
the ``security-alert`` issues and match their secmeta, so an issue created
moments earlier is always found.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import requests
from github import Github, GithubException
from github.Issue import Issue
from github.Repository import Repository

from codescan_sync.shared.common import utc_today
from codescan_sync.shared.github_issues import (
    DEFAULT_TIMEOUT,
    gh_client,
    gh_issue_add_labels,
    gh_issue_comment,
    gh_issue_create,
    gh_issue_edit_body,
    gh_issue_edit_state,
    gh_issue_get,
    gh_issue_list_by_label,
)

from .alert_parser import is_complete_alert, parse_alert
from .config import GitHubSettings
from .constants import LABEL_SECURITY_ALERT, SEC_EVENT_CLOSE, SEC_EVENT_REOPEN, SECMETA_SOURCE, IssueStatus
from .issue_builder import (
    build_issue_body,
    build_issue_labels,
    build_issue_title,
    metadata_from_issue_body,
    status_from_issue,
)
from .ledger import LedgerError
from .models import Alert, IssueIdentity, IssueMetadata, IssueUpdate, LedgerEntry
from .sec_events import render_sec_event
from .secmeta import load_secmeta, upsert_secmeta

logger = logging.getLogger(__name__)

# GitHub issue state_reason per close reason.
CLOSE_STATE_REASONS: dict[str, str] = {
    IssueStatus.FIXED: "completed",
    IssueStatus.CLOSED_BY_USER: "not_planned",
}
ALERTS_PAGE_SIZE = 100


def _known_status(reason: str | None) -> IssueStatus | None:
    try:
        return IssueStatus(reason or "")
    except ValueError:
        return None


def identity_matches(secmeta: dict[str, str], identity: IssueIdentity) -> bool:
    if identity.alert_id and secmeta.get("alert_id") == identity.alert_id:
        return True
    return bool(identity.fingerprint) and secmeta.get("fingerprint") == identity.fingerprint


def issue_to_entry(issue: Issue) -> LedgerEntry:
    return LedgerEntry(
        id=str(issue.number),
        metadata=metadata_from_issue_body(issue.body),
        status=status_from_issue(issue.body, issue.state),
        created_at=issue.created_at,
        updated_at=issue.updated_at,
        labels=[label.name for label in issue.labels],
    )


class GitHubIssueLedger:
    def __init__(
        self,
        settings: GitHubSettings,
        *,
        client: Github | None = None,
        session: requests.Session | None = None,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        self.settings = settings
        self.client = client or gh_client(settings.token, base_url=settings.api_url, timeout=timeout)
        self.session = session or requests.Session()
        self.timeout = timeout
        self._repo: Repository | None = None

    @property
    def repo(self) -> Repository:
        if self._repo is None:
            with self._backend("load repository"):
                self._repo = self.client.get_repo(self.settings.full_name)
        return self._repo

    @contextmanager
    def _backend(self, operation: str) -> Iterator[None]:
        try:
            yield
        except (GithubException, requests.RequestException) as exc:
            raise LedgerError(f"{operation} failed: {exc}") from exc

    def _issue(self, id: str) -> Issue:
        try:
            number = int(id)
        except (TypeError, ValueError):
            raise LedgerError(f"invalid issue id: {id!r}") from None
        with self._backend(f"get issue #{number}"):
            return gh_issue_get(self.repo, number)

    # ------------------------------------------------------------------
    # IssueLedger
    # ------------------------------------------------------------------

    def create(self, metadata: IssueMetadata) -> LedgerEntry:
        with self._backend(f"create issue for alert {metadata.alert_id}"):
            issue = gh_issue_create(
                self.repo,
                build_issue_title(metadata),
                build_issue_body(metadata, IssueStatus.CREATED),
                build_issue_labels(metadata),
            )
        return issue_to_entry(issue)

    def find_by_identity(self, identity: IssueIdentity) -> LedgerEntry | None:
        if not identity.alert_id and not identity.fingerprint:
            return None

        with self._backend("list security-alert issues"):
            candidates = gh_issue_list_by_label(self.repo, LABEL_SECURITY_ALERT)

        confirmed = [i for i in candidates if identity_matches(load_secmeta(i.body), identity)]
        if not confirmed:
            return None

        confirmed.sort(key=lambda i: i.created_at, reverse=True)
        if len(confirmed) > 1:
            logger.warning(
                "Ambiguous identity alert_id=%s fingerprint=%s matches issues %s – using newest #%s",
                identity.alert_id,
                identity.fingerprint,
                ", ".join(f"#{i.number}" for i in confirmed),
                confirmed[0].number,
            )
        return issue_to_entry(confirmed[0])

    def update(self, request: IssueUpdate) -> LedgerEntry:
        issue = self._issue(request.id)
        with self._backend(f"update issue #{issue.number}"):
            if request.labels:
                gh_issue_add_labels(issue, request.labels)
            if request.comment:
                gh_issue_comment(issue, request.comment)
            if request.status is not None:
                gh_issue_edit_body(issue, upsert_secmeta(issue.body, {"status": str(request.status)}))
        # Labels added above are not reflected on the local object.
        return issue_to_entry(self._issue(request.id))

    def close(self, id: str, reason: str | None = None) -> LedgerEntry:
        return self._set_state(id, "closed", SEC_EVENT_CLOSE, reason)

    def reopen(self, id: str, reason: str | None = None) -> LedgerEntry:
        return self._set_state(id, "open", SEC_EVENT_REOPEN, reason)

    def _set_state(self, id: str, state: str, event: str, reason: str | None) -> LedgerEntry:
        issue = self._issue(id)
        status = _known_status(reason)
        if state == "closed":
            state_reason = CLOSE_STATE_REASONS.get(status) if status else None
        else:
            state_reason = "reopened"

        with self._backend(f"{event} issue #{issue.number}"):
            if reason:
                secmeta = load_secmeta(issue.body)
                gh_issue_comment(
                    issue,
                    render_sec_event(
                        {
                            "action": event,
                            "reason": reason,
                            "seen_at": utc_today(),
                            "source": SECMETA_SOURCE,
                            "alert_id": secmeta.get("alert_id", ""),
                            "fingerprint": secmeta.get("fingerprint", ""),
                        }
                    ),
                )
            if status is not None:
                gh_issue_edit_body(issue, upsert_secmeta(issue.body, {"status": str(status)}))
            gh_issue_edit_state(issue, state, state_reason=state_reason)
        logger.info("Issue #%s %s (%s)", issue.number, "closed" if state == "closed" else "reopened", reason or "-")
        # Labels added by earlier calls are not reflected on the local object.
        return issue_to_entry(self._issue(id))

    def add_comment(self, id: str, text: str) -> None:
        issue = self._issue(id)
        with self._backend(f"comment on issue #{issue.number}"):
            gh_issue_comment(issue, text)

    def add_labels(self, id: str, labels: list[str]) -> None:
        issue = self._issue(id)
        with self._backend(f"add labels to issue #{issue.number}"):
            gh_issue_add_labels(issue, labels)

    def fetch_open_alerts(self) -> list[Alert]:
        url: str | None = f"{self.settings.api_url}/repos/{self.settings.full_name}/code-scanning/alerts"
        params: dict[str, Any] | None = {"state": "open", "per_page": ALERTS_PAGE_SIZE}
        headers = {
            "Authorization": f"Bearer {self.settings.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

        alerts: list[Alert] = []
        with self._backend("fetch code scanning alerts"):
            while url:
                resp = self.session.get(url, params=params, headers=headers, timeout=self.timeout)
                resp.raise_for_status()
                page = resp.json()
                if not isinstance(page, list):
                    raise LedgerError(f"unexpected code scanning response: {type(page).__name__}")
                for raw in page:
                    if not isinstance(raw, dict) or not is_complete_alert(raw):
                        logger.debug("Dropping incomplete alert: %r", raw)
                        continue
                    try:
                        alerts.append(parse_alert(raw))
                    except ValueError:
                        logger.debug("Dropping unparsable alert: %r", raw)
                # The next link already carries the query string.
                url = resp.links.get("next", {}).get("url")
                params = None
        return alerts
