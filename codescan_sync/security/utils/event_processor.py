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

"""Webhook event processing – one state transition per ``code_scanning_alert``
action, applied to the tracked issue of the alert.

Every transition except ``created`` starts with an identity lookup; when no
issue is tracked for the alert the transition is a no-op and returns ``None``
(for example a ``fixed`` event for an alert that lived on an untracked
branch). Mutations are not rolled back: if a later call fails, earlier labels
or comments stay, and the error propagates to the caller.
"""

from __future__ import annotations

import logging

from .alert_parser import branch_from_ref, build_issue_metadata, compute_fingerprint
from .branch_policy import should_track_for
from .config import SyncConfig
from .constants import (
    COMMENT_APPEARED_IN_BRANCH,
    COMMENT_CLOSED_BY_USER,
    COMMENT_FIXED,
    COMMENT_REOPENED,
    COMMENT_REOPENED_BY_USER,
    LABEL_APPEARED_IN_BRANCH,
    LABEL_CLOSED_BY_USER,
    LABEL_FIXED,
    LABEL_REOPENED,
    LABEL_REOPENED_BY_USER,
    AlertAction,
    BranchStrategy,
    IssueStatus,
)
from .issue_sync import ensure_issue
from .ledger import IssueLedger
from .locks import KeyedLock
from .models import Alert, IssueIdentity, IssueMetadata, IssueUpdate, LedgerEntry

logger = logging.getLogger(__name__)


class UnsupportedActionError(ValueError):
    """The webhook carried an action this processor has no transition for."""

    def __init__(self, action: str) -> None:
        super().__init__(f"Unsupported action: {action}")
        self.action = action


class EventProcessor:
    def __init__(self, ledger: IssueLedger, config: SyncConfig, *, locks: KeyedLock | None = None) -> None:
        self.ledger = ledger
        self.config = config
        self.locks = locks

    def dispatch(self, action: str, alert: Alert, ref: str) -> LedgerEntry | None:
        """Apply the transition for *action* to the issue tracking *alert*.

        *ref* is the event's ``refs/heads/<branch>`` ref.
        Raises :class:`UnsupportedActionError` for unknown actions.
        """
        try:
            known = AlertAction(action)
        except ValueError:
            logger.warning("Unsupported action: %s", action)
            raise UnsupportedActionError(action) from None

        alert_id = str(alert.number)
        fingerprint = compute_fingerprint(alert.rule_id, alert.path)
        branch = branch_from_ref(ref)

        if known == AlertAction.CREATED:
            return self.create(build_issue_metadata(alert, branch=branch))
        if known == AlertAction.APPEARED_IN_BRANCH:
            return self.appear_in_branch(alert_id, fingerprint, branch)
        if known == AlertAction.FIXED:
            return self.fix(alert_id, fingerprint)
        if known == AlertAction.CLOSED_BY_USER:
            return self.close_by_user(alert_id, fingerprint)
        return self.reopen(alert_id, fingerprint, by_user=known == AlertAction.REOPENED_BY_USER)

    def create(self, metadata: IssueMetadata) -> LedgerEntry | None:
        """Find-or-create; ``None`` when the branch is not tracked."""
        if not should_track_for(self.config, metadata.branch):
            logger.warning(
                "Issue creation skipped for alert %s in branch %s (not main branch: %s)",
                metadata.alert_id,
                metadata.branch,
                self.config.main_branch,
            )
            return None

        entry, _ = ensure_issue(self.ledger, metadata, locks=self.locks)
        return entry

    def appear_in_branch(self, alert_id: str, fingerprint: str, branch: str) -> LedgerEntry | None:
        if self.config.branch_strategy == BranchStrategy.MAIN_ONLY:
            logger.warning(
                "Branch alert tracking disabled (MAIN_ONLY strategy) - ignoring alert %s in branch %s",
                alert_id,
                branch,
            )
            return None

        existing = self._find(alert_id, fingerprint)
        if existing is None:
            return None

        self.ledger.add_comment(existing.id, COMMENT_APPEARED_IN_BRANCH.format(branch=branch))
        self.ledger.add_labels(existing.id, [LABEL_APPEARED_IN_BRANCH])
        return self.ledger.update(IssueUpdate(id=existing.id, status=IssueStatus.APPEARED_IN_BRANCH))

    def fix(self, alert_id: str, fingerprint: str) -> LedgerEntry | None:
        return self._close(alert_id, fingerprint, LABEL_FIXED, COMMENT_FIXED, IssueStatus.FIXED)

    def close_by_user(self, alert_id: str, fingerprint: str) -> LedgerEntry | None:
        return self._close(
            alert_id, fingerprint, LABEL_CLOSED_BY_USER, COMMENT_CLOSED_BY_USER, IssueStatus.CLOSED_BY_USER
        )

    def reopen(self, alert_id: str, fingerprint: str, *, by_user: bool = False) -> LedgerEntry | None:
        existing = self._find(alert_id, fingerprint)
        if existing is None:
            return None

        if by_user:
            label, comment, reason = LABEL_REOPENED_BY_USER, COMMENT_REOPENED_BY_USER, IssueStatus.REOPENED_BY_USER
        else:
            label, comment, reason = LABEL_REOPENED, COMMENT_REOPENED, IssueStatus.REOPENED

        self.ledger.add_labels(existing.id, [label])
        self.ledger.add_comment(existing.id, comment)
        return self.ledger.reopen(existing.id, str(reason))

    def _close(
        self,
        alert_id: str,
        fingerprint: str,
        label: str,
        comment: str,
        reason: IssueStatus,
    ) -> LedgerEntry | None:
        existing = self._find(alert_id, fingerprint)
        if existing is None:
            return None

        self.ledger.add_labels(existing.id, [label])
        self.ledger.add_comment(existing.id, comment)
        return self.ledger.close(existing.id, str(reason))

    def _find(self, alert_id: str, fingerprint: str) -> LedgerEntry | None:
        entry = self.ledger.find_by_identity(IssueIdentity(alert_id=alert_id, fingerprint=fingerprint))
        if entry is None:
            logger.info("No tracked issue for alert %s (fp=%s) – nothing to do", alert_id, fingerprint)
        return entry
