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

"""Reconciliation sweep – recomputes tracked issues from the full set of open
alerts, creating the ones a dropped, late or failed webhook never created.

Each alert is processed independently: a failure is logged, counted in
``errors`` and the sweep moves on. Nothing is retried within a run; the next
sweep is the retry.
"""

from __future__ import annotations

import logging

from .alert_parser import build_issue_metadata
from .branch_policy import should_track_for
from .config import SyncConfig
from .issue_sync import ensure_issue
from .ledger import IssueLedger
from .locks import KeyedLock
from .models import Alert, ReconciliationResult

logger = logging.getLogger(__name__)


class ReconciliationSweep:
    def __init__(
        self,
        ledger: IssueLedger,
        config: SyncConfig,
        *,
        locks: KeyedLock | None = None,
        dry_run: bool = False,
    ) -> None:
        self.ledger = ledger
        self.config = config
        self.locks = locks
        self.dry_run = dry_run

    def run(self) -> ReconciliationResult:
        """Fetch all open alerts and reconcile them.

        A failure to fetch the alert list propagates; per-alert failures do not.
        """
        logger.info("Starting code scanning alerts reconciliation...")
        alerts = self.ledger.fetch_open_alerts()
        logger.info("Found %d open code scanning alerts", len(alerts))
        return self.reconcile(alerts)

    def reconcile(self, alerts: list[Alert]) -> ReconciliationResult:
        result = ReconciliationResult(total_alerts=len(alerts))

        for alert in alerts:
            try:
                created = self._process_alert(alert)
            except Exception:
                logger.exception("Failed to process alert %s", alert.number)
                result.errors += 1
                continue
            if created:
                result.created_issues += 1
            else:
                result.skipped_alerts += 1

        logger.info(
            "Reconciliation completed: %d issues created, %d skipped, %d errors",
            result.created_issues,
            result.skipped_alerts,
            result.errors,
        )
        return result

    def _process_alert(self, alert: Alert) -> bool:
        """Return True when an issue was (or, in dry-run, would be) created."""
        # The fetch already filters on state; do not rely on it.
        if alert.state != "open":
            logger.debug("Skipping alert %s - state: %s", alert.number, alert.state)
            return False

        metadata = build_issue_metadata(alert)
        if not should_track_for(self.config, metadata.branch):
            logger.debug("Skipping alert %s - branch %s not tracked", alert.number, metadata.branch)
            return False

        _, created = ensure_issue(self.ledger, metadata, locks=self.locks, dry_run=self.dry_run)
        return created
