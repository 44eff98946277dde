#!/usr/bin/env python3
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

"""Run one reconciliation sweep of open Code Scanning alerts against GitHub Issues.

Meant to be run by an external scheduler (cron, workflow schedule). Every open
alert on a tracked branch without an issue gets one; everything else is
counted as skipped. Exits with status 1 when any alert failed.

Requirements:
- GITHUB_TOKEN, GITHUB_OWNER, GITHUB_REPO (plus the branch strategy variables
  used by the webhook server)

Draft / debug (no writes):
    `codescan-reconcile --dry-run --verbose`
"""

from __future__ import annotations

import argparse
import json
import sys

from codescan_sync.shared.common import configure_logging

from .utils.config import load_settings_from_env
from .utils.github_ledger import GitHubIssueLedger
from .utils.ledger import LedgerError
from .utils.models import ReconciliationResult
from .utils.reconciliation import ReconciliationSweep


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create missing GitHub issues for open Code Scanning alerts on tracked branches",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show which issues would be created without writing anything.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging (also enabled by RUNNER_DEBUG=1).",
    )
    return parser.parse_args(argv)


def run_reconciliation(sweep: ReconciliationSweep) -> ReconciliationResult:
    try:
        return sweep.run()
    except LedgerError as exc:
        print(f"ERROR: reconciliation failed: {exc}", file=sys.stderr)
        raise SystemExit(1)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    settings = load_settings_from_env(require_webhook_secret=False)
    configure_logging(args.verbose or settings.verbose)

    ledger = GitHubIssueLedger(settings.github)
    sweep = ReconciliationSweep(ledger, settings.sync, dry_run=args.dry_run)
    result = run_reconciliation(sweep)

    print(json.dumps(result.to_dict(), indent=2))
    if result.errors:
        print(f"ERROR: {result.errors} alert(s) failed to reconcile", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
