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

"""Find-or-create – the single issue creation rule shared by the webhook
event path and the reconciliation sweep.
"""

from __future__ import annotations

import logging

from .ledger import IssueLedger
from .locks import KeyedLock
from .models import IssueIdentity, IssueMetadata, LedgerEntry

logger = logging.getLogger(__name__)


def identity_of(metadata: IssueMetadata) -> IssueIdentity:
    return IssueIdentity(alert_id=metadata.alert_id, fingerprint=metadata.fingerprint)


def ensure_issue(
    ledger: IssueLedger,
    metadata: IssueMetadata,
    *,
    locks: KeyedLock | None = None,
    dry_run: bool = False,
) -> tuple[LedgerEntry | None, bool]:
    """Return ``(entry, created)`` for *metadata*.

    An existing entry for the identity is returned unchanged with
    ``created=False``. Otherwise a new entry is created. With *locks*, the
    lookup and the creation run under the fingerprint's lock so concurrent
    callers in this process cannot both create. In *dry_run* mode nothing is
    written and ``(None, True)`` signals a creation that would happen.

    Branch policy is the caller's concern.
    """
    if locks is None:
        return _find_or_create(ledger, metadata, dry_run=dry_run)
    with locks.hold(metadata.fingerprint):
        return _find_or_create(ledger, metadata, dry_run=dry_run)


def _find_or_create(
    ledger: IssueLedger,
    metadata: IssueMetadata,
    *,
    dry_run: bool,
) -> tuple[LedgerEntry | None, bool]:
    existing = ledger.find_by_identity(identity_of(metadata))
    if existing is not None:
        logger.debug("Alert %s already tracked by issue %s", metadata.alert_id, existing.id)
        return existing, False

    if dry_run:
        print(
            f"DRY-RUN: would create issue for alert {metadata.alert_id} "
            f"fp={metadata.fingerprint} branch={metadata.branch} severity={metadata.severity}"
        )
        return None, True

    created = ledger.create(metadata)
    logger.info("Created issue %s for alert %s (fp=%s)", created.id, metadata.alert_id, metadata.fingerprint)
    return created, True
