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

"""Issue ledger interface – the capabilities the sync engine needs from an
issue tracker, independent of the concrete provider.
"""

from __future__ import annotations

from typing import Protocol

from .models import Alert, IssueIdentity, IssueMetadata, IssueUpdate, LedgerEntry


class LedgerError(RuntimeError):
    """Backend failure (transport, auth, rate limit, unexpected response)."""


class IssueLedger(Protocol):
    """Provider-agnostic issue store.

    Creation is never a blind insert: callers look an identity up with
    :meth:`find_by_identity` first. Adapters raise :class:`LedgerError` for
    any backend failure and enforce their own transport timeouts.
    """

    def create(self, metadata: IssueMetadata) -> LedgerEntry:
        ...

    def find_by_identity(self, identity: IssueIdentity) -> LedgerEntry | None:
        """Return the entry matching the alert id OR the fingerprint.

        When several entries match, the most recently created one is
        returned and the ambiguity is logged.
        """
        ...

    def update(self, request: IssueUpdate) -> LedgerEntry:
        ...

    def close(self, id: str, reason: str | None = None) -> LedgerEntry:
        ...

    def reopen(self, id: str, reason: str | None = None) -> LedgerEntry:
        ...

    def add_comment(self, id: str, text: str) -> None:
        ...

    def add_labels(self, id: str, labels: list[str]) -> None:
        ...

    def fetch_open_alerts(self) -> list[Alert]:
        ...
