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

"""Code Scanning alert to issue synchronization engine.

Modules
-------
constants        Domain constants (strategies, actions, statuses, labels, comments).
config           Immutable ``SyncConfig`` / ``GitHubSettings`` and env loading.
models           Core dataclasses (Alert, IssueMetadata, LedgerEntry, ReconciliationResult).
alert_parser     Alert parsing, branch-from-ref, fingerprint, severity mapping, issue metadata.
branch_policy    Which branches may produce tracked issues.
secmeta          ``secmeta`` metadata block parsing / rendering / upserting.
sec_events       ``[sec-event]`` comment block rendering.
templates        Markdown issue body template.
issue_builder    Issue title / body / labels from metadata and back.
ledger           ``IssueLedger`` interface and ``LedgerError``.
github_ledger    GitHub Issues adapter (PyGithub + requests).
locks            ``KeyedLock`` serializing find-or-create per fingerprint.
issue_sync       Find-or-create shared by the webhook and sweep paths.
event_processor  Per-action webhook transitions.
reconciliation   Full reconciliation sweep over open alerts.
signature        ``X-Hub-Signature-256`` verification.
webhook_schemas  Pydantic schema of the inbound webhook payload.
"""
