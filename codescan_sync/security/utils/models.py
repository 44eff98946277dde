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

"""Security-specific data models."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from codescan_sync.shared.common import iso_timestamp

from .constants import IssueStatus


@dataclass(frozen=True)
class Alert:
    """Snapshot of a Code Scanning alert as delivered by the scanner."""
    number: int
    rule_id: str
    rule_name: str
    rule_description: str
    rule_severity: str          # scanner value: error | warning | note
    path: str
    ref: str
    state: str = "open"         # open | dismissed | fixed
    start_line: int | None = None
    start_column: int | None = None
    html_url: str = ""
    url: str = ""


@dataclass(frozen=True)
class IssueMetadata:
    """Alert data embedded in a tracked issue."""
    alert_id: str
    fingerprint: str
    rule_id: str
    rule_name: str
    severity: str               # internal severity
    description: str
    affected_file: str
    branch: str
    line: int | None = None
    column: int | None = None
    url: str = ""


@dataclass(frozen=True)
class IssueIdentity:
    alert_id: str = ""
    fingerprint: str = ""


@dataclass
class IssueUpdate:
    id: str
    status: IssueStatus | None = None
    labels: list[str] | None = None
    comment: str | None = None


@dataclass
class LedgerEntry:
    """An issue tracked for one logical finding."""
    id: str
    metadata: IssueMetadata
    status: IssueStatus
    created_at: datetime | None = None
    updated_at: datetime | None = None
    labels: list[str] = field(default_factory=list)
    comments: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "metadata": asdict(self.metadata),
            "status": str(self.status),
            "createdAt": iso_timestamp(self.created_at),
            "updatedAt": iso_timestamp(self.updated_at),
            "labels": list(self.labels),
            "comments": list(self.comments),
        }


@dataclass
class ReconciliationResult:
    """Aggregated counts of one reconciliation sweep."""
    total_alerts: int = 0
    created_issues: int = 0
    skipped_alerts: int = 0
    errors: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "totalAlerts": self.total_alerts,
            "createdIssues": self.created_issues,
            "skippedAlerts": self.skipped_alerts,
            "errors": self.errors,
        }
