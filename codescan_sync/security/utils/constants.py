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

"""Domain constants – label names, webhook actions, issue statuses,
sec-event actions and secmeta keys.
"""

from enum import StrEnum


class BranchStrategy(StrEnum):
    """Which branches may produce (or update) tracked issues."""
    MAIN_ONLY = "main_only"
    MAIN_WITH_BRANCH_UPDATES = "main_with_branch_updates"
    ALL_BRANCHES = "all_branches"


class AlertAction(StrEnum):
    """``action`` values of the ``code_scanning_alert`` webhook event."""
    CREATED = "created"
    APPEARED_IN_BRANCH = "appeared_in_branch"
    FIXED = "fixed"
    CLOSED_BY_USER = "closed_by_user"
    REOPENED = "reopened"
    REOPENED_BY_USER = "reopened_by_user"


class IssueStatus(StrEnum):
    CREATED = "created"
    APPEARED_IN_BRANCH = "appeared_in_branch"
    FIXED = "fixed"
    CLOSED_BY_USER = "closed_by_user"
    REOPENED = "reopened"
    REOPENED_BY_USER = "reopened_by_user"


BRANCH_REF_PREFIX = "refs/heads/"
FINGERPRINT_SEPARATOR = "-"

# Scanner severity (rule.severity) -> internal issue severity.
SEVERITY_MAP: dict[str, str] = {
    "error": "high",
    "warning": "medium",
    "note": "low",
}
DEFAULT_SEVERITY = "medium"
INTERNAL_SEVERITIES = ("critical", "high", "medium", "low", "warning", "note")

LABEL_SECURITY_ALERT = "security-alert"
LABEL_APPEARED_IN_BRANCH = "appeared-in-branch"
LABEL_FIXED = "fixed"
LABEL_CLOSED_BY_USER = "closed-by-user"
LABEL_REOPENED = "reopened"
LABEL_REOPENED_BY_USER = "reopened_by_user"
LABEL_SEVERITY_PREFIX = "severity:"
LABEL_RULE_PREFIX = "rule:"

# Static labels written by the engine (severity/rule labels are dynamic).
REQUIRED_LABELS: list[str] = [
    LABEL_SECURITY_ALERT,
    LABEL_APPEARED_IN_BRANCH,
    LABEL_FIXED,
    LABEL_CLOSED_BY_USER,
    LABEL_REOPENED,
    LABEL_REOPENED_BY_USER,
]

COMMENT_APPEARED_IN_BRANCH = "🌿 Alert appeared in branch: `{branch}`"
COMMENT_FIXED = "✅ Security alert has been fixed!"
COMMENT_CLOSED_BY_USER = "👤 Security alert closed by user"
COMMENT_REOPENED = "🔄 Security alert reopened automatically"
COMMENT_REOPENED_BY_USER = "👤 Security alert reopened by user"

SEC_EVENT_CLOSE = "close"
SEC_EVENT_REOPEN = "reopen"

SECMETA_SCHEMA = "1"
SECMETA_SOURCE = "code_scanning"
