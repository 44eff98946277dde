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

"""Inbound ``code_scanning_alert`` webhook payload schema.

``action`` is a free string on purpose: an unknown action is a dispatch
error, not a schema error.
"""

from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .models import Alert


class _Payload(BaseModel):
    model_config = ConfigDict(extra="ignore")


class AlertRule(_Payload):
    id: str
    name: str = ""
    description: str = ""
    severity: str | None = None


class AlertLocation(_Payload):
    path: str
    start_line: int | None = None
    start_column: int | None = None
    end_line: int | None = None
    end_column: int | None = None


class AlertInstance(_Payload):
    ref: str = ""
    analysis_key: str | None = None
    location: AlertLocation


class AlertPayload(_Payload):
    number: int = Field(validation_alias=AliasChoices("number", "id"))
    url: str = ""
    html_url: str = ""
    state: str = "open"
    rule: AlertRule
    most_recent_instance: AlertInstance

    def to_alert(self) -> Alert:
        location = self.most_recent_instance.location
        return Alert(
            number=self.number,
            rule_id=self.rule.id,
            rule_name=self.rule.name or self.rule.id,
            rule_description=self.rule.description,
            rule_severity=self.rule.severity or "",
            path=location.path,
            ref=self.most_recent_instance.ref,
            state=self.state.lower(),
            start_line=location.start_line,
            start_column=location.start_column,
            html_url=self.html_url,
            url=self.url,
        )


class RepositoryInfo(_Payload):
    full_name: str = ""


class CodeScanningAlertEvent(_Payload):
    action: str
    alert: AlertPayload
    ref: str
    commit_oid: str | None = None
    repository: RepositoryInfo | None = None
