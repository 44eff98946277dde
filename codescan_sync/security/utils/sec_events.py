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

"""``[sec-event]`` comment blocks – rendering the structured lifecycle-event
comments posted when a tracked issue is closed or reopened.
"""

PREFERRED_ORDER = [
    "action",
    "reason",
    "seen_at",
    "source",
    "alert_id",
    "fingerprint",
]


def render_sec_event(fields: dict[str, str]) -> str:
    """Render a structured ``[sec-event]`` comment block from *fields*.

    Empty values are omitted.
    """
    lines: list[str] = ["[sec-event]"]
    for k in PREFERRED_ORDER:
        v = str(fields.get(k, "")).strip()
        if v:
            lines.append(f"{k}={v}")
    for k in sorted(k for k in fields if k not in PREFERRED_ORDER):
        v = str(fields.get(k, "")).strip()
        if v:
            lines.append(f"{k}={v}")
    lines.append("[/sec-event]")
    return "\n".join(lines) + "\n"
