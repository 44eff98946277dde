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

"""``secmeta`` metadata blocks – parsing, rendering, and upserting the hidden
HTML-comment metadata block stored at the top of issue bodies.

The block is the persisted identity of a tracked issue (alert id +
fingerprint) and carries its lifecycle status.
"""

from __future__ import annotations

import re

SECMETA_RE = re.compile(r"<!--\s*secmeta\r?\n(.*?)\r?\n-->", re.S)

PREFERRED_ORDER = [
    "schema",
    "source",
    "alert_id",
    "fingerprint",
    "rule_id",
    "branch",
    "severity",
    "status",
    "rule_name",
    "file",
    "line",
    "column",
    "url",
]


def parse_kv_block(block: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for line in (block or "").splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        k, v = line.split("=", 1)
        data[k.strip()] = v.strip()
    return data


def load_secmeta(issue_body: str | None) -> dict[str, str]:
    match = SECMETA_RE.search(issue_body or "")
    if match:
        return parse_kv_block(match.group(1))
    return {}


def render_secmeta(secmeta: dict[str, str]) -> str:
    lines: list[str] = []
    for key in PREFERRED_ORDER:
        if key in secmeta:
            lines.append(f"{key}={secmeta.get(key, '')}")
    # include any additional keys deterministically
    for key in sorted(k for k in secmeta if k not in PREFERRED_ORDER):
        lines.append(f"{key}={secmeta.get(key, '')}")
    return "<!--secmeta\n" + "\n".join(lines) + "\n-->"


def upsert_secmeta(issue_body: str | None, updates: dict[str, str]) -> str:
    """Return *issue_body* with its secmeta block merged with *updates*.

    A body without a block gets one prepended.
    """
    body = issue_body or ""
    secmeta = load_secmeta(body)
    secmeta.update(updates)
    rendered = render_secmeta(secmeta)
    if SECMETA_RE.search(body):
        return SECMETA_RE.sub(lambda _: rendered, body, count=1)
    return rendered + "\n\n" + body
