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

"""Runtime configuration – immutable settings values built once from the
process environment at bootstrap and passed explicitly to every component.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from codescan_sync.shared.common import parse_bool_flag, parse_runner_debug
from codescan_sync.shared.github_issues import DEFAULT_API_URL

from .constants import BranchStrategy

logger = logging.getLogger(__name__)

REQUIRED_ENV_VARS: list[str] = [
    "GITHUB_TOKEN",
    "GITHUB_OWNER",
    "GITHUB_REPO",
    "GITHUB_WEBHOOK_SECRET",
]


@dataclass(frozen=True)
class SyncConfig:
    branch_strategy: BranchStrategy = BranchStrategy.MAIN_ONLY
    main_branch: str = "main"
    reconciliation_enabled: bool = True
    reconciliation_delay_seconds: float = 1.0


@dataclass(frozen=True)
class GitHubSettings:
    token: str
    owner: str
    repo: str
    webhook_secret: str
    api_url: str = DEFAULT_API_URL

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class Settings:
    github: GitHubSettings
    sync: SyncConfig = field(default_factory=SyncConfig)
    port: int = 3000
    verbose: bool = False


def parse_branch_strategy(env: Mapping[str, str]) -> BranchStrategy:
    """Resolve the branch strategy, honouring the legacy boolean flags.

    ``BRANCH_ALERT_STRATEGY`` wins when it names a known strategy. Otherwise
    ``CREATE_ISSUES_FOR_ALL_BRANCHES=true`` selects ALL_BRANCHES, then
    ``TRACK_BRANCH_ALERTS=true`` selects MAIN_WITH_BRANCH_UPDATES, and
    MAIN_ONLY is the default.
    """
    raw = (env.get("BRANCH_ALERT_STRATEGY") or "").strip()
    if raw:
        try:
            return BranchStrategy(raw.lower())
        except ValueError:
            logger.warning("Unknown BRANCH_ALERT_STRATEGY %r – falling back to legacy flags", raw)

    if parse_bool_flag(env.get("CREATE_ISSUES_FOR_ALL_BRANCHES")):
        return BranchStrategy.ALL_BRANCHES
    if parse_bool_flag(env.get("TRACK_BRANCH_ALERTS")):
        return BranchStrategy.MAIN_WITH_BRANCH_UPDATES
    return BranchStrategy.MAIN_ONLY


def _parse_non_negative_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = (env.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise SystemExit(f"ERROR: {name} must be an integer, got {raw!r}")
    if value < 0:
        raise SystemExit(f"ERROR: {name} must not be negative, got {value}")
    return value


def load_sync_config(env: Mapping[str, str]) -> SyncConfig:
    delay_ms = _parse_non_negative_int(env, "RECONCILIATION_DELAY_MS", 1000)
    return SyncConfig(
        branch_strategy=parse_branch_strategy(env),
        main_branch=(env.get("MAIN_BRANCH") or "").strip() or "main",
        # Enabled unless explicitly switched off.
        reconciliation_enabled=(env.get("ENABLE_RECONCILIATION") or "").strip().lower() != "false",
        reconciliation_delay_seconds=delay_ms / 1000.0,
    )


def load_settings_from_env(
    environ: Mapping[str, str] | None = None,
    *,
    require_webhook_secret: bool = True,
) -> Settings:
    """Build :class:`Settings`; exits with every missing variable listed.

    Tools that never receive webhooks (the sweep CLI, the label check) pass
    ``require_webhook_secret=False``.
    """
    env = os.environ if environ is None else environ

    required = [
        name for name in REQUIRED_ENV_VARS
        if require_webhook_secret or name != "GITHUB_WEBHOOK_SECRET"
    ]
    missing = [name for name in required if not env.get(name)]
    if missing:
        raise SystemExit(f"ERROR: missing required environment variable(s): {', '.join(missing)}")

    github = GitHubSettings(
        token=env["GITHUB_TOKEN"],
        owner=env["GITHUB_OWNER"],
        repo=env["GITHUB_REPO"],
        webhook_secret=env.get("GITHUB_WEBHOOK_SECRET", ""),
        api_url=(env.get("GITHUB_API_URL") or "").strip().rstrip("/") or DEFAULT_API_URL,
    )
    return Settings(
        github=github,
        sync=load_sync_config(env),
        port=_parse_non_negative_int(env, "PORT", 3000),
        verbose=parse_runner_debug(env),
    )
