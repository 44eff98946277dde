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

"""Check that all labels written by the alert sync exist in the repository.

Required labels (added by the webhook server and the reconciliation sweep):

  security-alert
  appeared-in-branch
  fixed
  closed-by-user
  reopened
  reopened_by_user

``severity:*`` and ``rule:*`` labels are created on demand by GitHub and are
not checked.

Usage:
  codescan-check-labels [--repo owner/repo]
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Iterable

from github import GithubException

from codescan_sync.shared.github_issues import gh_client, gh_repo_label_names

from .utils.config import load_settings_from_env
from .utils.constants import REQUIRED_LABELS


def find_missing_labels(existing: Iterable[str]) -> list[str]:
    present = set(existing)
    return [label for label in REQUIRED_LABELS if label not in present]


def fetch_repo_labels(token: str, repo: str, *, base_url: str) -> set[str]:
    """Return the set of label names defined in *repo*."""
    try:
        return gh_repo_label_names(gh_client(token, base_url=base_url).get_repo(repo))
    except GithubException as exc:
        print(f"ERROR: failed to list labels for {repo}: {exc}", file=sys.stderr)
        raise SystemExit(1)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Verify that all labels required by the alert sync exist in the repository",
    )
    parser.add_argument(
        "--repo",
        default=None,
        help="GitHub repository in owner/repo format (default: $GITHUB_OWNER/$GITHUB_REPO)",
    )
    args = parser.parse_args(argv)

    settings = load_settings_from_env(require_webhook_secret=False)
    repo = args.repo or settings.github.full_name

    existing = fetch_repo_labels(settings.github.token, repo, base_url=settings.github.api_url)
    missing = find_missing_labels(existing)

    if not missing:
        print(f"All {len(REQUIRED_LABELS)} required labels exist in {repo}")
        raise SystemExit(0)

    print(f"ERROR: {len(missing)} required label(s) missing in {repo}\n", file=sys.stderr)
    print("Missing labels:", file=sys.stderr)
    for label in missing:
        print(f"  - {label}", file=sys.stderr)
    print(f"\nAll required labels:\n  {', '.join(REQUIRED_LABELS)}", file=sys.stderr)
    raise SystemExit(1)


if __name__ == "__main__":
    main()
