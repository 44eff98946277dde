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

"""GitHub Issues operations via PyGithub – create, edit state/body, comment,
add labels, listing issues by label, and label listing.

These helpers are intentionally thin: ``GithubException`` propagates to the
caller, which decides whether a failure is fatal.
"""

from __future__ import annotations

import logging

from github import Auth, Github
from github.Issue import Issue
from github.Repository import Repository

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30


def gh_client(token: str, *, base_url: str = DEFAULT_API_URL, timeout: int = DEFAULT_TIMEOUT) -> Github:
    return Github(auth=Auth.Token(token), base_url=base_url, timeout=timeout)


def gh_issue_create(repo: Repository, title: str, body: str, labels: list[str]) -> Issue:
    issue = repo.create_issue(title=title, body=body, labels=labels)
    logger.info("Created issue #%s in %s", issue.number, repo.full_name)
    return issue


def gh_issue_get(repo: Repository, number: int) -> Issue:
    return repo.get_issue(number)


def gh_issue_edit_state(issue: Issue, state: str, *, state_reason: str | None = None) -> None:
    desired = (state or "").strip().lower()
    if desired not in {"open", "closed"}:
        raise ValueError(f"Unsupported issue state: {state!r}")

    if state_reason:
        issue.edit(state=desired, state_reason=state_reason)
    else:
        issue.edit(state=desired)
    logger.debug("Issue #%s state -> %s (%s)", issue.number, desired, state_reason or "-")


def gh_issue_edit_body(issue: Issue, body: str) -> None:
    issue.edit(body=body)
    logger.debug("Updated issue #%s body", issue.number)


def gh_issue_add_labels(issue: Issue, labels: list[str]) -> None:
    if not labels:
        return
    issue.add_to_labels(*labels)


def gh_issue_comment(issue: Issue, body: str) -> None:
    issue.create_comment(body)


def gh_issue_list_by_label(repo: Repository, label: str, *, state: str = "all") -> list[Issue]:
    """Return every issue in *repo* carrying *label*, newest first.

    Reads the issues listing, which includes an issue as soon as it is
    created.
    """
    return list(repo.get_issues(state=state, labels=[label], sort="created", direction="desc"))


def gh_repo_label_names(repo: Repository) -> set[str]:
    """Return the set of label names defined in *repo*."""
    return {label.name for label in repo.get_labels()}
