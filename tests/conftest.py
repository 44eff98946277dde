"""
tests/conftest.py — pytest fixtures for the code scanning issue sync
"""
import itertools
import json
import re

import pytest

from codescan_sync.security.utils.config import GitHubSettings, Settings, SyncConfig
from codescan_sync.security.utils.constants import BranchStrategy, IssueStatus
from codescan_sync.security.utils.issue_builder import build_issue_labels
from codescan_sync.security.utils.ledger import LedgerError
from codescan_sync.security.utils.models import Alert, LedgerEntry
from codescan_sync.security.utils.signature import compute_signature
from codescan_sync.security.webhook_server import create_app

WEBHOOK_SECRET = "s3cr3t"


class FakeLedger:
    """In-memory issue ledger that records every call it receives."""

    def __init__(self, alerts=None):
        self.entries: dict[str, LedgerEntry] = {}
        self.states: dict[str, str] = {}
        self.alerts = list(alerts or [])
        self.calls: list[tuple] = []
        self.fail_create_for: set[str] = set()
        self.fetch_error: Exception | None = None
        self._ids = itertools.count(1)

    # helpers --------------------------------------------------------------

    def seed(self, metadata, status=IssueStatus.CREATED, state="open"):
        entry = LedgerEntry(
            id=str(next(self._ids)),
            metadata=metadata,
            status=status,
            labels=build_issue_labels(metadata),
        )
        self.entries[entry.id] = entry
        self.states[entry.id] = state
        return entry

    def call_names(self):
        return [c[0] for c in self.calls]

    def mutating_calls(self):
        return [c for c in self.calls if c[0] not in {"find_by_identity", "fetch_open_alerts"}]

    # IssueLedger ----------------------------------------------------------

    def create(self, metadata):
        self.calls.append(("create", metadata.alert_id))
        if metadata.alert_id in self.fail_create_for:
            raise LedgerError(f"create failed for alert {metadata.alert_id}")
        return self.seed(metadata)

    def find_by_identity(self, identity):
        self.calls.append(("find_by_identity", identity.alert_id, identity.fingerprint))
        matches = [
            e for e in self.entries.values()
            if (identity.alert_id and e.metadata.alert_id == identity.alert_id)
            or (identity.fingerprint and e.metadata.fingerprint == identity.fingerprint)
        ]
        return matches[-1] if matches else None

    def update(self, request):
        self.calls.append(("update", request.id, request.status))
        entry = self.entries[request.id]
        if request.labels:
            entry.labels.extend(request.labels)
        if request.comment:
            entry.comments.append(request.comment)
        if request.status is not None:
            entry.status = request.status
        return entry

    def close(self, id, reason=None):
        self.calls.append(("close", id, reason))
        entry = self.entries[id]
        self.states[id] = "closed"
        if reason:
            entry.status = IssueStatus(reason)
        return entry

    def reopen(self, id, reason=None):
        self.calls.append(("reopen", id, reason))
        entry = self.entries[id]
        self.states[id] = "open"
        if reason:
            entry.status = IssueStatus(reason)
        return entry

    def add_comment(self, id, text):
        self.calls.append(("add_comment", id, text))
        self.entries[id].comments.append(text)

    def add_labels(self, id, labels):
        self.calls.append(("add_labels", id, list(labels)))
        self.entries[id].labels.extend(labels)

    def fetch_open_alerts(self):
        self.calls.append(("fetch_open_alerts",))
        if self.fetch_error is not None:
            raise self.fetch_error
        return list(self.alerts)


@pytest.fixture()
def ledger():
    return FakeLedger()


@pytest.fixture()
def make_alert():
    """Factory for :class:`Alert` snapshots with sensible defaults."""
    def _make(number=1, rule_id="js/sql-injection", path="src/db.js", ref="refs/heads/main", **overrides):
        values = {
            "number": number,
            "rule_id": rule_id,
            "rule_name": "SQL injection",
            "rule_description": "Building SQL from user input",
            "rule_severity": "error",
            "path": path,
            "ref": ref,
            "start_line": 42,
            "start_column": 7,
            "html_url": f"https://github.com/acme/shop/security/code-scanning/{number}",
        }
        values.update(overrides)
        return Alert(**values)

    return _make


@pytest.fixture()
def make_raw_alert():
    """Factory for REST / webhook shaped alert objects."""
    def _make(number=1, rule_id="js/sql-injection", path="src/db.js", ref="refs/heads/main", state="open"):
        return {
            "number": number,
            "state": state,
            "url": f"https://api.github.com/repos/acme/shop/code-scanning/alerts/{number}",
            "html_url": f"https://github.com/acme/shop/security/code-scanning/{number}",
            "rule": {
                "id": rule_id,
                "name": "SQL injection",
                "description": "Building SQL from user input",
                "severity": "error",
            },
            "most_recent_instance": {
                "ref": ref,
                "analysis_key": ".github/workflows/codeql.yml:analyze",
                "location": {"path": path, "start_line": 42, "start_column": 7, "end_line": 42, "end_column": 30},
            },
        }

    return _make


@pytest.fixture()
def github_settings():
    return GitHubSettings(token="ghp_test", owner="acme", repo="shop", webhook_secret=WEBHOOK_SECRET)


@pytest.fixture()
def sync_config():
    return SyncConfig(branch_strategy=BranchStrategy.MAIN_WITH_BRANCH_UPDATES, main_branch="main")


@pytest.fixture()
def app(github_settings, sync_config, ledger):
    """Flask app wired to the in-memory ledger."""
    application = create_app(Settings(github=github_settings, sync=sync_config), ledger=ledger)
    application.config["TESTING"] = True
    return application


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def post_webhook(client):
    """POST a signed webhook delivery; ``signature=None`` sends it unsigned."""
    def _post(payload, event="code_scanning_alert", signature="valid"):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8")
        headers = {"X-GitHub-Event": event, "Content-Type": "application/json"}
        if signature == "valid":
            headers["X-Hub-Signature-256"] = compute_signature(WEBHOOK_SECRET, body)
        elif signature is not None:
            headers["X-Hub-Signature-256"] = signature
        return client.post("/webhook", data=body, headers=headers)

    return _post


@pytest.fixture()
def sec_events():
    """Parser for the ``[sec-event]`` blocks of a comment body."""
    def _parse(text):
        blocks = re.findall(r"\[sec-event\]\s*(.*?)\s*\[/sec-event\]", text or "", re.S)
        return [dict(line.split("=", 1) for line in block.splitlines() if "=" in line) for block in blocks]

    return _parse
