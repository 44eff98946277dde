"""tests/test_webhook_server.py — webhook endpoint integration tests"""
import pytest

from codescan_sync.security.utils.alert_parser import build_issue_metadata
from codescan_sync.security.utils.config import GitHubSettings, Settings, SyncConfig
from codescan_sync.security.utils.ledger import LedgerError
from codescan_sync.security.webhook_server import (
    EXTENSION_KEY,
    create_app,
    run_startup_reconciliation,
    schedule_startup_reconciliation,
)


@pytest.fixture()
def delivery(make_raw_alert):
    def _delivery(action="created", ref="refs/heads/main", **alert_kwargs):
        return {
            "action": action,
            "alert": make_raw_alert(ref=ref, **alert_kwargs),
            "ref": ref,
            "commit_oid": "0f1e2d3c",
            "repository": {"full_name": "acme/shop"},
        }

    return _delivery


# ── Health ────────────────────────────────────────────────────────────────────

def test_health_endpoint(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["status"] == "healthy"
    assert data["version"] == "1.0.0"
    assert data["timestamp"]


def test_unknown_route(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Not found"}


# ── Authentication ────────────────────────────────────────────────────────────

def test_unsigned_delivery_is_rejected(post_webhook, delivery, ledger):
    resp = post_webhook(delivery(), signature=None)
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Unauthorized"}
    assert ledger.calls == []


def test_bad_signature_is_rejected(post_webhook, delivery, ledger):
    resp = post_webhook(delivery(), signature="sha256=" + "0" * 64)
    assert resp.status_code == 401
    assert ledger.calls == []


# ── Event routing ─────────────────────────────────────────────────────────────

def test_ping(post_webhook):
    resp = post_webhook({"zen": "Keep it logically awesome."}, event="ping")
    assert resp.status_code == 200
    assert resp.get_json() == {"msg": "pong"}


def test_other_events_are_acknowledged(post_webhook, ledger):
    resp = post_webhook({"ref": "refs/heads/main"}, event="push")
    assert resp.status_code == 202
    assert ledger.calls == []


@pytest.mark.parametrize("body", [b"not json", b'{"action": "created"}', b'{"action": "created", "ref": 1}'])
def test_invalid_payload(post_webhook, body, ledger):
    resp = post_webhook(body)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Invalid payload"}
    assert ledger.calls == []


def test_unsupported_action(post_webhook, delivery):
    resp = post_webhook(delivery(action="dismissed"))
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Unsupported action: dismissed"}


# ── Actions ───────────────────────────────────────────────────────────────────

def test_created_returns_entry(post_webhook, delivery, ledger):
    resp = post_webhook(delivery(number=11))

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["action"] == "created"
    assert body["result"]["status"] == "created"
    assert body["result"]["metadata"]["alert_id"] == "11"
    assert body["result"]["metadata"]["branch"] == "main"
    assert len(ledger.entries) == 1


def test_created_twice_keeps_one_issue(post_webhook, delivery, ledger):
    first = post_webhook(delivery(number=11)).get_json()
    second = post_webhook(delivery(number=11)).get_json()

    assert first["result"]["id"] == second["result"]["id"]
    assert len(ledger.entries) == 1


def test_created_on_feature_branch_is_skipped(post_webhook, delivery, ledger):
    resp = post_webhook(delivery(number=11, ref="refs/heads/feature/x"))

    assert resp.status_code == 200
    assert resp.get_json()["result"] == {
        "message": "Issue creation skipped - not in tracked branch",
        "alertId": "11",
        "branch": "feature/x",
        "mainBranch": "main",
    }
    assert ledger.entries == {}


def test_fixed_without_issue(post_webhook, delivery, ledger):
    resp = post_webhook(delivery(action="fixed"))

    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "action": "fixed", "result": None}
    assert ledger.mutating_calls() == []


def test_appeared_in_branch(post_webhook, delivery, ledger, make_alert):
    ledger.seed(build_issue_metadata(make_alert()))

    resp = post_webhook(delivery(action="appeared_in_branch", ref="refs/heads/feature/x"))

    result = resp.get_json()["result"]
    assert result["status"] == "appeared_in_branch"
    assert "appeared-in-branch" in result["labels"]


def test_ledger_failure_is_500(post_webhook, delivery, ledger):
    ledger.fail_create_for.add("1")

    resp = post_webhook(delivery(number=1))

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal server error"}


# ── Startup reconciliation ────────────────────────────────────────────────────

def _app(ledger, **sync):
    settings = Settings(
        github=GitHubSettings(token="t", owner="acme", repo="shop", webhook_secret="s"),
        sync=SyncConfig(**sync),
    )
    return create_app(settings, ledger=ledger)


def test_startup_reconciliation_disabled(ledger):
    assert schedule_startup_reconciliation(_app(ledger, reconciliation_enabled=False)) is None
    assert ledger.calls == []


def test_startup_reconciliation_runs_once(ledger, make_alert):
    ledger.alerts = [make_alert(number=1)]

    timer = schedule_startup_reconciliation(_app(ledger, reconciliation_delay_seconds=0))
    timer.join(timeout=5)

    assert timer.daemon
    assert ledger.call_names().count("fetch_open_alerts") == 1
    assert len(ledger.entries) == 1


def test_startup_reconciliation_failure_is_logged(ledger, caplog):
    ledger.fetch_error = LedgerError("rate limited")
    app = _app(ledger)

    run_startup_reconciliation(app.extensions[EXTENSION_KEY].sweep)

    assert "Failed to run initial reconciliation" in caplog.text
