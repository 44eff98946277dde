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

"""Receive GitHub ``code_scanning_alert`` webhooks and keep issues in sync.

Routes:
    GET   /health
    POST  /webhook

Every delivery is authenticated (``X-Hub-Signature-256``), validated and
processed end-to-end before the response is returned. Shortly after start-up
a reconciliation sweep runs once in the background to pick up alerts whose
webhooks were missed; later sweeps are scheduled externally
(``codescan-reconcile``).

Environment variables
---------------------
GITHUB_TOKEN, GITHUB_OWNER, GITHUB_REPO, GITHUB_WEBHOOK_SECRET  (required)
BRANCH_ALERT_STRATEGY   main_only | main_with_branch_updates | all_branches
MAIN_BRANCH             default: main
ENABLE_RECONCILIATION   startup sweep unless "false"
RECONCILIATION_DELAY_MS startup sweep delay, default 1000
PORT                    default 3000
RUNNER_DEBUG            "1" for debug logging

Usage:
  codescan-webhook-server [--host 0.0.0.0] [--port 3000]
"""

from __future__ import annotations

import argparse
import json
import logging
import threading
from dataclasses import dataclass

from flask import Blueprint, Flask, current_app, jsonify, request
from pydantic import ValidationError

from codescan_sync import __version__
from codescan_sync.shared.common import configure_logging, iso_timestamp, utc_now

from .utils.alert_parser import branch_from_ref
from .utils.config import Settings, SyncConfig, load_settings_from_env
from .utils.constants import AlertAction
from .utils.event_processor import EventProcessor, UnsupportedActionError
from .utils.github_ledger import GitHubIssueLedger
from .utils.ledger import IssueLedger
from .utils.locks import KeyedLock
from .utils.reconciliation import ReconciliationSweep
from .utils.signature import SIGNATURE_HEADER, SignatureGuard
from .utils.webhook_schemas import CodeScanningAlertEvent

logger = logging.getLogger(__name__)

EXTENSION_KEY = "codescan_sync"
EVENT_HEADER = "X-GitHub-Event"
CODE_SCANNING_EVENT = "code_scanning_alert"

webhooks_bp = Blueprint("webhooks", __name__)


@dataclass
class SyncComponents:
    config: SyncConfig
    guard: SignatureGuard
    processor: EventProcessor
    sweep: ReconciliationSweep


def _components() -> SyncComponents:
    return current_app.extensions[EXTENSION_KEY]


# ── Routes ────────────────────────────────────────────────────────────────────

@webhooks_bp.get("/health")
def health():
    return jsonify({"status": "healthy", "timestamp": iso_timestamp(utc_now()), "version": __version__})


@webhooks_bp.post("/webhook")
def webhook():
    components = _components()
    raw_body = request.get_data(cache=True)

    if not components.guard.verify(raw_body, request.headers.get(SIGNATURE_HEADER)):
        logger.warning("Invalid webhook signature")
        return jsonify({"error": "Unauthorized"}), 401

    event_name = request.headers.get(EVENT_HEADER, "")
    if event_name == "ping":
        return jsonify({"msg": "pong"}), 200
    if event_name and event_name != CODE_SCANNING_EVENT:
        logger.info("Ignoring %s event", event_name)
        return jsonify({"message": f"Event {event_name} ignored"}), 202

    try:
        event = CodeScanningAlertEvent.model_validate(json.loads(raw_body))
    except (ValueError, ValidationError) as exc:
        logger.warning("Invalid webhook payload: %s", exc)
        return jsonify({"error": "Invalid payload"}), 400

    alert = event.alert.to_alert()
    logger.info(
        "Received code_scanning_alert webhook: %s (alert %s, repository %s)",
        event.action,
        alert.number,
        event.repository.full_name if event.repository else "-",
    )

    try:
        entry = components.processor.dispatch(event.action, alert, event.ref)
    except UnsupportedActionError as exc:
        return jsonify({"error": str(exc)}), 400
    except Exception:
        logger.exception("Error processing webhook")
        return jsonify({"error": "Internal server error"}), 500

    if entry is not None:
        result = entry.to_dict()
    elif event.action == AlertAction.CREATED:
        branch = branch_from_ref(event.ref)
        logger.info("Issue creation skipped for alert %s in branch %s", alert.number, branch)
        result = {
            "message": "Issue creation skipped - not in tracked branch",
            "alertId": str(alert.number),
            "branch": branch,
            "mainBranch": components.config.main_branch,
        }
    else:
        result = None

    return jsonify({"success": True, "action": event.action, "result": result})


# ── Application factory ───────────────────────────────────────────────────────

def create_app(settings: Settings, ledger: IssueLedger | None = None) -> Flask:
    """Application factory.

    One ``KeyedLock`` is shared by the event processor and the startup sweep
    so both channels serialize creation per fingerprint.
    """
    if ledger is None:
        ledger = GitHubIssueLedger(settings.github)
    locks = KeyedLock()

    app = Flask(__name__)
    app.extensions[EXTENSION_KEY] = SyncComponents(
        config=settings.sync,
        guard=SignatureGuard(settings.github.webhook_secret),
        processor=EventProcessor(ledger, settings.sync, locks=locks),
        sweep=ReconciliationSweep(ledger, settings.sync, locks=locks),
    )
    app.register_blueprint(webhooks_bp)

    @app.errorhandler(404)
    def not_found(_err):
        return jsonify({"error": "Not found"}), 404

    logger.info(
        "Webhook app created [repo=%s strategy=%s main_branch=%s]",
        settings.github.full_name,
        settings.sync.branch_strategy,
        settings.sync.main_branch,
    )
    return app


def run_startup_reconciliation(sweep: ReconciliationSweep) -> None:
    """Run one sweep; failures are logged and never take the server down."""
    logger.info("Running initial code scanning alerts reconciliation...")
    try:
        result = sweep.run()
    except Exception:
        logger.exception("Failed to run initial reconciliation")
        return
    logger.info("Initial reconciliation completed: %s", result.to_dict())


def schedule_startup_reconciliation(app: Flask) -> threading.Timer | None:
    components: SyncComponents = app.extensions[EXTENSION_KEY]
    if not components.config.reconciliation_enabled:
        logger.info("Reconciliation disabled - skipping initial sync")
        return None

    timer = threading.Timer(
        components.config.reconciliation_delay_seconds,
        run_startup_reconciliation,
        args=(components.sweep,),
    )
    timer.daemon = True
    timer.start()
    return timer


# ── CLI ───────────────────────────────────────────────────────────────────────

def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Serve the code_scanning_alert webhook endpoint and keep GitHub issues in sync.",
    )
    parser.add_argument("--host", default="0.0.0.0", help="Interface to bind (default: 0.0.0.0).")
    parser.add_argument("--port", type=int, default=None, help="Port to listen on (default: $PORT or 3000).")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    settings = load_settings_from_env()
    configure_logging(settings.verbose)

    app = create_app(settings)
    port = args.port if args.port is not None else settings.port
    logger.info("Starting server on %s:%s", args.host, port)

    schedule_startup_reconciliation(app)
    app.run(host=args.host, port=port, threaded=True)


if __name__ == "__main__":
    main()
