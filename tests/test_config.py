"""tests/test_config.py — environment configuration"""
import logging

import pytest

from codescan_sync.security.utils.config import load_settings_from_env, load_sync_config, parse_branch_strategy
from codescan_sync.security.utils.constants import BranchStrategy

BASE_ENV = {
    "GITHUB_TOKEN": "ghp_test",
    "GITHUB_OWNER": "acme",
    "GITHUB_REPO": "shop",
    "GITHUB_WEBHOOK_SECRET": "s3cr3t",
}


@pytest.mark.parametrize(
    "env, expected",
    [
        ({}, BranchStrategy.MAIN_ONLY),
        ({"BRANCH_ALERT_STRATEGY": "all_branches"}, BranchStrategy.ALL_BRANCHES),
        ({"BRANCH_ALERT_STRATEGY": "MAIN_WITH_BRANCH_UPDATES"}, BranchStrategy.MAIN_WITH_BRANCH_UPDATES),
        ({"CREATE_ISSUES_FOR_ALL_BRANCHES": "true"}, BranchStrategy.ALL_BRANCHES),
        ({"TRACK_BRANCH_ALERTS": "true"}, BranchStrategy.MAIN_WITH_BRANCH_UPDATES),
        ({"TRACK_BRANCH_ALERTS": "yes"}, BranchStrategy.MAIN_ONLY),
        (
            {"CREATE_ISSUES_FOR_ALL_BRANCHES": "true", "TRACK_BRANCH_ALERTS": "true"},
            BranchStrategy.ALL_BRANCHES,
        ),
        (
            {"BRANCH_ALERT_STRATEGY": "main_only", "CREATE_ISSUES_FOR_ALL_BRANCHES": "true"},
            BranchStrategy.MAIN_ONLY,
        ),
    ],
)
def test_parse_branch_strategy(env, expected):
    assert parse_branch_strategy(env) == expected


def test_unknown_strategy_falls_back_to_legacy_flags(caplog):
    with caplog.at_level(logging.WARNING):
        strategy = parse_branch_strategy({"BRANCH_ALERT_STRATEGY": "everything", "TRACK_BRANCH_ALERTS": "TRUE"})

    assert strategy == BranchStrategy.MAIN_WITH_BRANCH_UPDATES
    assert "Unknown BRANCH_ALERT_STRATEGY" in caplog.text


def test_sync_config_defaults():
    config = load_sync_config({})
    assert config.branch_strategy == BranchStrategy.MAIN_ONLY
    assert config.main_branch == "main"
    assert config.reconciliation_enabled is True
    assert config.reconciliation_delay_seconds == 1.0


def test_sync_config_overrides():
    config = load_sync_config(
        {"MAIN_BRANCH": "develop", "ENABLE_RECONCILIATION": "false", "RECONCILIATION_DELAY_MS": "2500"}
    )
    assert config.main_branch == "develop"
    assert config.reconciliation_enabled is False
    assert config.reconciliation_delay_seconds == 2.5


@pytest.mark.parametrize("value", ["true", "0", "no", "FALSE "])
def test_reconciliation_enabled_unless_false(value):
    expected = value.strip().lower() != "false"
    assert load_sync_config({"ENABLE_RECONCILIATION": value}).reconciliation_enabled is expected


@pytest.mark.parametrize("value", ["soon", "-5"])
def test_bad_delay_exits(value):
    with pytest.raises(SystemExit):
        load_sync_config({"RECONCILIATION_DELAY_MS": value})


def test_load_settings():
    settings = load_settings_from_env({**BASE_ENV, "PORT": "8080", "RUNNER_DEBUG": "1"})
    assert settings.github.full_name == "acme/shop"
    assert settings.github.webhook_secret == "s3cr3t"
    assert settings.github.api_url == "https://api.github.com"
    assert settings.port == 8080
    assert settings.verbose is True


def test_load_settings_custom_api_url():
    settings = load_settings_from_env({**BASE_ENV, "GITHUB_API_URL": "https://ghe.example.com/api/v3/"})
    assert settings.github.api_url == "https://ghe.example.com/api/v3"


def test_missing_variables_are_all_reported():
    with pytest.raises(SystemExit) as excinfo:
        load_settings_from_env({"GITHUB_TOKEN": "x"})

    message = str(excinfo.value)
    for name in ("GITHUB_OWNER", "GITHUB_REPO", "GITHUB_WEBHOOK_SECRET"):
        assert name in message
    assert "GITHUB_TOKEN" not in message


def test_webhook_secret_optional_for_cli_tools():
    env = {k: v for k, v in BASE_ENV.items() if k != "GITHUB_WEBHOOK_SECRET"}
    settings = load_settings_from_env(env, require_webhook_secret=False)
    assert settings.github.webhook_secret == ""


def test_invalid_runner_debug_exits():
    with pytest.raises(SystemExit):
        load_settings_from_env({**BASE_ENV, "RUNNER_DEBUG": "yes"})
