from govrelay.config import common_settings as settings
from govrelay.utils.startup_validation import REQUIRED_ENV_VARS, StartupValidator, missing_required_vars


def set_required_env(monkeypatch):
    for var in REQUIRED_ENV_VARS:
        monkeypatch.setenv(var, "set")


def test_reports_missing_env_vars(monkeypatch):
    set_required_env(monkeypatch)
    monkeypatch.delenv("WITNET_NODE_URL")

    validator = StartupValidator()

    assert missing_required_vars() == ["WITNET_NODE_URL"]
    assert not validator.validate_all()
    assert "WITNET_NODE_URL" in validator.errors[0]


def test_monitor_templates_need_message_placeholder(monkeypatch):
    set_required_env(monkeypatch)
    monkeypatch.setattr(settings, "REACTION_MONITOR_URLS", ["https://monitor.example/{channel_id}"])

    validator = StartupValidator()

    assert not validator.validate_all()
    assert any("{message_id}" in error for error in validator.errors)


def test_missing_relayer_key_is_only_a_warning(monkeypatch):
    set_required_env(monkeypatch)
    monkeypatch.setattr(settings, "REACTION_MONITOR_URLS", ["https://monitor.example/{channel_id}/{message_id}"])
    monkeypatch.setattr(settings, "RELAYER_PRIVATE_KEY", None)

    validator = StartupValidator()

    assert validator.validate_all()
    assert any("RELAYER_PRIVATE_KEY" in warning for warning in validator.warnings)
