import pytest

from mindloop_ai.server.core.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)

    assert settings.scheduler.inter_cycle_delay_seconds == 15
    assert settings.scheduler.lease_ttl_seconds == 3600
    assert settings.scheduler.queue_name == "ai"
    assert settings.cycle.reply_marker == "[reply]"
    assert settings.celery.queue == "ai"
    assert settings.engine_timeout_seconds == 120.0


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("MINDLOOP_INTER_CYCLE_DELAY_SECONDS", "5")
    monkeypatch.setenv("MINDLOOP_LEASE_TTL_SECONDS", "120")
    monkeypatch.setenv("MINDLOOP_REPLY_MARKER", "@user")
    monkeypatch.setenv("MINDLOOP_CYCLE_QUEUE", "thinking")
    monkeypatch.setenv("CELERY_BROKER_URL", "redis://localhost:6379/5")
    monkeypatch.setenv("CORS_ORIGINS", '["http://localhost:3000"]')
    monkeypatch.setenv("MINDLOOP_ENGINE_TIMEOUT_SECONDS", "30")

    settings = Settings(_env_file=None)

    assert settings.scheduler.inter_cycle_delay_seconds == 5
    assert settings.scheduler.lease_ttl_seconds == 120
    assert settings.scheduler.queue_name == "thinking"
    assert settings.cycle.reply_marker == "@user"
    assert settings.celery.broker_url == "redis://localhost:6379/5"
    assert settings.celery.queue == "thinking"
    assert settings.cors.origins == ["http://localhost:3000"]
    assert settings.engine_timeout_seconds == 30.0


def test_invalid_delay_is_rejected(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("MINDLOOP_INTER_CYCLE_DELAY_SECONDS", "-3")
    with pytest.raises(ValueError):
        Settings(_env_file=None)
