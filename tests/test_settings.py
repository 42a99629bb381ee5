# tests/test_settings.py
"""Tests for configuration loading."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from whalebyte_moderation.core.settings import Settings


def test_defaults() -> None:
    config = Settings(SECRET_KEY="k")

    thresholds = config.moderation_thresholds
    assert thresholds.min_votes_required == 5
    assert thresholds.removal_threshold == 0.6
    assert thresholds.ai_confidence_threshold == 0.8
    assert thresholds.voting_period == timedelta(hours=24)

    policy = config.moderation_policy
    assert policy.block_self_reports is True
    assert policy.block_author_votes is False
    assert policy.description_max_length == 500


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("MIN_VOTES_REQUIRED", "3")
    monkeypatch.setenv("VOTING_PERIOD_SECONDS", "3600")
    monkeypatch.setenv("BLOCK_REPORTER_VOTES", "true")

    config = Settings(SECRET_KEY="k")

    assert config.moderation_thresholds.min_votes_required == 3
    assert config.moderation_thresholds.voting_period == timedelta(hours=1)
    assert config.moderation_policy.block_reporter_votes is True


@pytest.mark.parametrize(
    "overrides",
    [
        {"MIN_VOTES_REQUIRED": 0},
        {"REMOVAL_THRESHOLD": 1.2},
        {"AI_CONFIDENCE_THRESHOLD": 0},
        {"VOTING_PERIOD_SECONDS": 0},
    ],
)
def test_invalid_thresholds_fail_at_load(overrides) -> None:
    with pytest.raises(ValidationError):
        Settings(SECRET_KEY="k", **overrides)


def test_testing_database_override() -> None:
    config = Settings(
        SECRET_KEY="k",
        DATABASE_URL="sqlite:///./main.db",
        TEST_DATABASE_URL="sqlite:///./test.db",
        USE_TEST_DATABASE=True,
    )
    assert config.effective_database_url == "sqlite:///./test.db"
