"""
Tests for settings parsing and the rule objects derived from it.
"""

import pytest

from tourify.core.config import (
    DEFAULT_CATEGORIES,
    BookingRules,
    CatalogRules,
    Settings,
)


def test_csv_lists_from_environment(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("LISTING_CATEGORIES", "Food,Art")
    settings = Settings(_env_file=None)
    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.catalog_rules().categories == ("Food", "Art")


def test_json_lists_still_accepted(monkeypatch):
    monkeypatch.setenv("LISTING_LANGUAGES", '["English", "Bengali"]')
    settings = Settings(_env_file=None)
    assert settings.listing_languages == ["English", "Bengali"]


def test_secret_aliases(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.setenv("SECRET_KEY", "legacy-secret")
    monkeypatch.setenv("SALT_ROUND", "5")
    monkeypatch.delenv("BCRYPT_ROUNDS", raising=False)
    settings = Settings(_env_file=None)
    assert settings.secret_key.get_secret_value() == "legacy-secret"
    assert settings.bcrypt_rounds == 5


def test_booking_rules_from_environment(monkeypatch):
    monkeypatch.setenv("BOOKING_ADMISSION_SCOPE", "hour")
    monkeypatch.setenv("BOOKING_DAY_START_HOUR", "8")
    monkeypatch.setenv("BOOKING_REQUIRE_GUIDE_AVAILABILITY", "false")
    rules = Settings(_env_file=None).booking_rules()
    assert rules.admission_scope == "hour"
    assert rules.day_start_hour == 8
    assert rules.day_end_hour == 17
    assert rules.require_guide_availability is False


def test_stripe_enabled_only_with_key(monkeypatch):
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    assert Settings(_env_file=None).stripe_enabled is False
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_123")
    assert Settings(_env_file=None).stripe_enabled is True


@pytest.mark.parametrize(
    "kwargs",
    [
        {"admission_scope": "week"},
        {"day_start_hour": 17, "day_end_hour": 7},
        {"day_end_hour": 25},
        {"slot_minutes": 0},
    ],
)
def test_booking_rules_reject_bad_values(kwargs):
    with pytest.raises(ValueError):
        BookingRules(**kwargs)


def test_catalog_rules():
    rules = CatalogRules()
    assert rules.categories == DEFAULT_CATEGORIES
    assert rules.is_valid_category("Nightlife")
    assert not rules.is_valid_category("nightlife")
    assert rules.invalid_languages(["English", "Elvish", "Dothraki"]) == ["Elvish", "Dothraki"]
