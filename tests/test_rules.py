"""Tests for individual rule descriptors."""

from __future__ import annotations

from datetime import date

from core.rules import (
    EMAIL_PATTERN,
    ISO_DATE_PATTERN,
    AgeRangeRule,
    CharCountRule,
    ConfirmRule,
    FormError,
    MediaRule,
    PatternRule,
    RequiredRule,
    WordCountRule,
)

TODAY = date(2026, 6, 15)


def test_required_rule_trims_whitespace() -> None:
    rule = RequiredRule("city", "City is required.")

    assert rule.evaluate({"city": "   "}) == FormError("city", "City is required.")
    assert rule.evaluate({"city": " Accra "}) is None


def test_pattern_rule_distinguishes_blank_from_malformed() -> None:
    rule = PatternRule("email", EMAIL_PATTERN, "Email is invalid.", required_message="Email is required.")

    assert rule.evaluate({"email": ""}).message == "Email is required."
    assert rule.evaluate({"email": "ada@example"}).message == "Email is invalid."
    assert rule.evaluate({"email": "ada@example.com"}) is None


def test_pattern_rule_without_required_message_reports_format() -> None:
    rule = PatternRule("dateOfBirth", ISO_DATE_PATTERN, "Bad format")

    assert rule.evaluate({"dateOfBirth": ""}).message == "Bad format"
    assert rule.evaluate({"dateOfBirth": "12/04/1985"}).message == "Bad format"
    assert rule.evaluate({"dateOfBirth": "1985-04-12"}) is None


def test_age_range_rule_bounds_are_inclusive() -> None:
    rule = AgeRangeRule("dateOfBirth", 18, 35, "Out of range", "Missing")

    assert rule.evaluate({"dateOfBirth": "2008-06-15"}, today=TODAY) is None
    assert rule.evaluate({"dateOfBirth": "1990-06-16"}, today=TODAY) is None
    assert rule.evaluate({"dateOfBirth": "2008-06-16"}, today=TODAY).message == "Out of range"
    assert rule.evaluate({"dateOfBirth": "1990-06-15"}, today=TODAY).message == "Out of range"
    assert rule.evaluate({"dateOfBirth": ""}, today=TODAY).message == "Missing"


def test_age_range_rule_flags_unparseable_dates() -> None:
    rule = AgeRangeRule("dateOfBirth", 18, 35, "Out of range", "Missing")

    error = rule.evaluate({"dateOfBirth": "31/12/2000"}, today=TODAY)

    assert error is not None
    assert error.field == "dateOfBirth"


def test_confirm_rule_requires_true() -> None:
    rule = ConfirmRule("canTravel", "Confirm travel")

    assert rule.evaluate({"canTravel": False}) is not None
    assert rule.evaluate({"canTravel": "yes"}) is not None
    assert rule.evaluate({}) is not None
    assert rule.evaluate({"canTravel": True}) is None


def test_word_count_rule_bounds() -> None:
    rule = WordCountRule("goals", 2, 3, "2 to 3 words")

    assert rule.evaluate({"goals": "one"}) is not None
    assert rule.evaluate({"goals": "  one   two "}) is None
    assert rule.evaluate({"goals": "one two three"}) is None
    assert rule.evaluate({"goals": "one two three four"}) is not None


def test_char_count_rule_checks_presence_then_length() -> None:
    rule = CharCountRule("bio", required_message="Bio is required.", maximum=5, too_long_message="Too long")

    assert rule.evaluate({"bio": "  "}).message == "Bio is required."
    assert rule.evaluate({"bio": "12345"}) is None
    assert rule.evaluate({"bio": "123456"}).message == "Too long"


def test_char_count_rule_minimum_uses_required_message() -> None:
    rule = CharCountRule("phone", required_message="Valid phone number is required", minimum=8)

    assert rule.evaluate({"phone": "1234567"}).message == "Valid phone number is required"
    assert rule.evaluate({"phone": "12345678"}) is None


def test_media_rule_requires_payload() -> None:
    rule = MediaRule("headShot1", "Head Shot 1 is required.")

    assert rule.evaluate({"headShot1": None}) is not None
    assert rule.evaluate({"headShot1": "data:image/png;base64,AA=="}) is None


def test_rules_do_not_mutate_fields() -> None:
    fields = {"email": " ada@example.com ", "goals": "a b"}
    before = dict(fields)

    PatternRule("email", EMAIL_PATTERN, "bad").evaluate(fields)
    WordCountRule("goals", 1, 5, "bad").evaluate(fields)

    assert fields == before
