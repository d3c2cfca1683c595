"""Per-section rule dispatch and cross-section error aggregation."""

from __future__ import annotations

import logging
from datetime import date
from typing import Iterable, Mapping

from core.rules import FormError
from core.tracks import WizardTrack

logger = logging.getLogger(__name__)

ERROR_SEPARATOR = "; "


def validate(
    track: WizardTrack,
    section_key: str,
    fields: Mapping[str, object],
    *,
    today: date | None = None,
) -> list[FormError]:
    """Return every violation for ``section_key``.

    All rules of the section run; no rule stops evaluation of the next one.
    Sections without rules always validate clean.
    """

    errors: list[FormError] = []
    for rule in track.rules_for(section_key):
        error = rule.evaluate(fields, today=today)
        if error is not None:
            errors.append(error)
    if errors:
        logger.debug("Section '%s' has %s violation(s)", section_key, len(errors))
    return errors


def check_terms(track: WizardTrack, fields: Mapping[str, object]) -> FormError | None:
    """Return the terms-acceptance violation for ``track``, if any."""

    if track.terms_field is None:
        return None
    if fields.get(track.terms_field) is True:
        return None
    return FormError(track.terms_field, track.terms_message)


def validate_all(
    track: WizardTrack,
    fields: Mapping[str, object],
    *,
    today: date | None = None,
) -> list[FormError]:
    """Aggregate violations across every submittable section plus the terms check."""

    errors: list[FormError] = []
    for section in track.sections:
        if section.submit_excluded:
            continue
        errors.extend(validate(track, section.key, fields, today=today))
    terms_error = check_terms(track, fields)
    if terms_error is not None:
        errors.append(terms_error)
    return errors


def first_error_section(track: WizardTrack, errors: Iterable[FormError]) -> str | None:
    """Return the first section in track order owning one of ``errors``."""

    errored = {error.field for error in errors}
    if not errored:
        return None
    owners = {track.owner_of(name) for name in errored} - {None}
    if not owners:
        logger.warning("No section owns the violated fields: %s", ", ".join(sorted(errored)))
        return None
    return min(owners, key=track.index_of)


def describe_errors(errors: Iterable[FormError]) -> str:
    """Join violation messages into a single notification description."""

    return ERROR_SEPARATOR.join(error.message for error in errors)


def errors_by_field(errors: Iterable[FormError]) -> dict[str, str]:
    """Return the first message per field for inline display."""

    messages: dict[str, str] = {}
    for error in errors:
        messages.setdefault(error.field, error.message)
    return messages


__all__ = [
    "ERROR_SEPARATOR",
    "check_terms",
    "describe_errors",
    "errors_by_field",
    "first_error_section",
    "validate",
    "validate_all",
]
