"""Section order, field catalog and rule catalog for both application tracks.

The rule catalog is the single source of truth for which section owns which
field: navigation gating, final-submission re-routing and the review page all
derive section membership from it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import Final, Mapping

from core.derived import AGE_FIELD, FULL_NAME_FIELD
from core.errors import UnknownSectionError
from core.rules import (
    EMAIL_PATTERN,
    ISO_DATE_PATTERN,
    AgeRangeRule,
    CharCountRule,
    ConfirmRule,
    MediaRule,
    PatternRule,
    RequiredRule,
    RuleCatalog,
    ValidationRule,
    WordCountRule,
)
from core.sections import Counter, FieldSpec, Section, WidgetKind

MEDIA_SLOTS: Final[tuple[str, ...]] = (
    "headShot1",
    "headShot2",
    "bodyShot1",
    "bodyShot2",
    "additionalImage1",
    "additionalImage2",
)
MANDATORY_MEDIA_SLOTS: Final[tuple[str, ...]] = ("headShot1", "bodyShot1")

MIN_AGE: Final[int] = 18
MAX_AGE: Final[int] = 35
TEXT_CHAR_LIMIT: Final[int] = 2500
TERMS_FIELD: Final[str] = "agreeTerms"


class TrackKey(StrEnum):
    """Application tracks offered on the selection screen."""

    PARTICIPANT = "participant"
    DIRECTOR = "director"


@dataclass(frozen=True)
class WizardTrack:
    """Ordered sections, default field values and rules for one track."""

    key: TrackKey
    title: str
    sections: tuple[Section, ...]
    rules: RuleCatalog
    derived_fields: Mapping[str, str | bool | None] = field(default_factory=dict)
    terms_field: str | None = None
    terms_section: str | None = None
    terms_message: str = "You must agree to the terms and conditions"
    submitted_title: str = "Application submitted successfully!"

    def __post_init__(self) -> None:
        keys = [section.key for section in self.sections]
        if len(set(keys)) != len(keys):
            raise ValueError(f"Duplicate section keys on track {self.key}")
        unknown = sorted(set(self.rules) - set(keys))
        if unknown:
            raise ValueError(f"Rules reference unknown sections: {', '.join(unknown)}")
        if self.terms_section is not None and self.terms_section not in keys:
            raise ValueError(f"Unknown terms section '{self.terms_section}'")

    @property
    def section_keys(self) -> tuple[str, ...]:
        return tuple(section.key for section in self.sections)

    def section(self, key: str) -> Section:
        """Return the section registered under ``key``."""

        for section in self.sections:
            if section.key == key:
                return section
        raise UnknownSectionError(key)

    def index_of(self, key: str) -> int:
        """Return the order index of section ``key``."""

        try:
            return self.section_keys.index(key)
        except ValueError:
            raise UnknownSectionError(key) from None

    def rules_for(self, key: str) -> tuple[ValidationRule, ...]:
        """Return the ordered rules for section ``key`` (empty when rule-free)."""

        self.index_of(key)
        return tuple(self.rules.get(key, ()))

    def defaults(self) -> dict[str, str | bool | None]:
        """Return the initial empty value for every field on the track."""

        values: dict[str, str | bool | None] = {}
        for section in self.sections:
            for spec in section.fields:
                values.setdefault(spec.name, spec.default)
        for name, default in self.derived_fields.items():
            values.setdefault(name, default)
        for rules in self.rules.values():
            for rule in rules:
                for name in rule.fields:
                    values.setdefault(name, False if isinstance(rule, ConfirmRule) else "")
        if self.terms_field is not None:
            values.setdefault(self.terms_field, False)
        return values

    def owned_fields(self, key: str) -> tuple[str, ...]:
        """Return the fields whose violations belong to section ``key``."""

        owned: dict[str, None] = {}
        for rule in self.rules_for(key):
            for name in rule.fields:
                owned.setdefault(name, None)
        if self.terms_field is not None and key == self.terms_section:
            owned.setdefault(self.terms_field, None)
        return tuple(owned)

    def owner_of(self, field_name: str) -> str | None:
        """Return the first section in order that owns ``field_name``."""

        for section in self.sections:
            if field_name in self.owned_fields(section.key):
                return section.key
        return None

    def review_fields(self, key: str) -> tuple[FieldSpec, ...]:
        """Return the field specs shown for section ``key`` on the review page."""

        section = self.section(key)
        owned = set(self.owned_fields(key))
        return tuple(
            spec for spec in section.fields if spec.name in owned or spec.kind is not WidgetKind.CHECKBOX
        )


def _text(name: str, label: str, *, required: bool = False, placeholder: str = "") -> FieldSpec:
    return FieldSpec(name=name, label=label, required=required, placeholder=placeholder)


def _area(
    name: str,
    label: str,
    *,
    required: bool = False,
    placeholder: str = "",
    counter: Counter | None = None,
    limit: int | None = None,
    help: str | None = None,
) -> FieldSpec:
    return FieldSpec(
        name=name,
        label=label,
        kind=WidgetKind.TEXTAREA,
        required=required,
        placeholder=placeholder,
        counter=counter,
        counter_limit=limit,
        help=help,
    )


def _check(name: str, label: str) -> FieldSpec:
    return FieldSpec(name=name, label=label, kind=WidgetKind.CHECKBOX, required=True)


def _image(name: str, label: str, *, required: bool = False) -> FieldSpec:
    return FieldSpec(
        name=name,
        label=label,
        kind=WidgetKind.IMAGE,
        required=required,
        help="JPG, PNG or WebP, max 2MB.",
    )


PARTICIPANT_SECTIONS: Final[tuple[Section, ...]] = (
    Section(
        key="eligibility",
        title="Eligibility",
        badge="1",
        description="Please confirm you meet all eligibility requirements",
        fields=(
            FieldSpec(name="dateOfBirth", label="Date of Birth", kind=WidgetKind.DATE, required=True),
            FieldSpec(name=AGE_FIELD, label="Your age", kind=WidgetKind.DERIVED),
            _check("isEligible", "I confirm that I meet all the eligibility requirements listed above"),
            _check("hasValidPassport", "I have a valid international passport"),
            _check("canTravel", "I am available to travel"),
            _check("isGoodHealth", "I am in good physical and mental health"),
            _check("willFollowRules", "I commit to adhere to all pageant rules and regulations"),
        ),
    ),
    Section(
        key="contact",
        title="Contact Information",
        badge="2",
        description="Your basic contact information",
        fields=(
            _text("firstName", "First Name", required=True),
            _text("middleName", "Middle Name"),
            _text("lastName", "Last Name", required=True),
            FieldSpec(name=FULL_NAME_FIELD, label="Full Name", kind=WidgetKind.DERIVED),
            _text("email", "Email Address", required=True, placeholder="your.email@example.com"),
            _text("phone", "Cell Phone", required=True),
            _text("homePhone", "Home Phone"),
            _text("street", "Street Address"),
            _text("addressLine2", "Address Line 2"),
            _text("city", "City", required=True),
            _text("stateRegion", "State / Region"),
            _text("zipCode", "Zip / Postal Code"),
            _text("country", "Country", required=True),
        ),
    ),
    Section(
        key="personal",
        title="Personal Details",
        badge="3",
        description="Your personal details and measurements",
        fields=(
            _text("ethnicity", "Ethnicity", required=True),
            _text("representCountry", "Country You Wish to Represent", required=True),
            _text("alternateCountry", "Alternate Country"),
            _text("height", "Height (e.g., 5'7\" or 170cm)"),
            _text("weight", "Weight (e.g., 120 lbs or 54 kg)"),
            _text("bust", "Bust (inches/cm)"),
            _text("waist", "Waist (inches/cm)"),
            _text("hips", "Hips (inches/cm)"),
            _text("dressSize", "Dress Size"),
            _text("shoeSize", "Shoe Size"),
            _text("swimsuitSizeTop", "Swimsuit Size (Top)"),
            _text("swimsuitSizeBottom", "Swimsuit Size (Bottom)"),
        ),
    ),
    Section(
        key="background",
        title="Background & Experience",
        badge="4",
        description="Tell us about your experience and qualifications",
        fields=(
            _text("schoolAttended", "School(s) Attended"),
            _text("fieldOfStudy", "Field of Study"),
            _text("highestEducation", "Highest Level of Education"),
            _area("experience", "Work Experience", required=True),
            _area("education", "Education", required=True),
            _area("skills", "Skills & Talents", required=True),
        ),
    ),
    Section(
        key="motivation",
        title="Motivation & Goals",
        badge="5",
        description="Why do you want to join Miss Bloom Global?",
        fields=(
            _area("motivation", "Why do you want to participate?", required=True, counter=Counter.WORDS, limit=500),
            _area("goals", "What are your goals if you win?", required=True, counter=Counter.WORDS, limit=500),
        ),
    ),
    Section(
        key="business",
        title="Business Plan",
        badge="6",
        description="Your strategy to promote Miss Bloom Global",
        fields=(
            _area(
                "strategy",
                "How will you promote Miss Bloom Global in your country?",
                required=True,
                counter=Counter.WORDS,
                limit=1000,
            ),
        ),
    ),
    Section(
        key="photos",
        title="Photos",
        badge="7",
        description="Upload your photos for the application",
        fields=(
            _image("headShot1", "Head Shot #1", required=True),
            _image("headShot2", "Head Shot #2"),
            _image("bodyShot1", "Body Shot #1", required=True),
            _image("bodyShot2", "Body Shot #2"),
            _image("additionalImage1", "Additional Image #1"),
            _image("additionalImage2", "Additional Image #2"),
        ),
    ),
    Section(
        key="terms",
        title="Terms & Conditions",
        badge="8",
        description="Review and agree to the terms and conditions",
        fields=(_check(TERMS_FIELD, "I have read and agree to the terms and conditions"),),
        submit_excluded=True,
    ),
    Section(
        key="profile",
        title="Personal Profile",
        badge="9",
        description="Personal information for your profile",
        fields=(
            _area("bio", "Bio", required=True, counter=Counter.CHARS, limit=TEXT_CHAR_LIMIT),
            _text("socialMedia", "Social Media Handles", required=True),
            _text("threeWords", "Three words that describe you"),
            _area("hobbies", "Hobbies & Interests"),
            _area("pageantExperience", "Previous Pageant Experience"),
            _area("charity", "Charity / Platform"),
            _text("hearAboutUs", "How did you hear about us?"),
        ),
    ),
    Section(
        key="countryInfo",
        title="Country Information",
        badge="10",
        description="Information about your country and culture",
        fields=(
            _area("countryOverview", "Country Overview", required=True, counter=Counter.CHARS, limit=TEXT_CHAR_LIMIT),
            _area("culturalInfo", "Cultural Information", required=True, counter=Counter.CHARS, limit=TEXT_CHAR_LIMIT),
        ),
    ),
    Section(
        key="review",
        title="Review & Submit",
        badge="11",
        description="Review your application before submitting",
        submit_excluded=True,
    ),
)


PARTICIPANT_RULES: Final[RuleCatalog] = MappingProxyType(
    {
        "eligibility": (
            AgeRangeRule(
                "dateOfBirth",
                minimum=MIN_AGE,
                maximum=MAX_AGE,
                message="You must be between 18 and 35 years old to participate.",
                required_message="Date of birth is required.",
            ),
            ConfirmRule("isEligible", "You must confirm eligibility."),
            ConfirmRule("hasValidPassport", "You must confirm having a valid passport."),
            ConfirmRule("canTravel", "You must confirm ability to travel."),
            ConfirmRule("isGoodHealth", "You must confirm good health."),
            ConfirmRule("willFollowRules", "You must agree to follow rules."),
        ),
        "contact": (
            RequiredRule("firstName", "First name is required."),
            RequiredRule("lastName", "Last name is required."),
            PatternRule("email", EMAIL_PATTERN, "Email is invalid.", required_message="Email is required."),
            RequiredRule("phone", "Cell phone is required."),
            RequiredRule("country", "Country is required."),
            RequiredRule("city", "City is required."),
        ),
        "personal": (
            RequiredRule("ethnicity", "Ethnicity is required."),
            RequiredRule("representCountry", "Country to represent is required."),
        ),
        "background": (
            RequiredRule("experience", "Work experience is required."),
            RequiredRule("education", "Education is required."),
            RequiredRule("skills", "Skills are required."),
        ),
        "motivation": (
            WordCountRule("motivation", 20, 500, "Motivation must be between 20 and 500 words."),
            WordCountRule("goals", 20, 500, "Goals must be between 20 and 500 words."),
        ),
        "business": (WordCountRule("strategy", 50, 1000, "Strategy must be between 50 and 1000 words."),),
        "photos": (
            MediaRule("headShot1", "Head Shot 1 is required."),
            MediaRule("bodyShot1", "Body Shot 1 is required."),
        ),
        "profile": (
            CharCountRule(
                "bio",
                required_message="Bio is required.",
                maximum=TEXT_CHAR_LIMIT,
                too_long_message="Bio must be 2500 characters or less.",
            ),
            RequiredRule("socialMedia", "Social Media Handles are required."),
        ),
        "countryInfo": (
            CharCountRule(
                "countryOverview",
                required_message="Country overview is required.",
                maximum=TEXT_CHAR_LIMIT,
                too_long_message="Country overview must be 2500 characters or less.",
            ),
            CharCountRule(
                "culturalInfo",
                required_message="Cultural information is required.",
                maximum=TEXT_CHAR_LIMIT,
                too_long_message="Cultural information must be 2500 characters or less.",
            ),
        ),
    }
)


DIRECTOR_SECTIONS: Final[tuple[Section, ...]] = (
    Section(
        key="contact",
        title="Contact Information",
        badge="1",
        description="How we can reach you",
        fields=(
            _text(FULL_NAME_FIELD, "Full Name", required=True, placeholder="Enter your full name"),
            _text("email", "Email Address", required=True, placeholder="your.email@example.com"),
            _text("phone", "Phone Number", required=True, placeholder="Enter your phone number"),
            _text("country", "Country", required=True, placeholder="Enter your country"),
            _text("city", "City", required=True, placeholder="Enter your city"),
        ),
    ),
    Section(
        key="motivation",
        title="Motivation & Goals",
        badge="2",
        description="Why do you want to become a National Director?",
        fields=(
            _area("motivation", "Why do you want to become a National Director?", required=True, counter=Counter.WORDS, limit=500),
            _area("goals", "What are your goals as a National Director?", required=True, counter=Counter.WORDS, limit=500),
        ),
    ),
    Section(
        key="business",
        title="Business Plan",
        badge="3",
        description="Your strategy to run Miss Bloom Global in your country",
        fields=(
            _area(
                "strategy",
                "Describe your business strategy",
                required=True,
                counter=Counter.WORDS,
                limit=1000,
            ),
        ),
    ),
    Section(
        key="agreement",
        title="Agreement",
        badge="4",
        description="National Director agreement",
        fields=(
            _check("agreeToTerms", "I agree to the National Director terms and conditions"),
            _check("agreeToConfidentiality", "I agree to keep all organisation information confidential"),
        ),
    ),
    Section(
        key="profile",
        title="Personal Profile",
        badge="5",
        description="Personal and professional information",
        fields=(
            FieldSpec(name="dateOfBirth", label="Date of Birth", kind=WidgetKind.DATE, required=True),
            _area("bio", "Professional Bio", required=True, counter=Counter.CHARS, limit=TEXT_CHAR_LIMIT),
            _text("socialMedia", "Social Media Handles", required=True),
        ),
    ),
    Section(
        key="country",
        title="Country Information",
        badge="6",
        description="Information about your country and culture",
        fields=(
            _area("countryOverview", "Country Overview", required=True, counter=Counter.CHARS, limit=TEXT_CHAR_LIMIT),
            _area("culturalInfo", "Cultural Information", required=True, counter=Counter.CHARS, limit=TEXT_CHAR_LIMIT),
        ),
    ),
)


DIRECTOR_RULES: Final[RuleCatalog] = MappingProxyType(
    {
        "contact": (
            CharCountRule("fullName", required_message="Full name is required", minimum=2),
            PatternRule("email", EMAIL_PATTERN, "Valid email address is required"),
            CharCountRule("phone", required_message="Valid phone number is required", minimum=8),
            CharCountRule("country", required_message="Country is required", minimum=2),
            CharCountRule("city", required_message="City is required", minimum=2),
        ),
        "motivation": (
            WordCountRule("motivation", 20, 500, "Motivation must be between 20 and 500 words."),
            WordCountRule("goals", 20, 500, "Goals must be between 20 and 500 words."),
        ),
        "business": (WordCountRule("strategy", 50, 1000, "Strategy must be between 50 and 1000 words."),),
        "agreement": (
            ConfirmRule("agreeToTerms", "You must agree to the terms and conditions"),
            ConfirmRule("agreeToConfidentiality", "You must agree to the confidentiality terms"),
        ),
        "profile": (
            PatternRule(
                "dateOfBirth",
                ISO_DATE_PATTERN,
                "Date of birth must be in YYYY-MM-DD format",
                required_message="Date of birth is required",
            ),
            CharCountRule(
                "bio",
                required_message="Bio is required",
                maximum=TEXT_CHAR_LIMIT,
                too_long_message="Bio must be 2500 characters or less",
            ),
            CharCountRule("socialMedia", required_message="Social media information is required", minimum=2),
        ),
        "country": (
            CharCountRule(
                "countryOverview",
                required_message="Country overview is required",
                maximum=TEXT_CHAR_LIMIT,
                too_long_message="Country overview must be 2500 characters or less",
            ),
            CharCountRule(
                "culturalInfo",
                required_message="Cultural information is required",
                maximum=TEXT_CHAR_LIMIT,
                too_long_message="Cultural information must be 2500 characters or less",
            ),
        ),
    }
)


PARTICIPANT_TRACK: Final[WizardTrack] = WizardTrack(
    key=TrackKey.PARTICIPANT,
    title="Participant Application",
    sections=PARTICIPANT_SECTIONS,
    rules=PARTICIPANT_RULES,
    derived_fields={FULL_NAME_FIELD: "", AGE_FIELD: ""},
    terms_field=TERMS_FIELD,
    terms_section="terms",
)

DIRECTOR_TRACK: Final[WizardTrack] = WizardTrack(
    key=TrackKey.DIRECTOR,
    title="National Director Application",
    sections=DIRECTOR_SECTIONS,
    rules=DIRECTOR_RULES,
    submitted_title="Director application submitted successfully!",
)

TRACKS: Final[Mapping[TrackKey, WizardTrack]] = MappingProxyType(
    {
        TrackKey.PARTICIPANT: PARTICIPANT_TRACK,
        TrackKey.DIRECTOR: DIRECTOR_TRACK,
    }
)


def get_track(key: TrackKey | str) -> WizardTrack:
    """Return the track registered under ``key``."""

    try:
        return TRACKS[TrackKey(key)]
    except ValueError:
        raise KeyError(f"Unknown application track: {key!r}") from None


__all__ = [
    "DIRECTOR_TRACK",
    "MANDATORY_MEDIA_SLOTS",
    "MAX_AGE",
    "MEDIA_SLOTS",
    "MIN_AGE",
    "PARTICIPANT_TRACK",
    "TERMS_FIELD",
    "TRACKS",
    "TrackKey",
    "WizardTrack",
    "get_track",
]
