"""
Field and form validation for user-supplied data.

Every validator is a pure function returning a ValidationResult; none of
them raise. validate_form runs every validator it is given and aggregates
the failures by field name.
"""

import re
from datetime import date, datetime
from typing import Any, Callable, Dict, Mapping, Optional, Union

from pydantic import AnyUrl, TypeAdapter, ValidationError

from clientguard.models.validation import FormResult, UserRole, ValidationResult


EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
DIGIT_PATTERN = re.compile(r"[0-9]")
LETTER_PATTERN = re.compile(r"[a-zA-Z]")
FULL_NAME_PATTERN = re.compile(r"[a-zA-Z\s'-]+")
NON_DIGIT_PATTERN = re.compile(r"[^0-9]")

MIN_PASSWORD_LENGTH = 8
MIN_NAME_LENGTH = 2
PHONE_DIGITS = 10
MINIMUM_AGE_YEARS = 13

VALID_ROLES = frozenset(role.value for role in UserRole)

_url_adapter = TypeAdapter(AnyUrl)

FieldValidator = Callable[[Any], ValidationResult]

VALID = ValidationResult(is_valid=True)


def _invalid(error: str) -> ValidationResult:
    return ValidationResult(is_valid=False, error=error)


def validate_email(email: Optional[str]) -> ValidationResult:
    if not email:
        return _invalid("Email is required")

    if not EMAIL_PATTERN.fullmatch(email):
        return _invalid("Please enter a valid email address")

    return VALID


def validate_password(password: Optional[str]) -> ValidationResult:
    """
    Validate a new password.

    Conditions are checked in order: present, at least 8 characters,
    contains a digit, contains a letter. The first failure is reported.
    """
    if not password:
        return _invalid("Password is required")

    if len(password) < MIN_PASSWORD_LENGTH:
        return _invalid(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    if not DIGIT_PATTERN.search(password):
        return _invalid("Password must contain at least one number")

    if not LETTER_PATTERN.search(password):
        return _invalid("Password must contain at least one letter")

    return VALID


def validate_full_name(name: Optional[str]) -> ValidationResult:
    """Validate a first and last name."""
    if not name:
        return _invalid("Full name is required")

    trimmed = name.strip()

    if len(trimmed) < MIN_NAME_LENGTH:
        return _invalid(f"Full name must be at least {MIN_NAME_LENGTH} characters long")

    if DIGIT_PATTERN.search(name):
        return _invalid("Full name cannot contain numbers")

    if " " not in trimmed:
        return _invalid("Please enter your full name (first and last name)")

    if not FULL_NAME_PATTERN.fullmatch(name):
        return _invalid("Full name can only contain letters, spaces, hyphens, and apostrophes")

    return VALID


def validate_phone_number(phone: Optional[str]) -> ValidationResult:
    """Validate an optional 10-digit phone number. Formatting characters are ignored."""
    if not phone:
        return VALID

    digits_only = NON_DIGIT_PATTERN.sub("", phone)

    if len(digits_only) != PHONE_DIGITS:
        return _invalid("Please enter a valid 10-digit phone number")

    return VALID


def validate_role(role: Optional[str]) -> ValidationResult:
    if not role:
        return _invalid("Role is required")

    if role not in VALID_ROLES:
        return _invalid("Please select a valid role")

    return VALID


def validate_password_confirmation(password: Optional[str], confirm_password: Optional[str]) -> ValidationResult:
    """Check that the confirmation matches the password exactly."""
    if not confirm_password:
        return _invalid("Please confirm your password")

    if password != confirm_password:
        return _invalid("Passwords do not match")

    return VALID


def validate_required(value: Any, field_name: str = "This field") -> ValidationResult:
    if not value or (isinstance(value, str) and not value.strip()):
        return _invalid(f"{field_name} is required")

    return VALID


def validate_url(url: Optional[str]) -> ValidationResult:
    """Validate an optional absolute URL."""
    if not url:
        return VALID

    try:
        _url_adapter.validate_python(url)
    except ValidationError:
        return _invalid("Please enter a valid URL")

    return VALID


def _parse_date(value: Union[str, date, datetime]) -> Optional[datetime]:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _years_before(moment: datetime, years: int) -> datetime:
    try:
        return moment.replace(year=moment.year - years)
    except ValueError:
        # February 29th in a non-leap target year
        return moment.replace(year=moment.year - years, day=28)


def validate_date_of_birth(
    value: Union[str, date, datetime, None],
    now: Optional[datetime] = None
) -> ValidationResult:
    """
    Validate a date of birth.

    The date must lie strictly in the past and on or before the moment
    exactly 13 years ago.

    Args:
        value: ISO 8601 string, date or datetime
        now: Reference time (default: current time, in the value's timezone)
    """
    if not value:
        return _invalid("Date of birth is required")

    selected = _parse_date(value)
    if selected is None:
        return _invalid("Please enter a valid date")

    if now is None:
        now = datetime.now(selected.tzinfo)
    elif (now.tzinfo is None) != (selected.tzinfo is None):
        selected = selected.replace(tzinfo=now.tzinfo)

    if selected >= now:
        return _invalid("Date of birth must be in the past")

    if selected > _years_before(now, MINIMUM_AGE_YEARS):
        return _invalid(f"You must be at least {MINIMUM_AGE_YEARS} years old")

    return VALID


def validate_form(fields: Mapping[str, Any], validators: Mapping[str, FieldValidator]) -> FormResult:
    """
    Run every validator against its field and aggregate the failures.

    No validator is skipped after a failure. Entries whose validator is not
    callable are ignored; fields missing from ``fields`` are validated as None.

    Args:
        fields: Submitted values by field name
        validators: Validator by field name

    Returns:
        FormResult that is valid only if every field passed
    """
    errors: Dict[str, str] = {}

    for field_name, validator in validators.items():
        if not callable(validator):
            continue

        result = validator(fields.get(field_name))
        if not result.is_valid:
            errors[field_name] = result.error or "Invalid value"

    return FormResult(is_valid=not errors, errors=errors)


def format_phone_number(phone: Optional[str]) -> str:
    """Render a 10-digit number as (XXX) XXX-XXXX, leaving anything else as given."""
    if not phone:
        return ""

    digits_only = NON_DIGIT_PATTERN.sub("", phone)

    if len(digits_only) == PHONE_DIGITS:
        return f"({digits_only[:3]}) {digits_only[3:6]}-{digits_only[6:]}"

    return phone
