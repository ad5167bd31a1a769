"""
Input validation for resource operations

Validators are pure functions returning a ``ValidationResult``; resource
operations call them explicitly before building a request, and the signing
core never sees invalid input.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

USER_STATUSES = ("active", "bypass", "disabled", "locked out")
MIN_BYPASS_CODES = 1
MAX_BYPASS_CODES = 10

# Characters a path segment may carry without percent-encoding
PATH_SEGMENT_PATTERN = re.compile(r"[A-Za-z0-9._~-]+")


@dataclass
class ValidationResult:
    """
    Outcome of validating one or more inputs
    
    Attributes:
        errors: Problems found, empty when the input is valid
    """
    errors: List[str] = field(default_factory=list)
    
    @property
    def ok(self) -> bool:
        return not self.errors
    
    def __bool__(self) -> bool:
        return self.ok
    
    @property
    def message(self) -> str:
        return "; ".join(self.errors)


VALID = ValidationResult()


def combine(*results: ValidationResult) -> ValidationResult:
    """Merge several results, keeping every error in order."""
    errors: List[str] = []
    for result in results:
        errors.extend(result.errors)
    return ValidationResult(errors)


def validate_identifier(name: str, value: Any) -> ValidationResult:
    """Require a non-empty string without surrounding whitespace or slashes."""
    if not isinstance(value, str) or not value.strip():
        return ValidationResult([f"{name} must be a non-empty string"])
    if value != value.strip():
        return ValidationResult([f"{name} must not have leading or trailing whitespace"])
    if "/" in value:
        return ValidationResult([f"{name} must not contain '/'"])
    return VALID


def validate_path_segment(name: str, value: Any) -> ValidationResult:
    """
    Require an identifier that can be placed in a request path as-is.
    
    Only unreserved characters are allowed, so the path that is signed is
    the path that is sent.
    """
    result = validate_identifier(name, value)
    if not result:
        return result
    if not PATH_SEGMENT_PATTERN.fullmatch(value) or value in (".", ".."):
        return ValidationResult(
            [f"{name} may only contain letters, digits and '-', '_', '.', '~'"]
        )
    return VALID


def validate_choice(name: str, value: Optional[str], choices: Iterable[str]) -> ValidationResult:
    if value is None:
        return VALID
    allowed = tuple(choices)
    if value not in allowed:
        return ValidationResult([f"{name} must be one of: {', '.join(allowed)}"])
    return VALID


def validate_user_status(status: Optional[str]) -> ValidationResult:
    return validate_choice("status", status, USER_STATUSES)


def validate_bypass_code_count(count: Any) -> ValidationResult:
    if isinstance(count, bool) or not isinstance(count, int):
        return ValidationResult(["count must be an integer"])
    if not MIN_BYPASS_CODES <= count <= MAX_BYPASS_CODES:
        return ValidationResult(
            [f"count must be between {MIN_BYPASS_CODES} and {MAX_BYPASS_CODES}"]
        )
    return VALID


def validate_string_fields(fields: dict) -> ValidationResult:
    """Require every optional field value to be a string."""
    errors = [
        f"{name} must be a string"
        for name, value in fields.items()
        if not isinstance(value, str)
    ]
    return ValidationResult(errors)
