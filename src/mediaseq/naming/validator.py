"""Filesystem-safety checks for candidate filenames."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

MAX_FILENAME_LENGTH = 255
ILLEGAL_CHARACTERS = frozenset('/\\:*?"<>|\x00')
RESERVED_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{number}" for number in range(1, 10)]
    + [f"LPT{number}" for number in range(1, 10)]
)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of validating a single filename.

    Attributes:
        valid: Whether the filename passed every rule.
        reason: First violated rule when ``valid`` is false.
    """

    valid: bool
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def invalid(cls, reason: str) -> "ValidationResult":
        return cls(valid=False, reason=reason)

    def __bool__(self) -> bool:
        return self.valid


def validate_filename(name: str) -> ValidationResult:
    """Check ``name`` against portable filesystem naming rules.

    Rules are applied in order and the first violation is reported: blank names,
    names longer than 255 characters, reserved characters or NUL, other control
    characters, leading/trailing dots or spaces, and reserved device names. The
    name is never corrected.

    Args:
        name: Candidate filename without any directory component.

    Returns:
        ValidationResult: ``ok`` or the first violated rule.
    """

    if not name or not name.strip():
        return ValidationResult.invalid("Filename cannot be empty")

    if len(name) > MAX_FILENAME_LENGTH:
        return ValidationResult.invalid(
            f"Filename is too long (max {MAX_FILENAME_LENGTH} characters)"
        )

    illegal = next((char for char in name if char in ILLEGAL_CHARACTERS), None)
    if illegal is not None:
        shown = "NUL" if illegal == "\x00" else illegal
        return ValidationResult.invalid(f"Filename contains illegal character: '{shown}'")

    if any(ord(char) < 32 for char in name):
        return ValidationResult.invalid("Filename contains control character")

    if name[0] in ". " or name[-1] in ". ":
        return ValidationResult.invalid("Filename cannot start or end with a space or period")

    device = name.split(".", 1)[0].upper()
    if device in RESERVED_NAMES:
        return ValidationResult.invalid(f"'{device}' is a reserved filename")

    return ValidationResult.ok()


__all__ = [
    "ILLEGAL_CHARACTERS",
    "MAX_FILENAME_LENGTH",
    "RESERVED_NAMES",
    "ValidationResult",
    "validate_filename",
]
