"""Filing status enumeration and tolerant parsing."""

from __future__ import annotations

from enum import Enum


class FilingStatus(str, Enum):
    """IRS filing status as used by the wizard."""

    SINGLE = "single"
    MARRIED_JOINT = "married_joint"
    MARRIED_SEPARATE = "married_separate"
    HEAD_OF_HOUSEHOLD = "head_of_household"
    QUALIFYING_WIDOW = "qualifying_widow"

    @property
    def is_joint(self) -> bool:
        """Whether the status uses the joint (doubled) thresholds."""
        return self in (FilingStatus.MARRIED_JOINT, FilingStatus.QUALIFYING_WIDOW)


# Short codes accepted from older payloads and document tooling
_ALIASES: dict[str, FilingStatus] = {
    "mfj": FilingStatus.MARRIED_JOINT,
    "mfs": FilingStatus.MARRIED_SEPARATE,
    "hoh": FilingStatus.HEAD_OF_HOUSEHOLD,
    "qw": FilingStatus.QUALIFYING_WIDOW,
    "qss": FilingStatus.QUALIFYING_WIDOW,
}


def parse_filing_status(value: object) -> FilingStatus | None:
    """Parse a filing status, returning None when it is not recognized.

    Args:
        value: A FilingStatus, its string value, or a short code (mfj, hoh...).

    Returns:
        The matching FilingStatus, or None for missing/unknown values.

    Example:
        >>> parse_filing_status("mfj")
        <FilingStatus.MARRIED_JOINT: 'married_joint'>
    """
    if isinstance(value, FilingStatus):
        return value
    if not isinstance(value, str):
        return None
    text = value.strip().lower()
    if not text:
        return None
    try:
        return FilingStatus(text)
    except ValueError:
        return _ALIASES.get(text)
