"""
Depreciation (AfA) Calculations

Maps a depreciation scheme and year index to the rate applied to the
depreciation basis in that year.
"""

import enum
from typing import Optional, Union

DEFAULT_LIFETIME_YEARS = 50


class DepreciationScheme(str, enum.Enum):
    """Supported depreciation schemes."""

    DECLINING_5_LINEAR_3 = "declining 5%+linear 3%"
    DECLINING_5_LINEAR_2 = "declining 5%+linear 2%"
    LINEAR_3 = "linear 3%"
    LINEAR_2 = "linear 2%"
    REMAINING_LIFETIME = "linear by remaining lifetime"


# Labels used by the original spreadsheet's dropdown
_LEGACY_LABELS = {
    "degressiv 5% + linear 3%": DepreciationScheme.DECLINING_5_LINEAR_3,
    "degressiv 5% + linear 2%": DepreciationScheme.DECLINING_5_LINEAR_2,
    "linear 3 % p.a.": DepreciationScheme.LINEAR_3,
    "linear 2 % p.a.": DepreciationScheme.LINEAR_2,
    "linear x%": DepreciationScheme.REMAINING_LIFETIME,
}


def resolve_scheme(label: Union[str, DepreciationScheme, None]) -> Optional[DepreciationScheme]:
    """
    Resolve a scheme label to a DepreciationScheme.

    Accepts enum members, enum values and the legacy spreadsheet labels,
    ignoring case and surrounding whitespace.

    Returns:
        The matching scheme, or None if the label is not recognized
    """
    if label is None:
        return None
    if isinstance(label, DepreciationScheme):
        return label

    key = label.strip().lower()
    for scheme in DepreciationScheme:
        if scheme.value == key:
            return scheme
    return _LEGACY_LABELS.get(key)


def _fallback_rate(label: Optional[str]) -> float:
    """Best-effort rate for free-text labels outside the known schemes."""
    if label and "3" in label:
        return 0.03
    if label and "2" in label:
        return 0.02
    return 0.02


def depreciation_rate(
    scheme: Union[str, DepreciationScheme, None],
    year: int,
    lifetime_years: int = DEFAULT_LIFETIME_YEARS,
) -> float:
    """
    Get the depreciation rate for a given year.

    Args:
        scheme: Depreciation scheme or label
        year: Year index, 1-based
        lifetime_years: Remaining useful life, only used by REMAINING_LIFETIME

    Returns:
        Rate as decimal (e.g., 0.02 for 2%)
    """
    resolved = resolve_scheme(scheme)

    if resolved is DepreciationScheme.DECLINING_5_LINEAR_3:
        return 0.05 if year <= 6 else 0.03
    if resolved is DepreciationScheme.DECLINING_5_LINEAR_2:
        return 0.05 if year <= 6 else 0.02
    if resolved is DepreciationScheme.LINEAR_3:
        return 0.03 if year <= 33 else 0.0
    if resolved is DepreciationScheme.LINEAR_2:
        return 0.02 if year <= 50 else 0.0
    if resolved is DepreciationScheme.REMAINING_LIFETIME:
        if lifetime_years <= 0:
            return 0.0
        return 1.0 / lifetime_years if year <= lifetime_years else 0.0

    return _fallback_rate(scheme)
