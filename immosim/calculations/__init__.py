"""
Financial Calculation Engine

Core calculation modules for rental property investment projections.
All calculations are designed to match the investment spreadsheet.
"""

from immosim.calculations import (
    annuity,
    depreciation,
    amortization,
    irr,
    kpis,
    projection,
    simple,
)

__all__ = [
    "annuity",
    "depreciation",
    "amortization",
    "irr",
    "kpis",
    "projection",
    "simple",
]
