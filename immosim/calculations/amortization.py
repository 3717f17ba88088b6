"""
Loan Amortization Calculations

Annual annuity schedule with an interest rate change at the end of the
fixed-rate period. Signs follow Excel: interest, payment and principal
are negative (cash leaving the investor).
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from immosim.calculations.annuity import pmt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoanYearEntry:
    """One year of the loan schedule."""

    year: int
    balance_start: float  # Outstanding balance at start of year
    interest: float
    payment: float  # Annuity (interest + principal)
    principal: float
    cumulative_principal: float  # Total principal repaid so far (positive)

    @property
    def balance_end(self) -> float:
        """Outstanding balance after this year's payment."""
        return self.balance_start + self.principal


def _amortize_phase(
    schedule: Dict[int, LoanYearEntry],
    first_year: int,
    years: int,
    balance: float,
    rate: float,
    payment: float,
    cumulative_principal: float,
):
    """Append `years` rows at a constant annuity, returning the closing state."""
    for year in range(first_year, first_year + years):
        balance_start = balance
        interest = -balance_start * rate
        principal = payment - interest
        balance += principal
        cumulative_principal -= principal

        schedule[year] = LoanYearEntry(
            year=year,
            balance_start=balance_start,
            interest=interest,
            payment=payment,
            principal=principal,
            cumulative_principal=cumulative_principal,
        )

    return balance, cumulative_principal


def generate_loan_schedule(
    loan_amount: float,
    loan_term_years: int,
    fix_rate_years: int,
    interest_rate_1: float,
    interest_rate_2: Optional[float] = None,
    horizon_years: Optional[int] = None,
) -> Mapping[int, LoanYearEntry]:
    """
    Generate the annual loan schedule.

    During the fixed-rate period the loan is amortized over the full term at
    interest_rate_1. At the end of the period the remaining balance is
    re-amortized over the remaining term at interest_rate_2. Years after the
    loan term (up to the horizon) carry zero interest and principal.

    Args:
        loan_amount: Disbursed loan amount
        loan_term_years: Total loan term in years
        fix_rate_years: Fixed-rate period in years, capped at the loan term
        interest_rate_1: Annual rate during the fixed-rate period
        interest_rate_2: Annual rate after it (defaults to interest_rate_1)
        horizon_years: Years to produce rows for (defaults to loan term)

    Returns:
        Read-only mapping of year (1-based) to LoanYearEntry, in year order
    """
    if interest_rate_2 is None:
        interest_rate_2 = interest_rate_1
    if horizon_years is None:
        horizon_years = loan_term_years

    loan_years = max(loan_term_years, 0)
    first_phase_years = max(min(fix_rate_years, loan_years), 0)
    remaining_years = loan_years - first_phase_years

    schedule: Dict[int, LoanYearEntry] = {}
    balance = loan_amount
    cumulative_principal = 0.0

    # Phase 1: fixed-rate period
    if first_phase_years > 0:
        # Payment is based on the full term, not just the fixed period
        balance, cumulative_principal = _amortize_phase(
            schedule,
            first_year=1,
            years=first_phase_years,
            balance=balance,
            rate=interest_rate_1,
            payment=pmt(interest_rate_1, loan_years, loan_amount),
            cumulative_principal=cumulative_principal,
        )

    # Phase 2: follow-up financing of the remaining balance
    if remaining_years > 0:
        balance, cumulative_principal = _amortize_phase(
            schedule,
            first_year=first_phase_years + 1,
            years=remaining_years,
            balance=balance,
            rate=interest_rate_2,
            payment=pmt(interest_rate_2, remaining_years, balance),
            cumulative_principal=cumulative_principal,
        )

    # Loan fully repaid, nothing left to pay
    for year in range(loan_years + 1, horizon_years + 1):
        schedule[year] = LoanYearEntry(
            year=year,
            balance_start=0.0,
            interest=0.0,
            payment=0.0,
            principal=0.0,
            cumulative_principal=cumulative_principal,
        )

    logger.debug(
        f"Loan schedule: amount={loan_amount:.2f} term={loan_years} "
        f"fixed={first_phase_years} rows={len(schedule)} "
        f"closing_balance={balance:.2f}"
    )

    return MappingProxyType(schedule)


def calculate_total_interest(schedule: Mapping[int, LoanYearEntry]) -> float:
    """Total interest paid over the schedule (negative number)."""
    return sum(entry.interest for entry in schedule.values())


def calculate_total_principal(schedule: Mapping[int, LoanYearEntry]) -> float:
    """Total principal paid over the schedule (negative number)."""
    return sum(entry.principal for entry in schedule.values())
