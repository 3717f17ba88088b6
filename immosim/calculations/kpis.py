"""
Return Metrics

Reduces the year-by-year projection to summary returns for the
selected investment horizon.
"""

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Sequence

from immosim.calculations.irr import calculate_irr

if TYPE_CHECKING:
    from immosim.calculations.projection import YearResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Kpis:
    """Summary returns at the end of the horizon."""

    equity_invested: float
    equity_position_end: float
    roi_on_investment: float
    roe_total: float
    roe_annualized: float  # NaN when total ROE <= -100%
    equity_multiple: float
    property_value_end: float
    rest_debt_start_last_year: float
    remaining_debt_end: float
    cumulative_cashflow: float
    equity_irr: Optional[float] = None


def annualize_return(total_return: float, years: int) -> float:
    """
    Convert a total return over several years to an annual rate.

    Returns NaN if the total return is -100% or worse.
    """
    if total_return <= -1:
        return math.nan
    years = years if years > 0 else 1
    return (1 + total_return) ** (1 / years) - 1


def calculate_equity_irr(
    equity: float,
    annual_cashflows: Sequence[float],
    exit_value: float,
) -> Optional[float]:
    """
    IRR of the investor's equity.

    Cash flows: equity out at year 0, after-tax cash flow each year, and the
    net property value (value less remaining debt) in the final year.

    Returns:
        Annual IRR as decimal, or None if it cannot be calculated
    """
    if not annual_cashflows:
        return None

    flows = [-equity] + list(annual_cashflows)
    flows[-1] += exit_value

    try:
        return calculate_irr(flows)
    except ValueError as e:
        logger.debug(f"Equity IRR not available: {e}")
        return None


def aggregate_kpis(
    years: Sequence["YearResult"],
    total_invest: float,
    equity: float,
    disbursement: float,
    horizon_years: int,
) -> Kpis:
    """
    Calculate the summary KPIs from the final year of the projection.

    Args:
        years: Year results in order, at least one
        total_invest: Total initial investment incl. side costs
        equity: Equity invested
        disbursement: Loan amount paid out
        horizon_years: Number of simulated years

    Returns:
        Kpis for the horizon
    """
    last = years[-1]
    equity_position_end = last.equity_position

    roi_on_investment = equity_position_end / total_invest if total_invest > 0 else 0.0
    roe_total = equity_position_end / equity if equity > 0 else 0.0
    equity_multiple = (equity + equity_position_end) / equity if equity > 0 else 0.0

    remaining_debt_end = disbursement - last.cumulative_principal

    equity_irr = None
    if equity > 0:
        equity_irr = calculate_equity_irr(
            equity,
            [y.cashflow_after_tax for y in years],
            last.property_value - remaining_debt_end,
        )

    return Kpis(
        equity_invested=equity,
        equity_position_end=equity_position_end,
        roi_on_investment=roi_on_investment,
        roe_total=roe_total,
        roe_annualized=annualize_return(roe_total, horizon_years),
        equity_multiple=equity_multiple,
        property_value_end=last.property_value,
        rest_debt_start_last_year=last.rest_debt_start,
        remaining_debt_end=remaining_debt_end,
        cumulative_cashflow=last.cumulative_cashflow,
        equity_irr=equity_irr,
    )
