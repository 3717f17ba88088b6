"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results.
Rates are decimals throughout (0.03 for 3%).
"""

import logging
import math
from dataclasses import asdict
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from immosim.calculations import amortization, depreciation, projection, simple
from immosim.config import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


def _clean_floats(value):
    """Replace NaN/inf with None so the response is valid JSON."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: _clean_floats(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_clean_floats(v) for v in value]
    return value


def _loan_rows(schedule) -> List[dict]:
    return [
        {**asdict(entry), "balance_end": entry.balance_end}
        for entry in schedule.values()
    ]


def _check_horizon(horizon_years: Optional[int]):
    max_horizon = get_settings().max_horizon_years
    if horizon_years is not None and horizon_years > max_horizon:
        raise HTTPException(
            status_code=400,
            detail=f"horizon_years must not exceed {max_horizon}",
        )


class ProjectionInput(BaseModel):
    """Input for the year-by-year projection."""

    # Purchase
    building_value: float
    land_value: float
    transfer_tax_rate: float = 0.0
    broker_rate: float = 0.0
    land_registry_rate: float = 0.0
    notary_rate: float = 0.0
    company_cost: float = 0.0
    fitting_up: float = 0.0
    initial_repairs: float = 0.0

    # Value development
    building_loss_rate: float = 0.0
    land_growth_rate: float = 0.0
    construction_cost_growth: float = 0.0

    # Operations
    annual_maintenance: float = 0.0
    maintenance_growth: float = 0.0
    monthly_rent: float
    vacancy_rate: float = 0.0
    rent_growth: float = 0.0
    tax_rate: float = 0.0

    # Financing
    equity: float
    loan_term_years: int = Field(ge=1)
    fix_rate_years: Optional[int] = Field(default=None, ge=0)
    interest_rate_1: float = Field(gt=-1)
    interest_rate_2: Optional[float] = Field(default=None, gt=-1)
    discount_rate: float = 0.0

    # Depreciation
    depreciation_scheme: str = depreciation.DepreciationScheme.LINEAR_2.value
    building_lifetime_years: int = Field(default=50, ge=1)

    start_year: Optional[int] = None
    horizon_years: Optional[int] = Field(default=None, ge=1)

    def to_parameters(self) -> projection.SimulationParameters:
        fields = self.model_dump(exclude={"horizon_years"})
        return projection.SimulationParameters(**fields)


@router.post("/projection")
async def calculate_projection(inputs: ProjectionInput):
    """Calculate the year-by-year projection and return metrics."""
    _check_horizon(inputs.horizon_years)

    try:
        result = projection.simulate(inputs.to_parameters(), inputs.horizon_years)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(
        f"Projection over {result.meta.horizon_years} years, "
        f"equity position {result.kpis.equity_position_end:.2f}"
    )

    return _clean_floats(
        {
            "meta": asdict(result.meta),
            "loan_schedule": _loan_rows(result.loan_schedule),
            "years": [asdict(year) for year in result.years],
            "kpis": asdict(result.kpis),
        }
    )


class SimpleInput(BaseModel):
    """Input for the quick calculator."""

    purchase_price: float
    purchase_cost_rate: float = 0.10
    appreciation_rate: float = 0.02
    selling_cost_rate: float = 0.03

    equity: float
    interest_rate: float = Field(default=0.035, gt=-1)
    loan_term_years: int = Field(default=30, ge=0)
    investment_years: int = Field(default=15, ge=1)

    monthly_rent: float
    vacancy_rate: float = 0.05
    maintenance_rate: float = 0.10
    other_costs_annual: float = 0.0

    tax_rate: float = 0.30
    depreciation_rate: float = 0.03


@router.post("/simple")
async def calculate_simple(inputs: SimpleInput):
    """Run the simplified model."""
    _check_horizon(inputs.investment_years)

    result = simple.simulate_simple(simple.SimpleInputs(**inputs.model_dump()))

    return _clean_floats(asdict(result))


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    loan_amount: float
    loan_term_years: int = Field(ge=1)
    fix_rate_years: Optional[int] = Field(default=None, ge=0)
    interest_rate_1: float = Field(gt=-1)
    interest_rate_2: Optional[float] = Field(default=None, gt=-1)
    horizon_years: Optional[int] = Field(default=None, ge=1)


@router.post("/amortization")
async def calculate_amortization(inputs: AmortizationInput):
    """Generate the annual loan schedule."""
    _check_horizon(inputs.horizon_years)

    fix_rate_years = inputs.fix_rate_years
    if fix_rate_years is None:
        fix_rate_years = inputs.loan_term_years

    schedule = amortization.generate_loan_schedule(
        loan_amount=inputs.loan_amount,
        loan_term_years=inputs.loan_term_years,
        fix_rate_years=fix_rate_years,
        interest_rate_1=inputs.interest_rate_1,
        interest_rate_2=inputs.interest_rate_2,
        horizon_years=inputs.horizon_years,
    )

    return {
        "schedule": _loan_rows(schedule),
        "total_interest": amortization.calculate_total_interest(schedule),
        "total_principal": amortization.calculate_total_principal(schedule),
    }


@router.get("/depreciation-schemes")
async def list_depreciation_schemes():
    """List the supported depreciation schemes."""
    return {
        "schemes": [
            {"name": scheme.name, "label": scheme.value}
            for scheme in depreciation.DepreciationScheme
        ]
    }


@router.get("/depreciation-rate")
async def get_depreciation_rate(
    scheme: str,
    year: int = Query(ge=1),
    lifetime_years: int = Query(default=depreciation.DEFAULT_LIFETIME_YEARS, ge=1),
):
    """Look up the depreciation rate for a scheme and year."""
    resolved = depreciation.resolve_scheme(scheme)

    return {
        "scheme": resolved.value if resolved else scheme,
        "recognized": resolved is not None,
        "year": year,
        "rate": depreciation.depreciation_rate(scheme, year, lifetime_years),
    }
