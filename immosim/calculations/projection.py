"""
Year-by-Year Projection

Annual cash flow, tax and wealth projection for a leveraged rental property
purchase. Mirrors the "Parameter" and "Cash & Assets" sheets of the
investment spreadsheet.

Sign convention: inflows positive, outflows (interest, principal,
maintenance, depreciation) negative.
"""

import logging
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple, Union

from immosim.calculations.amortization import LoanYearEntry, generate_loan_schedule
from immosim.calculations.depreciation import (
    DEFAULT_LIFETIME_YEARS,
    DepreciationScheme,
    depreciation_rate,
    resolve_scheme,
)
from immosim.calculations.kpis import Kpis, aggregate_kpis

logger = logging.getLogger(__name__)

DISBURSEMENT_EPSILON = 1e-12


@dataclass(frozen=True)
class SimulationParameters:
    """Inputs of the projection. All rates are decimals (0.03 for 3%)."""

    # Purchase
    building_value: float
    land_value: float
    equity: float
    loan_term_years: int
    interest_rate_1: float
    monthly_rent: float

    # Acquisition side costs (rates on the purchase price)
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
    vacancy_rate: float = 0.0
    rent_growth: float = 0.0
    tax_rate: float = 0.0

    # Financing
    fix_rate_years: Optional[int] = None  # Defaults to the loan term
    interest_rate_2: Optional[float] = None  # Defaults to interest_rate_1
    discount_rate: float = 0.0  # Disagio as share of the disbursement

    # Depreciation
    depreciation_scheme: Union[DepreciationScheme, str] = DepreciationScheme.LINEAR_2
    building_lifetime_years: int = DEFAULT_LIFETIME_YEARS

    start_year: Optional[int] = None


@dataclass(frozen=True)
class SimulationMeta:
    """Financing figures derived from the parameters."""

    start_year: Optional[int]
    horizon_years: int
    purchase_price: float
    side_costs: float
    total_invest: float
    financing_need: float
    disbursement: float
    discount_amount: float
    depreciation_basis: float


@dataclass(frozen=True)
class YearResult:
    """Projection for a single year."""

    year: int
    calendar_year: Optional[int]
    rest_debt_start: float
    interest_paid: float
    principal_paid: float
    gross_rent: float
    net_rent: float
    maintenance: float
    depreciation: float
    taxable_income: float
    tax_cashflow: float  # Positive = tax saving
    cashflow_before_tax: float
    cashflow_after_tax: float
    cumulative_cashflow: float
    property_value: float
    cumulative_principal: float
    wealth_from_cashflow_and_loan: float
    equity_position: float


@dataclass(frozen=True)
class SimulationResult:
    """Complete result of one projection run."""

    meta: SimulationMeta
    loan_schedule: Mapping[int, LoanYearEntry]
    years: Tuple[YearResult, ...]
    kpis: Kpis


def calculate_meta(params: SimulationParameters, horizon_years: int) -> SimulationMeta:
    """
    Derive purchase and financing figures.

    The loan is disbursed at (1 - discount_rate), so the nominal loan is
    grossed up to cover the financing need and the difference (Disagio) is
    deductible in year 1.
    """
    purchase_price = params.building_value + params.land_value

    side_cost_rate = (
        params.transfer_tax_rate
        + params.broker_rate
        + params.land_registry_rate
        + params.notary_rate
    )
    variable_side_costs = purchase_price * side_cost_rate
    side_costs = variable_side_costs + params.company_cost

    total_invest = (
        purchase_price + params.fitting_up + params.initial_repairs + side_costs
    )
    financing_need = total_invest - params.equity

    disbursement_rate = 1 - params.discount_rate
    if abs(disbursement_rate) > DISBURSEMENT_EPSILON:
        disbursement = financing_need / disbursement_rate
    else:
        disbursement = financing_need
    discount_amount = disbursement - financing_need

    # Only the building's share of the side costs is depreciable, land is not
    building_share = params.building_value / purchase_price if purchase_price > 0 else 0.0
    depreciation_basis = (
        params.building_value
        + params.fitting_up
        + variable_side_costs * building_share
    )

    return SimulationMeta(
        start_year=params.start_year,
        horizon_years=horizon_years,
        purchase_price=purchase_price,
        side_costs=side_costs,
        total_invest=total_invest,
        financing_need=financing_need,
        disbursement=disbursement,
        discount_amount=discount_amount,
        depreciation_basis=depreciation_basis,
    )


def calculate_maintenance(params: SimulationParameters, year: int) -> float:
    """
    Maintenance cost for a year (negative).

    Year 1 carries the flat annual figure plus initial repairs. Later years
    grow with (1 + growth) ** year, using the absolute year rather than the
    elapsed years; this matches the spreadsheet formula and is kept as is.
    """
    if year == 1:
        return -(params.annual_maintenance + params.initial_repairs)
    return -params.annual_maintenance * (1 + params.maintenance_growth) ** year


def simulate(
    params: SimulationParameters, horizon_years: Optional[int] = None
) -> SimulationResult:
    """
    Run the year-by-year projection.

    Args:
        params: Simulation inputs
        horizon_years: Years to simulate (defaults to the loan term)

    Returns:
        SimulationResult with meta, loan schedule, year results and KPIs

    Raises:
        ValueError: If the horizon is shorter than one year
    """
    if horizon_years is None:
        horizon_years = params.loan_term_years
    if horizon_years < 1:
        raise ValueError("horizon_years must be at least 1")

    meta = calculate_meta(params, horizon_years)

    fix_rate_years = params.fix_rate_years
    if fix_rate_years is None:
        fix_rate_years = params.loan_term_years

    loan_schedule = generate_loan_schedule(
        loan_amount=meta.disbursement,
        loan_term_years=params.loan_term_years,
        fix_rate_years=fix_rate_years,
        interest_rate_1=params.interest_rate_1,
        interest_rate_2=params.interest_rate_2,
        horizon_years=horizon_years,
    )

    if resolve_scheme(params.depreciation_scheme) is None:
        logger.warning(
            f"Unknown depreciation scheme '{params.depreciation_scheme}', "
            f"falling back to rate {depreciation_rate(params.depreciation_scheme, 1):.2%}"
        )

    # Property values at purchase
    building_value = params.building_value + params.fitting_up
    land_value = params.land_value

    cumulative_cashflow = 0.0
    years = []

    for year in range(1, horizon_years + 1):
        loan = loan_schedule[year]

        # === RENT ===
        gross_rent = params.monthly_rent * 12 * (1 + params.rent_growth) ** (year - 1)
        net_rent = gross_rent * (1 - params.vacancy_rate)

        # === EXPENSES ===
        maintenance = calculate_maintenance(params, year)
        depreciation = -meta.depreciation_basis * depreciation_rate(
            params.depreciation_scheme, year, params.building_lifetime_years
        )

        # === TAX ===
        taxable_income = net_rent + maintenance + loan.interest + depreciation
        if year == 1:
            taxable_income -= meta.discount_amount
        tax_cashflow = -params.tax_rate * taxable_income

        # === CASH FLOWS ===
        cashflow_before_tax = net_rent + maintenance + loan.interest + loan.principal
        cashflow_after_tax = cashflow_before_tax + tax_cashflow
        cumulative_cashflow += cashflow_after_tax

        # === PROPERTY VALUE ===
        land_value *= 1 + params.land_growth_rate
        building_value *= 1 - params.building_loss_rate + params.construction_cost_growth
        property_value = building_value + land_value

        wealth = cumulative_cashflow + loan.cumulative_principal
        equity_position = property_value + wealth - meta.total_invest

        years.append(
            YearResult(
                year=year,
                calendar_year=(
                    params.start_year + year if params.start_year is not None else None
                ),
                rest_debt_start=loan.balance_start,
                interest_paid=loan.interest,
                principal_paid=loan.principal,
                gross_rent=gross_rent,
                net_rent=net_rent,
                maintenance=maintenance,
                depreciation=depreciation,
                taxable_income=taxable_income,
                tax_cashflow=tax_cashflow,
                cashflow_before_tax=cashflow_before_tax,
                cashflow_after_tax=cashflow_after_tax,
                cumulative_cashflow=cumulative_cashflow,
                property_value=property_value,
                cumulative_principal=loan.cumulative_principal,
                wealth_from_cashflow_and_loan=wealth,
                equity_position=equity_position,
            )
        )

    kpis = aggregate_kpis(
        years,
        total_invest=meta.total_invest,
        equity=params.equity,
        disbursement=meta.disbursement,
        horizon_years=horizon_years,
    )

    logger.debug(
        f"Simulated {horizon_years} years: total_invest={meta.total_invest:.2f} "
        f"equity_position_end={kpis.equity_position_end:.2f} "
        f"roe_total={kpis.roe_total:.4f}"
    )

    return SimulationResult(
        meta=meta,
        loan_schedule=loan_schedule,
        years=tuple(years),
        kpis=kpis,
    )
