"""
Quick Calculator

Simplified rental investment model: constant annuity, flat rent and costs,
depreciation as a share of the purchase price and a sale at the end of the
investment horizon (no capital gains tax).
"""

import math
from dataclasses import dataclass
from typing import Tuple

from immosim.calculations.annuity import pmt


@dataclass(frozen=True)
class SimpleInputs:
    """Inputs of the quick calculator. All rates are decimals."""

    purchase_price: float
    equity: float
    interest_rate: float
    loan_term_years: int
    investment_years: int
    monthly_rent: float
    purchase_cost_rate: float = 0.10
    appreciation_rate: float = 0.02
    selling_cost_rate: float = 0.03
    vacancy_rate: float = 0.05
    maintenance_rate: float = 0.10  # Share of the annual net rent
    other_costs_annual: float = 0.0
    tax_rate: float = 0.30
    depreciation_rate: float = 0.03


@dataclass(frozen=True)
class SimpleYear:
    year: int
    interest: float
    principal: float
    remaining_debt: float
    taxes: float
    cashflow_after_tax: float
    cumulative_cashflow: float
    property_value: float
    roe_to_date: float


@dataclass(frozen=True)
class CostBreakdown:
    """First-year split of the rent."""

    rent: float
    maintenance: float
    other: float
    interest: float
    taxes: float
    net_cashflow: float


@dataclass(frozen=True)
class SimpleResult:
    purchasing_costs: float
    total_initial_cost: float
    loan_amount: float
    annual_debt_service: float
    years: Tuple[SimpleYear, ...]
    year1_cost_breakdown: CostBreakdown
    cumulative_cashflow: float
    property_value_end: float
    net_sale_proceeds: float
    total_profit: float
    total_roe: float
    annualized_roe: float
    equity_multiple: float
    remaining_debt_end: float


def simulate_simple(inputs: SimpleInputs) -> SimpleResult:
    """
    Run the quick calculator.

    The loan covers the purchase price plus purchasing costs less equity.
    Years are simulated up to the shorter of investment horizon and loan term;
    the sale is valued at the end of the investment horizon.
    """
    purchasing_costs = inputs.purchase_price * inputs.purchase_cost_rate
    total_initial_cost = inputs.purchase_price + purchasing_costs
    loan_amount = max(total_initial_cost - inputs.equity, 0.0)

    annual_debt_service = 0.0
    if inputs.interest_rate > 0 and inputs.loan_term_years > 0:
        annual_debt_service = -pmt(inputs.interest_rate, inputs.loan_term_years, loan_amount)
    elif inputs.loan_term_years > 0:
        # Interest-free or negative rate: repay linearly
        annual_debt_service = loan_amount / inputs.loan_term_years

    annual_rent = inputs.monthly_rent * 12 * (1 - inputs.vacancy_rate)
    annual_maintenance = annual_rent * inputs.maintenance_rate
    annual_depreciation = inputs.purchase_price * inputs.depreciation_rate

    simulated_years = min(
        inputs.investment_years, inputs.loan_term_years or inputs.investment_years
    )

    remaining_debt = loan_amount
    cumulative_cashflow = 0.0
    years = []
    breakdown = CostBreakdown(0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    for year in range(1, simulated_years + 1):
        interest = remaining_debt * inputs.interest_rate
        principal = max(annual_debt_service - interest, 0.0)
        remaining_debt = max(remaining_debt - principal, 0.0)

        operating_result = (
            annual_rent - annual_maintenance - inputs.other_costs_annual - interest
        )
        taxable_income = operating_result - annual_depreciation
        taxes = max(taxable_income * inputs.tax_rate, 0.0)
        cashflow_after_tax = operating_result - taxes
        cumulative_cashflow += cashflow_after_tax

        property_value = inputs.purchase_price * (1 + inputs.appreciation_rate) ** year
        equity_at_year = property_value - remaining_debt - inputs.equity + cumulative_cashflow
        roe_to_date = equity_at_year / inputs.equity if inputs.equity > 0 else 0.0

        years.append(
            SimpleYear(
                year=year,
                interest=interest,
                principal=principal,
                remaining_debt=remaining_debt,
                taxes=taxes,
                cashflow_after_tax=cashflow_after_tax,
                cumulative_cashflow=cumulative_cashflow,
                property_value=property_value,
                roe_to_date=roe_to_date,
            )
        )

        if year == 1:
            breakdown = CostBreakdown(
                rent=annual_rent,
                maintenance=annual_maintenance,
                other=inputs.other_costs_annual,
                interest=interest,
                taxes=taxes,
                net_cashflow=cashflow_after_tax,
            )

    # Sale at the end of the investment horizon
    property_value_end = (
        inputs.purchase_price * (1 + inputs.appreciation_rate) ** inputs.investment_years
    )
    selling_costs = property_value_end * inputs.selling_cost_rate
    net_sale_proceeds = property_value_end - selling_costs - remaining_debt

    total_profit = cumulative_cashflow + net_sale_proceeds - inputs.equity

    if inputs.equity > 0:
        total_roe = total_profit / inputs.equity
        equity_multiple = (inputs.equity + total_profit) / inputs.equity
    else:
        total_roe = 0.0
        equity_multiple = 0.0

    if inputs.equity > 0 and inputs.investment_years > 0:
        if equity_multiple > 0:
            annualized_roe = equity_multiple ** (1 / inputs.investment_years) - 1
        else:
            annualized_roe = math.nan
    else:
        annualized_roe = 0.0

    return SimpleResult(
        purchasing_costs=purchasing_costs,
        total_initial_cost=total_initial_cost,
        loan_amount=loan_amount,
        annual_debt_service=annual_debt_service,
        years=tuple(years),
        year1_cost_breakdown=breakdown,
        cumulative_cashflow=cumulative_cashflow,
        property_value_end=property_value_end,
        net_sale_proceeds=net_sale_proceeds,
        total_profit=total_profit,
        total_roe=total_roe,
        annualized_roe=annualized_roe,
        equity_multiple=equity_multiple,
        remaining_debt_end=remaining_debt,
    )
