"""
Spreadsheet Parity Tests

These tests verify the year-by-year projection against values worked out by
hand from the "Parameter" and "Cash & Assets" sheets of the investment
spreadsheet.
"""

import logging
import math
from dataclasses import replace

import pytest
from immosim.calculations.annuity import pmt
from immosim.calculations.irr import calculate_npv
from immosim.calculations.projection import (
    calculate_maintenance,
    calculate_meta,
    simulate,
)


# =============================================================================
# BENCHMARK DATA
# =============================================================================

# full_params fixture: 320k building, 80k land, 10.57% side costs
FULL_BENCHMARKS = {
    "purchase_price": 400000,
    "side_costs": 43780,
    "total_invest": 458780,
    "financing_need": 368780,
    "disbursement": 368780 / 0.98,
    "depreciation_basis": 363824,
    "property_value_year_1": 413250,
}


class TestBasicScenario:
    """200k building, 50k land, 50k equity, 20 years at 3%, no taxes."""

    def test_horizon_defaults_to_loan_term(self, basic_params):
        result = simulate(basic_params)
        assert result.meta.horizon_years == 20
        assert len(result.years) == 20
        assert [y.year for y in result.years] == list(range(1, 21))

    def test_financing_figures(self, basic_params):
        meta = simulate(basic_params).meta
        assert meta.total_invest == 250000
        assert meta.financing_need == 200000
        assert meta.disbursement == 200000
        assert meta.discount_amount == 0
        assert meta.depreciation_basis == 200000

    def test_year_1(self, basic_params):
        year = simulate(basic_params).years[0]
        assert year.interest_paid == pytest.approx(-6000.0)
        assert year.gross_rent == 12000
        assert year.net_rent == 12000
        assert year.depreciation == pytest.approx(-4000.0)
        assert year.taxable_income == pytest.approx(2000.0)
        assert year.tax_cashflow == pytest.approx(0.0)
        assert year.cashflow_before_tax == pytest.approx(12000 + pmt(0.03, 20, 200000))
        assert year.cashflow_after_tax == year.cashflow_before_tax + year.tax_cashflow
        assert year.calendar_year is None

    def test_equity_position_year_1(self, basic_params):
        """Without growth or taxes the equity gain is rent less interest."""
        year = simulate(basic_params).years[0]
        assert year.property_value == pytest.approx(250000)
        assert year.equity_position == pytest.approx(6000.0)

    def test_equity_position_end(self, basic_params):
        result = simulate(basic_params)
        total_interest = 20 * pmt(0.03, 20, 200000) + 200000
        expected = 20 * 12000 + total_interest
        assert result.kpis.equity_position_end == pytest.approx(expected)

    def test_kpis(self, basic_params):
        result = simulate(basic_params)
        kpis = result.kpis
        position = kpis.equity_position_end

        assert kpis.equity_invested == 50000
        assert kpis.roi_on_investment == pytest.approx(position / 250000)
        assert kpis.roe_total == pytest.approx(position / 50000)
        assert kpis.roe_annualized == pytest.approx((1 + position / 50000) ** (1 / 20) - 1)
        assert kpis.equity_multiple == pytest.approx((50000 + position) / 50000)
        assert kpis.property_value_end == pytest.approx(250000)
        assert abs(kpis.remaining_debt_end) < 1e-6
        assert kpis.rest_debt_start_last_year == result.loan_schedule[20].balance_start
        assert kpis.cumulative_cashflow == result.years[-1].cumulative_cashflow

    def test_equity_irr(self, basic_params):
        result = simulate(basic_params)
        irr = result.kpis.equity_irr
        assert irr is not None
        assert irr > 0

        flows = [-50000] + [y.cashflow_after_tax for y in result.years]
        flows[-1] += result.kpis.property_value_end - result.kpis.remaining_debt_end
        assert calculate_npv(flows, irr) == pytest.approx(0.0, abs=1e-2)

    def test_kpis_without_equity(self, basic_params):
        """Equity-based ratios fall back to 0 instead of dividing by zero."""
        kpis = simulate(replace(basic_params, equity=0)).kpis
        assert kpis.equity_invested == 0
        assert kpis.roe_total == 0.0
        assert kpis.equity_multiple == 0.0
        assert kpis.roe_annualized == 0.0
        assert kpis.equity_irr is None
        assert kpis.roi_on_investment == pytest.approx(kpis.equity_position_end / 250000)

    def test_kpis_without_investment(self, basic_params):
        """A zero purchase price yields a zero ROI and depreciation basis."""
        params = replace(basic_params, building_value=0, land_value=0, equity=0)
        result = simulate(params)
        assert result.meta.total_invest == 0
        assert result.meta.depreciation_basis == 0
        assert result.kpis.roi_on_investment == 0.0
        assert result.kpis.roe_total == 0.0
        assert result.kpis.equity_multiple == 0.0

    def test_loan_schedule_is_read_only(self, basic_params):
        result = simulate(basic_params)
        with pytest.raises(TypeError):
            result.loan_schedule[1] = result.loan_schedule[2]
        with pytest.raises(TypeError):
            del result.loan_schedule[1]

    def test_idempotent(self, basic_params):
        assert simulate(basic_params) == simulate(basic_params)

    def test_horizon_must_be_positive(self, basic_params):
        with pytest.raises(ValueError):
            simulate(basic_params, horizon_years=0)

    def test_short_horizon(self, basic_params):
        result = simulate(basic_params, horizon_years=5)
        assert len(result.years) == 5
        assert result.kpis.remaining_debt_end == pytest.approx(
            result.loan_schedule[5].balance_end
        )
        assert result.kpis.remaining_debt_end > 0

    def test_years_after_loan_term(self, basic_params):
        result = simulate(basic_params, horizon_years=30)
        assert len(result.years) == 30
        for year in result.years[20:]:
            assert year.interest_paid == 0.0
            assert year.principal_paid == 0.0
            assert year.net_rent == 12000
            assert year.cashflow_before_tax == pytest.approx(12000)
            assert year.cumulative_principal == pytest.approx(200000)

    def test_zero_interest_loan(self, basic_params):
        params = replace(basic_params, interest_rate_1=0.0)
        result = simulate(params)
        for year in result.years:
            assert year.principal_paid == -10000.0
        assert result.loan_schedule[20].balance_end == 0.0

    def test_discount_disbursement(self, basic_params):
        """A 5% discount grosses up the loan and is deductible in year 1."""
        params = replace(basic_params, discount_rate=0.05)
        result = simulate(params)
        disbursement = 200000 / 0.95

        assert result.meta.disbursement == pytest.approx(disbursement)
        assert result.meta.discount_amount == pytest.approx(disbursement - 200000)

        year_1, year_2 = result.years[0], result.years[1]
        assert year_1.interest_paid == pytest.approx(-disbursement * 0.03)
        assert year_1.taxable_income == pytest.approx(
            12000 - disbursement * 0.03 - 4000 - (disbursement - 200000)
        )
        assert year_2.taxable_income == pytest.approx(
            12000 + year_2.interest_paid - 4000
        )

    def test_unknown_scheme_warns(self, basic_params, caplog):
        params = replace(basic_params, depreciation_scheme="Sonder-AfA 3,5%")
        with caplog.at_level(logging.WARNING, logger="immosim.calculations.projection"):
            result = simulate(params)
        assert "Unknown depreciation scheme" in caplog.text
        assert result.years[0].depreciation == pytest.approx(-200000 * 0.03)

    def test_legacy_scheme_label(self, basic_params):
        legacy = simulate(replace(basic_params, depreciation_scheme="Linear 2 % p.a."))
        assert legacy == simulate(basic_params)


class TestFullScenario:
    """Scenario using side costs, discount, growth rates and taxes."""

    def test_meta(self, full_params):
        meta = calculate_meta(full_params, 25)
        for key in (
            "purchase_price",
            "side_costs",
            "total_invest",
            "financing_need",
            "disbursement",
            "depreciation_basis",
        ):
            assert getattr(meta, key) == pytest.approx(FULL_BENCHMARKS[key])
        assert meta.start_year == 2024

    def test_calendar_years(self, full_params):
        result = simulate(full_params)
        assert result.years[0].calendar_year == 2025
        assert result.years[-1].calendar_year == 2049

    def test_maintenance_quirk(self, full_params):
        """Year 1 is flat, later years grow with the absolute year number."""
        assert calculate_maintenance(full_params, 1) == -(2400 + 5000)
        assert calculate_maintenance(full_params, 2) == pytest.approx(-2400 * 1.02 ** 2)
        assert calculate_maintenance(full_params, 3) == pytest.approx(-2400 * 1.02 ** 3)

    def test_rent(self, full_params):
        years = simulate(full_params).years
        assert years[0].gross_rent == pytest.approx(17400)
        assert years[0].net_rent == pytest.approx(17400 * 0.97)
        assert years[2].gross_rent == pytest.approx(17400 * 1.02 ** 2)

    def test_depreciation(self, full_params):
        years = simulate(full_params).years
        basis = FULL_BENCHMARKS["depreciation_basis"]
        assert years[0].depreciation == pytest.approx(-basis * 0.05)
        assert years[5].depreciation == pytest.approx(-basis * 0.05)
        assert years[6].depreciation == pytest.approx(-basis * 0.03)

    def test_tax_saving_on_loss(self, full_params):
        year = simulate(full_params).years[0]
        assert year.taxable_income < 0
        assert year.tax_cashflow > 0
        assert year.tax_cashflow == pytest.approx(-0.42 * year.taxable_income)

    def test_cashflow_identities(self, full_params):
        result = simulate(full_params)
        cumulative = 0.0
        for year in result.years:
            assert year.cashflow_before_tax == pytest.approx(
                year.net_rent + year.maintenance + year.interest_paid + year.principal_paid
            )
            assert year.cashflow_after_tax == pytest.approx(
                year.cashflow_before_tax + year.tax_cashflow
            )
            cumulative += year.cashflow_after_tax
            assert year.cumulative_cashflow == pytest.approx(cumulative)
            assert year.wealth_from_cashflow_and_loan == pytest.approx(
                year.cumulative_cashflow + year.cumulative_principal
            )
            assert year.equity_position == pytest.approx(
                year.property_value
                + year.wealth_from_cashflow_and_loan
                - FULL_BENCHMARKS["total_invest"]
            )

    def test_property_value(self, full_params):
        years = simulate(full_params).years
        assert years[0].property_value == pytest.approx(
            FULL_BENCHMARKS["property_value_year_1"]
        )
        assert years[1].property_value == pytest.approx(
            80000 * 1.02 ** 2 + 330000 * 1.005 ** 2
        )

    def test_refinancing_after_fixed_period(self, full_params):
        result = simulate(full_params)
        year_11 = result.years[10]
        assert year_11.interest_paid == pytest.approx(-year_11.rest_debt_start * 0.045)
        assert abs(result.loan_schedule[25].balance_end) < 1e-6

    def test_property_value_independent_of_loan(self, full_params):
        """Value keeps developing after the loan is repaid."""
        years = simulate(full_params, horizon_years=30).years
        for previous, year in zip(years[24:], years[25:]):
            assert year.interest_paid == 0.0
            assert year.principal_paid == 0.0
            assert year.property_value != previous.property_value
            assert year.gross_rent > previous.gross_rent
            assert year.maintenance < previous.maintenance

    def test_kpis_finite(self, full_params):
        kpis = simulate(full_params).kpis
        assert math.isfinite(kpis.roe_annualized)
        assert kpis.roe_total == pytest.approx(kpis.equity_position_end / 90000)
