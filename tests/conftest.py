"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from immosim.calculations.projection import SimulationParameters


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def basic_params():
    """200k building, 50k land, 50k equity, 20-year loan at 3%, no side costs."""
    return SimulationParameters(
        building_value=200000,
        land_value=50000,
        equity=50000,
        loan_term_years=20,
        fix_rate_years=20,
        interest_rate_1=0.03,
        monthly_rent=1000,
        vacancy_rate=0.0,
        rent_growth=0.0,
        tax_rate=0.0,
        depreciation_scheme="linear 2%",
    )


@pytest.fixture
def full_params():
    """Parameter set using every input of the spreadsheet."""
    return SimulationParameters(
        start_year=2024,
        building_value=320000,
        land_value=80000,
        transfer_tax_rate=0.05,
        broker_rate=0.0357,
        land_registry_rate=0.005,
        notary_rate=0.015,
        company_cost=1500,
        fitting_up=10000,
        initial_repairs=5000,
        building_loss_rate=0.01,
        land_growth_rate=0.02,
        construction_cost_growth=0.015,
        annual_maintenance=2400,
        maintenance_growth=0.02,
        monthly_rent=1450,
        vacancy_rate=0.03,
        rent_growth=0.02,
        tax_rate=0.42,
        equity=90000,
        loan_term_years=25,
        fix_rate_years=10,
        discount_rate=0.02,
        interest_rate_1=0.035,
        interest_rate_2=0.045,
        depreciation_scheme="declining 5%+linear 3%",
    )
