"""
IRR and NPV Calculations

Annual IRR for the equity cash flows of a projection. NPV is a polynomial
in the discount factor v = 1 / (1 + rate), so the IRR is taken from its
positive real roots.
"""

from typing import Sequence

import numpy as np

DEFAULT_GUESS = 0.1
IMAGINARY_TOLERANCE = 1e-9


def calculate_npv(cash_flows: Sequence[float], discount_rate: float) -> float:
    """
    Calculate NPV (Net Present Value) of cash flows.

    The first cash flow is at period 0 and is not discounted.

    Args:
        cash_flows: Array of cash flows (negative = outflow, positive = inflow)
        discount_rate: Discount rate per period (e.g., 0.10 for 10%)

    Returns:
        NPV value
    """
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows))
    return float(np.sum(flows / (1 + discount_rate) ** periods))


def calculate_irr(cash_flows: Sequence[float], guess: float = DEFAULT_GUESS) -> float:
    """
    Calculate IRR (Internal Rate of Return).

    Solves sum(cf_t * v ** t) = 0 for the discount factor v. Only roots with
    v > 0 (rate > -100%) are valid; if the series has several, the one
    closest to `guess` is returned.

    Args:
        cash_flows: Array of periodic cash flows
        guess: Rate used to pick among several solutions

    Returns:
        IRR per period as decimal (e.g., 0.15 for 15%)

    Raises:
        ValueError: If IRR cannot be calculated
    """
    flows = np.asarray(cash_flows, dtype=float)

    if flows.size < 2:
        raise ValueError("At least 2 cash flows required")
    if not (flows > 0).any() or not (flows < 0).any():
        raise ValueError("Cash flows must contain both positive and negative values")

    # np.roots expects the highest power first
    roots = np.roots(flows[::-1])
    factors = roots[np.abs(roots.imag) < IMAGINARY_TOLERANCE].real
    factors = factors[factors > 0]

    if factors.size == 0:
        raise ValueError("IRR calculation failed: no real solution above -100%")

    rates = 1 / factors - 1
    return float(rates[np.argmin(np.abs(rates - guess))])
