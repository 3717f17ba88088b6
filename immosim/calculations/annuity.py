"""
Annuity Calculations

Constant periodic payment for a fully amortizing loan,
matching Excel's PMT() sign convention (payments are negative).
"""

RATE_EPSILON = 1e-9


def pmt(rate: float, periods: int, present_value: float) -> float:
    """
    Calculate the constant payment per period.

    Matches Excel's PMT(rate, nper, pv) with fv=0 and type=0.

    Args:
        rate: Interest rate per period as decimal (may be 0)
        periods: Number of periods, must be positive
        present_value: Principal to amortize

    Returns:
        Payment per period (negative number for a positive principal)
    """
    if abs(rate) < RATE_EPSILON:
        # Formula is unstable near zero, fall back to linear amortization
        return -(present_value / periods)

    return -(present_value * rate) / (1 - (1 + rate) ** (-periods))
