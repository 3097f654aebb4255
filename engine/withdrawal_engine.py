# withdrawal_engine.py

import logging
from dataclasses import dataclass

import numpy as np

from config.market_assumptions import (
    success_probability_sustained,
    success_probability_depleted,
    guardrail_band,
    guardrail_max_raise,
    guardrail_max_cut,
)

logger = logging.getLogger(__name__)

WITHDRAWAL_STRATEGIES = ("percentage", "fixed", "dynamic", "bucket")


# Handles the year-by-year drawdown of the supplemental portfolio
#
@dataclass(frozen=True, eq=False)
class PortfolioSimulation:
    """
    Deterministic drawdown of a single pooled portfolio.

    yearly_balances[i] is the end-of-year balance and yearly_withdrawals[i]
    the amount taken during year i. probability_of_success is a fixed
    estimate keyed off whether the money lasted, not a Monte Carlo result.
    """
    yearly_balances: np.ndarray
    yearly_withdrawals: np.ndarray
    longevity_years: int
    probability_of_success: float
    initial_balance: float = 0.0

    @property
    def final_balance(self) -> float:
        return float(self.yearly_balances[-1]) if len(self.yearly_balances) else 0.0

    @property
    def total_withdrawals(self) -> float:
        return float(self.yearly_withdrawals.sum())

    @property
    def is_empty(self) -> bool:
        return self.initial_balance <= 0


def _guardrail_withdrawal(
    previous_withdrawal: float,
    balance: float,
    initial_rate: float,
    inflation_rate: float,
) -> float:
    """Inflates last year's withdrawal, then cuts or raises it when the current rate leaves the band."""
    withdrawal = previous_withdrawal * (1 + inflation_rate)
    if balance <= 0:
        return withdrawal

    current_rate = withdrawal / balance
    ceiling = initial_rate * (1 + guardrail_band)
    floor = initial_rate * (1 - guardrail_band)

    if current_rate > ceiling:
        withdrawal *= 1 - guardrail_max_cut
    elif current_rate < floor:
        withdrawal *= 1 + guardrail_max_raise
    return withdrawal


def simulate_portfolio(
    initial_balance: float,
    return_rate: float,
    inflation_rate: float,
    withdrawal_rate: float,
    strategy: str = "percentage",
    horizon_years: int = 30,
) -> PortfolioSimulation:
    """
    Simulates the portfolio balance under a withdrawal strategy.

    Strategies:
        percentage: withdraw `withdrawal_rate` of the current balance each year.
        fixed: withdraw `withdrawal_rate` of the initial balance, grown with inflation.
        dynamic: fixed, with guardrail cuts/raises when the rate drifts out of band.
        bucket: not modeled separately; treated as percentage.

    Each year: balance = balance * (1 + return_rate) - withdrawal, with the
    withdrawal limited to what is available and the balance floored at zero.
    """
    horizon_years = max(0, int(horizon_years))
    balances = np.zeros(horizon_years)
    withdrawals = np.zeros(horizon_years)

    if initial_balance is None or initial_balance <= 0:
        return PortfolioSimulation(balances, withdrawals, 0, 0.0, 0.0)

    strategy = (strategy or "percentage").strip().lower()
    if strategy not in WITHDRAWAL_STRATEGIES:
        raise ValueError(f"Unknown withdrawal strategy '{strategy}'")
    if strategy == "bucket":
        logger.warning("Bucket withdrawal strategy is modeled as a percentage withdrawal.")
        strategy = "percentage"

    balance = float(initial_balance)
    planned = initial_balance * withdrawal_rate
    longevity = horizon_years

    for year in range(horizon_years):
        if strategy == "percentage":
            desired = balance * withdrawal_rate
        elif strategy == "fixed":
            desired = planned * (1 + inflation_rate) ** year
        else:
            if year > 0:
                planned = _guardrail_withdrawal(planned, balance, withdrawal_rate, inflation_rate)
            desired = planned

        grown = balance * (1 + return_rate)
        withdrawal = min(desired, grown)
        balance = max(0.0, grown - withdrawal)

        withdrawals[year] = withdrawal
        balances[year] = balance

        if balance <= 0 and longevity == horizon_years:
            longevity = year + 1
            logger.debug(f"Portfolio depleted in year {longevity} of {horizon_years}")

    probability = success_probability_sustained if longevity >= horizon_years else success_probability_depleted
    return PortfolioSimulation(balances, withdrawals, longevity, probability, float(initial_balance))
