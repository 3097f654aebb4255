# engine/key_metrics.py
#
# Scores a calculated scenario on a 1-10 scale and finds the Social Security
# claiming break-even age.
#

from typing import Optional

from config.market_assumptions import aggressive_return_threshold, high_withdrawal_rate_threshold
from engine.social_security import claiming_break_even_age
from models import RetirementScenario

SCORE_MIN = 1
SCORE_MAX = 10
NEUTRAL_SCORE = 5

ADVANCED_TAX_STRATEGIES = ("advanced", "aggressive")


def _clamp(score: int) -> int:
    return max(SCORE_MIN, min(SCORE_MAX, int(score)))


def calculate_risk_score(
    scenario: RetirementScenario,
    portfolio_longevity: Optional[float] = None,
    horizon_years: Optional[int] = None,
) -> int:
    financial = scenario.financial
    score = NEUTRAL_SCORE

    if financial.risk_tolerance == "aggressive":
        score += 2
    elif financial.risk_tolerance == "conservative":
        score -= 1

    if scenario.personal.retirement_age < 62:
        score += 1
    if financial.expected_return_rate > aggressive_return_threshold:
        score += 1
    if financial.withdrawal_rate > high_withdrawal_rate_threshold:
        score += 1

    # Portfolio that outlives the horizon lowers risk
    if portfolio_longevity is not None and horizon_years and portfolio_longevity >= horizon_years:
        score -= 1

    return _clamp(score)


def calculate_flexibility_score(scenario: RetirementScenario) -> int:
    financial = scenario.financial
    score = NEUTRAL_SCORE
    total_portfolio = financial.total_portfolio

    if total_portfolio > 1_000_000:
        score += 3
    elif total_portfolio > 500_000:
        score += 2
    elif total_portfolio > 200_000:
        score += 1

    if financial.other_retirement_income > 0:
        score += 1
    if scenario.social_security.is_married:
        score += 1
    if financial.risk_tolerance == "aggressive":
        score += 1

    return _clamp(score)


def calculate_optimization_score(
    scenario: RetirementScenario,
    effective_tax_rate: float,
    replacement_ratio: float,
) -> int:
    """Composite of tax strategy, tax efficiency, claiming age and replacement ratio."""
    tax = scenario.tax
    ss = scenario.social_security
    score = NEUTRAL_SCORE

    if tax.tax_optimization_strategy in ADVANCED_TAX_STRATEGIES:
        score += 2
    if tax.roth_conversions:
        score += 1

    if ss.claiming_age >= ss.full_retirement_age:
        score += 1
    if ss.claiming_age > ss.full_retirement_age:
        score += 1

    if effective_tax_rate < 0.15:
        score += 1
    elif effective_tax_rate > 0.25:
        score -= 1

    if replacement_ratio >= 0.8:
        score += 1
    elif replacement_ratio < 0.6:
        score -= 1

    return _clamp(score)


def calculate_break_even_age(scenario: RetirementScenario, social_security_cola: float = 0.0) -> int:
    """
    Age at which claiming at the chosen age has paid out as much as claiming
    at 62. Claiming at 62 (or no benefit) breaks even immediately; a delay
    that never catches up reports life expectancy.
    """
    ss = scenario.social_security
    if ss.full_retirement_benefit <= 0:
        return int(ss.claiming_age)

    age = claiming_break_even_age(
        ss.full_retirement_benefit,
        ss.full_retirement_age,
        ss.claiming_age,
        cola_rate=social_security_cola,
    )
    return age if age is not None else int(scenario.personal.life_expectancy)
