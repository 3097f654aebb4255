# engine/social_security.py
#
# Social Security retirement, spousal and survivor benefits.
#

from dataclasses import dataclass
from typing import Optional

from utils.ss_utils import EARLIEST_CLAIMING_AGE, get_full_retirement_age, get_ss_multiplier

SPOUSAL_SHARE = 0.5
SURVIVOR_EARLIEST_AGE = 60
SURVIVOR_MAX_REDUCTION = 28.5   # percent at age 60


@dataclass(frozen=True)
class SocialSecurityResult:
    eligible: bool
    monthly_benefit: float
    annual_benefit: float
    adjustment_factor: float
    full_retirement_age: float


@dataclass(frozen=True)
class SpousalBenefitResult:
    spousal_benefit: float      # add-on above the lower earner's own benefit
    own_benefit: float
    total_benefit: float
    eligible_for_spousal: bool


@dataclass(frozen=True)
class SurvivorBenefitResult:
    survivor_benefit: float
    reduction_percentage: float


def calculate_social_security(
    birth_year: int,
    claiming_age: float,
    full_retirement_benefit: float,
    full_retirement_age: Optional[float] = None,
) -> SocialSecurityResult:
    """
    Monthly/annual retirement benefit when claiming at `claiming_age`.

    Args:
        birth_year: Used for the FRA when `full_retirement_age` is not given.
        claiming_age: Age benefits start.
        full_retirement_benefit: Monthly benefit at FRA (the PIA).
        full_retirement_age: Overrides the birth-year FRA table.
    """
    if full_retirement_benefit < 0:
        raise ValueError("Full retirement benefit cannot be negative")

    fra = full_retirement_age if full_retirement_age else get_full_retirement_age(birth_year)

    if claiming_age < EARLIEST_CLAIMING_AGE:
        return SocialSecurityResult(False, 0.0, 0.0, 0.0, fra)

    factor = get_ss_multiplier(claiming_age, fra)
    monthly = full_retirement_benefit * factor
    return SocialSecurityResult(True, monthly, monthly * 12, factor, fra)


def spousal_benefit(own_benefit: float, spouse_benefit: float) -> SpousalBenefitResult:
    """
    Combined benefit for the lower earner of a couple.

    The lower earner receives the higher of their own full benefit or half of
    the higher earner's full benefit; the spousal add-on is the excess over
    their own benefit.
    """
    higher = max(own_benefit, spouse_benefit)
    lower = min(own_benefit, spouse_benefit)
    max_spousal = higher * SPOUSAL_SHARE
    eligible = max_spousal > lower

    return SpousalBenefitResult(
        spousal_benefit=max_spousal - lower if eligible else 0.0,
        own_benefit=lower,
        total_benefit=max(lower, max_spousal),
        eligible_for_spousal=eligible,
    )


def survivor_benefit(
    deceased_benefit: float,
    survivor_claiming_age: float,
    full_retirement_age: float = 67,
) -> SurvivorBenefitResult:
    """100% of the deceased spouse's benefit, reduced up to 28.5% when claimed before FRA."""
    if survivor_claiming_age >= full_retirement_age:
        return SurvivorBenefitResult(deceased_benefit, 0.0)

    months_early = (full_retirement_age - survivor_claiming_age) * 12
    max_reduction_months = (full_retirement_age - SURVIVOR_EARLIEST_AGE) * 12
    reduction = min(SURVIVOR_MAX_REDUCTION, months_early / max_reduction_months * SURVIVOR_MAX_REDUCTION)
    return SurvivorBenefitResult(deceased_benefit * (1 - reduction / 100), reduction)


def cumulative_benefits_by_age(
    monthly_benefit: float,
    claiming_age: int,
    end_age: int,
    cola_rate: float = 0.0,
) -> dict[int, float]:
    """Running total of benefits received by the end of each age."""
    totals = {}
    running = 0.0
    annual = monthly_benefit * 12
    for age in range(EARLIEST_CLAIMING_AGE, end_age + 1):
        if age >= claiming_age:
            running += annual
            annual *= 1 + cola_rate
        totals[age] = running
    return totals


def claiming_break_even_age(
    full_retirement_benefit: float,
    full_retirement_age: float,
    claiming_age: int,
    cola_rate: float = 0.0,
    compare_age: int = EARLIEST_CLAIMING_AGE,
    end_age: int = 100,
) -> Optional[int]:
    """
    First age at which claiming at `claiming_age` has paid out at least as
    much as claiming at `compare_age`. None if it never catches up.
    """
    if claiming_age <= compare_age:
        return int(claiming_age)

    chosen = cumulative_benefits_by_age(
        full_retirement_benefit * get_ss_multiplier(claiming_age, full_retirement_age),
        claiming_age, end_age, cola_rate,
    )
    early = cumulative_benefits_by_age(
        full_retirement_benefit * get_ss_multiplier(compare_age, full_retirement_age),
        compare_age, end_age, cola_rate,
    )
    for age in range(int(claiming_age), end_age + 1):
        if chosen[age] >= early[age]:
            return age
    return None
