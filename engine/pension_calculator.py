# engine/pension_calculator.py
"""
Defined-benefit pension calculator for the four retirement groups.

Benefit = multiplier(group, age) x years of service x average salary,
capped at 80% of the average salary, then reduced for the selected
retirement option (A / B / C).
"""
import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

from config.pension_assumptions import (
    benefit_factors,
    flat_factor_groups,
    group_minimum_ages,
    group_3_any_age_service,
    minimum_vesting_years,
    max_pension_percentage,
    option_b_reductions,
    option_c_percentages_of_a,
    option_c_general_reduction_approx,
    option_c_survivor_percentage,
    retirement_options,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PensionResult:
    eligible: bool
    eligibility_message: str
    benefit_factor: float
    total_benefit_percentage: float
    average_salary: float
    base_annual_pension: float          # after 80% cap, before option
    annual_pension: float
    monthly_pension: float
    benefit_reduction: float            # percent of base given up for the option
    option_factor: float
    survivor_pension: Optional[float]
    capped_at_maximum: bool
    max_pension_allowed: float
    warning: str = ""


@dataclass(frozen=True)
class OptionResult:
    pension: float
    factor: float
    description: str
    survivor_pension: Optional[float]
    warning: str = ""


# --- 1. Lookups ---

def calculate_average_salary(salary_history: Union[float, int, Sequence[float]]) -> float:
    """Mean of the highest three salaries (or of all of them when fewer are supplied)."""
    if isinstance(salary_history, (int, float)):
        salaries = [float(salary_history)]
    else:
        salaries = [float(s) for s in salary_history]

    if not salaries:
        return 0.0
    if any(s < 0 for s in salaries):
        raise ValueError("Salary history cannot contain negative salaries")

    highest = sorted(salaries, reverse=True)[:3]
    return sum(highest) / len(highest)


def _validate_group(group: int) -> int:
    try:
        group = int(group)
    except (TypeError, ValueError):
        raise ValueError(f"Unknown retirement group '{group}'")
    if group not in benefit_factors:
        raise ValueError(f"Unknown retirement group '{group}'")
    return group


def get_benefit_factor(group: int, age: int) -> float:
    """Per-year multiplier for the group at the given (whole-year) age; 0.0 when not available."""
    group = _validate_group(group)
    factors = benefit_factors[group]
    ages = sorted(factors)
    age = int(age)

    if age in factors:
        return factors[age]
    if age > ages[-1]:
        return factors[ages[-1]]
    if age < ages[0]:
        return factors[ages[0]] if group in flat_factor_groups else 0.0

    # Between defined points: highest defined age <= age
    applicable = max(a for a in ages if a <= age)
    return factors[applicable]


def check_eligibility(group: int, age: int, years_of_service: float) -> tuple[bool, str]:
    """Returns (eligible, message) for retiring at `age` with `years_of_service`."""
    group = _validate_group(group)

    if years_of_service < minimum_vesting_years:
        return False, f"Not eligible: requires a minimum of {minimum_vesting_years} years of service."

    if group == 3 and years_of_service >= group_3_any_age_service:
        return True, "Eligible for retirement benefits"

    minimum_age = group_minimum_ages[group]
    if age < minimum_age:
        return False, f"Not eligible: Group {group} requires minimum age {minimum_age}."

    return True, "Eligible for retirement benefits"


def creditable_service(years_of_service: float, service_purchases: Iterable = ()) -> float:
    """Years of service plus any purchased service that has been paid for."""
    purchased = sum(p.years for p in service_purchases if p.is_paid)
    return years_of_service + purchased


# --- 2. Options ---

def _option_b_reduction(member_age: float) -> float:
    if member_age <= 50:
        return option_b_reductions[50]
    if member_age <= 60:
        return option_b_reductions[60]
    return option_b_reductions[70]


def _option_c_factor(member_age: float, beneficiary_age: Optional[int]) -> tuple[float, str]:
    """Option C share of Option A, plus a warning when the table had to be approximated."""
    if beneficiary_age is None or beneficiary_age <= 0:
        return (
            option_c_general_reduction_approx,
            "Valid beneficiary age needed for Option C. Using general approximation.",
        )

    member = round(member_age)
    beneficiary = round(beneficiary_age)
    factor = option_c_percentages_of_a.get((member, beneficiary))
    if factor is not None:
        return factor, ""

    # Nearest tabulated member age, first beneficiary entry for that age
    closest_member = min({m for m, _ in option_c_percentages_of_a}, key=lambda m: abs(m - member))
    key = next(k for k in option_c_percentages_of_a if k[0] == closest_member)
    warning = (
        f"Factor for member age {member}/{beneficiary} not in table. "
        f"Approximated from member age {closest_member}. Official calculation needed."
    )
    return option_c_percentages_of_a[key], warning


def apply_retirement_option(
    base_pension: float,
    option: str,
    member_age: float,
    beneficiary_age: Optional[int] = None,
) -> OptionResult:
    """Applies the option reduction to a capped base allowance."""
    option = str(option).strip().upper()
    if option not in retirement_options:
        raise ValueError(f"Unknown retirement option '{option}'")

    if option == "A":
        return OptionResult(base_pension, 1.0, "Option A: Full Allowance", None)

    if option == "B":
        reduction = _option_b_reduction(member_age)
        factor = 1.0 - reduction
        return OptionResult(
            base_pension * factor,
            factor,
            f"Option B: Annuity Protection (approx. {reduction * 100:.0f}% less)",
            None,
        )

    # C, and D which is modeled as a joint-and-survivor election
    factor, warning = _option_c_factor(member_age, beneficiary_age)
    if option == "D":
        warning = " ".join(filter(None, ["Option D modeled as Option C joint survivor.", warning]))
    pension = base_pension * factor
    if warning:
        logger.warning(warning)

    return OptionResult(
        pension,
        factor,
        f"Option {option}: Joint Survivor (approx. {(1 - factor) * 100:.0f}% less)",
        pension * option_c_survivor_percentage,
        warning,
    )


# --- 3. Main Calculation ---

def _ineligible(message: str, average_salary: float) -> PensionResult:
    return PensionResult(
        eligible=False,
        eligibility_message=message,
        benefit_factor=0.0,
        total_benefit_percentage=0.0,
        average_salary=average_salary,
        base_annual_pension=0.0,
        annual_pension=0.0,
        monthly_pension=0.0,
        benefit_reduction=0.0,
        option_factor=1.0,
        survivor_pension=None,
        capped_at_maximum=False,
        max_pension_allowed=average_salary * max_pension_percentage,
    )


def calculate_pension(
    group: int,
    age: float,
    years_of_service: float,
    salary_history: Union[float, Sequence[float]],
    option: str = "A",
    beneficiary_age: Optional[int] = None,
) -> PensionResult:
    """
    Calculates the annual and monthly pension for retiring at `age`.

    Ineligible members get a zeroed result, not an exception. Clearly
    invalid input (negative salary or service, unknown group/option) raises
    ValueError.
    """
    group = _validate_group(group)
    if years_of_service < 0:
        raise ValueError("Years of service cannot be negative")
    average_salary = calculate_average_salary(salary_history)
    if str(option).strip().upper() not in retirement_options:
        raise ValueError(f"Unknown retirement option '{option}'")

    retirement_age = int(age)
    eligible, message = check_eligibility(group, retirement_age, years_of_service)
    if not eligible:
        return _ineligible(message, average_salary)

    benefit_factor = get_benefit_factor(group, retirement_age)
    if benefit_factor == 0:
        return _ineligible(f"No benefit factor available for age {retirement_age} in Group {group}", average_salary)

    total_benefit_percentage = benefit_factor * years_of_service
    base_annual_pension = average_salary * total_benefit_percentage
    max_pension_allowed = average_salary * max_pension_percentage
    capped = base_annual_pension > max_pension_allowed
    if capped:
        base_annual_pension = max_pension_allowed
        total_benefit_percentage = max_pension_percentage

    option_result = apply_retirement_option(base_annual_pension, option, age, beneficiary_age)
    annual_pension = option_result.pension
    benefit_reduction = (
        (base_annual_pension - annual_pension) / base_annual_pension * 100 if base_annual_pension > 0 else 0.0
    )

    return PensionResult(
        eligible=True,
        eligibility_message=message,
        benefit_factor=benefit_factor,
        total_benefit_percentage=total_benefit_percentage,
        average_salary=average_salary,
        base_annual_pension=base_annual_pension,
        annual_pension=annual_pension,
        monthly_pension=annual_pension / 12,
        benefit_reduction=benefit_reduction,
        option_factor=option_result.factor,
        survivor_pension=option_result.survivor_pension,
        capped_at_maximum=capped,
        max_pension_allowed=max_pension_allowed,
        warning=option_result.warning,
    )
