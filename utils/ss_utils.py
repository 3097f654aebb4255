# utils/ss_utils.py
from typing import Optional

EARLIEST_CLAIMING_AGE = 62
LATEST_CREDIT_AGE = 70

EARLY_REDUCTION_FIRST_36 = 5 / 9 / 100     # per month, first 36 months early
EARLY_REDUCTION_BEYOND_36 = 5 / 12 / 100   # per month beyond 36
DELAYED_CREDIT_PER_YEAR = 0.08


def get_full_retirement_age(birth_year: int, birth_month: Optional[int] = None) -> float:
    """
    Calculates the Full Retirement Age (FRA) in years based on the birth year
    and birth month according to US Social Security Administration rules.
    Without a month only the birth year is used.
    """
    # Persons born on January 1st refer to the FRA of the previous year
    if birth_month == 1:
        year_for_fra_calc = birth_year - 1
    else:
        year_for_fra_calc = birth_year

    if year_for_fra_calc <= 1937:
        return 65.0
    elif 1938 <= year_for_fra_calc <= 1942:
        months_over_65 = (year_for_fra_calc - 1937) * 2
        return 65.0 + (months_over_65 / 12.0)
    elif 1943 <= year_for_fra_calc <= 1954:
        return 66.0
    elif 1955 <= year_for_fra_calc <= 1959:
        months_over_66 = (year_for_fra_calc - 1954) * 2
        return 66.0 + (months_over_66 / 12.0)
    else:
        return 67.0


def get_ss_multiplier(claiming_age: float, full_retirement_age: float) -> float:
    """
    Benefit at `claiming_age` as a multiple of the FRA benefit.

    Early claiming loses 5/9 of 1% per month for the first 36 months and
    5/12 of 1% for each month beyond. Delayed claiming earns 8% per year,
    with no credit past age 70.
    """
    if claiming_age < full_retirement_age:
        months_early = round((full_retirement_age - claiming_age) * 12)
        first = min(months_early, 36)
        beyond = max(0, months_early - 36)
        return 1.0 - first * EARLY_REDUCTION_FIRST_36 - beyond * EARLY_REDUCTION_BEYOND_36

    credited_age = min(claiming_age, LATEST_CREDIT_AGE)
    years_delayed = max(0.0, credited_age - full_retirement_age)
    return 1.0 + years_delayed * DELAYED_CREDIT_PER_YEAR
