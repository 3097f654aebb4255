# utils/tax_utils.py
import numpy as np
from typing import Dict, List, Literal, Tuple

# Define the acceptable set of filing statuses for type hinting
TaxFilingStatus = Literal["single", "married_filing_jointly", "married_separate", "head_of_household"]
TAX_YEAR = 2024

# =============================================================================
# 1. Federal Ordinary Income Tax Brackets (2024)
# =============================================================================

ORDINARY_BRACKETS_2024: Dict[TaxFilingStatus, List[Tuple[float, float, float]]] = {
    "single": [
        (0, 11_600, 0.10), (11_600, 47_150, 0.12), (47_150, 100_525, 0.22),
        (100_525, 191_950, 0.24), (191_950, 243_725, 0.32), (243_725, 609_350, 0.35),
        (609_350, np.inf, 0.37),
    ],
    "married_filing_jointly": [
        (0, 23_200, 0.10), (23_200, 94_300, 0.12), (94_300, 201_050, 0.22),
        (201_050, 383_900, 0.24), (383_900, 487_450, 0.32), (487_450, 731_200, 0.35),
        (731_200, np.inf, 0.37),
    ],
    "married_separate": [
        (0, 11_600, 0.10), (11_600, 47_150, 0.12), (47_150, 100_525, 0.22),
        (100_525, 191_950, 0.24), (191_950, 243_725, 0.32), (243_725, 365_600, 0.35),
        (365_600, np.inf, 0.37),
    ],
    "head_of_household": [
        (0, 16_550, 0.10), (16_550, 63_100, 0.12), (63_100, 100_500, 0.22),
        (100_500, 191_950, 0.24), (191_950, 243_700, 0.32), (243_700, 609_350, 0.35),
        (609_350, np.inf, 0.37),
    ],
}

# =============================================================================
# 2. Federal Standard Deduction (2024)
# =============================================================================
STANDARD_DEDUCTION_2024: Dict[TaxFilingStatus, float] = {
    "single": 14_600,
    "married_filing_jointly": 29_200,
    "married_separate": 14_600,
    "head_of_household": 21_900,
}

# =============================================================================
# 3. Social Security Taxation Thresholds (Statutory and NOT indexed)
# =============================================================================
# (no-tax threshold, partial-tax threshold) on combined income
SS_TAX_THRESHOLDS: Dict[str, Tuple[float, float]] = {
    "single": (25_000, 34_000),
    "head_of_household": (25_000, 34_000),
    "married_filing_jointly": (32_000, 44_000),
    # almost always 85% if lived together anytime during year
    "married_separate": (0, 0),
}
SS_FIRST_TIER_RATE = 0.50
SS_SECOND_TIER_RATE = 0.85

# =============================================================================
# 4. Massachusetts (MA) Constants
# =============================================================================
MA_TAX_RATE = 0.05
MA_STANDARD_DEDUCTION = 4_400        # per filer
MA_PERSONAL_EXEMPTION = 4_400        # per person
MA_AGE_65_EXEMPTION = 700            # per person aged 65+


def normalize_filing_status(filing_status: str) -> TaxFilingStatus:
    """Maps external spellings (marriedJoint, married, ...) onto TaxFilingStatus."""
    key = str(filing_status or "single").strip()
    aliases = {
        "single": "single",
        "married": "married_filing_jointly",
        "marriedjoint": "married_filing_jointly",
        "marriedfilingjointly": "married_filing_jointly",
        "married_joint": "married_filing_jointly",
        "married_filing_jointly": "married_filing_jointly",
        "marriedseparate": "married_separate",
        "marriedfilingseparately": "married_separate",
        "married_separate": "married_separate",
        "headofhousehold": "head_of_household",
        "head_of_household": "head_of_household",
    }
    normalized = aliases.get(key.lower()) or aliases.get(key.lower().replace("_", ""))
    if normalized is None:
        raise ValueError(f"Unknown filing status '{filing_status}'")
    return normalized


def filers_on_return(filing_status: TaxFilingStatus) -> int:
    return 2 if filing_status == "married_filing_jointly" else 1


def apply_brackets(amount: float, brackets: List[Tuple[float, float, float]]) -> List[Tuple[float, float, float]]:
    """
    Splits an amount across progressive brackets.

    Returns:
        List of (rate, income_in_bracket, tax_in_bracket) for every bracket touched.
    """
    rows = []
    for lower, upper, rate in brackets:
        if amount <= lower:
            break
        income = min(amount, upper) - lower
        rows.append((rate, income, income * rate))
        if amount <= upper:
            break
    return rows


def marginal_rate(amount: float, brackets: List[Tuple[float, float, float]]) -> float:
    """Rate of the bracket holding the top dollar of `amount`."""
    for lower, upper, rate in brackets:
        if amount <= upper:
            return rate
    return brackets[-1][2]
