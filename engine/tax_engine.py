"""
U.S. federal and Massachusetts income tax on retirement income.
It contains the final tax calculation formulas, relying entirely on the
2024 constants provided by utils.tax_utils.
"""
from dataclasses import dataclass, field
from typing import List
import logging

# Configure logging for state tax messages
logger = logging.getLogger(__name__)

from utils.tax_utils import (
    ORDINARY_BRACKETS_2024,
    STANDARD_DEDUCTION_2024,
    SS_TAX_THRESHOLDS,
    SS_FIRST_TIER_RATE,
    SS_SECOND_TIER_RATE,
    MA_TAX_RATE,
    MA_STANDARD_DEDUCTION,
    MA_PERSONAL_EXEMPTION,
    MA_AGE_65_EXEMPTION,
    TaxFilingStatus,
    apply_brackets,
    filers_on_return,
    marginal_rate,
    normalize_filing_status,
)


@dataclass(frozen=True)
class BracketTax:
    rate: float
    income: float
    tax: float


@dataclass(frozen=True)
class TaxCalculationResult:
    gross_income: float
    federal_taxable_income: float
    federal_tax: float
    state_tax: float
    total_tax: float
    net_income: float
    effective_rate: float
    marginal_rate: float
    federal_effective_rate: float
    federal_marginal_rate: float
    social_security_taxable: float
    social_security_taxable_percentage: float
    breakdown: List[BracketTax] = field(default_factory=list)


# --- 1. Internal Helper Functions ---

def taxable_social_security(
    social_security_benefit: float,
    other_income: float,
    filing_status: TaxFilingStatus,
) -> float:
    """
    Portion of the annual SS benefit subject to federal tax.

    Combined income is `other_income` (pension and everything else) plus half
    the benefit. Married-filing-separately has zero thresholds, which makes
    the benefit 85% taxable.
    """
    if social_security_benefit <= 0:
        return 0.0

    tier1, tier2 = SS_TAX_THRESHOLDS[filing_status]
    combined_income = other_income + SS_FIRST_TIER_RATE * social_security_benefit
    half_benefit = SS_FIRST_TIER_RATE * social_security_benefit

    if combined_income <= tier1:
        return 0.0

    if combined_income <= tier2:
        return min(SS_FIRST_TIER_RATE * (combined_income - tier1), half_benefit)

    first_tier_amount = min(half_benefit, SS_FIRST_TIER_RATE * (tier2 - tier1))
    return min(
        SS_SECOND_TIER_RATE * (combined_income - tier2) + first_tier_amount,
        SS_SECOND_TIER_RATE * social_security_benefit,
    )


def _federal_income_tax(taxable_income: float, filing_status: TaxFilingStatus) -> tuple[float, List[BracketTax]]:
    """Progressive federal tax on ordinary income, with the per-bracket breakdown."""
    rows = [BracketTax(rate, income, tax) for rate, income, tax in apply_brackets(
        taxable_income, ORDINARY_BRACKETS_2024[filing_status])]
    return sum(r.tax for r in rows), rows


def _massachusetts_income_tax(
    pension_income: float,
    other_income: float,
    filing_status: TaxFilingStatus,
    age_65_or_older: bool,
) -> float:
    """MA flat tax; Social Security is exempt."""
    filers = filers_on_return(filing_status)
    ma_deduction = MA_STANDARD_DEDUCTION * filers + MA_PERSONAL_EXEMPTION * filers
    if age_65_or_older:
        ma_deduction += MA_AGE_65_EXEMPTION * filers

    taxable_income_ma = max(0.0, pension_income + other_income - ma_deduction)
    return taxable_income_ma * MA_TAX_RATE


# --- 2. Main Orchestrator Function ---

def calculate_retirement_taxes(
    pension_income: float,
    social_security_benefit: float,
    other_income: float,
    filing_status: str = "single",
    age_65_or_older: bool = False,
    state_of_residence: str = "MA",
) -> TaxCalculationResult:
    """
    Calculates annual federal and state income tax on retirement income.

    All amounts are annual dollars. `filing_status` accepts the external
    spellings handled by normalize_filing_status.
    """
    if pension_income < 0 or social_security_benefit < 0 or other_income < 0:
        raise ValueError("Income amounts cannot be negative")

    filing_status = normalize_filing_status(filing_status)

    # 1. Social Security taxability
    ss_taxable = taxable_social_security(
        social_security_benefit, pension_income + other_income, filing_status
    )

    # 2. Federal taxable income
    gross_income = pension_income + social_security_benefit + other_income
    federal_agi = pension_income + ss_taxable + other_income
    federal_taxable_income = max(0.0, federal_agi - STANDARD_DEDUCTION_2024[filing_status])

    federal_tax, breakdown = _federal_income_tax(federal_taxable_income, filing_status)
    federal_marginal = (
        marginal_rate(federal_taxable_income, ORDINARY_BRACKETS_2024[filing_status])
        if federal_taxable_income > 0 else 0.0
    )

    # 3. State Income Tax Calculation (Dispatch based on state_of_residence)
    state_tax = 0.0
    state_rate = 0.0
    state_of_residence = (state_of_residence or "").strip().upper()

    if state_of_residence == "MA":
        state_tax = _massachusetts_income_tax(pension_income, other_income, filing_status, age_65_or_older)
        state_rate = MA_TAX_RATE if state_tax > 0 else 0.0
    else:
        logger.warning(
            f"State Tax Calculations Not Available for '{state_of_residence}'. "
            "Defaulting to $0 state income taxes."
        )

    # 4. Totals
    total_tax = federal_tax + state_tax

    return TaxCalculationResult(
        gross_income=gross_income,
        federal_taxable_income=federal_taxable_income,
        federal_tax=federal_tax,
        state_tax=state_tax,
        total_tax=total_tax,
        net_income=gross_income - total_tax,
        effective_rate=total_tax / gross_income if gross_income > 0 else 0.0,
        marginal_rate=max(federal_marginal, state_rate),
        federal_effective_rate=federal_tax / federal_taxable_income if federal_taxable_income > 0 else 0.0,
        federal_marginal_rate=federal_marginal,
        social_security_taxable=ss_taxable,
        social_security_taxable_percentage=(
            ss_taxable / social_security_benefit * 100 if social_security_benefit > 0 else 0.0
        ),
        breakdown=breakdown,
    )
