# models.py
from dataclasses import dataclass, field
from typing import List, Optional


# =============================================================================
# Scenario inputs
# =============================================================================

@dataclass(frozen=True)
class PersonalParameters:
    current_age: int
    retirement_age: int
    life_expectancy: int
    birth_year: int


@dataclass(frozen=True)
class ServicePurchase:
    type: str           # military / outOfState / leave / other
    years: float
    cost: float = 0.0
    is_paid: bool = False


@dataclass(frozen=True)
class PensionParameters:
    retirement_group: int
    years_of_service: float
    average_salary: float
    retirement_option: str = "A"
    beneficiary_age: Optional[int] = None
    service_purchases: tuple = ()
    # Optional highest-salary years; average_salary is used when empty
    salary_history: tuple = ()


@dataclass(frozen=True)
class SocialSecurityParameters:
    claiming_age: int
    full_retirement_age: float
    full_retirement_benefit: float          # monthly, at FRA
    early_retirement_benefit: float = 0.0
    delayed_retirement_benefit: float = 0.0

    # Spouse
    is_married: bool = False
    spouse_full_retirement_benefit: Optional[float] = None
    spouse_full_retirement_age: Optional[float] = None
    spouse_claiming_age: Optional[int] = None
    spouse_age: Optional[int] = None


@dataclass(frozen=True)
class FinancialParameters:
    other_retirement_income: float = 0.0
    roth_ira_balance: float = 0.0
    traditional_401k_balance: float = 0.0
    traditional_ira_balance: float = 0.0
    savings_account_balance: float = 0.0

    # Investment assumptions
    expected_return_rate: float = 0.06
    inflation_rate: float = 0.025
    risk_tolerance: str = "moderate"

    # Withdrawal strategy
    withdrawal_strategy: str = "percentage"
    withdrawal_rate: float = 0.04

    # Healthcare
    estimated_medicare_premiums: float = 174.70
    long_term_care_insurance: bool = False
    healthcare_cost_inflation: float = 0.05

    @property
    def total_portfolio(self) -> float:
        return (
            self.roth_ira_balance
            + self.traditional_401k_balance
            + self.traditional_ira_balance
            + self.savings_account_balance
        )


@dataclass(frozen=True)
class TaxParameters:
    filing_status: str = "single"
    state_of_residence: str = "MA"
    tax_optimization_strategy: str = "none"
    roth_conversions: bool = False
    tax_loss_harvesting: bool = False


@dataclass(frozen=True)
class ColaParameters:
    # None -> resolved from the cola_scenario preset
    pension_cola: Optional[float] = 0.03
    social_security_cola: Optional[float] = 0.025
    cola_scenario: str = "moderate"


@dataclass(frozen=True)
class RetirementScenario:
    id: str
    personal: PersonalParameters
    pension: PensionParameters
    social_security: SocialSecurityParameters
    financial: FinancialParameters = field(default_factory=FinancialParameters)
    tax: TaxParameters = field(default_factory=TaxParameters)
    cola: ColaParameters = field(default_factory=ColaParameters)
    name: str = ""
    description: str = ""
    is_baseline: bool = False


# =============================================================================
# Projection rows
# =============================================================================

@dataclass(frozen=True)
class ProjectionYear:
    age: int
    year: int
    years_of_service: float
    benefit_factor: float               # cumulative multiplier (factor x service), capped at 0.80
    pension_with_option: float          # pre-COLA, post-option base
    cola_adjustment: float              # cumulative COLA dollars this year
    total_pension_annual: float
    total_pension_monthly: float
    social_security_annual: float
    social_security_monthly: float
    portfolio_balance: float
    portfolio_withdrawal: float
    other_income: float
    combined_total_annual: float
    combined_total_monthly: float
    capped_at_80_percent: bool


# =============================================================================
# Results
# =============================================================================

@dataclass
class PensionBenefits:
    monthly_benefit: float
    annual_benefit: float
    lifetime_benefits: float
    benefit_reduction: float            # percent of the base given up for the option
    survivor_pension: Optional[float] = None


@dataclass
class SocialSecurityBenefits:
    monthly_benefit: float
    annual_benefit: float
    lifetime_benefits: float
    spousal_benefit: Optional[float] = None
    survivor_benefit: Optional[float] = None


@dataclass
class IncomeProjections:
    total_monthly_income: float
    total_annual_income: float
    net_after_tax_income: float
    replacement_ratio: float
    yearly_projections: List[ProjectionYear] = field(default_factory=list)


@dataclass
class TaxAnalysis:
    annual_tax_burden: float
    effective_tax_rate: float
    marginal_tax_rate: float
    federal_tax: float
    state_tax: float
    social_security_tax: float          # taxable portion of the SS benefit


@dataclass
class PortfolioAnalysis:
    initial_balance: float
    final_balance: float
    total_withdrawals: float
    portfolio_longevity: float
    probability_of_success: float


@dataclass
class KeyMetrics:
    total_lifetime_income: float
    break_even_age: int
    risk_score: int
    flexibility_score: int
    optimization_score: int


@dataclass
class ScenarioResults:
    scenario_id: str
    pension_benefits: PensionBenefits
    social_security_benefits: SocialSecurityBenefits
    income_projections: IncomeProjections
    tax_analysis: TaxAnalysis
    key_metrics: KeyMetrics
    portfolio_analysis: Optional[PortfolioAnalysis] = None
    calculated_at: Optional[str] = None
