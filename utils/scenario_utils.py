# utils/scenario_utils.py
"""
Helpers for creating, validating and comparing scenarios before they reach
the calculators.
"""
import datetime
import uuid
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping, Optional

from config.scenario_defaults import (
    cola_defaults,
    financial_defaults,
    pension_defaults,
    personal_defaults,
    scenario_templates,
    social_security_defaults,
    tax_defaults,
)
from models import (
    ColaParameters,
    FinancialParameters,
    PensionParameters,
    PersonalParameters,
    RetirementScenario,
    SocialSecurityParameters,
    TaxParameters,
)

PARAMETER_GROUP_ATTRS = ("personal", "pension", "social_security", "financial", "tax", "cola")
GROUP_LABELS = {
    "personal": "Personal",
    "pension": "Pension",
    "social_security": "Social Security",
    "financial": "Financial",
    "tax": "Tax",
    "cola": "COLA",
}
MAJOR_PARAMETERS = ("retirement_age", "claiming_age", "retirement_option", "risk_tolerance")


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class ParameterDifference:
    category: str
    parameter: str
    first_value: Any
    second_value: Any


def generate_scenario_id() -> str:
    return f"scenario_{uuid.uuid4().hex[:12]}"


# =============================================================================
# Construction
# =============================================================================

def _overlay(cls, defaults: Mapping, overrides: Optional[Mapping]):
    names = {f.name for f in fields(cls)}
    values = {k: v for k, v in {**defaults, **(overrides or {})}.items() if k in names}
    return cls(**values)


def create_default_scenario(
    name: str = "Baseline",
    profile: Optional[Mapping[str, Mapping[str, Any]]] = None,
    scenario_id: Optional[str] = None,
    as_of_year: Optional[int] = None,
) -> RetirementScenario:
    """
    Baseline scenario from optional profile data keyed by parameter group
    ("personal", "pension", ...). Missing values fall back to the defaults in
    config.scenario_defaults; a missing birth year is derived from current age.
    """
    profile = profile or {}
    personal = dict(personal_defaults)
    personal.update(profile.get("personal", {}))
    if "birth_year" not in personal:
        year = as_of_year or datetime.date.today().year
        personal["birth_year"] = year - personal["current_age"]

    return RetirementScenario(
        id=scenario_id or generate_scenario_id(),
        name=name,
        description="Default scenario based on your current profile",
        is_baseline=True,
        personal=_overlay(PersonalParameters, personal, None),
        pension=_overlay(PensionParameters, pension_defaults, profile.get("pension")),
        social_security=_overlay(SocialSecurityParameters, social_security_defaults, profile.get("social_security")),
        financial=_overlay(FinancialParameters, financial_defaults, profile.get("financial")),
        tax=_overlay(TaxParameters, tax_defaults, profile.get("tax")),
        cola=_overlay(ColaParameters, cola_defaults, profile.get("cola")),
    )


def apply_overrides(scenario: RetirementScenario, overrides: Mapping[str, Mapping[str, Any]]) -> RetirementScenario:
    """Returns a copy with per-group field overrides merged in ({"personal": {"retirement_age": 62}})."""
    changes = {}
    for attr, values in overrides.items():
        if attr not in PARAMETER_GROUP_ATTRS:
            raise ValueError(f"Unknown parameter group '{attr}'")
        changes[attr] = replace(getattr(scenario, attr), **values)
    return replace(scenario, **changes)


def create_scenario_from_template(
    template_id: str,
    base_name: str,
    base_scenario: RetirementScenario,
    scenario_id: Optional[str] = None,
) -> RetirementScenario:
    template = scenario_templates.get(template_id)
    if template is None:
        raise ValueError(f"Template {template_id} not found")

    overrides = {k: v for k, v in template.items() if k in PARAMETER_GROUP_ATTRS}
    scenario = apply_overrides(base_scenario, overrides)
    return replace(
        scenario,
        id=scenario_id or generate_scenario_id(),
        name=f"{base_name} - {template['name']}",
        description=template["description"],
        is_baseline=False,
    )


def duplicate_scenario(
    original: RetirementScenario,
    new_name: str,
    scenario_id: Optional[str] = None,
    overrides: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> RetirementScenario:
    scenario = apply_overrides(original, overrides or {})
    return replace(scenario, id=scenario_id or generate_scenario_id(), name=new_name, is_baseline=False)


# =============================================================================
# Validation
# =============================================================================

def validate_scenario(scenario: RetirementScenario) -> ValidationResult:
    """Hard errors block calculation; warnings flag unusual but allowed values."""
    result = ValidationResult()
    errors, warnings = result.errors, result.warnings

    personal = scenario.personal
    if personal.retirement_age < 55 or personal.retirement_age > 75:
        errors.append("Retirement age must be between 55 and 75")
    if personal.life_expectancy < personal.retirement_age:
        errors.append("Life expectancy must be greater than retirement age")
    if personal.current_age > personal.retirement_age:
        errors.append("Current age cannot be past retirement age")
    elif personal.current_age == personal.retirement_age:
        warnings.append("Current age is at retirement age")

    pension = scenario.pension
    if pension.retirement_group not in (1, 2, 3, 4):
        errors.append("Retirement group must be 1, 2, 3 or 4")
    if pension.retirement_option not in ("A", "B", "C", "D"):
        errors.append("Retirement option must be A, B, C or D")
    if pension.years_of_service < 0 or pension.years_of_service > 50:
        errors.append("Years of service must be between 0 and 50")
    if pension.average_salary <= 0:
        errors.append("Average salary must be positive")
    if pension.years_of_service < 10:
        warnings.append("Less than 10 years of service may not qualify for full benefits")
    if pension.retirement_option == "C" and pension.beneficiary_age is None:
        warnings.append("Option C without a beneficiary age uses an approximate reduction")

    ss = scenario.social_security
    if ss.claiming_age < 62 or ss.claiming_age > 70:
        errors.append("Social Security claiming age must be between 62 and 70")
    if ss.full_retirement_age < 65 or ss.full_retirement_age > 67:
        errors.append("Full retirement age must be between 65 and 67")
    if ss.full_retirement_benefit <= 0:
        errors.append("Full retirement benefit must be positive")

    financial = scenario.financial
    if financial.expected_return_rate < 0 or financial.expected_return_rate > 0.15:
        warnings.append("Expected return rate seems unusually high or low")
    if financial.withdrawal_rate < 0.02 or financial.withdrawal_rate > 0.08:
        warnings.append("Withdrawal rate outside typical range (2%-8%)")

    cola = scenario.cola
    if cola.pension_cola is not None and (cola.pension_cola < 0 or cola.pension_cola > 0.1):
        warnings.append("Pension COLA rate seems unusually high or low")
    if cola.social_security_cola is not None and (cola.social_security_cola < 0 or cola.social_security_cola > 0.1):
        warnings.append("Social Security COLA rate seems unusually high or low")

    return result


# =============================================================================
# Comparison
# =============================================================================

def diff_scenarios(first: RetirementScenario, second: RetirementScenario) -> List[ParameterDifference]:
    """Every parameter whose value differs between the two scenarios."""
    differences = []
    for attr in PARAMETER_GROUP_ATTRS:
        a, b = asdict(getattr(first, attr)), asdict(getattr(second, attr))
        for key, value in a.items():
            if value != b.get(key):
                differences.append(ParameterDifference(GROUP_LABELS[attr], key, value, b.get(key)))
    return differences


def summarize_differences(differences: List[ParameterDifference]) -> str:
    summary = f"Found {len(differences)} differences between scenarios."
    major = [d.parameter for d in differences if d.parameter in MAJOR_PARAMETERS]
    if major:
        summary += f" Key differences: {', '.join(major)}."
    return summary


def scenario_complexity(scenario: RetirementScenario) -> int:
    """1-10 rough complexity, used to order scenarios for display."""
    complexity = 1
    if scenario.pension.retirement_option != "A":
        complexity += 1
    if scenario.social_security.is_married:
        complexity += 1
    if scenario.financial.risk_tolerance != "moderate":
        complexity += 1
    if scenario.tax.tax_optimization_strategy != "none":
        complexity += 1
    if scenario.financial.roth_ira_balance > 0:
        complexity += 1
    if scenario.financial.traditional_401k_balance > 0:
        complexity += 1
    if scenario.pension.service_purchases:
        complexity += 2
    return min(complexity, 10)
