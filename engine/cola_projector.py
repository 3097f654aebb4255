# engine/cola_projector.py
"""
Year-by-year benefit projection with cost-of-living adjustments and the
80%-of-salary cap.

Pension COLA is paid on the current total allowance but only on the first
$13,000 of it, and compounds from year to year. Social Security COLA applies
to the full benefit from the second year of payment.
"""
import logging
from typing import Dict, List, Optional, Tuple

from config.market_assumptions import cola_scenarios
from config.pension_assumptions import (
    benefit_factors,
    group_max_projection_ages,
    max_pension_percentage,
    pension_cola_base_amount,
    pension_cola_default_rate,
)
from engine.pension_calculator import PensionResult, calculate_pension, creditable_service
from engine.social_security import SocialSecurityResult
from engine.withdrawal_engine import PortfolioSimulation
from models import ColaParameters, ProjectionYear, RetirementScenario

logger = logging.getLogger(__name__)


# =============================================================================
# 1. COLA helpers
# =============================================================================

def resolve_cola_rates(cola: ColaParameters) -> Tuple[float, float]:
    """(pension_rate, social_security_rate); a None rate falls back to the cola_scenario preset."""
    preset = cola_scenarios.get(cola.cola_scenario)
    if preset is None:
        logger.warning(f"Unknown COLA scenario '{cola.cola_scenario}'. Using 'moderate'.")
        preset = cola_scenarios["moderate"]

    pension_rate = cola.pension_cola if cola.pension_cola is not None else preset["pension_cola"]
    ss_rate = cola.social_security_cola if cola.social_security_cola is not None else preset["social_security_cola"]
    return pension_rate, ss_rate


def calculate_pension_cola(
    annual_pension: float,
    rate: float = pension_cola_default_rate,
    base_amount: float = pension_cola_base_amount,
) -> float:
    """One year's COLA dollar increase: rate x the first `base_amount` of the allowance."""
    return min(max(annual_pension, 0.0), base_amount) * rate


def compound_pension_cola(
    annual_pension: float,
    years: int,
    rate: float = pension_cola_default_rate,
    base_amount: float = pension_cola_base_amount,
) -> float:
    """Allowance after `years` of cumulative COLA increases."""
    total = annual_pension
    for _ in range(max(0, years)):
        total += calculate_pension_cola(total, rate, base_amount)
    return total


# =============================================================================
# 2. Retirement projection
# =============================================================================

def project_benefits(
    pension: PensionResult,
    social_security: SocialSecurityResult,
    scenario: RetirementScenario,
    portfolio: Optional[PortfolioSimulation] = None,
) -> List[ProjectionYear]:
    """
    One ProjectionYear per age from retirement_age to life_expectancy - 1.

    Args:
        pension: Pension result at the scenario's retirement age.
        social_security: Benefit at the scenario's claiming age (year-one dollars).
        scenario: Supplies ages, service, salary, other income and COLA rates.
        portfolio: Optional drawdown; year i of the simulation lines up with row i.
    """
    personal = scenario.personal
    pension_rate, ss_rate = resolve_cola_rates(scenario.cola)

    service = creditable_service(scenario.pension.years_of_service, scenario.pension.service_purchases)
    average_salary = pension.average_salary or scenario.pension.average_salary
    max_pension = average_salary * max_pension_percentage
    claiming_age = scenario.social_security.claiming_age
    other_income = scenario.financial.other_retirement_income

    rows = []
    cola_adjustment = 0.0
    total_pension = 0.0

    for i, age in enumerate(range(personal.retirement_age, personal.life_expectancy)):
        # Cap re-checked every year against the post-option base
        base = pension.annual_pension
        capped = pension.capped_at_maximum or base > max_pension
        pension_with_option = min(base, max_pension)
        benefit_factor = min(pension.benefit_factor * service, max_pension_percentage)

        if i == 0:
            total_pension = pension_with_option
        else:
            increase = calculate_pension_cola(total_pension, pension_rate)
            cola_adjustment += increase
            total_pension += increase

        if age >= claiming_age:
            ss_annual = social_security.annual_benefit * (1 + ss_rate) ** (age - claiming_age)
        else:
            ss_annual = 0.0

        if portfolio is not None and i < len(portfolio.yearly_withdrawals):
            portfolio_balance = float(portfolio.yearly_balances[i])
            portfolio_withdrawal = float(portfolio.yearly_withdrawals[i])
        else:
            portfolio_balance = 0.0
            portfolio_withdrawal = 0.0

        combined = total_pension + ss_annual + portfolio_withdrawal + other_income

        rows.append(ProjectionYear(
            age=age,
            year=personal.birth_year + age,
            years_of_service=service,
            benefit_factor=benefit_factor,
            pension_with_option=pension_with_option,
            cola_adjustment=cola_adjustment,
            total_pension_annual=total_pension,
            total_pension_monthly=total_pension / 12,
            social_security_annual=ss_annual,
            social_security_monthly=ss_annual / 12,
            portfolio_balance=portfolio_balance,
            portfolio_withdrawal=portfolio_withdrawal,
            other_income=other_income,
            combined_total_annual=combined,
            combined_total_monthly=combined / 12,
            capped_at_80_percent=capped,
        ))

    return rows


# =============================================================================
# 3. "Retire at each age" table
# =============================================================================

def generate_service_projection_table(
    group: int,
    current_age: int,
    current_years_of_service: float,
    average_salary: float,
    option: str = "A",
    beneficiary_age: Optional[int] = None,
    social_security_claiming_age: int = 67,
    social_security_annual: float = 0.0,
    birth_year: int = 0,
    end_age: Optional[int] = None,
) -> List[ProjectionYear]:
    """
    One row per candidate retirement age, with service growing by a year per
    year of continued work. Ineligible ages are skipped. The table stops at
    the group's last projection age, or at the first age where the 80% cap
    binds once the multiplier has topped out.
    """
    end_age = end_age or group_max_projection_ages[int(group)]
    top_factor = max(benefit_factors[int(group)].values())
    rows = []

    for age in range(current_age, end_age + 1):
        service = current_years_of_service + (age - current_age)
        result = calculate_pension(group, age, service, average_salary, option, beneficiary_age)
        if not result.eligible:
            continue

        ss_annual = social_security_annual if age >= social_security_claiming_age else 0.0
        combined = result.annual_pension + ss_annual
        rows.append(ProjectionYear(
            age=age,
            year=birth_year + age if birth_year else 0,
            years_of_service=service,
            benefit_factor=result.total_benefit_percentage,
            pension_with_option=result.annual_pension,
            cola_adjustment=0.0,
            total_pension_annual=result.annual_pension,
            total_pension_monthly=result.monthly_pension,
            social_security_annual=ss_annual,
            social_security_monthly=ss_annual / 12,
            portfolio_balance=0.0,
            portfolio_withdrawal=0.0,
            other_income=0.0,
            combined_total_annual=combined,
            combined_total_monthly=combined / 12,
            capped_at_80_percent=result.capped_at_maximum,
        ))

        # Plateau: capped at the top multiplier, later ages add nothing
        if result.capped_at_maximum and result.benefit_factor >= top_factor:
            break

    return rows


# =============================================================================
# 4. Display helpers
# =============================================================================

def truncate_at_cap_plateau(rows: List[ProjectionYear], show_extended: bool = False) -> List[ProjectionYear]:
    """Rows up to and including the first capped row, unless extended projections are requested."""
    if show_extended:
        return list(rows)
    for i, row in enumerate(rows):
        if row.capped_at_80_percent:
            return list(rows[:i + 1])
    return list(rows)


def get_projection_summary(rows: List[ProjectionYear]) -> Dict[str, float]:
    if not rows:
        return {
            "years_projected": 0,
            "start_age": 0,
            "end_age": 0,
            "max_annual_pension": 0.0,
            "total_pension": 0.0,
            "total_social_security": 0.0,
            "total_combined": 0.0,
            "first_capped_age": None,
        }

    capped_ages = [r.age for r in rows if r.capped_at_80_percent]
    return {
        "years_projected": len(rows),
        "start_age": rows[0].age,
        "end_age": rows[-1].age,
        "max_annual_pension": max(r.total_pension_annual for r in rows),
        "total_pension": sum(r.total_pension_annual for r in rows),
        "total_social_security": sum(r.social_security_annual for r in rows),
        "total_combined": sum(r.combined_total_annual for r in rows),
        "first_capped_age": capped_ages[0] if capped_ages else None,
    }
