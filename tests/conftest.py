import pytest

from engine.pension_calculator import PensionResult
from engine.social_security import SocialSecurityResult
from models import (
    ColaParameters,
    FinancialParameters,
    PensionParameters,
    PersonalParameters,
    RetirementScenario,
    SocialSecurityParameters,
    TaxParameters,
)


def make_scenario(
    scenario_id="s1",
    retirement_age=65,
    life_expectancy=85,
    current_age=55,
    birth_year=1970,
    group=1,
    years_of_service=25,
    average_salary=75_000,
    option="A",
    claiming_age=67,
    full_retirement_benefit=2_500,
    financial=None,
    tax=None,
    cola=None,
    **ss_kwargs,
):
    return RetirementScenario(
        id=scenario_id,
        name=f"Scenario {scenario_id}",
        personal=PersonalParameters(current_age, retirement_age, life_expectancy, birth_year),
        pension=PensionParameters(group, years_of_service, average_salary, option),
        social_security=SocialSecurityParameters(
            claiming_age=claiming_age,
            full_retirement_age=67,
            full_retirement_benefit=full_retirement_benefit,
            **ss_kwargs,
        ),
        financial=financial or FinancialParameters(),
        tax=tax or TaxParameters(),
        cola=cola or ColaParameters(),
    )


@pytest.fixture
def example_scenario():
    """Group 1, retire at 65 with 25 years and $75,000, SS at 67 with $2,500 at FRA."""
    return make_scenario()


@pytest.fixture
def fixed_pension_result():
    return PensionResult(
        eligible=True,
        eligibility_message="Eligible for retirement benefits",
        benefit_factor=0.025,
        total_benefit_percentage=0.625,
        average_salary=75_000,
        base_annual_pension=50_000,
        annual_pension=50_000,
        monthly_pension=50_000 / 12,
        benefit_reduction=0.0,
        option_factor=1.0,
        survivor_pension=None,
        capped_at_maximum=False,
        max_pension_allowed=60_000,
    )


@pytest.fixture
def fixed_social_security_result():
    return SocialSecurityResult(
        eligible=True,
        monthly_benefit=2_500,
        annual_benefit=30_000,
        adjustment_factor=1.0,
        full_retirement_age=67,
    )
