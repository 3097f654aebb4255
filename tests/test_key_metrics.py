from engine.key_metrics import (
    calculate_break_even_age,
    calculate_flexibility_score,
    calculate_optimization_score,
    calculate_risk_score,
)
from models import FinancialParameters, TaxParameters
from tests.conftest import make_scenario


def test_risk_score_neutral_for_moderate_plan():
    assert calculate_risk_score(make_scenario()) == 5


def test_risk_score_rises_with_aggressive_assumptions():
    scenario = make_scenario(
        retirement_age=60,
        financial=FinancialParameters(risk_tolerance="aggressive", expected_return_rate=0.09, withdrawal_rate=0.06),
    )
    assert calculate_risk_score(scenario) == 10


def test_risk_score_falls_when_portfolio_lasts():
    scenario = make_scenario(financial=FinancialParameters(risk_tolerance="conservative"))
    assert calculate_risk_score(scenario, portfolio_longevity=20, horizon_years=20) == 3


def test_flexibility_score_with_assets_and_spouse():
    scenario = make_scenario(
        financial=FinancialParameters(roth_ira_balance=600_000, other_retirement_income=10_000),
        is_married=True,
    )
    assert calculate_flexibility_score(scenario) == 9


def test_flexibility_score_is_clamped():
    scenario = make_scenario(
        financial=FinancialParameters(
            traditional_401k_balance=2_000_000, other_retirement_income=1, risk_tolerance="aggressive"
        ),
        is_married=True,
    )
    assert calculate_flexibility_score(scenario) == 10


def test_optimization_score_composite():
    scenario = make_scenario(claiming_age=70, tax=TaxParameters(tax_optimization_strategy="advanced", roth_conversions=True))
    # +2 strategy, +1 Roth, +2 claiming past FRA, +1 low tax, +1 replacement
    assert calculate_optimization_score(scenario, effective_tax_rate=0.10, replacement_ratio=0.9) == 10


def test_optimization_score_penalizes_high_tax_and_low_replacement():
    scenario = make_scenario(claiming_age=62)
    assert calculate_optimization_score(scenario, effective_tax_rate=0.30, replacement_ratio=0.5) == 3


def test_break_even_age_for_claiming_at_fra():
    age = calculate_break_even_age(make_scenario(claiming_age=67))
    assert 75 <= age <= 80


def test_break_even_age_when_claiming_early():
    assert calculate_break_even_age(make_scenario(claiming_age=62)) == 62
