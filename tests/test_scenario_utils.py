from dataclasses import replace

import pytest

from models import ColaParameters, PersonalParameters
from tests.conftest import make_scenario
from utils.scenario_utils import (
    apply_overrides,
    create_default_scenario,
    create_scenario_from_template,
    diff_scenarios,
    duplicate_scenario,
    scenario_complexity,
    summarize_differences,
    validate_scenario,
)


def test_default_scenario_uses_defaults_and_profile():
    scenario = create_default_scenario(
        "Mine",
        profile={"pension": {"average_salary": 90_000}, "personal": {"current_age": 50}},
        scenario_id="base",
        as_of_year=2025,
    )
    assert scenario.id == "base"
    assert scenario.is_baseline
    assert scenario.personal.birth_year == 1975
    assert scenario.personal.retirement_age == 67
    assert scenario.pension.average_salary == 90_000
    assert scenario.pension.years_of_service == 20
    assert scenario.social_security.full_retirement_benefit == 2_500
    assert scenario.cola.cola_scenario == "moderate"


def test_generated_ids_are_unique():
    assert create_default_scenario(as_of_year=2025).id != create_default_scenario(as_of_year=2025).id


def test_template_overlays_base():
    base = create_default_scenario("Base", scenario_id="base", as_of_year=2025)
    early = create_scenario_from_template("early_retirement_62", "Base", base, scenario_id="early")

    assert early.id == "early"
    assert early.name == "Base - Early Retirement at 62"
    assert not early.is_baseline
    assert early.personal.retirement_age == 62
    assert early.social_security.claiming_age == 62
    assert early.pension == base.pension


def test_unknown_template_raises():
    with pytest.raises(ValueError):
        create_scenario_from_template("nope", "Base", make_scenario())


def test_duplicate_with_overrides():
    original = replace(make_scenario(), is_baseline=True)
    copy = duplicate_scenario(original, "Copy", scenario_id="c", overrides={"financial": {"withdrawal_rate": 0.05}})
    assert copy.id == "c"
    assert not copy.is_baseline
    assert copy.financial.withdrawal_rate == 0.05
    assert original.financial.withdrawal_rate == 0.04


def test_apply_overrides_rejects_unknown_group():
    with pytest.raises(ValueError):
        apply_overrides(make_scenario(), {"hobbies": {"golf": True}})


def test_valid_scenario_passes():
    result = validate_scenario(make_scenario())
    assert result.is_valid
    assert result.errors == []


def test_validation_errors():
    scenario = make_scenario(claiming_age=61, average_salary=0)
    scenario = replace(scenario, personal=PersonalParameters(70, 65, 60, 1960))
    result = validate_scenario(scenario)

    assert not result.is_valid
    assert "Life expectancy must be greater than retirement age" in result.errors
    assert "Social Security claiming age must be between 62 and 70" in result.errors
    assert "Average salary must be positive" in result.errors
    assert "Current age cannot be past retirement age" in result.errors


def test_validation_warnings():
    scenario = make_scenario(years_of_service=8, cola=ColaParameters(pension_cola=0.2))
    result = validate_scenario(scenario)
    assert result.is_valid
    assert "Less than 10 years of service may not qualify for full benefits" in result.warnings
    assert "Pension COLA rate seems unusually high or low" in result.warnings


def test_diff_scenarios():
    a = make_scenario()
    b = apply_overrides(a, {"personal": {"retirement_age": 62}, "social_security": {"claiming_age": 62}})
    differences = diff_scenarios(a, b)

    assert {(d.category, d.parameter) for d in differences} == {
        ("Personal", "retirement_age"), ("Social Security", "claiming_age"),
    }
    assert "Key differences: retirement_age, claiming_age." in summarize_differences(differences)


def test_complexity():
    assert scenario_complexity(make_scenario()) == 1
    assert scenario_complexity(make_scenario(option="C", is_married=True)) == 3
