import json

import pytest

from utils.input_adapter import (
    camel_to_snake,
    scenario_from_dict,
    scenario_from_records,
    scenario_to_dict,
    scenario_to_records,
    snake_to_camel,
)


STORED_GROUPS = {
    "personalParameters": json.dumps({"currentAge": 55, "retirementAge": 65, "lifeExpectancy": 85, "birthYear": 1970}),
    "pensionParameters": json.dumps({
        "retirementGroup": "1",
        "yearsOfService": 25,
        "averageSalary": "$75,000",
        "retirementOption": "C",
        "beneficiaryAge": 63,
        "servicePurchases": [{"type": "military", "years": 2, "cost": 8000, "isPaid": True}],
    }),
    "socialSecurityParameters": json.dumps({
        "claimingAge": 67, "fullRetirementAge": 67, "fullRetirementBenefit": 2500,
        "earlyRetirementBenefit": 1875, "delayedRetirementBenefit": 3300, "isMarried": False,
        "optimizeSpouseBenefits": False,
    }),
    "financialParameters": json.dumps({
        "rothIRABalance": 50_000, "traditional401kBalance": 250_000, "expectedReturnRate": "6%",
    }),
    "taxParameters": json.dumps({"filingStatus": "marriedJoint", "stateOfResidence": "MA"}),
    "colaParameters": json.dumps({"pensionCOLA": 0.03, "socialSecurityCOLA": 0.025, "colaScenario": "moderate"}),
}


@pytest.mark.parametrize("camel, snake", [
    ("fullRetirementBenefit", "full_retirement_benefit"),
    ("rothIRABalance", "roth_ira_balance"),
    ("traditional401kBalance", "traditional_401k_balance"),
    ("pensionCOLA", "pension_cola"),
    ("isBaseline", "is_baseline"),
])
def test_key_conversion_round_trip(camel, snake):
    assert camel_to_snake(camel) == snake
    assert snake_to_camel(snake) == camel


def test_scenario_from_records_parses_each_group():
    scenario = scenario_from_records("abc", STORED_GROUPS, name="Stored")

    assert scenario.id == "abc"
    assert scenario.name == "Stored"
    assert scenario.personal.birth_year == 1970
    assert scenario.pension.retirement_group == 1
    assert scenario.pension.average_salary == 75_000
    assert scenario.pension.service_purchases[0].is_paid
    assert scenario.financial.roth_ira_balance == 50_000
    assert scenario.financial.traditional_401k_balance == 250_000
    assert scenario.financial.expected_return_rate == pytest.approx(0.06)
    assert scenario.financial.withdrawal_rate == pytest.approx(0.04)  # default
    assert scenario.tax.filing_status == "marriedJoint"
    assert scenario.cola.pension_cola == pytest.approx(0.03)


def test_scenario_from_dict_accepts_nested_mappings():
    data = {"id": "x", "isBaseline": True}
    data.update({k: json.loads(v) for k, v in STORED_GROUPS.items()})
    scenario = scenario_from_dict(data)
    assert scenario.is_baseline
    assert scenario.pension.retirement_option == "C"


def test_records_round_trip():
    scenario = scenario_from_records("abc", STORED_GROUPS)
    again = scenario_from_records("abc", scenario_to_records(scenario))
    assert again == scenario


def test_scenario_to_dict_uses_external_names():
    data = scenario_to_dict(scenario_from_records("abc", STORED_GROUPS))
    assert data["pensionParameters"]["averageSalary"] == 75_000
    assert data["financialParameters"]["rothIRABalance"] == 50_000
    assert data["pensionParameters"]["servicePurchases"][0]["isPaid"] is True


def test_missing_id_raises():
    with pytest.raises(ValueError):
        scenario_from_dict({})


def test_malformed_group_json_raises():
    with pytest.raises(ValueError):
        scenario_from_records("abc", {**STORED_GROUPS, "taxParameters": "{not json"})


def test_missing_required_field_raises():
    groups = {**STORED_GROUPS, "personalParameters": json.dumps({"currentAge": 55})}
    with pytest.raises(ValueError):
        scenario_from_records("abc", groups)
