import json

import numpy as np
import pytest

from engine.scenario_calculator import calculate_scenario_results
from models import FinancialParameters
from tests.conftest import make_scenario
from utils.results_writer import (
    PROJECTION_COLUMNS,
    _json_default,
    export_projections_csv,
    projections_to_frame,
    results_to_dict,
    results_to_json,
    summary_frame,
)


@pytest.fixture
def results():
    return calculate_scenario_results(make_scenario(), as_of="2025-01-01")


def test_results_to_dict_uses_camel_case(results):
    data = results_to_dict(results)
    assert data["scenarioId"] == "s1"
    assert data["calculatedAt"] == "2025-01-01"
    assert data["pensionBenefits"]["annualBenefit"] == pytest.approx(46_875)
    assert data["portfolioAnalysis"] is None
    assert "cappedAt80Percent" in data["incomeProjections"]["yearlyProjections"][0]


def test_results_to_dict_snake_case(results):
    data = results_to_dict(results, camel_case=False)
    assert data["key_metrics"]["risk_score"] == results.key_metrics.risk_score


def test_results_to_json_is_parseable():
    results = calculate_scenario_results(make_scenario(financial=FinancialParameters(savings_account_balance=100_000)))
    data = json.loads(results_to_json(results))
    assert data["portfolioAnalysis"]["initialBalance"] == 100_000
    assert len(data["incomeProjections"]["yearlyProjections"]) == 20


def test_json_default_handles_numpy():
    assert _json_default(np.float64(1.5)) == 1.5
    assert _json_default(np.array([1, 2])) == [1, 2]
    with pytest.raises(TypeError):
        _json_default(object())


def test_projections_frame_and_csv(results):
    df = projections_to_frame(results.income_projections.yearly_projections)
    assert list(df.columns) == PROJECTION_COLUMNS
    assert len(df) == 20
    assert df["age"].iloc[0] == 65

    filename, payload = export_projections_csv(results)
    assert filename == "s1_projections.csv"
    assert payload.decode().splitlines()[0].startswith("age,year,years_of_service")


def test_empty_projection_frame_keeps_columns():
    assert list(projections_to_frame([]).columns) == PROJECTION_COLUMNS


def test_summary_frame(results):
    df = summary_frame([results, results])
    assert len(df) == 2
    assert df["total_annual_income"].iloc[0] == pytest.approx(76_875)
