import pytest

from engine.scenario_calculator import calculate_scenario_results
from engine.scenario_comparison import (
    compare_scenarios,
    comparison_frame,
    cumulative_income_break_even,
)
from models import FinancialParameters
from tests.conftest import make_scenario


def _calculated(*scenarios):
    return list(scenarios), [calculate_scenario_results(s) for s in scenarios]


def test_comparison_frame_rows():
    scenarios, results = _calculated(make_scenario("a"), make_scenario("b", retirement_age=62, claiming_age=62))
    df = comparison_frame(scenarios, results)
    assert list(df.index) == ["a", "b"]
    assert df.at["b", "retirement_age"] == 62
    assert df.at["a", "name"] == "Scenario a"


def test_highlights_and_recommendations():
    scenarios, results = _calculated(
        make_scenario("early", retirement_age=60, current_age=50, years_of_service=20, claiming_age=62),
        make_scenario("normal", retirement_age=65, years_of_service=30, claiming_age=67),
        make_scenario(
            "risky", retirement_age=65, claiming_age=67,
            financial=FinancialParameters(
                risk_tolerance="aggressive", expected_return_rate=0.09, withdrawal_rate=0.06,
                traditional_401k_balance=300_000,
            ),
        ),
    )
    comparison = compare_scenarios(scenarios, results)

    assert comparison.highlights["highest_risk"] == "risky"
    assert comparison.highlights["highest_monthly_income"] in ("normal", "risky")

    priorities = [r.priority for r in comparison.recommendations]
    assert priorities == sorted(priorities, key={"high": 3, "medium": 2, "low": 1}.get, reverse=True)
    types = {r.type for r in comparison.recommendations}
    assert "income" in types
    assert "risk" in types


def test_compare_requires_matching_inputs():
    scenarios, results = _calculated(make_scenario("a"), make_scenario("b"))
    with pytest.raises(ValueError):
        compare_scenarios(scenarios, results[:1])
    with pytest.raises(ValueError):
        compare_scenarios(scenarios[:1], results[:1])


def test_compare_rejects_duplicate_ids():
    scenarios, results = _calculated(make_scenario("a"), make_scenario("a", retirement_age=62, claiming_age=62))
    with pytest.raises(ValueError, match="unique"):
        compare_scenarios(scenarios, results)


def test_cumulative_break_even():
    early = calculate_scenario_results(make_scenario("early", retirement_age=62, current_age=50, claiming_age=62))
    late = calculate_scenario_results(make_scenario("late", retirement_age=65, years_of_service=28, claiming_age=70))

    age = cumulative_income_break_even(early, late)
    if age is not None:
        assert 65 <= age <= 84
    assert cumulative_income_break_even(late, late) == 65
