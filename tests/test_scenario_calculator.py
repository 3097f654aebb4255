from dataclasses import asdict, replace

import pytest

from engine.scenario_calculator import (
    DEFAULT_CALCULATORS,
    calculate_multiple_scenarios,
    calculate_scenario_results,
    run_scenario_batch,
)
from models import FinancialParameters, PensionParameters, TaxParameters
from tests.conftest import make_scenario


@pytest.fixture
def fake_calculators(fixed_pension_result, fixed_social_security_result):
    return DEFAULT_CALCULATORS._replace(
        pension=lambda *args, **kwargs: fixed_pension_result,
        social_security=lambda *args, **kwargs: fixed_social_security_result,
    )


def test_example_scenario_with_fixed_calculators(example_scenario, fake_calculators):
    results = calculate_scenario_results(example_scenario, fake_calculators)

    assert results.scenario_id == "s1"
    assert results.pension_benefits.monthly_benefit == pytest.approx(4_166.67, abs=0.01)
    assert results.pension_benefits.annual_benefit == pytest.approx(50_000)
    assert results.social_security_benefits.annual_benefit == pytest.approx(30_000)

    projections = results.income_projections.yearly_projections
    assert len(projections) == 20
    assert projections[0].age == 65
    assert projections[-1].age == 84

    assert results.income_projections.total_annual_income == pytest.approx(80_000)
    assert results.income_projections.replacement_ratio == pytest.approx(80_000 / 75_000)
    assert results.portfolio_analysis is None


def test_example_scenario_with_real_calculators(example_scenario):
    results = calculate_scenario_results(example_scenario)

    assert results.pension_benefits.annual_benefit == pytest.approx(46_875)
    assert results.social_security_benefits.annual_benefit == pytest.approx(30_000)
    assert results.income_projections.total_annual_income == pytest.approx(76_875)
    assert results.income_projections.replacement_ratio == pytest.approx(76_875 / 75_000)
    assert results.income_projections.net_after_tax_income == pytest.approx(
        76_875 - results.tax_analysis.annual_tax_burden
    )


def test_lifetime_totals_match_projections(example_scenario):
    results = calculate_scenario_results(example_scenario)
    rows = results.income_projections.yearly_projections

    assert results.pension_benefits.lifetime_benefits == pytest.approx(sum(r.total_pension_annual for r in rows))
    assert results.social_security_benefits.lifetime_benefits == pytest.approx(sum(r.social_security_annual for r in rows))
    assert results.key_metrics.total_lifetime_income == pytest.approx(sum(r.combined_total_annual for r in rows))


def test_scores_are_on_one_to_ten_scale(example_scenario):
    metrics = calculate_scenario_results(example_scenario).key_metrics
    for score in (metrics.risk_score, metrics.flexibility_score, metrics.optimization_score):
        assert isinstance(score, int)
        assert 1 <= score <= 10


def test_ineligible_pension_flows_through_as_zero():
    scenario = make_scenario(retirement_age=58, current_age=50, claiming_age=62)
    results = calculate_scenario_results(scenario)
    assert results.pension_benefits.annual_benefit == 0
    assert all(r.total_pension_annual == 0 for r in results.income_projections.yearly_projections)


def test_portfolio_analysis_present_only_with_balance():
    scenario = make_scenario(financial=FinancialParameters(traditional_ira_balance=400_000))
    results = calculate_scenario_results(scenario)

    analysis = results.portfolio_analysis
    assert analysis is not None
    assert analysis.initial_balance == pytest.approx(400_000)
    assert analysis.portfolio_longevity == 20
    assert analysis.probability_of_success == pytest.approx(0.85)
    assert results.income_projections.yearly_projections[0].portfolio_withdrawal == pytest.approx(16_000)


def test_married_scenario_adds_spousal_and_survivor():
    scenario = make_scenario(
        full_retirement_benefit=1_000,
        is_married=True,
        spouse_full_retirement_benefit=3_000,
        spouse_full_retirement_age=67,
        spouse_claiming_age=67,
        tax=TaxParameters(filing_status="marriedJoint"),
    )
    ss = calculate_scenario_results(scenario).social_security_benefits
    assert ss.spousal_benefit == pytest.approx(500)
    assert ss.survivor_benefit == pytest.approx(3_000)


def test_survivor_benefit_follows_the_lower_earner():
    scenario = make_scenario(
        full_retirement_benefit=1_000,
        claiming_age=62,
        is_married=True,
        spouse_full_retirement_benefit=3_000,
        spouse_full_retirement_age=67,
        spouse_claiming_age=70,
    )
    ss = calculate_scenario_results(scenario).social_security_benefits
    # Spouse delays to 70 (3,000 x 1.24); we claim 60 months early
    assert ss.survivor_benefit == pytest.approx(3_720 * (1 - 60 / 84 * 0.285))


def test_survivor_benefit_when_spouse_is_lower_earner():
    scenario = make_scenario(
        full_retirement_benefit=3_000,
        claiming_age=67,
        is_married=True,
        spouse_full_retirement_benefit=1_000,
        spouse_full_retirement_age=67,
        spouse_claiming_age=67,
    )
    ss = calculate_scenario_results(scenario).social_security_benefits
    assert ss.survivor_benefit == pytest.approx(3_000)


def test_single_scenario_propagates_errors():
    scenario = make_scenario()
    bad = replace(scenario, pension=PensionParameters(1, 25, -75_000))
    with pytest.raises(ValueError):
        calculate_scenario_results(bad)


def test_calculated_at_comes_from_as_of(example_scenario):
    assert calculate_scenario_results(example_scenario).calculated_at is None
    assert calculate_scenario_results(example_scenario, as_of="2025-01-01").calculated_at == "2025-01-01"


def test_repeated_calculation_is_identical(example_scenario):
    first = calculate_scenario_results(example_scenario, as_of="2025-01-01")
    second = calculate_scenario_results(example_scenario, as_of="2025-01-01")
    assert asdict(first) == asdict(second)


# --- Batch ---

def _batch():
    good = make_scenario("good")
    bad = replace(make_scenario("bad"), pension=PensionParameters(1, 25, -75_000))
    return [bad, good]


def test_batch_isolates_failures():
    results = calculate_multiple_scenarios(_batch())

    assert [r.scenario_id for r in results] == ["bad", "good"]
    assert results[0].pension_benefits.annual_benefit == 0
    assert results[0].key_metrics.risk_score == 5
    assert results[1].pension_benefits.annual_benefit == pytest.approx(46_875)


def test_batch_outcomes_are_tagged():
    outcomes = run_scenario_batch(_batch())

    assert [o.ok for o in outcomes] == [False, True]
    assert "negative" in outcomes[0].error
    assert outcomes[1].error is None


def test_batch_valid_result_matches_single_call():
    good = make_scenario("good")
    batch = calculate_multiple_scenarios(_batch(), as_of="2025-01-01")
    assert asdict(batch[1]) == asdict(calculate_scenario_results(good, as_of="2025-01-01"))


def test_batch_with_process_pool_preserves_order():
    scenarios = [make_scenario(f"s{age}", retirement_age=age) for age in (60, 62, 65)] + _batch()
    results = calculate_multiple_scenarios(scenarios, processes=2)
    assert [r.scenario_id for r in results] == ["s60", "s62", "s65", "bad", "good"]
    assert results[3].key_metrics.risk_score == 5


def test_empty_batch():
    assert calculate_multiple_scenarios([]) == []


def test_batch_with_unpicklable_calculators_runs_sequentially(fake_calculators, caplog):
    scenarios = [make_scenario("a"), make_scenario("b")]
    with caplog.at_level("WARNING"):
        outcomes = run_scenario_batch(scenarios, processes=2, calculators=fake_calculators)

    assert [o.ok for o in outcomes] == [True, True]
    assert outcomes[1].results.pension_benefits.annual_benefit == pytest.approx(50_000)
    assert "sequentially" in caplog.text
