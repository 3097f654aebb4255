# engine/scenario_comparison.py
"""
Side-by-side comparison of calculated scenarios: best/worst picks per metric
and plain-language recommendations.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import pandas as pd

from models import RetirementScenario, ScenarioResults

# Thresholds for raising a recommendation
SIGNIFICANT_MONTHLY_INCOME_GAP = 500
TARGET_REPLACEMENT_RATIO = 0.70
HIGH_SCORE = 7
SIGNIFICANT_TAX_SAVINGS = 1_000
NORMAL_RETIREMENT_AGES = (65, 67)

PRIORITY_ORDER = {"high": 3, "medium": 2, "low": 1}


@dataclass
class Recommendation:
    type: str                   # income / risk / tax / timing
    priority: str               # high / medium / low
    title: str
    description: str
    affected_scenarios: List[str]
    suggested_action: str
    potential_impact: Dict[str, float] = field(default_factory=dict)


@dataclass
class ScenarioComparison:
    metrics: pd.DataFrame
    highlights: Dict[str, str]
    recommendations: List[Recommendation]
    break_even_age: Optional[int] = None


def comparison_frame(scenarios: Sequence[RetirementScenario], results: Sequence[ScenarioResults]) -> pd.DataFrame:
    """One row per scenario (indexed by scenario id) with the headline metrics."""
    rows = []
    for scenario, res in zip(scenarios, results):
        rows.append({
            "scenario_id": res.scenario_id,
            "name": scenario.name or res.scenario_id,
            "retirement_age": scenario.personal.retirement_age,
            "average_salary": scenario.pension.average_salary,
            "total_monthly_income": res.income_projections.total_monthly_income,
            "total_annual_income": res.income_projections.total_annual_income,
            "total_lifetime_income": res.key_metrics.total_lifetime_income,
            "replacement_ratio": res.income_projections.replacement_ratio,
            "effective_tax_rate": res.tax_analysis.effective_tax_rate,
            "risk_score": res.key_metrics.risk_score,
            "flexibility_score": res.key_metrics.flexibility_score,
            "optimization_score": res.key_metrics.optimization_score,
            "portfolio_longevity": res.portfolio_analysis.portfolio_longevity if res.portfolio_analysis else 0.0,
        })
    return pd.DataFrame(rows).set_index("scenario_id")


def _highlights(df: pd.DataFrame) -> Dict[str, str]:
    return {
        "highest_monthly_income": df["total_monthly_income"].idxmax(),
        "highest_lifetime_income": df["total_lifetime_income"].idxmax(),
        "highest_replacement_ratio": df["replacement_ratio"].idxmax(),
        "lowest_risk": df["risk_score"].idxmin(),
        "highest_risk": df["risk_score"].idxmax(),
        "most_flexible": df["flexibility_score"].idxmax(),
        "most_optimized": df["optimization_score"].idxmax(),
        "best_tax_efficiency": df["effective_tax_rate"].idxmin(),
        "longest_portfolio_life": df["portfolio_longevity"].idxmax(),
    }


def cumulative_income_break_even(earlier: ScenarioResults, later: ScenarioResults) -> Optional[int]:
    """
    First age at which the cumulative combined income of `later` catches up
    with `earlier`. None when it never does within the projections.
    """
    def cumulative(res: ScenarioResults) -> pd.Series:
        rows = res.income_projections.yearly_projections
        series = pd.Series({r.age: r.combined_total_annual for r in rows}, dtype=float)
        return series.cumsum()

    a, b = cumulative(earlier), cumulative(later)
    if a.empty or b.empty:
        return None

    ages = range(int(min(a.index.min(), b.index.min())), int(max(a.index.max(), b.index.max())) + 1)
    a = a.reindex(ages).ffill().fillna(0.0)
    b = b.reindex(ages).ffill().fillna(0.0)

    start = int(later.income_projections.yearly_projections[0].age) if later.income_projections.yearly_projections else ages[0]
    caught_up = [age for age in ages if age >= start and b[age] >= a[age]]
    return caught_up[0] if caught_up else None


def _recommendations(df: pd.DataFrame, highlights: Dict[str, str], lifetime_gap: float) -> List[Recommendation]:
    recs = []

    # Income
    top, bottom = highlights["highest_monthly_income"], df["total_monthly_income"].idxmin()
    income_gap = df.at[top, "total_monthly_income"] - df.at[bottom, "total_monthly_income"]
    if income_gap > SIGNIFICANT_MONTHLY_INCOME_GAP:
        recs.append(Recommendation(
            "income", "high", "Maximize Monthly Income",
            f'The "{df.at[top, "name"]}" scenario provides ${income_gap:,.0f} more per month than your lowest income scenario.',
            [top, bottom],
            f'Consider adopting the parameters from "{df.at[top, "name"]}" to maximize your retirement income.',
            {"income_change": income_gap * 12},
        ))

    best_ratio = df["replacement_ratio"].max()
    if best_ratio < TARGET_REPLACEMENT_RATIO:
        recs.append(Recommendation(
            "income", "medium", "Improve Income Replacement",
            f"Your best scenario only replaces {best_ratio * 100:.1f}% of your pre-retirement income.",
            list(df.index),
            "Consider delaying retirement, increasing savings, or exploring additional income sources.",
            {"income_change": (TARGET_REPLACEMENT_RATIO - best_ratio) * df["average_salary"].iloc[0]},
        ))

    # Risk
    riskiest = highlights["highest_risk"]
    if df.at[riskiest, "risk_score"] > HIGH_SCORE:
        recs.append(Recommendation(
            "risk", "high", "High Risk Scenario Detected",
            f'The "{df.at[riskiest, "name"]}" scenario has a high risk score of {df.at[riskiest, "risk_score"]}/10.',
            [riskiest],
            "Consider more conservative investment allocations or later retirement age to reduce risk.",
            {"risk_change": -2},
        ))

    flexible = highlights["most_flexible"]
    if df.at[flexible, "flexibility_score"] > HIGH_SCORE:
        recs.append(Recommendation(
            "risk", "medium", "High Flexibility Option",
            f'The "{df.at[flexible, "name"]}" scenario offers high flexibility with a score of '
            f'{df.at[flexible, "flexibility_score"]}/10.',
            [flexible],
            "This scenario provides good options for adjusting your retirement plan if circumstances change.",
            {"risk_change": -1},
        ))

    # Tax
    efficient, costly = highlights["best_tax_efficiency"], df["effective_tax_rate"].idxmax()
    tax_savings = (
        (df.at[costly, "effective_tax_rate"] - df.at[efficient, "effective_tax_rate"])
        * df.at[costly, "total_annual_income"]
    )
    if tax_savings > SIGNIFICANT_TAX_SAVINGS:
        recs.append(Recommendation(
            "tax", "high", "Tax Optimization Opportunity",
            f'The "{df.at[efficient, "name"]}" scenario could save you approximately ${tax_savings:,.0f} annually in taxes.',
            [efficient, costly],
            "Consider implementing tax optimization strategies from the most efficient scenario.",
            {"tax_savings": tax_savings},
        ))

    # Timing
    if lifetime_gap > 0:
        early = df[df["retirement_age"] < NORMAL_RETIREMENT_AGES[0]]
        normal = df[df["retirement_age"].between(*NORMAL_RETIREMENT_AGES)]
        recs.append(Recommendation(
            "timing", "medium", "Consider Delaying Retirement",
            f"Waiting until normal retirement age could increase your lifetime income by approximately ${lifetime_gap:,.0f}.",
            list(early.index) + list(normal.index),
            "Compare the trade-off between earlier retirement and higher lifetime income.",
            {"income_change": lifetime_gap},
        ))

    return sorted(recs, key=lambda r: PRIORITY_ORDER[r.priority], reverse=True)


def compare_scenarios(
    scenarios: Sequence[RetirementScenario],
    results: Sequence[ScenarioResults],
) -> ScenarioComparison:
    """Compares two or more calculated scenarios (results in the same order as scenarios)."""
    if len(scenarios) != len(results):
        raise ValueError("Scenarios and results must have the same length")
    if len(scenarios) < 2:
        raise ValueError("At least 2 scenarios are required for comparison")
    ids = [r.scenario_id for r in results]
    if len(set(ids)) != len(ids):
        raise ValueError("Scenario ids must be unique for comparison")

    df = comparison_frame(scenarios, results)
    highlights = _highlights(df)

    # Early (<65) vs normal (65-67) retirement on average lifetime income
    early = df[df["retirement_age"] < NORMAL_RETIREMENT_AGES[0]]
    normal = df[df["retirement_age"].between(*NORMAL_RETIREMENT_AGES)]
    lifetime_gap = 0.0
    break_even = None
    if not early.empty and not normal.empty:
        lifetime_gap = normal["total_lifetime_income"].mean() - early["total_lifetime_income"].mean()
        by_id = {r.scenario_id: r for r in results}
        break_even = cumulative_income_break_even(
            by_id[early["total_lifetime_income"].idxmax()],
            by_id[normal["total_lifetime_income"].idxmax()],
        )

    return ScenarioComparison(
        metrics=df,
        highlights=highlights,
        recommendations=_recommendations(df, highlights, lifetime_gap),
        break_even_age=break_even,
    )
