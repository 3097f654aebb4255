# utils/plotting.py
#
# Chart data for calculated scenarios: plain series dicts for any front end,
# plus plotly figures built from them. Nothing here recalculates benefits.
#

from typing import Dict, List, Sequence

import plotly.graph_objects as go

from models import ProjectionYear, ScenarioResults
from utils.currency import format_currency_output

CHART_COLORS = {
    "pension": "#3b82f6",
    "social_security": "#10b981",
    "portfolio": "#8b5cf6",
    "other": "#f59e0b",
    "combined": "#6366f1",
    "capped": "#ef4444",
}


# ------------------------------------------------------------------
# Series
# ------------------------------------------------------------------

def benefit_projection_series(rows: Sequence[ProjectionYear]) -> Dict[str, list]:
    """Column-wise projection: one list per income source, aligned on age."""
    return {
        "age": [r.age for r in rows],
        "year": [r.year for r in rows],
        "pension": [r.total_pension_annual for r in rows],
        "cola_adjustment": [r.cola_adjustment for r in rows],
        "social_security": [r.social_security_annual for r in rows],
        "portfolio_withdrawal": [r.portfolio_withdrawal for r in rows],
        "other_income": [r.other_income for r in rows],
        "combined": [r.combined_total_annual for r in rows],
        "capped_at_80_percent": [r.capped_at_80_percent for r in rows],
    }


def income_comparison_series(results: Sequence[ScenarioResults], names: Dict[str, str] = None) -> List[Dict]:
    """One entry per scenario with its first-year monthly income by source."""
    names = names or {}
    series = []
    for r in results:
        pension = r.pension_benefits.monthly_benefit
        ss = r.social_security_benefits.monthly_benefit
        total = r.income_projections.total_monthly_income
        series.append({
            "scenario_id": r.scenario_id,
            "name": names.get(r.scenario_id, r.scenario_id),
            "pension": pension,
            "social_security": ss,
            "other": max(0.0, total - pension - ss),
            "total": total,
            "net_after_tax": r.income_projections.net_after_tax_income / 12,
        })
    return series


def income_breakdown_series(results: ScenarioResults) -> List[Dict]:
    """Share of first-year annual income by source; zero sources are left out."""
    pension = results.pension_benefits.annual_benefit
    ss = results.social_security_benefits.annual_benefit
    total = results.income_projections.total_annual_income
    other = max(0.0, total - pension - ss)

    parts = [("Pension", pension, "pension"), ("Social Security", ss, "social_security"), ("Other Income", other, "other")]
    return [
        {
            "label": label,
            "amount": amount,
            "percentage": amount / total * 100 if total > 0 else 0.0,
            "color": CHART_COLORS[key],
        }
        for label, amount, key in parts
        if amount > 0
    ]


# ------------------------------------------------------------------
# Figures
# ------------------------------------------------------------------

def _empty_figure(title: str, height: int = 500) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(
        text="No data available",
        xref="paper", yref="paper", x=0.5, y=0.5,
        showarrow=False, font_size=20
    )
    fig.update_layout(title=title, height=height, template="plotly_white")
    return fig


def create_benefit_projection_figure(rows: Sequence[ProjectionYear], title: str = "Projected Annual Income") -> go.Figure:
    """Stacked area of income sources by age with the combined total on top."""
    if not rows:
        return _empty_figure(title)

    data = benefit_projection_series(rows)
    fig = go.Figure()

    stacked = [
        ("Pension", "pension", "pension"),
        ("Social Security", "social_security", "social_security"),
        ("Portfolio Withdrawal", "portfolio_withdrawal", "portfolio"),
        ("Other Income", "other_income", "other"),
    ]
    for label, key, color_key in stacked:
        if not any(data[key]):
            continue
        fig.add_trace(go.Scatter(
            x=data["age"],
            y=data[key],
            mode='lines',
            line=dict(width=0),
            fillcolor=CHART_COLORS[color_key],
            stackgroup='one',
            name=label,
            hovertemplate=f'<b>{label}</b><br>Age: %{{x}}<br>Annual: $%{{y:,.0f}}<extra></extra>'
        ))

    fig.add_trace(go.Scatter(
        x=data["age"],
        y=data["combined"],
        mode='lines',
        line=dict(color=CHART_COLORS["combined"], width=2, dash='dot'),
        name="Combined Total",
        hovertemplate='<b>Combined</b><br>Age: %{x}<br>Annual: $%{y:,.0f}<extra></extra>'
    ))

    fig.update_layout(
        title=title,
        xaxis_title="Age",
        yaxis_title="Annual Income ($)",
        template="plotly_white",
        hovermode="x unified",
        height=500,
        legend=dict(x=1, y=1, xanchor="right", yanchor="top", bgcolor="rgba(255,255,255,0.9)")
    )
    return fig


def create_income_comparison_figure(
    results: Sequence[ScenarioResults],
    names: Dict[str, str] = None,
    title: str = "Monthly Income by Scenario",
) -> go.Figure:
    """Grouped-by-scenario stacked bars of monthly income sources."""
    series = income_comparison_series(results, names)
    if not series:
        return _empty_figure(title)

    x = [s["name"] for s in series]
    fig = go.Figure()
    for label, key in [("Pension", "pension"), ("Social Security", "social_security"), ("Other", "other")]:
        fig.add_trace(go.Bar(
            x=x,
            y=[s[key] for s in series],
            name=label,
            marker_color=CHART_COLORS[key],
            hovertemplate=f'<b>{label}</b><br>%{{x}}<br>$%{{y:,.0f}}/mo<extra></extra>'
        ))

    fig.update_layout(
        title=title,
        barmode="stack",
        yaxis_title="Monthly Income ($)",
        template="plotly_white",
        height=450,
    )
    return fig


def create_income_breakdown_figure(results: ScenarioResults, title: str = "Income Sources") -> go.Figure:
    parts = income_breakdown_series(results)
    if not parts:
        return _empty_figure(title, height=400)

    fig = go.Figure(go.Pie(
        labels=[p["label"] for p in parts],
        values=[p["amount"] for p in parts],
        marker=dict(colors=[p["color"] for p in parts]),
        hole=0.4,
        text=[format_currency_output(p["amount"]) for p in parts],
        hovertemplate='<b>%{label}</b><br>%{text}<br>%{percent}<extra></extra>'
    ))
    fig.update_layout(title=title, template="plotly_white", height=400)
    return fig
