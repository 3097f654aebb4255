# utils/results_writer.py
#
# ScenarioResults -> plain dicts / JSON / DataFrame / CSV for the caller to
# persist or download.
#
import json
from dataclasses import asdict
from typing import Any, Dict, List, Sequence

import numpy as np
import pandas as pd

from models import ProjectionYear, ScenarioResults
from utils.input_adapter import snake_to_camel

PROJECTION_COLUMNS = [
    "age", "year", "years_of_service", "benefit_factor", "pension_with_option",
    "cola_adjustment", "total_pension_annual", "total_pension_monthly",
    "social_security_annual", "social_security_monthly", "portfolio_balance",
    "portfolio_withdrawal", "other_income", "combined_total_annual",
    "combined_total_monthly", "capped_at_80_percent",
]


def _json_default(o):
    # numpy arrays & scalars that leak in from the portfolio simulation
    if isinstance(o, np.ndarray):
        return o.tolist()
    if isinstance(o, (np.floating, np.integer, np.bool_)):
        return o.item()
    raise TypeError(f"Object of type {o.__class__.__name__} is not JSON serializable")


def _camelize(value: Any) -> Any:
    if isinstance(value, dict):
        return {snake_to_camel(k): _camelize(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_camelize(v) for v in value]
    return value


def results_to_dict(results: ScenarioResults, camel_case: bool = True) -> Dict[str, Any]:
    """Nested plain dict; optional sections that were not modeled stay None."""
    data = asdict(results)
    return _camelize(data) if camel_case else data


def results_to_json(results: ScenarioResults, camel_case: bool = True, indent: int = None) -> str:
    return json.dumps(results_to_dict(results, camel_case), indent=indent, default=_json_default)


def projections_to_frame(rows: Sequence[ProjectionYear]) -> pd.DataFrame:
    """One row per projection year, in the stored column order."""
    if not rows:
        return pd.DataFrame(columns=PROJECTION_COLUMNS)
    return pd.DataFrame([asdict(r) for r in rows], columns=PROJECTION_COLUMNS)


def export_projections_csv(results: ScenarioResults) -> tuple[str, bytes]:
    """(filename, CSV bytes) for the scenario's yearly projections."""
    df = projections_to_frame(results.income_projections.yearly_projections)
    return f"{results.scenario_id}_projections.csv", df.to_csv(index=False).encode()


def summary_frame(results: Sequence[ScenarioResults]) -> pd.DataFrame:
    """Headline numbers for several scenarios, one row each."""
    rows: List[Dict[str, Any]] = []
    for r in results:
        rows.append({
            "scenario_id": r.scenario_id,
            "monthly_pension": r.pension_benefits.monthly_benefit,
            "monthly_social_security": r.social_security_benefits.monthly_benefit,
            "total_annual_income": r.income_projections.total_annual_income,
            "net_after_tax_income": r.income_projections.net_after_tax_income,
            "replacement_ratio": r.income_projections.replacement_ratio,
            "annual_tax": r.tax_analysis.annual_tax_burden,
            "total_lifetime_income": r.key_metrics.total_lifetime_income,
            "risk_score": r.key_metrics.risk_score,
            "flexibility_score": r.key_metrics.flexibility_score,
            "optimization_score": r.key_metrics.optimization_score,
        })
    return pd.DataFrame(rows)
