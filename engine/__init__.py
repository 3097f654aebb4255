# engine/__init__.py

# Single-scenario and batch entry points, which orchestrate all calculators.
from .scenario_calculator import (
    Calculators,
    DEFAULT_CALCULATORS,
    ScenarioOutcome,
    calculate_multiple_scenarios,
    calculate_scenario_results,
    run_scenario_batch,
)

# Individual calculators, for callers that only need one piece
from .pension_calculator import calculate_pension
from .social_security import calculate_social_security, spousal_benefit, survivor_benefit
from .tax_engine import calculate_retirement_taxes
from .cola_projector import project_benefits
from .withdrawal_engine import simulate_portfolio
