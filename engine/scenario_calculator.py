# engine/scenario_calculator.py
"""
Scenario orchestration: runs the pension, Social Security, tax, portfolio and
projection calculators for one scenario and assembles ScenarioResults.

Calculators are passed in as a bundle so callers (and tests) can swap any of
them without touching the composition below. The batch entry points isolate
each scenario: a failure becomes a neutral placeholder result instead of an
exception.
"""
import logging
import multiprocessing as mp
import pickle
import time
from functools import partial
from typing import Callable, List, NamedTuple, Optional, Sequence

from engine.cola_projector import project_benefits, resolve_cola_rates
from engine.key_metrics import (
    NEUTRAL_SCORE,
    calculate_break_even_age,
    calculate_flexibility_score,
    calculate_optimization_score,
    calculate_risk_score,
)
from engine.pension_calculator import calculate_pension, creditable_service
from engine.social_security import calculate_social_security, spousal_benefit, survivor_benefit
from engine.tax_engine import calculate_retirement_taxes
from engine.withdrawal_engine import simulate_portfolio
from models import (
    IncomeProjections,
    KeyMetrics,
    PensionBenefits,
    PortfolioAnalysis,
    RetirementScenario,
    ScenarioResults,
    SocialSecurityBenefits,
    TaxAnalysis,
)
from utils.ss_utils import get_ss_multiplier

logger = logging.getLogger(__name__)

# Single-scenario calculations slower than this are logged
SLOW_CALCULATION_SECONDS = 2.0
DEFAULT_SURVIVOR_CLAIMING_AGE = 67


class Calculators(NamedTuple):
    pension: Callable = calculate_pension
    social_security: Callable = calculate_social_security
    tax: Callable = calculate_retirement_taxes
    portfolio: Callable = simulate_portfolio
    projector: Callable = project_benefits


DEFAULT_CALCULATORS = Calculators()


class ScenarioOutcome(NamedTuple):
    """Tagged batch result: `ok` is False when `results` is a placeholder."""
    scenario_id: str
    ok: bool
    results: ScenarioResults
    error: Optional[str] = None


# =============================================================================
# 1. Single scenario
# =============================================================================

def _married_benefits(scenario: RetirementScenario) -> tuple[Optional[float], Optional[float]]:
    """Monthly (spousal add-on, survivor benefit); both None when not married or no spouse data."""
    ss = scenario.social_security
    if not ss.is_married or ss.spouse_full_retirement_benefit is None:
        return None, None

    spousal = spousal_benefit(ss.full_retirement_benefit, ss.spouse_full_retirement_benefit)

    own = (ss.full_retirement_benefit, ss.claiming_age, ss.full_retirement_age)
    spouse = (
        ss.spouse_full_retirement_benefit,
        ss.spouse_claiming_age or DEFAULT_SURVIVOR_CLAIMING_AGE,
        ss.spouse_full_retirement_age or ss.full_retirement_age,
    )
    # Lower earner survives the higher earner
    survivor_side, deceased_side = (own, spouse) if own[0] <= spouse[0] else (spouse, own)

    deceased_benefit, deceased_claiming_age, deceased_fra = deceased_side
    survivor = survivor_benefit(
        deceased_benefit * get_ss_multiplier(deceased_claiming_age, deceased_fra),
        survivor_side[1],
        survivor_side[2],
    )
    return spousal.spousal_benefit, survivor.survivor_benefit


def calculate_scenario_results(
    scenario: RetirementScenario,
    calculators: Calculators = DEFAULT_CALCULATORS,
    as_of: Optional[str] = None,
) -> ScenarioResults:
    """
    Calculates complete results for one scenario.

    Args:
        scenario: Already-parsed scenario.
        calculators: Calculator bundle; defaults to the real calculators.
        as_of: Optional ISO date stamped onto the results as calculated_at.

    Raises whatever a calculator raises; nothing is masked here.
    """
    started = time.time()
    personal = scenario.personal
    pension_params = scenario.pension
    ss_params = scenario.social_security
    financial = scenario.financial
    horizon_years = personal.life_expectancy - personal.retirement_age

    # 1. Pension
    service = creditable_service(pension_params.years_of_service, pension_params.service_purchases)
    salary_history = pension_params.salary_history or pension_params.average_salary
    pension = calculators.pension(
        pension_params.retirement_group,
        personal.retirement_age,
        service,
        salary_history,
        pension_params.retirement_option,
        pension_params.beneficiary_age,
    )
    logger.debug(f"[{scenario.id}] pension: eligible={pension.eligible} annual={pension.annual_pension:,.0f}")

    # 2. Social Security
    social_security = calculators.social_security(
        personal.birth_year,
        ss_params.claiming_age,
        ss_params.full_retirement_benefit,
        ss_params.full_retirement_age,
    )
    spousal_add_on, survivor_monthly = _married_benefits(scenario)

    # 3. Taxes on the first full year of all income sources
    taxes = calculators.tax(
        pension.annual_pension,
        social_security.annual_benefit,
        financial.other_retirement_income,
        scenario.tax.filing_status,
        personal.retirement_age >= 65,
        scenario.tax.state_of_residence,
    )

    # 4. Portfolio (omitted entirely when there is nothing invested)
    portfolio = None
    portfolio_analysis = None
    if financial.total_portfolio > 0:
        portfolio = calculators.portfolio(
            financial.total_portfolio,
            financial.expected_return_rate,
            financial.inflation_rate,
            financial.withdrawal_rate,
            financial.withdrawal_strategy,
            horizon_years,
        )
        portfolio_analysis = PortfolioAnalysis(
            initial_balance=financial.total_portfolio,
            final_balance=portfolio.final_balance,
            total_withdrawals=portfolio.total_withdrawals,
            portfolio_longevity=portfolio.longevity_years,
            probability_of_success=portfolio.probability_of_success,
        )

    # 5. Year-by-year projection
    yearly_projections = calculators.projector(pension, social_security, scenario, portfolio)

    # 6. Aggregates
    total_annual_income = pension.annual_pension + social_security.annual_benefit + financial.other_retirement_income
    average_salary = pension.average_salary or pension_params.average_salary
    replacement_ratio = (
        (pension.annual_pension + social_security.annual_benefit) / average_salary if average_salary > 0 else 0.0
    )

    _, ss_cola = resolve_cola_rates(scenario.cola)
    key_metrics = KeyMetrics(
        total_lifetime_income=sum(row.combined_total_annual for row in yearly_projections),
        break_even_age=calculate_break_even_age(scenario, ss_cola),
        risk_score=calculate_risk_score(
            scenario,
            portfolio.longevity_years if portfolio is not None else None,
            horizon_years,
        ),
        flexibility_score=calculate_flexibility_score(scenario),
        optimization_score=calculate_optimization_score(scenario, taxes.effective_rate, replacement_ratio),
    )

    results = ScenarioResults(
        scenario_id=scenario.id,
        calculated_at=as_of,
        pension_benefits=PensionBenefits(
            monthly_benefit=pension.monthly_pension,
            annual_benefit=pension.annual_pension,
            lifetime_benefits=sum(row.total_pension_annual for row in yearly_projections),
            benefit_reduction=pension.benefit_reduction,
            survivor_pension=pension.survivor_pension,
        ),
        social_security_benefits=SocialSecurityBenefits(
            monthly_benefit=social_security.monthly_benefit,
            annual_benefit=social_security.annual_benefit,
            lifetime_benefits=sum(row.social_security_annual for row in yearly_projections),
            spousal_benefit=spousal_add_on,
            survivor_benefit=survivor_monthly,
        ),
        income_projections=IncomeProjections(
            total_monthly_income=total_annual_income / 12,
            total_annual_income=total_annual_income,
            net_after_tax_income=total_annual_income - taxes.total_tax,
            replacement_ratio=replacement_ratio,
            yearly_projections=list(yearly_projections),
        ),
        tax_analysis=TaxAnalysis(
            annual_tax_burden=taxes.total_tax,
            effective_tax_rate=taxes.effective_rate,
            marginal_tax_rate=taxes.marginal_rate,
            federal_tax=taxes.federal_tax,
            state_tax=taxes.state_tax,
            social_security_tax=taxes.social_security_taxable,
        ),
        portfolio_analysis=portfolio_analysis,
        key_metrics=key_metrics,
    )

    elapsed = time.time() - started
    if elapsed > SLOW_CALCULATION_SECONDS:
        logger.warning(f"[{scenario.id}] calculation took {elapsed:.2f}s")
    return results


# =============================================================================
# 2. Batch
# =============================================================================

def placeholder_results(scenario_id: str, as_of: Optional[str] = None) -> ScenarioResults:
    """Neutral stand-in for a scenario whose calculation failed."""
    return ScenarioResults(
        scenario_id=scenario_id,
        calculated_at=as_of,
        pension_benefits=PensionBenefits(0.0, 0.0, 0.0, 0.0),
        social_security_benefits=SocialSecurityBenefits(0.0, 0.0, 0.0),
        income_projections=IncomeProjections(0.0, 0.0, 0.0, 0.0, []),
        tax_analysis=TaxAnalysis(0.0, 0.0, 0.0, 0.0, 0.0, 0.0),
        portfolio_analysis=None,
        key_metrics=KeyMetrics(0.0, 0, NEUTRAL_SCORE, NEUTRAL_SCORE, NEUTRAL_SCORE),
    )


def _calculate_isolated(
    scenario: RetirementScenario,
    calculators: Calculators = DEFAULT_CALCULATORS,
    as_of: Optional[str] = None,
) -> ScenarioOutcome:
    # Module-level so it can be shipped to pool workers
    try:
        return ScenarioOutcome(scenario.id, True, calculate_scenario_results(scenario, calculators, as_of))
    except Exception as e:
        logger.exception(f"[{scenario.id}] calculation failed; using placeholder results")
        return ScenarioOutcome(scenario.id, False, placeholder_results(scenario.id, as_of), str(e))


def _picklable(obj) -> bool:
    try:
        pickle.dumps(obj)
    except (pickle.PicklingError, AttributeError, TypeError):
        return False
    return True


def run_scenario_batch(
    scenarios: Sequence[RetirementScenario],
    processes: Optional[int] = None,
    calculators: Calculators = DEFAULT_CALCULATORS,
    as_of: Optional[str] = None,
) -> List[ScenarioOutcome]:
    """
    Calculates every scenario, in input order, never raising for a single
    scenario. With `processes` > 1 the work is spread over a process pool,
    unless the calculators cannot be pickled (lambdas, closures).
    """
    started = time.time()
    worker = partial(_calculate_isolated, calculators=calculators, as_of=as_of)

    use_pool = processes and processes > 1 and len(scenarios) > 1
    if use_pool and not _picklable(worker):
        logger.warning("Calculators cannot be sent to worker processes; calculating scenarios sequentially")
        use_pool = False

    if use_pool:
        with mp.Pool(min(processes, len(scenarios))) as pool:
            outcomes = pool.map(worker, scenarios)
    else:
        outcomes = [worker(s) for s in scenarios]

    failed = sum(1 for o in outcomes if not o.ok)
    logger.info(
        f"Calculated {len(outcomes)} scenarios ({failed} failed) in {time.time() - started:.2f}s"
    )
    return outcomes


def calculate_multiple_scenarios(
    scenarios: Sequence[RetirementScenario],
    processes: Optional[int] = None,
    calculators: Calculators = DEFAULT_CALCULATORS,
    as_of: Optional[str] = None,
) -> List[ScenarioResults]:
    """Same length and order as `scenarios`; failed scenarios get placeholder results."""
    return [o.results for o in run_scenario_batch(scenarios, processes, calculators, as_of)]
