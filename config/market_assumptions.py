# =============================================================================
# Market and benefit-growth assumptions used in projections
# =============================================================================

# Portfolio defaults (nominal, annual)
default_return_rate = 0.06
default_inflation_rate = 0.025
default_withdrawal_rate = 0.04

# Deterministic success estimate; not a Monte Carlo probability
success_probability_sustained = 0.85
success_probability_depleted = 0.45

# Dynamic (guardrail) withdrawals
guardrail_band = 0.20           # +/- band around the initial withdrawal rate
guardrail_max_raise = 0.10
guardrail_max_cut = 0.10

# COLA presets selected by ColaParameters.cola_scenario
cola_scenarios = {
    "conservative": {"pension_cola": 0.02, "social_security_cola": 0.02},
    "moderate": {"pension_cola": 0.03, "social_security_cola": 0.025},
    "optimistic": {"pension_cola": 0.03, "social_security_cola": 0.032},
}

# Return assumption above which a plan is treated as aggressive
aggressive_return_threshold = 0.08
# Withdrawal rate above which depletion risk is flagged
high_withdrawal_rate_threshold = 0.05
