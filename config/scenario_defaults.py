# config/scenario_defaults.py
# Reasonable defaults for a new scenario; profile data overrides them.

personal_defaults = {
    "retirement_age": 67,
    "life_expectancy": 85,
    "current_age": 45,
}

pension_defaults = {
    "retirement_group": 1,
    "years_of_service": 20,
    "average_salary": 75_000,
    "retirement_option": "A",
}

social_security_defaults = {
    "claiming_age": 67,
    "full_retirement_age": 67,
    "full_retirement_benefit": 2_500,
    "early_retirement_benefit": 1_875,
    "delayed_retirement_benefit": 3_300,
    "is_married": False,
}

financial_defaults = {
    "other_retirement_income": 0,
    "expected_return_rate": 0.06,
    "inflation_rate": 0.025,
    "risk_tolerance": "moderate",
    "withdrawal_strategy": "percentage",
    "withdrawal_rate": 0.04,
    "estimated_medicare_premiums": 174.70,
    "healthcare_cost_inflation": 0.05,
}

tax_defaults = {
    "filing_status": "single",
    "state_of_residence": "MA",
    "tax_optimization_strategy": "none",
}

cola_defaults = {
    "pension_cola": 0.03,
    "social_security_cola": 0.025,
    "cola_scenario": "moderate",
}

# Starting points offered when adding a scenario; values overlay the base scenario
scenario_templates = {
    "early_retirement_62": {
        "name": "Early Retirement at 62",
        "description": "Retire as early as possible with reduced benefits",
        "personal": {"retirement_age": 62},
        "social_security": {"claiming_age": 62},
    },
    "full_retirement_67": {
        "name": "Full Retirement at 67",
        "description": "Retire at full Social Security age with full benefits",
        "personal": {"retirement_age": 67},
        "social_security": {"claiming_age": 67},
    },
    "delayed_retirement_70": {
        "name": "Delayed Retirement at 70",
        "description": "Maximize benefits by delaying retirement",
        "personal": {"retirement_age": 70},
        "social_security": {"claiming_age": 70},
    },
    "conservative_investment": {
        "name": "Conservative Investment Strategy",
        "description": "Lower risk, stable returns approach",
        "financial": {"risk_tolerance": "conservative", "expected_return_rate": 0.04, "withdrawal_rate": 0.035},
    },
    "aggressive_investment": {
        "name": "Aggressive Investment Strategy",
        "description": "Higher risk, higher potential returns",
        "financial": {"risk_tolerance": "aggressive", "expected_return_rate": 0.08, "withdrawal_rate": 0.045},
    },
}
