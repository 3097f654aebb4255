# =============================================================================
# Pension system rules used by the benefit calculator and projector
# =============================================================================

# Benefit multiplier (% of average salary per year of service) keyed by
# group, then by retirement age. Ages above the last entry use the last entry.
benefit_factors = {
    1: {60: 0.020, 61: 0.021, 62: 0.022, 63: 0.023, 64: 0.024, 65: 0.025},
    2: {55: 0.020, 56: 0.021, 57: 0.022, 58: 0.023, 59: 0.024, 60: 0.025},
    # State Police: flat 2.5% at any age
    3: {50: 0.025},
    4: {50: 0.020, 51: 0.021, 52: 0.022, 53: 0.023, 54: 0.024, 55: 0.025},
}

# Groups whose multiplier does not depend on age
flat_factor_groups = {3}

# Minimum retirement age by group
group_minimum_ages = {1: 60, 2: 55, 3: 55, 4: 50}

# Group 3 may retire at any age with this much service
group_3_any_age_service = 20

# Creditable service needed before any benefit vests
minimum_vesting_years = 10

# Last age shown in the "retire at each age" table
group_max_projection_ages = {1: 70, 2: 68, 3: 68, 4: 65}

max_pension_percentage = 0.80

# Option B: reduction by member age bracket (<=50, <=60, older)
option_b_reductions = {50: 0.01, 60: 0.03, 70: 0.05}

# Option C: allowance as a share of Option A by (member age, beneficiary age)
option_c_percentages_of_a = {
    (55, 55): 0.94,
    (65, 55): 0.84,
    (65, 65): 0.89,
    (70, 65): 0.83,
    (70, 70): 0.86,
}
option_c_general_reduction_approx = 0.88
option_c_survivor_percentage = 2 / 3

retirement_options = ("A", "B", "C", "D")

# COLA is paid only on the first $13,000 of the annual allowance
pension_cola_base_amount = 13_000
pension_cola_default_rate = 0.03
