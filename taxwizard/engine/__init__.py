"""Federal tax determination engine."""

from taxwizard.engine.brackets import (
    TaxResult,
    calculate_tax,
    compute_bracket_tax,
    compute_long_term_gains_tax,
    compute_short_term_gains_tax,
)
from taxwizard.engine.calculator import calculate_taxes
from taxwizard.engine.credits import (
    CreditItem,
    CreditsResult,
    TaxSituation,
    age_at_year_end,
    apply_phase_out,
    calculate_additional_child_tax_credit,
    calculate_child_dependent_care_credit,
    calculate_child_tax_credit,
    calculate_credit_for_other_dependents,
    calculate_earned_income_credit,
    calculate_retirement_savings_credit,
    count_dependent_care_qualifiers,
    count_eic_qualifying_children,
    estimate_self_employment_tax,
    evaluate_credits,
    is_eligible_for_child_tax_credit,
    is_eligible_for_credit_for_other_dependents,
)
from taxwizard.engine.deductions import (
    DeductionResult,
    calculate_qbi_deduction,
    get_standard_deduction,
    resolve_deduction,
    select_deduction,
)
from taxwizard.engine.models import (
    CalculatedResults,
    Dependent,
    TaxDataInput,
)
from taxwizard.engine.rounding import format_currency, round_results, to_cents
from taxwizard.engine.state_tax import StateTaxCalculator, StateTaxInput

__all__ = [
    "CalculatedResults",
    "CreditItem",
    "CreditsResult",
    "DeductionResult",
    "Dependent",
    "StateTaxCalculator",
    "StateTaxInput",
    "TaxDataInput",
    "TaxResult",
    "TaxSituation",
    "age_at_year_end",
    "apply_phase_out",
    "calculate_additional_child_tax_credit",
    "calculate_child_dependent_care_credit",
    "calculate_child_tax_credit",
    "calculate_credit_for_other_dependents",
    "calculate_earned_income_credit",
    "calculate_qbi_deduction",
    "calculate_retirement_savings_credit",
    "calculate_tax",
    "calculate_taxes",
    "compute_bracket_tax",
    "compute_long_term_gains_tax",
    "compute_short_term_gains_tax",
    "count_dependent_care_qualifiers",
    "count_eic_qualifying_children",
    "estimate_self_employment_tax",
    "evaluate_credits",
    "format_currency",
    "get_standard_deduction",
    "is_eligible_for_child_tax_credit",
    "is_eligible_for_credit_for_other_dependents",
    "resolve_deduction",
    "round_results",
    "select_deduction",
    "to_cents",
]
