"""Federal tax calculation for the wizard.

calculate_taxes() reconciles one tax year in a fixed pipeline:
- Income aggregation and adjustments to reach AGI
- Deduction and QBI deduction to reach taxable income
- Bracket tax, then credits (nonrefundable and refundable)
- Payments and the refund / amount owed split

The function is total over its input: malformed values have already been
coerced to zero by the models, and a failing state tax collaborator is
logged and skipped.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from decimal import Decimal
from typing import Any

from taxwizard.core.config import settings
from taxwizard.core.logging import bind_calculation_context, get_logger
from taxwizard.engine.brackets import compute_bracket_tax
from taxwizard.engine.credits import CreditsResult, TaxSituation, evaluate_credits
from taxwizard.engine.deductions import select_deduction
from taxwizard.engine.models import (
    AdditionalTaxInput,
    CalculatedResults,
    IncomeInput,
    TaxDataInput,
)
from taxwizard.engine.rounding import ZERO, round_results, to_cents
from taxwizard.engine.state_tax import StateTaxCalculator, StateTaxInput
from taxwizard.tax.year_config import TaxYearConfig, resolve_tax_year_config

logger = get_logger(__name__)


def aggregate_total_income(
    income: IncomeInput, additional_tax: AdditionalTaxInput
) -> Decimal:
    """Total income: a positive pre-computed total wins, otherwise every source.

    Sums the income line items, self-employment income, other income from
    the additional tax step and any free-form additional income entries.
    """
    if income.total_income > ZERO:
        return income.total_income

    line_items = (
        income.wages
        + income.other_earned_income
        + income.interest_income
        + income.dividends
        + income.business_income
        + income.capital_gains
        + income.rental_income
        + income.retirement_income
        + income.unemployment_income
        + income.other_income
    )
    extra_items = sum((item.amount for item in income.additional_income_items), ZERO)
    return (
        line_items
        + additional_tax.self_employment_income
        + additional_tax.other_income
        + extra_items
    )


def aggregate_adjustments(
    income: IncomeInput,
    retirement_contributions: Decimal,
    self_employment_tax: Decimal,
    config: TaxYearConfig,
) -> Decimal:
    """Sum above-the-line adjustments, including half of self-employment tax."""
    adjustments = income.adjustments
    extra_items = sum(
        (item.amount for item in income.additional_adjustment_items), ZERO
    )
    return (
        adjustments.student_loan_interest
        + retirement_contributions
        + adjustments.health_savings_account
        + adjustments.other_adjustments
        + to_cents(self_employment_tax * config.se_tax_deduction_rate)
        + extra_items
    )


def _retirement_contributions(tax_data: TaxDataInput) -> Decimal:
    """Deductible retirement contributions, seeded from the plan breakdown."""
    entered = tax_data.income.adjustments.retirement_contributions
    if entered == ZERO and tax_data.retirement_contributions is not None:
        return tax_data.retirement_contributions.deductible_total
    return entered


def _nonrefundable_credits(
    tax_data: TaxDataInput, computed: CreditsResult
) -> Decimal:
    """Credits applied against tax; entered credits override computed ones."""
    user_credits = tax_data.tax_credits
    if user_credits is not None and user_credits.has_user_entries:
        logger.info(
            "user_credits_override",
            user_total=user_credits.user_total,
            computed_total=computed.total_nonrefundable,
        )
        return user_credits.user_total

    total = computed.total_nonrefundable
    if user_credits is not None:
        total += user_credits.education_credits + user_credits.foreign_tax_credit
    return total


def _state_income_tax(
    calculator: StateTaxCalculator | None,
    tax_data: TaxDataInput,
    agi: Decimal,
    taxable_income: Decimal,
    itemized_deductions: Decimal,
) -> Any:
    """Best-effort state tax; mappings are copied, other results kept as-is."""
    state = tax_data.personal_info.state
    if calculator is None or not state or agi <= ZERO:
        return None

    state_input = StateTaxInput(
        state=state,
        filing_status=tax_data.filing_status,
        federal_agi=agi,
        federal_taxable_income=taxable_income,
        federal_itemized_deductions=itemized_deductions,
        dependents_count=len(tax_data.dependents),
    )
    try:
        result = calculator(state_input)
        if isinstance(result, Mapping):
            result = dict(result)
    except Exception as exc:
        # State tax is supplementary; the federal result stands without it
        logger.warning(
            "state_tax_calculation_failed",
            state=state,
            error=str(exc),
            error_type=type(exc).__name__,
        )
        return None
    return result


def _earned_income_credit(
    precomputed: Decimal | None,
    computed: Decimal,
    investment_income: Decimal,
    config: TaxYearConfig,
) -> Decimal:
    """EIC to refund: a supplied figure wins unless investment income disqualifies it."""
    if precomputed is None:
        return computed
    if investment_income > config.eic_investment_income_limit:
        logger.info(
            "precomputed_eic_disqualified",
            investment_income=investment_income,
            limit=config.eic_investment_income_limit,
        )
        return ZERO
    return precomputed


def calculate_taxes(
    tax_data: TaxDataInput | Mapping[str, Any],
    *,
    config: TaxYearConfig | None = None,
    state_tax_calculator: StateTaxCalculator | None = None,
    compute_earned_income_credit: bool | None = None,
    session_id: str | None = None,
) -> CalculatedResults:
    """Calculate the federal return for one tax year.

    User-entered credits take precedence: when the tax credits section has
    any non-zero child tax, saver's, dependent care, other or total credit,
    its total replaces the engine's nonrefundable credit sum. The itemized
    credit fields in the result always hold the engine's own figures.

    Args:
        tax_data: TaxDataInput or the wizard's raw (camelCase) mapping.
        config: Tax year configuration; defaults to the input's tax year.
        state_tax_calculator: Optional state collaborator.
        compute_earned_income_credit: Compute the EIC; defaults to
            settings.compute_earned_income_credit.
        session_id: Wizard session id attached to every log event of the run.

    Returns:
        CalculatedResults with every money field in cents.

    Example:
        >>> results = calculate_taxes(
        ...     {"personalInfo": {"filingStatus": "single"}, "income": {"wages": 60000}}
        ... )
        >>> results.amount_owed
        Decimal('5216.00')
    """
    if not isinstance(tax_data, TaxDataInput):
        tax_data = TaxDataInput.model_validate(tax_data)

    config = config or resolve_tax_year_config(tax_data.tax_year)
    if compute_earned_income_credit is None:
        compute_earned_income_credit = settings.compute_earned_income_credit

    with bind_calculation_context(config.tax_year, session_id):
        return _calculate(
            tax_data, config, state_tax_calculator, compute_earned_income_credit
        )


def _calculate(
    tax_data: TaxDataInput,
    config: TaxYearConfig,
    state_tax_calculator: StateTaxCalculator | None,
    compute_earned_income_credit: bool,
) -> CalculatedResults:
    filing_status = tax_data.filing_status
    income = tax_data.income
    additional_tax = tax_data.additional_tax
    self_employment_tax = additional_tax.self_employment_tax

    logger.info(
        "tax_calculation_start",
        filing_status=filing_status.value,
        dependents=len(tax_data.dependents),
    )

    # Income and AGI
    total_income = aggregate_total_income(income, additional_tax)
    retirement_contributions = _retirement_contributions(tax_data)
    if income.total_income > ZERO and income.adjusted_gross_income > ZERO:
        agi = income.adjusted_gross_income
        adjustments = total_income - agi
    else:
        adjustments = aggregate_adjustments(
            income, retirement_contributions, self_employment_tax, config
        )
        agi = total_income - adjustments

    # Taxable income
    deduction = select_deduction(tax_data.deductions, filing_status, config)
    qbi_deduction = income.qbi.qbi_deduction if income.qbi is not None else ZERO
    taxable_income = max(ZERO, agi - deduction.amount - qbi_deduction)

    federal_tax = compute_bracket_tax(taxable_income, filing_status, config.tax_brackets)

    # Credits
    user_credits = tax_data.tax_credits
    precomputed_eic = user_credits.earned_income_credit if user_credits else None
    situation = TaxSituation(
        agi=agi,
        filing_status=filing_status,
        dependents=list(tax_data.dependents),
        earned_income=income.earned_income + additional_tax.self_employment_income,
        investment_income=income.investment_income,
        retirement_contributions=retirement_contributions,
        dependent_care_expenses=(
            user_credits.dependent_care_expenses if user_credits else None
        ),
        tax_liability=federal_tax,
        compute_eic=compute_earned_income_credit and precomputed_eic is None,
    )
    computed = evaluate_credits(situation, config)
    computed = replace(
        computed,
        earned_income_credit=_earned_income_credit(
            precomputed_eic,
            computed.earned_income_credit,
            situation.investment_income,
            config,
        ),
    )

    credits = _nonrefundable_credits(tax_data, computed)
    tax_due = (
        max(ZERO, federal_tax - credits) + additional_tax.other_taxes + self_employment_tax
    )
    payments = additional_tax.estimated_tax_payments

    itemized = ZERO if deduction.method == "standard" else deduction.amount
    state_income_tax = _state_income_tax(
        state_tax_calculator, tax_data, agi, taxable_income, itemized
    )

    # Reconciliation
    covered = payments + computed.total_refundable
    if covered > tax_due:
        refund_amount = covered - tax_due
        amount_owed = ZERO
    else:
        refund_amount = ZERO
        amount_owed = tax_due - covered

    results = round_results(
        CalculatedResults(
            tax_year=config.tax_year,
            total_income=total_income,
            adjustments=adjustments,
            adjusted_gross_income=agi,
            deductions=deduction.amount,
            qbi_deduction=qbi_deduction,
            taxable_income=taxable_income,
            federal_tax=federal_tax,
            credits=credits,
            tax_due=tax_due,
            payments=payments,
            refund_amount=refund_amount,
            amount_owed=amount_owed,
            child_tax_credit=computed.child_tax_credit,
            child_dependent_care_credit=computed.child_dependent_care_credit,
            retirement_savings_credit=computed.retirement_savings_credit,
            credit_for_other_dependents=computed.credit_for_other_dependents,
            earned_income_credit=computed.earned_income_credit,
            additional_child_tax_credit=computed.additional_child_tax_credit,
            state_income_tax=state_income_tax,
        )
    )

    logger.info(
        "tax_calculation_complete",
        agi=results.adjusted_gross_income,
        taxable_income=results.taxable_income,
        federal_tax=results.federal_tax,
        credits=results.credits,
        refund_amount=results.refund_amount,
        amount_owed=results.amount_owed,
    )
    return results
