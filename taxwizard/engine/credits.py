"""Credit eligibility predicates and phase-out calculations.

Each credit is a pure function of explicit inputs:
- Child Tax Credit and Credit for Other Dependents (Schedule 8812)
- Additional Child Tax Credit, the refundable CTC remainder (Schedule 8812)
- Retirement Savings Contributions Credit (Form 8880)
- Child and Dependent Care Credit (Form 2441)
- Earned Income Credit (Schedule EIC)

evaluate_credits() runs all of them for one TaxSituation. All monetary
values use Decimal; no function raises for numeric input.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_CEILING, ROUND_FLOOR, Decimal

from taxwizard.core.logging import get_logger
from taxwizard.engine.models import Dependent
from taxwizard.engine.rounding import ZERO, to_cents, to_whole_dollars
from taxwizard.tax.filing_status import FilingStatus
from taxwizard.tax.year_config import TaxYearConfig, resolve_tax_year_config

logger = get_logger(__name__)


# =============================================================================
# Data Structures
# =============================================================================


@dataclass
class TaxSituation:
    """Tax situation for credits evaluation.

    Attributes:
        agi: Adjusted Gross Income.
        filing_status: Filing status.
        dependents: Claimed dependents.
        earned_income: Wages, other earned income and self-employment income.
        investment_income: Interest, dividends and capital gains.
        retirement_contributions: Contributions eligible for the Saver's Credit.
        dependent_care_expenses: Care expenses; None estimates them per dependent.
        tax_liability: Pre-credit federal tax, for the ACTC.
        compute_eic: Whether to compute the Earned Income Credit.
    """

    agi: Decimal
    filing_status: FilingStatus
    dependents: list[Dependent] = field(default_factory=list)
    earned_income: Decimal = field(default_factory=lambda: Decimal("0"))
    investment_income: Decimal = field(default_factory=lambda: Decimal("0"))
    retirement_contributions: Decimal = field(default_factory=lambda: Decimal("0"))
    dependent_care_expenses: Decimal | None = None
    tax_liability: Decimal = field(default_factory=lambda: Decimal("0"))
    compute_eic: bool = False


@dataclass
class CreditItem:
    """Individual tax credit.

    Attributes:
        name: Name of the credit (e.g., "Child Tax Credit").
        amount: Credit amount in dollars.
        refundable: Whether the credit is refundable (can exceed tax liability).
        form: IRS form for claiming this credit.
    """

    name: str
    amount: Decimal
    refundable: bool
    form: str


@dataclass
class CreditsResult:
    """Result of credits evaluation.

    Attributes:
        child_tax_credit: CTC after phase-out (full amount, before liability).
        credit_for_other_dependents: ODC after phase-out.
        retirement_savings_credit: Saver's Credit.
        child_dependent_care_credit: Child and Dependent Care Credit.
        earned_income_credit: EIC (zero unless computed).
        additional_child_tax_credit: Refundable CTC remainder.
        credits: Non-zero credits as display items.
    """

    child_tax_credit: Decimal
    credit_for_other_dependents: Decimal
    retirement_savings_credit: Decimal
    child_dependent_care_credit: Decimal
    earned_income_credit: Decimal
    additional_child_tax_credit: Decimal
    credits: list[CreditItem] = field(default_factory=list)

    @property
    def total_nonrefundable(self) -> Decimal:
        """Nonrefundable credits computed by the engine."""
        return (
            self.child_tax_credit
            + self.credit_for_other_dependents
            + self.retirement_savings_credit
            + self.child_dependent_care_credit
        )

    @property
    def total_refundable(self) -> Decimal:
        return self.additional_child_tax_credit + self.earned_income_credit


# =============================================================================
# Eligibility
# =============================================================================


def age_at_year_end(date_of_birth: date | None, tax_year: int) -> int | None:
    """Age on December 31 of the tax year, or None without a birth date.

    Example:
        >>> age_at_year_end(date(2008, 1, 1), 2024)
        16
    """
    if date_of_birth is None:
        return None
    year_end = date(tax_year, 12, 31)
    age = year_end.year - date_of_birth.year
    if (year_end.month, year_end.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def is_eligible_for_child_tax_credit(
    dependent: Dependent, config: TaxYearConfig | None = None
) -> bool:
    """Whether a dependent is under the CTC age limit (17) at year end.

    A dependent without a usable birth date cannot be shown to be under 17
    and is therefore not CTC-eligible.
    """
    config = config or resolve_tax_year_config()
    age = age_at_year_end(dependent.date_of_birth, config.tax_year)
    return age is not None and age < config.ctc_age_limit


def is_eligible_for_credit_for_other_dependents(
    dependent: Dependent, config: TaxYearConfig | None = None
) -> bool:
    """Exact complement of CTC eligibility."""
    return not is_eligible_for_child_tax_credit(dependent, config)


def count_dependent_care_qualifiers(
    dependents: Sequence[Dependent], config: TaxYearConfig | None = None
) -> int:
    """Dependents under 13 at year end, or disabled at any age."""
    config = config or resolve_tax_year_config()
    count = 0
    for dependent in dependents:
        age = age_at_year_end(dependent.date_of_birth, config.tax_year)
        if dependent.is_disabled or (
            age is not None and age < config.dependent_care_age_limit
        ):
            count += 1
    return count


def count_eic_qualifying_children(
    dependents: Sequence[Dependent], config: TaxYearConfig | None = None
) -> int:
    """Children under 19, under 24 if a student, or disabled at any age."""
    config = config or resolve_tax_year_config()
    count = 0
    for dependent in dependents:
        if dependent.is_disabled:
            count += 1
            continue
        age = age_at_year_end(dependent.date_of_birth, config.tax_year)
        if age is None:
            continue
        if age < config.eic_child_age_limit or (
            dependent.is_student and age < config.eic_student_age_limit
        ):
            count += 1
    return count


# =============================================================================
# Credit calculations
# =============================================================================


def apply_phase_out(
    base_amount: Decimal,
    income: Decimal,
    threshold: Decimal,
    increment: Decimal,
    rate_per_increment: Decimal,
) -> Decimal:
    """Reduce a credit by a fixed amount per (partial) increment over a threshold.

    reduced = max(0, base - ceil(excess / increment) * rate_per_increment)

    Example:
        >>> apply_phase_out(Decimal("2000"), Decimal("200001"),
        ...                 Decimal("200000"), Decimal("1000"), Decimal("50"))
        Decimal('1950')
    """
    if income <= threshold or increment <= ZERO:
        return max(ZERO, base_amount)
    excess = income - threshold
    increments = (excess / increment).to_integral_value(rounding=ROUND_CEILING)
    return max(ZERO, base_amount - increments * rate_per_increment)


def calculate_child_tax_credit(
    dependents: Sequence[Dependent],
    adjusted_gross_income: Decimal,
    filing_status: FilingStatus,
    config: TaxYearConfig | None = None,
) -> Decimal:
    """Calculate the Child Tax Credit with phase-out.

    $2,000 per child under 17, reduced by $50 per $1,000 (or part thereof)
    of AGI over $200,000 ($400,000 for joint filers).

    Args:
        dependents: Claimed dependents.
        adjusted_gross_income: AGI for the phase-out.
        filing_status: Filing status selecting the threshold.
        config: Tax year configuration.

    Returns:
        CTC amount after phase-out, in cents.
    """
    config = config or resolve_tax_year_config()
    eligible_children = sum(
        1 for dep in dependents if is_eligible_for_child_tax_credit(dep, config)
    )
    if eligible_children == 0:
        return to_cents(ZERO)

    base_credit = config.ctc_amount_per_child * eligible_children
    threshold = config.ctc_threshold_for(filing_status)
    credit = apply_phase_out(
        base_credit,
        adjusted_gross_income,
        threshold,
        config.ctc_phaseout_increment,
        config.ctc_phaseout_rate,
    )

    logger.debug(
        "child_tax_credit_calculated",
        eligible_children=eligible_children,
        agi=adjusted_gross_income,
        threshold=threshold,
        base_credit=base_credit,
        credit=credit,
    )
    return to_cents(credit)


def calculate_credit_for_other_dependents(
    dependents: Sequence[Dependent],
    adjusted_gross_income: Decimal,
    filing_status: FilingStatus,
    config: TaxYearConfig | None = None,
) -> Decimal:
    """Calculate the $500 Credit for Other Dependents with phase-out.

    Covers every dependent that is not CTC-eligible, with the same
    threshold, increment and rate as the Child Tax Credit.
    """
    config = config or resolve_tax_year_config()
    eligible_dependents = sum(
        1
        for dep in dependents
        if is_eligible_for_credit_for_other_dependents(dep, config)
    )
    if eligible_dependents == 0:
        return to_cents(ZERO)

    base_credit = config.odc_amount_per_dependent * eligible_dependents
    credit = apply_phase_out(
        base_credit,
        adjusted_gross_income,
        config.ctc_threshold_for(filing_status),
        config.ctc_phaseout_increment,
        config.ctc_phaseout_rate,
    )
    logger.debug(
        "credit_for_other_dependents_calculated",
        eligible_dependents=eligible_dependents,
        credit=credit,
    )
    return to_cents(credit)


def calculate_additional_child_tax_credit(
    dependents: Sequence[Dependent],
    earned_income: Decimal,
    tax_liability: Decimal,
    child_tax_credit: Decimal,
    config: TaxYearConfig | None = None,
) -> Decimal:
    """Calculate the refundable Additional Child Tax Credit.

    Only the part of the CTC not absorbed by tax liability can be refunded,
    limited to 15% of earned income over $2,500 and to $1,600 per child.

    Args:
        dependents: Claimed dependents.
        earned_income: Earned income including self-employment.
        tax_liability: Federal tax before credits.
        child_tax_credit: CTC after phase-out.
        config: Tax year configuration.

    Returns:
        ACTC in cents; zero when earned income does not exceed $2,500.
    """
    config = config or resolve_tax_year_config()
    eligible_children = sum(
        1 for dep in dependents if is_eligible_for_child_tax_credit(dep, config)
    )
    if eligible_children == 0 or child_tax_credit <= ZERO:
        return to_cents(ZERO)

    non_refundable_used = min(child_tax_credit, max(ZERO, tax_liability))
    remaining_credit = child_tax_credit - non_refundable_used
    if remaining_credit <= ZERO:
        return to_cents(ZERO)
    if earned_income <= config.actc_earned_income_floor:
        return to_cents(ZERO)

    formula_amount = (earned_income - config.actc_earned_income_floor) * config.actc_rate
    max_refundable = config.actc_max_per_child * eligible_children
    refundable = min(remaining_credit, formula_amount, max_refundable)

    logger.debug(
        "additional_child_tax_credit_calculated",
        remaining_credit=remaining_credit,
        formula_amount=formula_amount,
        max_refundable=max_refundable,
        refundable=refundable,
    )
    return to_cents(refundable)


def calculate_retirement_savings_credit(
    contributions: Decimal,
    adjusted_gross_income: Decimal,
    filing_status: FilingStatus,
    config: TaxYearConfig | None = None,
) -> Decimal:
    """Calculate the Retirement Savings Contributions (Saver's) Credit.

    Contributions count up to $2,000 per person ($4,000 for joint filers).
    The rate is 50%, 20% or 10% for the first AGI tier the income falls
    within, and 0% above the last tier.
    """
    if contributions <= ZERO:
        return to_cents(ZERO)
    config = config or resolve_tax_year_config()

    max_eligible = config.savers_credit_max_contribution
    if filing_status.is_joint:
        max_eligible *= 2
    eligible_contribution = min(contributions, max_eligible)

    rate = ZERO
    thresholds = config.savers_thresholds_for(filing_status)
    for limit, tier_rate in zip(thresholds, config.savers_credit_rates):
        if adjusted_gross_income <= limit:
            rate = tier_rate
            break

    return to_cents(eligible_contribution * rate)


def calculate_child_dependent_care_credit(
    care_expenses: Decimal,
    adjusted_gross_income: Decimal,
    qualifying_dependents: int,
    config: TaxYearConfig | None = None,
) -> Decimal:
    """Calculate the Child and Dependent Care Credit.

    Expenses are capped at $3,000 for one qualifying person and $6,000 for
    two or more. The rate starts at 35% and drops one point for each full
    $2,000 of AGI above $15,000, never below 20%.
    """
    if care_expenses <= ZERO or qualifying_dependents <= 0:
        return to_cents(ZERO)
    config = config or resolve_tax_year_config()

    if qualifying_dependents > 1:
        max_expenses = config.dependent_care_max_expenses_multiple
    else:
        max_expenses = config.dependent_care_max_expenses_one
    eligible_expenses = min(care_expenses, max_expenses)

    rate = config.dependent_care_base_rate
    if (
        adjusted_gross_income > config.dependent_care_agi_threshold
        and config.dependent_care_agi_increment > ZERO
    ):
        steps = (
            (adjusted_gross_income - config.dependent_care_agi_threshold)
            / config.dependent_care_agi_increment
        ).to_integral_value(rounding=ROUND_FLOOR)
        rate = max(
            config.dependent_care_min_rate,
            rate - steps * config.dependent_care_rate_decrement,
        )

    return to_cents(eligible_expenses * rate)


def calculate_earned_income_credit(
    earned_income: Decimal,
    adjusted_gross_income: Decimal,
    investment_income: Decimal,
    qualifying_children: int,
    filing_status: FilingStatus,
    config: TaxYearConfig | None = None,
) -> Decimal:
    """Calculate the Earned Income Credit.

    Disqualified when investment income exceeds the year's limit or AGI
    exceeds the income limit for the child count. Otherwise the lesser of
    earned income and AGI is phased in up to the maximum credit and phased
    out above the phase-out start (joint thresholds for married filing
    jointly).

    Args:
        earned_income: Earned income including self-employment.
        adjusted_gross_income: AGI.
        investment_income: Interest, dividends and capital gains.
        qualifying_children: EIC qualifying children (3+ share one row).
        filing_status: Filing status.
        config: Tax year configuration.

    Returns:
        EIC rounded to whole dollars.
    """
    config = config or resolve_tax_year_config()

    if investment_income > config.eic_investment_income_limit:
        logger.debug(
            "earned_income_credit_disqualified",
            investment_income=investment_income,
            limit=config.eic_investment_income_limit,
        )
        return ZERO

    params = config.eic_parameters_for(qualifying_children)
    is_joint = filing_status == FilingStatus.MARRIED_JOINT
    income_limit = params.income_limit_joint if is_joint else params.income_limit_single
    if adjusted_gross_income > income_limit:
        return ZERO

    basis = min(earned_income, adjusted_gross_income)
    if basis <= ZERO:
        return ZERO

    credit = min(
        min(basis, params.earned_income_amount) * params.phase_in_rate,
        params.max_credit,
    )
    phase_out_start = (
        params.phase_out_start_joint if is_joint else params.phase_out_start_single
    )
    if basis > phase_out_start:
        credit -= (basis - phase_out_start) * params.phase_out_rate

    return max(ZERO, to_whole_dollars(credit))


def estimate_self_employment_tax(
    self_employment_income: Decimal, config: TaxYearConfig | None = None
) -> Decimal:
    """Estimate Schedule SE tax: 15.3% of 92.35% of net earnings.

    Example:
        >>> estimate_self_employment_tax(Decimal("10000"))
        Decimal('1412.96')
    """
    if self_employment_income <= ZERO:
        return to_cents(ZERO)
    config = config or resolve_tax_year_config()
    return to_cents(
        self_employment_income * config.se_net_earnings_factor * config.se_tax_rate
    )


# =============================================================================
# Credits Evaluation
# =============================================================================


def evaluate_credits(
    situation: TaxSituation, config: TaxYearConfig | None = None
) -> CreditsResult:
    """Evaluate every credit for a tax situation.

    Credits are independent except the ACTC, which needs the CTC and the
    pre-credit tax liability.

    Args:
        situation: TaxSituation with all relevant data.
        config: Tax year configuration.

    Returns:
        CreditsResult with each credit and display items.
    """
    config = config or resolve_tax_year_config()
    status = situation.filing_status
    agi = situation.agi

    child_tax_credit = calculate_child_tax_credit(situation.dependents, agi, status, config)
    credit_for_other_dependents = calculate_credit_for_other_dependents(
        situation.dependents, agi, status, config
    )
    retirement_savings_credit = calculate_retirement_savings_credit(
        situation.retirement_contributions, agi, status, config
    )

    care_qualifiers = count_dependent_care_qualifiers(situation.dependents, config)
    care_expenses = situation.dependent_care_expenses
    if care_expenses is None:
        care_expenses = config.dependent_care_estimated_expense * care_qualifiers
    child_dependent_care_credit = calculate_child_dependent_care_credit(
        care_expenses, agi, care_qualifiers, config
    )

    earned_income_credit = ZERO
    if situation.compute_eic:
        earned_income_credit = calculate_earned_income_credit(
            situation.earned_income,
            agi,
            situation.investment_income,
            count_eic_qualifying_children(situation.dependents, config),
            status,
            config,
        )

    additional_child_tax_credit = calculate_additional_child_tax_credit(
        situation.dependents,
        situation.earned_income,
        situation.tax_liability,
        child_tax_credit,
        config,
    )

    credits: list[CreditItem] = []
    for name, amount, refundable, form in (
        ("Child Tax Credit", child_tax_credit, False, "Schedule 8812"),
        ("Credit for Other Dependents", credit_for_other_dependents, False, "Schedule 8812"),
        ("Saver's Credit", retirement_savings_credit, False, "Form 8880"),
        ("Child and Dependent Care Credit", child_dependent_care_credit, False, "Form 2441"),
        ("Additional Child Tax Credit", additional_child_tax_credit, True, "Schedule 8812"),
        ("Earned Income Credit", earned_income_credit, True, "Schedule EIC"),
    ):
        if amount > ZERO:
            credits.append(
                CreditItem(name=name, amount=amount, refundable=refundable, form=form)
            )

    return CreditsResult(
        child_tax_credit=child_tax_credit,
        credit_for_other_dependents=credit_for_other_dependents,
        retirement_savings_credit=retirement_savings_credit,
        child_dependent_care_credit=child_dependent_care_credit,
        earned_income_credit=earned_income_credit,
        additional_child_tax_credit=additional_child_tax_credit,
        credits=credits,
    )
