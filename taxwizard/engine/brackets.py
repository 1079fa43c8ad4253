"""Progressive bracket tax computation.

The bracket walk is independent of any particular year: callers pass the
bracket table (normally a TaxYearConfig's tax_brackets) and the same walk
serves ordinary income, short-term gains and the long-term gains schedule.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from taxwizard.engine.rounding import ZERO, to_cents
from taxwizard.tax.filing_status import FilingStatus
from taxwizard.tax.year_config import (
    TaxBracket,
    TaxYearConfig,
    resolve_tax_year_config,
)

BracketSource = Mapping[FilingStatus, Sequence[TaxBracket]]


@dataclass
class TaxResult:
    """Result of a bracket tax calculation.

    Attributes:
        gross_tax: Tax before credits, in cents.
        bracket_breakdown: List of dicts with bracket, rate, and tax_in_bracket.
        effective_rate: Gross tax divided by taxable income.
    """

    gross_tax: Decimal
    bracket_breakdown: list[dict] = field(default_factory=list)
    effective_rate: Decimal = field(default_factory=lambda: Decimal("0"))


def _select_brackets(
    filing_status: FilingStatus, brackets: BracketSource | None
) -> Sequence[TaxBracket]:
    if brackets is None:
        return resolve_tax_year_config().brackets_for(filing_status)
    selected = brackets.get(filing_status)
    if not selected:
        # Unknown or unmapped status uses the single schedule
        selected = brackets.get(FilingStatus.SINGLE, ())
    return selected


def calculate_tax(
    taxable_income: Decimal,
    filing_status: FilingStatus,
    brackets: BracketSource | None = None,
) -> TaxResult:
    """Calculate federal income tax using marginal brackets.

    Args:
        taxable_income: Income after deductions.
        filing_status: Filing status selecting the schedule.
        brackets: Bracket table by filing status. Defaults to the default
            tax year's ordinary schedule.

    Returns:
        TaxResult with gross tax, bracket breakdown, and effective rate.

    Example:
        >>> result = calculate_tax(Decimal("45400"), FilingStatus.SINGLE)
        >>> result.gross_tax
        Decimal('5216.00')
    """
    remaining_income = taxable_income
    gross_tax = Decimal("0")
    bracket_breakdown: list[dict] = []
    prev_bracket = Decimal("0")

    for bracket in _select_brackets(filing_status, brackets):
        if bracket.upper_bound is None:
            # Top bracket - no limit
            bracket_size = remaining_income
        else:
            bracket_size = min(bracket.upper_bound - prev_bracket, remaining_income)

        if bracket_size <= Decimal("0"):
            break

        tax_in_bracket = bracket_size * bracket.rate
        gross_tax += tax_in_bracket
        bracket_breakdown.append(
            {
                "bracket": bracket.upper_bound,
                "rate": bracket.rate,
                "tax_in_bracket": tax_in_bracket,
            }
        )

        remaining_income -= bracket_size
        if bracket.upper_bound is not None:
            prev_bracket = bracket.upper_bound
        if remaining_income <= Decimal("0"):
            break

    gross_tax = to_cents(gross_tax)

    if taxable_income > Decimal("0"):
        effective_rate = gross_tax / taxable_income
    else:
        effective_rate = Decimal("0")

    return TaxResult(
        gross_tax=gross_tax,
        bracket_breakdown=bracket_breakdown,
        effective_rate=effective_rate,
    )


def compute_bracket_tax(
    taxable_income: Decimal,
    filing_status: FilingStatus,
    brackets: BracketSource | None = None,
) -> Decimal:
    """Apply a progressive schedule to taxable income, rounded to cents.

    Args:
        taxable_income: Non-negative taxable amount.
        filing_status: Filing status; unmapped statuses use single.
        brackets: Swappable bracket table (defaults to the default year).

    Returns:
        Tax in cents; zero for zero income.
    """
    return calculate_tax(taxable_income, filing_status, brackets).gross_tax


def compute_short_term_gains_tax(
    gains: Decimal,
    ordinary_taxable_income: Decimal,
    filing_status: FilingStatus,
    brackets: BracketSource | None = None,
) -> Decimal:
    """Tax on short-term gains, taxed at ordinary rates on top of other income.

    Computed as the marginal difference between the schedule applied with
    and without the gains.
    """
    if gains <= ZERO:
        return to_cents(ZERO)
    base = max(ZERO, ordinary_taxable_income)
    with_gains = compute_bracket_tax(base + gains, filing_status, brackets)
    without_gains = compute_bracket_tax(base, filing_status, brackets)
    return to_cents(with_gains - without_gains)


def compute_long_term_gains_tax(
    gains: Decimal,
    ordinary_taxable_income: Decimal,
    filing_status: FilingStatus,
    config: TaxYearConfig | None = None,
) -> Decimal:
    """Tax on long-term gains stacked above ordinary taxable income.

    Gains fill the 0%/15%/20% schedule starting where ordinary taxable
    income ends.

    Example:
        >>> compute_long_term_gains_tax(
        ...     Decimal("10000"), Decimal("40000"), FilingStatus.SINGLE
        ... )
        Decimal('446.25')
    """
    if gains <= ZERO:
        return to_cents(ZERO)
    config = config or resolve_tax_year_config()

    tax = Decimal("0")
    remaining_gains = gains
    income_level = max(ZERO, ordinary_taxable_income)

    for bracket in config.ltcg_brackets_for(filing_status):
        if remaining_gains <= ZERO:
            break
        if bracket.upper_bound is None:
            available = remaining_gains
        else:
            available = max(ZERO, bracket.upper_bound - income_level)
        if available <= ZERO:
            continue
        gains_in_bracket = min(remaining_gains, available)
        tax += gains_in_bracket * bracket.rate
        remaining_gains -= gains_in_bracket
        income_level += gains_in_bracket

    return to_cents(tax)
