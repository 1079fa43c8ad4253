"""Deduction resolution: standard vs itemized, plus the Section 199A QBI deduction."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from taxwizard.core.logging import get_logger
from taxwizard.engine.models import DeductionsInput
from taxwizard.engine.rounding import ZERO, to_whole_dollars
from taxwizard.tax.filing_status import FilingStatus
from taxwizard.tax.year_config import TaxYearConfig, resolve_tax_year_config

logger = get_logger(__name__)


@dataclass
class DeductionResult:
    """Result of deduction selection.

    Attributes:
        method: Either "standard" or "itemized".
        amount: The deduction amount to use.
        standard_amount: The standard deduction for this filing status.
        itemized_amount: The total itemized deductions provided.
    """

    method: str
    amount: Decimal
    standard_amount: Decimal
    itemized_amount: Decimal


def get_standard_deduction(
    filing_status: FilingStatus, config: TaxYearConfig | None = None
) -> Decimal:
    """Get the standard deduction for a filing status.

    Args:
        filing_status: Filing status; unmapped statuses use single.
        config: Tax year configuration (defaults to the default year).

    Returns:
        Standard deduction amount.

    Example:
        >>> get_standard_deduction(FilingStatus.SINGLE)
        Decimal('14600')
    """
    config = config or resolve_tax_year_config()
    return config.standard_deduction_for(filing_status)


def select_deduction(
    deductions: DeductionsInput,
    filing_status: FilingStatus,
    config: TaxYearConfig | None = None,
) -> DeductionResult:
    """Select the deduction the taxpayer chose.

    The taxpayer's choice is honored as-is: the itemized total is used when
    the standard deduction is declined, even if it is smaller. Validation of
    that figure happens upstream.
    """
    standard_amount = get_standard_deduction(filing_status, config)
    if deductions.use_standard_deduction:
        return DeductionResult(
            method="standard",
            amount=standard_amount,
            standard_amount=standard_amount,
            itemized_amount=deductions.total_deductions,
        )
    return DeductionResult(
        method="itemized",
        amount=deductions.total_deductions,
        standard_amount=standard_amount,
        itemized_amount=deductions.total_deductions,
    )


def resolve_deduction(
    deductions: DeductionsInput,
    filing_status: FilingStatus,
    config: TaxYearConfig | None = None,
) -> Decimal:
    """Deduction amount: the standard deduction, or the itemized total."""
    return select_deduction(deductions, filing_status, config).amount


def calculate_qbi_deduction(
    qbi_income: Decimal,
    adjusted_gross_income: Decimal,
    taxable_income: Decimal,
    filing_status: FilingStatus,
    w2_wages: Decimal = ZERO,
    qualified_property: Decimal = ZERO,
    is_sstb: bool = False,
    config: TaxYearConfig | None = None,
) -> Decimal:
    """Calculate the Section 199A qualified business income deduction.

    Below the threshold the deduction is 20% of QBI, capped at 20% of taxable
    income. Above it, the W-2 wage / property limit applies: the greater of
    50% of wages, or 25% of wages plus 2.5% of qualified property. A
    specified service business is phased out linearly across the phase-out
    range and gets nothing at or above its end.

    Args:
        qbi_income: Net qualified business income.
        adjusted_gross_income: AGI used for the threshold test.
        taxable_income: Taxable income before the QBI deduction.
        filing_status: Filing status selecting threshold and range.
        w2_wages: W-2 wages paid by the business.
        qualified_property: Unadjusted basis of qualified property.
        is_sstb: Whether the business is a specified service business.
        config: Tax year configuration.

    Returns:
        Deduction in whole dollars, never negative.
    """
    if qbi_income <= ZERO:
        return ZERO
    config = config or resolve_tax_year_config()

    threshold = config.qbi_threshold_for(filing_status)
    phaseout_range = config.qbi_phaseout_range_for(filing_status)
    exclusion_threshold = threshold + phaseout_range

    basic_deduction = qbi_income * config.qbi_rate
    taxable_income_limit = max(ZERO, taxable_income) * config.qbi_rate

    if is_sstb:
        if adjusted_gross_income >= exclusion_threshold:
            logger.debug(
                "qbi_sstb_excluded",
                agi=adjusted_gross_income,
                exclusion_threshold=exclusion_threshold,
            )
            return ZERO
        if adjusted_gross_income > threshold and phaseout_range > ZERO:
            phaseout_ratio = (adjusted_gross_income - threshold) / phaseout_range
            base = min(basic_deduction, taxable_income_limit)
            logger.debug("qbi_sstb_phaseout", phaseout_ratio=phaseout_ratio)
            return max(ZERO, to_whole_dollars(base * (1 - phaseout_ratio)))

    if adjusted_gross_income <= threshold:
        deduction = min(basic_deduction, taxable_income_limit)
    else:
        wage_limit = max(
            w2_wages * config.qbi_wage_limit_rate,
            w2_wages * config.qbi_wage_property_wage_rate
            + qualified_property * config.qbi_property_rate,
        )
        deduction = min(basic_deduction, wage_limit, taxable_income_limit)

    return max(ZERO, to_whole_dollars(deduction))
