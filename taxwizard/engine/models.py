"""Pydantic models for the tax engine's input and output.

This module defines the immutable value structures exchanged with the wizard:
- TaxDataInput: everything collected by the wizard steps
- CalculatedResults: the reconciled federal result

All monetary fields use Decimal. Every field accepts either its snake_case
name or the wizard's camelCase JSON key. Malformed numbers, dates and filing
statuses are coerced to safe defaults rather than rejected, because the
engine runs on every keystroke while the form is still incomplete.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from taxwizard.core.logging import get_logger
from taxwizard.engine.rounding import ZERO, coerce_money, coerce_optional_money
from taxwizard.tax.filing_status import FilingStatus, parse_filing_status

logger = get_logger(__name__)

_TRUE_STRINGS = frozenset({"true", "1", "yes", "y", "on"})


def coerce_flag(value: object) -> bool:
    """Interpret checkbox-style input; anything unrecognized is False."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def coerce_date(value: object) -> date | None:
    """Parse an ISO date (or datetime string); unparsable input becomes None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def coerce_filing_status(value: object) -> FilingStatus:
    """Parse a filing status, defaulting to single for missing/unknown values."""
    status = parse_filing_status(value)
    if status is None:
        if value is not None and value != "":
            logger.warning("unknown_filing_status", filing_status=str(value))
        return FilingStatus.SINGLE
    return status


def coerce_tax_year(value: object) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _drop_empty_items(value: object) -> list[Any]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if item is not None]


# Type aliases for annotated fields
Money = Annotated[Decimal, BeforeValidator(coerce_money)]
OptionalMoney = Annotated[Decimal | None, BeforeValidator(coerce_optional_money)]
Flag = Annotated[bool, BeforeValidator(coerce_flag)]


class WizardModel(BaseModel):
    """Base model: immutable, camelCase-aware, tolerant of unknown keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# =============================================================================
# Input
# =============================================================================


class Dependent(WizardModel):
    """A dependent claimed on the return.

    Age at the end of the tax year is derived from date_of_birth; a missing or
    unparsable birth date is kept as None.
    """

    first_name: str = Field(default="", description="Dependent first name")
    last_name: str = Field(default="", description="Dependent last name")
    relationship: str = Field(default="", description="Relationship to taxpayer")
    date_of_birth: Annotated[date | None, BeforeValidator(coerce_date)] = Field(
        default=None, description="Date of birth"
    )
    is_student: Flag = Field(default=False, description="Full-time student")
    is_disabled: Flag = Field(default=False, description="Permanently and totally disabled")

    @field_validator("first_name", "last_name", "relationship", mode="before")
    @classmethod
    def blank_if_missing(cls, v: object) -> str:
        """Treat missing text as an empty string."""
        return "" if v is None else str(v)


class PersonalInfo(WizardModel):
    """Personal information step: filing status, state and dependents."""

    first_name: str = Field(default="", description="Taxpayer first name")
    last_name: str = Field(default="", description="Taxpayer last name")
    filing_status: Annotated[FilingStatus, BeforeValidator(coerce_filing_status)] = Field(
        default=FilingStatus.SINGLE, description="Filing status"
    )
    state: str | None = Field(default=None, description="State of residence (e.g. CA)")
    dependents: Annotated[list[Dependent], BeforeValidator(_drop_empty_items)] = Field(
        default_factory=list, description="Claimed dependents"
    )

    @field_validator("first_name", "last_name", mode="before")
    @classmethod
    def blank_if_missing(cls, v: object) -> str:
        """Treat missing text as an empty string."""
        return "" if v is None else str(v)

    @field_validator("state", mode="before")
    @classmethod
    def normalize_state(cls, v: object) -> str | None:
        """Upper-case the state code; blank means no state."""
        if not isinstance(v, str) or not v.strip():
            return None
        return v.strip().upper()


class LineItem(WizardModel):
    """Free-form additional income or adjustment entry."""

    description: str = Field(default="", description="What the amount is for")
    amount: Money = Field(default=ZERO, description="Amount")

    @field_validator("description", mode="before")
    @classmethod
    def blank_if_missing(cls, v: object) -> str:
        return "" if v is None else str(v)


class Adjustments(WizardModel):
    """Above-the-line adjustments to income."""

    student_loan_interest: Money = Field(default=ZERO, description="Student loan interest deduction")
    retirement_contributions: Money = Field(default=ZERO, description="Deductible retirement contributions")
    health_savings_account: Money = Field(default=ZERO, description="HSA deduction")
    other_adjustments: Money = Field(default=ZERO, description="Other adjustments")


class QBIInput(WizardModel):
    """Qualified Business Income (Section 199A) inputs."""

    qbi_deduction: Money = Field(default=ZERO, description="Pre-computed QBI deduction")
    qualified_business_income: Money = Field(default=ZERO, description="Net qualified business income")
    w2_wages: Money = Field(default=ZERO, alias="w2Wages", description="W-2 wages paid by the business")
    qualified_property: Money = Field(default=ZERO, description="UBIA of qualified property")
    is_sstb: Flag = Field(default=False, description="Specified service trade or business")


class IncomeInput(WizardModel):
    """Income step: line items, adjustments and optional pre-computed totals.

    A positive total_income is authoritative. When both total_income and
    adjusted_gross_income are positive the engine back-computes adjustments.
    """

    wages: Money = Field(default=ZERO, description="W-2 wages, salaries, tips")
    other_earned_income: Money = Field(default=ZERO, description="Other earned income")
    interest_income: Money = Field(default=ZERO, description="Taxable interest")
    dividends: Money = Field(default=ZERO, description="Ordinary dividends")
    business_income: Money = Field(default=ZERO, description="Business income (Schedule C)")
    capital_gains: Money = Field(default=ZERO, description="Net capital gains")
    rental_income: Money = Field(default=ZERO, description="Rental income (Schedule E)")
    retirement_income: Money = Field(default=ZERO, description="Taxable pensions and IRA distributions")
    unemployment_income: Money = Field(default=ZERO, description="Unemployment compensation")
    other_income: Money = Field(default=ZERO, description="Other income")
    total_income: Money = Field(default=ZERO, description="Pre-computed total income")
    adjusted_gross_income: Money = Field(default=ZERO, description="Pre-computed AGI")
    adjustments: Adjustments = Field(default_factory=Adjustments)
    qbi: QBIInput | None = Field(default=None, description="Qualified business income")
    additional_income_items: Annotated[list[LineItem], BeforeValidator(_drop_empty_items)] = Field(
        default_factory=list
    )
    additional_adjustment_items: Annotated[list[LineItem], BeforeValidator(_drop_empty_items)] = Field(
        default_factory=list
    )

    @field_validator("adjustments", mode="before")
    @classmethod
    def default_adjustments(cls, v: object) -> object:
        return {} if v is None else v

    @property
    def earned_income(self) -> Decimal:
        """Wages plus other earned income (self-employment is added by the engine)."""
        return self.wages + self.other_earned_income

    @property
    def investment_income(self) -> Decimal:
        """Interest, dividends and capital gains, as tested for EIC."""
        return self.interest_income + self.dividends + self.capital_gains


class DeductionsInput(WizardModel):
    """Deductions step: standard deduction flag and itemized total."""

    use_standard_deduction: bool = Field(default=True, description="Take the standard deduction")
    total_deductions: Money = Field(default=ZERO, description="Itemized deductions total")

    @field_validator("use_standard_deduction", mode="before")
    @classmethod
    def default_to_standard(cls, v: object) -> bool:
        """A missing flag means the standard deduction."""
        if v is None:
            return True
        return coerce_flag(v)


class TaxCreditsInput(WizardModel):
    """User-entered credits from the credits step.

    When any of the primary credit fields or the total is non-zero, the
    user's figures override the engine's own nonrefundable credit total.
    """

    child_tax_credit: Money = Field(default=ZERO)
    child_dependent_care_credit: Money = Field(default=ZERO)
    education_credits: Money = Field(default=ZERO)
    retirement_savings_credit: Money = Field(default=ZERO)
    foreign_tax_credit: Money = Field(default=ZERO)
    other_credits: Money = Field(default=ZERO)
    earned_income_credit: OptionalMoney = Field(
        default=None, description="Pre-computed Earned Income Credit"
    )
    total_credits: Money = Field(default=ZERO)
    dependent_care_expenses: OptionalMoney = Field(
        default=None, description="Qualifying child and dependent care expenses"
    )

    @property
    def has_user_entries(self) -> bool:
        return any(
            amount != ZERO
            for amount in (
                self.child_tax_credit,
                self.retirement_savings_credit,
                self.child_dependent_care_credit,
                self.other_credits,
                self.total_credits,
            )
        )

    @property
    def user_total(self) -> Decimal:
        """The entered total, or the sum of entered components when it is blank."""
        if self.total_credits != ZERO:
            return self.total_credits
        return (
            self.child_tax_credit
            + self.child_dependent_care_credit
            + self.education_credits
            + self.retirement_savings_credit
            + self.foreign_tax_credit
            + self.other_credits
        )


class AdditionalTaxInput(WizardModel):
    """Additional tax step: self-employment, estimated payments, other taxes."""

    self_employment_income: Money = Field(default=ZERO, description="Net self-employment income")
    self_employment_tax: Money = Field(default=ZERO, description="Schedule SE tax")
    estimated_tax_payments: Money = Field(default=ZERO, description="Estimated tax payments")
    other_income: Money = Field(default=ZERO, description="Other additional income")
    other_taxes: Money = Field(default=ZERO, description="Other taxes")


class RetirementContributionsInput(WizardModel):
    """Retirement contributions step, by plan type."""

    traditional_ira: Money = Field(default=ZERO, alias="traditionalIRA")
    roth_ira: Money = Field(default=ZERO, alias="rothIRA")
    plan_401k: Money = Field(default=ZERO, alias="plan401k")
    plan_403b: Money = Field(default=ZERO, alias="plan403b")
    plan_457: Money = Field(default=ZERO, alias="plan457")
    simple_ira: Money = Field(default=ZERO, alias="simpleIRA")
    sep_ira: Money = Field(default=ZERO, alias="sepIRA")
    tsp: Money = Field(default=ZERO, alias="tsp")
    able: Money = Field(default=ZERO, alias="able")
    other_retirement_plans: Money = Field(default=ZERO, alias="otherRetirementPlans")

    @property
    def deductible_total(self) -> Decimal:
        """Contributions that reduce AGI (Roth, ABLE and other plans excluded)."""
        return (
            self.traditional_ira
            + self.plan_401k
            + self.plan_403b
            + self.plan_457
            + self.simple_ira
            + self.sep_ira
            + self.tsp
        )

    @property
    def total_contributions(self) -> Decimal:
        return self.deductible_total + self.roth_ira + self.able + self.other_retirement_plans


class TaxDataInput(WizardModel):
    """Complete wizard input for one calculation.

    Example:
        >>> data = TaxDataInput.model_validate(
        ...     {"personalInfo": {"filingStatus": "single"}, "income": {"wages": 60000}}
        ... )
        >>> data.filing_status
        <FilingStatus.SINGLE: 'single'>
    """

    tax_year: Annotated[int | None, BeforeValidator(coerce_tax_year)] = Field(
        default=None, description="Tax year; None uses the configured default"
    )
    personal_info: PersonalInfo = Field(default_factory=PersonalInfo)
    income: IncomeInput = Field(default_factory=IncomeInput)
    deductions: DeductionsInput = Field(default_factory=DeductionsInput)
    tax_credits: TaxCreditsInput | None = Field(default=None)
    additional_tax: AdditionalTaxInput = Field(default_factory=AdditionalTaxInput)
    retirement_contributions: RetirementContributionsInput | None = Field(default=None)

    @field_validator("personal_info", "income", "deductions", "additional_tax", mode="before")
    @classmethod
    def default_section(cls, v: object) -> object:
        """A null wizard section behaves like an empty one."""
        return {} if v is None else v

    @property
    def filing_status(self) -> FilingStatus:
        return self.personal_info.filing_status

    @property
    def dependents(self) -> list[Dependent]:
        return self.personal_info.dependents


# =============================================================================
# Output
# =============================================================================


class CalculatedResults(WizardModel):
    """Reconciled federal result.

    Exactly one of refund_amount / amount_owed is non-zero (both are zero
    when payments and refundable credits exactly cover the tax due). Every
    money field is quantized to cents by the engine.
    """

    tax_year: int
    total_income: Money = ZERO
    adjustments: Money = ZERO
    adjusted_gross_income: Money = ZERO
    deductions: Money = ZERO
    qbi_deduction: Money = ZERO
    taxable_income: Money = ZERO
    federal_tax: Money = ZERO
    credits: Money = ZERO
    tax_due: Money = ZERO
    payments: Money = ZERO
    refund_amount: Money = ZERO
    amount_owed: Money = ZERO

    # Itemized credits
    child_tax_credit: Money = ZERO
    child_dependent_care_credit: Money = ZERO
    retirement_savings_credit: Money = ZERO
    credit_for_other_dependents: Money = ZERO
    earned_income_credit: Money = ZERO
    additional_child_tax_credit: Money = ZERO

    state_income_tax: Any = Field(
        default=None, description="Opaque state collaborator result"
    )
