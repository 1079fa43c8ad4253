"""Tax year-specific constants and thresholds.

This module centralizes tax year-specific values like bracket schedules,
deduction amounts, credit phase-out thresholds and EIC tables so the engine
never hardcodes them. A bracket or threshold table is swapped simply by
passing a different TaxYearConfig.

Example:
    >>> from taxwizard.tax.filing_status import FilingStatus
    >>> from taxwizard.tax.year_config import get_tax_year_config
    >>> config = get_tax_year_config(2024)
    >>> config.standard_deduction_for(FilingStatus.SINGLE)
    Decimal('14600')
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

from taxwizard.core.config import settings
from taxwizard.core.logging import get_logger
from taxwizard.tax.filing_status import FilingStatus

logger = get_logger(__name__)

_SINGLE = FilingStatus.SINGLE
_MFJ = FilingStatus.MARRIED_JOINT
_MFS = FilingStatus.MARRIED_SEPARATE
_HOH = FilingStatus.HEAD_OF_HOUSEHOLD
_QW = FilingStatus.QUALIFYING_WIDOW


@dataclass(frozen=True)
class TaxBracket:
    """One marginal rate band.

    Attributes:
        rate: Marginal rate applied inside the band.
        upper_bound: Top of the band; None means no limit.
    """

    rate: Decimal
    upper_bound: Decimal | None


BracketTable = dict[FilingStatus, tuple[TaxBracket, ...]]


@dataclass(frozen=True)
class EICParameters:
    """Earned Income Credit parameters for one qualifying-child count.

    Attributes:
        earned_income_amount: Income at which the phase-in reaches the maximum.
        max_credit: Maximum credit.
        phase_in_rate: Credit percentage during phase-in.
        phase_out_rate: Phase-out percentage.
        phase_out_start_single: Phase-out start for non-joint filers.
        phase_out_start_joint: Phase-out start for married filing jointly.
        income_limit_single: Income at which the credit is fully phased out.
        income_limit_joint: Joint-filer income limit.
    """

    earned_income_amount: Decimal
    max_credit: Decimal
    phase_in_rate: Decimal
    phase_out_rate: Decimal
    phase_out_start_single: Decimal
    phase_out_start_joint: Decimal
    income_limit_single: Decimal
    income_limit_joint: Decimal


def _brackets(*bands: tuple[str, str | None]) -> tuple[TaxBracket, ...]:
    return tuple(
        TaxBracket(
            rate=Decimal(rate),
            upper_bound=Decimal(upper) if upper is not None else None,
        )
        for rate, upper in bands
    )


@dataclass(frozen=True)
class TaxYearConfig:
    """Tax year-specific constants and thresholds.

    All monetary values are Decimal for precision in tax calculations.
    This dataclass is frozen to prevent accidental modification.

    Attributes:
        tax_year: The tax year these values apply to.
        tax_brackets: Ordinary income brackets by filing status.
        standard_deductions: Standard deduction by filing status.
        ctc_phaseout_thresholds: CTC/ODC phase-out start by filing status.
        savers_credit_thresholds: AGI limits for the 50%/20%/10% tiers.
        eic_parameters: EIC table keyed by qualifying-child count (0-3).
        qbi_thresholds: Section 199A threshold amounts by filing status.
        ltcg_brackets: Long-term capital gains 0%/15%/20% schedule.
    """

    tax_year: int
    tax_brackets: BracketTable
    standard_deductions: dict[FilingStatus, Decimal]

    # Child Tax Credit / Credit for Other Dependents
    ctc_amount_per_child: Decimal = Decimal("2000")
    ctc_age_limit: int = 17
    odc_amount_per_dependent: Decimal = Decimal("500")
    ctc_phaseout_thresholds: dict[FilingStatus, Decimal] = field(
        default_factory=lambda: {
            _SINGLE: Decimal("200000"),
            _MFJ: Decimal("400000"),
            _MFS: Decimal("200000"),
            _HOH: Decimal("200000"),
            _QW: Decimal("400000"),
        }
    )
    ctc_phaseout_increment: Decimal = Decimal("1000")
    ctc_phaseout_rate: Decimal = Decimal("50")  # $50 reduction per $1000 over threshold

    # Additional Child Tax Credit (refundable portion)
    actc_max_per_child: Decimal = Decimal("1600")
    actc_earned_income_floor: Decimal = Decimal("2500")
    actc_rate: Decimal = Decimal("0.15")

    # Saver's Credit
    savers_credit_thresholds: dict[FilingStatus, tuple[Decimal, Decimal, Decimal]] = field(
        default_factory=dict
    )
    savers_credit_rates: tuple[Decimal, Decimal, Decimal] = (
        Decimal("0.50"),
        Decimal("0.20"),
        Decimal("0.10"),
    )
    savers_credit_max_contribution: Decimal = Decimal("2000")

    # Child and Dependent Care Credit
    dependent_care_max_expenses_one: Decimal = Decimal("3000")
    dependent_care_max_expenses_multiple: Decimal = Decimal("6000")
    dependent_care_base_rate: Decimal = Decimal("0.35")
    dependent_care_min_rate: Decimal = Decimal("0.20")
    dependent_care_agi_threshold: Decimal = Decimal("15000")
    dependent_care_agi_increment: Decimal = Decimal("2000")
    dependent_care_rate_decrement: Decimal = Decimal("0.01")
    dependent_care_age_limit: int = 13
    dependent_care_estimated_expense: Decimal = Decimal("2000")  # per qualifying dependent

    # Earned Income Credit
    eic_parameters: dict[int, EICParameters] = field(default_factory=dict)
    eic_investment_income_limit: Decimal = Decimal("0")
    eic_child_age_limit: int = 19
    eic_student_age_limit: int = 24

    # QBI (Qualified Business Income) deduction
    qbi_rate: Decimal = Decimal("0.20")
    qbi_thresholds: dict[FilingStatus, Decimal] = field(default_factory=dict)
    qbi_phaseout_single: Decimal = Decimal("50000")
    qbi_phaseout_joint: Decimal = Decimal("100000")
    qbi_wage_limit_rate: Decimal = Decimal("0.50")
    qbi_wage_property_wage_rate: Decimal = Decimal("0.25")
    qbi_property_rate: Decimal = Decimal("0.025")

    # Capital gains brackets
    ltcg_brackets: BracketTable = field(default_factory=dict)

    # Self-employment tax (combined employer + employee rates)
    se_net_earnings_factor: Decimal = Decimal("0.9235")  # 92.35% of net SE income
    se_tax_rate: Decimal = Decimal("0.153")  # 12.4% SS + 2.9% Medicare

    @property
    def se_tax_deduction_rate(self) -> Decimal:
        """Deductible portion of SE tax (50%)."""
        return Decimal("0.5")

    def brackets_for(self, filing_status: FilingStatus) -> tuple[TaxBracket, ...]:
        """Ordinary brackets for a status, falling back to single."""
        return self.tax_brackets.get(filing_status) or self.tax_brackets[_SINGLE]

    def standard_deduction_for(self, filing_status: FilingStatus) -> Decimal:
        """Standard deduction for a status, falling back to single."""
        return self.standard_deductions.get(
            filing_status, self.standard_deductions[_SINGLE]
        )

    def ctc_threshold_for(self, filing_status: FilingStatus) -> Decimal:
        return self.ctc_phaseout_thresholds.get(
            filing_status, self.ctc_phaseout_thresholds[_SINGLE]
        )

    def savers_thresholds_for(
        self, filing_status: FilingStatus
    ) -> tuple[Decimal, Decimal, Decimal]:
        return self.savers_credit_thresholds.get(
            filing_status, self.savers_credit_thresholds[_SINGLE]
        )

    def qbi_threshold_for(self, filing_status: FilingStatus) -> Decimal:
        return self.qbi_thresholds.get(filing_status, self.qbi_thresholds[_SINGLE])

    def qbi_phaseout_range_for(self, filing_status: FilingStatus) -> Decimal:
        if filing_status.is_joint:
            return self.qbi_phaseout_joint
        return self.qbi_phaseout_single

    def ltcg_brackets_for(self, filing_status: FilingStatus) -> tuple[TaxBracket, ...]:
        return self.ltcg_brackets.get(filing_status) or self.ltcg_brackets[_SINGLE]

    def eic_parameters_for(self, qualifying_children: int) -> EICParameters:
        """EIC row for a child count; three or more share the last row."""
        return self.eic_parameters[max(0, min(qualifying_children, 3))]


_BRACKETS_2023_SINGLE = _brackets(
    ("0.10", "11000"),
    ("0.12", "44725"),
    ("0.22", "95375"),
    ("0.24", "182100"),
    ("0.32", "231250"),
    ("0.35", "578125"),
    ("0.37", None),
)
_BRACKETS_2023_JOINT = _brackets(
    ("0.10", "22000"),
    ("0.12", "89450"),
    ("0.22", "190750"),
    ("0.24", "364200"),
    ("0.32", "462500"),
    ("0.35", "693750"),
    ("0.37", None),
)

_BRACKETS_2024_SINGLE = _brackets(
    ("0.10", "11600"),
    ("0.12", "47150"),
    ("0.22", "100525"),
    ("0.24", "191950"),
    ("0.32", "243725"),
    ("0.35", "609350"),
    ("0.37", None),
)
_BRACKETS_2024_JOINT = _brackets(
    ("0.10", "23200"),
    ("0.12", "94300"),
    ("0.22", "201050"),
    ("0.24", "383900"),
    ("0.32", "487450"),
    ("0.35", "731200"),
    ("0.37", None),
)

_EIC_RATES: dict[int, tuple[str, str]] = {
    0: ("0.0765", "0.0765"),
    1: ("0.34", "0.1598"),
    2: ("0.40", "0.2106"),
    3: ("0.45", "0.2106"),
}


def _eic_table(
    rows: dict[int, tuple[str, str, str, str, str, str]],
) -> dict[int, EICParameters]:
    """Build EIC rows from (earned amount, max credit, phase-out starts, limits)."""
    table: dict[int, EICParameters] = {}
    for children, (
        earned_amount,
        max_credit,
        start_single,
        start_joint,
        limit_single,
        limit_joint,
    ) in rows.items():
        phase_in, phase_out = _EIC_RATES[children]
        table[children] = EICParameters(
            earned_income_amount=Decimal(earned_amount),
            max_credit=Decimal(max_credit),
            phase_in_rate=Decimal(phase_in),
            phase_out_rate=Decimal(phase_out),
            phase_out_start_single=Decimal(start_single),
            phase_out_start_joint=Decimal(start_joint),
            income_limit_single=Decimal(limit_single),
            income_limit_joint=Decimal(limit_joint),
        )
    return table


# 2023 Configuration - IRS published values
TAX_YEAR_2023 = TaxYearConfig(
    tax_year=2023,
    tax_brackets={
        _SINGLE: _BRACKETS_2023_SINGLE,
        _MFJ: _BRACKETS_2023_JOINT,
        _MFS: _brackets(
            ("0.10", "11000"),
            ("0.12", "44725"),
            ("0.22", "95375"),
            ("0.24", "182100"),
            ("0.32", "231250"),
            ("0.35", "346875"),
            ("0.37", None),
        ),
        _HOH: _brackets(
            ("0.10", "15700"),
            ("0.12", "59850"),
            ("0.22", "95350"),
            ("0.24", "182100"),
            ("0.32", "231250"),
            ("0.35", "578100"),
            ("0.37", None),
        ),
        _QW: _BRACKETS_2023_JOINT,
    },
    standard_deductions={
        _SINGLE: Decimal("13850"),
        _MFJ: Decimal("27700"),
        _MFS: Decimal("13850"),
        _HOH: Decimal("20800"),
        _QW: Decimal("27700"),
    },
    savers_credit_thresholds={
        _SINGLE: (Decimal("21750"), Decimal("23750"), Decimal("36500")),
        _MFJ: (Decimal("43500"), Decimal("47500"), Decimal("73000")),
        _MFS: (Decimal("21750"), Decimal("23750"), Decimal("36500")),
        _HOH: (Decimal("32625"), Decimal("35625"), Decimal("54750")),
        _QW: (Decimal("43500"), Decimal("47500"), Decimal("73000")),
    },
    eic_parameters=_eic_table(
        {
            0: ("7840", "600", "9800", "16370", "17640", "24210"),
            1: ("11750", "3995", "21560", "28120", "46560", "53120"),
            2: ("16510", "6604", "21560", "28120", "52918", "59478"),
            3: ("16510", "7430", "21560", "28120", "56838", "63398"),
        }
    ),
    eic_investment_income_limit=Decimal("11000"),
    qbi_thresholds={
        _SINGLE: Decimal("182100"),
        _MFJ: Decimal("364200"),
        _MFS: Decimal("182100"),
        _HOH: Decimal("182100"),
        _QW: Decimal("364200"),
    },
    ltcg_brackets={
        _SINGLE: _brackets(("0", "44625"), ("0.15", "492300"), ("0.20", None)),
        _MFJ: _brackets(("0", "89250"), ("0.15", "553850"), ("0.20", None)),
        _MFS: _brackets(("0", "44625"), ("0.15", "276900"), ("0.20", None)),
        _HOH: _brackets(("0", "59750"), ("0.15", "523050"), ("0.20", None)),
        _QW: _brackets(("0", "89250"), ("0.15", "553850"), ("0.20", None)),
    },
)

# 2024 Configuration - IRS published values
TAX_YEAR_2024 = TaxYearConfig(
    tax_year=2024,
    tax_brackets={
        _SINGLE: _BRACKETS_2024_SINGLE,
        _MFJ: _BRACKETS_2024_JOINT,
        _MFS: _brackets(
            ("0.10", "11600"),
            ("0.12", "47150"),
            ("0.22", "100525"),
            ("0.24", "191950"),
            ("0.32", "243725"),
            ("0.35", "365600"),
            ("0.37", None),
        ),
        _HOH: _brackets(
            ("0.10", "16550"),
            ("0.12", "63100"),
            ("0.22", "100500"),
            ("0.24", "191950"),
            ("0.32", "243700"),
            ("0.35", "609350"),
            ("0.37", None),
        ),
        _QW: _BRACKETS_2024_JOINT,
    },
    standard_deductions={
        _SINGLE: Decimal("14600"),
        _MFJ: Decimal("29200"),
        _MFS: Decimal("14600"),
        _HOH: Decimal("21900"),
        _QW: Decimal("29200"),
    },
    savers_credit_thresholds={
        _SINGLE: (Decimal("23000"), Decimal("25000"), Decimal("38250")),
        _MFJ: (Decimal("46000"), Decimal("50000"), Decimal("76500")),
        _MFS: (Decimal("23000"), Decimal("25000"), Decimal("38250")),
        _HOH: (Decimal("34500"), Decimal("37500"), Decimal("57375")),
        _QW: (Decimal("46000"), Decimal("50000"), Decimal("76500")),
    },
    eic_parameters=_eic_table(
        {
            0: ("8260", "632", "10330", "17250", "18591", "25511"),
            1: ("12390", "4213", "22720", "29640", "49084", "56004"),
            2: ("17400", "6960", "22720", "29640", "55768", "62688"),
            3: ("17400", "7830", "22720", "29640", "59899", "66819"),
        }
    ),
    eic_investment_income_limit=Decimal("11600"),
    qbi_thresholds={
        _SINGLE: Decimal("191950"),
        _MFJ: Decimal("383900"),
        _MFS: Decimal("191950"),
        _HOH: Decimal("191950"),
        _QW: Decimal("383900"),
    },
    ltcg_brackets={
        _SINGLE: _brackets(("0", "47025"), ("0.15", "518900"), ("0.20", None)),
        _MFJ: _brackets(("0", "94050"), ("0.15", "583750"), ("0.20", None)),
        _MFS: _brackets(("0", "47025"), ("0.15", "291850"), ("0.20", None)),
        _HOH: _brackets(("0", "63000"), ("0.15", "551350"), ("0.20", None)),
        _QW: _brackets(("0", "94050"), ("0.15", "583750"), ("0.20", None)),
    },
)

# Registry of available tax year configurations
TAX_YEAR_CONFIGS: dict[int, TaxYearConfig] = {
    2023: TAX_YEAR_2023,
    2024: TAX_YEAR_2024,
}


def get_tax_year_config(year: int) -> TaxYearConfig:
    """Get configuration for a specific tax year.

    Args:
        year: The tax year (e.g., 2024).

    Returns:
        TaxYearConfig for the specified year.

    Raises:
        ValueError: If no configuration exists for the requested year.

    Example:
        >>> config = get_tax_year_config(2024)
        >>> config.eic_investment_income_limit
        Decimal('11600')
    """
    if year not in TAX_YEAR_CONFIGS:
        available = sorted(TAX_YEAR_CONFIGS.keys())
        raise ValueError(
            f"No tax configuration for year {year}. Available years: {available}"
        )
    return TAX_YEAR_CONFIGS[year]


def resolve_tax_year_config(year: int | None = None) -> TaxYearConfig:
    """Get configuration for a tax year without ever raising.

    Missing years use the configured default; unknown years fall back to it
    with a warning so a live form keeps producing numbers.

    Args:
        year: The requested tax year, or None.

    Returns:
        TaxYearConfig for the year, or for settings.default_tax_year.
    """
    default_year = settings.default_tax_year
    if default_year not in TAX_YEAR_CONFIGS:
        logger.warning(
            "unknown_default_tax_year",
            default_tax_year=default_year,
            fallback=max(TAX_YEAR_CONFIGS),
        )
        default_year = max(TAX_YEAR_CONFIGS)

    if year is None:
        return TAX_YEAR_CONFIGS[default_year]
    if year not in TAX_YEAR_CONFIGS:
        logger.warning(
            "unknown_tax_year",
            requested_year=year,
            fallback=default_year,
        )
        return TAX_YEAR_CONFIGS[default_year]
    return TAX_YEAR_CONFIGS[year]
