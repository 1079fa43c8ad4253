"""Filing status and tax year-specific configurations."""

from taxwizard.tax.filing_status import FilingStatus, parse_filing_status
from taxwizard.tax.year_config import (
    TAX_YEAR_2023,
    TAX_YEAR_2024,
    TAX_YEAR_CONFIGS,
    BracketTable,
    EICParameters,
    TaxBracket,
    TaxYearConfig,
    get_tax_year_config,
    resolve_tax_year_config,
)

__all__ = [
    "BracketTable",
    "EICParameters",
    "FilingStatus",
    "TaxBracket",
    "TaxYearConfig",
    "TAX_YEAR_2023",
    "TAX_YEAR_2024",
    "TAX_YEAR_CONFIGS",
    "get_tax_year_config",
    "parse_filing_status",
    "resolve_tax_year_config",
]
