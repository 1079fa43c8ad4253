"""State income tax collaborator contract.

State calculations live outside the federal engine. A caller injects any
callable matching StateTaxCalculator; the engine hands it the federal
figures it needs and stores whatever it returns. Mappings are copied into
a plain dict; any other value is kept as-is.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Protocol

from taxwizard.tax.filing_status import FilingStatus


@dataclass(frozen=True)
class StateTaxInput:
    """Federal figures passed to a state tax calculator.

    Attributes:
        state: Two-letter state code (upper case).
        filing_status: Federal filing status.
        federal_agi: Federal adjusted gross income.
        federal_taxable_income: Federal taxable income.
        federal_itemized_deductions: Itemized total (zero when standard is used).
        dependents_count: Number of claimed dependents.
    """

    state: str
    filing_status: FilingStatus
    federal_agi: Decimal
    federal_taxable_income: Decimal
    federal_itemized_deductions: Decimal
    dependents_count: int


class StateTaxCalculator(Protocol):
    """Callable computing a state's income tax from federal figures."""

    def __call__(self, state_input: StateTaxInput) -> Any: ...
