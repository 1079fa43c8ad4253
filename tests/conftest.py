"""Pytest configuration and shared fixtures for tests."""

from datetime import date
from typing import Any

import pytest

from taxwizard.engine.models import Dependent
from taxwizard.tax.year_config import TAX_YEAR_2024, TaxYearConfig


@pytest.fixture
def config_2024() -> TaxYearConfig:
    """2024 tax year configuration.

    Returns:
        The shipped 2024 TaxYearConfig.
    """
    return TAX_YEAR_2024


@pytest.fixture
def child_age_10() -> Dependent:
    """Dependent who is 10 at the end of 2024."""
    return Dependent(first_name="Ava", relationship="daughter", date_of_birth=date(2014, 6, 1))


@pytest.fixture
def teen_age_17() -> Dependent:
    """Dependent who turns 17 during 2024 (CTC-ineligible)."""
    return Dependent(first_name="Leo", relationship="son", date_of_birth=date(2007, 3, 15))


@pytest.fixture
def make_tax_data():
    """Factory for wizard payloads in the UI's camelCase shape.

    Returns:
        Callable building a raw payload dict from keyword overrides.
    """

    def _make(
        filing_status: str = "single",
        wages: Any = 0,
        dependents: list[dict[str, Any]] | None = None,
        state: str | None = None,
        **sections: Any,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "taxYear": 2024,
            "personalInfo": {
                "firstName": "Jordan",
                "lastName": "Rivera",
                "filingStatus": filing_status,
                "state": state,
                "dependents": dependents or [],
            },
            "income": {"wages": wages},
            "deductions": {"useStandardDeduction": True, "totalDeductions": 0},
        }
        for key, value in sections.items():
            if key == "income":
                payload["income"].update(value)
            else:
                payload[key] = value
        return payload

    return _make
