"""Tests for credit eligibility and phase-out calculations."""

from datetime import date
from decimal import Decimal

import pytest

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
from taxwizard.engine.models import Dependent
from taxwizard.tax.filing_status import FilingStatus
from taxwizard.tax.year_config import TAX_YEAR_2023


def _dependent(born: date | None, **flags) -> Dependent:
    return Dependent(first_name="Sam", date_of_birth=born, **flags)


# =============================================================================
# Eligibility Tests
# =============================================================================


class TestAgeAndEligibility:
    """Tests for year-end age and the CTC / ODC partition."""

    @pytest.mark.parametrize(
        ("born", "expected"),
        [
            (date(2008, 1, 1), 16),
            (date(2007, 12, 31), 17),
            (date(2014, 6, 1), 10),
            (None, None),
        ],
    )
    def test_age_at_year_end(self, born, expected) -> None:
        """Age is measured on December 31 of the tax year."""
        assert age_at_year_end(born, 2024) == expected

    def test_child_under_17_is_ctc_eligible(self, child_age_10, config_2024) -> None:
        """A 10-year-old qualifies for the CTC, not the ODC."""
        assert is_eligible_for_child_tax_credit(child_age_10, config_2024)
        assert not is_eligible_for_credit_for_other_dependents(child_age_10, config_2024)

    def test_seventeen_at_year_end_is_odc(self, teen_age_17, config_2024) -> None:
        """Turning 17 during the year moves the dependent to the ODC."""
        assert not is_eligible_for_child_tax_credit(teen_age_17, config_2024)
        assert is_eligible_for_credit_for_other_dependents(teen_age_17, config_2024)

    def test_missing_birth_date_is_odc(self, config_2024) -> None:
        """Without a birth date the dependent counts toward the ODC."""
        dependent = _dependent(None)
        assert is_eligible_for_credit_for_other_dependents(dependent, config_2024)

    def test_partition_holds_for_every_dependent(self, config_2024) -> None:
        """Each dependent is eligible for exactly one of CTC and ODC."""
        dependents = [
            _dependent(None),
            _dependent(date(1950, 1, 1)),
            _dependent(date(2007, 12, 31)),
            _dependent(date(2008, 1, 1)),
            _dependent(date(2024, 12, 31)),
        ]
        for dependent in dependents:
            assert is_eligible_for_child_tax_credit(
                dependent, config_2024
            ) != is_eligible_for_credit_for_other_dependents(dependent, config_2024)

    def test_dependent_care_qualifiers(self, config_2024) -> None:
        """Under 13 at year end, or disabled at any age."""
        dependents = [
            _dependent(date(2012, 6, 1)),  # 12
            _dependent(date(2011, 6, 1)),  # 13
            _dependent(date(1980, 1, 1), is_disabled=True),
            _dependent(None),
        ]
        assert count_dependent_care_qualifiers(dependents, config_2024) == 2

    def test_eic_qualifying_children(self, config_2024) -> None:
        """Under 19, students under 24, or disabled."""
        dependents = [
            _dependent(date(2010, 1, 1)),  # 14
            _dependent(date(2004, 1, 1)),  # 20, not a student
            _dependent(date(2002, 1, 1), is_student=True),  # 22
            _dependent(date(1990, 1, 1), is_student=True),  # 34
            _dependent(date(1980, 1, 1), is_disabled=True),
            _dependent(None),
        ]
        assert count_eic_qualifying_children(dependents, config_2024) == 3


# =============================================================================
# Phase-out Tests
# =============================================================================


class TestApplyPhaseOut:
    """Tests for the shared phase-out helper."""

    def test_no_reduction_at_threshold(self) -> None:
        """Income at the threshold keeps the full amount."""
        assert apply_phase_out(
            Decimal("2000"), Decimal("200000"), Decimal("200000"), Decimal("1000"), Decimal("50")
        ) == Decimal("2000")

    def test_partial_increment_counts(self) -> None:
        """One dollar over the threshold costs a full increment."""
        assert apply_phase_out(
            Decimal("2000"), Decimal("200001"), Decimal("200000"), Decimal("1000"), Decimal("50")
        ) == Decimal("1950")

    def test_floor_at_zero(self) -> None:
        """Reduction never goes below zero."""
        assert apply_phase_out(
            Decimal("2000"), Decimal("500000"), Decimal("200000"), Decimal("1000"), Decimal("50")
        ) == Decimal("0")

    def test_zero_increment_guarded(self) -> None:
        """A zero increment disables the phase-out."""
        assert apply_phase_out(
            Decimal("2000"), Decimal("500000"), Decimal("200000"), Decimal("0"), Decimal("50")
        ) == Decimal("2000")


# =============================================================================
# Credit Tests
# =============================================================================


class TestChildTaxCredit:
    """Tests for the Child Tax Credit and Credit for Other Dependents."""

    def test_joint_child_full_credit(self, child_age_10, config_2024) -> None:
        """MFJ with one child at $50,000 AGI gets $2,000 CTC and no ODC."""
        dependents = [child_age_10]

        assert calculate_child_tax_credit(
            dependents, Decimal("50000"), FilingStatus.MARRIED_JOINT, config_2024
        ) == Decimal("2000.00")
        assert calculate_credit_for_other_dependents(
            dependents, Decimal("50000"), FilingStatus.MARRIED_JOINT, config_2024
        ) == Decimal("0.00")

    def test_phase_out_single(self, child_age_10, config_2024) -> None:
        """$10,000 over the single threshold removes $500."""
        assert calculate_child_tax_credit(
            [child_age_10], Decimal("210000"), FilingStatus.SINGLE, config_2024
        ) == Decimal("1500.00")

    def test_joint_threshold(self, child_age_10, config_2024) -> None:
        """Joint filers are not phased out at $210,000."""
        assert calculate_child_tax_credit(
            [child_age_10], Decimal("210000"), FilingStatus.MARRIED_JOINT, config_2024
        ) == Decimal("2000.00")

    def test_other_dependents(self, teen_age_17, config_2024) -> None:
        """Each non-CTC dependent is worth $500."""
        dependents = [teen_age_17, _dependent(None)]

        assert calculate_credit_for_other_dependents(
            dependents, Decimal("60000"), FilingStatus.SINGLE, config_2024
        ) == Decimal("1000.00")
        assert calculate_child_tax_credit(
            dependents, Decimal("60000"), FilingStatus.SINGLE, config_2024
        ) == Decimal("0.00")

    def test_credit_never_increases_with_agi(self, child_age_10, config_2024) -> None:
        """The phased-out credit is non-increasing in AGI."""
        previous = None
        for agi in range(190_000, 260_000, 777):
            credit = calculate_child_tax_credit(
                [child_age_10], Decimal(agi), FilingStatus.SINGLE, config_2024
            )
            if previous is not None:
                assert credit <= previous
            previous = credit


class TestAdditionalChildTaxCredit:
    """Tests for the refundable ACTC."""

    def test_earned_income_at_floor(self, child_age_10, config_2024) -> None:
        """Earned income of exactly $2,500 yields no ACTC."""
        assert calculate_additional_child_tax_credit(
            [child_age_10], Decimal("2500"), Decimal("0"), Decimal("2000"), config_2024
        ) == Decimal("0.00")

    def test_formula_limited(self, child_age_10, config_2024) -> None:
        """15% of earned income over $2,500."""
        assert calculate_additional_child_tax_credit(
            [child_age_10], Decimal("3000"), Decimal("0"), Decimal("2000"), config_2024
        ) == Decimal("75.00")

    def test_per_child_cap(self, child_age_10, config_2024) -> None:
        """Refund is capped at $1,600 per child."""
        assert calculate_additional_child_tax_credit(
            [child_age_10], Decimal("40000"), Decimal("0"), Decimal("2000"), config_2024
        ) == Decimal("1600.00")

    def test_remaining_credit_limited(self, child_age_10, config_2024) -> None:
        """Only the CTC not absorbed by tax liability is refundable."""
        assert calculate_additional_child_tax_credit(
            [child_age_10], Decimal("20000"), Decimal("500"), Decimal("2000"), config_2024
        ) == Decimal("1500.00")

    def test_fully_absorbed(self, child_age_10, config_2024) -> None:
        """No ACTC when tax liability covers the whole CTC."""
        assert calculate_additional_child_tax_credit(
            [child_age_10], Decimal("80000"), Decimal("5000"), Decimal("2000"), config_2024
        ) == Decimal("0.00")

    def test_no_eligible_children(self, teen_age_17, config_2024) -> None:
        """Other dependents never produce an ACTC."""
        assert calculate_additional_child_tax_credit(
            [teen_age_17], Decimal("40000"), Decimal("0"), Decimal("2000"), config_2024
        ) == Decimal("0.00")


class TestRetirementSavingsCredit:
    """Tests for the Saver's Credit."""

    @pytest.mark.parametrize(
        ("agi", "expected"),
        [
            (Decimal("20000"), Decimal("1000.00")),
            (Decimal("23000"), Decimal("1000.00")),
            (Decimal("24000"), Decimal("400.00")),
            (Decimal("30000"), Decimal("200.00")),
            (Decimal("40000"), Decimal("0.00")),
        ],
    )
    def test_single_tiers(self, agi, expected, config_2024) -> None:
        """50% / 20% / 10% tiers on up to $2,000 of contributions."""
        assert calculate_retirement_savings_credit(
            Decimal("3000"), agi, FilingStatus.SINGLE, config_2024
        ) == expected

    def test_joint_doubles_contribution_cap(self, config_2024) -> None:
        """Joint filers count up to $4,000."""
        assert calculate_retirement_savings_credit(
            Decimal("5000"), Decimal("40000"), FilingStatus.MARRIED_JOINT, config_2024
        ) == Decimal("2000.00")

    def test_qualifying_widow_uses_joint_limits(self, config_2024) -> None:
        """Qualifying widow(er) shares the joint cap and thresholds."""
        assert calculate_retirement_savings_credit(
            Decimal("5000"), Decimal("40000"), FilingStatus.QUALIFYING_WIDOW, config_2024
        ) == Decimal("2000.00")

    def test_no_contributions(self, config_2024) -> None:
        """No contributions, no credit."""
        assert calculate_retirement_savings_credit(
            Decimal("0"), Decimal("10000"), FilingStatus.SINGLE, config_2024
        ) == Decimal("0.00")

    def test_prior_year_thresholds(self) -> None:
        """2023 tiers are lower than 2024's."""
        assert calculate_retirement_savings_credit(
            Decimal("2000"), Decimal("22000"), FilingStatus.SINGLE, TAX_YEAR_2023
        ) == Decimal("400.00")


class TestChildDependentCareCredit:
    """Tests for the Child and Dependent Care Credit."""

    def test_full_rate_one_dependent(self, config_2024) -> None:
        """35% of expenses capped at $3,000."""
        assert calculate_child_dependent_care_credit(
            Decimal("4000"), Decimal("10000"), 1, config_2024
        ) == Decimal("1050.00")

    def test_rate_steps_down(self, config_2024) -> None:
        """Two full $2,000 steps over $15,000 cost two points."""
        assert calculate_child_dependent_care_credit(
            Decimal("3000"), Decimal("20000"), 1, config_2024
        ) == Decimal("990.00")

    def test_rate_floor(self, config_2024) -> None:
        """The rate never drops below 20%."""
        assert calculate_child_dependent_care_credit(
            Decimal("8000"), Decimal("100000"), 2, config_2024
        ) == Decimal("1200.00")

    def test_no_qualifying_dependents(self, config_2024) -> None:
        """Expenses without a qualifying person earn nothing."""
        assert calculate_child_dependent_care_credit(
            Decimal("3000"), Decimal("20000"), 0, config_2024
        ) == Decimal("0.00")


class TestEarnedIncomeCredit:
    """Tests for the Earned Income Credit."""

    def test_plateau(self, config_2024) -> None:
        """Phase-in reaches the maximum credit for one child."""
        assert calculate_earned_income_credit(
            Decimal("12390"), Decimal("12390"), Decimal("0"), 1, FilingStatus.SINGLE, config_2024
        ) == Decimal("4213")

    def test_phase_out(self, config_2024) -> None:
        """Credit shrinks above the phase-out start."""
        # 4,212.60 - (30,000 - 22,720) * 15.98%
        assert calculate_earned_income_credit(
            Decimal("30000"), Decimal("30000"), Decimal("0"), 1, FilingStatus.SINGLE, config_2024
        ) == Decimal("3049")

    def test_no_children_phase_in(self, config_2024) -> None:
        """Workers without children get 7.65% of earned income."""
        assert calculate_earned_income_credit(
            Decimal("5000"), Decimal("5000"), Decimal("0"), 0, FilingStatus.SINGLE, config_2024
        ) == Decimal("383")

    def test_investment_income_disqualifies(self, config_2024) -> None:
        """$11,601 of investment income exceeds the 2024 limit."""
        assert calculate_earned_income_credit(
            Decimal("10000"), Decimal("21601"), Decimal("11601"), 1, FilingStatus.SINGLE, config_2024
        ) == Decimal("0")

    def test_income_limit(self, config_2024) -> None:
        """AGI above the limit for the child count yields nothing."""
        assert calculate_earned_income_credit(
            Decimal("50000"), Decimal("50000"), Decimal("0"), 1, FilingStatus.SINGLE, config_2024
        ) == Decimal("0")

    def test_joint_thresholds(self, config_2024) -> None:
        """Married filing jointly phases out later."""
        single = calculate_earned_income_credit(
            Decimal("30000"), Decimal("30000"), Decimal("0"), 1, FilingStatus.SINGLE, config_2024
        )
        joint = calculate_earned_income_credit(
            Decimal("30000"), Decimal("30000"), Decimal("0"), 1, FilingStatus.MARRIED_JOINT, config_2024
        )
        assert joint > single

    def test_no_earned_income(self, config_2024) -> None:
        """Investment-only income earns no credit."""
        assert calculate_earned_income_credit(
            Decimal("0"), Decimal("5000"), Decimal("5000"), 0, FilingStatus.SINGLE, config_2024
        ) == Decimal("0")


class TestSelfEmploymentTax:
    """Tests for the Schedule SE estimate."""

    def test_estimate(self, config_2024) -> None:
        """15.3% of 92.35% of net earnings."""
        assert estimate_self_employment_tax(Decimal("10000"), config_2024) == Decimal("1412.96")

    def test_loss(self, config_2024) -> None:
        """A loss owes no SE tax."""
        assert estimate_self_employment_tax(Decimal("-500"), config_2024) == Decimal("0.00")


# =============================================================================
# Credits Evaluation Tests
# =============================================================================


class TestEvaluateCredits:
    """Tests for evaluating every credit for a situation."""

    def test_head_of_household_with_child(self, config_2024) -> None:
        """Low-income parent gets CTC, ACTC and the care credit."""
        situation = TaxSituation(
            agi=Decimal("20000"),
            filing_status=FilingStatus.HEAD_OF_HOUSEHOLD,
            dependents=[_dependent(date(2019, 5, 1))],
            earned_income=Decimal("20000"),
        )
        result = evaluate_credits(situation, config_2024)

        assert isinstance(result, CreditsResult)
        assert result.child_tax_credit == Decimal("2000.00")
        assert result.additional_child_tax_credit == Decimal("1600.00")
        # $2,000 estimated expenses at 33%
        assert result.child_dependent_care_credit == Decimal("660.00")
        assert result.earned_income_credit == Decimal("0")
        assert result.total_nonrefundable == Decimal("2660.00")
        assert result.total_refundable == Decimal("1600.00")

        names = [item.name for item in result.credits]
        assert "Child Tax Credit" in names
        assert "Earned Income Credit" not in names
        actc = next(i for i in result.credits if i.name == "Additional Child Tax Credit")
        assert isinstance(actc, CreditItem)
        assert actc.refundable is True
        assert actc.form == "Schedule 8812"

    def test_supplied_care_expenses(self, config_2024) -> None:
        """Entered care expenses replace the per-dependent estimate."""
        situation = TaxSituation(
            agi=Decimal("10000"),
            filing_status=FilingStatus.SINGLE,
            dependents=[_dependent(date(2019, 5, 1))],
            dependent_care_expenses=Decimal("3000"),
        )
        assert evaluate_credits(situation, config_2024).child_dependent_care_credit == Decimal(
            "1050.00"
        )

    def test_eic_only_when_requested(self, config_2024) -> None:
        """The EIC is computed only when the situation asks for it."""
        situation = TaxSituation(
            agi=Decimal("5000"),
            filing_status=FilingStatus.SINGLE,
            earned_income=Decimal("5000"),
        )
        assert evaluate_credits(situation, config_2024).earned_income_credit == Decimal("0")

        situation.compute_eic = True
        assert evaluate_credits(situation, config_2024).earned_income_credit == Decimal("383")

    def test_no_dependents_no_credits(self, config_2024) -> None:
        """A single filer without dependents or contributions has no credits."""
        result = evaluate_credits(
            TaxSituation(agi=Decimal("60000"), filing_status=FilingStatus.SINGLE), config_2024
        )
        assert result.total_nonrefundable == Decimal("0")
        assert result.credits == []
