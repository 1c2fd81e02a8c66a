"""Tests for derived views."""

from datetime import date, datetime

import pytest

from debtwise.models.ledger import DebtType, FeeConfig, FeeFrequency
from debtwise.queries import (
    DebtFilter,
    StatusFilter,
    TypeFilter,
    category_breakdown,
    compute_balances,
    contact_balance_trend,
    contact_summaries,
    derive_traits,
    filter_debts,
    monthly_trends,
    top_contacts,
)


NOW = datetime(2024, 6, 1)


@pytest.fixture
def debts(make_debt):
    return [
        make_debt(name="Alex", amount=100, debt_date=date(2024, 5, 10), icon="food"),
        make_debt(name="Alex", amount=50, debt_date=date(2024, 4, 2), group_id="roommates", icon="rent"),
        make_debt(name="Sam", amount=30, debt_type=DebtType.I_OWE, debt_date=date(2024, 5, 20), icon="food"),
        make_debt(
            name="Sam",
            amount=80,
            debt_date=date(2024, 3, 1),
            settled=True,
            payments=((80, date(2024, 3, 2)),),
        ),
    ]


class TestBalances:
    """Tests for compute_balances."""

    def test_all_groups(self, debts):
        """Test unsettled totals across every group."""
        balances = compute_balances(debts, NOW)
        assert balances.total_owed_to_me == 150
        assert balances.total_i_owe == 30
        assert balances.net_balance == 120

    def test_single_group(self, debts):
        """Test scoping to one group."""
        balances = compute_balances(debts, NOW, group_id="roommates")
        assert balances.total_owed_to_me == 50
        assert balances.total_i_owe == 0

    def test_balances_use_effective_amounts(self, make_debt):
        """Test fees accrued since the cache was written are included."""
        late = make_debt(
            amount=100,
            debt_date=date(2024, 1, 1),
            fee_config=FeeConfig(enabled=True, frequency=FeeFrequency.ONCE, value=10),
        )
        assert compute_balances([late], NOW).total_owed_to_me == 110


class TestFilterDebts:
    """Tests for filter_debts."""

    def test_default_is_active_only_newest_first(self, debts):
        """Test the default list hides settled debts and sorts by date."""
        result = filter_debts(debts, NOW)
        assert [d.date for d in result] == [date(2024, 5, 20), date(2024, 5, 10), date(2024, 4, 2)]

    def test_criteria_combine(self, debts):
        """Test type, status and group filters are ANDed."""
        criteria = DebtFilter(
            type_filter=TypeFilter.OWED_TO_ME,
            status_filter=StatusFilter.ALL,
            group_id="personal",
        )
        result = filter_debts(debts, NOW, criteria)
        assert [(d.name, d.amount) for d in result] == [("Alex", 100), ("Sam", 0)]

    def test_returned_amounts_are_refreshed(self, make_debt):
        """Test each listed debt carries its effective amount."""
        late = make_debt(
            amount=100,
            debt_date=date(2024, 1, 1),
            fee_config=FeeConfig(enabled=True, frequency=FeeFrequency.ONCE, value=10),
        )
        [listed] = filter_debts([late], NOW)
        assert listed.amount == 110
        assert late.amount == 100


class TestCharts:
    """Tests for chart series."""

    def test_top_contacts(self, debts):
        """Test unsettled totals per name, largest first."""
        ranked = top_contacts(debts, NOW)
        assert [(c.name, c.amount) for c in ranked] == [("Alex", 150), ("Sam", 30)]
        assert top_contacts(debts, NOW, limit=1)[0].name == "Alex"

    def test_monthly_trends(self, debts):
        """Test month buckets are chronological and split by direction."""
        trends = monthly_trends(debts, NOW)
        assert [(t.month, t.owe, t.owed) for t in trends] == [
            ("2024-04", 0, 50),
            ("2024-05", 30, 100),
        ]

    def test_category_breakdown(self, debts):
        """Test unsettled amounts per icon, largest first."""
        categories = category_breakdown(debts, NOW)
        assert [(c.icon, c.label, c.value) for c in categories] == [
            ("food", "Food", 130),
            ("rent", "Rent", 50),
        ]


class TestContactSummaries:
    """Tests for contact_summaries and traits."""

    def test_summaries(self, debts):
        """Test per-contact totals, score and ordering."""
        summaries = contact_summaries(debts, NOW)
        assert [s.name for s in summaries] == ["Alex", "Sam"]

        sam = summaries[1]
        assert sam.total_i_owe == 30
        assert sam.total_owed_to_me == 0
        assert len(sam.transactions) == 2
        assert 0 <= sam.reliability <= 100
        assert sam.trust_label in ("Pristine", "Reliable", "Developing", "Delinquent")

    def test_search_is_case_insensitive(self, debts):
        """Test the name search."""
        assert [s.name for s in contact_summaries(debts, NOW, search="SA")] == ["Sam"]
        assert contact_summaries(debts, NOW, search="nobody") == []

    def test_speed_and_experience_traits(self, make_debt):
        """Test fast settlers with many settled debts."""
        history = [
            make_debt(debt_date=date(2024, 1, d), settled=True, payments=((100, date(2024, 1, d + 1)),))
            for d in range(1, 9)
        ]
        traits = derive_traits(history, NOW)
        assert traits == ["Flash Payer", "Legendary Veteran"]

    def test_early_settler_and_consistent_partner(self, make_debt):
        """Test the second-tier speed and experience badges."""
        history = [
            make_debt(debt_date=date(2024, 1, d), settled=True, payments=((100, date(2024, 1, d + 5)),))
            for d in range(1, 5)
        ]
        assert derive_traits(history, NOW) == ["Early Settler", "Consistent Partner"]

    def test_progress_and_ghosting_traits(self, make_debt):
        """Test active-debt badges."""
        progressing = make_debt(amount=100, debt_date=date(2024, 5, 1), payments=((40, date(2024, 5, 25)),))
        idle = make_debt(amount=100, debt_date=date(2024, 4, 1))

        assert derive_traits([progressing], NOW) == ["Steady Progress"]
        assert derive_traits([idle], NOW) == ["Ghosting Risk"]

    def test_recent_activity_is_not_ghosting(self, make_debt):
        """Test a debt touched within 15 days isn't flagged."""
        recent = make_debt(amount=100, debt_date=date(2024, 5, 20))
        assert derive_traits([recent], NOW) == []


class TestContactBalanceTrend:
    """Tests for contact_balance_trend."""

    def test_running_balance(self, make_debt):
        """Test owed-to-me adds and I-owe subtracts, by date."""
        debts = [
            make_debt(name="Alex", amount=30, debt_type=DebtType.I_OWE, debt_date=date(2024, 2, 1)),
            make_debt(name="Alex", amount=100, debt_date=date(2024, 1, 1)),
            make_debt(name="Sam", amount=999, debt_date=date(2024, 1, 15)),
        ]
        points = contact_balance_trend(debts, "Alex")
        assert [(p.date, p.balance) for p in points] == [
            (date(2024, 1, 1), 100),
            (date(2024, 2, 1), 70),
        ]
