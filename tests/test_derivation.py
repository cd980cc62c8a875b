"""Derivation engine tests — pure filtering, search, sorting and aggregates."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from types import MappingProxyType

import pytest

from payroll_console.common.constants import LoadStatus, PayrollStatus
from payroll_console.departments.schemas import Department
from payroll_console.payroll.schemas import Payroll
from payroll_console.sync.derive import (
    Metric,
    ViewParameters,
    ViewSpec,
    derive,
    field_above,
    field_equals,
    parse_int,
    within_days,
)
from payroll_console.sync.store import CollectionSnapshot
from tests.conftest import NOW, _make_department, _make_payroll


def _snapshot(**collections) -> CollectionSnapshot:
    return CollectionSnapshot(
        collections=MappingProxyType({k: tuple(v) for k, v in collections.items()}),
        status=LoadStatus.ready,
        loaded_at=NOW,
    )


DEPARTMENT_VIEW = ViewSpec(
    collection="departments",
    search_fields=("department_name", "description"),
    metrics=(Metric.count("shown", filtered=True), Metric.count("total")),
)


def _departments() -> list[Department]:
    return [
        Department.model_validate(_make_department(department_id=1, name="Engineering", description=None)),
        Department.model_validate(_make_department(department_id=2, name="Sales", description=None)),
    ]


def _payrolls() -> list[Payroll]:
    return [
        Payroll.model_validate(_make_payroll(payroll_id=1, month=3, year=2025, generated_date="2025-03-15T09:00:00")),
        Payroll.model_validate(_make_payroll(
            payroll_id=2, month=1, year=2025, status="PROCESSED",
            generated_date="2025-01-15T09:00:00",
        )),
        Payroll.model_validate(_make_payroll(
            payroll_id=3, month=3, year=2024, employee_id=5,
            base_salary="2000.00", allowances="0", deductions="0", net_salary="2000.00",
            generated_date="2024-03-15T09:00:00",
        )),
    ]


PAYROLL_VIEW = ViewSpec(
    collection="payrolls",
    numeric_filters={"month": "month", "year": "year", "employee": "employee_id"},
    choice_filters={"status": "status"},
    sort="-generated_date",
    metrics=(
        Metric.count("shown", filtered=True),
        Metric.total("net_total", "net_salary", filtered=True),
        Metric.count("pending", where=field_equals("status", PayrollStatus.pending)),
        Metric.count("recent", where=within_days("generated_date", 30)),
    ),
)


# ═════════════════════════════════════════════════════════════════════
# 1. SEARCH & FILTERS
# ═════════════════════════════════════════════════════════════════════


class TestFiltering:
    def test_search_eng_returns_only_engineering(self):
        """Two departments, term "eng" → only id 1."""
        view = derive(_snapshot(departments=_departments()), ViewParameters(search="eng"), DEPARTMENT_VIEW, NOW)
        assert view.ids == (1,)
        assert view["shown"] == 1
        assert view["total"] == 2

    def test_empty_parameters_return_everything(self):
        view = derive(_snapshot(departments=_departments()), ViewParameters(), DEPARTMENT_VIEW, NOW)
        assert view.ids == (1, 2)

    def test_search_no_match_is_empty(self):
        view = derive(_snapshot(departments=_departments()), ViewParameters(search="zzz"), DEPARTMENT_VIEW, NOW)
        assert view.is_empty
        assert view.total == 0

    def test_numeric_filters_accept_text(self):
        view = derive(_snapshot(payrolls=_payrolls()), ViewParameters(month="3", year=2025), PAYROLL_VIEW, NOW)
        assert view.ids == (1,)

    def test_blank_numeric_filter_is_ignored(self):
        view = derive(_snapshot(payrolls=_payrolls()), ViewParameters(month="", year=None), PAYROLL_VIEW, NOW)
        assert len(view.records) == 3

    def test_unparseable_numeric_filter_matches_nothing(self):
        snapshot = _snapshot(payrolls=_payrolls())
        view = derive(snapshot, ViewParameters(month="March"), PAYROLL_VIEW, NOW)

        assert view.is_empty
        assert view["shown"] == 0
        assert view["net_total"] == 0
        assert view["pending"] == derive(snapshot, ViewParameters(), PAYROLL_VIEW, NOW)["pending"]

    def test_choice_filter_is_case_insensitive(self):
        view = derive(_snapshot(payrolls=_payrolls()), ViewParameters(status="processed"), PAYROLL_VIEW, NOW)
        assert view.ids == (2,)

    def test_fixed_filters_always_apply(self):
        spec = ViewSpec(collection="payrolls", fixed_filters={"status": PayrollStatus.pending})
        view = derive(_snapshot(payrolls=_payrolls()), ViewParameters(), spec, NOW)
        assert set(view.ids) == {1, 3}

    def test_sorted_newest_first(self):
        view = derive(_snapshot(payrolls=_payrolls()), ViewParameters(), PAYROLL_VIEW, NOW)
        assert view.ids == (1, 2, 3)

    def test_missing_collection_is_empty(self):
        view = derive(_snapshot(), ViewParameters(), DEPARTMENT_VIEW, NOW)
        assert view.is_empty
        assert view["total"] == 0


# ═════════════════════════════════════════════════════════════════════
# 2. AGGREGATES
# ═════════════════════════════════════════════════════════════════════


class TestAggregates:
    def test_sum_and_counts(self):
        view = derive(_snapshot(payrolls=_payrolls()), ViewParameters(year=2025), PAYROLL_VIEW, NOW)
        assert view["shown"] == 2
        assert view["net_total"] == Decimal("2300.00")
        # Unfiltered metrics ignore the selectors.
        assert view["pending"] == 2

    def test_recent_window(self):
        view = derive(_snapshot(payrolls=_payrolls()), ViewParameters(), PAYROLL_VIEW, NOW)
        assert view["recent"] == 1

    def test_within_days_boundary(self):
        predicate = within_days("d", 30)
        assert predicate({"d": NOW - timedelta(days=29)}, NOW) is True
        assert predicate({"d": NOW - timedelta(days=30)}, NOW) is False
        assert predicate({"d": None}, NOW) is False

    def test_within_days_accepts_dates_and_naive_datetimes(self):
        predicate = within_days("d", 30)
        assert predicate({"d": date(2025, 3, 1)}, NOW) is True
        assert predicate({"d": datetime(2025, 1, 1)}, NOW) is False

    def test_field_above(self):
        predicate = field_above("leave_balance", 0)
        assert predicate({"leave_balance": 3}, NOW) is True
        assert predicate({"leave_balance": 0}, NOW) is False
        assert predicate({"leave_balance": None}, NOW) is False

    def test_metric_on_other_collection(self):
        spec = ViewSpec(metrics=(Metric.count("depts", "departments"),))
        view = derive(_snapshot(departments=_departments()), ViewParameters(), spec, NOW)
        assert view["depts"] == 2
        assert view.records == ()


# ═════════════════════════════════════════════════════════════════════
# 3. PURITY
# ═════════════════════════════════════════════════════════════════════


class TestPurity:
    def test_same_inputs_same_view(self):
        snapshot = _snapshot(payrolls=_payrolls())
        params = ViewParameters(year=2025)
        assert derive(snapshot, params, PAYROLL_VIEW, NOW) == derive(snapshot, params, PAYROLL_VIEW, NOW)

    def test_inputs_are_not_mutated(self):
        records = _payrolls()
        snapshot = _snapshot(payrolls=records)
        params = ViewParameters(month=3)
        derive(snapshot, params, PAYROLL_VIEW, NOW)
        assert snapshot.records("payrolls") == tuple(records)
        assert dict(params) == {"month": 3}

    def test_defaults_to_current_time(self):
        view = derive(_snapshot(), ViewParameters(), DEPARTMENT_VIEW)
        assert view.evaluated_at.tzinfo is not None

    def test_page(self):
        view = derive(_snapshot(payrolls=_payrolls()), ViewParameters(), PAYROLL_VIEW, NOW)
        page = view.page(page=2, page_size=2)
        assert [p.payroll_id for p in page.data] == [3]
        assert page.meta.has_prev is True


class TestViewParameters:
    def test_immutable_updates(self):
        params = ViewParameters(search="a")
        updated = params.with_values(month=3)
        assert dict(params) == {"search": "a"}
        assert dict(updated) == {"search": "a", "month": 3}
        assert updated.search == "a"

    def test_cleared(self):
        assert len(ViewParameters(search="x").cleared()) == 0

    def test_hashable_and_comparable(self):
        assert ViewParameters(a=1) == ViewParameters(a=1)
        assert hash(ViewParameters(a=1)) == hash(ViewParameters(a=1))

    def test_parse_int(self):
        assert parse_int(" 7 ") == 7
        assert parse_int("") is None
        assert parse_int(None) is None
        assert parse_int(True) is None
        with pytest.raises(ValueError):
            parse_int("March")
