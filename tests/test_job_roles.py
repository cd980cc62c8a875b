"""Job role screen tests — sorted list, salary totals, delete, and form validation."""

from __future__ import annotations

from decimal import Decimal

import pytest

from payroll_console.common.exceptions import TransportError
from payroll_console.job_roles.screens import JobRoleForm, JobRoleListScreen
from tests.conftest import fixed_clock


@pytest.fixture
async def screen(job_roles, admin_ctx) -> JobRoleListScreen:
    screen = JobRoleListScreen(admin_ctx, job_roles, clock=fixed_clock)
    await screen.load()
    yield screen
    screen.close()


class TestJobRoleList:
    async def test_sorted_by_title(self, screen):
        assert [r.job_title for r in screen.view.records] == ["Accountant", "Software Engineer"]

    async def test_salary_total_follows_search(self, screen):
        assert screen.view["base_salary_total"] == Decimal("9000.00")
        assert screen.search("account")["base_salary_total"] == Decimal("4000.00")

    async def test_delete(self, service, screen):
        screen.request_delete(screen.store.get("job_roles", 2))
        result = await screen.confirm()
        assert result.ok
        assert screen.view.ids == (1,)
        assert 2 not in service.state.db["jobroles"]


class TestJobRoleForm:
    async def test_create(self, service, job_roles, admin_ctx):
        form = JobRoleForm(admin_ctx, job_roles)
        form.set_field("job_title", "Designer")
        form.set_field("base_salary", "4500.50")

        saved = await form.submit()

        assert saved.base_salary == Decimal("4500.50")
        assert service.state.db["jobroles"][saved.job_id]["baseSalary"] == "4500.50"

    @pytest.mark.parametrize("salary", ["0", "-10", "abc", ""])
    async def test_base_salary_must_be_positive(self, job_roles, admin_ctx, salary):
        form = JobRoleForm(admin_ctx, job_roles)
        form.set_field("job_title", "Designer")
        form.set_field("base_salary", salary)

        assert await form.submit() is None
        assert "base_salary" in form.field_errors

    async def test_title_is_required(self, job_roles, admin_ctx):
        form = JobRoleForm(admin_ctx, job_roles)
        form.set_field("base_salary", "100")
        assert await form.submit() is None
        assert "job_title" in form.field_errors

    async def test_transport_failure_keeps_form_editable(self, service, job_roles, admin_ctx):
        service.state.failures["/jobroles"] = 503
        form = JobRoleForm(admin_ctx, job_roles)
        form.set_field("job_title", "Designer")
        form.set_field("base_salary", "100")

        assert await form.submit() is None
        assert isinstance(form.error, TransportError)
        assert form.submitting is False
        form.set_field("job_title", "Senior Designer")
        assert form.values["job_title"] == "Senior Designer"
