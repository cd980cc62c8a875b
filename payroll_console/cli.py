"""Payroll Console — command-line front end.

Usage:
    payroll-console dashboard
    payroll-console employees --search eng --page 2 --page-size 20
    payroll-console payrolls --month 3 --year 2025 --json
    payroll-console approve-leave 12            # asks [y/N] first
    payroll-console delete-department 4 --yes   # skips the prompt

Exit codes:
    0 = success (or the action was cancelled at the prompt)
    1 = the payroll service reported an error, or the record was not found
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Callable, Optional, Sequence, TextIO

import httpx

from payroll_console.common.constants import Operation
from payroll_console.config import Settings, settings as default_settings
from payroll_console.console import Console, create_console
from payroll_console.sync.screen import ResourceScreen

logger = logging.getLogger("payroll_console")

InputFn = Callable[[str], str]

# command → (screen factory name, collection, operation)
ACTIONS: dict[str, tuple[str, str, Operation]] = {
    "delete-department": ("departments", "departments", Operation.delete),
    "delete-job-role": ("job_roles", "job_roles", Operation.delete),
    "delete-employee": ("employees", "employees", Operation.delete),
    "approve-leave": ("leave_approval", "leaves", Operation.approve),
    "reject-leave": ("leave_approval", "leaves", Operation.reject),
    "process-payroll": ("payrolls", "payrolls", Operation.process),
}

LISTS: dict[str, str] = {
    "departments": "departments",
    "job-roles": "job_roles",
    "employees": "employees",
    "payrolls": "payrolls",
    "leaves": "leaves",
    "pending-leaves": "leave_approval",
}


# ══════════════════════════════════════════════════════════════════════
# Argument parsing
# ══════════════════════════════════════════════════════════════════════


def _positive(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be >= 1, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="payroll-console",
        description="Payroll & HR admin console",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--json", dest="output_json", action="store_true",
                        help="Output results as JSON")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("dashboard", help="Admin or self-service dashboard")

    for command in LISTS:
        p = sub.add_parser(command, help=f"List {command.replace('-', ' ')}")
        p.add_argument("--search", type=str, default=None,
                       help="Case-insensitive search over the text columns")
        p.add_argument("--page", type=_positive, default=1, help="Page number (1-indexed)")
        p.add_argument("--page-size", type=_positive, default=50, help="Rows per page")
        if command in ("payrolls", "leaves"):
            p.add_argument("--status", type=str, default=None,
                           help="Only records with this status")
        if command == "payrolls":
            p.add_argument("--month", type=int, default=None, help="Month (1-12)")
            p.add_argument("--year", type=int, default=None, help="Year")

    for command in ACTIONS:
        p = sub.add_parser(command, help=command.replace("-", " ").capitalize())
        p.add_argument("record_id", type=int, help="Id of the record")
        p.add_argument("--yes", action="store_true",
                       help="Confirm without prompting")

    return parser


# ══════════════════════════════════════════════════════════════════════
# Commands
# ══════════════════════════════════════════════════════════════════════


def _emit(out: TextIO, output_json: bool, payload: Any, lines: Sequence[str]) -> None:
    if output_json:
        print(json.dumps(payload, indent=2, default=str), file=out)
    else:
        for line in lines:
            print(line, file=out)


def _report_error(screen: ResourceScreen, out: TextIO, output_json: bool) -> int:
    error = screen.error
    _emit(out, output_json, error.to_problem(), [f"❌ {error.title}: {error.detail}"])
    return 1


async def show_dashboard(console: Console, args: argparse.Namespace, out: TextIO) -> int:
    screen = console.dashboard()
    async with screen:
        if screen.error is not None:
            return _report_error(screen, out, args.output_json)
        summary = screen.summary
    data = summary.model_dump(mode="json")
    lines = [
        f"  {key.replace('_', ' ').title():<20} {value}"
        for key, value in data.items()
        if not isinstance(value, (list, dict)) and key != "evaluated_at"
    ]
    _emit(out, args.output_json, data, lines)
    return 0


async def show_list(console: Console, args: argparse.Namespace, out: TextIO) -> int:
    screen = getattr(console, LISTS[args.command])()
    async with screen:
        if screen.error is not None:
            return _report_error(screen, out, args.output_json)
        filters = {
            key: getattr(args, key)
            for key in ("search", "status", "month", "year")
            if getattr(args, key, None) is not None
        }
        view = screen.set_filter(**filters)

    page = view.page(page=args.page, page_size=args.page_size)
    payload = {
        "data": [r.to_wire() for r in page.data],
        "meta": page.meta.model_dump(),
        "aggregates": {k: str(v) for k, v in view.aggregates.items()},
    }
    lines = [f"  {r.record_id:>6}  {r.label}" for r in page.data]
    lines.append(f"  {view.total} shown")
    if page.meta.total_pages > 1:
        lines.append(f"  page {page.meta.page} of {page.meta.total_pages}")
    _emit(out, args.output_json, payload, lines)
    return 0


async def run_action(
    console: Console,
    args: argparse.Namespace,
    out: TextIO,
    input_fn: InputFn,
) -> int:
    factory, collection, operation = ACTIONS[args.command]
    screen = getattr(console, factory)()
    async with screen:
        if screen.error is not None:
            return _report_error(screen, out, args.output_json)

        record = screen.store.get(collection, args.record_id)
        if record is None:
            _emit(out, args.output_json,
                  {"status": "not_found", "id": args.record_id},
                  [f"❌ No record #{args.record_id} in {collection}"])
            return 1

        try:
            awaiting = screen.request(operation, record, collection=collection)
        except ValueError as exc:
            _emit(out, args.output_json, {"status": "not_allowed", "detail": str(exc)},
                  [f"❌ {exc}"])
            return 1

        if not args.yes:
            answer = input_fn(f"{awaiting.title}: {awaiting.prompt} [y/N] ")
            if answer.strip().lower() not in ("y", "yes"):
                screen.cancel()
                _emit(out, args.output_json, {"status": "cancelled"}, ["Cancelled."])
                return 0

        result = await screen.confirm()

    if not result.ok:
        _emit(out, args.output_json, result.error.to_problem(),
              [f"❌ {result.error.title}: {result.error.detail}"])
        return 1

    payload = {
        "status": result.outcome.value,
        "operation": operation.value,
        "id": args.record_id,
        "record": result.record.to_wire() if result.record is not None else None,
    }
    lines = [f"✅ {awaiting.confirm_text}: {awaiting.target.label}"]
    if result.error is not None:
        lines.append(f"⚠️  Could not refresh the list: {result.error.detail}")
    _emit(out, args.output_json, payload, lines)
    return 0


async def run(
    args: argparse.Namespace,
    *,
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    out: TextIO = sys.stdout,
    input_fn: InputFn = input,
) -> int:
    async with create_console(settings, transport=transport) as console:
        if args.command == "dashboard":
            return await show_dashboard(console, args, out)
        if args.command in LISTS:
            return await show_list(console, args, out)
        return await run_action(console, args, out, input_fn)


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    out: TextIO = sys.stdout,
    input_fn: InputFn = input,
) -> int:
    settings = settings or default_settings
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.debug("Running %s against %s", args.command, settings.api_base_url)

    return asyncio.run(run(
        args, settings=settings, transport=transport, out=out, input_fn=input_fn,
    ))


if __name__ == "__main__":
    sys.exit(main())
