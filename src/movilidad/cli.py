"""Movilidad Command Line Interface.

Provides operational tools for:
- Schema creation
- Recording a submission from a JSON file
- Daily usage queries
- Submission history

Usage:
    python -m movilidad.cli init-db
    python -m movilidad.cli submit --worker-id X --email Y --date 2024-01-10 --items-file items.json
    python -m movilidad.cli daily-usage --worker-id X --date 2024-01-10
    python -m movilidad.cli history --worker-id X --limit 20
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Awaitable
from datetime import date
from decimal import Decimal
from typing import Any, Callable

from movilidad.config import get_settings
from movilidad.database import LedgerStore
from movilidad.ledger import LedgerConfig, LedgerError
from movilidad.services import SubmissionLedger, SubmissionRecord, SubmissionResult

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_REJECTED = 2


def parse_date(s: str) -> date:
    """Parse YYYY-MM-DD date string."""
    return date.fromisoformat(s)


def _result_to_dict(result: SubmissionResult) -> dict[str, Any]:
    return {
        "submission_id": str(result.submission_id),
        "worker_id": result.worker_id,
        "date": result.date.isoformat(),
        "voucher_serie": result.voucher_serie,
        "voucher_number": result.voucher_number_display,
        "voucher_code": result.voucher_code,
        "total": str(result.total),
        "accumulated": str(result.accumulated),
        "cap": str(result.cap),
        "company": result.company.to_dict() if result.company else None,
        "is_new": result.is_new,
    }


def _record_to_dict(record: SubmissionRecord) -> dict[str, Any]:
    return {
        "voucher_code": record.voucher_code,
        "date": record.date.isoformat(),
        "total": str(record.total),
        "items": [
            {
                "destination": item.destination,
                "reason": item.reason,
                "project": item.project,
                "cost_center": item.cost_center,
                "amount": str(item.amount),
            }
            for item in record.items
        ],
    }


class MovilidadCli:
    """Movilidad Command Line Interface."""

    def __init__(self) -> None:
        self.parser = self._build_parser()

    def _build_parser(self) -> argparse.ArgumentParser:
        """Build argument parser."""
        parser = argparse.ArgumentParser(
            prog="movilidad",
            description="Movilidad ledger operational tools",
        )
        parser.add_argument(
            "--database-url",
            type=str,
            help="Database URL (default: DATABASE_URL from the environment)",
        )
        parser.add_argument(
            "--daily-cap",
            type=Decimal,
            help="Daily cap per worker (default: DAILY_CAP from the environment)",
        )
        subparsers = parser.add_subparsers(dest="command", help="Commands")

        # init-db command
        subparsers.add_parser(
            "init-db",
            help="Create ledger and directory tables",
        )

        # submit command
        submit = subparsers.add_parser(
            "submit",
            help="Record a submission",
        )
        submit.add_argument("--worker-id", type=str, required=True, help="Worker national id")
        submit.add_argument("--email", type=str, required=True, help="Worker email")
        submit.add_argument("--date", type=parse_date, required=True, help="Claim day (YYYY-MM-DD)")
        submit.add_argument(
            "--items-file",
            type=str,
            required=True,
            help="JSON list of line items, or - for stdin",
        )
        submit.add_argument(
            "--idempotency-key",
            type=str,
            help="Replay-safe token; a repeat returns the stored voucher",
        )

        # daily-usage command
        usage = subparsers.add_parser(
            "daily-usage",
            help="Show accumulated spend for a worker and day",
        )
        usage.add_argument("--worker-id", type=str, required=True, help="Worker national id")
        usage.add_argument("--date", type=parse_date, required=True, help="Day (YYYY-MM-DD)")

        # history command
        history = subparsers.add_parser(
            "history",
            help="List a worker's submissions",
        )
        history.add_argument("--worker-id", type=str, required=True, help="Worker national id")
        history.add_argument(
            "--limit",
            type=int,
            default=100,
            help="Maximum submissions to list (default: 100)",
        )

        return parser

    def run(self, args: list[str] | None = None) -> int:
        """Run the CLI with given arguments."""
        parsed = self.parser.parse_args(args)

        if not parsed.command:
            self.parser.print_help()
            return EXIT_ERROR

        # Dispatch to command handler
        handlers: dict[str, Callable[..., Awaitable[int]]] = {
            "init-db": self._cmd_init_db,
            "submit": self._cmd_submit,
            "daily-usage": self._cmd_daily_usage,
            "history": self._cmd_history,
        }

        handler = handlers.get(parsed.command)
        if handler is None:
            print(f"Unknown command: {parsed.command}", file=sys.stderr)
            return EXIT_ERROR

        return asyncio.run(self._run_with_store(handler, parsed))

    async def _run_with_store(
        self,
        handler: Callable[..., Awaitable[int]],
        args: argparse.Namespace,
    ) -> int:
        settings = get_settings()
        store = LedgerStore(
            args.database_url or settings.database_url,
            lock_timeout_seconds=settings.lock_timeout_seconds,
        )
        config = LedgerConfig(daily_cap=args.daily_cap or settings.daily_cap)
        try:
            return await handler(args, store, config)
        except LedgerError as e:
            print(json.dumps({"error": e.to_dict()}, indent=2), file=sys.stderr)
            return EXIT_ERROR if e.retryable else EXIT_REJECTED
        finally:
            await store.dispose()

    async def _cmd_init_db(
        self, args: argparse.Namespace, store: LedgerStore, config: LedgerConfig
    ) -> int:
        """Create the schema."""
        await store.create_schema()
        print(f"Schema ready at {store.engine.url.render_as_string(hide_password=True)}")
        return EXIT_OK

    async def _cmd_submit(
        self, args: argparse.Namespace, store: LedgerStore, config: LedgerConfig
    ) -> int:
        """Record one submission."""
        try:
            items = self._load_items(args.items_file)
        except (OSError, ValueError) as e:
            print(f"ERROR: could not read items: {e}", file=sys.stderr)
            return EXIT_ERROR

        ledger = SubmissionLedger(store, config)
        result = await ledger.submit(
            args.worker_id,
            args.email,
            args.date,
            items,
            idempotency_key=args.idempotency_key,
        )
        print(json.dumps(_result_to_dict(result), indent=2))
        return EXIT_OK

    async def _cmd_daily_usage(
        self, args: argparse.Namespace, store: LedgerStore, config: LedgerConfig
    ) -> int:
        """Show accumulated spend for a day."""
        usage = await SubmissionLedger(store, config).daily_usage(args.worker_id, args.date)
        print(f"Daily usage for worker {usage.worker_id} on {usage.date.isoformat()}")
        print(f"  Accumulated: {usage.accumulated:>10}")
        print(f"  Cap:         {usage.cap:>10}")
        print(f"  Available:   {usage.available:>10}")
        return EXIT_OK

    async def _cmd_history(
        self, args: argparse.Namespace, store: LedgerStore, config: LedgerConfig
    ) -> int:
        """List submissions as JSON."""
        records = await SubmissionLedger(store, config).history(args.worker_id, limit=args.limit)
        print(json.dumps([_record_to_dict(r) for r in records], indent=2))
        return EXIT_OK

    def _load_items(self, source: str) -> list[dict[str, Any]]:
        if source == "-":
            raw = sys.stdin.read()
        else:
            with open(source, encoding="utf-8") as f:
                raw = f.read()
        items = json.loads(raw)
        if not isinstance(items, list):
            raise ValueError("items file must contain a JSON list")
        return items


def main() -> int:
    """CLI entry point."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    cli = MovilidadCli()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
