"""
CLI main: parse the command, open the ledger database, run one command.

Usage:
    iou login <client>
    iou topup <amount>
    iou pay <another_client> <amount>
    iou balance
    iou export
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError

from iou_config import get_active_config, resolve_config_path
from iou_kernel.db.engine import (
    create_tables,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from iou_kernel.exceptions import ConfigError, IouKernelError
from iou_kernel.logging_config import LogContext, configure_logging, get_logger
from iou_kernel.services.iou_service import IouService

logger = get_logger("cli")


def _login(service: IouService, args: argparse.Namespace) -> list[str]:
    return list(service.login(args.client).lines)


def _topup(service: IouService, args: argparse.Namespace) -> list[str]:
    return list(service.topup(args.amount).lines)


def _pay(service: IouService, args: argparse.Namespace) -> list[str]:
    return list(service.pay(args.another_client, args.amount).lines)


def _balance(service: IouService, args: argparse.Namespace) -> list[str]:
    return list(service.balance().lines)


def _export(service: IouService, args: argparse.Namespace) -> list[str]:
    document = service.ledger.export_document(service.sessions.current_username())
    return [json.dumps(document, indent=2)]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="iou",
        description="Track IOUs between clients from an append-only ledger.",
    )
    parser.add_argument(
        "--config", type=Path, default=None,
        help="YAML configuration file (default: ./iou.yaml when present)",
    )
    parser.add_argument(
        "--db-url", type=str, default=None,
        help="Database URL, overrides the configuration file",
    )
    parser.add_argument(
        "--log-level", type=str, default=None,
        help="Log level for structured logs on stderr",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    login = sub.add_parser(
        "login", help="Login as `client`. Creates a new client if not yet exists."
    )
    login.add_argument("client")
    login.set_defaults(handler=_login)

    topup = sub.add_parser(
        "topup", help="Increase logged-in client balance by `amount`"
    )
    topup.add_argument("amount", type=int)
    topup.set_defaults(handler=_topup)

    pay = sub.add_parser(
        "pay",
        help="Pay `amount` from logged-in client to `another_client`, "
        "maybe in parts, as soon as possible.",
    )
    pay.add_argument("another_client")
    pay.add_argument("amount", type=int)
    pay.set_defaults(handler=_pay)

    balance = sub.add_parser("balance", help="Show the logged-in client's account")
    balance.set_defaults(handler=_balance)

    export = sub.add_parser("export", help="Print the stored ledger as JSON")
    export.set_defaults(handler=_export)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """
    Run one command and return the process exit code.

    Exit codes:
        0 -- success
        1 -- the command was refused (IouKernelError); nothing was committed
        2 -- the configuration file is missing or invalid
        3 -- the ledger database could not be opened or written
    """
    args = build_parser().parse_args(argv)

    try:
        config = get_active_config(
            args.config,
            overrides={"database_url": args.db_url, "log_level": args.log_level},
        )
    except (ConfigError, FileNotFoundError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 2

    configure_logging(level=config.log_level)
    config_path = resolve_config_path(args.config)
    logger.debug(
        "config_resolved",
        extra={
            "config_path": str(config_path) if config_path else None,
            "token_strategy": config.token_strategy,
            "verify_invariants": config.verify_invariants,
        },
    )

    with LogContext.bind(correlation_id=uuid4().hex, command=args.command):
        try:
            init_engine_from_url(config.database_url)
            create_tables()
            with session_scope() as session:
                service = IouService(
                    session,
                    token_strategy=config.token_strategy,
                    verify_invariants=config.verify_invariants,
                )
                lines = args.handler(service, args)
        except IouKernelError as exc:
            logger.info("command_failed", extra={"error_code": exc.code})
            print(str(exc), file=sys.stderr)
            return 1
        except SQLAlchemyError as exc:
            logger.error(
                "database_unavailable",
                extra={"error_type": type(exc).__name__},
            )
            print(f"ERROR: cannot use database: {exc}", file=sys.stderr)
            return 3
        finally:
            reset_engine()

    for line in lines:
        print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
