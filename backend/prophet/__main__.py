"""Prophet CLI entry point."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from uuid import UUID

from dotenv import load_dotenv
from pydantic import ValidationError

env_file = Path(__file__).parent.parent / ".env"
load_dotenv(env_file)

from prophet import __version__
from prophet.config import get_settings
from prophet.database import close_db, get_db_info, get_db_session, init_db
from prophet.errors import ProphetError
from prophet.scheduler import run_ai_sweep, start_scheduler
from prophet.services import arbitration_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)


def _init_logfire() -> None:
    """Initialize Logfire if available, without failing commands."""
    try:
        from prophet.observability import initialize_logfire

        initialize_logfire(get_settings())
    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "prophet.api.app:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create database tables."""

    async def _run() -> None:
        try:
            await init_db()
        finally:
            await close_db()

    try:
        asyncio.run(_run())
        print(f"\n✓ Database schema ready at {get_db_info()['url']}\n")
        return 0
    except Exception as e:
        logger.error(f"Failed to initialize database: {e}", exc_info=True)
        print(f"\n❌ Database initialization failed: {e}\n")
        return 1


def cmd_config(args: argparse.Namespace) -> int:
    """Display merged configuration."""
    try:
        settings = get_settings()

        print("\n=== Prophet Configuration ===\n")
        print(f"Environment: {settings.environment}")
        print(f"Database: {get_db_info()['url']}")
        print(f"Server: {settings.host}:{settings.port}")
        print(f"Allowed Origins: {', '.join(settings.allowed_origins)}\n")

        print("Ledger:")
        print(f"  Signup Bonus: {settings.ledger.signup_bonus:,.2f} credits\n")

        print("Arbitration:")
        print(f"  Model: {settings.arbitration.model}")
        print(f"  Timeout: {settings.arbitration.timeout_seconds}s")
        print(f"  Failure Policy: {settings.arbitration.failure_policy}")
        placeholder = (
            not settings.is_production
            and settings.arbitration.placeholder_outside_production
        )
        print(f"  Placeholder Judge: {'yes' if placeholder else 'no'}\n")

        print("Appeals:")
        print(f"  Window: {settings.appeals.window_days} days")
        print(
            f"  Reason Length: {settings.appeals.reason_min_length}"
            f"-{settings.appeals.reason_max_length} chars\n"
        )

        print("Scheduler:")
        print(f"  Enabled In API: {settings.scheduler.enabled}")
        print(f"  Sweep Interval: {settings.scheduler.sweep_interval_minutes} min\n")

        print("API Keys:")
        print(f"  OpenAI: {'✓ Set' if settings.arbitration.openai_api_key else '✗ Not set'}")
        print(f"  Logfire: {'✓ Set' if settings.logfire_token else '✗ Not set'}\n")

        return 0

    except ValidationError as e:
        print("\n❌ Configuration Error:\n")
        for error in e.errors():
            print(f"  • {'.'.join(str(x) for x in error['loc'])}: {error['msg']}")
        print()
        return 1


def cmd_arbitrate(args: argparse.Namespace) -> int:
    """Run AI arbitration on one bet."""
    _init_logfire()

    async def _run():
        try:
            async with get_db_session() as db:
                return await arbitration_service.arbitrate(db, args.bet_id)
        finally:
            await close_db()

    print(f"\n=== AI Arbitration ===\n")
    print(f"Bet ID: {args.bet_id}\n")

    try:
        outcome = asyncio.run(_run())
    except ProphetError as e:
        print(f"❌ {e.code}: {e.message}\n")
        return 1

    print(f"✓ Resolved {'YES' if outcome.verdict.decision else 'NO'}\n")
    print(f"Payout Policy: {outcome.resolution.payout_policy}")
    print(f"Total Payout: {outcome.resolution.total_payout}")
    print(f"Winners: {outcome.resolution.winners_count}")
    print(f"\nReasoning:\n{outcome.verdict.reasoning}\n")
    return 0


def cmd_sweep(args: argparse.Namespace) -> int:
    """Arbitrate every overdue AI bet once."""
    _init_logfire()

    async def _run():
        try:
            return await run_ai_sweep()
        finally:
            await close_db()

    print("\n=== AI Sweep ===\n")
    report = asyncio.run(_run())

    print(f"Due: {report.checked}")
    print(f"Resolved: {len(report.resolved)}")
    for bet_id, code in report.failed.items():
        print(f"  • {bet_id}: {code}")
    print()
    return 0 if not report.failed else 1


def cmd_scheduler(args: argparse.Namespace) -> int:
    """Run the AI sweep on an interval until interrupted."""
    _init_logfire()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    settings = get_settings()
    print("\n=== Prophet Scheduler ===\n")
    print(f"Version: {__version__}")
    print(f"Sweep every {settings.scheduler.sweep_interval_minutes} min\n")

    start_scheduler(settings)
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Prophet: peer-to-peer prediction betting backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Prophet {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_serve = subparsers.add_parser("serve", help="Run the API server")
    parser_serve.add_argument("--host", default=None, help="Bind address")
    parser_serve.add_argument("--port", type=int, default=None, help="Bind port")
    parser_serve.add_argument(
        "--reload",
        action="store_true",
        help="Reload on code changes",
    )
    parser_serve.set_defaults(func=cmd_serve)

    parser_init_db = subparsers.add_parser("init-db", help="Create database tables")
    parser_init_db.set_defaults(func=cmd_init_db)

    parser_config = subparsers.add_parser("config", help="Display merged configuration")
    parser_config.set_defaults(func=cmd_config)

    parser_arbitrate = subparsers.add_parser(
        "arbitrate",
        help="Run AI arbitration on a single bet",
    )
    parser_arbitrate.add_argument(
        "--bet-id",
        required=True,
        type=UUID,
        help="Bet to arbitrate",
    )
    parser_arbitrate.set_defaults(func=cmd_arbitrate)

    parser_sweep = subparsers.add_parser(
        "sweep",
        help="Arbitrate every overdue AI bet once",
    )
    parser_sweep.set_defaults(func=cmd_sweep)

    parser_scheduler = subparsers.add_parser(
        "scheduler",
        help="Run the AI sweep on an interval",
    )
    parser_scheduler.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser_scheduler.set_defaults(func=cmd_scheduler)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
