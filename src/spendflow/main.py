"""Command-line entry point."""
import sys
import argparse
from pathlib import Path
from typing import Optional

from spendflow.config.manager import Config, ConfigManager
from spendflow.orchestrator.processor import ReportOrchestrator, RunOutcome, RunResult
from spendflow.transactions.window import parse_month
from spendflow.utils.exceptions import ConfigError
from spendflow.utils.formatting import format_amount
from spendflow.utils.logger import get_logger, set_log_level

logger = get_logger()

EXIT_OK = 0
EXIT_RUN_FAILED = 1
EXIT_CONFIG_ERROR = 2


def _load_and_validate_config(config_path: Optional[str] = None) -> Config:
    """Load and validate configuration."""
    config_manager = ConfigManager(Path(config_path) if config_path else None)
    config = config_manager.load_config()

    if not config:
        raise ConfigError(f"No configuration found at {config_manager.config_file}")

    is_valid, message = config_manager.validate_config(config)
    if not is_valid:
        raise ConfigError(f"Invalid configuration: {message}")

    set_log_level(config.log_level)
    logger.info("Configuration loaded successfully")
    return config


def _print_summary(result: RunResult, locale: str) -> None:
    if result.outcome is RunOutcome.NO_DATA:
        print(f"No transactions for {result.window.run_id} ({result.messages_scanned} messages scanned)")
        return

    snapshot = result.snapshot
    print(f"\n{snapshot.summary.period_label} {snapshot.summary.year}")
    print(f"{'Date':<20} {'Merchant':<40} {'Amount':>16}")
    print("-" * 78)
    for txn in snapshot.transactions:
        print(f"{txn.date:%Y-%m-%d %H:%M:%S}  {txn.merchant:<40} {format_amount(txn.amount, locale):>16}")
    print("-" * 78)
    print(f"Total: {format_amount(snapshot.summary.total, locale)}  "
          f"Merchants: {snapshot.merchant_count}  Skipped messages: {result.messages_skipped}")


def main(argv=None) -> int:
    """Main entry point for SpendFlow."""
    parser = argparse.ArgumentParser(description="SpendFlow monthly spend report")
    parser.add_argument(
        "command",
        nargs="?",
        choices=["run", "preview", "check-config"],
        default="run",
        help="Command to execute (default: run)"
    )
    parser.add_argument(
        "--config",
        help="Path to the YAML run configuration"
    )
    parser.add_argument(
        "--month",
        help="Reporting month as YYYY-MM (default: current month)"
    )

    args = parser.parse_args(argv)

    year = month = None
    if args.month:
        try:
            year, month = parse_month(args.month)
        except ValueError as e:
            parser.error(str(e))

    try:
        config = _load_and_validate_config(args.config)
    except ConfigError as e:
        logger.critical(str(e))
        return EXIT_CONFIG_ERROR

    if args.command == "check-config":
        print("Configuration is valid")
        return EXIT_OK

    try:
        orchestrator = ReportOrchestrator(config)
        result = orchestrator.run(year=year, month=month, dry_run=args.command == "preview")
    except ConfigError as e:
        logger.critical(str(e))
        return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
        return EXIT_RUN_FAILED
    except Exception as e:
        logger.critical(f"Run failed: {e}")
        return EXIT_RUN_FAILED

    if args.command == "preview":
        _print_summary(result, config.locale)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
