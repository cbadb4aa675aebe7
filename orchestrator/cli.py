"""
Orchestrator - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line interface for the scanner.

- Provides argparse-based CLI
- Loads configuration from YAML, environment and flags
- Runs one scan job and prints the ranked table
- Exit code 0 when the job completes, 1 otherwise

============================================================
USAGE
============================================================
moonshot-scanner
moonshot-scanner --source synthetic --max-tokens 25
moonshot-scanner --config scanner.yaml --top 20 --log-format json

============================================================
"""

import argparse
import asyncio
import logging
import os
import sys
from dataclasses import replace
from typing import List, Optional

from dotenv import load_dotenv

from core.exceptions import ConfigurationError
from data_sources.factory import SOURCE_KINDS
from data_sources.models import TokenMetrics

from .config import CONFIG_FILE_ENV, LOG_FORMATS, LOG_LEVELS, ScannerConfig
from .core import build_job_manager, setup_logging
from .models import JobStatus


logger = logging.getLogger(__name__)


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="moonshot-scanner",
        description="Scan the crypto market for tokens with outsized move potential",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Configuration precedence (later wins):
  defaults < --config YAML < SCANNER_* environment < command-line flags

Examples:
  %(prog)s                                  # Live CoinGecko scan
  %(prog)s --source synthetic --top 10      # Offline run on synthetic data
  %(prog)s --max-tokens 30 --timeout 900    # Bounded live run
        """,
    )

    # --------------------------------------------------------
    # Scan Options
    # --------------------------------------------------------
    scan_group = parser.add_argument_group("Scan Options")

    scan_group.add_argument(
        "--config", "-c",
        type=str,
        default=os.getenv(CONFIG_FILE_ENV),
        metavar="PATH",
        help=f"YAML configuration file (default: ${CONFIG_FILE_ENV})",
    )

    scan_group.add_argument(
        "--source",
        type=str,
        choices=list(SOURCE_KINDS),
        help="Market data source (default: from config, live)",
    )

    scan_group.add_argument(
        "--max-tokens",
        type=int,
        metavar="N",
        help="Cap the number of discovered tokens analyzed",
    )

    scan_group.add_argument(
        "--concurrency",
        type=int,
        metavar="N",
        help="Tokens processed in parallel (default: 3)",
    )

    scan_group.add_argument(
        "--timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Give up waiting for the job after this long",
    )

    scan_group.add_argument(
        "--poll-interval",
        type=float,
        default=1.0,
        metavar="SECONDS",
        help="Progress polling interval (default: 1.0)",
    )

    scan_group.add_argument(
        "--top",
        type=int,
        default=25,
        metavar="N",
        help="Rows to print from the ranking (default: 25)",
    )

    # --------------------------------------------------------
    # Logging Options
    # --------------------------------------------------------
    logging_group = parser.add_argument_group("Logging Options")

    logging_group.add_argument(
        "--log-level",
        type=str,
        choices=list(LOG_LEVELS),
        help="Logging level (default: from config, INFO)",
    )

    logging_group.add_argument(
        "--log-format",
        type=str,
        choices=list(LOG_FORMATS),
        help="Logging format (default: from config, text)",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version="%(prog)s 1.0.0",
    )

    return parser


# ============================================================
# CLI VALIDATION
# ============================================================

def validate_args(args: argparse.Namespace) -> List[str]:
    """
    Validate CLI arguments.

    Returns:
        List of validation errors
    """
    errors = []

    if args.max_tokens is not None and args.max_tokens < 1:
        errors.append("--max-tokens must be at least 1")
    if args.concurrency is not None and args.concurrency < 1:
        errors.append("--concurrency must be at least 1")
    if args.timeout is not None and args.timeout <= 0:
        errors.append("--timeout must be positive")
    if args.poll_interval <= 0:
        errors.append("--poll-interval must be positive")
    if args.top < 0:
        errors.append("--top must be non-negative")

    return errors


# ============================================================
# CLI CONFIGURATION BUILDER
# ============================================================

def build_config(args: argparse.Namespace) -> ScannerConfig:
    """
    Load layered configuration and apply command-line overrides.

    Raises:
        ConfigurationError: invalid file, environment or flag value
    """
    config = ScannerConfig.load(args.config)

    job_overrides = {}
    if args.source:
        job_overrides["data_source"] = args.source
    if args.concurrency is not None:
        job_overrides["concurrency"] = args.concurrency
    if args.log_level:
        job_overrides["log_level"] = args.log_level
    if args.log_format:
        job_overrides["log_format"] = args.log_format
    if job_overrides:
        config.job = replace(config.job, **job_overrides)

    if args.max_tokens is not None:
        config.discovery = replace(config.discovery, max_tokens=args.max_tokens)

    return config


# ============================================================
# OUTPUT
# ============================================================

def format_table(results: List[TokenMetrics], top: int) -> str:
    """Ranked results as a fixed-width text table."""
    header = (
        f"{'#':>3}  {'SYMBOL':<8} {'NAME':<20} {'PRICE':>14} {'MCAP':>14} "
        f"{'EXPLOSION':>9} {'SURGE':>7} {'RISK':<8}"
    )
    lines = [header, "-" * len(header)]
    for rank, m in enumerate(results[:top], 1):
        lines.append(
            f"{rank:>3}  {m.symbol[:8]:<8} {m.name[:20]:<20} {m.price:>14.6g} "
            f"{m.market_cap:>14,.0f} {m.explosion_score or 0:>9.2f} "
            f"{m.surge_score or 0:>7.2f} {m.risk_level or '-':<8}"
        )
    return "\n".join(lines)


# ============================================================
# MAIN ENTRY POINT
# ============================================================

async def async_main(args: argparse.Namespace, config: ScannerConfig) -> int:
    """
    Run one scan job to completion.

    Returns:
        Exit code
    """
    manager = build_job_manager(config)
    try:
        job_id = await manager.start()
        loop = asyncio.get_running_loop()
        deadline = loop.time() + args.timeout if args.timeout else None

        while True:
            job = await manager.wait(job_id, timeout=args.poll_interval)
            if job is None:
                logger.error(f"[job={job_id}] Job disappeared")
                return 1
            if job.status.is_terminal:
                break
            logger.info(
                f"[job={job_id}] {job.status.value}: "
                f"{job.processed_tokens}/{job.total_tokens} tokens"
            )
            if deadline is not None and loop.time() >= deadline:
                logger.error(f"[job={job_id}] Timed out after {args.timeout}s")
                return 1

        if job.status == JobStatus.COMPLETED:
            print(format_table(job.results or [], args.top))
            logger.info(
                f"[job={job_id}] Done in {job.duration_seconds:.1f}s: "
                f"{len(job.results or [])} tokens ranked"
            )
            return 0

        logger.error(f"[job={job_id}] Scan failed: {job.error}")
        return 1

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    finally:
        await manager.close()


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    load_dotenv()

    parser = create_parser()
    args = parser.parse_args(argv)

    errors = validate_args(args)
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    try:
        config = build_config(args)
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1

    setup_logging(config.job.log_level, config.job.log_format)
    return asyncio.run(async_main(args, config))


if __name__ == "__main__":
    sys.exit(main())
