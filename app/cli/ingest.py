# app/cli/ingest.py
"""
CLI entry point for scheduled ingestion.

Usage:
    python -m app.cli.ingest
    python -m app.cli.ingest --provider NewsAPI --provider "The Guardian"
    python -m app.cli.ingest --sequential --text-logs

Exit status is 0 when every attempted provider succeeded and 1 otherwise.
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("app.cli.ingest")


def print_summary(result: dict) -> None:
    print(f"\n=== Ingestion {result['status']} ({result['duration_ms']}ms, trace {result['trace_id']}) ===\n")
    for provider_result in result["provider_results"]:
        line = f"  {provider_result['provider']}: {provider_result['status']}"
        if provider_result["status"] == "completed":
            line += (
                f" - {provider_result['fetched']} fetched,"
                f" {provider_result['inserted']} new, {provider_result['updated']} updated"
            )
        elif provider_result["error"]:
            line += f" - {provider_result['error']}"
        print(line)
    print()


def run(provider_names: list[str] | None, sequential: bool) -> int:
    """Run one ingestion pass. Never raises; returns the process exit code."""
    from app.services.ingestion import IngestionService

    try:
        result = IngestionService().ingest_all(provider_names=provider_names, concurrent=not sequential)
    except Exception as e:
        logger.error(f"Ingestion run aborted: {e}", exc_info=True)
        print(f"Error: {e}")
        return 1

    print_summary(result)
    return 0 if not result["errors"] else 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Fetch, normalize and store articles from news providers",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ingest every configured provider
  python -m app.cli.ingest

  # Ingest a single provider
  python -m app.cli.ingest --provider "New York Times"
        """,
    )
    parser.add_argument(
        "--provider",
        action="append",
        dest="providers",
        metavar="NAME",
        help="Provider to ingest (repeatable; default: all configured)",
    )
    parser.add_argument("--sequential", action="store_true", help="Fetch providers one at a time")
    parser.add_argument("--text-logs", action="store_true", help="Human-readable logs instead of JSON")
    args = parser.parse_args(argv)

    from app.config import get_settings
    from app.logging_config import configure_logging

    settings = get_settings()
    configure_logging(json_format=settings.LOG_JSON and not args.text_logs, level=settings.LOG_LEVEL)

    return run(args.providers, args.sequential)


if __name__ == "__main__":
    sys.exit(main())
