"""Command line entry point: daily reports and exclusion-file maintenance."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional

from .bucketing import parse_date_range
from .config import Settings, load_settings
from .errors import ConfigurationError
from .exclusions import parse_exclusions_bytes
from .pipeline import run
from .services import Services, create_default_services

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="daily-report", description="Build daily activity reports from CSV exports")
    commands = parser.add_subparsers(dest="command", required=True)

    report = commands.add_parser("report", help="Write one report per day from the data directory")
    report.add_argument("--startDate", dest="start_date", help="First report day, YYYY-MM-DD (required)")
    report.add_argument("--endDate", dest="end_date", help="Last report day, YYYY-MM-DD")

    commands.add_parser("encrypt-exclusions", help="Validate and encrypt the exclusions file")
    commands.add_parser("decrypt-exclusions", help="Decrypt the exclusions file")
    return parser


def should_proceed_with_write(path: Path, services: Services) -> bool:
    if services.file_system.exists(path):
        logger.warning("Warning: File '%s' already exists.", path)
        if not services.user_interaction.confirm(f"Do you want to overwrite file '{path}'?"):
            logger.info("Operation cancelled. File will not be overwritten.")
            return False
        logger.info("Overwriting file...")
    return True


def encrypt_exclusions(settings: Settings, services: Services) -> None:
    source = settings.exclusions_file
    target = settings.encrypted_exclusions_file

    raw = services.file_system.read_bytes(source)
    parse_exclusions_bytes(raw)
    cipher = services.crypto.encrypt(raw, settings.passphrase.get_secret_value())

    if should_proceed_with_write(target, services):
        services.file_system.write_bytes(target, cipher)
        logger.info("File successfully saved: %s", target)


def decrypt_exclusions(settings: Settings, services: Services) -> None:
    source = settings.encrypted_exclusions_file
    target = settings.exclusions_file

    plain = services.crypto.decrypt(services.file_system.read_bytes(source), settings.passphrase.get_secret_value())

    if should_proceed_with_write(target, services):
        services.file_system.write_bytes(target, plain)
        logger.info("Decrypted file successfully saved: %s", target)


def main(argv: Optional[List[str]] = None, services: Optional[Services] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    services = services or create_default_services()

    try:
        date_range = parse_date_range(args.start_date, args.end_date) if args.command == "report" else None
        settings = load_settings()
        logging.getLogger().setLevel(settings.log_level.upper())

        if args.command == "report":
            written = run(settings, date_range, services)
            logger.info("%d report(s) written to %s", len(written), settings.output_dir)
        elif args.command == "encrypt-exclusions":
            encrypt_exclusions(settings, services)
        else:
            decrypt_exclusions(settings, services)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return 1
    except FileNotFoundError as exc:
        logger.error("Error: File '%s' not found.", exc.filename)
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
