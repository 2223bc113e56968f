"""CLI main flow: options, version check, load config, collect, explain."""

import argparse
import sys
from collections.abc import Callable
from pathlib import Path
from uuid import uuid4

from payslip_config import get_rules, load_profile, validate_profile
from payslip_kernel import __version__
from payslip_kernel.exceptions import PayslipError, VersionCheckError
from payslip_kernel.logging_config import (
    LogContext,
    configure_file_logging,
    get_logger,
)
from payslip_services.collection import collect_inputs
from payslip_services.pipeline import PayslipPipeline
from payslip_services.report import format_section, render_report
from payslip_services.version_check import (
    REPOSITORY_URL,
    check_for_update,
    open_repository_page,
)
from scripts.cli import config as cli_config
from scripts.cli.util import pause, print_banner

logger = get_logger("cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="explain_payslip",
        description="Explain your payslip line by line.",
    )
    parser.add_argument(
        "-c", "--config", type=Path, default=cli_config.DEFAULT_CONFIG_PATH,
        help="Specify path to a config file",
    )
    parser.add_argument(
        "-p", "--pause", action=argparse.BooleanOptionalAction, default=False,
        help="Pause after each calculation",
    )
    parser.add_argument(
        "-n", "--no-update-check", dest="check_for_update", action="store_false",
        help="Do not check for new version of script",
    )
    parser.add_argument(
        "--variant", default=None,
        help="Rules variant to use (overrides the config file)",
    )
    parser.add_argument(
        "-v", "--version", action="store_true",
        help="Show script version",
    )
    return parser


def _offer_update(ask: Callable[[str], str]) -> bool:
    """Check for a newer version. Returns True when the user chose to download it."""
    print("Checking for new version of the script...")
    try:
        status = check_for_update(__version__)
    except VersionCheckError:
        print("Couldn't check for latest version of script.")
        print(f"Are you connected to the internet? Can you access {REPOSITORY_URL} in your web browser?")
        print("Continuing execution of script")
        return False

    if not status.update_available:
        print("You have the latest version of the script")
        return False

    print(
        f"Version {status.latest} of script is available. "
        f"You are currently using version {status.current}."
    )
    print(f"You can download the latest script from {REPOSITORY_URL}")
    answer = ask("Would you like to download the latest version now? (yes/no) >: ")
    if answer.strip().lower() == "yes":
        print("Opening browser...")
        open_repository_page()
        return True
    print(f"Continuing execution of this version ({status.current}) of the script")
    return False


def main(argv: list[str] | None = None, ask: Callable[[str], str] = input) -> int:
    args = build_parser().parse_args(argv)

    if args.version:
        print("PayslipExplainator")
        print(f"Version: {__version__}")
        return 0

    log_path = configure_file_logging(cli_config.LOG_DIR, cli_config.LOG_FILE_NAME)

    with LogContext.bind(run_id=uuid4().hex[:12], config_path=str(args.config)):
        logger.info(
            "explain_payslip_starting",
            extra={"log_path": str(log_path), "variant_override": args.variant},
        )
        print_banner()

        if args.check_for_update and _offer_update(ask):
            return 0

        try:
            profile = load_profile(args.config, variant_override=args.variant)
            print("\nYour payslip_config.yml file has been found and loaded\n")
            rules = get_rules(profile.variant)
            validate_profile(profile, rules)
            inputs = collect_inputs(profile, rules, ask)
            result = PayslipPipeline(rules).run(inputs)
        except PayslipError as exc:
            logger.error("explain_payslip_failed", exc_info=exc)
            print(f"ERROR: {exc}", file=sys.stderr)
            return 1

        sections = render_report(inputs, result, rules)
        for i, section in enumerate(sections):
            print(format_section(section))
            if args.pause and i < len(sections) - 1:
                pause(ask)

        logger.info("explain_payslip_finished", extra={"net_income": str(result.net_pay)})
    return 0
