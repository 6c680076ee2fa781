"""Command-line interface for the site checker."""

import asyncio
import dataclasses
import sys
from pathlib import Path

from seocheck.config import CheckerConfig, settings
from seocheck.constants import PHASE_ORDER
from seocheck.exceptions import ConfigError, SeoCheckError
from seocheck.formatters import OUTPUT_FORMATS
from seocheck.logging_config import setup_logging
from seocheck.runner import SiteChecker

EXIT_OK = 0
EXIT_BROKEN_LINKS = 1
EXIT_ERROR = 2


def _parse_redirects(values):
    redirects = {}
    for value in values or []:
        source, separator, target = value.partition("=")
        if not separator or not source or not target:
            raise ConfigError(f"Invalid redirect '{value}', expected SOURCE=DESTINATION")
        redirects[source.strip()] = target.strip()
    return redirects


def build_config(args) -> CheckerConfig:
    """Merge the config file (or environment) with command-line overrides."""
    if args.config:
        config = CheckerConfig.from_file(args.config)
    else:
        config = CheckerConfig.from_env()

    overrides = {}
    if args.report:
        overrides["report_file_path"] = args.report
    if args.format:
        overrides["report_format"] = args.format
    if args.external is not None:
        overrides["check_external_links"] = args.external
    if args.verbose:
        overrides["verbose"] = True
    if args.redirect:
        overrides["redirects"] = {**config.redirects, **_parse_redirects(args.redirect)}
    if args.disable_phase:
        overrides["phases"] = {
            **config.phases,
            **{phase_id: False for phase_id in args.disable_phase},
        }

    return dataclasses.replace(config, **overrides) if overrides else config


def check_command(args) -> int:
    """Scan a built site and write the report."""
    site_dir = Path(args.site_dir)
    if not site_dir.is_dir():
        print(f"Error: {site_dir} is not a directory", file=sys.stderr)
        return EXIT_ERROR

    try:
        config = build_config(args)
        result = asyncio.run(SiteChecker(config).run(site_dir))
    except SeoCheckError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.fail_on_broken and result.has_broken_links:
        return EXIT_BROKEN_LINKS
    return EXIT_OK


def main(argv=None) -> int:
    """Main CLI entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        description="seocheck - Find broken links and SEO issues in a built static site"
    )
    parser.add_argument(
        "site_dir", help="Output directory of the site build (e.g. dist/)"
    )
    parser.add_argument(
        "--config",
        "-c",
        help="JSON configuration file (default: SEOCHECK_* environment variables)",
    )
    parser.add_argument(
        "--report",
        "-r",
        help="Report file path, relative to the site directory unless absolute (default: site-report.log)",
    )
    parser.add_argument(
        "--format",
        "-f",
        choices=list(OUTPUT_FORMATS),
        help="Report format (default: inferred from the report file extension)",
    )
    external = parser.add_mutually_exclusive_group()
    external.add_argument(
        "--external",
        dest="external",
        action="store_true",
        default=None,
        help="Check external links over the network (slower)",
    )
    external.add_argument(
        "--no-external",
        dest="external",
        action="store_false",
        help="Do not check external links",
    )
    parser.add_argument(
        "--redirect",
        action="append",
        metavar="SOURCE=DESTINATION",
        help="Redirect configured in the site build; may be repeated",
    )
    parser.add_argument(
        "--disable-phase",
        action="append",
        choices=list(PHASE_ORDER),
        help="Disable a check phase; may be repeated",
    )
    parser.add_argument(
        "--fail-on-broken",
        action="store_true",
        help="Exit with status 1 when broken links are found",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log every finding while scanning",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.LOG_LEVEL.upper(),
        help="Set logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )

    args = parser.parse_args(argv)

    # Configure logging based on flags
    setup_logging(
        level=args.log_level,
        log_file=args.log_file,
        verbose=args.verbose,
    )

    return check_command(args)


if __name__ == "__main__":
    sys.exit(main())
