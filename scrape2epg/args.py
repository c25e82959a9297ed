"""
scrape2epg.args - Command line argument parsing

One parser serves the generic ``scrape2epg --site KEY`` entry point and the
per-site ``tv_grab_<site>`` commands, which have their site fixed.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional

from .sites import SITES


class ArgumentParser:
    """Command line argument parser for the XMLTV grabbers"""

    MAX_DAYS = 14  # Longest window offered by any site
    MAX_WORKERS = 10

    def __init__(self, site: Optional[str] = None):
        self.site = site
        self.parser = self._create_parser()

    @property
    def prog(self) -> str:
        return f"tv_grab_{self.site}" if self.site else "scrape2epg"

    def _create_parser(self):
        """Create the argument parser"""
        sites = "\n".join(f"  {key:<12} {adapter.description}" for key, adapter in SITES.items())
        parser = argparse.ArgumentParser(
            prog=self.prog,
            description="XMLTV grabber for TV schedule websites",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog=f"""
Sites:
{sites}

Examples:
  {self.prog} --configure{'' if self.site else ' --site ee'}
  {self.prog} --list-channels{'' if self.site else ' --site re --source canalsat'}
  {self.prog} --days 3 --offset 1 --output guide.xml{'' if self.site else ' --site il'}
  {self.prog} --slow --workers 4{'' if self.site else ' --site ch_bluewin'}

Configuration:
  Default config: ~/.xmltv/tv_grab_<site>.conf

Logging:
  (default)       Info, warnings and errors to stderr, XML to stdout
  --quiet         Only warnings and errors to stderr
  --debug         All debug information
  --log-file      Also write the log to a rotating file
            """,
        )

        # XMLTV baseline capabilities
        parser.add_argument(
            "--description", "-d", action="store_true", help="Show grabber description and exit"
        )
        parser.add_argument("--version", "-v", action="store_true", help="Show version and exit")
        parser.add_argument(
            "--capabilities", "-c", action="store_true", help="Show capabilities and exit"
        )

        if self.site is None:
            parser.add_argument("--site", choices=sorted(SITES), help="Site to grab from")

        # Modes
        mode_group = parser.add_mutually_exclusive_group()
        mode_group.add_argument(
            "--configure", action="store_true", help="Choose channels and write the configuration file"
        )
        mode_group.add_argument(
            "--list-channels", action="store_true", help="Print the site's channel list as XMLTV and exit"
        )

        parser.add_argument("--config-file", type=Path, help="Configuration file path")
        parser.add_argument(
            "--force", action="store_true", help="Overwrite an existing configuration file with --configure"
        )

        # Output control
        parser.add_argument(
            "--output", "-o", type=str, help="Write XMLTV to this file ('-' for stdout, the default)"
        )

        # Grab window
        parser.add_argument("--days", type=int, help="Number of days to grab (default: site maximum)")
        parser.add_argument("--offset", type=int, default=0, help="Start with data for day today plus X days")

        # Site settings
        site_group = parser.add_argument_group("Site Options")
        site_group.add_argument("--source", type=str, help="Data source (channel line-up) for sites that offer several")
        site_group.add_argument("--city", type=str, help="City code for sites with regional line-ups")
        site_group.add_argument(
            "--id-template", type=str, metavar="TEMPLATE",
            help="XMLTV channel id template, {id} and {domain} are replaced",
        )
        site_group.add_argument(
            "--slow", action="store_true", help="Fetch detail pages for description, credits and rating"
        )

        # Download behaviour
        performance_group = parser.add_argument_group("Download Options")
        performance_group.add_argument(
            "--delay", type=float, default=0.0, metavar="SECONDS", help="Pause between two requests (default: 0)"
        )
        performance_group.add_argument(
            "--workers", type=int, default=1, metavar="N",
            help=f"Parallel page downloads (1-{self.MAX_WORKERS}, default: 1)",
        )

        # Log level selection
        level_group = parser.add_mutually_exclusive_group()
        level_group.add_argument("--quiet", "-q", action="store_true", help="Only warnings and errors to stderr")
        level_group.add_argument("--debug", action="store_true", help="All debug information (very verbose)")
        parser.add_argument("--log-file", type=Path, help="Also write the log to this file")

        return parser

    def parse_args(self, args=None):
        """Parse command line arguments, handling the exit-immediately options"""
        args = self.parser.parse_args(args)
        if self.site is not None:
            args.site = self.site

        if args.version:
            from . import __version__

            print(__version__)
            sys.exit(0)

        if args.capabilities:
            print("baseline")
            print("manualconfig")
            sys.exit(0)

        if args.description:
            if args.site:
                print(SITES[args.site].description)
            else:
                print("TV schedule website grabbers (scrape2epg)")
            sys.exit(0)

        self._validate_args(args)
        return args

    def _validate_args(self, args):
        """Validate argument values"""
        if not args.site:
            self.parser.error("Parameter [--site] is required, choose one of: " + ", ".join(sorted(SITES)))

        if args.days is not None and not 0 <= args.days <= self.MAX_DAYS:
            self.parser.error(f"Parameter [--days] must be 0-{self.MAX_DAYS}, got: {args.days}")

        if args.offset < 0 or args.offset > self.MAX_DAYS:
            self.parser.error(f"Parameter [--offset] must be 0-{self.MAX_DAYS}, got: {args.offset}")

        if not 1 <= args.workers <= self.MAX_WORKERS:
            self.parser.error(f"Parameter [--workers] must be 1-{self.MAX_WORKERS}, got: {args.workers}")

        if args.delay < 0:
            self.parser.error(f"Parameter [--delay] cannot be negative, got: {args.delay}")

        if args.id_template is not None and "{id}" not in args.id_template:
            self.parser.error("Parameter [--id-template] must contain {id}")

        if args.force and not args.configure:
            self.parser.error("Parameter [--force] only applies to --configure")

    def get_logging_config(self, args):
        """Determine logging configuration from arguments"""
        config = {
            "level": "default",
            "log_file": args.log_file,
        }

        if args.debug:
            config["level"] = "debug"
        elif args.quiet:
            config["level"] = "warning"

        return config

    def get_system_defaults(self, site: str):
        """Default file locations for a site"""
        return {"config_file": Path.home() / ".xmltv" / f"tv_grab_{site}.conf"}
