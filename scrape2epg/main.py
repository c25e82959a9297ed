#!/usr/bin/env python3
"""
scrape2epg - XMLTV grabbers for TV schedule websites

Runs one of three flows for the selected site: interactive configuration,
channel listing, or the grab itself.
"""

import io
import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from . import __version__
from .args import ArgumentParser
from .config import ConfigManager, entries_from_selection
from .context import GrabContext
from .downloader import OptimizedDownloader
from .exceptions import ConfigError
from .grabber import Grabber
from .model import Channel, Configuration, FetchWindow
from .normalize import clamp_window
from .sites import get_adapter
from .utils import backup_output
from .xmltv import XmltvWriter

LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3


def setup_logging(logging_config: dict):
    """Setup logging: stderr console plus an optional rotating log file"""
    if logging_config["level"] == "warning":
        console_level = logging.WARNING
    elif logging_config["level"] == "debug":
        console_level = logging.DEBUG
    else:  # default
        console_level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    # Diagnostics never go to stdout, which may carry the XMLTV document
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root_logger.addHandler(console_handler)
    root_level = console_level

    log_file = logging_config.get("log_file")
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_level = logging.DEBUG if logging_config["level"] == "debug" else logging.INFO
        file_handler = RotatingFileHandler(
            log_file, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)-8s %(message)s", datefmt="%Y/%m/%d %H:%M:%S")
        )
        root_logger.addHandler(file_handler)
        root_level = min(root_level, file_level)

    root_logger.setLevel(root_level)

    # Keep third-party chatter out of the default log
    if logging_config["level"] != "debug":
        logging.getLogger("urllib3").setLevel(logging.WARNING)


@contextmanager
def open_output(output: Optional[str]):
    """XMLTV destination: stdout for None or '-', else a file (previous copy backed up)"""
    if output is None or output == "-":
        # The header declares utf-8 whatever the locale encoding of stdout
        sys.stdout.flush()
        stream = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8")
        try:
            yield stream
        finally:
            stream.flush()
            stream.detach()
        return

    path = Path(output)
    backup_output(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        yield fh
    logging.info("XMLTV output written to: %s", path)


def ask(question: str, choices: List[str], default: str) -> str:
    """Prompt on stderr until one of choices (or its first letter) is typed"""
    prompt = f"{question} [{'/'.join(choices)}] ({default}) "
    while True:
        print(prompt, end="", file=sys.stderr, flush=True)
        try:
            answer = input().strip().lower()
        except EOFError:
            return default
        if not answer:
            return default
        for choice in choices:
            if answer in (choice, choice[0]):
                return choice
        print(f"Please answer one of: {', '.join(choices)}", file=sys.stderr)


def build_context(args, adapter, downloader: OptimizedDownloader,
                  configuration: Optional[Configuration] = None,
                  window: Optional[FetchWindow] = None) -> GrabContext:
    return GrabContext(
        adapter=adapter,
        downloader=downloader,
        window=window or FetchWindow(0, adapter.max_days),
        today=datetime.now(adapter.tz).date(),
        configuration=configuration or Configuration(),
        source=args.source,
        id_template=args.id_template,
        city=args.city,
        slow=args.slow,
        workers=args.workers,
    )


def run_configure(args, adapter, ctx: GrabContext, config_manager: ConfigManager) -> int:
    """Interactive channel selection written to the configuration file"""
    directory = adapter.fetch_channels(ctx)
    if not directory:
        logging.error("No channels found on %s, cannot configure", adapter.domain)
        return 1

    overwrite = args.force
    if config_manager.config_file.exists() and not overwrite:
        answer = ask(f"Configuration file {config_manager.config_file} exists, overwrite it?", ["yes", "no"], "no")
        if answer != "yes":
            logging.info("Configuration left unchanged")
            return 0
        overwrite = True

    selection = []
    mode = None
    for channel_id, info in directory.items():
        if mode is None:
            answer = ask(f"Add channel {info.display_name} ({channel_id})?", ["yes", "no", "all", "none"], "yes")
            if answer in ("all", "none"):
                mode = answer
            enabled = answer in ("yes", "all")
        else:
            enabled = mode == "all"
        selection.append((channel_id, info.display_name, enabled))

    configuration = Configuration(
        entries=entries_from_selection(selection),
        source=ctx.effective_source if adapter.sources else None,
        id_template=args.id_template,
        city=ctx.effective_city if "city" in adapter.config_keys else None,
    )
    config_manager.save(configuration, overwrite=overwrite)
    logging.info("%d of %d channels enabled", len(configuration.enabled_entries), len(selection))
    return 0


def run_list_channels(args, adapter, ctx: GrabContext) -> int:
    """Print the site directory as XMLTV channel elements"""
    directory = adapter.fetch_channels(ctx)
    if not directory:
        logging.error("No channels found on %s", adapter.domain)
        return 1

    with open_output(args.output) as fh:
        writer = XmltvWriter(fh, language=adapter.language)
        writer.start(adapter.header())
        for channel_id, info in directory.items():
            writer.write_channel(ctx.build_channel(channel_id, info.display_name, info))
        writer.end()
    return 0


def select_channels(adapter, ctx: GrabContext) -> List[Channel]:
    """Enabled configured channels, checked against the live directory"""
    directory = adapter.fetch_channels(ctx)
    if not directory:
        logging.warning("Channel directory unavailable, using configured channels as they are")

    channels = []
    for entry in ctx.configuration.enabled_entries:
        info = directory.get(entry.channel_id)
        if directory and info is None:
            logging.warning(
                "Channel %s (%s) is no longer listed on %s, skipping",
                entry.channel_id, entry.display_name, adapter.domain,
            )
            continue
        channels.append(ctx.build_channel(entry.channel_id, entry.display_name, info))
    return channels


def run_grab(args, adapter, ctx: GrabContext) -> int:
    channels = select_channels(adapter, ctx)
    if not channels:
        logging.error("None of the configured channels can be grabbed")
        return 1

    with open_output(args.output) as fh:
        writer = XmltvWriter(fh, language=adapter.language)
        writer.start(adapter.header())
        result = Grabber(ctx).run(channels, writer)
        writer.end()

    if not result.success:
        logging.error("No schedule page could be retrieved from %s", adapter.domain)
        return 1
    return 0


def main(site: Optional[str] = None, argv=None) -> int:
    """Main application entry point"""
    start_time = time.time()
    arg_parser = ArgumentParser(site)
    args = arg_parser.parse_args(argv)
    setup_logging(arg_parser.get_logging_config(args))

    adapter = get_adapter(args.site)
    defaults = arg_parser.get_system_defaults(adapter.key)
    config_manager = ConfigManager(args.config_file or defaults["config_file"], adapter)

    logging.info("=" * 60)
    logging.info("scrape2epg %s session started for %s", __version__, adapter.description)

    try:
        with OptimizedDownloader(delay=args.delay, pool_size=args.workers) as downloader:
            if args.configure:
                ctx = build_context(args, adapter, downloader)
                status = run_configure(args, adapter, ctx, config_manager)
            elif args.list_channels:
                ctx = build_context(args, adapter, downloader)
                status = run_list_channels(args, adapter, ctx)
            else:
                configuration = config_manager.load()
                days = args.days if args.days is not None else adapter.max_days
                window = clamp_window(args.offset, days, adapter.max_days)
                ctx = build_context(args, adapter, downloader, configuration, window)
                status = run_grab(args, adapter, ctx)

            stats = downloader.get_stats()
            logging.info(
                "Network: %d requests, %d failed, %.2f MB downloaded",
                stats["total_requests"], stats["failed_requests"],
                stats["bytes_downloaded"] / (1024 * 1024),
            )

    except ConfigError as e:
        logging.error("%s", str(e))
        return 1
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 1

    logging.info("Session ended (status %d) after %.1f seconds", status, time.time() - start_time)
    logging.info("=" * 60)
    return status


if __name__ == "__main__":
    sys.exit(main())
