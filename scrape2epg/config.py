"""
scrape2epg.config - Configuration management

Reads and writes the line-oriented grabber configuration file:

    # comment
    source: tnt
    idtemplate: {id}.tv.example
    city: 1
    map: 12 channel12.example.com
    channel 12 Channel Twelve      # enabled
    #channel 13 Channel Thirteen   # disabled

Metadata lines (``key: value``) are parsed before channel lines. A leading
``#`` on a channel line disables it; any other ``#`` line is a comment.
"""

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

from .exceptions import ConfigError
from .model import ConfigEntry, Configuration

if TYPE_CHECKING:
    from .sites.base import SiteAdapter


class ConfigManager:
    """Manages one grabber configuration file"""

    METADATA_PATTERN = re.compile(r"^\s*(source|idtemplate|city|map)\s*:\s*(.*?)\s*$", re.IGNORECASE)
    CHANNEL_PATTERN = re.compile(r"^\s*(#?)\s*channel\s+(\S+)\s*(.*)$", re.IGNORECASE)
    MAP_PATTERN = re.compile(r"^(\S+)\s+(\S+)$")

    def __init__(self, config_file: Path, adapter: Optional["SiteAdapter"] = None):
        self.config_file = Path(config_file)
        self.adapter = adapter

    def load(self) -> Configuration:
        """Load and validate the configuration file"""
        if not self.config_file.exists():
            raise ConfigError(
                f"Configuration file {self.config_file} not found, "
                "please run the grabber with --configure first"
            )

        try:
            with open(self.config_file, "r", encoding="utf-8") as f:
                lines = f.read().splitlines()
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Cannot read configuration file {self.config_file}: {e}") from e

        logging.info("Reading configuration from: %s", self.config_file)
        configuration = Configuration()

        # Metadata first, so every channel line sees the final settings
        channel_lines = []
        for line_number, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            metadata = self.METADATA_PATTERN.match(line)
            if metadata:
                self._apply_metadata(configuration, metadata.group(1).lower(), metadata.group(2), line_number)
            else:
                channel_lines.append((line_number, line))

        for line_number, line in channel_lines:
            entry = self._parse_channel_line(line)
            if entry is not None:
                if entry.enabled and not self._is_valid_id(entry.channel_id):
                    logging.warning(
                        "%s line %d: invalid channel id '%s', skipping",
                        self.config_file.name, line_number, entry.channel_id,
                    )
                    continue
                configuration.entries.append(entry)
            elif line.lstrip().startswith("#"):
                continue  # Plain comment
            else:
                logging.warning(
                    "%s line %d: unrecognized line, skipping: %s",
                    self.config_file.name, line_number, line.strip(),
                )

        enabled = len(configuration.enabled_entries)
        if enabled == 0:
            raise ConfigError(
                f"No channels enabled in {self.config_file}, "
                "please run the grabber with --configure"
            )

        logging.info("Configuration: %d channels enabled, %d disabled",
                     enabled, len(configuration.entries) - enabled)
        return configuration

    def save(self, configuration: Configuration, overwrite: bool = False):
        """Write configuration; refuse to replace an existing file unless asked"""
        if self.config_file.exists() and not overwrite:
            raise ConfigError(
                f"Configuration file {self.config_file} already exists, "
                "use --force to overwrite it"
            )

        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True, mode=0o755)
            with open(self.config_file, "w", encoding="utf-8") as f:
                f.write(self.render(configuration))
        except OSError as e:
            raise ConfigError(f"Cannot write configuration file {self.config_file}: {e}") from e

        logging.info("Configuration written to: %s", self.config_file)

    def render(self, configuration: Configuration) -> str:
        lines = []
        if self.adapter is not None:
            lines.append(f"# {self.adapter.description} ({self.adapter.key})")
        if configuration.source:
            lines.append(f"source: {configuration.source}")
        if configuration.id_template:
            lines.append(f"idtemplate: {configuration.id_template}")
        if configuration.city:
            lines.append(f"city: {configuration.city}")
        for site_id, output_id in configuration.id_overrides.items():
            lines.append(f"map: {site_id} {output_id}")
        for entry in configuration.entries:
            prefix = "" if entry.enabled else "#"
            name = entry.display_name.replace("#", "").strip()
            lines.append(f"{prefix}channel {entry.channel_id} {name}".rstrip())
        return "\n".join(lines) + "\n"

    def _apply_metadata(self, configuration: Configuration, key: str, value: str, line_number: int):
        if self.adapter is not None and key != "map" and key not in self.adapter.config_keys:
            logging.warning(
                "%s line %d: setting '%s' is not used by %s, ignoring",
                self.config_file.name, line_number, key, self.adapter.key,
            )
            return

        if key == "map":
            mapping = self.MAP_PATTERN.match(value)
            if not mapping:
                logging.warning("%s line %d: expected 'map: <site id> <output id>'",
                                self.config_file.name, line_number)
                return
            configuration.id_overrides[mapping.group(1)] = mapping.group(2)
        elif key == "source":
            configuration.source = value
        elif key == "idtemplate":
            configuration.id_template = value
        elif key == "city":
            configuration.city = value
        logging.debug("Config setting: %s = %s", key, value)

    def _parse_channel_line(self, line: str) -> Optional[ConfigEntry]:
        match = self.CHANNEL_PATTERN.match(line)
        if not match:
            return None
        disabled, channel_id, rest = match.groups()
        display_name = rest.split("#", 1)[0].rstrip()
        return ConfigEntry(channel_id=channel_id, enabled=not disabled, display_name=display_name)

    def _is_valid_id(self, channel_id: str) -> bool:
        if self.adapter is None:
            return True
        return self.adapter.is_valid_channel_id(channel_id)


def load(path: Path, adapter: Optional["SiteAdapter"] = None) -> Configuration:
    return ConfigManager(path, adapter).load()


def save(path: Path, configuration: Configuration, adapter: Optional["SiteAdapter"] = None,
         overwrite: bool = False):
    ConfigManager(path, adapter).save(configuration, overwrite=overwrite)


def entries_from_selection(selection: Iterable[tuple]) -> list:
    """Build config entries from (channel_id, display_name, enabled) tuples"""
    return [ConfigEntry(channel_id=cid, enabled=enabled, display_name=name)
            for cid, name, enabled in selection]
