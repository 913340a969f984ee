from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, PositiveFloat, ValidationError

from carbon_intensity.core.exceptions import ConfigError
from carbon_intensity.models.publisher_config import ConsoleSettings, KafkaSettings
from carbon_intensity.models.reader_config import ReaderSettings
from carbon_intensity.models.source_config import CO2SignalSettings, SimulatorSettings

CONSOLE_PUBLISHER = "console-publisher"


class AppConfig(BaseModel):
    """Immutable service configuration, built once at startup and passed to the Orchestrator.

    The three selection keys keep their hyphenated names from the properties
    file (``data-source``, ``reader``, ``data-publisher``); snake_case names are
    accepted too.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # --- variant selection ---
    data_source: str = Field(validation_alias=AliasChoices("data-source", "data_source"))
    reader: str
    data_publisher: str = Field(validation_alias=AliasChoices("data-publisher", "data_publisher"))

    # --- runtime ---
    dry_run: bool = Field(default=False, validation_alias=AliasChoices("dry-run", "dry_run"))
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias=AliasChoices("log-level", "log_level")
    )
    shutdown_timeout_seconds: PositiveFloat = Field(
        default=10.0, validation_alias=AliasChoices("shutdown-timeout-seconds", "shutdown_timeout_seconds")
    )

    # --- per-variant settings ---
    reader_settings: ReaderSettings = Field(
        default_factory=ReaderSettings, validation_alias=AliasChoices("reader-settings", "reader_settings")
    )
    co2_signal: CO2SignalSettings = Field(
        default_factory=CO2SignalSettings, validation_alias=AliasChoices("co2-signal", "co2_signal")
    )
    simulator: SimulatorSettings = Field(default_factory=SimulatorSettings)
    kafka: KafkaSettings = Field(default_factory=KafkaSettings)
    console: ConsoleSettings = Field(default_factory=ConsoleSettings)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "AppConfig":
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc

    def with_dry_run(self) -> "AppConfig":
        """Return a copy that publishes to the console regardless of data-publisher."""
        return self.model_copy(update={"dry_run": True, "data_publisher": CONSOLE_PUBLISHER})

    def effective(self) -> "AppConfig":
        return self.with_dry_run() if self.dry_run else self


def parse_properties(text: str) -> Dict[str, Any]:
    """
    Parse Java-style ``key=value`` properties into a nested dict.

    Dotted keys open a section: ``kafka.topic=t`` becomes ``{"kafka": {"topic": "t"}}``.
    Only the first two dots nest, so librdkafka option names survive intact:
    ``kafka.producer_options.security.protocol=SSL`` becomes
    ``{"kafka": {"producer_options": {"security.protocol": "SSL"}}}``.
    """
    result: Dict[str, Any] = {}
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue

        sep = min((i for i in (line.find("="), line.find(":")) if i != -1), default=-1)
        if sep == -1:
            raise ConfigError(f"Invalid properties line {lineno}: {raw_line!r}")
        key, value = line[:sep].strip(), line[sep + 1:].strip()
        if not key:
            raise ConfigError(f"Empty key on properties line {lineno}")

        *sections, leaf = key.split(".", 2)
        node = result
        for section in sections:
            child = node.setdefault(section, {})
            if not isinstance(child, dict):
                raise ConfigError(f"Properties key {key!r} conflicts with scalar {section!r}")
            node = child
        if isinstance(node.get(leaf), dict):
            raise ConfigError(f"Properties key {key!r} conflicts with section {leaf!r}")
        node[leaf] = value
    return result


def load_app_config(path: Union[str, Path]) -> AppConfig:
    """Load configuration from a .properties, .json or .yaml/.yml file."""
    config_file = Path(path)
    if not config_file.exists():
        raise ConfigError(f"Config file not found: {config_file}")

    text = config_file.read_text(encoding="utf-8")
    suffix = config_file.suffix.lower()

    if suffix == ".properties":
        raw = parse_properties(text)
    elif suffix == ".json":
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Invalid JSON in config file: {exc}") from exc
    elif suffix in (".yaml", ".yml"):
        import yaml

        try:
            raw = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Invalid YAML in config file: {exc}") from exc
    else:
        raise ConfigError(
            f"Unsupported config format: {config_file.suffix}. Use .properties, .json or .yaml"
        )

    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must contain a mapping at the top level: {config_file}")

    return AppConfig.from_dict(raw)
