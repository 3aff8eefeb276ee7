"""Engine configuration and reference data.

Settings live in a single JSON file (``configs/config.json``) with one
section per concern. Each section is parsed into a frozen pydantic model so
the loaded reference data can be shared across concurrent generation calls
without locking.
"""

import json
import logging
import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "CLAIM_ENGINE_CONFIG"
DEFAULT_CONFIG_FILE = Path(__file__).resolve().parents[2] / "configs" / "config.json"


class ConfigError(Exception):
    """Raised when a configuration file cannot be read or parsed."""


class ReferenceDataConfig(BaseModel):
    """Closed code sets and advisory thresholds used by validation and scrubbing."""

    model_config = ConfigDict(frozen=True)

    approved_procedure_codes: tuple[str, ...] = ("90791", "90834", "90837", "90853")
    approved_modifiers: tuple[str, ...] = ("HK", "HO", "GT", "95", "XE", "XS", "XP", "XU")
    common_procedure_codes: tuple[str, ...] = (
        "90791",
        "90834",
        "90837",
        "90846",
        "90847",
        "90853",
    )
    telehealth_modifiers: tuple[str, ...] = ("GT", "95")
    telehealth_procedure_codes: tuple[str, ...] = ("90791", "90834", "90837")
    single_encounter_procedure_codes: tuple[str, ...] = ("90791", "90834", "90837")
    common_place_of_service_codes: tuple[str, ...] = (
        "02",
        "10",
        "11",
        "12",
        "19",
        "22",
        "49",
        "53",
        "71",
        "99",
    )
    # (procedure code, (low, high)) pairs; the config file gives them as an object
    typical_charge_ranges: tuple[tuple[str, tuple[float, float]], ...] = (
        ("90791", (200.0, 400.0)),
        ("90834", (100.0, 200.0)),
        ("90837", (120.0, 250.0)),
        ("90853", (80.0, 150.0)),
    )
    minimum_charge_amount: float = 1.0
    high_unit_threshold: int = 20
    prior_authorization_threshold: float = 500.0

    @field_validator("typical_charge_ranges", mode="before")
    @classmethod
    def _ranges_from_mapping(cls, value):
        if isinstance(value, Mapping):
            return tuple(value.items())
        return value

    def charge_range(self, procedure_code: str | None) -> tuple[float, float] | None:
        """Typical (low, high) charge for a procedure, or None when not tracked."""
        for code, charge_range in self.typical_charge_ranges:
            if code == procedure_code:
                return charge_range
        return None


class MappingConfig(BaseModel):
    """Defaults applied when mapping upstream charges onto a claim record."""

    model_config = ConfigDict(frozen=True)

    default_place_of_service_code: str = "11"


class RenderConfig(BaseModel):
    """Layout settings for the CMS-1500 document renderer."""

    model_config = ConfigDict(frozen=True)

    title: str = "HEALTH INSURANCE CLAIM FORM"
    subtitle: str = "APPROVED BY NATIONAL UNIFORM CLAIM COMMITTEE (NUCC) 02/12"
    filename_prefix: str = "CMS1500"
    max_service_lines: int = 6
    font_name: str = "Helvetica"
    title_font_name: str = "Helvetica-Bold"
    font_size: int = 9


class EngineConfig(BaseModel):
    """Complete engine configuration, one attribute per config file section."""

    model_config = ConfigDict(frozen=True)

    reference_data: ReferenceDataConfig = ReferenceDataConfig()
    mapping: MappingConfig = MappingConfig()
    render: RenderConfig = RenderConfig()


# Maps config file sections to EngineConfig attributes
SECTION_SELECTORS: dict[str, str] = {
    "reference-data": "reference_data",
    "mapping": "mapping",
    "render": "render",
}


def load_config(config_file: str | Path | None = None) -> EngineConfig:
    """Load engine configuration from a JSON file.

    Resolution order: explicit ``config_file``, then the ``CLAIM_ENGINE_CONFIG``
    environment variable, then ``configs/config.json`` at the repository root.
    Built-in defaults are used when no file exists. Sections missing from the
    file keep their defaults.
    """
    path = _resolve_config_path(config_file)
    if path is None:
        logger.info("No config file found, using built-in defaults")
        return EngineConfig()

    try:
        raw = json.loads(path.read_text())
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc

    sections = {
        attr: raw[path_selector]
        for path_selector, attr in SECTION_SELECTORS.items()
        if path_selector in raw
    }
    try:
        config = EngineConfig.model_validate(sections)
    except ValidationError as exc:
        raise ConfigError(f"Invalid config file {path}: {exc}") from exc

    logger.info("Loaded engine config from %s", path)
    return config


@lru_cache(maxsize=1)
def get_config() -> EngineConfig:
    """Process-wide configuration, loaded once on first use."""
    return load_config()


def _resolve_config_path(config_file: str | Path | None) -> Path | None:
    if config_file is not None:
        return Path(config_file)
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    if DEFAULT_CONFIG_FILE.exists():
        return DEFAULT_CONFIG_FILE
    return None
