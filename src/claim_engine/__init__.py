"""CMS-1500 claim validation, compliance scrub and document generation."""

from .config import ConfigError, EngineConfig, get_config, load_config
from .orchestrator import ClaimGenerator, generate_claim
from .repository import ChargeRepository, InMemoryChargeRepository

__all__ = [
    "ClaimGenerator",
    "generate_claim",
    "ChargeRepository",
    "InMemoryChargeRepository",
    "ConfigError",
    "EngineConfig",
    "get_config",
    "load_config",
]
