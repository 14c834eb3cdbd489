"""Engine configuration loaded from YAML, plus logging setup."""
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass
class MatcherConfig:
    """Tuning knobs for the product matcher."""

    similarity_threshold: float = 0.7
    max_alternatives: int = 3
    substitute_weight: float = 0.4
    min_confidence: float = 0.0
    keyword_search_threshold: int = 5  # below this many candidates, also search key terms
    category_search_threshold: int = 3  # below this many, also browse the inferred category
    in_stock_only: bool = True

    def __post_init__(self):
        if not 0.0 < self.similarity_threshold <= 1.0:
            raise ValueError("similarity_threshold must be in (0, 1]")
        if self.max_alternatives < 0:
            raise ValueError("max_alternatives must be >= 0")
        if not 0.0 <= self.min_confidence <= 1.0:
            raise ValueError("min_confidence must be in [0, 1]")


@dataclass
class OptimizerConfig:
    """Constraints for multi-store optimization."""

    include_delivery_costs: bool = True
    max_supermarkets: Optional[int] = 2  # None disables the limit
    minimum_savings_for_split_cents: int = 500
    large_savings_threshold_cents: int = 1000
    max_workers: int = 8

    def __post_init__(self):
        if self.max_supermarkets is not None and self.max_supermarkets < 1:
            raise ValueError("max_supermarkets must be >= 1 or null")
        if self.minimum_savings_for_split_cents < 0:
            raise ValueError("minimum_savings_for_split_cents must be >= 0")
        if self.max_workers < 1:
            self.max_workers = 1


@dataclass
class EngineSettings:
    """All engine settings."""

    matcher: MatcherConfig = field(default_factory=MatcherConfig)
    optimizer: OptimizerConfig = field(default_factory=OptimizerConfig)
    log_level: str = "INFO"


def _build(config_cls, data: Optional[Dict[str, Any]], section: str):
    """Instantiate a config dataclass from a YAML section, rejecting unknown keys."""
    data = data or {}
    known = {f.name for f in fields(config_cls)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown keys in '{section}' section: {', '.join(unknown)}")
    return config_cls(**data)


class SettingsLoader:
    """Loader for engine settings from YAML."""

    def __init__(self, yaml_path: str):
        """Initialize settings loader from YAML file.

        Args:
            yaml_path: Path to YAML file with 'matcher', 'optimizer' and
                'logging' sections (all optional)
        """
        self.yaml_path = Path(yaml_path)

    def load(self) -> EngineSettings:
        """Load settings from the YAML file.

        Returns:
            EngineSettings object

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            ValueError: If a section contains unknown keys or invalid values
        """
        with open(self.yaml_path, "r") as f:
            data = yaml.safe_load(f) or {}

        logging_section = data.get("logging") or {}

        return EngineSettings(
            matcher=_build(MatcherConfig, data.get("matcher"), "matcher"),
            optimizer=_build(OptimizerConfig, data.get("optimizer"), "optimizer"),
            log_level=str(logging_section.get("level", "INFO")).upper(),
        )


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging; module-level loggers inherit it.

    The LOG_LEVEL environment variable wins over the configured level.
    """
    resolved = os.getenv("LOG_LEVEL", level or "INFO").upper()
    logging.basicConfig(level=resolved, format=LOG_FORMAT)
