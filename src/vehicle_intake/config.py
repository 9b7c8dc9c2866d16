"""
Intake Configuration - Centralized Settings
===========================================

All tunable parameters of the capture quality gate in one place.
Supports environment variable overrides.

Usage:
    from vehicle_intake.config import get_config
    config = get_config()
    print(config.quality.sample_budget)

Environment Variables:
    INTAKE_SAMPLE_BUDGET=120000
    INTAKE_VIN_MARGIN=0.12
    INTAKE_ODOMETER_MARGIN=0.10
    INTAKE_JPEG_QUALITY=95
    INTAKE_LOG_LEVEL=DEBUG
    INTAKE_LOG_FILE=/var/log/intake.log

The per-target threshold table is deliberately not part of this module;
see vehicle_intake.quality.gate.DEFAULT_THRESHOLDS.
"""

import os
import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)


def _get_env_float(key: str, default: float) -> float:
    """Get float from environment variable."""
    value = os.environ.get(key)
    if value is not None:
        try:
            return float(value)
        except ValueError:
            logger.warning(f"Invalid float for {key}: {value}, using default {default}")
    return default


def _get_env_int(key: str, default: int, min_value: Optional[int] = None) -> int:
    """Get int from environment variable, optionally bounded below."""
    value = os.environ.get(key)
    if value is not None:
        try:
            parsed = int(value)
        except ValueError:
            logger.warning(f"Invalid int for {key}: {value}, using default {default}")
            return default
        if min_value is not None and parsed < min_value:
            logger.warning(f"{key}={parsed} is below {min_value}, using default {default}")
            return default
        return parsed
    return default


def _get_env_str(key: str, default: str) -> str:
    """Get string from environment variable."""
    return os.environ.get(key, default)


@dataclass
class QualityConfig:
    """Capture quality gate configuration."""

    # Upper bound on pixels sampled by the metrics engine
    sample_budget: int = field(
        default_factory=lambda: _get_env_int('INTAKE_SAMPLE_BUDGET', 120000, min_value=1)
    )

    # Default symmetric crop margin per capture target
    vin_margin_ratio: float = field(
        default_factory=lambda: _get_env_float('INTAKE_VIN_MARGIN', 0.12)
    )
    odometer_margin_ratio: float = field(
        default_factory=lambda: _get_env_float('INTAKE_ODOMETER_MARGIN', 0.10)
    )

    # Encoding of the processed capture
    jpeg_quality: int = field(
        default_factory=lambda: _get_env_int('INTAKE_JPEG_QUALITY', 95)
    )

    def margin_defaults(self) -> Dict[str, float]:
        """Default margin ratio keyed by capture target value."""
        return {
            'vin': self.vin_margin_ratio,
            'odometer': self.odometer_margin_ratio,
        }


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = field(
        default_factory=lambda: _get_env_str('INTAKE_LOG_LEVEL', 'INFO')
    )
    format: str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    date_format: str = '%Y-%m-%d %H:%M:%S'

    # File logging (optional)
    log_file: Optional[str] = field(
        default_factory=lambda: os.environ.get('INTAKE_LOG_FILE')
    )


@dataclass
class IntakeConfig:
    """Complete intake configuration."""

    quality: QualityConfig = field(default_factory=QualityConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    def save(self, path: Path):
        """Save configuration to JSON file."""
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, path: Path) -> 'IntakeConfig':
        """Load configuration from JSON file."""
        with open(path) as f:
            data = json.load(f)

        config = cls()

        for section in ('quality', 'logging'):
            for key, value in data.get(section, {}).items():
                target = getattr(config, section)
                if hasattr(target, key):
                    setattr(target, key, value)

        return config


# Global configuration instance (singleton pattern)
_config: Optional[IntakeConfig] = None


def get_config() -> IntakeConfig:
    """
    Get the global configuration instance.

    Creates a new instance on first call, returns cached instance thereafter.
    """
    global _config
    if _config is None:
        _config = IntakeConfig()
        _setup_logging(_config.logging)
    return _config


def reset_config():
    """Reset configuration to defaults (useful for testing)."""
    global _config
    _config = None


def _setup_logging(config: LoggingConfig):
    """Configure logging based on settings."""
    level = getattr(logging, config.level.upper(), logging.INFO)

    handlers = [logging.StreamHandler()]

    if config.log_file:
        handlers.append(logging.FileHandler(config.log_file))

    logging.basicConfig(
        level=level,
        format=config.format,
        datefmt=config.date_format,
        handlers=handlers,
    )
