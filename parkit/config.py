# File: parkit/config.py
"""
Application configuration

Settings are read from an optional YAML file and then overridden by
environment variables:

    DATABASE_URL       -> database_url
    PARKIT_LOG_LEVEL   -> log_level
    PARKIT_CONFIG      -> path of the YAML file when none is given

Example file:

    database_url: sqlite:///./parkit.db
    log_level: INFO
    log_dir: logs
    fares:
      car_rate_per_hour: 1.5
      bike_rate_per_hour: 1.0
      free_minutes: 30
      recurring_discount_percent: 5
    spots:
      car: 3
      bike: 2
"""

from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional
import logging
import os

import yaml

from .domain.models import VehicleType
from .domain.strategies import FareSettings


DEFAULT_DATABASE_URL = "sqlite:///./parkit.db"

logger = logging.getLogger(__name__)


def _check_keys(section: str, data: Mapping[str, Any], allowed) -> None:
    unknown = sorted(set(data) - set(allowed))
    if unknown:
        raise ValueError(f"Unknown {section} setting(s): {', '.join(unknown)}")


@dataclass
class FareConfig:
    """Rates and discount of the facility"""
    car_rate_per_hour: Decimal = Decimal("1.5")
    bike_rate_per_hour: Decimal = Decimal("1.0")
    free_minutes: int = 30
    recurring_discount_percent: Decimal = Decimal("5")

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'FareConfig':
        data = data or {}
        _check_keys("fares", data, [f.name for f in fields(cls)])

        config = cls()
        for name in ("car_rate_per_hour", "bike_rate_per_hour", "recurring_discount_percent"):
            if name in data:
                setattr(config, name, Decimal(str(data[name])))
        if "free_minutes" in data:
            config.free_minutes = int(data["free_minutes"])
        return config

    def to_settings(self) -> FareSettings:
        return FareSettings(
            rates_per_hour={
                VehicleType.CAR: self.car_rate_per_hour,
                VehicleType.BIKE: self.bike_rate_per_hour,
            },
            free_minutes=self.free_minutes,
            recurring_discount_percent=self.recurring_discount_percent
        )


@dataclass
class SpotsConfig:
    """Number of spots provisioned per vehicle type"""
    car: int = 3
    bike: int = 2

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'SpotsConfig':
        data = data or {}
        _check_keys("spots", data, [f.name for f in fields(cls)])

        config = cls(**{key: int(value) for key, value in data.items()})
        if config.car < 0 or config.bike < 0:
            raise ValueError("Spot counts cannot be negative")
        return config


@dataclass
class AppConfig:
    """Top-level application settings"""
    database_url: str = DEFAULT_DATABASE_URL
    log_level: str = "INFO"
    log_dir: str = "logs"
    fares: FareConfig = field(default_factory=FareConfig)
    spots: SpotsConfig = field(default_factory=SpotsConfig)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'AppConfig':
        data = dict(data or {})
        _check_keys("top-level", data, [f.name for f in fields(cls)])

        config = cls(
            fares=FareConfig.from_dict(data.pop("fares", None)),
            spots=SpotsConfig.from_dict(data.pop("spots", None))
        )
        for key, value in data.items():
            setattr(config, key, str(value))
        return config

    @classmethod
    def load(cls, path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> 'AppConfig':
        """
        Load settings from YAML and apply environment overrides

        Args:
            path: YAML file; falls back to PARKIT_CONFIG, then to defaults
            environ: Environment mapping, os.environ by default
        """
        environ = os.environ if environ is None else environ
        path = path or environ.get("PARKIT_CONFIG")

        data: Dict[str, Any] = {}
        if path:
            logger.info(f"Loading configuration from {path}")
            with open(path, "r", encoding="utf-8") as config_file:
                data = yaml.safe_load(config_file) or {}
            if not isinstance(data, dict):
                raise ValueError(f"Configuration file {path} must contain a mapping")

        config = cls.from_dict(data)

        if environ.get("DATABASE_URL"):
            config.database_url = environ["DATABASE_URL"]
        if environ.get("PARKIT_LOG_LEVEL"):
            config.log_level = environ["PARKIT_LOG_LEVEL"]

        config.log_level = config.log_level.upper()
        return config
