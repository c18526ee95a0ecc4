"""Shared utilities for ruuvibridge services."""

from .models import Measurement, SensorReadings
from .influxdb import DataPoint, InfluxDBConfig
from .config import load_yaml_config, get_config_path
from .logging import setup_logging

__all__ = [
    "Measurement",
    "SensorReadings",
    "DataPoint",
    "InfluxDBConfig",
    "load_yaml_config",
    "get_config_path",
    "setup_logging",
]
