"""Configuration loading for the Ruuvi listener."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from ruuvibridge.shared.config import get_log_level, load_yaml_config
from ruuvibridge.shared.influxdb import InfluxDBConfig

from .aliases import parse_alias

DEFAULT_MEASUREMENT_NAME = "ruuvi_measurements"


@dataclass
class BLEConfig:
    """BLE scanning configuration."""
    adapter: Optional[str] = None  # e.g. "hci0", None for the system default
    scanning_mode: str = "active"
    # seconds an address is remembered after its last advertisement
    cache_ttl: float = 60.0

    @classmethod
    def from_dict(cls, data: dict) -> "BLEConfig":
        return cls(
            adapter=data.get("adapter"),
            scanning_mode=data.get("scanning_mode", "active"),
            cache_ttl=float(data.get("cache_ttl", 60.0)),
        )


@dataclass
class ListenerConfig:
    """Main configuration.

    Built once at startup and treated as read-only afterwards.
    """
    measurement_name: str = DEFAULT_MEASUREMENT_NAME
    aliases: Dict[str, str] = field(default_factory=dict)
    keep_mac_colons: bool = False
    verbose: bool = False
    # empty means every data format is accepted
    data_format_versions: List[int] = field(default_factory=list)
    stdout: bool = True
    log_level: str = "INFO"
    ble: BLEConfig = field(default_factory=BLEConfig)
    influxdb: InfluxDBConfig = field(default_factory=InfluxDBConfig)

    @classmethod
    def from_dict(cls, data: dict) -> "ListenerConfig":
        """Create config from dictionary."""
        return cls(
            measurement_name=data.get("measurement_name", DEFAULT_MEASUREMENT_NAME),
            aliases=parse_aliases(data.get("aliases") or {}),
            keep_mac_colons=bool(data.get("keep_mac_colons", False)),
            verbose=bool(data.get("verbose", False)),
            data_format_versions=parse_data_format_versions(data.get("data_format_versions")),
            stdout=bool(data.get("stdout", True)),
            log_level=get_log_level(data),
            ble=BLEConfig.from_dict(data.get("ble") or {}),
            influxdb=InfluxDBConfig.from_dict(data.get("influxdb") or {}),
        )


def parse_aliases(raw: Union[Dict[str, str], List[str]]) -> Dict[str, str]:
    """Accept either an address -> name mapping or a list of ADDR=NAME strings."""
    if isinstance(raw, dict):
        return {str(address): str(name) for address, name in raw.items()}

    aliases = {}
    for entry in raw:
        address, name = parse_alias(entry)
        aliases[address] = name
    return aliases


def parse_data_format_versions(raw: Union[None, str, int, List]) -> List[int]:
    """Parse "3,5", 5 or [3, 5] into a list of format versions."""
    if raw is None or raw == "":
        return []
    if isinstance(raw, int):
        return [raw]
    if isinstance(raw, str):
        raw = [part for part in raw.split(",") if part.strip()]
    return [int(value) for value in raw]


def load_config(config_path: Optional[Union[str, Path]] = None) -> ListenerConfig:
    """Load configuration from YAML file and environment variables.

    Args:
        config_path: Path to the YAML file. If None, RUUVIBRIDGE_CONFIG or
                     config/listener.yaml is used; a missing default file
                     means defaults.

    Returns:
        ListenerConfig with loaded settings.
    """
    data = load_yaml_config(config_path, required=config_path is not None)
    return ListenerConfig.from_dict(data)
