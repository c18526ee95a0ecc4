"""InfluxDB configuration and line protocol utilities."""

import logging
import math
import os
import time
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Union
from urllib.parse import urlencode

logger = logging.getLogger(__name__)

FieldValue = Union[int, float]


@dataclass
class InfluxDBConfig:
    """InfluxDB connection configuration.

    When a token is set the 2.x write API is used, otherwise the 1.x one.
    """
    url: Optional[str] = None
    database: str = "ruuvi"
    org: Optional[str] = None
    bucket: Optional[str] = None
    token: Optional[str] = None
    timeout: float = 10.0

    @classmethod
    def from_dict(cls, data: dict) -> "InfluxDBConfig":
        """Create config from dictionary, with environment variables taking precedence."""
        return cls(
            url=os.getenv("INFLUXDB_URL", data.get("url")),
            database=os.getenv("INFLUXDB_DATABASE", data.get("database", "ruuvi")),
            org=os.getenv("INFLUXDB_ORG", data.get("org")),
            bucket=os.getenv("INFLUXDB_BUCKET", data.get("bucket")),
            token=os.getenv("INFLUXDB_TOKEN", data.get("token")),
            timeout=float(data.get("timeout", 10.0)),
        )

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    @property
    def write_url(self) -> str:
        """Full write endpoint URL including query string."""
        base = (self.url or "").rstrip("/")
        if self.token:
            params = {"bucket": self.bucket or self.database, "precision": "ns"}
            if self.org:
                params["org"] = self.org
            return f"{base}/api/v2/write?{urlencode(params)}"
        return f"{base}/write?{urlencode({'db': self.database, 'precision': 'ns'})}"

    @property
    def headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "text/plain; charset=utf-8"}
        if self.token:
            headers["Authorization"] = f"Token {self.token}"
        return headers


def _escape_measurement(value: str) -> str:
    return value.replace(",", r"\,").replace(" ", r"\ ")


def _escape_key(value: str) -> str:
    return value.replace(",", r"\,").replace("=", r"\=").replace(" ", r"\ ")


def _format_field_value(value: FieldValue) -> str:
    if isinstance(value, int):
        return f"{value}i"
    return repr(float(value))


@dataclass(frozen=True)
class DataPoint:
    """A single InfluxDB point.

    The timestamp is taken when the point is built, in nanoseconds.
    """
    measurement: str
    tags: Mapping[str, str]
    fields: Mapping[str, FieldValue]
    timestamp: int = field(default_factory=time.time_ns)

    def __post_init__(self):
        object.__setattr__(self, "tags", MappingProxyType(dict(self.tags)))
        object.__setattr__(self, "fields", MappingProxyType(dict(self.fields)))

    def _writable_fields(self):
        # InfluxDB rejects NaN and infinity
        return [
            (key, value)
            for key, value in sorted(self.fields.items())
            if isinstance(value, int) or math.isfinite(value)
        ]

    @property
    def has_fields(self) -> bool:
        """Whether at least one field survives serialization."""
        return bool(self._writable_fields())

    def to_line(self) -> str:
        """Serialize to one line of InfluxDB line protocol.

        A point without writable fields is not valid line protocol; check
        has_fields first.
        """
        parts = [_escape_measurement(self.measurement)]
        for key in sorted(self.tags):
            parts.append(f"{_escape_key(key)}={_escape_key(self.tags[key])}")
        series = ",".join(parts)

        field_set = ",".join(
            f"{_escape_key(key)}={_format_field_value(value)}"
            for key, value in self._writable_fields()
        )
        return f"{series} {field_set} {self.timestamp}"

    def __str__(self) -> str:
        return self.to_line()
