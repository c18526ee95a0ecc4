"""Sinks that accept finished data points."""

import asyncio
import logging
import sys
from abc import ABC, abstractmethod
from typing import Optional, TextIO

import aiohttp

from ruuvibridge.shared.influxdb import DataPoint, InfluxDBConfig

logger = logging.getLogger(__name__)


class PointSink(ABC):
    """Destination for data points.

    write() must not raise for delivery problems; failures are logged by
    the sink and the point is dropped.
    """

    @abstractmethod
    async def write(self, point: DataPoint) -> bool:
        """Deliver one point. Returns True on success."""
        pass

    async def close(self):
        """Release any resources held by the sink."""
        pass


class StdoutSink(PointSink):
    """Writes line protocol to stdout, one point per line."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    async def write(self, point: DataPoint) -> bool:
        stream = self._stream or sys.stdout
        try:
            stream.write(point.to_line() + "\n")
            stream.flush()
            return True
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write point to stdout: {e}")
            return False


class InfluxDBSink(PointSink):
    """Posts line protocol to the InfluxDB HTTP write API."""

    def __init__(self, config: InfluxDBConfig):
        """Initialize InfluxDB sink.

        Args:
            config: InfluxDB configuration.
        """
        self.config = config
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.config.timeout),
                headers=self.config.headers,
            )
        return self._session

    async def write(self, point: DataPoint) -> bool:
        line = point.to_line()
        session = self._get_session()
        try:
            async with session.post(self.config.write_url, data=line.encode("utf-8")) as response:
                if response.status >= 300:
                    body = await response.text()
                    logger.warning(
                        f"InfluxDB write rejected: HTTP {response.status} {body.strip()}"
                    )
                    return False
                logger.debug(f"Wrote to InfluxDB: {line}")
                return True
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Failed to write to InfluxDB at {self.config.url}: {e}")
            return False

    async def close(self):
        if self._session:
            await self._session.close()
            self._session = None
