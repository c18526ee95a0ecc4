"""Broadcast event loop: triage each event, hand accepted points to the sinks."""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Set

from ruuvibridge.shared.influxdb import DataPoint
from ruuvibridge.shared.models import Measurement, SensorReadings

from .adapter import BroadcastAdapter, BroadcastEvent, EventKind
from .aliases import AliasResolver
from .decoder import Decoder, decode
from .exceptions import DecodeError, EventStreamClosed, UnknownManufacturerId
from .fields import to_data_point
from .measurement import read_measurement
from .sinks import PointSink

logger = logging.getLogger(__name__)

MEASUREMENT_EVENTS = (EventKind.DISCOVERED, EventKind.UPDATED)


class DispatchState(Enum):
    """Where the loop is in triaging the current event."""
    IDLE = "idle"
    RESOLVING = "resolving"
    DECODING = "decoding"
    FILTERING = "filtering"
    DISPATCHING = "dispatching"


@dataclass
class DispatchStats:
    """Counters for the lifetime of a dispatcher."""
    events: int = 0
    ignored: int = 0
    unresolved: int = 0
    unrecognized: int = 0
    decode_errors: int = 0
    filtered: int = 0
    dispatched: int = 0
    empty: int = 0
    dispatch_failures: int = 0


class Dispatcher:
    """Consumes adapter events one at a time.

    Events are triaged strictly in order. Once a measurement is accepted,
    building the point and writing it to the sinks runs as its own task; the
    loop goes straight back to waiting for the next event. Dispatch tasks are
    never awaited by the loop and never cancelled.
    """

    def __init__(
        self,
        adapter: BroadcastAdapter,
        sinks: Iterable[PointSink],
        resolver: AliasResolver,
        measurement_name: str,
        data_format_versions: Iterable[int] = (),
        verbose: bool = False,
        decoder: Decoder = decode,
    ):
        self.adapter = adapter
        self.sinks: List[PointSink] = list(sinks)
        self.resolver = resolver
        self.measurement_name = measurement_name
        self.data_format_versions = frozenset(data_format_versions)
        self.verbose = verbose
        self.decoder = decoder

        self.state = DispatchState.IDLE
        self.stats = DispatchStats()
        self._pending: Set[asyncio.Task] = set()

    def accepts(self, readings: SensorReadings) -> bool:
        """Format version gate; an empty allowlist accepts everything."""
        if not self.data_format_versions:
            return True
        return readings.data_format in self.data_format_versions

    def _report(self, message: str):
        if self.verbose:
            logger.warning(message)
        else:
            logger.debug(message)

    async def process(self, event: BroadcastEvent) -> Optional[asyncio.Task]:
        """Triage one event.

        Returns the dispatch task when the event produced an accepted
        measurement, otherwise None.
        """
        self.stats.events += 1
        if event.kind not in MEASUREMENT_EVENTS:
            self.stats.ignored += 1
            return None

        try:
            return await self._triage(event.address)
        finally:
            self.state = DispatchState.IDLE

    def _decode(self, data: bytes) -> SensorReadings:
        self.state = DispatchState.DECODING
        return self.decoder(data)

    async def _triage(self, address: str) -> Optional[asyncio.Task]:
        self.state = DispatchState.RESOLVING
        try:
            peripheral = await self.adapter.peripheral(address)
        except Exception as e:
            self.stats.unresolved += 1
            self._report(f"Could not look up {address}: {e}")
            return None

        try:
            measurement = await read_measurement(peripheral, self._decode, verbose=self.verbose)
        except UnknownManufacturerId:
            self.stats.unrecognized += 1
            return None
        except DecodeError as e:
            self.stats.decode_errors += 1
            self._report(f"{address}: {e}")
            return None
        if measurement is None:
            self.stats.unresolved += 1
            return None

        self.state = DispatchState.FILTERING
        if not self.accepts(measurement.readings):
            self.stats.filtered += 1
            logger.debug(
                f"Discarding data format {measurement.readings.data_format} from {address}"
            )
            return None

        self.state = DispatchState.DISPATCHING
        task = asyncio.create_task(self._dispatch(measurement))
        self._pending.add(task)
        task.add_done_callback(self._on_dispatch_done)
        self.stats.dispatched += 1
        return task

    async def _dispatch(self, measurement: Measurement) -> DataPoint:
        point = to_data_point(measurement, self.measurement_name, self.resolver)
        if not point.has_fields:
            self.stats.empty += 1
            logger.debug(f"No fields to write for {measurement.address}, skipping")
            return point
        for sink in self.sinks:
            try:
                if not await sink.write(point):
                    self.stats.dispatch_failures += 1
            except Exception as e:
                self.stats.dispatch_failures += 1
                logger.error(f"{type(sink).__name__} failed for {measurement.address}: {e}")
        return point

    def _on_dispatch_done(self, task: asyncio.Task):
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.stats.dispatch_failures += 1
            logger.error(f"Dispatch task failed: {error!r}")

    @property
    def pending(self) -> int:
        """Number of dispatch tasks still in flight."""
        return len(self._pending)

    async def drain(self):
        """Wait for every in-flight dispatch task to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def run(self):
        """Consume events until the adapter's stream ends.

        Raises:
            EventStreamClosed: Always, once the stream ends.
        """
        async for event in self.adapter.events():
            await self.process(event)
        raise EventStreamClosed("No events received")
