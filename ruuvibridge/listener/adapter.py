"""Bluetooth adapter boundary: broadcast events and peripheral properties."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import AsyncIterator, Callable, Dict, Optional

from bleak import BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError

from .config import BLEConfig
from .exceptions import AdapterUnavailable

logger = logging.getLogger(__name__)


class EventKind(Enum):
    """Kinds of adapter events."""
    DISCOVERED = "discovered"
    UPDATED = "updated"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    STATE_UPDATE = "state_update"


@dataclass(frozen=True)
class BroadcastEvent:
    """A notification about one device, keyed by its address."""
    kind: EventKind
    address: str


@dataclass(frozen=True)
class PeripheralProperties:
    """Advertisement-layer properties of a device at query time."""
    rssi: Optional[int] = None
    tx_power: Optional[int] = None
    manufacturer_data: Dict[int, bytes] = field(default_factory=dict)


class Peripheral(ABC):
    """Anything that can report its current advertisement properties."""

    address: str

    @abstractmethod
    async def properties(self) -> Optional[PeripheralProperties]:
        """Current properties, or None when the device has none to report."""
        pass


class BroadcastAdapter(ABC):
    """Source of broadcast events and peripheral lookups."""

    @abstractmethod
    async def start(self):
        """Acquire the adapter and begin producing events."""
        pass

    @abstractmethod
    async def stop(self):
        """Stop producing events; the event stream then ends."""
        pass

    @abstractmethod
    def events(self) -> AsyncIterator[BroadcastEvent]:
        """Ordered stream of events; ends only when the adapter stops."""
        pass

    @abstractmethod
    async def peripheral(self, address: str) -> Peripheral:
        """Look up a device by address."""
        pass


class CachedPeripheral(Peripheral):
    """Peripheral backed by the adapter's last unread advertisement.

    Reading the properties consumes them, so an advertisement is not kept
    once a measurement has been built from it.
    """

    def __init__(self, address: str, cache: Dict[str, PeripheralProperties]):
        self.address = address
        self._cache = cache

    async def properties(self) -> Optional[PeripheralProperties]:
        return self._cache.pop(self.address, None)


class BleakAdapter(BroadcastAdapter):
    """Passive advertisement listener built on BleakScanner.

    Every advertisement becomes an event: DISCOVERED the first time an
    address is seen, UPDATED afterwards. The properties of the latest
    advertisement are held per address until a peripheral lookup reads
    them. Addresses silent for longer than cache_ttl are forgotten, so
    rotating private addresses do not pile up.
    """

    def __init__(self, config: BLEConfig, clock: Callable[[], float] = time.monotonic):
        self.config = config
        self._clock = clock
        self._scanner: Optional[BleakScanner] = None
        self._queue: Optional[asyncio.Queue] = None
        self._properties: Dict[str, PeripheralProperties] = {}
        self._last_seen: Dict[str, float] = {}
        self._last_prune = clock()

    def _prune(self, now: float):
        if now - self._last_prune < self.config.cache_ttl:
            return
        self._last_prune = now
        stale = [a for a, seen in self._last_seen.items() if now - seen > self.config.cache_ttl]
        for address in stale:
            del self._last_seen[address]
            self._properties.pop(address, None)
        if stale:
            logger.debug(f"Forgot {len(stale)} silent address(es)")

    def _on_advertisement(self, device: BLEDevice, advertisement: AdvertisementData):
        if self._queue is None:
            return
        now = self._clock()
        self._prune(now)

        address = device.address.upper()
        kind = EventKind.UPDATED if address in self._last_seen else EventKind.DISCOVERED
        self._last_seen[address] = now
        self._properties[address] = PeripheralProperties(
            rssi=advertisement.rssi,
            tx_power=advertisement.tx_power,
            manufacturer_data=dict(advertisement.manufacturer_data),
        )
        self._queue.put_nowait(BroadcastEvent(kind, address))

    async def start(self):
        self._queue = asyncio.Queue()

        kwargs = {}
        if self.config.adapter:
            kwargs["adapter"] = self.config.adapter

        try:
            self._scanner = BleakScanner(
                detection_callback=self._on_advertisement,
                scanning_mode=self.config.scanning_mode,
                **kwargs,
            )
            await self._scanner.start()
        except (BleakError, OSError) as e:
            self._queue = None
            raise AdapterUnavailable(f"Bluetooth adapter not available: {e}") from e

        logger.info(
            f"Scanning for advertisements on {self.config.adapter or 'default adapter'} "
            f"({self.config.scanning_mode})"
        )

    async def stop(self):
        if self._scanner:
            try:
                await self._scanner.stop()
            except BleakError as e:
                logger.warning(f"Error stopping scanner: {e}")
            self._scanner = None

        if self._queue is not None:
            self._queue.put_nowait(None)

    async def events(self) -> AsyncIterator[BroadcastEvent]:
        if self._queue is None:
            raise AdapterUnavailable("Adapter has not been started")
        queue = self._queue
        while True:
            event = await queue.get()
            if event is None:
                return
            yield event

    async def peripheral(self, address: str) -> Peripheral:
        return CachedPeripheral(address, self._properties)
