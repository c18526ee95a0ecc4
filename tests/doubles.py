"""Test doubles and payload builders for the listener tests."""

import struct
from typing import Dict, Iterable, List, Optional

from ruuvibridge.listener.adapter import (
    BroadcastAdapter,
    BroadcastEvent,
    EventKind,
    Peripheral,
    PeripheralProperties,
)
from ruuvibridge.listener.decoder import MANUFACTURER_ID
from ruuvibridge.listener.sinks import PointSink

# Reference RAWv2 broadcast from the Ruuvi format documentation:
# 24.3 °C, 53.49 %RH, 100044 Pa, acc (4, -4, 1036) mG, 2977 mV, +4 dBm,
# movement 66, sequence 205
RAWV2_VALID = bytes.fromhex("0512FC5394C37C0004FFFC040CAC364200CDCBB8334C884F")
RAWV2_INVALID = bytes.fromhex("058000FFFFFFFF800080008000FFFFFFFFFFFFFFFFFFFFFF")
RAWV1_VALID = bytes.fromhex("03291A1ECE1EFC18F94202CA0B53")
RAWV1_MIN = bytes.fromhex("0300FF6300008001800180010000")


def rawv2(
    temperature: int = 430,
    humidity: int = 18000,
    pressure: int = 51325,
    acceleration=(0, 0, 1000),
    battery: int = 1400,
    tx_power: int = 22,
    movement_counter: int = 1,
    sequence_number: int = 1,
) -> bytes:
    """RAWv2 payload from raw (unscaled) channel values."""
    return struct.pack(
        ">BhHHhhhHBH6s",
        5,
        temperature,
        humidity,
        pressure,
        *acceleration,
        (battery << 5) | tx_power,
        movement_counter,
        sequence_number,
        b"\xaa\xbb\xcc\xdd\xee\xff",
    )


def air_quality(
    temperature: int = 4300,
    humidity: int = 20000,
    pressure: int = 51325,
    pm25: int = 112,
    co2: int = 650,
    sequence_number: int = 7,
) -> bytes:
    """Format 6 payload from raw channel values."""
    return struct.pack(
        ">BhHHHHBBBBBB3s",
        6,
        temperature,
        humidity,
        pressure,
        pm25,
        co2,
        0,
        0,
        0,
        0,
        sequence_number,
        0,
        b"\xdd\xee\xff",
    )


def ruuvi_properties(payload: bytes, rssi: Optional[int] = -70, tx_power: Optional[int] = None):
    return PeripheralProperties(
        rssi=rssi,
        tx_power=tx_power,
        manufacturer_data={MANUFACTURER_ID: payload},
    )


class FakePeripheral(Peripheral):
    def __init__(self, address: str, properties=None, error: Optional[Exception] = None):
        self.address = address
        self._properties = properties
        self._error = error
        self.queries = 0

    async def properties(self):
        self.queries += 1
        if self._error:
            raise self._error
        return self._properties


class FakeAdapter(BroadcastAdapter):
    """Replays a fixed list of events; the stream ends after the last one."""

    def __init__(self, events: Iterable[BroadcastEvent] = (), properties=None):
        self._events = list(events)
        self.peripherals: Dict[str, FakePeripheral] = {
            address: FakePeripheral(address, props)
            for address, props in (properties or {}).items()
        }
        self.started = False
        self.stopped = False
        self.lookups: List[str] = []

    async def start(self):
        self.started = True

    async def stop(self):
        self.stopped = True

    async def events(self):
        for event in self._events:
            yield event

    async def peripheral(self, address: str) -> Peripheral:
        self.lookups.append(address)
        if address not in self.peripherals:
            self.peripherals[address] = FakePeripheral(address, None)
        return self.peripherals[address]


class RecordingSink(PointSink):
    def __init__(self):
        self.points = []
        self.closed = False

    async def write(self, point) -> bool:
        self.points.append(point)
        return True

    async def close(self):
        self.closed = True


class FailingSink(PointSink):
    async def write(self, point) -> bool:
        raise RuntimeError("sink exploded")


def discovered(address: str) -> BroadcastEvent:
    return BroadcastEvent(EventKind.DISCOVERED, address)
