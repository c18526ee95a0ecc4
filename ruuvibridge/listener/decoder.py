"""Ruuvi manufacturer data decoding.

Only the broadcast formats that carry environmental readings are handled:
RAWv1 (3), RAWv2 (5) and the air quality format (6). All multi-byte values
are big endian.
"""

import logging
import struct
from typing import Callable, Dict, Optional

from ruuvibridge.shared.models import SensorReadings

from .exceptions import EmptyValue, InvalidValueLength, UnsupportedDataFormat

logger = logging.getLogger(__name__)

MANUFACTURER_ID = 0x0499

# format marker plus at least one data byte
MIN_PAYLOAD_LENGTH = 2

PRESSURE_OFFSET = 50000  # Pa

_V3 = struct.Struct(">BBBBHhhhH")
_V5 = struct.Struct(">BhHHhhhHBH6s")
_V6 = struct.Struct(">BhHHHHBBBBBB3s")

Decoder = Callable[[bytes], SensorReadings]


def _available(value: int, not_available: int) -> Optional[int]:
    return None if value == not_available else value


def _check_length(data_format: int, data: bytes, expected: int):
    if len(data) != expected:
        raise InvalidValueLength(data_format, len(data), expected)


def _decode_v3(data: bytes) -> SensorReadings:
    _check_length(3, data, _V3.size)
    (
        data_format,
        humidity,
        temp_int,
        temp_frac,
        pressure,
        acc_x,
        acc_y,
        acc_z,
        battery,
    ) = _V3.unpack(data)

    # sign-and-magnitude integer part, hundredths in the next byte
    millicelsius = (temp_int & 0x7F) * 1000 + temp_frac * 10
    if temp_int & 0x80:
        millicelsius = -millicelsius

    return SensorReadings(
        data_format=data_format,
        temperature=millicelsius,
        humidity=humidity * 5000,
        pressure=pressure + PRESSURE_OFFSET,
        battery=battery,
        acceleration=(acc_x, acc_y, acc_z),
    )


def _decode_v5(data: bytes) -> SensorReadings:
    _check_length(5, data, _V5.size)
    (
        data_format,
        temperature,
        humidity,
        pressure,
        acc_x,
        acc_y,
        acc_z,
        power_info,
        movement_counter,
        sequence_number,
        _mac,
    ) = _V5.unpack(data)

    temperature = _available(temperature, -0x8000)
    humidity = _available(humidity, 0xFFFF)
    pressure = _available(pressure, 0xFFFF)
    battery = _available(power_info >> 5, 0x7FF)
    tx_power = _available(power_info & 0x1F, 0x1F)

    acceleration = None
    if -0x8000 not in (acc_x, acc_y, acc_z):
        acceleration = (acc_x, acc_y, acc_z)

    return SensorReadings(
        data_format=data_format,
        temperature=None if temperature is None else temperature * 5,
        humidity=None if humidity is None else humidity * 25,
        pressure=None if pressure is None else pressure + PRESSURE_OFFSET,
        battery=None if battery is None else battery + 1600,
        tx_power=None if tx_power is None else -40 + tx_power * 2,
        movement_counter=_available(movement_counter, 0xFF),
        sequence_number=_available(sequence_number, 0xFFFF),
        acceleration=acceleration,
    )


def _decode_v6(data: bytes) -> SensorReadings:
    _check_length(6, data, _V6.size)
    (
        data_format,
        temperature,
        humidity,
        pressure,
        pm25,
        co2,
        _voc,
        _nox,
        _luminosity,
        _reserved,
        sequence_number,
        _flags,
        _mac,
    ) = _V6.unpack(data)

    temperature = _available(temperature, -0x8000)
    humidity = _available(humidity, 0xFFFF)
    pressure = _available(pressure, 0xFFFF)

    return SensorReadings(
        data_format=data_format,
        temperature=None if temperature is None else temperature * 5,
        humidity=None if humidity is None else humidity * 25,
        pressure=None if pressure is None else pressure + PRESSURE_OFFSET,
        pm25=_available(pm25, 0xFFFF),
        co2=_available(co2, 0xFFFF),
        sequence_number=sequence_number,
    )


DECODERS: Dict[int, Decoder] = {
    3: _decode_v3,
    5: _decode_v5,
    6: _decode_v6,
}


def decode(data: bytes) -> SensorReadings:
    """Decode a manufacturer data payload, selecting the format by its first byte.

    Raises:
        EmptyValue: The payload is empty.
        UnsupportedDataFormat: The format marker is not one we understand.
        InvalidValueLength: The payload length does not match the format.
    """
    if not data:
        raise EmptyValue(0)
    decoder = DECODERS.get(data[0])
    if decoder is None:
        raise UnsupportedDataFormat(data[0])
    return decoder(bytes(data))


def decode_manufacturer_data(data: bytes, decoder: Decoder = decode) -> SensorReadings:
    """Validate a payload and hand it to the versioned decoder.

    Payloads of MIN_PAYLOAD_LENGTH bytes or fewer are rejected without
    calling the decoder. The decoder is called at most once and its
    DecodeError, if any, is propagated unchanged.
    """
    if len(data) <= MIN_PAYLOAD_LENGTH:
        raise EmptyValue(len(data))
    return decoder(data)
