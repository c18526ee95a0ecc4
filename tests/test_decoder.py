import pytest

from ruuvibridge.listener.decoder import decode, decode_manufacturer_data
from ruuvibridge.listener.exceptions import (
    DecodeError,
    EmptyValue,
    InvalidValueLength,
    UnsupportedDataFormat,
)
from ruuvibridge.shared.models import SensorReadings

from .doubles import RAWV1_MIN, RAWV1_VALID, RAWV2_INVALID, RAWV2_VALID, air_quality


class CountingDecoder:
    def __init__(self):
        self.calls = 0

    def __call__(self, data):
        self.calls += 1
        return SensorReadings(data_format=data[0])


@pytest.mark.parametrize("payload", [b"", b"\x05", b"\x05\x01"])
def test_short_payload_rejected_without_decoding(payload):
    decoder = CountingDecoder()

    with pytest.raises(EmptyValue):
        decode_manufacturer_data(payload, decoder)

    assert decoder.calls == 0


def test_gateway_calls_decoder_once_for_three_bytes():
    decoder = CountingDecoder()

    readings = decode_manufacturer_data(b"\x05\x01\x02", decoder)

    assert decoder.calls == 1
    assert readings.data_format == 5


def test_gateway_propagates_decoder_error_unchanged():
    error = UnsupportedDataFormat(9)

    def failing(data):
        raise error

    with pytest.raises(UnsupportedDataFormat) as excinfo:
        decode_manufacturer_data(b"\x09\x00\x00", failing)
    assert excinfo.value is error


def test_rawv2_reference_values():
    readings = decode(RAWV2_VALID)

    assert readings.data_format == 5
    assert readings.temperature == 24300
    assert readings.humidity == 534900
    assert readings.pressure == 100044
    assert readings.acceleration == (4, -4, 1036)
    assert readings.battery == 2977
    assert readings.tx_power == 4
    assert readings.movement_counter == 66
    assert readings.sequence_number == 205
    assert readings.pm25 is None
    assert readings.co2 is None


def test_rawv2_not_available_values_are_absent():
    readings = decode(RAWV2_INVALID)

    assert readings == SensorReadings(data_format=5)


def test_rawv2_partial_acceleration_drops_vector():
    payload = bytearray(RAWV2_VALID)
    payload[9:11] = b"\x80\x00"

    readings = decode(bytes(payload))

    assert readings.acceleration is None
    assert readings.temperature == 24300


def test_rawv1_reference_values():
    readings = decode(RAWV1_VALID)

    assert readings.data_format == 3
    assert readings.humidity == 205000
    assert readings.temperature == 26300
    assert readings.pressure == 102766
    assert readings.acceleration == (-1000, -1726, 714)
    assert readings.battery == 2899
    assert readings.tx_power is None
    assert readings.movement_counter is None


def test_rawv1_negative_temperature():
    readings = decode(RAWV1_MIN)

    assert readings.temperature == -127990
    assert readings.humidity == 0
    assert readings.pressure == 50000


def test_air_quality_format():
    readings = decode(air_quality(temperature=4300, humidity=20000, pm25=112, co2=650))

    assert readings.data_format == 6
    assert readings.temperature == 21500
    assert readings.humidity == 500000
    assert readings.pm25 == 112
    assert readings.co2 == 650
    assert readings.sequence_number == 7
    assert readings.acceleration is None


def test_air_quality_missing_co2():
    readings = decode(air_quality(co2=0xFFFF))

    assert readings.co2 is None
    assert readings.pm25 == 112


def test_unknown_format_version():
    with pytest.raises(UnsupportedDataFormat) as excinfo:
        decode(b"\x02\x00\x00\x00")
    assert excinfo.value.data_format == 2


def test_truncated_payload():
    with pytest.raises(InvalidValueLength) as excinfo:
        decode(RAWV2_VALID[:20])

    assert excinfo.value.expected == 24
    assert excinfo.value.length == 20
    assert isinstance(excinfo.value, DecodeError)
