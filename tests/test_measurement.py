import pytest

from ruuvibridge.listener.adapter import PeripheralProperties
from ruuvibridge.listener.exceptions import (
    EmptyValue,
    UnknownManufacturerId,
    UnsupportedDataFormat,
)
from ruuvibridge.listener.measurement import (
    build_measurement,
    read_measurement,
    resolve_properties,
)

from .doubles import RAWV2_VALID, FakePeripheral, ruuvi_properties

ADDRESS = "AA:BB:CC:DD:EE:FF"


def test_build_measurement_combines_advertisement_and_payload():
    m = build_measurement(ADDRESS, ruuvi_properties(RAWV2_VALID, rssi=-65, tx_power=-4))

    assert m.address == ADDRESS
    assert m.rssi == -65
    assert m.tx_power == -4
    assert m.readings.temperature == 24300
    assert m.readings.tx_power == 4


def test_other_vendor_is_unrecognized():
    properties = PeripheralProperties(rssi=-50, manufacturer_data={0x004C: b"\x02\x15\x00"})

    with pytest.raises(UnknownManufacturerId) as excinfo:
        build_measurement(ADDRESS, properties)
    assert excinfo.value.manufacturer_ids == (0x004C,)


def test_no_manufacturer_data_is_unrecognized():
    with pytest.raises(UnknownManufacturerId):
        build_measurement(ADDRESS, PeripheralProperties(rssi=-50))


def test_decode_error_propagates():
    with pytest.raises(UnsupportedDataFormat):
        build_measurement(ADDRESS, ruuvi_properties(b"\x09\x00\x00\x00"))


def test_short_payload_propagates_empty_value():
    with pytest.raises(EmptyValue):
        build_measurement(ADDRESS, ruuvi_properties(b"\x05\x00"))


@pytest.mark.asyncio
async def test_failed_property_query_is_none():
    peripheral = FakePeripheral(ADDRESS, error=RuntimeError("device went away"))

    assert await resolve_properties(peripheral) is None
    assert await read_measurement(peripheral) is None


@pytest.mark.asyncio
async def test_missing_properties_is_none():
    assert await read_measurement(FakePeripheral(ADDRESS, None)) is None


@pytest.mark.asyncio
async def test_read_measurement_queries_once():
    peripheral = FakePeripheral(ADDRESS, ruuvi_properties(RAWV2_VALID))

    m = await read_measurement(peripheral)

    assert m.readings.sequence_number == 205
    assert peripheral.queries == 1


@pytest.mark.asyncio
async def test_failed_query_logged_as_warning_when_verbose(caplog):
    peripheral = FakePeripheral(ADDRESS, error=RuntimeError("device went away"))

    assert await read_measurement(peripheral, verbose=True) is None

    assert "device went away" in caplog.text
