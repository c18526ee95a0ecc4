"""Tag and field assembly for Ruuvi measurements.

Field names follow RuuviCollector (https://github.com/Scrin/RuuviCollector)
so points can be written into databases it created.
"""

import logging
from typing import Dict, Optional

from ruuvibridge.shared.influxdb import DataPoint, FieldValue
from ruuvibridge.shared.models import Measurement

from .aliases import AliasResolver

logger = logging.getLogger(__name__)

# Stands in for a missing humidity (dewPoint) or temperature
# (absoluteHumidity). The derived value is still written, and is physically
# meaningless in that case.
MISSING_PREREQUISITE_SENTINEL = 999_999_999


def _add_float(fields: Dict[str, FieldValue], name: str, value: Optional[float], scale: float = 1.0):
    if value is not None:
        fields[name] = float(value) / scale


def _add_integer(fields: Dict[str, FieldValue], name: str, value: Optional[int]):
    if value is not None:
        fields[name] = int(value)


def tag_set(measurement: Measurement, resolver: AliasResolver) -> Dict[str, str]:
    """mac and name tags for a measurement."""
    return {
        "mac": resolver.normalize(measurement.address),
        "name": resolver.resolve(measurement.address),
    }


def field_set(measurement: Measurement) -> Dict[str, FieldValue]:
    """Scaled and derived field values; absent quantities are left out."""
    readings = measurement.readings
    fields: Dict[str, FieldValue] = {}

    _add_float(fields, "temperature", readings.temperature, 1000.0)

    humidity = readings.humidity
    if humidity is None:
        humidity = MISSING_PREREQUISITE_SENTINEL
    _add_float(fields, "dewPoint", readings.dew_point(humidity / 10000.0))

    _add_float(fields, "humidity", readings.humidity, 10000.0)

    temperature = readings.temperature
    if temperature is None:
        temperature = MISSING_PREREQUISITE_SENTINEL
    _add_float(fields, "absoluteHumidity", readings.absolute_humidity(temperature / 1000.0))

    _add_float(fields, "pressure", readings.pressure, 1000.0)
    _add_float(fields, "batteryVoltage", readings.battery, 1000.0)

    tx_power = readings.tx_power
    if tx_power is None:
        tx_power = measurement.tx_power
        if tx_power is None:
            logger.debug(f"No tx power found for mac {measurement.address}")
    _add_integer(fields, "txPower", tx_power)

    _add_integer(fields, "movementCounter", readings.movement_counter)
    _add_integer(fields, "measurementSequenceNumber", readings.sequence_number)
    _add_float(fields, "pm25", readings.pm25)
    _add_float(fields, "co2", readings.co2)
    _add_integer(fields, "dataFormat", readings.data_format)
    _add_integer(fields, "rssi", measurement.rssi)
    _add_float(fields, "airDensity", readings.air_density())
    # Pa, as RuuviCollector writes it
    _add_float(fields, "equilibriumVaporPressure", readings.saturation_vapor_pressure())

    if readings.acceleration is not None:
        x, y, z = readings.acceleration
        _add_float(fields, "accelerationX", x, 1000.0)
        _add_float(fields, "accelerationY", y, 1000.0)
        _add_float(fields, "accelerationZ", z, 1000.0)

    return fields


def to_data_point(
    measurement: Measurement,
    measurement_name: str,
    resolver: AliasResolver,
) -> DataPoint:
    """Build a DataPoint stamped with the current time."""
    return DataPoint(
        measurement=measurement_name,
        tags=tag_set(measurement, resolver),
        fields=field_set(measurement),
    )
