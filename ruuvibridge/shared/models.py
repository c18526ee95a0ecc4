"""Core data models for decoded sensor broadcasts."""

from dataclasses import dataclass
from typing import Optional, Tuple

from . import psychrometrics


@dataclass(frozen=True)
class SensorReadings:
    """Decoded contents of one manufacturer data payload.

    Values keep the decoder's integer units; every quantity is optional
    because each data format carries a different subset and sensors report
    "not available" for individual channels.
    """
    data_format: Optional[int] = None
    temperature: Optional[int] = None  # millicelsius
    humidity: Optional[int] = None  # ppm, 10000 == 1 %RH
    pressure: Optional[int] = None  # Pa
    battery: Optional[int] = None  # mV
    tx_power: Optional[int] = None  # dBm
    movement_counter: Optional[int] = None
    sequence_number: Optional[int] = None
    pm25: Optional[int] = None  # 0.1 ug/m3
    co2: Optional[int] = None  # ppm
    acceleration: Optional[Tuple[int, int, int]] = None  # mG

    @property
    def temperature_celsius(self) -> Optional[float]:
        if self.temperature is None:
            return None
        return self.temperature / 1000.0

    @property
    def humidity_percent(self) -> Optional[float]:
        if self.humidity is None:
            return None
        return self.humidity / 10000.0

    def dew_point(self, humidity_percent: float) -> Optional[float]:
        """Dew point in °C for the given humidity at this reading's temperature."""
        if self.temperature_celsius is None:
            return None
        return psychrometrics.dew_point(self.temperature_celsius, humidity_percent)

    def absolute_humidity(self, temperature_c: float) -> Optional[float]:
        """Absolute humidity in g/m3 for this reading's humidity at the given temperature."""
        if self.humidity_percent is None:
            return None
        return psychrometrics.absolute_humidity(temperature_c, self.humidity_percent)

    def saturation_vapor_pressure(self) -> Optional[float]:
        """Equilibrium vapor pressure in Pa."""
        if self.temperature_celsius is None:
            return None
        return psychrometrics.saturation_vapor_pressure(self.temperature_celsius)

    def air_density(self) -> Optional[float]:
        """Humid air density in kg/m3."""
        if None in (self.temperature_celsius, self.humidity_percent, self.pressure):
            return None
        return psychrometrics.air_density(
            self.temperature_celsius, self.humidity_percent, float(self.pressure)
        )


@dataclass(frozen=True)
class Measurement:
    """One accepted broadcast from a sensor.

    rssi and tx_power come from the advertisement itself; tx_power is the
    fallback when the payload does not carry one.
    """
    address: str
    readings: SensorReadings
    rssi: Optional[int] = None
    tx_power: Optional[int] = None
