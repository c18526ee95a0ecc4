"""Derived humidity and air quantities.

Uses the Magnus approximation with the same constants as RuuviCollector, so
values written by this listener line up with existing RuuviCollector
databases.
"""

import math
from typing import Optional

MAGNUS_A = 611.2  # Pa
MAGNUS_B = 17.67
MAGNUS_C = 243.5  # °C

WATER_VAPOR_GAS_CONSTANT = 461.5  # J/(kg*K)
ZERO_CELSIUS_KELVIN = 273.15
DRY_AIR_DENSITY_STP = 1.2929  # kg/m3 at 0 °C, 1 atm
STANDARD_PRESSURE = 101300.0  # Pa


def saturation_vapor_pressure(temperature_c: float) -> float:
    """Equilibrium vapor pressure of water over a flat surface, in Pa."""
    return MAGNUS_A * math.exp(MAGNUS_B * temperature_c / (MAGNUS_C + temperature_c))


def dew_point(temperature_c: float, humidity_percent: float) -> Optional[float]:
    """Dew point in °C, or None where the logarithm is undefined."""
    if humidity_percent <= 0:
        return None
    v = math.log(humidity_percent / 100.0 * saturation_vapor_pressure(temperature_c) / MAGNUS_A)
    if v == MAGNUS_B:
        return None
    return -MAGNUS_C * v / (v - MAGNUS_B)


def absolute_humidity(temperature_c: float, humidity_percent: float) -> float:
    """Water vapor content of the air in g/m3."""
    vapor_pressure = saturation_vapor_pressure(temperature_c) * humidity_percent / 100.0
    return vapor_pressure / (WATER_VAPOR_GAS_CONSTANT * (temperature_c + ZERO_CELSIUS_KELVIN)) * 1000.0


def air_density(temperature_c: float, humidity_percent: float, pressure_pa: float) -> float:
    """Density of humid air in kg/m3."""
    vapor_pressure = saturation_vapor_pressure(temperature_c) * humidity_percent / 100.0
    return (
        DRY_AIR_DENSITY_STP
        * ZERO_CELSIUS_KELVIN
        / (temperature_c + ZERO_CELSIUS_KELVIN)
        * (pressure_pa - 0.3783 * vapor_pressure)
        / STANDARD_PRESSURE
    )
