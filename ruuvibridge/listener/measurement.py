"""Turn a peripheral's advertisement properties into a Measurement."""

import logging
from typing import Optional

from ruuvibridge.shared.models import Measurement

from .adapter import Peripheral, PeripheralProperties
from .decoder import MANUFACTURER_ID, Decoder, decode, decode_manufacturer_data
from .exceptions import UnknownManufacturerId

logger = logging.getLogger(__name__)


async def resolve_properties(
    peripheral: Peripheral,
    verbose: bool = False,
) -> Optional[PeripheralProperties]:
    """Query a peripheral's properties; a failed query counts as no properties."""
    try:
        return await peripheral.properties()
    except Exception as e:
        log = logger.warning if verbose else logger.debug
        log(f"Property query failed for {peripheral.address}: {e}")
        return None


def build_measurement(
    address: str,
    properties: PeripheralProperties,
    decoder: Decoder = decode,
) -> Measurement:
    """Decode the vendor payload and combine it with the advertisement's signal data.

    Raises:
        UnknownManufacturerId: No payload under the Ruuvi manufacturer id.
        DecodeError: The payload could not be decoded.
    """
    payload = properties.manufacturer_data.get(MANUFACTURER_ID)
    if payload is None:
        raise UnknownManufacturerId(properties.manufacturer_data.keys())

    readings = decode_manufacturer_data(payload, decoder)
    return Measurement(
        address=address,
        readings=readings,
        rssi=properties.rssi,
        tx_power=properties.tx_power,
    )


async def read_measurement(
    peripheral: Peripheral,
    decoder: Decoder = decode,
    verbose: bool = False,
) -> Optional[Measurement]:
    """Read one measurement from a peripheral.

    Returns None when the peripheral has no properties to report. Decode
    errors propagate to the caller.
    """
    properties = await resolve_properties(peripheral, verbose=verbose)
    if properties is None:
        return None
    return build_measurement(peripheral.address, properties, decoder)
