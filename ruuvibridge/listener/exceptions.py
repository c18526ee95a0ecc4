"""Exceptions raised by the listener."""


class ListenerError(Exception):
    """Fatal listener condition; the process exits with status 1."""

    pass


class AdapterUnavailable(ListenerError):
    """The Bluetooth adapter could not be acquired or started."""

    pass


class EventStreamClosed(ListenerError):
    """The adapter stopped producing events."""

    pass


class DecodeError(Exception):
    """A single advertisement could not be turned into readings."""

    pass


class UnknownManufacturerId(DecodeError):
    """The advertisement carries no payload under the sensor vendor id."""

    def __init__(self, manufacturer_ids=()):
        self.manufacturer_ids = tuple(manufacturer_ids)
        ids = ", ".join(f"0x{i:04X}" for i in self.manufacturer_ids) or "none"
        super().__init__(f"Unknown manufacturer id(s): {ids}")


class EmptyValue(DecodeError):
    """Payload missing or too short to hold a format marker and data."""

    def __init__(self, length: int = 0):
        self.length = length
        super().__init__(f"Empty or too short manufacturer data ({length} bytes)")


class UnsupportedDataFormat(DecodeError):
    def __init__(self, data_format: int):
        self.data_format = data_format
        super().__init__(f"Unsupported data format {data_format}")


class InvalidValueLength(DecodeError):
    def __init__(self, data_format: int, length: int, expected: int):
        self.data_format = data_format
        self.length = length
        self.expected = expected
        super().__init__(
            f"Invalid payload length {length} for data format {data_format}, expected {expected}"
        )
