"""Ruuvi listener - writes RuuviTag broadcasts to InfluxDB."""

__version__ = "0.1.0"

from .dispatcher import Dispatcher, DispatchState
from .service import ListenerService


def main():
    """Entry point for the Ruuvi listener."""
    import sys

    from .cli import parse_config
    from .service import run_listener
    from ruuvibridge.shared.logging import setup_logging

    config = parse_config()
    setup_logging(config.log_level)

    sys.exit(run_listener(config))


__all__ = ["Dispatcher", "DispatchState", "ListenerService", "main"]
