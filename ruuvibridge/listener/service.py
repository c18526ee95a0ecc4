"""Ruuvi listener service - main orchestrator."""

import asyncio
import logging
import signal
from typing import List, Optional

from .adapter import BleakAdapter, BroadcastAdapter
from .aliases import AliasResolver
from .config import ListenerConfig
from .dispatcher import Dispatcher
from .exceptions import AdapterUnavailable, EventStreamClosed, ListenerError
from .sinks import InfluxDBSink, PointSink, StdoutSink

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_UNEXPECTED = 2


def build_sinks(config: ListenerConfig) -> List[PointSink]:
    """Sinks enabled by the configuration, stdout first."""
    sinks: List[PointSink] = []
    if config.stdout:
        sinks.append(StdoutSink())
    if config.influxdb.enabled:
        sinks.append(InfluxDBSink(config.influxdb))
    return sinks


class ListenerService:
    """Main service that bridges Ruuvi broadcasts to InfluxDB."""

    def __init__(
        self,
        config: ListenerConfig,
        adapter: Optional[BroadcastAdapter] = None,
        sinks: Optional[List[PointSink]] = None,
    ):
        """Initialize the listener service.

        Args:
            config: Configuration object.
            adapter: Event source, defaults to a BleakAdapter.
            sinks: Point sinks, defaults to those enabled in the config.
        """
        self.config = config
        self.adapter = adapter or BleakAdapter(config.ble)
        self.sinks = sinks if sinks is not None else build_sinks(config)
        self.resolver = AliasResolver(config.aliases, config.keep_mac_colons)
        self.dispatcher = Dispatcher(
            adapter=self.adapter,
            sinks=self.sinks,
            resolver=self.resolver,
            measurement_name=config.measurement_name,
            data_format_versions=config.data_format_versions,
            verbose=config.verbose,
        )
        self._stopping = False
        self._stop_task: Optional[asyncio.Task] = None

    def _setup_signal_handlers(self):
        """Set up signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        def signal_handler(signum: signal.Signals):
            logger.info(f"Received {signum.name}, shutting down...")
            if self._stop_task is None:
                self._stop_task = asyncio.create_task(self.stop())

        for signum in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(signum, signal_handler, signum)
            except (NotImplementedError, RuntimeError):
                # not available on Windows or outside the main thread
                pass

    async def stop(self):
        """Stop scanning; the event loop then winds down."""
        if self._stopping:
            return
        self._stopping = True
        await self.adapter.stop()

    async def run(self):
        """Run the listener until stopped or the event stream fails.

        Raises:
            AdapterUnavailable: The Bluetooth adapter could not be started.
            EventStreamClosed: The adapter stopped producing events on its own.
        """
        self._setup_signal_handlers()

        if not self.sinks:
            logger.warning("No sinks enabled, measurements will be decoded and dropped")

        await self.adapter.start()
        logger.info("Ruuvi listener is running. Press Ctrl+C to stop.")

        try:
            await self.dispatcher.run()
        except EventStreamClosed:
            if not self._stopping:
                raise
        finally:
            await self.dispatcher.drain()
            for sink in self.sinks:
                await sink.close()
            logger.info(f"Ruuvi listener stopped. {self.dispatcher.stats}")


def run_listener(config: ListenerConfig) -> int:
    """Run the listener and map its outcome to a process exit status.

    0 for a requested shutdown, 1 for a fatal adapter or event stream
    condition, 2 for anything unexpected.

    Args:
        config: Loaded configuration.
    """
    logger.info("Starting Ruuvi listener...")
    service = ListenerService(config)

    try:
        asyncio.run(service.run())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except AdapterUnavailable as e:
        logger.error(f"{e}. Is bluetoothd running and does this user have access to it?")
        return EXIT_FATAL
    except ListenerError as e:
        logger.error(f"Error: {e}")
        return EXIT_FATAL
    except Exception:
        logger.exception("Unexpected failure in listener")
        return EXIT_UNEXPECTED
    return EXIT_OK
