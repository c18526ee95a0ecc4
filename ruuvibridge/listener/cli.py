"""Command line options for the Ruuvi listener."""

import argparse
from typing import List, Optional

from .aliases import parse_alias
from .config import ListenerConfig, load_config, parse_data_format_versions


def _alias(value: str):
    try:
        return parse_alias(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"{e}: {value!r}, expected ADDRESS=NAME")


def _versions(value: str) -> List[int]:
    try:
        return parse_data_format_versions(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid data format list: {value!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ruuvibridge-listener",
        description="Listen for RuuviTag broadcasts and write them to InfluxDB.",
    )
    parser.add_argument("--config", help="Path to listener YAML config.")
    parser.add_argument(
        "--influxdb-measurement",
        help="Name of the measurement in InfluxDB line protocol (default: ruuvi_measurements).",
    )
    parser.add_argument(
        "--alias",
        action="append",
        type=_alias,
        default=[],
        metavar="ADDRESS=NAME",
        help="Human-readable alias for a RuuviTag, e.g. --alias DE:AD:BE:EF:00:00=Sauna.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=None,
        help="Print parse errors for unrecognized data.",
    )
    parser.add_argument(
        "-m", "--keep-mac-colons",
        action="store_true",
        default=None,
        help="Do not strip the colons from the MAC address.",
    )
    parser.add_argument(
        "--ruuvi-data-format-versions",
        type=_versions,
        metavar="3,5",
        help="Comma separated data format versions to handle. All when omitted.",
    )
    parser.add_argument(
        "--no-stdout",
        dest="stdout",
        action="store_false",
        default=None,
        help="Do not echo line protocol to stdout.",
    )
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR.")
    return parser


def apply_args(config: ListenerConfig, args: argparse.Namespace) -> ListenerConfig:
    """Override config values with those given on the command line."""
    if args.influxdb_measurement:
        config.measurement_name = args.influxdb_measurement
    for address, name in args.alias:
        config.aliases[address] = name
    if args.verbose is not None:
        config.verbose = args.verbose
    if args.keep_mac_colons is not None:
        config.keep_mac_colons = args.keep_mac_colons
    if args.ruuvi_data_format_versions is not None:
        config.data_format_versions = args.ruuvi_data_format_versions
    if args.stdout is not None:
        config.stdout = args.stdout
    if args.log_level:
        config.log_level = args.log_level.upper()
    return config


def parse_config(argv: Optional[List[str]] = None) -> ListenerConfig:
    """Load the config file named on the command line and apply overrides."""
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    return apply_args(config, args)
