#!/usr/bin/env python3
"""Entry point for lgtv2mqtt."""

import argparse
import logging
import sys

from . import __version__
from .bridge import LGTVMQTTBridge
from .config import get_key_file_path, load_config, validate_config


def setup_logging(level: str = "INFO"):
    """Set up logging configuration."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from the transport libraries
    for name in ("paho", "bscpylgtv", "websockets"):
        logging.getLogger(name).setLevel(logging.WARNING)


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="lgtv2mqtt",
        description="MQTT bridge for LG webOS TV control",
    )
    parser.add_argument(
        "-c", "--config",
        help="Path to config file (default: config.yaml)",
    )
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"lgtv2mqtt {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate config and exit",
    )

    args = parser.parse_args(argv)

    # Load config
    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    # Set up logging
    log_level = "DEBUG" if args.debug else config.get("options", {}).get("log_level", "INFO")
    setup_logging(log_level)

    logger = logging.getLogger(__name__)

    config_path = config.get("_config_path", "defaults")
    logger.info(f"Loaded config from: {config_path}")

    # Missing prefix or broker is fatal, there is nothing to retry against
    errors = validate_config(config)
    if errors:
        for error in errors:
            logger.error(f"Config error: {error}")
        if args.validate:
            print("Configuration is INVALID")
        sys.exit(1)

    if not config["tv"].get("mac"):
        logger.warning("tv.mac not set (TV_MAC), power on will not send WOL")

    if args.validate:
        print("Configuration is valid")
        print(f"  MQTT Broker: {config['mqtt']['host']}:{config['mqtt']['port']}")
        print(f"  Topic Prefix: {config['mqtt']['topic_prefix']}")
        print(f"  Availability Name: {config['mqtt'].get('name') or 'not set'}")
        print(f"  TV Host: {config['tv']['host']}")
        print(f"  TV MAC: {config['tv'].get('mac') or 'not set'}")
        print(f"  WOL Broadcast: {config['tv']['broadcast']}")
        print(f"  Key File: {get_key_file_path(config)}")
        sys.exit(0)

    logger.info(f"lgtv2mqtt v{__version__} starting...")

    bridge = LGTVMQTTBridge(config)

    try:
        bridge.run_forever()
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
