#!/usr/bin/env python

import argparse
import logging
import sys

from .config import build_config, collect_options, load_config_file
from .driver import Driver
from .errors import DriverError
from .helpers import ALL_OPTIONS
from .interfaces.host import StaticHost

COMMANDS = ["create", "state", "url", "start", "stop", "restart", "kill", "remove"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="waldur-node-driver",
        description="Manage a single machine provisioned through the Waldur marketplace.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("command", choices=COMMANDS, help="Lifecycle operation to run.")
    parser.add_argument("name", help="Name of the machine.")
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML file with option values, keyed by option name.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable debug logging."
    )

    # One flag per driver option; the environment variable is the fallback.
    for name, spec in ALL_OPTIONS.items():
        kwargs = {"dest": spec["field"], "default": None}
        help_text = f"{spec['description']} [env: {spec['env_var']}]"
        if spec["type"] == "list":
            kwargs["action"] = "append"
        elif spec["type"] == "int":
            kwargs["type"] = int
        parser.add_argument(f"--{name}", help=help_text, **kwargs)
    return parser


def main(argv=None):
    """
    Parses the command line, runs one lifecycle operation and prints its result.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        options = load_config_file(args.config) if args.config else {}
        # Command line values win over the configuration file.
        for name, spec in ALL_OPTIONS.items():
            value = getattr(args, spec["field"])
            if value is not None:
                options[name] = value

        driver = Driver(StaticHost(args.name))
        if args.command == "create":
            driver.set_config_from_options(options)
            driver.create()
            print(driver.config.resource_uuid or driver.config.order_uuid)
            return

        # Existing machines only need the API access and the resource UUID.
        driver.config = build_config(collect_options(options))
        if args.command == "state":
            print(driver.get_state().value)
        elif args.command == "url":
            print(driver.get_url())
        else:
            getattr(driver, args.command)()
    except (DriverError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
