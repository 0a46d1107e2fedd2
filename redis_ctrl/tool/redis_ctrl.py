"""Command line tool for applying RedisEntry objects to Redis."""

import argparse
import asyncio
import logging
import sys
import traceback

from redis_ctrl.exceptions import RedisCtrlException
from . import apply, run

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for syncing RedisEntry objects to Redis.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    apply.ApplyAction.register(subparsers)
    run.RunAction.register(subparsers)
    return parser


def main() -> None:
    """redis-ctrl command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args()

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except KeyboardInterrupt:
        _LOGGER.info("Interrupted, exiting")
    except RedisCtrlException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("redis-ctrl error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
