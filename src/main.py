"""
AIO Price Randomizer - command line entry point

Loads a server database directory, resolves the config and either runs one
randomization cycle or keeps cycling on the configured interval.
"""

import argparse
import logging
import sys
import time
from pathlib import Path

from config import APP_VERSION, LOG_FILE, MOD_NAME
from config_loader import ConfigError, load_config
from core import PriceRandomizer
from database import Database
from scheduler import CycleScheduler

logger = logging.getLogger("price-randomizer")


def setup_logging(debug: bool = False):
    """Configure logging.

    Console shows INFO+ only; the log file gets DEBUG when --debug is used.
    """
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(logging.INFO)
    console.setFormatter(logging.Formatter(
        f"%(asctime)s [{MOD_NAME}] %(message)s",
        datefmt="%H:%M:%S"
    ))

    file_handler = logging.FileHandler(LOG_FILE, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    file_handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    ))

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    root_logger.addHandler(console)
    root_logger.addHandler(file_handler)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="price-randomizer",
        description=f"{MOD_NAME} v{APP_VERSION} - deterministic trader price randomizer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  price-randomizer --db ./database --once            # one cycle, report only
  price-randomizer --db ./database --once --write    # one cycle, save assorts
  price-randomizer --db ./database --debug           # keep cycling, debug log
        """
    )
    parser.add_argument(
        "--db",
        type=Path,
        required=True,
        help="Server database directory (templates/, traders/)"
    )
    parser.add_argument(
        "--mod-dir",
        type=Path,
        default=Path.cwd(),
        help="Directory to start the config search from (default: cwd)"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Explicit user config file (skips the upward search)"
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle and exit"
    )
    parser.add_argument(
        "--write",
        action="store_true",
        help="With --once, write the repriced assorts back into --db"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug logging"
    )
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(debug=args.debug)

    try:
        config, _ = load_config(args.mod_dir, args.config)
    except ConfigError as e:
        logger.error(str(e))
        return 2
    if args.debug:
        config.debug = True

    db = Database.load_dir(args.db)
    if config.debug:
        logger.info(f"Found {db.trader_count()} traders in database")

    engine = PriceRandomizer(config)

    if args.once:
        result = engine.run_cycle(db)
        logger.info(
            f"Cycle done: {result.offers_updated} offers updated across "
            f"{len(result.processed)} traders "
            f"({len(result.missing)} missing, {len(result.failed)} failed)")
        if args.write and not result.skipped:
            db.dump_assorts(args.db)
        return 0

    scheduler = CycleScheduler(engine)
    try:
        scheduler.start(db)
        logger.info("Initialized successfully")
        while scheduler.scheduled:
            time.sleep(1.0)
    except KeyboardInterrupt:
        print("\nGoodbye!")
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        return 1
    finally:
        scheduler.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
