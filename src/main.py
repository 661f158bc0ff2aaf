import os
import sys
import logging

from csv_io import RecordFormatError, write_accounts
from payments_engine import PaymentsEngine

LOG_LEVEL_ENV = "LEDGER_LOG_LEVEL"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    level = os.environ.get(LOG_LEVEL_ENV, "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def main(argv=None) -> int:
    argv = sys.argv if argv is None else argv
    configure_logging()

    if len(argv) != 2:
        print("Usage: python main.py <input.csv>", file=sys.stderr)
        return 1

    filepath = argv[1]
    engine = PaymentsEngine()
    try:
        accounts = engine.process_file(filepath)
    except RecordFormatError as e:
        logger.error(f"Malformed input in {filepath}: {e}")
        return 1
    except OSError as e:
        logger.error(f"Cannot read {filepath}: {e}")
        return 1

    write_accounts(accounts, sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main())
