import csv
import sys
import logging
from typing import List, Optional

from engine import ReplayEngine
from records import InvalidHeader, write_accounts

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: payments-replay <input.csv>", file=sys.stderr)
        return 1

    filepath = argv[0]
    engine = ReplayEngine()
    try:
        accounts = engine.process_file(filepath)
    except (OSError, InvalidHeader, csv.Error) as e:
        logger.debug("Replay aborted", exc_info=True)
        print(f"Error: cannot replay {filepath}: {e}", file=sys.stderr)
        return 1

    write_accounts(accounts, sys.stdout)
    return 0


def run() -> None:
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    sys.exit(main())


if __name__ == "__main__":
    run()
