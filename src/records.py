import csv
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional, TextIO

from models import Transaction, ClientAccount, classify

logger = logging.getLogger(__name__)

MAX_CLIENT_ID = 2**16 - 1
MAX_TRANSACTION_ID = 2**32 - 1

REQUIRED_COLUMNS = ("type", "client", "tx")
ACCOUNT_COLUMNS = ("client", "available", "held", "total", "locked")
TRANSACTION_COLUMNS = ("type", "client", "tx", "amount")

# Plain ASCII decimal notation only: no exponents, digit separators or special values
AMOUNT_PATTERN = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)")


class InvalidHeader(ValueError):
    """Raised when the input does not start with a usable `type,client,tx,amount` header."""


class RecordSource:
    """
    Reads transactions from CSV one row at a time.
    Malformed rows are logged and skipped; only a bad header aborts reading.

    Streams opened by process_file decode with errors="surrogateescape", so bytes
    that are not valid UTF-8 reach the parser as lone surrogates and only the
    row that carries them is skipped.
    """

    def __init__(self, stream: TextIO):
        self._reader = csv.DictReader(stream)
        if self._reader.fieldnames is None:
            raise InvalidHeader("Input is empty, expected header: type,client,tx,amount")

        self._reader.fieldnames = [name.strip().lstrip("\ufeff") for name in self._reader.fieldnames]
        missing = [column for column in REQUIRED_COLUMNS if column not in self._reader.fieldnames]
        if missing:
            raise InvalidHeader(f"Input header is missing columns: {', '.join(missing)}")

        self.skipped = 0

    def __iter__(self) -> Iterator[Transaction]:
        rows = iter(self._reader)
        while True:
            try:
                row = next(rows)
            except StopIteration:
                return
            except csv.Error as e:
                # The reader resets on the next line, so one unparseable row does not end the replay
                logger.warning(f"Skipping line {self._reader.reader.line_num}: {e}")
                self.skipped += 1
                continue

            transaction = self._parse_csv_row(row)
            if transaction is None:
                self.skipped += 1
                continue
            yield transaction

    def _parse_csv_row(self, row: Dict[str, Optional[str]]) -> Optional[Transaction]:
        """Parse CSV row into Transaction."""
        try:
            check_encoding(row)
            return Transaction(
                transaction_type=classify(row["type"] or ""),
                client_id=parse_id(row["client"], MAX_CLIENT_ID),
                transaction_id=parse_id(row["tx"], MAX_TRANSACTION_ID),
                amount=parse_amount(row.get("amount")),
            )
        except ValueError as e:
            logger.warning(f"Skipping line {self._reader.line_num} {row!r}: {e}")
            return None


def read_transactions(stream: TextIO) -> RecordSource:
    return RecordSource(stream)


def check_encoding(row: Dict[str, Optional[str]]) -> None:
    """Reject rows holding undecodable bytes, which surrogateescape leaves as lone surrogates."""
    for value in row.values():
        if isinstance(value, str):
            try:
                value.encode("utf-8")
            except UnicodeEncodeError:
                raise ValueError("row is not valid UTF-8") from None


def parse_id(raw: Optional[str], upper_bound: int) -> int:
    if raw is None:
        raise ValueError("missing identifier")
    digits = raw.strip()
    if not (digits.isascii() and digits.isdigit()):
        raise ValueError(f"invalid identifier {raw!r}")
    value = int(digits)
    if value > upper_bound:
        raise ValueError(f"identifier {value} out of range 0..{upper_bound}")
    return value


def parse_amount(raw: Optional[str]) -> Optional[Decimal]:
    """An empty or absent field means no amount was supplied, which is kept distinct from zero."""
    if raw is None or not raw.strip():
        return None
    text = raw.strip()
    if not AMOUNT_PATTERN.fullmatch(text):
        raise ValueError(f"invalid amount {raw!r}")
    try:
        return Decimal(text)
    except InvalidOperation:
        raise ValueError(f"invalid amount {raw!r}") from None


def format_decimal(value: Decimal) -> str:
    """Format decimal at its own scale, without rounding or exponent notation."""
    return f"{value:f}"


def write_accounts(accounts: Dict[int, ClientAccount], stream: TextIO) -> None:
    """Write account snapshots as CSV, ordered by client id."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(ACCOUNT_COLUMNS)
    for client_id in sorted(accounts.keys()):
        account = accounts[client_id]
        writer.writerow([
            client_id,
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ])


def write_transactions(transactions: Iterable[Transaction], stream: TextIO) -> None:
    """Write transactions in the input format. A missing amount is written as an empty field."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(TRANSACTION_COLUMNS)
    for transaction in transactions:
        writer.writerow([
            transaction.transaction_type.value,
            transaction.client_id,
            transaction.transaction_id,
            "" if transaction.amount is None else format_decimal(transaction.amount),
        ])
