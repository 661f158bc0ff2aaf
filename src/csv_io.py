import csv
from decimal import Decimal, InvalidOperation
from typing import Dict, Iterable, Iterator, Optional, TextIO

from models import AccountSnapshot, Transaction, TransactionType

MAX_CLIENT_ID = 65535
MAX_TRANSACTION_ID = 4294967295

OUTPUT_FIELDS = ["client", "available", "held", "total", "locked"]


class RecordFormatError(ValueError):
    """Raised when an input row is structurally invalid. Aborts the run."""


def parse_row(row: Dict[Optional[str], Optional[str]]) -> Transaction:
    """Parse CSV row into Transaction. Only checks structure, not semantics."""
    normalized = {
        k.strip(): (v or "").strip()
        for k, v in row.items()
        if k is not None
    }

    try:
        transaction_type = TransactionType(normalized["type"].lower())
        client_id = int(normalized["client"])
        transaction_id = int(normalized["tx"])
    except KeyError as e:
        raise RecordFormatError(f"missing column {e}") from e
    except ValueError as e:
        raise RecordFormatError(str(e)) from e

    if not 0 <= client_id <= MAX_CLIENT_ID:
        raise RecordFormatError(f"client id {client_id} out of range")
    if not 0 <= transaction_id <= MAX_TRANSACTION_ID:
        raise RecordFormatError(f"transaction id {transaction_id} out of range")

    amount = None
    amount_str = normalized.get("amount", "")
    if amount_str:
        try:
            amount = Decimal(amount_str)
        except InvalidOperation as e:
            raise RecordFormatError(f"invalid amount {amount_str!r}") from e
        if not amount.is_finite():
            raise RecordFormatError(f"invalid amount {amount_str!r}")

    return Transaction(
        transaction_type=transaction_type,
        client_id=client_id,
        transaction_id=transaction_id,
        amount=amount,
    )


def read_transactions(stream: TextIO) -> Iterator[Transaction]:
    """Lazily decode transactions from a CSV stream with a header row."""
    reader = csv.DictReader(stream, skipinitialspace=True)
    for row in reader:
        if not any((v or "").strip() for k, v in row.items() if k is not None):
            continue
        try:
            yield parse_row(row)
        except RecordFormatError as e:
            raise RecordFormatError(f"line {reader.line_num}: {e}") from e


def format_decimal(value: Decimal) -> str:
    """Format decimal in plain notation, removing trailing zeros."""
    normalized = value.normalize()
    return f"{normalized:f}"


def write_accounts(accounts: Iterable[AccountSnapshot], stream: TextIO) -> None:
    """Write the account report, ordered by client id."""
    writer = csv.writer(stream, lineterminator="\n")
    writer.writerow(OUTPUT_FIELDS)
    for account in sorted(accounts, key=lambda a: a.client_id):
        writer.writerow([
            account.client_id,
            format_decimal(account.available),
            format_decimal(account.held),
            format_decimal(account.total),
            str(account.locked).lower(),
        ])
