# CSV Export
#
# Writes decrypted entries to CSV. The output holds secrets in clear; the
# CLI warns before writing and creates the file owner-only.

import csv
import os
from pathlib import Path
from typing import Iterable, TextIO, Union

from .vault.exceptions import StorageError
from .vault.models import CredentialRecord

CSV_HEADER = [
    "Service", "Username", "Password", "URL", "Notes", "Created At", "Updated At",
]


def _write_rows(records: Iterable[CredentialRecord], stream: TextIO) -> int:
    writer = csv.writer(stream)
    writer.writerow(CSV_HEADER)
    count = 0
    for record in records:
        writer.writerow([
            record.service,
            record.username,
            record.secret,
            record.url,
            record.notes,
            record.created_at,
            record.updated_at,
        ])
        count += 1
    return count


def export_csv(
    records: Iterable[CredentialRecord],
    destination: Union[str, Path, TextIO],
) -> int:
    """
    Write ``records`` as CSV to a path or an open text stream.

    Returns:
        Number of data rows written (header excluded)

    Raises:
        StorageError: the destination file cannot be created or written
    """
    if hasattr(destination, "write"):
        return _write_rows(records, destination)

    path = Path(destination)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", newline="", encoding="utf-8") as f:
            return _write_rows(records, f)
    except OSError as e:
        raise StorageError(f"Failed to write export file {path}: {e}") from e
