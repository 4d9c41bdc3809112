"""I/O utilities: filesystem documents and record tables."""

from infrastructure.io.datasets import read_table, row_to_record, write_table
from infrastructure.io.fs import ensure_exists, read_document, write_document

__all__ = [
    "ensure_exists",
    "read_document",
    "write_document",
    "read_table",
    "row_to_record",
    "write_table",
]
