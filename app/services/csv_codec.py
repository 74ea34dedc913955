"""
Conversion between inventory CSV files and item data.

Reading yields one {column: text} mapping per row. Cells that are empty
or cannot be parsed are treated as missing rather than as zero, so a
damaged file never wipes out stored quantities.
"""
import csv
import io
import math
from typing import Dict, Iterable, Iterator, List, Mapping, Optional
from uuid import UUID

from app.core.errors import InvalidArgumentError
from app.services.sync_engine import ItemDescriptor

COL_ID = "Item ID"
COL_NAME = "Name"
COL_QUANTITY = "Quantity"
COL_SUPPLIER = "Supplier"
COL_SUPPLIER_ID = "Supplier ID"
COL_PRICE = "Price"
COL_DESCRIPTION = "Description"
COL_THRESHOLD = "Low Stock Threshold"
COL_IS_LOW_STOCK = "Is Low Stock"

EXPORT_COLUMNS = [
    COL_ID,
    COL_NAME,
    COL_QUANTITY,
    COL_SUPPLIER,
    COL_PRICE,
    COL_DESCRIPTION,
    COL_THRESHOLD,
    COL_IS_LOW_STOCK,
]


def read_rows(lines: Iterable[str]) -> List[Dict[str, str]]:
    reader = csv.DictReader(lines)
    headers = [h.strip().lstrip("\ufeff") for h in (reader.fieldnames or [])]
    if COL_NAME not in headers:
        raise InvalidArgumentError(
            "CSV file has no Name column",
            details=[{"field": COL_NAME, "message": "Column is required"}],
        )
    reader.fieldnames = headers

    rows = []
    try:
        for row in reader:
            # Short rows pad with None, long rows collect extras under None
            rows.append({k: v.strip() for k, v in row.items() if k is not None and isinstance(v, str)})
    except csv.Error as e:
        raise InvalidArgumentError(f"Malformed CSV at line {reader.line_num}: {e}") from e
    return rows


def parse_int(value: Optional[str]) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number >= 0 else None


def parse_float(value: Optional[str]) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number) or number < 0:
        return None
    return number


def parse_uuid(value: Optional[str]) -> Optional[UUID]:
    try:
        return UUID(value)
    except (TypeError, ValueError, AttributeError):
        return None


def parse_text(value: Optional[str]) -> Optional[str]:
    return value or None


def row_to_descriptor(row: Mapping[str, str], supplier_ids: Optional[Mapping[str, UUID]] = None) -> ItemDescriptor:
    """
    Builds an item descriptor from one CSV row.

    The supplier comes from the Supplier ID column, or failing that from
    the Supplier name looked up in supplier_ids.
    """
    supplier_id = parse_uuid(row.get(COL_SUPPLIER_ID))
    if supplier_id is None and supplier_ids:
        supplier_id = supplier_ids.get(row.get(COL_SUPPLIER, ""))

    return ItemDescriptor(
        name=parse_text(row.get(COL_NAME)),
        quantity=parse_int(row.get(COL_QUANTITY)),
        supplier_id=supplier_id,
        price=parse_float(row.get(COL_PRICE)),
        description=parse_text(row.get(COL_DESCRIPTION)),
        low_stock_threshold=parse_int(row.get(COL_THRESHOLD)),
    )


def iter_export(items, suppliers) -> Iterator[str]:
    """Yields the CSV text line by line: the header, then one row per item."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)

    def flush() -> str:
        text = buffer.getvalue()
        buffer.seek(0)
        buffer.truncate(0)
        return text

    writer.writerow(EXPORT_COLUMNS)
    yield flush()

    for item in items:
        supplier = suppliers.get(item.supplier_id)
        writer.writerow([
            str(item.id),
            item.name,
            item.quantity,
            supplier.name if supplier else "",
            item.price,
            item.description or "",
            item.low_stock_threshold,
            "true" if item.is_low_stock else "false",
        ])
        yield flush()
