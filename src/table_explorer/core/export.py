"""CSV / JSON export of resolved rows, honoring column visibility and order."""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Iterable, Sequence
from enum import Enum
from pathlib import Path

# Excel only detects UTF-8 CSV with a BOM.
UTF8_BOM = "\ufeff"


class ExportFormat(Enum):
    CSV = "csv"
    JSON = "json"


DEFAULT_FILENAMES: dict[ExportFormat, str] = {
    ExportFormat.CSV: "export.csv",
    ExportFormat.JSON: "export.json",
}


class ExportError(OSError):
    """Export could not be written."""


def _cell(row: Sequence[str], idx: int) -> str:
    return row[idx] if idx < len(row) else ""


def export_csv(headers: Sequence[str], rows: Iterable[Sequence[str]], visible_cols: Sequence[int]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow([headers[i] for i in visible_cols if i < len(headers)])
    for row in rows:
        writer.writerow([_cell(row, i) for i in visible_cols])
    return UTF8_BOM + buf.getvalue()


def export_json(headers: Sequence[str], rows: Iterable[Sequence[str]], visible_cols: Sequence[int]) -> str:
    cols = [i for i in visible_cols if i < len(headers)]
    records = [{headers[i]: _cell(row, i) for i in cols} for row in rows]
    return json.dumps(records, indent=2, ensure_ascii=False)


def export_table(
    headers: Sequence[str],
    rows: Iterable[Sequence[str]],
    visible_cols: Sequence[int],
    fmt: ExportFormat,
) -> str:
    if fmt is ExportFormat.CSV:
        return export_csv(headers, rows, visible_cols)
    return export_json(headers, rows, visible_cols)


def save_to_file(content: str, path: str | Path) -> Path:
    target = Path(path).expanduser()
    try:
        target.write_text(content, encoding="utf-8")
    except OSError as e:
        raise ExportError(f"Failed to write file '{target}': {e.strerror or e}") from e
    return target
