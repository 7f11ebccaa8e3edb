# Overview: Turns an uploaded file (CSV, JSON or Excel) into a list of row dicts.

"""
Supports CSV, JSON, and Excel (.xlsx) uploads.

Header names are returned as written; validation.normalize_row() makes them
header-flexible afterwards.
"""

import csv
import io
import json

from openpyxl import load_workbook

from .errors import ValidationError

EXCEL_EXTENSIONS = {"xlsx", "xlsm", "xltx", "xltm"}


def read_upload(file) -> list[dict]:
    """
    Parse a werkzeug FileStorage into rows.

    Raises ValidationError for unsupported or unreadable files.
    """
    filename = file.filename or ""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "csv"

    try:
        if ext in {"csv", "txt"}:
            text = file.stream.read().decode("utf-8-sig")
            reader = csv.DictReader(io.StringIO(text))
            return [row for row in reader if any((v or "").strip() for v in row.values() if isinstance(v, str))]
        if ext == "json":
            rows = json.load(file.stream)
            if isinstance(rows, dict):
                rows = rows.get("rows", [])
            if not isinstance(rows, list):
                raise ValidationError("JSON upload must be a list of rows")
            return [row for row in rows if isinstance(row, dict)]
        if ext in EXCEL_EXTENSIONS:
            wb = load_workbook(file.stream, read_only=True, data_only=True)
            sheet = wb.active
            data = list(sheet.values)
            wb.close()
            if not data:
                return []
            headers = [str(h) if h is not None else "" for h in data[0]]
            rows = []
            for values in data[1:]:
                if values is None or all(v is None for v in values):
                    continue
                rows.append({
                    headers[i]: ("" if values[i] is None else values[i])
                    for i in range(min(len(headers), len(values)))
                    if headers[i]
                })
            return rows
    except ValidationError:
        raise
    except (UnicodeDecodeError, json.JSONDecodeError, csv.Error) as exc:
        raise ValidationError("Failed to parse upload", [str(exc)])
    except Exception as exc:
        # openpyxl raises a variety of zipfile/xml errors for corrupt workbooks
        raise ValidationError("Failed to parse upload", [str(exc)])

    raise ValidationError("Unsupported file format")
