# Writers for the scrape results: the product CSV, rewritten after every
# page, and the JSON run summary written once at the end

import csv
import json
from pathlib import Path
from typing import Any, Dict, Iterable, Union

from core.scrapers.models import CSV_COLUMNS, ProductRecord, RunSummary

PathLike = Union[str, Path]


def write_products_csv(records: Iterable[ProductRecord], path: PathLike) -> int:
    """Overwrite the CSV file with every record.

    Args:
        records: Products to write, in order
        path: Destination file; parent directories are created

    Returns:
        Number of rows written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    count = 0
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=list(CSV_COLUMNS.values()))
        writer.writeheader()
        for record in records:
            writer.writerow(record.to_csv_row())
            count += 1
    return count


def write_summary(summary: RunSummary, path: PathLike) -> Dict[str, Any]:
    """Write the run summary as indented JSON and return the written object."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    data = summary.to_json_dict()
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
    return data


def read_summary(path: PathLike) -> Dict[str, Any]:
    """Load a summary written by write_summary.

    Raises:
        FileNotFoundError: If no run has written a summary yet
    """
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
