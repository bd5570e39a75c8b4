"""Spreadsheet export → pois.json statistics store."""

import csv
import json
import logging
from pathlib import Path

from campus_wrapped.models import CampusStats, StatRecord

logger = logging.getLogger(__name__)

# Spreadsheet column headers
COL_POI_ID = "POI Id"
COL_NAME = "Name"
COL_FAVOURITE_DISH = "Favourite dish of your college"
COL_LARGEST_ORDER = "Largest value food order at your college"
COL_RESTAURANT = "unofficial campus favorite restaurant"
COL_CRAVING = "The official 12 AM craving / dish"
COL_MAX_ORDERS = "Max number of orders in a week for a student in your college"
COL_MAX_PIZZAS = "Highest number of pizzas ordered on a single day"
COL_MAX_BIRYANIS = "Highest number of biryanis ordered on a single day"


def parse_count(raw: str | None) -> int:
    """Leading integer of a cell, like parseInt; anything else is 0.

    Thousands separators are dropped first ("2,500" -> 2500).
    """
    text = (raw or "").strip().replace(",", "")
    digits = ""
    for i, ch in enumerate(text):
        if ch.isdigit() or (i == 0 and ch in "+-"):
            digits += ch
        else:
            break
    try:
        return max(int(digits), 0)
    except ValueError:
        return 0


def row_to_record(row: dict[str, str]) -> StatRecord | None:
    poi_id = (row.get(COL_POI_ID) or "").strip()
    if not poi_id:
        return None

    def cell(col: str) -> str:
        return (row.get(col) or "").strip()

    return StatRecord(
        poi_id=poi_id,
        college_name=cell(COL_NAME),
        stats=CampusStats(
            favourite_dish=cell(COL_FAVOURITE_DISH).lower(),
            largest_order_value=parse_count(row.get(COL_LARGEST_ORDER)),
            unofficial_favorite_restaurant=cell(COL_RESTAURANT),
            official_12am_craving=cell(COL_CRAVING).lower(),
            max_orders_in_a_week=parse_count(row.get(COL_MAX_ORDERS)),
            max_pizzas_single_day=parse_count(row.get(COL_MAX_PIZZAS)),
            max_biryanis_single_day=parse_count(row.get(COL_MAX_BIRYANIS)),
        ),
    )


def convert_csv(csv_path: Path) -> dict[str, StatRecord]:
    """Read the spreadsheet export into POI id → record, in row order.

    Rows without a POI id are skipped. A repeated POI id keeps the last row.
    """
    records: dict[str, StatRecord] = {}
    skipped = 0
    with csv_path.open(newline="", encoding="utf-8-sig") as f:
        for row in csv.DictReader(f, skipinitialspace=True):
            record = row_to_record(row)
            if record is None:
                skipped += 1
                continue
            if record.poi_id in records:
                logger.warning("Duplicate POI id %s, keeping later row", record.poi_id)
            records[record.poi_id] = record

    logger.info("Converted %d POIs from %s (%d rows skipped)", len(records), csv_path, skipped)
    return records


def write_store(records: dict[str, StatRecord], output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    data = {poi_id: r.model_dump() for poi_id, r in records.items()}
    output_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Wrote %d POIs to %s", len(data), output_path)
    return output_path
