"""
Seed Service

Loads restaurant records from CSV or JSON files and writes them to the
store. Seeded records carry no provider origin ids.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from app.models.records import RestaurantRecord, split_cuisines
from app.services.database_service import RestaurantStore, UpsertReport
from app.services.matching_service import normalize_name

logger = logging.getLogger(__name__)


def _seed_id(item: Dict[str, Any], name: str) -> str:
    explicit = item.get("id")
    if explicit is not None and str(explicit).strip():
        return str(explicit).strip()
    return "seed_" + "-".join(normalize_name(name).split())


def record_from_dict(item: Dict[str, Any]) -> Optional[RestaurantRecord]:
    """
    Build a record from a loosely-typed dict. Returns None when name is missing.

    Numeric names are kept as text; any other non-string name counts as
    missing. Cuisines may be a list or a comma-separated string.
    """
    name = item.get("name")
    if isinstance(name, (int, float)) and not isinstance(name, bool):
        name = str(name)
    if not isinstance(name, str) or not name.strip():
        return None
    name = name.strip()

    cuisines = item.get("cuisines") or []
    if isinstance(cuisines, str):
        cuisines = split_cuisines(cuisines)

    return RestaurantRecord(
        id=_seed_id(item, name),
        name=name,
        latitude=float(item.get("latitude") or 0.0),
        longitude=float(item.get("longitude") or 0.0),
        cuisines=[str(c) for c in cuisines],
        rating=float(item.get("rating") or 0.0),
        review_count=int(item.get("review_count") or item.get("reviewCount") or 0),
        image_url=item.get("image_url") or item.get("imageUrl") or "",
    )


def parse_csv_input(file_path: str) -> List[RestaurantRecord]:
    """
    Parse restaurant list from CSV file.

    Expected columns: name, id (optional), latitude, longitude, cuisines
    (comma-separated inside the cell), rating, review_count, image_url
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {file_path}")

    records = []
    with open(path, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)

        for line_number, row in enumerate(reader, start=2):
            # Normalize column names (case-insensitive)
            normalized = {k.lower().strip(): v.strip() for k, v in row.items() if k and v}
            try:
                record = record_from_dict(normalized)
            except ValueError as e:
                logger.warning(f"Skipping CSV line {line_number}: {str(e)}")
                continue
            if record is None:
                logger.warning(f"Skipping CSV line {line_number}: missing name")
                continue
            records.append(record)

    return records


def parse_json_input(file_path: str) -> List[RestaurantRecord]:
    """
    Parse restaurant list from JSON file.

    Expected format: Array of restaurant objects, or plain name strings
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"JSON file not found: {file_path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, list):
        raise ValueError("JSON file must contain an array of restaurant objects")

    records = []
    for item in data:
        if isinstance(item, str):
            # Simple string format - treat as name
            item = {"name": item}
        if not isinstance(item, dict):
            continue
        try:
            record = record_from_dict(item)
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping JSON entry {item!r}: {str(e)}")
            continue
        if record is not None:
            records.append(record)

    return records


def parse_input(file_path: str) -> List[RestaurantRecord]:
    if file_path.lower().endswith(".json"):
        return parse_json_input(file_path)
    elif file_path.lower().endswith(".csv"):
        return parse_csv_input(file_path)
    raise ValueError(f"Unsupported file type: {file_path} (use .csv or .json)")


def seed_restaurants(
    store: RestaurantStore,
    records: List[RestaurantRecord],
    dry_run: bool = False,
) -> UpsertReport:
    """
    Write seed records to the store.

    Provider origin ids are stripped so seeded rows never claim provenance.
    With dry_run, nothing is written and every record counts as saved.
    """
    for record in records:
        record.yelp_id = None
        record.google_place_id = None

    if dry_run:
        logger.info(f"[DRY RUN] Would seed {len(records)} restaurants")
        return UpsertReport(saved=len(records))

    return store.upsert_all(records)
