"""Load and normalize pet reports for seeding the repository."""

from __future__ import annotations

import logging
import numbers
import re
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from src.data.schemas import Pet

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("id", "species", "status")

COLUMN_ALIASES = {
    "type": "species",
    "pet_type": "species",
    "lost_date": "last_seen",
    "date_found": "found_date",
    "image_urls": "images",
}

SAMPLE_REPORTS: list[dict] = [
    {
        "id": "lost-max",
        "name": "Max",
        "status": "lost",
        "species": "Dog",
        "breed": "Golden Retriever",
        "color": "Golden",
        "gender": "male",
        "last_seen": "2023-05-10",
        "location": "Colombo, Sri Lanka",
        "coordinates": {"latitude": 6.9271, "longitude": 79.8612},
        "images": ["/golden-retriever.png"],
        "description": "Friendly dog with a red collar. Responds to his name.",
        "age": "3 years",
    },
    {
        "id": "lost-luna",
        "name": "Luna",
        "status": "lost",
        "species": "Cat",
        "breed": "Siamese",
        "color": "Cream with brown points",
        "gender": "female",
        "last_seen": "2023-05-12",
        "location": "Kandy, Sri Lanka",
        "coordinates": {"latitude": 7.2906, "longitude": 80.6337},
        "images": ["/siamese-cat.png"],
        "description": "Shy cat with blue eyes. Has a pink collar with a bell.",
        "age": "2 years",
    },
    {
        "id": "lost-buddy",
        "name": "Buddy",
        "status": "lost",
        "species": "Dog",
        "breed": "Labrador",
        "color": "Black",
        "gender": "male",
        "last_seen": "2023-05-15",
        "location": "Colombo",
        "images": ["/black-labrador.png"],
        "description": "Energetic dog with a blue collar. Has a small white spot on chest.",
        "age": "4 years",
    },
    {
        "id": "found-tabby",
        "status": "found",
        "species": "Cat",
        "breed": "Tabby",
        "color": "Orange and white",
        "gender": "unknown",
        "found_date": "2023-05-11",
        "location": "Riverside Park, Kandy",
        "images": ["/orange-tabby-cat.png"],
        "description": "Friendly cat found wandering in the park. No collar.",
    },
    {
        "id": "found-beagle",
        "status": "found",
        "species": "Dog",
        "breed": "Beagle",
        "color": "Tricolor",
        "gender": "male",
        "found_date": "2023-05-13",
        "location": "Galle, Sri Lanka",
        "coordinates": {"latitude": 6.0535, "longitude": 80.221},
        "images": ["/beagle-dog.png"],
        "description": "Small beagle with brown collar, no tags. Very friendly.",
    },
    {
        "id": "found-labrador",
        "status": "found",
        "species": "Dog",
        "breed": "Labrador",
        "color": "Black",
        "gender": "male",
        "found_date": "2023-05-16",
        "location": "Colombo",
        "images": ["/black-lab-found.png"],
        "description": "Black lab with a blue collar found near the beach.",
    },
]


def sample_pets() -> list[Pet]:
    """Demo reports: three lost and three found pets."""
    return [Pet.model_validate(report) for report in SAMPLE_REPORTS]


def load_pet_reports(path: Path) -> list[Pet]:
    """Load pet reports from a CSV or JSON file.

    Column names may be camelCase or snake_case. Rows missing an id,
    species or status, or failing validation, are skipped with a warning.

    Args:
        path: ``.csv`` or ``.json`` file (JSON as a list of records).

    Returns:
        List of Pet records in file order.

    Raises:
        ValueError: If the file extension is not supported.
    """
    logger.info("Loading pet reports from %s", path)

    suffix = path.suffix.lower()
    if suffix == ".csv":
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    elif suffix == ".json":
        df = pd.read_json(path, orient="records", dtype=False, convert_dates=False)
    else:
        raise ValueError(f"Unsupported report file type: {path.suffix}")

    df = normalize_columns(df)

    missing = [column for column in REQUIRED_COLUMNS if column not in df.columns]
    if missing:
        raise ValueError(f"Report file {path} is missing columns: {', '.join(missing)}")

    pets = []
    for index, row in df.iterrows():
        record = _clean_row(row)
        if any(not record.get(column) for column in REQUIRED_COLUMNS):
            logger.warning("Skipping row %s: missing id, species or status", index)
            continue
        try:
            pets.append(Pet.model_validate(record))
        except ValidationError as err:
            logger.warning("Skipping row %s (%s): %s", index, record.get("id"), err)

    logger.info("Loaded %d of %d pet reports", len(pets), len(df))
    return pets


def normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename columns to snake_case and map known aliases."""
    renamed = {}
    for column in df.columns:
        snake = _to_snake(str(column).strip())
        renamed[column] = COLUMN_ALIASES.get(snake, snake)
    return df.rename(columns=renamed)


def _to_snake(name: str) -> str:
    name = re.sub(r"[\s\-]+", "_", name)
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"_\1", name).lower()


def _clean_row(row: pd.Series) -> dict:
    """Drop blank and NaN cells, stringify numbers and title-case the species."""
    record = {}
    for key, value in row.items():
        if isinstance(value, str):
            value = value.strip()
            if not value:
                continue
        elif value is None or (not isinstance(value, (list, dict)) and pd.isna(value)):
            continue
        elif isinstance(value, numbers.Real) and not isinstance(value, bool):
            value = _number_to_str(value)
        record[key] = value

    if isinstance(record.get("species"), str):
        record["species"] = record["species"].title()
    return record


def _number_to_str(value: numbers.Real) -> str:
    # Sparse integer columns come back from pandas as floats.
    if isinstance(value, numbers.Integral) or float(value).is_integer():
        return str(int(value))
    return str(value)
