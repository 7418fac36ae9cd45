"""Tests for src/data/processor.py."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pandas as pd
import pytest

from src.data.processor import (
    SAMPLE_REPORTS,
    load_pet_reports,
    normalize_columns,
    sample_pets,
)


@pytest.fixture
def reports_csv(tmp_path: Path) -> Path:
    """CSV with camelCase headers and one incomplete row."""
    path = tmp_path / "reports.csv"
    path.write_text(
        "id,status,type,breed,gender,lastSeen,foundDate,location,images\n"
        "1,Lost,dog,Labrador,Male,2023-05-10,,Colombo,a.jpg;b.jpg\n"
        "2,found,cat,,,,2023-05-11,Kandy,\n"
        "3,found,,Beagle,male,,2023-05-12,Galle,\n"
    )
    return path


@pytest.fixture
def reports_json(tmp_path: Path) -> Path:
    """JSON list of records with an invalid status."""
    path = tmp_path / "reports.json"
    path.write_text(
        json.dumps(
            [
                {
                    "id": "lost-1",
                    "status": "lost",
                    "species": "Dog",
                    "lastSeen": "2023-05-10T08:00:00Z",
                    "images": ["https://img/1.jpg"],
                    "coordinates": {"latitude": 6.9, "longitude": 79.8},
                },
                {"id": "found-1", "status": "found", "species": "Dog"},
                {"id": "bad-1", "status": "adopted", "species": "Dog"},
            ]
        )
    )
    return path


class TestLoadPetReports:
    """Tests for load_pet_reports."""

    def test_load_csv(self, reports_csv: Path) -> None:
        """Should normalize headers and values from CSV."""
        pets = load_pet_reports(reports_csv)
        assert [p.id for p in pets] == ["1", "2"]

        lost = pets[0]
        assert lost.status == "lost"
        assert lost.species == "Dog"
        assert lost.gender == "male"
        assert lost.last_seen == date(2023, 5, 10)
        assert lost.images == ["a.jpg", "b.jpg"]

        found = pets[1]
        assert found.species == "Cat"
        assert found.breed is None
        assert found.found_date == date(2023, 5, 11)
        assert found.images == []

    def test_load_json(self, reports_json: Path) -> None:
        """Should load JSON records and skip invalid ones."""
        pets = load_pet_reports(reports_json)
        assert [p.id for p in pets] == ["lost-1", "found-1"]
        assert pets[0].last_seen == date(2023, 5, 10)
        assert pets[0].coordinates is not None
        assert pets[0].coordinates.latitude == pytest.approx(6.9)
        assert pets[1].coordinates is None

    def test_json_numbers_become_strings(self, tmp_path: Path) -> None:
        """Numeric ids and sparse numeric ages load as text."""
        path = tmp_path / "reports.json"
        path.write_text(
            json.dumps(
                [
                    {"id": 1, "type": "Dog", "status": "lost", "age": 3},
                    {"id": 2, "type": "Dog", "status": "found"},
                    {"id": 3, "type": "Cat", "status": "found", "age": 1.5},
                ]
            )
        )
        pets = load_pet_reports(path)
        assert [p.id for p in pets] == ["1", "2", "3"]
        assert [p.age for p in pets] == ["3", None, "1.5"]

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        """Should reject file types other than CSV and JSON."""
        path = tmp_path / "reports.xlsx"
        path.write_text("")
        with pytest.raises(ValueError, match="Unsupported"):
            load_pet_reports(path)

    def test_missing_required_column(self, tmp_path: Path) -> None:
        """Should fail fast when a required column is absent."""
        path = tmp_path / "reports.csv"
        path.write_text("id,breed\n1,Beagle\n")
        with pytest.raises(ValueError, match="species, status"):
            load_pet_reports(path)


class TestNormalizeColumns:
    """Tests for normalize_columns."""

    def test_camel_and_aliases(self) -> None:
        """camelCase becomes snake_case and aliases map to field names."""
        df = pd.DataFrame(columns=["petType", "lastSeen", "Date Found", "imageUrls", "id"])
        assert list(normalize_columns(df).columns) == [
            "species",
            "last_seen",
            "found_date",
            "images",
            "id",
        ]


class TestSamplePets:
    """Tests for the built-in demo reports."""

    def test_all_reports_valid(self) -> None:
        """Every demo report should validate."""
        pets = sample_pets()
        assert len(pets) == len(SAMPLE_REPORTS)
        assert sum(p.status == "lost" for p in pets) == 3
        assert sum(p.status == "found" for p in pets) == 3

    def test_unique_ids(self) -> None:
        """Demo report ids should be unique."""
        ids = [p.id for p in sample_pets()]
        assert len(ids) == len(set(ids))
