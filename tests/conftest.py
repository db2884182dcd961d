import json
from pathlib import Path

import pytest

from gardenqa.config import Settings
from gardenqa.services.garden_db import QAPair, Record

SAMPLE_DB = Path(__file__).resolve().parent.parent / "data" / "garden-db.json"


def make_record(id: str, category: str = "lawn", keys=(), questions=()) -> Record:
    return Record(
        id=id,
        category=category,
        keys=tuple(keys),
        qa=tuple(QAPair(q=q, a="answer") for q in questions),
    )


@pytest.fixture
def sample_db_path() -> Path:
    return SAMPLE_DB


@pytest.fixture
def settings(sample_db_path) -> Settings:
    return Settings(
        garden_db_url=str(sample_db_path),
        garden_db_timeout=5,
        default_category="all",
        log_level="DEBUG",
    )


@pytest.fixture
def write_db(tmp_path):
    def _write(doc, name: str = "garden-db.json") -> Path:
        path = tmp_path / name
        text = doc if isinstance(doc, str) else json.dumps(doc, ensure_ascii=False)
        path.write_text(text, encoding="utf-8")
        return path
    return _write
