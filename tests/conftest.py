import datetime as dt
from pathlib import Path

import pytest

FIXED_NOW = dt.datetime(2024, 5, 1, 12, 30)


@pytest.fixture
def now() -> dt.datetime:
    return FIXED_NOW


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def posts_dir(tmp_path: Path) -> Path:
    path = tmp_path / "content" / "posts"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    return tmp_path / "public"
