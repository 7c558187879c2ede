from pathlib import Path

import pytest

from app.core.config import settings
from app.main import app


@pytest.fixture()
def temp_data_dir(tmp_path: Path):
    """
    Uses a temporary DATA_DIR for tests and restores the original
    value after execution.
    """
    old = settings.DATA_DIR
    settings.DATA_DIR = str(tmp_path)
    (tmp_path / "uploads").mkdir(parents=True, exist_ok=True)
    yield tmp_path
    settings.DATA_DIR = old


@pytest.fixture()
def app_store():
    """
    The app's search index, emptied before and after the test.
    """
    store = app.state.document_store
    store.clear()
    yield store
    store.clear()
