import shutil
import time
from pathlib import Path

import pytest

FIXTURES_PATH = Path(__file__).parent / "fixtures"


@pytest.fixture
def patch_sleep(mocker):
    yield mocker.patch.object(time, "sleep")


@pytest.fixture
def repo_path(tmp_path: Path) -> Path:
    """
    A writable copy of the fixture deployment repository.
    """
    path = tmp_path / "repo"
    shutil.copytree(FIXTURES_PATH, path)
    return path
