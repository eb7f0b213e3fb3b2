import os
import sys

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT)

from distri_mirror.data.data_locker import DataLocker
from fakes import FakeChain, PROGRAM_ID, RecordingStore


@pytest.fixture(scope="function")
def locker(tmp_path):
    dl = DataLocker(str(tmp_path / "mirror.db"))
    yield dl
    dl.close()


@pytest.fixture
def chain():
    return FakeChain(PROGRAM_ID)


@pytest.fixture
def store():
    return RecordingStore()
