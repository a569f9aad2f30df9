import pytest

from coverlookup.shared.config import CoverSettings
from tests.fakes import FakeHttpClient


@pytest.fixture
def settings(tmp_path):
    return CoverSettings(covers_dir=tmp_path / 'covers', batch_delay=0)


@pytest.fixture
def fake_client():
    return FakeHttpClient()
