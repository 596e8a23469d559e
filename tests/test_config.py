import pytest
from pydantic import ValidationError

from src.config import SLICE_UNIT
from tests.utils import make_settings


def test_defaults():
    settings = make_settings()
    assert settings.PORT == 4000
    assert settings.UPLOAD_CHUNK_SIZE == SLICE_UNIT
    assert settings.GRAPH_SCOPE == "https://graph.microsoft.com/.default"


def test_trailing_slashes_are_stripped():
    settings = make_settings(GRAPH_BASE_URL="https://graph.test/v1.0/", AUTHORITY_HOST="https://login.test/")
    assert settings.GRAPH_BASE_URL == "https://graph.test/v1.0"
    assert settings.AUTHORITY_HOST == "https://login.test"


@pytest.mark.parametrize("chunk_size", [0, 1000, SLICE_UNIT + 1])
def test_chunk_size_must_be_multiple_of_slice_unit(chunk_size):
    with pytest.raises(ValidationError):
        make_settings(UPLOAD_CHUNK_SIZE=chunk_size)


def test_settings_are_immutable():
    settings = make_settings()
    with pytest.raises(ValidationError):
        settings.PORT = 8080
