from pathlib import Path

import pytest

from localmr.utils.config import get_settings

AIRPORT_INPUT = "A,AAA,1.234,5.678\nB,BBB,2.345,6.789\n"


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Every test sees default settings, whatever the environment holds."""
    for name in ("LOCALMR_DEFAULT_CHUNK_SIZE", "LOCALMR_MULTI_THREADED", "LOCALMR_MAX_WORKERS",
                 "LOCALMR_ENABLE_METRICS", "LOCALMR_OUTPUT_DIR", "LOCALMR_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def write_input(tmp_path):
    """Factory writing text to a file under tmp_path and returning its path."""
    def _write(content: str, name: str = "input.txt") -> str:
        path = Path(tmp_path) / name
        path.write_text(content, encoding="utf-8")
        return str(path)
    return _write


@pytest.fixture
def airport_input(write_input):
    return write_input(AIRPORT_INPUT, "airports.csv")


@pytest.fixture
def words_input(write_input):
    lines = [
        "the quick brown fox",
        "",
        "jumps over the lazy dog",
        "   ",
        "the dog barks",
        "a quick fox runs over the hill",
        "lazy afternoon for the dog",
    ]
    return write_input("\n".join(lines) + "\n", "words.txt")


def collect_words(record, emit):
    for word in record.split():
        emit(word, 1)


def sum_values(key, values, emit):
    emit(key, sum(values))


def list_values(key, values, emit):
    emit(key, list(values))
