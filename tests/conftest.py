import logging
import os
import tempfile

import pytest
import structlog


class RecordingSink:
    """A ProgressSink that remembers every call it receives."""

    def __init__(self):
        self.calls = []

    def on_transfer(self, total, chunk):
        self.calls.append((total, bytes(chunk)))

    @property
    def cumulative(self):
        running, counts = 0, []
        for _, chunk in self.calls:
            running += len(chunk)
            counts.append(running)
        return counts


# --- Isolation Fixtures ---

@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """
    Points HOME, APPDATA and the temp dir at tmp_path so no test touches the
    real user directories, and drops any CCAT_/MEOW_ environment overrides.
    """
    home = tmp_path / "home"
    home.mkdir()
    temp_dir = tmp_path / "tmp"
    temp_dir.mkdir()

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    monkeypatch.setenv("APPDATA", str(home / "AppData"))
    monkeypatch.setattr(tempfile, "tempdir", str(temp_dir))
    for key in list(os.environ):
        if key.startswith("CCAT_") or key == "MEOW_LOG_LEVEL":
            monkeypatch.delenv(key)

    yield home


@pytest.fixture(autouse=True)
def reset_logging():
    """Ensure logging state is clean after each test."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(logging.WARNING)
    structlog.reset_defaults()


@pytest.fixture
def recording_sink():
    return RecordingSink()
