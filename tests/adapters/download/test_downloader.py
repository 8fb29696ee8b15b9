import gzip
import threading

import pytest
import requests

from meow.adapters.download import Downloader
from meow.internal.errors import NetworkError, OperationCancelledError

URL = "https://example/test.bin"


# --- Fakes ---

class DroppingResponse:
    """Streams one chunk, then loses the connection."""
    status_code = 200
    headers = {"Content-Length": "1024"}

    def iter_content(self, chunk_size=None):
        yield b"a" * 512
        raise requests.exceptions.ChunkedEncodingError("Connection broken: simulated drop")

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class DroppingSession:
    def __init__(self):
        self.calls = 0

    def get(self, url, stream=False, timeout=None):
        self.calls += 1
        return DroppingResponse()


# --- Fixtures ---

@pytest.fixture
def destination(tmp_path):
    return tmp_path / "x" / "test.bin"


@pytest.fixture
def downloader():
    return Downloader(chunk_size=100)


# --- Tests ---

def test_fetch_writes_complete_artifact(downloader, destination, requests_mock, recording_sink):
    """A 200 answer with 1024 bytes produces exactly that file and announces the total."""
    payload = bytes(range(256)) * 4
    requests_mock.get(URL, content=payload, headers={"Content-Length": "1024"})

    result = downloader.fetch(URL, destination, force=False, sink=recording_sink)

    assert result == destination
    assert destination.read_bytes() == payload
    assert destination.stat().st_size == 1024
    assert not Downloader.temp_path_for(destination).exists()
    assert recording_sink.calls[0] == (1024, b"")
    assert all(total == 1024 for total, _ in recording_sink.calls)


def test_progress_is_monotonic_and_sums_to_total(downloader, destination, requests_mock, recording_sink):
    requests_mock.get(URL, content=b"z" * 1024, headers={"Content-Length": "1024"})

    downloader.fetch(URL, destination, sink=recording_sink)

    counts = recording_sink.cumulative
    assert counts == sorted(counts)
    assert counts[-1] == 1024
    chunk_sizes = [len(chunk) for _, chunk in recording_sink.calls[1:]]
    assert len(chunk_sizes) > 1
    assert all(0 < size <= 100 for size in chunk_sizes)


def test_sink_is_announced_once_before_transfer(downloader, destination, requests_mock, recording_sink):
    requests_mock.get(URL, content=b"z" * 300, headers={"Content-Length": "300"})

    downloader.fetch(URL, destination, sink=recording_sink)

    announcements = [call for call in recording_sink.calls if call[1] == b""]
    assert announcements == [(300, b"")]
    assert recording_sink.calls[0] == (300, b"")


def test_missing_content_length_still_streams(downloader, destination, requests_mock, recording_sink):
    requests_mock.get(URL, content=b"q" * 10)

    downloader.fetch(URL, destination, sink=recording_sink)

    assert recording_sink.calls[0][1] == b""
    assert recording_sink.cumulative[-1] == 10
    assert destination.read_bytes() == b"q" * 10


def test_encoded_body_announces_unknown_total(downloader, destination, requests_mock, recording_sink):
    body = gzip.compress(b"installer" * 200)
    requests_mock.get(
        URL,
        content=body,
        headers={"Content-Length": str(len(body)), "Content-Encoding": "gzip"},
    )

    downloader.fetch(URL, destination, sink=recording_sink)

    assert all(total == 0 for total, _ in recording_sink.calls)
    assert recording_sink.cumulative[-1] == destination.stat().st_size


def test_fetch_is_idempotent_without_force(downloader, destination, requests_mock):
    requests_mock.get(URL, content=b"a" * 64)

    downloader.fetch(URL, destination)
    downloader.fetch(URL, destination)

    assert requests_mock.call_count == 1
    assert destination.read_bytes() == b"a" * 64


def test_existing_artifact_skips_request_and_sink(downloader, destination, requests_mock, recording_sink):
    destination.parent.mkdir(parents=True)
    destination.write_bytes(b"old")

    downloader.fetch(URL, destination, force=False, sink=recording_sink)

    assert requests_mock.call_count == 0
    assert recording_sink.calls == []
    assert destination.read_bytes() == b"old"


def test_force_downloads_again(downloader, destination, requests_mock):
    destination.parent.mkdir(parents=True)
    destination.write_bytes(b"old")
    requests_mock.get(URL, content=b"new")

    downloader.fetch(URL, destination, force=True)

    assert requests_mock.call_count == 1
    assert destination.read_bytes() == b"new"


@pytest.mark.parametrize("status_code", [404, 500, 503])
def test_non_success_status_raises_network_error(downloader, destination, requests_mock, status_code):
    requests_mock.get(URL, status_code=status_code)

    with pytest.raises(NetworkError) as exc_info:
        downloader.fetch(URL, destination)

    assert exc_info.value.status_code == status_code
    assert not destination.exists()
    assert not Downloader.temp_path_for(destination).exists()


def test_connection_drop_never_exposes_partial_file(destination):
    session = DroppingSession()
    seen_during_transfer = []

    class WatchingSink:
        def on_transfer(self, total, chunk):
            seen_during_transfer.append(destination.exists())

    downloader = Downloader(session=session)

    with pytest.raises(requests.exceptions.ChunkedEncodingError):
        downloader.fetch(URL, destination, sink=WatchingSink())

    assert session.calls == 1
    assert seen_during_transfer and not any(seen_during_transfer)
    assert not destination.exists()


def test_connection_drop_leaves_previous_artifact_untouched(destination):
    destination.parent.mkdir(parents=True)
    destination.write_bytes(b"previous installer")

    with pytest.raises(OSError):
        Downloader(session=DroppingSession()).fetch(URL, destination, force=True)

    assert destination.read_bytes() == b"previous installer"


def test_network_exception_propagates_unchanged(downloader, destination, requests_mock):
    error = requests.exceptions.ConnectionError("Network unreachable")
    requests_mock.get(URL, exc=error)

    with pytest.raises(requests.exceptions.ConnectionError) as exc_info:
        downloader.fetch(URL, destination)

    assert exc_info.value is error
    assert not destination.exists()


def test_cancelled_download_leaves_no_artifact(downloader, destination, requests_mock):
    requests_mock.get(URL, content=b"c" * 1024)
    cancel = threading.Event()
    cancel.set()

    with pytest.raises(OperationCancelledError):
        downloader.fetch(URL, destination, cancel=cancel)

    assert not destination.exists()
    assert not Downloader.temp_path_for(destination).exists()


def test_temp_path_is_sibling_with_tmp_suffix(tmp_path):
    assert Downloader.temp_path_for(tmp_path / "installer.exe") == tmp_path / "installer.exe.tmp"
