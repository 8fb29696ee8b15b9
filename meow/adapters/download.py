"""
Streamed HTTP download of installer artifacts.

The final path only ever appears through an atomic rename of the sibling
'.tmp' file, so a partially written artifact is never visible under the
destination name.
"""
import os
import threading
from pathlib import Path
from typing import Optional

import requests

from meow.internal.errors import NetworkError, OperationCancelledError
from meow.internal.logging import get_logger
from meow.kernel.progress import ProgressSink


class Downloader:
    CHUNK_SIZE = 1024 * 1024

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = 60,
        chunk_size: int = CHUNK_SIZE,
    ):
        self.logger = get_logger(self.__class__.__name__)
        self.session = session or requests.Session()
        self.timeout = timeout
        self.chunk_size = chunk_size

    @staticmethod
    def temp_path_for(destination: Path) -> Path:
        return destination.with_name(destination.name + ".tmp")

    @staticmethod
    def _declared_size(response) -> int:
        # Content-Length counts encoded bytes, iter_content yields decoded ones
        encoding = response.headers.get("Content-Encoding", "identity").strip().lower()
        if encoding not in ("", "identity"):
            return 0
        return int(response.headers.get("Content-Length") or 0)

    def fetch(
        self,
        url: str,
        destination: Path,
        force: bool = False,
        sink: Optional[ProgressSink] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Path:
        """
        Download url to destination.

        Skips the request entirely when destination exists and force is False.
        Raises NetworkError on a non-2xx answer. I/O errors, including those
        raised by requests, propagate unchanged.
        """
        destination = Path(destination)
        if destination.exists() and not force:
            self.logger.debug("Artifact already present, skipping download", path=str(destination))
            return destination

        self.logger.debug("Downloading artifact", url=url, path=str(destination))
        destination.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self.temp_path_for(destination)

        try:
            with self.session.get(url, stream=True, timeout=self.timeout) as response:
                if not 200 <= response.status_code < 300:
                    raise NetworkError(response.status_code, url=url)

                total = self._declared_size(response)
                if sink is not None:
                    sink.on_transfer(total, b"")

                with open(temp_path, "wb") as f:
                    for chunk in response.iter_content(chunk_size=self.chunk_size):
                        if cancel is not None and cancel.is_set():
                            raise OperationCancelledError(f"Download of {url} cancelled")
                        if not chunk:
                            continue
                        f.write(chunk)
                        if sink is not None:
                            sink.on_transfer(total, chunk)

            os.replace(temp_path, destination)
        finally:
            if temp_path.exists():
                temp_path.unlink()

        self.logger.debug("Artifact saved", path=str(destination))
        return destination
