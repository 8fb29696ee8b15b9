import subprocess
import threading
from typing import Optional, Sequence

from meow.internal.errors import OperationCancelledError, ProcessError
from meow.internal.logging import get_logger


class ProcessRunner:
    """
    Runs installer executables and scripts as blocking child processes.
    """
    POLL_INTERVAL = 0.5
    TERMINATE_TIMEOUT = 5

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def run(
        self,
        command: str,
        args: Sequence[str] = (),
        forward_output: bool = False,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        """
        Start command with args and wait for it to exit.

        With forward_output the child writes straight to our stdout/stderr,
        otherwise its output is discarded.
        """
        argv = [command, *args]
        output = None if forward_output else subprocess.DEVNULL

        self.logger.debug("Starting process", command=command)
        try:
            process = subprocess.Popen(argv, stdout=output, stderr=output)
        except OSError as e:
            raise ProcessError(command, launch_error=e) from e

        if cancel is None:
            exit_code = process.wait()
        else:
            exit_code = self._wait_or_cancel(process, command, cancel)

        if exit_code != 0:
            raise ProcessError(command, exit_code=exit_code)
        self.logger.debug("Process finished", command=command)

    def _wait_or_cancel(self, process: subprocess.Popen, command: str, cancel: threading.Event) -> int:
        while True:
            try:
                return process.wait(timeout=self.POLL_INTERVAL)
            except subprocess.TimeoutExpired:
                if not cancel.is_set():
                    continue

            self.logger.warning("Cancelling process", command=command, pid=process.pid)
            process.terminate()
            try:
                process.wait(timeout=self.TERMINATE_TIMEOUT)
            except subprocess.TimeoutExpired:
                self.logger.warning("Graceful shutdown failed, killing process", pid=process.pid)
                process.kill()
                process.wait()
            raise OperationCancelledError(f"'{command}' cancelled")
