"""
Error kinds surfaced by meow.

Every error is terminal for the operation that raised it; nothing here is
retried. I/O failures are not wrapped and stay plain OSError.
"""
from typing import Optional


class MeowError(Exception):
    """Base class for every error raised by meow itself."""


class UnsupportedPlatformError(MeowError):
    def __init__(self, system: str, machine: str):
        self.system = system
        self.machine = machine
        super().__init__(f"unsupported operating system/architecture: {system}/{machine}")


class ConstantNotFoundError(MeowError, KeyError):
    def __init__(self, name: str, system: str, machine: str):
        self.name = name
        self.system = system
        self.machine = machine
        super().__init__(f"constant '{name}' not defined for {system}/{machine}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class NetworkError(MeowError):
    def __init__(self, status_code: int, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(f"request failed with status code {status_code}")


class ProcessError(MeowError):
    """A child process could not be launched or exited non-zero."""

    def __init__(
        self,
        command: str,
        exit_code: Optional[int] = None,
        launch_error: Optional[BaseException] = None,
    ):
        self.command = command
        self.exit_code = exit_code
        self.launch_error = launch_error
        if launch_error is not None:
            message = f"failed to launch '{command}': {launch_error}"
        else:
            message = f"'{command}' exited with status {exit_code}"
        super().__init__(message)


class EngineError(MeowError):
    """The container engine rejected a request or could not be reached."""


class ValidationError(MeowError):
    """Conflicting or invalid command line flags."""


class ConfigurationError(MeowError):
    pass


class PlatformNotImplementedError(MeowError, NotImplementedError):
    """The requested install path does not exist for this operating system."""


class OperationCancelledError(MeowError):
    pass
