from dataclasses import dataclass, field
from typing import Any

from meow.internal.config import Settings
from meow.internal.constants import current_platform
from meow.internal.errors import ValidationError
from meow.internal.logging import get_logger


@dataclass(frozen=True)
class PlatformKey:
    system: str
    machine: str

    @classmethod
    def detect(cls) -> "PlatformKey":
        system, machine = current_platform()
        return cls(system=system, machine=machine)

    def __str__(self) -> str:
        return f"{self.system}/{self.machine}"


@dataclass
class AppContext:
    """
    Everything a command needs to know about the current invocation.
    Built once by the CLI callback and handed down explicitly.
    """
    settings: Settings
    platform: PlatformKey = field(default_factory=PlatformKey.detect)
    verbose: bool = False
    quiet: bool = False
    json_output: bool = False
    logger: Any = None

    def __post_init__(self):
        if self.verbose and self.quiet:
            raise ValidationError("--verbose and --quiet flags are incompatible")
        if self.logger is None:
            self.logger = get_logger("meow").bind(
                os=self.platform.system, arch=self.platform.machine
            )
