import platform
from typing import Optional

from meow.internal.errors import ConstantNotFoundError, UnsupportedPlatformError


DOCKER_DESKTOP_INSTALLER_URL = "docker_desktop_installer_url"
DOCKER_INSTALLER_URL = "docker_installer_url"

# platform.system() / platform.machine() spellings -> short identifiers
_SYSTEM_ALIASES = {
    "linux": "linux",
    "darwin": "darwin",
    "windows": "windows",
}

_MACHINE_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
}

# ---------------------------------------------------------------------
# (system, machine) -> constants
# ---------------------------------------------------------------------

_CONSTANTS: dict[tuple[str, str], dict[str, str]] = {
    ("windows", "amd64"): {
        DOCKER_DESKTOP_INSTALLER_URL: "https://desktop.docker.com/win/main/amd64/Docker%20Desktop%20Installer.exe",
    },
    ("linux", "amd64"): {
        DOCKER_INSTALLER_URL: "https://get.docker.com",
    },
    ("linux", "arm64"): {
        DOCKER_INSTALLER_URL: "https://get.docker.com",
    },
    ("darwin", "amd64"): {
        DOCKER_DESKTOP_INSTALLER_URL: "https://desktop.docker.com/mac/main/amd64/Docker.dmg",
    },
    ("darwin", "arm64"): {
        DOCKER_DESKTOP_INSTALLER_URL: "https://desktop.docker.com/mac/main/arm64/Docker.dmg",
    },
}


def normalize_system(system: str) -> str:
    lowered = system.lower()
    return _SYSTEM_ALIASES.get(lowered, lowered)


def normalize_machine(machine: str) -> str:
    lowered = machine.lower()
    return _MACHINE_ALIASES.get(lowered, lowered)


def current_platform() -> tuple[str, str]:
    """Returns the (system, machine) key of the running host."""
    return normalize_system(platform.system()), normalize_machine(platform.machine())


def get_constant(name: str, system: Optional[str] = None, machine: Optional[str] = None) -> str:
    """
    Look up a platform dependent constant.

    Args:
        name: The constant to look up, e.g. DOCKER_DESKTOP_INSTALLER_URL.
        system: Operating system identifier; defaults to the running host.
        machine: Architecture identifier; defaults to the running host.

    Raises:
        UnsupportedPlatformError: no constants exist for (system, machine).
        ConstantNotFoundError: the platform is known but lacks `name`.
    """
    host_system, host_machine = current_platform()
    system = normalize_system(system) if system else host_system
    machine = normalize_machine(machine) if machine else host_machine

    defined = _CONSTANTS.get((system, machine))
    if defined is None:
        raise UnsupportedPlatformError(system, machine)

    try:
        return defined[name]
    except KeyError:
        raise ConstantNotFoundError(name, system, machine) from None
