import os
import tempfile
from pathlib import Path


# ---------------------------------------------------------------------
# Base directories
# ---------------------------------------------------------------------

def get_app_data_dir() -> Path:
    """
    Returns the application data directory.

    - Windows: %APPDATA%\\meow
    - Linux/macOS: ~/.meow
    """
    if os.name == "nt":  # Windows
        base = os.environ.get("APPDATA", str(Path.home()))
        path = Path(base) / "meow"
    else:  # Linux / macOS
        path = Path.home() / ".meow"

    path.mkdir(parents=True, exist_ok=True)
    return path


def get_log_file() -> Path:
    log_dir = get_app_data_dir() / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "meow.log.json"


def get_default_config_file() -> Path:
    return Path.home() / ".meow-cli.yaml"


# ---------------------------------------------------------------------
# Cat directories (bind mounted into the container)
# ---------------------------------------------------------------------

def get_cat_dir() -> Path:
    return get_app_data_dir() / "cat"


def get_default_plugins_dir() -> Path:
    return get_cat_dir() / "plugins"


def get_default_data_dir() -> Path:
    return get_cat_dir() / "data"


def get_default_static_dir() -> Path:
    return get_cat_dir() / "static"


# ---------------------------------------------------------------------
# Installer artifacts
# ---------------------------------------------------------------------

def get_download_dir() -> Path:
    """
    Directory under the OS temp dir where installer artifacts are placed.
    """
    return Path(tempfile.gettempdir()) / "meow-cli"


def get_desktop_installer_path(system: str) -> Path:
    name = "docker-desktop-installer"
    if system == "windows":
        name += ".exe"
    return get_download_dir() / name


def get_install_script_path() -> Path:
    return Path(__file__).parent.parent / "assets" / "install-docker.sh"
