"""
Installs the container runtime appropriate for the host.

Linux gets Docker Engine through the packaged install script. Windows gets
Docker Desktop: the installer is downloaded first, then executed. macOS has
no automatic path yet.
"""
import threading
from pathlib import Path
from typing import Optional

from meow.adapters.download import Downloader
from meow.adapters.process import ProcessRunner
from meow.internal import constants, paths
from meow.internal.context import AppContext
from meow.internal.errors import PlatformNotImplementedError, UnsupportedPlatformError
from meow.kernel.contracts import InstallState
from meow.kernel.progress import ProgressSink


class Installer:
    DESKTOP_INSTALLER_FLAGS = ("--quiet", "--accept-license")

    def __init__(
        self,
        context: AppContext,
        downloader: Downloader,
        runner: ProcessRunner,
        sink: Optional[ProgressSink] = None,
        cancel: Optional[threading.Event] = None,
    ):
        self.context = context
        self.downloader = downloader
        self.runner = runner
        self.sink = sink
        self.cancel = cancel
        self.logger = context.logger.bind(component="installer")
        self.state = InstallState.NOT_INSTALLED

    @property
    def system(self) -> str:
        return self.context.platform.system

    def _constant(self, name: str) -> str:
        return constants.get_constant(name, self.context.platform.system, self.context.platform.machine)

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def plan(self, reinstall: bool = False) -> list[str]:
        """Ordered, human readable steps install() would perform."""
        if self.system == "linux":
            url = self._constant(constants.DOCKER_INSTALLER_URL)
            return [f"Run the packaged Docker Engine install script (installer from {url})"]

        if self.system == "windows":
            url = self._constant(constants.DOCKER_DESKTOP_INSTALLER_URL)
            installer_path = paths.get_desktop_installer_path(self.system)
            steps = []
            if installer_path.exists() and not reinstall:
                steps.append(f"Reuse Docker Desktop installer already at {installer_path}")
            else:
                steps.append(f"Download Docker Desktop installer from {url} to {installer_path}")
            steps.append(f"Run {installer_path} {' '.join(self.DESKTOP_INSTALLER_FLAGS)}")
            return steps

        if self.system == "darwin":
            raise PlatformNotImplementedError("automatic Docker Desktop install is not implemented on darwin yet")

        raise UnsupportedPlatformError(self.context.platform.system, self.context.platform.machine)

    # ------------------------------------------------------------------
    # Install
    # ------------------------------------------------------------------

    def install(self, reinstall: bool = False, dry_run: bool = False) -> list[str]:
        """
        Bring the host from NOT_INSTALLED to INSTALLED.

        Any failure, planning included, leaves the installer in FAILED and is
        re-raised unchanged. A platform without an automatic install path
        raises PlatformNotImplementedError and stays NOT_INSTALLED.
        With dry_run nothing is executed and the planned steps are returned.
        """
        verbose = self.context.verbose
        try:
            steps = self.plan(reinstall=reinstall)
            if dry_run:
                for number, step in enumerate(steps, start=1):
                    self.logger.info("Planned step", step=number, description=step)
                return steps

            if self.system == "linux":
                self.logger.info("Downloading and installing Docker Engine...")
                self.install_docker(verbose=verbose)
            else:
                self.logger.info("Downloading Docker Desktop installer...")
                installer_path = self.download_desktop_installer(force=reinstall)
                self.logger.info("Running Docker Desktop installer...")
                self.run_desktop_installer(verbose=verbose, installer_path=installer_path)
        except PlatformNotImplementedError:
            raise
        except Exception:
            self.state = InstallState.FAILED
            raise

        self.state = InstallState.INSTALLED
        self.logger.info("Container runtime installed")
        return steps

    def install_docker(self, verbose: bool = False) -> None:
        if self.system != "linux":
            raise PlatformNotImplementedError(
                "docker install not supported on this operating system, please install docker "
                "manually or perform the automatic docker desktop installation"
            )

        self.state = InstallState.INSTALLING
        url = self._constant(constants.DOCKER_INSTALLER_URL)
        script = paths.get_install_script_path().read_text(encoding="utf-8")
        self.runner.run(
            "bash",
            ["-c", script, "install-docker", url],
            forward_output=verbose,
            cancel=self.cancel,
        )

    def download_desktop_installer(self, force: bool = False) -> Path:
        self.state = InstallState.DOWNLOADING
        url = self._constant(constants.DOCKER_DESKTOP_INSTALLER_URL)
        installer_path = paths.get_desktop_installer_path(self.system)
        self.logger.debug("Docker Desktop installer", url=url, path=str(installer_path))
        return self.downloader.fetch(
            url,
            installer_path,
            force=force,
            sink=self.sink,
            cancel=self.cancel,
        )

    def run_desktop_installer(self, verbose: bool = False, installer_path: Optional[Path] = None) -> None:
        if self.system == "linux":
            raise PlatformNotImplementedError(
                "docker desktop install not supported on linux, please install docker desktop "
                "manually or perform the automatic docker installation"
            )

        self.state = InstallState.INSTALLING
        installer_path = installer_path or paths.get_desktop_installer_path(self.system)
        self.runner.run(
            str(installer_path),
            self.DESKTOP_INSTALLER_FLAGS,
            forward_output=verbose,
            cancel=self.cancel,
        )
