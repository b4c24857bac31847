"""Management of the virtual machine that hosts the container runtime on macOS."""

from __future__ import annotations

import os
import platform
import subprocess
import tarfile
from pathlib import Path
from typing import BinaryIO

from crux.runtime_state import (
    CommandError,
    ExecResult,
    LimaDownloadError,
    RuntimeDestroyError,
    RuntimeExecError,
    RuntimeNotCreatedError,
    RuntimeNotRunningError,
    RuntimeStopError,
    State,
)

LIMA_VERSION = "2.0.3"
INSTANCE_NAME = "crux"
CONFIG_FILE = "lima.yaml"
LIMACTL_BIN = "limactl"

STATUS_RUNNING = "Running"
STATUS_STOPPED = "Stopped"

RELEASE_BASE_ENV = "CRUX_LIMA_RELEASE_BASE"
DEFAULT_RELEASE_BASE = "https://releases.example.com/lima"

_ARM_NAMES = {"arm64", "aarch64"}
_PASSTHROUGH_ENV = ("PATH", "HOME", "USER", "TMPDIR")


def _machine(machine: str | None) -> str:
    return (machine if machine is not None else platform.machine()).strip().lower()


def lima_arch(machine: str | None = None) -> str:
    """Return the architecture name used in the VM configuration ("aarch64" or "x86_64")."""
    return "aarch64" if _machine(machine) in _ARM_NAMES else "x86_64"


def download_arch(machine: str | None = None) -> str:
    """Return the architecture name used in release asset file names ("arm64" or "x86_64")."""
    return "arm64" if _machine(machine) in _ARM_NAMES else "x86_64"


def lima_download_url(machine: str | None = None) -> str:
    """Return the release archive URL of the pinned Lima distribution for macOS."""
    base = os.environ.get(RELEASE_BASE_ENV, "").strip() or DEFAULT_RELEASE_BASE
    return (
        f"{base.rstrip('/')}/v{LIMA_VERSION}/"
        f"lima-{LIMA_VERSION}-Darwin-{download_arch(machine)}.tar.gz"
    )


def _inside(root: str, candidate: str) -> bool:
    return candidate == root or candidate.startswith(root + os.sep)


def _check_member(member: tarfile.TarInfo, root: str) -> str:
    target = os.path.realpath(os.path.join(root, member.name))
    if not _inside(root, target):
        raise LimaDownloadError(f"archive entry {member.name!r} escapes the destination")
    if member.issym():
        link = os.path.realpath(os.path.join(os.path.dirname(target), member.linkname))
        if not _inside(root, link):
            raise LimaDownloadError(f"archive link {member.name!r} escapes the destination")
    elif member.islnk():
        link = os.path.realpath(os.path.join(root, member.linkname))
        if not _inside(root, link):
            raise LimaDownloadError(f"archive link {member.name!r} escapes the destination")
    return target


def extract_lima(stream: BinaryIO, dest: str | os.PathLike[str]) -> Path:
    """Extract a gzipped Lima distribution into dest and return the limactl path.

    Entries keep their layout and permissions. Raises LimaDownloadError if the
    archive is unreadable, unsafe, or holds no bin/limactl.
    """
    root_path = Path(dest)
    extract_kwargs = {"filter": "tar"} if hasattr(tarfile, "tar_filter") else {}
    try:
        root_path.mkdir(parents=True, exist_ok=True)
        root = os.path.realpath(root_path)
        with tarfile.open(fileobj=stream, mode="r|gz") as archive:
            for member in archive:
                if member.isdev():
                    continue
                _check_member(member, root)
                archive.extract(member, root, **extract_kwargs)
    except (tarfile.TarError, OSError, EOFError) as exc:
        raise LimaDownloadError(str(exc)) from exc

    limactl = root_path / "bin" / LIMACTL_BIN
    if not limactl.is_file():
        raise LimaDownloadError("limactl not found in archive")
    return limactl


class Lima:
    """Handle to the crux Lima instance, driven through the limactl command."""

    def __init__(
        self,
        limactl: str | os.PathLike[str],
        lima_home: str | os.PathLike[str],
        host_socket: str | os.PathLike[str] | None = None,
    ):
        self.limactl = os.fspath(limactl)
        self.lima_home = os.fspath(lima_home)
        self.host_socket = os.fspath(host_socket) if host_socket is not None else None

    def env(self) -> dict[str, str]:
        """Environment for limactl: LIMA_HOME plus PATH, HOME, USER and TMPDIR when set."""
        environment = {"LIMA_HOME": self.lima_home}
        for key in _PASSTHROUGH_ENV:
            value = os.environ.get(key, "")
            if value:
                environment[key] = value
        return environment

    def run(self, *args: str) -> None:
        """Run a limactl subcommand; raise CommandError if it fails."""
        subcommand = args[0] if args else ""
        try:
            completed = subprocess.run(
                [self.limactl, *args],
                env=self.env(),
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as exc:
            raise CommandError(subcommand, 1, str(exc)) from exc
        if completed.returncode != 0:
            output = completed.stdout.decode(errors="replace").strip()
            raise CommandError(subcommand, completed.returncode, output)

    def status(self) -> State:
        """Return whether the VM is running, stopped, or not created."""
        try:
            completed = subprocess.run(
                [self.limactl, "list", "--format={{.Status}}", INSTANCE_NAME],
                env=self.env(),
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError:
            return State.NOT_CREATED
        if completed.returncode != 0:
            return State.NOT_CREATED
        output = completed.stdout.decode(errors="replace").strip()
        if output == STATUS_RUNNING:
            return State.RUNNING
        if output == STATUS_STOPPED:
            return State.STOPPED
        return State.NOT_CREATED

    def _remove_host_socket(self) -> None:
        if self.host_socket is None:
            return
        try:
            os.remove(self.host_socket)
        except OSError:
            pass

    def stop(self) -> None:
        """Shut the VM down gracefully; raise RuntimeNotRunningError if it is not running."""
        if self.status() is not State.RUNNING:
            raise RuntimeNotRunningError()
        try:
            self.run("stop", INSTANCE_NAME)
        except CommandError as exc:
            raise RuntimeStopError(str(exc)) from exc
        self._remove_host_socket()

    def destroy(self) -> None:
        """Force-delete the VM and its disks; raise RuntimeNotCreatedError if there is none."""
        if self.status() is State.NOT_CREATED:
            raise RuntimeNotCreatedError()
        try:
            self.run("delete", "--force", INSTANCE_NAME)
        except CommandError as exc:
            raise RuntimeDestroyError(str(exc)) from exc
        self._remove_host_socket()

    def exec(self, command: str, *args: str) -> ExecResult:
        """Run a command inside the running VM and capture its output and exit code."""
        if self.status() is not State.RUNNING:
            raise RuntimeNotRunningError()
        try:
            completed = subprocess.run(
                [self.limactl, "shell", INSTANCE_NAME, command, *args],
                env=self.env(),
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=False,
            )
        except OSError as exc:
            raise RuntimeExecError(str(exc)) from exc
        return ExecResult(
            stdout=completed.stdout.decode(errors="replace"),
            stderr=completed.stderr.decode(errors="replace"),
            exit_code=completed.returncode,
        )