"""Runtime states, errors and command results."""

from __future__ import annotations

import enum
import json
import os
from dataclasses import dataclass

CRUXD_VERSION = "0.2.4"
RELEASE_BASE_ENV = "CRUX_CRUXD_RELEASE_BASE"
DEFAULT_RELEASE_BASE = "https://releases.example.com/cruxd"


class State(enum.Enum):
    """Current state of the container runtime environment."""

    NOT_CREATED = 0
    STOPPED = 1
    RUNNING = 2

    def __str__(self) -> str:
        return _STATE_LABELS.get(self, "unknown")


_STATE_LABELS = {
    State.NOT_CREATED: "not created",
    State.STOPPED: "stopped",
    State.RUNNING: "running",
}


class RuntimeFailure(Exception):
    """Base class for runtime environment errors."""

    default_message = "runtime failure"

    def __init__(self, detail: str | None = None):
        self.detail = detail
        message = self.default_message if not detail else f"{self.default_message}: {detail}"
        super().__init__(message)


class UnsupportedPlatformError(RuntimeFailure):
    default_message = "unsupported platform"


class RuntimeNotCreatedError(RuntimeFailure):
    default_message = "runtime has not been created"


class RuntimeAlreadyRunningError(RuntimeFailure):
    default_message = "runtime is already running"


class RuntimeNotRunningError(RuntimeFailure):
    default_message = "runtime is not running"


class RuntimeStartError(RuntimeFailure):
    default_message = "failed to start runtime"


class RuntimeStopError(RuntimeFailure):
    default_message = "failed to stop runtime"


class RuntimeDestroyError(RuntimeFailure):
    default_message = "failed to destroy runtime"


class RuntimeExecError(RuntimeFailure):
    default_message = "failed to execute command in runtime"


class RuntimeConfigError(RuntimeFailure):
    default_message = "failed to generate runtime configuration"


class LimaDownloadError(RuntimeFailure):
    default_message = "failed to download lima"


class DaemonInstallError(RuntimeFailure):
    default_message = "failed to install cruxd"


class CommandError(RuntimeFailure):
    """A failed runtime command; the raw output is kept for diagnostics."""

    def __init__(self, subcommand: str, exit_code: int, output: str):
        self.subcommand = subcommand
        self.exit_code = exit_code
        self.output = output
        Exception.__init__(self, self.__str__())

    def __str__(self) -> str:
        return f"runtime command {json.dumps(self.subcommand)} exited with code {self.exit_code}"


@dataclass(frozen=True)
class ExecResult:
    """Output captured from a command executed inside the runtime."""

    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0


def cruxd_download_url(arch: str) -> str:
    """Return the release archive URL of the pinned daemon for a Linux architecture."""
    base = os.environ.get(RELEASE_BASE_ENV, "").strip() or DEFAULT_RELEASE_BASE
    return f"{base.rstrip('/')}/v{CRUXD_VERSION}/cruxd-linux-{arch}.tar.gz"