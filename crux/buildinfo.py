"""Build metadata: version, stage, git commit and target architecture."""

from __future__ import annotations

import platform
from dataclasses import dataclass

UNDEFINED = "(undefined)"
LOCAL_BUILD = "(local)"
MAIN_BRANCH = "main"

_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "x64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
}


def arch() -> str:
    """Return the architecture of the running interpreter (e.g. "amd64", "arm64")."""
    machine = platform.machine().strip().lower()
    if not machine:
        return UNDEFINED
    return _ARCH_ALIASES.get(machine, machine)


@dataclass(frozen=True)
class BuildInfo:
    """Version information stamped into a build by the release pipeline."""

    version: str = ""
    stage: str = ""
    git_commit: str = ""

    def normalized_version(self) -> str:
        """Return the version without surrounding space or a leading "v"."""
        value = self.version.strip()
        if not value:
            return UNDEFINED
        value = value.lower()
        if value.startswith("v"):
            value = value[1:]
        return value

    def normalized_stage(self) -> str:
        """Return the lower-cased development stage (usually the branch name)."""
        value = self.stage.strip()
        if not value:
            return UNDEFINED
        return value.lower()

    def commit(self) -> str:
        """Return the git commit hash."""
        value = self.git_commit.strip()
        return value or UNDEFINED

    def is_local(self) -> bool:
        """A build is local when any of version, commit or stage is unset."""
        return not (self.version.strip() and self.git_commit.strip() and self.stage.strip())

    def version_string(self) -> str:
        """Return "<version>[+<stage>] <commit> [<arch>]", or "(local)"."""
        if self.is_local():
            return LOCAL_BUILD
        stage = self.normalized_stage()
        suffix = "" if stage == MAIN_BRANCH else f"+{stage}"
        return f"{self.normalized_version()}{suffix} {self.commit()} [{arch()}]"