"""Build facts captured once at build time."""

import re
from collections.abc import Mapping
from typing import Any, Self

from pydantic import BaseModel, Field, field_validator

# Release segment followed by optional pre/post/dev/local parts, e.g.
# "1.2.3", "1.2.3-beta.1", "0.4.0rc1", "2.0.0+local.7".
# Each suffix segment takes its whole alphanumeric run possessively, so a
# rejected version fails in linear time.
VERSION_PATTERN = re.compile(r"^\d+(?:\.\d+)*(?:[-+._]?[0-9A-Za-z]++)*$")

# Order of the flattened facts, shared by the generated module and the env bridge.
FLAT_FIELDS = (
    "package_version",
    "vcs_commit_hash",
    "vcs_branch",
    "vcs_dirty",
    "vcs_describe",
    "os",
    "arch",
    "compiler_version",
    "target",
    "profile",
)

type FlatValue = str | bool | None


def is_valid_version(value: str) -> bool:
    return VERSION_PATTERN.match(value) is not None


class VcsFacts(BaseModel, frozen=True):
    """Git state of the working tree the build ran from."""

    commit_hash: str = Field(min_length=1)
    branch: str | None = None  # None on a detached HEAD
    dirty: bool = False  # tracked files modified; untracked files are ignored
    describe: str | None = None  # `git describe --always --tags --dirty`


class FactSet(BaseModel, frozen=True):
    """Raw environment facts gathered by the discovery step."""

    package_version: str
    vcs: VcsFacts | None = None
    os: str
    arch: str
    compiler_version: str
    target: str | None = None
    profile: str = "release"

    @field_validator("package_version")
    @classmethod
    def _validate_package_version(cls, v: str) -> str:
        if not is_valid_version(v):
            raise ValueError(f"Invalid package version: {v!r}")
        return v

    def to_flat(self) -> dict[str, FlatValue]:
        """Flatten into primitive values keyed by FLAT_FIELDS."""
        vcs = self.vcs
        return {
            "package_version": self.package_version,
            "vcs_commit_hash": vcs.commit_hash if vcs else None,
            "vcs_branch": vcs.branch if vcs else None,
            "vcs_dirty": vcs.dirty if vcs else None,
            "vcs_describe": vcs.describe if vcs else None,
            "os": self.os,
            "arch": self.arch,
            "compiler_version": self.compiler_version,
            "target": self.target,
            "profile": self.profile,
        }

    @classmethod
    def from_flat(cls, flat: Mapping[str, Any]) -> Self:
        """Rebuild from flattened values. A missing commit hash means no VCS facts."""
        vcs = None
        if flat.get("vcs_commit_hash"):
            vcs = VcsFacts(
                commit_hash=flat["vcs_commit_hash"],
                branch=flat.get("vcs_branch") or None,
                dirty=flat.get("vcs_dirty") or False,
                describe=flat.get("vcs_describe") or None,
            )
        return cls(
            package_version=flat.get("package_version"),
            vcs=vcs,
            os=flat.get("os"),
            arch=flat.get("arch"),
            compiler_version=flat.get("compiler_version"),
            target=flat.get("target") or None,
            profile=flat.get("profile") or "release",
        )
