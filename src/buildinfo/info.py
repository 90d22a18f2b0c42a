"""Run-time view of the facts captured when the program was built.

Usage:
    from buildinfo import BuildInfo, lazy_info_str, raw_info

    info = BuildInfo.from_facts(raw_info("mypkg._build_info"))
    print(info)

    # Or format once per process and reuse
    print(lazy_info_str("mypkg._build_info"))
"""

import re
import threading
from typing import Self

from pydantic import BaseModel

from buildinfo.embed import load_module
from buildinfo.models import FactSet, FlatValue, VcsFacts

DEFAULT_MODULE = "_build_info"

UNKNOWN = "unknown"

_VERSION_TRIPLE = re.compile(r"(\d+)(?:\.(\d+))?(?:\.(\d+))?")

_info_str_cache: dict[str, str] = {}
_info_str_lock = threading.Lock()


class BuildInfo(BaseModel, frozen=True):
    """Immutable snapshot of the build environment."""

    package_version: str
    vcs: VcsFacts | None = None
    os: str
    arch: str
    compiler_version: str
    target: str | None = None
    profile: str = "release"

    @classmethod
    def from_facts(cls, facts: FactSet) -> Self:
        """Build from already-validated facts. Never fails."""
        return cls(
            package_version=facts.package_version,
            vcs=facts.vcs,
            os=facts.os,
            arch=facts.arch,
            compiler_version=facts.compiler_version,
            target=facts.target,
            profile=facts.profile,
        )

    @property
    def is_dirty(self) -> bool:
        return self.vcs is not None and self.vcs.dirty

    @property
    def short_commit(self) -> str | None:
        if self.vcs is None:
            return None
        return self.vcs.commit_hash[:7]

    def version_tuple(self) -> tuple[int, int, int]:
        return _version_triple(self.package_version)

    def compiler_version_tuple(self) -> tuple[int, int, int]:
        return _version_triple(self.compiler_version)

    def labeled_fields(self) -> list[tuple[str, str]]:
        """Fields in display order.

        Commit and branch read "unknown" without git info, and dirty is only
        listed when git info exists. Describe and target are omitted when they
        were not captured.
        """
        vcs = self.vcs
        fields = [
            ("version", self.package_version),
            ("commit", vcs.commit_hash if vcs else UNKNOWN),
        ]
        if vcs is not None and vcs.describe is not None:
            fields.append(("describe", vcs.describe))
        fields.append(("branch", (vcs.branch or UNKNOWN) if vcs else UNKNOWN))
        if vcs is not None:
            fields.append(("dirty", "true" if vcs.dirty else "false"))
        fields.extend(
            [
                ("os", self.os),
                ("arch", self.arch),
                ("compiler", self.compiler_version),
            ],
        )
        if self.target is not None:
            fields.append(("target", self.target))
        fields.append(("profile", self.profile))
        return fields

    def format(self, *, multiline: bool = False) -> str:
        """Render as 'label=value; ...' or, with multiline, one 'label: value' per line."""
        fields = self.labeled_fields()
        if multiline:
            return "\n".join(f"{label}: {value}" for label, value in fields)
        return "; ".join(f"{label}={value}" for label, value in fields)

    def to_dict(self) -> dict[str, FlatValue]:
        return FactSet.model_validate(self.model_dump()).to_flat()

    def __str__(self) -> str:
        return self.format()


def _version_triple(text: str) -> tuple[int, int, int]:
    match = _VERSION_TRIPLE.search(text)
    if match is None:
        return (0, 0, 0)
    major, minor, patch = (int(part) if part else 0 for part in match.groups())
    return (major, minor, patch)


def raw_info(module: str = DEFAULT_MODULE) -> FactSet:
    """Return the facts embedded in the generated module."""
    return load_module(module)


def lazy_info_str(module: str = DEFAULT_MODULE) -> str:
    """Formatted build info, computed at most once per process and module.

    Concurrent first callers block on a lock; all of them get the same str object.
    """
    cached = _info_str_cache.get(module)
    if cached is not None:
        return cached
    with _info_str_lock:
        cached = _info_str_cache.get(module)
        if cached is None:
            cached = BuildInfo.from_facts(raw_info(module)).format()
            _info_str_cache[module] = cached
    return cached
