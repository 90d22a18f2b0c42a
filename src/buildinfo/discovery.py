"""Build-time discovery of environment facts.

Only the package version is mandatory: a missing or malformed version raises
DiscoveryError and the build stops. Git state is best-effort and degrades to
``vcs=None``. Host and interpreter facts come from the interpreter running
the build and cannot fail.
"""

import platform
import subprocess
import sysconfig
import tomllib
from importlib import metadata
from pathlib import Path

import structlog

from buildinfo.errors import DiscoveryError
from buildinfo.models import FactSet, VcsFacts, is_valid_version
from buildinfo.settings import BuildInfoSettings

logger = structlog.get_logger()

UNKNOWN = "unknown"

_OS_ALIASES = {"darwin": "macos", "win32": "windows", "cygwin": "windows"}
_ARCH_ALIASES = {"amd64": "x86_64", "x64": "x86_64", "arm64": "aarch64", "i386": "x86", "i686": "x86"}

# `git rev-parse --abbrev-ref HEAD` prints this on a detached HEAD.
_DETACHED_HEAD = "HEAD"


def run_discovery(settings: BuildInfoSettings | None = None) -> FactSet:
    """Gather every build fact once and return them as a FactSet."""
    if settings is None:
        settings = BuildInfoSettings()
    root = settings.project_root

    package_version = read_package_version(
        root,
        override=settings.package_version,
        package_name=settings.package_name,
    )
    vcs = query_vcs(root) if settings.vcs else None

    facts = FactSet(
        package_version=package_version,
        vcs=vcs,
        os=host_os(),
        arch=host_arch(),
        compiler_version=compiler_version(),
        target=sysconfig.get_platform(),
        profile=settings.profile,
    )
    logger.info(
        "collected build facts",
        package_version=facts.package_version,
        commit=vcs.commit_hash if vcs else None,
        dirty=vcs.dirty if vcs else None,
        target=facts.target,
    )
    return facts


def read_package_version(
    project_root: Path,
    *,
    override: str | None = None,
    package_name: str | None = None,
) -> str:
    """Resolve the package version from the override, pyproject.toml, or installed metadata.

    Raises DiscoveryError when no source yields a well-formed version.
    """
    if override is not None:
        return _validated(override, source="BUILDINFO_PACKAGE_VERSION")

    pyproject = project_root / "pyproject.toml"
    if pyproject.is_file():
        version = _pyproject_version(pyproject)
        if version is not None:
            return _validated(version, source=str(pyproject))

    if package_name:
        try:
            version = metadata.version(package_name)
        except metadata.PackageNotFoundError as e:
            raise DiscoveryError(f"Package {package_name!r} is not installed; cannot read its version") from e
        return _validated(version, source=f"{package_name} distribution metadata")

    raise DiscoveryError(
        f"No package version found: {pyproject} has no [project].version and BUILDINFO_PACKAGE_NAME is not set",
    )


def _pyproject_version(path: Path) -> str | None:
    """Return the static [project].version, or None when it is absent or dynamic."""
    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise DiscoveryError(f"Cannot read {path}: {e}") from e

    version = data.get("project", {}).get("version")
    if version is None:
        return None
    if not isinstance(version, str):
        raise DiscoveryError(f"[project].version in {path} must be a string, got {type(version).__name__}")
    return version


def _validated(version: str, *, source: str) -> str:
    version = version.strip()
    if not is_valid_version(version):
        raise DiscoveryError(f"Malformed package version {version!r} from {source}")
    return version


def _git(args: list[str], cwd: Path) -> str:
    return subprocess.check_output(
        ["git", *args],  # noqa: S607
        cwd=cwd,
        text=True,
        stderr=subprocess.DEVNULL,
    ).strip()


def query_vcs(project_root: Path) -> VcsFacts | None:
    """Read commit, branch and dirty state from git.

    Any failure (git missing, not a repository, no commits yet, permission
    denied) returns None. Only modified tracked files count as dirty.
    """
    try:
        commit_hash = _git(["rev-parse", "HEAD"], project_root)
        branch = _git(["rev-parse", "--abbrev-ref", "HEAD"], project_root)
        status = _git(["status", "--porcelain", "--untracked-files=no"], project_root)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.debug("git query failed, building without vcs info", error=str(e))
        return None

    if not commit_hash:
        return None

    return VcsFacts(
        commit_hash=commit_hash,
        branch=None if branch in ("", _DETACHED_HEAD) else branch,
        dirty=bool(status),
        describe=_git_describe(project_root),
    )


def _git_describe(project_root: Path) -> str | None:
    try:
        return _git(["describe", "--always", "--tags", "--dirty"], project_root) or None
    except (OSError, subprocess.CalledProcessError):
        return None


def host_os() -> str:
    system = platform.system().lower()
    return _OS_ALIASES.get(system, system) or UNKNOWN


def host_arch() -> str:
    machine = platform.machine().lower()
    return _ARCH_ALIASES.get(machine, machine) or UNKNOWN


def compiler_version() -> str:
    """Interpreter that ran the build, e.g. 'CPython 3.12.4'."""
    return f"{platform.python_implementation()} {platform.python_version()}"
