"""Handoff of build facts from the build step to the shipped artifact.

The build hook renders the FactSet as a Python module of literal constants.
That module is packaged with the program and imported at run time; nothing
is queried again. Build tools that pass data through the environment can use
the BUILDINFO_FACT_* bridge instead.
"""

import contextlib
import importlib
import os
import tempfile
from collections.abc import Mapping
from pathlib import Path

import structlog
from pydantic import ValidationError

from buildinfo.errors import EmbeddedFactsError
from buildinfo.models import FLAT_FIELDS, FactSet, FlatValue

logger = structlog.get_logger()

ENV_PREFIX = "BUILDINFO_FACT_"

_HEADER = "# Auto-generated by buildinfo at build time. Do not edit.\n"

_TRUE_VALUES = {"1", "true", "yes"}

# World-readable so the module keeps usable permissions once copied into a wheel.
_MODULE_FILE_MODE = 0o644


def render_module(facts: FactSet) -> str:
    """Render facts as module source. Identical facts give identical text."""
    lines = [_HEADER]
    lines.extend(f"{name.upper()} = {value!r}" for name, value in facts.to_flat().items())
    return "\n".join(lines) + "\n"


def write_module(facts: FactSet, path: Path) -> Path:
    """Write the generated module atomically via temp-file-then-rename."""
    path.parent.mkdir(parents=True, exist_ok=True)
    content = render_module(facts)

    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp", prefix=".build_info_")
    fd_owned = True
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            fd_owned = False  # os.fdopen took ownership; it will close fd
            f.write(content)
        os.chmod(tmp_path, _MODULE_FILE_MODE)  # noqa: PTH101
        Path(tmp_path).replace(path)
    except BaseException:
        if fd_owned:
            with contextlib.suppress(OSError):
                os.close(fd)
        with contextlib.suppress(OSError):
            Path(tmp_path).unlink()
        raise
    logger.info("wrote build info module", path=str(path))
    return path


def load_module(name: str) -> FactSet:
    """Import a generated module by dotted name and return its facts."""
    try:
        module = importlib.import_module(name)
    except ImportError as e:
        raise EmbeddedFactsError(f"Build info module {name!r} not found; was the build hook run?") from e

    missing = [field for field in FLAT_FIELDS if not hasattr(module, field.upper())]
    if missing:
        raise EmbeddedFactsError(f"Build info module {name!r} is missing {', '.join(f.upper() for f in missing)}")

    return _facts_from_flat({field: getattr(module, field.upper()) for field in FLAT_FIELDS}, origin=name)


def env_lines(facts: FactSet) -> list[str]:
    """Render facts as KEY=value lines for an environment-variable bridge."""
    return [f"{ENV_PREFIX}{name.upper()}={_env_value(value)}" for name, value in facts.to_flat().items()]


def facts_from_env(environ: Mapping[str, str] | None = None) -> FactSet:
    """Read facts written by env_lines back out of the environment."""
    if environ is None:
        environ = os.environ
    flat: dict[str, FlatValue] = {}
    for field in FLAT_FIELDS:
        raw = environ.get(ENV_PREFIX + field.upper(), "")
        flat[field] = raw or None
    if flat["vcs_dirty"] is not None:
        flat["vcs_dirty"] = str(flat["vcs_dirty"]).lower() in _TRUE_VALUES
    return _facts_from_flat(flat, origin=f"{ENV_PREFIX}* environment")


def _env_value(value: FlatValue) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def _facts_from_flat(flat: Mapping[str, FlatValue], *, origin: str) -> FactSet:
    try:
        return FactSet.from_flat(flat)
    except ValidationError as e:
        raise EmbeddedFactsError(f"Malformed build facts in {origin}: {e}") from e
