"""Zero-argument build hook.

Run it before the artifact is packaged, either as ``python -m buildinfo`` or
through ``buildinfo.setuptools_hook.build_py``. Configuration comes from
BUILDINFO_* environment variables; the hook takes no arguments.
"""

import sys
from pathlib import Path

import structlog

from buildinfo.discovery import run_discovery
from buildinfo.embed import write_module
from buildinfo.errors import DiscoveryError
from buildinfo.logging import setup_logging
from buildinfo.settings import BuildInfoSettings

logger = structlog.get_logger()


def generate(settings: BuildInfoSettings) -> Path:
    """Run discovery and write the generated module. Returns the module path."""
    facts = run_discovery(settings)
    return write_module(facts, settings.resolved_output_path())


def build_script() -> Path:
    """Collect build facts and embed them for the artifact being built.

    Raises DiscoveryError when the package version cannot be determined.
    """
    setup_logging()
    return generate(BuildInfoSettings())


def main() -> int:
    try:
        build_script()
    except DiscoveryError as e:
        logger.error("build info discovery failed", error=str(e))
        print(f"buildinfo: {e}", file=sys.stderr)
        return 1
    return 0
