"""Capture build environment metadata at build time and read it back at run time."""

from buildinfo.discovery import run_discovery
from buildinfo.embed import env_lines, facts_from_env, load_module, render_module, write_module
from buildinfo.errors import BuildInfoError, DiscoveryError, EmbeddedFactsError
from buildinfo.hook import build_script
from buildinfo.info import BuildInfo, lazy_info_str, raw_info
from buildinfo.models import FactSet, VcsFacts
from buildinfo.settings import BuildInfoSettings

__all__ = [
    "BuildInfo",
    "BuildInfoError",
    "BuildInfoSettings",
    "DiscoveryError",
    "EmbeddedFactsError",
    "FactSet",
    "VcsFacts",
    "build_script",
    "env_lines",
    "facts_from_env",
    "lazy_info_str",
    "load_module",
    "raw_info",
    "render_module",
    "run_discovery",
    "write_module",
]
