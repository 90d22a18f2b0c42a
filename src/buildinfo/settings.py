"""Build hook configuration via environment variables."""

from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings


class BuildInfoSettings(BaseSettings):
    model_config = {"env_prefix": "BUILDINFO_"}

    # Directory holding pyproject.toml and the git working tree
    project_root: Path = Path()

    # Installed distribution to read the version from when pyproject.toml has none
    package_name: str | None = None

    # CI override -- takes precedence over every other version source
    package_version: str | None = None

    # Generated module location, relative to project_root unless absolute
    output_path: Path = Path("_build_info.py")

    profile: str = "release"

    # Set BUILDINFO_VCS=false to skip the git query entirely
    vcs: bool = True

    @field_validator("package_name", "package_version", mode="before")
    @classmethod
    def _empty_as_unset(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def resolved_output_path(self) -> Path:
        if self.output_path.is_absolute():
            return self.output_path
        return self.project_root / self.output_path
