"""setuptools integration.

    # setup.py
    from setuptools import setup

    from buildinfo.setuptools_hook import build_py

    setup(cmdclass={"build_py": build_py})

Point BUILDINFO_OUTPUT_PATH inside a package (e.g. ``src/mypkg/_build_info.py``)
so the generated module is collected into the wheel.
"""

from setuptools.command.build_py import build_py as _build_py

from buildinfo.hook import generate
from buildinfo.settings import BuildInfoSettings


class build_py(_build_py):  # noqa: N801
    """build_py that writes the build info module before collecting sources."""

    def run(self) -> None:
        generate(BuildInfoSettings())
        super().run()
