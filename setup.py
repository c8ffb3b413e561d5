"""Custom setup.py writing multidb/_build_info.py during the build.

pyproject.toml holds the project metadata; this script only registers the
build_py hook, which cannot be wired through an entry point for the package's
own build.
"""

import subprocess
import sys
from datetime import UTC, datetime
from pathlib import Path

from setuptools import setup
from setuptools.command.build_py import build_py

PACKAGE = "multidb"

_BUILD_INFO_TEMPLATE = '''\
"""Build information - generated at build time, do not edit."""

COMMIT_HASH = "{commit_full}"
COMMIT_SHORT = "{commit_short}"
BUILD_TIME = "{build_time}"
MODIFIED = {modified}
'''


def _git(*args: str) -> str | None:
    """Return git's stdout, or None when git or the repository is unavailable."""
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            timeout=5,
            cwd=Path(__file__).parent,
        )
    except (subprocess.SubprocessError, OSError):
        return None
    return result.stdout.strip() if result.returncode == 0 else None


def write_build_info(package_dir: Path) -> bool:
    commit = _git("rev-parse", "HEAD")
    if not commit:
        print(f"{PACKAGE}: no git metadata, skipping _build_info.py", file=sys.stderr)
        return False

    status = _git("status", "--porcelain")
    content = _BUILD_INFO_TEMPLATE.format(
        commit_full=commit,
        commit_short=commit[:7],
        build_time=datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
        modified=bool(status),
    )
    (package_dir / "_build_info.py").write_text(content)
    print(f"{PACKAGE}: wrote _build_info.py ({commit[:7]})", file=sys.stderr)
    return True


class BuildPyWithBuildInfo(build_py):
    """build_py that adds _build_info.py to the build directory, not the sources."""

    def run(self):
        super().run()
        if self.build_lib:
            package_dir = Path(self.build_lib) / PACKAGE
            if package_dir.is_dir():
                write_build_info(package_dir)


setup(cmdclass={"build_py": BuildPyWithBuildInfo})
