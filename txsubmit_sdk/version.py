"""
Version information for the txsubmit SDK.

Installed copies report the distribution metadata; a source checkout falls
back to the version declared in its pyproject.toml.
"""
import importlib.metadata
from pathlib import Path

import tomli

DISTRIBUTION = "txsubmit-sdk"
FALLBACK_VERSION = "0.1.0"
PYPROJECT = Path(__file__).resolve().parent.parent / "pyproject.toml"


def pyproject_version(path: Path = PYPROJECT) -> str:
    """
    Read ``[project] version`` from a pyproject file.

    Raises:
        OSError: If the file cannot be opened
        KeyError: If the table or key is missing
        tomli.TOMLDecodeError: If the file is not valid TOML
    """
    with path.open("rb") as f:
        return tomli.load(f)["project"]["version"]


def get_version(pyproject: Path = PYPROJECT) -> str:
    try:
        return importlib.metadata.version(DISTRIBUTION)
    except importlib.metadata.PackageNotFoundError:
        pass
    try:
        return pyproject_version(pyproject)
    except (OSError, KeyError, tomli.TOMLDecodeError):
        return FALLBACK_VERSION


__version__ = get_version()
