"""Landmark-to-measurement geometry engine for digital smile design."""
from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("smiledesign")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"
