"""dbuswire - Typed decoder for D-Bus message arguments."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("dbuswire")
except PackageNotFoundError:
    __version__ = "(local)"
