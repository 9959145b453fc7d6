"""
LotLedger - Lot-based portfolio accounting

Public API for tracking cash and FIFO purchase lots across shares,
commodities and currencies.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("lotledger")
except PackageNotFoundError:
    __version__ = "0.0.0.dev"  # Not installed (running from source)


__all__ = [
    "__version__",
]
