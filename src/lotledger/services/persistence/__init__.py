"""Flat-file persistence for portfolio state."""

from lotledger.services.persistence.file_manager import DataIntegrityError, PortfolioFileManager

__all__ = [
    "DataIntegrityError",
    "PortfolioFileManager",
]
