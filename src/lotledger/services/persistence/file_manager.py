"""Flat-file persistence for portfolio state.

File layout (one record per line, '|' separated, '.' decimal point):

    HEADER|<cash>|<current_day>
    LOT|<KIND>|<SYMBOL>|<UNIT_PRICE>|<QUANTITY>|<PURCHASE_DAY>
    ...

The header must come first and appear exactly once. Lots follow in ledger
insertion order, oldest lot first per symbol. Loading re-hydrates lots
through bulk_load(), so no cash moves on load.
"""

from pathlib import Path

from lotledger.services.portfolio.exceptions import PortfolioError
from lotledger.services.portfolio.models import (
    RECORD_SEPARATOR,
    Asset,
    LotRecord,
    PortfolioConfig,
    PortfolioHeader,
    format_decimal,
    to_decimal,
)
from lotledger.services.portfolio.service import PortfolioService
from lotledger.system.log_system import LoggerFactory

logger = LoggerFactory.get_logger()

HEADER_TAG = "HEADER"
LOT_TAG = "LOT"


class DataIntegrityError(Exception):
    """Persisted portfolio file is missing, unreadable or corrupted."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class PortfolioFileManager:
    """
    Save and load portfolios as flat text files.

    Example:
        >>> manager = PortfolioFileManager()
        >>> manager.save(portfolio, "portfolio.txt")
        >>> restored = manager.load("portfolio.txt")
        >>> restored.get_cash() == portfolio.get_cash()
        True
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def save(self, portfolio: PortfolioService, path: str | Path) -> Path:
        """
        Write portfolio state to `path` (overwrites).

        Args:
            portfolio: Portfolio to persist
            path: Destination file

        Returns:
            Path written

        Raises:
            DataIntegrityError: If the file cannot be written
        """
        path = Path(path)
        header = portfolio.get_header()
        records = portfolio.export_lots()

        lines = [self._header_line(header)]
        lines.extend(f"{LOT_TAG}{RECORD_SEPARATOR}{record.to_line()}" for record in records)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with path.open("w", encoding=self.encoding, newline="\n") as f:
                f.write("\n".join(lines) + "\n")
        except OSError as e:
            logger.error("file_manager.save_failed", path=str(path), error=str(e))
            raise DataIntegrityError(f"Cannot write portfolio file {path}: {e}") from e

        logger.info(
            "file_manager.portfolio_saved",
            path=str(path),
            cash=str(header.cash),
            current_day=header.current_day,
            lots=len(records),
        )
        return path

    def load(self, path: str | Path, config: PortfolioConfig | None = None) -> PortfolioService:
        """
        Rebuild a portfolio from `path`.

        Args:
            path: Source file
            config: Base configuration (valuation rules, symbol cap); cash and
                day always come from the file header

        Returns:
            Re-hydrated portfolio

        Raises:
            DataIntegrityError: If the file is missing or any record is invalid
        """
        path = Path(path)
        try:
            with path.open("r", encoding=self.encoding) as f:
                raw_lines = f.read().splitlines()
        except FileNotFoundError as e:
            raise DataIntegrityError(f"Portfolio file not found: {path}") from e
        except OSError as e:
            raise DataIntegrityError(f"Cannot read portfolio file {path}: {e}") from e

        portfolio: PortfolioService | None = None
        lot_count = 0

        for line_number, raw_line in enumerate(raw_lines, start=1):
            line = raw_line.strip()
            if not line:
                continue

            tag, _, payload = line.partition(RECORD_SEPARATOR)

            if tag == HEADER_TAG:
                if portfolio is not None:
                    raise DataIntegrityError("Duplicate HEADER record", line_number)
                header = self._parse_header(payload, line_number)
                try:
                    portfolio = PortfolioService.from_header(header, config)
                except ValueError as e:
                    raise DataIntegrityError(f"Invalid header values: {e}", line_number) from e

            elif tag == LOT_TAG:
                if portfolio is None:
                    raise DataIntegrityError("LOT record before HEADER", line_number)
                self._load_lot(portfolio, payload, line_number)
                lot_count += 1

            else:
                raise DataIntegrityError(f"Unknown record type: {tag!r}", line_number)

        if portfolio is None:
            raise DataIntegrityError(f"Missing HEADER record in {path}")

        logger.info(
            "file_manager.portfolio_loaded",
            path=str(path),
            cash=str(portfolio.get_cash()),
            current_day=portfolio.get_current_day(),
            symbols=portfolio.get_holdings_count(),
            lots=lot_count,
        )
        return portfolio

    @staticmethod
    def _header_line(header: PortfolioHeader) -> str:
        return RECORD_SEPARATOR.join([HEADER_TAG, format_decimal(header.cash), str(header.current_day)])

    @staticmethod
    def _parse_header(payload: str, line_number: int) -> PortfolioHeader:
        parts = payload.split(RECORD_SEPARATOR)
        if len(parts) != 2:
            raise DataIntegrityError(f"HEADER needs 2 fields, got {len(parts)}", line_number)

        cash_text, day_text = parts
        try:
            cash = to_decimal(cash_text.strip(), "Cash")
            day = int(day_text.strip())
        except (PortfolioError, ValueError) as e:
            raise DataIntegrityError(f"Invalid header: {e}", line_number) from e

        return PortfolioHeader(cash=cash, current_day=day)

    @staticmethod
    def _load_lot(portfolio: PortfolioService, payload: str, line_number: int) -> None:
        try:
            record = LotRecord.parse(payload)
            asset = Asset(record.kind, record.symbol, record.unit_price)
            portfolio.bulk_load(asset, record.quantity, record.purchase_day)
        except PortfolioError as e:
            raise DataIntegrityError(f"Invalid lot record: {e}", line_number) from e
