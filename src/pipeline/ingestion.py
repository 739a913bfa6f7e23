"""
Raw Record Loader.

Reads the flat order dataset lazily and yields one RawRecord per row,
with encoding artifacts stripped from the column names.
"""

import logging
from pathlib import Path
from typing import Iterator, List, Sequence, Union

import pandas as pd

from src.errors import SourceUnavailable
from src.models.order import RawRecord
import config.settings as settings

logger = logging.getLogger(__name__)


def clean_header(name: str, artifacts: Sequence[str] = settings.BOM_ARTIFACTS) -> str:
    """
    Strip byte-order-mark artifacts and surrounding whitespace from a column name.

    Handles both the raw U+FEFF marker and its mojibake form, which appears
    when a UTF-8 file with a BOM was decoded as Latin-1 somewhere upstream.
    """
    cleaned = str(name)
    stripped = True
    while stripped:
        stripped = False
        for artifact in artifacts:
            if cleaned.startswith(artifact):
                cleaned = cleaned[len(artifact):]
                stripped = True
    return cleaned.strip()


class RawRecordLoader:
    """
    Streams RawRecords from a CSV source.

    Rows are read in chunks, so the returned iterator is lazy and can only
    be consumed once; call load() again to re-read the source. Every value
    is kept verbatim as text (empty cells become empty strings).
    """

    def __init__(
        self,
        encoding: str = settings.SOURCE_ENCODING,
        chunk_size: int = settings.READ_CHUNK_SIZE,
        expected_columns: Sequence[str] = settings.EXPECTED_COLUMNS
    ):
        """
        Initialize loader.

        Args:
            encoding: Text encoding of the source file
            chunk_size: Number of rows read per chunk
            expected_columns: Column names checked after header cleanup
        """
        self.encoding = encoding
        self.chunk_size = chunk_size
        self.expected_columns = tuple(expected_columns)

    def load(self, source: Union[str, Path]) -> Iterator[RawRecord]:
        """
        Yield RawRecords from the source file.

        Args:
            source: Path to the CSV dataset

        Yields:
            RawRecord per data row, numbered from 1. Rows with more fields
            than the header are yielded with malformed=True and no values,
            after the well-formed rows of the chunk they were read in.

        Raises:
            SourceUnavailable: If the file cannot be read or has no data rows
                (raised on first iteration, since loading is lazy)
        """
        source = str(source)
        row_number = 0
        bad_lines: List[List[str]] = []

        def _hold_bad_line(fields: List[str]) -> None:
            bad_lines.append(fields)
            return None  # Drop the row from the chunk

        def _flush_bad_lines() -> Iterator[RawRecord]:
            nonlocal row_number
            while bad_lines:
                fields = bad_lines.pop(0)
                row_number += 1
                logger.warning(
                    f"Row {row_number}: got {len(fields)} fields, "
                    f"more than the header allows; row skipped"
                )
                yield RawRecord(row_number=row_number, malformed=True)

        try:
            reader = pd.read_csv(
                source,
                dtype=str,
                keep_default_na=False,
                encoding=self.encoding,
                chunksize=self.chunk_size,
                engine="python",
                on_bad_lines=_hold_bad_line,
            )
            with reader:
                columns = None
                for chunk in reader:
                    if columns is None:
                        columns = self._clean_columns(list(chunk.columns))
                    chunk.columns = columns

                    # Short rows are padded with NaN; keep them as empty text
                    for fields in chunk.fillna("").to_dict("records"):
                        row_number += 1
                        yield RawRecord(row_number=row_number, fields=fields)

                    yield from _flush_bad_lines()

                yield from _flush_bad_lines()

        except pd.errors.EmptyDataError as e:
            raise SourceUnavailable(source, "file is empty") from e
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise SourceUnavailable(source, f"cannot parse: {e}") from e
        except OSError as e:
            raise SourceUnavailable(source, str(e)) from e

        if row_number == 0:
            raise SourceUnavailable(source, "no data rows")

        logger.info(f"Loaded {row_number} raw records from {source}")

    def _clean_columns(self, columns: List[str]) -> List[str]:
        cleaned = [clean_header(column) for column in columns]

        for before, after in zip(columns, cleaned):
            if before != after:
                logger.warning(f"Stripped header artifact: {before!r} -> {after!r}")

        missing = [column for column in self.expected_columns if column not in cleaned]
        if missing:
            logger.warning(f"Source is missing expected columns: {missing}")

        return cleaned
