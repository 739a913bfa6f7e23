"""
Storage utility.

File I/O helpers for exporting the star schema, reports and validation summary.
"""

import json
import os
import logging
from typing import Dict, Optional

import pandas as pd

logger = logging.getLogger(__name__)


class StorageManager:
    """
    Manages file output for a pipeline run.

    Handles:
    - Star-schema tables (output/tables/<table>.csv)
    - Reports (output/reports/<report>.csv)
    - Validation summary (output/validation_summary.json)
    """

    def __init__(self, output_root: str):
        """
        Initialize storage manager.

        Args:
            output_root: Root output directory (e.g., /path/to/output)
        """
        self.output_root = str(output_root)
        self.tables_dir = os.path.join(self.output_root, "tables")
        self.reports_dir = os.path.join(self.output_root, "reports")

        os.makedirs(self.tables_dir, exist_ok=True)
        os.makedirs(self.reports_dir, exist_ok=True)

        logger.info(f"Initialized StorageManager with output_root={self.output_root}")

    def save_tables(self, tables: Dict[str, pd.DataFrame]) -> None:
        """
        Save dimension and fact tables as CSV.

        Args:
            tables: DataFrames keyed by table name (e.g., "dim_location")
        """
        for name, frame in tables.items():
            self._write_csv(frame, os.path.join(self.tables_dir, f"{name}.csv"))
        logger.info(f"Saved {len(tables)} tables to {self.tables_dir}")

    def save_reports(self, reports: Dict[str, pd.DataFrame]) -> None:
        """Save each report as CSV."""
        for name, frame in reports.items():
            self._write_csv(frame, os.path.join(self.reports_dir, f"{name}.csv"))
        logger.info(f"Saved {len(reports)} reports to {self.reports_dir}")

    def save_validation_summary(self, summary: Dict) -> str:
        """
        Save the validation summary as JSON.

        Returns:
            Path to the written file
        """
        filepath = os.path.join(self.output_root, "validation_summary.json")
        try:
            with open(filepath, 'w') as f:
                json.dump(summary, f, indent=2)
            logger.info(f"Saved validation summary to {filepath}")
        except Exception as e:
            logger.error(f"Failed to save validation summary: {e}")
            raise
        return filepath

    def load_table(self, name: str) -> Optional[pd.DataFrame]:
        """
        Load a previously saved table.

        Returns:
            DataFrame, or None if the table was never saved
        """
        return self._read_csv(os.path.join(self.tables_dir, f"{name}.csv"))

    def load_report(self, name: str) -> Optional[pd.DataFrame]:
        """Load a previously saved report, or None if missing."""
        return self._read_csv(os.path.join(self.reports_dir, f"{name}.csv"))

    def _write_csv(self, frame: pd.DataFrame, filepath: str) -> None:
        try:
            frame.to_csv(filepath, index=False)
            logger.debug(f"Wrote {len(frame)} rows to {filepath}")
        except Exception as e:
            logger.error(f"Failed to write {filepath}: {e}")
            raise

    def _read_csv(self, filepath: str) -> Optional[pd.DataFrame]:
        if not os.path.exists(filepath):
            logger.debug(f"No file found at {filepath}")
            return None
        return pd.read_csv(filepath)
