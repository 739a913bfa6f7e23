"""
Pipeline Orchestrator.

Runs the batch stages in order over one source snapshot:
load -> normalize -> build dimensions -> link facts -> aggregate.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Union

import pandas as pd

from src.models.order import NormalizedRecord
from src.pipeline.aggregation import AggregationEngine
from src.pipeline.dimensions import DimensionBuilder
from src.pipeline.ingestion import RawRecordLoader
from src.pipeline.linking import FactLinker
from src.pipeline.normalization import FieldNormalizer, ValidationSummary
from src.registry.dimension_registry import StarSchema
from src.utils.storage import StorageManager

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Everything a completed run produces."""
    validation: ValidationSummary
    schema: StarSchema
    reports: Dict[str, pd.DataFrame] = field(default_factory=dict)
    output_dir: Optional[str] = None


class PipelineOrchestrator:
    """
    Orchestrates a single-pass batch run.

    Coordinates:
    1. Loading → 2. Normalization + validation summary
    → 3. Dimension building → 4. Fact linking → 5. Aggregation
    → 6. Optional export

    Dimensions are fully built before any fact is linked, and the schema is
    frozen before reporting. Fatal errors (SourceUnavailable,
    DanglingReference) propagate before any report is produced.
    """

    def __init__(
        self,
        loader: Optional[RawRecordLoader] = None,
        normalizer: Optional[FieldNormalizer] = None,
        storage: Optional[StorageManager] = None
    ):
        """
        Initialize pipeline orchestrator.

        Args:
            loader: Source reader (default settings if omitted)
            normalizer: Field normalizer (default settings if omitted)
            storage: If given, tables, reports and validation summary are exported
        """
        self.loader = loader or RawRecordLoader()
        self.normalizer = normalizer or FieldNormalizer()
        self.dimension_builder = DimensionBuilder()
        self.fact_linker = FactLinker()
        self.storage = storage

    def run(self, source: Union[str, Path]) -> PipelineResult:
        """
        Run the complete pipeline over a source file.

        Args:
            source: Path to the order dataset

        Returns:
            PipelineResult with validation summary, star schema and reports
        """
        logger.info(f"Starting pipeline for {source}")
        start_time = datetime.now()

        # STAGE 1-2: Loading and normalization
        validation = ValidationSummary()
        valid_records: List[NormalizedRecord] = []
        for raw in self.loader.load(source):
            result = self.normalizer.normalize(raw)
            validation.observe(result)
            if result.is_valid:
                valid_records.append(result.record)

        logger.info(
            f"Normalized {validation.total_records} records: "
            f"{validation.valid_records} valid, {validation.invalid_records} invalid"
        )

        # STAGE 3: Dimensions (complete before any linking)
        schema = self.dimension_builder.build(valid_records)

        # STAGE 4: Facts
        self.fact_linker.link(valid_records, schema)
        schema.freeze()

        # STAGE 5: Reports
        reports = AggregationEngine(schema).run_all()

        result = PipelineResult(validation=validation, schema=schema, reports=reports)

        # STAGE 6: Export
        if self.storage is not None:
            self.storage.save_tables(schema.to_frames())
            self.storage.save_reports(reports)
            self.storage.save_validation_summary(validation.to_dict())
            result.output_dir = self.storage.output_root

        processing_time = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Pipeline complete in {processing_time:.2f}s: "
            f"{len(schema.facts)} facts, {len(reports)} reports"
        )
        return result
