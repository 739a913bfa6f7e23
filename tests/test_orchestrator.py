"""
End-to-end tests for the PipelineOrchestrator and CLI.
"""

import os
from unittest.mock import Mock

import pytest

import main
from src.errors import DanglingReference, SourceUnavailable
from src.orchestrator import PipelineOrchestrator
from src.pipeline.aggregation import REPORT_NAMES
from src.registry.dimension_registry import StarSchema
from src.utils.storage import StorageManager

ROWS = [
    "Karnataka,Bengaluru,Koramangala,Meghana Foods,Biryani,Chicken Biryani,250,4.5,120,05-03-2024",
    "Karnataka,Bengaluru,Koramangala,Meghana Foods,Biryani,Mutton Biryani,320,4.1,80,06-03-2024",
    "Karnataka,Bengaluru,Indiranagar,Truffles,Burgers,Chicken Burger,199,,,10-03-2024",
    "Maharashtra,Pune,Baner,Vaishali,South Indian,Masala Dosa,90,4.6,300,15-04-2024",
    # invalid: malformed date
    "Maharashtra,Pune,Baner,Vaishali,South Indian,Idli,60,4.2,50,2024/04/15",
    # invalid: missing city and price
    "Delhi,,Connaught Place,Haldiram's,Snacks,Samosa,,3.9,20,01-05-2024",
    # invalid: missing restaurant
    "Delhi,New Delhi,Saket,,Desserts,Gulab Jamun,120,4.0,15,02-05-2024",
]


@pytest.fixture
def source(write_csv):
    return write_csv(ROWS, encoding="utf-8-sig")


def test_run_end_to_end(source):
    result = PipelineOrchestrator().run(source)
    schema = result.schema

    assert result.validation.total_records == 7
    assert result.validation.invalid_records == 3
    assert len(schema.facts) == result.validation.total_records - result.validation.invalid_records

    for fact in schema.facts:
        assert fact.location_id in schema.locations
        assert fact.restaurant_id in schema.restaurants
        assert fact.category_id in schema.categories
        assert fact.dish_id in schema.dishes

    assert len(schema.locations) == 3
    assert len(schema.restaurants) == 3
    assert [r.restaurant_name for r in schema.restaurants] == ["Meghana Foods", "Truffles", "Vaishali"]

    assert tuple(result.reports) == REPORT_NAMES
    kpi = result.reports["kpi_summary"].iloc[0]
    assert kpi["total_orders"] == 4
    assert kpi["avg_dish_price"] == 214.75

    summary = result.validation.to_dict()
    assert summary["missing_order_date"] == 1
    assert summary["missing_city"] == 1
    assert summary["missing_price"] == 1
    assert summary["missing_restaurant_name"] == 1
    assert summary["missing_rating"] == 1


def test_overlong_row_counted_not_fatal(write_csv):
    rows = ROWS[:2] + [ROWS[2] + ",unexpected,extra"] + ROWS[3:4]
    path = write_csv(rows)

    result = PipelineOrchestrator().run(path)
    summary = result.validation.to_dict()

    assert summary["total_records"] == 4
    assert summary["invalid_records"] == 1
    assert summary["malformed_records"] == 1
    assert summary["violations_by_field"] == {"malformed_row": 1}
    assert len(result.schema.facts) == 3
    assert result.reports["kpi_summary"].iloc[0]["total_orders"] == 3


def test_schema_frozen_after_run(source):
    result = PipelineOrchestrator().run(source)

    with pytest.raises(RuntimeError):
        result.schema.dishes.add(("Paneer Tikka",))


def test_same_input_same_ids(source):
    first = PipelineOrchestrator().run(source).schema
    second = PipelineOrchestrator().run(source).schema

    for name, frame in first.to_frames().items():
        assert frame.equals(second.to_frames()[name])


def test_exports_tables_reports_and_summary(source, tmp_path):
    storage = StorageManager(tmp_path / "out")

    result = PipelineOrchestrator(storage=storage).run(source)

    assert result.output_dir == storage.output_root
    assert len(storage.load_table("fact_orders")) == 4
    assert list(storage.load_table("dim_location").columns) == ["location_id", "state", "city", "location"]
    for name in REPORT_NAMES:
        assert storage.load_report(name) is not None
    assert os.path.exists(os.path.join(storage.output_root, "validation_summary.json"))


def test_missing_source_aborts_before_reports(tmp_path):
    storage = Mock(spec=StorageManager)

    with pytest.raises(SourceUnavailable):
        PipelineOrchestrator(storage=storage).run(tmp_path / "missing.csv")

    storage.save_reports.assert_not_called()


def test_dangling_reference_propagates(source):
    orchestrator = PipelineOrchestrator()
    orchestrator.dimension_builder = Mock()
    orchestrator.dimension_builder.build.return_value = StarSchema()

    with pytest.raises(DanglingReference):
        orchestrator.run(source)


def test_cli_prints_reports(source, tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        main.main(["--source", str(source), "--no-export"])

    assert excinfo.value.code == 0
    out = capsys.readouterr().out
    assert "invalid_records: 3" in out
    for name in REPORT_NAMES:
        assert name in out


def test_cli_exits_nonzero_on_missing_source(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    with pytest.raises(SystemExit) as excinfo:
        main.main(["--source", str(tmp_path / "missing.csv"), "--no-export"])

    assert excinfo.value.code == 1


# Run tests if executed directly
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
