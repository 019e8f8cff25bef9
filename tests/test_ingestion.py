"""
Point Ledger Module Tests

Tests for value normalization, signatures, the stores and the ingestion
engine.
"""

from datetime import date, datetime

import pytest
from openpyxl import Workbook, load_workbook

from point_ledger import (
    ADDED,
    SKIPPED,
    IngestionEngine,
    MalformedBatchError,
    MemoryStore,
    SignatureIndex,
    WorkbookStore,
    normalize_value,
    validate_batch,
)
from point_ledger.signature import record_signature, row_signature


class TestNormalizeValue:
    """Tests for signature value normalization."""

    def test_dates(self):
        assert normalize_value(datetime(2026, 1, 1, 15, 30)) == "2026/01/01"
        assert normalize_value(date(2026, 1, 1)) == "2026/01/01"

    def test_iso_date_string(self):
        assert normalize_value("2026-01-01") == "2026/01/01"
        assert normalize_value("2026/01/01") == "2026/01/01"
        # Only whole-string ISO dates are rewritten
        assert normalize_value("2026-01-01 extra") == "2026-01-01 extra"

    def test_strings_trimmed(self):
        assert normalize_value("  foo ") == "foo"

    def test_numbers(self):
        assert normalize_value(10) == "10"
        assert normalize_value(10.0) == "10"
        assert normalize_value(-2.5) == "-2.5"

    def test_booleans_and_none(self):
        assert normalize_value(True) == "true"
        assert normalize_value(False) == "false"
        assert normalize_value(None) == ""


class TestSignatures:
    """Tests for signature construction."""

    def test_date_spellings_match(self):
        a = {"site": "A", "date": "2026-01-01", "description": "X", "amount": 10}
        b = {"site": "A", "date": "2026/01/01", "description": "X", "amount": 10}
        keys = ("date", "description", "amount")

        assert record_signature(a, keys) == record_signature(b, keys)

    def test_row_maps_by_header_name(self):
        header_map = {"amount": 0, "date": 1, "description": 2, "ImportedAt": 3}
        row = [10, datetime(2026, 1, 1), "X", datetime(2026, 2, 1)]
        record = {"site": "A", "date": "2026/01/01", "description": "X", "amount": 10}
        keys = ("date", "description", "amount")

        assert row_signature(row, header_map, keys) == record_signature(record, keys)

    def test_missing_column_is_empty(self):
        assert row_signature(["a"], {"x": 0}, ("x", "y")) == '["a", ""]'

    def test_index_sees_accepted_records(self):
        index = SignatureIndex(["date", "amount", "ImportedAt"], [])
        record = {"site": "A", "date": "2026/01/01", "amount": 1}

        assert index.contains(record) is False
        index.add(record)
        assert index.contains(dict(record)) is True


class TestValidateBatch:
    """Tests for batch validation."""

    @pytest.mark.parametrize("batch", [
        {"site": "A"},
        "not a list",
        None,
        [1, 2],
        [{"date": "2026/01/01"}],
        [{"site": ""}],
        [{"site": 5}],
        [{"site": "A", "nested": {"x": 1}}],
        [{"site": "A", "list": [1]}],
        [{"site": "bad/name"}],
        [{"site": "x" * 32}],
    ])
    def test_rejects(self, batch):
        with pytest.raises(MalformedBatchError):
            validate_batch(batch)

    def test_accepts(self, sample_records):
        assert validate_batch(sample_records) is sample_records
        assert validate_batch([]) == []

    def test_error_names_record(self):
        with pytest.raises(MalformedBatchError) as exc_info:
            validate_batch([{"site": "A"}, "oops"])

        assert exc_info.value.index == 1
        assert "Record 1" in exc_info.value.message

    def test_sites_differing_only_in_case(self):
        with pytest.raises(MalformedBatchError) as exc_info:
            validate_batch([{"site": "Ponta", "amount": 1}, {"site": "ponta", "amount": 2}])

        assert exc_info.value.index == 1


class TestIngestionEngine:
    """Tests for the ingestion engine with an in-memory store."""

    @pytest.fixture
    def store(self):
        return MemoryStore()

    @pytest.fixture
    def engine(self, store, fixed_clock):
        return IngestionEngine(store, clock=fixed_clock)

    def test_end_to_end_two_calls(self, engine):
        batch = [{"site": "A", "date": "2026/01/01", "description": "X", "amount": 10}]

        first = engine.ingest(batch).to_response()
        second = engine.ingest(batch).to_response()

        assert first == {
            "status": "success",
            "message": "1 items added.",
            "addedCount": 1,
            "results": [{"status": "added"}],
        }
        assert second["addedCount"] == 0
        assert second["results"] == [{"status": "skipped"}]

    def test_idempotent(self, engine, sample_records):
        first = engine.ingest(sample_records)
        second = engine.ingest(sample_records)

        assert first.added_count == len(sample_records)
        assert second.added_count == 0
        assert second.outcomes == [SKIPPED] * len(sample_records)

    def test_headers_from_first_record(self, engine, store, sample_records):
        engine.ingest(sample_records)

        assert store.get_headers("A") == ["date", "description", "amount", "ImportedAt"]
        assert store.get_headers("B") == ["date", "service", "description", "amount", "ImportedAt"]
        assert store.read_rows("A") == [
            ["2026/01/01", "X", 10, datetime(2026, 2, 10, 9, 30)],
            ["2026/01/03", "Y", 20, datetime(2026, 2, 10, 9, 30)],
        ]

    def test_within_batch_duplicates(self, engine):
        batch = [
            {"site": "A", "date": "2026/01/01", "description": "X", "amount": 10},
            {"site": "A", "date": "2026/01/01", "description": "X", "amount": 10},
        ]

        result = engine.ingest(batch)

        assert result.outcomes == [ADDED, SKIPPED]
        assert result.added_count == 1

    def test_order_preserved_across_sites(self, engine):
        engine.ingest([{"site": "B", "date": "2026/01/01", "amount": 1}])

        batch = [
            {"site": "A", "date": "2026/01/01", "amount": 1},
            {"site": "B", "date": "2026/01/01", "amount": 1},
            {"site": "A", "date": "2026/01/01", "amount": 1},
            {"site": "B", "date": "2026/01/02", "amount": 2},
        ]
        result = engine.ingest(batch)

        assert result.outcomes == [ADDED, SKIPPED, SKIPPED, ADDED]
        assert result.added_by_site == {"A": 1, "B": 1}

    def test_date_spelling_dedup(self, engine):
        engine.ingest([{"site": "A", "date": "2026-01-01", "description": "X", "amount": 10}])
        result = engine.ingest([{"site": "A", "date": "2026/01/01", "description": "X", "amount": 10}])

        assert result.outcomes == [SKIPPED]

    def test_header_stability(self, engine, store):
        engine.ingest([{"site": "A", "date": "2026/01/01", "amount": 10, "description": "X"}])

        extra = engine.ingest([
            {"site": "A", "date": "2026/01/02", "amount": 5, "description": "Y", "service": "S"},
        ])
        missing = engine.ingest([{"site": "A", "date": "2026/01/03", "amount": 7}])

        assert extra.outcomes == [ADDED]
        assert missing.outcomes == [ADDED]
        assert store.get_headers("A") == ["date", "amount", "description", "ImportedAt"]

        rows = store.read_rows("A")
        assert rows[1][:3] == ["2026/01/02", 5, "Y"]
        assert rows[2][:3] == ["2026/01/03", 7, ""]

    def test_existing_headers_reordered_by_name(self, store, fixed_clock):
        store.write_headers("A", ["amount", "description", "date", "ImportedAt"])
        store.append_rows("A", [[10, "X", "2026/01/01", datetime(2026, 1, 2)]])
        engine = IngestionEngine(store, clock=fixed_clock)

        result = engine.ingest([
            {"site": "A", "date": "2026/01/01", "description": "X", "amount": 10},
            {"site": "A", "date": "2026/01/05", "description": "Z", "amount": 3},
        ])

        assert result.outcomes == [SKIPPED, ADDED]
        assert store.read_rows("A")[-1] == [3, "Z", "2026/01/05", datetime(2026, 2, 10, 9, 30)]

    def test_table_without_header_row(self, store, engine):
        store._tables["A"] = []

        engine.ingest([{"site": "A", "date": "2026/01/01", "amount": 1}])

        assert store.get_headers("A") == ["date", "amount", "ImportedAt"]

    def test_imported_at_field_not_duplicated(self, engine, store):
        batch = [{"site": "A", "date": "2026/01/01", "amount": 1, "ImportedAt": "2025/12/31"}]

        first = engine.ingest(batch)
        second = engine.ingest(batch)

        assert store.get_headers("A") == ["date", "amount", "ImportedAt"]
        assert store.read_rows("A") == [["2026/01/01", 1, datetime(2026, 2, 10, 9, 30)]]
        assert first.outcomes == [ADDED]
        assert second.outcomes == [SKIPPED]

    def test_malformed_batch_writes_nothing(self, engine, store):
        batch = [
            {"site": "A", "date": "2026/01/01", "amount": 1},
            {"date": "2026/01/02", "amount": 2},
        ]

        with pytest.raises(MalformedBatchError):
            engine.ingest(batch)

        assert store.sites() == []

    def test_empty_batch(self, engine, store):
        result = engine.ingest([])

        assert result.to_response()["results"] == []
        assert result.added_count == 0
        assert store.sites() == []


class TestWorkbookStore:
    """Tests for the openpyxl-backed store."""

    @pytest.fixture
    def path(self, tmp_path):
        return tmp_path / "ledger" / "points.xlsx"

    def test_creates_sheet_per_site(self, path, sample_records, fixed_clock):
        IngestionEngine(WorkbookStore(path), clock=fixed_clock).ingest(sample_records)

        wb = load_workbook(path)
        assert wb.sheetnames == ["A", "B"]

        ws = wb["A"]
        assert [c.value for c in ws[1]] == ["date", "description", "amount", "ImportedAt"]
        assert ws["A1"].font.bold is True
        assert ws.freeze_panes == "A2"
        assert ws.max_row == 3
        assert ws["D2"].value == datetime(2026, 2, 10, 9, 30)

    def test_idempotent_across_reopen(self, path, fixed_clock):
        batch = [
            {"site": "wester", "date": "2026/01/11", "service": "ICOCA",
             "description": "Foo【取消】", "amount": -50, "isCancellation": True},
            {"site": "wester", "date": "2026/01/13", "service": "ICOCA",
             "description": "Foo", "amount": 50, "isCancellation": False},
        ]

        first = IngestionEngine(WorkbookStore(path), clock=fixed_clock).ingest(batch)
        second = IngestionEngine(WorkbookStore(path), clock=fixed_clock).ingest(batch)

        assert first.added_count == 2
        assert second.outcomes == [SKIPPED, SKIPPED]
        assert load_workbook(path)["wester"].max_row == 3

    def test_date_cells_match_strings(self, path, fixed_clock):
        wb = Workbook()
        ws = wb.active
        ws.title = "A"
        ws.append(["date", "description", "amount", "ImportedAt"])
        ws.append([datetime(2026, 1, 1), "X", 10, datetime(2026, 1, 2)])
        path.parent.mkdir(parents=True)
        wb.save(path)

        result = IngestionEngine(WorkbookStore(path), clock=fixed_clock).ingest([
            {"site": "A", "date": "2026-01-01", "description": "X", "amount": 10},
        ])

        assert result.outcomes == [SKIPPED]

    def test_no_write_when_nothing_added(self, path):
        store = WorkbookStore(path)
        store.flush()

        assert not path.exists()

    def test_site_case_collision_rejected(self, path, fixed_clock):
        IngestionEngine(WorkbookStore(path), clock=fixed_clock).ingest(
            [{"site": "Ponta", "date": "2026/01/01", "amount": 1}]
        )

        engine = IngestionEngine(WorkbookStore(path), clock=fixed_clock)
        with pytest.raises(MalformedBatchError) as exc_info:
            engine.ingest([{"site": "ponta", "date": "2026/01/02", "amount": 2}])

        assert "Ponta" in exc_info.value.message
        wb = load_workbook(path)
        assert wb.sheetnames == ["Ponta"]
        assert wb["Ponta"].max_row == 2

    def test_control_characters_stripped(self, path, fixed_clock):
        batch = [{"site": "A", "date": "2026/01/01", "description": "X\x01Y", "amount": 1}]

        first = IngestionEngine(WorkbookStore(path), clock=fixed_clock).ingest(batch)
        second = IngestionEngine(WorkbookStore(path), clock=fixed_clock).ingest(batch)

        assert first.outcomes == [ADDED]
        assert second.outcomes == [SKIPPED]
        assert load_workbook(path)["A"]["B2"].value == "XY"
