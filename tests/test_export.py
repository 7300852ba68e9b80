"""
Tests for merging batch results back onto the original rows.
"""

import pytest

from payee_core.classification.exceptions import ExportAlignmentError
from payee_core.classification.export import (
    CLASSIFICATION_COLUMNS,
    PAYEE_NAME_COLUMN,
    SUMMARY_COLUMNS,
    export_headers,
    export_rows,
    export_summary_rows,
    export_table,
    to_dataframe,
)
from payee_core.classification.models import BatchProcessingResult, KeywordExclusionResult
from payee_core.pipeline import BatchClassificationPipeline


@pytest.fixture
def batch_with_rows(offline_engine):
    names = ["Bank of America", "John Smith", "Acme Widgets LLC", "Zorblax"]
    rows = [{"Vendor": name, "foo": i} for i, name in enumerate(names)]
    pipeline = BatchClassificationPipeline(engine=offline_engine, persist_results=False)
    return pipeline.process_batch(names, original_rows=rows)


def _batch(items, original=None):
    return BatchProcessingResult(
        results=items,
        success_count=len(items),
        failure_count=0,
        processing_time=0.0,
        original_file_data=original,
    )


# =============================================================================
# ROW EXPORT
# =============================================================================

class TestExportRows:

    def test_original_columns_survive_in_order(self, batch_with_rows):
        records = export_rows(batch_with_rows)

        assert len(records) == 4
        for i, record in enumerate(records):
            assert record["foo"] == i
            assert record["Row_Index"] == i
            assert record["Vendor"] == batch_with_rows.results[i].payee_name

    def test_classification_columns(self, batch_with_rows):
        excluded, individual = export_rows(batch_with_rows)[:2]

        assert excluded["Classification"] == "Business"
        assert excluded["Keyword_Exclusion"] == "Yes"
        assert "BANK" in excluded["Matched_Keywords"].split(", ")
        assert individual["Keyword_Exclusion"] == "No"
        assert individual["Matched_Keywords"] == ""
        assert individual["Levenshtein_Score"] == ""
        assert set(CLASSIFICATION_COLUMNS) <= set(excluded)

    def test_without_original_rows(self, make_item):
        records = export_rows(_batch([make_item(0, "Acme"), make_item(1, "Apex")]))
        assert [record[PAYEE_NAME_COLUMN] for record in records] == ["Acme", "Apex"]

    def test_sic_lookup_backfills_missing_codes(self, make_item, make_result):
        items = [
            make_item(0, "Acme"),
            make_item(1, "Apex", make_result(sic_code="7372", sic_description="Prepackaged Software")),
        ]
        lookup = {"Acme": ("5084", "Industrial Machinery"), "Apex": ("0111", "Wheat")}

        records = export_rows(_batch(items), sic_lookup=lookup)

        assert records[0]["SIC_Code"] == "5084"
        assert records[0]["SIC_Description"] == "Industrial Machinery"
        assert records[1]["SIC_Code"] == "7372"

    def test_row_count_mismatch(self, make_item):
        batch = _batch([make_item(0, "Acme")], original=[{"foo": 0}, {"foo": 1}])
        with pytest.raises(ExportAlignmentError):
            export_rows(batch)

    def test_row_index_mismatch(self, make_item):
        batch = _batch([make_item(0, "Acme"), make_item(5, "Apex")])
        with pytest.raises(ExportAlignmentError):
            export_rows(batch)


# =============================================================================
# TABLE, SUMMARY AND DATAFRAME EXPORT
# =============================================================================

class TestTabularExport:

    def test_headers(self, batch_with_rows):
        assert export_headers(batch_with_rows) == ["Vendor", "foo"] + CLASSIFICATION_COLUMNS

    def test_headers_union_of_row_keys(self, make_item):
        batch = _batch(
            [make_item(0, "Acme"), make_item(1, "Apex")],
            original=[{"Vendor": "Acme"}, {"Vendor": "Apex", "Notes": "late"}],
        )
        table = export_table(batch)

        assert table["headers"][:2] == ["Vendor", "Notes"]
        assert table["rows"][0][1] == ""
        assert table["rows"][1][1] == "late"

    def test_summary_rows(self, batch_with_rows):
        summary = export_summary_rows(batch_with_rows)
        assert list(summary[0].keys()) == SUMMARY_COLUMNS
        assert [row[PAYEE_NAME_COLUMN] for row in summary] == [
            item.payee_name for item in batch_with_rows.results
        ]

    def test_dataframe(self, batch_with_rows):
        df = to_dataframe(batch_with_rows)
        assert list(df.columns) == ["Vendor", "foo"] + CLASSIFICATION_COLUMNS
        assert df["foo"].tolist() == [0, 1, 2, 3]
        assert df["Row_Index"].tolist() == [0, 1, 2, 3]

    def test_missing_exclusion_exports_as_no(self, make_item, make_result):
        result = make_result(exclusion=KeywordExclusionResult.empty())
        record = export_rows(_batch([make_item(0, "Acme", result)]))[0]
        assert record["Keyword_Exclusion"] == "No"
        assert record["Keyword_Confidence"] == 0
