"""
Integration tests for the workspace session: upload, edit, templates and export.
"""

import csv
import io

import pytest

from invoice_harvester.config import DEFAULT_CONFIG_PATH, Settings
from invoice_harvester.core.models import UploadedFile
from invoice_harvester.extraction import (
    ExtractedInvoice,
    ExtractionFailure,
    Extractor,
    PromptServiceClient,
    SimulatedExtractor,
)
from invoice_harvester.workspace import Workspace

ACME = {
    "supplier": "Acme Ltd",
    "totalPrice": 42.5,
    "currency": "EUR",
    "products": [{"name": "Widget", "quantity": 2, "price": 10}],
}


class FixedExtractor(Extractor):
    """Returns the same payload for every document"""

    name = "fixed"

    def __init__(self, payload: dict | None = None, failure: str | None = None):
        self.payload = payload
        self.failure = failure
        self.columns_seen = []

    def extract(self, file, line_item_columns=None):
        self.columns_seen.append(line_item_columns)
        if self.failure:
            raise ExtractionFailure(self.failure, file.file_name)
        return ExtractedInvoice.model_validate(self.payload) if self.payload else None


def pdf(name: str = "invoice1.pdf") -> UploadedFile:
    return UploadedFile(file_name=name, content=b"%PDF-1.4")


def parse(text: str) -> list[list[str]]:
    return list(csv.reader(io.StringIO(text)))


@pytest.fixture
def workspace() -> Workspace:
    return Workspace(extractor=FixedExtractor(ACME))


@pytest.mark.integration
class TestUploadAndExport:
    """End-to-end flow from upload to CSV"""

    def test_acme_summary_export(self, workspace):
        upload = workspace.upload([pdf()])
        export = workspace.export()

        assert upload.ok
        assert export.ok
        rows = parse(export.data)
        header, row = rows[0], rows[1]
        assert row[header.index("File")] == "invoice1.pdf"
        assert row[header.index("Status")] == "processed"
        assert row[header.index("Total")] == "42.50"
        assert row[header.index("Products")] == "Widget (2x10.00)"
        assert row[header.index("Invoice No.")] == ""

    def test_edit_is_reflected_in_export(self, workspace):
        workspace.upload([pdf()])
        record = workspace.tracker.snapshot()[0]

        workspace.editor.begin_edit(record.id, "total_price")
        workspace.editor.set_buffer("50")
        workspace.editor.handle_key("Enter")

        rows = parse(workspace.export().data)
        assert rows[1][rows[0].index("Total")] == "50.00"
        assert workspace.tracker.get(record.id).status == "processed"

    def test_selected_columns_only(self, workspace):
        workspace.upload([pdf()])
        for key in workspace.schema.keys():
            if key not in ("file_name", "supplier"):
                workspace.dashboard.toggle_export_column(key)

        assert workspace.export().data == '"File","Supplier"\n"invoice1.pdf","Acme Ltd"\n'

    def test_no_columns_selected(self, workspace):
        workspace.upload([pdf()])
        for key in workspace.schema.keys():
            workspace.dashboard.toggle_export_column(key)

        outcome = workspace.export()

        assert not outcome.ok
        assert outcome.level == "warning"

    def test_nothing_to_export(self, workspace):
        outcome = workspace.export()

        assert not outcome.ok
        assert outcome.level == "warning"

    def test_failed_records_are_not_exported(self):
        workspace = Workspace(extractor=FixedExtractor(failure="Service unavailable"))

        upload = workspace.upload([pdf("a.pdf"), pdf("b.pdf")])

        assert not upload.ok
        assert upload.level == "error"
        assert workspace.dashboard.counts().error == 2
        assert not workspace.export().ok

    def test_empty_extraction_needs_validation_and_exports(self):
        workspace = Workspace(extractor=FixedExtractor(None))

        upload = workspace.upload([pdf()])

        assert upload.ok
        assert upload.data["needs_validation"] == 1
        rows = parse(workspace.export().data)
        assert rows[1][rows[0].index("Status")] == "needs_validation"

    def test_upload_without_files(self, workspace):
        outcome = workspace.upload([])

        assert not outcome.ok
        assert outcome.level == "warning"

    def test_line_items_export(self, workspace):
        workspace.upload([pdf()])
        workspace.set_export_mode("line_items", "comprehensive-invoice-export-template")

        rows = parse(workspace.export().data)

        header, row = rows[0], rows[1]
        assert len(rows) == 2
        assert row[header.index("name")] == "Widget"
        assert row[header.index("quantity")] == "2"
        assert row[header.index("price")] == "10.00"
        assert row[header.index("amount")] == "20.00"
        assert row[header.index("description")] == ""
        assert "Products" not in header

    def test_line_items_without_template(self, workspace):
        workspace.upload([pdf()])
        workspace.set_export_mode("line_items")

        outcome = workspace.export()

        assert not outcome.ok
        assert outcome.level == "warning"

    def test_export_mode_rejects_upload_template(self, workspace):
        outcome = workspace.set_export_mode("line_items", "ai-standard-upload-template")

        assert not outcome.ok
        assert workspace.export_template_id is None

    def test_delete_record(self, workspace):
        workspace.upload([pdf()])
        record = workspace.tracker.snapshot()[0]

        assert workspace.delete_record(record.id).ok
        assert len(workspace.tracker) == 0
        assert not workspace.delete_record(record.id).ok


@pytest.mark.integration
class TestTemplates:
    """Template management through the workspace"""

    def test_selected_upload_template_guides_extraction(self):
        extractor = FixedExtractor({"products": [{"ArtNr": "A1", "Einzelpreis": 9.5}]})
        workspace = Workspace(extractor=extractor)
        added = workspace.add_template("Shop ABC", "ArtNr, Einzelpreis", for_upload=True)
        workspace.select_upload_template(added.data.id)

        workspace.upload([pdf()])

        record = workspace.tracker.snapshot()[0]
        assert extractor.columns_seen == [["ArtNr", "Einzelpreis"]]
        assert record.active_template_name == "Shop ABC"
        rows = parse(workspace.export().data)
        assert rows[1][rows[0].index("Products")] == "A1 | 9.50"

    def test_add_duplicate_name_fails(self, workspace):
        outcome = workspace.add_template("comprehensive details (upload)", "a, b", for_upload=True)

        assert not outcome.ok
        assert outcome.level == "error"

    def test_same_name_allowed_across_partitions(self, workspace):
        assert workspace.add_template("Shop ABC", "a", for_upload=True).ok
        assert workspace.add_template("Shop ABC", "a", for_upload=False).ok

    def test_update_default_forks(self, workspace):
        outcome = workspace.update_template("ai-standard-upload-template", columns="item_code, name")

        assert outcome.ok
        assert outcome.data.action == "forked"
        assert workspace.templates.get("ai-standard-upload-template").columns == [
            "item_code", "name", "quantity", "price", "amount",
        ]

    def test_update_unchanged(self, workspace):
        outcome = workspace.update_template("ai-standard-upload-template")

        assert outcome.ok
        assert outcome.data.action == "unchanged"

    def test_update_unknown(self, workspace):
        assert not workspace.update_template("missing", name="x").ok

    def test_remove_default_fails(self, workspace):
        outcome = workspace.remove_template("erpnext-article-default")

        assert not outcome.ok
        assert "erpnext-article-default" in workspace.templates

    def test_remove_clears_selection(self, workspace):
        added = workspace.add_template("Shop ABC", "ArtNr", for_upload=True)
        workspace.select_upload_template(added.data.id)

        assert workspace.remove_template(added.data.id).ok
        assert workspace.upload_template is None

    def test_select_export_template_as_upload_fails(self, workspace):
        outcome = workspace.select_upload_template("erpnext-article-default")

        assert not outcome.ok
        assert workspace.upload_template_id is None


@pytest.mark.integration
class TestFromSettings:
    """Tests for Workspace.from_settings"""

    def test_bundled_config_and_simulation(self):
        workspace = Workspace.from_settings(Settings(config_path=DEFAULT_CONFIG_PATH))

        assert isinstance(workspace.extractor, SimulatedExtractor)
        assert len(workspace.templates) == 5

    def test_missing_config_uses_builtins(self, tmp_path):
        workspace = Workspace.from_settings(Settings(config_path=tmp_path / "missing.yaml"))

        assert workspace.schema.get("products") is not None

    def test_extraction_url_selects_prompt_service(self, tmp_path):
        settings = Settings(
            config_path=tmp_path / "missing.yaml",
            extraction_url="http://localhost:9002/extract",
            extraction_timeout=5,
        )

        with Workspace.from_settings(settings) as workspace:
            assert isinstance(workspace.extractor, PromptServiceClient)
            assert workspace.extractor.timeout == 5

        assert workspace.extractor._client.is_closed

    def test_close_with_simulated_extractor(self, tmp_path):
        """Test closing is a no-op for extractors without connections"""
        with Workspace.from_settings(Settings(config_path=tmp_path / "missing.yaml")) as workspace:
            workspace.upload([pdf()])

        assert len(workspace.tracker) == 1

    def test_simulated_end_to_end(self, tmp_path):
        workspace = Workspace.from_settings(Settings(config_path=tmp_path / "missing.yaml"))

        workspace.upload([pdf("a.pdf"), pdf("b.pdf")])

        rows = parse(workspace.export().data)
        assert len(rows) == 3
        assert rows[1][rows[0].index("Products")].startswith("SILVERCREST® KITCHEN TOOLS")
