"""
Workspace: one user session over the invoice dashboard.

Owns the record tracker, the template store, the editor and dashboard views
and the upload pipeline, and turns every user-triggered operation into an
Outcome so no exception crosses the user-facing boundary.
"""

from typing import Any, Iterable, Literal

from invoice_harvester.config import Settings
from invoice_harvester.core.models import EXPORTABLE_STATUSES, Outcome, Schema, Template, UploadedFile, default_schema
from invoice_harvester.core.schema import HarvesterConfigLoader
from invoice_harvester.core.validators import ValidationError
from invoice_harvester.dashboard import Dashboard
from invoice_harvester.editor import TabularEditor
from invoice_harvester.export import to_delimited_text, to_line_items_text
from invoice_harvester.extraction import Extractor, PromptServiceClient, SimulatedExtractor, UploadPipeline
from invoice_harvester.observability.logger import get_logger
from invoice_harvester.store import ProtectedEntityError, RecordTracker, TemplateNotFoundError, TemplateStore

logger = get_logger(__name__)

ExportMode = Literal["summary", "line_items"]


class Workspace:
    """
    Session facade composing every component.

    Usage:
        workspace = Workspace.from_settings(Settings.from_env())
        workspace.select_upload_template("ai-standard-upload-template")
        workspace.upload([UploadedFile(file_name="a.pdf", content=b"...")])
        csv_text = workspace.export().data
    """

    def __init__(
        self,
        schema: Schema | None = None,
        templates: Iterable[Template] | None = None,
        extractor: Extractor | None = None,
        max_workers: int = 4,
    ):
        """
        Args:
            schema: Active schema (defaults to the built-in invoice schema)
            templates: Seed templates (defaults to the built-in set)
            extractor: Extraction collaborator (defaults to the simulated one)
            max_workers: Concurrent extraction calls per upload batch
        """
        self.schema = schema or default_schema()
        self.templates = TemplateStore(templates)
        self.tracker = RecordTracker()
        self.extractor = extractor or SimulatedExtractor()
        self.pipeline = UploadPipeline(self.tracker, self.extractor, max_workers=max_workers)
        self.editor = TabularEditor(
            self.tracker,
            self.schema,
            template_lookup=self._upload_template_by_name,
            on_delete=self._remove_record,
        )
        self.dashboard = Dashboard(self.tracker, self.editor)

        self.upload_template_id: str | None = None
        self.export_mode: ExportMode = "summary"
        self.export_template_id: str | None = None

    @classmethod
    def from_settings(cls, settings: Settings, extractor: Extractor | None = None) -> "Workspace":
        """
        Build a workspace from runtime settings.

        Schema and seed templates come from the YAML config when the file
        exists. Without an explicit extractor, a configured extraction URL
        selects the prompt service client, otherwise the simulation.
        """
        schema = None
        templates = None
        if settings.config_path.exists():
            config = HarvesterConfigLoader(settings.config_path).load()
            schema = config.schema_
            templates = config.templates or None
        else:
            logger.warning("Configuration file not found, using built-in defaults",
                           extra={"config_path": str(settings.config_path)})

        if extractor is None:
            if settings.extraction_url:
                extractor = PromptServiceClient(settings.extraction_url, timeout=settings.extraction_timeout)
            else:
                extractor = SimulatedExtractor()

        return cls(schema=schema, templates=templates, extractor=extractor, max_workers=settings.max_workers)

    def close(self) -> None:
        self.extractor.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    @property
    def upload_template(self) -> Template | None:
        return self.templates.get(self.upload_template_id) if self.upload_template_id else None

    def _upload_template_by_name(self, name: str) -> Template | None:
        return self.templates.find_by_name(name, for_upload=True)

    def select_upload_template(self, template_id: str | None) -> Outcome:
        if template_id is None:
            self.upload_template_id = None
            return Outcome.success("Standard extraction selected")

        template = self.templates.get(template_id)
        if template is None or not template.for_upload:
            return Outcome.warning(f"Upload template not found: {template_id}")

        self.upload_template_id = template.id
        return Outcome.success(f"Upload template \"{template.name}\" selected", data=template)

    def add_template(self, name: str | None, columns: Any, for_upload: bool = False) -> Outcome:
        try:
            template = self.templates.add(name, columns, for_upload=for_upload)
        except ValidationError as e:
            return Outcome.failure(e.message)
        return Outcome.success(f"Template \"{template.name}\" added", data=template)

    def update_template(
        self,
        template_id: str,
        name: str | None = None,
        columns: Any = None,
        for_upload: bool | None = None,
    ) -> Outcome:
        try:
            result = self.templates.update(template_id, name=name, columns=columns, for_upload=for_upload)
        except TemplateNotFoundError as e:
            return Outcome.failure(str(e))
        except ValidationError as e:
            return Outcome.failure(e.message)

        if result.action == "unchanged":
            return Outcome.success("No changes to save", data=result)
        if result.action == "forked":
            return Outcome.success(
                f"Default templates cannot be modified; saved as new template \"{result.template.name}\"",
                data=result,
            )
        return Outcome.success(f"Template \"{result.template.name}\" updated", data=result)

    def remove_template(self, template_id: str) -> Outcome:
        try:
            removed = self.templates.remove(template_id)
        except (TemplateNotFoundError, ProtectedEntityError) as e:
            return Outcome.failure(str(e))

        if self.upload_template_id == template_id:
            self.upload_template_id = None
        if self.export_template_id == template_id:
            self.export_template_id = None
        return Outcome.success(f"Template \"{removed.name}\" deleted", data=removed)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def upload(self, files: Iterable[UploadedFile]) -> Outcome:
        files = list(files)
        if not files:
            return Outcome.warning("No files selected")

        results = self.pipeline.process(files, self.upload_template)
        message = (
            f"{len(files)} file(s) processed: {results['processed']} processed, "
            f"{results['needs_validation']} need validation, {results['error']} failed"
        )
        if results["error"] and not results["processed"] and not results["needs_validation"]:
            return Outcome(ok=False, message=message, level="error", data=results)
        return Outcome.success(message, data=results)

    def delete_record(self, record_id: str) -> Outcome:
        record = self.tracker.get(record_id)
        if record is None:
            return Outcome.warning(f"Record not found: {record_id}")
        self.editor.delete(record_id)
        return Outcome.success(f"File {record.file_name} deleted")

    def _remove_record(self, record_id: str) -> None:
        self.tracker.remove(record_id)

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def set_export_mode(self, mode: ExportMode, export_template_id: str | None = None) -> Outcome:
        if mode not in ("summary", "line_items"):
            return Outcome.failure(f"Unknown export mode: {mode}")

        self.export_mode = mode
        if export_template_id is not None:
            template = self.templates.get(export_template_id)
            if template is None or template.for_upload:
                return Outcome.warning(f"Export template not found: {export_template_id}")
            self.export_template_id = template.id
        return Outcome.success(f"Export mode set to {mode}")

    def export(self) -> Outcome:
        """
        Serialize the exportable records with the current export settings.

        Returns:
            Outcome whose data is the CSV text
        """
        records = self.tracker.snapshot()
        if not any(r.status in EXPORTABLE_STATUSES for r in records):
            return Outcome.warning("No processed or needs-validation files to export")

        selected = self.dashboard.selected_export_keys

        if self.export_mode == "line_items":
            template = self.templates.get(self.export_template_id) if self.export_template_id else None
            try:
                text = to_line_items_text(records, self.schema, template, selected)
            except ValidationError as e:
                return Outcome.warning(e.message)
        else:
            if not selected:
                return Outcome.warning("Select at least one column to export")
            text = to_delimited_text(records, self.schema, selected, template_lookup=self._upload_template_by_name)

        if len(text.splitlines()) <= 1:
            return Outcome.warning("No rows matched the export selection")
        return Outcome.success("CSV export complete", data=text)
