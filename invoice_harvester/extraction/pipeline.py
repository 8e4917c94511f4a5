"""
Upload pipeline orchestration.

Coordinates the flow: enqueue → mark processing → extract (concurrently) → resolve
"""

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any, Iterable

from invoice_harvester.core.models import Record, Template, UploadedFile
from invoice_harvester.extraction.models import ExtractedInvoice
from invoice_harvester.extraction.service import ExtractionFailure, Extractor
from invoice_harvester.observability.logger import get_logger, log_operation
from invoice_harvester.observability.metrics import (
    extraction_duration_seconds,
    extraction_results_total,
    increment_counter,
    track_duration,
)
from invoice_harvester.store.record_tracker import RecordTracker

logger = get_logger(__name__)

EMPTY_RESPONSE_MESSAGE = "The extraction service returned no data for this document."
DEFAULT_ERROR_MESSAGE = "An error occurred while extracting this document."


class UploadPipeline:
    """
    Drives uploaded documents through the record lifecycle.

    Flow:
    1. Enqueue one record per file as "uploading"
    2. Move every record to "processing"
    3. Run the extractor for all files on a thread pool
    4. Resolve each record to processed, needs_validation or error as its
       extraction completes

    Extraction calls run concurrently, but the tracker is only touched from
    the thread that called process(). A record deleted while its extraction
    is in flight is simply skipped when the result arrives.
    """

    def __init__(self, tracker: RecordTracker, extractor: Extractor, max_workers: int = 4):
        """
        Initialize upload pipeline.

        Args:
            tracker: Record lifecycle tracker
            extractor: Extraction collaborator
            max_workers: Maximum concurrent extraction calls
        """
        self.tracker = tracker
        self.extractor = extractor
        self.max_workers = max(1, max_workers)

    def enqueue(self, files: Iterable[UploadedFile], upload_template: Template | None = None) -> list[Record]:
        """Register files as uploading records without starting extraction."""
        template_name = upload_template.name if upload_template else None
        return [
            self.tracker.enqueue(file, status="uploading", active_template_name=template_name)
            for file in files
        ]

    def process(self, files: Iterable[UploadedFile], upload_template: Template | None = None) -> dict[str, Any]:
        """
        Upload and extract a batch of files.

        Args:
            files: Documents to process
            upload_template: Upload template whose columns guide product extraction

        Returns:
            Dictionary with processing results:
            - record_ids: Ids of the records created, in file order
            - processed: Records resolved as processed
            - needs_validation: Records with an empty extraction
            - error: Records whose extraction failed
            - skipped: Results dropped because the record was deleted
        """
        files = list(files)
        columns = list(upload_template.columns) if upload_template else None
        results = {"record_ids": [], "processed": 0, "needs_validation": 0, "error": 0, "skipped": 0}
        if not files:
            return results

        with log_operation(
            "Processing upload batch",
            logger=logger,
            files=len(files),
            extractor=self.extractor.name,
            template_name=upload_template.name if upload_template else None,
        ):
            records = self.enqueue(files, upload_template)
            results["record_ids"] = [r.id for r in records]

            for record in records:
                self.tracker.advance(record.id, "processing")

            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="extract") as executor:
                futures: dict[Future, str] = {
                    executor.submit(self._extract, file, columns): record.id
                    for record, file in zip(records, files)
                }
                for future in as_completed(futures):
                    status = self._resolve(futures[future], future)
                    results[status] += 1

        logger.info(
            "Upload batch complete",
            extra={k: v for k, v in results.items() if k != "record_ids"},
        )
        return results

    def _extract(self, file: UploadedFile, columns: list[str] | None) -> ExtractedInvoice | None:
        with track_duration(extraction_duration_seconds, extractor=self.extractor.name):
            return self.extractor.extract(file, columns)

    def _resolve(self, record_id: str, future: Future) -> str:
        """Apply one finished extraction to its record and return the outcome bucket."""
        try:
            invoice = future.result()
        except ExtractionFailure as e:
            status, payload, message = "error", e.message, None
        except Exception as e:
            logger.exception("Unexpected extraction error", extra={"record_id": record_id})
            status, payload, message = "error", str(e) or DEFAULT_ERROR_MESSAGE, None
        else:
            if invoice is None or invoice.is_empty():
                status, payload, message = "needs_validation", {}, EMPTY_RESPONSE_MESSAGE
            else:
                status, payload, message = "processed", invoice.to_extracted_values(), None

        updated = self.tracker.advance(record_id, status, payload, message=message)
        if updated is None:
            return "skipped"

        increment_counter(extraction_results_total, extractor=self.extractor.name, status=status)
        return status
