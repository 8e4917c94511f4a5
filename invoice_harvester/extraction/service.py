"""
Extractor interface.

An extractor turns an uploaded document into an ExtractedInvoice. Returning
None means the service answered but produced nothing usable; raising
ExtractionFailure means the call itself failed.
"""

import base64
from abc import ABC, abstractmethod
from typing import Sequence

from invoice_harvester.core.models import UploadedFile
from invoice_harvester.extraction.models import ExtractedInvoice, ExtractionRequest


class ExtractionFailure(Exception):
    """Raised when a document could not be extracted; the message is shown on the record."""

    def __init__(self, message: str, file_name: str | None = None):
        self.message = message
        self.file_name = file_name
        super().__init__(message)


def to_data_uri(file: UploadedFile) -> str:
    """Encode file content as a base64 data URI."""
    if file.content is None:
        raise ExtractionFailure("File content is not available", file_name=file.file_name)
    encoded = base64.b64encode(file.content).decode("ascii")
    return f"data:{file.content_type};base64,{encoded}"


class Extractor(ABC):
    """Base class for extraction collaborators."""

    name: str = "extractor"

    @abstractmethod
    def extract(self, file: UploadedFile, line_item_columns: Sequence[str] | None = None) -> ExtractedInvoice | None:
        """
        Extract invoice data from one document.

        Args:
            file: The uploaded document
            line_item_columns: Upload template columns to look for in product lines

        Returns:
            The normalized invoice, or None for an empty response

        Raises:
            ExtractionFailure: If the document could not be processed
        """
        pass

    def close(self) -> None:
        """Release resources held by the extractor (HTTP connections)."""

    @staticmethod
    def build_request(file: UploadedFile, line_item_columns: Sequence[str] | None = None) -> ExtractionRequest:
        return ExtractionRequest(
            pdf_data_uri=to_data_uri(file),
            line_item_columns=list(line_item_columns) if line_item_columns else None,
        )
