"""
HTTP client for the invoice prompt service.
"""

from typing import Sequence

import httpx
from pydantic import ValidationError as PydanticValidationError

from invoice_harvester.core.models import UploadedFile
from invoice_harvester.extraction.models import ExtractedInvoice
from invoice_harvester.extraction.service import ExtractionFailure, Extractor
from invoice_harvester.observability.logger import get_logger

logger = get_logger(__name__)


class PromptServiceClient(Extractor):
    """
    Posts the document to a prompt service and normalizes the JSON answer.

    The service receives {"pdfDataUri": ..., "lineItemColumns": [...]} and
    answers with the camelCase invoice payload, or null/{} when it found
    nothing.
    """

    name = "prompt_service"

    def __init__(self, url: str, timeout: float = 60.0, client: httpx.Client | None = None):
        """
        Args:
            url: Endpoint receiving the extraction request
            timeout: Request timeout in seconds
            client: Preconfigured httpx client (tests pass one with a mock transport)
        """
        self.url = url
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)

    def extract(self, file: UploadedFile, line_item_columns: Sequence[str] | None = None) -> ExtractedInvoice | None:
        request = self.build_request(file, line_item_columns)

        try:
            response = self._client.post(self.url, json=request.to_wire())
            response.raise_for_status()
            body = response.json()
        except httpx.TimeoutException:
            logger.error("Prompt service timed out", extra={"url": self.url, "file_name": file.file_name})
            raise ExtractionFailure(f"Extraction request timed out after {self.timeout}s", file.file_name)
        except httpx.HTTPStatusError as e:
            logger.error(
                "Prompt service returned an error",
                extra={"url": self.url, "file_name": file.file_name, "status_code": e.response.status_code},
            )
            raise ExtractionFailure(f"Extraction service error: HTTP {e.response.status_code}", file.file_name)
        except httpx.HTTPError as e:
            logger.error("Prompt service request failed", extra={"url": self.url, "file_name": file.file_name})
            raise ExtractionFailure(f"Extraction request failed: {e}", file.file_name)
        except ValueError:
            raise ExtractionFailure("Extraction service returned invalid JSON", file.file_name)

        if not body:
            return None
        if not isinstance(body, dict):
            raise ExtractionFailure("Extraction service returned an unexpected payload", file.file_name)

        try:
            invoice = ExtractedInvoice.model_validate(body)
        except PydanticValidationError as e:
            raise ExtractionFailure(f"Extraction payload rejected: {e.errors()[0]['msg']}", file.file_name)

        return None if invoice.is_empty() else invoice

    def close(self) -> None:
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
