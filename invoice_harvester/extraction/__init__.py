"""
Extraction collaborators: wire models, the prompt service client, the
simulated extractor and the upload pipeline.
"""

from .client import PromptServiceClient
from .models import ExtractedInvoice, ExtractedProduct, ExtractionRequest, clean_number, clean_text
from .pipeline import UploadPipeline
from .service import ExtractionFailure, Extractor, to_data_uri
from .simulated import FALLBACK_PRODUCTS, SimulatedExtractor

__all__ = [
    "ExtractionRequest",
    "ExtractedInvoice",
    "ExtractedProduct",
    "clean_number",
    "clean_text",
    "Extractor",
    "ExtractionFailure",
    "to_data_uri",
    "PromptServiceClient",
    "SimulatedExtractor",
    "FALLBACK_PRODUCTS",
    "UploadPipeline",
]
