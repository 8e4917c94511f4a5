"""
Simulated extractor returning a fixed set of OCR fallback products.

Used when no prompt service is configured, and for demos and tests.
"""

import time
from typing import Sequence

from invoice_harvester.core.models import UploadedFile
from invoice_harvester.extraction.models import ExtractedInvoice
from invoice_harvester.extraction.service import Extractor

FALLBACK_PRODUCTS: list[dict] = [
    {
        "item_code": "433563302746",
        "name": "SILVERCREST® KITCHEN TOOLS SGR 150 E2 5-in-1 elektrische Gemüsereibe - B-Ware sehr gut",
        "quantity": 2,
        "price": 9.24,
    },
    {
        "item_code": "421020142352",
        "name": "BRAUN Epilierer Silk-épil >>3176<, mit Smartlight-Technologie - B-Ware sehr gut",
        "quantity": 1,
        "price": 18.48,
    },
    {
        "item_code": "405532908472",
        "name": "PARKSIDE® Kreuzlinienlaser >>PKLL 10 B3«, mit Stativ - B-Ware neuwertig",
        "quantity": 1,
        "price": 17.65,
    },
    {
        "item_code": "405533493003",
        "name": "SILVERCREST® PERSONAL CARE Haar- und Bartschneider >>SHBS 500 E4«, 2 Aufsteckkämme - B-Ware sehr gut",
        "quantity": 2,
        "price": 5.37,
    },
    {
        "item_code": "694184964658",
        "name": "Masterpro Heißluftfritteuse, >>BGMP-9322<< 1500 W - B-Ware neuwertig",
        "quantity": 2,
        "price": 18.49,
    },
    {
        "item_code": "",
        "name": "Versand mit DHL",
        "quantity": 1,
        "price": 5.03,
    },
]


class SimulatedExtractor(Extractor):
    """
    Returns FALLBACK_PRODUCTS for every document.

    Args:
        delay: Seconds to sleep per call, to mimic a remote service
        products: Override the returned products ([] or None simulates an
                  empty extraction)
    """

    name = "simulated"

    def __init__(self, delay: float = 0.0, products: list[dict] | None = FALLBACK_PRODUCTS):
        self.delay = delay
        self.products = products

    def extract(self, file: UploadedFile, line_item_columns: Sequence[str] | None = None) -> ExtractedInvoice | None:
        if self.delay:
            time.sleep(self.delay)
        if not self.products:
            return None
        return ExtractedInvoice(products=[dict(p) for p in self.products])
