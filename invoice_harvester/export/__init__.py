"""
CSV export of processed records.
"""

from .csv_serializer import to_delimited_text, to_line_items_text

__all__ = ["to_delimited_text", "to_line_items_text"]
