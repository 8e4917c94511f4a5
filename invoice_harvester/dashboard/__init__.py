"""
Dashboard filtering and summary counts.
"""

from .aggregator import ALL, Dashboard, SummaryCounts, filter_records, summary_counts

__all__ = ["ALL", "Dashboard", "SummaryCounts", "filter_records", "summary_counts"]
