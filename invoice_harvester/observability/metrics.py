"""
Prometheus metrics for invoice-harvester

Counters and histograms covering the record lifecycle, extraction calls,
template management, cell edits and CSV export. All metrics live on a
dedicated registry so embedding applications can expose them separately.
"""
from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


REGISTRY = CollectorRegistry()


# =======================
# RECORD LIFECYCLE METRICS
# =======================

records_enqueued_total = Counter(
    name="harvester_records_enqueued_total",
    documentation="Total number of uploaded documents registered with the tracker",
    registry=REGISTRY,
)

record_transitions_total = Counter(
    name="harvester_record_transitions_total",
    documentation="Total number of record status transitions",
    labelnames=["status"],
    registry=REGISTRY,
)

records_tracked = Gauge(
    name="harvester_records_tracked",
    documentation="Number of records currently held by the tracker",
    registry=REGISTRY,
)

# =======================
# EXTRACTION METRICS
# =======================

extraction_duration_seconds = Histogram(
    name="harvester_extraction_duration_seconds",
    documentation="Time spent waiting on the extraction collaborator per document",
    labelnames=["extractor"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=REGISTRY,
)

extraction_results_total = Counter(
    name="harvester_extraction_results_total",
    documentation="Extraction outcomes by terminal status",
    labelnames=["extractor", "status"],  # status: processed, needs_validation, error
    registry=REGISTRY,
)

# =======================
# TEMPLATE METRICS
# =======================

template_operations_total = Counter(
    name="harvester_template_operations_total",
    documentation="Template store operations",
    labelnames=["operation", "outcome"],  # outcome: added, updated, forked, unchanged, removed, rejected
    registry=REGISTRY,
)

# =======================
# EDITOR / EXPORT METRICS
# =======================

cell_edits_total = Counter(
    name="harvester_cell_edits_total",
    documentation="Committed cell edits by field type and outcome",
    labelnames=["field_type", "outcome"],  # outcome: committed, reverted, cancelled
    registry=REGISTRY,
)

exported_rows_total = Counter(
    name="harvester_exported_rows_total",
    documentation="Rows written by the CSV exporter",
    labelnames=["mode"],  # mode: summary, line_items
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """Return all metrics in Prometheus text exposition format."""
    return generate_latest(REGISTRY)


class track_duration:
    """
    Context manager for tracking operation duration

    Usage:
        with track_duration(extraction_duration_seconds, extractor="simulated"):
            ...
    """

    def __init__(self, histogram: Histogram, **labels):
        self.histogram = histogram
        self.labels = labels
        self.timer = None

    def __enter__(self):
        self.timer = self.histogram.labels(**self.labels).time()
        self.timer.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.timer.__exit__(exc_type, exc_val, exc_tb)
        return False


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """Increment a counter, applying labels only when given."""
    if labels:
        counter.labels(**labels).inc(value)
    else:
        counter.inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    if labels:
        gauge.labels(**labels).set(value)
    else:
        gauge.set(value)


def record_template_operation(operation: str, outcome: str) -> None:
    increment_counter(template_operations_total, 1, operation=operation, outcome=outcome)


def record_cell_edit(field_type: str, outcome: str) -> None:
    increment_counter(cell_edits_total, 1, field_type=field_type, outcome=outcome)
