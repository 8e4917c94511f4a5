"""
Record lifecycle tracker.

Owns the set of uploaded-document records and their state machine
(pending -> uploading -> processing -> processed | needs_validation | error).
The tracker is pure state: it publishes a RecordEvent for every change and
leaves notifications to subscribers.
"""

import re
import uuid
from pathlib import PurePath
from typing import Any, Callable, Mapping

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from invoice_harvester.core.models import (
    ExtractedValue,
    Record,
    RecordEvent,
    UploadedFile,
    can_transition,
)
from invoice_harvester.core.validators import ValidationError
from invoice_harvester.observability.logger import get_logger
from invoice_harvester.observability.metrics import (
    increment_counter,
    record_transitions_total,
    records_enqueued_total,
    records_tracked,
    set_gauge,
)

logger = get_logger(__name__)

RecordListener = Callable[[RecordEvent], None]

_VALUES_ADAPTER = TypeAdapter(dict[str, ExtractedValue])


def _record_id(file_name: str) -> str:
    stem = re.sub(r"[^A-Za-z0-9_\-]+", "-", PurePath(file_name).stem).strip("-") or "record"
    return f"{stem[:40]}-{uuid.uuid4().hex[:12]}"


def validate_values(values: Mapping[str, Any]) -> dict[str, ExtractedValue]:
    """
    Check a field-key -> value mapping against the closed value union.

    Raises:
        ValidationError: If any value is not a string, number, None or a
                         list of product objects
    """
    try:
        return _VALUES_ADAPTER.validate_python(dict(values))
    except PydanticValidationError as e:
        first = e.errors()[0]
        field_name = str(first["loc"][0]) if first.get("loc") else "extracted_values"
        raise ValidationError(rule_name="type_check", field_name=field_name, message=first["msg"])


class RecordTracker:
    """
    Tracks uploaded documents through the extraction lifecycle.

    Records are kept in enqueue order. Reads return deep copies, so the only
    way to change a record is through enqueue/advance/update/remove.
    """

    def __init__(self):
        self._records: dict[str, Record] = {}
        self._listeners: list[RecordListener] = []

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, listener: RecordListener) -> Callable[[], None]:
        """
        Register a listener for RecordEvents.

        Returns:
            A callable that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, event: RecordEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, record_id: str) -> Record | None:
        record = self._records.get(record_id)
        return record.model_copy(deep=True) if record else None

    def snapshot(self) -> list[Record]:
        return [r.model_copy(deep=True) for r in self._records.values()]

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def enqueue(
        self,
        file: UploadedFile,
        status: str = "pending",
        active_template_name: str | None = None,
    ) -> Record:
        """
        Create a record for an uploaded file.

        Args:
            file: The uploaded file descriptor
            status: Initial status, "pending" or "uploading"
            active_template_name: Upload template guiding extraction, if any

        Raises:
            ValueError: If status is not an initial status
        """
        if status not in ("pending", "uploading"):
            raise ValueError(f"Records must start as pending or uploading, not {status}")

        record = Record(
            id=_record_id(file.file_name),
            file_name=file.file_name,
            status=status,
            source_url=file.source_url,
            active_template_name=active_template_name,
        )
        self._records[record.id] = record

        increment_counter(records_enqueued_total)
        set_gauge(records_tracked, len(self._records))
        logger.info(
            "Record enqueued",
            extra={"record_id": record.id, "file_name": record.file_name, "status": status},
        )
        self._publish(RecordEvent(
            kind="enqueued", record_id=record.id, status=record.status, record=record.model_copy(deep=True),
        ))
        return record.model_copy(deep=True)

    def advance(
        self,
        record_id: str,
        next_status: str,
        payload: Mapping[str, Any] | str | None = None,
        message: str | None = None,
    ) -> Record | None:
        """
        Move a record forward in its lifecycle.

        For processed / needs_validation the payload mapping replaces the
        extracted values (message optionally explains a needs_validation).
        For error the payload is the error message.

        Unknown ids (e.g. a record deleted while its extraction was in
        flight) and non-monotonic transitions are ignored.

        Returns:
            The updated record, or None when the call was ignored
        """
        record = self._records.get(record_id)
        if record is None:
            logger.warning(
                "Ignoring transition for unknown record",
                extra={"record_id": record_id, "status": next_status},
            )
            return None

        if not can_transition(record.status, next_status):
            logger.warning(
                "Ignoring illegal status transition",
                extra={"record_id": record_id, "from_status": record.status, "status": next_status},
            )
            return None

        changes: dict[str, Any] = {"status": next_status}
        if next_status in ("processed", "needs_validation"):
            if isinstance(payload, Mapping):
                changes["extracted_values"] = validate_values(payload)
            changes["error_message"] = message
        elif next_status == "error":
            error_message = payload if isinstance(payload, str) else message
            changes["error_message"] = error_message or "Extraction failed"

        previous_status = record.status
        updated = record.model_copy(update=changes)
        self._records[record_id] = updated

        increment_counter(record_transitions_total, status=next_status)
        logger.info(
            "Record status changed",
            extra={"record_id": record_id, "from_status": previous_status, "status": next_status},
        )
        self._publish(RecordEvent(
            kind="advanced",
            record_id=record_id,
            status=updated.status,
            previous_status=previous_status,
            record=updated.model_copy(deep=True),
        ))
        return updated.model_copy(deep=True)

    def update(self, record_id: str, values: Mapping[str, Any]) -> Record | None:
        """
        Merge user corrections into a record's extracted values.

        The merge is shallow (key by key) and never changes the status.

        Returns:
            The updated record, or None for an unknown id

        Raises:
            ValidationError: If a value is outside the supported value types
        """
        record = self._records.get(record_id)
        if record is None:
            logger.warning("Ignoring update for unknown record", extra={"record_id": record_id})
            return None

        merged = dict(record.extracted_values)
        merged.update(validate_values(values))
        updated = record.model_copy(update={"extracted_values": merged})
        self._records[record_id] = updated

        logger.info("Record updated", extra={"record_id": record_id, "fields": sorted(values)})
        self._publish(RecordEvent(
            kind="updated", record_id=record_id, status=updated.status, record=updated.model_copy(deep=True),
        ))
        return updated.model_copy(deep=True)

    def remove(self, record_id: str) -> bool:
        """
        Delete a record.

        Returns:
            True if a record was removed
        """
        record = self._records.pop(record_id, None)
        if record is None:
            return False

        set_gauge(records_tracked, len(self._records))
        logger.info("Record removed", extra={"record_id": record_id, "file_name": record.file_name})
        self._publish(RecordEvent(kind="removed", record_id=record_id, status=record.status))
        return True
