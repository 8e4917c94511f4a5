"""
Unit tests for Pydantic models.
"""

import pytest
from pydantic import ValidationError

from invoice_harvester.core.models import (
    ALL_STATUSES,
    Outcome,
    Record,
    Schema,
    SchemaField,
    Template,
    UploadedFile,
    can_transition,
    default_schema,
    seed_templates,
)


@pytest.mark.unit
class TestRecord:
    """Tests for Record model"""

    def test_defaults(self):
        """Test a new record starts pending with no values"""
        record = Record(id="invoice1-abc", file_name="invoice1.pdf")

        assert record.status == "pending"
        assert record.extracted_values == {}
        assert record.error_message is None

    def test_id_is_frozen(self):
        """Test the id cannot be reassigned"""
        record = Record(id="invoice1-abc", file_name="invoice1.pdf")

        with pytest.raises(ValidationError):
            record.id = "other"

    def test_empty_id_rejected(self):
        """Test an empty id is rejected"""
        with pytest.raises(ValidationError):
            Record(id="", file_name="invoice1.pdf")

    def test_unknown_status_rejected(self):
        """Test statuses outside the lifecycle are rejected"""
        with pytest.raises(ValidationError):
            Record(id="a", file_name="a.pdf", status="archived")

    def test_value_for_resolves_attributes_and_values(self):
        """Test record-level keys read attributes, others read extracted values"""
        record = Record(
            id="a",
            file_name="a.pdf",
            status="processed",
            active_template_name="Shop ABC",
            extracted_values={"supplier": "Acme"},
        )

        assert record.value_for("file_name") == "a.pdf"
        assert record.value_for("status") == "processed"
        assert record.value_for("active_template_name") == "Shop ABC"
        assert record.value_for("supplier") == "Acme"
        assert record.value_for("total_price") is None

    def test_uploaded_file_requires_name(self):
        """Test uploaded files need a file name"""
        with pytest.raises(ValidationError):
            UploadedFile(file_name="")


@pytest.mark.unit
class TestLifecycle:
    """Tests for the status transition graph"""

    @pytest.mark.parametrize("current,target", [
        ("pending", "uploading"),
        ("pending", "processing"),
        ("uploading", "processing"),
        ("processing", "processed"),
        ("processing", "needs_validation"),
        ("pending", "error"),
        ("uploading", "error"),
        ("processing", "error"),
    ])
    def test_forward_transitions_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize("current,target", [
        ("processing", "uploading"),
        ("processing", "processing"),
        ("processed", "error"),
        ("error", "processed"),
        ("needs_validation", "processed"),
        ("processed", "pending"),
    ])
    def test_backward_and_terminal_transitions_rejected(self, current, target):
        assert not can_transition(current, target)

    def test_unknown_target_rejected(self):
        assert not can_transition("pending", "archived")

    def test_error_reachable_from_every_non_terminal_status(self):
        for status in ALL_STATUSES:
            if status in ("processed", "needs_validation", "error"):
                continue
            assert can_transition(status, "error")


@pytest.mark.unit
class TestSchema:
    """Tests for Schema model"""

    def test_default_schema_shape(self):
        """Test the built-in schema has one status field and editable products"""
        schema = default_schema()

        assert schema.keys()[:3] == ["file_name", "status", "active_template_name"]
        assert [f.key for f in schema.fields if f.type == "status"] == ["status"]
        assert schema.get("products").type == "product-list"
        assert schema.get("products").editable
        assert not schema.get("file_name").editable

    def test_duplicate_keys_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            Schema(fields=[
                SchemaField(key="supplier", label="Supplier"),
                SchemaField(key="supplier", label="Vendor"),
            ])

        assert "duplicate" in str(exc_info.value)

    def test_two_status_fields_rejected(self):
        with pytest.raises(ValidationError):
            Schema(fields=[
                SchemaField(key="status", label="Status", type="status"),
                SchemaField(key="state", label="State", type="status"),
            ])

    def test_actions_field_rejected(self):
        with pytest.raises(ValidationError):
            Schema(fields=[SchemaField(key="actions", label="Actions", type="actions")])

    def test_select_keeps_schema_order(self):
        schema = default_schema()

        selected = schema.select(["total_price", "file_name"])

        assert [f.key for f in selected] == ["file_name", "total_price"]

    def test_select_none_returns_all(self):
        schema = default_schema()

        assert len(schema.select(None)) == len(schema.fields)


@pytest.mark.unit
class TestTemplate:
    """Tests for Template model"""

    def test_columns_cannot_be_empty(self):
        with pytest.raises(ValidationError):
            Template(id="t1", name="Empty", columns=[])

    def test_default_is_locked(self):
        template = Template(id="t1", name="Base", columns=["name"], is_default=True)

        assert template.is_locked

    def test_same_values(self):
        template = Template(id="t1", name="Base", columns=["name", "qty"])

        assert template.same_values("Base", ["name", "qty"], False)
        assert not template.same_values("Base", ["qty", "name"], False)
        assert not template.same_values("Base", ["name", "qty"], True)

    def test_seed_templates(self):
        """Test the seed set: two locked defaults, unique ids, both partitions"""
        seeds = seed_templates()

        assert len(seeds) == 5
        assert len({t.id for t in seeds}) == 5
        assert {t.id for t in seeds if t.is_default} == {
            "ai-standard-upload-template",
            "erpnext-article-default",
        }
        assert any(t.for_upload for t in seeds)
        assert any(not t.for_upload for t in seeds)


@pytest.mark.unit
class TestOutcome:
    """Tests for Outcome model"""

    def test_success(self):
        outcome = Outcome.success("done", data=3)

        assert outcome.ok
        assert outcome.level == "info"
        assert outcome.data == 3

    def test_warning_and_failure(self):
        assert Outcome.warning("careful").level == "warning"
        assert not Outcome.warning("careful").ok
        assert Outcome.failure("broken").level == "error"
        assert not Outcome.failure("broken").ok
