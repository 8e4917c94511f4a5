"""
Schema and template configuration.

Loads schema fields and seed templates from a YAML file, and provides a
programmatic builder for schemas.
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from invoice_harvester.core.models import Schema, SchemaField, Template
from invoice_harvester.core.validators import parse_columns


class HarvesterConfig(BaseModel):
    """Parsed configuration: the active schema and the seed templates."""

    schema_: Schema = Field(alias="schema")
    templates: list[Template] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class HarvesterConfigLoader:
    """
    Loads schema fields and seed templates from YAML.

    Expected YAML format:
    ```yaml
    schema:
      - key: supplier
        label: Supplier
        type: text
        editable: true
      - key: total_price
        label: Total
        type: number
        editable: true

    templates:
      - id: ai-standard-upload-template
        name: AI Standard Extraction (Upload)
        columns: item_code, name, quantity, price, amount
        default: true
        for_upload: true
    ```
    """

    def __init__(self, config_path: str | Path):
        """
        Args:
            config_path: Path to the YAML configuration file
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(f"Harvester configuration file not found: {config_path}")

    def load(self) -> HarvesterConfig:
        """
        Parse the configuration file.

        Raises:
            ValueError: If the YAML is invalid or misses required sections
        """
        with open(self.config_path, encoding="utf-8") as f:
            config = yaml.safe_load(f)

        if not config or "schema" not in config:
            raise ValueError("Configuration file must contain a 'schema' section")

        field_defs = config["schema"]
        if not isinstance(field_defs, list):
            raise ValueError("'schema' must be a list of field definitions")

        builder = SchemaBuilder()
        for idx, field_def in enumerate(field_defs):
            builder.add_field(**self._parse_field(field_def, idx))

        templates = [
            self._parse_template(template_def, idx)
            for idx, template_def in enumerate(config.get("templates") or [])
        ]

        return HarvesterConfig(schema=builder.build(), templates=templates)

    def _parse_field(self, field_def: Any, idx: int) -> dict[str, Any]:
        if not isinstance(field_def, dict) or "key" not in field_def:
            raise ValueError(f"Schema field #{idx + 1} must be a mapping with a 'key'")

        return {
            "key": field_def["key"],
            "label": field_def.get("label", field_def["key"]),
            "type": field_def.get("type", "text"),
            "editable": bool(field_def.get("editable", False)),
            "tooltip": field_def.get("tooltip"),
        }

    def _parse_template(self, template_def: Any, idx: int) -> Template:
        if not isinstance(template_def, dict):
            raise ValueError(f"Template #{idx + 1} must be a mapping")

        for required in ("id", "name", "columns"):
            if required not in template_def:
                raise ValueError(f"Template #{idx + 1} is missing '{required}'")

        try:
            return Template(
                id=str(template_def["id"]),
                name=str(template_def["name"]).strip(),
                columns=parse_columns(template_def["columns"]),
                is_default=bool(template_def.get("default", False)),
                for_upload=bool(template_def.get("for_upload", False)),
            )
        except PydanticValidationError as e:
            raise ValueError(f"Invalid template '{template_def['id']}': {e}")


class SchemaBuilder:
    """
    Programmatically build schemas (for tests or dynamic configurations).
    """

    def __init__(self):
        self.fields: list[SchemaField] = []

    def add_field(
        self,
        key: str,
        label: str | None = None,
        type: str = "text",
        editable: bool = False,
        tooltip: str | None = None,
    ) -> "SchemaBuilder":
        self.fields.append(SchemaField(
            key=key, label=label or key, type=type, editable=editable, tooltip=tooltip,
        ))
        return self

    def add_text(self, key: str, label: str | None = None, editable: bool = True) -> "SchemaBuilder":
        return self.add_field(key, label, "text", editable)

    def add_number(self, key: str, label: str | None = None, editable: bool = True) -> "SchemaBuilder":
        return self.add_field(key, label, "number", editable)

    def add_date(self, key: str, label: str | None = None, editable: bool = True) -> "SchemaBuilder":
        return self.add_field(key, label, "date", editable)

    def add_products(self, key: str = "products", label: str | None = "Products", editable: bool = True) -> "SchemaBuilder":
        return self.add_field(key, label, "product-list", editable)

    def add_status(self, key: str = "status", label: str | None = "Status") -> "SchemaBuilder":
        return self.add_field(key, label, "status", False)

    def build(self) -> Schema:
        """
        Raises:
            ValueError: If the fields violate schema invariants
        """
        try:
            return Schema(fields=list(self.fields))
        except PydanticValidationError as e:
            raise ValueError(f"Invalid schema: {e}")
