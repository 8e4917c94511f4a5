"""
TypeValidator - validates and coerces cell values by schema field type.
"""

import json
import math
from typing import Any

from .base_validator import BaseValidator


class TypeValidator(BaseValidator):
    """
    Validates that a value can be stored in a field of the expected type.

    Coercion rules (used when committing edit buffers):
    - number: float, from numbers or numeric strings; NaN/infinity rejected
    - product-list: a list of objects with scalar values, from a list or
      JSON text
    - text, date: string form, stored as-is (dates are not format-checked)
    """

    SUPPORTED_TYPES = ("text", "date", "number", "product-list")

    SCALAR_TYPES = (str, int, float, bool, type(None))

    def __init__(self, field_name: str, parameters: dict[str, Any] | None = None):
        super().__init__(field_name, parameters)

        expected_type = self.parameters.get("expected_type")
        if not expected_type:
            raise ValueError("TypeValidator requires 'expected_type' parameter")

        if expected_type not in self.SUPPORTED_TYPES:
            raise ValueError(f"Unsupported type: {expected_type}")
        self.expected_type = expected_type

    def validate(self, value: Any, record: dict[str, Any]) -> None:
        """
        Validate that the value matches the expected type.

        Raises:
            ValidationError: If the value cannot be coerced
        """
        # Absent values are always storable
        if value is None:
            return
        self.coerce(value)

    def coerce(self, value: Any) -> Any:
        """
        Coerce value to the expected type.

        Returns:
            The coerced value

        Raises:
            ValidationError: If coercion fails
        """
        if self.expected_type == "number":
            return self._coerce_number(value)
        if self.expected_type == "product-list":
            return self._coerce_product_list(value)
        return str(value)

    def _coerce_number(self, value: Any) -> float:
        if isinstance(value, bool):
            raise self.fail("Cannot coerce bool to number")

        try:
            number = float(value.strip() if isinstance(value, str) else value)
        except (TypeError, ValueError):
            raise self.fail(f"Cannot coerce {value!r} to number")

        if not math.isfinite(number):
            raise self.fail(f"{value!r} is not a finite number")
        return number

    def _coerce_product_list(self, value: Any) -> list[dict[str, Any]]:
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                raise self.fail(f"Product list is not valid JSON: {e.msg}")

        if not isinstance(value, list):
            raise self.fail(f"Product list must be a list, got {type(value).__name__}")

        products = []
        for idx, item in enumerate(value):
            if not isinstance(item, dict):
                raise self.fail(f"Product #{idx + 1} must be an object, got {type(item).__name__}")
            for column, cell in item.items():
                if not isinstance(cell, self.SCALAR_TYPES):
                    raise self.fail(f"Product #{idx + 1} column '{column}' must be a scalar value")
            products.append(dict(item))
        return products

    @property
    def rule_type(self) -> str:
        return "type_check"
