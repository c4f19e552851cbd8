from decimal import Decimal
from typing import List

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import DecimalValidator

from apps.common.validation import (
    FieldViolation,
    Operation,
    is_blank,
    rejected_ids_violations,
)

from .commands import ProductWriteCommand

# Matches Product.price (max_digits=12, decimal_places=2)
_price_digits = DecimalValidator(max_digits=12, decimal_places=2)


def _price_violations(price) -> List[FieldViolation]:
    if price is None:
        return [FieldViolation("price", "Price is required.")]
    if not price.is_finite():
        return [FieldViolation("price", "Price must be a finite number.")]
    violations: List[FieldViolation] = []
    if price < Decimal("0"):
        violations.append(FieldViolation("price", "Price must be zero or positive."))
    try:
        _price_digits(price)
    except DjangoValidationError as exc:
        violations.extend(FieldViolation("price", message) for message in exc.messages)
    return violations


def validate_product_write(
    command: ProductWriteCommand, operation: Operation
) -> List[FieldViolation]:
    """Product rules are the same for both operations; ids are never accepted."""
    violations: List[FieldViolation] = []
    if is_blank(command.name):
        violations.append(FieldViolation("name", "Name is required."))
    violations.extend(_price_violations(command.price))
    violations.extend(
        rejected_ids_violations("category_ids", command.rejected_category_ids)
    )
    if not command.category_ids:
        violations.append(
            FieldViolation("category_ids", "Product must reference at least one category.")
        )
    return violations
