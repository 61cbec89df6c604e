"""
Input validation functions.
"""
import math
from datetime import datetime

from .config import Order, Platform
from .matrix import CarrierDeadlineMatrix
from .utils import setup_logging

logger = setup_logging()


class ValidationError(Exception):
    """Custom exception for validation errors."""
    pass


class InputValidator:
    """Validate orders and the carrier matrix for consistency before evaluation."""

    def __init__(self, orders: list[Order], matrix: CarrierDeadlineMatrix, now: datetime):
        self.orders = orders
        self.matrix = matrix
        self.now = now
        self.errors: list[str] = []
        self.warnings: list[str] = []

    def validate_all(self) -> tuple[list[str], list[str]]:
        """Run all validations and return (errors, warnings)."""
        self.validate_matrix()
        self.validate_orders()
        self.validate_order_coverage()

        return self.errors, self.warnings

    def validate_matrix(self):
        """Deadline hours must be finite and positive."""
        if len(self.matrix) == 0:
            self.errors.append("Carrier matrix is empty")
            return

        for platform, carrier, deadline in self.matrix.iter_entries():
            label = f"{platform}/{carrier}"
            confirm = deadline.confirm_deadline_hours
            handover = deadline.handover_deadline_hours

            if not math.isfinite(confirm) or confirm <= 0:
                self.errors.append(f"{label} confirm_deadline_hours must be positive: {confirm}")
            if not math.isfinite(handover) or handover <= 0:
                self.errors.append(f"{label} handover_deadline_hours must be positive: {handover}")
            elif math.isfinite(confirm) and handover < confirm:
                self.warnings.append(
                    f"{label} handover window ({handover}h) is shorter than confirm window ({confirm}h)"
                )

    def validate_orders(self):
        """Check individual order fields."""
        if not self.orders:
            self.errors.append("No valid orders to evaluate")
            return

        known_platforms = {p.value for p in Platform} | set(self.matrix.platforms())

        for order in self.orders:
            if order.platform not in known_platforms:
                self.warnings.append(f"Order {order.order_id} has unrecognised platform: {order.platform}")

            # Left as "safe" by the evaluator; flagged here for data-entry review
            if order.order_time > self.now:
                self.warnings.append(
                    f"Order {order.order_id} has order_time in the future: {order.order_time:%Y-%m-%d %H:%M}"
                )

            if order.order_value <= 0:
                self.warnings.append(f"Order {order.order_id} has zero order value")

    def validate_order_coverage(self):
        """Orders whose (platform, carrier) has no deadline will evaluate as unknown."""
        uncovered = {}
        for order in self.orders:
            if (order.platform, order.suggested_carrier) not in self.matrix:
                key = (order.platform, order.suggested_carrier)
                uncovered[key] = uncovered.get(key, 0) + 1

        for (platform, carrier), count in uncovered.items():
            self.warnings.append(f"No deadline configured for {platform}/{carrier} ({count} order(s))")


def validate_inputs(orders: list[Order], matrix: CarrierDeadlineMatrix, now: datetime) -> None:
    """
    Validate all inputs and raise ValidationError if critical errors found.

    Warnings are logged but don't stop execution.
    """
    validator = InputValidator(orders, matrix, now)
    errors, warnings = validator.validate_all()

    for warning in warnings:
        logger.warning(f"Validation warning: {warning}")

    if errors:
        for error in errors:
            logger.error(f"Validation error: {error}")
        raise ValidationError(f"Input validation failed with {len(errors)} error(s). See log for details.")

    logger.info("Input validation passed")
