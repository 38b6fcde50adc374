"""Decoding of metric and request values into integer milli-units."""

from __future__ import annotations

import math
from typing import Any, Dict

from kubernetes.utils import parse_quantity

from hpa.errors import InvalidQuantityError
from hpa.metrics.types import PodMetricsInfo, PodMetric


def to_milli_value(value: Any) -> int:
	"""
	Convert a value to integer milli-units.

	Integers and quantity strings ("250m", "30", "128Mi") are whole-unit
	amounts, so 30 and "30" decode to the same 30000. The result is rounded
	up like Quantity.MilliValue().

	Raises:
		InvalidQuantityError: value is not an integer or a valid quantity
	"""
	# int or quantity string only; floats are refused
	if isinstance(value, bool) or not isinstance(value, (int, str)):
		raise InvalidQuantityError(f"invalid quantity: {value!r}")
	try:
		return math.ceil(parse_quantity(value) * 1000)
	except (ValueError, ArithmeticError) as e:
		raise InvalidQuantityError(f"invalid quantity {value!r}: {e}") from e


def decode_values(values: Any, field: str = "values") -> Dict[str, int]:
	"""Decode a pod -> value mapping, converting every value to milli-units."""
	if not isinstance(values, dict):
		raise InvalidQuantityError(f"'{field}' must be an object mapping pod names to values")
	return {str(pod): to_milli_value(value) for pod, value in values.items()}


def decode_metrics(values: Any, field: str = "metrics") -> PodMetricsInfo:
	return {pod: PodMetric(value=value) for pod, value in decode_values(values, field).items()}
