"""Error types raised by the ratio calculators and their surfaces."""

from __future__ import annotations


class MetricsError(Exception):
	"""Base class for every error raised by the hpa package."""


class NoMatchedMetricsError(MetricsError):
	"""No metric matched a pod with a nonzero resource request."""

	def __init__(self, message: str = "no metrics returned matched known pods") -> None:
		super().__init__(message)


class EmptyMetricSetError(MetricsError):
	"""A usage ratio was requested over zero pods."""

	def __init__(self, message: str = "no metrics to average") -> None:
		super().__init__(message)


class ZeroTargetError(MetricsError):
	"""The selected target is zero, so the ratio is undefined."""


class InvalidTargetRangeError(MetricsError, ValueError):
	"""Lower bound of a target range is above its upper bound."""


class InvalidQuantityError(MetricsError, ValueError):
	"""A metric or request value could not be decoded."""


class TargetConfigError(MetricsError):
	"""The targets file is malformed."""
