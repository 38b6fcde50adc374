"""Pod metric records and calculator results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, NamedTuple


@dataclass(frozen=True)
class PodMetric:
	"""A single observed metric sample for one pod."""
	value: int  # milli-units


# pod name -> metric sample
PodMetricsInfo = Dict[str, PodMetric]


class ResourceRatio(NamedTuple):
	"""Result of a request-relative utilization computation."""
	utilization_ratio: float
	current_utilization: int  # percent of request
	raw_average_value: int

	def to_dict(self) -> Dict[str, Any]:
		return {
			"utilization_ratio": self.utilization_ratio,
			"current_utilization": self.current_utilization,
			"raw_average_value": self.raw_average_value,
		}


class UsageRatio(NamedTuple):
	"""Result of a range-relative usage computation."""
	usage_ratio: float
	current_usage: int

	def to_dict(self) -> Dict[str, Any]:
		return {
			"usage_ratio": self.usage_ratio,
			"current_usage": self.current_usage,
		}
