"""Utilization ratio calculators for horizontal pod autoscaling."""

from __future__ import annotations

import logging
from typing import Dict

from hpa.errors import (
	EmptyMetricSetError,
	InvalidTargetRangeError,
	NoMatchedMetricsError,
	ZeroTargetError,
)
from hpa.metrics.types import PodMetricsInfo, ResourceRatio, UsageRatio

logger = logging.getLogger(__name__)


def _div_trunc(numerator: int, denominator: int) -> int:
	"""Integer division rounding toward zero (Python's // floors)."""
	quotient = abs(numerator) // abs(denominator)
	if (numerator < 0) != (denominator < 0):
		return -quotient
	return quotient


def get_resource_utilization_ratio(
	metrics: PodMetricsInfo,
	requests: Dict[str, int],
	target_utilization: int,
) -> ResourceRatio:
	"""
	Calculate the ratio of actual to desired utilization of resource requests.

	Metrics for pods without a matching request are skipped; missing requests
	are checked by the caller, so they are treated as extraneous metrics.

	Args:
		metrics: Pod name -> observed metric
		requests: Pod name -> resource request, same unit as the metric
		target_utilization: Desired utilization as a percentage of request

	Returns:
		ResourceRatio(utilization_ratio, current_utilization, raw_average_value)

	Raises:
		NoMatchedMetricsError: matched requests sum to zero
		ZeroTargetError: target_utilization is zero
	"""
	metrics_total = 0
	requests_total = 0
	num_entries = 0

	for pod_name, metric in metrics.items():
		request = requests.get(pod_name)
		if request is None:
			continue

		metrics_total += metric.value
		requests_total += request
		num_entries += 1

	# a disjoint set of metrics and requests leaves the requests total at zero
	if requests_total == 0:
		logger.debug(
			f"No matched requests: {len(metrics)} metrics, {len(requests)} requests, "
			f"{num_entries} matched"
		)
		raise NoMatchedMetricsError()

	if target_utilization == 0:
		raise ZeroTargetError("target utilization must be nonzero")

	current_utilization = _div_trunc(metrics_total * 100, requests_total)
	utilization_ratio = float(current_utilization) / float(target_utilization)
	raw_average_value = _div_trunc(metrics_total, num_entries)

	logger.debug(
		f"Resource utilization: {current_utilization}% of request over {num_entries} pods, "
		f"target={target_utilization}%, ratio={utilization_ratio:.3f}"
	)
	return ResourceRatio(utilization_ratio, current_utilization, raw_average_value)


def get_metric_usage_ratio(
	metrics: PodMetricsInfo,
	target_usage_lower: int,
	target_usage_upper: int,
) -> UsageRatio:
	"""
	Calculate the ratio of actual usage to a target usage range.

	Equal bounds denote a single target value. Usage inside the range yields
	a ratio of exactly 1.0 (no scaling in either direction).

	Raises:
		EmptyMetricSetError: metrics is empty
		InvalidTargetRangeError: lower bound above upper bound
		ZeroTargetError: the bound selected as target is zero
	"""
	if target_usage_lower > target_usage_upper:
		raise InvalidTargetRangeError(
			f"target range lower bound {target_usage_lower} exceeds upper bound {target_usage_upper}"
		)
	if not metrics:
		raise EmptyMetricSetError()

	metrics_total = sum(metric.value for metric in metrics.values())
	current_usage = _div_trunc(metrics_total, len(metrics))

	if target_usage_lower <= current_usage <= target_usage_upper:
		logger.debug(f"Usage {current_usage} within [{target_usage_lower}, {target_usage_upper}]")
		return UsageRatio(1.0, current_usage)

	if target_usage_lower == target_usage_upper:
		target_usage = target_usage_lower
	elif current_usage < target_usage_lower:
		# scale down against the lower bound
		target_usage = target_usage_lower
	else:
		# scale up against the upper bound
		target_usage = target_usage_upper

	if target_usage == 0:
		raise ZeroTargetError(f"target usage is zero for current usage {current_usage}")

	usage_ratio = float(current_usage) / float(target_usage)
	logger.debug(
		f"Usage {current_usage} outside [{target_usage_lower}, {target_usage_upper}], "
		f"target={target_usage}, ratio={usage_ratio:.3f}"
	)
	return UsageRatio(usage_ratio, current_usage)
