"""Metric types and ratio calculators."""

from hpa.metrics.types import PodMetric, PodMetricsInfo, ResourceRatio, UsageRatio
from hpa.metrics.utilization import get_metric_usage_ratio, get_resource_utilization_ratio

__all__ = [
	'PodMetric',
	'PodMetricsInfo',
	'ResourceRatio',
	'UsageRatio',
	'get_metric_usage_ratio',
	'get_resource_utilization_ratio',
]
