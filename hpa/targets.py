"""Named metric targets loaded from YAML."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

import yaml

from hpa.errors import InvalidQuantityError, InvalidTargetRangeError, TargetConfigError
from hpa.metrics.quantity import to_milli_value
from hpa.metrics.types import PodMetricsInfo
from hpa.metrics.utilization import get_metric_usage_ratio, get_resource_utilization_ratio

logger = logging.getLogger(__name__)

UTILIZATION = "Utilization"
VALUE = "Value"


@dataclass(frozen=True)
class UtilizationTarget:
    """Target expressed as a percentage of each pod's resource request."""
    name: str
    average_utilization: int

    type = UTILIZATION

    def evaluate(
        self,
        metrics: PodMetricsInfo,
        requests: Optional[Dict[str, int]] = None,
    ) -> Dict[str, Any]:
        # without requests nothing can match
        result = get_resource_utilization_ratio(metrics, requests or {}, self.average_utilization)
        return result.to_dict()

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "average_utilization": self.average_utilization}


@dataclass(frozen=True)
class ValueTarget:
    """Target expressed as a raw value range; equal bounds mean a single value."""
    name: str
    lower: int
    upper: int

    type = VALUE

    def evaluate(
        self,
        metrics: PodMetricsInfo,
        requests: Optional[Dict[str, int]] = None,
    ) -> Dict[str, Any]:
        return get_metric_usage_ratio(metrics, self.lower, self.upper).to_dict()

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "lower": self.lower, "upper": self.upper}


MetricTarget = Union[UtilizationTarget, ValueTarget]


def target_from_dict(entry: Dict[str, Any]) -> MetricTarget:
    """
    Build a target from one YAML entry.

    Args:
        entry: Mapping with 'name', 'type' and either 'average_utilization'
            (Utilization) or 'value' / 'lower' + 'upper' (Value)

    Returns:
        UtilizationTarget or ValueTarget

    Raises:
        TargetConfigError: entry is incomplete or has an unknown type
    """
    if not isinstance(entry, dict) or not entry.get("name"):
        raise TargetConfigError(f"target entry without a name: {entry!r}")

    name = str(entry["name"])
    target_type = entry.get("type", UTILIZATION)
    try:
        if target_type == UTILIZATION:
            if "average_utilization" not in entry:
                raise TargetConfigError(f"target '{name}' is missing 'average_utilization'")
            average_utilization = entry["average_utilization"]
            if isinstance(average_utilization, bool) or not isinstance(average_utilization, int):
                raise TargetConfigError(
                    f"target '{name}' needs an integer 'average_utilization', got {average_utilization!r}"
                )
            return UtilizationTarget(name=name, average_utilization=average_utilization)

        if target_type == VALUE:
            if "value" in entry:
                lower = upper = to_milli_value(entry["value"])
            elif "lower" in entry and "upper" in entry:
                lower = to_milli_value(entry["lower"])
                upper = to_milli_value(entry["upper"])
            else:
                raise TargetConfigError(f"target '{name}' needs 'value' or 'lower' and 'upper'")
            if lower > upper:
                raise InvalidTargetRangeError(f"target '{name}' has lower bound above upper bound")
            return ValueTarget(name=name, lower=lower, upper=upper)
    except (InvalidQuantityError, InvalidTargetRangeError, TypeError, ValueError) as e:
        raise TargetConfigError(f"invalid target '{name}': {e}") from e

    raise TargetConfigError(f"target '{name}' has unknown type '{target_type}'")


def load_targets(path: str) -> Dict[str, MetricTarget]:
    """
    Load named targets from a YAML file.

    A missing file yields no targets.

    Raises:
        TargetConfigError: file is not valid YAML or an entry is invalid
    """
    if not os.path.exists(path):
        logger.info(f"Targets file not found at {path}, no named targets loaded")
        return {}

    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise TargetConfigError(f"failed to parse targets file {path}: {e}") from e

    if not isinstance(data, dict):
        raise TargetConfigError(f"targets file {path} must contain a mapping")

    targets: Dict[str, MetricTarget] = {}
    for entry in data.get("targets") or []:
        target = target_from_dict(entry)
        if target.name in targets:
            raise TargetConfigError(f"duplicate target '{target.name}' in {path}")
        targets[target.name] = target

    logger.info(f"Loaded {len(targets)} targets from {path}")
    return targets
