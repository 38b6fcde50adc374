from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

from hpa.errors import (
	EmptyMetricSetError,
	InvalidQuantityError,
	InvalidTargetRangeError,
	MetricsError,
	NoMatchedMetricsError,
	ZeroTargetError,
)
from hpa.metrics.quantity import decode_metrics, decode_values, to_milli_value
from hpa.metrics.utilization import get_metric_usage_ratio, get_resource_utilization_ratio
from hpa.targets import MetricTarget

logger = logging.getLogger(__name__)

# conditions the caller resolves on its next reconciliation cycle
_UNPROCESSABLE = (NoMatchedMetricsError, EmptyMetricSetError, ZeroTargetError)
_BAD_REQUEST = (InvalidQuantityError, InvalidTargetRangeError)


def _error(e: Exception, status: int) -> Tuple[Any, int]:
	return jsonify({"error": str(e), "kind": type(e).__name__}), status


def create_app(targets: Optional[Dict[str, MetricTarget]] = None) -> Flask:
	app = Flask(__name__)
	app.config['hpa_targets'] = dict(targets or {})

	@app.errorhandler(MetricsError)
	def handle_metrics_error(e: MetricsError) -> Any:
		if isinstance(e, _UNPROCESSABLE):
			status = 422
		elif isinstance(e, _BAD_REQUEST):
			status = 400
		else:
			status = 500
		logger.warning(f"Rejected {request.method} {request.path}: {type(e).__name__}: {e}")
		return _error(e, status)

	@app.get("/healthz")
	def healthz() -> Any:
		return jsonify({"status": "ok"})

	@app.get("/targets")
	def list_targets() -> Any:
		targets = app.config['hpa_targets']
		return jsonify({"targets": {name: t.to_dict() for name, t in targets.items()}})

	@app.post("/ratio/resource")
	def resource_ratio() -> Any:
		body = _json_body()
		if "metrics" not in body or "requests" not in body:
			return jsonify({"error": "missing 'metrics' or 'requests' field"}), 400
		if not _is_int(body.get("target_utilization")):
			return jsonify({"error": "'target_utilization' must be an integer percentage"}), 400

		metrics = decode_metrics(body["metrics"])
		requests = decode_values(body["requests"], field="requests")
		result = get_resource_utilization_ratio(metrics, requests, body["target_utilization"])
		return jsonify(result.to_dict())

	@app.post("/ratio/usage")
	def usage_ratio() -> Any:
		body = _json_body()
		if "metrics" not in body or not isinstance(body.get("target"), dict):
			return jsonify({"error": "missing 'metrics' or 'target' field"}), 400

		target = body["target"]
		if "value" in target:
			lower = upper = to_milli_value(target["value"])
		elif "lower" in target and "upper" in target:
			lower = to_milli_value(target["lower"])
			upper = to_milli_value(target["upper"])
		else:
			return jsonify({"error": "target needs 'value' or 'lower' and 'upper'"}), 400

		metrics = decode_metrics(body["metrics"])
		result = get_metric_usage_ratio(metrics, lower, upper)
		return jsonify(result.to_dict())

	@app.post("/evaluate/<name>")
	def evaluate(name: str) -> Any:
		target = app.config['hpa_targets'].get(name)
		if target is None:
			return jsonify({"error": f"unknown target: {name}"}), 404

		body = _json_body()
		if "metrics" not in body:
			return jsonify({"error": "missing 'metrics' field"}), 400

		metrics = decode_metrics(body["metrics"])
		requests = None
		if body.get("requests") is not None:
			requests = decode_values(body["requests"], field="requests")

		response = target.evaluate(metrics, requests)
		response["target"] = name
		response["type"] = target.type
		return jsonify(response)

	return app


def _is_int(value: Any) -> bool:
	return isinstance(value, int) and not isinstance(value, bool)


def _json_body() -> Dict[str, Any]:
	body = request.get_json(force=True, silent=True)
	return body if isinstance(body, dict) else {}
