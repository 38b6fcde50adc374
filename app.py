from __future__ import annotations

import os
import logging
from pathlib import Path

from hpa.api import create_app
from hpa.errors import TargetConfigError
from hpa.targets import load_targets

logging.basicConfig(
	level=os.getenv("PODSCALE_LOG_LEVEL", "INFO").upper(),
	format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_app():
	"""Build the Flask app with the named targets from PODSCALE_TARGETS_PATH."""
	targets_path = os.getenv(
		"PODSCALE_TARGETS_PATH",
		str(Path(__file__).parent / "deploy" / "targets.yaml")
	)

	try:
		targets = load_targets(targets_path)
	except TargetConfigError as e:
		logger.warning(f"Failed to load targets, serving without named targets: {e}")
		targets = {}

	return create_app(targets)


# Build app at module level (for gunicorn)
app = build_app()


if __name__ == "__main__":
	app.run(host="0.0.0.0", port=8080)
