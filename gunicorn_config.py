"""Gunicorn configuration for the ratio evaluation service."""
import os
import sys

# Gunicorn config variables
bind = os.getenv("PODSCALE_BIND", "0.0.0.0:8080")
workers = int(os.getenv("PODSCALE_WORKERS", "2"))
timeout = 30
worker_class = "sync"
preload_app = False  # each worker loads the targets file itself

def post_worker_init(worker):
    """Called just after a worker has initialized the application."""
    app = getattr(worker, "wsgi", None)
    if app is None or not hasattr(app, 'config'):
        print(f"[Worker {worker.pid}] WARNING: App or config not found", file=sys.stderr, flush=True)
        return
    targets = app.config.get('hpa_targets') or {}
    print(f"[Worker {worker.pid}] Serving {len(targets)} named targets", file=sys.stderr, flush=True)
