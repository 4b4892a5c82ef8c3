"""
Gunicorn Configuration

Production settings for the HackHub API.

Run with: gunicorn hackhub.main:app -c deploy/gunicorn.conf.py

Every worker is a separate process: set REDIS_URL so the registration and
per-IP rate limits are shared between them.
"""
import os
import multiprocessing

# Server socket
bind = os.environ.get("BIND", "0.0.0.0:8000")
backlog = 2048

# Worker processes
workers = int(os.environ.get("WEB_CONCURRENCY", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"
worker_connections = 1000
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = "hackhub"

# Server mechanics
daemon = False

# Security
limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190


def when_ready(server):
    if not os.environ.get("REDIS_URL") and workers > 1:
        server.log.warning(
            "REDIS_URL is not set: rate limits are per worker process, "
            f"effective registration limit is multiplied by {workers}"
        )
