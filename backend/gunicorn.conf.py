import os

from flask import Flask

# App
wsgi_app = "wallet_api:create_app()"

# Bind & workers
bind = os.getenv("GUNICORN_BIND", "0.0.0.0:8000")
workers = int(os.getenv("GUNICORN_WORKERS", "2"))
threads = 1
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Trust proxy headers
forwarded_allow_ips = "*"
proxy_protocol = False


def worker_exit(server, worker):
    """Close the worker's Redis connection pool on shutdown."""
    from wallet_api.core.extensions import close_redis

    app = getattr(worker, "wsgi", None)
    if isinstance(app, Flask):
        close_redis(app)
