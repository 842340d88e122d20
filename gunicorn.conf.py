"""Gunicorn configuration for production deployment (wsgi:application)."""

import os

# Server socket
bind = os.environ.get('GUNICORN_BIND', '0.0.0.0:8000')

# Worker processes. SQLite serializes writers on one lock, so a few threads
# per worker is enough; bookings waiting on the lock share DATABASE_TIMEOUT.
workers = int(os.environ.get('GUNICORN_WORKERS', 2))
threads = int(os.environ.get('GUNICORN_THREADS', 4))
worker_class = 'gthread'

# Timeout
timeout = 30
graceful_timeout = 30
keepalive = 5

# Logging (application log goes to logs/hotel_booking.log)
accesslog = 'logs/gunicorn-access.log'
errorlog = 'logs/gunicorn-error.log'
loglevel = os.environ.get('GUNICORN_LOG_LEVEL', 'info')

# Process naming
proc_name = 'hotel_booking'

preload_app = True
max_requests = 1000
max_requests_jitter = 50
