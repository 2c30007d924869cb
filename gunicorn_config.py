"""
Gunicorn configuration for the Steel Buckle API

Run with: gunicorn -c gunicorn_config.py app:app
"""
import multiprocessing
import os

# Server socket
bind = f"0.0.0.0:{os.environ.get('PORT', '5000')}"
backlog = 2048

# Workers
# Requests mostly wait on the database or the media host, so gevent workers.
# Rate limiter and content bus state is per process.
workers = int(os.environ.get('WEB_CONCURRENCY', multiprocessing.cpu_count() + 1))
worker_class = 'gevent'
worker_connections = 1000
# Uploads are forwarded to the media host within the request
timeout = 60
keepalive = 5

# Logging
accesslog = '-'
errorlog = '-'
loglevel = os.environ.get('LOG_LEVEL', 'info').lower()
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

proc_name = 'steelbuckle'

# Server mechanics
daemon = False
pidfile = None
umask = 0
tmp_upload_dir = None

# TLS terminates at the reverse proxy
keyfile = None
certfile = None
