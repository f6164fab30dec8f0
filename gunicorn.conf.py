# gunicorn.conf.py
"""
Gunicorn configuration for the Stockroom API.

    gunicorn stockroom.wsgi -c gunicorn.conf.py

Every stock transition is a short database transaction, so plain sync
workers are enough. Worker count and bind address can be overridden
from the environment.
"""
import multiprocessing
import os

wsgi_app = 'stockroom.wsgi:application'

# Server socket
bind = os.environ.get('GUNICORN_BIND', '0.0.0.0:8000')

# Worker processes
workers = int(os.environ.get('GUNICORN_WORKERS', multiprocessing.cpu_count() * 2 + 1))
worker_class = 'sync'
timeout = int(os.environ.get('GUNICORN_TIMEOUT', '60'))
graceful_timeout = 30
keepalive = 5
max_requests = 1000
max_requests_jitter = 50

# Logging (stdout/stderr, picked up by the container runtime)
accesslog = '-'
errorlog = '-'
loglevel = os.environ.get('GUNICORN_LOG_LEVEL', 'info')
access_log_format = '%(h)s %(t)s "%(r)s" %(s)s %(b)s %(D)sus tenant=%({x-tenant-id}i)s'

proc_name = 'stockroom-gunicorn'

# TLS terminates at the load balancer
forwarded_allow_ips = os.environ.get('GUNICORN_FORWARDED_ALLOW_IPS', '127.0.0.1')
secure_scheme_headers = {
    'X-FORWARDED-PROTO': 'https',
}
