# gunicorn.conf.py
"""
Gunicorn configuration for the dairy billing backend.

Run with: gunicorn dairy.wsgi -c gunicorn.conf.py

Statement PDFs are rendered in-request, so workers get a generous
timeout and are recycled periodically to release WeasyPrint memory.
"""
import multiprocessing
import os

bind = os.environ.get('GUNICORN_BIND', '0.0.0.0:8000')

# Small single-office deployment: a few sync workers are plenty
workers = int(os.environ.get('GUNICORN_WORKERS', min(multiprocessing.cpu_count() + 1, 4)))
worker_class = 'sync'
timeout = int(os.environ.get('GUNICORN_TIMEOUT', 90))
graceful_timeout = 20
max_requests = 500
max_requests_jitter = 25

preload_app = True

# Logs go to the container's stdout/stderr
accesslog = '-'
errorlog = '-'
loglevel = os.environ.get('LOG_LEVEL', 'info').lower()

proc_name = 'dairy-billing'

# TLS terminates at the reverse proxy
forwarded_allow_ips = os.environ.get('GUNICORN_FORWARDED_ALLOW_IPS', '127.0.0.1')
secure_scheme_headers = {'X-FORWARDED-PROTO': 'https'}
