"""
Gunicorn settings for serving edgeconsole (wsgi:application)
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '5000')}"

# Every worker process imports wsgi.py and starts its own scheduled-action
# scan, so scale with threads rather than workers.
workers = int(os.environ.get('GUNICORN_WORKERS', '1'))
threads = int(os.environ.get('GUNICORN_THREADS', '4'))
worker_class = 'gthread'
timeout = int(os.environ.get('GUNICORN_TIMEOUT', '30'))
graceful_timeout = 10
keepalive = 2
max_requests = 1000
max_requests_jitter = 50

# One app, key cache and scheduler per worker.
preload_app = False

accesslog = '-'
errorlog = '-'
loglevel = os.environ.get('LOG_LEVEL', 'info').lower()
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s %(L)ss "%(a)s"'

proc_name = 'edgeconsole'

limit_request_line = 4094
limit_request_fields = 100
limit_request_field_size = 8190


def when_ready(server):
    server.log.info("edgeconsole is ready. Listening on %s", bind)


def post_fork(server, worker):
    server.log.info("edgeconsole worker %s started", worker.pid)


def worker_exit(server, worker):
    server.log.info("edgeconsole worker %s exiting", worker.pid)
