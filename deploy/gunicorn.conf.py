# Gunicorn configuration
# Fallback tokens live in process memory, so one worker process serves every request
bind = "127.0.0.1:8000"
workers = 1
worker_class = "gthread"
threads = 8
timeout = 30
keepalive = 5
errorlog = "/var/log/trackme/gunicorn-error.log"
accesslog = "/var/log/trackme/gunicorn-access.log"
loglevel = "info"
