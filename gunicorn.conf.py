# Gunicorn configuration file
import os

# Application factory
wsgi_app = "app:create_app()"

# Bind to the port provided by Railway
bind = f"0.0.0.0:{os.environ.get('PORT', '8080')}"

# Requests are short CRUD calls; keep the timeout tight
timeout = 30

# Graceful timeout for worker shutdown
graceful_timeout = 30

# Number of workers
# Interval locks are per process; across workers the employee row lock
# (PostgreSQL) or BEGIN IMMEDIATE (SQLite) serializes bookings
workers = int(os.environ.get('WEB_CONCURRENCY', 2))

# Worker class
worker_class = "sync"

# Logging
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get('LOG_LEVEL', 'info').lower()
