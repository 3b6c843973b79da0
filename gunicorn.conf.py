# gunicorn.conf.py
import multiprocessing, os

wsgi_app = "astrocore.main:app"
bind = f"0.0.0.0:{os.getenv('PORT', '5000')}"

# Pattern analysis and line scoring are CPU-bound and pure: scale with processes, not threads.
workers = int(os.getenv("ASTRO_WEB_WORKERS", str(max(2, multiprocessing.cpu_count()))))
threads = 1
worker_class = "sync"
timeout = int(os.getenv("ASTRO_WEB_TIMEOUT", "60"))
graceful_timeout = 30
keepalive = 2

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info").lower()
access_log_format = '%(h)s "%(r)s" %(s)s %(b)s rt:%(L)s req_id:%({X-Request-ID}i)s'
