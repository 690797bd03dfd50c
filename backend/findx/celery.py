"""
Celery Application Configuration

Outbound email is the only work taken off the request path.

Usage:
    # Start worker:
    celery -A findx.celery worker --loglevel=info

    # Enqueue a task:
    from findx.tasks.mail import send_password_reset_email
    send_password_reset_email.delay("user@example.com", "Ada", "123456")
"""

from celery import Celery
from findx.config import get_settings

settings = get_settings()

celery_app = Celery(
    "findx",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,

    # Worker settings
    worker_prefetch_multiplier=1,

    # Result settings
    result_expires=3600,
    task_track_started=True,

    # Retry settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    task_routes={
        "findx.tasks.mail.send_password_reset_email": {"queue": "mail"},
    },

    task_default_queue="default",
)

celery_app.autodiscover_tasks(["findx.tasks"])
