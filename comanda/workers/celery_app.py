"""
Celery application instance.

Redis is both broker and result backend. The only background work is
transactional email (staff invitations) on its own queue.
"""

from celery import Celery

from comanda.core.config import settings

EMAIL_QUEUE = "email"

celery_app = Celery(
    "comanda",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["comanda.workers.email_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    # Same UTC calendar as report days, plan expiry and invitation expiry
    timezone="UTC",
    enable_utc=True,
    # Invitation sends are fire-and-forget; the API never reads task results
    task_ignore_result=True,
    # A send is one HTTP call to Resend
    task_soft_time_limit=30,
    task_time_limit=60,
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    broker_connection_retry_on_startup=True,
    task_default_queue="default",
    task_queues={
        "default": {},
        EMAIL_QUEUE: {},
    },
    task_routes={
        "comanda.workers.email_tasks.*": {"queue": EMAIL_QUEUE},
    },
)
