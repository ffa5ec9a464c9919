"""Celery application and beat schedule.

Start a worker with beat:
    celery -A hoa_portal.worker worker --beat --loglevel=info
"""

from typing import Any, Dict

from celery import Celery
from celery.schedules import crontab
from celery.signals import worker_process_init

from .config import Settings, get_settings
from .observability.logging_config import configure_logging


def build_beat_schedule(settings: Settings) -> Dict[str, Dict[str, Any]]:
    """Beat schedule for retention jobs.

    The purge entry is only present when RETENTION_PURGE_ENABLED is set.
    """
    schedule = {
        'retention-sweep-daily': {
            'task': 'retention.sweep',
            'schedule': crontab(
                hour=settings.RETENTION_SWEEP_HOUR,
                minute=settings.RETENTION_SWEEP_MINUTE,
            ),
            'options': {
                'expires': 3600,  # Task expires after 1 hour if not picked up
            },
        },
    }
    if settings.RETENTION_PURGE_ENABLED:
        schedule['retention-purge-weekly'] = {
            'task': 'retention.purge',
            'schedule': crontab(hour=3, minute=0, day_of_week='sun'),
            'options': {
                'expires': 3600,
            },
        }
    return schedule


def create_celery_app(settings: Settings = None) -> Celery:
    settings = settings or get_settings()
    app = Celery(
        "hoa_portal",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=["hoa_portal.retention.tasks"],
    )
    app.conf.update(
        timezone="UTC",
        enable_utc=True,
        beat_schedule=build_beat_schedule(settings),
    )
    return app


celery_app = create_celery_app()


@worker_process_init.connect
def _configure_worker_logging(**kwargs):
    settings = get_settings()
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)
