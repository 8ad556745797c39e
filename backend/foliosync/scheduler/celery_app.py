from celery import Celery
from celery.signals import beat_init

from foliosync.core.config import settings

app = Celery("foliosync", include=["foliosync.tasks.portfolio"])
app.conf.broker_url = settings.CELERY_BROKER_URL
app.conf.result_backend = settings.CELERY_RESULT_BACKEND
app.conf.timezone = settings.CELERY_TIMEZONE
app.conf.enable_utc = True

app.conf.beat_schedule = {
    "refresh-portfolio-holdings": {
        "task": "foliosync.tasks.portfolio.refresh_portfolio_if_due",
        "schedule": settings.SCHEDULER_TICK_SECONDS,
    },
}


@beat_init.connect
def _schedule_cold_start(sender=None, **kwargs) -> None:
    app.send_task("foliosync.tasks.portfolio.cold_start_refresh")
