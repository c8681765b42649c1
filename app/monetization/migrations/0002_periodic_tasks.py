"""
Register the monetization periodic tasks with celery-beat.

- Retry failed webhook events every 5 minutes
- Reset webhook events stuck in PROCESSING every 15 minutes
- Expire lapsed subscriptions every hour
"""

from django.db import migrations

PERIODIC_TASKS = [
    {
        "name": "Retry Failed Webhook Events",
        "task": "monetization.tasks.retry_failed_webhook_events",
        "every": 5,
        "description": "Re-queues FAILED webhook events below the retry ceiling.",
    },
    {
        "name": "Reset Stuck Webhook Events",
        "task": "monetization.tasks.reset_stuck_webhook_events",
        "every": 15,
        "description": "Marks webhook events PROCESSING for over 30 minutes as FAILED.",
    },
    {
        "name": "Expire Subscriptions",
        "task": "monetization.tasks.expire_subscriptions",
        "every": 60,
        "description": "Moves ACTIVE subscriptions past expires_at to EXPIRED.",
    },
]


def create_periodic_tasks(apps, schema_editor):
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    for task_def in PERIODIC_TASKS:
        schedule, _ = IntervalSchedule.objects.get_or_create(
            every=task_def["every"],
            period="minutes",
        )
        PeriodicTask.objects.get_or_create(
            name=task_def["name"],
            defaults={
                "task": task_def["task"],
                "interval": schedule,
                "enabled": True,
                "description": task_def["description"],
            },
        )


def remove_periodic_tasks(apps, schema_editor):
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    PeriodicTask.objects.filter(
        name__in=[task_def["name"] for task_def in PERIODIC_TASKS],
    ).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("monetization", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_tasks, remove_periodic_tasks),
    ]
