import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

VISIBILITY_CHOICES = [
    ("free", "Free"),
    ("subscriber", "Subscribers only"),
    ("ppv", "Pay-per-view"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Post",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("title", models.CharField(max_length=255)),
                ("visibility", models.CharField(choices=VISIBILITY_CHOICES, default="subscriber", max_length=20)),
                ("price_cents", models.PositiveIntegerField(default=0)),
                ("is_disabled", models.BooleanField(db_index=True, default=False)),
                ("disabled_at", models.DateTimeField(blank=True, null=True)),
                ("body", models.TextField(blank=True, default="")),
                ("creator", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "content_post",
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["creator", "-created_at"], name="post_creator_created_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LiveStream",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, help_text="Unique identifier for this record", primary_key=True, serialize=False)),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, help_text="Timestamp when this record was created")),
                ("updated_at", models.DateTimeField(auto_now=True, help_text="Timestamp when this record was last modified")),
                ("title", models.CharField(max_length=255)),
                ("visibility", models.CharField(choices=VISIBILITY_CHOICES, default="subscriber", max_length=20)),
                ("price_cents", models.PositiveIntegerField(default=0)),
                ("is_disabled", models.BooleanField(db_index=True, default=False)),
                ("disabled_at", models.DateTimeField(blank=True, null=True)),
                ("description", models.TextField(blank=True, default="")),
                (
                    "status",
                    models.CharField(
                        choices=[("scheduled", "Scheduled"), ("live", "Live"), ("ended", "Ended")],
                        default="scheduled",
                        max_length=20,
                    ),
                ),
                ("scheduled_at", models.DateTimeField(blank=True, null=True)),
                ("creator", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="+", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "db_table": "content_live_stream",
                "ordering": ["-created_at"],
                "abstract": False,
                "indexes": [
                    models.Index(fields=["creator", "-created_at"], name="stream_creator_created_idx"),
                ],
            },
        ),
    ]
