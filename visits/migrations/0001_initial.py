import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("clients", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Visit",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("visit_date", models.DateField(db_index=True, help_text="Date of the visit")),
                ("planned_start", models.TimeField(help_text="Planned start time")),
                ("planned_end", models.TimeField(help_text="Planned end time")),
                (
                    "actual_start",
                    models.TimeField(blank=True, help_text="Recorded start time", null=True),
                ),
                (
                    "actual_end",
                    models.TimeField(blank=True, help_text="Recorded end time", null=True),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("scheduled", "Scheduled"),
                            ("in_progress", "In progress"),
                            ("done", "Done"),
                            ("completed", "Completed"),
                            ("cancelled", "Cancelled"),
                        ],
                        default="scheduled",
                        help_text="Only done and completed visits are billed",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "client",
                    models.ForeignKey(
                        help_text="Client receiving the visit",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="visits",
                        to="clients.client",
                    ),
                ),
            ],
            options={
                "ordering": ["client", "visit_date", "planned_start"],
                "indexes": [
                    models.Index(
                        fields=["client", "visit_date"], name="visit_client_date_idx"
                    )
                ],
            },
        ),
    ]
