from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("clients", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="RateSchedule",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "name",
                    models.CharField(
                        blank=True,
                        help_text="Descriptive name (e.g., 'Weekday daytime')",
                        max_length=200,
                    ),
                ),
                (
                    "authority_type",
                    models.CharField(
                        default="private",
                        help_text="Funding authority this schedule is agreed with",
                        max_length=30,
                    ),
                ),
                (
                    "rate_category",
                    models.CharField(
                        choices=[
                            ("standard", "Standard"),
                            ("adult", "Adult"),
                            ("cyp", "Children and young people"),
                        ],
                        default="standard",
                        max_length=10,
                    ),
                ),
                (
                    "start_date",
                    models.DateField(help_text="First date the schedule is valid (inclusive)"),
                ),
                (
                    "end_date",
                    models.DateField(
                        blank=True,
                        help_text="Last date the schedule is valid (inclusive). Null = open ended.",
                        null=True,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                (
                    "days_covered",
                    models.JSONField(
                        default=list,
                        help_text="Day names (e.g. 'monday' or 'mon') and/or 'bank_holiday'",
                    ),
                ),
                (
                    "time_from",
                    models.TimeField(help_text="Earliest visit start time covered (inclusive)"),
                ),
                (
                    "time_until",
                    models.TimeField(help_text="Latest visit start time covered (inclusive)"),
                ),
                (
                    "charge_type",
                    models.CharField(
                        choices=[
                            ("flat_rate", "Flat rate"),
                            ("pro_rata", "Pro rata"),
                            ("hourly_rate", "Hourly rate"),
                            ("hour_minutes", "Hours and minutes"),
                            ("rate_per_hour", "Rate per hour"),
                            ("rate_per_minutes_pro_rata", "Rate per minute (pro rata)"),
                            ("rate_per_minutes_flat_rate", "Rate per minute (flat rate)"),
                            ("daily_flat_rate", "Daily flat rate"),
                        ],
                        default="hourly_rate",
                        max_length=40,
                    ),
                ),
                (
                    "base_rate",
                    models.DecimalField(
                        decimal_places=2, help_text="Rate in GBP per hour", max_digits=10
                    ),
                ),
                (
                    "rate_15_minutes",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True),
                ),
                (
                    "rate_30_minutes",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True),
                ),
                (
                    "rate_45_minutes",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True),
                ),
                (
                    "rate_60_minutes",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True),
                ),
                (
                    "bank_holiday_multiplier",
                    models.DecimalField(
                        decimal_places=2,
                        default=Decimal("1"),
                        help_text="Multiplier applied to visits on bank holidays (1-3)",
                        max_digits=4,
                    ),
                ),
                ("is_vatable", models.BooleanField(default=False)),
                (
                    "client",
                    models.ForeignKey(
                        help_text="Client this schedule prices visits for",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="rate_schedules",
                        to="clients.client",
                    ),
                ),
            ],
            options={
                "ordering": ["client", "start_date", "id"],
            },
        ),
    ]
