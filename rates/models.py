from decimal import Decimal

from django.core.exceptions import ValidationError
from django.db import models

DAY_CHOICES = [
    ("monday", "Monday"),
    ("tuesday", "Tuesday"),
    ("wednesday", "Wednesday"),
    ("thursday", "Thursday"),
    ("friday", "Friday"),
    ("saturday", "Saturday"),
    ("sunday", "Sunday"),
    ("bank_holiday", "Bank Holiday"),
]

VALID_DAY_TOKENS = frozenset(
    [value for value, _ in DAY_CHOICES]
    + [value[:3] for value, _ in DAY_CHOICES if value != "bank_holiday"]
)


class RateSchedule(models.Model):
    """
    A client-specific pricing rule scoped by validity dates, days and time of day.

    A client may have several schedules at once (e.g., weekday daytime,
    weekend, bank holiday). When billing, schedules are tried in order of
    start_date then id, and the first one that covers a visit wins.
    """

    CHARGE_TYPE_CHOICES = [
        ("flat_rate", "Flat rate"),
        ("pro_rata", "Pro rata"),
        ("hourly_rate", "Hourly rate"),
        ("hour_minutes", "Hours and minutes"),
        ("rate_per_hour", "Rate per hour"),
        ("rate_per_minutes_pro_rata", "Rate per minute (pro rata)"),
        ("rate_per_minutes_flat_rate", "Rate per minute (flat rate)"),
        ("daily_flat_rate", "Daily flat rate"),
    ]

    RATE_CATEGORY_CHOICES = [
        ("standard", "Standard"),
        ("adult", "Adult"),
        ("cyp", "Children and young people"),
    ]

    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.CASCADE,
        related_name="rate_schedules",
        help_text="Client this schedule prices visits for",
    )
    name = models.CharField(
        max_length=200,
        blank=True,
        help_text="Descriptive name (e.g., 'Weekday daytime')",
    )
    authority_type = models.CharField(
        max_length=30,
        default="private",
        help_text="Funding authority this schedule is agreed with",
    )
    rate_category = models.CharField(
        max_length=10,
        choices=RATE_CATEGORY_CHOICES,
        default="standard",
    )
    start_date = models.DateField(help_text="First date the schedule is valid (inclusive)")
    end_date = models.DateField(
        null=True,
        blank=True,
        help_text="Last date the schedule is valid (inclusive). Null = open ended.",
    )
    is_active = models.BooleanField(default=True)
    days_covered = models.JSONField(
        default=list,
        help_text="Day names (e.g. 'monday' or 'mon') and/or 'bank_holiday'",
    )
    time_from = models.TimeField(help_text="Earliest visit start time covered (inclusive)")
    time_until = models.TimeField(help_text="Latest visit start time covered (inclusive)")
    charge_type = models.CharField(
        max_length=40,
        choices=CHARGE_TYPE_CHOICES,
        default="hourly_rate",
    )
    base_rate = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        help_text="Rate in GBP per hour",
    )
    rate_15_minutes = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    rate_30_minutes = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    rate_45_minutes = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    rate_60_minutes = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    bank_holiday_multiplier = models.DecimalField(
        max_digits=4,
        decimal_places=2,
        default=Decimal("1"),
        help_text="Multiplier applied to visits on bank holidays (1-3)",
    )
    is_vatable = models.BooleanField(default=False)

    class Meta:
        ordering = ["client", "start_date", "id"]

    def __str__(self):
        label = self.name or self.get_charge_type_display()
        return (
            f"{self.client.name} - {label} "
            f"({self.time_from:%H:%M}-{self.time_until:%H:%M}, £{self.base_rate})"
        )

    def clean(self):
        """Validate schedule constraints."""
        errors = {}

        if self.time_from and self.time_until and self.time_until <= self.time_from:
            errors["time_until"] = "Time until must be after time from."

        if self.start_date and self.end_date and self.end_date < self.start_date:
            errors["end_date"] = "End date must be on or after the start date."

        if not isinstance(self.days_covered, list) or not self.days_covered:
            errors["days_covered"] = "At least one day must be selected."
        else:
            unknown = [
                day
                for day in self.days_covered
                if not isinstance(day, str) or day.lower() not in VALID_DAY_TOKENS
            ]
            if unknown:
                errors["days_covered"] = f"Unknown day(s): {', '.join(map(str, unknown))}"

        if self.base_rate is not None and self.base_rate <= 0:
            errors["base_rate"] = "Base rate must be greater than 0."

        if self.bank_holiday_multiplier is not None and not (
            Decimal("1") <= self.bank_holiday_multiplier <= Decimal("3")
        ):
            errors["bank_holiday_multiplier"] = "Bank holiday multiplier must be between 1 and 3."

        if errors:
            raise ValidationError(errors)
