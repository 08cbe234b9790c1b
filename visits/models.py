from django.core.exceptions import ValidationError
from django.db import models


class Visit(models.Model):
    """
    Represents a scheduled care visit for a client.

    Times are local wall-clock times on visit_date. Actual times are recorded
    after the visit takes place.
    """

    STATUS_CHOICES = [
        ("scheduled", "Scheduled"),
        ("in_progress", "In progress"),
        ("done", "Done"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
    ]
    BILLABLE_STATUSES = ("done", "completed")

    client = models.ForeignKey(
        "clients.Client",
        on_delete=models.CASCADE,
        related_name="visits",
        help_text="Client receiving the visit",
    )
    visit_date = models.DateField(db_index=True, help_text="Date of the visit")
    planned_start = models.TimeField(help_text="Planned start time")
    planned_end = models.TimeField(help_text="Planned end time")
    actual_start = models.TimeField(null=True, blank=True, help_text="Recorded start time")
    actual_end = models.TimeField(null=True, blank=True, help_text="Recorded end time")
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default="scheduled",
        help_text="Only done and completed visits are billed",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["client", "visit_date", "planned_start"]
        indexes = [
            models.Index(fields=["client", "visit_date"], name="visit_client_date_idx"),
        ]

    def __str__(self):
        return (
            f"{self.client.name} - {self.visit_date} "
            f"{self.planned_start:%H:%M}-{self.planned_end:%H:%M}"
        )

    @property
    def is_billable(self) -> bool:
        return self.status in self.BILLABLE_STATUSES

    def clean(self) -> None:
        """Validate that visits end after they start."""
        super().clean()

        if self.planned_start and self.planned_end and self.planned_end <= self.planned_start:
            raise ValidationError({"planned_end": "Planned end must be after planned start."})

        if self.actual_start and self.actual_end and self.actual_end <= self.actual_start:
            raise ValidationError({"actual_end": "Actual end must be after actual start."})
