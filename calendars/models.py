from django.db import models


class BankHoliday(models.Model):
    """
    Represents a bank holiday.

    Visits on an active bank holiday are flagged so that holiday rates and
    multipliers apply.
    """

    STATUS_CHOICES = [
        ("active", "Active"),
        ("inactive", "Inactive"),
    ]

    name = models.CharField(max_length=200, help_text="Name of the holiday (e.g., Boxing Day)")
    registered_on = models.DateField(unique=True, help_text="Date of the holiday")
    status = models.CharField(
        max_length=10,
        choices=STATUS_CHOICES,
        default="active",
        help_text="Only active holidays affect billing",
    )

    class Meta:
        ordering = ["registered_on"]

    def __str__(self):
        return f"{self.name} ({self.registered_on})"
