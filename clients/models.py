from django.db import models


class Client(models.Model):
    """
    Represents a care client who receives and is billed for visits.
    """

    AUTHORITY_TYPE_CHOICES = [
        ("private", "Private"),
        ("local_authority", "Local Authority"),
        ("nhs", "NHS"),
    ]

    name = models.CharField(max_length=200, help_text="Full name of the client")
    authority_type = models.CharField(
        max_length=30,
        choices=AUTHORITY_TYPE_CHOICES,
        default="private",
        help_text="Who pays for this client's care",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
