from django.db import models


class Actor(models.Model):
    """Known ledger address (manufacturer, carrier, sensor signer) with a display name."""
    address = models.CharField(max_length=64, unique=True, db_index=True)
    name = models.CharField(max_length=100)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "actors"
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.address})"
