from django.db import models


class FoodDonation(models.Model):
    """Leftover food offered for pickup, as stored by the save endpoint."""

    description = models.TextField()
    quantity = models.CharField(max_length=255)  # free text, e.g. "5 servings" or "2 kg"
    location = models.CharField(max_length=255)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ("-created_at",)

    def __str__(self):
        return f"{self.quantity} at {self.location}"
