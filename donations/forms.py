from django import forms

from .models import FoodDonation


class FoodDonationPayloadForm(forms.ModelForm):
    """Validate the JSON body accepted by the save endpoint."""

    class Meta:
        model = FoodDonation
        fields = ("description", "quantity", "location")


class DonationForm(forms.Form):
    """Collect a leftover-food donation for pickup."""

    description = forms.CharField(
        label="Food Description",
        strip=False,
        widget=forms.Textarea(attrs={
            "class": "form-control",
            "rows": 3,
            "placeholder": "e.g., Cooked rice and vegetables",
        }),
    )
    quantity = forms.CharField(
        label="Quantity (e.g., servings or weight)",
        strip=False,
        widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "e.g., 5 servings or 2 kg"}),
    )
    location = forms.CharField(
        label="Pickup Location",
        strip=False,
        widget=forms.TextInput(attrs={"class": "form-control", "placeholder": "e.g., 123 Main St, City"}),
    )
