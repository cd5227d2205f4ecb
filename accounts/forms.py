from django import forms
from django.contrib.auth import authenticate, get_user_model
from django.core.exceptions import ValidationError
from django.core.validators import validate_email

User = get_user_model()


class SignInForm(forms.Form):
    """Authenticate using either username or email."""

    identifier = forms.CharField(
        label="Username or email",
        widget=forms.TextInput(attrs={"class": "form-control", "autofocus": True, "required": True}),
    )
    password = forms.CharField(
        strip=False,
        widget=forms.PasswordInput(attrs={"class": "form-control", "required": True}),
    )

    def __init__(self, request=None, *args, **kwargs):
        self.request = request
        self.user_cache = None
        super().__init__(*args, **kwargs)

    def clean(self):
        cleaned_data = super().clean()
        identifier = (cleaned_data.get("identifier") or "").strip()
        password = cleaned_data.get("password")

        if identifier and password:
            username = identifier
            try:
                validate_email(identifier)
                match = User.objects.filter(email__iexact=identifier).first()
                if match:
                    username = match.get_username()
            except ValidationError:
                pass

            self.user_cache = authenticate(self.request, username=username, password=password)
            if self.user_cache is None:
                raise forms.ValidationError("Invalid credentials")

        return cleaned_data

    def get_user(self):
        return self.user_cache
