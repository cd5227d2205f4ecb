from django.contrib.auth.signals import user_logged_out
from django.dispatch import receiver

from .state import DonationFormState


@receiver(user_logged_out)
def discard_donation_draft(sender, request=None, user=None, **kwargs):
    # Sent before the session is flushed, so the preview can still be found.
    session = getattr(request, "session", None)
    if session is not None:
        DonationFormState.discard(session)
