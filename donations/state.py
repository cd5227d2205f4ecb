"""View state for the donate-food page.

``DonationFormState`` holds the draft, the image preview, the error and
loading flags and the acknowledgement shown after a successful submit. It is
kept in the Django session between requests.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from accounts.session import SessionState

from .client import SubmissionError, SubmissionRejected
from .previews import ImageRef, PreviewStore, is_image_upload

DRAFT_SESSION_KEY = "donate_food_state"
TEXT_FIELDS = ("description", "quantity", "location")

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."
THANK_YOU_MESSAGE = "Thank you for donating leftover food!"

MOUNT_LOADING = "loading"
MOUNT_REDIRECT = "redirect"
MOUNT_READY = "ready"

logger = logging.getLogger(__name__)


def mount(session_state: SessionState) -> str:
    """Decide what the page renders for ``session_state``.

    ``MOUNT_LOADING``: a placeholder, nothing else happens.
    ``MOUNT_REDIRECT``: nothing; the caller sends the user to the login page.
    ``MOUNT_READY``: the form.
    """
    if session_state.is_loading:
        return MOUNT_LOADING
    if not session_state.is_authenticated:
        return MOUNT_REDIRECT
    return MOUNT_READY


@dataclass
class DonationDraft:
    description: str = ""
    quantity: str = ""
    location: str = ""
    image: Optional[ImageRef] = None

    def to_payload(self) -> dict:
        # The image is not part of the save request.
        return {
            "description": self.description,
            "quantity": self.quantity,
            "location": self.location,
        }

    def to_dict(self) -> dict:
        data = self.to_payload()
        data["image"] = self.image.to_dict() if self.image else None
        return data

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "DonationDraft":
        data = data or {}
        return cls(
            description=data.get("description", ""),
            quantity=data.get("quantity", ""),
            location=data.get("location", ""),
            image=ImageRef.from_dict(data.get("image")),
        )


class DonationFormState:
    def __init__(self, draft: DonationDraft = None, error: str = None, previews: PreviewStore = None):
        self.previews = previews or PreviewStore()
        self.draft = draft or DonationDraft()
        self.preview_url = self.previews.url(self.draft.image)
        self.error = error
        self.loading = False
        self.acknowledgement = None

    # --- session persistence ---
    @classmethod
    def load(cls, session, previews: PreviewStore = None) -> "DonationFormState":
        stored = session.get(DRAFT_SESSION_KEY) or {}
        return cls(
            draft=DonationDraft.from_dict(stored.get("draft")),
            error=stored.get("error"),
            previews=previews,
        )

    def save(self, session) -> None:
        session[DRAFT_SESSION_KEY] = {"draft": self.draft.to_dict(), "error": self.error}

    @classmethod
    def discard(cls, session, previews: PreviewStore = None) -> None:
        """Tear down any state stored in ``session`` and forget it."""
        if DRAFT_SESSION_KEY not in session:
            return
        cls.load(session, previews=previews).teardown()
        del session[DRAFT_SESSION_KEY]

    # --- operations ---
    def change(self, name: str, value: str) -> None:
        if name not in TEXT_FIELDS:
            logger.debug("Ignoring change to unknown donation field %s", name)
            return
        setattr(self.draft, name, value)
        self.error = None

    def select_image(self, uploaded_file) -> None:
        """Keep ``uploaded_file`` when it declares an image media type, otherwise clear the image."""
        if is_image_upload(uploaded_file):
            self._replace_image(self.previews.acquire(uploaded_file))
        else:
            if uploaded_file is not None:
                logger.info(
                    "Ignoring non-image upload filename=%s content_type=%s",
                    uploaded_file.name,
                    getattr(uploaded_file, "content_type", None),
                )
            self._replace_image(None)

    def clear_image(self) -> None:
        self._replace_image(None)

    def submit(self, client) -> bool:
        """Send the draft once through ``client``. Returns True on success."""
        self.loading = True
        self.error = None
        self.acknowledgement = None
        try:
            client.save(self.draft.to_payload())
        except SubmissionRejected as e:
            self.error = e.message
            return False
        except SubmissionError:
            self.error = GENERIC_ERROR_MESSAGE
            return False
        else:
            self.reset()
            self.acknowledgement = THANK_YOU_MESSAGE
            return True
        finally:
            self.loading = False

    def reset(self) -> None:
        self._replace_image(None)
        self.draft = DonationDraft()
        self.error = None

    def teardown(self) -> None:
        self._replace_image(None)

    def _replace_image(self, ref: Optional[ImageRef]) -> None:
        previous = self.draft.image
        if previous is not None and previous != ref:
            self.previews.release(previous)
        self.draft.image = ref
        self.preview_url = self.previews.url(ref)
