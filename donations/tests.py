import shutil
import tempfile

from django.core.files.storage import FileSystemStorage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase

from accounts.session import AUTHENTICATED, LOADING, UNAUTHENTICATED, Session, SessionState

from .client import DEFAULT_REJECTION_MESSAGE, SubmissionFailed, SubmissionRejected
from .previews import PreviewStore
from .state import (
    DRAFT_SESSION_KEY,
    GENERIC_ERROR_MESSAGE,
    MOUNT_LOADING,
    MOUNT_READY,
    MOUNT_REDIRECT,
    THANK_YOU_MESSAGE,
    DonationDraft,
    DonationFormState,
    mount,
)


class FakeClient:
    def __init__(self, error=None):
        self.error = error
        self.payloads = []
        self.loading_during_call = None
        self.state = None

    def save(self, payload):
        self.payloads.append(payload)
        if self.state is not None:
            self.loading_during_call = self.state.loading
        if self.error is not None:
            raise self.error


def png_upload(name="meal.png"):
    return SimpleUploadedFile(name, b"\x89PNG\r\n\x1a\nfake", content_type="image/png")


class MountTests(SimpleTestCase):
    def test_loading_session_shows_placeholder(self):
        self.assertEqual(mount(SessionState(LOADING)), MOUNT_LOADING)

    def test_absent_session_redirects(self):
        self.assertEqual(mount(SessionState(UNAUTHENTICATED)), MOUNT_REDIRECT)

    def test_present_session_renders_form(self):
        state = SessionState(AUTHENTICATED, Session(user_display_name="Asha"))
        self.assertEqual(mount(state), MOUNT_READY)


class DonationFormStateTests(SimpleTestCase):
    def setUp(self):
        self.media = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media, ignore_errors=True)
        self.storage = FileSystemStorage(location=self.media, base_url="/media/")
        self.state = DonationFormState(previews=PreviewStore(self.storage))

    def _fill(self):
        self.state.change("description", "Cooked rice and vegetables")
        self.state.change("quantity", "5 servings")
        self.state.change("location", "123 Main St, City")

    def test_change_updates_field_and_clears_error(self):
        self.state.error = "Duplicate entry"
        self.state.change("quantity", "2 kg")
        self.assertEqual(self.state.draft.quantity, "2 kg")
        self.assertIsNone(self.state.error)

    def test_change_ignores_unknown_field(self):
        self.state.change("image", "not-a-file")
        self.assertIsNone(self.state.draft.image)

    def test_image_selection_creates_preview(self):
        self.state.select_image(png_upload())
        image = self.state.draft.image
        self.assertIsNotNone(image)
        self.assertEqual(image.content_type, "image/png")
        self.assertEqual(image.filename, "meal.png")
        self.assertTrue(self.storage.exists(image.name))
        self.assertTrue(self.state.preview_url.startswith("/donate-food/preview/"))

    def test_non_image_file_is_not_kept(self):
        self.state.select_image(SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain"))
        self.assertIsNone(self.state.draft.image)
        self.assertIsNone(self.state.preview_url)

    def test_non_image_file_releases_previous_preview(self):
        self.state.select_image(png_upload())
        previous = self.state.draft.image
        self.state.select_image(SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain"))
        self.assertIsNone(self.state.draft.image)
        self.assertFalse(self.storage.exists(previous.name))

    def test_replacing_image_releases_previous_preview(self):
        self.state.select_image(png_upload("first.png"))
        first = self.state.draft.image
        self.state.select_image(png_upload("second.png"))
        self.assertFalse(self.storage.exists(first.name))
        self.assertTrue(self.storage.exists(self.state.draft.image.name))

    def test_clear_image_releases_preview(self):
        self.state.select_image(png_upload())
        image = self.state.draft.image
        self.state.clear_image()
        self.assertIsNone(self.state.draft.image)
        self.assertIsNone(self.state.preview_url)
        self.assertFalse(self.storage.exists(image.name))

    def test_successful_submit_resets_draft(self):
        self._fill()
        self.state.select_image(png_upload())
        image = self.state.draft.image
        client = FakeClient()
        client.state = self.state

        self.assertTrue(self.state.submit(client))

        self.assertEqual(self.state.draft, DonationDraft())
        self.assertIsNone(self.state.preview_url)
        self.assertEqual(self.state.acknowledgement, THANK_YOU_MESSAGE)
        self.assertIsNone(self.state.error)
        self.assertFalse(self.state.loading)
        self.assertTrue(client.loading_during_call)
        self.assertFalse(self.storage.exists(image.name))

    def test_submit_sends_text_fields_only(self):
        self._fill()
        self.state.select_image(png_upload())
        client = FakeClient()
        self.state.submit(client)
        self.assertEqual(client.payloads, [{
            "description": "Cooked rice and vegetables",
            "quantity": "5 servings",
            "location": "123 Main St, City",
        }])

    def test_rejected_submit_keeps_draft(self):
        self._fill()
        self.state.select_image(png_upload())
        client = FakeClient(error=SubmissionRejected("Duplicate entry", status_code=409))

        self.assertFalse(self.state.submit(client))

        self.assertEqual(self.state.error, "Duplicate entry")
        self.assertEqual(self.state.draft.description, "Cooked rice and vegetables")
        self.assertEqual(self.state.draft.quantity, "5 servings")
        self.assertEqual(self.state.draft.location, "123 Main St, City")
        self.assertIsNotNone(self.state.preview_url)
        self.assertIsNone(self.state.acknowledgement)
        self.assertFalse(self.state.loading)

    def test_rejection_without_message_uses_fallback(self):
        self._fill()
        self.state.submit(FakeClient(error=SubmissionRejected(DEFAULT_REJECTION_MESSAGE, status_code=500)))
        self.assertEqual(self.state.error, "Failed to save food data")

    def test_transport_failure_shows_generic_message(self):
        self._fill()
        self.assertFalse(self.state.submit(FakeClient(error=SubmissionFailed("connection refused"))))
        self.assertEqual(self.state.error, GENERIC_ERROR_MESSAGE)
        self.assertEqual(self.state.draft.location, "123 Main St, City")
        self.assertFalse(self.state.loading)

    def test_save_and_load_round_trip_through_session(self):
        session = {}
        self._fill()
        self.state.select_image(png_upload())
        self.state.error = "Duplicate entry"
        self.state.save(session)

        loaded = DonationFormState.load(session, previews=PreviewStore(self.storage))
        self.assertEqual(loaded.draft, self.state.draft)
        self.assertEqual(loaded.error, "Duplicate entry")
        self.assertEqual(loaded.preview_url, self.state.preview_url)

    def test_discard_releases_preview_and_forgets_state(self):
        session = {}
        self.state.select_image(png_upload())
        image = self.state.draft.image
        self.state.save(session)

        DonationFormState.discard(session, previews=PreviewStore(self.storage))

        self.assertNotIn(DRAFT_SESSION_KEY, session)
        self.assertFalse(self.storage.exists(image.name))

    def test_discard_without_state_is_noop(self):
        session = {}
        DonationFormState.discard(session, previews=PreviewStore(self.storage))
        self.assertEqual(session, {})
