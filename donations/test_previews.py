import os
import shutil
import tempfile
import time
from datetime import timedelta
from io import StringIO

from django.core.files.storage import FileSystemStorage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.test import SimpleTestCase, override_settings
from django.utils import timezone

from .previews import ImageRef, PreviewStore, is_image_upload


class PreviewStoreTests(SimpleTestCase):
    def setUp(self):
        self.media = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media, ignore_errors=True)
        self.storage = FileSystemStorage(location=self.media, base_url="/media/")
        self.store = PreviewStore(self.storage)

    def test_is_image_upload_checks_declared_media_type(self):
        self.assertTrue(is_image_upload(SimpleUploadedFile("a.webp", b"x", content_type="image/webp")))
        self.assertFalse(is_image_upload(SimpleUploadedFile("a.png", b"x", content_type="text/plain")))
        self.assertFalse(is_image_upload(SimpleUploadedFile("a.png", b"x", content_type="")))
        self.assertFalse(is_image_upload(None))

    def test_acquire_stores_under_preview_dir_with_random_name(self):
        ref = self.store.acquire(SimpleUploadedFile("My Lunch.JPG", b"jpeg", content_type="image/jpeg"))
        self.assertTrue(ref.name.startswith("previews/"))
        self.assertTrue(ref.name.endswith(".jpg"))
        self.assertNotIn("Lunch", ref.name)
        self.assertEqual(ref.filename, "My Lunch.JPG")
        self.assertTrue(self.storage.exists(ref.name))
        self.assertEqual(self.store.url(ref), f"/donate-food/preview/{os.path.basename(ref.name)}")

    @override_settings(PREVIEW_UPLOAD_DIR="tmp/donation-previews/")
    def test_preview_dir_follows_settings(self):
        ref = self.store.acquire(SimpleUploadedFile("a.png", b"x", content_type="image/png"))
        self.assertTrue(ref.name.startswith("tmp/donation-previews/"))

    def test_release_deletes_file_and_tolerates_none(self):
        ref = self.store.acquire(SimpleUploadedFile("a.png", b"x", content_type="image/png"))
        self.store.release(ref)
        self.assertFalse(self.storage.exists(ref.name))
        self.store.release(None)
        self.assertIsNone(self.store.url(None))

    def test_image_ref_round_trip(self):
        ref = ImageRef(name="previews/abc.png", content_type="image/png", filename="a.png")
        self.assertEqual(ImageRef.from_dict(ref.to_dict()), ref)
        self.assertIsNone(ImageRef.from_dict(None))
        self.assertIsNone(ImageRef.from_dict({"name": ""}))

    def test_stale_lists_only_old_previews(self):
        old = self.store.acquire(SimpleUploadedFile("old.png", b"x", content_type="image/png"))
        fresh = self.store.acquire(SimpleUploadedFile("new.png", b"x", content_type="image/png"))
        two_days_ago = time.time() - 2 * 24 * 3600
        os.utime(self.storage.path(old.name), (two_days_ago, two_days_ago))

        stale = list(self.store.stale(timezone.now() - timedelta(hours=24)))

        self.assertEqual(stale, [old.name])
        self.assertNotIn(fresh.name, stale)

    def test_stale_without_preview_dir_is_empty(self):
        self.assertEqual(list(self.store.stale(timezone.now())), [])


class PurgePreviewsCommandTests(SimpleTestCase):
    def setUp(self):
        self.media = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.media, ignore_errors=True)
        override = override_settings(MEDIA_ROOT=self.media, SESSION_COOKIE_AGE=14 * 24 * 3600)
        override.enable()
        self.addCleanup(override.disable)

        os.makedirs(os.path.join(self.media, "previews"))
        self.stale_path = self._preview("stale.png", days_old=15)
        self.recent_path = self._preview("recent.png", days_old=2)
        self.fresh_path = self._preview("fresh.png", days_old=0)

    def _preview(self, name, days_old):
        path = os.path.join(self.media, "previews", name)
        with open(path, "wb") as fh:
            fh.write(b"x")
        if days_old:
            mtime = time.time() - days_old * 24 * 3600
            os.utime(path, (mtime, mtime))
        return path

    def test_default_cutoff_follows_session_age(self):
        out = StringIO()
        call_command("purge_previews", stdout=out)
        self.assertFalse(os.path.exists(self.stale_path))
        # A two day old draft is still inside its session, so its preview stays.
        self.assertTrue(os.path.exists(self.recent_path))
        self.assertTrue(os.path.exists(self.fresh_path))
        self.assertIn("Deleted 1 stale previews.", out.getvalue())

    def test_explicit_age_overrides_session_age(self):
        out = StringIO()
        call_command("purge_previews", "--older-than-hours", "24", stdout=out)
        self.assertFalse(os.path.exists(self.stale_path))
        self.assertFalse(os.path.exists(self.recent_path))
        self.assertTrue(os.path.exists(self.fresh_path))
        self.assertIn("Deleted 2 stale previews.", out.getvalue())

    def test_dry_run_keeps_files(self):
        out = StringIO()
        call_command("purge_previews", "--dry-run", stdout=out)
        self.assertTrue(os.path.exists(self.stale_path))
        self.assertIn("Would delete previews/stale.png", out.getvalue())
        self.assertIn("Found 1 stale previews.", out.getvalue())

    def test_nothing_older_than_cutoff(self):
        out = StringIO()
        call_command("purge_previews", "--older-than-hours", "720", stdout=out)
        self.assertTrue(os.path.exists(self.stale_path))
        self.assertIn("No stale previews", out.getvalue())
