from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from donations.previews import ImageRef, PreviewStore, preview_dir


class Command(BaseCommand):
    help = "Delete image previews left behind by abandoned donation drafts"

    def add_arguments(self, parser):
        parser.add_argument(
            "--older-than-hours",
            type=int,
            default=None,
            help="Only previews older than N hours (default: SESSION_COOKIE_AGE, so live drafts keep their image)",
        )
        parser.add_argument("--dry-run", action="store_true", help="List previews without deleting them")

    def handle(self, *args, **opts):
        if opts["older_than_hours"] is None:
            max_age = timedelta(seconds=settings.SESSION_COOKIE_AGE)
        else:
            max_age = timedelta(hours=opts["older_than_hours"])
        cutoff = timezone.now() - max_age
        store = PreviewStore()

        stale = list(store.stale(cutoff))
        if not stale:
            self.stdout.write(self.style.SUCCESS(f"No stale previews in {preview_dir()}/."))
            return

        for name in stale:
            if opts["dry_run"]:
                self.stdout.write(f"Would delete {name}")
            else:
                store.release(ImageRef(name=name, content_type=""))
                self.stdout.write(f"Deleted {name}")

        verb = "Found" if opts["dry_run"] else "Deleted"
        self.stdout.write(self.style.SUCCESS(f"{verb} {len(stale)} stale previews."))
