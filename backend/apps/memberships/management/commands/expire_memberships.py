"""
Mark ACTIVE seats past their expiry date as EXPIRED.

Usage:
    python manage.py expire_memberships
    python manage.py expire_memberships --dry-run
"""

from django.core.management.base import BaseCommand

from apps.memberships.services import expire_memberships


class Command(BaseCommand):
    help = "Expire ACTIVE memberships whose expires_at has passed"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only count the seats that would expire",
        )

    def handle(self, *args, **options):
        dry_run = options["dry_run"]
        count = expire_memberships(dry_run=dry_run)
        if dry_run:
            self.stdout.write(f"Would expire {count} membership(s)")
        else:
            self.stdout.write(self.style.SUCCESS(f"Expired {count} membership(s)"))
