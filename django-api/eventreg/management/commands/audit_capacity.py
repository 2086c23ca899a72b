"""Report events whose registered count differs from their recorded registrations.

Read-only: mismatches are printed, never repaired. Exits with code 1 when
any mismatch is found so the command can gate a scheduled job.

Usage:
    python manage.py audit_capacity
    python manage.py audit_capacity --page-size 50
"""

import typing as t

from django.core.management.base import BaseCommand

from eventreg.services.audit_service import CapacityAuditor
from eventreg.stores import get_item_store


class Command(BaseCommand):
    help = "Compare each event's capacity counter with the seats held by its registrations."

    def add_arguments(self, parser: t.Any) -> None:
        """Add CLI arguments."""
        parser.add_argument(
            "--page-size",
            type=int,
            default=100,
            help="Items requested per store page (default: 100).",
        )

    def handle(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Run the audit."""
        auditor = CapacityAuditor(get_item_store(), page_size=kwargs["page_size"])
        mismatches = auditor.find_mismatches()
        if not mismatches:
            self.stdout.write(self.style.SUCCESS("All event capacity counters match their registrations."))
            return

        for mismatch in mismatches:
            self.stdout.write(
                self.style.WARNING(
                    f"{mismatch.event_id}: registered={mismatch.registered} "
                    f"recorded={mismatch.recorded_seats} "
                    f"({mismatch.registrations} registrations, {mismatch.orphaned_seats} orphaned seats)"
                )
            )
        raise SystemExit(1)
