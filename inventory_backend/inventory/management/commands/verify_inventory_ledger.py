# inventory/management/commands/verify_inventory_ledger.py

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from inventory.models import InventoryItem, StockMovement
from inventory.services.reports import verify_ledger


class Command(BaseCommand):
    help = "Verify inventory ledger integrity (available = on_hand - reserved, on_hand = sum of movements)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Fail (non-zero exit) if any discrepancy is found.",
        )
        parser.add_argument(
            "--limit",
            type=int,
            default=20,
            help="Maximum number of discrepancies to print (default 20).",
        )

    def handle(self, *args, **options):
        strict = bool(options.get("strict"))
        limit = max(int(options.get("limit") or 20), 1)

        self.stdout.write(self.style.MIGRATE_HEADING("Inventory Ledger Verification"))
        self.stdout.write(f"Ledger rows:     {InventoryItem.objects.count()}")
        self.stdout.write(f"Movement rows:   {StockMovement.objects.count()}")
        self.stdout.write("")

        problems = verify_ledger()

        if not problems:
            self.stdout.write(self.style.SUCCESS("[OK] Ledger consistent with movement log"))
            return

        self.stderr.write(
            self.style.ERROR(f"[FAIL] Ledger discrepancies found: {len(problems)}")
        )
        for problem in problems[:limit]:
            self.stderr.write(f"  {problem.describe()}")

        if strict:
            raise CommandError(f"{len(problems)} ledger discrepancy(ies) found")
