"""Management command to verify cached balances against the ledger."""

from django.core.management.base import BaseCommand, CommandError

from rewardman.models import Account
from rewardman.services import ledger


class Command(BaseCommand):
    help = "Compare every account's cached balances and tier with its ledger entries"

    def add_arguments(self, parser):
        parser.add_argument(
            "--account",
            type=int,
            default=None,
            help="Audit a single account id",
        )

    def handle(self, *args, **options):
        qs = Account.objects.order_by("pk")
        if options["account"] is not None:
            qs = qs.filter(pk=options["account"])

        checked = 0
        drifted = []
        for account_id in qs.values_list("pk", flat=True).iterator():
            report = ledger.audit(account_id)
            checked += 1
            if not report.ok:
                drifted.append(report)
                self.stderr.write(
                    f"Account {report.account_id}: "
                    f"credits {report.credit_balance} != {report.credit_sum}, "
                    f"points {report.points_balance} != {report.points_sum}, "
                    f"tier {report.cached_tier} != {report.expected_tier}"
                )

        if drifted:
            raise CommandError(f"{len(drifted)} of {checked} accounts drifted from the ledger.")
        self.stdout.write(self.style.SUCCESS(f"Audited {checked} accounts, no drift."))
