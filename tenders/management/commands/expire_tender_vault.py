from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError

from tenders.exceptions import JobAlreadyRunning
from tenders.services.scheduler import run_expiration_sweep


class Command(BaseCommand):
    help = "Clôt les cycles d'affichage échus et remet les tenders non attribués au coffre."

    def handle(self, *args, **options):
        try:
            summary = run_expiration_sweep()
        except JobAlreadyRunning as exc:
            self.stdout.write(self.style.WARNING(str(exc)))
            return
        except DatabaseError as exc:
            raise CommandError(f"Expiration impossible : {exc}") from exc

        self.stdout.write(
            self.style.SUCCESS(
                f"Expiration terminée : {summary.returned} remis au coffre, {summary.retired} retiré(s), "
                f"{summary.skipped} ignoré(s), {summary.failed} échec(s)"
            )
        )
