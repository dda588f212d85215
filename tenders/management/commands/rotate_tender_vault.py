import random

from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError

from tenders.exceptions import JobAlreadyRunning
from tenders.services.scheduler import run_daily_rotation


class Command(BaseCommand):
    help = "Active un lot aléatoire de tenders éligibles du coffre (rotation quotidienne)."

    def add_arguments(self, parser):
        parser.add_argument("--seed", type=int, help="Graine du tirage aléatoire (reproductibilité)")

    def handle(self, *args, **options):
        seed = options.get("seed")
        rng = random.Random(seed) if seed is not None else None
        try:
            summary = run_daily_rotation(rng=rng)
        except JobAlreadyRunning as exc:
            self.stdout.write(self.style.WARNING(str(exc)))
            return
        except DatabaseError as exc:
            raise CommandError(f"Rotation quotidienne impossible : {exc}") from exc

        self.stdout.write(
            self.style.SUCCESS(
                f"Rotation terminée : {summary.activated} activé(s) dont {summary.final} dernier(s) affichage(s), "
                f"{summary.retired} retiré(s), "
                f"{summary.failed} échec(s) sur {summary.selected} sélectionné(s)"
            )
        )
        for result in summary.activations:
            self.stdout.write(
                f"  tender {result.tender_id} cycle {result.cycle_number} "
                f"client {result.public_id} annonce {result.order_id} jusqu'à {result.display_end.isoformat()}"
            )
