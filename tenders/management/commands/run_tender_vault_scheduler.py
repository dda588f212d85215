import logging
import time

from django.core.management.base import BaseCommand
from django.utils import timezone

from tenders.exceptions import JobAlreadyRunning
from tenders.services.scheduler import JOBS, RUNNERS, next_fire_time

logger = logging.getLogger("tenders.scheduler")


class Command(BaseCommand):
    help = "Boucle de planification : rotation quotidienne à minuit, expiration toutes les heures."

    def add_arguments(self, parser):
        parser.add_argument("--run-now", action="store_true", help="Exécuter les deux jobs dès le démarrage")
        parser.add_argument("--max-runs", type=int, default=0, help="Arrêter après N exécutions (0 = sans fin)")

    def handle(self, *args, **options):
        now = timezone.now()
        next_runs = {job: (now if options["run_now"] else next_fire_time(job, now)) for job in JOBS}
        max_runs = options["max_runs"]
        runs = 0

        while not max_runs or runs < max_runs:
            job = min(JOBS, key=lambda name: next_runs[name])
            wait = (next_runs[job] - timezone.now()).total_seconds()
            if wait > 0:
                time.sleep(wait)
            self._run(job)
            runs += 1
            next_runs[job] = next_fire_time(job, timezone.now())

    def _run(self, job):
        try:
            summary = RUNNERS[job]()
        except JobAlreadyRunning as exc:
            logger.warning(str(exc))
            return
        except Exception:
            # job entier en échec (base injoignable...) : nouvel essai à la prochaine échéance
            logger.exception(f"Le job {job} a échoué")
            return
        self.stdout.write(f"[{job}] {summary.as_dict()}")
