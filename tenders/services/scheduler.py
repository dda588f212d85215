"""Planification des jobs du coffre.

 - rotation quotidienne à 00:00 (`DAILY_ROTATION`)
 - expiration horaire à HH:00 (`EXPIRATION_SWEEP`)

Deux exécutions d'un même job ne se chevauchent jamais : chaque exécution
prend le verrou `RotationLock` du job par un UPDATE conditionnel, atomique
quel que soit le nombre de processus. Le verrou expire après
LOCK_TTL_MINUTES pour qu'un processus tué ne bloque pas les passages suivants.
"""
import logging
import uuid
from contextlib import contextmanager
from datetime import datetime, timedelta

from django.db.models import Q
from django.utils import timezone

from tenders.conf import vault_setting
from tenders.exceptions import JobAlreadyRunning
from tenders.models import RotationLock
from tenders.services.expiration import SweepSummary, sweep_expired_cycles
from tenders.services.rotation import RotationSummary, perform_daily_rotation

logger = logging.getLogger(__name__)

DAILY_ROTATION = "daily_rotation"
EXPIRATION_SWEEP = "expiration_sweep"
JOBS = (DAILY_ROTATION, EXPIRATION_SWEEP)


@contextmanager
def single_flight(job: str):
    now = timezone.now()
    token = uuid.uuid4().hex
    RotationLock.objects.get_or_create(name=job)
    acquired = (
        RotationLock.objects.filter(name=job)
        .filter(Q(locked_until__isnull=True) | Q(locked_until__lte=now))
        .update(
            token=token,
            acquired_at=now,
            locked_until=now + timedelta(minutes=vault_setting("LOCK_TTL_MINUTES")),
        )
    )
    if not acquired:
        raise JobAlreadyRunning(f"Le job {job} est déjà en cours d'exécution")
    try:
        yield token
    finally:
        RotationLock.objects.filter(name=job, token=token).update(locked_until=None, token="")


def log_run(job: str, counts: dict, started_at: datetime):
    duration_ms = int((timezone.now() - started_at).total_seconds() * 1000)
    fields = " ".join(f"{key}:{value}" for key, value in counts.items())
    logger.info(f"[rotation] timestamp:{timezone.now().isoformat()} job:{job} {fields} duration_ms:{duration_ms}")


def run_daily_rotation(now=None, rng=None) -> RotationSummary:
    started_at = timezone.now()
    with single_flight(DAILY_ROTATION):
        summary = perform_daily_rotation(now=now, rng=rng)
    log_run(DAILY_ROTATION, summary.as_dict(), started_at)
    return summary


def run_expiration_sweep(now=None) -> SweepSummary:
    started_at = timezone.now()
    with single_flight(EXPIRATION_SWEEP):
        summary = sweep_expired_cycles(now=now)
    log_run(EXPIRATION_SWEEP, summary.as_dict(), started_at)
    return summary


RUNNERS = {
    DAILY_ROTATION: run_daily_rotation,
    EXPIRATION_SWEEP: run_expiration_sweep,
}


def next_fire_time(job: str, after: datetime) -> datetime:
    """Prochaine échéance strictement postérieure à `after`."""
    top_of_hour = after.replace(minute=0, second=0, microsecond=0)
    if job == EXPIRATION_SWEEP:
        return top_of_hour + timedelta(hours=1)
    if job == DAILY_ROTATION:
        midnight = top_of_hour.replace(hour=0)
        return midnight + timedelta(days=1)
    raise ValueError(f"Job inconnu : {job}")
