"""Activation d'un tender : passage du coffre à l'affichage public.

Une activation est une unité atomique :
 1. verrouillage du tender et revérification de l'éligibilité ;
 2. numéro de cycle = usage_count + 1 ;
 3. création de l'annonce publique anonyme (`orders.services.create_listing`) ;
 4. insertion du cycle avec un identifiant public unique ;
 5. mise à jour du tender (statut, compteur, fenêtre d'affichage).
Tout est persisté ou rien ne l'est.
"""
import logging
from dataclasses import dataclass
from datetime import datetime

from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from orders.services import create_listing
from tenders.conf import display_duration, vault_setting
from tenders.exceptions import EligibilityMismatch, IdCollision, StoreFailure
from tenders.models import Tender, TenderCycle
from tenders.services.eligibility import eligibility_q
from tenders.services.public_ids import generate_public_id, issue_public_id, public_id_taken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActivationResult:
    tender_id: int
    cycle_id: int
    cycle_number: int
    public_id: str
    order_id: int
    display_start: datetime
    display_end: datetime
    final: bool


def activate_tender(tender_id: int, now=None, generate=generate_public_id) -> ActivationResult:
    """Active un tender éligible pour une fenêtre d'affichage.

    Raises:
        EligibilityMismatch: le tender n'est plus éligible ou est verrouillé
            par une autre exécution.
        IdCollision: aucun identifiant public unique disponible.
        StoreFailure: erreur de base ; la transaction est annulée.
    """
    now = now or timezone.now()
    try:
        with transaction.atomic():
            tender = (
                Tender.objects.select_for_update(skip_locked=True)
                .filter(eligibility_q(now), pk=tender_id)
                .first()
            )
            if tender is None:
                raise EligibilityMismatch(f"Tender {tender_id} n'est plus éligible à la rotation")

            cycle_number = tender.usage_count + 1
            start = now
            end = now + display_duration()

            order = create_listing(**tender.listing_fields())
            cycle = _open_cycle(tender, cycle_number, order, start, end, generate)

            tender.status = Tender.STATUS_ACTIVE
            tender.usage_count = cycle_number
            tender.last_displayed_at = start
            tender.display_start_time = start
            tender.display_end_time = end
            tender.save(
                update_fields=[
                    "status",
                    "usage_count",
                    "last_displayed_at",
                    "display_start_time",
                    "display_end_time",
                    "updated_at",
                ]
            )
    except DatabaseError as exc:
        raise StoreFailure(f"Activation du tender {tender_id} annulée : {exc}") from exc

    logger.info(
        f"Tender {tender.pk} activé (cycle {cycle.cycle_number}, client {cycle.public_id}, "
        f"annonce {order.pk}, jusqu'à {end.isoformat()})"
    )
    return ActivationResult(
        tender_id=tender.pk,
        cycle_id=cycle.pk,
        cycle_number=cycle.cycle_number,
        public_id=cycle.public_id,
        order_id=order.pk,
        display_start=start,
        display_end=end,
        final=tender.has_reached_max_usage,
    )


def _open_cycle(tender, cycle_number, order, start, end, generate) -> TenderCycle:
    # Un doublon inséré entre la vérification et l'insertion est rejeté par la
    # contrainte d'unicité : on revient au savepoint et on réessaie.
    attempts = vault_setting("PUBLIC_ID_ATTEMPTS")
    for _ in range(attempts):
        public_id = issue_public_id(generate=generate)
        try:
            with transaction.atomic():
                return TenderCycle.objects.create(
                    tender=tender,
                    cycle_number=cycle_number,
                    public_id=public_id,
                    status=TenderCycle.STATUS_ACTIVE,
                    display_start_time=start,
                    display_end_time=end,
                    order=order,
                )
        except IntegrityError:
            if not public_id_taken(public_id):
                raise
            logger.warning(f"Identifiant client {public_id} pris entre-temps, nouvel essai")
    raise IdCollision(f"Aucun identifiant client unique inséré pour le tender {tender.pk}")
