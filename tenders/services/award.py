"""Attribution d'un tender : conversion définitive du cycle actif en commande.

Fournit :
 - award_tender(tender_id, freelancer=None) -> AwardResult
 - award_order(order, freelancer=None) -> AwardResult | None

L'annonce publique du cycle est promue sur place : c'est déjà une vraie
commande. Le tender est archivé et ne revient jamais dans la rotation.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from orders.models import Order
from orders.services import ensure_assignment, start_order
from tenders.exceptions import ConversionConflict, StoreFailure
from tenders.models import Tender, TenderCycle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AwardResult:
    tender_id: int
    cycle_id: int
    order_id: int
    public_id: str
    assignment_created: bool


def award_tender(tender_id: int, freelancer=None, now=None, cycle_id=None) -> AwardResult:
    """Attribue le cycle actif du tender.

    `cycle_id` restreint l'attribution à un cycle précis (offre reçue sur
    l'annonce de ce cycle).

    Raises:
        ConversionConflict: le tender est inconnu, supprimé ou n'est plus
            affiché, ou son dernier cycle est déjà expiré ou attribué. À
            traiter comme une course bénigne.
        StoreFailure: erreur de base ; la transaction est annulée.
    """
    now = now or timezone.now()
    try:
        with transaction.atomic():
            tender = Tender.objects.select_for_update().filter(pk=tender_id, is_deleted=False).first()
            if tender is None:
                raise ConversionConflict(f"Tender {tender_id} introuvable ou supprimé")
            cycle = (
                TenderCycle.objects.select_for_update()
                .filter(tender=tender)
                .order_by("-cycle_number")
                .first()
            )
            if cycle_id is not None and (cycle is None or cycle.pk != cycle_id):
                raise ConversionConflict(f"Le cycle {cycle_id} du tender {tender_id} est clos")
            if tender.status != Tender.STATUS_ACTIVE or cycle is None or cycle.status != TenderCycle.STATUS_ACTIVE:
                raise ConversionConflict(f"Tender {tender_id} déjà converti ou expiré")
            if cycle.order_id is None:
                raise ConversionConflict(f"Annonce introuvable pour le cycle {cycle.public_id}")

            cycle.status = TenderCycle.STATUS_AWARDED
            cycle.closed_at = now
            cycle.save(update_fields=["status", "closed_at", "updated_at"])

            tender.status = Tender.STATUS_ARCHIVED
            tender.save(update_fields=["status", "updated_at"])

            assignment_created = False
            if freelancer is not None:
                order = Order.objects.select_for_update().get(pk=cycle.order_id)
                start_order(order)
                _, assignment_created = ensure_assignment(order, freelancer)
    except DatabaseError as exc:
        raise StoreFailure(f"Attribution du tender {tender_id} annulée : {exc}") from exc

    logger.info(f"Tender {tender_id} converti en commande {cycle.order_id} (client {cycle.public_id})")
    return AwardResult(
        tender_id=tender.pk,
        cycle_id=cycle.pk,
        order_id=cycle.order_id,
        public_id=cycle.public_id,
        assignment_created=assignment_created,
    )


def award_order(order: Order, freelancer=None, now=None) -> Optional[AwardResult]:
    """Attribue le tender dont `order` est l'annonce, s'il y en a un.

    Retourne None si la commande n'a jamais été une annonce du coffre.
    """
    cycle = TenderCycle.objects.filter(order=order).order_by("-cycle_number").first()
    if cycle is None:
        return None
    return award_tender(cycle.tender_id, freelancer=freelancer, now=now, cycle_id=cycle.pk)
