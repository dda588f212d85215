"""Services de la place de marché consommés par le coffre.

Fonctions exposées :
 - create_listing(**fields) -> Order anonyme ouverte aux offres
 - ensure_assignment(order, freelancer) -> (Assignment, created)
 - accept_offer(offer) -> Offer acceptée (déclenche l'attribution d'un tender)
"""
import logging

from django.db import transaction

from orders.exceptions import ListingClosed, OfferNotPending
from orders.models import Assignment, Offer, Order

logger = logging.getLogger(__name__)

LISTING_FIELDS = (
    "title",
    "description",
    "category_id",
    "sub_category_id",
    "sub_sub_category_id",
    "budget_min",
    "budget_max",
    "currency",
    "duration_value",
    "duration_unit",
    "country",
    "attachments",
)


def create_listing(**fields) -> Order:
    """Crée une annonce publique sans propriétaire, ouverte aux offres.

    Seuls les champs de `LISTING_FIELDS` sont acceptés ; le type et le statut
    sont toujours ceux d'un appel d'offres.
    """
    unknown = set(fields) - set(LISTING_FIELDS)
    if unknown:
        raise TypeError(f"Champs d'annonce inconnus : {', '.join(sorted(unknown))}")
    if fields.get("attachments") is None:
        fields["attachments"] = []
    return Order.objects.create(
        owner=None,
        project_type=Order.TYPE_BIDDING,
        status=Order.STATUS_BIDDING,
        completion_status=Order.COMPLETION_NOT_STARTED,
        **fields,
    )


def ensure_assignment(order: Order, freelancer):
    """Crée l'affectation du freelance à la commande si elle n'existe pas déjà."""
    return Assignment.objects.get_or_create(
        order=order,
        freelancer=freelancer,
        defaults={"status": Assignment.STATUS_ACTIVE},
    )


def start_order(order: Order):
    order.status = Order.STATUS_IN_PROGRESS
    order.completion_status = Order.COMPLETION_IN_PROGRESS
    order.save(update_fields=["status", "completion_status", "updated_at"])


def accept_offer(offer: Offer) -> Offer:
    """Accepte une offre et rejette les autres offres en attente.

    Si la commande est l'annonce d'un cycle ouvert du coffre, le tender est
    attribué (voir `tenders.services.award`). Une attribution en conflit
    annule toute l'acceptation et lève `ListingClosed`.
    """
    from tenders.exceptions import ConversionConflict
    from tenders.services.award import award_order

    with transaction.atomic():
        offer = Offer.objects.select_for_update().select_related("order").get(pk=offer.pk)
        if offer.status != Offer.STATUS_PENDING:
            raise OfferNotPending()

        offer.status = Offer.STATUS_ACCEPTED
        offer.save(update_fields=["status", "updated_at"])
        Offer.objects.filter(order=offer.order, status=Offer.STATUS_PENDING).exclude(pk=offer.pk).update(
            status=Offer.STATUS_REJECTED
        )

        try:
            result = award_order(offer.order, freelancer=offer.freelancer)
        except ConversionConflict as exc:
            logger.info(f"Offre {offer.pk} refusée : cycle du coffre déjà clos ({exc})")
            raise ListingClosed() from exc

        if result is None:
            start_order(offer.order)
            ensure_assignment(offer.order, offer.freelancer)
        else:
            logger.info(
                f"Offre {offer.pk} acceptée : tender {result.tender_id} converti en commande {result.order_id}"
            )
    return offer
