"""Lectures utilisées par les vues de statut et de détail (aucune écriture)."""
from django.db.models import Count, Q

from tenders.models import Tender, TenderCycle


def active_cycle_for(tender):
    """Retourne le cycle ouvert du tender (ou None s'il est dans le coffre)."""
    return (
        TenderCycle.objects.filter(tender=tender, status=TenderCycle.STATUS_ACTIVE)
        .order_by("-cycle_number")
        .first()
    )


def vault_stats() -> dict:
    by_status = dict(
        Tender.objects.filter(is_deleted=False)
        .values_list("status")
        .annotate(total=Count("id"))
        .order_by()
    )
    cycles = TenderCycle.objects.aggregate(
        active=Count("id", filter=Q(status=TenderCycle.STATUS_ACTIVE)),
        expired=Count("id", filter=Q(status=TenderCycle.STATUS_EXPIRED)),
        awarded=Count("id", filter=Q(status=TenderCycle.STATUS_AWARDED)),
    )
    return {
        "tenders": {status: by_status.get(status, 0) for status, _ in Tender.STATUS_CHOICES},
        "cycles": cycles,
        "count": sum(by_status.values()),
    }
