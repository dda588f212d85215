"""Expiration des cycles dont la fenêtre d'affichage est écoulée.

Job horaire. Chaque cycle est traité dans sa propre transaction ; un cycle déjà
attribué (ou déjà expiré) est ignoré, l'attribution ayant priorité.
"""
import logging
from dataclasses import dataclass, field
from typing import List

from django.db import DatabaseError, transaction
from django.utils import timezone

from orders.models import Order
from tenders.conf import cooldown
from tenders.exceptions import ConversionConflict, StoreFailure, VaultError
from tenders.models import Tender, TenderCycle

logger = logging.getLogger(__name__)

RETURNED = "returned"
RETIRED = "retired"


@dataclass
class SweepSummary:
    found: int = 0
    returned: int = 0
    retired: int = 0
    skipped: int = 0
    failed: int = 0
    tender_ids: List[int] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "found": self.found,
            "returned": self.returned,
            "retired": self.retired,
            "skipped": self.skipped,
            "failed": self.failed,
        }


def expired_cycles(now):
    return TenderCycle.objects.filter(
        status=TenderCycle.STATUS_ACTIVE,
        display_end_time__lt=now,
        tender__is_deleted=False,
    )


def expire_cycle(cycle_id: int, now=None) -> str:
    """Clôt un cycle expiré et remet son tender au coffre (ou le retire).

    Le tender est verrouillé avant le cycle, dans le même ordre que
    l'attribution, pour éviter les interblocages.

    Returns:
        `RETURNED` si le tender retourne au coffre avec un cooldown,
        `RETIRED` s'il a épuisé ses affichages.

    Raises:
        ConversionConflict: le cycle n'est plus actif, sa fenêtre n'est pas
            écoulée ou son tender n'est plus affiché.
        StoreFailure: erreur de base ; la transaction est annulée.
    """
    now = now or timezone.now()
    try:
        with transaction.atomic():
            tender_id = TenderCycle.objects.values_list("tender_id", flat=True).get(pk=cycle_id)
            tender = Tender.objects.select_for_update().get(pk=tender_id)
            cycle = TenderCycle.objects.select_for_update().get(pk=cycle_id)

            if cycle.status != TenderCycle.STATUS_ACTIVE:
                raise ConversionConflict(f"Cycle {cycle.public_id} déjà {cycle.status}")
            if cycle.display_end_time >= now:
                raise ConversionConflict(f"Cycle {cycle.public_id} encore affiché jusqu'à {cycle.display_end_time}")
            if tender.status != Tender.STATUS_ACTIVE:
                raise ConversionConflict(f"Cycle {cycle.public_id} ouvert mais tender {tender.pk} {tender.status}")

            cycle.status = TenderCycle.STATUS_EXPIRED
            cycle.closed_at = now
            cycle.save(update_fields=["status", "closed_at", "updated_at"])
            if cycle.order_id:
                Order.objects.filter(pk=cycle.order_id).update(is_deleted=True, updated_at=now)

            outcome = RETURNED
            tender.clear_display_window()
            if tender.has_reached_max_usage:
                tender.status = Tender.STATUS_EXPIRED
                outcome = RETIRED
            else:
                tender.status = Tender.STATUS_STORED
                tender.temporary_archived_until = now + cooldown()
            tender.save(
                update_fields=[
                    "status",
                    "temporary_archived_until",
                    "display_start_time",
                    "display_end_time",
                    "updated_at",
                ]
            )
    except DatabaseError as exc:
        raise StoreFailure(f"Expiration du cycle {cycle_id} annulée : {exc}") from exc

    if outcome == RETIRED:
        logger.info(f"Tender {tender.pk} retiré définitivement ({tender.usage_count}/{tender.max_usage} affichages)")
    else:
        logger.info(
            f"Tender {tender.pk} remis au coffre (archivé temporairement jusqu'à "
            f"{tender.temporary_archived_until})"
        )
    return outcome


def sweep_expired_cycles(now=None) -> SweepSummary:
    now = now or timezone.now()
    candidates = list(expired_cycles(now).values_list("pk", "tender_id"))
    summary = SweepSummary(found=len(candidates))
    if not candidates:
        logger.info("Aucun cycle expiré")
        return summary

    for cycle_id, tender_id in candidates:
        try:
            outcome = expire_cycle(cycle_id, now=now)
        except ConversionConflict as exc:
            summary.skipped += 1
            logger.info(f"Tender {tender_id} ignoré : {exc}")
        except VaultError as exc:
            summary.failed += 1
            logger.warning(f"Échec de l'expiration du tender {tender_id} : {exc}")
        except Exception:
            summary.failed += 1
            logger.exception(f"Erreur inattendue pendant l'expiration du tender {tender_id}")
        else:
            if outcome == RETIRED:
                summary.retired += 1
            else:
                summary.returned += 1
            summary.tender_ids.append(tender_id)
    return summary
