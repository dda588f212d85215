"""Rotation quotidienne du coffre.

Tire une taille de lot dans [BATCH_MIN, BATCH_MAX], sélectionne au hasard
autant de tenders éligibles et active chacun dans sa propre transaction. Un
échec sur un tender est journalisé et n'affecte ni les tenders déjà activés ni
la suite du lot.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import List

from django.db.models import F
from django.utils import timezone

from tenders.conf import vault_setting
from tenders.exceptions import EligibilityMismatch, VaultError
from tenders.models import Tender
from tenders.services.activation import ActivationResult, activate_tender
from tenders.services.eligibility import eligible_tenders

logger = logging.getLogger(__name__)


@dataclass
class RotationSummary:
    batch_size: int = 0
    selected: int = 0
    activated: int = 0
    final: int = 0
    retired: int = 0
    skipped: int = 0
    failed: int = 0
    activations: List[ActivationResult] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "batch_size": self.batch_size,
            "selected": self.selected,
            "activated": self.activated,
            "final": self.final,
            "retired": self.retired,
            "skipped": self.skipped,
            "failed": self.failed,
        }


def draw_batch_size(rng=None) -> int:
    rng = rng or random
    return rng.randint(vault_setting("BATCH_MIN"), vault_setting("BATCH_MAX"))


def select_candidates(now, limit: int) -> List[int]:
    """Identifiants de `limit` tenders éligibles tirés uniformément au hasard."""
    return list(eligible_tenders(now).order_by("?").values_list("pk", flat=True)[:limit])


def retire_exhausted_tenders() -> int:
    """Retire les tenders du coffre qui ont déjà atteint leur plafond d'affichages."""
    return Tender.objects.filter(
        status=Tender.STATUS_STORED,
        is_deleted=False,
        usage_count__gte=F("max_usage"),
    ).update(status=Tender.STATUS_EXPIRED, updated_at=timezone.now())


def perform_daily_rotation(now=None, rng=None) -> RotationSummary:
    now = now or timezone.now()
    summary = RotationSummary(batch_size=draw_batch_size(rng))

    candidates = select_candidates(now, summary.batch_size)
    summary.selected = len(candidates)
    if not candidates:
        logger.info("Aucun tender éligible pour la rotation")

    for tender_id in candidates:
        try:
            result = activate_tender(tender_id, now=now)
        except EligibilityMismatch as exc:
            summary.skipped += 1
            logger.info(f"Tender {tender_id} ignoré : {exc}")
        except VaultError as exc:
            summary.failed += 1
            logger.warning(f"Échec de l'activation du tender {tender_id} : {exc}")
        except Exception:
            summary.failed += 1
            logger.exception(f"Erreur inattendue pendant l'activation du tender {tender_id}")
        else:
            summary.activated += 1
            summary.activations.append(result)
            # dernier affichage : retiré par l'expiration s'il n'est pas attribué
            if result.final:
                summary.final += 1

    summary.retired = retire_exhausted_tenders()
    if summary.retired:
        logger.warning(f"{summary.retired} tenders au plafond d'affichages retirés du coffre")
    return summary
