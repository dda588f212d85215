"""Filtre d'éligibilité à la rotation.

Un tender est éligible si :
 - il est dans le coffre (`stored`) et non supprimé ;
 - il n'a pas atteint son nombre maximal d'affichages ;
 - il n'a jamais été affiché, ou pas depuis la durée de cooldown (60 jours) ;
 - son archivage temporaire est absent ou déjà échu.

`is_eligible` et `eligible_tenders` expriment la même règle, l'une sur une
instance, l'autre en SQL.
"""
from datetime import datetime

from django.db.models import F, Q, QuerySet

from tenders.conf import cooldown
from tenders.models import Tender


def is_eligible(tender: Tender, now: datetime) -> bool:
    if tender.status != Tender.STATUS_STORED or tender.is_deleted:
        return False
    if tender.usage_count >= tender.max_usage:
        return False
    if tender.last_displayed_at is not None and tender.last_displayed_at >= now - cooldown():
        return False
    if tender.temporary_archived_until is not None and tender.temporary_archived_until >= now:
        return False
    return True


def eligibility_q(now: datetime) -> Q:
    return (
        Q(status=Tender.STATUS_STORED, is_deleted=False, usage_count__lt=F("max_usage"))
        & (Q(last_displayed_at__isnull=True) | Q(last_displayed_at__lt=now - cooldown()))
        & (Q(temporary_archived_until__isnull=True) | Q(temporary_archived_until__lt=now))
    )


def eligible_tenders(now: datetime) -> QuerySet:
    return Tender.objects.filter(eligibility_q(now))
