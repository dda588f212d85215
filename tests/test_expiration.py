from datetime import timedelta

import pytest

from orders.models import Order
from tenders.exceptions import ConversionConflict, StoreFailure
from tenders.models import Tender, TenderCycle
from tenders.services import expiration
from tenders.services.activation import activate_tender
from tenders.services.award import award_tender
from tenders.services.eligibility import is_eligible
from tenders.services.expiration import expire_cycle, sweep_expired_cycles


@pytest.mark.django_db
def test_elapsed_window_returns_tender_to_vault_with_cooldown(make_tender, now):
	tender = make_tender()
	result = activate_tender(tender.pk, now=now)
	sweep_at = result.display_end + timedelta(minutes=30)

	summary = sweep_expired_cycles(now=sweep_at)

	tender.refresh_from_db()
	cycle = TenderCycle.objects.get(pk=result.cycle_id)
	assert summary.found == 1
	assert summary.returned == 1
	assert summary.tender_ids == [tender.pk]
	assert cycle.status == TenderCycle.STATUS_EXPIRED
	assert cycle.closed_at == sweep_at
	assert tender.status == Tender.STATUS_STORED
	assert tender.display_start_time is None
	assert tender.display_end_time is None
	assert tender.temporary_archived_until == sweep_at + timedelta(days=60)
	assert Order.objects.get(pk=result.order_id).is_deleted


@pytest.mark.django_db
def test_open_window_is_left_alone(make_tender, now):
	tender = make_tender()
	activate_tender(tender.pk, now=now)

	summary = sweep_expired_cycles(now=now + timedelta(hours=1))

	tender.refresh_from_db()
	assert summary.found == 0
	assert tender.status == Tender.STATUS_ACTIVE


@pytest.mark.django_db
def test_sweeping_twice_is_a_no_op(make_tender, now):
	tender = make_tender()
	activate_tender(tender.pk, now=now)
	sweep_at = now + timedelta(hours=13)

	sweep_expired_cycles(now=sweep_at)
	tender.refresh_from_db()
	first_state = (tender.status, tender.temporary_archived_until, tender.usage_count)
	second = sweep_expired_cycles(now=sweep_at + timedelta(hours=1))

	tender.refresh_from_db()
	assert second.found == 0
	assert (tender.status, tender.temporary_archived_until, tender.usage_count) == first_state
	assert TenderCycle.objects.filter(status=TenderCycle.STATUS_EXPIRED).count() == 1


@pytest.mark.django_db
def test_tender_becomes_eligible_again_after_cooldown(make_tender, now):
	tender = make_tender()
	activate_tender(tender.pk, now=now)
	sweep_at = now + timedelta(hours=13)
	sweep_expired_cycles(now=sweep_at)
	tender.refresh_from_db()

	assert not is_eligible(tender, sweep_at + timedelta(days=59))
	assert is_eligible(tender, sweep_at + timedelta(days=60, seconds=1))


@pytest.mark.django_db
def test_final_cycle_expiry_retires_tender(make_tender, now):
	tender = make_tender(usage_count=3, max_usage=4, last_displayed_at=now - timedelta(days=90))
	activate_tender(tender.pk, now=now)

	summary = sweep_expired_cycles(now=now + timedelta(hours=13))

	tender.refresh_from_db()
	assert summary.retired == 1
	assert summary.returned == 0
	assert tender.status == Tender.STATUS_EXPIRED
	assert tender.usage_count == 4
	assert not is_eligible(tender, now + timedelta(days=365))


@pytest.mark.django_db
def test_awarded_cycle_is_not_expired(make_tender, now):
	tender = make_tender()
	result = activate_tender(tender.pk, now=now)
	award_tender(tender.pk, now=now + timedelta(hours=2))

	summary = sweep_expired_cycles(now=now + timedelta(hours=13))

	tender.refresh_from_db()
	assert summary.found == 0
	assert tender.status == Tender.STATUS_ARCHIVED
	assert TenderCycle.objects.get(pk=result.cycle_id).status == TenderCycle.STATUS_AWARDED
	with pytest.raises(ConversionConflict):
		expire_cycle(result.cycle_id, now=now + timedelta(hours=13))


@pytest.mark.django_db
def test_failure_on_one_cycle_does_not_block_the_others(make_tender, now, monkeypatch):
	broken = activate_tender(make_tender(title="A").pk, now=now)
	healthy = activate_tender(make_tender(title="B").pk, now=now)
	original = expiration.expire_cycle

	def flaky(cycle_id, now=None):
		if cycle_id == broken.cycle_id:
			raise StoreFailure("connexion perdue")
		return original(cycle_id, now=now)

	monkeypatch.setattr(expiration, "expire_cycle", flaky)

	summary = sweep_expired_cycles(now=now + timedelta(hours=13))

	assert summary.failed == 1
	assert summary.returned == 1
	assert TenderCycle.objects.get(pk=broken.cycle_id).status == TenderCycle.STATUS_ACTIVE
	assert TenderCycle.objects.get(pk=healthy.cycle_id).status == TenderCycle.STATUS_EXPIRED


@pytest.mark.django_db
def test_sweep_ignores_cycles_of_deleted_tenders(make_tender, now):
	tender = make_tender()
	result = activate_tender(tender.pk, now=now)
	Tender.objects.filter(pk=tender.pk).update(is_deleted=True)

	summary = sweep_expired_cycles(now=now + timedelta(hours=13))

	assert summary.found == 0
	assert TenderCycle.objects.get(pk=result.cycle_id).status == TenderCycle.STATUS_ACTIVE


@pytest.mark.django_db
def test_open_cycle_of_inactive_tender_is_not_reported_as_returned(make_tender, now):
	tender = make_tender()
	result = activate_tender(tender.pk, now=now)
	Tender.objects.filter(pk=tender.pk).update(status=Tender.STATUS_STORED)

	with pytest.raises(ConversionConflict):
		expire_cycle(result.cycle_id, now=now + timedelta(hours=13))
	summary = sweep_expired_cycles(now=now + timedelta(hours=13))

	tender.refresh_from_db()
	assert summary.skipped == 1
	assert summary.returned == 0
	assert tender.display_end_time == result.display_end
	assert TenderCycle.objects.get(pk=result.cycle_id).status == TenderCycle.STATUS_ACTIVE
