from datetime import timedelta

import pytest
from django.urls import reverse
from rest_framework.test import APIClient

from orders.exceptions import ListingClosed
from orders.models import Assignment, Offer, Order
from orders.services import accept_offer, create_listing
from tenders.exceptions import ConversionConflict
from tenders.models import Tender, TenderCycle
from tenders.services.activation import activate_tender
from tenders.services.award import award_order, award_tender
from tenders.services.eligibility import is_eligible
from tenders.services.expiration import expire_cycle, sweep_expired_cycles


@pytest.mark.django_db
def test_award_during_window_archives_tender(make_tender, freelancer, now):
	tender = make_tender()
	activation = activate_tender(tender.pk, now=now)

	result = award_tender(tender.pk, freelancer=freelancer, now=now + timedelta(hours=3))

	tender.refresh_from_db()
	cycle = TenderCycle.objects.get(pk=activation.cycle_id)
	order = Order.objects.get(pk=activation.order_id)
	assert result.order_id == activation.order_id
	assert result.public_id == activation.public_id
	assert result.assignment_created is True
	assert cycle.status == TenderCycle.STATUS_AWARDED
	assert cycle.order == order
	assert tender.status == Tender.STATUS_ARCHIVED
	assert order.status == Order.STATUS_IN_PROGRESS
	assert Assignment.objects.filter(order=order, freelancer=freelancer).exists()

	summary = sweep_expired_cycles(now=now + timedelta(hours=13))
	tender.refresh_from_db()
	assert summary.found == 0
	assert tender.status == Tender.STATUS_ARCHIVED
	assert not is_eligible(tender, now + timedelta(days=365))


@pytest.mark.django_db
def test_second_award_is_a_conversion_conflict(make_tender, now):
	tender = make_tender()
	activate_tender(tender.pk, now=now)
	award_tender(tender.pk, now=now)

	with pytest.raises(ConversionConflict):
		award_tender(tender.pk, now=now)


@pytest.mark.django_db
def test_award_and_expiry_are_mutually_exclusive(make_tender, now):
	awarded_first = make_tender(title="A")
	expired_first = make_tender(title="B")
	a = activate_tender(awarded_first.pk, now=now)
	b = activate_tender(expired_first.pk, now=now)
	late = now + timedelta(hours=13)

	award_tender(awarded_first.pk, now=late)
	with pytest.raises(ConversionConflict):
		expire_cycle(a.cycle_id, now=late)

	expire_cycle(b.cycle_id, now=late)
	with pytest.raises(ConversionConflict):
		award_tender(expired_first.pk, now=late)

	assert TenderCycle.objects.get(pk=a.cycle_id).status == TenderCycle.STATUS_AWARDED
	assert TenderCycle.objects.get(pk=b.cycle_id).status == TenderCycle.STATUS_EXPIRED
	assert not TenderCycle.objects.filter(status=TenderCycle.STATUS_ACTIVE).exists()


@pytest.mark.django_db
def test_existing_assignment_is_reused(make_tender, freelancer, now):
	tender = make_tender()
	activation = activate_tender(tender.pk, now=now)
	Assignment.objects.create(order_id=activation.order_id, freelancer=freelancer)

	result = award_tender(tender.pk, freelancer=freelancer, now=now)

	assert result.assignment_created is False
	assert Assignment.objects.filter(order_id=activation.order_id).count() == 1


@pytest.mark.django_db
def test_award_order_ignores_regular_orders(freelancer):
	order = create_listing(title="Traduction", description="")

	assert award_order(order, freelancer=freelancer) is None


@pytest.mark.django_db
def test_award_order_refuses_listing_of_a_closed_cycle(make_tender, now):
	tender = make_tender(max_usage=4)
	first = activate_tender(tender.pk, now=now)
	expire_cycle(first.cycle_id, now=now + timedelta(hours=13))
	later = now + timedelta(days=61)
	activate_tender(tender.pk, now=later)

	with pytest.raises(ConversionConflict, match="est clos"):
		award_order(Order.objects.get(pk=first.order_id), now=later)

	tender.refresh_from_db()
	assert tender.status == Tender.STATUS_ACTIVE


@pytest.mark.django_db
def test_accepting_offer_on_vault_listing_awards_tender(make_tender, freelancer, django_user_model):
	tender = make_tender()
	activation = activate_tender(tender.pk)
	order = Order.objects.get(pk=activation.order_id)
	other = django_user_model.objects.create_user(username="other", password="password123")
	chosen = Offer.objects.create(order=order, freelancer=freelancer, amount="900.00")
	rejected = Offer.objects.create(order=order, freelancer=other, amount="850.00")

	accept_offer(chosen)

	chosen.refresh_from_db()
	rejected.refresh_from_db()
	tender.refresh_from_db()
	assert chosen.status == Offer.STATUS_ACCEPTED
	assert rejected.status == Offer.STATUS_REJECTED
	assert tender.status == Tender.STATUS_ARCHIVED
	assert Assignment.objects.filter(order=order, freelancer=freelancer).exists()


@pytest.mark.django_db
def test_accepting_offer_after_expiry_is_rolled_back(make_tender, freelancer, now):
	tender = make_tender()
	activation = activate_tender(tender.pk, now=now)
	order = Order.objects.get(pk=activation.order_id)
	offer = Offer.objects.create(order=order, freelancer=freelancer)
	expire_cycle(activation.cycle_id, now=now + timedelta(hours=13))

	with pytest.raises(ListingClosed):
		accept_offer(offer)

	offer.refresh_from_db()
	assert offer.status == Offer.STATUS_PENDING
	assert not Assignment.objects.exists()


@pytest.mark.django_db
def test_accept_offer_endpoint_requires_staff_for_anonymous_listing(make_tender, freelancer, staff):
	tender = make_tender()
	activation = activate_tender(tender.pk)
	offer = Offer.objects.create(order_id=activation.order_id, freelancer=freelancer)
	client = APIClient()

	client.force_authenticate(user=freelancer)
	forbidden = client.post(reverse("offer-accept", args=[offer.id]))
	client.force_authenticate(user=staff)
	response = client.post(reverse("offer-accept", args=[offer.id]))

	assert forbidden.status_code == 403
	assert response.status_code == 200
	data = response.json()
	assert data["status"] == Offer.STATUS_ACCEPTED
	assert data["order"]["id"] == activation.order_id
	assert data["order"]["is_anonymous"] is True
	assert data["order"]["status"] == Order.STATUS_IN_PROGRESS
	tender.refresh_from_db()
	assert tender.status == Tender.STATUS_ARCHIVED


@pytest.mark.django_db
def test_accept_offer_endpoint_returns_conflict_when_listing_closed(make_tender, freelancer, staff, now):
	tender = make_tender()
	activation = activate_tender(tender.pk, now=now)
	offer = Offer.objects.create(order_id=activation.order_id, freelancer=freelancer)
	expire_cycle(activation.cycle_id, now=now + timedelta(hours=13))
	client = APIClient()
	client.force_authenticate(user=staff)

	response = client.post(reverse("offer-accept", args=[offer.id]))

	assert response.status_code == 409


@pytest.mark.django_db
def test_award_order_on_expired_latest_cycle_reports_terminal_cycle(make_tender, now):
	tender = make_tender()
	activation = activate_tender(tender.pk, now=now)
	expire_cycle(activation.cycle_id, now=now + timedelta(hours=13))

	with pytest.raises(ConversionConflict, match="déjà converti ou expiré"):
		award_order(Order.objects.get(pk=activation.order_id), now=now + timedelta(hours=14))


@pytest.mark.django_db
def test_award_of_deleted_tender_is_a_conversion_conflict(make_tender, now):
	tender = make_tender()
	activate_tender(tender.pk, now=now)
	Tender.objects.filter(pk=tender.pk).update(is_deleted=True)

	with pytest.raises(ConversionConflict, match="supprimé"):
		award_tender(tender.pk, now=now)
	with pytest.raises(ConversionConflict):
		award_tender(tender.pk + 1000, now=now)


@pytest.mark.django_db
def test_accept_offer_endpoint_on_deleted_tender_returns_conflict(make_tender, freelancer, staff):
	tender = make_tender()
	activation = activate_tender(tender.pk)
	offer = Offer.objects.create(order_id=activation.order_id, freelancer=freelancer)
	Tender.objects.filter(pk=tender.pk).update(is_deleted=True)
	client = APIClient()
	client.force_authenticate(user=staff)

	response = client.post(reverse("offer-accept", args=[offer.id]))

	assert response.status_code == 409
	offer.refresh_from_db()
	assert offer.status == Offer.STATUS_PENDING
	assert TenderCycle.objects.get(pk=activation.cycle_id).status == TenderCycle.STATUS_ACTIVE
