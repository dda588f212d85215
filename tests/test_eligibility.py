from datetime import timedelta

import pytest

from tenders.models import Tender
from tenders.services.eligibility import eligible_tenders, is_eligible


@pytest.mark.django_db
def test_fresh_stored_tender_is_eligible(make_tender, now):
	tender = make_tender()

	assert is_eligible(tender, now)
	assert list(eligible_tenders(now)) == [tender]


@pytest.mark.django_db
@pytest.mark.parametrize(
	"fields",
	[
		{"status": Tender.STATUS_ACTIVE},
		{"status": Tender.STATUS_ARCHIVED},
		{"status": Tender.STATUS_EXPIRED},
		{"usage_count": 4, "max_usage": 4},
		{"is_deleted": True},
	],
)
def test_tender_state_excludes_from_rotation(make_tender, now, fields):
	tender = make_tender(**fields)

	assert not is_eligible(tender, now)
	assert not eligible_tenders(now).filter(pk=tender.pk).exists()


@pytest.mark.django_db
def test_recent_display_blocks_until_cooldown_elapsed(make_tender, now):
	recent = make_tender(last_displayed_at=now - timedelta(days=59), usage_count=1)
	old = make_tender(last_displayed_at=now - timedelta(days=61), usage_count=1)

	assert not is_eligible(recent, now)
	assert is_eligible(old, now)
	assert list(eligible_tenders(now)) == [old]


@pytest.mark.django_db
def test_temporary_archive_blocks_until_it_ends(make_tender, now):
	archived = make_tender(temporary_archived_until=now + timedelta(hours=1))
	released = make_tender(temporary_archived_until=now - timedelta(hours=1))

	assert not is_eligible(archived, now)
	assert is_eligible(released, now)
	assert list(eligible_tenders(now)) == [released]


@pytest.mark.django_db
def test_predicate_and_queryset_agree(make_tender, now):
	tenders = [
		make_tender(),
		make_tender(usage_count=3, max_usage=4),
		make_tender(usage_count=2, max_usage=2),
		make_tender(last_displayed_at=now - timedelta(days=10)),
		make_tender(temporary_archived_until=now + timedelta(days=3)),
		make_tender(status=Tender.STATUS_ACTIVE),
	]

	expected = {t.pk for t in tenders if is_eligible(t, now)}

	assert set(eligible_tenders(now).values_list("pk", flat=True)) == expected
	assert len(expected) == 2
