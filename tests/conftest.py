from decimal import Decimal

import pytest
from django.contrib.auth.models import User
from django.utils import timezone

from tenders.models import Tender


@pytest.fixture
def owner(db):
	return User.objects.create_user(username="owner", password="password123")


@pytest.fixture
def freelancer(db):
	return User.objects.create_user(username="freelance", password="password123")


@pytest.fixture
def staff(db):
	return User.objects.create_user(username="ops", password="password123", is_staff=True)


@pytest.fixture
def now():
	return timezone.now().replace(microsecond=0)


@pytest.fixture
def make_tender(owner):
	def _make(**fields):
		defaults = {
			"owner": owner,
			"title": "Refonte du site vitrine",
			"description": "Site en trois langues avec espace client.",
			"category_id": 3,
			"sub_category_id": 7,
			"budget_min": Decimal("500.00"),
			"budget_max": Decimal("1500.00"),
			"duration_value": 2,
			"duration_unit": "weeks",
			"country": "Jordan",
			"attachments": ["brief.pdf"],
		}
		defaults.update(fields)
		return Tender.objects.create(**defaults)

	return _make
