from django.urls import path, include
from rest_framework.routers import DefaultRouter

from tenders.api.views import TenderVaultStatsView, TenderViewSet

router = DefaultRouter()
router.register(r"", TenderViewSet, basename="tender")

urlpatterns = [
    path("stats/", TenderVaultStatsView.as_view(), name="tender-stats"),
    path("", include(router.urls)),
]
