from django.http import Http404
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import filters, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.views import APIView

from tenders.models import Tender
from tenders.serializers import TenderCycleSerializer, TenderSerializer
from tenders.services.queries import active_cycle_for, vault_stats


class TenderViewSet(viewsets.ReadOnlyModelViewSet):
    """Tenders du coffre visibles par leur propriétaire (le staff voit tout)."""

    serializer_class = TenderSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = [filters.SearchFilter, filters.OrderingFilter, DjangoFilterBackend]
    search_fields = ["title", "description", "country"]
    ordering_fields = ["created_at", "last_displayed_at", "usage_count", "title"]
    filterset_fields = {
        "status": ["exact"],
        "category_id": ["exact"],
        "usage_count": ["gte", "lte"],
    }

    def get_queryset(self):
        qs = Tender.objects.filter(is_deleted=False).select_related("owner").order_by("-created_at", "-id")
        if self.request.user.is_staff:
            return qs
        return qs.filter(owner=self.request.user)

    @action(detail=True, methods=["get"])
    def cycle(self, request, pk=None):
        tender = self.get_object()
        cycle = active_cycle_for(tender)
        if cycle is None:
            raise Http404("Aucun cycle d'affichage ouvert pour ce tender.")
        return Response(TenderCycleSerializer(cycle).data)


class TenderVaultStatsView(APIView):
    permission_classes = [permissions.IsAdminUser]

    def get(self, request):
        return Response(vault_stats())
