from django.shortcuts import get_object_or_404
from rest_framework import permissions, status
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response
from rest_framework.views import APIView

from orders.models import Offer
from orders.serializers import OfferSerializer
from orders.services import accept_offer


class AcceptOfferView(APIView):
    """Acceptation d'une offre par le staff ou le propriétaire de l'annonce.

    Les annonces du coffre sont anonymes : seul le staff peut y accepter une offre.
    """

    permission_classes = [permissions.IsAuthenticated]

    def post(self, request, pk=None):
        offer = get_object_or_404(Offer.objects.select_related("order"), pk=pk)
        user = request.user
        if not (user.is_staff or (offer.order.owner_id and offer.order.owner_id == user.id)):
            raise PermissionDenied("Vous ne pouvez pas accepter cette offre.")
        offer = accept_offer(offer)
        offer.order.refresh_from_db()
        return Response(OfferSerializer(offer).data, status=status.HTTP_200_OK)
