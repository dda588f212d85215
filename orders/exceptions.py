from rest_framework import status
from rest_framework.exceptions import APIException


class ListingClosed(APIException):
    """Raised when an offer targets a vault listing whose cycle already ended."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = (
        "L'annonce n'est plus ouverte : elle a déjà été attribuée ou a expiré."
    )
    default_code = "listing_closed"


class OfferNotPending(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Seule une offre en attente peut être acceptée."
    default_code = "offer_not_pending"
