from django.urls import path

from orders.api.views import AcceptOfferView

urlpatterns = [
    path("offers/<int:pk>/accept/", AcceptOfferView.as_view(), name="offer-accept"),
]
