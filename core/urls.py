from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/tenders/", include("tenders.api.urls")),
    path("api/orders/", include("orders.api.urls")),
]
