from django.urls import path

from .views import (
    DonationDetailView,
    DonationListView,
    InitializeDonationView,
    VerifyDonationView,
)
from .webhook import flutterwave_webhook

urlpatterns = [
    path("donations", DonationListView.as_view(), name="donation-list"),
    path("donations/initialize", InitializeDonationView.as_view(), name="donation-initialize"),
    path("donations/webhook", flutterwave_webhook, name="donation-webhook"),
    path("donations/verify/<str:reference>", VerifyDonationView.as_view(), name="donation-verify"),
    path("donations/<str:pk>", DonationDetailView.as_view(), name="donation-detail"),
]
