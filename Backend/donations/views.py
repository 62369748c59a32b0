from __future__ import annotations

import logging
import uuid

from django.conf import settings
from rest_framework.response import Response
from rest_framework.permissions import AllowAny
from rest_framework.views import APIView

from core.exceptions import InvalidIdentifier
from core.pagination import paginate_queryset
from core.throttling import AdminApiThrottle, DonationThrottle
from users.permissions import IsAdmin
from .flutterwave import FlutterwaveClient
from .models import Donation
from .serializers import DonationInitializeSerializer, DonationSerializer
from .services import DonationLifecycle

logger = logging.getLogger(__name__)


def get_lifecycle() -> DonationLifecycle:
    return DonationLifecycle(FlutterwaveClient())


def public_site_url(request) -> str:
    return settings.PUBLIC_SITE_URL or request.build_absolute_uri("/").rstrip("/")


# ---------------------------------------------------------------------
# Public: initialize + poll
# ---------------------------------------------------------------------

class InitializeDonationView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [DonationThrottle]

    def post(self, request):
        serializer = DonationInitializeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        outcome = get_lifecycle().initialize(serializer.validated_data, public_site_url(request))
        return Response(outcome.body(), status=outcome.status_code)


class VerifyDonationView(APIView):
    permission_classes = [AllowAny]
    throttle_classes = [DonationThrottle]

    def get(self, request, reference):
        outcome = get_lifecycle().verify(reference)
        return Response(outcome.body(), status=outcome.status_code)


# ---------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------

class DonationListView(APIView):
    permission_classes = [IsAdmin]
    throttle_classes = [AdminApiThrottle]

    def get(self, request):
        queryset = Donation.objects.order_by("-created_at")

        status_filter = request.query_params.get("status")
        if status_filter in Donation.Status.values:
            queryset = queryset.filter(status=status_filter)

        return Response(paginate_queryset(queryset, request.query_params, DonationSerializer))


class DonationDetailView(APIView):
    permission_classes = [IsAdmin]
    throttle_classes = [AdminApiThrottle]

    def initial(self, request, *args, **kwargs):
        try:
            uuid.UUID(str(kwargs.get("pk")))
        except ValueError:
            raise InvalidIdentifier()
        super().initial(request, *args, **kwargs)

    def get(self, request, pk):
        donation = Donation.objects.filter(pk=pk).first()
        if donation is None:
            return Response({"error": "Donation not found"}, status=404)
        return Response(DonationSerializer(donation).data)
