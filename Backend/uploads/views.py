from __future__ import annotations

import logging

from django.conf import settings
from rest_framework import status
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.views import APIView

from core.throttling import AdminApiThrottle
from users.permissions import IsAdmin
from .serializers import DeleteFileSerializer
from .storage import StorageError, SupabaseStorage

logger = logging.getLogger(__name__)


class UploadView(APIView):
    """
    POST: upload a single ``file`` (admin only).
    DELETE: remove ``path`` from ``bucket``.
    """
    permission_classes = [IsAdmin]
    throttle_classes = [AdminApiThrottle]
    parser_classes = [MultiPartParser, FormParser, JSONParser]

    def post(self, request):
        file = request.FILES.get("file")
        if not file:
            return Response({"error": "No file provided"}, status=status.HTTP_400_BAD_REQUEST)

        try:
            SupabaseStorage.validate_file(file)
        except StorageError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        try:
            result = SupabaseStorage.upload_file(
                file,
                folder=request.data.get("folder", ""),
                bucket=request.data.get("bucket", ""),
            )
        except StorageError as e:
            logger.error(f"Upload failed for {file.name}: {e}")
            return Response(
                {"error": "Failed to upload file", "message": str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response({"success": True, **result})

    def delete(self, request):
        serializer = DeleteFileSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            SupabaseStorage.delete_file(**serializer.validated_data)
        except StorageError as e:
            return Response(
                {"error": "Failed to delete file", "message": str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        return Response({"success": True, "message": "File deleted successfully"})


class MultipleUploadView(APIView):
    """Upload up to UPLOAD_MAX_FILES ``files``; reports a result per file."""
    permission_classes = [IsAdmin]
    throttle_classes = [AdminApiThrottle]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        files = request.FILES.getlist("files")
        if not files:
            return Response({"error": "No files provided"}, status=status.HTTP_400_BAD_REQUEST)

        if len(files) > settings.UPLOAD_MAX_FILES:
            return Response(
                {"error": f"Too many files. Maximum is {settings.UPLOAD_MAX_FILES}."},
                status=status.HTTP_400_BAD_REQUEST,
            )

        folder = request.data.get("folder", "")
        bucket = request.data.get("bucket", "")
        results = []

        for file in files:
            try:
                uploaded = SupabaseStorage.upload_file(file, folder=folder, bucket=bucket)
            except StorageError as e:
                results.append({"originalName": file.name, "success": False, "error": str(e)})
                continue
            results.append({"originalName": file.name, "success": True, **uploaded})

        return Response({"success": True, "results": results})
