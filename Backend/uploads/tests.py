import re
from unittest.mock import MagicMock, patch

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from users.authentication import ProviderUser
from .storage import StorageError, SupabaseStorage

ADMIN = ProviderUser(id="admin-1", email="admin@example.com", app_metadata={"role": "admin"})
PUBLIC_URL = "https://project.supabase.co/storage/v1/object/public/images/photo.jpg"


def storage_client():
    client = MagicMock()
    client.storage.from_.return_value.get_public_url.return_value = PUBLIC_URL
    return client


class SupabaseStorageTests(SimpleTestCase):
    def test_bucket_by_mime_family(self):
        self.assertEqual(SupabaseStorage.bucket_for("image/png", "a.png"), "images")
        self.assertEqual(SupabaseStorage.bucket_for("audio/mpeg", "a.mp3"), "sermons-audio")
        self.assertEqual(SupabaseStorage.bucket_for("video/mp4", "a.mp4"), "sermons-video")

    def test_bucket_falls_back_to_extension(self):
        self.assertEqual(SupabaseStorage.bucket_for("application/octet-stream", "talk.m4a"), "sermons-audio")
        self.assertEqual(SupabaseStorage.bucket_for("", "clip.webm"), "sermons-video")
        self.assertEqual(SupabaseStorage.bucket_for("", "unknown.bin"), "images")

    def test_generated_name(self):
        name = SupabaseStorage.generate_filename("My Photo (1).JPG", folder="/events/")
        self.assertTrue(re.fullmatch(r"events/my_photo__1__\d+_[a-z0-9]{13}\.jpg", name), name)

    def test_rejects_unknown_type(self):
        upload = SimpleUploadedFile("notes.exe", b"MZ", content_type="application/x-msdownload")
        with self.assertRaises(StorageError):
            SupabaseStorage.validate_file(upload)

    @override_settings(UPLOAD_MAX_FILE_SIZE=4)
    def test_rejects_oversized_file(self):
        upload = SimpleUploadedFile("big.png", b"12345", content_type="image/png")
        with self.assertRaisesMessage(StorageError, "File too large"):
            SupabaseStorage.validate_file(upload)


class UploadViewTests(APITestCase):
    def setUp(self):
        self.url = reverse("upload")
        self.client.force_authenticate(user=ADMIN)

    def photo(self, name="photo.jpg"):
        return SimpleUploadedFile(name, b"\xff\xd8\xff", content_type="image/jpeg")

    def test_requires_admin(self):
        self.client.force_authenticate(user=ProviderUser(id="member"))
        response = self.client.post(self.url, {"file": self.photo()}, format="multipart")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_no_file(self):
        response = self.client.post(self.url, {}, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data["error"], "No file provided")

    @patch("uploads.storage.get_client")
    def test_upload_success(self, mock_get_client):
        client = storage_client()
        mock_get_client.return_value = client

        response = self.client.post(self.url, {"file": self.photo(), "folder": "events"}, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data["success"])
        self.assertEqual(response.data["url"], PUBLIC_URL)
        self.assertEqual(response.data["bucket"], "images")
        self.assertEqual(response.data["mimetype"], "image/jpeg")
        self.assertTrue(response.data["path"].startswith("events/photo_"))

        client.storage.from_.assert_called_with("images")
        upload_kwargs = client.storage.from_.return_value.upload.call_args.kwargs
        self.assertEqual(upload_kwargs["file"], b"\xff\xd8\xff")

    @patch("uploads.storage.get_client")
    def test_explicit_bucket_wins(self, mock_get_client):
        mock_get_client.return_value = storage_client()

        response = self.client.post(
            self.url, {"file": self.photo(), "bucket": "sermons-video"}, format="multipart",
        )

        self.assertEqual(response.data["bucket"], "sermons-video")

    @patch("uploads.storage.get_client")
    def test_storage_failure(self, mock_get_client):
        client = storage_client()
        client.storage.from_.return_value.upload.side_effect = RuntimeError("bucket missing")
        mock_get_client.return_value = client

        response = self.client.post(self.url, {"file": self.photo()}, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data["error"], "Failed to upload file")

    @patch("uploads.storage.get_client")
    def test_delete(self, mock_get_client):
        client = storage_client()
        mock_get_client.return_value = client

        response = self.client.delete(self.url, {"bucket": "images", "path": "events/a.jpg"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        client.storage.from_.return_value.remove.assert_called_once_with(["events/a.jpg"])

    def test_delete_rejects_traversal(self):
        response = self.client.delete(self.url, {"bucket": "images", "path": "../secrets"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class MultipleUploadViewTests(APITestCase):
    def setUp(self):
        self.url = reverse("upload-multiple")
        self.client.force_authenticate(user=ADMIN)

    @patch("uploads.storage.get_client")
    def test_reports_each_file(self, mock_get_client):
        mock_get_client.return_value = storage_client()
        files = [
            SimpleUploadedFile("a.png", b"png", content_type="image/png"),
            SimpleUploadedFile("b.exe", b"MZ", content_type="application/x-msdownload"),
        ]

        response = self.client.post(self.url, {"files": files}, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        results = response.data["results"]
        self.assertEqual([r["originalName"] for r in results], ["a.png", "b.exe"])
        self.assertTrue(results[0]["success"])
        self.assertFalse(results[1]["success"])

    @override_settings(UPLOAD_MAX_FILES=1)
    def test_too_many_files(self):
        files = [
            SimpleUploadedFile("a.png", b"png", content_type="image/png"),
            SimpleUploadedFile("b.png", b"png", content_type="image/png"),
        ]

        response = self.client.post(self.url, {"files": files}, format="multipart")

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
