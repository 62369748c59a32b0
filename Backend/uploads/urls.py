from django.urls import path
from .views import UploadView, MultipleUploadView

urlpatterns = [
    path("upload", UploadView.as_view(), name="upload"),
    path("upload/multiple", MultipleUploadView.as_view(), name="upload-multiple"),
]
