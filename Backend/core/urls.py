from django.contrib import admin
from django.urls import path, include
from core import views

# API routes carry no trailing slash, matching the public site's client.
urlpatterns = [
    path("admin/", admin.site.urls),

    path("api/config", views.public_config, name="public-config"),
    path("health", views.health, name="health"),

    path("api/", include("content.urls")),
    path("api/", include("uploads.urls")),
    path("api/", include("donations.urls")),
]
