from django.urls import path

from . import views

urlpatterns = [
    path("sermons", views.SermonListView.as_view(), name="sermon-list"),
    path("sermons/<str:pk>", views.SermonDetailView.as_view(), name="sermon-detail"),
    path("sermons/<str:pk>/download", views.SermonDownloadView.as_view(), name="sermon-download-count"),
    path(
        "sermons/<str:pk>/download/<str:file_type>",
        views.SermonDownloadView.as_view(),
        name="sermon-download",
    ),

    path("events", views.EventListView.as_view(), name="event-list"),
    path("events/<str:pk>", views.EventDetailView.as_view(), name="event-detail"),

    path("blog", views.BlogPostListView.as_view(), name="blog-list"),
    path("blog/<str:pk>", views.BlogPostDetailView.as_view(), name="blog-detail"),

    path("testimonials", views.TestimonialListView.as_view(), name="testimonial-list"),
    path("testimonials/<str:pk>", views.TestimonialDetailView.as_view(), name="testimonial-detail"),

    path("team", views.TeamMemberListView.as_view(), name="team-list"),
    path("team/<str:pk>", views.TeamMemberDetailView.as_view(), name="team-detail"),

    path("prayers", views.PrayerRequestListView.as_view(), name="prayer-list"),
    path("prayers/<str:pk>", views.PrayerRequestDetailView.as_view(), name="prayer-detail"),

    path("settings", views.SiteSettingsView.as_view(), name="site-settings"),
    path("contact", views.ContactView.as_view(), name="contact"),
]
