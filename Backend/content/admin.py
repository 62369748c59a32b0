from django.contrib import admin

from content.models import (
    BlogPost,
    Event,
    PrayerRequest,
    Sermon,
    SiteSettings,
    TeamMember,
    Testimonial,
)


class SermonAdmin(admin.ModelAdmin):
    list_display = ("title", "preacher", "speaker", "date", "downloads")
    search_fields = ("title", "preacher", "speaker")
    readonly_fields = ("downloads", "created_at", "updated_at")


class EventAdmin(admin.ModelAdmin):
    list_display = ("title", "date", "time", "location")
    search_fields = ("title", "location")
    list_filter = ("date",)


class BlogPostAdmin(admin.ModelAdmin):
    list_display = ("title", "author", "category", "publish_date")
    search_fields = ("title", "author", "category")
    list_filter = ("category",)


@admin.register(Testimonial)
class TestimonialAdmin(admin.ModelAdmin):
    list_display = ("name", "location", "approved", "date")
    search_fields = ("name", "testimonial")
    list_filter = ("approved",)

    actions = ["approve"]

    def approve(self, request, queryset):
        count = queryset.update(approved=True)
        self.message_user(request, f"{count} testimonials approved.")

    approve.short_description = "Approve selected testimonials"


class TeamMemberAdmin(admin.ModelAdmin):
    list_display = ["name", "position", "order"]
    search_fields = ["name", "position"]


class PrayerRequestAdmin(admin.ModelAdmin):
    list_display = ("name", "status", "date")
    search_fields = ("name", "request")
    list_filter = ("status",)


admin.site.register(Sermon, SermonAdmin)
admin.site.register(Event, EventAdmin)
admin.site.register(BlogPost, BlogPostAdmin)
admin.site.register(TeamMember, TeamMemberAdmin)
admin.site.register(PrayerRequest, PrayerRequestAdmin)
admin.site.register(SiteSettings)
