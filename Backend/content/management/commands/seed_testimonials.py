from datetime import datetime

from django.core.management.base import BaseCommand
from django.utils import timezone

from content.models import Testimonial

TESTIMONIALS = [
    {
        "name": "Priscilla Brooks",
        "testimonial": (
            "We're saved so we can serve, and there's a unique role only you can play "
            "in changing lives for the better."
        ),
        "location": "Church Member",
        "date": datetime(2023, 9, 15),
    },
    {
        "name": "John Smith",
        "testimonial": (
            "This church has been a beacon of hope in my life. The community here truly "
            "embodies God's love and grace."
        ),
        "location": "Volunteer",
        "date": datetime(2023, 10, 8),
    },
    {
        "name": "Sarah Johnson",
        "testimonial": (
            "Through this ministry, I've found my purpose and learned to walk in faith "
            "every single day."
        ),
        "location": "Faith Partner",
        "date": datetime(2023, 11, 21),
    },
    {
        "name": "Michael Brown",
        "testimonial": (
            "The sermons here have transformed my understanding of God's word and deepened "
            "my relationship with Christ."
        ),
        "location": "Member",
        "date": datetime(2024, 1, 12),
    },
    {
        "name": "Emily Davis",
        "testimonial": (
            "This church family has supported me through my darkest times and celebrated "
            "with me in my greatest joys."
        ),
        "location": "Choir Lead",
        "date": datetime(2024, 2, 18),
    },
]


class Command(BaseCommand):
    help = "Insert approved demo testimonials, skipping any that already exist."

    def handle(self, *args, **options):
        inserted = skipped = 0

        for entry in TESTIMONIALS:
            _, created = Testimonial.objects.get_or_create(
                name=entry["name"],
                testimonial=entry["testimonial"],
                defaults={
                    "location": entry["location"],
                    "date": timezone.make_aware(entry["date"]),
                    "approved": True,
                },
            )
            if created:
                inserted += 1
                self.stdout.write(f"Inserted testimonial for {entry['name']}")
            else:
                skipped += 1
                self.stdout.write(f"Skipping existing testimonial for {entry['name']}")

        self.stdout.write(self.style.SUCCESS(
            f"Seeding complete. Inserted: {inserted}, skipped (already existed): {skipped}"
        ))
