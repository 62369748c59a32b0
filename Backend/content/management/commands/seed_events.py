from datetime import datetime, timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from content.models import Event

LOCATION = "HCM Main Auditorium"


def add_months(moment: datetime, months: int) -> datetime:
    month = moment.month - 1 + months
    year = moment.year + month // 12
    month = month % 12 + 1
    # clamp to the last day of a shorter month
    for day in (moment.day, 30, 29, 28):
        try:
            return moment.replace(year=year, month=month, day=day)
        except ValueError:
            continue
    raise ValueError(f"Cannot add {months} months to {moment}")


def demo_events(now: datetime) -> list[dict]:
    next_month = add_months(now, 1)
    december = now.replace(year=next_month.year, month=12, hour=10, minute=0, second=0, microsecond=0)
    return [
        {
            "title": "Sunday Worship Service",
            "description": (
                "Join us for our weekly Sunday worship service. Experience powerful praise "
                "and worship, inspiring messages, and fellowship with our church family."
            ),
            "date": now + timedelta(days=7),
            "image": "/images/events/worship-service.jpg",
        },
        {
            "title": "Youth Conference",
            "description": (
                "A conference for young people to grow in their faith, connect with peers, "
                "and discover their purpose in Christ. Special guest speakers and worship sessions."
            ),
            "date": next_month,
            "image": "/images/events/youth-conference.jpg",
        },
        {
            "title": "Prayer & Fasting Week",
            "description": (
                "A week of dedicated prayer and fasting. Join us as we seek God's face together "
                "and intercede for our community."
            ),
            "date": add_months(now, 2),
            "image": "/images/events/prayer-fasting.jpg",
        },
        {
            "title": "HCM Holy Ghost Conference",
            "description": (
                "Join us for a powerful time of worship, prayer, and the move of the Holy Spirit."
            ),
            "date": add_months(now, 3),
            "image": "/images/events/holy-ghost-conference.jpg",
        },
        {
            "title": "HCM Thanksgiving",
            "description": (
                "A special service to give thanks to God for His faithfulness throughout the year."
            ),
            "date": december.replace(day=20),
            "image": "/images/events/thanksgiving.jpg",
        },
        {
            "title": "HCM Carol Service",
            "description": (
                "Celebrate the birth of our Savior with carols, special music, and the true "
                "meaning of Christmas. A joyous event for the whole family."
            ),
            "date": december.replace(day=23),
            "image": "/images/events/carol-service.jpg",
        },
    ]


class Command(BaseCommand):
    help = "Create the demo events shown on a fresh site. Does nothing if any of them exist."

    def handle(self, *args, **options):
        events = demo_events(timezone.now())
        titles = [event["title"] for event in events]

        existing = Event.objects.filter(title__in=titles).count()
        if existing:
            self.stdout.write(f"Events already exist ({existing}); nothing to do")
            return

        Event.objects.bulk_create(Event(location=LOCATION, **event) for event in events)

        for event in events:
            self.stdout.write(f"  {event['title']}: {event['date']:%Y-%m-%d}")
        self.stdout.write(self.style.SUCCESS(f"Inserted {len(events)} events"))
