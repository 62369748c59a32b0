from django.core.management.base import BaseCommand, CommandError

from users.authentication import ADMIN_ROLE
from users.provider import AuthProviderError, get_client

PAGE_SIZE = 100


def find_user_by_email(client, email: str):
    """Walk the provider's user list page by page until ``email`` turns up."""
    page = 1
    while True:
        users = client.auth.admin.list_users(page=page, per_page=PAGE_SIZE)
        for user in users:
            if (user.email or "").lower() == email:
                return user
        if len(users) < PAGE_SIZE:
            return None
        page += 1


class Command(BaseCommand):
    help = "Grant (or revoke) the admin role in a provider user's app_metadata."

    def add_arguments(self, parser):
        parser.add_argument("email", help="Email of an existing auth-provider user")
        parser.add_argument(
            "--revoke",
            action="store_true",
            help="Remove the admin role instead of granting it",
        )

    def handle(self, *args, **options):
        email = options["email"].strip().lower()

        try:
            client = get_client()
            user = find_user_by_email(client, email)
        except AuthProviderError as e:
            raise CommandError(str(e))
        except Exception as e:
            raise CommandError(f"Failed to list users: {e}")

        if user is None:
            raise CommandError(f'User with email "{email}" not found')

        app_metadata = dict(user.app_metadata or {})
        if options["revoke"]:
            app_metadata.pop("role", None)
        else:
            app_metadata["role"] = ADMIN_ROLE

        try:
            client.auth.admin.update_user_by_id(user.id, {"app_metadata": app_metadata})
        except Exception as e:
            raise CommandError(f"Failed to update user {user.id}: {e}")

        action = "revoked from" if options["revoke"] else "granted to"
        self.stdout.write(self.style.SUCCESS(f"Admin role {action} {email} ({user.id})"))
