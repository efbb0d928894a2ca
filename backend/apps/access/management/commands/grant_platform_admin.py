"""
Management command to grant or revoke platform admin rights.

Bootstraps the first platform admin, who can then create churches and
approve evangelists through the API.
Usage: python manage.py grant_platform_admin admin@example.com [--revoke]
"""

from django.core.management.base import BaseCommand, CommandError

from apps.access.services import grant_platform_admin, revoke_platform_admin
from apps.accounts.models import User


class Command(BaseCommand):
    help = "Grant (or with --revoke, remove) platform admin rights for a user"

    def add_arguments(self, parser):
        parser.add_argument("email", type=str, help="Email of an existing user")
        parser.add_argument(
            "--revoke",
            action="store_true",
            help="Remove platform admin rights instead of granting them",
        )

    def handle(self, *args, **options):
        email = options["email"].strip()
        user = User.objects.filter(email__iexact=email).first()
        if user is None:
            raise CommandError(f"No user with email {email}. They must register first.")

        if options["revoke"]:
            if revoke_platform_admin(user):
                self.stdout.write(self.style.SUCCESS(f"Revoked platform admin from {user.email}"))
            else:
                self.stdout.write(f"{user.email} was not a platform admin")
            return

        grant_platform_admin(user)
        self.stdout.write(self.style.SUCCESS(f"{user.email} is now a platform admin"))
