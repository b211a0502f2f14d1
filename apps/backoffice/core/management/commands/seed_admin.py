"""
Create the initial admin account.

Usage:
    uv run python apps/backoffice/manage.py seed_admin
    uv run python apps/backoffice/manage.py seed_admin --email a@b.com --password s3cret
"""

import logging
from typing import Any

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from apps.backoffice.core.models import User

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = "Create an admin user from ADMIN_EMAIL / ADMIN_PASSWORD if none exists"

    def add_arguments(self, parser: Any) -> None:
        parser.add_argument(
            "--email",
            default=settings.ADMIN_EMAIL,
            help="Admin e-mail (default: ADMIN_EMAIL)",
        )
        parser.add_argument(
            "--password",
            default=settings.ADMIN_PASSWORD,
            help="Admin password (default: ADMIN_PASSWORD)",
        )
        parser.add_argument(
            "--username",
            default="admin",
            help="Admin username (default: admin)",
        )

    def handle(self, *_args: Any, **options: Any) -> None:
        email = options["email"]
        password = options["password"]

        if not email or not password:
            raise CommandError("Admin e-mail and password are required")

        existing = User.objects.filter(email__iexact=email).first()
        if existing is not None:
            self.stdout.write(f"Admin {existing.username} already exists, skipping")
            return

        user = User.objects.create_user(
            username=options["username"],
            email=email.lower(),
            password=password,
            role=User.Role.ADMIN,
            is_staff=True,
        )
        logger.info("Seeded admin user %s", user.pk)
        self.stdout.write(self.style.SUCCESS(f"Created admin {user.username}"))
