from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from apps.routing.crypto import ENCRYPTED_PREFIX, encrypted_route, original_path


class Command(BaseCommand):
    help = "Print the /e/ link for a site path, or the path behind an /e/ link."

    def add_arguments(self, parser):
        parser.add_argument("value", type=str)
        parser.add_argument(
            "--decrypt",
            action="store_true",
            help="Treat VALUE as an /e/ link (or bare token) and print its path.",
        )

    def handle(self, *args, **options):
        value = options["value"].strip()
        if not options["decrypt"]:
            self.stdout.write(encrypted_route(value))
            return

        if not value.startswith(ENCRYPTED_PREFIX):
            value = ENCRYPTED_PREFIX + value.lstrip("/")
        result = original_path(value)
        if not result.ok:
            raise CommandError(f"Cannot decrypt: {result.error}")
        self.stdout.write(self.style.SUCCESS(result.value))
