"""
Management command to delete every registration.

Run: python manage.py clear_registrations --yes
Without --yes it only reports how many rows would be removed.
"""
from django.core.management.base import BaseCommand

from registrations.store import RegistrationStore


class Command(BaseCommand):
    help = 'Delete all registrations (requires --yes)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--yes',
            action='store_true',
            help='Confirm the deletion.',
        )

    def handle(self, *args, **options):
        store = RegistrationStore()
        if not options['yes']:
            self.stdout.write(self.style.WARNING(
                f'Refusing to delete {store.count()} registration(s). Re-run with --yes to confirm.'
            ))
            return

        deleted = store.clear()
        self.stdout.write(self.style.SUCCESS(f'Deleted {deleted} registration(s).'))
