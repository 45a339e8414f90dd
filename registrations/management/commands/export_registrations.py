"""
Management command to export registrations as CSV.

Run: python manage.py export_registrations [--output registrations.csv]
"""
from django.core.management.base import BaseCommand

from registrations.reporting import write_registrations_csv
from registrations.store import RegistrationStore


class Command(BaseCommand):
    help = 'Write all registrations as CSV to stdout or a file'

    def add_arguments(self, parser):
        parser.add_argument(
            '--output', '-o',
            help='File to write instead of stdout.',
        )

    def handle(self, *args, **options):
        rows = RegistrationStore().list()
        path = options.get('output')
        if path:
            with open(path, 'w', newline='', encoding='utf-8') as fh:
                write_registrations_csv(rows, fh)
            self.stderr.write(self.style.SUCCESS(f'Wrote {len(rows)} registration(s) to {path}'))
        else:
            write_registrations_csv(rows, self.stdout)
