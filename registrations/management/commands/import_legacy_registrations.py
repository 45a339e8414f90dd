"""
Management command to import the JSON file written by the old file-backed
server (a list of {identifier, phone, projectId, ip, userAgent, ...} records).

Each record goes through the normal registration service, so records for the
same person merge and invalid ones are reported and skipped.

Run: python manage.py import_legacy_registrations registrations.json
Use --dry-run to only validate.
"""
import json

from django.core.management.base import BaseCommand, CommandError

from registrations.exceptions import IdentityValidationError, RegistrationError
from registrations.identity import normalize
from registrations.services import RegistrationService
from registrations.store import RegistrationStore


class Command(BaseCommand):
    help = 'Import registrations from a legacy JSON file'

    def add_arguments(self, parser):
        parser.add_argument('path', help='Path to the legacy registrations JSON file.')
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Only validate the records, do not save.',
        )

    def handle(self, *args, **options):
        try:
            with open(options['path'], encoding='utf-8') as fh:
                records = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            raise CommandError(f'Could not read {options["path"]}: {e}')
        if not isinstance(records, list):
            raise CommandError('Expected a JSON list of registration records')

        dry_run = options['dry_run']
        if dry_run:
            self.stdout.write(self.style.WARNING('Dry run: no changes will be saved.'))

        # Legacy records carry neither email nor roll number separately
        service = RegistrationService(RegistrationStore(), require_contact_method=False)
        created = 0
        merged = 0
        skipped = 0
        valid = 0

        for index, record in enumerate(records, start=1):
            if not isinstance(record, dict):
                skipped += 1
                self.stdout.write(self.style.WARNING(f'  Record {index}: not an object (skipped)'))
                continue
            payload = {
                'identifier': record.get('identifier'),
                'email': record.get('email'),
                'rollNumber': record.get('rollNumber'),
                'phone': record.get('phone'),
                'projectId': None if record.get('projectId') in (None, '', 'none') else record.get('projectId'),
            }
            try:
                if dry_run:
                    normalize(
                        payload['identifier'], payload['email'], payload['rollNumber'], payload['phone'],
                        require_contact_method=False,
                    )
                    valid += 1
                    continue
                result = service.register(payload, ip=record.get('ip'), user_agent=record.get('userAgent'))
            except IdentityValidationError as e:
                skipped += 1
                self.stdout.write(self.style.WARNING(f'  Record {index}: {e.message} (skipped)'))
                continue
            except RegistrationError as e:
                skipped += 1
                self.stdout.write(self.style.ERROR(f'  Record {index}: {e.message} (skipped)'))
                continue

            if result.created:
                created += 1
            else:
                merged += 1

        self.stdout.write('')
        if dry_run:
            self.stdout.write(self.style.SUCCESS(f'Done. Valid: {valid}, skipped: {skipped}'))
            return
        self.stdout.write(self.style.SUCCESS(
            f'Done. Created: {created}, merged: {merged}, skipped: {skipped}'
        ))
