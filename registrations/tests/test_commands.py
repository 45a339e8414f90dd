import csv
import io
import json
import os
import tempfile

from django.core.management import CommandError, call_command
from django.test import TestCase

from registrations.identity import normalize
from registrations.models import Registration
from registrations.store import RegistrationStore


class CommandTestCase(TestCase):

    def setUp(self):
        self.store = RegistrationStore()
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def call(self, *args, **kwargs):
        out = io.StringIO()
        call_command(*args, stdout=out, stderr=io.StringIO(), **kwargs)
        return out.getvalue()


class ClearRegistrationsTests(CommandTestCase):

    def test_requires_confirmation(self):
        self.store.upsert(normalize('22b1234', phone='9876543210'))
        output = self.call('clear_registrations')
        self.assertIn('Refusing to delete 1', output)
        self.assertEqual(Registration.objects.count(), 1)

    def test_clears_with_yes(self):
        self.store.upsert(normalize('22b1234', phone='9876543210'))
        self.store.upsert(normalize('22b5678', phone='9876543210'))
        output = self.call('clear_registrations', '--yes')
        self.assertIn('Deleted 2', output)
        self.assertEqual(Registration.objects.count(), 0)


class ExportRegistrationsTests(CommandTestCase):

    def test_stdout(self):
        self.store.upsert(normalize('22b1234', phone='9876543210'), project_id='p1')
        lines = list(csv.reader(io.StringIO(self.call('export_registrations'))))
        self.assertEqual(len(lines), 2)
        self.assertEqual(lines[1][1], '22b1234')

    def test_file(self):
        path = os.path.join(self.tmpdir.name, 'out.csv')
        self.call('export_registrations', '--output', path)
        with open(path, newline='', encoding='utf-8') as fh:
            self.assertEqual(len(list(csv.reader(fh))), 1)


class ImportLegacyRegistrationsTests(CommandTestCase):

    def write(self, records):
        path = os.path.join(self.tmpdir.name, 'registrations.json')
        with open(path, 'w', encoding='utf-8') as fh:
            json.dump(records, fh)
        return path

    def test_imports_and_merges(self):
        path = self.write([
            {'identifier': '22B1234', 'phone': '9876543210', 'projectId': '1', 'ip': '1.1.1.1', 'userAgent': 'old'},
            {'identifier': '22b1234', 'phone': '9876543210', 'projectId': '2'},
            {'identifier': 'someone', 'phone': '9876543210', 'projectId': 'none'},
            {'identifier': 'bad@gmail.com', 'phone': '9876543210'},
            'garbage',
        ])

        output = self.call('import_legacy_registrations', path)

        self.assertIn('Created: 2, merged: 1, skipped: 2', output)
        registration = Registration.objects.get(identifier='22b1234')
        self.assertEqual(registration.project_ids, ['1', '2'])
        self.assertEqual(registration.ip, '1.1.1.1')
        self.assertEqual(Registration.objects.get(identifier='someone').project_ids, [])

    def test_dry_run_saves_nothing(self):
        path = self.write([{'identifier': '22b1234', 'phone': '9876543210'}])
        self.call('import_legacy_registrations', path, '--dry-run')
        self.assertEqual(Registration.objects.count(), 0)

    def test_dry_run_counts_valid_records(self):
        path = self.write([
            {'identifier': '22b1234', 'phone': '9876543210'},
            {'identifier': 'someone', 'phone': '9876543210'},
            {'identifier': '22b5678', 'phone': '12'},
        ])
        output = self.call('import_legacy_registrations', path, '--dry-run')
        self.assertIn('Valid: 2, skipped: 1', output)

    def test_unreadable_file(self):
        with self.assertRaises(CommandError):
            self.call('import_legacy_registrations', os.path.join(self.tmpdir.name, 'missing.json'))
