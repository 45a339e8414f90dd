from unittest import mock

from django.contrib.auth.hashers import check_password
from django.test import TestCase

from registrations.exceptions import InvalidFormat, MissingField
from registrations.models import Registration
from registrations.relay import SpreadsheetRelay
from registrations.services import RegistrationService, build_service
from registrations.store import RegistrationStore


class RegisterTests(TestCase):

    def setUp(self):
        self.store = RegistrationStore()
        self.service = RegistrationService(self.store)

    def register(self, **payload):
        payload.setdefault('phone', '9876543210')
        return self.service.register(payload, ip='10.0.0.1', user_agent='pytest')

    def test_second_project_is_added(self):
        first = self.register(identifier='22b1234', projectId='p1')
        self.assertTrue(first.created)
        self.assertEqual(first.to_dict()['projectIds'], ['p1'])
        self.assertEqual(first.message, 'Registration successful!')

        second = self.register(identifier='22b1234', projectId='p2')
        self.assertFalse(second.created)
        self.assertEqual(second.to_dict()['projectIds'], ['p1', 'p2'])
        self.assertEqual(second.message, 'Registration updated!')

    def test_repeating_a_request_is_idempotent(self):
        first = self.register(identifier='22b1234', projectId='p1')
        second = self.register(identifier='22b1234', projectId='p1')
        self.assertEqual(len(second.to_dict()['projectIds']), len(first.to_dict()['projectIds']))
        self.assertEqual(Registration.objects.count(), 1)

    def test_union_does_not_depend_on_order(self):
        self.register(identifier='a@iitb.ac.in', projectId='A')
        self.register(identifier='a@iitb.ac.in', projectId='B')
        self.register(identifier='22b1234', projectId='B')
        self.register(identifier='22b1234', projectId='A')
        first = self.service.lookup('a@iitb.ac.in')
        second = self.service.lookup('22b1234')
        self.assertEqual(set(first.project_ids), {'A', 'B'})
        self.assertEqual(set(second.project_ids), {'A', 'B'})

    def test_request_matching_by_email_merges(self):
        self.register(identifier='x@iitb.ac.in', projectId='p1')
        result = self.register(identifier='22b1234', email='x@iitb.ac.in', projectId='p2')
        self.assertFalse(result.created)
        self.assertEqual(Registration.objects.count(), 1)
        registration = Registration.objects.get()
        self.assertEqual(registration.identifier, 'x@iitb.ac.in')
        self.assertEqual(registration.roll_number, '22B1234')
        self.assertEqual(registration.project_ids, ['p1', 'p2'])

    def test_integer_project_ids_are_stored_as_strings(self):
        result = self.register(identifier='22b1234', projectId=3)
        self.assertEqual(result.to_dict()['projectIds'], ['3'])

    def test_validation_fails_before_the_store_is_touched(self):
        with mock.patch.object(self.store, 'upsert') as upsert:
            with self.assertRaises(MissingField):
                self.register(identifier='')
            with self.assertRaises(InvalidFormat):
                self.register(identifier='foo@other.com')
            with self.assertRaises(InvalidFormat):
                self.register(identifier='22b1234', phone='12345')
        upsert.assert_not_called()

    def test_provenance_is_kept_from_first_registration(self):
        self.service.register({'identifier': '22b1234', 'phone': '9876543210'}, ip='1.1.1.1', user_agent='first')
        self.service.register({'identifier': '22b1234', 'phone': '9876543210'}, ip='2.2.2.2', user_agent='second')
        registration = Registration.objects.get()
        self.assertEqual(registration.ip, '1.1.1.1')
        self.assertEqual(registration.user_agent, 'first')

    def test_password_is_hashed(self):
        self.register(identifier='22b1234', password='secret123')
        registration = Registration.objects.get()
        self.assertNotEqual(registration.password_hash, 'secret123')
        self.assertTrue(check_password('secret123', registration.password_hash))

    def test_non_string_password_is_rejected(self):
        with self.assertRaises(InvalidFormat) as ctx:
            self.register(identifier='22b1234', password=12345)
        self.assertEqual(ctx.exception.field, 'password')
        self.assertEqual(Registration.objects.count(), 0)

    def test_password_is_only_hashed_on_insert(self):
        self.register(identifier='22b1234', password='secret123')
        with mock.patch('registrations.store.make_password') as make_password:
            self.register(identifier='22b1234', password='other')
        make_password.assert_not_called()
        self.assertTrue(check_password('secret123', Registration.objects.get().password_hash))

    def test_without_relay_outcome_is_disabled(self):
        self.register(identifier='22b1234')
        self.assertEqual(Registration.objects.get().relay_status, Registration.RELAY_DISABLED)


class RelayWiringTests(TestCase):

    def test_disabled_relay_records_outcome(self):
        store = RegistrationStore()
        service = RegistrationService(store, relay=SpreadsheetRelay('', store))
        service.register({'identifier': '22b1234', 'phone': '9876543210'})
        self.assertEqual(Registration.objects.get().relay_status, Registration.RELAY_DISABLED)

    def test_enabled_relay_is_dispatched(self):
        store = RegistrationStore()
        relay = mock.Mock(enabled=True)
        service = RegistrationService(store, relay=relay)
        result = service.register({'identifier': '22b1234', 'phone': '9876543210', 'projectId': 'p1'})
        relay.dispatch.assert_called_once_with(result.registration, 'p1')
        relay.send.assert_not_called()

    def test_build_service_reads_settings(self):
        with self.settings(
            SPREADSHEET_RELAY_URL='https://sheets.example/exec',
            ALLOWED_EMAIL_SUFFIXES=['@example.edu'],
            REQUIRE_CONTACT_METHOD=False,
        ):
            service = build_service()
        self.assertTrue(service.relay.enabled)
        self.assertEqual(service.email_suffixes, ['@example.edu'])
        self.assertFalse(service.require_contact_method)
