from unittest import mock

import requests
from django.test import TestCase

from registrations.identity import normalize
from registrations.models import Registration
from registrations.relay import SpreadsheetRelay
from registrations.store import RegistrationStore

RELAY_URL = 'https://sheets.example/exec'


class SpreadsheetRelayTests(TestCase):

    def setUp(self):
        self.store = RegistrationStore()
        self.registration, _ = self.store.upsert(
            normalize('22b1234', phone='9876543210'), project_id='p1', ip='10.0.0.1', user_agent='pytest',
        )
        self.session = mock.Mock()

    def relay(self, url=RELAY_URL):
        return SpreadsheetRelay(url, self.store, timeout=5, session=self.session)

    def test_payload_shape(self):
        payload = SpreadsheetRelay.build_payload(self.registration)
        self.assertEqual(payload['id'], self.registration.id)
        self.assertEqual(payload['identifier'], '22b1234')
        self.assertEqual(payload['phone'], '9876543210')
        self.assertEqual(payload['projectId'], 'none')
        self.assertEqual(payload['ip'], '10.0.0.1')
        self.assertEqual(payload['userAgent'], 'pytest')

    def test_success_is_recorded(self):
        self.session.post.return_value = mock.Mock(status_code=200)
        status = self.relay().send(self.registration, 'p1')

        self.assertEqual(status, Registration.RELAY_SENT)
        args, kwargs = self.session.post.call_args
        self.assertEqual(args[0], RELAY_URL)
        self.assertEqual(kwargs['json']['projectId'], 'p1')
        self.assertEqual(kwargs['timeout'], 5)
        self.registration.refresh_from_db()
        self.assertEqual(self.registration.relay_status, Registration.RELAY_SENT)
        self.assertIsNone(self.registration.relay_error)

    def test_connection_error_is_recorded_not_raised(self):
        self.session.post.side_effect = requests.exceptions.ConnectionError('no route')
        status = self.relay().send(self.registration, 'p1')

        self.assertEqual(status, Registration.RELAY_FAILED)
        self.registration.refresh_from_db()
        self.assertEqual(self.registration.relay_status, Registration.RELAY_FAILED)
        self.assertIn('no route', self.registration.relay_error)
        self.assertEqual(self.session.post.call_count, 1)

    def test_http_error_is_recorded(self):
        response = mock.Mock(status_code=502)
        response.raise_for_status.side_effect = requests.exceptions.HTTPError('502 Bad Gateway')
        self.session.post.return_value = response

        self.assertEqual(self.relay().send(self.registration), Registration.RELAY_FAILED)

    def test_disabled_relay_does_not_post(self):
        self.assertEqual(self.relay(url='').send(self.registration), Registration.RELAY_DISABLED)
        self.session.post.assert_not_called()

    def test_dispatch_starts_thread_after_commit(self):
        relay = self.relay()
        with mock.patch('registrations.relay.threading.Thread') as thread_cls:
            with self.captureOnCommitCallbacks(execute=True):
                relay.dispatch(self.registration, 'p1')
        thread_cls.assert_called_once()
        self.assertEqual(thread_cls.call_args.kwargs['args'], (self.registration, 'p1'))
        thread_cls.return_value.start.assert_called_once()
