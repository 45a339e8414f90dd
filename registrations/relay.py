"""
Best-effort relay of new registrations to a spreadsheet web app.

The relay never affects the registration outcome: failures are logged and
recorded on the row as ``relay_status``/``relay_error``, and nothing is
retried.
"""
import logging
import threading

import requests
from django.db import connections, transaction

from .exceptions import RelayUnavailable
from .models import Registration

logger = logging.getLogger(__name__)


class SpreadsheetRelay:
    """
    Posts a flat JSON record per registration to ``url``.
    """

    def __init__(self, url, store, timeout=30.0, session=None):
        self.url = url
        self.store = store
        self.timeout = timeout
        self.session = session or requests

    @property
    def enabled(self):
        return bool(self.url)

    @staticmethod
    def build_payload(registration, project_id=None):
        return {
            'id': registration.id,
            'identifier': registration.identifier,
            'phone': registration.phone,
            'projectId': project_id or 'none',
            'timestamp': registration.updated_at.isoformat() if registration.updated_at else None,
            'ip': registration.ip or 'unknown',
            'userAgent': registration.user_agent or 'unknown',
        }

    def _post(self, payload):
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise RelayUnavailable(str(e)) from e
        return response

    def send(self, registration, project_id=None):
        """
        Deliver one record and store the outcome flag. Returns the status.
        """
        if not self.enabled:
            self.store.record_relay_outcome(registration.pk, Registration.RELAY_DISABLED)
            return Registration.RELAY_DISABLED

        payload = self.build_payload(registration, project_id)
        try:
            response = self._post(payload)
        except RelayUnavailable as e:
            logger.warning(f"Spreadsheet relay failed for {registration.identifier}: {e.message}")
            self.store.record_relay_outcome(registration.pk, Registration.RELAY_FAILED, e.message)
            return Registration.RELAY_FAILED

        logger.info(f"Spreadsheet relay accepted {registration.identifier} (HTTP {response.status_code})")
        self.store.record_relay_outcome(registration.pk, Registration.RELAY_SENT)
        return Registration.RELAY_SENT

    def dispatch(self, registration, project_id=None):
        """
        Send in the background once the surrounding transaction commits.
        """
        def start():
            thread = threading.Thread(
                target=self._send_quietly,
                args=(registration, project_id),
                name=f"relay-{registration.pk}",
                daemon=True,
            )
            thread.start()

        transaction.on_commit(start)

    def _send_quietly(self, registration, project_id):
        try:
            self.send(registration, project_id)
        except Exception as e:
            # Worker thread: nothing above us can handle this
            logger.error(f"Spreadsheet relay crashed for {registration.identifier}: {str(e)}")
        finally:
            connections.close_all()
