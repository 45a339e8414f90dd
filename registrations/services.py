"""
Registration service: validation, upsert and response shaping.
"""
import logging
from dataclasses import dataclass

from django.conf import settings
from .exceptions import InvalidFormat
from .identity import normalize
from .models import Registration
from .relay import SpreadsheetRelay
from .store import RegistrationStore

logger = logging.getLogger(__name__)


@dataclass
class RegistrationResult:
    registration: Registration
    created: bool

    @property
    def message(self):
        return 'Registration successful!' if self.created else 'Registration updated!'

    def to_dict(self):
        return self.registration.to_dict()


def _project_id(value):
    if value is None:
        return None
    value = str(value).strip()
    return value or None


class RegistrationService:
    """
    Orchestrates normalize -> upsert -> relay for registration requests.
    """

    def __init__(self, store, relay=None, email_suffixes=None, require_contact_method=True):
        self.store = store
        self.relay = relay
        self.email_suffixes = email_suffixes
        self.require_contact_method = require_contact_method

    def register(self, payload, ip=None, user_agent=None):
        """
        Register a person, or merge the request into their existing row.

        ``payload`` uses the client's field names: identifier, email,
        rollNumber, phone, projectId, password. Validation errors are raised
        before the store is touched. ``ip`` and ``user_agent`` are kept from
        the first registration only.
        """
        payload = payload or {}
        identity = normalize(
            payload.get('identifier'),
            email=payload.get('email'),
            roll_number=payload.get('rollNumber'),
            phone=payload.get('phone'),
            email_suffixes=self.email_suffixes,
            require_contact_method=self.require_contact_method,
        )
        project_id = _project_id(payload.get('projectId'))
        password = payload.get('password')
        if password is not None and not isinstance(password, str):
            raise InvalidFormat('Password must be a string', field='password')

        registration, created = self.store.upsert(
            identity,
            project_id=project_id,
            password=password or None,
            ip=ip,
            user_agent=user_agent,
        )
        logger.info(
            f"{'Created' if created else 'Updated'} registration {registration.identifier} "
            f"projects={registration.project_ids}"
        )
        self._relay(registration, project_id)
        return RegistrationResult(registration=registration, created=created)

    def _relay(self, registration, project_id):
        if self.relay is None:
            self.store.record_relay_outcome(registration.pk, Registration.RELAY_DISABLED)
        elif not self.relay.enabled:
            self.relay.send(registration, project_id)
        else:
            self.relay.dispatch(registration, project_id)

    def lookup(self, key):
        return self.store.get(key)

    def list_registrations(self):
        return self.store.list()

    def statistics(self):
        return self.store.aggregate()


def build_service(store=None):
    """Wire a service from Django settings."""
    store = store or RegistrationStore()
    relay = SpreadsheetRelay(
        url=getattr(settings, 'SPREADSHEET_RELAY_URL', ''),
        store=store,
        timeout=getattr(settings, 'SPREADSHEET_RELAY_TIMEOUT', 30.0),
    )
    return RegistrationService(
        store,
        relay=relay,
        email_suffixes=getattr(settings, 'ALLOWED_EMAIL_SUFFIXES', None),
        require_contact_method=getattr(settings, 'REQUIRE_CONTACT_METHOD', True),
    )
