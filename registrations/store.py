"""
Durable storage for registrations.

``RegistrationStore`` wraps the ``Registration`` model. It is constructed
explicitly and handed to the service; nothing here is a module-level handle.
"""
import logging
from collections import Counter
from datetime import timedelta

from django.contrib.auth.hashers import make_password
from django.db import DatabaseError, IntegrityError, transaction
from django.utils import timezone

from .exceptions import (
    ConflictingIdentity, DuplicateIdentity, RegistrationError, StoreUnavailable,
)
from .identity import normalize_lookup_key
from .models import Registration

logger = logging.getLogger(__name__)

# Lookup precedence when more than one index is queried.
MATCH_FIELDS = ('identifier', 'email', 'roll_number')


class RegistrationStore:
    """
    Keyed storage over ``Registration`` rows.

    Each of identifier, email and roll number is a unique index. A request
    matches a row when any of its non-empty values hits the same column of
    that row.
    """

    def __init__(self, model=Registration, using=None):
        self.model = model
        self.using = using

    def _manager(self):
        return self.model.objects.db_manager(self.using)

    def find_matching(self, identifier, email=None, roll_number=None, for_update=False):
        """
        Return the registration matching any of the given values, or None.

        Raises ConflictingIdentity when the values point at different rows.
        ``for_update`` locks the matched row and must be used inside a
        transaction.
        """
        values = dict(zip(MATCH_FIELDS, (identifier, email, roll_number)))
        hits = []
        for field in MATCH_FIELDS:
            value = values[field]
            if not value:
                continue
            queryset = self._manager().filter(**{field: value})
            if for_update:
                queryset = queryset.select_for_update()
            row = queryset.first()
            if row is not None and all(row.pk != hit.pk for hit in hits):
                hits.append(row)

        if len(hits) > 1:
            raise ConflictingIdentity([hit.pk for hit in hits])
        return hits[0] if hits else None

    def get(self, key):
        """Look up a registration by identifier, email or roll number."""
        key = normalize_lookup_key(key)
        if not key:
            return None
        try:
            for field, value in (('identifier', key), ('email', key), ('roll_number', key.upper())):
                row = self._manager().filter(**{field: value}).first()
                if row is not None:
                    return row
        except DatabaseError as e:
            raise StoreUnavailable(f"Could not read registration: {e}") from e
        return None

    def upsert(self, identity, project_id=None, password=None, ip=None, user_agent=None):
        """
        Insert a new registration or merge into the matching one.

        Returns ``(registration, created)``. A unique-constraint race on
        insert is retried once; the second attempt finds the row the other
        writer committed and merges into it. The raw ``password`` is hashed
        only when a new row is inserted.
        """
        try:
            return self._upsert_once(identity, project_id, password, ip, user_agent)
        except DuplicateIdentity:
            logger.info(f"Concurrent insert for {identity.identifier}, retrying as merge")
            return self._upsert_once(identity, project_id, password, ip, user_agent)

    def _upsert_once(self, identity, project_id, password, ip, user_agent):
        try:
            with transaction.atomic(using=self.using):
                existing = self.find_matching(
                    identity.identifier, identity.email, identity.roll_number, for_update=True,
                )
                if existing is not None:
                    self._merge(existing, identity, project_id)
                    return existing, False

                registration = self.model(
                    identifier=identity.identifier,
                    email=identity.email,
                    roll_number=identity.roll_number,
                    phone=identity.phone,
                    project_ids=[],
                    password_hash=make_password(password) if password else None,
                    ip=ip,
                    user_agent=user_agent,
                )
                registration.add_project(project_id)
                try:
                    with transaction.atomic(using=self.using):
                        registration.save(using=self.using, force_insert=True)
                except IntegrityError as e:
                    raise DuplicateIdentity(f"{identity.identifier} was registered concurrently") from e
                return registration, True
        except RegistrationError:
            raise
        except DatabaseError as e:
            raise StoreUnavailable(f"Could not save registration: {e}") from e

    def _merge(self, registration, identity, project_id):
        update_fields = ['phone', 'project_ids', 'updated_at']
        registration.add_project(project_id)
        registration.phone = identity.phone
        # Contact methods are only filled in, never replaced
        if registration.email is None and identity.email:
            registration.email = identity.email
            update_fields.append('email')
        if registration.roll_number is None and identity.roll_number:
            registration.roll_number = identity.roll_number
            update_fields.append('roll_number')
        try:
            with transaction.atomic(using=self.using):
                registration.save(using=self.using, update_fields=update_fields)
        except IntegrityError as e:
            raise DuplicateIdentity(f"{identity.identifier} collided while merging") from e

    def list(self):
        """All registrations, newest first."""
        try:
            return list(self._manager().all())
        except DatabaseError as e:
            raise StoreUnavailable(f"Could not list registrations: {e}") from e

    def count(self):
        try:
            return self._manager().count()
        except DatabaseError as e:
            raise StoreUnavailable(f"Could not count registrations: {e}") from e

    def aggregate(self, now=None):
        """Summary counts computed from ``list()``."""
        now = now or timezone.now()
        rows = self.list()
        since = now - timedelta(hours=24)

        with_project = sum(1 for r in rows if r.has_projects())
        per_project = Counter(pid for r in rows for pid in set(r.project_ids or []))

        return {
            'total': len(rows),
            'withProject': with_project,
            'withoutProject': len(rows) - with_project,
            'last24h': sum(1 for r in rows if r.created_at and r.created_at > since),
            'perProjectCounts': dict(sorted(per_project.items(), key=lambda kv: (-kv[1], kv[0]))),
            'emailUsers': sum(1 for r in rows if r.email),
            'rollUsers': sum(1 for r in rows if r.roll_number),
        }

    def record_relay_outcome(self, pk, status, error=None):
        self._manager().filter(pk=pk).update(
            relay_status=status,
            relay_error=(error or '')[:255] or None,
            relay_attempted_at=timezone.now(),
        )

    def clear(self):
        """Delete every registration. Returns the number of rows removed."""
        with transaction.atomic(using=self.using):
            deleted, _ = self._manager().all().delete()
        logger.warning(f"Cleared {deleted} registration(s)")
        return deleted
