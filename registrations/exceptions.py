"""
Exceptions raised by the registration core.

Every error has a stable ``code`` that is echoed in JSON error bodies so a
client can branch on it without parsing the message.
"""


class RegistrationError(Exception):
    """Base exception for all registration errors."""

    code = 'registration_error'
    status = 500

    def __init__(self, message=None):
        self.message = message or self.__class__.__doc__.strip()
        super().__init__(self.message)


class IdentityValidationError(RegistrationError):
    """Registration data failed validation."""

    code = 'validation_error'
    status = 400

    def __init__(self, message=None, field=None):
        self.field = field
        super().__init__(message)


class MissingField(IdentityValidationError):
    """A required field was not supplied."""

    code = 'missing_field'


class InvalidFormat(IdentityValidationError):
    """A field was supplied in an unacceptable format."""

    code = 'invalid_format'


class MissingContactMethod(IdentityValidationError):
    """Neither an email address nor a roll number was supplied."""

    code = 'missing_contact_method'


class ConflictingIdentity(RegistrationError):
    """Identifier, email and roll number belong to different registrations."""

    code = 'conflicting_identity'
    status = 409

    def __init__(self, registration_ids, message=None):
        self.registration_ids = sorted(registration_ids)
        super().__init__(
            message or 'Identifier, email and roll number match different registrations'
        )


class DuplicateIdentity(RegistrationError):
    """A concurrent insert claimed the same identity first."""

    code = 'duplicate_identity'
    status = 409


class StoreUnavailable(RegistrationError):
    """The registration store could not be reached."""

    code = 'store_unavailable'
    status = 500


class RelayUnavailable(RegistrationError):
    """The spreadsheet relay did not accept the record."""

    code = 'relay_unavailable'
