"""
Identity normalization for registrations.

A person is identified by an institutional email address or a roll number.
``normalize`` turns raw request values into a canonical ``NormalizedIdentity``
or raises one of the ``IdentityValidationError`` subclasses. It does no I/O.
"""
import re
from dataclasses import dataclass
from typing import Optional

from .exceptions import InvalidFormat, MissingContactMethod, MissingField

# Roll numbers look like 22B1234: two digits, a branch letter, 3-5 digits.
ROLL_NUMBER_RE = re.compile(r'^\d{2}[A-Z]\d{3,5}$', re.IGNORECASE)
# Indian mobile numbers: 10 digits starting with 6-9.
PHONE_RE = re.compile(r'^[6-9]\d{9}$')
NON_DIGIT_RE = re.compile(r'\D')

DEFAULT_EMAIL_SUFFIXES = ('@iitb.ac.in', '@iitbhu.ac.in', '@itbhu.ac.in')
# Column width of identifier and email.
MAX_KEY_LENGTH = 255


@dataclass(frozen=True)
class NormalizedIdentity:
    """Canonical identity values ready to be matched against the store."""

    identifier: str
    phone: str
    email: Optional[str] = None
    roll_number: Optional[str] = None

    @property
    def is_email(self) -> bool:
        return '@' in self.identifier


def _clean(value) -> str:
    if value is None:
        return ''
    return str(value).strip()


def normalize_phone(value) -> str:
    """Strip everything that is not a digit."""
    return NON_DIGIT_RE.sub('', _clean(value))


def normalize_lookup_key(value) -> str:
    """Canonical form of a free-form identifier, email or roll number."""
    return _clean(value).lower()


def is_roll_number(value) -> bool:
    return bool(ROLL_NUMBER_RE.match(_clean(value)))


def is_allowed_email(email, suffixes=None) -> bool:
    suffixes = tuple(s.lower() for s in (suffixes or DEFAULT_EMAIL_SUFFIXES))
    email = normalize_lookup_key(email)
    return '@' in email and email.endswith(suffixes)


def normalize(identifier, email=None, roll_number=None, phone=None, *,
              email_suffixes=None, require_contact_method=True) -> NormalizedIdentity:
    """
    Validate and canonicalize the identity part of a registration request.

    An email-shaped identifier (contains ``@``) doubles as the email when no
    email is given; a roll-number-shaped identifier doubles as the roll number.

    Raises:
        MissingField: identifier or phone absent.
        InvalidFormat: identifier or email too long, or email domain,
            roll number or phone rejected.
        MissingContactMethod: no email or roll number and the strict
            contract is in effect.
    """
    identifier = normalize_lookup_key(identifier)
    if not identifier:
        raise MissingField('Identifier is required', field='identifier')
    if len(identifier) > MAX_KEY_LENGTH:
        raise InvalidFormat('Identifier is too long', field='identifier')
    if not _clean(phone):
        raise MissingField('Phone number is required', field='phone')

    email = normalize_lookup_key(email) or None
    if email is not None and len(email) > MAX_KEY_LENGTH:
        raise InvalidFormat('Email address is too long', field='email')
    roll_number = _clean(roll_number).upper() or None
    email_field = 'email'
    roll_field = 'rollNumber'

    if '@' in identifier:
        if email is None:
            email = identifier
            email_field = 'identifier'
    elif is_roll_number(identifier) and roll_number is None:
        roll_number = identifier.upper()
        roll_field = 'identifier'

    if email is not None and not is_allowed_email(email, email_suffixes):
        raise InvalidFormat('Please use your institute email address', field=email_field)

    if roll_number is not None and not is_roll_number(roll_number):
        raise InvalidFormat('Invalid roll number format', field=roll_field)

    digits = normalize_phone(phone)
    if not PHONE_RE.match(digits):
        raise InvalidFormat('Enter a valid 10-digit phone number', field='phone')

    if require_contact_method and email is None and roll_number is None:
        raise MissingContactMethod('Please provide either email or roll number', field='identifier')

    return NormalizedIdentity(
        identifier=identifier,
        phone=digits,
        email=email,
        roll_number=roll_number,
    )
