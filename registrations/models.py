"""
Database models for Winter Projects registrations.
"""
from django.db import models


class Registration(models.Model):
    """
    One row per person. A person is matched by identifier, email or roll
    number, each of which is unique on its own.
    """
    RELAY_PENDING = 'pending'
    RELAY_SENT = 'sent'
    RELAY_FAILED = 'failed'
    RELAY_DISABLED = 'disabled'

    RELAY_STATUS_CHOICES = [
        (RELAY_PENDING, 'Pending'),
        (RELAY_SENT, 'Sent'),
        (RELAY_FAILED, 'Failed'),
        (RELAY_DISABLED, 'Disabled'),
    ]

    id = models.BigAutoField(primary_key=True)

    # Identity (lowercased identifier, lowercased email, uppercased roll number)
    identifier = models.CharField(max_length=255, unique=True)
    email = models.CharField(max_length=255, unique=True, blank=True, null=True)
    roll_number = models.CharField(max_length=50, unique=True, blank=True, null=True)

    # Contact
    phone = models.CharField(max_length=15)

    # Enrolled projects, stored as a sorted list without duplicates
    project_ids = models.JSONField(default=list, blank=True)

    # Stored at first insert only; never checked by any login flow
    password_hash = models.CharField(max_length=255, blank=True, null=True)

    # Provenance, immutable after the first insert
    ip = models.CharField(max_length=100, blank=True, null=True)
    user_agent = models.TextField(blank=True, null=True)

    # Spreadsheet relay outcome
    relay_status = models.CharField(max_length=10, choices=RELAY_STATUS_CHOICES, default=RELAY_PENDING)
    relay_error = models.CharField(max_length=255, blank=True, null=True)
    relay_attempted_at = models.DateTimeField(blank=True, null=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']
        verbose_name = 'Registration'
        verbose_name_plural = 'Registrations'

    def __str__(self):
        return f"{self.identifier} - {len(self.project_ids or [])} project(s)"

    def has_projects(self):
        return bool(self.project_ids)

    def add_project(self, project_id):
        """
        Union ``project_id`` into the enrolled set.
        Returns True when the set grew.
        """
        if project_id in (None, ''):
            return False
        project_id = str(project_id)
        current = set(self.project_ids or [])
        if project_id in current:
            return False
        current.add(project_id)
        self.project_ids = sorted(current)
        return True

    def to_dict(self):
        """Client-facing view of the registration."""
        return {
            'identifier': self.identifier,
            'email': self.email,
            'rollNumber': self.roll_number,
            'phone': self.phone,
            'projectIds': list(self.project_ids or []),
            'registeredAt': self.created_at.isoformat() if self.created_at else None,
        }

    def to_admin_dict(self):
        """Row shape for admin listings."""
        data = self.to_dict()
        data['id'] = self.id
        data['relayStatus'] = self.relay_status
        return data
