"""
Read-only projections of the registration store for admins.
"""
import csv

from .catalog import project_title

CSV_HEADERS = [
    'ID', 'Identifier', 'Email', 'Roll Number', 'Phone', 'Project IDs',
    'Timestamp', 'IP Address', 'User Agent',
]

CSV_FILENAME = 'winter-projects-registrations.csv'


def write_registrations_csv(registrations, out):
    """
    Write a header row plus one row per registration to ``out``.
    Project ids are joined with ``;``.
    """
    writer = csv.writer(out)
    writer.writerow(CSV_HEADERS)
    for r in registrations:
        writer.writerow([
            r.id,
            r.identifier,
            r.email or '',
            r.roll_number or '',
            r.phone,
            ';'.join(r.project_ids or []),
            r.created_at.isoformat() if r.created_at else '',
            r.ip or 'N/A',
            r.user_agent or 'N/A',
        ])
    return out


def registration_rows(registrations):
    """Rows for the HTML admin table."""
    return [
        {
            'id': r.id,
            'identifier': r.identifier,
            'email': r.email,
            'roll_number': r.roll_number,
            'phone': r.phone,
            'projects': [
                {'id': pid, 'title': project_title(pid)} for pid in (r.project_ids or [])
            ],
            'created_at': r.created_at,
            'relay_status': r.get_relay_status_display(),
        }
        for r in registrations
    ]


def project_distribution(stats):
    """Per-project counts from ``RegistrationStore.aggregate`` with titles attached."""
    return [
        {'project_id': pid, 'title': project_title(pid), 'count': count}
        for pid, count in stats.get('perProjectCounts', {}).items()
    ]
