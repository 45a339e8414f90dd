"""
Views for the Winter Projects registration API and admin table.
"""
import json
import logging
import uuid
from functools import wraps

from django.conf import settings
from django.contrib import messages
from django.contrib.auth.decorators import login_required
from django.http import HttpResponse, JsonResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from . import session_cache
from .catalog import PROJECTS
from .exceptions import IdentityValidationError, RegistrationError, StoreUnavailable
from .reporting import CSV_FILENAME, project_distribution, registration_rows, write_registrations_csv
from .services import build_service

logger = logging.getLogger(__name__)

# Width of Registration.ip.
MAX_IP_LENGTH = 100


class InvalidBody(Exception):
    pass


def _parse_body(request):
    """Read a JSON body, falling back to form data."""
    if request.content_type and 'application/json' in request.content_type:
        if not request.body:
            return {}
        try:
            body = json.loads(request.body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise InvalidBody(str(e)) from e
        if not isinstance(body, dict):
            raise InvalidBody('Expected a JSON object')
        return body
    return request.POST.dict()


def _client_ip(request):
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR', '')
    if forwarded:
        ip = forwarded.split(',')[0].strip()
    else:
        ip = request.META.get('REMOTE_ADDR') or 'unknown'
    return ip[:MAX_IP_LENGTH]


def _server_error(message, exc):
    """Log ``exc`` under a fresh error id and return a generic 500."""
    error_id = uuid.uuid4().hex[:12]
    logger.error(f"[{error_id}] {message}: {exc}", exc_info=exc)
    return JsonResponse({
        'success': False,
        'message': message,
        'errorId': error_id,
    }, status=500)


def staff_api(view):
    """JSON endpoints for staff only: 403 instead of a login redirect."""
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not (request.user.is_authenticated and request.user.is_staff):
            return JsonResponse({'success': False, 'message': 'Admin access required'}, status=403)
        return view(request, *args, **kwargs)
    return wrapper


@require_GET
def index(request):
    """
    Service banner with the endpoint map.
    """
    return JsonResponse({
        'message': f"{settings.SITE_TITLE} API",
        'status': 'running',
        'endpoints': {
            'health': '/api/health',
            'register': 'POST /api/register',
            'getUser': 'GET /api/user/<identifier>',
            'me': 'GET /api/me',
            'projects': '/api/projects',
            'allRegistrations': '/api/registrations',
            'stats': '/api/stats',
            'download': '/api/download',
            'adminView': '/admin/view/',
        },
    })


@csrf_exempt
@require_http_methods(["POST"])
def register(request):
    """
    Register a user, or add a project to their existing registration.
    """
    try:
        payload = _parse_body(request)
    except InvalidBody:
        return JsonResponse({'success': False, 'message': 'Invalid JSON'}, status=400)

    service = build_service()
    try:
        result = service.register(
            payload,
            ip=_client_ip(request),
            user_agent=request.META.get('HTTP_USER_AGENT') or 'unknown',
        )
    except IdentityValidationError as e:
        return JsonResponse({
            'success': False,
            'message': e.message,
            'field': e.field,
            'code': e.code,
        }, status=e.status)
    except StoreUnavailable as e:
        return _server_error('Server error during registration', e)
    except RegistrationError as e:
        if e.status >= 500:
            return _server_error('Server error during registration', e)
        return JsonResponse({'success': False, 'message': e.message, 'code': e.code}, status=e.status)
    except Exception as e:
        return _server_error('Server error during registration', e)

    data = result.to_dict()
    session_cache.remember(request.session, data)
    return JsonResponse({
        'success': True,
        'message': result.message,
        'data': data,
    })


@require_GET
def user_detail(request, identifier):
    """
    Look up a registration by identifier, email or roll number.
    """
    service = build_service()
    try:
        registration = service.lookup(identifier)
    except StoreUnavailable as e:
        return _server_error('Error fetching user data', e)

    if registration is None:
        return JsonResponse({'success': False, 'message': 'User not found'}, status=404)
    return JsonResponse({'success': True, 'data': registration.to_dict()})


@require_GET
def me(request):
    """
    The signed-in user's registration, refreshed from the store when possible.
    """
    service = build_service()
    view, source = session_cache.reconcile(request.session, service.store)
    if view is None:
        return JsonResponse({'success': False, 'message': 'Not signed in'}, status=404)
    return JsonResponse({'success': True, 'source': source, 'data': view})


@csrf_exempt
@require_http_methods(["POST"])
def signout(request):
    session_cache.forget(request.session)
    return JsonResponse({'success': True, 'message': 'Signed out'})


@require_GET
def projects(request):
    return JsonResponse({'success': True, 'count': len(PROJECTS), 'data': list(PROJECTS)})


@require_GET
@staff_api
def registrations_list(request):
    """
    All registrations, newest first.
    """
    service = build_service()
    try:
        rows = service.list_registrations()
    except StoreUnavailable as e:
        return _server_error('Error reading data', e)
    return JsonResponse({
        'success': True,
        'count': len(rows),
        'data': [r.to_admin_dict() for r in rows],
    })


@require_GET
def stats(request):
    service = build_service()
    try:
        summary = service.statistics()
    except StoreUnavailable as e:
        return _server_error('Error calculating stats', e)
    summary['projectDistribution'] = project_distribution(summary)
    return JsonResponse({
        'success': True,
        'stats': summary,
        'lastUpdated': timezone.now().isoformat(),
    })


@require_GET
@staff_api
def download(request):
    """
    Export every registration as CSV.
    """
    service = build_service()
    try:
        rows = service.list_registrations()
    except StoreUnavailable as e:
        return _server_error('Error generating download', e)
    response = HttpResponse(content_type='text/csv')
    response['Content-Disposition'] = f'attachment; filename="{CSV_FILENAME}"'
    write_registrations_csv(rows, response)
    return response


@require_GET
def health(request):
    store = build_service().store
    try:
        count = store.count()
    except StoreUnavailable as e:
        logger.error(f"Health check failed: {e.message}")
        return JsonResponse({'status': 'unhealthy', 'database': 'unavailable'}, status=503)
    return JsonResponse({
        'status': 'healthy',
        'timestamp': timezone.now().isoformat(),
        'registrationsCount': count,
        'database': 'connected',
    })


@login_required
def admin_view(request):
    """
    HTML table of registrations with summary cards.
    """
    if not request.user.is_staff:
        messages.error(request, 'You do not have permission to access this page.')
        return redirect(reverse('admin:login'))

    service = build_service()
    rows = service.list_registrations()
    summary = service.store.aggregate()
    context = {
        'site_title': settings.SITE_TITLE,
        'registrations': registration_rows(rows),
        'stats': summary,
        'distribution': project_distribution(summary),
        'unique_users': len({r.identifier for r in rows}),
        'generated_at': timezone.now(),
    }
    return render(request, 'registrations/admin/view.html', context)
