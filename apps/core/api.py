"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Base class and helpers for the JSON API consumed by the
             browser front-end.
-------------------------------------------------------------------------
"""
import json
import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Optional, Sequence

from django.contrib.auth.mixins import LoginRequiredMixin
from django.core.exceptions import ObjectDoesNotExist, PermissionDenied, ValidationError
from django.core.paginator import Paginator
from django.core.serializers.json import DjangoJSONEncoder
from django.http import Http404, JsonResponse
from django.utils.dateparse import parse_date, parse_datetime
from django.views import View

from apps.core.exceptions import (
    CMSException, InvalidPayloadException, UnauthorizedRoleException,
)
from apps.core.middleware import ClientScopedViewMixin
from apps.users.permissions import has_role

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 100

WRITE_METHODS = ('POST', 'PUT', 'PATCH', 'DELETE')


def json_response(data: Any, status: int = 200) -> JsonResponse:
    """Render data as JSON using Django's encoder for dates and decimals."""
    return JsonResponse(data, status=status, encoder=DjangoJSONEncoder, safe=False)


def error_response(error_code: str, message: str, details: Optional[dict] = None,
                   status: int = 400) -> JsonResponse:
    """Render a structured error body."""
    return json_response({
        'error_code': error_code,
        'message': message,
        'details': details or {},
    }, status=status)


def paginate(queryset, request, serializer: Optional[Callable] = None) -> Dict[str, Any]:
    """
    Paginate a queryset using the `page` and `page_size` query parameters.

    page_size is clamped to 1..100. Out-of-range pages return the last page.

    Returns:
        Dictionary with count, page, page_size, num_pages and results.
    """
    try:
        page_size = int(request.GET.get('page_size', DEFAULT_PAGE_SIZE))
    except (TypeError, ValueError):
        page_size = DEFAULT_PAGE_SIZE
    page_size = max(1, min(page_size, MAX_PAGE_SIZE))

    paginator = Paginator(queryset, page_size)
    page = paginator.get_page(request.GET.get('page', 1))
    items = list(page.object_list)

    return {
        'count': paginator.count,
        'page': page.number,
        'page_size': page_size,
        'num_pages': paginator.num_pages,
        'results': [serializer(item) for item in items] if serializer else items,
    }


def parse_date_param(value: Optional[str], field: str) -> Optional[date]:
    """
    Parse an ISO date from a query string or payload.

    Raises:
        InvalidPayloadException: If the value is present but not a date.
    """
    if value in (None, ''):
        return None
    if isinstance(value, date):
        return value
    try:
        parsed = parse_date(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidPayloadException(
            f"'{field}' must be a date in YYYY-MM-DD format.",
            details={'field': field, 'value': value}
        )
    return parsed


def parse_datetime_param(value: Optional[str], field: str) -> Optional[datetime]:
    """Parse an ISO datetime, raising InvalidPayloadException when malformed."""
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return value
    try:
        parsed = parse_datetime(str(value))
    except ValueError:
        parsed = None
    if parsed is None:
        raise InvalidPayloadException(
            f"'{field}' must be an ISO 8601 datetime.",
            details={'field': field, 'value': value}
        )
    return parsed


def parse_int_param(value: Any, field: str) -> Optional[int]:
    """Parse a whole number such as a record id, raising InvalidPayloadException when malformed."""
    if value in (None, ''):
        return None
    if isinstance(value, bool):
        value = str(value)
    try:
        return int(str(value).strip())
    except ValueError:
        raise InvalidPayloadException(
            f"'{field}' must be a whole number.",
            details={'field': field, 'value': value}
        )


def parse_decimal_param(value: Any, field: str) -> Optional[Decimal]:
    """Parse a decimal number, raising InvalidPayloadException when malformed."""
    if value in (None, ''):
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidPayloadException(
            f"'{field}' must be a number.",
            details={'field': field, 'value': value}
        )


class ApiView(LoginRequiredMixin, ClientScopedViewMixin, View):
    """
    Base class for JSON API views.

    - Unauthenticated requests receive a 401 JSON body.
    - `required_roles` restricts every method; `write_roles` restricts
      POST/PUT/PATCH/DELETE. Superusers pass every role check.
    - CMSException subclasses become JSON error bodies with their
      status code; ValidationError becomes 400 with per-field messages;
      missing records become 404.
    """

    required_roles: Sequence[str] = ()
    write_roles: Sequence[str] = ()

    def handle_no_permission(self):
        return error_response(
            'ERR_AUTH_REQUIRED',
            'Authentication credentials were not provided.',
            status=401
        )

    def dispatch(self, request, *args, **kwargs):
        if not request.user.is_authenticated:
            return self.handle_no_permission()

        try:
            self.check_roles(request)
            return super().dispatch(request, *args, **kwargs)
        except CMSException as exc:
            logger.info(
                "API error %s on %s %s: %s",
                exc.error_code, request.method, request.path, exc.message
            )
            return json_response(exc.to_dict(), status=exc.status_code)
        except ValidationError as exc:
            if hasattr(exc, 'error_dict'):
                details = exc.message_dict
            else:
                details = {'__all__': exc.messages}
            return error_response(
                'ERR_VALIDATION', 'The submitted data is invalid.', details, status=400
            )
        except (ObjectDoesNotExist, Http404) as exc:
            return error_response(
                'ERR_NOT_FOUND', str(exc) or 'The requested record was not found.', status=404
            )
        except PermissionDenied as exc:
            return error_response(
                'ERR_FORBIDDEN', str(exc) or 'You do not have permission to perform this action.',
                status=403
            )

    def check_roles(self, request) -> None:
        """
        Enforce `required_roles` and `write_roles`.

        Raises:
            UnauthorizedRoleException: If the user lacks the role.
        """
        user = request.user
        if self.required_roles and not has_role(user, self.required_roles):
            raise UnauthorizedRoleException(details={'required_roles': list(self.required_roles)})

        if request.method in WRITE_METHODS and self.write_roles:
            if not has_role(user, self.write_roles):
                raise UnauthorizedRoleException(details={'required_roles': list(self.write_roles)})

    def get_json(self) -> Dict[str, Any]:
        """
        Parse the JSON request body.

        An empty body is treated as an empty object.

        Raises:
            InvalidPayloadException: If the body is not a JSON object.
        """
        if not self.request.body:
            return {}
        try:
            data = json.loads(self.request.body)
        except (ValueError, UnicodeDecodeError) as exc:
            raise InvalidPayloadException(details={'error': str(exc)})
        if not isinstance(data, dict):
            raise InvalidPayloadException("The request body must be a JSON object.")
        return data

    def form_errors(self, form) -> JsonResponse:
        """Render Django form errors as a 400 response."""
        return error_response(
            'ERR_VALIDATION',
            'The submitted data is invalid.',
            {field: [str(e) for e in errors] for field, errors in form.errors.items()},
            status=400
        )
