"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Middleware for client-type scoping. Injects the current
             user's client type (FDF, ADHA, Cash) into the request and
             enforces data isolation in views.
-------------------------------------------------------------------------
"""
from typing import Optional
from django.http import HttpRequest, HttpResponse
from django.utils.deprecation import MiddlewareMixin


class ClientContextMiddleware(MiddlewareMixin):
    """
    Middleware to enforce client-type data isolation.

    This middleware:
    1. Injects `request.client_type` from the authenticated user.
    2. Flags programme-wide staff (client_type=None) with
       `request.is_program_wide` so they can read across client types.

    Usage:
        Add to MIDDLEWARE in settings.py AFTER AuthenticationMiddleware:
        'apps.core.middleware.ClientContextMiddleware',
    """

    def process_request(self, request: HttpRequest) -> Optional[HttpResponse]:
        """
        Inject client-type context into the request.

        Args:
            request: The incoming HTTP request.

        Returns:
            None to continue processing.
        """
        request.client_type = None
        request.is_program_wide = False

        if hasattr(request, 'user') and request.user.is_authenticated:
            client_type = getattr(request.user, 'client_type', None)
            request.client_type = client_type
            request.is_program_wide = client_type is None

        return None


class ClientScopedViewMixin:
    """
    Mixin for views to automatically apply client-type filtering.

    Usage:
        class BeneficiaryListView(ClientScopedViewMixin, ApiView):
            def get(self, request):
                qs = self.scope_queryset(Beneficiary.objects.all())

    Records belonging to other client types are hidden from scoped staff.
    """

    client_field = 'client_type'

    def scope_queryset(self, queryset):
        """
        Filter a queryset to the current user's client type.

        Returns:
            The queryset unchanged for programme-wide staff, otherwise
            filtered by `client_field`.
        """
        client_type = getattr(self.request, 'client_type', None)

        if client_type is None:
            return queryset

        return queryset.filter(**{self.client_field: client_type})
