"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Session authentication endpoints for the JSON API.
-------------------------------------------------------------------------
"""
import json
import logging
from typing import Dict, Any

from django.contrib.auth import login, logout
from django.views import View

from apps.core.api import ApiView, json_response, error_response
from apps.users.forms import EmiratesIDAuthenticationForm

logger = logging.getLogger(__name__)


def serialize_user(user) -> Dict[str, Any]:
    return {
        'id': user.pk,
        'public_id': user.public_id,
        'emirates_id': user.emirates_id,
        'email': user.email,
        'full_name': user.get_full_name(),
        'designation': user.designation,
        'department': user.department,
        'roles': user.get_role_codes(),
        'client_type': user.client_type.code if user.client_type else None,
        'is_program_wide': user.is_program_wide(),
        'capabilities': {
            'register_beneficiaries': user.can_register_beneficiaries(),
            'decide_submissions': user.can_decide_submissions(),
            'manage_resources': user.can_manage_resources(),
            'approve_timesheets': user.can_approve_timesheets(),
            'view_kpis': user.can_view_kpis(),
            'manage_reports': user.can_manage_reports(),
        },
    }


class LoginView(View):
    """
    Log in with Emirates ID and password.

    Body: {"emirates_id": "784-1234-1234567-1", "password": "..."}
    """

    def post(self, request):
        try:
            data = json.loads(request.body or b'{}')
        except ValueError:
            return error_response('ERR_INVALID_PAYLOAD', 'The request body is not valid JSON.')

        form = EmiratesIDAuthenticationForm(request, data={
            'username': data.get('emirates_id', ''),
            'password': data.get('password', ''),
        })
        if not form.is_valid():
            return error_response(
                'ERR_INVALID_CREDENTIALS',
                'Invalid Emirates ID or password.',
                {field: [str(e) for e in errors] for field, errors in form.errors.items()},
                status=400
            )

        user = form.get_user()
        login(request, user)
        return json_response(serialize_user(user))


class LogoutView(ApiView):
    """End the current session."""

    def post(self, request):
        logout(request)
        return json_response({'detail': 'Logged out.'})


class CurrentUserView(ApiView):
    """Profile, roles and capabilities of the logged-in user."""

    def get(self, request):
        return json_response(serialize_user(request.user))
