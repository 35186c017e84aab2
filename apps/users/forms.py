"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Authentication form for Emirates ID login.
-------------------------------------------------------------------------
"""
from django.contrib.auth.forms import AuthenticationForm

from apps.users.models import normalize_emirates_id


class EmiratesIDAuthenticationForm(AuthenticationForm):
    """Authentication form that normalizes Emirates ID input.

    Strips non-digit characters from the `username` field so staff can
    enter their Emirates ID with or without dashes/spaces.
    """

    def clean_username(self):
        username = self.cleaned_data.get('username')
        if username:
            return normalize_emirates_id(username)
        return username
