"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Authentication signal handlers.
-------------------------------------------------------------------------
"""
import logging

from django.contrib.auth.signals import user_logged_in, user_login_failed
from django.dispatch import receiver

logger = logging.getLogger(__name__)


def _client_ip(request):
    if request is None:
        return None
    forwarded = request.META.get('HTTP_X_FORWARDED_FOR')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.META.get('REMOTE_ADDR')


@receiver(user_login_failed)
def log_failed_login(sender, credentials, request=None, **kwargs):
    """Log failed login attempts with the (normalized) identifier and IP."""
    logger.warning(
        "Failed login attempt - emirates_id=%s ip=%s path=%s",
        credentials.get('username') or credentials.get('emirates_id'),
        _client_ip(request),
        getattr(request, 'path', None)
    )


@receiver(user_logged_in)
def log_successful_login(sender, request, user, **kwargs):
    logger.info(
        "User %s logged in from %s",
        user.pk,
        _client_ip(request)
    )
