"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Field validators for beneficiary registration: Emirates ID
             format, UAE mobile number format and minimum age.
-------------------------------------------------------------------------
"""
from datetime import date
from typing import Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from apps.core.utils import calculate_age

EMIRATES_ID_PATTERN = r'^\d{3}-\d{4}-\d{7}-\d{1}$'
PHONE_PATTERN = r'^05\d-\d{3}-\d{4}$'

validate_emirates_id = RegexValidator(
    regex=EMIRATES_ID_PATTERN,
    message=_('Enter a valid Emirates ID in the format 784-XXXX-XXXXXXX-X.'),
    code='invalid_emirates_id'
)

validate_phone_number = RegexValidator(
    regex=PHONE_PATTERN,
    message=_('Enter a valid mobile number in the format 05X-XXX-XXXX.'),
    code='invalid_phone'
)


def minimum_age() -> int:
    return getattr(settings, 'BENEFICIARY_MINIMUM_AGE', 60)


def validate_date_of_birth(value: date, today: Optional[date] = None) -> None:
    """
    Reject future dates and beneficiaries younger than the programme minimum age.

    Raises:
        ValidationError: If the date is in the future or the age is too low.
    """
    today = today or timezone.localdate()
    if value > today:
        raise ValidationError(
            _('Date of birth cannot be in the future.'),
            code='future_date'
        )
    required = minimum_age()
    if calculate_age(value, today) < required:
        raise ValidationError(
            _('Beneficiary must be at least %(age)s years old.'),
            code='under_minimum_age',
            params={'age': required}
        )


def validate_not_future(value: date) -> None:
    if value > timezone.localdate():
        raise ValidationError(_('Date cannot be in the future.'), code='future_date')
