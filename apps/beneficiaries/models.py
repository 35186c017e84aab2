"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Beneficiary and family member models. A beneficiary is a
             senior citizen (60+) registered for home accessibility
             modifications under one client type.
-------------------------------------------------------------------------
"""
from typing import Optional
from django.core.exceptions import ValidationError
from django.db import models
from django.utils.translation import gettext_lazy as _

from apps.core.mixins import AuditLogMixin, StatusMixin, ClientScopedMixin
from apps.core.utils import calculate_age, next_sequence_code
from apps.beneficiaries.validators import (
    validate_emirates_id, validate_phone_number, validate_date_of_birth, validate_not_future,
)


class Gender(models.TextChoices):
    MALE = 'MALE', _('Male')
    FEMALE = 'FEMALE', _('Female')


class Emirate(models.TextChoices):
    """The seven emirates of the UAE."""
    ABU_DHABI = 'ABU_DHABI', _('Abu Dhabi')
    DUBAI = 'DUBAI', _('Dubai')
    SHARJAH = 'SHARJAH', _('Sharjah')
    AJMAN = 'AJMAN', _('Ajman')
    UMM_AL_QUWAIN = 'UMM_AL_QUWAIN', _('Umm Al Quwain')
    FUJAIRAH = 'FUJAIRAH', _('Fujairah')
    RAS_AL_KHAIMAH = 'RAS_AL_KHAIMAH', _('Ras Al Khaimah')


class PropertyType(models.TextChoices):
    VILLA = 'VILLA', _('Villa')
    APARTMENT = 'APARTMENT', _('Apartment')
    TOWNHOUSE = 'TOWNHOUSE', _('Townhouse')


class OwnershipType(models.TextChoices):
    OWNED = 'OWNED', _('Owned')
    RENTED = 'RENTED', _('Rented')
    FAMILY = 'FAMILY', _('Family-owned')


class BeneficiaryStatus(models.TextChoices):
    """Case status of a beneficiary."""
    REGISTERED = 'REGISTERED', _('Registered')
    UNDER_ASSESSMENT = 'UNDER_ASSESSMENT', _('Under Assessment')
    APPROVED = 'APPROVED', _('Approved')
    IN_PROGRESS = 'IN_PROGRESS', _('In Progress')
    COMPLETED = 'COMPLETED', _('Completed')
    REJECTED = 'REJECTED', _('Rejected')
    WITHDRAWN = 'WITHDRAWN', _('Withdrawn')


class Relationship(models.TextChoices):
    SPOUSE = 'SPOUSE', _('Spouse')
    CHILD = 'CHILD', _('Child')
    PARENT = 'PARENT', _('Parent')
    SIBLING = 'SIBLING', _('Sibling')
    OTHER = 'OTHER', _('Other')


class Beneficiary(AuditLogMixin, StatusMixin, ClientScopedMixin):
    """
    Senior citizen registered with the programme.

    The beneficiary code (BEN-00001) is generated on first save.
    The Emirates ID is stored in its dashed display format.
    """

    CODE_PREFIX = 'BEN-'

    beneficiary_code = models.CharField(
        max_length=20,
        unique=True,
        editable=False,
        verbose_name=_('Beneficiary Code')
    )
    registration_date = models.DateField(
        validators=[validate_not_future],
        verbose_name=_('Registration Date')
    )
    emirates_id = models.CharField(
        max_length=18,
        unique=True,
        validators=[validate_emirates_id],
        verbose_name=_('Emirates ID'),
        help_text=_('Format: 784-XXXX-XXXXXXX-X')
    )
    full_name_en = models.CharField(
        max_length=200,
        verbose_name=_('Full Name (English)')
    )
    full_name_ar = models.CharField(
        max_length=200,
        verbose_name=_('Full Name (Arabic)')
    )
    date_of_birth = models.DateField(
        validators=[validate_date_of_birth],
        verbose_name=_('Date of Birth')
    )
    gender = models.CharField(
        max_length=10,
        choices=Gender.choices,
        verbose_name=_('Gender')
    )
    contact_number = models.CharField(
        max_length=12,
        validators=[validate_phone_number],
        verbose_name=_('Contact Number'),
        help_text=_('Format: 05X-XXX-XXXX')
    )
    secondary_contact_number = models.CharField(
        max_length=12,
        blank=True,
        validators=[validate_phone_number],
        verbose_name=_('Secondary Contact Number')
    )
    email = models.EmailField(
        blank=True,
        verbose_name=_('Email Address')
    )

    # Address
    emirate = models.CharField(
        max_length=20,
        choices=Emirate.choices,
        verbose_name=_('Emirate')
    )
    area = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Area')
    )
    street = models.CharField(
        max_length=150,
        blank=True,
        verbose_name=_('Street')
    )
    building_villa = models.CharField(
        max_length=100,
        blank=True,
        verbose_name=_('Building / Villa')
    )
    gps_coordinates = models.CharField(
        max_length=50,
        blank=True,
        verbose_name=_('GPS Coordinates'),
        help_text=_('Latitude,longitude')
    )

    # Property details
    property_type = models.CharField(
        max_length=20,
        choices=PropertyType.choices,
        blank=True,
        verbose_name=_('Property Type')
    )
    ownership = models.CharField(
        max_length=20,
        choices=OwnershipType.choices,
        blank=True,
        verbose_name=_('Ownership')
    )
    bedrooms = models.PositiveSmallIntegerField(null=True, blank=True, verbose_name=_('Bedrooms'))
    bathrooms = models.PositiveSmallIntegerField(null=True, blank=True, verbose_name=_('Bathrooms'))
    floors = models.PositiveSmallIntegerField(null=True, blank=True, verbose_name=_('Floors'))
    year_of_construction = models.PositiveSmallIntegerField(
        null=True,
        blank=True,
        verbose_name=_('Year of Construction')
    )

    status = models.CharField(
        max_length=20,
        choices=BeneficiaryStatus.choices,
        default=BeneficiaryStatus.REGISTERED,
        verbose_name=_('Status')
    )
    notes = models.TextField(blank=True, verbose_name=_('Notes'))

    class Meta:
        verbose_name = _('Beneficiary')
        verbose_name_plural = _('Beneficiaries')
        ordering = ['-registration_date', '-id']
        indexes = [
            models.Index(fields=['status'], name='benef_status_idx'),
            models.Index(fields=['emirate'], name='benef_emirate_idx'),
            models.Index(fields=['registration_date'], name='benef_reg_date_idx'),
        ]

    def __str__(self) -> str:
        return f"{self.beneficiary_code} - {self.full_name_en}"

    def save(self, *args, **kwargs):
        if not self.beneficiary_code:
            self.beneficiary_code = next_sequence_code(
                Beneficiary.objects.all(), 'beneficiary_code', self.CODE_PREFIX
            )
        super().save(*args, **kwargs)

    @property
    def age(self) -> Optional[int]:
        if self.date_of_birth is None:
            return None
        return calculate_age(self.date_of_birth)


class FamilyMember(AuditLogMixin):
    """
    Household member of a beneficiary.

    Emirates ID and contact number are optional but validated when given.
    Medical condition details are required when has_medical_condition is set.
    """

    beneficiary = models.ForeignKey(
        Beneficiary,
        on_delete=models.CASCADE,
        related_name='family_members',
        verbose_name=_('Beneficiary')
    )
    full_name_en = models.CharField(
        max_length=200,
        verbose_name=_('Full Name (English)')
    )
    full_name_ar = models.CharField(
        max_length=200,
        verbose_name=_('Full Name (Arabic)')
    )
    relationship = models.CharField(
        max_length=20,
        choices=Relationship.choices,
        verbose_name=_('Relationship')
    )
    date_of_birth = models.DateField(
        null=True,
        blank=True,
        validators=[validate_not_future],
        verbose_name=_('Date of Birth')
    )
    gender = models.CharField(
        max_length=10,
        choices=Gender.choices,
        verbose_name=_('Gender')
    )
    contact_number = models.CharField(
        max_length=12,
        blank=True,
        validators=[validate_phone_number],
        verbose_name=_('Contact Number')
    )
    emirates_id = models.CharField(
        max_length=18,
        blank=True,
        validators=[validate_emirates_id],
        verbose_name=_('Emirates ID')
    )
    is_dependent = models.BooleanField(
        default=False,
        verbose_name=_('Is Dependent')
    )
    has_medical_condition = models.BooleanField(
        default=False,
        verbose_name=_('Has Medical Condition')
    )
    medical_condition_details = models.TextField(
        blank=True,
        verbose_name=_('Medical Condition Details')
    )

    class Meta:
        verbose_name = _('Family Member')
        verbose_name_plural = _('Family Members')
        ordering = ['beneficiary', 'full_name_en']

    def __str__(self) -> str:
        return f"{self.full_name_en} ({self.get_relationship_display()})"

    def clean(self) -> None:
        super().clean()
        if self.has_medical_condition and not (self.medical_condition_details or '').strip():
            raise ValidationError({
                'medical_condition_details': _('Please describe the medical condition.')
            })
