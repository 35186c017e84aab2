"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Forms for beneficiary registration and family members.
             Used by the JSON API to validate request bodies.
-------------------------------------------------------------------------
"""
from django import forms
from django.utils.translation import gettext_lazy as _

from apps.beneficiaries.models import Beneficiary, FamilyMember
from apps.beneficiaries.validators import validate_emirates_id, validate_phone_number
from apps.clients.models import ClientType


class BeneficiaryForm(forms.ModelForm):
    """
    Registration form for a senior citizen.

    Client type is given by its code (FDF, ADHA, CASH).
    """

    client_type = forms.ModelChoiceField(
        queryset=ClientType.objects.filter(is_active=True),
        to_field_name='code',
        error_messages={'invalid_choice': _('Select a valid client type.')}
    )

    class Meta:
        model = Beneficiary
        fields = [
            # Identity
            'registration_date', 'emirates_id', 'full_name_en', 'full_name_ar',
            'date_of_birth', 'gender', 'client_type',
            # Contact
            'contact_number', 'secondary_contact_number', 'email',
            # Address
            'emirate', 'area', 'street', 'building_villa', 'gps_coordinates',
            # Property
            'property_type', 'ownership', 'bedrooms', 'bathrooms', 'floors',
            'year_of_construction',
            'notes',
        ]

    def clean_emirates_id(self):
        value = (self.cleaned_data.get('emirates_id') or '').strip()
        validate_emirates_id(value)
        return value

    def clean_full_name_en(self):
        return (self.cleaned_data.get('full_name_en') or '').strip()

    def clean_full_name_ar(self):
        return (self.cleaned_data.get('full_name_ar') or '').strip()

    def clean_gps_coordinates(self):
        value = (self.cleaned_data.get('gps_coordinates') or '').strip()
        if not value:
            return value
        try:
            lat, lng = [float(part) for part in value.split(',')]
        except ValueError:
            raise forms.ValidationError(_('Use the format "latitude,longitude".'))
        if not (-90 <= lat <= 90 and -180 <= lng <= 180):
            raise forms.ValidationError(_('Coordinates are out of range.'))
        return value


class FamilyMemberForm(forms.ModelForm):
    """Family member form. Optional identifiers are validated only when present."""

    class Meta:
        model = FamilyMember
        fields = [
            'full_name_en', 'full_name_ar', 'relationship', 'date_of_birth', 'gender',
            'contact_number', 'emirates_id', 'is_dependent',
            'has_medical_condition', 'medical_condition_details',
        ]

    def clean_contact_number(self):
        value = (self.cleaned_data.get('contact_number') or '').strip()
        if value:
            validate_phone_number(value)
        return value

    def clean_emirates_id(self):
        value = (self.cleaned_data.get('emirates_id') or '').strip()
        if value:
            validate_emirates_id(value)
        return value

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('has_medical_condition') and not (
            cleaned_data.get('medical_condition_details') or ''
        ).strip():
            self.add_error(
                'medical_condition_details',
                _('Please describe the medical condition.')
            )
        return cleaned_data
