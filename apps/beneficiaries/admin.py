"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Django admin configuration for beneficiaries and family members.
-------------------------------------------------------------------------
"""
from django.contrib import admin
from django.utils.translation import gettext_lazy as _

from apps.beneficiaries.models import Beneficiary, FamilyMember


class FamilyMemberInline(admin.TabularInline):
    model = FamilyMember
    extra = 0
    fields = ['full_name_en', 'full_name_ar', 'relationship', 'gender', 'date_of_birth',
              'contact_number', 'is_dependent', 'has_medical_condition']


@admin.register(Beneficiary)
class BeneficiaryAdmin(admin.ModelAdmin):
    """Admin configuration for Beneficiary model."""

    list_display = ['beneficiary_code', 'full_name_en', 'emirates_id', 'client_type',
                    'emirate', 'status', 'registration_date', 'is_active']
    list_filter = ['client_type', 'status', 'emirate', 'gender', 'is_active']
    search_fields = ['beneficiary_code', 'full_name_en', 'full_name_ar', 'emirates_id', 'contact_number']
    ordering = ['-registration_date']
    date_hierarchy = 'registration_date'
    inlines = [FamilyMemberInline]
    readonly_fields = ['beneficiary_code', 'public_id', 'created_at', 'updated_at', 'created_by', 'updated_by']

    fieldsets = (
        (None, {
            'fields': ('beneficiary_code', 'registration_date', 'client_type', 'status', 'is_active')
        }),
        (_('Personal Information'), {
            'fields': ('emirates_id', 'full_name_en', 'full_name_ar', 'date_of_birth', 'gender')
        }),
        (_('Contact'), {
            'fields': ('contact_number', 'secondary_contact_number', 'email')
        }),
        (_('Address'), {
            'fields': ('emirate', 'area', 'street', 'building_villa', 'gps_coordinates')
        }),
        (_('Property Details'), {
            'fields': ('property_type', 'ownership', 'bedrooms', 'bathrooms', 'floors', 'year_of_construction')
        }),
        (_('Audit Trail'), {
            'fields': ('notes', 'public_id', 'created_at', 'updated_at', 'created_by', 'updated_by'),
            'classes': ('collapse',)
        }),
    )

    def save_model(self, request, obj, form, change):
        """Override to set audit fields."""
        if not change:
            obj.created_by = request.user
        obj.updated_by = request.user
        super().save_model(request, obj, form, change)
