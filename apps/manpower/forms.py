"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Forms validating manpower API request bodies.
-------------------------------------------------------------------------
"""
from django import forms
from django.utils.translation import gettext_lazy as _

from apps.beneficiaries.models import Beneficiary
from apps.clients.models import ClientType
from apps.core.forms import ModelDefaultsFormMixin
from apps.manpower.models import (
    ManpowerResource, Skill, ResourceSkill, Availability, Project, ResourceAllocation,
    Timesheet, ResourceForecast,
)


class DateRangeFormMixin:
    """Rejects an end date before the start date."""

    start_field = 'start_date'
    end_field = 'end_date'

    def clean(self):
        cleaned_data = super().clean()
        start = cleaned_data.get(self.start_field)
        end = cleaned_data.get(self.end_field)
        if start and end and end < start:
            self.add_error(self.end_field, _('End date cannot be before start date.'))
        return cleaned_data


class ResourceForm(ModelDefaultsFormMixin, forms.ModelForm):

    class Meta:
        model = ManpowerResource
        fields = [
            'user', 'name', 'role', 'department', 'email', 'phone', 'hourly_rate',
            'weekly_capacity_hours', 'is_contractor', 'company_name', 'contract_number',
            'contract_start_date', 'contract_end_date', 'contact_person', 'contact_email',
            'contact_phone', 'is_active',
        ]


class SkillForm(ModelDefaultsFormMixin, forms.ModelForm):

    class Meta:
        model = Skill
        fields = ['name', 'category', 'description']


class ResourceSkillForm(ModelDefaultsFormMixin, forms.ModelForm):

    skill = forms.ModelChoiceField(queryset=Skill.objects.all(), to_field_name='name')

    class Meta:
        model = ResourceSkill
        fields = ['skill', 'proficiency', 'certifications', 'last_used']

    def __init__(self, *args, resource=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.resource = resource

    def clean_skill(self):
        skill = self.cleaned_data['skill']
        if self.resource is not None:
            existing = ResourceSkill.objects.filter(resource=self.resource, skill=skill)
            if self.instance.pk:
                existing = existing.exclude(pk=self.instance.pk)
            if existing.exists():
                raise forms.ValidationError(_('The resource already has this skill.'))
        return skill

    def clean_certifications(self):
        certifications = self.cleaned_data.get('certifications') or []
        if not isinstance(certifications, list):
            raise forms.ValidationError(_('Certifications must be a list.'))
        return certifications


class AvailabilityForm(DateRangeFormMixin, ModelDefaultsFormMixin, forms.ModelForm):

    class Meta:
        model = Availability
        fields = ['start_date', 'end_date', 'availability_type', 'project', 'notes']


class ProjectForm(DateRangeFormMixin, ModelDefaultsFormMixin, forms.ModelForm):

    client_type = forms.ModelChoiceField(
        queryset=ClientType.objects.filter(is_active=True),
        to_field_name='code',
        required=False
    )
    beneficiary = forms.ModelChoiceField(
        queryset=Beneficiary.objects.filter(is_active=True),
        required=False
    )

    class Meta:
        model = Project
        fields = [
            'code', 'name', 'description', 'beneficiary', 'client_type', 'status',
            'start_date', 'end_date', 'estimated_cost',
        ]

    def clean_code(self):
        return (self.cleaned_data.get('code') or '').strip().upper()


class AllocationForm(DateRangeFormMixin, ModelDefaultsFormMixin, forms.ModelForm):

    resource = forms.ModelChoiceField(queryset=ManpowerResource.objects.all())
    project = forms.ModelChoiceField(queryset=Project.objects.all(), to_field_name='code')

    class Meta:
        model = ResourceAllocation
        fields = [
            'resource', 'project', 'role', 'start_date', 'end_date',
            'hours_per_day', 'allocation_percentage', 'status',
        ]


class TimesheetForm(ModelDefaultsFormMixin, forms.ModelForm):

    project = forms.ModelChoiceField(queryset=Project.objects.all(), to_field_name='code', required=False)

    class Meta:
        model = Timesheet
        fields = ['resource', 'project', 'date', 'hours', 'billable', 'description']


class ForecastForm(ModelDefaultsFormMixin, forms.ModelForm):

    class Meta:
        model = ResourceForecast
        fields = ['department', 'period', 'required_resources', 'available_resources', 'planned_hiring', 'notes']

    def clean_period(self):
        return (self.cleaned_data.get('period') or '').strip().upper()
