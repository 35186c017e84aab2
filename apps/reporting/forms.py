"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Forms validating reporting API request bodies.
-------------------------------------------------------------------------
"""
from django import forms
from django.core.validators import validate_email
from django.utils.translation import gettext_lazy as _

from apps.clients.models import ClientType
from apps.core.exceptions import InvalidPayloadException
from apps.core.forms import ModelDefaultsFormMixin
from apps.reporting.builders import BUILDERS
from apps.reporting.models import ReportTemplate, ReportSchedule, ReportFormat, ScheduleFrequency
from apps.reporting.services import ReportingEngine


class ReportTemplateForm(ModelDefaultsFormMixin, forms.ModelForm):

    client_type = forms.ModelChoiceField(
        queryset=ClientType.objects.filter(is_active=True),
        to_field_name='code',
        required=False
    )

    class Meta:
        model = ReportTemplate
        fields = [
            'code', 'name', 'description', 'parameters', 'default_format', 'metrics',
            'sections', 'data_source', 'author', 'client_type', 'is_active',
        ]

    def clean_data_source(self):
        data_source = (self.cleaned_data.get('data_source') or '').strip()
        if data_source not in BUILDERS:
            raise forms.ValidationError(
                _('Unknown data source. Available: %(sources)s'),
                params={'sources': ', '.join(sorted(BUILDERS))}
            )
        return data_source

    def _clean_list(self, field):
        value = self.cleaned_data.get(field) or []
        if not isinstance(value, list):
            raise forms.ValidationError(_('This field must be a list.'))
        return value

    def clean_parameters(self):
        parameters = self._clean_list('parameters')
        for definition in parameters:
            if isinstance(definition, dict) and definition.get('name'):
                continue
            if not isinstance(definition, str) or not definition:
                raise forms.ValidationError(_('Each parameter must be a name or an object with a name.'))
        return parameters

    def clean_metrics(self):
        return self._clean_list('metrics')

    def clean_sections(self):
        sections = self._clean_list('sections')
        if any(not isinstance(section, dict) for section in sections):
            raise forms.ValidationError(_('Each section must be an object.'))
        return sections


class ReportScheduleForm(ModelDefaultsFormMixin, forms.ModelForm):

    template = forms.ModelChoiceField(
        queryset=ReportTemplate.objects.filter(is_active=True),
        to_field_name='code'
    )
    client_type = forms.ModelChoiceField(
        queryset=ClientType.objects.filter(is_active=True),
        to_field_name='code',
        required=False
    )

    class Meta:
        model = ReportSchedule
        fields = [
            'template', 'name', 'parameters', 'frequency', 'time_of_day', 'day_of_week',
            'day_of_month', 'format', 'recipients', 'client_type', 'is_active',
        ]

    def clean_parameters(self):
        parameters = self.cleaned_data.get('parameters') or {}
        if not isinstance(parameters, dict):
            raise forms.ValidationError(_('Parameters must be an object.'))
        return parameters

    def clean_recipients(self):
        recipients = self.cleaned_data.get('recipients') or []
        if not isinstance(recipients, list):
            raise forms.ValidationError(_('Recipients must be a list of email addresses.'))
        invalid = []
        for address in recipients:
            try:
                validate_email(str(address))
            except forms.ValidationError:
                invalid.append(str(address))
        if invalid:
            raise forms.ValidationError(
                _('Invalid email address(es): %(addresses)s'),
                params={'addresses': ', '.join(invalid)}
            )
        return list(dict.fromkeys(recipients))

    def clean(self):
        cleaned_data = super().clean()
        frequency = cleaned_data.get('frequency')

        if frequency == ScheduleFrequency.WEEKLY and cleaned_data.get('day_of_week') is None:
            self.add_error('day_of_week', _('Weekly schedules need a day of the week.'))

        if (frequency in (ScheduleFrequency.MONTHLY, ScheduleFrequency.QUARTERLY)
                and cleaned_data.get('day_of_month') is None):
            self.add_error('day_of_month', _('Monthly and quarterly schedules need a day of the month.'))

        template = cleaned_data.get('template')
        if template is not None and 'parameters' in cleaned_data:
            try:
                ReportingEngine.validate_parameters(template, cleaned_data['parameters'])
            except InvalidPayloadException as exc:
                self.add_error('parameters', exc.message)

        return cleaned_data


class GenerateReportForm(forms.Form):

    format = forms.ChoiceField(choices=ReportFormat.choices, required=False)
    parameters = forms.JSONField(required=False)
    client_type = forms.ModelChoiceField(
        queryset=ClientType.objects.filter(is_active=True),
        to_field_name='code',
        required=False
    )

    def clean_parameters(self):
        parameters = self.cleaned_data.get('parameters') or {}
        if not isinstance(parameters, dict):
            raise forms.ValidationError(_('Parameters must be an object.'))
        return parameters
