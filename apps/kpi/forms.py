"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Forms validating KPI API request bodies.
-------------------------------------------------------------------------
"""
from django import forms
from django.utils.translation import gettext_lazy as _

from apps.clients.models import ClientType
from apps.core.forms import ModelDefaultsFormMixin
from apps.kpi.collectors import COLLECTORS
from apps.kpi.models import KpiMetric, KpiDashboard, KpiAlert, NotificationChannel
from apps.users.models import CustomUser


class KpiMetricForm(ModelDefaultsFormMixin, forms.ModelForm):

    client_type = forms.ModelChoiceField(
        queryset=ClientType.objects.filter(is_active=True),
        to_field_name='code',
        required=False
    )

    class Meta:
        model = KpiMetric
        fields = [
            'code', 'name', 'description', 'category', 'unit', 'target',
            'warning_threshold', 'critical_threshold', 'higher_is_better',
            'aggregation', 'source', 'source_params', 'client_type', 'is_active',
        ]

    def clean_source(self):
        source = (self.cleaned_data.get('source') or '').strip()
        if source and source not in COLLECTORS:
            raise forms.ValidationError(
                _('Unknown data source. Available: %(sources)s'),
                params={'sources': ', '.join(sorted(COLLECTORS))}
            )
        return source

    def clean_source_params(self):
        params = self.cleaned_data.get('source_params') or {}
        if not isinstance(params, dict):
            raise forms.ValidationError(_('Source parameters must be an object.'))
        return params


class KpiDashboardForm(ModelDefaultsFormMixin, forms.ModelForm):

    metrics = forms.ModelMultipleChoiceField(
        queryset=KpiMetric.objects.all(),
        to_field_name='code',
        required=False
    )

    class Meta:
        model = KpiDashboard
        fields = ['code', 'name', 'description', 'metrics', 'refresh_interval', 'is_active']


class KpiAlertForm(ModelDefaultsFormMixin, forms.ModelForm):

    metric = forms.ModelChoiceField(queryset=KpiMetric.objects.all(), to_field_name='code')
    recipients = forms.ModelMultipleChoiceField(
        queryset=CustomUser.objects.filter(is_active=True),
        required=False
    )

    class Meta:
        model = KpiAlert
        fields = [
            'metric', 'condition', 'threshold', 'message', 'severity',
            'is_active', 'notification_channels', 'recipients',
        ]

    def clean_notification_channels(self):
        channels = self.cleaned_data.get('notification_channels') or []
        if not isinstance(channels, list):
            raise forms.ValidationError(_('Notification channels must be a list.'))
        unknown = [c for c in channels if c not in NotificationChannel.values]
        if unknown:
            raise forms.ValidationError(
                _('Unknown notification channel(s): %(channels)s'),
                params={'channels': ', '.join(map(str, unknown))}
            )
        return list(dict.fromkeys(channels))


class DataPointForm(forms.Form):

    value = forms.DecimalField(max_digits=14, decimal_places=4)
    timestamp = forms.DateTimeField(required=False)
    metadata = forms.JSONField(required=False)

    def clean_metadata(self):
        metadata = self.cleaned_data.get('metadata') or {}
        if not isinstance(metadata, dict):
            raise forms.ValidationError(_('Metadata must be an object.'))
        return metadata


class UtilizationReportForm(forms.Form):

    start_date = forms.DateField()
    end_date = forms.DateField()
    name = forms.CharField(max_length=200, required=False)
    department = forms.CharField(max_length=100, required=False)

    def clean(self):
        cleaned_data = super().clean()
        start = cleaned_data.get('start_date')
        end = cleaned_data.get('end_date')
        if start and end and end < start:
            self.add_error('end_date', _('End date cannot be before start date.'))
        return cleaned_data
