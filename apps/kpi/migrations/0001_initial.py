# Generated manually on 2026-10-12
from decimal import Decimal
import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('clients', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='KpiMetric',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this record is active in the system.', verbose_name='Is Active')),
                ('code', models.SlugField(max_length=80, unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('category', models.CharField(choices=[('ASSESSMENT', 'Assessment'), ('PROJECT', 'Project'), ('FINANCIAL', 'Financial'), ('OPERATIONAL', 'Operational'), ('CLIENT_SATISFACTION', 'Client Satisfaction'), ('COMPLIANCE', 'Compliance'), ('RESOURCE_UTILIZATION', 'Resource Utilization')], default='OPERATIONAL', max_length=30, verbose_name='Category')),
                ('unit', models.CharField(blank=True, default='%', max_length=20, verbose_name='Unit')),
                ('target', models.DecimalField(blank=True, decimal_places=4, max_digits=14, null=True, verbose_name='Target')),
                ('warning_threshold', models.DecimalField(blank=True, decimal_places=4, max_digits=14, null=True, verbose_name='Warning Threshold')),
                ('critical_threshold', models.DecimalField(blank=True, decimal_places=4, max_digits=14, null=True, verbose_name='Critical Threshold')),
                ('higher_is_better', models.BooleanField(default=True, verbose_name='Higher Is Better')),
                ('trend', models.CharField(choices=[('UP', 'Up'), ('DOWN', 'Down'), ('NEUTRAL', 'Neutral')], default='NEUTRAL', max_length=10, verbose_name='Trend')),
                ('aggregation', models.CharField(choices=[('SUM', 'Sum'), ('AVERAGE', 'Average'), ('MIN', 'Minimum'), ('MAX', 'Maximum'), ('LAST', 'Last Value')], default='LAST', max_length=10, verbose_name='Aggregation')),
                ('source', models.CharField(blank=True, help_text='Code of the collector that computes this metric. Empty for manual metrics.', max_length=50, verbose_name='Data Source')),
                ('source_params', models.JSONField(blank=True, default=dict, help_text='Options passed to the collector, e.g. {"role": "Senior Contractor"}.', verbose_name='Source Parameters')),
                ('client_type', models.ForeignKey(blank=True, help_text='Funding-source category (FDF, ADHA, Cash) of this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='kpimetric_records', to='clients.clienttype', verbose_name='Client Type')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='kpimetric_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='kpimetric_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'KPI Metric',
                'verbose_name_plural': 'KPI Metrics',
                'ordering': ['category', 'name'],
            },
        ),
        migrations.CreateModel(
            name='KpiDataPoint',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('timestamp', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Timestamp')),
                ('value', models.DecimalField(decimal_places=4, max_digits=14, verbose_name='Value')),
                ('metadata', models.JSONField(blank=True, default=dict, verbose_name='Metadata')),
                ('metric', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='data_points', to='kpi.kpimetric', verbose_name='Metric')),
            ],
            options={
                'verbose_name': 'KPI Data Point',
                'verbose_name_plural': 'KPI Data Points',
                'ordering': ['metric', 'timestamp'],
                'indexes': [models.Index(fields=['metric', 'timestamp'], name='kpi_value_metric_ts_idx')],
            },
        ),
        migrations.CreateModel(
            name='KpiDashboard',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this record is active in the system.', verbose_name='Is Active')),
                ('code', models.SlugField(max_length=80, unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('refresh_interval', models.PositiveIntegerField(default=3600, help_text='0 disables automatic refresh.', verbose_name='Refresh Interval (seconds)')),
                ('last_refreshed_at', models.DateTimeField(blank=True, null=True, verbose_name='Last Refreshed')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='kpidashboard_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('metrics', models.ManyToManyField(blank=True, related_name='dashboards', to='kpi.kpimetric', verbose_name='Metrics')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='kpidashboard_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'KPI Dashboard',
                'verbose_name_plural': 'KPI Dashboards',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='KpiAlert',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('condition', models.CharField(choices=[('ABOVE', 'Above'), ('BELOW', 'Below'), ('EQUAL', 'Equal')], max_length=10, verbose_name='Condition')),
                ('threshold', models.DecimalField(decimal_places=4, max_digits=14, verbose_name='Threshold')),
                ('message', models.CharField(max_length=255, verbose_name='Message')),
                ('severity', models.CharField(choices=[('INFO', 'Information'), ('WARNING', 'Warning'), ('CRITICAL', 'Critical')], default='WARNING', max_length=10, verbose_name='Severity')),
                ('is_active', models.BooleanField(default=True, verbose_name='Is Active')),
                ('triggered_at', models.DateTimeField(blank=True, null=True, verbose_name='Triggered At')),
                ('resolved_at', models.DateTimeField(blank=True, null=True, verbose_name='Resolved At')),
                ('notification_channels', models.JSONField(blank=True, default=list, help_text='Any of IN_APP, EMAIL and LOG.', verbose_name='Notification Channels')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_kpi_alerts', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('metric', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='alerts', to='kpi.kpimetric', verbose_name='Metric')),
                ('recipients', models.ManyToManyField(blank=True, related_name='kpi_alerts', to=settings.AUTH_USER_MODEL, verbose_name='Recipients')),
            ],
            options={
                'verbose_name': 'KPI Alert',
                'verbose_name_plural': 'KPI Alerts',
                'ordering': ['metric', 'threshold'],
            },
        ),
        migrations.CreateModel(
            name='ResourceUtilizationReport',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('start_date', models.DateField(verbose_name='From')),
                ('end_date', models.DateField(verbose_name='To')),
                ('department', models.CharField(blank=True, max_length=100, verbose_name='Department')),
                ('average_utilization', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=7, verbose_name='Average Utilization %')),
                ('resources_count', models.PositiveIntegerField(default=0, verbose_name='Resources')),
                ('payload', models.JSONField(default=dict, verbose_name='Report Data')),
                ('generated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='utilization_reports', to=settings.AUTH_USER_MODEL, verbose_name='Generated By')),
            ],
            options={
                'verbose_name': 'Resource Utilization Report',
                'verbose_name_plural': 'Resource Utilization Reports',
                'ordering': ['-created_at'],
            },
        ),
    ]
