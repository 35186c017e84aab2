# Generated manually on 2026-10-12
import uuid

import apps.reporting.models
from django.conf import settings
import django.core.validators
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
            name='ReportTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this record is active in the system.', verbose_name='Is Active')),
                ('code', models.SlugField(max_length=80, unique=True, verbose_name='Code')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('parameters', models.JSONField(blank=True, default=list, help_text='Parameter names or definitions, e.g. {"name": "start_date", "type": "date"}.', verbose_name='Parameters')),
                ('default_format', models.CharField(choices=[('PDF', 'PDF'), ('EXCEL', 'Excel'), ('CSV', 'CSV'), ('HTML', 'HTML')], default='PDF', max_length=10, verbose_name='Default Format')),
                ('metrics', models.JSONField(blank=True, default=list, verbose_name='Metrics')),
                ('sections', models.JSONField(blank=True, default=list, help_text='Ordered sections, e.g. [{"title": "Summary", "type": "text", "content": "..."}].', verbose_name='Sections')),
                ('data_source', models.CharField(max_length=50, verbose_name='Data Source')),
                ('version', models.PositiveIntegerField(default=1, verbose_name='Version')),
                ('author', models.CharField(blank=True, max_length=200, verbose_name='Author')),
                ('client_type', models.ForeignKey(blank=True, help_text='Funding-source category (FDF, ADHA, Cash) of this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='reporttemplate_records', to='clients.clienttype', verbose_name='Client Type')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='reporttemplate_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='reporttemplate_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Report Template',
                'verbose_name_plural': 'Report Templates',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='ReportSchedule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('name', models.CharField(blank=True, max_length=200, verbose_name='Name')),
                ('parameters', models.JSONField(blank=True, default=dict, verbose_name='Parameters')),
                ('frequency', models.CharField(choices=[('DAILY', 'Daily'), ('WEEKLY', 'Weekly'), ('MONTHLY', 'Monthly'), ('QUARTERLY', 'Quarterly')], max_length=10, verbose_name='Frequency')),
                ('time_of_day', models.TimeField(verbose_name='Time of Day')),
                ('day_of_week', models.PositiveSmallIntegerField(blank=True, help_text='0 = Monday ... 6 = Sunday (weekly schedules).', null=True, validators=[django.core.validators.MaxValueValidator(6)], verbose_name='Day of Week')),
                ('day_of_month', models.PositiveSmallIntegerField(blank=True, help_text='1-31, clamped to the length of the month (monthly and quarterly schedules).', null=True, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(31)], verbose_name='Day of Month')),
                ('format', models.CharField(choices=[('PDF', 'PDF'), ('EXCEL', 'Excel'), ('CSV', 'CSV'), ('HTML', 'HTML')], default='PDF', max_length=10, verbose_name='Format')),
                ('recipients', models.JSONField(blank=True, default=list, verbose_name='Recipients')),
                ('is_active', models.BooleanField(default=True, verbose_name='Is Active')),
                ('last_run', models.DateTimeField(blank=True, null=True, verbose_name='Last Run')),
                ('next_run', models.DateTimeField(blank=True, db_index=True, null=True, verbose_name='Next Run')),
                ('client_type', models.ForeignKey(blank=True, help_text='Funding-source category (FDF, ADHA, Cash) of this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='reportschedule_records', to='clients.clienttype', verbose_name='Client Type')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='reportschedule_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('template', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='schedules', to='reporting.reporttemplate', verbose_name='Template')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='reportschedule_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Report Schedule',
                'verbose_name_plural': 'Report Schedules',
                'ordering': ['next_run'],
            },
        ),
        migrations.CreateModel(
            name='GeneratedReport',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('format', models.CharField(choices=[('PDF', 'PDF'), ('EXCEL', 'Excel'), ('CSV', 'CSV'), ('HTML', 'HTML')], max_length=10, verbose_name='Format')),
                ('filename', models.CharField(max_length=255, verbose_name='Filename')),
                ('file', models.FileField(max_length=255, upload_to=apps.reporting.models.report_upload_path, verbose_name='File')),
                ('row_count', models.PositiveIntegerField(default=0, verbose_name='Rows')),
                ('parameters', models.JSONField(blank=True, default=dict, verbose_name='Parameters')),
                ('generated_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now, verbose_name='Generated At')),
                ('generated_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='generated_reports', to=settings.AUTH_USER_MODEL, verbose_name='Generated By')),
                ('schedule', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='generated_reports', to='reporting.reportschedule', verbose_name='Schedule')),
                ('template', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='generated_reports', to='reporting.reporttemplate', verbose_name='Template')),
            ],
            options={
                'verbose_name': 'Generated Report',
                'verbose_name_plural': 'Generated Reports',
                'ordering': ['-generated_at'],
            },
        ),
    ]
