# Generated manually on 2026-10-12
import uuid

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        ('clients', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='BusinessRule',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this record is active in the system.', verbose_name='Is Active')),
                ('code', models.SlugField(help_text='Unique identifier (e.g., eligibility-age-fdf).', max_length=100, unique=True, verbose_name='Rule Code')),
                ('name', models.CharField(max_length=200, verbose_name='Name')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('category', models.CharField(choices=[('ELIGIBILITY', 'Eligibility'), ('BUDGET', 'Budget'), ('APPROVAL', 'Approval'), ('SCHEDULING', 'Scheduling'), ('DOCUMENT', 'Document')], max_length=20, verbose_name='Category')),
                ('conditions', models.JSONField(blank=True, default=list, verbose_name='Conditions')),
                ('actions', models.JSONField(blank=True, default=list, verbose_name='Actions')),
                ('priority', models.IntegerField(default=0, help_text='Higher number means higher priority.', verbose_name='Priority')),
                ('expires_at', models.DateTimeField(blank=True, null=True, verbose_name='Expires At')),
                ('version', models.PositiveIntegerField(default=1, editable=False, verbose_name='Version')),
                ('client_types', models.ManyToManyField(related_name='business_rules', to='clients.clienttype', verbose_name='Client Types')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='businessrule_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='businessrule_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Business Rule',
                'verbose_name_plural': 'Business Rules',
                'ordering': ['-priority', 'code'],
            },
        ),
    ]
