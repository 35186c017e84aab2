# Generated manually on 2026-10-12
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='ClientType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this record is active in the system.', verbose_name='Is Active')),
                ('code', models.CharField(choices=[('FDF', 'Family Development Foundation'), ('ADHA', 'Abu Dhabi Housing Authority'), ('CASH', 'Cash Client')], max_length=10, unique=True, verbose_name='Code')),
                ('type_id', models.PositiveSmallIntegerField(help_text='Numeric identifier (1 = FDF, 2 = ADHA, 3 = Cash).', unique=True, verbose_name='Type ID')),
                ('name_en', models.CharField(max_length=150, verbose_name='Name (English)')),
                ('name_ar', models.CharField(blank=True, max_length=150, verbose_name='Name (Arabic)')),
                ('description', models.TextField(blank=True, verbose_name='Description')),
                ('config', models.JSONField(blank=True, default=dict, help_text='Client configuration: required_documents, max_budget, project_deadline_days.', verbose_name='Configuration')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Client Type',
                'verbose_name_plural': 'Client Types',
                'ordering': ['type_id'],
            },
        ),
    ]
