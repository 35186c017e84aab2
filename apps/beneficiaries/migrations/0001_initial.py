# Generated manually on 2026-10-12
import uuid

import apps.beneficiaries.validators
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('clients', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Beneficiary',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('is_active', models.BooleanField(default=True, help_text='Whether this record is active in the system.', verbose_name='Is Active')),
                ('beneficiary_code', models.CharField(editable=False, max_length=20, unique=True, verbose_name='Beneficiary Code')),
                ('registration_date', models.DateField(validators=[apps.beneficiaries.validators.validate_not_future], verbose_name='Registration Date')),
                ('emirates_id', models.CharField(help_text='Format: 784-XXXX-XXXXXXX-X', max_length=18, unique=True, validators=[apps.beneficiaries.validators.validate_emirates_id], verbose_name='Emirates ID')),
                ('full_name_en', models.CharField(max_length=200, verbose_name='Full Name (English)')),
                ('full_name_ar', models.CharField(max_length=200, verbose_name='Full Name (Arabic)')),
                ('date_of_birth', models.DateField(validators=[apps.beneficiaries.validators.validate_date_of_birth], verbose_name='Date of Birth')),
                ('gender', models.CharField(choices=[('MALE', 'Male'), ('FEMALE', 'Female')], max_length=10, verbose_name='Gender')),
                ('contact_number', models.CharField(help_text='Format: 05X-XXX-XXXX', max_length=12, validators=[apps.beneficiaries.validators.validate_phone_number], verbose_name='Contact Number')),
                ('secondary_contact_number', models.CharField(blank=True, max_length=12, validators=[apps.beneficiaries.validators.validate_phone_number], verbose_name='Secondary Contact Number')),
                ('email', models.EmailField(blank=True, max_length=254, verbose_name='Email Address')),
                ('emirate', models.CharField(choices=[('ABU_DHABI', 'Abu Dhabi'), ('DUBAI', 'Dubai'), ('SHARJAH', 'Sharjah'), ('AJMAN', 'Ajman'), ('UMM_AL_QUWAIN', 'Umm Al Quwain'), ('FUJAIRAH', 'Fujairah'), ('RAS_AL_KHAIMAH', 'Ras Al Khaimah')], max_length=20, verbose_name='Emirate')),
                ('area', models.CharField(blank=True, max_length=100, verbose_name='Area')),
                ('street', models.CharField(blank=True, max_length=150, verbose_name='Street')),
                ('building_villa', models.CharField(blank=True, max_length=100, verbose_name='Building / Villa')),
                ('gps_coordinates', models.CharField(blank=True, help_text='Latitude,longitude', max_length=50, verbose_name='GPS Coordinates')),
                ('property_type', models.CharField(blank=True, choices=[('VILLA', 'Villa'), ('APARTMENT', 'Apartment'), ('TOWNHOUSE', 'Townhouse')], max_length=20, verbose_name='Property Type')),
                ('ownership', models.CharField(blank=True, choices=[('OWNED', 'Owned'), ('RENTED', 'Rented'), ('FAMILY', 'Family-owned')], max_length=20, verbose_name='Ownership')),
                ('bedrooms', models.PositiveSmallIntegerField(blank=True, null=True, verbose_name='Bedrooms')),
                ('bathrooms', models.PositiveSmallIntegerField(blank=True, null=True, verbose_name='Bathrooms')),
                ('floors', models.PositiveSmallIntegerField(blank=True, null=True, verbose_name='Floors')),
                ('year_of_construction', models.PositiveSmallIntegerField(blank=True, null=True, verbose_name='Year of Construction')),
                ('status', models.CharField(choices=[('REGISTERED', 'Registered'), ('UNDER_ASSESSMENT', 'Under Assessment'), ('APPROVED', 'Approved'), ('IN_PROGRESS', 'In Progress'), ('COMPLETED', 'Completed'), ('REJECTED', 'Rejected'), ('WITHDRAWN', 'Withdrawn')], default='REGISTERED', max_length=20, verbose_name='Status')),
                ('notes', models.TextField(blank=True, verbose_name='Notes')),
                ('client_type', models.ForeignKey(blank=True, help_text='Funding-source category (FDF, ADHA, Cash) of this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='beneficiary_records', to='clients.clienttype', verbose_name='Client Type')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='beneficiary_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='beneficiary_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Beneficiary',
                'verbose_name_plural': 'Beneficiaries',
                'ordering': ['-registration_date', '-id'],
                'indexes': [
                    models.Index(fields=['status'], name='benef_status_idx'),
                    models.Index(fields=['emirate'], name='benef_emirate_idx'),
                    models.Index(fields=['registration_date'], name='benef_reg_date_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='FamilyMember',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('public_id', models.UUIDField(db_index=True, default=uuid.uuid4, editable=False, help_text='Unique UUID for external reference.', unique=True, verbose_name='Public ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, help_text='Timestamp when this record was created.', verbose_name='Created At')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when this record was last modified.', verbose_name='Updated At')),
                ('full_name_en', models.CharField(max_length=200, verbose_name='Full Name (English)')),
                ('full_name_ar', models.CharField(max_length=200, verbose_name='Full Name (Arabic)')),
                ('relationship', models.CharField(choices=[('SPOUSE', 'Spouse'), ('CHILD', 'Child'), ('PARENT', 'Parent'), ('SIBLING', 'Sibling'), ('OTHER', 'Other')], max_length=20, verbose_name='Relationship')),
                ('date_of_birth', models.DateField(blank=True, null=True, validators=[apps.beneficiaries.validators.validate_not_future], verbose_name='Date of Birth')),
                ('gender', models.CharField(choices=[('MALE', 'Male'), ('FEMALE', 'Female')], max_length=10, verbose_name='Gender')),
                ('contact_number', models.CharField(blank=True, max_length=12, validators=[apps.beneficiaries.validators.validate_phone_number], verbose_name='Contact Number')),
                ('emirates_id', models.CharField(blank=True, max_length=18, validators=[apps.beneficiaries.validators.validate_emirates_id], verbose_name='Emirates ID')),
                ('is_dependent', models.BooleanField(default=False, verbose_name='Is Dependent')),
                ('has_medical_condition', models.BooleanField(default=False, verbose_name='Has Medical Condition')),
                ('medical_condition_details', models.TextField(blank=True, verbose_name='Medical Condition Details')),
                ('beneficiary', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='family_members', to='beneficiaries.beneficiary', verbose_name='Beneficiary')),
                ('created_by', models.ForeignKey(blank=True, help_text='User who created this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='familymember_created', to=settings.AUTH_USER_MODEL, verbose_name='Created By')),
                ('updated_by', models.ForeignKey(blank=True, help_text='User who last modified this record.', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='familymember_updated', to=settings.AUTH_USER_MODEL, verbose_name='Updated By')),
            ],
            options={
                'verbose_name': 'Family Member',
                'verbose_name_plural': 'Family Members',
                'ordering': ['beneficiary', 'full_name_en'],
            },
        ),
    ]
