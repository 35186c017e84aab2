"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for beneficiary validation, search, summary,
             status workflow and the beneficiary API.
-------------------------------------------------------------------------
"""
import json
from datetime import date

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from apps.beneficiaries.forms import BeneficiaryForm, FamilyMemberForm
from apps.beneficiaries.models import Beneficiary, BeneficiaryStatus, FamilyMember
from apps.beneficiaries.services import BeneficiaryService, age_range_label
from apps.beneficiaries.validators import (
    validate_emirates_id, validate_phone_number, validate_date_of_birth,
)
from apps.beneficiaries.workflows import change_status
from apps.clients.models import ClientType
from apps.core.exceptions import WorkflowTransitionException
from apps.core.models import AuditLog, AuditAction
from apps.core.utils import calculate_age
from apps.users.models import Role, RoleCode


User = get_user_model()


def make_beneficiary(client_type, emirates_id, **kwargs):
    data = {
        'registration_date': date(2024, 1, 15),
        'emirates_id': emirates_id,
        'full_name_en': 'Ahmed Al Mansoori',
        'full_name_ar': 'أحمد المنصوري',
        'date_of_birth': date(1950, 5, 1),
        'gender': 'MALE',
        'contact_number': '050-123-4567',
        'emirate': 'ABU_DHABI',
        'client_type': client_type,
    }
    data.update(kwargs)
    return Beneficiary.objects.create(**data)


class ValidatorTests(TestCase):
    """Tests for registration field validators."""

    def test_emirates_id_format(self):
        validate_emirates_id('784-1950-1234567-1')
        for bad in ['784195012345671', '784-195-1234567-1', '784-1950-1234567-12', 'abc-defg-hijklmn-o']:
            with self.assertRaises(ValidationError):
                validate_emirates_id(bad)

    def test_phone_format(self):
        validate_phone_number('050-123-4567')
        validate_phone_number('058-999-0000')
        for bad in ['0501234567', '040-123-4567', '050-12-34567', '+971-50-1234567']:
            with self.assertRaises(ValidationError):
                validate_phone_number(bad)

    def test_calculate_age_is_birthday_aware(self):
        today = date(2024, 6, 10)
        self.assertEqual(calculate_age(date(1964, 6, 10), today), 60)
        self.assertEqual(calculate_age(date(1964, 6, 11), today), 59)
        self.assertEqual(calculate_age(date(1964, 6, 9), today), 60)

    def test_minimum_age(self):
        today = date(2024, 6, 10)
        validate_date_of_birth(date(1964, 6, 10), today=today)
        with self.assertRaises(ValidationError) as ctx:
            validate_date_of_birth(date(1964, 6, 11), today=today)
        self.assertEqual(ctx.exception.code, 'under_minimum_age')

    def test_future_date_of_birth_rejected(self):
        today = date(2024, 6, 10)
        with self.assertRaises(ValidationError) as ctx:
            validate_date_of_birth(date(2025, 1, 1), today=today)
        self.assertEqual(ctx.exception.code, 'future_date')

    def test_age_range_labels(self):
        self.assertEqual(age_range_label(60), '60-69')
        self.assertEqual(age_range_label(79), '70-79')
        self.assertEqual(age_range_label(85), '80-89')
        self.assertEqual(age_range_label(101), '90+')
        self.assertIsNone(age_range_label(59))


class FormTests(TestCase):
    """Tests for the registration and family member forms."""

    def setUp(self):
        self.fdf = ClientType.objects.create(code='FDF', type_id=1, name_en='Family Development Foundation')

    def valid_data(self, **overrides):
        data = {
            'registration_date': '2024-01-15',
            'emirates_id': '784-1950-1234567-1',
            'full_name_en': 'Fatima Al Zaabi',
            'full_name_ar': 'فاطمة الزعابي',
            'date_of_birth': '1950-03-20',
            'gender': 'FEMALE',
            'client_type': 'FDF',
            'contact_number': '055-222-3333',
            'emirate': 'DUBAI',
        }
        data.update(overrides)
        return data

    def test_valid_registration(self):
        form = BeneficiaryForm(data=self.valid_data())
        self.assertTrue(form.is_valid(), form.errors)

    def test_required_fields(self):
        form = BeneficiaryForm(data={})
        self.assertFalse(form.is_valid())
        for field in ['emirates_id', 'full_name_en', 'full_name_ar', 'date_of_birth',
                      'gender', 'contact_number', 'emirate', 'client_type']:
            self.assertIn(field, form.errors)

    def test_secondary_number_validated_when_present(self):
        form = BeneficiaryForm(data=self.valid_data(secondary_contact_number='12345'))
        self.assertFalse(form.is_valid())
        self.assertIn('secondary_contact_number', form.errors)

    def test_underage_rejected(self):
        form = BeneficiaryForm(data=self.valid_data(date_of_birth='1990-01-01'))
        self.assertFalse(form.is_valid())
        self.assertIn('date_of_birth', form.errors)

    def test_family_member_optional_fields(self):
        form = FamilyMemberForm(data={
            'full_name_en': 'Mariam', 'full_name_ar': 'مريم',
            'relationship': 'CHILD', 'gender': 'FEMALE',
        })
        self.assertTrue(form.is_valid(), form.errors)

        form = FamilyMemberForm(data={
            'full_name_en': 'Mariam', 'full_name_ar': 'مريم',
            'relationship': 'CHILD', 'gender': 'FEMALE',
            'emirates_id': '123', 'contact_number': '999',
        })
        self.assertFalse(form.is_valid())
        self.assertIn('emirates_id', form.errors)
        self.assertIn('contact_number', form.errors)

    def test_family_member_medical_details_required(self):
        form = FamilyMemberForm(data={
            'full_name_en': 'Khalid', 'full_name_ar': 'خالد',
            'relationship': 'SPOUSE', 'gender': 'MALE',
            'has_medical_condition': True,
        })
        self.assertFalse(form.is_valid())
        self.assertIn('medical_condition_details', form.errors)


class BeneficiaryServiceTests(TestCase):
    """Tests for BeneficiaryService search and summary."""

    def setUp(self):
        self.fdf = ClientType.objects.create(code='FDF', type_id=1, name_en='FDF')
        self.adha = ClientType.objects.create(code='ADHA', type_id=2, name_en='ADHA')
        self.b1 = make_beneficiary(self.fdf, '784-1950-0000001-1', date_of_birth=date(1960, 1, 1))
        self.b2 = make_beneficiary(
            self.adha, '784-1940-0000002-2', full_name_en='Salama Al Ketbi',
            gender='FEMALE', emirate='DUBAI', date_of_birth=date(1930, 1, 1),
            registration_date=date(2024, 2, 3)
        )
        self.b3 = make_beneficiary(
            self.fdf, '784-1945-0000003-3', full_name_en='Obaid Al Shamsi',
            date_of_birth=date(1945, 1, 1), is_active=False
        )

    def test_codes_are_sequential(self):
        self.assertEqual(self.b1.beneficiary_code, 'BEN-00001')
        self.assertEqual(self.b2.beneficiary_code, 'BEN-00002')
        self.assertEqual(self.b3.beneficiary_code, 'BEN-00003')

    def test_filter_by_search_and_client_type(self):
        self.assertEqual(list(BeneficiaryService.filter({'search': 'salama'})), [self.b2])
        self.assertEqual(list(BeneficiaryService.filter({'search': '0000003'})), [self.b3])
        self.assertEqual(set(BeneficiaryService.filter({'client_type': 'FDF'})), {self.b1, self.b3})
        self.assertEqual(set(BeneficiaryService.filter({'client_type': '2'})), {self.b2})

    def test_filter_by_attributes(self):
        self.assertEqual(list(BeneficiaryService.filter({'gender': 'female'})), [self.b2])
        self.assertEqual(list(BeneficiaryService.filter({'emirate': 'DUBAI'})), [self.b2])
        self.assertEqual(set(BeneficiaryService.filter({'is_active': 'false'})), {self.b3})
        self.assertEqual(
            list(BeneficiaryService.filter({'registered_from': '2024-02-01'})), [self.b2]
        )

    def test_summary(self):
        summary = BeneficiaryService.get_summary(today=date(2024, 6, 1))
        self.assertEqual(summary['total'], 3)
        self.assertEqual(summary['active'], 2)
        self.assertEqual(summary['inactive'], 1)
        self.assertEqual(summary['by_client_type'], {'ADHA': 1, 'FDF': 2})
        self.assertEqual(summary['by_gender'], {'FEMALE': 1, 'MALE': 2})
        self.assertEqual(summary['by_age_range'], {'60-69': 1, '70-79': 1, '80-89': 0, '90+': 1})
        self.assertEqual(summary['by_registration_month'], {'2024-01': 2, '2024-02': 1})

    def test_summary_for_client_type(self):
        summary = BeneficiaryService.get_summary(client_type=self.adha)
        self.assertEqual(summary['total'], 1)

    def test_export_csv(self):
        content, filename, content_type = BeneficiaryService.export(Beneficiary.objects.all(), 'csv')
        self.assertTrue(filename.endswith('.csv'))
        text = content.decode('utf-8')
        self.assertIn('Beneficiary Code', text)
        self.assertIn('BEN-00002', text)

    def test_export_xlsx(self):
        content, filename, content_type = BeneficiaryService.export(Beneficiary.objects.all(), 'xlsx')
        self.assertTrue(filename.endswith('.xlsx'))
        self.assertTrue(content.startswith(b'PK'))


class StatusWorkflowTests(TestCase):
    """Tests for the beneficiary case status state machine."""

    def setUp(self):
        self.fdf = ClientType.objects.create(code='FDF', type_id=1, name_en='FDF')
        self.user = User.objects.create_user(
            emirates_id='784-1980-1111111-1', email='cw@test.ae', password='pass', first_name='Case'
        )
        self.beneficiary = make_beneficiary(self.fdf, '784-1950-0000001-1')

    def test_valid_transition_is_audited(self):
        change_status(self.beneficiary, BeneficiaryStatus.UNDER_ASSESSMENT, self.user, reason='Visit booked')
        self.beneficiary.refresh_from_db()
        self.assertEqual(self.beneficiary.status, BeneficiaryStatus.UNDER_ASSESSMENT)

        entry = AuditLog.objects.get(entity_type='beneficiaries.beneficiary')
        self.assertEqual(entry.action, AuditAction.STATUS_CHANGED)
        self.assertEqual(entry.changes['from'], 'REGISTERED')
        self.assertEqual(entry.changes['to'], 'UNDER_ASSESSMENT')
        self.assertEqual(entry.changes['reason'], 'Visit booked')
        self.assertEqual(entry.actor, self.user)

    def test_invalid_transition(self):
        with self.assertRaises(WorkflowTransitionException):
            change_status(self.beneficiary, BeneficiaryStatus.COMPLETED, self.user)

    def test_terminal_status(self):
        change_status(self.beneficiary, BeneficiaryStatus.WITHDRAWN, self.user)
        with self.assertRaises(WorkflowTransitionException):
            change_status(self.beneficiary, BeneficiaryStatus.UNDER_ASSESSMENT, self.user)


class BeneficiaryApiTests(TestCase):
    """Tests for the beneficiary JSON API."""

    def setUp(self):
        self.fdf = ClientType.objects.create(code='FDF', type_id=1, name_en='FDF')
        self.adha = ClientType.objects.create(code='ADHA', type_id=2, name_en='ADHA')
        case_worker_role = Role.objects.create(name='Case Worker', code=RoleCode.CASE_WORKER)

        self.case_worker = User.objects.create_user(
            emirates_id='784-1985-2222222-2', email='cw@test.ae', password='pass',
            first_name='Case', client_type=self.fdf
        )
        self.case_worker.roles.add(case_worker_role)

        self.viewer = User.objects.create_user(
            emirates_id='784-1985-3333333-3', email='viewer@test.ae', password='pass', first_name='View'
        )
        self.client.force_login(self.case_worker)

    def payload(self, **overrides):
        data = {
            'emirates_id': '784-1950-1234567-1',
            'full_name_en': 'Fatima Al Zaabi',
            'full_name_ar': 'فاطمة الزعابي',
            'date_of_birth': '1950-03-20',
            'gender': 'FEMALE',
            'client_type': 'FDF',
            'contact_number': '055-222-3333',
            'address': {'emirate': 'ABU_DHABI', 'area': 'Khalifa City'},
            'property_details': {'property_type': 'VILLA', 'ownership': 'OWNED', 'bedrooms': 4},
        }
        data.update(overrides)
        return data

    def post_json(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type='application/json')

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get(reverse('beneficiaries:beneficiary_list'))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error_code'], 'ERR_AUTH_REQUIRED')

    def test_register_beneficiary(self):
        response = self.post_json(reverse('beneficiaries:beneficiary_list'), self.payload())
        self.assertEqual(response.status_code, 201, response.content)
        body = response.json()
        self.assertEqual(body['beneficiary_code'], 'BEN-00001')
        self.assertEqual(body['address']['area'], 'Khalifa City')
        self.assertEqual(body['property_details']['bedrooms'], 4)
        self.assertEqual(body['status'], 'REGISTERED')
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.CREATED).exists())

    def test_register_invalid_returns_field_errors(self):
        response = self.post_json(
            reverse('beneficiaries:beneficiary_list'),
            self.payload(emirates_id='12345', contact_number='0501234567')
        )
        self.assertEqual(response.status_code, 400)
        details = response.json()['details']
        self.assertIn('emirates_id', details)
        self.assertIn('contact_number', details)

    def test_register_for_other_client_type_forbidden(self):
        response = self.post_json(reverse('beneficiaries:beneficiary_list'), self.payload(client_type='ADHA'))
        self.assertEqual(response.status_code, 403)

    def test_write_requires_role(self):
        self.client.force_login(self.viewer)
        response = self.post_json(reverse('beneficiaries:beneficiary_list'), self.payload())
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error_code'], 'ERR_UNAUTHORIZED_ROLE')

    def test_malformed_json(self):
        response = self.client.post(
            reverse('beneficiaries:beneficiary_list'), data='{not json', content_type='application/json'
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error_code'], 'ERR_INVALID_PAYLOAD')

    def test_list_is_scoped_to_client_type(self):
        make_beneficiary(self.fdf, '784-1950-0000001-1')
        make_beneficiary(self.adha, '784-1950-0000002-2')
        response = self.client.get(reverse('beneficiaries:beneficiary_list'))
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['count'], 1)
        self.assertEqual(body['results'][0]['client_type'], 'FDF')

    def test_other_client_type_detail_is_404(self):
        other = make_beneficiary(self.adha, '784-1950-0000002-2')
        response = self.client.get(reverse('beneficiaries:beneficiary_detail', args=[other.pk]))
        self.assertEqual(response.status_code, 404)

    def test_patch_and_deactivate(self):
        beneficiary = make_beneficiary(self.fdf, '784-1950-0000001-1')
        url = reverse('beneficiaries:beneficiary_detail', args=[beneficiary.pk])
        response = self.client.patch(
            url, data=json.dumps({'address': {'area': 'Al Reem'}}), content_type='application/json'
        )
        self.assertEqual(response.status_code, 200, response.content)
        self.assertEqual(response.json()['address']['area'], 'Al Reem')

        response = self.client.delete(url)
        self.assertEqual(response.status_code, 200)
        beneficiary.refresh_from_db()
        self.assertFalse(beneficiary.is_active)

    def test_status_change_endpoint(self):
        beneficiary = make_beneficiary(self.fdf, '784-1950-0000001-1')
        url = reverse('beneficiaries:beneficiary_status', args=[beneficiary.pk])
        response = self.post_json(url, {'status': 'COMPLETED'})
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['error_code'], 'ERR_INVALID_TRANSITION')

        response = self.post_json(url, {'status': 'UNDER_ASSESSMENT'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'UNDER_ASSESSMENT')

    def test_family_member_crud(self):
        beneficiary = make_beneficiary(self.fdf, '784-1950-0000001-1')
        url = reverse('beneficiaries:family_member_list', args=[beneficiary.pk])
        response = self.post_json(url, {
            'full_name_en': 'Mariam', 'full_name_ar': 'مريم',
            'relationship': 'CHILD', 'gender': 'FEMALE', 'is_dependent': True,
        })
        self.assertEqual(response.status_code, 201, response.content)
        member_id = response.json()['id']
        self.assertTrue(FamilyMember.objects.get(pk=member_id).is_dependent)

        detail = reverse('beneficiaries:family_member_detail', args=[beneficiary.pk, member_id])
        response = self.client.patch(
            detail, data=json.dumps({'contact_number': '050-111-2222'}), content_type='application/json'
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['contact_number'], '050-111-2222')

        response = self.client.delete(detail)
        self.assertEqual(response.status_code, 200)
        self.assertFalse(FamilyMember.objects.filter(pk=member_id).exists())

    def test_summary_and_export_endpoints(self):
        make_beneficiary(self.fdf, '784-1950-0000001-1')
        response = self.client.get(reverse('beneficiaries:beneficiary_summary'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['total'], 1)

        response = self.client.get(reverse('beneficiaries:beneficiary_export'), {'format': 'csv'})
        self.assertEqual(response.status_code, 200)
        self.assertIn('attachment;', response['Content-Disposition'])

        response = self.client.get(reverse('beneficiaries:beneficiary_export'), {'format': 'pdf'})
        self.assertEqual(response.status_code, 400)
