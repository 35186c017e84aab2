"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for the users module - Emirates ID accounts,
             roles and capabilities, authentication API and seeding.
-------------------------------------------------------------------------
"""
import io
import json

from django.contrib.auth import get_user_model
from django.contrib.auth.models import Group
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse

from apps.clients.models import ClientType
from apps.core.exceptions import SelfApprovalException
from apps.users.models import Role, RoleCode, normalize_emirates_id
from apps.users.permissions import check_segregation_of_duties, has_role


User = get_user_model()


class UserModelTests(TestCase):
    """Tests for CustomUser and its manager."""

    def setUp(self):
        self.fdf = ClientType.objects.create(code='FDF', type_id=1, name_en='Family Development Foundation')
        self.adha = ClientType.objects.create(code='ADHA', type_id=2, name_en='ADHA')
        self.chair_role = Role.objects.create(name='Committee Chair', code=RoleCode.COMMITTEE_CHAIR)
        self.manager_role = Role.objects.create(name='Programme Manager', code=RoleCode.PROGRAM_MANAGER)

    def test_normalize_emirates_id(self):
        self.assertEqual(normalize_emirates_id('784-1980-1234567-1'), '784198012345671')
        self.assertEqual(normalize_emirates_id(' 784 1980 1234567 1 '), '784198012345671')
        self.assertEqual(normalize_emirates_id(None), '')

    def test_create_user_normalizes_emirates_id(self):
        user = User.objects.create_user(
            emirates_id='784-1980-1234567-1', email='Staff@Example.AE', password='secret',
            first_name='Aisha', last_name='Al Hammadi'
        )
        self.assertEqual(user.emirates_id, '784198012345671')
        self.assertEqual(user.email, 'Staff@example.ae')
        self.assertTrue(user.check_password('secret'))
        self.assertEqual(str(user), 'Aisha Al Hammadi (No Role)')

    def test_create_user_requires_emirates_id(self):
        with self.assertRaises(ValueError):
            User.objects.create_user(emirates_id='', email='nobody@test.ae')

    def test_get_by_natural_key_accepts_formatted_id(self):
        user = User.objects.create_user(emirates_id='784198012345671', email='a@test.ae')
        self.assertEqual(User.objects.get_by_natural_key('784-1980-1234567-1'), user)

    def test_create_superuser_gets_super_admin_role(self):
        Role.objects.create(name='Super Administrator', code=RoleCode.SUPER_ADMIN)
        admin = User.objects.create_superuser(emirates_id='784-1970-0000001-1', email='admin@test.ae', password='x')
        self.assertTrue(admin.is_staff)
        self.assertTrue(admin.has_role(RoleCode.SUPER_ADMIN))
        self.assertTrue(admin.is_super_admin())

    def test_role_creates_group(self):
        self.assertEqual(self.chair_role.group.name, 'Committee Chair')
        self.chair_role.name = 'Review Committee Chair'
        self.chair_role.save()
        self.assertTrue(Group.objects.filter(name='Review Committee Chair').exists())
        self.assertEqual(Role.get_by_code(RoleCode.COMMITTEE_CHAIR), self.chair_role)
        self.assertIsNone(Role.get_by_code(RoleCode.FINANCE_OFFICER))

    def test_role_helpers(self):
        user = User.objects.create_user(emirates_id='784-1977-0000002-2', email='chair@test.ae', first_name='Omar')
        user.roles.add(self.chair_role)

        self.assertTrue(user.has_role(RoleCode.COMMITTEE_CHAIR))
        self.assertTrue(user.is_committee_member())
        self.assertTrue(user.is_committee_chair())
        self.assertFalse(user.is_program_manager())
        self.assertEqual(user.get_role_codes(), [RoleCode.COMMITTEE_CHAIR])
        self.assertEqual(str(user), 'Omar (Committee Chair)')

    def test_capabilities(self):
        chair = User.objects.create_user(emirates_id='784-1977-0000003-3', email='c@test.ae')
        chair.roles.add(self.chair_role)
        manager = User.objects.create_user(emirates_id='784-1977-0000004-4', email='m@test.ae')
        manager.roles.add(self.manager_role)

        self.assertTrue(chair.can_decide_submissions())
        self.assertFalse(chair.can_register_beneficiaries())
        self.assertFalse(chair.can_view_kpis())

        self.assertTrue(manager.can_register_beneficiaries())
        self.assertTrue(manager.can_approve_timesheets())
        self.assertTrue(manager.can_view_kpis())
        self.assertTrue(manager.can_manage_reports())
        self.assertFalse(manager.can_decide_submissions())

    def test_client_type_access(self):
        wide = User.objects.create_user(emirates_id='784-1977-0000005-5', email='w@test.ae')
        scoped = User.objects.create_user(emirates_id='784-1977-0000006-6', email='s@test.ae', client_type=self.fdf)

        self.assertTrue(wide.is_program_wide())
        self.assertTrue(wide.can_access_client_type(self.adha))

        self.assertFalse(scoped.is_program_wide())
        self.assertTrue(scoped.can_access_client_type(self.fdf))
        self.assertFalse(scoped.can_access_client_type(self.adha))
        self.assertTrue(scoped.can_access_client_type(None))


class PermissionTests(TestCase):

    def test_segregation_of_duties(self):
        check_segregation_of_duties(1, 2)
        check_segregation_of_duties(None, 2)
        with self.assertRaises(SelfApprovalException) as ctx:
            check_segregation_of_duties(5, 5, action='decide')
        self.assertEqual(ctx.exception.status_code, 403)
        self.assertIn('decide', ctx.exception.message)

    def test_has_role(self):
        role = Role.objects.create(name='Finance Officer', code=RoleCode.FINANCE_OFFICER)
        user = User.objects.create_user(emirates_id='784-1966-0000007-7', email='f@test.ae')
        self.assertFalse(has_role(user, [RoleCode.FINANCE_OFFICER]))
        user.roles.add(role)
        self.assertTrue(has_role(user, (RoleCode.FINANCE_OFFICER, RoleCode.SENIOR_MANAGEMENT)))

        superuser = User.objects.create_superuser(emirates_id='784-1966-0000008-8', email='su@test.ae')
        self.assertTrue(has_role(superuser, [RoleCode.ASSESSOR]))


class AuthenticationApiTests(TestCase):

    def setUp(self):
        self.fdf = ClientType.objects.create(code='FDF', type_id=1, name_en='Family Development Foundation')
        self.user = User.objects.create_user(
            emirates_id='784-1980-1234567-1', email='worker@test.ae', password='s3cret!',
            first_name='Fatima', last_name='Al Ketbi', client_type=self.fdf
        )
        self.user.roles.add(Role.objects.create(name='Case Worker', code=RoleCode.CASE_WORKER))

    def login(self, emirates_id, password):
        return self.client.post(
            reverse('users:login'),
            data=json.dumps({'emirates_id': emirates_id, 'password': password}),
            content_type='application/json'
        )

    def test_login_with_formatted_emirates_id(self):
        response = self.login('784-1980-1234567-1', 's3cret!')
        self.assertEqual(response.status_code, 200)

        data = response.json()
        self.assertEqual(data['emirates_id'], '784198012345671')
        self.assertEqual(data['full_name'], 'Fatima Al Ketbi')
        self.assertEqual(data['roles'], [RoleCode.CASE_WORKER])
        self.assertEqual(data['client_type'], 'FDF')
        self.assertFalse(data['is_program_wide'])
        self.assertTrue(data['capabilities']['register_beneficiaries'])
        self.assertFalse(data['capabilities']['manage_reports'])

    def test_login_with_wrong_password(self):
        with self.assertLogs('apps.users.signals', 'WARNING'):
            response = self.login('784198012345671', 'wrong')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error_code'], 'ERR_INVALID_CREDENTIALS')

    def test_login_with_invalid_json(self):
        response = self.client.post(reverse('users:login'), data='{', content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error_code'], 'ERR_INVALID_PAYLOAD')

    def test_me_and_logout(self):
        self.assertEqual(self.client.get(reverse('users:me')).status_code, 401)

        self.login('784198012345671', 's3cret!')
        response = self.client.get(reverse('users:me'))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['email'], 'worker@test.ae')

        response = self.client.post(reverse('users:logout'))
        self.assertEqual(response.json(), {'detail': 'Logged out.'})
        self.assertEqual(self.client.get(reverse('users:me')).status_code, 401)


class SeedRolesCommandTests(TestCase):

    def test_seed_roles_is_idempotent(self):
        out = io.StringIO()
        call_command('seed_roles', stdout=out)
        self.assertIn('Created: 10, Updated: 0', out.getvalue())
        self.assertEqual(Role.objects.count(), len(RoleCode.values))

        out = io.StringIO()
        call_command('seed_roles', stdout=out)
        self.assertIn('Created: 0, Updated: 10', out.getvalue())
        self.assertEqual(Role.objects.count(), 10)
