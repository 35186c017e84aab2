"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for allocations, timesheets, utilization
             reporting and the manpower API.
-------------------------------------------------------------------------
"""
import json
from datetime import date
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError
from django.test import TestCase
from django.urls import reverse

from apps.core.exceptions import (
    AllocationConflictException, ResourceUnavailableException, InvalidPayloadException,
    SelfApprovalException, UnauthorizedRoleException, WorkflowTransitionException,
)
from apps.core.models import Notification
from apps.manpower.forms import ForecastForm
from apps.manpower.models import (
    ManpowerResource, Skill, ResourceSkill, Availability, Project, ResourceAllocation,
    Timesheet, ResourceForecast, AvailabilityType, AllocationStatus, TimesheetStatus,
    ProficiencyLevel,
)
from apps.manpower.services import ManpowerService, working_days
from apps.users.models import Role, RoleCode


User = get_user_model()

# 2024-06-03 is a Monday
MONDAY = date(2024, 6, 3)


class ManpowerTestMixin:

    def setUp(self):
        self.manager_role = Role.objects.create(name='Resource Manager', code=RoleCode.RESOURCE_MANAGER)
        self.manager = User.objects.create_user(
            emirates_id='784-1980-0000011-1', email='rm@test.ae', password='pass', first_name='Rana'
        )
        self.manager.roles.add(self.manager_role)
        self.technician_user = User.objects.create_user(
            emirates_id='784-1990-0000012-2', email='tech@test.ae', password='pass', first_name='Omar'
        )

        self.resource = ManpowerResource.objects.create(
            user=self.technician_user, name='Omar Saeed', role='Technician', department='Operations'
        )
        self.specialist = ManpowerResource.objects.create(
            name='Layla Haddad', role='Accessibility Specialist', department='Operations'
        )
        self.project = Project.objects.create(code='PRJ-001', name='Ramp installation', start_date=MONDAY)
        self.other_project = Project.objects.create(code='PRJ-002', name='Bathroom refit', start_date=MONDAY)

    def allocate(self, resource, start, end, percentage, status=AllocationStatus.ACTIVE, project=None):
        return ResourceAllocation.objects.create(
            resource=resource, project=project or self.project, start_date=start, end_date=end,
            allocation_percentage=percentage, status=status
        )


class WorkingDaysTests(TestCase):

    def test_working_days(self):
        self.assertEqual(working_days(MONDAY, date(2024, 6, 9)), 5)
        self.assertEqual(working_days(date(2024, 6, 1), date(2024, 6, 2)), 0)
        self.assertEqual(working_days(MONDAY, date(2024, 6, 30)), 20)
        self.assertEqual(working_days(date(2024, 6, 7), date(2024, 6, 10)), 2)
        self.assertEqual(working_days(date(2024, 6, 10), MONDAY), 0)


class AllocationTests(ManpowerTestMixin, TestCase):

    def test_allocation_within_capacity(self):
        self.allocate(self.resource, MONDAY, date(2024, 6, 14), 60)
        allocation = ManpowerService.create_allocation(
            self.manager, self.resource, self.other_project,
            date(2024, 6, 10), date(2024, 6, 20), 40
        )
        self.assertEqual(allocation.status, AllocationStatus.PLANNED)
        self.assertEqual(allocation.created_by, self.manager)

    def test_over_allocation_rejected(self):
        self.allocate(self.resource, MONDAY, date(2024, 6, 14), 60)
        self.allocate(self.resource, date(2024, 6, 10), date(2024, 6, 20), 40)

        with self.assertRaises(AllocationConflictException) as ctx:
            ManpowerService.create_allocation(
                self.manager, self.resource, self.other_project, date(2024, 6, 12), date(2024, 6, 12), 10
            )
        self.assertEqual(ctx.exception.details['allocated'], 100)
        self.assertEqual(ctx.exception.details['available'], 0)

        # After the first allocation ends only 40% is taken
        ManpowerService.create_allocation(
            self.manager, self.resource, self.other_project, date(2024, 6, 17), date(2024, 6, 20), 60
        )

    def test_peak_counts_only_simultaneous_allocations(self):
        self.allocate(self.resource, MONDAY, date(2024, 6, 7), 60)
        self.allocate(self.resource, date(2024, 6, 10), date(2024, 6, 14), 60)
        self.assertEqual(
            ManpowerService.get_allocated_percentage(self.resource, MONDAY, date(2024, 6, 14)), 60
        )
        ManpowerService.check_allocation_conflicts(self.resource, MONDAY, date(2024, 6, 14), 40)

    def test_completed_and_excluded_allocations_ignored(self):
        self.allocate(self.resource, MONDAY, date(2024, 6, 14), 80, status=AllocationStatus.COMPLETED)
        current = self.allocate(self.resource, MONDAY, date(2024, 6, 14), 70)

        with self.assertRaises(AllocationConflictException):
            ManpowerService.check_allocation_conflicts(self.resource, MONDAY, date(2024, 6, 14), 50)
        ManpowerService.check_allocation_conflicts(
            self.resource, MONDAY, date(2024, 6, 14), 50, exclude=current.pk
        )

    def test_resource_on_leave(self):
        Availability.objects.create(
            resource=self.resource, start_date=date(2024, 6, 5), end_date=date(2024, 6, 6),
            availability_type=AvailabilityType.VACATION
        )
        Availability.objects.create(
            resource=self.specialist, start_date=date(2024, 6, 5), end_date=date(2024, 6, 6),
            availability_type=AvailabilityType.PROJECT, project=self.project
        )
        self.assertFalse(ManpowerService.is_available(self.resource, MONDAY, date(2024, 6, 7)))
        self.assertTrue(ManpowerService.is_available(self.resource, date(2024, 6, 10), date(2024, 6, 14)))
        self.assertTrue(ManpowerService.is_available(self.specialist, MONDAY, date(2024, 6, 7)))

        with self.assertRaises(ResourceUnavailableException) as ctx:
            ManpowerService.create_allocation(
                self.manager, self.resource, self.project, MONDAY, date(2024, 6, 7), 50
            )
        self.assertEqual(ctx.exception.details['blocks'][0]['type'], AvailabilityType.VACATION)

    def test_inactive_resource(self):
        self.resource.is_active = False
        self.resource.save()
        with self.assertRaises(ResourceUnavailableException):
            ManpowerService.create_allocation(
                self.manager, self.resource, self.project, MONDAY, date(2024, 6, 7), 50
            )

    def test_reversed_period(self):
        with self.assertRaises(InvalidPayloadException):
            ManpowerService.create_allocation(
                self.manager, self.resource, self.project, date(2024, 6, 7), MONDAY, 50
            )


class TimesheetTests(ManpowerTestMixin, TestCase):

    def test_daily_hours_limit(self):
        ManpowerService.create_timesheet(self.technician_user, self.resource, MONDAY, Decimal('20'))
        with self.assertRaises(InvalidPayloadException):
            ManpowerService.create_timesheet(self.technician_user, self.resource, MONDAY, Decimal('5'))
        ManpowerService.create_timesheet(self.technician_user, self.resource, MONDAY, Decimal('4'))

        with self.assertRaises(InvalidPayloadException):
            ManpowerService.create_timesheet(self.technician_user, self.resource, MONDAY, Decimal('0'))
        with self.assertRaises(InvalidPayloadException):
            ManpowerService.create_timesheet(
                self.technician_user, self.resource, date(2024, 6, 4), Decimal('24.5')
            )

    def test_rejected_hours_do_not_count(self):
        Timesheet.objects.create(resource=self.resource, date=MONDAY, hours=Decimal('20'),
                                 status=TimesheetStatus.REJECTED)
        timesheet = ManpowerService.create_timesheet(self.technician_user, self.resource, MONDAY, Decimal('10'))
        self.assertEqual(timesheet.status, TimesheetStatus.DRAFT)

    def test_submit_and_approve(self):
        timesheet = ManpowerService.create_timesheet(
            self.technician_user, self.resource, MONDAY, Decimal('8'), project=self.project
        )
        ManpowerService.transition_timesheet(self.technician_user, timesheet, TimesheetStatus.SUBMITTED)
        self.assertIsNotNone(timesheet.submitted_at)

        ManpowerService.transition_timesheet(self.manager, timesheet, TimesheetStatus.APPROVED)
        timesheet.refresh_from_db()
        self.assertEqual(timesheet.status, TimesheetStatus.APPROVED)
        self.assertEqual(timesheet.approved_by, self.manager)
        self.assertIsNotNone(timesheet.approved_at)
        self.assertTrue(Notification.objects.filter(recipient=self.technician_user).exists())

    def test_reject_and_reopen(self):
        timesheet = ManpowerService.create_timesheet(self.technician_user, self.resource, MONDAY, Decimal('8'))
        ManpowerService.transition_timesheet(self.technician_user, timesheet, TimesheetStatus.SUBMITTED)
        ManpowerService.transition_timesheet(self.manager, timesheet, TimesheetStatus.REJECTED, 'Wrong project')
        self.assertEqual(timesheet.rejection_reason, 'Wrong project')

        ManpowerService.transition_timesheet(self.technician_user, timesheet, TimesheetStatus.DRAFT)
        self.assertEqual(timesheet.status, TimesheetStatus.DRAFT)
        self.assertIsNone(timesheet.approved_by)

    def test_invalid_transition(self):
        timesheet = ManpowerService.create_timesheet(self.technician_user, self.resource, MONDAY, Decimal('8'))
        with self.assertRaises(WorkflowTransitionException):
            ManpowerService.transition_timesheet(self.manager, timesheet, TimesheetStatus.APPROVED)

    def test_approver_rules(self):
        timesheet = ManpowerService.create_timesheet(self.technician_user, self.resource, MONDAY, Decimal('8'))
        ManpowerService.transition_timesheet(self.technician_user, timesheet, TimesheetStatus.SUBMITTED)

        with self.assertRaises(UnauthorizedRoleException):
            ManpowerService.transition_timesheet(self.technician_user, timesheet, TimesheetStatus.APPROVED)

        self.technician_user.roles.add(self.manager_role)
        with self.assertRaises(SelfApprovalException):
            ManpowerService.transition_timesheet(self.technician_user, timesheet, TimesheetStatus.APPROVED)

    def test_submitted_timesheet_is_locked(self):
        timesheet = ManpowerService.create_timesheet(self.technician_user, self.resource, MONDAY, Decimal('8'))
        ManpowerService.update_timesheet(self.technician_user, timesheet, hours=Decimal('6'))
        self.assertEqual(timesheet.hours, Decimal('6'))

        ManpowerService.transition_timesheet(self.technician_user, timesheet, TimesheetStatus.SUBMITTED)
        with self.assertRaises(WorkflowTransitionException):
            ManpowerService.update_timesheet(self.technician_user, timesheet, hours=Decimal('7'))


class UtilizationReportTests(ManpowerTestMixin, TestCase):

    def log(self, resource, day, hours, billable=True, project='default', status=TimesheetStatus.APPROVED):
        return Timesheet.objects.create(
            resource=resource, date=day, hours=Decimal(hours), billable=billable,
            project=self.project if project == 'default' else project, status=status
        )

    def setUp(self):
        super().setUp()
        # Omar: 30 billable + 10 non-billable approved hours, 8 draft hours ignored
        for day in (3, 4, 5):
            self.log(self.resource, date(2024, 6, day), '8')
        self.log(self.resource, date(2024, 6, 6), '6')
        self.log(self.resource, date(2024, 6, 7), '10', billable=False, project=None)
        self.log(self.resource, date(2024, 6, 10), '8', status=TimesheetStatus.DRAFT)

        # Layla: 40 approved hours and a week of vacation
        for day in (3, 4, 5, 6, 7):
            self.log(self.specialist, date(2024, 6, day), '8')
        Availability.objects.create(
            resource=self.specialist, start_date=date(2024, 6, 10), end_date=date(2024, 6, 16),
            availability_type=AvailabilityType.VACATION
        )

    def test_report(self):
        report = ManpowerService.get_utilization_report(MONDAY, date(2024, 6, 14))
        self.assertEqual(report['period']['working_days'], 10)

        rows = {row['name']: row for row in report['resources']}
        omar = rows['Omar Saeed']
        self.assertEqual(omar['billable_hours'], 30.0)
        self.assertEqual(omar['non_billable_hours'], 10.0)
        self.assertEqual(omar['available_hours'], 80.0)
        self.assertEqual(omar['utilization'], 50.0)

        layla = rows['Layla Haddad']
        self.assertEqual(layla['leave_days'], 5)
        self.assertEqual(layla['available_hours'], 40.0)
        self.assertEqual(layla['utilization'], 100.0)

        self.assertEqual(report['average_utilization'], 75.0)
        self.assertEqual(report['by_department'], [{
            'department': 'Operations',
            'resources': 2,
            'total_hours': 80.0,
            'available_hours': 120.0,
            'utilization': 66.7,
        }])
        self.assertEqual(report['by_project'][0], {'project': 'PRJ-001', 'name': 'Ramp installation', 'hours': 70.0})
        self.assertEqual(report['by_project'][1]['name'], 'Unassigned')

    def test_filters(self):
        report = ManpowerService.get_utilization_report(MONDAY, date(2024, 6, 14), role='Technician')
        self.assertEqual([r['name'] for r in report['resources']], ['Omar Saeed'])

        report = ManpowerService.get_utilization_report(MONDAY, date(2024, 6, 14), department='Finance')
        self.assertEqual(report['resources'], [])
        self.assertEqual(report['average_utilization'], 0.0)

    def test_reversed_period(self):
        with self.assertRaises(InvalidPayloadException):
            ManpowerService.get_utilization_report(date(2024, 6, 14), MONDAY)


class SkillsAndForecastTests(ManpowerTestMixin, TestCase):

    def test_skill_matrix(self):
        ramps = Skill.objects.create(name='Ramp Installation', category='Construction')
        Skill.objects.create(name='Electrical', category='Construction')
        ResourceSkill.objects.create(resource=self.resource, skill=ramps, proficiency=ProficiencyLevel.EXPERT)
        ResourceSkill.objects.create(resource=self.specialist, skill=ramps, proficiency=ProficiencyLevel.BEGINNER)

        matrix = {row['skill']: row for row in ManpowerService.get_skill_matrix()}
        self.assertEqual(matrix['Ramp Installation']['levels'][ProficiencyLevel.EXPERT], 1)
        self.assertEqual(matrix['Ramp Installation']['total'], 2)
        self.assertEqual(matrix['Electrical']['total'], 0)

        matrix = {row['skill']: row for row in ManpowerService.get_skill_matrix(department='Finance')}
        self.assertEqual(matrix['Ramp Installation']['total'], 0)

    def test_forecast_gap_and_period(self):
        forecast = ResourceForecast.objects.create(
            department='Operations', period='2024-Q3', required_resources=12, available_resources=9
        )
        self.assertEqual(forecast.gap, 3)
        self.assertEqual(list(ManpowerService.get_forecasts('operations')), [forecast])

        form = ForecastForm(data={
            'department': 'Design', 'period': '2024-q4', 'required_resources': 3, 'available_resources': 3,
        })
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data['period'], '2024-Q4')

        form = ForecastForm(data={
            'department': 'Design', 'period': '2024-Q5', 'required_resources': 3, 'available_resources': 3,
        })
        self.assertFalse(form.is_valid())
        self.assertIn('period', form.errors)

    def test_contractor_details_required(self):
        contractor = ManpowerResource(name='Ali', role='Senior Contractor', department='Operations',
                                      is_contractor=True)
        with self.assertRaises(ValidationError) as ctx:
            contractor.full_clean()
        self.assertIn('company_name', ctx.exception.message_dict)
        self.assertIn('contract_end_date', ctx.exception.message_dict)

    def test_expiring_contracts(self):
        soon = ManpowerResource.objects.create(
            name='Ali', role='Senior Contractor', department='Operations', is_contractor=True,
            company_name='BuildCo', contract_start_date=date(2024, 1, 1), contract_end_date=date(2024, 6, 20)
        )
        ManpowerResource.objects.create(
            name='Sara', role='Senior Contractor', department='Operations', is_contractor=True,
            company_name='BuildCo', contract_start_date=date(2024, 1, 1), contract_end_date=date(2024, 12, 31)
        )
        expiring = ManpowerService.get_expiring_contracts(days=30, today=MONDAY)
        self.assertEqual(list(expiring), [soon])
        self.assertEqual(soon.contract_days_remaining(today=MONDAY), 17)


class ManpowerApiTests(ManpowerTestMixin, TestCase):

    def post(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type='application/json')

    def test_requires_authentication(self):
        response = self.client.get(reverse('manpower:resource_list'))
        self.assertEqual(response.status_code, 401)

    def test_create_resource(self):
        self.client.force_login(self.manager)
        response = self.post(reverse('manpower:resource_list'), {
            'name': 'Huda Rashid', 'role': 'Occupational Therapist', 'department': 'Assessment',
        })
        self.assertEqual(response.status_code, 201, response.content)
        body = response.json()
        self.assertTrue(body['is_active'])
        self.assertEqual(body['weekly_capacity_hours'], '40.00')

        response = self.post(reverse('manpower:resource_list'), {
            'name': 'BuildCo crew', 'role': 'Contractor', 'department': 'Operations', 'is_contractor': True,
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn('company_name', response.json()['details'])

    def test_create_resource_requires_manager(self):
        self.client.force_login(self.technician_user)
        response = self.post(reverse('manpower:resource_list'), {
            'name': 'Huda Rashid', 'role': 'Occupational Therapist', 'department': 'Assessment',
        })
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error_code'], 'ERR_UNAUTHORIZED_ROLE')

    def test_allocation_conflict(self):
        self.allocate(self.resource, MONDAY, date(2024, 6, 14), 80)
        self.client.force_login(self.manager)
        payload = {
            'resource': self.resource.pk, 'project': 'PRJ-002',
            'start_date': '2024-06-10', 'end_date': '2024-06-20', 'allocation_percentage': 30,
        }
        response = self.post(reverse('manpower:allocation_list'), payload)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['error_code'], 'ERR_ALLOCATION_CONFLICT')

        payload['allocation_percentage'] = 20
        response = self.post(reverse('manpower:allocation_list'), payload)
        self.assertEqual(response.status_code, 201, response.content)
        self.assertEqual(response.json()['status'], AllocationStatus.PLANNED)

    def test_timesheet_flow(self):
        self.client.force_login(self.technician_user)
        response = self.post(reverse('manpower:timesheet_list'), {
            'resource': self.resource.pk, 'project': 'PRJ-001', 'date': '2024-06-03', 'hours': 8,
        })
        self.assertEqual(response.status_code, 201, response.content)
        timesheet_id = response.json()['id']
        self.assertTrue(response.json()['billable'])

        # Staff cannot log time for another resource
        response = self.post(reverse('manpower:timesheet_list'), {
            'resource': self.specialist.pk, 'date': '2024-06-03', 'hours': 8,
        })
        self.assertEqual(response.status_code, 403)

        response = self.post(reverse('manpower:timesheet_transition', args=[timesheet_id, 'submit']), {})
        self.assertEqual(response.json()['status'], TimesheetStatus.SUBMITTED)

        response = self.post(reverse('manpower:timesheet_transition', args=[timesheet_id, 'approve']), {})
        self.assertEqual(response.status_code, 403)

        self.client.force_login(self.manager)
        response = self.post(reverse('manpower:timesheet_transition', args=[timesheet_id, 'approve']), {})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], TimesheetStatus.APPROVED)

        response = self.post(reverse('manpower:timesheet_transition', args=[timesheet_id, 'approve']), {})
        self.assertEqual(response.status_code, 409)

        response = self.post(reverse('manpower:timesheet_transition', args=[timesheet_id, 'archive']), {})
        self.assertEqual(response.status_code, 400)

    def test_timesheet_edit(self):
        timesheet = Timesheet.objects.create(resource=self.resource, date=MONDAY, hours=Decimal('8'))
        self.client.force_login(self.technician_user)
        url = reverse('manpower:timesheet_detail', args=[timesheet.pk])
        response = self.client.patch(url, data=json.dumps({'hours': 6}), content_type='application/json')
        self.assertEqual(response.status_code, 200, response.content)
        self.assertEqual(Decimal(response.json()['hours']), Decimal('6'))
        self.assertTrue(response.json()['billable'])

    def test_reports(self):
        self.client.force_login(self.technician_user)
        self.assertEqual(self.client.get(reverse('manpower:utilization')).status_code, 403)

        self.client.force_login(self.manager)
        response = self.client.get(
            reverse('manpower:utilization'), {'start_date': '2024-06-03', 'end_date': '2024-06-14'}
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['period']['working_days'], 10)

        response = self.client.get(reverse('manpower:utilization'), {'start_date': 'June'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error_code'], 'ERR_INVALID_PAYLOAD')

        self.assertEqual(self.client.get(reverse('manpower:skill_matrix')).status_code, 200)
        response = self.client.get(reverse('manpower:expiring_contracts'), {'days': 'soon'})
        self.assertEqual(response.status_code, 400)

    def test_list_filters_reject_non_numeric_ids(self):
        self.client.force_login(self.manager)
        for name, field in (
            ('manpower:allocation_list', 'resource'),
            ('manpower:timesheet_list', 'resource'),
            ('manpower:project_list', 'beneficiary'),
        ):
            with self.subTest(url=name):
                response = self.client.get(reverse(name), {field: 'abc'})
                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()['error_code'], 'ERR_INVALID_PAYLOAD')
                self.assertEqual(response.json()['details']['field'], field)

    def test_allocation_filter_by_resource(self):
        self.allocate(self.resource, MONDAY, date(2024, 6, 14), 50)
        self.client.force_login(self.manager)
        response = self.client.get(reverse('manpower:allocation_list'), {'resource': str(self.resource.pk)})
        self.assertEqual(response.json()['count'], 1)
        response = self.client.get(reverse('manpower:allocation_list'), {'resource': str(self.specialist.pk)})
        self.assertEqual(response.json()['count'], 0)
