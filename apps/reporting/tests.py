"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for the reporting engine: schedule calculation,
             report generation, data builders, scheduled delivery, the
             reporting API and management commands.
-------------------------------------------------------------------------
"""
import io
import json
import shutil
import tempfile
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from smtplib import SMTPException
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from apps.beneficiaries.models import Beneficiary
from apps.clients.models import ClientType
from apps.core.exceptions import (
    InvalidPayloadException, ReportGenerationException, TemplateNotFoundException,
)
from apps.core.models import AuditLog
from apps.manpower.models import ManpowerResource, Project, Timesheet, TimesheetStatus
from apps.reporting.builders import BUILDERS
from apps.reporting.models import (
    ReportTemplate, ReportSchedule, GeneratedReport, ReportFormat, ScheduleFrequency,
)
from apps.reporting.services import ReportingEngine
from apps.users.models import Role, RoleCode


User = get_user_model()

# 2024-06-07 is a Friday
FRIDAY_NOON = timezone.make_aware(datetime(2024, 6, 7, 12, 0))


def local(*args):
    return timezone.make_aware(datetime(*args))


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


class ScheduleCalculationTests(TestCase):

    def schedule(self, frequency, hour=8, **kwargs):
        return ReportSchedule(frequency=frequency, time_of_day=time(hour, 0), **kwargs)

    def next_run(self, schedule, now=FRIDAY_NOON):
        return ReportingEngine.calculate_next_run(schedule, now)

    def test_daily(self):
        self.assertEqual(self.next_run(self.schedule(ScheduleFrequency.DAILY, 18)), local(2024, 6, 7, 18, 0))
        self.assertEqual(self.next_run(self.schedule(ScheduleFrequency.DAILY, 8)), local(2024, 6, 8, 8, 0))

    def test_weekly_moves_to_day_of_week(self):
        monday = self.schedule(ScheduleFrequency.WEEKLY, day_of_week=0)
        self.assertEqual(self.next_run(monday), local(2024, 6, 10, 8, 0))

        friday_evening = self.schedule(ScheduleFrequency.WEEKLY, 18, day_of_week=4)
        self.assertEqual(self.next_run(friday_evening), local(2024, 6, 7, 18, 0))

        friday_morning = self.schedule(ScheduleFrequency.WEEKLY, 8, day_of_week=4)
        self.assertEqual(self.next_run(friday_morning), local(2024, 6, 14, 8, 0))

    def test_monthly(self):
        later = self.schedule(ScheduleFrequency.MONTHLY, day_of_month=20)
        self.assertEqual(self.next_run(later), local(2024, 6, 20, 8, 0))

        passed = self.schedule(ScheduleFrequency.MONTHLY, day_of_month=5)
        self.assertEqual(self.next_run(passed), local(2024, 7, 5, 8, 0))

    def test_monthly_day_is_clamped_to_month_length(self):
        end_of_month = self.schedule(ScheduleFrequency.MONTHLY, day_of_month=31)
        self.assertEqual(self.next_run(end_of_month), local(2024, 6, 30, 8, 0))
        self.assertEqual(
            self.next_run(end_of_month, local(2024, 2, 10, 12, 0)), local(2024, 2, 29, 8, 0)
        )

    def test_quarterly_moves_to_next_quarter_start(self):
        quarterly = self.schedule(ScheduleFrequency.QUARTERLY, day_of_month=15)
        self.assertEqual(self.next_run(quarterly), local(2024, 7, 15, 8, 0))
        self.assertEqual(self.next_run(quarterly, local(2024, 2, 20, 12, 0)), local(2024, 4, 15, 8, 0))

    def test_next_run_is_always_in_the_future(self):
        for frequency, extra in [
            (ScheduleFrequency.DAILY, {}),
            (ScheduleFrequency.WEEKLY, {'day_of_week': 4}),
            (ScheduleFrequency.MONTHLY, {'day_of_month': 7}),
            (ScheduleFrequency.QUARTERLY, {'day_of_month': 7}),
        ]:
            with self.subTest(frequency=frequency):
                self.assertGreater(self.next_run(self.schedule(frequency, 12, **extra)), FRIDAY_NOON)


class ReportingTestMixin:

    def setUp(self):
        self.media_root = tempfile.mkdtemp()
        self.media_override = override_settings(MEDIA_ROOT=self.media_root)
        self.media_override.enable()

        self.fdf = ClientType.objects.create(code='FDF', type_id=1, name_en='Family Development Foundation')
        self.adha = ClientType.objects.create(code='ADHA', type_id=2, name_en='ADHA')
        self.template = ReportTemplate.objects.create(
            code='beneficiary-status',
            name='Beneficiary Status Report',
            data_source='beneficiary-status',
            default_format=ReportFormat.CSV,
            parameters=[
                {'name': 'status', 'type': 'select', 'required': False,
                 'options': ['REGISTERED', 'APPROVED']},
                {'name': 'start_date', 'type': 'date', 'required': False},
            ],
            sections=[{'title': 'Overview', 'content': 'Case status summary.', 'order': 1}],
        )
        make_beneficiary(self.fdf, '784-1950-0000001-1')
        make_beneficiary(self.adha, '784-1940-0000002-2', full_name_en='Salama Al Ketbi')

    def tearDown(self):
        self.media_override.disable()
        shutil.rmtree(self.media_root, ignore_errors=True)

    def read(self, report):
        with report.file.open('rb') as handle:
            return handle.read()


class TemplateLookupTests(ReportingTestMixin, TestCase):

    def test_client_specific_templates_include_generic(self):
        fdf_only = ReportTemplate.objects.create(
            code='fdf-social-impact', name='FDF Social Impact', data_source='fdf-social-impact',
            client_type=self.fdf
        )
        ReportTemplate.objects.create(
            code='adha-property', name='ADHA Property', data_source='adha-property', client_type=self.adha
        )
        codes = set(ReportingEngine.get_client_specific_templates(self.fdf).values_list('code', flat=True))
        self.assertEqual(codes, {self.template.code, fdf_only.code})

    def test_get_template(self):
        self.assertEqual(ReportingEngine.get_template('beneficiary-status'), self.template)
        with self.assertRaises(TemplateNotFoundException):
            ReportingEngine.get_template('missing')

        self.template.is_active = False
        self.template.save()
        with self.assertRaises(TemplateNotFoundException):
            ReportingEngine.get_template('beneficiary-status')
        self.assertFalse(ReportingEngine.get_available_templates().exists())


class GenerationTests(ReportingTestMixin, TestCase):

    def test_csv_report(self):
        report = ReportingEngine.generate_report(self.template)

        self.assertEqual(report.format, ReportFormat.CSV)
        self.assertEqual(report.row_count, 2)
        self.assertEqual(report.filename, f"beneficiary-status-report-{timezone.localdate():%Y-%m-%d}.csv")
        content = self.read(report).decode('utf-8')
        self.assertTrue(content.startswith('\ufeffCode,Name,Client Type'))
        self.assertIn('Salama Al Ketbi', content)

    def test_client_type_scopes_rows(self):
        report = ReportingEngine.generate_report(self.template, client_type=self.fdf)
        self.assertEqual(report.row_count, 1)
        self.assertNotIn('Salama', self.read(report).decode('utf-8'))

    def test_excel_report(self):
        from openpyxl import load_workbook

        report = ReportingEngine.generate_report(self.template, fmt=ReportFormat.EXCEL)
        self.assertTrue(report.filename.endswith('.xlsx'))
        sheet = load_workbook(io.BytesIO(self.read(report))).active
        self.assertEqual(sheet['A1'].value, 'Code')
        self.assertEqual(sheet.max_row, 3)

    def test_html_report(self):
        report = ReportingEngine.generate_report(self.template, fmt=ReportFormat.HTML)
        html = self.read(report).decode('utf-8')
        self.assertIn('<h1>Beneficiary Status Report</h1>', html)
        self.assertIn('Overview', html)
        self.assertIn('Salama Al Ketbi', html)

    def test_pdf_report_renders_the_html(self):
        with patch('apps.reporting.services.render_pdf', return_value=b'%PDF-1.7 test') as render:
            report = ReportingEngine.generate_report(self.template, fmt=ReportFormat.PDF)

        self.assertTrue(report.filename.endswith('.pdf'))
        self.assertEqual(self.read(report), b'%PDF-1.7 test')
        self.assertIn('Beneficiary Status Report', render.call_args[0][0])

    def test_parameters_are_validated(self):
        with self.assertRaises(InvalidPayloadException):
            ReportingEngine.generate_report(self.template, {'status': 'LOST'})
        with self.assertRaises(InvalidPayloadException):
            ReportingEngine.generate_report(self.template, {'start_date': 'last week'})

        report = ReportingEngine.generate_report(self.template, {'status': 'APPROVED'})
        self.assertEqual(report.row_count, 0)
        self.assertEqual(report.parameters, {'status': 'APPROVED'})

    def test_required_parameter(self):
        self.template.parameters = [{'name': 'emirate', 'type': 'string', 'required': True}]
        self.template.save()
        with self.assertRaises(InvalidPayloadException):
            ReportingEngine.generate_report(self.template, {})

    def test_unknown_format_or_data_source(self):
        with self.assertRaises(ReportGenerationException):
            ReportingEngine.generate_report(self.template, fmt='DOCX')

        broken = ReportTemplate.objects.create(code='broken', name='Broken', data_source='nowhere')
        with self.assertRaises(ReportGenerationException):
            ReportingEngine.generate_report(broken)
        self.assertFalse(GeneratedReport.objects.exists())


class BuilderTests(TestCase):

    def test_client_builders_without_client_type_are_empty(self):
        for code in ('fdf-social-impact', 'adha-property', 'cash-client-value'):
            with self.subTest(code=code):
                columns, rows = BUILDERS[code]({}, None)
                self.assertTrue(columns)
                self.assertEqual(rows, [])

    def test_cash_client_value(self):
        cash = ClientType.objects.create(code='CASH', type_id=3, name_en='Cash')
        resource = ManpowerResource.objects.create(
            name='Omar Khalil', role='Senior Contractor', department='Operations', hourly_rate=Decimal('50')
        )
        project = Project.objects.create(
            code='PRJ-100', name='Bathroom grab bars', start_date=date(2024, 6, 3),
            estimated_cost=Decimal('1000.00'), client_type=cash
        )
        Timesheet.objects.create(
            resource=resource, project=project, date=date(2024, 6, 3), hours=Decimal('4'),
            status=TimesheetStatus.APPROVED
        )
        Timesheet.objects.create(
            resource=resource, project=project, date=date(2024, 6, 4), hours=Decimal('3'),
            status=TimesheetStatus.SUBMITTED
        )

        columns, rows = BUILDERS['cash-client-value']({}, None)
        self.assertEqual(len(rows), 1)
        row = dict(zip(columns, rows[0]))
        self.assertEqual(row['Approved Hours'], Decimal('4'))
        self.assertEqual(row['Labour Cost (AED)'], Decimal('200.00'))
        self.assertEqual(row['Variance (AED)'], Decimal('800.00'))


class ScheduleServiceTests(ReportingTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.user = User.objects.create_user(
            emirates_id='784-1980-0000031-1', email='pm@test.ae', password='pass', first_name='Mariam'
        )

    def make_schedule(self, **kwargs):
        data = {
            'template': self.template,
            'frequency': ScheduleFrequency.DAILY,
            'time_of_day': time(7, 0),
            'format': ReportFormat.CSV,
            'recipients': ['ops@test.ae'],
        }
        data.update(kwargs)
        return ReportingEngine.schedule_report(self.user, ReportSchedule(**data))

    def test_schedule_report_sets_next_run(self):
        schedule = self.make_schedule()
        self.assertIsNotNone(schedule.next_run)
        self.assertGreater(schedule.next_run, timezone.now())
        self.assertEqual(schedule.created_by, self.user)
        self.assertTrue(AuditLog.objects.filter(entity_id=str(schedule.pk)).exists())

    def test_update_schedule_recomputes_next_run_on_timing_change(self):
        schedule = self.make_schedule()
        original = schedule.next_run

        ReportingEngine.update_schedule(self.user, schedule, name='Morning digest')
        self.assertEqual(schedule.next_run, original)

        ReportingEngine.update_schedule(
            self.user, schedule, frequency=ScheduleFrequency.WEEKLY, day_of_week=0
        )
        self.assertEqual(timezone.localtime(schedule.next_run).weekday(), 0)

        ReportingEngine.update_schedule(self.user, schedule, is_active=False)
        self.assertIsNone(schedule.next_run)

    def test_delete_schedule(self):
        schedule = self.make_schedule()
        pk = schedule.pk
        ReportingEngine.delete_schedule(self.user, schedule)
        self.assertFalse(ReportSchedule.objects.filter(pk=pk).exists())

    def test_run_due_schedules_generates_and_emails(self):
        schedule = self.make_schedule()
        now = timezone.now()
        ReportSchedule.objects.filter(pk=schedule.pk).update(next_run=now - timedelta(minutes=1))
        self.make_schedule(recipients=[])

        results = ReportingEngine.run_due_schedules(now)

        self.assertEqual(len(results), 1)
        self.assertTrue(results[0]['delivered'])
        report = GeneratedReport.objects.get(schedule=schedule)
        self.assertEqual(report.row_count, 2)
        self.assertIsNone(report.generated_by)

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['ops@test.ae'])
        self.assertEqual(mail.outbox[0].attachments[0][0], report.filename)

        schedule.refresh_from_db()
        self.assertEqual(schedule.last_run, now)
        self.assertGreater(schedule.next_run, now)
        self.assertEqual(ReportingEngine.run_due_schedules(now), [])

    @override_settings(REPORT_DELIVERY_RETRIES=1)
    def test_delivery_failure_is_logged(self):
        schedule = self.make_schedule()
        now = timezone.now()
        ReportSchedule.objects.filter(pk=schedule.pk).update(next_run=now - timedelta(minutes=1))

        with patch('django.core.mail.EmailMessage.send', side_effect=SMTPException('down')):
            with self.assertLogs('reporting', level='ERROR'):
                results = ReportingEngine.run_due_schedules(now)

        self.assertFalse(results[0]['delivered'])
        self.assertEqual(results[0]['error'], '')
        self.assertTrue(GeneratedReport.objects.filter(schedule=schedule).exists())

    def test_generation_failure_still_advances_schedule(self):
        broken = ReportTemplate.objects.create(code='broken', name='Broken', data_source='nowhere')
        schedule = self.make_schedule(template=broken)
        now = timezone.now()
        ReportSchedule.objects.filter(pk=schedule.pk).update(next_run=now - timedelta(minutes=1))

        with self.assertLogs('reporting', level='ERROR'):
            results = ReportingEngine.run_due_schedules(now)

        self.assertIn('nowhere', results[0]['error'])
        schedule.refresh_from_db()
        self.assertEqual(schedule.last_run, now)
        self.assertGreater(schedule.next_run, now)


class ReportingApiTests(ReportingTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        finance_role = Role.objects.create(name='Finance Officer', code=RoleCode.FINANCE_OFFICER)
        self.officer = User.objects.create_user(
            emirates_id='784-1982-0000041-1', email='finance@test.ae', password='pass', first_name='Noura'
        )
        self.officer.roles.add(finance_role)
        self.fdf_officer = User.objects.create_user(
            emirates_id='784-1983-0000042-2', email='fdf@test.ae', password='pass',
            first_name='Khalid', client_type=self.fdf
        )
        self.fdf_officer.roles.add(finance_role)
        ReportTemplate.objects.create(
            code='adha-property', name='ADHA Property', data_source='adha-property', client_type=self.adha
        )

    def post_json(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type='application/json')

    def patch_json(self, url, data):
        return self.client.patch(url, data=json.dumps(data), content_type='application/json')

    def test_requires_report_role(self):
        url = reverse('reporting:template_list')
        self.assertEqual(self.client.get(url).status_code, 401)

        clerk = User.objects.create_user(
            emirates_id='784-1995-0000043-3', email='clerk@test.ae', password='pass', first_name='Sara'
        )
        self.client.force_login(clerk)
        self.assertEqual(self.client.get(url).status_code, 403)

    def test_template_list_is_scoped(self):
        self.client.force_login(self.officer)
        url = reverse('reporting:template_list')
        codes = {t['code'] for t in self.client.get(url).json()['results']}
        self.assertEqual(codes, {'beneficiary-status', 'adha-property'})

        codes = {t['code'] for t in self.client.get(url, {'client_type': 'FDF'}).json()['results']}
        self.assertEqual(codes, {'beneficiary-status'})

        self.client.force_login(self.fdf_officer)
        codes = {t['code'] for t in self.client.get(url).json()['results']}
        self.assertEqual(codes, {'beneficiary-status'})
        self.assertEqual(
            self.client.get(reverse('reporting:template_detail', args=['adha-property'])).status_code, 404
        )

    def test_create_and_update_template(self):
        self.client.force_login(self.officer)
        response = self.post_json(reverse('reporting:template_list'), {
            'code': 'kpi-summary', 'name': 'KPI Summary', 'data_source': 'kpi-summary',
        })
        self.assertEqual(response.status_code, 201)
        template = ReportTemplate.objects.get(code='kpi-summary')
        self.assertEqual(template.default_format, ReportFormat.PDF)
        self.assertEqual(template.parameters, [])
        self.assertEqual(template.version, 1)
        self.assertEqual(template.author, 'Noura')

        response = self.post_json(reverse('reporting:template_list'), {
            'code': 'weather', 'name': 'Weather', 'data_source': 'weather',
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn('data_source', response.json()['details'])

        url = reverse('reporting:template_detail', args=['kpi-summary'])
        response = self.patch_json(url, {'default_format': 'EXCEL'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['version'], 2)

        response = self.patch_json(url, {})
        self.assertEqual(response.json()['version'], 2)

    def test_generate_download(self):
        self.client.force_login(self.officer)
        url = reverse('reporting:generate', args=['beneficiary-status'])
        response = self.post_json(url, {'format': 'CSV'})

        self.assertEqual(response.status_code, 200)
        self.assertIn('attachment;', response['Content-Disposition'])
        self.assertTrue(response['Content-Type'].startswith('text/csv'))
        report = GeneratedReport.objects.get()
        self.assertEqual(report.generated_by, self.officer)

        response = self.post_json(url, {'parameters': {'status': 'LOST'}})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error_code'], 'ERR_INVALID_PAYLOAD')

        response = self.post_json(reverse('reporting:generate', args=['missing']), {})
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error_code'], 'ERR_TEMPLATE_NOT_FOUND')

    def test_client_user_report_is_scoped(self):
        self.client.force_login(self.fdf_officer)
        self.post_json(reverse('reporting:generate', args=['beneficiary-status']), {'format': 'CSV'})
        self.assertEqual(GeneratedReport.objects.get().row_count, 1)

    def test_schedules(self):
        self.client.force_login(self.officer)
        url = reverse('reporting:schedule_list')

        response = self.post_json(url, {
            'template': 'beneficiary-status', 'frequency': 'WEEKLY', 'time_of_day': '07:00',
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn('day_of_week', response.json()['details'])

        response = self.post_json(url, {
            'template': 'beneficiary-status', 'frequency': 'DAILY', 'time_of_day': '07:00',
            'recipients': ['not-an-email'],
        })
        self.assertEqual(response.status_code, 400)
        self.assertIn('recipients', response.json()['details'])

        response = self.post_json(url, {
            'template': 'beneficiary-status', 'frequency': 'WEEKLY', 'time_of_day': '07:00',
            'day_of_week': 0, 'format': 'EXCEL', 'recipients': ['ops@test.ae'],
        })
        self.assertEqual(response.status_code, 201)
        schedule = ReportSchedule.objects.get()
        self.assertEqual(timezone.localtime(schedule.next_run).weekday(), 0)
        self.assertEqual(schedule.parameters, {})

        detail = reverse('reporting:schedule_detail', args=[schedule.pk])
        response = self.patch_json(detail, {'frequency': 'DAILY', 'time_of_day': '23:30'})
        self.assertEqual(response.status_code, 200)
        schedule.refresh_from_db()
        self.assertEqual(timezone.localtime(schedule.next_run).time(), time(23, 30))

        self.assertEqual(self.client.get(url).json()['count'], 1)
        self.assertEqual(self.client.delete(detail).status_code, 204)
        self.assertFalse(ReportSchedule.objects.exists())

    def test_generated_history_and_download(self):
        report = ReportingEngine.generate_report(self.template, user=self.officer)
        self.client.force_login(self.officer)

        response = self.client.get(reverse('reporting:generated_list'), {'template': 'beneficiary-status'})
        self.assertEqual(response.json()['count'], 1)
        self.assertEqual(response.json()['results'][0]['filename'], report.filename)

        response = self.client.get(reverse('reporting:generated_list'), {'schedule': 'weekly'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['details']['field'], 'schedule')

        response = self.client.get(reverse('reporting:generated_download', args=[report.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, self.read(report))


class ReportingCommandTests(TestCase):

    def test_seed_report_templates(self):
        ClientType.objects.create(code='FDF', type_id=1, name_en='FDF')
        out = io.StringIO()
        call_command('seed_report_templates', stdout=out)

        self.assertEqual(ReportTemplate.objects.count(), 5)
        self.assertIn('Skipped adha-property', out.getvalue())
        self.assertEqual(ReportTemplate.objects.get(code='fdf-social-impact').client_type.code, 'FDF')

        ClientType.objects.create(code='ADHA', type_id=2, name_en='ADHA')
        ClientType.objects.create(code='CASH', type_id=3, name_en='Cash')
        call_command('seed_report_templates', stdout=io.StringIO())
        self.assertEqual(ReportTemplate.objects.count(), 7)

    def test_run_scheduled_reports_once(self):
        out = io.StringIO()
        call_command('run_scheduled_reports', '--once', stdout=out)
        self.assertIn('No report schedules due.', out.getvalue())
