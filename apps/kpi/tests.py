"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for KPI trends, status, alerts, collectors,
             dashboard refresh and the KPI API.
-------------------------------------------------------------------------
"""
import json
from datetime import date, datetime, timedelta
from decimal import Decimal
from io import StringIO
from smtplib import SMTPException
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.core.cache import cache
from django.core.management import call_command
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.urls import reverse
from django.utils import timezone

from apps.core.exceptions import KpiCollectorException
from apps.core.models import Notification, NotificationCategory
from apps.kpi.models import (
    KpiMetric, KpiDataPoint, KpiDashboard, KpiAlert, ResourceUtilizationReport,
    TrendDirection, AggregationMethod, KpiStatus, AlertCondition, AlertSeverity,
    NotificationChannel,
)
from apps.kpi.services import KpiService
from apps.manpower.models import ManpowerResource, Project, ResourceAllocation, Timesheet, TimesheetStatus, AllocationStatus
from apps.users.models import Role, RoleCode


User = get_user_model()

# 2024-06-03 is a Monday
MONDAY = date(2024, 6, 3)
FRIDAY_NOON = timezone.make_aware(datetime(2024, 6, 7, 12, 0))


class KpiTestMixin:

    def setUp(self):
        cache.clear()
        self.senior_role = Role.objects.create(name='Senior Management', code=RoleCode.SENIOR_MANAGEMENT)
        self.director = User.objects.create_user(
            emirates_id='784-1975-0000021-1', email='director@test.ae', password='pass', first_name='Huda'
        )
        self.director.roles.add(self.senior_role)
        self.metric = KpiMetric.objects.create(
            code='overall-utilization',
            name='Overall Utilization',
            target=Decimal('85'),
            warning_threshold=Decimal('70'),
            critical_threshold=Decimal('50'),
        )

    def add_points(self, metric, *values):
        start = timezone.now() - timedelta(hours=len(values))
        for index, value in enumerate(values):
            KpiService.add_data_point(metric, value, timestamp=start + timedelta(hours=index))


class TrendAndStatusTests(KpiTestMixin, TestCase):

    def test_single_point_is_neutral(self):
        self.add_points(self.metric, 40)
        self.metric.refresh_from_db()
        self.assertEqual(self.metric.trend, TrendDirection.NEUTRAL)

    def test_trend_follows_recent_points(self):
        self.add_points(self.metric, 10, 12)
        self.metric.refresh_from_db()
        self.assertEqual(self.metric.trend, TrendDirection.UP)

        self.add_points(self.metric, 8)
        self.metric.refresh_from_db()
        self.assertEqual(self.metric.trend, TrendDirection.DOWN)

    def test_trend_uses_last_five_points(self):
        self.add_points(self.metric, 9, 1, 1, 1, 1, 5)
        self.metric.refresh_from_db()
        self.assertEqual(self.metric.trend, TrendDirection.UP)

    def test_status_higher_is_better(self):
        self.assertEqual(KpiService.get_status(self.metric, Decimal('50')), KpiStatus.CRITICAL)
        self.assertEqual(KpiService.get_status(self.metric, Decimal('60')), KpiStatus.WARNING)
        self.assertEqual(KpiService.get_status(self.metric, Decimal('70')), KpiStatus.WARNING)
        self.assertEqual(KpiService.get_status(self.metric, Decimal('70.5')), KpiStatus.OK)

    def test_status_lower_is_better(self):
        backlog = KpiMetric.objects.create(
            code='backlog', name='Backlog', higher_is_better=False,
            warning_threshold=Decimal('10'), critical_threshold=Decimal('20')
        )
        self.assertEqual(KpiService.get_status(backlog, 20), KpiStatus.CRITICAL)
        self.assertEqual(KpiService.get_status(backlog, 10), KpiStatus.WARNING)
        self.assertEqual(KpiService.get_status(backlog, 5), KpiStatus.OK)

    def test_status_without_thresholds(self):
        manual = KpiMetric.objects.create(code='manual', name='Manual')
        self.assertEqual(KpiService.get_status(manual, 0), KpiStatus.OK)

    def test_aggregation(self):
        self.assertIsNone(KpiService.aggregate(self.metric))
        self.add_points(self.metric, 10, 20, 30)

        expected = {
            AggregationMethod.SUM: Decimal('60'),
            AggregationMethod.AVERAGE: Decimal('20'),
            AggregationMethod.MIN: Decimal('10'),
            AggregationMethod.MAX: Decimal('30'),
            AggregationMethod.LAST: Decimal('30'),
        }
        for method, value in expected.items():
            self.metric.aggregation = method
            self.assertEqual(KpiService.aggregate(self.metric), value, method)

        self.metric.aggregation = AggregationMethod.SUM
        since = timezone.now() - timedelta(minutes=150)
        self.assertEqual(KpiService.aggregate(self.metric, since=since), Decimal('50'))


class AlertTests(KpiTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.alert = KpiAlert.objects.create(
            metric=self.metric,
            condition=AlertCondition.BELOW,
            threshold=Decimal('70'),
            message='Utilization below warning level.',
            severity=AlertSeverity.CRITICAL,
            notification_channels=[NotificationChannel.IN_APP, NotificationChannel.EMAIL, NotificationChannel.LOG],
        )
        self.alert.recipients.add(self.director)

    def test_trigger_and_resolve(self):
        with self.captureOnCommitCallbacks(execute=True):
            KpiService.add_data_point(self.metric, 60)
        self.alert.refresh_from_db()
        self.assertTrue(self.alert.is_triggered)
        self.assertEqual(list(KpiService.get_active_alerts()), [self.alert])

        notification = Notification.objects.get(recipient=self.director)
        self.assertEqual(notification.category, NotificationCategory.ALERT)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['director@test.ae'])

        # Still below: no repeated notice
        KpiService.add_data_point(self.metric, 55)
        self.assertEqual(Notification.objects.filter(recipient=self.director).count(), 1)

        KpiService.add_data_point(self.metric, 80)
        self.alert.refresh_from_db()
        self.assertFalse(self.alert.is_triggered)
        self.assertIsNotNone(self.alert.resolved_at)
        self.assertEqual(Notification.objects.filter(recipient=self.director).count(), 2)
        self.assertFalse(KpiService.get_active_alerts().exists())

    def test_retrigger_after_resolution(self):
        with self.captureOnCommitCallbacks(execute=True):
            self.add_points(self.metric, 60, 80, 65)
        self.alert.refresh_from_db()
        self.assertTrue(self.alert.is_triggered)
        self.assertIsNone(self.alert.resolved_at)
        self.assertEqual(len(mail.outbox), 3)

    def test_email_waits_for_commit(self):
        with self.captureOnCommitCallbacks() as callbacks:
            KpiService.add_data_point(self.metric, 60)

        self.alert.refresh_from_db()
        self.assertTrue(self.alert.is_triggered)
        self.assertEqual(len(mail.outbox), 0)
        self.assertEqual(len(callbacks), 1)

        callbacks[0]()
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, f"KPI Alert: {self.metric.name}")

    def test_inactive_alert_ignored(self):
        self.alert.is_active = False
        self.alert.save()
        KpiService.add_data_point(self.metric, 10)
        self.alert.refresh_from_db()
        self.assertIsNone(self.alert.triggered_at)

    def test_equal_and_above_conditions(self):
        equal = KpiAlert(metric=self.metric, condition=AlertCondition.EQUAL, threshold=Decimal('50.0000'))
        above = KpiAlert(metric=self.metric, condition=AlertCondition.ABOVE, threshold=Decimal('50'))
        self.assertTrue(KpiService.evaluate_alert(equal, 50))
        self.assertFalse(KpiService.evaluate_alert(equal, Decimal('50.0001')))
        self.assertTrue(KpiService.evaluate_alert(above, Decimal('50.0001')))
        self.assertFalse(KpiService.evaluate_alert(above, 50))
        self.assertFalse(KpiService.evaluate_alert(above, None))

    @override_settings(REPORT_DELIVERY_RETRIES=1)
    def test_email_failure_is_logged(self):
        with patch('apps.kpi.services.send_mail', side_effect=SMTPException('relay down')):
            with self.assertLogs('kpi', level='ERROR') as logs:
                with self.captureOnCommitCallbacks(execute=True):
                    KpiService.add_data_point(self.metric, 40)

        self.alert.refresh_from_db()
        self.assertTrue(self.alert.is_triggered)
        self.assertTrue(any('KPI alert delivery failed' in line for line in logs.output))
        self.assertEqual(Notification.objects.filter(recipient=self.director).count(), 1)


class CollectorTests(KpiTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.resource = ManpowerResource.objects.create(
            name='Layla Haddad', role='Accessibility Specialist', department='Operations'
        )
        self.project = Project.objects.create(code='PRJ-001', name='Ramp installation', start_date=MONDAY)

    def log_hours(self, hours, status=TimesheetStatus.APPROVED):
        for offset in range(5):
            Timesheet.objects.create(
                resource=self.resource, project=self.project, date=MONDAY + timedelta(days=offset),
                hours=Decimal(hours), status=status
            )

    def test_resource_utilization(self):
        self.log_hours('4')
        self.metric.source = 'resource_utilization'
        self.metric.source_params = {'window_days': 5, 'role': 'Accessibility Specialist'}
        self.metric.save()

        point = KpiService.refresh_metric(self.metric, FRIDAY_NOON)
        self.assertEqual(point.value, Decimal('50'))
        self.assertEqual(point.timestamp, FRIDAY_NOON)
        self.assertEqual(point.metadata, {'source': 'resource_utilization'})

    def test_allocation_efficiency(self):
        ResourceAllocation.objects.create(
            resource=self.resource, project=self.project, start_date=MONDAY, end_date=date(2024, 6, 7),
            allocation_percentage=100, status=AllocationStatus.ACTIVE
        )
        self.log_hours('6')
        self.metric.source = 'allocation_efficiency'
        self.metric.source_params = {'window_days': 5}
        self.metric.save()

        self.assertEqual(KpiService.refresh_metric(self.metric, FRIDAY_NOON).value, Decimal('75'))

    def test_timesheet_backlog(self):
        self.log_hours('8', status=TimesheetStatus.SUBMITTED)
        backlog = KpiMetric.objects.create(
            code='timesheet-backlog', name='Timesheet Backlog', source='timesheet_backlog', higher_is_better=False
        )
        self.assertEqual(KpiService.refresh_metric(backlog).value, Decimal('5'))

    def test_manual_and_unknown_sources(self):
        self.assertIsNone(KpiService.refresh_metric(self.metric))

        self.metric.source = 'weather'
        with self.assertRaises(KpiCollectorException):
            KpiService.refresh_metric(self.metric)
        self.assertFalse(self.metric.data_points.exists())

    def test_utilization_snapshot(self):
        self.log_hours('4')
        report = KpiService.generate_resource_utilization_report(
            MONDAY, date(2024, 6, 7), user=self.director
        )
        self.assertEqual(report.name, 'Resource Utilization 2024-06-03 to 2024-06-07')
        self.assertEqual(report.average_utilization, Decimal('50.00'))
        self.assertEqual(report.resources_count, 1)
        self.assertEqual(report.payload['resources'][0]['total_hours'], 20.0)


class DashboardRefreshTests(KpiTestMixin, TestCase):

    def setUp(self):
        super().setUp()
        self.backlog = KpiMetric.objects.create(
            code='timesheet-backlog', name='Timesheet Backlog', source='timesheet_backlog'
        )
        self.broken = KpiMetric.objects.create(code='broken', name='Broken', source='missing-collector')
        self.dashboard = KpiDashboard.objects.create(code='operations', name='Operations')
        self.dashboard.metrics.add(self.metric, self.backlog, self.broken)

    def test_failing_metric_does_not_stop_refresh(self):
        with self.assertLogs('kpi', level='ERROR'):
            result = KpiService.refresh_dashboard(self.dashboard)

        self.assertEqual(result['refreshed'], 1)
        self.assertEqual([e['metric'] for e in result['errors']], ['broken'])
        self.assertEqual(self.backlog.data_points.count(), 1)
        self.dashboard.refresh_from_db()
        self.assertIsNotNone(self.dashboard.last_refreshed_at)

    def test_due_dashboards(self):
        now = timezone.now()
        self.assertTrue(KpiService.is_due(self.dashboard, now))

        self.dashboard.last_refreshed_at = now - timedelta(minutes=30)
        self.assertFalse(KpiService.is_due(self.dashboard, now))
        self.assertTrue(KpiService.is_due(self.dashboard, now + timedelta(minutes=30)))

        self.dashboard.refresh_interval = 0
        self.dashboard.last_refreshed_at = None
        self.assertFalse(KpiService.is_due(self.dashboard, now))

    def test_refresh_due_dashboards(self):
        KpiDashboard.objects.create(code='manual', name='Manual', refresh_interval=0)
        with self.assertLogs('kpi', level='ERROR'):
            results = KpiService.refresh_due_dashboards()
        self.assertEqual([r['dashboard'] for r in results], ['operations'])

        self.assertEqual(KpiService.refresh_due_dashboards(), [])

    def test_dashboard_data_is_cached(self):
        KpiService.add_data_point(self.metric, 60)
        data = KpiService.get_dashboard_data(self.dashboard)
        overall = next(m for m in data['metrics'] if m['code'] == 'overall-utilization')
        self.assertEqual(overall['value'], Decimal('60'))
        self.assertEqual(overall['status'], KpiStatus.WARNING)

        KpiDataPoint.objects.create(metric=self.metric, value=Decimal('90'))
        cached = KpiService.get_dashboard_data(self.dashboard)
        overall = next(m for m in cached['metrics'] if m['code'] == 'overall-utilization')
        self.assertEqual(overall['value'], Decimal('60'))

        with self.assertLogs('kpi', level='ERROR'):
            fresh = KpiService.get_dashboard_data(self.dashboard, force_refresh=True)
        overall = next(m for m in fresh['metrics'] if m['code'] == 'overall-utilization')
        self.assertEqual(overall['value'], Decimal('90'))
        self.assertEqual(overall['status'], KpiStatus.OK)


class KpiCommandTests(TestCase):

    def test_seed_is_idempotent(self):
        call_command('seed_kpi', stdout=StringIO())
        call_command('seed_kpi', stdout=StringIO())

        dashboard = KpiDashboard.objects.get(code='resource-utilization')
        self.assertEqual(dashboard.refresh_interval, 3600)
        self.assertEqual(dashboard.metrics.count(), 4)
        contractor = KpiMetric.objects.get(code='resource-senior-contractor-utilization')
        self.assertEqual(contractor.target, Decimal('90'))
        self.assertEqual(contractor.warning_threshold, Decimal('75'))
        self.assertEqual(contractor.critical_threshold, Decimal('60'))
        self.assertEqual(contractor.source_params, {'role': 'Senior Contractor'})

    def test_refresh_once(self):
        call_command('seed_kpi', stdout=StringIO())
        out = StringIO()
        call_command('refresh_kpi_dashboards', '--once', stdout=out)

        dashboard = KpiDashboard.objects.get(code='resource-utilization')
        self.assertIsNotNone(dashboard.last_refreshed_at)
        self.assertIn('4 metrics refreshed', out.getvalue())
        self.assertEqual(KpiDataPoint.objects.count(), 4)

    def test_polling_survives_failed_cycle(self):
        module = 'apps.kpi.management.commands.refresh_kpi_dashboards'
        out, err = StringIO(), StringIO()
        with patch(f'{module}.KpiService.refresh_due_dashboards',
                   side_effect=[DatabaseError('database is locked'), []]) as refresh, \
                patch(f'{module}.time.sleep', side_effect=[None, KeyboardInterrupt]) as sleep:
            with self.assertLogs(module, level='ERROR') as logs:
                call_command('refresh_kpi_dashboards', '--interval=5', stdout=out, stderr=err)

        self.assertEqual(refresh.call_count, 2)
        self.assertEqual(sleep.call_count, 2)
        sleep.assert_called_with(5)
        self.assertTrue(any('refresh cycle failed' in line for line in logs.output))
        self.assertIsInstance(logs.records[0].exc_info[1], DatabaseError)
        self.assertIn('Refresh cycle failed', err.getvalue())
        self.assertIn('No dashboards due for refresh.', out.getvalue())
        self.assertIn('Stopped KPI dashboard refresh.', out.getvalue())


class KpiApiTests(KpiTestMixin, TestCase):

    def post_json(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type='application/json')

    def test_requires_kpi_role(self):
        url = reverse('kpi:metric_list')
        self.assertEqual(self.client.get(url).status_code, 401)

        clerk = User.objects.create_user(
            emirates_id='784-1995-0000022-2', email='clerk@test.ae', password='pass', first_name='Sara'
        )
        self.client.force_login(clerk)
        response = self.client.get(url)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error_code'], 'ERR_UNAUTHORIZED_ROLE')

    def test_create_metric(self):
        self.client.force_login(self.director)
        response = self.post_json(reverse('kpi:metric_list'), {
            'code': 'open-cases', 'name': 'Open Cases', 'unit': 'cases', 'higher_is_better': False,
            'warning_threshold': 10, 'critical_threshold': 20,
        })
        self.assertEqual(response.status_code, 201)
        metric = KpiMetric.objects.get(code='open-cases')
        self.assertFalse(metric.higher_is_better)
        self.assertEqual(metric.aggregation, AggregationMethod.LAST)
        self.assertEqual(metric.source_params, {})
        self.assertEqual(metric.created_by, self.director)

        response = self.post_json(reverse('kpi:metric_list'), {'code': 'rain', 'name': 'Rain', 'source': 'weather'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('source', response.json()['details'])

    def test_data_points_and_detail(self):
        self.client.force_login(self.director)
        url = reverse('kpi:data_point_create', args=[self.metric.pk])
        self.assertEqual(self.post_json(url, {'value': 60}).status_code, 201)
        response = self.post_json(url, {'value': 72.5, 'metadata': {'note': 'manual'}})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['trend'], TrendDirection.UP)
        self.assertEqual(response.json()['status'], KpiStatus.OK)

        self.assertEqual(self.post_json(url, {'value': 'high'}).status_code, 400)

        response = self.client.get(reverse('kpi:metric_detail', args=[self.metric.pk]))
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([Decimal(p['value']) for p in body['data_points']], [Decimal('60'), Decimal('72.5')])
        self.assertEqual(Decimal(body['value']), Decimal('72.5'))

    def test_alerts(self):
        self.client.force_login(self.director)
        response = self.post_json(reverse('kpi:alert_list'), {
            'metric': 'overall-utilization', 'condition': 'BELOW', 'threshold': 70,
            'message': 'Utilization is low.', 'notification_channels': ['IN_APP'],
            'recipients': [self.director.pk],
        })
        self.assertEqual(response.status_code, 201)
        alert = KpiAlert.objects.get(metric=self.metric)
        self.assertEqual(alert.severity, AlertSeverity.WARNING)
        self.assertTrue(alert.is_active)
        self.assertEqual(alert.created_by, self.director)

        response = self.post_json(reverse('kpi:alert_list'), {
            'metric': 'overall-utilization', 'condition': 'BELOW', 'threshold': 70,
            'message': 'Bad channel', 'notification_channels': ['SMS'],
        })
        self.assertEqual(response.status_code, 400)

        self.post_json(reverse('kpi:data_point_create', args=[self.metric.pk]), {'value': 40})
        response = self.client.get(reverse('kpi:active_alerts'))
        self.assertEqual([a['id'] for a in response.json()['results']], [alert.pk])

    def test_dashboard_detail(self):
        dashboard = KpiDashboard.objects.create(code='board', name='Board')
        dashboard.metrics.add(self.metric)
        self.client.force_login(self.director)

        response = self.client.get(reverse('kpi:dashboard_detail', args=[dashboard.pk]), {'refresh': '1'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['metrics'][0]['code'], 'overall-utilization')
        self.assertEqual(self.client.get(reverse('kpi:dashboard_detail', args=[9999])).status_code, 404)

    def test_generate_utilization_report(self):
        self.client.force_login(self.director)
        url = reverse('kpi:utilization_report_list')
        response = self.post_json(url, {'start_date': '2024-06-03', 'end_date': '2024-06-07'})
        self.assertEqual(response.status_code, 201)
        self.assertIn('payload', response.json())
        self.assertEqual(ResourceUtilizationReport.objects.count(), 1)

        response = self.post_json(url, {'start_date': '2024-06-07', 'end_date': '2024-06-03'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(self.client.get(url).json()['count'], 1)
