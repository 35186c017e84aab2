"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for the core module - notification and audit
             services, shared helpers, API plumbing and cleanup command.
-------------------------------------------------------------------------
"""
import io
from datetime import date, timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.core.management import call_command
from django.test import TestCase, RequestFactory
from django.urls import reverse
from django.utils import timezone

from apps.clients.models import ClientType
from apps.core.api import paginate, parse_date_param, parse_decimal_param, parse_int_param
from apps.core.exceptions import InvalidPayloadException, RetryExhaustedException
from apps.core.middleware import ClientContextMiddleware
from apps.core.models import (
    AuditAction, AuditLog, Notification, NotificationCategory, NotificationPriority,
)
from apps.core.services import AuditService, NotificationService
from apps.core.utils import calculate_age, next_sequence_code, retry_with_backoff
from apps.users.models import Role, RoleCode


User = get_user_model()


class NotificationServiceTests(TestCase):
    """Tests for NotificationService class."""

    def setUp(self):
        """Set up test data."""
        self.case_worker_role = Role.objects.create(
            name="Case Worker",
            code=RoleCode.CASE_WORKER,
            description="Test Case Worker"
        )
        self.chair_role = Role.objects.create(
            name="Committee Chair",
            code=RoleCode.COMMITTEE_CHAIR,
            description="Test Chair"
        )

        self.case_worker = User.objects.create_user(
            emirates_id='784-1980-1234567-1',
            email='caseworker@test.ae',
            first_name='Test',
            last_name='Caseworker'
        )
        self.case_worker.roles.add(self.case_worker_role)

        self.chair = User.objects.create_user(
            emirates_id='784-1975-7654321-2',
            email='chair@test.ae',
            first_name='Test',
            last_name='Chair'
        )
        self.chair.roles.add(self.chair_role)

        self.assessor = User.objects.create_user(
            emirates_id='784-1990-1112223-3',
            email='assessor@test.ae',
            first_name='Test',
            last_name='Assessor'
        )

    def test_send_notification_creates_notification(self):
        """Test that send_notification creates a notification."""
        notification = NotificationService.send_notification(
            recipient=self.case_worker,
            title="Submission Approved",
            message="The committee approved the assessment submission.",
            link="/api/committees/submissions/1/",
            category=NotificationCategory.WORKFLOW,
            icon='bi-check2-circle'
        )

        self.assertIsNotNone(notification.pk)
        self.assertEqual(notification.recipient, self.case_worker)
        self.assertEqual(notification.title, "Submission Approved")
        self.assertEqual(notification.link, "/api/committees/submissions/1/")
        self.assertEqual(notification.icon, 'bi-check2-circle')
        self.assertFalse(notification.is_read)

    def test_send_notification_defaults(self):
        """Test that send_notification uses default values."""
        notification = NotificationService.send_notification(
            recipient=self.case_worker,
            title="Simple Notification",
            message="Simple message"
        )

        self.assertEqual(notification.link, '')
        self.assertEqual(notification.category, NotificationCategory.WORKFLOW)
        self.assertEqual(notification.priority, NotificationPriority.MEDIUM)
        self.assertEqual(notification.icon, 'bi-bell')

    def test_long_title_is_truncated(self):
        notification = NotificationService.send_notification(self.case_worker, 'x' * 250, 'message')
        self.assertEqual(len(notification.title), 200)

    def test_send_bulk_notification(self):
        """Test sending notifications to multiple recipients."""
        notifications = NotificationService.send_bulk_notification(
            recipients=[self.case_worker, self.chair, self.assessor],
            title="Meeting Scheduled",
            message="A committee meeting has been scheduled.",
            category=NotificationCategory.SYSTEM,
            icon='bi-calendar-event'
        )

        self.assertEqual(len(notifications), 3)
        self.assertEqual({n.recipient for n in notifications}, {self.case_worker, self.chair, self.assessor})
        for notification in notifications:
            self.assertEqual(notification.category, NotificationCategory.SYSTEM)

    def test_send_bulk_notification_skips_duplicates(self):
        notifications = NotificationService.send_bulk_notification(
            recipients=[self.chair, self.chair, self.case_worker],
            title="Vote Requested",
            message="Please cast your vote."
        )
        self.assertEqual(len(notifications), 2)
        self.assertEqual(Notification.objects.filter(recipient=self.chair).count(), 1)

    def test_get_unread_count(self):
        """Test getting unread notification count."""
        NotificationService.send_notification(self.case_worker, "Notification 1", "Message 1")
        NotificationService.send_notification(self.case_worker, "Notification 2", "Message 2")
        NotificationService.send_notification(self.case_worker, "Notification 3", "Message 3").mark_as_read()

        self.assertEqual(NotificationService.get_unread_count(self.case_worker), 2)
        self.assertEqual(NotificationService.get_unread_count(self.chair), 0)

    def test_get_recent_notifications(self):
        """Test retrieving recent notifications."""
        for i in range(15):
            NotificationService.send_notification(self.case_worker, f"Notification {i + 1}", f"Message {i + 1}")

        recent = list(NotificationService.get_recent_notifications(self.case_worker))
        self.assertEqual(len(recent), 10)
        self.assertEqual(len({n.title for n in recent}), 10)

        self.assertEqual(len(NotificationService.get_recent_notifications(self.case_worker, limit=5)), 5)

    def test_mark_as_read_only_for_recipient(self):
        notification = NotificationService.send_notification(self.case_worker, "Mine", "Message")

        with self.assertRaises(Notification.DoesNotExist):
            NotificationService.mark_as_read(self.chair, notification.pk)

        NotificationService.mark_as_read(self.case_worker, notification.pk)
        notification.refresh_from_db()
        self.assertTrue(notification.is_read)

    def test_mark_all_as_read(self):
        """Test marking all notifications as read."""
        for i in range(5):
            NotificationService.send_notification(self.case_worker, f"Notification {i}", "Message")
        NotificationService.send_notification(self.chair, "Chair Notification", "Message")

        updated = NotificationService.mark_all_as_read(self.case_worker)

        self.assertEqual(updated, 5)
        self.assertEqual(NotificationService.get_unread_count(self.case_worker), 0)
        self.assertEqual(NotificationService.get_unread_count(self.chair), 1)

    def test_delete_old_notifications(self):
        """Test deleting notifications older than the retention period."""
        old = NotificationService.send_notification(self.case_worker, "Old", "Message")
        Notification.objects.filter(pk=old.pk).update(created_at=timezone.now() - timedelta(days=100))
        NotificationService.send_notification(self.case_worker, "Recent", "Message")

        deleted = NotificationService.delete_old_notifications(days=90)

        self.assertEqual(deleted, 1)
        self.assertEqual(list(Notification.objects.values_list('title', flat=True)), ["Recent"])

    def test_notification_str(self):
        notification = NotificationService.send_notification(self.case_worker, "Alert", "Message")
        self.assertEqual(str(notification), f"Alert -> {self.case_worker}")


class AuditServiceTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            emirates_id='784-1985-0000001-1', email='manager@test.ae', first_name='Maryam'
        )
        self.client_type = ClientType.objects.create(code='FDF', type_id=1, name_en='Family Development Foundation')

    def test_record(self):
        entry = AuditService.record(
            self.user, AuditAction.UPDATED, self.client_type,
            changes={'name_en': 'FDF'}, description='Renamed'
        )

        self.assertEqual(entry.actor, self.user)
        self.assertEqual(entry.entity_type, 'clients.clienttype')
        self.assertEqual(entry.entity_id, str(self.client_type.pk))
        self.assertEqual(entry.changes, {'name_en': 'FDF'})

    def test_record_without_actor(self):
        entry = AuditService.record(None, AuditAction.CREATED, self.client_type)
        self.assertIsNone(entry.actor)
        self.assertEqual(entry.changes, {})

    def test_record_status_change(self):
        entry = AuditService.record_status_change(
            self.user, self.client_type, 'PENDING', 'APPROVED', reason='Committee decision'
        )
        self.assertEqual(entry.action, AuditAction.STATUS_CHANGED)
        self.assertEqual(entry.description, 'PENDING -> APPROVED')
        self.assertEqual(entry.changes, {'from': 'PENDING', 'to': 'APPROVED', 'reason': 'Committee decision'})

    def test_history_for(self):
        other = ClientType.objects.create(code='ADHA', type_id=2, name_en='ADHA')
        AuditService.record(self.user, AuditAction.CREATED, self.client_type)
        AuditService.record(self.user, AuditAction.UPDATED, self.client_type)
        AuditService.record(self.user, AuditAction.CREATED, other)

        history = list(AuditService.history_for(self.client_type))
        self.assertEqual([entry.action for entry in history], [AuditAction.UPDATED, AuditAction.CREATED])


class RetryWithBackoffTests(TestCase):

    def setUp(self):
        self.delays = []

    def flaky(self, failures, exc=ConnectionError):
        calls = {'count': 0}

        def func():
            calls['count'] += 1
            if calls['count'] <= failures:
                raise exc('temporarily unavailable')
            return 'sent'
        return func, calls

    def test_returns_after_transient_failures(self):
        func, calls = self.flaky(2)
        result = retry_with_backoff(func, retries=3, base_delay=0.5, sleep=self.delays.append)

        self.assertEqual(result, 'sent')
        self.assertEqual(calls['count'], 3)
        self.assertEqual(self.delays, [0.5, 1.0])

    def test_delay_is_capped(self):
        func, _ = self.flaky(4)
        retry_with_backoff(func, retries=5, base_delay=1, multiplier=10, max_delay=5, sleep=self.delays.append)
        self.assertEqual(self.delays, [1, 5, 5, 5])

    def test_raises_when_attempts_run_out(self):
        func, calls = self.flaky(10)
        with self.assertRaises(RetryExhaustedException) as ctx:
            retry_with_backoff(func, retries=3, sleep=self.delays.append)

        self.assertEqual(calls['count'], 3)
        self.assertEqual(len(self.delays), 2)
        self.assertEqual(ctx.exception.details['attempts'], 3)
        self.assertIsInstance(ctx.exception.__cause__, ConnectionError)

    def test_single_attempt_does_not_sleep(self):
        func, _ = self.flaky(1)
        with self.assertRaises(RetryExhaustedException):
            retry_with_backoff(func, retries=1, sleep=self.delays.append)
        self.assertEqual(self.delays, [])

    def test_unlisted_exceptions_propagate(self):
        func, calls = self.flaky(1, exc=KeyError)
        with self.assertRaises(KeyError):
            retry_with_backoff(func, retries=3, exceptions=(ConnectionError,), sleep=self.delays.append)
        self.assertEqual(calls['count'], 1)


class HelperTests(TestCase):

    def test_calculate_age(self):
        born = date(1955, 6, 15)
        self.assertEqual(calculate_age(born, date(2024, 6, 14)), 68)
        self.assertEqual(calculate_age(born, date(2024, 6, 15)), 69)
        self.assertEqual(calculate_age(date(1960, 2, 29), date(2024, 2, 28)), 63)

    def test_next_sequence_code(self):
        queryset = ClientType.objects.all()
        self.assertEqual(next_sequence_code(queryset, 'name_en', 'CT-'), 'CT-00001')

        ClientType.objects.create(code='FDF', type_id=1, name_en='CT-00007')
        ClientType.objects.create(code='ADHA', type_id=2, name_en='CT-00012')
        self.assertEqual(next_sequence_code(queryset, 'name_en', 'CT-'), 'CT-00013')
        self.assertEqual(next_sequence_code(queryset, 'name_en', 'XX-', width=3), 'XX-001')

    def test_parse_params(self):
        self.assertEqual(parse_date_param('2024-03-01', 'start'), date(2024, 3, 1))
        self.assertIsNone(parse_date_param('', 'start'))
        self.assertEqual(parse_decimal_param('12.50', 'amount'), Decimal('12.50'))
        with self.assertRaises(InvalidPayloadException):
            parse_date_param('01/03/2024', 'start')
        with self.assertRaises(InvalidPayloadException):
            parse_decimal_param('twelve', 'amount')

    def test_parse_int_param(self):
        self.assertEqual(parse_int_param('42', 'meeting'), 42)
        self.assertEqual(parse_int_param(7, 'meeting'), 7)
        self.assertIsNone(parse_int_param('', 'meeting'))
        for value in ('abc', '4.5', True):
            with self.subTest(value=value):
                with self.assertRaises(InvalidPayloadException) as ctx:
                    parse_int_param(value, 'meeting')
                self.assertEqual(ctx.exception.details['field'], 'meeting')

    def test_paginate_clamps_page_size(self):
        for index in range(3):
            ClientType.objects.create(code=['FDF', 'ADHA', 'CASH'][index], type_id=index + 1, name_en=f'Type {index}')
        factory = RequestFactory()

        data = paginate(ClientType.objects.order_by('type_id'), factory.get('/', {'page_size': '2', 'page': '9'}))
        self.assertEqual(data['count'], 3)
        self.assertEqual(data['num_pages'], 2)
        self.assertEqual(data['page'], 2)
        self.assertEqual(len(data['results']), 1)

        data = paginate(ClientType.objects.all(), factory.get('/', {'page_size': '0'}),
                        lambda ct: ct.code)
        self.assertEqual(data['page_size'], 1)
        self.assertEqual(len(data['results']), 1)


class ClientContextMiddlewareTests(TestCase):

    def setUp(self):
        self.factory = RequestFactory()
        self.middleware = ClientContextMiddleware(lambda request: None)
        self.fdf = ClientType.objects.create(code='FDF', type_id=1, name_en='FDF')

    def test_anonymous_request(self):
        request = self.factory.get('/')
        request.user = AnonymousUser()
        self.middleware.process_request(request)
        self.assertIsNone(request.client_type)
        self.assertFalse(request.is_program_wide)

    def test_scoped_and_program_wide_users(self):
        scoped = User.objects.create_user(
            emirates_id='784-1988-0000002-2', email='fdf@test.ae', client_type=self.fdf
        )
        wide = User.objects.create_user(emirates_id='784-1988-0000003-3', email='wide@test.ae')

        request = self.factory.get('/')
        request.user = scoped
        self.middleware.process_request(request)
        self.assertEqual(request.client_type, self.fdf)
        self.assertFalse(request.is_program_wide)

        request = self.factory.get('/')
        request.user = wide
        self.middleware.process_request(request)
        self.assertIsNone(request.client_type)
        self.assertTrue(request.is_program_wide)


class NotificationApiTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(
            emirates_id='784-1981-0000004-4', email='worker@test.ae', password='pass', first_name='Hamad'
        )
        self.other = User.objects.create_user(
            emirates_id='784-1981-0000005-5', email='other@test.ae', password='pass', first_name='Salem'
        )
        NotificationService.send_notification(self.user, 'Workflow', 'Message')
        NotificationService.send_notification(self.user, 'Alert', 'Message', category=NotificationCategory.ALERT)
        self.foreign = NotificationService.send_notification(self.other, 'Not yours', 'Message')

    def test_requires_login(self):
        response = self.client.get(reverse('core:notification_list'))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()['error_code'], 'ERR_AUTH_REQUIRED')

    def test_list_and_filters(self):
        self.client.force_login(self.user)

        data = self.client.get(reverse('core:notification_list')).json()
        self.assertEqual(data['count'], 2)
        self.assertEqual(data['unread_count'], 2)

        data = self.client.get(reverse('core:notification_list'), {'category': 'ALERT'}).json()
        self.assertEqual([n['title'] for n in data['results']], ['Alert'])

    def test_mark_read_flow(self):
        self.client.force_login(self.user)
        notification = Notification.objects.filter(recipient=self.user).first()

        response = self.client.post(reverse('core:notification_mark_read', args=[notification.pk]))
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['is_read'])
        self.assertEqual(self.client.get(reverse('core:notification_unread_count')).json()['unread_count'], 1)

        data = self.client.get(reverse('core:notification_list'), {'unread': '1'}).json()
        self.assertEqual(data['count'], 1)

        response = self.client.post(reverse('core:notification_mark_all_read'))
        self.assertEqual(response.json(), {'updated': 1, 'unread_count': 0})

    def test_cannot_mark_other_users_notification(self):
        self.client.force_login(self.user)
        response = self.client.post(reverse('core:notification_mark_read', args=[self.foreign.pk]))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error_code'], 'ERR_NOT_FOUND')

    def test_audit_log_requires_management_role(self):
        AuditService.record(self.user, AuditAction.CREATED, self.user)
        self.client.force_login(self.user)
        response = self.client.get(reverse('core:audit_log'))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['error_code'], 'ERR_UNAUTHORIZED_ROLE')

        self.user.roles.add(Role.objects.create(name='Programme Manager', code=RoleCode.PROGRAM_MANAGER))
        response = self.client.get(reverse('core:audit_log'), {'entity_type': 'users.customuser'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['count'], 1)
        self.assertEqual(AuditLog.objects.count(), 1)


class CleanupNotificationsCommandTests(TestCase):

    def setUp(self):
        self.user = User.objects.create_user(emirates_id='784-1979-0000006-6', email='u@test.ae')

    def notification(self, days_old, is_read, category=NotificationCategory.WORKFLOW):
        notification = NotificationService.send_notification(
            self.user, f'{days_old} days', 'Message', category=category
        )
        Notification.objects.filter(pk=notification.pk).update(
            is_read=is_read, created_at=timezone.now() - timedelta(days=days_old)
        )
        return notification

    def run_command(self, *args):
        out = io.StringIO()
        call_command('cleanup_notifications', '--no-input', *args, stdout=out)
        return out.getvalue()

    def test_clean_database(self):
        self.notification(5, True)
        self.assertIn('No notifications to cleanup. Database is clean.', self.run_command())

    def test_dry_run_deletes_nothing(self):
        self.notification(100, True)
        output = self.run_command('--dry-run')
        self.assertIn('DRY RUN MODE: No notifications were deleted.', output)
        self.assertEqual(Notification.objects.count(), 1)

    def test_deletes_old_read_and_stale_unread(self):
        self.notification(100, True)
        self.notification(100, False)
        self.notification(200, False)
        self.notification(10, True)

        output = self.run_command('--days', '90')

        self.assertIn('Successfully deleted 2 notifications', output)
        self.assertEqual(Notification.objects.count(), 2)

    def test_keep_alerts(self):
        self.notification(100, True, category=NotificationCategory.ALERT)
        self.notification(100, True)

        output = self.run_command('--keep-alerts')

        self.assertIn('Successfully deleted 1 notifications', output)
        self.assertEqual(Notification.objects.get().category, NotificationCategory.ALERT)
