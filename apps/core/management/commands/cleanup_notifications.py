"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Management command to cleanup old notifications
Usage: python manage.py cleanup_notifications --days=90 [--dry-run] [--no-input]
-------------------------------------------------------------------------
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError, models
from django.utils import timezone

from apps.core.models import Notification, NotificationCategory

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Delete read notifications older than specified days'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=getattr(settings, 'NOTIFICATION_RETENTION_DAYS', 90),
            help='Delete read notifications older than this many days (default: 90)'
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show what would be deleted without actually deleting'
        )
        parser.add_argument(
            '--unread-days',
            type=int,
            default=180,
            help='Delete even unread notifications older than this many days (default: 180)'
        )
        parser.add_argument(
            '--keep-alerts',
            action='store_true',
            help='Keep ALERT category notifications regardless of age'
        )
        parser.add_argument(
            '--no-input',
            action='store_true',
            dest='no_input',
            help='Do not prompt for confirmation'
        )

    def handle(self, *args, **options):
        days = options['days']
        unread_days = options['unread_days']
        dry_run = options['dry_run']
        keep_alerts = options['keep_alerts']

        self.stdout.write(self.style.WARNING('=' * 70))
        self.stdout.write(self.style.WARNING('Barakatna CMS Notification Cleanup Utility'))
        self.stdout.write(self.style.WARNING('=' * 70))

        now = timezone.now()
        read_query = Notification.objects.filter(
            is_read=True,
            created_at__lt=now - timedelta(days=days)
        )
        unread_query = Notification.objects.filter(
            is_read=False,
            created_at__lt=now - timedelta(days=unread_days)
        )

        if keep_alerts:
            read_query = read_query.exclude(category=NotificationCategory.ALERT)
            unread_query = unread_query.exclude(category=NotificationCategory.ALERT)

        read_count = read_query.count()
        unread_count = unread_query.count()
        total_count = read_count + unread_count

        if total_count == 0:
            self.stdout.write(self.style.SUCCESS('No notifications to cleanup. Database is clean.'))
            return

        self.stdout.write('')
        self.stdout.write('Cleanup Summary:')
        self.stdout.write(f'  - Read notifications older than {days} days: {read_count}')
        self.stdout.write(f'  - Unread notifications older than {unread_days} days: {unread_count}')
        self.stdout.write(f'  - Total to delete: {total_count}')
        if keep_alerts:
            self.stdout.write('  - Keeping ALERT notifications regardless of age')

        self.stdout.write('')
        self.stdout.write('Breakdown by Category:')
        categories = (read_query | unread_query).values('category').annotate(
            count=models.Count('id')
        ).order_by('-count')
        for cat in categories:
            self.stdout.write(f"  - {cat['category']}: {cat['count']} notifications")

        if dry_run:
            self.stdout.write('')
            self.stdout.write(self.style.WARNING('DRY RUN MODE: No notifications were deleted.'))
            return

        if not options['no_input']:
            confirm = input(f'Are you sure you want to delete {total_count} notifications? (yes/no): ')
            if confirm.lower() != 'yes':
                self.stdout.write(self.style.ERROR('Cleanup cancelled by user.'))
                return

        try:
            read_deleted = read_query.delete()[0]
            unread_deleted = unread_query.delete()[0]
        except DatabaseError as e:
            self.stdout.write(self.style.ERROR(f'Error during cleanup: {e}'))
            raise CommandError(f'Cleanup failed: {e}')

        total_deleted = read_deleted + unread_deleted
        self.stdout.write(self.style.SUCCESS(f'Successfully deleted {total_deleted} notifications'))
        self.stdout.write(f'  - Read: {read_deleted}')
        self.stdout.write(f'  - Unread: {unread_deleted}')

        logger.info(
            'Notification cleanup: deleted %s notifications (read: %s, unread: %s)',
            total_deleted, read_deleted, unread_deleted,
            extra={
                'total_deleted': total_deleted,
                'read_deleted': read_deleted,
                'unread_deleted': unread_deleted,
                'days': days,
                'unread_days': unread_days,
            }
        )
