"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Management command to generate and email scheduled reports that are due
Usage: python manage.py run_scheduled_reports [--once] [--interval=300]
-------------------------------------------------------------------------
"""
import logging
import time

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from apps.reporting.services import ReportingEngine

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Run due report schedules, once or in a polling loop'

    def add_arguments(self, parser):
        parser.add_argument(
            '--once',
            action='store_true',
            help='Run the due schedules a single time and exit'
        )
        parser.add_argument(
            '--interval',
            type=int,
            default=300,
            help='Seconds between checks for due schedules (default: 300)'
        )

    def handle(self, *args, **options):
        interval = options['interval']
        if interval < 1:
            raise CommandError('--interval must be at least 1 second.')

        if options['once']:
            self.run_cycle()
            return

        self.stdout.write(self.style.WARNING(
            f'Checking report schedules every {interval}s. Press Ctrl+C to stop.'
        ))
        try:
            while True:
                self.run_cycle()
                time.sleep(interval)
        except KeyboardInterrupt:
            self.stdout.write(self.style.SUCCESS('\nStopped scheduled reports.'))

    def run_cycle(self):
        results = ReportingEngine.run_due_schedules(timezone.now())
        if not results:
            self.stdout.write('No report schedules due.')
            return

        failed = 0
        for result in results:
            if result['error']:
                failed += 1
                self.stdout.write(self.style.ERROR(
                    f"  schedule {result['schedule']}: failed - {result['error']}"
                ))
            else:
                delivery = 'delivered' if result['delivered'] else 'not delivered'
                self.stdout.write(self.style.SUCCESS(
                    f"  schedule {result['schedule']}: report {result['report']} {delivery}"
                ))
        logger.info(
            f"Ran {len(results)} report schedules, {failed} failed",
            extra={'schedules': [r['schedule'] for r in results]}
        )
