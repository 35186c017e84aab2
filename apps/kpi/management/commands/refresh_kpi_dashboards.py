"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Management command to refresh KPI dashboards whose interval has elapsed
Usage: python manage.py refresh_kpi_dashboards [--once] [--interval=60]
-------------------------------------------------------------------------
"""
import logging
import time

from django.conf import settings
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from apps.kpi.services import KpiService

logger = logging.getLogger(__name__)


class Command(BaseCommand):
    help = 'Refresh due KPI dashboards, once or in a polling loop'

    def add_arguments(self, parser):
        parser.add_argument(
            '--once',
            action='store_true',
            help='Refresh the due dashboards a single time and exit'
        )
        parser.add_argument(
            '--interval',
            type=int,
            default=getattr(settings, 'KPI_POLL_SECONDS', 60),
            help='Seconds between checks for due dashboards (default: 60)'
        )

    def handle(self, *args, **options):
        interval = options['interval']
        if interval < 1:
            raise CommandError('--interval must be at least 1 second.')

        if options['once']:
            self.run_cycle()
            return

        self.stdout.write(self.style.WARNING(
            f'Polling KPI dashboards every {interval}s. Press Ctrl+C to stop.'
        ))
        try:
            while True:
                try:
                    self.run_cycle()
                except Exception:
                    logger.exception("KPI dashboard refresh cycle failed")
                    self.stderr.write(self.style.ERROR('Refresh cycle failed, retrying next interval.'))
                time.sleep(interval)
        except KeyboardInterrupt:
            self.stdout.write(self.style.SUCCESS('\nStopped KPI dashboard refresh.'))

    def run_cycle(self):
        results = KpiService.refresh_due_dashboards(timezone.now())
        if not results:
            self.stdout.write('No dashboards due for refresh.')
            return

        for result in results:
            style = self.style.ERROR if result['errors'] else self.style.SUCCESS
            self.stdout.write(style(
                f"  {result['dashboard']}: {result['refreshed']} metrics refreshed, "
                f"{len(result['errors'])} errors"
            ))
        logger.info(
            f"Refreshed {len(results)} KPI dashboards",
            extra={'dashboards': [r['dashboard'] for r in results]}
        )
