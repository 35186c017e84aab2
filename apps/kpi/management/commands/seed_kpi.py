"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Management command to seed the resource utilization KPI
             metrics and their dashboard.
-------------------------------------------------------------------------
"""
from decimal import Decimal

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.kpi.models import KpiMetric, KpiDashboard, KpiCategory, AggregationMethod


RESOURCE_METRICS = [
    {
        'code': 'resource-overall-utilization',
        'name': 'Overall Resource Utilization',
        'description': 'Percentage of total resource hours utilized across all projects.',
        'target': Decimal('85'),
        'warning_threshold': Decimal('70'),
        'critical_threshold': Decimal('50'),
        'source': 'resource_utilization',
        'source_params': {},
    },
    {
        'code': 'resource-senior-contractor-utilization',
        'name': 'Senior Contractor Utilization',
        'description': 'Percentage of senior contractor hours utilized.',
        'target': Decimal('90'),
        'warning_threshold': Decimal('75'),
        'critical_threshold': Decimal('60'),
        'source': 'contractor_utilization',
        'source_params': {'role': 'Senior Contractor'},
    },
    {
        'code': 'resource-accessibility-specialist-utilization',
        'name': 'Accessibility Specialist Utilization',
        'description': 'Percentage of accessibility specialist hours utilized.',
        'target': Decimal('80'),
        'warning_threshold': Decimal('65'),
        'critical_threshold': Decimal('50'),
        'source': 'resource_utilization',
        'source_params': {'role': 'Accessibility Specialist'},
    },
    {
        'code': 'resource-allocation-efficiency',
        'name': 'Resource Allocation Efficiency',
        'description': 'Approved hours against planned allocation hours across projects.',
        'target': Decimal('95'),
        'warning_threshold': Decimal('80'),
        'critical_threshold': Decimal('70'),
        'source': 'allocation_efficiency',
        'source_params': {},
    },
]

DASHBOARD = {
    'code': 'resource-utilization',
    'name': 'Resource Utilization Dashboard',
    'description': 'Monitors resource utilization and allocation efficiency.',
}


class Command(BaseCommand):
    help = 'Seeds the resource utilization KPI metrics and dashboard'

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding KPI metrics...')

        metrics = []
        for data in RESOURCE_METRICS:
            defaults = {key: value for key, value in data.items() if key != 'code'}
            defaults.update({
                'category': KpiCategory.RESOURCE_UTILIZATION,
                'unit': '%',
                'higher_is_better': True,
                'aggregation': AggregationMethod.AVERAGE,
            })
            metric, created = KpiMetric.objects.update_or_create(code=data['code'], defaults=defaults)
            metrics.append(metric)
            label = 'Created' if created else 'Updated'
            self.stdout.write(self.style.SUCCESS(f'  {label}: {metric}'))

        self.stdout.write('Seeding KPI dashboard...')
        defaults = {key: value for key, value in DASHBOARD.items() if key != 'code'}
        defaults['refresh_interval'] = settings.KPI_DEFAULT_REFRESH_SECONDS
        dashboard, created = KpiDashboard.objects.update_or_create(code=DASHBOARD['code'], defaults=defaults)
        dashboard.metrics.add(*metrics)
        label = 'Created' if created else 'Updated'
        self.stdout.write(self.style.SUCCESS(f'  {label}: {dashboard}'))

        self.stdout.write(self.style.SUCCESS(f'\nDone! Metrics: {len(metrics)}'))
