"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Management command to seed the standard report templates,
             including the FDF, ADHA and Cash client reports.
-------------------------------------------------------------------------
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.beneficiaries.models import BeneficiaryStatus, Emirate, PropertyType
from apps.clients.models import ClientType, ClientTypeCode
from apps.committees.models import DecisionValue
from apps.kpi.models import KpiCategory
from apps.manpower.models import ProjectStatus
from apps.reporting.models import ReportTemplate, ReportFormat

PERIOD = [
    {'name': 'start_date', 'label': 'Start Date', 'type': 'date', 'required': False},
    {'name': 'end_date', 'label': 'End Date', 'type': 'date', 'required': False},
]


def select(name, label, choices):
    return {'name': name, 'label': label, 'type': 'select', 'required': False, 'options': list(choices.values)}


TEMPLATES = [
    {
        'code': 'beneficiary-status',
        'name': 'Beneficiary Status Report',
        'description': 'Comprehensive report on beneficiary status and progress.',
        'data_source': 'beneficiary-status',
        'default_format': ReportFormat.PDF,
        'parameters': PERIOD + [
            select('status', 'Status', BeneficiaryStatus),
            select('emirate', 'Emirate', Emirate),
        ],
        'sections': [
            {'title': 'Overview', 'type': 'text', 'order': 1,
             'content': 'Registered beneficiaries and the current status of their cases.'},
        ],
    },
    {
        'code': 'committee-decisions',
        'name': 'Committee Decisions Report',
        'description': 'Decisions recorded by the review committees with their voting results.',
        'data_source': 'committee-decisions',
        'default_format': ReportFormat.PDF,
        'parameters': PERIOD + [
            {'name': 'committee', 'label': 'Committee Code', 'type': 'string', 'required': False},
            select('decision', 'Decision', DecisionValue),
        ],
    },
    {
        'code': 'resource-utilization',
        'name': 'Resource Utilization Report',
        'description': 'Billable and non-billable hours of each resource against availability.',
        'data_source': 'resource-utilization',
        'default_format': ReportFormat.EXCEL,
        'parameters': PERIOD + [
            {'name': 'department', 'label': 'Department', 'type': 'string', 'required': False},
        ],
    },
    {
        'code': 'kpi-summary',
        'name': 'KPI Summary Report',
        'description': 'Latest value, status and trend of every active KPI.',
        'data_source': 'kpi-summary',
        'default_format': ReportFormat.EXCEL,
        'parameters': [select('category', 'Category', KpiCategory)],
    },
    {
        'code': 'fdf-social-impact',
        'name': 'FDF Social Impact Report',
        'description': 'Social impact metrics and family welfare tracking for FDF clients.',
        'data_source': 'fdf-social-impact',
        'default_format': ReportFormat.PDF,
        'client_type': ClientTypeCode.FDF,
        'parameters': [select('emirate', 'Emirate', Emirate)],
        'metrics': [
            'socialImpact', 'familyWelfare', 'healthSafety',
            'communityEngagement', 'socialWorkerActivity',
        ],
    },
    {
        'code': 'adha-property',
        'name': 'ADHA Property Improvement Report',
        'description': 'Property improvement valuation and structural enhancement tracking.',
        'data_source': 'adha-property',
        'default_format': ReportFormat.PDF,
        'client_type': ClientTypeCode.ADHA,
        'parameters': [select('property_type', 'Property Type', PropertyType)],
        'metrics': [
            'propertyValuation', 'structuralEnhancements',
            'renovationQuality', 'governmentCompliance',
        ],
    },
    {
        'code': 'cash-client-value',
        'name': 'Cash Client Value Report',
        'description': 'Cost-effectiveness analysis and value-for-money assessment.',
        'data_source': 'cash-client-value',
        'default_format': ReportFormat.EXCEL,
        'client_type': ClientTypeCode.CASH,
        'parameters': [select('status', 'Project Status', ProjectStatus)],
        'metrics': [
            'costEffectiveness', 'paymentTracking', 'serviceQuality',
            'valueForMoney', 'clientSatisfaction',
        ],
    },
]


class Command(BaseCommand):
    help = 'Seeds the standard report templates'

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding report templates...')

        seeded = 0
        for data in TEMPLATES:
            defaults = {key: value for key, value in data.items() if key != 'code'}
            client_code = defaults.pop('client_type', None)
            if client_code:
                client_type = ClientType.objects.filter(code=client_code).first()
                if client_type is None:
                    self.stdout.write(self.style.WARNING(
                        f"  Skipped {data['code']}: client type {client_code} does not exist"
                    ))
                    continue
                defaults['client_type'] = client_type
            defaults.setdefault('author', 'System')

            template, created = ReportTemplate.objects.update_or_create(code=data['code'], defaults=defaults)
            seeded += 1
            label = 'Created' if created else 'Updated'
            self.stdout.write(self.style.SUCCESS(f'  {label}: {template}'))

        self.stdout.write(self.style.SUCCESS(f'\nDone! Templates: {seeded}'))
