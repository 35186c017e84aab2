"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Management command to seed the FDF, ADHA and Cash client
             types and their default business rules.
-------------------------------------------------------------------------
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from apps.clients.models import ClientType, ClientTypeCode, BusinessRule, RuleCategory


CLIENT_TYPES = [
    {
        'code': ClientTypeCode.FDF,
        'type_id': 1,
        'name_en': 'Family Development Foundation',
        'name_ar': 'مؤسسة التنمية الأسرية',
        'description': 'Senior citizens referred and funded by the Family Development Foundation.',
        'config': {
            'required_documents': ['Emirates ID', 'Family Book', 'Medical Report'],
            'max_budget': 75000,
            'project_deadline_days': 90,
        },
    },
    {
        'code': ClientTypeCode.ADHA,
        'type_id': 2,
        'name_en': 'Abu Dhabi Housing Authority',
        'name_ar': 'هيئة أبوظبي للإسكان',
        'description': 'Housing Authority clients with property-based funding.',
        'config': {
            'required_documents': ['ID', 'Property Deed', 'Income Certificate'],
            'max_budget': 100000,
            'project_deadline_days': 120,
        },
    },
    {
        'code': ClientTypeCode.CASH,
        'type_id': 3,
        'name_en': 'Cash Client',
        'name_ar': 'عميل نقدي',
        'description': 'Self-funded clients paying for the modifications directly.',
        'config': {
            'required_documents': ['Emirates ID'],
            'max_budget': None,
            'project_deadline_days': 60,
        },
    },
]


DEFAULT_RULES = [
    {
        'code': 'eligibility-age-fdf',
        'name': 'FDF Age Eligibility',
        'description': 'Beneficiary must be 60 years or older for FDF clients.',
        'category': RuleCategory.ELIGIBILITY,
        'client_types': [ClientTypeCode.FDF],
        'conditions': [
            {'field': 'beneficiary.age', 'operator': 'greater_than_or_equal', 'value': 60},
        ],
        'actions': [
            {'type': 'approve', 'message': 'Beneficiary meets age requirement'},
        ],
        'priority': 100,
    },
    {
        'code': 'budget-limit-adha',
        'name': 'ADHA Budget Limit',
        'description': 'Maximum budget allocation for ADHA projects.',
        'category': RuleCategory.BUDGET,
        'client_types': [ClientTypeCode.ADHA],
        'conditions': [
            {'field': 'project.estimated_cost', 'operator': 'less_than_or_equal', 'value': 100000},
        ],
        'actions': [
            {'type': 'approve', 'message': 'Project budget within limits'},
        ],
        'priority': 90,
    },
    {
        'code': 'approval-threshold-cash',
        'name': 'Cash Client Approval Threshold',
        'description': 'Projects under 10,000 AED for cash clients can be approved by a manager.',
        'category': RuleCategory.APPROVAL,
        'client_types': [ClientTypeCode.CASH],
        'conditions': [
            {'field': 'project.estimated_cost', 'operator': 'less_than', 'value': 10000},
        ],
        'actions': [
            {'type': 'set_value', 'target': 'project.approval_level', 'value': 'manager'},
        ],
        'priority': 80,
    },
    {
        'code': 'scheduling-deadline-fdf',
        'name': 'FDF Project Deadline',
        'description': 'FDF renovation projects must be completed within 90 days.',
        'category': RuleCategory.SCHEDULING,
        'client_types': [ClientTypeCode.FDF],
        'conditions': [
            {'field': 'project.type', 'operator': 'equals', 'value': 'renovation'},
        ],
        'actions': [
            {'type': 'set_deadline', 'deadline': 90, 'reminder_days': [30, 15, 7]},
        ],
        'priority': 70,
    },
    {
        'code': 'document-requirements-adha',
        'name': 'ADHA Document Requirements',
        'description': 'Required documents for ADHA projects pending approval.',
        'category': RuleCategory.DOCUMENT,
        'client_types': [ClientTypeCode.ADHA],
        'conditions': [
            {'field': 'project.status', 'operator': 'equals', 'value': 'pending_approval'},
        ],
        'actions': [
            {'type': 'require_document', 'document_types': ['ID', 'Property Deed', 'Income Certificate']},
        ],
        'priority': 60,
    },
]


class Command(BaseCommand):
    help = 'Seeds the FDF, ADHA and Cash client types and the default business rules'

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding client types...')

        client_types = {}
        for data in CLIENT_TYPES:
            defaults = {key: value for key, value in data.items() if key != 'code'}
            client_type, created = ClientType.objects.update_or_create(
                code=data['code'], defaults=defaults
            )
            client_types[str(data['code'])] = client_type
            label = 'Created' if created else 'Updated'
            self.stdout.write(self.style.SUCCESS(f'  {label}: {client_type}'))

        self.stdout.write('Seeding business rules...')
        created_count = 0
        for data in DEFAULT_RULES:
            if BusinessRule.objects.filter(code=data['code']).exists():
                self.stdout.write(f"  Skipped (exists): {data['code']}")
                continue

            rule = BusinessRule.objects.create(
                code=data['code'],
                name=data['name'],
                description=data['description'],
                category=data['category'],
                conditions=data['conditions'],
                actions=data['actions'],
                priority=data['priority'],
            )
            rule.client_types.set([client_types[str(code)] for code in data['client_types']])
            created_count += 1
            self.stdout.write(self.style.SUCCESS(f'  Created: {rule.code}'))

        self.stdout.write(self.style.SUCCESS(f'\nDone! Rules created: {created_count}'))
