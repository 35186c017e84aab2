"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Management command to seed standard system roles.
-------------------------------------------------------------------------
"""
from django.core.management.base import BaseCommand
from django.contrib.auth.models import Group
from django.db import transaction

from apps.users.models import Role, RoleCode


# Standard role definitions
STANDARD_ROLES = [
    {
        'code': RoleCode.SUPER_ADMIN,
        'name': 'Super Administrator',
        'description': 'Full System Access. Manages client types, business rules, users and configuration.',
        'is_system_role': True,
    },
    {
        'code': RoleCode.PROGRAM_MANAGER,
        'name': 'Programme Manager',
        'description': 'Programme-wide oversight. Manages beneficiaries, resources and reports across client types.',
        'is_system_role': True,
    },
    {
        'code': RoleCode.CASE_WORKER,
        'name': 'Case Worker',
        'description': 'Registers beneficiaries and family members and prepares committee submissions.',
        'is_system_role': True,
    },
    {
        'code': RoleCode.ASSESSOR,
        'name': 'Field Assessor',
        'description': 'Performs home accessibility assessments and submits them for committee review.',
        'is_system_role': True,
    },
    {
        'code': RoleCode.COMMITTEE_CHAIR,
        'name': 'Committee Chairperson',
        'description': 'Chairs committee meetings. DECIDER for submissions.',
        'is_system_role': True,
    },
    {
        'code': RoleCode.COMMITTEE_MEMBER,
        'name': 'Committee Member',
        'description': 'Votes on and decides committee submissions.',
        'is_system_role': True,
    },
    {
        'code': RoleCode.COMMITTEE_SECRETARY,
        'name': 'Committee Secretary',
        'description': 'Schedules meetings, maintains agendas and records minutes. No voting rights by default.',
        'is_system_role': True,
    },
    {
        'code': RoleCode.RESOURCE_MANAGER,
        'name': 'Resource Manager',
        'description': 'Manages staff and contractors, allocations and availability. APPROVER for timesheets.',
        'is_system_role': True,
    },
    {
        'code': RoleCode.FINANCE_OFFICER,
        'name': 'Finance Officer',
        'description': 'Reviews budget submissions and financial reports.',
        'is_system_role': True,
    },
    {
        'code': RoleCode.SENIOR_MANAGEMENT,
        'name': 'Senior Management',
        'description': 'Views KPI dashboards, alerts and programme reports.',
        'is_system_role': True,
    },
]


class Command(BaseCommand):
    help = 'Seeds standard system roles into the database'

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding system roles...')

        created_count = 0
        updated_count = 0

        for role_data in STANDARD_ROLES:
            code = str(role_data['code'])
            role = Role.objects.filter(code=code).first()

            if role:
                role.name = role_data['name']
                role.description = role_data['description']
                role.is_system_role = role_data['is_system_role']
                role.save()
                updated_count += 1
                self.stdout.write(f'  Updated: {role.name}')
            else:
                group, _ = Group.objects.get_or_create(name=role_data['name'])
                role = Role.objects.create(
                    code=code,
                    name=role_data['name'],
                    description=role_data['description'],
                    group=group,
                    is_system_role=role_data['is_system_role'],
                )
                created_count += 1
                self.stdout.write(self.style.SUCCESS(f'  Created: {role.name}'))

        self.stdout.write(
            self.style.SUCCESS(
                f'\nDone! Created: {created_count}, Updated: {updated_count}'
            )
        )
