"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Manpower business logic: allocation conflict checks,
             availability, timesheet workflow, skill matrix, utilization
             reporting, forecasts and contract expiry.
-------------------------------------------------------------------------
"""
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Set

from django.db import transaction
from django.db.models import Count, Q, Sum
from django.utils import timezone

from apps.core.api import parse_date_param, parse_int_param
from apps.core.exceptions import (
    AllocationConflictException, InvalidPayloadException, RecordNotFoundException,
    ResourceUnavailableException, UnauthorizedRoleException, WorkflowTransitionException,
)
from apps.core.models import AuditAction, NotificationPriority
from apps.core.services import AuditService, NotificationService
from apps.manpower.logging import ManpowerLogger
from apps.manpower.models import (
    ManpowerResource, ResourceSkill, Skill, Project, ResourceAllocation,
    Timesheet, ResourceForecast, ProficiencyLevel, AllocationStatus, TimesheetStatus,
    UNAVAILABLE_TYPES,
)
from apps.manpower.workflows import APPROVAL_STATUSES, EDITABLE_STATUSES, validate_transition
from apps.users.permissions import check_segregation_of_duties

MAX_DAILY_HOURS = Decimal('24')

# Timesheet action name -> target status
TIMESHEET_ACTIONS = {
    'submit': TimesheetStatus.SUBMITTED,
    'approve': TimesheetStatus.APPROVED,
    'reject': TimesheetStatus.REJECTED,
    'reopen': TimesheetStatus.DRAFT,
}


def working_days(start_date: date, end_date: date) -> int:
    """Count Monday-Friday days between two dates, both inclusive."""
    if end_date < start_date:
        return 0
    total = (end_date - start_date).days + 1
    full_weeks, remainder = divmod(total, 7)
    days = full_weeks * 5
    first_weekday = start_date.weekday()
    for offset in range(remainder):
        if (first_weekday + offset) % 7 < 5:
            days += 1
    return days


def _to_bool(value) -> Optional[bool]:
    if value in (None, ''):
        return None
    if isinstance(value, bool):
        return value
    return str(value).lower() in ('1', 'true', 'yes')


class ManpowerService:
    """
    Service class for manpower operations.

    All methods are static and can be called without instantiation.
    """

    # ------------------------------------------------------------------
    # Resources
    # ------------------------------------------------------------------

    @staticmethod
    def filter_resources(filters: Dict[str, Any], queryset=None):
        """
        Filter resources by department, role, is_contractor, skill,
        active and a free-text search on name, role and company.
        """
        if queryset is None:
            queryset = ManpowerResource.objects.all()
        queryset = queryset.select_related('user')

        if filters.get('department'):
            queryset = queryset.filter(department__iexact=filters['department'])
        if filters.get('role'):
            queryset = queryset.filter(role__iexact=filters['role'])

        is_contractor = _to_bool(filters.get('is_contractor'))
        if is_contractor is not None:
            queryset = queryset.filter(is_contractor=is_contractor)

        active = _to_bool(filters.get('active'))
        if active is not None:
            queryset = queryset.filter(is_active=active)

        if filters.get('skill'):
            queryset = queryset.filter(resource_skills__skill__name__iexact=filters['skill'])
            proficiency = (filters.get('proficiency') or '').upper()
            if proficiency:
                queryset = queryset.filter(resource_skills__proficiency=proficiency)

        search = (filters.get('search') or '').strip()
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(role__icontains=search) |
                Q(company_name__icontains=search)
            )
        return queryset.distinct().order_by('department', 'name')

    @staticmethod
    def get_resource(resource_id) -> ManpowerResource:
        """
        Raises:
            RecordNotFoundException: If the resource does not exist.
        """
        try:
            return ManpowerResource.objects.select_related('user').get(pk=resource_id)
        except (ManpowerResource.DoesNotExist, ValueError):
            raise RecordNotFoundException(
                "Resource not found.",
                details={'resource_id': resource_id}
            )

    @staticmethod
    def get_expiring_contracts(days: int = 30, today: Optional[date] = None):
        """Active contractors whose contract ends within the next `days` days."""
        today = today or timezone.localdate()
        return ManpowerResource.objects.filter(
            is_active=True,
            is_contractor=True,
            contract_end_date__gte=today,
            contract_end_date__lte=today + timedelta(days=days),
        ).order_by('contract_end_date', 'name')

    # ------------------------------------------------------------------
    # Availability and allocations
    # ------------------------------------------------------------------

    @staticmethod
    def get_unavailable_blocks(resource: ManpowerResource, start_date: date, end_date: date):
        """Leave and training blocks overlapping the period."""
        return resource.availability.filter(
            availability_type__in=UNAVAILABLE_TYPES,
            start_date__lte=end_date,
            end_date__gte=start_date,
        )

    @staticmethod
    def is_available(resource: ManpowerResource, start_date: date, end_date: date) -> bool:
        """True when no vacation, sick leave or training overlaps the period."""
        return not ManpowerService.get_unavailable_blocks(resource, start_date, end_date).exists()

    @staticmethod
    def get_allocated_percentage(resource: ManpowerResource, start_date: date, end_date: date,
                                 exclude: Optional[int] = None) -> int:
        """
        Peak allocation percentage of the resource on any day of the period.

        Completed allocations are ignored. The load only rises on the
        start date of an allocation, so the peak is found by evaluating
        the period start and every allocation start inside the period.
        """
        allocations = resource.allocations.exclude(status=AllocationStatus.COMPLETED).filter(
            start_date__lte=end_date,
            end_date__gte=start_date,
        )
        if exclude is not None:
            allocations = allocations.exclude(pk=exclude)
        allocations = list(allocations.values('start_date', 'end_date', 'allocation_percentage'))
        if not allocations:
            return 0

        checkpoints = {start_date}
        checkpoints.update(a['start_date'] for a in allocations if a['start_date'] > start_date)

        peak = 0
        for day in checkpoints:
            load = sum(
                a['allocation_percentage'] for a in allocations
                if a['start_date'] <= day <= a['end_date']
            )
            peak = max(peak, load)
        return peak

    @staticmethod
    def check_allocation_conflicts(resource: ManpowerResource, start_date: date, end_date: date,
                                   percentage: int, exclude: Optional[int] = None) -> int:
        """
        Ensure the new allocation keeps the resource at or below 100%.

        Returns:
            The percentage already allocated at the busiest point of the period.

        Raises:
            AllocationConflictException: If the total would exceed 100%.
        """
        allocated = ManpowerService.get_allocated_percentage(resource, start_date, end_date, exclude)
        if allocated + int(percentage) > 100:
            ManpowerLogger.log_allocation_conflict(resource, start_date, end_date, percentage, allocated)
            raise AllocationConflictException(
                f"{resource.name} is already {allocated}% allocated between "
                f"{start_date} and {end_date}; {percentage}% more would exceed 100%.",
                details={
                    'resource_id': resource.pk,
                    'allocated': allocated,
                    'requested': int(percentage),
                    'available': max(0, 100 - allocated),
                }
            )
        return allocated

    @staticmethod
    @transaction.atomic
    def create_allocation(
        user,
        resource: ManpowerResource,
        project: Project,
        start_date: date,
        end_date: date,
        allocation_percentage: int,
        role: str = '',
        hours_per_day: Decimal = Decimal('8.00'),
        status: str = AllocationStatus.PLANNED,
    ) -> ResourceAllocation:
        """
        Allocate a resource to a project.

        Raises:
            InvalidPayloadException: If the period is reversed.
            ResourceUnavailableException: If the resource is inactive or on leave.
            AllocationConflictException: If the resource would exceed 100%.
        """
        if end_date < start_date:
            raise InvalidPayloadException(
                "The allocation end date cannot be before its start date.",
                details={'start_date': str(start_date), 'end_date': str(end_date)}
            )

        # Lock the resource row so concurrent allocations are checked one at a time
        resource = ManpowerResource.objects.select_for_update().get(pk=resource.pk)
        if not resource.is_active:
            raise ResourceUnavailableException(
                f"{resource.name} is no longer active.",
                details={'resource_id': resource.pk}
            )

        blocks = list(ManpowerService.get_unavailable_blocks(resource, start_date, end_date))
        if blocks:
            raise ResourceUnavailableException(
                f"{resource.name} is not available between {start_date} and {end_date}.",
                details={
                    'resource_id': resource.pk,
                    'blocks': [
                        {
                            'type': block.availability_type,
                            'start_date': str(block.start_date),
                            'end_date': str(block.end_date),
                        }
                        for block in blocks
                    ],
                }
            )

        ManpowerService.check_allocation_conflicts(resource, start_date, end_date, allocation_percentage)

        allocation = ResourceAllocation(
            resource=resource,
            project=project,
            role=role,
            start_date=start_date,
            end_date=end_date,
            hours_per_day=hours_per_day,
            allocation_percentage=allocation_percentage,
            status=status,
        )
        allocation.save_with_user(user)

        AuditService.record(
            user, AuditAction.CREATED, allocation,
            changes={
                'resource': resource.pk,
                'project': project.code,
                'percentage': allocation_percentage,
            },
            description=f"{resource.name} allocated to {project.code}"
        )
        ManpowerLogger.log_allocation(allocation, user)
        return allocation

    @staticmethod
    def filter_allocations(filters: Dict[str, Any], queryset=None):
        """Filter allocations by resource, project, status and overlapping period."""
        if queryset is None:
            queryset = ResourceAllocation.objects.all()
        queryset = queryset.select_related('resource', 'project')

        if filters.get('resource'):
            queryset = queryset.filter(resource_id=parse_int_param(filters['resource'], 'resource'))
        if filters.get('project'):
            queryset = queryset.filter(project__code=filters['project'])
        if filters.get('status'):
            queryset = queryset.filter(status=str(filters['status']).upper())

        date_from = parse_date_param(filters.get('date_from'), 'date_from')
        date_to = parse_date_param(filters.get('date_to'), 'date_to')
        if date_from:
            queryset = queryset.filter(end_date__gte=date_from)
        if date_to:
            queryset = queryset.filter(start_date__lte=date_to)
        return queryset.order_by('-start_date', 'resource__name')

    # ------------------------------------------------------------------
    # Timesheets
    # ------------------------------------------------------------------

    @staticmethod
    def _check_daily_hours(resource: ManpowerResource, day: date, hours: Decimal,
                           exclude: Optional[int] = None) -> None:
        """
        Raises:
            InvalidPayloadException: If the hours are out of range or the
                day would exceed 24 logged hours.
        """
        hours = Decimal(str(hours))
        if hours <= 0 or hours > MAX_DAILY_HOURS:
            raise InvalidPayloadException(
                "Hours must be greater than 0 and at most 24.",
                details={'hours': str(hours)}
            )
        existing = resource.timesheets.filter(date=day).exclude(status=TimesheetStatus.REJECTED)
        if exclude is not None:
            existing = existing.exclude(pk=exclude)
        logged = existing.aggregate(total=Sum('hours'))['total'] or Decimal('0')
        if logged + hours > MAX_DAILY_HOURS:
            raise InvalidPayloadException(
                f"{resource.name} already has {logged} hours logged on {day}.",
                details={'date': str(day), 'logged': str(logged), 'requested': str(hours)}
            )

    @staticmethod
    @transaction.atomic
    def create_timesheet(user, resource: ManpowerResource, date: date, hours: Decimal,
                         project: Optional[Project] = None, billable: bool = True,
                         description: str = '') -> Timesheet:
        """Log hours as a DRAFT timesheet."""
        ManpowerService._check_daily_hours(resource, date, hours)
        timesheet = Timesheet.objects.create(
            resource=resource,
            project=project,
            date=date,
            hours=hours,
            billable=billable,
            description=description,
        )
        AuditService.record(
            user, AuditAction.CREATED, timesheet,
            changes={'hours': str(hours), 'date': str(date)},
            description=f"{hours}h logged for {resource.name}"
        )
        return timesheet

    @staticmethod
    @transaction.atomic
    def update_timesheet(user, timesheet: Timesheet, **fields) -> Timesheet:
        """
        Edit a draft or rejected timesheet.

        Raises:
            WorkflowTransitionException: If the timesheet is submitted or approved.
        """
        if timesheet.status not in EDITABLE_STATUSES:
            raise WorkflowTransitionException(
                f"A {timesheet.status.lower()} timesheet cannot be edited.",
                details={'timesheet_id': timesheet.pk, 'current_status': timesheet.status}
            )

        day = fields.get('date', timesheet.date)
        hours = fields.get('hours', timesheet.hours)
        ManpowerService._check_daily_hours(timesheet.resource, day, hours, exclude=timesheet.pk)

        changed = []
        for name, value in fields.items():
            if getattr(timesheet, name) != value:
                setattr(timesheet, name, value)
                changed.append(name)
        if changed:
            timesheet.save()
            AuditService.record(user, AuditAction.UPDATED, timesheet, changes={'fields': changed})
        return timesheet

    @staticmethod
    @transaction.atomic
    def transition_timesheet(user, timesheet: Timesheet, target_status: str,
                             reason: str = '') -> Timesheet:
        """
        Move a timesheet through DRAFT -> SUBMITTED -> APPROVED / REJECTED.

        Approval and rejection need a timesheet approver who is not the
        resource the hours belong to.

        Raises:
            WorkflowTransitionException: If the transition is not allowed.
            UnauthorizedRoleException: If the user cannot approve timesheets.
            SelfApprovalException: If the approver logged the hours.
        """
        validate_transition(timesheet, target_status)

        if target_status in APPROVAL_STATUSES:
            if not (user.is_superuser or user.can_approve_timesheets()):
                raise UnauthorizedRoleException(
                    "Only resource managers can approve or reject timesheets.",
                    details={'timesheet_id': timesheet.pk}
                )
            action = 'approve' if target_status == TimesheetStatus.APPROVED else 'reject'
            check_segregation_of_duties(timesheet.resource.user_id, user.id, action)

        old_status = timesheet.status
        now = timezone.now()
        timesheet.status = target_status

        if target_status == TimesheetStatus.SUBMITTED:
            timesheet.submitted_at = now
        elif target_status == TimesheetStatus.APPROVED:
            timesheet.approved_by = user
            timesheet.approved_at = now
            timesheet.rejection_reason = ''
        elif target_status == TimesheetStatus.REJECTED:
            timesheet.approved_by = user
            timesheet.approved_at = None
            timesheet.rejection_reason = reason
        else:
            timesheet.approved_by = None
            timesheet.approved_at = None
            timesheet.submitted_at = None
        timesheet.save()

        AuditService.record_status_change(user, timesheet, old_status, target_status, reason=reason)
        ManpowerLogger.log_timesheet_transition(timesheet, old_status, target_status, user)

        owner = timesheet.resource.user
        if target_status in APPROVAL_STATUSES and owner is not None:
            verdict = 'approved' if target_status == TimesheetStatus.APPROVED else 'rejected'
            message = f"Your timesheet for {timesheet.date} ({timesheet.hours}h) was {verdict}."
            if reason:
                message = f"{message} Reason: {reason}"
            NotificationService.send_notification(
                recipient=owner,
                title=f"Timesheet {verdict.title()}",
                message=message,
                link=f"/api/manpower/timesheets/{timesheet.pk}/",
                icon='bi-clock-history',
                priority=NotificationPriority.HIGH
                if target_status == TimesheetStatus.REJECTED else NotificationPriority.MEDIUM
            )
        return timesheet

    @staticmethod
    def filter_timesheets(filters: Dict[str, Any], queryset=None):
        """Filter timesheets by resource, project, status, billable and date range."""
        if queryset is None:
            queryset = Timesheet.objects.all()
        queryset = queryset.select_related('resource', 'project', 'approved_by')

        if filters.get('resource'):
            queryset = queryset.filter(resource_id=parse_int_param(filters['resource'], 'resource'))
        if filters.get('project'):
            queryset = queryset.filter(project__code=filters['project'])
        if filters.get('status'):
            statuses = [s.strip().upper() for s in str(filters['status']).split(',') if s.strip()]
            queryset = queryset.filter(status__in=statuses)
        billable = _to_bool(filters.get('billable'))
        if billable is not None:
            queryset = queryset.filter(billable=billable)

        date_from = parse_date_param(filters.get('date_from'), 'date_from')
        date_to = parse_date_param(filters.get('date_to'), 'date_to')
        if date_from:
            queryset = queryset.filter(date__gte=date_from)
        if date_to:
            queryset = queryset.filter(date__lte=date_to)
        return queryset.order_by('-date', 'resource__name')

    # ------------------------------------------------------------------
    # Reporting
    # ------------------------------------------------------------------

    @staticmethod
    def get_skill_matrix(department: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Count active resources per skill and proficiency level.

        Returns:
            One row per skill: {'skill', 'category', 'levels': {level: count}, 'total'}.
        """
        resource_skills = ResourceSkill.objects.filter(resource__is_active=True)
        if department:
            resource_skills = resource_skills.filter(resource__department__iexact=department)

        counts = defaultdict(dict)
        for row in resource_skills.values('skill_id', 'proficiency').annotate(count=Count('id')):
            counts[row['skill_id']][row['proficiency']] = row['count']

        matrix = []
        for skill in Skill.objects.all():
            levels = {level: counts[skill.pk].get(level, 0) for level in ProficiencyLevel.values}
            matrix.append({
                'skill': skill.name,
                'category': skill.category,
                'levels': levels,
                'total': sum(levels.values()),
            })
        return matrix

    @staticmethod
    def _leave_days(resource: ManpowerResource, start_date: date, end_date: date) -> int:
        """Working days of the period covered by leave or training."""
        days: Set[date] = set()
        for block in ManpowerService.get_unavailable_blocks(resource, start_date, end_date):
            day = max(block.start_date, start_date)
            last = min(block.end_date, end_date)
            while day <= last:
                if day.weekday() < 5:
                    days.add(day)
                day += timedelta(days=1)
        return len(days)

    @staticmethod
    def get_utilization_report(start_date: date, end_date: date, department: Optional[str] = None,
                               role: Optional[str] = None,
                               is_contractor: Optional[bool] = None) -> Dict[str, Any]:
        """
        Utilization of active resources over a period, from approved timesheets.

        Available hours are the weekly capacity spread over the working
        days of the period, minus leave and training days. Utilization is
        logged hours over available hours, in percent.

        Returns:
            Dictionary with period, resources, average_utilization,
            by_department and by_project. Hours are floats so the result
            can be stored as JSON.
        """
        if end_date < start_date:
            raise InvalidPayloadException(
                "The report end date cannot be before its start date.",
                details={'start_date': str(start_date), 'end_date': str(end_date)}
            )

        resources = ManpowerResource.objects.filter(is_active=True)
        if department:
            resources = resources.filter(department__iexact=department)
        if role:
            resources = resources.filter(role__iexact=role)
        if is_contractor is not None:
            resources = resources.filter(is_contractor=is_contractor)
        resources = list(resources.order_by('department', 'name'))

        timesheets = Timesheet.objects.filter(
            resource__in=resources,
            status=TimesheetStatus.APPROVED,
            date__gte=start_date,
            date__lte=end_date,
        )
        hours = defaultdict(lambda: {True: Decimal('0'), False: Decimal('0')})
        for row in timesheets.values('resource_id', 'billable').annotate(total=Sum('hours')):
            hours[row['resource_id']][row['billable']] = row['total'] or Decimal('0')

        period_days = working_days(start_date, end_date)
        rows = []
        departments = defaultdict(lambda: {'total': Decimal('0'), 'available': Decimal('0'), 'resources': 0})

        for resource in resources:
            billable = hours[resource.pk][True]
            non_billable = hours[resource.pk][False]
            total = billable + non_billable
            leave_days = ManpowerService._leave_days(resource, start_date, end_date)
            available = resource.daily_capacity_hours * max(0, period_days - leave_days)
            utilization = (total / available * 100) if available > 0 else Decimal('0')

            rows.append({
                'resource_id': resource.pk,
                'name': resource.name,
                'role': resource.role,
                'department': resource.department,
                'is_contractor': resource.is_contractor,
                'billable_hours': float(billable),
                'non_billable_hours': float(non_billable),
                'total_hours': float(total),
                'leave_days': leave_days,
                'available_hours': float(round(available, 2)),
                'utilization': float(round(utilization, 1)),
            })
            summary = departments[resource.department]
            summary['total'] += total
            summary['available'] += available
            summary['resources'] += 1

        average = round(sum(r['utilization'] for r in rows) / len(rows), 1) if rows else 0.0

        by_department = []
        for name in sorted(departments):
            summary = departments[name]
            utilization = (summary['total'] / summary['available'] * 100) if summary['available'] > 0 else 0
            by_department.append({
                'department': name,
                'resources': summary['resources'],
                'total_hours': float(summary['total']),
                'available_hours': float(round(summary['available'], 2)),
                'utilization': float(round(Decimal(utilization), 1)),
            })

        by_project = [
            {
                'project': row['project__code'] or '',
                'name': row['project__name'] or 'Unassigned',
                'hours': float(row['total'] or 0),
            }
            for row in timesheets.values('project__code', 'project__name')
            .annotate(total=Sum('hours')).order_by('-total', 'project__code')
        ]

        return {
            'period': {
                'start_date': start_date.isoformat(),
                'end_date': end_date.isoformat(),
                'working_days': period_days,
            },
            'resources': rows,
            'average_utilization': average,
            'by_department': by_department,
            'by_project': by_project,
        }

    @staticmethod
    def get_forecasts(department: Optional[str] = None):
        """Resource forecasts ordered by period, optionally for one department."""
        queryset = ResourceForecast.objects.all()
        if department:
            queryset = queryset.filter(department__iexact=department)
        return queryset.order_by('period', 'department')

    @staticmethod
    def get_projects(filters: Dict[str, Any], queryset=None):
        """Filter projects by status, beneficiary and a search on code or name."""
        if queryset is None:
            queryset = Project.objects.all()
        queryset = queryset.select_related('beneficiary', 'client_type')
        if filters.get('status'):
            queryset = queryset.filter(status=str(filters['status']).upper())
        if filters.get('beneficiary'):
            queryset = queryset.filter(beneficiary_id=parse_int_param(filters['beneficiary'], 'beneficiary'))
        search = (filters.get('search') or '').strip()
        if search:
            queryset = queryset.filter(Q(code__icontains=search) | Q(name__icontains=search))
        return queryset
