"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Data collectors computing KPI values from the stored
             beneficiary, committee and manpower records.
-------------------------------------------------------------------------
"""
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, Dict, Optional

from django.db.models import Sum
from django.utils import timezone

from apps.beneficiaries.models import Beneficiary
from apps.committees.models import CommitteeDecision, CommitteeSubmission, DecisionValue, SubmissionStatus
from apps.manpower.models import AllocationStatus, ResourceAllocation, Timesheet, TimesheetStatus
from apps.manpower.services import ManpowerService, working_days

Collector = Callable[['KpiMetric', datetime], Decimal]  # noqa: F821

COLLECTORS: Dict[str, Collector] = {}


def register_collector(code: str):
    """
    Register a function computing a metric value.

    Usage:
        @register_collector('open_cases')
        def open_cases(metric, now):
            return Decimal(...)
    """
    def decorator(func: Collector) -> Collector:
        COLLECTORS[code] = func
        return func
    return decorator


def get_collector(code: str) -> Optional[Collector]:
    return COLLECTORS.get(code)


def _window(metric, now: datetime, default_days: int = 30):
    """Reporting window ending today, sized by source_params['window_days']."""
    days = int(metric.source_params.get('window_days', default_days))
    end_date = timezone.localtime(now).date() if timezone.is_aware(now) else now.date()
    return end_date - timedelta(days=days - 1), end_date


def _percentage(part, whole) -> Decimal:
    if not whole:
        return Decimal('0')
    return (Decimal(part) / Decimal(whole) * 100).quantize(Decimal('0.01'))


def _scope(queryset, metric):
    if metric.client_type_id:
        return queryset.filter(client_type_id=metric.client_type_id)
    return queryset


@register_collector('resource_utilization')
def resource_utilization(metric, now):
    """Average utilization, optionally for one role, department or contractors only."""
    start_date, end_date = _window(metric, now)
    params = metric.source_params
    report = ManpowerService.get_utilization_report(
        start_date, end_date,
        department=params.get('department'),
        role=params.get('role'),
        is_contractor=params.get('is_contractor'),
    )
    return Decimal(str(report['average_utilization']))


@register_collector('contractor_utilization')
def contractor_utilization(metric, now):
    start_date, end_date = _window(metric, now)
    report = ManpowerService.get_utilization_report(
        start_date, end_date, role=metric.source_params.get('role'), is_contractor=True
    )
    return Decimal(str(report['average_utilization']))


@register_collector('allocation_efficiency')
def allocation_efficiency(metric, now):
    """
    Approved hours booked on allocated projects against the planned
    allocation hours of the window.
    """
    start_date, end_date = _window(metric, now)
    allocations = ResourceAllocation.objects.filter(
        status__in=[AllocationStatus.ACTIVE, AllocationStatus.COMPLETED],
        start_date__lte=end_date,
        end_date__gte=start_date,
    )

    planned = Decimal('0')
    actual = Decimal('0')
    for allocation in allocations:
        overlap_start = max(allocation.start_date, start_date)
        overlap_end = min(allocation.end_date, end_date)
        planned += allocation.hours_per_day * working_days(overlap_start, overlap_end)
        actual += Timesheet.objects.filter(
            resource_id=allocation.resource_id,
            project_id=allocation.project_id,
            status=TimesheetStatus.APPROVED,
            date__gte=overlap_start,
            date__lte=overlap_end,
        ).aggregate(total=Sum('hours'))['total'] or Decimal('0')
    return _percentage(actual, planned)


@register_collector('pending_submissions')
def pending_submissions(metric, now):
    queryset = CommitteeSubmission.objects.filter(status=SubmissionStatus.PENDING)
    return Decimal(_scope(queryset, metric).count())


@register_collector('approval_rate')
def approval_rate(metric, now):
    """Share of committee decisions in the window that approved the submission."""
    start_date, end_date = _window(metric, now, default_days=90)
    decisions = CommitteeDecision.objects.filter(decision_date__gte=start_date, decision_date__lte=end_date)
    if metric.client_type_id:
        decisions = decisions.filter(submission__client_type_id=metric.client_type_id)
    approved = decisions.filter(decision__in=[DecisionValue.APPROVED, DecisionValue.MODIFIED]).count()
    return _percentage(approved, decisions.count())


@register_collector('registrations_this_month')
def registrations_this_month(metric, now):
    today = timezone.localtime(now).date() if timezone.is_aware(now) else now.date()
    queryset = Beneficiary.objects.filter(
        registration_date__gte=today.replace(day=1),
        registration_date__lte=today,
    )
    return Decimal(_scope(queryset, metric).count())


@register_collector('active_beneficiaries')
def active_beneficiaries(metric, now):
    return Decimal(_scope(Beneficiary.objects.filter(is_active=True), metric).count())


@register_collector('timesheet_backlog')
def timesheet_backlog(metric, now):
    """Timesheets waiting for approval."""
    return Decimal(Timesheet.objects.filter(status=TimesheetStatus.SUBMITTED).count())
