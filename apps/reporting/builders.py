"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Data builders producing the columns and rows of each report
             from the stored beneficiary, committee, manpower and KPI
             records.
-------------------------------------------------------------------------
"""
from datetime import timedelta
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from django.db.models import Count, Q, Sum
from django.utils import timezone

from apps.beneficiaries.models import Beneficiary
from apps.clients.models import ClientType, ClientTypeCode
from apps.committees.models import CommitteeDecision, DecisionValue
from apps.core.api import parse_date_param
from apps.kpi.models import KpiMetric
from apps.kpi.services import KpiService
from apps.manpower.models import Project, Timesheet, TimesheetStatus
from apps.manpower.services import ManpowerService

Rows = List[Sequence[Any]]
Builder = Callable[[Dict[str, Any], Optional[ClientType]], Tuple[List[str], Rows]]

BUILDERS: Dict[str, Builder] = {}


def register_builder(code: str):
    """Register a function returning ``(columns, rows)`` for a data source."""
    def decorator(func: Builder) -> Builder:
        BUILDERS[code] = func
        return func
    return decorator


def get_builder(code: str) -> Optional[Builder]:
    return BUILDERS.get(code)


def _period(parameters: Dict[str, Any], default_days: int = 30):
    """Reporting period from start_date / end_date, defaulting to the last N days."""
    end_date = parse_date_param(parameters.get('end_date'), 'end_date') or timezone.localdate()
    start_date = (
        parse_date_param(parameters.get('start_date'), 'start_date')
        or end_date - timedelta(days=default_days - 1)
    )
    return start_date, end_date


def _for_client(queryset, code: str):
    """Records of one funding source; none when the client type is not set up."""
    client_type = ClientType.objects.filter(code=code).first()
    if client_type is None:
        return queryset.none()
    return queryset.filter(client_type=client_type)


def _scope(queryset, client_type: Optional[ClientType]):
    if client_type is not None:
        return queryset.filter(client_type=client_type)
    return queryset


@register_builder('beneficiary-status')
def beneficiary_status(parameters, client_type):
    """Beneficiaries with their case status (status, emirate, registration period)."""
    queryset = _scope(Beneficiary.objects.select_related('client_type'), client_type)
    queryset = queryset.annotate(family_size=Count('family_members'))
    if parameters.get('status'):
        queryset = queryset.filter(status=parameters['status'])
    if parameters.get('emirate'):
        queryset = queryset.filter(emirate=parameters['emirate'])
    if parameters.get('start_date') or parameters.get('end_date'):
        start_date, end_date = _period(parameters, default_days=365)
        queryset = queryset.filter(registration_date__gte=start_date, registration_date__lte=end_date)

    columns = ['Code', 'Name', 'Client Type', 'Emirate', 'Age', 'Status', 'Registered', 'Family Members']
    rows = [
        [
            b.beneficiary_code,
            b.full_name_en,
            b.client_type.code if b.client_type else '',
            b.get_emirate_display(),
            b.age,
            b.get_status_display(),
            b.registration_date,
            b.family_size,
        ]
        for b in queryset.order_by('beneficiary_code')
    ]
    return columns, rows


@register_builder('committee-decisions')
def committee_decisions(parameters, client_type):
    """Committee decisions in the period (committee code, decision)."""
    start_date, end_date = _period(parameters, default_days=90)
    queryset = CommitteeDecision.objects.select_related('committee', 'submission').filter(
        decision_date__gte=start_date,
        decision_date__lte=end_date,
    )
    if client_type is not None:
        queryset = queryset.filter(submission__client_type=client_type)
    if parameters.get('committee'):
        queryset = queryset.filter(committee__code=parameters['committee'])
    if parameters.get('decision'):
        queryset = queryset.filter(decision=parameters['decision'])

    columns = ['Date', 'Committee', 'Submission', 'Decision', 'For', 'Against', 'Abstain', 'Follow-up']
    rows = [
        [
            d.decision_date,
            d.committee.name_en,
            d.submission.title,
            d.get_decision_display(),
            d.votes_for,
            d.votes_against,
            d.votes_abstain,
            'Yes' if d.follow_up_required else 'No',
        ]
        for d in queryset.order_by('decision_date', 'id')
    ]
    return columns, rows


@register_builder('resource-utilization')
def resource_utilization(parameters, client_type):
    start_date, end_date = _period(parameters)
    report = ManpowerService.get_utilization_report(
        start_date, end_date, department=parameters.get('department') or None
    )
    columns = [
        'Resource', 'Role', 'Department', 'Contractor', 'Billable Hours',
        'Non-billable Hours', 'Total Hours', 'Available Hours', 'Utilization %',
    ]
    rows = [
        [
            r['name'], r['role'], r['department'], 'Yes' if r['is_contractor'] else 'No',
            r['billable_hours'], r['non_billable_hours'], r['total_hours'],
            r['available_hours'], r['utilization'],
        ]
        for r in report['resources']
    ]
    return columns, rows


@register_builder('kpi-summary')
def kpi_summary(parameters, client_type):
    """Latest value and status of each active metric (category)."""
    queryset = KpiMetric.objects.filter(is_active=True)
    if client_type is not None:
        queryset = queryset.filter(Q(client_type__isnull=True) | Q(client_type=client_type))
    if parameters.get('category'):
        queryset = queryset.filter(category=parameters['category'])

    columns = ['Code', 'Metric', 'Category', 'Value', 'Unit', 'Target', 'Status', 'Trend']
    rows = []
    for metric in queryset.order_by('category', 'name'):
        summary = KpiService.get_metric_summary(metric)
        rows.append([
            metric.code, metric.name, metric.get_category_display(), summary['value'],
            metric.unit, metric.target, summary['status'], metric.trend,
        ])
    return columns, rows


@register_builder('fdf-social-impact')
def fdf_social_impact(parameters, client_type):
    """Family welfare view of FDF beneficiaries."""
    queryset = _for_client(Beneficiary.objects.all(), ClientTypeCode.FDF).annotate(
        family_size=Count('family_members', distinct=True),
        dependents=Count('family_members', filter=Q(family_members__is_dependent=True), distinct=True),
        medical=Count('family_members', filter=Q(family_members__has_medical_condition=True), distinct=True),
        approvals=Count(
            'committee_submissions__decisions',
            filter=Q(committee_submissions__decisions__decision__in=[
                DecisionValue.APPROVED, DecisionValue.MODIFIED,
            ]),
            distinct=True
        ),
    )
    if parameters.get('emirate'):
        queryset = queryset.filter(emirate=parameters['emirate'])

    columns = [
        'Code', 'Name', 'Age', 'Emirate', 'Family Members', 'Dependents',
        'Medical Conditions', 'Approved Decisions', 'Status',
    ]
    rows = [
        [
            b.beneficiary_code, b.full_name_en, b.age, b.get_emirate_display(), b.family_size,
            b.dependents, b.medical, b.approvals, b.get_status_display(),
        ]
        for b in queryset.order_by('beneficiary_code')
    ]
    return columns, rows


@register_builder('adha-property')
def adha_property(parameters, client_type):
    """Property details and project costs of ADHA beneficiaries."""
    queryset = _for_client(Beneficiary.objects.all(), ClientTypeCode.ADHA).annotate(
        project_count=Count('projects', distinct=True),
        project_cost=Sum('projects__estimated_cost'),
    )
    if parameters.get('property_type'):
        queryset = queryset.filter(property_type=parameters['property_type'])

    columns = [
        'Code', 'Name', 'Emirate', 'Property Type', 'Ownership', 'Year Built',
        'Projects', 'Estimated Cost (AED)', 'Status',
    ]
    rows = [
        [
            b.beneficiary_code, b.full_name_en, b.get_emirate_display(), b.get_property_type_display(),
            b.get_ownership_display(), b.year_of_construction, b.project_count,
            b.project_cost or Decimal('0.00'), b.get_status_display(),
        ]
        for b in queryset.order_by('beneficiary_code')
    ]
    return columns, rows


@register_builder('cash-client-value')
def cash_client_value(parameters, client_type):
    """Estimated cost against approved labour cost of Cash client projects."""
    projects = _for_client(Project.objects.all(), ClientTypeCode.CASH).select_related('beneficiary')
    if parameters.get('status'):
        projects = projects.filter(status=parameters['status'])

    columns = [
        'Project', 'Name', 'Beneficiary', 'Status', 'Estimated Cost (AED)',
        'Approved Hours', 'Labour Cost (AED)', 'Variance (AED)',
    ]
    rows = []
    for project in projects.order_by('code'):
        hours = Decimal('0')
        labour = Decimal('0')
        timesheets = Timesheet.objects.filter(project=project, status=TimesheetStatus.APPROVED)
        for row in timesheets.values('resource__hourly_rate').annotate(total=Sum('hours')):
            hours += row['total']
            labour += row['total'] * row['resource__hourly_rate']
        estimated = project.estimated_cost or Decimal('0.00')
        rows.append([
            project.code,
            project.name,
            project.beneficiary.full_name_en if project.beneficiary else '',
            project.get_status_display(),
            estimated,
            hours,
            labour.quantize(Decimal('0.01')),
            (estimated - labour).quantize(Decimal('0.01')),
        ])
    return columns, rows
