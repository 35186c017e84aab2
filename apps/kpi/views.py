"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: KPI API views: dashboards, metrics and data points, alerts
             and resource utilization snapshots.
-------------------------------------------------------------------------
"""
from typing import Dict, Any

from django.db.models import Q
from django.forms.models import model_to_dict
from django.shortcuts import get_object_or_404

from apps.core.api import ApiView, json_response, paginate, parse_datetime_param
from apps.core.exceptions import InvalidPayloadException
from apps.core.models import AuditAction
from apps.core.services import AuditService
from apps.kpi.forms import (
    KpiMetricForm, KpiDashboardForm, KpiAlertForm, DataPointForm, UtilizationReportForm,
)
from apps.kpi.models import KpiMetric, KpiDataPoint, KpiDashboard, KpiAlert, ResourceUtilizationReport
from apps.kpi.services import KpiService
from apps.users.models import RoleCode

KPI_ROLES = (RoleCode.SENIOR_MANAGEMENT, RoleCode.PROGRAM_MANAGER, RoleCode.RESOURCE_MANAGER)
KPI_ADMIN_ROLES = (RoleCode.SENIOR_MANAGEMENT, RoleCode.PROGRAM_MANAGER)

MAX_POINTS = 500


def serialize_metric(metric: KpiMetric) -> Dict[str, Any]:
    data = KpiService.get_metric_summary(metric)
    data.update({
        'description': metric.description,
        'aggregation': metric.aggregation,
        'source': metric.source,
        'source_params': metric.source_params,
        'client_type': metric.client_type.code if metric.client_type_id else None,
        'is_active': metric.is_active,
    })
    return data


def serialize_point(point: KpiDataPoint) -> Dict[str, Any]:
    return {
        'id': point.pk,
        'timestamp': point.timestamp,
        'value': point.value,
        'metadata': point.metadata,
    }


def serialize_dashboard(dashboard: KpiDashboard) -> Dict[str, Any]:
    return {
        'id': dashboard.pk,
        'code': dashboard.code,
        'name': dashboard.name,
        'description': dashboard.description,
        'refresh_interval': dashboard.refresh_interval,
        'last_refreshed_at': dashboard.last_refreshed_at,
        'metrics': list(dashboard.metrics.values_list('code', flat=True)),
        'is_active': dashboard.is_active,
    }


def serialize_alert(alert: KpiAlert) -> Dict[str, Any]:
    return {
        'id': alert.pk,
        'metric': alert.metric.code,
        'condition': alert.condition,
        'threshold': alert.threshold,
        'message': alert.message,
        'severity': alert.severity,
        'is_active': alert.is_active,
        'is_triggered': alert.is_triggered,
        'triggered_at': alert.triggered_at,
        'resolved_at': alert.resolved_at,
        'notification_channels': alert.notification_channels,
        'recipients': list(alert.recipients.values_list('pk', flat=True)),
    }


def serialize_report(report: ResourceUtilizationReport, detail: bool = False) -> Dict[str, Any]:
    data = {
        'id': report.pk,
        'name': report.name,
        'start_date': report.start_date,
        'end_date': report.end_date,
        'department': report.department,
        'average_utilization': report.average_utilization,
        'resources_count': report.resources_count,
        'generated_by': report.generated_by.get_full_name() if report.generated_by else None,
        'created_at': report.created_at,
    }
    if detail:
        data['payload'] = report.payload
    return data


class KpiScopeMixin:
    """Metrics for the user's client type plus the programme-wide ones."""

    def scope_metrics(self, queryset):
        client_type = getattr(self.request, 'client_type', None)
        if client_type is None:
            return queryset
        return queryset.filter(Q(client_type__isnull=True) | Q(client_type=client_type))


# =====================================================================
# DASHBOARDS
# =====================================================================

class DashboardListView(ApiView):

    required_roles = KPI_ROLES
    write_roles = KPI_ADMIN_ROLES

    def get(self, request):
        dashboards = KpiDashboard.objects.filter(is_active=True).prefetch_related('metrics')
        return json_response({'results': [serialize_dashboard(d) for d in dashboards]})

    def post(self, request):
        form = KpiDashboardForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        dashboard = form.save(commit=False)
        dashboard.save_with_user(request.user)
        form.save_m2m()
        AuditService.record(request.user, AuditAction.CREATED, dashboard,
                            description=f"Dashboard {dashboard.code} created")
        return json_response(serialize_dashboard(dashboard), status=201)


class DashboardDetailView(ApiView):
    """Current values of a dashboard's metrics. ?refresh=1 recomputes them first."""

    required_roles = KPI_ROLES

    def get(self, request, pk):
        dashboard = get_object_or_404(KpiDashboard, pk=pk, is_active=True)
        force_refresh = request.GET.get('refresh') in ('1', 'true', 'yes')
        return json_response(KpiService.get_dashboard_data(dashboard, force_refresh=force_refresh))


# =====================================================================
# METRICS
# =====================================================================

class MetricListView(KpiScopeMixin, ApiView):
    """GET: metrics (category, active). POST: create a metric."""

    required_roles = KPI_ROLES
    write_roles = KPI_ADMIN_ROLES

    def get(self, request):
        queryset = self.scope_metrics(KpiMetric.objects.select_related('client_type'))
        if request.GET.get('category'):
            queryset = queryset.filter(category=request.GET['category'])
        if request.GET.get('active') in ('true', '1'):
            queryset = queryset.filter(is_active=True)
        return json_response(paginate(queryset, request, serialize_metric))

    def post(self, request):
        form = KpiMetricForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        metric = form.save(commit=False)
        metric.save_with_user(request.user)
        AuditService.record(request.user, AuditAction.CREATED, metric,
                            description=f"KPI metric {metric.code} created")
        return json_response(serialize_metric(metric), status=201)


class MetricDetailView(KpiScopeMixin, ApiView):
    """
    GET: metric with its data points (?since, ?limit) and the aggregate
    over them. PATCH: update the metric definition.
    """

    required_roles = KPI_ROLES
    write_roles = KPI_ADMIN_ROLES

    def get_metric(self, pk) -> KpiMetric:
        return get_object_or_404(self.scope_metrics(KpiMetric.objects.all()), pk=pk)

    def get(self, request, pk):
        metric = self.get_metric(pk)
        since = parse_datetime_param(request.GET.get('since'), 'since')
        try:
            limit = min(MAX_POINTS, max(1, int(request.GET.get('limit', 100))))
        except (TypeError, ValueError):
            raise InvalidPayloadException("'limit' must be a whole number.", details={'field': 'limit'})

        points = metric.data_points.order_by('-timestamp', '-id')
        if since is not None:
            points = points.filter(timestamp__gte=since)
        data = serialize_metric(metric)
        data['aggregate'] = KpiService.aggregate(metric, since=since)
        data['data_points'] = [serialize_point(p) for p in list(points[:limit])[::-1]]
        return json_response(data)

    def patch(self, request, pk):
        metric = self.get_metric(pk)
        data = model_to_dict(metric, fields=KpiMetricForm.Meta.fields)
        data['client_type'] = metric.client_type.code if metric.client_type_id else None
        data.update(self.get_json())
        form = KpiMetricForm(data=data, instance=metric)
        if not form.is_valid():
            return self.form_errors(form)
        changed = form.changed_data
        metric = form.save(commit=False)
        metric.save_with_user(request.user)
        if changed:
            AuditService.record(request.user, AuditAction.UPDATED, metric, changes={'fields': changed})
        return json_response(serialize_metric(metric))


class DataPointCreateView(KpiScopeMixin, ApiView):
    """POST {"value": 72.5, "timestamp": "...", "metadata": {...}}."""

    required_roles = KPI_ROLES

    def post(self, request, pk):
        metric = get_object_or_404(self.scope_metrics(KpiMetric.objects.filter(is_active=True)), pk=pk)
        form = DataPointForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        point = KpiService.add_data_point(
            metric,
            form.cleaned_data['value'],
            timestamp=form.cleaned_data.get('timestamp'),
            metadata=form.cleaned_data.get('metadata'),
        )
        metric.refresh_from_db()
        return json_response({
            'data_point': serialize_point(point),
            'trend': metric.trend,
            'status': KpiService.get_status(metric, point.value),
        }, status=201)


# =====================================================================
# ALERTS
# =====================================================================

class AlertListView(ApiView):
    """GET: alerts (?metric=<code>). POST: create an alert."""

    required_roles = KPI_ROLES
    write_roles = KPI_ADMIN_ROLES

    def get(self, request):
        queryset = KpiAlert.objects.select_related('metric').prefetch_related('recipients')
        if request.GET.get('metric'):
            queryset = queryset.filter(metric__code=request.GET['metric'])
        return json_response(paginate(queryset, request, serialize_alert))

    def post(self, request):
        form = KpiAlertForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        alert = form.save(commit=False)
        alert.created_by = request.user
        alert.save()
        form.save_m2m()
        return json_response(serialize_alert(alert), status=201)


class ActiveAlertListView(ApiView):

    required_roles = KPI_ROLES

    def get(self, request):
        alerts = KpiService.get_active_alerts().prefetch_related('recipients')
        return json_response({'results': [serialize_alert(a) for a in alerts]})


# =====================================================================
# UTILIZATION REPORTS
# =====================================================================

class UtilizationReportListView(ApiView):
    """GET: stored snapshots. POST {"start_date", "end_date", "name", "department"}: generate one."""

    required_roles = KPI_ROLES

    def get(self, request):
        queryset = ResourceUtilizationReport.objects.select_related('generated_by')
        return json_response(paginate(queryset, request, serialize_report))

    def post(self, request):
        form = UtilizationReportForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        report = KpiService.generate_resource_utilization_report(
            form.cleaned_data['start_date'],
            form.cleaned_data['end_date'],
            name=form.cleaned_data.get('name') or None,
            department=form.cleaned_data.get('department') or None,
            user=request.user,
        )
        return json_response(serialize_report(report, detail=True), status=201)


class UtilizationReportDetailView(ApiView):

    required_roles = KPI_ROLES

    def get(self, request, pk):
        report = get_object_or_404(ResourceUtilizationReport, pk=pk)
        return json_response(serialize_report(report, detail=True))
