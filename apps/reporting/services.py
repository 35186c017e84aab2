"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Reporting engine: template lookup, report rendering (CSV,
             Excel, HTML and PDF), schedule calculation and scheduled
             delivery by email.

Uses WeasyPrint for PDF generation with Django templates.
-------------------------------------------------------------------------
"""
from calendar import monthrange
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence

from dateutil.relativedelta import relativedelta
from django.conf import settings
from django.core.files.base import ContentFile
from django.core.mail import EmailMessage
from django.db import transaction
from django.db.models import Q
from django.template.loader import render_to_string
from django.utils import timezone
from django.utils.text import slugify

from apps.core.api import parse_date_param
from apps.core.exceptions import (
    InvalidPayloadException, ReportGenerationException, RetryExhaustedException,
    TemplateNotFoundException,
)
from apps.core.exports import CSV_CONTENT_TYPE, XLSX_CONTENT_TYPE, render_csv, render_xlsx
from apps.core.models import AuditAction
from apps.core.services import AuditService
from apps.core.utils import retry_with_backoff
from apps.reporting.builders import get_builder
from apps.reporting.logging import ReportingLogger
from apps.reporting.models import (
    ReportTemplate, ReportSchedule, GeneratedReport, ReportFormat, ScheduleFrequency,
    FORMAT_EXTENSIONS,
)

CONTENT_TYPES = {
    ReportFormat.PDF: 'application/pdf',
    ReportFormat.EXCEL: XLSX_CONTENT_TYPE,
    ReportFormat.CSV: CSV_CONTENT_TYPE,
    ReportFormat.HTML: 'text/html; charset=utf-8',
}

# Changing any of these moves the next run
TIMING_FIELDS = ('frequency', 'time_of_day', 'day_of_week', 'day_of_month', 'is_active')


def render_html(template: ReportTemplate, columns: Sequence[str], rows: List[Sequence[Any]],
                parameters: Dict[str, Any], generated_at: datetime) -> str:
    context = {
        'template': template,
        'columns': columns,
        'rows': rows,
        'parameters': parameters,
        'sections': sorted(template.sections or [], key=lambda s: s.get('order', 0)),
        'generated_at': generated_at,
    }
    return render_to_string('reporting/report.html', context)


def render_pdf(html_string: str) -> bytes:
    """Render the report HTML to PDF with WeasyPrint."""
    from weasyprint import HTML

    try:
        return HTML(string=html_string).write_pdf()
    except Exception as exc:
        raise ReportGenerationException(
            f"PDF rendering failed: {exc}", details={'format': ReportFormat.PDF}
        ) from exc


class ReportingEngine:
    """Service class for report templates, generation and schedules."""

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    @staticmethod
    def get_available_templates():
        return ReportTemplate.objects.filter(is_active=True).select_related('client_type')

    @staticmethod
    def get_client_specific_templates(client_type):
        """Active templates for a client type plus the generic ones."""
        return ReportingEngine.get_available_templates().filter(
            Q(client_type__isnull=True) | Q(client_type=client_type)
        )

    @staticmethod
    def get_template(code: str) -> ReportTemplate:
        """
        Raises:
            TemplateNotFoundException: If no active template has this code.
        """
        template = ReportingEngine.get_available_templates().filter(code=code).first()
        if template is None:
            raise TemplateNotFoundException(
                f"Report template '{code}' was not found.", details={'code': code}
            )
        return template

    @staticmethod
    def validate_parameters(template: ReportTemplate, parameters: Dict[str, Any]) -> None:
        """
        Check parameters against the template's parameter definitions.

        A definition is either a bare name (optional, any value) or an
        object with `name`, `type` (string, number, date, boolean,
        select, multi-select), `required` and, for selects, `options`.

        Raises:
            InvalidPayloadException: On the first missing or invalid value.
        """
        for definition in template.parameters or []:
            if isinstance(definition, str):
                continue
            name = definition.get('name')
            value = parameters.get(name)
            if value in (None, ''):
                if definition.get('required'):
                    raise InvalidPayloadException(
                        f"Required parameter '{name}' is missing.", details={'parameter': name}
                    )
                continue

            kind = definition.get('type', 'string')
            options = definition.get('options')
            error = None
            if kind == 'string' and not isinstance(value, str):
                error = 'must be a string'
            elif kind == 'number' and (isinstance(value, bool) or not isinstance(value, (int, float))):
                error = 'must be a number'
            elif kind == 'boolean' and not isinstance(value, bool):
                error = 'must be a boolean'
            elif kind == 'date':
                parse_date_param(value, name)
            elif kind == 'select' and options and value not in options:
                error = 'must be one of the allowed values'
            elif kind == 'multi-select':
                if not isinstance(value, list):
                    error = 'must be a list'
                elif options and any(v not in options for v in value):
                    error = 'contains values that are not allowed'

            if error:
                raise InvalidPayloadException(
                    f"Parameter '{name}' {error}.",
                    details={'parameter': name, 'type': kind, 'options': options or []}
                )

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    @staticmethod
    def build_filename(template: ReportTemplate, fmt: str, today=None) -> str:
        today = today or timezone.localdate()
        return f"{slugify(template.name)}-{today:%Y-%m-%d}.{FORMAT_EXTENSIONS[fmt]}"

    @staticmethod
    def render(template: ReportTemplate, parameters: Dict[str, Any], fmt: str,
               client_type=None, generated_at: Optional[datetime] = None):
        """
        Build the report rows and render them in the requested format.

        Returns:
            Tuple of (content bytes, row count).

        Raises:
            ReportGenerationException: If the format or data source is unknown.
        """
        if fmt not in ReportFormat.values:
            raise ReportGenerationException(
                f"Unsupported report format '{fmt}'.",
                details={'format': fmt, 'supported': list(ReportFormat.values)}
            )
        builder = get_builder(template.data_source)
        if builder is None:
            raise ReportGenerationException(
                f"Template '{template.code}' has no data source '{template.data_source}'.",
                details={'template': template.code, 'data_source': template.data_source}
            )

        columns, rows = builder(parameters, client_type or template.client_type)

        if fmt == ReportFormat.CSV:
            content = render_csv(columns, rows)
        elif fmt == ReportFormat.EXCEL:
            content = render_xlsx(columns, rows, title=template.name)
        else:
            html_string = render_html(template, columns, rows, parameters, generated_at or timezone.now())
            if fmt == ReportFormat.HTML:
                content = html_string.encode('utf-8')
            else:
                content = render_pdf(html_string)
        return content, len(rows)

    @staticmethod
    @transaction.atomic
    def generate_report(template: ReportTemplate, parameters: Optional[Dict[str, Any]] = None,
                        fmt: Optional[str] = None, user=None, schedule: Optional[ReportSchedule] = None,
                        client_type=None) -> GeneratedReport:
        """
        Render a template and store the file as a GeneratedReport.

        The format defaults to the template's default format.
        """
        parameters = parameters or {}
        fmt = fmt or template.default_format
        now = timezone.now()
        ReportingEngine.validate_parameters(template, parameters)

        content, row_count = ReportingEngine.render(template, parameters, fmt, client_type, now)
        filename = ReportingEngine.build_filename(template, fmt, timezone.localdate(now))

        report = GeneratedReport(
            template=template,
            schedule=schedule,
            format=fmt,
            filename=filename,
            row_count=row_count,
            parameters=parameters,
            generated_by=user,
            generated_at=now,
        )
        report.file.save(filename, ContentFile(content), save=False)
        report.save()

        ReportingLogger.log_generated(report, user)
        return report

    # ------------------------------------------------------------------
    # Schedules
    # ------------------------------------------------------------------

    @staticmethod
    def calculate_next_run(schedule: ReportSchedule, now: Optional[datetime] = None) -> datetime:
        """
        Next run of a schedule after `now`, in local time.

        - The first candidate is today at time_of_day, or tomorrow when
          that time has passed.
        - WEEKLY moves forward to day_of_week (0 = Monday).
        - MONTHLY sets day_of_month, clamped to the month length, and
          moves a month forward when that is not in the future.
        - QUARTERLY then moves to the start of the next quarter
          (January, April, July, October).
        """
        now = timezone.localtime(now or timezone.now())
        run_time = schedule.time_of_day
        next_run = now.replace(hour=run_time.hour, minute=run_time.minute, second=0, microsecond=0)
        if next_run <= now:
            next_run += timedelta(days=1)

        if schedule.frequency == ScheduleFrequency.WEEKLY and schedule.day_of_week is not None:
            next_run += timedelta(days=(schedule.day_of_week - next_run.weekday()) % 7)

        elif (schedule.frequency in (ScheduleFrequency.MONTHLY, ScheduleFrequency.QUARTERLY)
              and schedule.day_of_month is not None):
            day = schedule.day_of_month
            next_run = next_run.replace(day=min(day, monthrange(next_run.year, next_run.month)[1]))
            if next_run <= now:
                next_run += relativedelta(months=1, day=day)

            if schedule.frequency == ScheduleFrequency.QUARTERLY:
                next_run += relativedelta(months=3 - (next_run.month - 1) % 3, day=day)

        return next_run

    @staticmethod
    @transaction.atomic
    def schedule_report(user, schedule: ReportSchedule) -> ReportSchedule:
        """Save a new schedule with its first run time."""
        schedule.next_run = ReportingEngine.calculate_next_run(schedule) if schedule.is_active else None
        schedule.save_with_user(user)
        AuditService.record(
            user, AuditAction.CREATED, schedule,
            description=f"{schedule.get_frequency_display()} schedule for {schedule.template.code}"
        )
        return schedule

    @staticmethod
    @transaction.atomic
    def update_schedule(user, schedule: ReportSchedule, **fields) -> ReportSchedule:
        """
        Update a schedule, recomputing next_run when its timing changes.
        """
        changed = []
        for name, value in fields.items():
            if getattr(schedule, name) != value:
                setattr(schedule, name, value)
                changed.append(name)

        if any(name in TIMING_FIELDS for name in changed):
            schedule.next_run = ReportingEngine.calculate_next_run(schedule) if schedule.is_active else None

        if changed:
            schedule.save_with_user(user)
            AuditService.record(user, AuditAction.UPDATED, schedule, changes={'fields': changed})
        return schedule

    @staticmethod
    @transaction.atomic
    def delete_schedule(user, schedule: ReportSchedule) -> None:
        AuditService.record(
            user, AuditAction.DEACTIVATED, schedule,
            description=f"Schedule {schedule.pk} for {schedule.template.code} deleted"
        )
        schedule.delete()

    # ------------------------------------------------------------------
    # Scheduled runs
    # ------------------------------------------------------------------

    @staticmethod
    def deliver(report: GeneratedReport, recipients: List[str]) -> bool:
        """
        Email a generated report as an attachment.

        Returns:
            True when delivered, False when every attempt failed.
        """
        if not recipients:
            return False

        with report.file.open('rb') as handle:
            content = handle.read()

        message = EmailMessage(
            subject=f"{report.template.name} ({report.generated_at:%Y-%m-%d})",
            body=(
                f"Please find attached the {report.template.name} report "
                f"generated on {timezone.localtime(report.generated_at):%Y-%m-%d %H:%M}."
            ),
            from_email=settings.DEFAULT_FROM_EMAIL,
            to=recipients,
        )
        message.attach(report.filename, content, CONTENT_TYPES[report.format].split(';')[0])

        try:
            retry_with_backoff(message.send, retries=settings.REPORT_DELIVERY_RETRIES)
        except RetryExhaustedException as exc:
            ReportingLogger.log_delivery_error(report, recipients, exc)
            return False

        ReportingLogger.log_delivery(report, recipients)
        return True

    @staticmethod
    def run_due_schedules(now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """
        Generate and deliver every active schedule whose next run has come.

        A schedule that fails is logged and still moves to its next run.
        """
        now = now or timezone.now()
        due = ReportSchedule.objects.filter(
            is_active=True, next_run__isnull=False, next_run__lte=now
        ).select_related('template', 'client_type')

        results = []
        for schedule in due:
            result = {'schedule': schedule.pk, 'report': None, 'delivered': False, 'error': ''}
            try:
                report = ReportingEngine.generate_report(
                    schedule.template,
                    schedule.parameters,
                    schedule.format,
                    schedule=schedule,
                    client_type=schedule.client_type,
                )
                result['report'] = report.pk
                result['delivered'] = ReportingEngine.deliver(report, schedule.recipients)
            except Exception as exc:
                ReportingLogger.log_generation_failed(schedule, exc)
                result['error'] = str(exc)

            schedule.last_run = now
            schedule.next_run = ReportingEngine.calculate_next_run(schedule, now)
            schedule.save(update_fields=['last_run', 'next_run', 'updated_at'])
            results.append(result)
        return results
