"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Beneficiary search, registration statistics and export.
-------------------------------------------------------------------------
"""
import logging
from collections import OrderedDict
from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from django.db import transaction
from django.db.models import Count, Q
from django.db.models.functions import TruncMonth
from django.utils import timezone

from apps.beneficiaries.models import Beneficiary
from apps.core.api import parse_date_param
from apps.core.exports import render_csv, render_xlsx, CSV_CONTENT_TYPE, XLSX_CONTENT_TYPE
from apps.core.exceptions import InvalidPayloadException
from apps.core.models import AuditAction
from apps.core.services import AuditService
from apps.core.utils import calculate_age

logger = logging.getLogger(__name__)

AGE_RANGES = [
    ('60-69', 60, 69),
    ('70-79', 70, 79),
    ('80-89', 80, 89),
    ('90+', 90, None),
]

EXPORT_COLUMNS = [
    'Beneficiary Code', 'Registration Date', 'Emirates ID', 'Full Name (EN)',
    'Full Name (AR)', 'Date of Birth', 'Age', 'Gender', 'Contact Number',
    'Emirate', 'Area', 'Client Type', 'Status', 'Active',
]


def age_range_label(age: int) -> Optional[str]:
    """Return the summary bucket for an age, or None below 60."""
    for label, low, high in AGE_RANGES:
        if age >= low and (high is None or age <= high):
            return label
    return None


class BeneficiaryService:
    """
    Query and reporting helpers for beneficiaries.
    """

    @staticmethod
    def filter(params: Dict[str, Any], queryset=None):
        """
        Filter beneficiaries by the search parameters of the search form.

        Args:
            params: Mapping with any of search, client_type, gender, emirate,
                status, is_active, registered_from, registered_to.
            queryset: Base queryset (default: all beneficiaries).

        Returns:
            Filtered queryset ordered newest registration first.
        """
        if queryset is None:
            queryset = Beneficiary.objects.all()
        queryset = queryset.select_related('client_type')

        search = (params.get('search') or '').strip()
        if search:
            queryset = queryset.filter(
                Q(beneficiary_code__icontains=search) |
                Q(full_name_en__icontains=search) |
                Q(full_name_ar__icontains=search) |
                Q(emirates_id__icontains=search) |
                Q(contact_number__icontains=search)
            )

        client_type = params.get('client_type')
        if client_type:
            if str(client_type).isdigit():
                queryset = queryset.filter(client_type__type_id=int(client_type))
            else:
                queryset = queryset.filter(client_type__code=str(client_type).upper())

        for field in ('gender', 'emirate', 'status'):
            value = params.get(field)
            if value:
                queryset = queryset.filter(**{field: str(value).upper()})

        is_active = params.get('is_active')
        if is_active not in (None, ''):
            queryset = queryset.filter(is_active=str(is_active).lower() in ('1', 'true', 'yes'))

        registered_from = parse_date_param(params.get('registered_from'), 'registered_from')
        registered_to = parse_date_param(params.get('registered_to'), 'registered_to')
        if registered_from:
            queryset = queryset.filter(registration_date__gte=registered_from)
        if registered_to:
            queryset = queryset.filter(registration_date__lte=registered_to)

        return queryset.order_by('-registration_date', '-id')

    @staticmethod
    def get_summary(client_type=None, queryset=None, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Registration statistics.

        Returns:
            Dictionary with total, active, inactive, by_client_type, by_emirate,
            by_gender, by_age_range, by_status and by_registration_month.
        """
        if queryset is None:
            queryset = Beneficiary.get_client_filtered_queryset(client_type)
        elif client_type is not None:
            queryset = queryset.filter(client_type=client_type)
        today = today or timezone.localdate()

        total = queryset.count()
        active = queryset.filter(is_active=True).count()

        def grouped(field: str) -> Dict[str, int]:
            rows = queryset.values(field).annotate(count=Count('id')).order_by(field)
            return {str(row[field] or 'UNSPECIFIED'): row['count'] for row in rows}

        by_age_range = OrderedDict((label, 0) for label, _low, _high in AGE_RANGES)
        for dob in queryset.values_list('date_of_birth', flat=True):
            label = age_range_label(calculate_age(dob, today))
            if label:
                by_age_range[label] += 1

        by_month = OrderedDict()
        months = queryset.annotate(
            month=TruncMonth('registration_date')
        ).values('month').annotate(count=Count('id')).order_by('month')
        for row in months:
            if row['month']:
                by_month[row['month'].strftime('%Y-%m')] = row['count']

        return {
            'total': total,
            'active': active,
            'inactive': total - active,
            'by_client_type': grouped('client_type__code'),
            'by_emirate': grouped('emirate'),
            'by_gender': grouped('gender'),
            'by_status': grouped('status'),
            'by_age_range': dict(by_age_range),
            'by_registration_month': dict(by_month),
        }

    @staticmethod
    def export_rows(queryset) -> Tuple[List[str], List[List[Any]]]:
        rows = []
        for b in queryset.select_related('client_type'):
            rows.append([
                b.beneficiary_code,
                b.registration_date,
                b.emirates_id,
                b.full_name_en,
                b.full_name_ar,
                b.date_of_birth,
                b.age,
                b.get_gender_display(),
                b.contact_number,
                b.get_emirate_display(),
                b.area,
                b.client_type.code if b.client_type else '',
                b.get_status_display(),
                'Yes' if b.is_active else 'No',
            ])
        return EXPORT_COLUMNS, rows

    @staticmethod
    def export(queryset, fmt: str = 'xlsx') -> Tuple[bytes, str, str]:
        """
        Export beneficiaries.

        Args:
            queryset: Beneficiaries to export.
            fmt: 'xlsx' or 'csv'.

        Returns:
            Tuple of (content, filename, content_type).

        Raises:
            InvalidPayloadException: If the format is not supported.
        """
        fmt = (fmt or 'xlsx').lower()
        columns, rows = BeneficiaryService.export_rows(queryset)
        stamp = timezone.localdate().isoformat()

        if fmt == 'csv':
            return render_csv(columns, rows), f'beneficiaries-{stamp}.csv', CSV_CONTENT_TYPE
        if fmt in ('xlsx', 'excel'):
            return (render_xlsx(columns, rows, title='Beneficiaries'),
                    f'beneficiaries-{stamp}.xlsx', XLSX_CONTENT_TYPE)

        raise InvalidPayloadException(
            f"Unsupported export format '{fmt}'.",
            details={'supported': ['xlsx', 'csv']}
        )

    @staticmethod
    @transaction.atomic
    def deactivate(beneficiary: Beneficiary, user, reason: str = '') -> Beneficiary:
        """Soft-delete a beneficiary and record it in the audit trail."""
        beneficiary.is_active = False
        beneficiary.save_with_user(user, update_fields=['is_active', 'updated_at', 'updated_by'])
        AuditService.record(
            user,
            AuditAction.DEACTIVATED,
            beneficiary,
            changes={'reason': reason} if reason else {},
            description=f"Beneficiary {beneficiary.beneficiary_code} deactivated"
        )
        return beneficiary
