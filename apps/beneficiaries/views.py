"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Beneficiary API views: registration, search, summary,
             export, family members and case status changes.
-------------------------------------------------------------------------
"""
from typing import Dict, Any

from django.forms.models import model_to_dict
from django.shortcuts import get_object_or_404
from django.utils import timezone

from apps.beneficiaries.forms import BeneficiaryForm, FamilyMemberForm
from apps.beneficiaries.models import Beneficiary, FamilyMember
from apps.beneficiaries.services import BeneficiaryService
from apps.beneficiaries.workflows import change_status, get_valid_transitions
from apps.core.api import ApiView, json_response, paginate
from apps.core.exceptions import InvalidPayloadException, UnauthorizedRoleException
from apps.core.exports import file_response
from apps.core.models import AuditAction
from apps.core.services import AuditService
from apps.users.models import RoleCode

WRITE_ROLES = (RoleCode.CASE_WORKER, RoleCode.PROGRAM_MANAGER)


def serialize_family_member(member: FamilyMember) -> Dict[str, Any]:
    return {
        'id': member.pk,
        'full_name_en': member.full_name_en,
        'full_name_ar': member.full_name_ar,
        'relationship': member.relationship,
        'date_of_birth': member.date_of_birth,
        'gender': member.gender,
        'contact_number': member.contact_number,
        'emirates_id': member.emirates_id,
        'is_dependent': member.is_dependent,
        'has_medical_condition': member.has_medical_condition,
        'medical_condition_details': member.medical_condition_details,
    }


def serialize_beneficiary(b: Beneficiary, detail: bool = False) -> Dict[str, Any]:
    data = {
        'id': b.pk,
        'public_id': b.public_id,
        'beneficiary_code': b.beneficiary_code,
        'registration_date': b.registration_date,
        'emirates_id': b.emirates_id,
        'full_name_en': b.full_name_en,
        'full_name_ar': b.full_name_ar,
        'date_of_birth': b.date_of_birth,
        'age': b.age,
        'gender': b.gender,
        'contact_number': b.contact_number,
        'client_type': b.client_type.code if b.client_type else None,
        'emirate': b.emirate,
        'status': b.status,
        'is_active': b.is_active,
    }
    if detail:
        data.update({
            'secondary_contact_number': b.secondary_contact_number,
            'email': b.email,
            'address': {
                'emirate': b.emirate,
                'area': b.area,
                'street': b.street,
                'building_villa': b.building_villa,
                'gps_coordinates': b.gps_coordinates,
            },
            'property_details': {
                'property_type': b.property_type,
                'ownership': b.ownership,
                'bedrooms': b.bedrooms,
                'bathrooms': b.bathrooms,
                'floors': b.floors,
                'year_of_construction': b.year_of_construction,
            },
            'notes': b.notes,
            'allowed_transitions': get_valid_transitions(b.status),
            'family_members': [serialize_family_member(m) for m in b.family_members.all()],
            'created_at': b.created_at,
            'updated_at': b.updated_at,
        })
    return data


def _flatten_payload(data: Dict[str, Any]) -> Dict[str, Any]:
    """Accept nested address / property_details objects as sent by the registration form."""
    flat = dict(data)
    for group in ('address', 'property_details'):
        nested = flat.pop(group, None)
        if isinstance(nested, dict):
            flat.update(nested)
    return flat


class BeneficiaryScopeMixin:
    """Restrict beneficiaries to the user's client type."""

    def get_beneficiary(self, pk) -> Beneficiary:
        queryset = self.scope_queryset(Beneficiary.objects.select_related('client_type'))
        return get_object_or_404(queryset, pk=pk)

    def check_client_type(self, client_type) -> None:
        if not self.request.user.can_access_client_type(client_type):
            raise UnauthorizedRoleException(
                "You cannot register beneficiaries for another client type.",
                details={'client_type': client_type.code}
            )


class BeneficiaryListView(BeneficiaryScopeMixin, ApiView):
    """
    GET: search beneficiaries (search, client_type, gender, emirate, status,
    is_active, registered_from, registered_to).
    POST: register a new beneficiary.
    """

    write_roles = WRITE_ROLES

    def get(self, request):
        queryset = BeneficiaryService.filter(request.GET, self.scope_queryset(Beneficiary.objects.all()))
        return json_response(paginate(queryset, request, serialize_beneficiary))

    def post(self, request):
        data = _flatten_payload(self.get_json())
        data.setdefault('registration_date', timezone.localdate())
        form = BeneficiaryForm(data=data)
        if not form.is_valid():
            return self.form_errors(form)
        self.check_client_type(form.cleaned_data['client_type'])

        beneficiary = form.save(commit=False)
        beneficiary.save_with_user(request.user)
        AuditService.record(
            request.user, AuditAction.CREATED, beneficiary,
            changes={'status': beneficiary.status},
            description=f"Beneficiary {beneficiary.beneficiary_code} registered"
        )
        return json_response(serialize_beneficiary(beneficiary, detail=True), status=201)


class BeneficiaryDetailView(BeneficiaryScopeMixin, ApiView):
    """GET details, PATCH updates, DELETE deactivates (soft delete)."""

    write_roles = WRITE_ROLES

    def get(self, request, pk):
        return json_response(serialize_beneficiary(self.get_beneficiary(pk), detail=True))

    def patch(self, request, pk):
        beneficiary = self.get_beneficiary(pk)
        payload = _flatten_payload(self.get_json())
        payload.pop('status', None)

        data = model_to_dict(beneficiary, fields=BeneficiaryForm.Meta.fields)
        data['client_type'] = beneficiary.client_type.code if beneficiary.client_type else None
        data.update(payload)

        form = BeneficiaryForm(data=data, instance=beneficiary)
        if not form.is_valid():
            return self.form_errors(form)
        self.check_client_type(form.cleaned_data['client_type'])

        changed = form.changed_data
        beneficiary = form.save(commit=False)
        beneficiary.save_with_user(request.user)
        if changed:
            AuditService.record(
                request.user, AuditAction.UPDATED, beneficiary,
                changes={'fields': changed}
            )
        return json_response(serialize_beneficiary(beneficiary, detail=True))

    def delete(self, request, pk):
        beneficiary = self.get_beneficiary(pk)
        reason = request.GET.get('reason', '')
        BeneficiaryService.deactivate(beneficiary, request.user, reason)
        return json_response(serialize_beneficiary(beneficiary))


class BeneficiaryStatusView(BeneficiaryScopeMixin, ApiView):
    """
    Change the case status.

    Body: {"status": "UNDER_ASSESSMENT", "reason": "..."}
    """

    write_roles = (RoleCode.CASE_WORKER, RoleCode.PROGRAM_MANAGER, RoleCode.ASSESSOR)

    def post(self, request, pk):
        beneficiary = self.get_beneficiary(pk)
        data = self.get_json()
        target = data.get('status')
        if not target:
            raise InvalidPayloadException("'status' is required.", details={'field': 'status'})
        change_status(beneficiary, str(target).upper(), request.user, reason=data.get('reason', ''))
        return json_response(serialize_beneficiary(beneficiary, detail=True))


class BeneficiaryHistoryView(BeneficiaryScopeMixin, ApiView):
    """Audit trail of one beneficiary."""

    def get(self, request, pk):
        from apps.core.views import serialize_audit_entry

        beneficiary = self.get_beneficiary(pk)
        entries = AuditService.history_for(beneficiary).select_related('actor')
        return json_response({'results': [serialize_audit_entry(e) for e in entries]})


class BeneficiarySummaryView(ApiView):
    """Registration statistics for the dashboard."""

    def get(self, request):
        queryset = self.scope_queryset(Beneficiary.objects.all())
        return json_response(BeneficiaryService.get_summary(queryset=queryset))


class BeneficiaryExportView(ApiView):
    """Export the filtered beneficiary list (?format=xlsx|csv)."""

    def get(self, request):
        queryset = BeneficiaryService.filter(request.GET, self.scope_queryset(Beneficiary.objects.all()))
        content, filename, content_type = BeneficiaryService.export(
            queryset, request.GET.get('format', 'xlsx')
        )
        return file_response(content, filename, content_type)


class FamilyMemberListView(BeneficiaryScopeMixin, ApiView):

    write_roles = WRITE_ROLES

    def get(self, request, pk):
        beneficiary = self.get_beneficiary(pk)
        return json_response({
            'results': [serialize_family_member(m) for m in beneficiary.family_members.all()]
        })

    def post(self, request, pk):
        beneficiary = self.get_beneficiary(pk)
        form = FamilyMemberForm(data=self.get_json())
        if not form.is_valid():
            return self.form_errors(form)
        member = form.save(commit=False)
        member.beneficiary = beneficiary
        member.save_with_user(request.user)
        return json_response(serialize_family_member(member), status=201)


class FamilyMemberDetailView(BeneficiaryScopeMixin, ApiView):

    write_roles = WRITE_ROLES

    def get_member(self, pk, member_id) -> FamilyMember:
        beneficiary = self.get_beneficiary(pk)
        return get_object_or_404(FamilyMember, pk=member_id, beneficiary=beneficiary)

    def get(self, request, pk, member_id):
        return json_response(serialize_family_member(self.get_member(pk, member_id)))

    def patch(self, request, pk, member_id):
        member = self.get_member(pk, member_id)
        data = model_to_dict(member, fields=FamilyMemberForm.Meta.fields)
        data.update(self.get_json())
        form = FamilyMemberForm(data=data, instance=member)
        if not form.is_valid():
            return self.form_errors(form)
        member = form.save(commit=False)
        member.save_with_user(request.user)
        return json_response(serialize_family_member(member))

    def delete(self, request, pk, member_id):
        member = self.get_member(pk, member_id)
        member.delete()
        return json_response({'deleted': True})
