"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Client type and business rule API views.
-------------------------------------------------------------------------
"""
from typing import Dict, Any

from django.shortcuts import get_object_or_404

from apps.clients.models import ClientType, BusinessRule
from apps.clients.rules import evaluate_rules, BusinessRuleService
from apps.core.api import ApiView, json_response, parse_datetime_param
from apps.core.exceptions import InvalidPayloadException, RecordNotFoundException
from apps.users.models import RoleCode


def serialize_client_type(client_type: ClientType) -> Dict[str, Any]:
    return {
        'id': client_type.pk,
        'type_id': client_type.type_id,
        'code': client_type.code,
        'name_en': client_type.name_en,
        'name_ar': client_type.name_ar,
        'description': client_type.description,
        'is_active': client_type.is_active,
        'config': client_type.config,
    }


def serialize_rule(rule: BusinessRule) -> Dict[str, Any]:
    return {
        'id': rule.pk,
        'code': rule.code,
        'name': rule.name,
        'description': rule.description,
        'category': rule.category,
        'client_types': [ct.code for ct in rule.client_types.all()],
        'conditions': rule.conditions,
        'actions': rule.actions,
        'priority': rule.priority,
        'is_active': rule.is_active,
        'expires_at': rule.expires_at,
        'is_expired': rule.is_expired(),
        'version': rule.version,
        'updated_at': rule.updated_at,
    }


def get_client_type_or_404(identifier) -> ClientType:
    """Look a client type up by numeric type_id or code."""
    client_type = None
    if str(identifier).isdigit():
        client_type = ClientType.get_by_type_id(int(identifier))
    else:
        client_type = ClientType.get_by_code(identifier)
    if client_type is None:
        raise RecordNotFoundException(
            f"Client type '{identifier}' was not found.",
            details={'client_type': identifier}
        )
    return client_type


def _resolve_client_types(codes) -> list:
    if not isinstance(codes, list) or not codes:
        raise InvalidPayloadException("'client_types' must be a non-empty list of codes.")
    return [get_client_type_or_404(code) for code in codes]


class ClientTypeListView(ApiView):
    """Active client types visible to the user."""

    def get(self, request):
        queryset = ClientType.objects.all()
        if request.GET.get('include_inactive') not in ('1', 'true'):
            queryset = queryset.filter(is_active=True)
        if request.client_type is not None:
            queryset = queryset.filter(pk=request.client_type.pk)
        return json_response({'results': [serialize_client_type(ct) for ct in queryset]})


class ClientTypeDetailView(ApiView):

    def get(self, request, identifier):
        client_type = get_client_type_or_404(identifier)
        return json_response(serialize_client_type(client_type))


class BusinessRuleListView(ApiView):
    """
    GET: rules of a client type (?client_type=FDF), optionally by category.
    POST: create a rule (super admin / programme manager).
    """

    write_roles = (RoleCode.SUPER_ADMIN, RoleCode.PROGRAM_MANAGER)

    def get(self, request):
        queryset = BusinessRule.objects.prefetch_related('client_types')
        client_type = request.GET.get('client_type')
        if client_type:
            queryset = queryset.filter(client_types=get_client_type_or_404(client_type))
        category = request.GET.get('category')
        if category:
            queryset = queryset.filter(category=category.upper())
        if request.GET.get('active') in ('1', 'true'):
            queryset = queryset.filter(is_active=True)
        return json_response({'results': [serialize_rule(rule) for rule in queryset.distinct()]})

    def post(self, request):
        data = self.get_json()
        for key in ('code', 'name', 'category'):
            if not data.get(key):
                raise InvalidPayloadException(f"'{key}' is required.", details={'field': key})
        data['expires_at'] = parse_datetime_param(data.get('expires_at'), 'expires_at')
        client_types = _resolve_client_types(data.get('client_types'))
        rule = BusinessRuleService.create_rule(request.user, data, client_types)
        return json_response(serialize_rule(rule), status=201)


class BusinessRuleDetailView(ApiView):
    """Read or edit one rule. Every edit bumps the rule version."""

    write_roles = (RoleCode.SUPER_ADMIN, RoleCode.PROGRAM_MANAGER)

    def get(self, request, code):
        rule = get_object_or_404(BusinessRule, code=code)
        return json_response(serialize_rule(rule))

    def patch(self, request, code):
        rule = get_object_or_404(BusinessRule, code=code)
        data = self.get_json()
        if 'expires_at' in data:
            data['expires_at'] = parse_datetime_param(data['expires_at'], 'expires_at')
        client_types = None
        if 'client_types' in data:
            client_types = _resolve_client_types(data['client_types'])
        rule = BusinessRuleService.update_rule(request.user, rule, data, client_types)
        return json_response(serialize_rule(rule))

    def delete(self, request, code):
        rule = get_object_or_404(BusinessRule, code=code)
        rule = BusinessRuleService.update_rule(request.user, rule, {'is_active': False})
        return json_response(serialize_rule(rule))


class RuleEvaluationView(ApiView):
    """
    Evaluate the rules of a client type.

    Body: {"client_type": "FDF" | 1, "parameters": {...}}
    """

    def post(self, request):
        data = self.get_json()
        if data.get('client_type') in (None, ''):
            raise InvalidPayloadException("'client_type' is required.", details={'field': 'client_type'})
        client_type = get_client_type_or_404(data['client_type'])
        parameters = data.get('parameters') or {}
        if not isinstance(parameters, dict):
            raise InvalidPayloadException("'parameters' must be an object.")

        results = evaluate_rules(client_type, parameters)
        return json_response({
            'client_type': client_type.code,
            'matched': len(results),
            'results': [result.to_dict() for result in results],
        })
