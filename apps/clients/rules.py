"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Business rules engine. Evaluates the active rules of a
             client type against a parameter dictionary and returns the
             actions of every matching rule.
-------------------------------------------------------------------------
"""
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.utils import timezone

from apps.clients.models import BusinessRule, ClientType, RuleOperator
from apps.core.api import parse_int_param
from apps.core.exceptions import InvalidPayloadException
from apps.core.models import AuditAction
from apps.core.services import AuditService

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class RuleEvaluationResult:
    """A matched rule and the actions it carries."""

    rule_code: str
    rule_name: str
    category: str
    actions: List[Dict[str, Any]]
    priority: int
    applied_at: datetime
    matched: bool = True
    context: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'rule_code': self.rule_code,
            'rule_name': self.rule_name,
            'category': self.category,
            'matched': self.matched,
            'actions': self.actions,
            'priority': self.priority,
            'applied_at': self.applied_at,
        }


def resolve_path(parameters: Dict[str, Any], path: str) -> Any:
    """
    Resolve a dotted path such as 'project.estimated_cost'.

    Returns the module-level _MISSING sentinel when any segment is absent.
    """
    value: Any = parameters
    for part in path.split('.'):
        if isinstance(value, dict) and part in value:
            value = value[part]
        else:
            return _MISSING
    return value


def _compare(operator: str, actual: Any, expected: Any) -> bool:
    if operator == RuleOperator.EQUALS:
        return actual == expected
    if operator == RuleOperator.NOT_EQUALS:
        return actual != expected
    if operator == RuleOperator.GREATER_THAN:
        return actual > expected
    if operator == RuleOperator.GREATER_THAN_OR_EQUAL:
        return actual >= expected
    if operator == RuleOperator.LESS_THAN:
        return actual < expected
    if operator == RuleOperator.LESS_THAN_OR_EQUAL:
        return actual <= expected
    if operator == RuleOperator.CONTAINS:
        if isinstance(actual, (list, tuple, set)):
            return expected in actual
        return str(expected) in str(actual)
    if operator == RuleOperator.NOT_CONTAINS:
        if isinstance(actual, (list, tuple, set)):
            return expected not in actual
        return str(expected) not in str(actual)
    if operator == RuleOperator.STARTS_WITH:
        return str(actual).startswith(str(expected))
    if operator == RuleOperator.ENDS_WITH:
        return str(actual).endswith(str(expected))
    if operator == RuleOperator.BETWEEN:
        if isinstance(expected, (list, tuple)) and len(expected) == 2:
            return expected[0] <= actual <= expected[1]
        return False
    if operator == RuleOperator.IN:
        return isinstance(expected, (list, tuple)) and actual in expected
    if operator == RuleOperator.NOT_IN:
        return isinstance(expected, (list, tuple)) and actual not in expected
    if operator == RuleOperator.EXISTS:
        return actual is not None
    if operator == RuleOperator.NOT_EXISTS:
        return actual is None
    if operator == RuleOperator.REGEX:
        try:
            return re.search(str(expected), str(actual)) is not None
        except re.error:
            return False

    logger.error("Unknown rule operator: %s", operator)
    return False


def evaluate_condition(condition: Dict[str, Any], parameters: Dict[str, Any]) -> bool:
    """
    Evaluate one {field, operator, value} condition.

    A missing field path fails the condition, except for `not_exists`.
    Values that cannot be compared (e.g. str vs int) fail the condition.
    """
    operator = condition.get('operator')
    actual = resolve_path(parameters, condition.get('field', ''))

    if actual is _MISSING:
        return operator == RuleOperator.NOT_EXISTS

    try:
        return _compare(operator, actual, condition.get('value'))
    except TypeError:
        logger.debug(
            "Condition %s could not compare %r with %r",
            condition.get('field'), actual, condition.get('value')
        )
        return False


def rule_matches(rule: BusinessRule, parameters: Dict[str, Any]) -> bool:
    """A rule with no conditions always matches; otherwise all must hold."""
    if not rule.conditions:
        return True
    return all(evaluate_condition(condition, parameters) for condition in rule.conditions)


def evaluate_rules(
    client_type: ClientType,
    parameters: Dict[str, Any],
    at: Optional[datetime] = None
) -> List[RuleEvaluationResult]:
    """
    Evaluate the rules of a client type.

    Args:
        client_type: The client type whose rules apply.
        parameters: Nested dictionary of facts (e.g. {"beneficiary": {"age": 67}}).
        at: Evaluation time used for expiry and applied_at (default: now).

    Returns:
        Results of the matching rules, highest priority first.
    """
    at = at or timezone.now()
    results = []

    for rule in BusinessRule.objects.applicable(client_type, at):
        if not rule_matches(rule, parameters):
            continue
        results.append(RuleEvaluationResult(
            rule_code=rule.code,
            rule_name=rule.name,
            category=rule.category,
            actions=rule.actions,
            priority=rule.priority,
            applied_at=at,
            context={'client_type': client_type.code},
        ))

    logger.info(
        "Evaluated rules for %s: %s matched",
        client_type.code, len(results),
        extra={'client_type': client_type.code, 'matched': [r.rule_code for r in results]}
    )
    return results


def validate_conditions(conditions: Any) -> List[Dict[str, Any]]:
    """
    Check the shape of a conditions list before it is stored.

    Raises:
        InvalidPayloadException: If a condition is malformed.
    """
    if conditions in (None, ''):
        return []
    if not isinstance(conditions, list):
        raise InvalidPayloadException("'conditions' must be a list.")

    valid_operators = set(RuleOperator.values)
    for index, condition in enumerate(conditions):
        if not isinstance(condition, dict) or not condition.get('field'):
            raise InvalidPayloadException(
                f"Condition {index + 1} must be an object with a 'field'.",
                details={'index': index}
            )
        if condition.get('operator') not in valid_operators:
            raise InvalidPayloadException(
                f"Condition {index + 1} has an unknown operator.",
                details={'index': index, 'operator': condition.get('operator')}
            )
    return conditions


class BusinessRuleService:
    """Create, update and deactivate rules with an audit trail."""

    EDITABLE_FIELDS = ('name', 'description', 'category', 'conditions', 'actions',
                       'priority', 'expires_at', 'is_active')

    @staticmethod
    @transaction.atomic
    def create_rule(user, data: Dict[str, Any], client_types: List[ClientType]) -> BusinessRule:
        rule = BusinessRule(
            code=data['code'],
            name=data['name'],
            description=data.get('description', ''),
            category=data['category'],
            conditions=validate_conditions(data.get('conditions')),
            actions=data.get('actions') or [],
            priority=parse_int_param(data.get('priority'), 'priority') or 0,
            expires_at=data.get('expires_at'),
        )
        rule.full_clean(exclude=['created_by', 'updated_by'])
        rule.save_with_user(user)
        rule.client_types.set(client_types)
        AuditService.record(user, AuditAction.CREATED, rule, changes={'version': rule.version})
        return rule

    @staticmethod
    @transaction.atomic
    def update_rule(user, rule: BusinessRule, changes: Dict[str, Any],
                    client_types: Optional[List[ClientType]] = None) -> BusinessRule:
        previous = {name: getattr(rule, name) for name in BusinessRuleService.EDITABLE_FIELDS}
        previous_version = rule.version

        for name in BusinessRuleService.EDITABLE_FIELDS:
            if name in changes:
                value = changes[name]
                if name == 'conditions':
                    value = validate_conditions(value)
                elif name == 'priority':
                    value = parse_int_param(value, 'priority') or 0
                setattr(rule, name, value)

        rule.full_clean(exclude=['created_by', 'updated_by'])
        rule.save_with_user(user)
        if client_types is not None:
            rule.client_types.set(client_types)

        diff = {
            name: {'from': previous[name], 'to': getattr(rule, name)}
            for name in BusinessRuleService.EDITABLE_FIELDS
            if previous[name] != getattr(rule, name)
        }
        AuditService.record(
            user,
            AuditAction.UPDATED,
            rule,
            changes={'previous_version': previous_version, 'version': rule.version, 'fields': diff},
            description=f"Rule {rule.code} updated to v{rule.version}"
        )
        return rule
