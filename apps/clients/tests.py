"""
-------------------------------------------------------------------------
System: Barakatna CMS (Case Management System)
Client: Senior Citizens Home Accessibility Programme
Team Lead: Jamil Shah
Developers: Ali Asghar, Akhtar Munir and Zarif Khan
Description: Unit tests for the clients module - client types, the
             business rules engine, its API and the seed command.
-------------------------------------------------------------------------
"""
import io
import json
from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone

from apps.clients.models import BusinessRule, ClientType, RuleCategory
from apps.clients.rules import (
    BusinessRuleService, evaluate_condition, evaluate_rules, resolve_path, rule_matches,
    validate_conditions,
)
from apps.core.exceptions import InvalidPayloadException
from apps.core.models import AuditAction, AuditLog
from apps.users.models import Role, RoleCode


User = get_user_model()


def condition(field, operator, value=None):
    return {'field': field, 'operator': operator, 'value': value}


class ConditionTests(TestCase):
    """Tests for single condition evaluation."""

    facts = {
        'beneficiary': {'age': 67, 'name': 'Mohammed Al Dhaheri', 'documents': ['Emirates ID', 'Family Book']},
        'project': {'estimated_cost': 45000, 'type': 'renovation', 'notes': None},
    }

    def check(self, field, operator, value=None):
        return evaluate_condition(condition(field, operator, value), self.facts)

    def test_resolve_path(self):
        self.assertEqual(resolve_path(self.facts, 'beneficiary.age'), 67)
        self.assertIsNone(resolve_path(self.facts, 'project.notes'))
        self.assertIsNot(resolve_path(self.facts, 'project.owner.name'), None)

    def test_comparisons(self):
        self.assertTrue(self.check('beneficiary.age', 'greater_than_or_equal', 60))
        self.assertFalse(self.check('beneficiary.age', 'less_than', 60))
        self.assertTrue(self.check('project.type', 'equals', 'renovation'))
        self.assertTrue(self.check('project.type', 'not_equals', 'new_build'))
        self.assertTrue(self.check('project.estimated_cost', 'between', [10000, 50000]))
        self.assertFalse(self.check('project.estimated_cost', 'between', [10000]))

    def test_string_and_list_operators(self):
        self.assertTrue(self.check('beneficiary.name', 'starts_with', 'Mohammed'))
        self.assertTrue(self.check('beneficiary.name', 'ends_with', 'Dhaheri'))
        self.assertTrue(self.check('beneficiary.name', 'contains', 'Al'))
        self.assertTrue(self.check('beneficiary.documents', 'contains', 'Family Book'))
        self.assertTrue(self.check('beneficiary.documents', 'not_contains', 'Medical Report'))
        self.assertTrue(self.check('project.type', 'in', ['renovation', 'extension']))
        self.assertTrue(self.check('project.type', 'not_in', ['new_build']))
        self.assertTrue(self.check('beneficiary.name', 'regex', r'^Moh\w+'))
        self.assertFalse(self.check('beneficiary.name', 'regex', '(unclosed'))

    def test_missing_field(self):
        self.assertFalse(self.check('beneficiary.income', 'equals', 0))
        self.assertTrue(self.check('beneficiary.income', 'not_exists'))
        self.assertTrue(self.check('project.notes', 'not_exists'))
        self.assertFalse(self.check('project.notes', 'exists'))

    def test_incomparable_values_fail(self):
        self.assertFalse(self.check('project.type', 'greater_than', 5))

    def test_unknown_operator_fails(self):
        with self.assertLogs('apps.clients.rules', 'ERROR'):
            self.assertFalse(self.check('beneficiary.age', 'roughly', 67))

    def test_validate_conditions(self):
        self.assertEqual(validate_conditions(None), [])
        with self.assertRaises(InvalidPayloadException):
            validate_conditions({'field': 'a'})
        with self.assertRaises(InvalidPayloadException):
            validate_conditions([{'operator': 'equals'}])
        with self.assertRaises(InvalidPayloadException) as ctx:
            validate_conditions([condition('a', 'equals', 1), condition('b', 'roughly', 2)])
        self.assertEqual(ctx.exception.details['index'], 1)


class RuleEngineTests(TestCase):

    def setUp(self):
        self.fdf = ClientType.objects.create(code='FDF', type_id=1, name_en='Family Development Foundation')
        self.adha = ClientType.objects.create(code='ADHA', type_id=2, name_en='ADHA')
        self.manager = User.objects.create_user(emirates_id='784-1979-0000010-1', email='pm@test.ae')

    def rule(self, code, client_types, conditions=None, priority=0, **kwargs):
        rule = BusinessRule.objects.create(
            code=code, name=code, category=RuleCategory.ELIGIBILITY,
            conditions=conditions or [], actions=[{'type': 'approve'}], priority=priority, **kwargs
        )
        rule.client_types.set(client_types)
        return rule

    def test_rule_without_conditions_matches(self):
        self.assertTrue(rule_matches(self.rule('always', [self.fdf]), {}))

    def test_evaluate_rules_orders_by_priority(self):
        self.rule('age', [self.fdf], [condition('beneficiary.age', 'greater_than_or_equal', 60)], priority=100)
        self.rule('documents', [self.fdf], priority=50)
        self.rule('high-cost', [self.fdf], [condition('project.estimated_cost', 'greater_than', 100000)], priority=90)
        self.rule('adha-only', [self.adha], priority=200)

        results = evaluate_rules(self.fdf, {'beneficiary': {'age': 72}, 'project': {'estimated_cost': 5000}})

        self.assertEqual([r.rule_code for r in results], ['age', 'documents'])
        self.assertEqual(results[0].actions, [{'type': 'approve'}])
        self.assertEqual(results[0].to_dict()['category'], RuleCategory.ELIGIBILITY)

    def test_inactive_and_expired_rules_are_skipped(self):
        now = timezone.now()
        self.rule('inactive', [self.fdf], is_active=False)
        self.rule('expired', [self.fdf], expires_at=now - timedelta(days=1))
        self.rule('current', [self.fdf], expires_at=now + timedelta(days=1))

        results = evaluate_rules(self.fdf, {}, at=now)
        self.assertEqual([r.rule_code for r in results], ['current'])
        self.assertEqual(results[0].applied_at, now)

    def test_create_rule(self):
        rule = BusinessRuleService.create_rule(self.manager, {
            'code': 'budget-limit-fdf',
            'name': 'FDF Budget Limit',
            'category': RuleCategory.BUDGET,
            'conditions': [condition('project.estimated_cost', 'less_than_or_equal', 75000)],
            'priority': '90',
        }, [self.fdf])

        self.assertEqual(rule.version, 1)
        self.assertEqual(rule.priority, 90)
        self.assertEqual(rule.created_by, self.manager)
        self.assertEqual(list(rule.client_types.all()), [self.fdf])
        self.assertTrue(AuditLog.objects.filter(action=AuditAction.CREATED, entity_id=str(rule.pk)).exists())

    def test_update_rule_bumps_version(self):
        rule = self.rule('age', [self.fdf], [condition('beneficiary.age', 'greater_than_or_equal', 60)])

        rule = BusinessRuleService.update_rule(
            self.manager, rule,
            {'conditions': [condition('beneficiary.age', 'greater_than_or_equal', 65)], 'priority': 10},
            client_types=[self.fdf, self.adha]
        )

        self.assertEqual(rule.version, 2)
        self.assertEqual(rule.client_types.count(), 2)
        entry = AuditLog.objects.get(action=AuditAction.UPDATED)
        self.assertEqual(entry.changes['previous_version'], 1)
        self.assertEqual(set(entry.changes['fields']), {'conditions', 'priority'})

    def test_update_rule_rejects_bad_conditions(self):
        rule = self.rule('age', [self.fdf])
        with self.assertRaises(InvalidPayloadException):
            BusinessRuleService.update_rule(self.manager, rule, {'conditions': 'age > 60'})


class ClientApiTests(TestCase):

    def setUp(self):
        self.fdf = ClientType.objects.create(code='FDF', type_id=1, name_en='Family Development Foundation')
        self.adha = ClientType.objects.create(code='ADHA', type_id=2, name_en='ADHA')
        ClientType.objects.create(code='CASH', type_id=3, name_en='Cash', is_active=False)

        self.manager = User.objects.create_user(
            emirates_id='784-1979-0000011-2', email='pm@test.ae', password='pass', first_name='Rashid'
        )
        self.manager.roles.add(Role.objects.create(name='Programme Manager', code=RoleCode.PROGRAM_MANAGER))
        self.worker = User.objects.create_user(
            emirates_id='784-1979-0000012-3', email='cw@test.ae', password='pass',
            first_name='Mariam', client_type=self.fdf
        )

    def post_json(self, url, data):
        return self.client.post(url, data=json.dumps(data), content_type='application/json')

    def test_client_type_list_is_scoped(self):
        self.client.force_login(self.manager)
        data = self.client.get(reverse('clients:client_type_list')).json()
        self.assertEqual([ct['code'] for ct in data['results']], ['FDF', 'ADHA'])

        data = self.client.get(reverse('clients:client_type_list'), {'include_inactive': 'true'}).json()
        self.assertEqual(len(data['results']), 3)

        self.client.force_login(self.worker)
        data = self.client.get(reverse('clients:client_type_list')).json()
        self.assertEqual([ct['code'] for ct in data['results']], ['FDF'])

    def test_client_type_detail_by_id_or_code(self):
        self.client.force_login(self.worker)
        self.assertEqual(self.client.get(reverse('clients:client_type_detail', args=['2'])).json()['code'], 'ADHA')
        self.assertEqual(self.client.get(reverse('clients:client_type_detail', args=['fdf'])).json()['type_id'], 1)

        response = self.client.get(reverse('clients:client_type_detail', args=['XYZ']))
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['error_code'], 'ERR_NOT_FOUND')

    def test_rule_crud(self):
        self.client.force_login(self.manager)
        response = self.post_json(reverse('clients:rule_list'), {
            'code': 'eligibility-age-fdf',
            'name': 'FDF Age Eligibility',
            'category': 'ELIGIBILITY',
            'client_types': ['FDF'],
            'conditions': [condition('beneficiary.age', 'greater_than_or_equal', 60)],
            'actions': [{'type': 'approve'}],
            'priority': 100,
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['client_types'], ['FDF'])

        url = reverse('clients:rule_detail', args=['eligibility-age-fdf'])
        response = self.client.patch(url, data=json.dumps({'priority': 120}), content_type='application/json')
        self.assertEqual(response.json()['version'], 2)
        self.assertEqual(response.json()['priority'], 120)

        response = self.client.patch(url, data=json.dumps({'priority': 'high'}), content_type='application/json')
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['details']['field'], 'priority')
        self.assertEqual(BusinessRule.objects.get(code='eligibility-age-fdf').version, 2)

        data = self.client.get(reverse('clients:rule_list'), {'client_type': 'FDF'}).json()
        self.assertEqual(len(data['results']), 1)
        self.assertEqual(self.client.get(reverse('clients:rule_list'), {'client_type': 'ADHA'}).json()['results'], [])

        response = self.client.delete(url)
        self.assertFalse(response.json()['is_active'])
        self.assertEqual(response.json()['version'], 3)

    def test_rule_create_validation(self):
        self.client.force_login(self.manager)
        response = self.post_json(reverse('clients:rule_list'), {'code': 'x', 'name': 'X', 'category': 'BUDGET'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error_code'], 'ERR_INVALID_PAYLOAD')

        response = self.post_json(reverse('clients:rule_list'), {
            'code': 'x', 'name': 'X', 'category': 'NOT_A_CATEGORY', 'client_types': ['FDF'],
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error_code'], 'ERR_VALIDATION')
        self.assertIn('category', response.json()['details'])

        response = self.post_json(reverse('clients:rule_list'), {
            'code': 'x', 'name': 'X', 'category': 'BUDGET', 'client_types': ['FDF'], 'priority': 'high',
        })
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['error_code'], 'ERR_INVALID_PAYLOAD')
        self.assertEqual(response.json()['details']['field'], 'priority')
        self.assertFalse(BusinessRule.objects.filter(code='x').exists())

        response = self.post_json(reverse('clients:rule_list'), {
            'code': 'x', 'name': 'X', 'category': 'BUDGET', 'client_types': ['FDF'], 'priority': None,
        })
        self.assertEqual(response.status_code, 201)
        self.assertEqual(BusinessRule.objects.get(code='x').priority, 0)

    def test_rule_writes_need_manager_role(self):
        self.client.force_login(self.worker)
        response = self.post_json(reverse('clients:rule_list'), {'code': 'x'})
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.client.get(reverse('clients:rule_list')).status_code, 200)

    def test_evaluate(self):
        rule = BusinessRule.objects.create(
            code='eligibility-age-fdf', name='FDF Age Eligibility', category=RuleCategory.ELIGIBILITY,
            conditions=[condition('beneficiary.age', 'greater_than_or_equal', 60)],
            actions=[{'type': 'approve', 'message': 'Beneficiary meets age requirement'}],
        )
        rule.client_types.set([self.fdf])
        self.client.force_login(self.worker)

        response = self.post_json(reverse('clients:rule_evaluate'), {
            'client_type': 1, 'parameters': {'beneficiary': {'age': 64}},
        })
        data = response.json()
        self.assertEqual(data['client_type'], 'FDF')
        self.assertEqual(data['matched'], 1)
        self.assertEqual(data['results'][0]['rule_code'], 'eligibility-age-fdf')

        data = self.post_json(reverse('clients:rule_evaluate'), {
            'client_type': 'FDF', 'parameters': {'beneficiary': {'age': 55}},
        }).json()
        self.assertEqual(data['matched'], 0)

        response = self.post_json(reverse('clients:rule_evaluate'), {'parameters': {}})
        self.assertEqual(response.status_code, 400)


class SeedClientTypesCommandTests(TestCase):

    def test_seed_client_types(self):
        out = io.StringIO()
        call_command('seed_client_types', stdout=out)

        self.assertEqual(ClientType.objects.count(), 3)
        self.assertEqual(ClientType.get_by_code('adha').max_budget, 100000)
        self.assertEqual(ClientType.get_by_type_id(1).required_documents,
                         ['Emirates ID', 'Family Book', 'Medical Report'])
        self.assertIn('Rules created: 5', out.getvalue())

        results = evaluate_rules(ClientType.get_by_code('FDF'), {
            'beneficiary': {'age': 70}, 'project': {'type': 'renovation'},
        })
        self.assertEqual([r.rule_code for r in results], ['eligibility-age-fdf', 'scheduling-deadline-fdf'])

        out = io.StringIO()
        call_command('seed_client_types', stdout=out)
        self.assertIn('Rules created: 0', out.getvalue())
        self.assertEqual(ClientType.objects.count(), 3)
