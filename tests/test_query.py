"""
Unit tests for the Query builder.
"""

import unittest
from unittest.mock import patch, MagicMock

from sparql_builder.components import (
    Triple, Filter, Prefix, GraphPattern, GroupGraphPattern,
)
from sparql_builder.config import SparqlConfig
from sparql_builder.query import Query
from sparql_builder.query_forms import Ask, Select
from sparql_builder.syntax import SparqlSyntaxError
from sparql_builder.transport import SparqlTransport


class StubTransport:
    """Records submitted queries instead of sending them."""

    def __init__(self, result=None):
        self.endpoint = 'http://stub/sparql'
        self.result = result
        self.submitted = []

    def submit(self, query):
        self.submitted.append(query)
        return self.result


class TestQuerySerialization(unittest.TestCase):
    """Test the clause order and separators of to_str."""

    def test_minimal_select(self):
        q = Query().select('?s ?p ?o').where('?s ?p ?o')
        res = q.to_str()
        self.assertTrue(res.startswith('SELECT ?s ?p ?o'))
        self.assertEqual(res.count('WHERE { ?s ?p ?o . } '), 1)
        self.assertEqual(res, 'SELECT ?s ?p ?o WHERE { ?s ?p ?o . } ')
        self.assertEqual(str(q), res)

    def test_full_clause_order(self):
        q = (
            Query()
            .base('<http://example.org/>')
            .prefix([
                'foaf: <http://xmlns.com/foaf/0.1/>',
                Prefix('ex', 'http://example.org/ns#'),
            ])
            .select(['?name'], 'distinct')
            .from_('<http://example.org/g1>')
            .from_(['<http://example.org/g2>'], named=True)
            .where('?p foaf:name ?name')
            .order('?name')
            .limit(5)
            .offset(10)
        )
        self.assertEqual(
            q.to_str(),
            'BASE <http://example.org/> '
            'PREFIX foaf: <http://xmlns.com/foaf/0.1/> '
            'PREFIX ex: <http://example.org/ns#> '
            'SELECT DISTINCT ?name '
            'FROM <http://example.org/g1> '
            'FROM NAMED <http://example.org/g2> '
            'WHERE { ?p foaf:name ?name . } '
            'ORDER BY ?name LIMIT 5 OFFSET 10 ',
        )

    def test_missing_query_form(self):
        q = Query().where('?s ?p ?o')
        with self.assertRaises(TypeError):
            q.to_str()

    def test_missing_where_clause(self):
        q = Query().select('?s')
        with self.assertRaises(TypeError):
            q.to_str()

    def test_corrupted_dataset_clause(self):
        q = Query().select('?s').where('?s ?p ?o')
        q._dataset = 'FROM <http://example.org/g>'
        with self.assertRaises(TypeError):
            q.to_str()

    def test_corrupted_solution_modifiers(self):
        q = Query().select('?s').where('?s ?p ?o')
        q._solution_modifiers = None
        with self.assertRaises(TypeError):
            q.to_str()

    def test_union_where_clause(self):
        q = Query().select('?s').where(GroupGraphPattern([
            GraphPattern('?s a ex:Cat'),
            GraphPattern('?s a ex:Dog', alternative=True),
        ]))
        self.assertEqual(
            q.to_str(),
            'SELECT ?s WHERE { { ?s a ex:Cat . }  UNION { ?s a ex:Dog . }  } ',
        )


class TestQueryConfiguration(unittest.TestCase):
    """Test the chainable accessors."""

    def setUp(self):
        self.q = Query()

    def test_base(self):
        self.assertIs(self.q.base('<http://example.org/>'), self.q)
        self.assertEqual(self.q.get_base(), '<http://example.org/>')

    def test_prefixes_keep_duplicates_and_order(self):
        self.q.prefix('a: <http://a/>').prefix(['b: <http://b/>', 'a: <http://a/>'])
        self.assertEqual(
            [str(p) for p in self.q.get_prefixes()],
            ['PREFIX a: <http://a/>', 'PREFIX b: <http://b/>', 'PREFIX a: <http://a/>'],
        )
        self.assertTrue(all(isinstance(p, Prefix) for p in self.q.get_prefixes()))

    def test_add_prefix_rejects_other_types(self):
        with self.assertRaises(TypeError):
            self.q.add_prefix(42)
        self.assertEqual(self.q.get_prefixes(), [])

    def test_prefix_list_with_bad_entry_adds_nothing(self):
        with self.assertRaises(TypeError):
            self.q.prefix(['ex: <http://ex/>', 42])
        self.assertEqual(self.q.get_prefixes(), [])

    def test_clear_prefixes(self):
        self.q.prefix('a: <http://a/>').clear_prefixes()
        self.assertEqual(self.q.get_prefixes(), [])

    def test_query_form_replaced(self):
        self.q.select('?s').ask()
        self.assertIsInstance(self.q.get_query_form(), Ask)
        self.q.describe('?s').select('?o')
        self.assertIsInstance(self.q.get_query_form(), Select)

    def test_construct_query(self):
        self.q.construct('?s ex:p ?o').where('?s ex:q ?o')
        self.assertEqual(
            self.q.to_str(),
            'CONSTRUCT { ?s ex:p ?o . } WHERE { ?s ex:q ?o . } ',
        )

    def test_from_single_and_list(self):
        self.q.from_('<http://g/1>').from_(['<http://g/2>', '<http://g/3>'], named=True)
        self.assertEqual(self.q.get_dataset_clauses(), [
            'FROM <http://g/1>',
            'FROM NAMED <http://g/2>',
            'FROM NAMED <http://g/3>',
        ])
        self.q.clear_dataset_clauses()
        self.assertEqual(self.q.get_dataset_clauses(), [])

    def test_order_requires_string(self):
        with self.assertRaises(TypeError) as cm:
            self.q.order(42)
        self.assertIn('int', str(cm.exception))
        self.assertEqual(self.q.get_solution_modifiers(), [])

    def test_modifiers_kept_in_call_order(self):
        self.q.limit(1).order('?s').offset(2)
        self.assertEqual(
            self.q.get_solution_modifiers(),
            ['LIMIT 1', 'ORDER BY ?s', 'OFFSET 2'],
        )
        self.q.clear_solution_modifiers()
        self.assertEqual(self.q.get_solution_modifiers(), [])

    def test_limit_and_offset_require_int(self):
        for value in ['5', 1.5, True, None]:
            with self.assertRaises(TypeError):
                self.q.limit(value)
            with self.assertRaises(TypeError):
                self.q.offset(value)
        self.assertEqual(self.q.get_solution_modifiers(), [])

    def test_reset(self):
        transport = StubTransport()
        q = Query(transport=transport)
        (
            q.base('<http://example.org/>')
            .prefix('a: <http://a/>')
            .select('?s')
            .from_('<http://g/1>')
            .where('?s ?p ?o')
            .limit(1)
        )
        self.assertIs(q.reset(), q)
        self.assertIsNone(q.get_base())
        self.assertEqual(q.get_dataset_clauses(), [])
        self.assertEqual(q.get_prefixes(), [])
        self.assertIsNone(q.get_query_form())
        self.assertEqual(q.get_solution_modifiers(), [])
        with self.assertRaises(TypeError):
            q.get_where_clause_count()
        self.assertIs(q._transport, transport)


class TestQueryWhereClause(unittest.TestCase):
    """Test where clause dispatch and delegation."""

    def setUp(self):
        self.q = Query()

    def test_string_creates_clause_lazily(self):
        self.assertIsNone(self.q.get_where_pattern())
        self.q.where('?s ?p ?o')
        self.assertIsInstance(self.q.get_where_pattern(), GraphPattern)
        self.assertEqual(self.q.get_where_clause_count(), 1)

    def test_values_appended(self):
        f = Filter('?o > 1')
        self.q.where('?s ?p ?o').where(Triple('?o ?q ?r')).where(f)
        self.assertEqual(self.q.get_where_clause_count(), 3)
        self.assertIs(self.q.get_where_clause()[-1], f)

    def test_list_with_bad_entry_leaves_no_clause(self):
        with self.assertRaises(TypeError):
            self.q.where(['?a ?b ?c', 42])
        self.assertIsNone(self.q.get_where_pattern())

    def test_list_with_bad_entry_leaves_clause_unchanged(self):
        self.q.where('?a ?b ?c')
        with self.assertRaises(TypeError):
            self.q.where(['?d ?e ?f', Prefix('a: <http://a/>')])
        self.assertEqual(
            [str(e) for e in self.q.get_where_clause()], ['?a ?b ?c']
        )

    def test_list_added_element_by_element(self):
        self.q.where(['?a ?b ?c', '?d ?e ?f'])
        self.assertEqual(
            [str(e) for e in self.q.get_where_clause()],
            ['?a ?b ?c', '?d ?e ?f'],
        )

    def test_pattern_replaces_clause(self):
        self.q.where('?a ?b ?c')
        gp = GraphPattern('?x ?y ?z')
        self.q.where(gp)
        self.assertIs(self.q.get_where_pattern(), gp)
        self.assertEqual(self.q.get_where_clause_count(), 1)

    def test_set_where_clause_rejects_non_patterns(self):
        for value in ['?s ?p ?o', Triple('?s ?p ?o'), None]:
            with self.assertRaises(TypeError):
                self.q.set_where_clause(value)
        self.assertIsNone(self.q.get_where_pattern())

    def test_add_at_index(self):
        self.q.where(['?a ?b ?c', '?d ?e ?f'])
        self.q.add_to_where_clause('?x ?y ?z', 0)
        self.assertEqual(str(self.q.get_where_clause()[0]), '?x ?y ?z')

    def test_add_disallowed_element(self):
        self.q.where('?a ?b ?c')
        with self.assertRaises(TypeError):
            self.q.where(Prefix('a: <http://a/>'))
        self.assertEqual(self.q.get_where_clause_count(), 1)

    def test_remove_and_clear(self):
        self.q.where(['?a ?b ?c', '?d ?e ?f', '?g ?h ?i'])
        self.q.remove_from_where_clause(0, 1)
        self.assertEqual(self.q.get_where_clause_count(), 2)
        with self.assertRaises(IndexError):
            self.q.remove_from_where_clause(1, 1)
        self.q.clear_where_clause()
        self.assertEqual(self.q.get_where_clause_count(), 0)

    def test_accessors_require_clause(self):
        for call in [
            lambda: self.q.get_where_clause(),
            lambda: self.q.get_where_clause_count(),
            lambda: self.q.clear_where_clause(),
            lambda: self.q.remove_from_where_clause(),
        ]:
            with self.assertRaises(TypeError):
                call()


class TestQueryExecution(unittest.TestCase):
    """Test validate and exec."""

    def test_exec_submits_rendered_query(self):
        transport = StubTransport(result={'boolean': True})
        q = Query(transport=transport).ask().where('?s ?p ?o')
        self.assertEqual(q.exec(), {'boolean': True})
        self.assertEqual(transport.submitted, [q.to_str()])

    def test_exec_logs_query(self):
        q = Query(transport=StubTransport()).select('?s').where('?s ?p ?o')
        with self.assertLogs('sparql_builder.query', level='DEBUG') as cm:
            q.exec()
        self.assertTrue(any('SELECT ?s' in line for line in cm.output))

    def test_exec_rejects_malformed_text(self):
        transport = StubTransport()
        q = Query(transport=transport).select('?s').where('?s ?p "unterminated')
        with self.assertRaises(SparqlSyntaxError):
            q.exec()
        self.assertEqual(transport.submitted, [])

    def test_exec_without_syntax_check(self):
        transport = StubTransport()
        config = SparqlConfig(check_syntax=False)
        q = Query(config=config, transport=transport)
        q.select('?s').where('?s ?p "unterminated')
        q.exec()
        self.assertEqual(len(transport.submitted), 1)

    def test_exec_propagates_serialization_errors(self):
        transport = StubTransport()
        with self.assertRaises(TypeError):
            Query(transport=transport).where('?s ?p ?o').exec()
        self.assertEqual(transport.submitted, [])

    def test_validate_returns_text(self):
        q = Query().select('?s').where(['?s ?p ?o', Filter('?o > 3')])
        self.assertEqual(q.validate(), q.to_str())

    def test_default_transport_bound_to_endpoint(self):
        q = Query('http://example.org/sparql')
        self.assertIsInstance(q._transport, SparqlTransport)
        self.assertEqual(q._transport.endpoint, 'http://example.org/sparql')
        self.assertIs(q._transport.config, q.config)

    @patch('sparql_builder.transport.requests.post')
    def test_exec_through_http_transport(self, mock_post):
        response = MagicMock()
        response.status_code = 200
        response.headers = {'Content-Type': 'application/sparql-results+json'}
        response.json.return_value = {'head': {'vars': ['s']}, 'results': {'bindings': []}}
        mock_post.return_value = response

        q = Query('http://example.org/sparql').select('?s').where('?s ?p ?o')
        self.assertEqual(q.exec()['head']['vars'], ['s'])
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], 'http://example.org/sparql')
        self.assertEqual(kwargs['data'], {'query': q.to_str()})


if __name__ == '__main__':
    unittest.main()
