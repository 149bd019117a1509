'''
Copyright (c) 2024 qmj0923
https://github.com/qmj0923/SPARQL-PLY
'''

from __future__ import annotations
import logging
from typing import Any, List, Optional

from sparql_builder.components import (
    QueryComponent, GraphPattern, Prefix, Triple, category_name, gen_type,
)
from sparql_builder.config import SparqlConfig
from sparql_builder.query_forms import (
    QueryForm, Select, Describe, Ask, Construct,
)
from sparql_builder.syntax import check_syntax
from sparql_builder.transport import SparqlTransport

logger = logging.getLogger(__name__)


class Query(QueryComponent):
    '''
    Chainable SPARQL query builder.

    A query owns its prologue (base IRI and prefixes), one query form,
    its dataset clauses, one where clause and its solution modifiers.
    Mutators return the query itself:

        q = (
            Query('https://query.wikidata.org/sparql')
            .prefix('wd: <http://www.wikidata.org/entity/>')
            .select('?item', 'DISTINCT')
            .where('?item wdt:P31 wd:Q146')
            .limit(10)
        )
        str(q)

    Serialization requires a query form and a where clause; their absence
    is only detected when the query is rendered.
    '''
    TYPE = gen_type()

    def __init__(
        self, endpoint: Optional[str] = None,
        config: Optional[SparqlConfig] = None,
        transport: Optional[SparqlTransport] = None,
    ):
        self.reset()
        self.config = config if config is not None else SparqlConfig()
        if transport is None:
            transport = SparqlTransport(endpoint, self.config)
        self._transport = transport

    def reset(self) -> Query:
        self._base: Optional[str] = None
        self._prefixes: List[Prefix] = []
        self._query_form: Optional[QueryForm] = None
        self._dataset: List[str] = []
        self._where_clause: Optional[GraphPattern] = None
        self._solution_modifiers: List[str] = []
        return self

    #########################################################
    #  Prologue
    #########################################################

    def base(self, content: str) -> Query:
        self._base = content
        return self

    def get_base(self) -> Optional[str]:
        return self._base

    @staticmethod
    def _to_prefix(content) -> Prefix:
        if isinstance(content, str):
            content = Prefix(content)
        if not isinstance(content, Prefix):
            raise TypeError(
                f'Prefix must be Prefix or str but is {category_name(content)}.'
            )
        return content

    def prefix(self, content) -> Query:
        if isinstance(content, (list, tuple)):
            # convert all entries first so a bad one leaves the list untouched
            self._prefixes.extend([self._to_prefix(x) for x in content])
        else:
            self.add_prefix(content)
        return self

    def add_prefix(self, content) -> Query:
        self._prefixes.append(self._to_prefix(content))
        return self

    def get_prefixes(self) -> List[Prefix]:
        return self._prefixes

    def clear_prefixes(self) -> Query:
        self._prefixes = []
        return self

    #########################################################
    #  Query form
    #########################################################

    def select(self, content=None, modifier: Optional[str] = None) -> Query:
        self._query_form = Select(content, modifier)
        return self

    def describe(self, content) -> Query:
        self._query_form = Describe(content)
        return self

    def ask(self) -> Query:
        self._query_form = Ask()
        return self

    def construct(self, triples) -> Query:
        self._query_form = Construct(triples)
        return self

    def get_query_form(self) -> Optional[QueryForm]:
        return self._query_form

    #########################################################
    #  Dataset clause
    #########################################################

    def from_(self, content, named: bool = False) -> Query:
        keyword = 'FROM NAMED' if named else 'FROM'
        if isinstance(content, (list, tuple)):
            for x in content:
                self._dataset.append(f'{keyword} {x}')
        else:
            self._dataset.append(f'{keyword} {content}')
        return self

    def get_dataset_clauses(self) -> List[str]:
        return self._dataset

    def clear_dataset_clauses(self) -> Query:
        self._dataset = []
        return self

    #########################################################
    #  Where clause
    #########################################################

    def where(self, content) -> Query:
        if isinstance(content, (list, tuple)):
            return self.add_where_elements(content)
        elif isinstance(content, GraphPattern):
            return self.set_where_clause(content)
        return self.add_to_where_clause(content)

    def set_where_clause(self, pattern: GraphPattern) -> Query:
        if not isinstance(pattern, GraphPattern):
            raise TypeError(
                'Where clause must be a graph pattern but is '
                f'{category_name(pattern)}.'
            )
        self._where_clause = pattern
        return self

    def add_to_where_clause(self, content, at_index: int = -1) -> Query:
        if self._where_clause is None:
            self._where_clause = GraphPattern(content)
        else:
            self._where_clause.add_element(content, at_index)
        return self

    def add_where_elements(self, contents) -> Query:
        if self._where_clause is None:
            self._where_clause = GraphPattern(list(contents))
            return self
        elements = [Triple(x) if isinstance(x, str) else x for x in contents]
        for x in elements:
            if not self._where_clause.accepts(x):
                raise TypeError(
                    f'Element of type {category_name(x)} is not allowed '
                    'for this block.'
                )
        for x in elements:
            self._where_clause.add_element(x)
        return self

    def _require_where_clause(self) -> GraphPattern:
        if self._where_clause is None:
            raise TypeError('Where clause is not defined.')
        return self._where_clause

    def remove_from_where_clause(self, at_index: int = 0, count: int = 1) -> Query:
        self._require_where_clause().remove_elements(at_index, count)
        return self

    def clear_where_clause(self) -> Query:
        self._require_where_clause().clear()
        return self

    def get_where_clause(self) -> List[QueryComponent]:
        return self._require_where_clause().get_elements()

    def get_where_clause_count(self) -> int:
        return self._require_where_clause().count_elements()

    def get_where_pattern(self) -> Optional[GraphPattern]:
        return self._where_clause

    #########################################################
    #  Solution modifiers
    #########################################################

    def order(self, content: str) -> Query:
        if not isinstance(content, str):
            raise TypeError(
                f'Input for ORDER must be str but is {category_name(content)}.'
            )
        self._solution_modifiers.append(f'ORDER BY {content}')
        return self

    @staticmethod
    def _check_count(keyword: str, count):
        if isinstance(count, bool) or not isinstance(count, int):
            raise TypeError(
                f'Input for {keyword} must be int but is {category_name(count)}.'
            )

    def limit(self, count: int) -> Query:
        self._check_count('LIMIT', count)
        self._solution_modifiers.append(f'LIMIT {count}')
        return self

    def offset(self, count: int) -> Query:
        self._check_count('OFFSET', count)
        self._solution_modifiers.append(f'OFFSET {count}')
        return self

    def get_solution_modifiers(self) -> List[str]:
        return self._solution_modifiers

    def clear_solution_modifiers(self) -> Query:
        self._solution_modifiers = []
        return self

    #########################################################
    #  Serialization and execution
    #########################################################

    def to_str(self):
        res = ''
        if self._base:
            res += f'BASE {self._base} '
        for p in self._prefixes:
            res += f'{p} '

        if self._query_form is None:
            raise TypeError('Query type must be defined.')
        res += f'{self._query_form} '

        if not isinstance(self._dataset, list):
            raise TypeError(
                'Dataset clause should be list but is '
                f'{category_name(self._dataset)}.'
            )
        if self._dataset:
            res += ' '.join(self._dataset) + ' '

        if self._where_clause is None:
            raise TypeError('Where clause is not defined.')
        res += f'WHERE {self._where_clause}'

        if not isinstance(self._solution_modifiers, list):
            raise TypeError(
                'Solution modifiers should be list but are '
                f'{category_name(self._solution_modifiers)}.'
            )
        for m in self._solution_modifiers:
            res += f'{m} '
        return res

    def __repr__(self) -> str:
        endpoint = getattr(self._transport, 'endpoint', None)
        return f'{self.__class__.__name__}(endpoint={endpoint!r})'

    def validate(self) -> str:
        '''
        Render the query and run the lexical check over it.

        Returns the rendered query.
        '''
        res = self.to_str()
        check_syntax(res)
        return res

    def exec(self) -> Any:
        '''
        Render the query and submit it through the transport.
        '''
        if self.config.check_syntax:
            res = self.validate()
        else:
            res = self.to_str()
        logger.debug('Executing query: %s', res)
        return self._transport.submit(res)
