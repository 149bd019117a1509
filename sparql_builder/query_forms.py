'''
Copyright (c) 2024 qmj0923
https://github.com/qmj0923/SPARQL-PLY
'''

from __future__ import annotations
from collections.abc import Sequence
from typing import Optional

from sparql_builder.components import (
    QueryComponent, GraphPattern, Triple, category_name, gen_type,
)


def _join_terms(content) -> str:
    if isinstance(content, str):
        return content
    if isinstance(content, QueryComponent):
        return str(content)
    if isinstance(content, Sequence):
        return ' '.join([str(x) for x in content])
    raise TypeError(
        f'{content!r} is not a valid term or sequence of terms.'
    )


class QueryForm(QueryComponent):
    '''
    Operative clause of a query: SELECT, DESCRIBE, ASK or CONSTRUCT.
    '''
    KEYWORD = ''


class Select(QueryForm):
    '''
    [7] SelectClause
    '''
    TYPE = gen_type()
    KEYWORD = 'SELECT'
    MODIFIERS = ('DISTINCT', 'REDUCED')

    def __init__(self, content=None, modifier: Optional[str] = None):
        if modifier is not None:
            if not isinstance(modifier, str):
                raise TypeError(
                    'Select modifier must be str but is '
                    f'{category_name(modifier)}.'
                )
            modifier = modifier.upper()
            if modifier not in self.MODIFIERS:
                raise ValueError(
                    f'Select modifier must be one of {self.MODIFIERS} '
                    f'but is {modifier}.'
                )
        self.modifier = modifier
        self.target = _join_terms(content) if content else '*'

    def to_str(self):
        res = self.KEYWORD
        if self.modifier is not None:
            res += ' ' + self.modifier
        return res + ' ' + self.target


class Describe(QueryForm):
    '''
    [11] DescribeQuery
    '''
    TYPE = gen_type()
    KEYWORD = 'DESCRIBE'

    def __init__(self, content):
        target = _join_terms(content).strip()
        if not target:
            raise ValueError('Describe needs at least one resource.')
        self.target = target

    def to_str(self):
        return f'{self.KEYWORD} {self.target}'


class Ask(QueryForm):
    '''
    [12] AskQuery
    '''
    TYPE = gen_type()
    KEYWORD = 'ASK'

    def to_str(self):
        return self.KEYWORD


class Construct(QueryForm):
    '''
    [10] ConstructQuery

    The template is a block of triples. Anything other than a ready
    GraphPattern is wrapped in one that only accepts triples.
    '''
    TYPE = gen_type()
    KEYWORD = 'CONSTRUCT'

    def __init__(self, triples):
        if isinstance(triples, GraphPattern):
            self.template = triples
        else:
            self.template = GraphPattern(
                triples, allowed_types=Triple.TYPE,
            )

    def to_str(self):
        return f'{self.KEYWORD} {self.template.to_str().rstrip()}'
