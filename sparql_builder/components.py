'''
Copyright (c) 2024 qmj0923
https://github.com/qmj0923/SPARQL-PLY
'''

from __future__ import annotations
import itertools
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import (
    List, Optional, Union,
)


_type_bits = itertools.count(0)


def gen_type() -> int:
    return 1 << next(_type_bits)


class QueryComponent(ABC):
    '''
    Abstract base class for all components of a SPARQL query.

    Every concrete subclass owns a unique bit `TYPE`. Pattern allow-lists
    are masks of these bits.
    '''
    TYPE = 0

    @property
    def type(self) -> int:
        return self.TYPE

    @abstractmethod
    def to_str(self) -> str:
        raise NotImplementedError(
            f'to_str is not implemented for {self.__class__}'
        )

    def __repr__(self) -> str:
        return f'{self.__class__.__name__}({self.to_str()!r})'

    def __str__(self) -> str:
        return self.to_str()


def category_name(obj) -> str:
    '''
    Name of the runtime category of `obj`, used in error messages.
    '''
    return type(obj).__name__


#########################################################
#
#  Leaf elements
#
#########################################################

class Triple(QueryComponent):
    '''
    [75] TriplesSameSubject

    Either the whole triple text (`Triple('?s ?p ?o')`) or its three
    terms (`Triple('?s', 'foaf:name', '?name')`).
    '''
    TYPE = gen_type()

    def __init__(self, subj, pred=None, obj=None):
        if pred is None and obj is None:
            if not isinstance(subj, str):
                raise TypeError(
                    f'Triple text must be str but is {category_name(subj)}.'
                )
            self.value = subj
        elif pred is not None and obj is not None:
            self.value = ' '.join([str(subj), str(pred), str(obj)])
        else:
            raise TypeError('Triple needs either one text or three terms.')

    def to_str(self):
        return self.value

    def __eq__(self, other):
        return isinstance(other, Triple) and self.value == other.value

    def __hash__(self):
        return hash(self.value) ^ hash(self.TYPE)


class Filter(QueryComponent):
    '''
    [68] Filter
    '''
    TYPE = gen_type()

    def __init__(self, expression: str):
        if not isinstance(expression, str):
            raise TypeError(
                'Filter expression must be str but is '
                f'{category_name(expression)}.'
            )
        self.expression = expression

    def to_str(self):
        return f'FILTER ({self.expression})'

    def __eq__(self, other):
        return isinstance(other, Filter) and self.expression == other.expression

    def __hash__(self):
        return hash(self.expression) ^ hash(self.TYPE)


class Prefix(QueryComponent):
    '''
    [6] PrefixDecl

    `Prefix('foaf: <http://xmlns.com/foaf/0.1/>')` or
    `Prefix('foaf', 'http://xmlns.com/foaf/0.1/')`.
    '''
    TYPE = gen_type()

    def __init__(self, content: str, iri: Optional[str] = None):
        if not isinstance(content, str):
            raise TypeError(
                f'Prefix must be str but is {category_name(content)}.'
            )
        if iri is None:
            body = content.strip()
            keyword, _, rest = body.partition(' ')
            if keyword.upper() == 'PREFIX':
                body = rest.lstrip()
            self.value = body
        else:
            label = content if content.endswith(':') else content + ':'
            if not (iri.startswith('<') and iri.endswith('>')):
                iri = f'<{iri}>'
            self.value = f'{label} {iri}'

    def to_str(self):
        return f'PREFIX {self.value}'

    def __eq__(self, other):
        return isinstance(other, Prefix) and self.value == other.value

    def __hash__(self):
        return hash(self.value) ^ hash(self.TYPE)


#########################################################
#
#  GraphPattern
#
#########################################################

AllowedTypes = Union[int, Sequence]


def to_type_mask(allowed_types: AllowedTypes) -> int:
    '''
    Fold an allow-list given as a sequence of component classes into a
    mask of their type bits.
    '''
    if isinstance(allowed_types, int):
        return allowed_types
    mask = 0
    for cls in allowed_types:
        if not (
            isinstance(cls, type) and issubclass(cls, QueryComponent)
        ):
            raise TypeError(f'{cls!r} is not a query component class.')
        mask |= cls.TYPE
    return mask


class GraphPattern(QueryComponent):
    '''
    [53] GroupGraphPattern

    An ordered block of elements. The allow-list, fixed at construction,
    decides which element categories the block accepts. A block may be
    tagged OPTIONAL and/or UNION (alternative to the preceding block).
    '''
    TYPE = gen_type()

    def __init__(
        self,
        elements=None,
        optional: bool = False,
        alternative: bool = False,
        allowed_types: Optional[AllowedTypes] = None,
    ):
        self._elements: List[QueryComponent] = []
        self._optional = optional
        self._alternative = alternative
        if allowed_types is None:
            allowed_types = self.default_allowed_types()
        self._allowed_types = to_type_mask(allowed_types)

        if isinstance(elements, (list, tuple)):
            for element in elements:
                self.add_element(element)
        elif elements is not None:
            self.add_element(elements)

    @classmethod
    def default_allowed_types(cls) -> int:
        return Triple.TYPE | Filter.TYPE

    @property
    def optional(self) -> bool:
        return self._optional

    @property
    def alternative(self) -> bool:
        return self._alternative

    @property
    def allowed_types(self) -> int:
        return self._allowed_types

    def accepts(self, element) -> bool:
        return (
            isinstance(element, QueryComponent)
            and bool(element.type & self._allowed_types)
        )

    def add_element(self, element, at_index: int = -1) -> GraphPattern:
        if isinstance(element, str):
            element = Triple(element)
        if not self.accepts(element):
            raise TypeError(
                f'Element of type {category_name(element)} is not allowed '
                'for this block.'
            )
        if at_index < 0:
            self._elements.append(element)
        elif at_index <= len(self._elements):
            self._elements.insert(at_index, element)
        else:
            raise IndexError(
                f'Cannot insert element at index {at_index}, block has '
                f'{len(self._elements)} elements.'
            )
        return self

    def remove_elements(self, at_index: int = 0, count: int = 1) -> GraphPattern:
        # The last element is never removable here: the upper bound is
        # exclusive of the block length.
        if at_index >= 0 and count >= 0 and at_index + count < len(self._elements):
            del self._elements[at_index:at_index + count]
        else:
            raise IndexError(
                'Cannot remove elements from block, index and/or count out '
                'of bounds.'
            )
        return self

    def get_elements(self) -> List[QueryComponent]:
        return self._elements

    def count_elements(self) -> int:
        return len(self._elements)

    def clear(self) -> GraphPattern:
        self._elements = []
        return self

    def to_str(self):
        res = ''
        if self._optional:
            res += 'OPTIONAL '
        if self._alternative:
            res += 'UNION '
        body = ' '.join([
            f'{e} .' if e.type & Triple.TYPE else str(e)
            for e in self._elements
        ])
        return res + '{ ' + body + ' } '


class GroupGraphPattern(GraphPattern):
    '''
    A block whose elements are nested blocks, e.g. two alternative
    sub-blocks expressing a union:

        GroupGraphPattern([
            GraphPattern('?s a ex:Cat'),
            GraphPattern('?s a ex:Dog', alternative=True),
        ])
    '''
    TYPE = gen_type()

    @classmethod
    def default_allowed_types(cls) -> int:
        return GraphPattern.TYPE | GroupGraphPattern.TYPE
