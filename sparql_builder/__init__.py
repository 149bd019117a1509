'''
Copyright (c) 2024 qmj0923
https://github.com/qmj0923/SPARQL-PLY
'''

from sparql_builder.components import (
    QueryComponent, Triple, Filter, Prefix, GraphPattern, GroupGraphPattern,
)
from sparql_builder.config import SparqlConfig
from sparql_builder.query import Query
from sparql_builder.query_forms import (
    QueryForm, Select, Describe, Ask, Construct,
)
from sparql_builder.syntax import SparqlSyntaxError, check_syntax, tokenize
from sparql_builder.transport import SparqlTransport, SparqlTransportError

__all__ = [
    'QueryComponent', 'Triple', 'Filter', 'Prefix', 'GraphPattern',
    'GroupGraphPattern', 'SparqlConfig', 'Query', 'QueryForm', 'Select',
    'Describe', 'Ask', 'Construct', 'SparqlSyntaxError', 'check_syntax',
    'tokenize', 'SparqlTransport', 'SparqlTransportError',
]
