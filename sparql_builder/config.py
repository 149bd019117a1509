'''
Copyright (c) 2024 qmj0923
https://github.com/qmj0923/SPARQL-PLY
'''

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class SparqlConfig:
    '''
    Settings shared by a query and the transport that submits it.
    '''
    METHODS = ('POST', 'GET')

    timeout: float = 30.0
    method: str = 'POST'
    accept: str = 'application/sparql-results+json'
    headers: Dict[str, str] = field(default_factory=dict)
    # run the lexer check on the query text before submitting it
    check_syntax: bool = True

    def __post_init__(self):
        self.method = self.method.upper()
        if self.method not in self.METHODS:
            raise ValueError(
                f'Method must be one of {self.METHODS} but is {self.method}.'
            )

    def request_headers(self) -> Dict[str, str]:
        res = {'Accept': self.accept}
        res.update(self.headers)
        return res
