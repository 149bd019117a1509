'''
Copyright (c) 2024 qmj0923
https://github.com/qmj0923/SPARQL-PLY

Lexical well-formedness check for serialized queries.

The lexer splits query text into SPARQL 1.1 terminals. `check_syntax`
also verifies that braces, parentheses and brackets balance and nest.
'''

import logging
from typing import List, Optional

from ply import lex
from ply.lex import TOKEN, LexToken

logger = logging.getLogger(__name__)


class SparqlSyntaxError(ValueError):
    def __init__(self, message: str, position: Optional[int] = None):
        super().__init__(message)
        self.position = position


SPARQL_KEYWORDS = {
    # query basic
    'BASE', 'PREFIX', 'SELECT', 'CONSTRUCT', 'DESCRIBE', 'ASK', 'DISTINCT', 'REDUCED', 'AS', 'WHERE', 'FROM', 'NAMED', 'GROUP', 'BY', 'HAVING', 'ORDER', 'ASC', 'DESC', 'LIMIT', 'OFFSET', 'VALUES', 'UNDEF',
    # group graph pattern
    'UNION', 'OPTIONAL', 'MINUS', 'GRAPH', 'SERVICE', 'FILTER', 'BIND', 'SILENT',
    # literal and operator
    'TRUE', 'FALSE', 'NOT', 'IN',
    # built-in call
    'COUNT', 'SUM', 'MIN', 'MAX', 'AVG', 'SAMPLE', 'GROUP_CONCAT', 'SEPARATOR', 'STR', 'LANG', 'LANGMATCHES', 'DATATYPE', 'BOUND', 'IRI', 'URI', 'BNODE', 'RAND', 'ABS', 'CEIL', 'FLOOR', 'ROUND', 'CONCAT', 'SUBSTR', 'STRLEN', 'REPLACE', 'UCASE', 'LCASE', 'ENCODE_FOR_URI', 'CONTAINS', 'STRSTARTS', 'STRENDS', 'STRBEFORE', 'STRAFTER', 'YEAR', 'MONTH', 'DAY', 'HOURS', 'MINUTES', 'SECONDS', 'TIMEZONE', 'TZ', 'NOW', 'UUID', 'STRUUID', 'MD5', 'SHA1', 'SHA256', 'SHA384', 'SHA512', 'COALESCE', 'IF', 'STRLANG', 'STRDT', 'SAMETERM', 'ISIRI', 'ISURI', 'ISBLANK', 'ISLITERAL', 'ISNUMERIC', 'REGEX', 'EXISTS',
}


############################################################
#
#  Terminals (internal patterns)
#
############################################################
INNER_PN_CHARS_BASE = (
    r'A-Za-z\u00C0-\u00D6\u00D8-\u00F6\u00F8-\u02FF\u0370-\u037D'
    r'\u037F-\u1FFF\u200C-\u200D\u2070-\u218F\u2C00-\u2FEF\u3001-\uD7FF'
    r'\uF900-\uFDCF\uFDF0-\uFFFD\U00010000-\U000EFFFF'
)
INNER_PN_CHARS_U = INNER_PN_CHARS_BASE + r'_'
INNER_PN_CHARS_EXTRA = r'\u00B7\u0300-\u036F\u203F-\u2040'
INNER_PN_CHARS = INNER_PN_CHARS_U + r'\-0-9' + INNER_PN_CHARS_EXTRA

PAT_EXPONENT = r'[eE][+\-]?[0-9]+'
PAT_ECHAR = r'[\\][tbnrf\\\"\']'
PAT_WS = r'[\x20\x09\x0D\x0A]'
PAT_VARNAME = (
    r'[' + INNER_PN_CHARS_U + r'0-9]'
    r'[' + INNER_PN_CHARS_U + r'0-9' + INNER_PN_CHARS_EXTRA + r']*'
)
PAT_PN_PREFIX = (
    r'[' + INNER_PN_CHARS_BASE + r']'
    r'([' + INNER_PN_CHARS + r'.]*[' + INNER_PN_CHARS + r'])?'
)
PAT_PLX = r'(%[0-9A-Fa-f]{2})|([\\][_~.\-!$&\'()*+,;=/?#@%])'
PAT_PN_LOCAL = (
    r'(([' + INNER_PN_CHARS_U + r':0-9])|' + PAT_PLX + r')'
    r'((([' + INNER_PN_CHARS + r'.:])|' + PAT_PLX + r')*'
    r'(([' + INNER_PN_CHARS + r':])|' + PAT_PLX + r'))?'
)

############################################################
#
#  Terminals (for lexer)
#
############################################################
PAT_IRIREF = r'<([^<>\"{}|\^`\\\x00-\x20])*>'
PAT_PNAME_NS = r'(' + PAT_PN_PREFIX + r')?[:]'
PAT_PNAME_LN = r'(' + PAT_PNAME_NS + r')(' + PAT_PN_LOCAL + r')'
PAT_BLANK_NODE_LABEL = (
    r'[_][:][' + INNER_PN_CHARS_U + r'0-9]'
    r'([' + INNER_PN_CHARS + r'.]*[' + INNER_PN_CHARS + r'])?'
)
PAT_VAR = r'[?$]' + PAT_VARNAME
PAT_LANGTAG = r'[@][a-zA-Z]+([\-][a-zA-Z0-9]+)*'
# DOUBLE | DECIMAL | INTEGER, longest form first
PAT_NUMBER = (
    r'([0-9]+[.][0-9]*' + PAT_EXPONENT + r')'
    r'|([.][0-9]+' + PAT_EXPONENT + r')'
    r'|([0-9]+' + PAT_EXPONENT + r')'
    r'|([0-9]*[.][0-9]+)'
    r'|([0-9]+)'
)
# STRING_LITERAL_LONG1 | STRING_LITERAL_LONG2 | STRING_LITERAL1 | STRING_LITERAL2
PAT_STRING = (
    r'(\'\'\'((\'|\'\')?([^\'\\]|' + PAT_ECHAR + r'))*\'\'\')'
    r'|(\"\"\"((\"|\"\")?([^\"\\]|' + PAT_ECHAR + r'))*\"\"\")'
    r'|(\'(([^\x27\x5C\x0A\x0D])|(' + PAT_ECHAR + r'))*\')'
    r'|(\"(([^\x22\x5C\x0A\x0D])|(' + PAT_ECHAR + r'))*\")'
)
PAT_NIL = r'[(](' + PAT_WS + r')*[)]'
PAT_ANON = r'[\[](' + PAT_WS + r')*[\]]'
PAT_OP = r'(\^\^)|(\|\|)|(&&)|(!=)|(<=)|(>=)|[=<>!+\-*/|\^?,;.~%]'


class SparqlLexer:
    '''
    PLY lexer over SPARQL terminals. Function rules are tried in the
    order they are defined, so longer terminals come before their
    prefixes (PNAME_LN before PNAME_NS, NIL before LPAREN).
    '''
    tokens = [
        'IRIREF', 'PNAME_LN', 'PNAME_NS', 'BLANK_NODE_LABEL', 'VAR',
        'LANGTAG', 'NUMBER', 'STRING', 'NIL', 'ANON', 'KEYWORD', 'OP',
        'LPAREN', 'RPAREN', 'LBRACKET', 'RBRACKET', 'LBRACE', 'RBRACE',
    ]

    OPENING = {'LPAREN': 'RPAREN', 'LBRACKET': 'RBRACKET', 'LBRACE': 'RBRACE'}
    CLOSING = {v: k for k, v in OPENING.items()}

    t_LPAREN = r'[(]'
    t_RPAREN = r'[)]'
    t_LBRACKET = r'[\[]'
    t_RBRACKET = r'[\]]'
    t_LBRACE = r'[{]'
    t_RBRACE = r'[}]'

    t_ignore = ' \t\r\f'
    t_ignore_COMMENT = r'\#.*'

    @TOKEN(PAT_IRIREF)
    def t_IRIREF(self, t):
        return t

    @TOKEN(PAT_PNAME_LN)
    def t_PNAME_LN(self, t):
        return t

    @TOKEN(PAT_PNAME_NS)
    def t_PNAME_NS(self, t):
        return t

    @TOKEN(PAT_BLANK_NODE_LABEL)
    def t_BLANK_NODE_LABEL(self, t):
        return t

    @TOKEN(PAT_VAR)
    def t_VAR(self, t):
        return t

    @TOKEN(PAT_LANGTAG)
    def t_LANGTAG(self, t):
        return t

    @TOKEN(PAT_NUMBER)
    def t_NUMBER(self, t):
        return t

    @TOKEN(PAT_STRING)
    def t_STRING(self, t):
        return t

    @TOKEN(PAT_NIL)
    def t_NIL(self, t):
        return t

    @TOKEN(PAT_ANON)
    def t_ANON(self, t):
        return t

    def t_KEYWORD(self, t):
        r'[a-zA-Z_][a-zA-Z_0-9]*'
        if t.value != 'a' and t.value.upper() not in SPARQL_KEYWORDS:
            raise SparqlSyntaxError(
                f'Unknown keyword {t.value} in line {t.lexer.lineno}'
                f' at position {t.lexpos}.', t.lexpos,
            )
        return t

    @TOKEN(PAT_OP)
    def t_OP(self, t):
        return t

    def t_newline(self, t):
        r'\n+'
        t.lexer.lineno += len(t.value)

    def t_error(self, t):
        raise SparqlSyntaxError(
            f'Unknown text {t.value[:20]!r} in line {t.lexer.lineno}'
            f' at position {t.lexpos}.', t.lexpos,
        )

    def __init__(self):
        self.lexer = lex.lex(module=self, errorlog=logger)

    def tokenize(self, text: str) -> List[LexToken]:
        self.lexer.lineno = 1
        self.lexer.input(text)
        return list(iter(self.lexer.token, None))

    def check_balance(self, toks: List[LexToken]):
        stack: List[LexToken] = []
        for tok in toks:
            if tok.type in self.OPENING:
                stack.append(tok)
            elif tok.type in self.CLOSING:
                if not stack or stack[-1].type != self.CLOSING[tok.type]:
                    raise SparqlSyntaxError(
                        f'Unbalanced {tok.value!r} at position {tok.lexpos}.',
                        tok.lexpos,
                    )
                stack.pop()
        if stack:
            tok = stack[-1]
            raise SparqlSyntaxError(
                f'Unclosed {tok.value!r} at position {tok.lexpos}.',
                tok.lexpos,
            )


_lexer: Optional[SparqlLexer] = None


def get_lexer() -> SparqlLexer:
    global _lexer
    if _lexer is None:
        _lexer = SparqlLexer()
    return _lexer


def tokenize(text: str) -> List[LexToken]:
    return get_lexer().tokenize(text)


def check_syntax(text: str) -> List[LexToken]:
    '''
    Tokenize `text` and check that all brackets balance.

    Raises
    ------
    SparqlSyntaxError
        If `text` contains a character sequence that is not a SPARQL
        terminal, or if brackets do not balance.
    '''
    lexer = get_lexer()
    toks = lexer.tokenize(text)
    lexer.check_balance(toks)
    return toks
