#!/usr/bin/env python
# -*- encoding: utf-8 -*-

# Copyright 2011-2021, Nigel Small
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


import re

from pygments.lexer import RegexLexer, bygroups, words
from pygments.token import (Comment, Keyword, Name, Number, Operator, Punctuation,
                            String, Text, Whitespace)


KEYWORDS = [
    "ALTER",
    "AS",
    "ASC",
    "ASCENDING",
    "ASSERT",
    "BY",
    "CALL",
    "CASE",
    "CONSTRAINT",
    "CREATE",
    "CSV",
    "DATABASE",
    "DATABASES",
    "DEFAULT",
    "DELETE",
    "DESC",
    "DESCENDING",
    "DETACH",
    "DISTINCT",
    "DROP",
    "ELSE",
    "END",
    "EXISTS",
    "EXPLAIN",
    "FIELDTERMINATOR",
    "FOREACH",
    "FROM",
    "GRANT",
    "HEADERS",
    "IN",
    "INDEX",
    "IS",
    "LIMIT",
    "LOAD",
    "MATCH",
    "MERGE",
    "ON",
    "OPTIONAL",
    "ORDER",
    "PASSWORD",
    "PROFILE",
    "REMOVE",
    "REPLACE",
    "RETURN",
    "REVOKE",
    "ROLE",
    "SET",
    "SHOW",
    "SKIP",
    "START",
    "STOP",
    "THEN",
    "TO",
    "UNION",
    "UNIQUE",
    "UNWIND",
    "USE",
    "USER",
    "USING",
    "WHEN",
    "WHERE",
    "WITH",
    "YIELD",
]
CONSTANTS = [
    "NULL",
    "TRUE",
    "FALSE",
]
OPERATORS = [
    "AND",
    "OR",
    "XOR",
    "NOT",
    "CONTAINS",
    "IS NOT NULL",
    "IS NULL",
    "STARTS WITH",
    "ENDS WITH",
]

QUOTED_NAME = r"`(?:[^`]|``)*(?:`|\Z)"


class CypherLexer(RegexLexer):
    """ Pygments lexer for Cypher, used both for syntax colouring at
    the interactive prompt and for splitting input into statements.

    Unterminated strings, quoted names and block comments extend to
    the end of the input, so that a statement split across several
    lines is never terminated early by a semicolon inside one of them.
    """

    name = "Cypher"
    aliases = ["cypher"]
    filenames = ["*.cypher", "*.cyp"]

    flags = re.IGNORECASE
    tokens = {
        "root": [
            (r"\s+", Whitespace),
            (r"//", Comment.Single, "single-line-comment"),
            (r"/\*", Comment.Multiline, "multi-line-comment"),
            (r"'(?:[^'\\]|\\.)*(?:'|\Z)", String),
            (r'"(?:[^"\\]|\\.)*(?:"|\Z)', String),
            (QUOTED_NAME, Name.Variable),
            (r"(\$)(\w+)", bygroups(Punctuation, Name.Variable.Global)),
            (r"(:)(" + QUOTED_NAME + r"|[A-Za-z_]\w*)", bygroups(Punctuation, Name.Label)),
            (r"\b(?:" + "|".join(op.replace(" ", r"\s+") for op in OPERATORS) + r")\b", Operator.Word),
            (words(KEYWORDS, prefix=r"\b", suffix=r"\b"), Keyword),
            (words(CONSTANTS, prefix=r"\b", suffix=r"\b"), Keyword.Constant),
            (r"([A-Za-z_][\w.]*)(\s*)(\()", bygroups(Name.Function, Whitespace, Punctuation)),
            (r"\d*\.\d+(?:e[+-]?\d+)?", Number.Float),
            (r"0x[0-9a-f]+", Number.Hex),
            (r"\d+", Number.Integer),
            (r"[A-Za-z_]\w*", Name.Variable),
            (r"[;,()\[\]{}.:|]", Punctuation),
            (r"[+*/%^<>=!~-]+", Operator),
            (r".", Text),
        ],
        "single-line-comment": [
            (r"[^\n]+", Comment.Single),
            (r"\n", Whitespace, "#pop"),
        ],
        "multi-line-comment": [
            (r"\*/", Comment.Multiline, "#pop"),
            (r"[^*]+", Comment.Multiline),
            (r"\*", Comment.Multiline),
        ],
    }

    @staticmethod
    def _is_padding(token_type):
        return token_type in Whitespace or token_type in Comment

    def split(self, text):
        """ Split `text` at each statement terminator.

        :returns: 2-tuple of the list of complete statements (stripped,
            with empty statements discarded) and the remaining text
            following the last terminator
        """
        statements = []
        start = 0
        meaningful = False
        for index, token_type, value in self.get_tokens_unprocessed(text):
            if token_type is Punctuation and value == ";":
                if meaningful:
                    statements.append(text[start:index].strip())
                start = index + 1
                meaningful = False
            elif not self._is_padding(token_type):
                meaningful = True
        return statements, text[start:]

    def is_blank(self, text):
        """ Return :const:`True` if `text` holds nothing other than
        whitespace and comments.
        """
        return all(self._is_padding(token_type)
                   for _, token_type, _ in self.get_tokens_unprocessed(text))
