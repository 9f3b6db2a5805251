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


from shlex import split as shlex_split

from neoshell.errors import BadUsage
from neoshell.lexer import CypherLexer


COMMAND_PREFIX = ":"


class Statement(object):
    """ Base class for a complete unit of input.
    """

    is_command = False

    def __init__(self, text):
        self.text = text

    def __repr__(self):
        return "%s(%r)" % (self.__class__.__name__, self.text)

    def __eq__(self, other):
        return type(self) is type(other) and self.text == other.text

    def __ne__(self, other):
        return not self.__eq__(other)

    def __hash__(self):
        return hash((type(self), self.text))


class CypherStatement(Statement):
    """ A Cypher statement, without its terminating semicolon.
    """


class MetaCommand(Statement):
    """ A shell command, such as ``:use neo4j``.
    """

    is_command = True

    def __init__(self, text):
        super(MetaCommand, self).__init__(text.strip())
        name, _, argument_text = self.text.partition(" ")
        self.name = name
        self.argument_text = argument_text.strip()

    @property
    def args(self):
        """ The command arguments, split shell-style.
        """
        try:
            return shlex_split(self.argument_text)
        except ValueError as error:
            raise BadUsage("Could not parse arguments for %s: %s" % (self.name, error), cause=error)


def is_command(text):
    return text.lstrip().startswith(COMMAND_PREFIX)


class StatementAccumulator(object):
    """ Buffers raw input lines into complete statements.

    Commands are always one line long and are recognised only at the
    start of a statement. Cypher accumulates until a ``;`` terminator
    is seen outside of any string, quoted name or comment. Statements
    that contain nothing but whitespace and comments are dropped.
    """

    def __init__(self, lexer=None):
        self.lexer = lexer or CypherLexer()
        self._buffer = u""

    @property
    def incomplete(self):
        """ :const:`True` if part of a statement has been buffered.
        """
        return not self.lexer.is_blank(self._buffer)

    def reset(self):
        self._buffer = u""

    def feed(self, line):
        """ Add a line of input.

        :returns: list of statements completed by this line (often
            empty, occasionally more than one)
        """
        line = line.rstrip(u"\r\n")
        if not self.incomplete and is_command(line):
            self.reset()
            return [MetaCommand(line)]
        self._buffer += line + u"\n"
        texts, self._buffer = self.lexer.split(self._buffer)
        return [CypherStatement(text) for text in texts]

    def flush(self):
        """ Signal the end of input.

        :returns: list containing the final unterminated statement, if
            there is one
        """
        remainder, self._buffer = self._buffer, u""
        if self.lexer.is_blank(remainder):
            return []
        return [CypherStatement(remainder.strip())]


def parse_statements(text):
    """ Parse a block of text into a list of statements.
    """
    accumulator = StatementAccumulator()
    statements = []
    for line in text.splitlines():
        statements.extend(accumulator.feed(line))
    statements.extend(accumulator.flush())
    return statements
