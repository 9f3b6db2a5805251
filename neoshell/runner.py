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


from logging import getLogger
from os import makedirs
from os.path import expanduser, join as path_join
from sys import stdin

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.lexers import PygmentsLexer
from prompt_toolkit.styles import merge_styles, style_from_pygments_cls, style_from_pygments_dict
from pygments.styles.native import NativeStyle
from pygments.token import Token

from neoshell.auth import isatty
from neoshell.errors import ExitRequested
from neoshell.lexer import CypherLexer
from neoshell.shell import read_source
from neoshell.statements import StatementAccumulator, is_command


log = getLogger(__name__)


HISTORY_FILE_DIR = expanduser(path_join("~", ".neoshell"))

HISTORY_FILE = "history"

WELCOME = u"""\
Connected to Neo4j{version} at {uri}{user}.
Type :help for a list of available commands or :exit to exit the shell.
Note that Cypher queries must end with a semicolon."""


def file_history():
    """ Return the persistent history used by interactive sessions.
    """
    try:
        makedirs(HISTORY_FILE_DIR)
    except OSError:
        pass
    return FileHistory(path_join(HISTORY_FILE_DIR, HISTORY_FILE))


class ShellRunner(object):
    """ Base class for the loops that feed input into a shell.
    """

    def __init__(self, shell):
        self.shell = shell

    def run_until_end(self):
        """ Run until input is exhausted or the user exits.

        :returns: process exit status
        """
        raise NotImplementedError


class InteractiveRunner(ShellRunner):
    """ Reads and executes one line at a time from the terminal.
    Failures are reported and the loop carries on; only ``:exit`` or
    end of input (CTRL-D) end the session.
    """

    prompt_colour = "cyan"
    tx_colour = "yellow"

    def __init__(self, shell):
        super(InteractiveRunner, self).__init__(shell)
        self.accumulator = StatementAccumulator()
        self._session = None

    @property
    def session(self):
        if self._session is None:
            self._session = PromptSession(
                history=self.shell.history,
                lexer=PygmentsLexer(CypherLexer),
                style=merge_styles([
                    style_from_pygments_cls(NativeStyle),
                    style_from_pygments_dict({
                        Token.Prompt: "#ansi{}".format(self.prompt_colour),
                        Token.TxMarker: "#ansi{} bold".format(self.tx_colour),
                    })
                ]),
            )
        return self._session

    def prompt(self, message):
        return self.session.prompt(message)

    def echo(self, text):
        self.shell.error_logger.print_info(text)

    def get_prompt_tokens(self):
        if self.accumulator.incomplete:
            name = u"{}@{}".format(self.shell.config.username, self.shell.database or u"neo4j")
            return [("class:pygments.prompt", u" " * len(name) + u"> ")]
        tokens = [("class:pygments.prompt", u"{}@{}".format(self.shell.config.username,
                                                            self.shell.database or u"neo4j"))]
        if self.shell.in_transaction:
            tokens.append(("class:pygments.txmarker", u"#"))
        else:
            tokens.append(("class:pygments.prompt", u">"))
        tokens.append(("class:pygments.prompt", u" "))
        return tokens

    def welcome(self):
        shell = self.shell
        version = shell.server_version
        self.echo(WELCOME.format(
            version=u" " + version if version else u"",
            uri=shell.config.uri,
            user=u" as user " + shell.config.username if shell.config.username else u"",
        ))

    def run_until_end(self):
        self.welcome()
        try:
            while True:
                try:
                    line = self.prompt(self.get_prompt_tokens())
                except KeyboardInterrupt:
                    self.accumulator.reset()
                    continue
                except EOFError:
                    return 0
                for statement in self.accumulator.feed(line):
                    outcome = self.shell.dispatch(statement)
                    if outcome.exited:
                        return outcome.exit_status
                    if outcome.failed and outcome.error is not None:
                        self.shell.error_logger.print_error(outcome.error)
        finally:
            self.shell.disconnect()


class NonInteractiveRunner(ShellRunner):
    """ Executes every statement from a file, from a list of lines or
    from standard input. Each failure is logged and execution carries
    on with the next statement, unless `fail_fast` is set. The exit
    status is non-zero if any statement failed.
    """

    def __init__(self, shell, file_name=None, lines=None, input=None, fail_fast=False):
        super(NonInteractiveRunner, self).__init__(shell)
        self.file_name = file_name
        self.lines = lines
        self.input = input or stdin
        self.fail_fast = fail_fast

    def read_lines(self):
        if self.file_name:
            return self.file_name, read_source(self.file_name)
        elif self.lines is not None:
            return u"<arguments>", list(self.lines)
        else:
            return u"<stdin>", self.input.read().splitlines()

    def run_until_end(self):
        name, lines = self.read_lines()
        log.debug("Running %d lines from %s", len(lines), name)
        try:
            failures = self.shell.run_script(name, lines, fail_fast=self.fail_fast)
        except ExitRequested as request:
            return request.status or (1 if request.failures else 0)
        finally:
            self.shell.disconnect()
        return 1 if failures else 0


def get_shell_runner(shell, file_name=None, statements=None, non_interactive=False,
                     fail_fast=False, input=None):
    """ Choose a runner for the given input options.
    """
    input = input or stdin
    if file_name:
        return NonInteractiveRunner(shell, file_name=file_name, fail_fast=fail_fast)
    if statements:
        lines = [s if is_command(s) or s.rstrip().endswith(u";") else s + u";" for s in statements]
        return NonInteractiveRunner(shell, lines=lines, fail_fast=fail_fast)
    if non_interactive or not isatty(input):
        return NonInteractiveRunner(shell, input=input, fail_fast=fail_fast)
    return InteractiveRunner(shell)
