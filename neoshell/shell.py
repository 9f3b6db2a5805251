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


from collections import deque
from logging import getLogger
from os.path import expanduser

from prompt_toolkit.history import InMemoryHistory

from neoshell.auth import get_prompter
from neoshell.commands import CommandDispatcher
from neoshell.config import ConnectionConfig
from neoshell.connector import Connector
from neoshell.driver import ConnectionUnavailable, Failure
from neoshell.errors import (BadUsage, ExitRequested, FileNotFound, NotConnected, Outcome,
                             ServerError, Unreachable, classify)
from neoshell.printing import ErrorLogger, LinePrinter
from neoshell.statements import StatementAccumulator, parse_statements


log = getLogger(__name__)


DATABASE_UNAVAILABLE = "Neo.TransientError.General.DatabaseUnavailable"

MAX_SOURCE_DEPTH = 16


def read_source(file_name):
    """ Read all lines from a Cypher source file.

    :raises FileNotFound: if the file does not exist or cannot be read
    """
    try:
        with open(expanduser(file_name), encoding="utf-8") as f:
            return f.read().splitlines()
    except FileNotFoundError as error:
        raise FileNotFound(u"Cannot find file: '%s'" % file_name, cause=error)
    except OSError as error:
        raise FileNotFound(u"Cannot read file: '%s' (%s)" % (file_name, error.strerror), cause=error)


class SourceFrame(object):
    """ Position within a script that is being executed.
    """

    def __init__(self, name, lines):
        self.name = name
        self._lines = iter(lines)
        self._accumulator = StatementAccumulator()
        self._pending = deque()
        self._exhausted = False

    def __repr__(self):
        return "<%s %r>" % (self.__class__.__name__, self.name)

    def next_statement(self):
        """ Return the next statement in this script, or
        :const:`None` once all statements have been read.
        """
        while not self._pending and not self._exhausted:
            line = next(self._lines, None)
            if line is None:
                self._pending.extend(self._accumulator.flush())
                self._exhausted = True
            else:
                self._pending.extend(self._accumulator.feed(line))
        if self._pending:
            return self._pending.popleft()
        return None


class CypherShell(object):
    """ A single shell session against a Neo4j service.

    The shell owns its :class:`.ConnectionConfig` and the connection
    made with it. All work is carried out sequentially, one statement
    at a time.

    :param config: connection details (default: from environment)
    :param printer: :class:`.LinePrinter` for result output
    :param error_logger: :class:`.ErrorLogger` for errors raised
        during script execution
    :param connector: :class:`.Connector` used to open connections
    :param prompter: prompter used when authenticating interactively
    :param history: `prompt_toolkit` history object
    """

    max_source_depth = MAX_SOURCE_DEPTH

    def __init__(self, config=None, printer=None, error_logger=None, connector=None,
                 prompter=None, history=None):
        self.config = config or ConnectionConfig.parse()
        self.printer = printer or LinePrinter()
        self.error_logger = error_logger or ErrorLogger()
        self.connector = connector or Connector()
        self.prompter = prompter or get_prompter()
        self.history = history if history is not None else InMemoryHistory()
        self.dispatcher = CommandDispatcher()
        self.parameters = {}
        self.connection = None
        self._lost = None
        self._sources = []

    def __repr__(self):
        state = "connected" if self.is_connected() else "disconnected"
        return "<%s %s %s>" % (self.__class__.__name__, self.config.uri, state)

    # Connection lifecycle

    def connect(self, config=None):
        """ Connect using `config` (or the current config). Any
        existing connection is replaced once the new one succeeds.

        :raises AuthError: if the connection fails
        """
        if config is not None:
            self.config = config
        connection = self.connector.connect(self.config)
        if self.connection is not None:
            self.connector.disconnect(self.connection)
        self.connection = connection
        self._lost = None

    def disconnect(self):
        if self.connection is not None:
            self.connector.disconnect(self.connection)
        self.connection = None
        self._lost = None

    def is_connected(self):
        return self.connection is not None

    def change_password(self, config=None):
        self.connector.change_password(config or self.config)

    @property
    def database(self):
        """ Name of the active database, or an empty string for the
        server default.
        """
        return self.config.database

    @property
    def server_version(self):
        if self.connection is None:
            return None
        return self.connection.server_version

    @property
    def in_transaction(self):
        return self.connection is not None and self.connection.in_transaction

    def _drop(self, error):
        log.info("Connection dropped: %s", error)
        connection, self.connection = self.connection, None
        if connection is not None:
            self.connector.disconnect(connection)
        self._lost = error

    def _require_connection(self):
        if self.connection is not None:
            return self.connection
        lost = self._lost
        if isinstance(lost, ServerError):
            raise lost.__class__(lost.message, lost.code, cause=lost)
        raise NotConnected(u"Not connected to Neo4j. Use :connect to reconnect.")

    def _call(self, f, *args, **kwargs):
        try:
            return f(*args, **kwargs)
        except Failure as failure:
            error = classify(failure)
            if failure.code == DATABASE_UNAVAILABLE:
                self._drop(error)
            raise error
        except ConnectionUnavailable as e:
            error = Unreachable(str(e), cause=e)
            self._drop(error)
            raise error

    # Execution

    def execute(self, text):
        """ Classify and dispatch each statement in `text`, stopping
        at the first one that does not succeed.
        """
        outcome = Outcome.success()
        for statement in parse_statements(text):
            outcome = self.dispatch(statement)
            if not outcome.succeeded:
                break
        return outcome

    def dispatch(self, statement):
        return self.dispatcher.dispatch(statement, self)

    def run_cypher(self, text):
        connection = self._require_connection()
        log.debug("Running %r against database %r", text, self.database or "<default>")
        result = self._call(connection.run, text, self.parameters, self.database)
        self.printer.print_result(result)
        return result

    def use(self, database):
        """ Switch the active database. If connected, the new database
        is verified before the switch takes effect; on failure the
        previous database and connection remain active.
        """
        if self.in_transaction:
            raise BadUsage(u"There is an open transaction. You need to close it before "
                           u"you can switch database.")
        database = database or u""
        if self.connection is None:
            self.config.database = database
            self._lost = None
            return
        connection = self.connector.connect(self.config, database=database)
        self.connector.disconnect(self.connection)
        self.connection = connection
        self.config.database = database
        log.info("Switched to database %r", database or "<default>")

    def begin(self):
        connection = self._require_connection()
        if connection.in_transaction:
            raise BadUsage(u"There is already an open transaction")
        self._call(connection.begin, self.database)

    def commit(self):
        connection = self._require_connection()
        if not connection.in_transaction:
            raise BadUsage(u"There is no open transaction to commit")
        self._call(connection.commit)

    def rollback(self):
        connection = self._require_connection()
        if not connection.in_transaction:
            raise BadUsage(u"There is no open transaction to rollback")
        self._call(connection.rollback)

    def set_param(self, name, expression):
        """ Evaluate `expression` on the server and store the result
        as the parameter `name`.
        """
        connection = self._require_connection()
        result = self._call(connection.run, u"RETURN %s AS value" % expression,
                            self.parameters, self.database)
        value = result.records[0][0]
        self.parameters[name] = value
        return value

    def history_entries(self):
        """ Return the command history, oldest first.
        """
        return list(reversed(list(self.history.load_history_strings())))

    # Scripts

    def source(self, file_name):
        """ Execute all statements in a file.

        :returns: :const:`True` if every statement succeeded
        """
        return self.run_script(file_name, read_source(file_name)) == 0

    def run_script(self, name, lines, fail_fast=False):
        """ Execute each statement in `lines` in order. Failures are
        reported through the error logger and execution continues,
        unless `fail_fast` is set.

        Scripts started from within a running script are pushed onto
        the frame stack and run to completion before the remainder of
        the outer script.

        :returns: number of statements that failed
        :raises ExitRequested: if a script executes ``:exit``
        """
        frame = SourceFrame(name, lines)
        if self._sources:
            if len(self._sources) >= self.max_source_depth:
                raise BadUsage(u"Too many nested scripts (the limit is %d)" % self.max_source_depth)
            self._sources.append(frame)
            return 0
        self._sources.append(frame)
        failures = 0
        try:
            while self._sources:
                statement = self._sources[-1].next_statement()
                if statement is None:
                    self._sources.pop()
                    continue
                outcome = self.dispatch(statement)
                if outcome.exited:
                    raise ExitRequested(outcome.exit_status, failures)
                if outcome.failed:
                    failures += 1
                    if outcome.error is not None:
                        self.error_logger.print_error(outcome.error)
                    if fail_fast:
                        break
        finally:
            del self._sources[:]
        return failures
