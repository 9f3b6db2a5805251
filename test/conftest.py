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


""" Scripted stand-ins for the remote driver, used throughout the
unit tests in place of a real Neo4j server.
"""


from ast import literal_eval
from io import StringIO
from re import compile as re_compile

from pytest import fixture

from neoshell import config as config_module
from neoshell.auth import StreamPrompter
from neoshell.config import ConnectionConfig
from neoshell.connector import CREDENTIALS_EXPIRED, UNAUTHORIZED, Connector
from neoshell.driver import CHANGE_PASSWORD_QUERY, ConnectionUnavailable, Failure, Result
from neoshell.printing import LinePrinter
from neoshell.shell import DATABASE_UNAVAILABLE, CypherShell


RETURN_AS = re_compile(r"^RETURN\s+(.+?)\s+AS\s+(\w+)$")
DATABASE_ADMIN = re_compile(r"^(START|STOP)\s+DATABASE\s+(\w+)$")


class FakeServer(object):

    def __init__(self, users=None, version="4.2.0"):
        self.users = dict({"neo4j": "neo"} if users is None else users)
        self.expired = set()
        self.databases = {"neo4j": True, "system": True}
        self.default_database = "neo4j"
        self.version = version
        self.reachable = True
        self.responses = {}
        self.executed = []
        self.connections = []

    def add_user(self, name, password, expired=False):
        self.users[name] = password
        if expired:
            self.expired.add(name)

    def stop(self, database):
        self.databases[database] = False

    def start(self, database):
        self.databases[database] = True

    def respond(self, statement, keys, records):
        self.responses[statement] = (keys, records)

    def fail(self, statement, message, code):
        self.responses[statement] = Failure(message, code)

    @property
    def open_connections(self):
        return [connection for connection in self.connections if not connection.closed]


class FakeDriver(object):

    def __init__(self, server=None):
        self.server = server or FakeServer()

    def open(self, config):
        if not self.server.reachable:
            raise ConnectionUnavailable("Unable to connect to %s, ensure the database is running "
                                        "and that there is a working network connection "
                                        "to it" % config.address)
        connection = FakeConnection(self.server, config.username, config.password)
        self.server.connections.append(connection)
        return connection


class FakeConnection(object):

    def __init__(self, server, username, password):
        self.server = server
        self.username = username
        self.password = password
        self.server_version = None
        self.closed = False
        self.tx = None

    def _authenticate(self):
        if not self.server.reachable or self.closed:
            raise ConnectionUnavailable("Connection lost")
        if not self.username or self.server.users.get(self.username) != self.password:
            raise Failure("The client is unauthorized due to authentication failure.", UNAUTHORIZED)

    def _check_expired(self):
        if self.username in self.server.expired:
            raise Failure("The credentials you provided were valid, but must be changed before "
                          "you can use this instance.", CREDENTIALS_EXPIRED)

    def _resolve(self, database):
        database = database or self.server.default_database
        if database not in self.server.databases:
            raise Failure("Database does not exist. Database name: '%s'." % database,
                          "Neo.ClientError.Database.DatabaseNotFound")
        if not self.server.databases[database]:
            raise Failure("Database '%s' is unavailable." % database, DATABASE_UNAVAILABLE)
        return database

    def verify(self, database=None):
        self._authenticate()
        self._check_expired()
        self._resolve(database)
        self.server_version = self.server.version
        return self.server_version

    def run(self, statement, parameters=None, database=None):
        tx = self.tx
        try:
            return self._run(statement, parameters, database)
        except Failure:
            if tx is not None:
                self.tx = None
            raise

    def _run(self, statement, parameters, database):
        self._authenticate()
        self._check_expired()
        if self.tx is not None:
            database = self.tx
        database = self._resolve(database)
        self.server.executed.append((statement, database, dict(parameters or {})))
        response = self.server.responses.get(statement)
        if isinstance(response, Exception):
            raise response
        if response is not None:
            keys, records = response
            return Result(keys, records)
        admin = DATABASE_ADMIN.match(statement)
        if admin:
            if admin.group(1) == "STOP":
                self.server.stop(admin.group(2))
            else:
                self.server.start(admin.group(2))
            return Result([], [], counters={"system_updates": 1})
        returned = RETURN_AS.match(statement)
        if returned:
            expression = returned.group(1)
            if expression.startswith("$"):
                value = parameters[expression[1:]]
            else:
                try:
                    value = literal_eval(expression)
                except (ValueError, SyntaxError):
                    raise Failure("Invalid input '%s'" % expression, "Neo.ClientError.Statement.SyntaxError")
            return Result([returned.group(2)], [(value,)])
        raise Failure("Invalid input '%s': expected <init> (line 1, column 1 (offset: 0))" % statement[0],
                      "Neo.ClientError.Statement.SyntaxError")

    @property
    def in_transaction(self):
        return self.tx is not None

    def begin(self, database=None):
        self._authenticate()
        self.tx = self._resolve(database)

    def commit(self):
        self.tx = None

    def rollback(self):
        self.tx = None

    def change_password(self, old_password, new_password):
        self._authenticate()
        if old_password != self.server.users[self.username]:
            raise Failure("Invalid principal or credentials.", "Neo.ClientError.General.InvalidArguments")
        self.server.users[self.username] = new_password
        self.server.expired.discard(self.username)
        self.server.executed.append((CHANGE_PASSWORD_QUERY, "system", {"o": old_password, "n": new_password}))

    def close(self):
        self.closed = True


class CapturingErrorLogger(object):

    def __init__(self):
        self.errors = []
        self.messages = []

    def print_error(self, error):
        self.errors.append(error)

    def print_info(self, text):
        self.messages.append(text)


@fixture(autouse=True)
def clean_environment(monkeypatch):
    monkeypatch.setattr(config_module, "NEO4J_ADDRESS", None)
    monkeypatch.setattr(config_module, "NEO4J_USERNAME", "")
    monkeypatch.setattr(config_module, "NEO4J_PASSWORD", "")
    monkeypatch.setattr(config_module, "NEO4J_DATABASE", "")


@fixture
def server():
    return FakeServer()


@fixture
def driver(server):
    return FakeDriver(server)


@fixture
def output():
    return StringIO()


@fixture
def error_logger():
    return CapturingErrorLogger()


@fixture
def make_shell(driver, output, error_logger):

    def make(connection_config=None, prompter=None, format="plain"):
        if connection_config is None:
            connection_config = ConnectionConfig(username="neo4j", password="neo")
        if prompter is None:
            prompter = StreamPrompter(StringIO(), StringIO(), interactive=False)
        return CypherShell(connection_config, printer=LinePrinter(format, file=output),
                           error_logger=error_logger, connector=Connector(driver),
                           prompter=prompter)

    return make


@fixture
def shell(make_shell):
    return make_shell()


@fixture
def connected_shell(shell):
    shell.connect()
    return shell


@fixture
def write_file(tmp_path):

    def write(name, text):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return write
