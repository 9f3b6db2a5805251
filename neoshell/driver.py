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


""" Thin adapter over the official Neo4j Python driver.

Everything the shell knows about the remote server passes through this
module. Driver exceptions are translated into two types only:
:class:`.Failure`, for errors reported by the server (each carrying a
Neo4j status code) and :class:`.ConnectionUnavailable`, for errors
that prevent the server from being reached at all.
"""


from logging import getLogger

from neo4j import GraphDatabase
from neo4j.exceptions import DriverError, Neo4jError, ServiceUnavailable, SessionExpired


log = getLogger(__name__)


VERSION_QUERY = "CALL dbms.components() YIELD versions RETURN versions[0] AS version"

CHANGE_PASSWORD_QUERY = "ALTER CURRENT USER SET PASSWORD FROM $o TO $n"

UNREACHABLE = ("Unable to connect to %s, ensure the database is running and that there is a "
               "working network connection to it")

TRANSACTION_FAILED = "Neo.ClientError.Transaction.TransactionFailed"

DRIVER_FAILED = "Neo.ClientError.General.DriverError"

DRIVER_ERRORS = (Neo4jError, DriverError, OSError)


class Failure(Exception):
    """ Raised when the server reports an error. The status code is
    split into its component parts; for example,
    ``Neo.ClientError.Security.Unauthorized`` has a classification of
    ``ClientError``, a category of ``Security`` and a title of
    ``Unauthorized``.
    """

    def __init__(self, message, code):
        super(Failure, self).__init__(message)
        self.code = code
        try:
            _, self.classification, self.category, self.title = self.code.split(".")
        except (AttributeError, ValueError):
            self.classification = self.category = self.title = None

    def __str__(self):
        return "[%s] %s" % (self.code, super(Failure, self).__str__())

    @property
    def message(self):
        return self.args[0]


class ConnectionUnavailable(Exception):
    """ Raised when a connection cannot be established, or is lost.
    """


class Result(object):
    """ Fully-buffered result of a single Cypher statement.
    """

    def __init__(self, keys, records, available_after=None, counters=None):
        self.keys = list(keys)
        self.records = [tuple(record) for record in records]
        self.available_after = available_after
        self.counters = dict(counters or {})

    def __repr__(self):
        return "<Result keys=%r records=%d>" % (self.keys, len(self.records))

    def __len__(self):
        return len(self.records)

    def __iter__(self):
        return iter(self.records)


def _failure(error):
    return Failure(error.message or str(error), error.code)


def _translate(error, address, code=DRIVER_FAILED):
    """ Return the :class:`.ConnectionUnavailable` or :class:`.Failure`
    that corresponds to an exception raised by the driver. Driver
    errors that carry no Neo4j status code are given `code`.
    """
    if isinstance(error, (ServiceUnavailable, SessionExpired, OSError)):
        return ConnectionUnavailable(UNREACHABLE % address)
    elif isinstance(error, Neo4jError):
        return _failure(error)
    else:
        return Failure(str(error), code)


class BoltDriver(object):
    """ Factory for :class:`.BoltConnection` objects.
    """

    def open(self, config):
        kwargs = {"auth": config.auth}
        if config.encrypted is not None:
            kwargs["encrypted"] = config.encrypted
        log.debug("Opening driver for %s as %r", config.uri, config.username)
        try:
            driver = GraphDatabase.driver(config.uri, **kwargs)
        except DRIVER_ERRORS as error:
            raise _translate(error, config.address) from error
        return BoltConnection(driver, config.address)


class BoltConnection(object):
    """ Connection to a Neo4j service, with at most one open session
    and at most one explicit transaction.

    The server rolls back an explicit transaction as soon as any
    statement within it fails, so a failed statement also ends the
    transaction here.
    """

    def __init__(self, driver, address):
        self._driver = driver
        self._address = address
        self._session = None
        self._session_database = None
        self._tx = None
        self.server_version = None

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self._address)

    def _get_session(self, database):
        if self._session is None or self._session_database != database:
            if self._session is not None:
                self._session.close()
            self._session = self._driver.session(database=database or None)
            self._session_database = database
        return self._session

    def _discard(self, tx):
        try:
            tx.close()
        except DRIVER_ERRORS as error:
            log.debug("Ignoring error while closing failed transaction: %s", error)

    def verify(self, database=None):
        """ Check that the server can be reached and that `database`
        can be queried with the current credentials, recording the
        server version along the way.
        """
        try:
            self._driver.verify_connectivity()
        except DRIVER_ERRORS as error:
            raise _translate(error, self._address) from error
        result = self.run(VERSION_QUERY, database=database)
        if result.records:
            self.server_version = result.records[0][0]
        return self.server_version

    def run(self, statement, parameters=None, database=None):
        tx = self._tx
        try:
            if tx is not None:
                cursor = tx.run(statement, parameters or {})
            else:
                cursor = self._get_session(database).run(statement, parameters or {})
            keys = cursor.keys()
            records = [record.values() for record in cursor]
            summary = cursor.consume()
        except DRIVER_ERRORS as error:
            if tx is not None:
                self._tx = None
                self._discard(tx)
                raise _translate(error, self._address, TRANSACTION_FAILED) from error
            raise _translate(error, self._address) from error
        counters = {key: value for key, value in vars(summary.counters).items()
                    if not key.startswith("_") and value}
        return Result(keys, records, available_after=summary.result_available_after,
                      counters=counters)

    @property
    def in_transaction(self):
        return self._tx is not None

    def begin(self, database=None):
        try:
            self._tx = self._get_session(database).begin_transaction()
        except DRIVER_ERRORS as error:
            raise _translate(error, self._address, TRANSACTION_FAILED) from error

    def commit(self):
        tx, self._tx = self._tx, None
        try:
            tx.commit()
        except DRIVER_ERRORS as error:
            self._discard(tx)
            raise _translate(error, self._address, TRANSACTION_FAILED) from error

    def rollback(self):
        tx, self._tx = self._tx, None
        try:
            tx.rollback()
        except DRIVER_ERRORS as error:
            self._discard(tx)
            raise _translate(error, self._address, TRANSACTION_FAILED) from error

    def change_password(self, old_password, new_password):
        self.run(CHANGE_PASSWORD_QUERY, {"o": old_password, "n": new_password}, database="system")

    def close(self):
        log.debug("Closing connection to %s", self._address)
        try:
            try:
                if self._tx is not None:
                    self._tx.close()
                if self._session is not None:
                    self._session.close()
            finally:
                self._tx = None
                self._session = None
                self._driver.close()
        except DRIVER_ERRORS as error:
            raise _translate(error, self._address) from error
