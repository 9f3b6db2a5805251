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

from neoshell.driver import BoltDriver, ConnectionUnavailable, Failure
from neoshell.errors import (ClientError, CredentialsRequired, PasswordChangeRequired,
                             ResourceUnavailable, ShellError, Unreachable)


log = getLogger(__name__)


UNAUTHORIZED = "Neo.ClientError.Security.Unauthorized"
CREDENTIALS_EXPIRED = "Neo.ClientError.Security.CredentialsExpired"


def classify_connection_failure(failure):
    """ Map a :class:`.Failure` raised while connecting onto the
    corresponding :class:`.AuthError` (or :class:`.ClientError` for
    anything unrelated to authentication or availability).
    """
    if failure.code == UNAUTHORIZED:
        return CredentialsRequired(failure.message, cause=failure)
    elif failure.code == CREDENTIALS_EXPIRED:
        return PasswordChangeRequired(failure.message, cause=failure)
    elif failure.classification == "TransientError":
        return ResourceUnavailable(failure.message, cause=failure)
    else:
        return ClientError(failure.message, failure.code, cause=failure)


class Connector(object):
    """ Opens and closes connections on behalf of a shell, using a
    snapshot of its :class:`.ConnectionConfig`.

    :param driver: remote driver collaborator; defaults to a
        :class:`.BoltDriver`
    """

    def __init__(self, driver=None):
        self.driver = driver or BoltDriver()

    def connect(self, config, database=None):
        """ Open and verify a connection to `database` (or
        ``config.database`` if not given).
        """
        if database is None:
            database = config.database
        log.debug("Connecting to %s (database %r)", config.uri, database or "<default>")
        try:
            connection = self.driver.open(config)
        except ConnectionUnavailable as error:
            raise Unreachable(str(error), cause=error)
        except Failure as failure:
            raise classify_connection_failure(failure)
        try:
            connection.verify(database)
        except ConnectionUnavailable as error:
            self.disconnect(connection)
            raise Unreachable(str(error), cause=error)
        except Failure as failure:
            self.disconnect(connection)
            raise classify_connection_failure(failure)
        log.info("Connected to %s (server version %s)", config.uri, connection.server_version)
        return connection

    def disconnect(self, connection):
        try:
            connection.close()
        except (ConnectionUnavailable, Failure) as error:
            log.debug("Ignoring error while closing connection: %s", error)

    def change_password(self, config):
        """ Replace the password of ``config.username`` with
        ``config.new_password``, then promote the new password to be
        the active one. The pending new password is discarded if the
        change fails.
        """
        log.debug("Changing password for user %r", config.username)
        try:
            self._change_password(config)
        except ShellError:
            config.new_password = None
            raise
        config.apply_new_password()

    def _change_password(self, config):
        try:
            connection = self.driver.open(config)
        except ConnectionUnavailable as error:
            raise Unreachable(str(error), cause=error)
        try:
            connection.change_password(config.password, config.new_password)
        except ConnectionUnavailable as error:
            raise Unreachable(str(error), cause=error)
        except Failure as failure:
            raise classify_connection_failure(failure)
        finally:
            self.disconnect(connection)
