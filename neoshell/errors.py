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


class ShellError(Exception):
    """ Base class for all errors reported to the shell user.

    :param message: human-readable description of the error
    :param cause: underlying exception, if any
    """

    def __init__(self, message, cause=None):
        super(ShellError, self).__init__(message)
        self.cause = cause

    @property
    def message(self):
        return self.args[0]


class AuthError(ShellError):
    """ Raised when a connection cannot be established or authorised.
    """


class CredentialsRequired(AuthError):
    """ Raised when the server rejects the supplied credentials, or
    none were supplied.
    """


class PasswordChangeRequired(AuthError):
    """ Raised when the credentials are correct but have expired, so
    that a new password must be set before the account can be used.
    """


class Unreachable(AuthError):
    """ Raised when the server cannot be reached over the network.
    """


class ResourceUnavailable(AuthError):
    """ Raised when the server is reachable but the requested
    database cannot currently be served.
    """


class StatementError(ShellError):
    """ Raised when a single statement or command fails.
    """


class UnknownCommand(StatementError):
    pass


class BadUsage(StatementError):
    pass


class FileNotFound(StatementError):
    pass


class NotConnected(StatementError):
    pass


class ServerError(StatementError):
    """ Base class for errors reported by the server while running a
    statement. The Neo4j status code is split into its component parts.
    """

    def __init__(self, message, code=None, cause=None):
        super(ServerError, self).__init__(message, cause)
        self.code = code
        try:
            _, self.classification, self.category, self.title = self.code.split(".")
        except (AttributeError, ValueError):
            self.classification = self.category = self.title = None

    def __str__(self):
        if self.category:
            return "[%s.%s] %s" % (self.category, self.title, self.message)
        return self.message


class ClientError(ServerError):
    """ The client sent a bad request; changing the request might
    yield a successful outcome.
    """


class TransientError(ServerError):
    """ The server cannot currently serve the request; retrying the
    same request might be successful.
    """


class ExitRequested(ShellError):
    """ Raised to end the shell session. When raised from a script,
    `failures` counts the statements that failed before the exit.
    """

    def __init__(self, status=0, failures=0):
        super(ExitRequested, self).__init__("Exit requested")
        self.status = status
        self.failures = failures


def classify(failure):
    """ Convert a server :class:`~neoshell.driver.Failure` into the
    corresponding :class:`.ServerError`.
    """
    if failure.classification == "TransientError":
        error_class = TransientError
    else:
        error_class = ClientError
    return error_class(failure.message, failure.code, cause=failure)


SUCCESS = "success"
FAILURE = "failure"
EXIT = "exit"


class Outcome(object):
    """ Result of dispatching a single statement.

    Failure outcomes carry the error that caused them. A failure with
    no error has already been reported by the time it is returned.
    """

    def __init__(self, status, error=None, exit_status=None):
        self.status = status
        self.error = error
        self.exit_status = exit_status

    def __repr__(self):
        if self.status == FAILURE:
            return "<Outcome %s %r>" % (self.status, self.error)
        if self.status == EXIT:
            return "<Outcome %s %r>" % (self.status, self.exit_status)
        return "<Outcome %s>" % self.status

    @classmethod
    def success(cls):
        return cls(SUCCESS)

    @classmethod
    def failure(cls, error=None):
        return cls(FAILURE, error=error)

    @classmethod
    def exit(cls, status=0):
        return cls(EXIT, exit_status=status)

    @property
    def succeeded(self):
        return self.status == SUCCESS

    @property
    def failed(self):
        return self.status == FAILURE

    @property
    def exited(self):
        return self.status == EXIT
