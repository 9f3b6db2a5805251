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


from os import getenv
from urllib.parse import urlsplit


NEO4J_ADDRESS = getenv("NEO4J_ADDRESS") or getenv("NEO4J_URI")
NEO4J_USERNAME = getenv("NEO4J_USERNAME", "")
NEO4J_PASSWORD = getenv("NEO4J_PASSWORD", "")
NEO4J_DATABASE = getenv("NEO4J_DATABASE", "")


DEFAULT_SCHEME = "neo4j"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 7687
DEFAULT_ENCRYPTION = "default"

SCHEMES = ("neo4j", "neo4j+s", "neo4j+ssc", "bolt", "bolt+s", "bolt+ssc")
SECURE_SCHEMES = ("neo4j+s", "neo4j+ssc", "bolt+s", "bolt+ssc")
ENCRYPTION_SETTINGS = ("true", "false", "default")

SYSTEM_DATABASE = "system"


class ConnectionConfig(object):
    """ Mutable connection details for a single shell session.

    A config holds everything required to connect to, and authorise
    against, a Neo4j service. Unlike most configuration objects, this
    one changes over the lifetime of a session: credentials are filled
    in as the user is prompted for them, and the database is updated
    by the ``:use`` command.

    :param scheme: URI scheme, e.g. ``'neo4j'`` or ``'bolt+s'``
    :param host: host name or IP address of the server
    :param port: port number of the server
    :param username: user as whom to authorise (empty if not yet known)
    :param password: password with which to authorise (empty if not yet known)
    :param encryption: one of ``'true'``, ``'false'`` or ``'default'``
    :param database: name of the database to use (empty for the server default)
    """

    def __init__(self, scheme=DEFAULT_SCHEME, host=DEFAULT_HOST, port=DEFAULT_PORT,
                 username="", password="", encryption=DEFAULT_ENCRYPTION, database=""):
        if scheme not in SCHEMES:
            raise ValueError("Unsupported URI scheme %r" % scheme)
        if encryption not in ENCRYPTION_SETTINGS:
            raise ValueError("Encryption must be one of %s" % ", ".join(ENCRYPTION_SETTINGS))
        if encryption == "true" and scheme in SECURE_SCHEMES:
            raise ValueError("Encryption cannot be set when using the secure scheme %r" % scheme)
        self.scheme = scheme
        self.host = host
        self.port = int(port)
        self.username = username or ""
        self.password = password or ""
        self.new_password = None
        self.encryption = encryption
        self.database = database or ""

    @classmethod
    def parse(cls, uri=None, **settings):
        """ Build a config from a URI string such as
        ``'neo4j://bob@graph.example.com:7687'``, falling back to
        environment variables and defaults for anything not supplied.

        A URI without a scheme (e.g. ``'localhost:7687'``) uses the
        default scheme. Individual `settings` override values taken
        from the URI.
        """
        uri = uri or NEO4J_ADDRESS or "%s://%s:%d" % (DEFAULT_SCHEME, DEFAULT_HOST, DEFAULT_PORT)
        if "://" not in uri:
            uri = "%s://%s" % (DEFAULT_SCHEME, uri)
        parsed = urlsplit(uri)
        values = {
            "scheme": parsed.scheme or DEFAULT_SCHEME,
            "host": parsed.hostname or DEFAULT_HOST,
            "port": parsed.port or DEFAULT_PORT,
            "username": parsed.username or NEO4J_USERNAME,
            "password": parsed.password or NEO4J_PASSWORD,
            "database": NEO4J_DATABASE,
        }
        for key, value in settings.items():
            if value is not None:
                values[key] = value
        return cls(**values)

    def __repr__(self):
        return "%s(%r, username=%r, database=%r)" % (self.__class__.__name__, self.uri,
                                                     self.username, self.database)

    @property
    def uri(self):
        """ The connection URI, excluding credentials.
        """
        return "%s://%s:%d" % (self.scheme, self.host, self.port)

    @property
    def address(self):
        return "%s:%d" % (self.host, self.port)

    @property
    def auth(self):
        """ A 2-tuple of `(username, password)`.
        """
        return self.username, self.password

    @property
    def encrypted(self):
        """ Encryption flag for the driver: :const:`True`,
        :const:`False`, or :const:`None` to leave the choice to the
        driver (always :const:`None` for secure schemes).
        """
        if self.scheme in SECURE_SCHEMES or self.encryption == "default":
            return None
        return self.encryption == "true"

    def set_credentials(self, username, password):
        self.username = username or ""
        self.password = password or ""

    def apply_new_password(self):
        """ Promote the pending new password to the active password.
        """
        if self.new_password is None:
            raise ValueError("No new password is pending")
        self.password = self.new_password
        self.new_password = None
