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


from re import compile as re_compile
from unicodedata import category

from neo4j.graph import Node, Path, Relationship
from neo4j.spatial import Point


NULL = u"null"
TRUE = u"true"
FALSE = u"false"

ID_START = {u"_"} | {chr(x) for x in range(0xFFFF)
                     if category(chr(x)) in ("LC", "Ll", "Lm", "Lo", "Lt", "Lu", "Nl")}
ID_CONTINUE = ID_START | {chr(x) for x in range(0xFFFF)
                          if category(chr(x)) in ("Mn", "Mc", "Nd", "Pc", "Sc")}

DOUBLE_QUOTE = u'"'
SINGLE_QUOTE = u"'"

ESCAPED_DOUBLE_QUOTE = u'\\"'
ESCAPED_SINGLE_QUOTE = u"\\'"

X_ESCAPE = re_compile(r"(\\x([0-9a-f]{2}))")
DOUBLE_QUOTED_SAFE = re_compile(r"([ -!#-\[\]-~]+)")
SINGLE_QUOTED_SAFE = re_compile(r"([ -&(-\[\]-~]+)")


class CypherEncoder(object):
    """ Renders values returned by the driver as Cypher literals.
    """

    quote = None
    sequence_separator = u", "
    key_value_separator = u": "

    def __init__(self, quote=None, sequence_separator=None, key_value_separator=None):
        if quote:
            self.quote = quote
        if sequence_separator:
            self.sequence_separator = sequence_separator
        if key_value_separator:
            self.key_value_separator = key_value_separator

    def encode_key(self, key):
        if not key:
            raise ValueError("Keys cannot be empty")
        if key[0] in ID_START and all(key[i] in ID_CONTINUE for i in range(1, len(key))):
            return key
        else:
            return u"`" + key.replace(u"`", u"``") + u"`"

    def encode_value(self, value):
        if value is None:
            return NULL
        if value is True:
            return TRUE
        if value is False:
            return FALSE
        if isinstance(value, (int, float)):
            return str(value)
        if isinstance(value, str):
            return self.encode_string(value)
        if isinstance(value, (bytes, bytearray)):
            return u"bytes[" + u", ".join(u"0x%02x" % b for b in value) + u"]"
        if isinstance(value, Node):
            return self.encode_node(value)
        if isinstance(value, Relationship):
            return self.encode_relationship(value)
        if isinstance(value, Path):
            return self.encode_path(value)
        if isinstance(value, Point):
            return self.encode_point(value)
        if isinstance(value, (list, tuple)):
            return self.encode_list(value)
        if isinstance(value, dict):
            return self.encode_map(value)
        if hasattr(value, "iso_format"):
            return value.iso_format()
        raise TypeError("Values of type %s are not supported" % value.__class__.__name__)

    def encode_string(self, value):
        quote = self.quote
        if quote is None:
            quote = DOUBLE_QUOTE if SINGLE_QUOTE in value and DOUBLE_QUOTE not in value else SINGLE_QUOTE

        if quote == SINGLE_QUOTE:
            escaped_quote = ESCAPED_SINGLE_QUOTE
            safe = SINGLE_QUOTED_SAFE
        elif quote == DOUBLE_QUOTE:
            escaped_quote = ESCAPED_DOUBLE_QUOTE
            safe = DOUBLE_QUOTED_SAFE
        else:
            raise ValueError("Unsupported quote character %r" % quote)

        if not value:
            return quote + quote

        parts = safe.split(value)
        for i in range(0, len(parts), 2):
            parts[i] = (X_ESCAPE.sub(u"\\\\u00\\2", parts[i].encode("unicode-escape").decode("utf-8")).
                        replace(quote, escaped_quote).replace(u"\\u0008", u"\\b").replace(u"\\u000c", u"\\f"))
        return quote + u"".join(parts) + quote

    def encode_list(self, values):
        return u"[" + self.sequence_separator.join(map(self.encode_value, values)) + u"]"

    def encode_map(self, values):
        return u"{" + self.sequence_separator.join(self.encode_key(key) + self.key_value_separator + self.encode_value(value)
                                                   for key, value in values.items()) + u"}"

    def encode_point(self, point):
        keys = ("x", "y", "z")[:len(point)]
        values = dict(zip(keys, point))
        values["srid"] = point.srid
        return u"point(" + self.encode_map(values) + u")"

    def encode_node(self, node):
        labels = u"".join(u":" + self.encode_key(label) for label in sorted(node.labels))
        properties = self.encode_map(dict(node)) if len(node) else u""
        return u"(" + (labels + u" " + properties).strip() + u")"

    def encode_relationship(self, relationship):
        return u"()-{}->()".format(self._encode_relationship_detail(relationship))

    def encode_path(self, path):
        last_node = path.start_node
        encoded = [self.encode_node(last_node)]
        append = encoded.append
        for relationship in path.relationships:
            if relationship.start_node == last_node:
                append(u"-")
                append(self._encode_relationship_detail(relationship))
                append(u"->")
                last_node = relationship.end_node
            else:
                append(u"<-")
                append(self._encode_relationship_detail(relationship))
                append(u"-")
                last_node = relationship.start_node
            append(self.encode_node(last_node))
        return u"".join(encoded)

    def _encode_relationship_detail(self, relationship):
        properties = self.encode_map(dict(relationship)) if len(relationship) else u""
        return u"[" + (u":" + self.encode_key(relationship.type) + u" " + properties).strip() + u"]"


def cypher_repr(value, **kwargs):
    """ Return the Cypher representation of a value.
    """
    encoder = CypherEncoder(**kwargs)
    return encoder.encode_value(value)


def cypher_str(value, **kwargs):
    """ Convert a value to a string suitable for display in a table
    cell: strings are shown raw, everything else as a Cypher literal.
    """
    if isinstance(value, str):
        return value
    else:
        return cypher_repr(value, **kwargs)
