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

import click

from neoshell.encoding import DOUBLE_QUOTE, cypher_repr, cypher_str
from neoshell.errors import ShellError


log = getLogger(__name__)


FORMATS = ("auto", "verbose", "plain")


def write_plain(result, echo):
    """ Write a result as a header line of keys followed by one line
    of Cypher literals per record.
    """
    if not result.keys:
        return 0
    echo(u", ".join(result.keys))
    for record in result.records:
        echo(u", ".join(cypher_repr(value, quote=DOUBLE_QUOTE) for value in record))
    return len(result.records)


def write_table(result, echo, padding=1, separator=u"|", auto_align=True):
    """ Write a result as a human-readable ASCII art table, with
    numeric columns right-justified.
    """
    keys = result.keys
    if not keys:
        return 0
    space = u" " * padding
    widths = [1] * len(keys)
    numeric = [all(isinstance(record[i], (int, float)) and not isinstance(record[i], bool)
                   for record in result.records if record[i] is not None)
               for i, _ in enumerate(keys)]

    def calc_widths(values, **_):
        strings = [cypher_str(value).splitlines(False) for value in values]
        for i, s in enumerate(strings):
            w = max(map(len, s)) if s else 0
            if w > widths[i]:
                widths[i] = w

    def write_line(values, underline=u"", header=False):
        strings = [cypher_str(value).splitlines(False) for value in values]
        height = max(map(len, strings)) if strings else 1
        for y in range(height):
            line_text = u""
            underline_text = u""
            for x, _ in enumerate(values):
                try:
                    text = strings[x][y]
                except IndexError:
                    text = u""
                if auto_align and numeric[x] and not header:
                    text = space + text.rjust(widths[x]) + space
                else:
                    text = space + text.ljust(widths[x]) + space
                u_text = underline * len(text)
                if x > 0:
                    text = separator + text
                    u_text = separator + u_text
                line_text += text
                underline_text += u_text
            echo(line_text.rstrip())
            if underline:
                echo(underline_text)

    for record in [keys] + result.records:
        calc_widths(record)
    write_line(keys, underline=u"-", header=True)
    for record in result.records:
        write_line(record)
    return len(result.records)


def summarise(result):
    """ Return a one-line summary of a result for display after it.
    """
    if result.keys:
        count = len(result.records)
        text = u"{} record{}".format(count, u"" if count == 1 else u"s")
    else:
        text = u", ".join(u"{}: {}".format(key.replace(u"_", u" "), value)
                          for key, value in sorted(result.counters.items())) or u"0 records"
    if result.available_after is not None:
        text += u" available after {} ms".format(result.available_after)
    return text


class LinePrinter(object):
    """ Sink for everything the shell writes to standard output.

    :param format: one of ``'verbose'`` or ``'plain'``
    :param file: file-like object to write to (default: stdout)
    """

    def __init__(self, format="plain", file=None):
        if format not in ("verbose", "plain"):
            raise ValueError("Unknown output format %r" % format)
        self.format = format
        self.file = file

    def print_line(self, text=u""):
        click.echo(text, file=self.file)

    def print_result(self, result):
        if self.format == "verbose":
            count = write_table(result, self.print_line)
            click.secho(u"\n(%s)" % summarise(result), err=True, fg="cyan", bold=True)
        else:
            count = write_plain(result, self.print_line)
        return count


class ErrorLogger(object):
    """ Sink for errors reported by the shell.
    """

    colour = "red"

    def print_error(self, error):
        if isinstance(error, ShellError):
            text = error.message
        else:
            text = u"{}: {}".format(error.__class__.__name__, error)
        click.secho(text, err=True, fg=self.colour)
        log.debug("Error detail", exc_info=(type(error), error, error.__traceback__))

    def print_info(self, text):
        click.secho(text, err=True)
