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


from logging import CRITICAL, DEBUG, ERROR, INFO, WARNING, Formatter, StreamHandler, getLogger
from sys import stderr

from pansi import ansi


LEVEL_COLOURS = {
    CRITICAL: "RED",
    ERROR: "red",
    WARNING: "yellow",
    INFO: "white",
    DEBUG: "cyan",
}

VERBOSITY_LEVELS = {
    1: DEBUG,
    0: INFO,
    -1: WARNING,
    -2: ERROR,
}


class ColourFormatter(Formatter):
    """ Colour formatter for pretty log output.
    """

    def format(self, record):
        s = super(ColourFormatter, self).format(record)
        colour = LEVEL_COLOURS.get(record.levelno)
        if colour is None:
            return s
        return "{}{}{}".format(ansi[colour], s, ansi["_"])


class Watcher(object):
    """ Log watcher for monitoring shell and driver activity, as
    enabled by the ``--debug`` option.
    """

    def __init__(self, *logger_names):
        super(Watcher, self).__init__()
        self.logger_names = logger_names
        self.loggers = [getLogger(name) for name in self.logger_names]
        self.formatter = ColourFormatter("%(asctime)s  %(name)-20s  %(message)s")
        self.handler = None

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()

    def start(self, verbosity=0, out=stderr):
        self.stop()
        self.handler = StreamHandler(out)
        self.handler.setFormatter(self.formatter)
        level = VERBOSITY_LEVELS.get(max(min(verbosity, 1), -3), CRITICAL)
        for logger in self.loggers:
            logger.addHandler(self.handler)
            logger.setLevel(level)

    def stop(self):
        if self.handler is not None:
            for logger in self.loggers:
                logger.removeHandler(self.handler)
            self.handler = None


def watch(*logger_names, verbosity=0, out=stderr):
    """ Start watching one or more loggers.

    :param logger_names: names of loggers to watch
    :param verbosity: 1 for debug output, 0 for info, and negative
        values for progressively quieter output
    :param out: where to send output (default stderr)
    :return: :class:`.Watcher` instance
    """
    watcher = Watcher(*logger_names)
    watcher.start(verbosity, out)
    return watcher
