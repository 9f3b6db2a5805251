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


from collections import OrderedDict
from re import compile as re_compile

from neoshell.encoding import cypher_repr
from neoshell.errors import BadUsage, ExitRequested, Outcome, ShellError, UnknownCommand


PARAM = re_compile(r"^(`(?:[^`]|``)+`|[A-Za-z_]\w*)\s*(?:=>|:)\s*(.+)$")


class Command(object):
    """ Base class for all shell commands.

    Subclasses set the class attributes below and implement
    :meth:`.execute`. Argument counts are checked against
    :attr:`min_args` and :attr:`max_args` (:const:`None` for no limit)
    before :meth:`.execute` is called.
    """

    name = None
    aliases = ()
    usage = u""
    description = u""
    help = u""
    min_args = 0
    max_args = 0

    def __repr__(self):
        return "<%s %s>" % (self.__class__.__name__, self.name)

    @property
    def names(self):
        return (self.name,) + tuple(self.aliases)

    def usage_text(self):
        return u" ".join(filter(None, [self.name, self.usage]))

    def parse(self, statement):
        return statement.args

    def check_arity(self, args):
        if self.max_args is not None and len(args) > self.max_args:
            raise BadUsage(u"Too many arguments. Usage: %s" % self.usage_text())
        if len(args) < self.min_args:
            raise BadUsage(u"Too few arguments. Usage: %s" % self.usage_text())

    def execute(self, shell, args):
        """ Run the command against `shell`. May return an
        :class:`.Outcome`; returning :const:`None` means success.
        """
        raise NotImplementedError


class HelpCommand(Command):

    name = u":help"
    aliases = (u":man",)
    usage = u"[command]"
    description = u"Show this help message"
    help = u"Show the list of available commands or help for a specific command."
    max_args = 1

    def execute(self, shell, args):
        printer = shell.printer
        dispatcher = shell.dispatcher
        if args:
            name = args[0] if args[0].startswith(u":") else u":" + args[0]
            command = dispatcher.get(name)
            if command is None:
                raise UnknownCommand(u"No such command: %s" % name)
            printer.print_line(u"")
            printer.print_line(u"usage: %s" % command.usage_text())
            printer.print_line(u"")
            printer.print_line(u"%s" % command.help)
            printer.print_line(u"")
            return
        printer.print_line(u"")
        printer.print_line(u"Available commands:")
        width = max(len(command.name) for command in dispatcher.commands())
        for command in dispatcher.commands():
            printer.print_line(u"  %s  %s" % (command.name.ljust(width), command.description))
        printer.print_line(u"")
        printer.print_line(u"For help on a specific command type:")
        printer.print_line(u"    :help command")
        printer.print_line(u"")


class ExitCommand(Command):

    name = u":exit"
    aliases = (u":quit",)
    description = u"Exit the shell"
    help = u"Exit the shell. Corresponds to entering CTRL-D."

    def execute(self, shell, args):
        raise ExitRequested(0)


class UseCommand(Command):

    name = u":use"
    usage = u"[database]"
    description = u"Set the active database"
    help = (u"Set the active database that transactions are executed on. "
            u"Without an argument, switch back to the server default database.")
    max_args = 1

    def execute(self, shell, args):
        shell.use(args[0] if args else u"")


class SourceCommand(Command):

    name = u":source"
    usage = u"<filename>"
    description = u"Execute Cypher statements from a file"
    help = (u"Executes Cypher statements from a file. Each failing statement is "
            u"reported and execution continues with the next one.")
    min_args = 1
    max_args = 1

    def execute(self, shell, args):
        if not shell.source(args[0]):
            return Outcome.failure()


class HistoryCommand(Command):

    name = u":history"
    description = u"Print a list of the last commands executed"
    help = u"Print a list of the last commands executed, oldest first."

    def execute(self, shell, args):
        for number, entry in enumerate(shell.history_entries(), start=1):
            lines = entry.splitlines() or [u""]
            shell.printer.print_line(u"%3d  %s" % (number, lines[0]))
            for line in lines[1:]:
                shell.printer.print_line(u"     %s" % line)


class BeginCommand(Command):

    name = u":begin"
    description = u"Open a transaction"
    help = (u"Start a transaction which will remain open until :commit or :rollback "
            u"is called.")

    def execute(self, shell, args):
        shell.begin()


class CommitCommand(Command):

    name = u":commit"
    description = u"Commit the currently open transaction"
    help = u"Commit and close the currently open transaction."

    def execute(self, shell, args):
        shell.commit()


class RollbackCommand(Command):

    name = u":rollback"
    description = u"Rollback the currently open transaction"
    help = u"Roll back and close the currently open transaction."

    def execute(self, shell, args):
        shell.rollback()


class ParamCommand(Command):

    name = u":param"
    usage = u"name => value"
    description = u"Set the value of a query parameter"
    help = (u"Set the specified query parameter to the value given. The value is "
            u"evaluated as a Cypher expression on the server, so `:param n => 1 + 2` "
            u"sets $n to 3.")
    min_args = 2
    max_args = 2

    def parse(self, statement):
        if not statement.argument_text:
            return []
        matched = PARAM.match(statement.argument_text)
        if not matched:
            raise BadUsage(u"Incorrect usage. Usage: %s" % self.usage_text())
        return [matched.group(1), matched.group(2).strip()]

    def execute(self, shell, args):
        name, expression = args
        if name.startswith(u"`"):
            name = name[1:-1].replace(u"``", u"`")
        shell.set_param(name, expression)


class ParamsCommand(Command):

    name = u":params"
    usage = u"[name | clear]"
    description = u"Print all currently set query parameters and their values"
    help = (u"Print a table of all currently set query parameters, or the value of a "
            u"single parameter. Use `:params clear` to remove all parameters.")
    max_args = 1

    def execute(self, shell, args):
        if args and args[0] == u"clear":
            shell.parameters.clear()
            return
        if args:
            name = args[0]
            if name not in shell.parameters:
                raise BadUsage(u"Unknown parameter: %s" % name)
            names = [name]
        else:
            names = sorted(shell.parameters)
        for name in names:
            shell.printer.print_line(u":param %s => %s" % (name, cypher_repr(shell.parameters[name])))


class ConnectCommand(Command):

    name = u":connect"
    description = u"Connect to the database"
    help = u"Reconnect to the database using the current connection settings."

    def execute(self, shell, args):
        if shell.is_connected():
            raise BadUsage(u"Already connected")
        shell.connect()


class DisconnectCommand(Command):

    name = u":disconnect"
    description = u"Disconnect from the database"
    help = u"Close the connection to the database, remaining in the shell."

    def execute(self, shell, args):
        if not shell.is_connected():
            raise BadUsage(u"Not connected")
        shell.disconnect()


def default_commands():
    return [
        BeginCommand(),
        CommitCommand(),
        ConnectCommand(),
        DisconnectCommand(),
        ExitCommand(),
        HelpCommand(),
        HistoryCommand(),
        ParamCommand(),
        ParamsCommand(),
        RollbackCommand(),
        SourceCommand(),
        UseCommand(),
    ]


class CommandDispatcher(object):
    """ Routes statements either to a registered command or, for
    Cypher, to the shell for remote execution.
    """

    def __init__(self, commands=None):
        self._commands = OrderedDict()
        self._registry = {}
        for command in default_commands() if commands is None else commands:
            self.register(command)

    def register(self, command):
        self._commands[command.name] = command
        for name in command.names:
            self._registry[name] = command

    def get(self, name):
        return self._registry.get(name)

    def commands(self):
        return list(self._commands.values())

    def dispatch(self, statement, shell):
        """ Execute a single statement.

        :returns: :class:`.Outcome` describing success, failure or a
            request to exit
        """
        try:
            if statement.is_command:
                outcome = self.run_command(statement, shell)
            else:
                shell.run_cypher(statement.text)
                outcome = None
        except ExitRequested as request:
            return Outcome.exit(request.status)
        except ShellError as error:
            return Outcome.failure(error)
        return outcome or Outcome.success()

    def run_command(self, statement, shell):
        command = self.get(statement.name)
        if command is None:
            raise UnknownCommand(u"Could not find command %s, use :help to see "
                                 u"available commands" % statement.name)
        args = command.parse(statement)
        command.check_arity(args)
        return command.execute(shell, args)
