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


import click

from neoshell.auth import connect_maybe_interactively, get_prompter, isatty
from neoshell.config import ENCRYPTION_SETTINGS, ConnectionConfig
from neoshell.diagnostics import watch
from neoshell.errors import ShellError
from neoshell.meta import __version__
from neoshell.printing import FORMATS, LinePrinter
from neoshell.runner import file_history, get_shell_runner
from neoshell.shell import CypherShell


DESCRIPTION = "A command line shell where you can execute Cypher against an instance of Neo4j."

EPILOG = """\
If statements are given as arguments, these are executed in order. If
a file is given with --file, or standard input is not a terminal, all
statements are read and executed non-interactively; each failure is
reported and execution continues, with a non-zero exit status at the
end if anything failed. Otherwise an interactive shell is started.

Cypher statements end with a semicolon. Shell commands start with a
colon and take up a single line; type :help at the prompt for a list.
"""


@click.command(help=DESCRIPTION, epilog=EPILOG)
@click.option("-a", "--address", "--uri", envvar=["NEO4J_ADDRESS", "NEO4J_URI"], default=None,
              help="Address and port to connect to [default: neo4j://localhost:7687].")
@click.option("-u", "--username", envvar="NEO4J_USERNAME", default="",
              help="Username to connect as.")
@click.option("-p", "--password", envvar="NEO4J_PASSWORD", default="",
              help="Password to connect with.")
@click.option("--encryption", type=click.Choice(ENCRYPTION_SETTINGS), default="default",
              help="Whether the connection to Neo4j should be encrypted.")
@click.option("-d", "--database", envvar="NEO4J_DATABASE", default="",
              help="Database to connect to [default: the server default database].")
@click.option("--format", "output_format", type=click.Choice(FORMATS), default="auto",
              help="Output format: 'verbose' tables, 'plain' lines, or 'auto' to choose "
                   "depending on whether the shell is interactive.")
@click.option("-f", "--file", "file_name", default=None,
              help="Execute statements from a file and exit.")
@click.option("--non-interactive", is_flag=True, default=False,
              help="Force non-interactive mode, reading statements from standard input.")
@click.option("--fail-fast", is_flag=True, default=False,
              help="Stop a non-interactive run at the first failing statement.")
@click.option("--debug", is_flag=True, default=False,
              help="Show low level shell and driver activity.")
@click.version_option(__version__, prog_name="neoshell")
@click.argument("statements", nargs=-1)
def main(statements, address, username, password, encryption, database, output_format,
         file_name, non_interactive, fail_fast, debug):
    if debug:
        watch("neoshell", "neo4j", verbosity=1)
    try:
        config = ConnectionConfig.parse(address, username=username, password=password,
                                        encryption=encryption, database=database)
    except ValueError as error:
        click.secho(str(error), err=True)
        raise SystemExit(1)
    stdin = click.get_text_stream("stdin")
    stdout = click.get_text_stream("stdout")
    input_interactive = isatty(stdin)
    output_interactive = isatty(stdout)
    interactive = (input_interactive and output_interactive and
                   not (file_name or statements or non_interactive))
    if output_format == "auto":
        output_format = "verbose" if interactive else "plain"
    shell = CypherShell(config, printer=LinePrinter(output_format),
                        prompter=get_prompter(stdin, stdout),
                        history=file_history() if interactive else None)
    try:
        connect_maybe_interactively(shell, config, allow_prompt=input_interactive,
                                    output_interactive=output_interactive)
        runner = get_shell_runner(shell, file_name=file_name, statements=statements,
                                  non_interactive=non_interactive or not interactive,
                                  fail_fast=fail_fast, input=stdin)
        status = runner.run_until_end()
    except ShellError as error:
        shell.error_logger.print_error(error)
        status = 1
    finally:
        shell.disconnect()
    raise SystemExit(status)


if __name__ == "__main__":
    main()
