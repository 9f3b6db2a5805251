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


from io import StringIO

from pytest import fixture, raises

from neoshell import auth as auth_module
from neoshell.auth import StreamPrompter, connect_maybe_interactively, get_prompter, isatty
from neoshell.config import ConnectionConfig
from neoshell.errors import CredentialsRequired, PasswordChangeRequired, ResourceUnavailable, Unreachable


@fixture
def terminal():
    return StringIO()


@fixture
def login(make_shell, terminal):

    def connect(typed, username="", password="", allow_prompt=True, output_interactive=True):
        prompter = StreamPrompter(StringIO(typed), terminal, interactive=output_interactive)
        shell = make_shell(ConnectionConfig(username=username, password=password), prompter=prompter)
        connect_maybe_interactively(shell, shell.config, allow_prompt=allow_prompt,
                                    output_interactive=output_interactive)
        return shell

    return connect


def test_prompts_for_username_and_password(login, terminal):
    shell = login("neo4j\nneo\n")
    assert shell.is_connected()
    assert terminal.getvalue() == "username: neo4j\npassword: ***\n"
    assert shell.config.auth == ("neo4j", "neo")


def test_prompts_for_password_only_when_username_given(login, terminal):
    shell = login("neo\n", username="neo4j")
    assert shell.is_connected()
    assert terminal.getvalue() == "password: ***\n"


def test_nothing_is_written_when_output_is_redirected(login, terminal):
    shell = login("neo4j\nneo\n", output_interactive=False)
    assert shell.is_connected()
    assert terminal.getvalue() == ""


def test_no_prompt_when_credentials_given(login, terminal):
    shell = login("", username="neo4j", password="neo")
    assert shell.is_connected()
    assert terminal.getvalue() == ""


def test_wrong_credentials_given_are_not_retried(login, terminal):
    with raises(CredentialsRequired):
        _ = login("neo4j\nneo\n", username="neo4j", password="wrong")
    assert terminal.getvalue() == ""


def test_wrong_credentials_typed_are_not_retried(login, terminal, server):
    with raises(CredentialsRequired):
        _ = login("neo4j\nwrong\nneo4j\nneo\n")
    assert terminal.getvalue() == "username: neo4j\npassword: *****\n"
    assert server.open_connections == []


def test_no_prompt_when_prompting_not_allowed(login, terminal):
    with raises(CredentialsRequired):
        _ = login("neo4j\nneo\n", allow_prompt=False)
    assert terminal.getvalue() == ""


def test_end_of_input_while_prompting(login):
    with raises(CredentialsRequired):
        _ = login("")


def test_empty_username_is_prompted_again(login, terminal):
    shell = login("\nneo4j\nneo\n")
    assert shell.is_connected()
    assert terminal.getvalue() == "username: \nusername: neo4j\npassword: ***\n"


def test_password_change(login, terminal, server):
    server.add_user("bob", "secret", expired=True)
    shell = login("newpass\n", username="bob", password="secret")
    assert shell.is_connected()
    assert terminal.getvalue() == "Password change required\nnew password: *******\n"
    assert server.users["bob"] == "newpass"
    assert shell.config.password == "newpass"


def test_password_change_after_prompting_for_credentials(login, terminal, server):
    server.expired.add("neo4j")
    shell = login("neo4j\nneo\nchanged\n")
    assert shell.is_connected()
    assert terminal.getvalue() == ("username: neo4j\npassword: ***\n"
                                   "Password change required\nnew password: *******\n")
    assert server.users["neo4j"] == "changed"


def test_password_change_with_redirected_output(login, terminal, server):
    server.add_user("bob", "secret", expired=True)
    shell = login("newpass\n", username="bob", password="secret", output_interactive=False)
    assert shell.is_connected()
    assert terminal.getvalue() == ""


def test_password_change_not_allowed(login, server):
    server.add_user("bob", "secret", expired=True)
    with raises(PasswordChangeRequired):
        _ = login("newpass\n", username="bob", password="secret", allow_prompt=False)
    assert server.users["bob"] == "secret"


def test_unreachable_server_is_not_retried(login, terminal, server):
    server.reachable = False
    with raises(Unreachable):
        _ = login("neo4j\nneo\n")
    assert terminal.getvalue() == ""


def test_unavailable_database_is_not_retried(login, terminal, server):
    server.stop("neo4j")
    with raises(ResourceUnavailable) as e:
        _ = login("", username="neo4j", password="neo")
    assert e.value.message == "Database 'neo4j' is unavailable."
    assert terminal.getvalue() == ""


def test_stream_prompter_masks_input():
    out = StringIO()
    prompter = StreamPrompter(StringIO("secret\n"), out, interactive=True)
    assert prompter.prompt("password", mask="*") == "secret"
    assert out.getvalue() == "password: ******\n"


class TerminalInput(StringIO):

    def isatty(self):
        return True


def test_stream_prompter_reads_masked_input_from_terminal_without_echo(monkeypatch):
    calls = []

    def fake_getpass(prompt):
        calls.append(prompt)
        return "secret"

    monkeypatch.setattr(auth_module, "getpass", fake_getpass)
    out = StringIO()
    prompter = StreamPrompter(TerminalInput("typed\n"), out, interactive=False)
    assert prompter.prompt("password", mask="*") == "secret"
    assert calls == ["password: "]
    assert out.getvalue() == ""
    assert prompter.prompt("username") == "typed"


def test_stream_prompter_echoes_input():
    out = StringIO()
    prompter = StreamPrompter(StringIO("alice\r\n"), out, interactive=True)
    assert prompter.prompt("username") == "alice"
    assert out.getvalue() == "username: alice\n"


def test_stream_prompter_at_end_of_input():
    prompter = StreamPrompter(StringIO(""), StringIO(), interactive=True)
    with raises(EOFError):
        _ = prompter.prompt("username")


def test_stream_prompter_message():
    out = StringIO()
    prompter = StreamPrompter(StringIO(), out, interactive=False)
    prompter.message("hidden")
    prompter.message("shown", echo=True)
    assert out.getvalue() == "shown\n"


def test_get_prompter_for_streams():
    prompter = get_prompter(StringIO(), StringIO())
    assert isinstance(prompter, StreamPrompter)
    assert not prompter.interactive


def test_isatty_on_object_without_isatty():
    assert not isatty(object())
