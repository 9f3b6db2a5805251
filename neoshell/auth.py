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


from getpass import getpass
from logging import getLogger
from sys import stdin, stdout

from prompt_toolkit import prompt

from neoshell.errors import CredentialsRequired, PasswordChangeRequired


log = getLogger(__name__)


def isatty(stream):
    try:
        return stream.isatty()
    except (AttributeError, ValueError):
        return False


class StreamPrompter(object):
    """ Line-based prompter reading from an arbitrary input stream.

    Prompt labels and echoed values are only written to `output` when
    `interactive` is true, so that nothing is ever written to output
    that has been redirected away from a terminal. Masked values are
    echoed as one ``*`` per character, unless `input` is a terminal,
    in which case they are read with echo turned off.
    """

    def __init__(self, input=None, output=None, interactive=None):
        self.input = input or stdin
        self.output = output or stdout
        self.interactive = isatty(self.output) if interactive is None else interactive

    def prompt(self, label, mask=None, echo=None):
        if echo is None:
            echo = self.interactive
        if mask and isatty(self.input):
            return getpass(u"%s: " % label)
        if echo:
            self.output.write(u"%s: " % label)
            self.output.flush()
        line = self.input.readline()
        if not line:
            raise EOFError("No input available for %s" % label)
        value = line.rstrip(u"\r\n")
        if echo:
            self.output.write((mask * len(value) if mask else value) + u"\n")
            self.output.flush()
        return value

    def message(self, text, echo=None):
        if echo is None:
            echo = self.interactive
        if echo:
            self.output.write(text + u"\n")
            self.output.flush()


class TerminalPrompter(StreamPrompter):
    """ Prompter for a real terminal, where the terminal itself takes
    care of echoing and masking.
    """

    def __init__(self):
        super(TerminalPrompter, self).__init__(stdin, stdout, interactive=True)

    def prompt(self, label, mask=None, echo=None):
        return prompt(u"%s: " % label, is_password=bool(mask))


def get_prompter(input=None, output=None):
    input = input or stdin
    output = output or stdout
    if isatty(input) and isatty(output):
        return TerminalPrompter()
    return StreamPrompter(input, output)


class Authenticator(object):
    """ Drives the login flow for a shell: connects, prompts for any
    missing credentials and retries, and walks the user through a
    forced password change when the server requires one.

    Retries only ever follow fresh input from the user; connection
    failures that are not about credentials are raised straight away.
    """

    def __init__(self, prompter=None):
        self.prompter = prompter or get_prompter()

    def connect(self, shell, config, allow_prompt=True, output_interactive=None):
        """ Connect `shell` using `config`, prompting for credentials
        if necessary and allowed.

        :param shell: the :class:`.CypherShell` to connect
        :param config: the :class:`.ConnectionConfig` to use and update
        :param allow_prompt: whether credentials may be read from input
        :param output_interactive: whether prompt text may be written
            to output; defaults to the prompter's own setting
        :raises AuthError: if no connection could be established
        """
        if output_interactive is None:
            output_interactive = self.prompter.interactive
        did_prompt = False
        changed_password = False
        if allow_prompt and config.username and not config.password:
            self._prompt_for_credentials(config, output_interactive)
            did_prompt = True
        while True:
            try:
                shell.connect(config)
            except CredentialsRequired:
                if did_prompt or not allow_prompt or (config.username and config.password):
                    raise
                log.debug("Authentication failed; prompting for credentials")
                self._prompt_for_credentials(config, output_interactive)
                did_prompt = True
            except PasswordChangeRequired:
                if not allow_prompt or changed_password:
                    raise
                log.debug("Password change required for user %r", config.username)
                self._prompt_for_new_password(config, output_interactive)
                shell.change_password(config)
                did_prompt = changed_password = True
            else:
                return

    def _read(self, label, mask, output_interactive, non_empty=False):
        while True:
            try:
                value = self.prompter.prompt(label, mask=mask, echo=output_interactive)
            except EOFError as error:
                raise CredentialsRequired("No %s could be read from input" % label, cause=error)
            if value or not non_empty:
                return value

    def _prompt_for_credentials(self, config, output_interactive):
        username, password = config.username, config.password
        if not username:
            username = self._read(u"username", None, output_interactive, non_empty=output_interactive)
        if not password:
            password = self._read(u"password", u"*", output_interactive)
        config.set_credentials(username, password)

    def _prompt_for_new_password(self, config, output_interactive):
        self.prompter.message(u"Password change required", echo=output_interactive)
        config.new_password = self._read(u"new password", u"*", output_interactive,
                                         non_empty=output_interactive)


def connect_maybe_interactively(shell, config, allow_prompt=True, output_interactive=None,
                                prompter=None):
    """ Convenience wrapper around :meth:`.Authenticator.connect`.
    """
    authenticator = Authenticator(prompter or shell.prompter)
    authenticator.connect(shell, config, allow_prompt, output_interactive)
