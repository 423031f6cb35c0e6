#!/usr/bin/env python3
# Repl.py - procengine shell: interactive mode, script mode, one-shot exec
import glob
import logging
import os
import shlex
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory
from prompt_toolkit.completion import Completer, Completion

import argparser
import commands
from external_runner import Runner

log = logging.getLogger(__name__)

HISTORY_FILE = os.path.expanduser("~/.procengine_history")
PROMPT = "procengine> "

# Parser for builtins (used by process_line)
parser = argparser.build_parser()

# Builtins list (keep in sync with argparser)
_BUILTINS = {
    "run", "rerun", "envfile", "envcheck",
    "stdout", "stderr", "status", "show", "exit",
}


class ShellCompleter(Completer):
    def __init__(self, builtins: set):
        self.builtins = builtins

    def get_completions(self, document, complete_event):
        word_before_cursor = document.get_word_before_cursor(WORD=True)
        word_len = len(word_before_cursor)

        # first word: builtin names
        if not document.text_before_cursor.strip() or document.text_before_cursor.strip() == word_before_cursor:
            for name in sorted(self.builtins):
                if name.startswith(word_before_cursor):
                    yield Completion(name, -word_len)
            return

        # later words: file paths
        if word_before_cursor:
            for path in sorted(glob.glob(word_before_cursor + "*")):
                display = path
                if os.path.isdir(path):
                    display += os.sep
                yield Completion(display, -word_len)


# -----------------------
# Line processor
# -----------------------
def expand_vars(line: str) -> str:
    """Expand $NAME and ${NAME} everywhere except inside single quotes."""
    out, buf = [], []
    quote = None
    for ch in line:
        if quote == "'":
            out.append(ch)
            if ch == "'":
                quote = None
            continue
        if ch == "'" and quote is None:
            out.append(os.path.expandvars("".join(buf)))
            buf = []
            out.append(ch)
            quote = ch
            continue
        if ch == '"':
            quote = None if quote == '"' else '"'
        buf.append(ch)
    out.append(os.path.expandvars("".join(buf)))
    return "".join(out)

def process_line(line: str) -> int:
    """Run one shell line and return its status. Raises commands.ExitShell on `exit`."""
    session = commands.SESSION
    if not line or not line.strip():
        return session.status

    try:
        argv = shlex.split(expand_vars(line))
    except ValueError as e:
        print(f"parse error: {e}")
        session.status = 1
        return 1

    if argv[0] not in _BUILTINS:
        print(f"Command not found: {argv[0]}")
        session.status = 127
        return 127

    try:
        args = parser.parse_args(argv)
    except argparser.BuiltinUsageError as e:
        print(e, file=sys.stderr)
        session.status = 1
        return 1
    except SystemExit:
        # `-h` on a builtin
        session.status = 1
        return 1

    rc = args.func(args)
    session.status = rc
    log.debug("%s -> %d", argv[0], rc)
    return rc


# -----------------------
# Script mode runner
# -----------------------
def run_script(path: str) -> int:
    if not os.path.exists(path):
        print(f"Script not found: {path}", file=sys.stderr)
        return 1
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            l = line.rstrip("\n")
            if not l or l.strip().startswith("#"):
                continue
            try:
                process_line(l)
            except commands.ExitShell:
                break
    return commands.SESSION.status


# -----------------------
# One-shot exec
# -----------------------
def run_once(binary: str, env_file: str, args) -> int:
    runner = Runner(binary, env_file, args)
    return commands.execute(runner)


# -----------------------
# Main loop
# -----------------------
def interactive() -> int:
    session = PromptSession(history=FileHistory(HISTORY_FILE),
                            completer=ShellCompleter(_BUILTINS))
    while True:
        try:
            line = session.prompt(PROMPT)
        except KeyboardInterrupt:
            print()
            continue
        except EOFError:
            print("\nExiting shell.")
            break
        try:
            process_line(line)
        except commands.ExitShell:
            break
    return commands.SESSION.status


def main(argv=None) -> int:
    opts = argparser.build_cli_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if opts.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    commands.set_session(commands.Session())
    if opts.mode == "exec":
        return run_once(opts.binary, opts.env_file, opts.args)
    if opts.mode == "script":
        return run_script(opts.file)
    return interactive()


if __name__ == "__main__":
    sys.exit(main())
