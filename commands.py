#!/usr/bin/env python3
# commands.py - builtins for the procengine shell

import os
import sys

from envfile import read_env_file
from external_runner import (
    Runner, RunnerError, BinaryValidationError,
    resolve_executable, NOT_FOUND, NOT_EXEC,
)


class Session:
    """Per-shell state shared by the builtins."""

    def __init__(self, env_file=""):
        self.env_file = env_file
        self.last = None        # last Runner built by `run`
        self.status = 0         # what $? would be

# session store (replaced by Repl / tests)
SESSION = Session()
def set_session(s):
    global SESSION
    SESSION = s


class ExitShell(Exception):
    pass

# -----------------------
# Simple helpers
# -----------------------
def _printable(text):
    # captured text keeps undecodable bytes as surrogates; a terminal cannot print those
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")

def _write_captured(runner):
    if runner.stdout:
        sys.stdout.write(_printable(runner.stdout))
        sys.stdout.flush()
    if runner.stderr:
        sys.stderr.write(_printable(runner.stderr))
        sys.stderr.flush()

def _status_for(err):
    if isinstance(err, BinaryValidationError) and isinstance(err.__cause__, FileNotFoundError):
        return NOT_FOUND
    return NOT_EXEC

def execute(runner):
    """Run once, echo captured output, return the shell status."""
    try:
        code = runner.run()
    except RunnerError as e:
        print(f"procengine: {e}", file=sys.stderr)
        return _status_for(e)
    _write_captured(runner)
    return code

def _need_last(name):
    if SESSION.last is None:
        print(f"{name}: nothing has been run yet")
        return None
    return SESSION.last

# -----------------------
# Builtin commands
# Each function accepts argparse-style 'args' and returns a status
# -----------------------
def run_binary(args):
    path = resolve_executable(args.path) or args.path
    runner = Runner(path, SESSION.env_file, args.args)
    SESSION.last = runner
    return execute(runner)

def rerun(args):
    runner = _need_last("rerun")
    if runner is None:
        return 1
    return execute(runner)

def env_file(args):
    if args.clear:
        SESSION.env_file = ""
        return 0
    if args.path is None:
        print(SESSION.env_file or "(none)")
        return 0
    # checked when the next run happens, same as the runner does
    SESSION.env_file = os.path.abspath(args.path)
    return 0

def env_check(args):
    path = args.path or SESSION.env_file
    if not path:
        print("envcheck: no environment file set")
        return 1
    try:
        lines = read_env_file(path)
    except OSError as e:
        print(f"envcheck: {path}: {e}", file=sys.stderr)
        return 1
    for line in lines:
        print(line)
    return 0

def show_stdout(args):
    runner = _need_last("stdout")
    if runner is None:
        return 1
    print(_printable(runner.stdout or ""), end="")
    return 0

def show_stderr(args):
    runner = _need_last("stderr")
    if runner is None:
        return 1
    print(_printable(runner.stderr or ""), end="")
    return 0

def show_status(args):
    print(SESSION.status)
    return 0

def show_runner(args):
    runner = _need_last("show")
    if runner is None:
        return 1
    print(f"binary:   {runner.binary_path}")
    print(f"envfile:  {runner.env_file_path or '(none)'}")
    print(f"args:     {' '.join(runner.args)}")
    print(f"exit:     {runner.exit_code}")
    return 0

def exit_shell(args):
    raise ExitShell()
