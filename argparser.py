# argparser.py
import argparse
import commands


class BuiltinUsageError(Exception):
    pass


class _BuiltinParser(argparse.ArgumentParser):
    # a typo inside the shell must not exit the shell
    def error(self, message):
        raise BuiltinUsageError(f"{self.prog}: {message}")


def build_parser():
    parser = _BuiltinParser(prog="procengine", add_help=False)
    subs = parser.add_subparsers(dest="command", parser_class=_BuiltinParser)

    run = subs.add_parser("run")
    run.add_argument("path")
    run.add_argument("args", nargs=argparse.REMAINDER)
    run.set_defaults(func=commands.run_binary)

    subs.add_parser("rerun").set_defaults(func=commands.rerun)

    envfile = subs.add_parser("envfile")
    envfile.add_argument("path", nargs="?", default=None)
    envfile.add_argument("--clear", action="store_true")
    envfile.set_defaults(func=commands.env_file)

    envcheck = subs.add_parser("envcheck")
    envcheck.add_argument("path", nargs="?", default=None)
    envcheck.set_defaults(func=commands.env_check)

    subs.add_parser("stdout").set_defaults(func=commands.show_stdout)
    subs.add_parser("stderr").set_defaults(func=commands.show_stderr)
    subs.add_parser("status").set_defaults(func=commands.show_status)
    subs.add_parser("show").set_defaults(func=commands.show_runner)
    subs.add_parser("exit").set_defaults(func=commands.exit_shell)

    return parser


def build_cli_parser():
    parser = argparse.ArgumentParser(
        prog="procengine",
        description="Run a binary with an environment file and inspect what it printed.")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    subs = parser.add_subparsers(dest="mode")

    subs.add_parser("repl", help="interactive shell (default)")

    script = subs.add_parser("script", help="run shell builtins from a file")
    script.add_argument("file")

    exe = subs.add_parser("exec", help="run one binary and exit with its code")
    exe.add_argument("-e", "--env-file", default="",
                     help="file of KEY=VALUE lines added to the environment")
    exe.add_argument("binary")
    exe.add_argument("args", nargs=argparse.REMAINDER)

    return parser
