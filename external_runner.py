# external_runner.py
from __future__ import annotations
import logging
import os, shutil, signal, stat, subprocess
from typing import Optional, Sequence

from envfile import read_env_file, build_environment

log = logging.getLogger(__name__)

NOT_FOUND = 127
NOT_EXEC  = 126


class RunnerError(Exception):
    """Base class for everything Runner.run raises."""


class ValidationError(RunnerError):
    pass


class BinaryValidationError(ValidationError):
    pass


class EnvFileValidationError(ValidationError):
    pass


class EnvFileReadError(RunnerError):
    pass


class ExecutionError(RunnerError):
    """The child could not be launched, or died from a signal."""


def resolve_executable(cmd: str) -> Optional[str]:
    """Return absolute path to executable or None.
    If cmd contains '/', treat it as a direct path. Otherwise search PATH."""
    if "/" in cmd:
        return cmd if os.path.exists(cmd) else None
    return shutil.which(cmd)


class Runner:
    """Runs a binary with arguments and an optional environment file, and
    keeps its stdout, stderr and exit code.

    Lines of the environment file matching ^[^#]*=.* are added on top of
    the caller's environment. Paths are checked when run() is called, not
    at construction.
    """

    def __init__(self, binary_path: str, env_file_path: str = "",
                 args: Optional[Sequence[str]] = None):
        self._binary_path = binary_path
        # "" or a readable file
        self._env_file_path = env_file_path
        self._args = tuple(args or ())

        self._stdout: Optional[str] = None
        self._stderr: Optional[str] = None
        self._exit_code = 0

    @property
    def binary_path(self) -> str:
        return self._binary_path

    @property
    def env_file_path(self) -> str:
        return self._env_file_path

    @property
    def args(self) -> list[str]:
        return list(self._args)

    @property
    def stdout(self) -> Optional[str]:
        return self._stdout

    @property
    def stderr(self) -> Optional[str]:
        return self._stderr

    @property
    def exit_code(self) -> int:
        return self._exit_code

    def _verify(self):
        path = self._binary_path
        try:
            st = os.stat(path)
        except OSError as e:
            raise BinaryValidationError(f"error verifying binary at {path}: {e}") from e
        if not stat.S_ISREG(st.st_mode):
            raise BinaryValidationError(f"binary at {path} is not a regular file")
        if st.st_mode & 0o111 == 0:
            raise BinaryValidationError(f"binary at {path} is not executable")

        path = self._env_file_path
        if not path:
            return
        try:
            st = os.stat(path)
        except OSError as e:
            raise EnvFileValidationError(f"error verifying environment file at {path}: {e}") from e
        if not stat.S_ISREG(st.st_mode):
            raise EnvFileValidationError(f"environment file at {path} is not a regular file")
        if st.st_mode & 0o444 == 0:
            raise EnvFileValidationError(f"environment file at {path} is not readable")

    def _environment(self) -> dict[str, str]:
        lines: list[str] = []
        if self._env_file_path:
            try:
                lines = read_env_file(self._env_file_path)
            except OSError as e:
                raise EnvFileReadError(
                    f"error opening environment file at {self._env_file_path}: {e}") from e
        return build_environment(os.environ, lines)

    def run(self) -> int:
        """Validate, execute and capture. Returns the child's exit code.

        Any exit status, non-zero included, is a normal result. Raises a
        RunnerError subclass when validation fails, the environment file
        cannot be read, the launch fails or the child is killed by a signal;
        captured state is left as it was in those cases.
        """
        self._verify()
        env = self._environment()

        argv = [self._binary_path, *self._args]
        # launch the file _verify checked, never a PATH match for a bare name
        exe = self._binary_path
        if os.sep not in exe:
            exe = os.path.join(os.curdir, exe)
        log.debug("running %s with %d args", self._binary_path, len(self._args))
        try:
            cp = subprocess.run(argv, executable=exe, env=env, stdin=subprocess.DEVNULL, capture_output=True)
        except (OSError, ValueError, subprocess.SubprocessError) as e:
            raise ExecutionError(f"error when running the command: {e}") from e

        if cp.returncode < 0:
            try:
                name = signal.Signals(-cp.returncode).name
            except ValueError:
                name = str(-cp.returncode)
            raise ExecutionError(f"error when running the command: signal: {name}")

        log.debug("%s exited with %d", self._binary_path, cp.returncode)
        self._exit_code = cp.returncode
        self._stdout = cp.stdout.decode("utf-8", errors="surrogateescape")
        self._stderr = cp.stderr.decode("utf-8", errors="surrogateescape")
        return self._exit_code
