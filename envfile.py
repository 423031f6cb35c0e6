# envfile.py
from __future__ import annotations
import os
from typing import Iterable, Mapping


def is_env_line(line: str) -> bool:
    """True when line looks like KEY=VALUE, i.e. matches ^[^#]*=.*

    A '#' before the first '=' makes the line a comment.
    """
    for ch in line:
        if ch == "=":
            return True
        if ch == "#":
            return False
    return False


def filter_env_lines(text: str) -> list[str]:
    # only '\n' separates lines; a trailing '\r' stays part of the value
    return [line for line in text.split("\n") if is_env_line(line)]


def read_env_file(path: str) -> list[str]:
    """Read path fully and return its KEY=VALUE lines verbatim, in order.
    Raises OSError when the file cannot be read."""
    with open(path, "rb") as f:
        data = f.read()
    return filter_env_lines(os.fsdecode(data))


def build_environment(base: Mapping[str, str], lines: Iterable[str]) -> dict[str, str]:
    env = dict(base)
    for line in lines:
        key, _, value = line.partition("=")
        env[key] = value  # later entries shadow earlier ones
    return env
