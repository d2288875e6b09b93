#!/usr/bin/env python3
"""Logging utilities for gitolite-to-gitlab."""

import os
import sys

import colorama

from security import SecurityValidator

# Initialize colorama for cross-platform colored output
colorama.init(autoreset=True)


class Logger:
    """Handles formatted status output with colors and credential redaction.

    Everything goes to stderr so stdout stays free for piping.
    """

    PROCESS_NAME = "gitolite-to-gitlab"

    @classmethod
    def debug(cls, *messages: str) -> None:
        cls._write(colorama.Fore.LIGHTBLACK_EX, *cls._sanitize(messages))

    @classmethod
    def info(cls, *messages: str) -> None:
        cls._write(colorama.Fore.YELLOW, *cls._sanitize(messages))

    @classmethod
    def warn(cls, *messages: str) -> None:
        cls._write(colorama.Fore.MAGENTA, "WARNING:", *cls._sanitize(messages))

    @classmethod
    def success(cls, *messages: str) -> None:
        cls._write(colorama.Fore.GREEN, *cls._sanitize(messages))

    @classmethod
    def error(cls, *messages: str) -> None:
        cls._write(colorama.Fore.RED, "ERROR:", *cls._sanitize(messages))

    @staticmethod
    def _sanitize(messages) -> list:
        return [SecurityValidator.sanitize_for_logging(str(m)) for m in messages]

    @classmethod
    def _write(cls, color: str, *messages: str) -> None:
        sys.stderr.write(cls._format_line(color, *messages) + "\n")
        sys.stderr.flush()

    @classmethod
    def _get_header(cls) -> str:
        return f"[{cls.PROCESS_NAME}:{os.getpid()}]"

    @classmethod
    def _format_line(cls, color: str, *messages: str) -> str:
        header = cls._get_header()
        message = " ".join(str(m) for m in messages)
        return f"{color}{header} {message}{colorama.Style.RESET_ALL}"
