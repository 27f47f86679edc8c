# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Command-line flag registry.

Modules declare flags at import time; a program parses its command line
once and reads values through ``FLAGS``:

    from chaoscv.flags import FLAGS, define_int, parse_command_line_flags

    define_int("repeat", 1, "How many times to print the tensor.")

    def main(argv):
        rest = parse_command_line_flags(argv)
        for _ in range(FLAGS.repeat):
            ...

Accepted forms: ``--name=value``, ``--name value``, ``-name value`` and,
for boolean flags, a bare ``-name`` / ``--name``. Unknown flags raise
FlagError. ``--help`` prints every flag grouped by the module that defined
it and exits.
"""

import argparse
import sys
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .errors import FlagError

_TRUE = {"true", "1", "yes", "on", "y"}
_FALSE = {"false", "0", "no", "off", "n"}


def _parse_bool(text: str) -> bool:
    value = text.strip().lower()
    if value in _TRUE:
        return True
    if value in _FALSE:
        return False
    raise ValueError(f"not a boolean: {text!r}")


_CONVERTERS: dict[str, Callable[[str], Any]] = {
    "int": int,
    "float": float,
    "bool": _parse_bool,
    "string": str,
}


@dataclass
class Flag:
    """One registered flag."""

    name: str
    type: str
    default: Any
    help: str
    module: str
    value: Any = None
    is_set: bool = False

    def convert(self, text) -> Any:
        if not isinstance(text, str):
            return bool(text) if self.type == "bool" else text
        try:
            return _CONVERTERS[self.type](text)
        except ValueError:
            raise FlagError(
                f"invalid {self.type} value {text!r} for flag '{self.name}'",
                flag=self.name,
                value=text,
            ) from None


class FlagRegistry:
    """
    Registry of all defined flags.

    Thread Safety: registration and parsing are protected by a lock.
    """

    def __init__(self):
        object.__setattr__(self, "_flags", {})
        object.__setattr__(self, "_lock", threading.RLock())
        object.__setattr__(self, "usage_message", "")
        object.__setattr__(self, "rest_argv", [])

    def define(
        self,
        name: str,
        flag_type: str,
        default: Any,
        help: str,
        module: Optional[str] = None,
    ) -> Flag:
        """Register a flag; redefining an existing name replaces it."""
        if flag_type not in _CONVERTERS:
            raise FlagError(f"unsupported flag type '{flag_type}'", flag=name)
        if module is None:
            module = sys._getframe(2).f_globals.get("__name__", "?")

        flag = Flag(
            name=name,
            type=flag_type,
            default=default,
            help=help,
            module=module,
            value=default,
        )
        with self._lock:
            self._flags[name] = flag
        return flag

    def undefine(self, name: str) -> None:
        with self._lock:
            self._flags.pop(name, None)

    def get_flag(self, name: str) -> Flag:
        flag = self._flags.get(name)
        if flag is None:
            raise FlagError(f"unknown flag '{name}'", flag=name)
        return flag

    def __contains__(self, name: str) -> bool:
        return name in self._flags

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self.get_flag(name).value
        except FlagError:
            raise AttributeError(f"no flag named '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name in ("usage_message", "rest_argv"):
            object.__setattr__(self, name, value)
            return
        self.set(name, value)

    def set(self, name: str, value: Any) -> None:
        """Set a flag value, converting strings to the flag's type."""
        with self._lock:
            flag = self.get_flag(name)
            flag.value = flag.convert(value)
            flag.is_set = True

    def is_set(self, name: str) -> bool:
        """True if the flag was given on the command line or set explicitly."""
        return self.get_flag(name).is_set

    def reset(self) -> None:
        """Restore every flag to its default (for testing)."""
        with self._lock:
            for flag in self._flags.values():
                flag.value = flag.default
                flag.is_set = False
            object.__setattr__(self, "rest_argv", [])

    def _build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            add_help=False, allow_abbrev=False, exit_on_error=False
        )
        for flag in self._flags.values():
            names = [f"--{flag.name}"]
            if len(flag.name) > 1:
                names.insert(0, f"-{flag.name}")
            parser.add_argument(*names, dest=flag.name, default=argparse.SUPPRESS)
        return parser

    def _expand_bare_bool(self, arg: str) -> str:
        # A bare boolean flag never consumes the next argument.
        name = arg.lstrip("-")
        flag = self._flags.get(name)
        if flag is not None and flag.type == "bool" and arg in (f"-{name}", f"--{name}"):
            return f"--{name}=true"
        return arg

    def parse(self, argv: list[str], remove_flags: bool = True) -> list[str]:
        """
        Parse flags out of argv.

        argv[0] is the program name and is kept. When remove_flags is true
        the list is rewritten in place to hold only the program name and
        the positional arguments.

        Returns:
            The program name followed by the positional arguments.
        """
        with self._lock:
            program, args = (argv[:1], argv[1:]) if argv else ([], [])
            try:
                namespace, extras = self._build_parser().parse_known_args(
                    [self._expand_bare_bool(arg) for arg in args]
                )
            except argparse.ArgumentError as e:
                name = e.argument_name.lstrip("-").split("/")[0] if e.argument_name else None
                raise FlagError(e.message, flag=name) from None

            positional = []
            for arg in extras:
                if arg == "--":
                    continue
                if arg.startswith("-") and arg != "-" and not _is_number(arg):
                    name = arg.lstrip("-").split("=", 1)[0]
                    raise FlagError(f"unknown flag '{name}'", flag=name)
                positional.append(arg)

            for name, text in vars(namespace).items():
                self.set(name, text)

            rest = program + positional
            object.__setattr__(self, "rest_argv", rest)
            if remove_flags:
                argv[:] = rest
            return list(rest)

    def usage(self, restrict_module: Optional[str] = None) -> str:
        """Usage text: the usage message, then flags grouped by module."""
        lines = []
        if self.usage_message:
            lines.append(self.usage_message)
            lines.append("")

        by_module: dict[str, list[Flag]] = {}
        for flag in self._flags.values():
            by_module.setdefault(flag.module, []).append(flag)

        for module in sorted(by_module):
            if restrict_module and restrict_module != module:
                continue
            lines.append(f"Flags from {module}:")
            for flag in sorted(by_module[module], key=lambda f: f.name):
                lines.append(
                    f"  -{flag.name} ({flag.help}) type: {flag.type} "
                    f"default: {flag.default!r}"
                )
            lines.append("")
        return "\n".join(lines)


def _is_number(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


FLAGS = FlagRegistry()


def define_int(name: str, default: int, help: str) -> Flag:
    return FLAGS.define(name, "int", default, help)


def define_float(name: str, default: float, help: str) -> Flag:
    return FLAGS.define(name, "float", default, help)


def define_bool(name: str, default: bool, help: str) -> Flag:
    return FLAGS.define(name, "bool", default, help)


def define_string(name: str, default: str, help: str) -> Flag:
    return FLAGS.define(name, "string", default, help)


def set_usage_message(message: str) -> None:
    FLAGS.usage_message = message


def show_usage_message(restrict_module: Optional[str] = None) -> None:
    """Print the usage text to stdout."""
    print(FLAGS.usage(restrict_module))


def parse_command_line_flags(
    argv: Optional[list[str]] = None, remove_flags: bool = True
) -> list[str]:
    """
    Parse sys.argv (or argv) into FLAGS.

    Prints the usage and exits with status 0 when --help is given.
    """
    if argv is None:
        argv = sys.argv
    rest = FLAGS.parse(argv, remove_flags=remove_flags)
    if FLAGS.help:
        show_usage_message()
        sys.exit(0)
    return rest


define_bool("help", False, "Show help on all flags.")
