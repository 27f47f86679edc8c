# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Incremental text rendering of tensors.

Rendering is a state machine over (num, channel, row, col). ``step`` is a
pure transition: it takes a cursor and returns the next cursor together
with the text fragment produced by the transition. ``TensorFormatter``
drives ``step`` lazily and yields fragments one at a time, so the full text
never has to exist in memory and no recursion over the axes is needed.

States, in emission order for one channel:

    Prologue -> ChannelOpen -> RowOpen -> Value (-> ValueSeparator -> Value)*
             -> LineSeparator -> (RowOpen ... | ChannelClose)
             -> ChannelSeparator | NumSeparator | Epilogue -> Finished

Punctuation comes from a BraceSet passed to the formatter; the state
machine itself never changes.

Example:
    t = Tensor.from_values([[1, 2, 3], [4, 5, 6]], [1, 1, 2, 3], Depth.Float32)
    format_tensor(t)                          # '[[1 2 3],[4 5 6]]'
    format_tensor(t, braces=BraceSet.MATLAB)  # '[1 2 3; 4 5 6]'
"""

from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import TYPE_CHECKING, Callable, ClassVar, Iterator, Optional, TextIO

from ..checks import check
from ..errors import ConfigurationError, FormatterStateError, UnknownDepthError
from .types import Depth, MatShape

if TYPE_CHECKING:
    from .tensor import Tensor


class FormatState(Enum):
    """States of the rendering state machine."""

    Prologue = auto()
    ChannelOpen = auto()
    RowOpen = auto()
    Value = auto()
    ValueSeparator = auto()
    LineSeparator = auto()
    ChannelClose = auto()
    ChannelSeparator = auto()
    NumSeparator = auto()
    Epilogue = auto()
    Finished = auto()


@dataclass(frozen=True)
class BraceSet:
    """
    Punctuation used by the formatter.

    Attributes:
        row_open / row_close: Around the values of one row
        row_separator: Between two rows of a channel
        channel_open / channel_close: Around the rows of one channel
        channel_separator: Between two channels of the same num
        num_separator: Between the last channel of one num and the next num
        value_separator: Between two values of a row
        line_break: Appended after row_separator
        prologue / epilogue: Default text before and after everything
    """

    name: str
    row_open: str = "["
    row_close: str = "]"
    row_separator: str = ","
    channel_open: str = "["
    channel_close: str = "]"
    channel_separator: str = ","
    num_separator: str = ","
    value_separator: str = " "
    line_break: str = ""
    prologue: str = ""
    epilogue: str = ""

    DEFAULT: ClassVar["BraceSet"]
    PYTHON: ClassVar["BraceSet"]
    MATLAB: ClassVar["BraceSet"]

    @classmethod
    def builtin(cls) -> dict[str, "BraceSet"]:
        return {b.name: b for b in (cls.DEFAULT, cls.PYTHON, cls.MATLAB)}

    @classmethod
    def named(cls, name: str) -> "BraceSet":
        """Look up a built-in brace set by name."""
        sets = cls.builtin()
        key = name.strip().lower()
        if key not in sets:
            raise ConfigurationError(
                f"unknown brace set '{name}', expected one of {sorted(sets)}",
                config_key="braces",
                config_value=name,
            )
        return sets[key]

    def with_changes(self, **changes) -> "BraceSet":
        return replace(self, **changes)


BraceSet.DEFAULT = BraceSet(name="default")

BraceSet.PYTHON = BraceSet(
    name="python",
    row_separator=",",
    line_break="\n  ",
    channel_separator=",\n ",
    num_separator=",\n\n ",
    value_separator=", ",
    prologue="[",
    epilogue="]",
)

# MATLAB rows are not bracketed; rows are separated by ';'.
BraceSet.MATLAB = BraceSet(
    name="matlab",
    row_open="",
    row_close="",
    row_separator=";",
    line_break=" ",
    channel_separator="\n",
    num_separator="\n\n",
)


# ----------------------------------------------------------------------
# Depth converters
# ----------------------------------------------------------------------

Converter = Callable[[object], str]


def _format_integer(value) -> str:
    return str(int(value))


def _format_float(value) -> str:
    return f"{float(value):g}"


_CONVERTERS: dict[Depth, Converter] = {
    Depth.UInt8: _format_integer,
    Depth.Int8: _format_integer,
    Depth.UInt16: _format_integer,
    Depth.Int16: _format_integer,
    Depth.Int32: _format_integer,
    Depth.Float32: _format_float,
    Depth.Float64: _format_float,
}


def converter_for(depth: Depth) -> Converter:
    """Select the text converter for a depth."""
    converter = _CONVERTERS.get(depth)
    check(
        converter is not None,
        f"no text converter for depth {depth!r}",
        error=UnknownDepthError,
        stacklevel=2,
    )
    return converter


# ----------------------------------------------------------------------
# Transition function
# ----------------------------------------------------------------------


@dataclass(frozen=True)
class FormatCursor:
    """Position of the formatter: current state and element indices."""

    state: FormatState = FormatState.Prologue
    num: int = 0
    channel: int = 0
    row: int = 0
    col: int = 0


@dataclass(frozen=True)
class FormatContext:
    """Everything a transition needs besides the cursor."""

    shape: MatShape
    braces: BraceSet
    read: Callable[[int, int, int, int], str]
    prologue: str
    epilogue: str


def step(cursor: FormatCursor, ctx: FormatContext) -> tuple[FormatCursor, str]:
    """
    Advance the state machine by one transition.

    Returns:
        (next cursor, fragment emitted by this transition)
    """
    state = cursor.state
    shape = ctx.shape
    braces = ctx.braces
    S = FormatState

    if state is S.Prologue:
        if shape.numel() == 0:
            return replace(cursor, state=S.Epilogue), ctx.prologue
        return FormatCursor(S.ChannelOpen, num=0, channel=0), ctx.prologue

    if state is S.ChannelOpen:
        return replace(cursor, state=S.RowOpen, row=0), braces.channel_open

    if state is S.RowOpen:
        return replace(cursor, state=S.Value, col=0), braces.row_open

    if state is S.Value:
        text = ctx.read(cursor.num, cursor.channel, cursor.row, cursor.col)
        col = cursor.col + 1
        nxt = S.LineSeparator if col == shape.width else S.ValueSeparator
        return replace(cursor, state=nxt, col=col), text

    if state is S.ValueSeparator:
        return replace(cursor, state=S.Value), braces.value_separator

    if state is S.LineSeparator:
        row = cursor.row + 1
        if row == shape.height:
            return replace(cursor, state=S.ChannelClose, row=row), braces.row_close
        text = braces.row_close + braces.row_separator + braces.line_break
        return replace(cursor, state=S.RowOpen, row=row), text

    if state is S.ChannelClose:
        channel = cursor.channel + 1
        if channel < shape.channels:
            return replace(cursor, state=S.ChannelSeparator, channel=channel), braces.channel_close
        num = cursor.num + 1
        if num == shape.count:
            return replace(cursor, state=S.Epilogue, channel=channel, num=num), braces.channel_close
        return replace(cursor, state=S.NumSeparator, channel=0, num=num), braces.channel_close

    if state is S.ChannelSeparator:
        return replace(cursor, state=S.ChannelOpen), braces.channel_separator

    if state is S.NumSeparator:
        return replace(cursor, state=S.ChannelOpen), braces.num_separator

    if state is S.Epilogue:
        return replace(cursor, state=S.Finished), ctx.epilogue

    check(
        False,
        "formatter stepped after it finished",
        error=FormatterStateError,
        stacklevel=2,
    )


# ----------------------------------------------------------------------
# Driver
# ----------------------------------------------------------------------


class TensorFormatter:
    """
    Single-use iterator over the text fragments of a tensor.

    The depth converter is chosen once, here. The formatter holds its own
    handle on the tensor until the last fragment has been produced.
    Iterating an exhausted formatter yields nothing.

    Args:
        tensor: Tensor to render
        braces: Punctuation; defaults to BraceSet.DEFAULT
        prologue / epilogue: Override the brace set's leading / trailing text
    """

    def __init__(
        self,
        tensor: "Tensor",
        braces: Optional[BraceSet] = None,
        prologue: Optional[str] = None,
        epilogue: Optional[str] = None,
    ):
        braces = braces or BraceSet.DEFAULT
        convert = converter_for(tensor.depth)
        self._tensor = tensor.share()
        source = self._tensor

        def read(n: int, c: int, h: int, w: int) -> str:
            return convert(source.get(n, c, h, w))

        self._ctx = FormatContext(
            shape=tensor.shape,
            braces=braces,
            read=read,
            prologue=braces.prologue if prologue is None else prologue,
            epilogue=braces.epilogue if epilogue is None else epilogue,
        )
        self._cursor = FormatCursor()

    @property
    def state(self) -> FormatState:
        return self._cursor.state

    @property
    def finished(self) -> bool:
        return self._cursor.state is FormatState.Finished

    def next_fragment(self) -> str:
        """Emit the next fragment; fatal once finished."""
        self._cursor, text = step(self._cursor, self._ctx)
        if self.finished:
            self._tensor.release()
        return text

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        if self.finished:
            raise StopIteration
        return self.next_fragment()


def format_tensor(
    tensor: "Tensor",
    braces: Optional[BraceSet] = None,
    prologue: Optional[str] = None,
    epilogue: Optional[str] = None,
) -> str:
    """Render a tensor to a string."""
    return "".join(TensorFormatter(tensor, braces, prologue, epilogue))


def write_tensor(
    tensor: "Tensor",
    sink: TextIO,
    braces: Optional[BraceSet] = None,
    prologue: Optional[str] = None,
    epilogue: Optional[str] = None,
) -> int:
    """
    Write a tensor fragment by fragment to anything with write().

    Returns:
        Number of characters written.
    """
    written = 0
    for fragment in TensorFormatter(tensor, braces, prologue, epilogue):
        if fragment:
            sink.write(fragment)
            written += len(fragment)
    return written
