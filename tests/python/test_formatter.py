# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
Formatter Tests

Covers the rendering state machine, brace sets, depth converters and the
fragment-by-fragment drivers.
"""

import io

import pytest

from chaoscv.config import get_config, set_config
from chaoscv.core import (
    BraceSet,
    Depth,
    FormatCursor,
    FormatState,
    Rect,
    Tensor,
    TensorFormatter,
    converter_for,
    format_tensor,
    step,
    write_tensor,
)
from chaoscv.core.formatter import FormatContext
from chaoscv.errors import ConfigurationError, FormatterStateError, UnknownDepthError


@pytest.fixture
def two_by_three():
    return Tensor.from_values([[1, 2, 3], [4, 5, 6]], [1, 1, 2, 3], Depth.Float32)


class TestFormatTensor:
    """End-to-end rendering."""

    def test_default_braces(self, two_by_three):
        assert format_tensor(two_by_three) == "[[1 2 3],[4 5 6]]"

    def test_str_uses_configured_braces(self, two_by_three):
        assert str(two_by_three) == "[[1 2 3],[4 5 6]]"
        set_config(get_config().replace(braces="matlab"))
        assert str(two_by_three) == "[1 2 3; 4 5 6]"

    def test_matlab_braces(self, two_by_three):
        assert format_tensor(two_by_three, braces=BraceSet.MATLAB) == "[1 2 3; 4 5 6]"

    def test_python_braces(self, two_by_three):
        text = format_tensor(two_by_three, braces=BraceSet.PYTHON)
        assert text == "[[[1, 2, 3],\n  [4, 5, 6]]]"

    def test_single_element(self):
        t = Tensor.from_values([7], [1, 1, 1, 1], Depth.Int32)
        assert format_tensor(t) == "[[7]]"

    def test_single_row(self):
        t = Tensor.from_values([1, 2, 3], [1, 1, 1, 3], Depth.UInt8)
        assert format_tensor(t) == "[[1 2 3]]"

    def test_multiple_channels(self):
        t = Tensor.from_values(range(4), [1, 2, 1, 2], Depth.Int16)
        assert format_tensor(t) == "[[0 1]],[[2 3]]"

    def test_multiple_nums(self):
        t = Tensor.from_values(range(4), [2, 1, 1, 2], Depth.Int16)
        braces = BraceSet.DEFAULT.with_changes(num_separator=";")
        assert format_tensor(t, braces=braces) == "[[0 1]];[[2 3]]"

    def test_channel_and_num_separators(self):
        t = Tensor.from_values(range(4), [2, 2, 1, 1], Depth.Int32)
        braces = BraceSet.DEFAULT.with_changes(channel_separator="|", num_separator="#")
        assert format_tensor(t, braces=braces) == "[[0]]|[[1]]#[[2]]|[[3]]"

    def test_float_formatting(self):
        t = Tensor.from_values([1.5, -0.25, 2.0], [1, 1, 1, 3], Depth.Float64)
        assert format_tensor(t) == "[[1.5 -0.25 2]]"

    def test_uint8_prints_numbers(self):
        t = Tensor.from_values([65, 66], [1, 1, 1, 2], Depth.UInt8)
        assert format_tensor(t) == "[[65 66]]"

    def test_prologue_epilogue_override(self, two_by_three):
        text = format_tensor(two_by_three, prologue="M=", epilogue=";")
        assert text == "M=[[1 2 3],[4 5 6]];"

    def test_empty_tensor(self):
        assert format_tensor(Tensor([1, 1, 0, 3])) == ""
        assert format_tensor(Tensor()) == ""
        assert format_tensor(Tensor([1, 1, 0, 3]), braces=BraceSet.PYTHON) == "[]"

    def test_view_renders_visible_elements(self):
        t = Tensor([1, 1, 4, 4], Depth.Int32).load(range(16))
        v = t.view(Rect.from_xywh(1, 1, 2, 2))
        assert format_tensor(v) == "[[5 6],[9 10]]"

    def test_braces_balanced(self):
        t = Tensor.from_values(range(24), [2, 3, 2, 2], Depth.Int32)
        text = format_tensor(t)
        assert text.count("[") == text.count("]")
        assert text.count("[") == 2 * 3 * (1 + 2)


class TestBraceSet:
    """Tests for brace set lookup."""

    def test_builtin_names(self):
        assert set(BraceSet.builtin()) == {"default", "python", "matlab"}

    def test_named(self):
        assert BraceSet.named("MATLAB") is BraceSet.MATLAB
        assert BraceSet.named(" python ") is BraceSet.PYTHON

    def test_unknown_name(self):
        with pytest.raises(ConfigurationError) as exc_info:
            BraceSet.named("latex")
        assert "latex" in str(exc_info.value)

    def test_with_changes_is_copy(self):
        custom = BraceSet.DEFAULT.with_changes(value_separator=",")
        assert custom.value_separator == ","
        assert BraceSet.DEFAULT.value_separator == " "


class TestConverters:
    """Tests for per-depth converters."""

    def test_integer_converter(self):
        assert converter_for(Depth.Int32)(12) == "12"
        assert converter_for(Depth.UInt8)(255) == "255"

    def test_float_converter(self):
        assert converter_for(Depth.Float32)(0.5) == "0.5"
        assert converter_for(Depth.Float64)(3.0) == "3"

    def test_unknown_depth_is_fatal(self):
        with pytest.raises(UnknownDepthError):
            converter_for(Depth.Unknown)


class TestStep:
    """Tests for the pure transition function."""

    def make_context(self, tensor, braces=BraceSet.DEFAULT):
        convert = converter_for(tensor.depth)
        return FormatContext(
            shape=tensor.shape,
            braces=braces,
            read=lambda n, c, h, w: convert(tensor.get(n, c, h, w)),
            prologue="<",
            epilogue=">",
        )

    def test_state_sequence(self):
        t = Tensor.from_values([1, 2, 3, 4], [1, 1, 2, 2], Depth.Int32)
        ctx = self.make_context(t)
        cursor = FormatCursor()
        states = [cursor.state]
        fragments = []
        while cursor.state is not FormatState.Finished:
            cursor, text = step(cursor, ctx)
            states.append(cursor.state)
            fragments.append(text)

        S = FormatState
        assert states == [
            S.Prologue,
            S.ChannelOpen,
            S.RowOpen,
            S.Value,
            S.ValueSeparator,
            S.Value,
            S.LineSeparator,
            S.RowOpen,
            S.Value,
            S.ValueSeparator,
            S.Value,
            S.LineSeparator,
            S.ChannelClose,
            S.Epilogue,
            S.Finished,
        ]
        assert "".join(fragments) == "<[[1 2],[3 4]]>"

    def test_step_is_pure(self):
        t = Tensor.from_values([1, 2], [1, 1, 1, 2], Depth.Int32)
        ctx = self.make_context(t)
        cursor = FormatCursor(FormatState.Value, 0, 0, 0, 1)
        first = step(cursor, ctx)
        second = step(cursor, ctx)
        assert first == second
        assert cursor.col == 1

    def test_empty_shape_skips_to_epilogue(self):
        ctx = self.make_context(Tensor([1, 1, 0, 0]))
        cursor, text = step(FormatCursor(), ctx)
        assert cursor.state is FormatState.Epilogue
        assert text == "<"

    def test_channel_close_advances_num(self):
        t = Tensor([2, 1, 1, 1], Depth.Int32)
        ctx = self.make_context(t)
        cursor, text = step(FormatCursor(FormatState.ChannelClose, 0, 0, 1, 1), ctx)
        assert cursor.state is FormatState.NumSeparator
        assert (cursor.num, cursor.channel) == (1, 0)
        assert text == "]"

    def test_step_after_finished_is_fatal(self):
        ctx = self.make_context(Tensor([1, 1, 1, 1]))
        with pytest.raises(FormatterStateError):
            step(FormatCursor(FormatState.Finished), ctx)


class TestTensorFormatter:
    """Tests for the iterator driver."""

    def test_fragments(self, two_by_three):
        fragments = list(TensorFormatter(two_by_three))
        assert fragments[:3] == ["", "[", "["]
        assert "".join(fragments) == "[[1 2 3],[4 5 6]]"

    def test_single_use(self, two_by_three):
        formatter = TensorFormatter(two_by_three)
        assert "".join(formatter) == "[[1 2 3],[4 5 6]]"
        assert formatter.finished
        assert list(formatter) == []

    def test_next_fragment_after_finish_is_fatal(self, two_by_three):
        formatter = TensorFormatter(two_by_three)
        for _ in formatter:
            pass
        with pytest.raises(FormatterStateError):
            formatter.next_fragment()

    def test_holds_handle_until_finished(self, two_by_three):
        formatter = TensorFormatter(two_by_three)
        assert two_by_three.ref_count == 2
        assert formatter.state is FormatState.Prologue
        formatter.next_fragment()
        assert two_by_three.ref_count == 2
        list(formatter)
        assert two_by_three.ref_count == 1

    def test_survives_release_of_source(self):
        t = Tensor.from_values([1, 2], [1, 1, 1, 2], Depth.Int32)
        formatter = TensorFormatter(t)
        t.release()
        assert "".join(formatter) == "[[1 2]]"

    def test_write_tensor(self, two_by_three):
        sink = io.StringIO()
        written = write_tensor(two_by_three, sink, braces=BraceSet.MATLAB)
        assert sink.getvalue() == "[1 2 3; 4 5 6]"
        assert written == len("[1 2 3; 4 5 6]")
