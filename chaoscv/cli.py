# Copyright 2025 Wahyu Ardiansyah
# Licensed under the Apache License, Version 2.0

"""
ChaosCV Command Line Interface

    chaoscv --version
    chaoscv --info
    chaoscv show --shape=1,1,2,3 --depth=float32 [--roi=x,y,w,h] [--braces=python]

Options are ordinary ChaosCV flags, so ``--log_dir``, ``--log_level`` and
``--fatal_action`` work here as well; ``--help`` lists all of them.
"""

from __future__ import annotations

import sys
from typing import Optional

from .config import apply_flags
from .errors import ChaosError, FlagError
from .flags import FLAGS, define_bool, define_string, parse_command_line_flags, set_usage_message

define_bool("version", False, "Show version information.")
define_bool("info", False, "Show depths and brace sets.")
define_string("shape", "1,1,3,4", "Tensor shape for 'show': count,channels,height,width.")
define_string("depth", "float32", "Element depth for 'show', e.g. float32, 32F, uint8.")
define_string("roi", "", "Optional view for 'show': x,y,width,height.")

USAGE = """usage: chaoscv [flags] [command]

commands:
  show    print an ascending tensor, optionally a view of it"""


def _parse_ints(text: str, count: int, flag: str) -> list[int]:
    try:
        values = [int(part) for part in text.split(",")]
    except ValueError:
        raise FlagError(f"expected {count} comma-separated integers", flag=flag, value=text) from None
    if len(values) != count:
        raise FlagError(f"expected {count} comma-separated integers", flag=flag, value=text)
    return values


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for ChaosCV CLI."""
    argv = list(sys.argv if argv is None else argv)
    set_usage_message(USAGE)

    try:
        rest = parse_command_line_flags(argv)
        config = apply_flags()
    except ChaosError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    from .observability import init_logging

    init_logging(rest[0] if rest else "chaoscv", config.log_level, config.log_dir)

    if FLAGS.version:
        from . import __version__

        print(f"ChaosCV v{__version__}")
        return 0

    if FLAGS.info:
        _show_info()
        return 0

    command = rest[1] if len(rest) > 1 else None
    if command == "show":
        return _run_show()

    if command is not None:
        print(f"Error: unknown command '{command}'", file=sys.stderr)
        return 2

    # Default: show help
    print(FLAGS.usage())
    return 0


def _run_show() -> int:
    """Build an ascending tensor and print it."""
    import numpy as np

    from .core import BraceSet, MatShape, Rect, Tensor, format_tensor
    from .config import get_config

    try:
        shape = MatShape.from_list(_parse_ints(FLAGS.shape, 4, "shape"))
        tensor = Tensor(shape, FLAGS.depth)
        tensor.load(np.arange(shape.numel()).astype(tensor.dtype))
        if FLAGS.roi:
            x, y, w, h = _parse_ints(FLAGS.roi, 4, "roi")
            tensor = tensor.view(Rect.from_xywh(x, y, w, h))
        braces = BraceSet.named(get_config().braces)
    except ChaosError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(format_tensor(tensor, braces=braces))
    return 0


def _show_info():
    """Show version, depths and brace sets."""
    import platform

    import numpy as np

    from . import __version__
    from .core import BraceSet, Depth, depth_size, depth_to_string

    print("=" * 50)
    print("ChaosCV Information")
    print("=" * 50)
    print(f"ChaosCV Version: {__version__}")
    print(f"Python Version: {platform.python_version()}")
    print(f"NumPy Version: {np.__version__}")
    print("Depths:")
    for depth in Depth:
        if depth is Depth.Unknown:
            continue
        print(f"  {depth_to_string(depth):<8} {depth_size(depth)} byte(s)")
    print(f"Brace sets: {', '.join(sorted(BraceSet.builtin()))}")
    print("=" * 50)


if __name__ == "__main__":
    sys.exit(main())
