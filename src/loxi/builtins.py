## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import time

from .callables import NativeFunction


def op_clock() -> float:
    return time.time()


def load_builtins() -> dict[str, NativeFunction]:
    natives = {
        'clock': NativeFunction('clock', 0, op_clock),
    }
    return natives
