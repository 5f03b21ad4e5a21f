# -----------------------------------------------------------------------------
#  Utility functions
# -----------------------------------------------------------------------------

from __future__ import annotations

import math
import os
import re
import sys

# log10 of the golden ratio and of sqrt(5), for Binet digit estimates
_LOG10_PHI = math.log10((1 + math.sqrt(5)) / 2)
_LOG10_SQRT5 = math.log10(math.sqrt(5))

_INDEX_RE = re.compile(r"\s*(\d(?:_?\d)*)\s*(?:(?:\*\*|\^)\s*(\d(?:_?\d)*)\s*)?")
_MAX_EXPONENT = 64


class UserInputError(Exception):
    pass


def parse_index(text: str) -> int:
    """
    Parse a Fibonacci index: plain digits with optional '_' separators,
    or a power 'a**b' / 'a^b' (e.g. '10**4'). Negative indices are rejected.
    """
    m = _INDEX_RE.fullmatch(str(text))
    if not m:
        raise UserInputError(f"Invalid input: {text!r} is not a non-negative integer index.")
    base = int(m.group(1).replace("_", ""))
    if m.group(2) is None:
        return base
    exp = int(m.group(2).replace("_", ""))
    if exp > _MAX_EXPONENT:
        raise UserInputError(f"Invalid input: exponent {exp} is larger than {_MAX_EXPONENT}.")
    return base ** exp


def looks_like_index(text: str) -> bool:
    return _INDEX_RE.fullmatch(str(text)) is not None


def estimate_fib_digits(k: int) -> int:
    """
    Decimal digits of F(k) from Binet's formula, F(k) ~ phi^k / sqrt(5).
    Exact for small k; floating point error can make it off by one for huge k.
    """
    if k <= 2:
        return 1
    return int(math.floor(k * _LOG10_PHI - _LOG10_SQRT5)) + 1


def clear_screen() -> None:
    try:
        if os.name == "nt":
            os.system("cls")
        else:
            sys.stdout.write("\033[H\033[2J")
            sys.stdout.flush()
    except OSError:
        pass


def validate_output_setting(output_file: str | None) -> str | None:
    """
    Validate output setting.
    - None / "" => ok (screen only)
    - path/to/file => must not be a source/doc file or a reserved device name
    Returns the (possibly normalized) output_file, or raises ValueError.
    """
    FORBIDDEN_FILENAMES = {
        "pyproject.toml",
        "LICENSE",
        # Windows reserved device names (case-insensitive on Windows)
        "con", "prn", "aux", "nul",
        "com1", "com2", "com3", "com4", "com5", "com6", "com7", "com8", "com9",
        "lpt1", "lpt2", "lpt3", "lpt4", "lpt5", "lpt6", "lpt7", "lpt8", "lpt9",
    }
    FORBIDDEN_EXTENSIONS = {".py", ".md", ".toml"}

    if not output_file:
        return output_file  # screen only

    output_file = output_file.strip()
    if output_file.endswith(("/", "\\")):
        raise ValueError(f"'{output_file}' is a directory; give a file name.")

    base = os.path.basename(output_file)
    stem, ext = os.path.splitext(base)
    if base in FORBIDDEN_FILENAMES or stem.lower() in FORBIDDEN_FILENAMES:
        raise ValueError(f"Refusing to write to reserved file name '{base}'.")
    if ext.lower() in FORBIDDEN_EXTENSIONS:
        raise ValueError(f"Refusing to write to a '{ext}' file.")
    return output_file


def typename(v: object) -> str:
    return type(v).__name__


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, object]:
    out: dict[str, object] = {}
    for k, v in (d or {}).items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out
