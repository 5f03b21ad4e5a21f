# src/bigfib/runtime.py
from __future__ import annotations

import sys
from contextvars import ContextVar
from dataclasses import dataclass, field
from importlib.util import find_spec
from typing import TYPE_CHECKING, Any

from colorama import Fore, Style

if TYPE_CHECKING:
    from bigfib.config import Settings


@dataclass
class Runtime:
    profile_name: str = "default"
    settings: dict[str, Any] = field(default_factory=dict)
    debug: bool = False  # controls verbosity / tracebacks

    def apply(self, settings: Settings | dict[str, Any]) -> None:
        """Install a loaded profile (or a plain settings dict) as the active one."""
        if isinstance(settings, dict):
            self.profile_name = "default"
            self.settings = dict(settings)
        else:
            self.profile_name = settings.name
            self.settings = dict(settings.as_dict())

        dbg = self.get("BEHAVIOUR.DEBUG", None)
        if isinstance(dbg, bool):
            self.debug = dbg

    def get(self, key: str, default: Any = None) -> Any:
        """Dotted lookup into the profile, e.g. get("BENCH.SAMPLES", 1000)."""
        node: Any = self.settings
        for part in key.split(".") if key else ():
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node if key else default


# --- Context management ---

_current_runtime: ContextVar[Runtime | None] = ContextVar("bigfib_runtime", default=None)


def current() -> Runtime:
    rt = _current_runtime.get()
    if rt is None:
        rt = Runtime()
        _current_runtime.set(rt)
    return rt


def APPLY(settings: Settings | dict[str, Any]) -> None:
    current().apply(settings)


def CFG(key: str, default: Any = None) -> Any:
    return current().get(key, default)


def debug_line(tag: str, msg: str) -> None:
    """One dim '[tag] msg' line on stderr, only in debug mode."""
    if not current().debug:
        return
    print(f"{Style.DIM}[{tag}]{Style.RESET_ALL} {msg}", file=sys.stderr)


# ---- Dependency check --------------------------------------------------------

def ensure_runtime_deps(required: tuple[str, ...] = ("gmpy2",), *, feature: str = "bigfib",
                        strict: bool = True) -> bool:
    """
    True when every module in `required` can be imported (checked with
    find_spec, nothing is imported). Otherwise print which ones `feature`
    is missing and return `not strict`.
    """
    missing = [name for name in required if find_spec(name) is None]
    if missing:
        print(
            f"{Fore.RED}{Style.BRIGHT}{feature} needs:{Style.RESET_ALL} {', '.join(missing)}"
            f" (install with {Fore.YELLOW}pip install {' '.join(missing)}{Style.RESET_ALL})",
            file=sys.stderr,
        )
        return not strict
    return True
