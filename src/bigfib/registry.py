# src/bigfib/registry.py
from __future__ import annotations

import inspect
import re
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from importlib import import_module
from types import ModuleType

from bigfib.bigint import BigInt

StrategyFn = Callable[[int], BigInt]

# modules scanned by discover(); each tags its engines with @strategy
STRATEGY_MODULES = ("bigfib.engines",)


class UnknownStrategyError(LookupError):
    pass


# ---------- Decorator (only tags the function; no side effects) ----------

def strategy(*, selector: int, label: str, description: str = ""):
    def deco(fn: StrategyFn) -> StrategyFn:
        fn.__is_strategy__ = True
        fn.selector = int(selector)
        fn.label = label
        fn.description = description
        return fn
    return deco


def _is_strategy(obj) -> bool:
    return callable(obj) and getattr(obj, "__is_strategy__", False)


def _collect_from_module(mod: ModuleType) -> list[StrategyFn]:
    return [o for _, o in inspect.getmembers(mod) if _is_strategy(o)]


# --------------------- Discovery → Index (immutable) ----------------------

@dataclass
class Index:
    funcs: dict[int, StrategyFn]                    # selector -> engine
    labels: dict[int, str]                          # selector -> label
    descriptions: dict[int, str]                    # selector -> one-liner
    label_to_selector: dict[str, int] = field(default_factory=dict)

    @staticmethod
    def to_token(name: str) -> str:
        return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")

    def resolve(self, key: int | str) -> int:
        """Selector for an int selector, a label, or a numeric string."""
        if isinstance(key, str):
            s = key.strip()
            if s.isdigit():
                key = int(s)
            else:
                sel = self.label_to_selector.get(self.to_token(s))
                if sel is None:
                    raise UnknownStrategyError(
                        f"unknown algorithm {key!r}; choose from: {', '.join(self.label_to_selector)}"
                    )
                return sel
        if key not in self.funcs:
            raise UnknownStrategyError(f"unknown selector {key!r}; valid: {sorted(self.funcs)}")
        return key

    def get(self, key: int | str) -> StrategyFn:
        return self.funcs[self.resolve(key)]


def discover(modules: tuple[str, ...] = STRATEGY_MODULES) -> Index:
    """Collect every @strategy engine; a duplicate selector is a programming error."""
    funcs: OrderedDict[int, StrategyFn] = OrderedDict()
    labels: dict[int, str] = {}
    desc: dict[int, str] = {}
    by_label: dict[str, int] = {}

    found: list[StrategyFn] = []
    for name in modules:
        found.extend(_collect_from_module(import_module(name)))

    for fn in sorted(found, key=lambda f: f.selector):
        sel = fn.selector
        if sel in funcs:
            raise ValueError(f"selector {sel} registered twice: {labels[sel]!r} and {fn.label!r}")
        funcs[sel] = fn
        labels[sel] = fn.label
        desc[sel] = fn.description
        by_label[Index.to_token(fn.label)] = sel

    return Index(funcs=dict(funcs), labels=labels, descriptions=desc, label_to_selector=by_label)
