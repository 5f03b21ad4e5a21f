# src/bigfib/cli.py

"""
bigfib - exact Fibonacci numbers on a hand-built big integer

Description:
    Computes F(k) exactly with a sign-magnitude limb integer, dumps ranges of
    the sequence, and benchmarks the four Fibonacci strategies against each
    other (outlier-filtered wall-clock nanoseconds per index).

usage: see bigfib -h
"""

from __future__ import annotations

import argparse
import faulthandler
import sys
import textwrap
import threading
import time
import traceback
from importlib.resources import files as pkg_files
from typing import NamedTuple

from colorama import Fore, Style
from colorama import init as colorama_init

from bigfib import __version__ as _ver
from bigfib import config as CONFIG
from bigfib.bench import sweep
from bigfib.compute import strategy_index
from bigfib.device import FibDevice, FibSession
from bigfib.fmt import abbreviate
from bigfib.output_manager import OutputManager
from bigfib.progress import Progress
from bigfib.registry import UnknownStrategyError
from bigfib.runtime import APPLY, CFG, debug_line, ensure_runtime_deps
from bigfib.runtime import current as _rt_current
from bigfib.utility import (
    UserInputError,
    clear_screen,
    estimate_fib_digits,
    flatten_dotted,
    looks_like_index,
    parse_index,
    typename,
    validate_output_setting,
)
from bigfib.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir

COMMANDS = ("read", "bench", "list", "where", "init", "profiles")


# In memory session history
class HistoryItem(NamedTuple):
    k: int
    algorithm: str
    timestamp: float


_HISTORY: list[HistoryItem] = []


def add_to_history(k: int, algorithm: str) -> None:
    _HISTORY.append(HistoryItem(k=k, algorithm=algorithm, timestamp=time.time()))


def get_history() -> list[HistoryItem]:
    return list(_HISTORY)


def _install_loud_error_handlers(debug: bool) -> None:
    if not debug:
        return
    faulthandler.enable()

    def _excepthook(exc_type, exc, tb):
        sys.stderr.write("\n[UNCAUGHT EXCEPTION]\n")
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()
    sys.excepthook = _excepthook

    def _thread_excepthook(args):
        sys.stderr.write("\n[UNCAUGHT THREAD EXCEPTION]\n")
        traceback.print_exception(args.exc_type, args.exc_value, args.exc_traceback, file=sys.stderr)
        sys.stderr.flush()
    threading.excepthook = _thread_excepthook


def _print_user_error(msg: str) -> None:
    """Uniform, one-line friendly error."""
    prefix = f"{Fore.RED}Error:{Style.RESET_ALL}"
    if not (msg.startswith("Invalid input:") or msg.startswith("Error:")):
        msg = f"{prefix} {msg}"
    print(msg, file=sys.stderr)


def _resolve_inputs(items: list[str]) -> tuple[str | None, str | None, list[str]]:
    """Return (profile, command, rest) from the positionals.

    Rules:
      - a leading command word or index means "no profile"
      - otherwise the first item is a profile name and the next one may be
        a command word or an index
      - rest holds whatever follows (index / max offset arguments)
    """
    if not items:
        return None, None, []

    head, tail = items[0], items[1:]
    if head in COMMANDS:
        return None, head, tail
    if looks_like_index(head):
        return None, None, items
    if tail and tail[0] in COMMANDS:
        return head, tail[0], tail[1:]
    return head, None, tail


def _resolve_algorithm(name: str | None) -> str:
    index = strategy_index()
    key = name if name is not None else CFG("ENGINE.ALGORITHM", "fast-doubling")
    try:
        return index.labels[index.resolve(str(key))]
    except UnknownStrategyError as e:
        raise UserInputError(str(e)) from None


def _display(digits: str, abbreviated: bool) -> str:
    if not abbreviated:
        return digits
    return abbreviate(
        digits,
        head=int(CFG("OUTPUT.NUM_ABBR_HEAD", 10)),
        tail=int(CFG("OUTPUT.NUM_ABBR_TAIL", 10)),
        threshold=int(CFG("OUTPUT.NUM_ABBR_THRESHOLD", 35)),
        ellipsis=str(CFG("OUTPUT.ELLIPSIS", "…")),
    )


def _verify(k: int, digits: str) -> bool:
    """Cross-check against gmpy2's Fibonacci."""
    if not ensure_runtime_deps(("gmpy2",), feature="--verify", strict=True):
        raise UserInputError("--verify needs gmpy2.")
    import gmpy2  # noqa: PLC0415  (checked above)
    return str(gmpy2.fib(k)) == digits


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      <index>
          Print F(index). Accepts 1_000 or 10**4 style indices.
          Indices above DEVICE.MAX_INDEX are clamped.

      read [max]
          Print F(0) .. F(max), one line each.

      bench [max]
          Time every strategy at offsets 0..max; one row per offset with
          the outlier-filtered mean in nanoseconds per strategy.

      list
          List the registered Fibonacci strategies.

      profiles
          List available profiles.

      where
          Show the workspace and package paths.

      init
          Create the workspace and copy packaged profiles if missing.
    """)

    p = argparse.ArgumentParser(
        prog="bigfib",
        description="Exact Fibonacci numbers on a hand-built big integer",
        usage=(
            "bigfib [profile] [index | command [max]] [--algorithm NAME] [--output FILE]\n"
            "              [--samples N] [--abbreviate] [--verify] [--quiet] [--debug]\n"
            "       bigfib -h | --help\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="[profile] [index | command]",
                   help="optional profile name followed by an index or a command")
    p.add_argument("--algorithm", "-a", default=None,
                   help="strategy label or selector (see 'bigfib list')")
    p.add_argument("--samples", type=int, default=None, help="timing samples per point (bench)")
    p.add_argument("--output", default=None, help="Append results to a file (also prints unless --quiet)")
    p.add_argument("--abbreviate", action="store_true", help="Shorten long numbers to head…tail")
    p.add_argument("--verify", action="store_true", help="Cross-check results against gmpy2")
    p.add_argument("--quiet", action="store_true", help="Suppress screen output and progress")
    p.add_argument("--debug", action="store_true", help="Show timings and internal trace info")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")
    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    try:
        return _main_impl(argv)
    except UserInputError as e:
        _print_user_error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except Exception as e:
        debug = "--debug" in (argv if argv is not None else sys.argv)
        if debug:
            raise
        print(f"Unexpected error: {e.__class__.__name__}: {e}", file=sys.stderr)
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1


def _load_profile(profile: str | None, debug: bool) -> str:
    """Apply the named (or default) profile to the runtime; return its name."""
    if profile and not CONFIG.has_profile(profile):
        names = ", ".join(nm for nm, _ in CONFIG.list_profiles_with_descriptions())
        raise UserInputError(f"Unknown profile: '{profile}'. Available profiles: {names or '(none)'}")

    name = profile or "default"
    if not CONFIG.has_profile(name):
        debug_line("debug", f"no '{name}' profile in {workspace_dir()}; using built-in defaults")
        return "built-in"

    selected = CONFIG.load_settings(name)
    APPLY(selected)
    if debug:
        _rt_current().debug = True
        print(f"[debug] active profile: {selected.name}", file=sys.stderr)
        if selected._source:
            print(f"[debug] profile file: {selected._source}", file=sys.stderr)
        flat = flatten_dotted(selected.data)
        for k in sorted(flat, key=str.lower):
            v = flat[k]
            print(f"        {k:.<40} {v!r} ({typename(v)})", file=sys.stderr)
    return selected.name


# ---- commands ----
def _print_fib(session: FibSession, k: int, algorithm: str, om: OutputManager, *,
               abbreviated: bool, verify: bool) -> int:
    pos = session.seek(k)
    if pos != k:
        om.write(f"{Fore.YELLOW}Index {k} clamped to {pos} (DEVICE.MAX_INDEX).{Style.RESET_ALL}")

    t0 = time.perf_counter()
    digits = session.read(algorithm)
    dt_ms = (time.perf_counter() - t0) * 1000.0
    debug_line("debug", f"{algorithm}({pos}): {len(digits)} digits "
                        f"(estimate {estimate_fib_digits(pos)}) in {dt_ms:.2f} ms")

    om.write(f"F({pos}) = {_display(digits, abbreviated)}")
    if verify:
        if not _verify(pos, digits):
            print(f"{Fore.RED}{Style.BRIGHT}MISMATCH{Style.RESET_ALL} against gmpy2.fib({pos})", file=sys.stderr)
            return 1
        om.write(f"{Fore.GREEN}verified{Style.RESET_ALL} against gmpy2.fib({pos})")
    return 0


def _cmd_read(session: FibSession, upto: int, algorithm: str, om: OutputManager, abbreviated: bool) -> int:
    for i in range(upto + 1):
        pos = session.seek(i)
        if pos < i:
            break
        digits = session.read(algorithm)
        om.write(f"Reading at offset {pos}, returned the sequence {_display(digits, abbreviated)}.")
    return 0


def _cmd_bench(session: FibSession, upto: int, samples: int | None, om: OutputManager, quiet: bool) -> int:
    index = strategy_index()
    selectors = sorted(index.funcs)
    om.write("# offset " + " ".join(index.labels[s] for s in selectors) + "  (ns, filtered mean)")

    show_progress = not quiet and not sys.stdout.isatty()
    prog = Progress(upto + 1, enabled=show_progress)
    try:
        for pos, row in sweep(session, upto, selectors, samples=samples):
            om.write(f"{pos} " + " ".join(f"{m.filtered_mean:.5f}" for m in row))
            prog.update(pos + 1, label=f"offset {pos}")
    finally:
        prog.done()
    return 0


def _cmd_list(om: OutputManager) -> int:
    index = strategy_index()
    for sel in sorted(index.funcs):
        om.write(f"{Fore.CYAN}{sel}{Style.RESET_ALL}  {index.labels[sel]:<20} {index.descriptions[sel]}")
    return 0


def _cmd_profiles(om: OutputManager) -> int:
    for name, desc in CONFIG.list_profiles_with_descriptions():
        om.write(f"{Fore.CYAN}{name:<12}{Style.RESET_ALL} {desc}")
    return 0


def _profile_options(args: argparse.Namespace) -> tuple[str, bool, str | None]:
    """(algorithm, abbreviated, output target) from the active profile; command line flags win."""
    algorithm = _resolve_algorithm(args.algorithm)
    abbreviated = args.abbreviate or bool(CFG("OUTPUT.ABBREVIATE", False))

    try:
        target = validate_output_setting(args.output)
    except ValueError as e:
        raise UserInputError(f"--output: {e}") from None
    if target is None:
        target = CFG("OUTPUT.OUTPUT_FILE", None) or None
    return algorithm, abbreviated, target


def _one_arg_index(rest: list[str], default: int) -> int:
    if not rest:
        return default
    if len(rest) > 1:
        raise UserInputError(f"Invalid input: unexpected arguments {' '.join(rest[1:])!r}.")
    return parse_index(rest[0])


# ---- main ----
def _main_impl(argv=None) -> int:

    colorama_init(autoreset=True)

    parser = _build_parser()
    args = parser.parse_args(argv)
    rt = _rt_current()
    rt.debug = bool(args.debug)

    _install_loud_error_handlers(args.debug)

    profile, command, rest = _resolve_inputs(args.items)

    if command == "init":
        ws, copied = seed_workspace(overwrite=False)
        print(f"Workspace ready at: {ws}")
        print(f"Copied -> profiles: {copied}")
        return 0
    if command == "where":
        print(f"Workspace: {workspace_dir()}")
        print(f"Package:   {pkg_files('bigfib')}")
        return 0

    ensure_workspace_seeded()
    profile_name = _load_profile(profile, args.debug)
    algorithm, abbreviated, target = _profile_options(args)

    if args.samples is not None and args.samples < 1:
        raise UserInputError("Invalid input: --samples must be at least 1.")

    device = FibDevice()

    if command in {"list", "profiles"}:
        with OutputManager(output_file=target, quiet=args.quiet) as om:
            return _cmd_list(om) if command == "list" else _cmd_profiles(om)

    if command is not None:
        with OutputManager(output_file=target, quiet=args.quiet) as om, device.open() as session:
            if command == "read":
                return _cmd_read(session, _one_arg_index(rest, 100), algorithm, om, abbreviated)
            upto = _one_arg_index(rest, int(CFG("BENCH.MAX_OFFSET", 100)))
            return _cmd_bench(session, upto, args.samples, om, args.quiet)

    if rest:
        k = _one_arg_index(rest, 0)
        with OutputManager(output_file=target, quiet=args.quiet) as om, device.open() as session:
            rc = _print_fib(session, k, algorithm, om, abbreviated=abbreviated, verify=args.verify)
        add_to_history(k, algorithm)
        return rc

    return _repl(device, profile_name, algorithm, target, abbreviated, args)


# ---- REPL ----
_HELP = textwrap.dedent("""\
    <index>          print F(index), e.g. 1000, 10**4, 12_345
    algo [name]      show or switch strategy (see 'list')
    list             list strategies
    hist             show this session's history
    p                list profiles; type a profile name to switch
    debug on|off     toggle debug output
    q                quit
""")


def _repl(device: FibDevice, profile_name: str, algorithm: str, target: str | None,
          abbreviated: bool, args: argparse.Namespace) -> int:
    if not _rt_current().debug:
        clear_screen()
    print(f"{Fore.YELLOW}{Style.BRIGHT}bigfib v{_ver} - exact Fibonacci numbers{Style.RESET_ALL}")

    current_profile = profile_name
    session = device.open()
    try:
        while True:
            try:
                prompt = (f"\nProfile: {current_profile}  Algorithm: {algorithm} - "
                          "Enter an index, command or profile (h=Help, q=Quit): ")
                user_input = input(prompt).strip()
                low = user_input.lower()

                if low in {"", "q", "quit"}:
                    break
                if low in {"h", "help"}:
                    print(_HELP)
                    continue
                if low == "list":
                    _cmd_list(OutputManager())
                    continue
                if low in {"p", "profiles"}:
                    _cmd_profiles(OutputManager())
                    continue
                if low in {"hist", "history"}:
                    hist = get_history()
                    if not hist:
                        print("History is empty.")
                    for item in hist:
                        ts = time.strftime("%H:%M:%S", time.localtime(item.timestamp))
                        print(f"{ts}  k={item.k:<10}  algorithm={item.algorithm}")
                    continue
                if low.startswith("algo"):
                    parts = user_input.split(maxsplit=1)
                    if len(parts) == 2:
                        algorithm = _resolve_algorithm(parts[1])
                    print(f"Algorithm: {algorithm}")
                    continue
                if low.startswith("debug"):
                    parts = low.split()
                    rt = _rt_current()
                    if len(parts) == 2 and parts[1] in {"on", "off"}:
                        rt.debug = parts[1] == "on"
                    print(f"Debug is currently {'ON' if rt.debug else 'OFF'}.")
                    continue

                if looks_like_index(user_input):
                    k = parse_index(user_input)
                    with OutputManager(output_file=target, quiet=False) as om:
                        _print_fib(session, k, algorithm, om, abbreviated=abbreviated, verify=args.verify)
                    add_to_history(k, algorithm)
                    continue

                if CONFIG.has_profile(user_input):
                    APPLY(CONFIG.load_settings(user_input))
                    if args.debug:
                        _rt_current().debug = True
                    algorithm, abbreviated, target = _profile_options(args)
                    # DEVICE.MAX_INDEX may have changed
                    session.close()
                    device = FibDevice()
                    session = device.open()
                    current_profile = user_input
                    print(f"Applied profile: {current_profile}")
                    continue

                print(f"{Fore.RED}Invalid input: {Style.RESET_ALL}'{user_input}'. Type H for help.")
            except UserInputError as e:
                _print_user_error(str(e))
            except (EOFError, KeyboardInterrupt):
                print()
                break
            except Exception as e:
                if _rt_current().debug:
                    traceback.print_exc()
                else:
                    _print_user_error(f"{e.__class__.__name__}: {e}")
    finally:
        session.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
