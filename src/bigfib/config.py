from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib as toml
except ImportError:  # py<3.11
    import tomli as toml  # type: ignore

from bigfib.utility import UserInputError
from bigfib.workspace import ensure_workspace_seeded, workspace_dir

# sections whose values must be integers >= 0
_INT_KEYS = (
    ("DEVICE", "MAX_INDEX"),
    ("BENCH", "SAMPLES"),
    ("BENCH", "MAX_OFFSET"),
    ("OUTPUT", "NUM_ABBR_HEAD"),
    ("OUTPUT", "NUM_ABBR_TAIL"),
    ("OUTPUT", "NUM_ABBR_THRESHOLD"),
)


@dataclass
class Settings:
    """
    Wrap the full TOML dict (without the [_PROFILE_] section).
    .as_dict() feeds runtime.apply().
    """
    data: dict[str, Any]
    name: str
    description: str
    _source: Path | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


# --- Paths -----------------------------------------------------------------

def _profiles_dir() -> Path:
    return workspace_dir() / "profiles"


def _profile_path(name: str) -> Path:
    return _profiles_dir() / f"{name}.toml"


# --- I/O -------------------------------------------------------------------

def _load_toml(path: Path) -> dict[str, Any]:
    try:
        with path.open("rb") as f:
            return toml.load(f)
    except toml.TOMLDecodeError as e:
        lineno = getattr(e, "lineno", None)
        colno = getattr(e, "colno", None)
        msg = getattr(e, "msg", str(e))
        where = []
        if lineno is not None:
            where.append(f"line {lineno}")
        if colno is not None:
            where.append(f"column {colno}")
        loc = f" (at {', '.join(where)})" if where else ""
        # No traceback chaining
        raise UserInputError(f"reading {path.name}: {msg}{loc}.") from None


# --- Metadata handling -----------------------------------------------------

def _sanitize_oneline(s: str) -> str:
    return " ".join(str(s).split()) or "(no description)"


def _split_profile_data(raw: dict[str, Any], fallback_name: str) -> tuple[dict[str, Any], str, str]:
    """
    Extract [_PROFILE_] meta (name, description) and return:
      (settings_without_profile, resolved_name, resolved_description)
    """
    meta = raw.get("_PROFILE_") or {}
    data = {k: v for k, v in raw.items() if k != "_PROFILE_"}
    name = str(meta.get("name") or fallback_name)
    description = _sanitize_oneline(str(meta.get("description") or ""))
    return data, name, description


def _validate(data: dict[str, Any], source: str) -> None:
    for section, key in _INT_KEYS:
        val = (data.get(section) or {}).get(key)
        if val is None:
            continue
        if isinstance(val, bool) or not isinstance(val, int) or val < 0:
            raise UserInputError(f"{source}: {section}.{key} must be a non-negative integer, got {val!r}.")
    sigma = (data.get("BENCH") or {}).get("OUTLIER_SIGMA")
    if sigma is not None and (isinstance(sigma, bool) or not isinstance(sigma, (int, float)) or sigma <= 0):
        raise UserInputError(f"{source}: BENCH.OUTLIER_SIGMA must be a positive number, got {sigma!r}.")


# --- Public API ------------------------------------------------------------

def list_profiles_with_descriptions() -> list[tuple[str, str]]:
    """
    Return [(name, description), ...] for all profiles.
    Profiles lacking [_PROFILE_] get "(no description)".
    """
    ensure_workspace_seeded()
    items: list[tuple[str, str]] = []
    for p in _profiles_dir().glob("*.toml"):
        try:
            _, nm, desc = _split_profile_data(_load_toml(p), p.stem)
        except UserInputError:
            # Best-effort listing; fall back to filename
            nm, desc = p.stem, "(unreadable profile)"
        items.append((nm, desc))
    return sorted(items, key=lambda t: t[0].lower())


def has_profile(name: str) -> bool:
    return _profile_path(name).exists()


def load_settings(name: str | None = None, *, path: Path | None = None) -> Settings:
    """
    Load a profile by name (default 'default') or from an explicit path,
    strip the [_PROFILE_] metadata, validate numeric settings and return
    Settings(data=..., name=..., description=..., _source=path).
    """
    if path is None:
        path = _profile_path(name or "default")
    if not path.exists():
        raise UserInputError(f"Profile '{name or path.stem}' not found at {path}")

    data, resolved_name, description = _split_profile_data(_load_toml(path), path.stem)
    _validate(data, path.name)

    return Settings(
        data=data,
        name=resolved_name,
        description=description,
        _source=path,
    )
