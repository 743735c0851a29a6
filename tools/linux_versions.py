"""Linux revision list and per-architecture default revisions.

Loaded from versions.yaml and validated before the generator touches the
filesystem, so a stale table fails the run up front instead of producing
a crate that silently exposes the wrong ABI.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from arch_map import RUST_ARCHES
from gen_errors import ConfigError

_NON_IDENT = re.compile(r"[^A-Za-z0-9]")


def module_name(revision: str) -> str:
    """Rust module / feature name for a revision tag (v2.6.32 -> v2_6_32)."""
    return _NON_IDENT.sub("_", revision)


@dataclass(frozen=True)
class VersionTable:
    """Ordered revisions plus the (target_arch, revision) default pairs."""
    revisions: tuple[str, ...]
    defaults: tuple[tuple[str, str], ...]
    default_features: tuple[str, ...] = ()
    _by_arch: dict[str, str] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self):
        self.validate()
        object.__setattr__(self, "_by_arch", dict(self.defaults))

    def validate(self):
        if not self.revisions:
            raise ConfigError("versions table lists no revisions")
        seen_revs = set()
        seen_mods = {}
        for rev in self.revisions:
            if not isinstance(rev, str) or not rev:
                raise ConfigError(f"revision must be a non-empty string: {rev!r}")
            if rev in seen_revs:
                raise ConfigError(f"revision listed twice: {rev}")
            seen_revs.add(rev)
            mod = module_name(rev)
            if mod in seen_mods:
                raise ConfigError(
                    f"revisions {seen_mods[mod]} and {rev} share module name {mod}")
            seen_mods[mod] = rev

        seen_arches = set()
        for arch, rev in self.defaults:
            if arch in seen_arches:
                raise ConfigError(f"default revision listed twice for {arch}")
            seen_arches.add(arch)
            if arch not in RUST_ARCHES:
                raise ConfigError(f"default listed for unknown target arch: {arch}")
            if rev not in seen_revs:
                raise ConfigError(f"default revision {rev} for {arch} is not in the revision list")

        for name in self.default_features:
            if not isinstance(name, str) or not name:
                raise ConfigError(f"default feature must be a non-empty string: {name!r}")

    def defaults_for(self, revision: str) -> list[str]:
        """Target arches whose default is *revision*, in table order."""
        return [arch for arch, rev in self.defaults if rev == revision]

    def is_default_pair(self, rust_arch: str, revision: str) -> bool:
        return self._by_arch.get(rust_arch) == revision

    def should_generate(self, rust_arch: str, revision: str) -> bool:
        """Whether *rust_arch* gets bindings under *revision*.

        A revision that is some arch's default only generates that arch;
        revisions nobody defaults to generate every arch.
        """
        return self.is_default_pair(rust_arch, revision) or not self.defaults_for(revision)


def _revision(value, where):
    # Unquoted YAML like 4.20 parses as a float and loses the trailing zero.
    if not isinstance(value, str):
        raise ConfigError(f"{where}: revision must be a quoted string, got {value!r}")
    return value


def load_versions(path) -> VersionTable:
    """Parse and validate a versions.yaml file."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level")

    revisions = data.get("revisions") or []
    defaults = data.get("defaults") or []
    default_features = data.get("default_features") or []
    if not isinstance(revisions, list) or not isinstance(defaults, list) \
            or not isinstance(default_features, list):
        raise ConfigError(f"{path}: revisions, defaults and default_features must be lists")

    pairs = []
    for i, entry in enumerate(defaults):
        if not isinstance(entry, dict) or set(entry) != {"arch", "revision"}:
            raise ConfigError(f"{path}: defaults[{i}] must have exactly 'arch' and 'revision'")
        pairs.append((entry["arch"], _revision(entry["revision"], f"{path}: defaults[{i}]")))

    return VersionTable(
        revisions=tuple(_revision(r, f"{path}: revisions") for r in revisions),
        defaults=tuple(pairs),
        default_features=tuple(default_features),
    )
