"""Gated Rust module declarations for the generated source tree.

Each level of the tree is a list of Decl (cfg predicate, body) pairs that
get serialized into lib.rs / mod.rs files as they are produced:

    src/lib.rs                       revision modules + default re-exports
    src/<rev>/mod.rs                 per-arch modules + re-exports
    src/<rev>/<arch>/mod.rs          per-header leaf modules
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


def feature(name: str) -> str:
    return f'feature = "{name}"'


def target_arch(arch: str) -> str:
    return f'target_arch = "{arch}"'


def any_of(predicates: list[str]) -> str:
    """One predicate stays as-is; several become a single any(...)."""
    if not predicates:
        raise ValueError("any_of() needs at least one predicate")
    if len(predicates) == 1:
        return predicates[0]
    return f"any({', '.join(predicates)})"


@dataclass(frozen=True)
class Decl:
    body: str
    gate: str | None = None
    doc: str | None = None

    def render(self) -> str:
        out = ""
        if self.doc is not None:
            out += f"/// {self.doc}\n"
        if self.gate is not None:
            out += f"#[cfg({self.gate})]\n"
        return out + self.body + "\n"


def revision_decls(rev_mod: str, default_arches: list[str]) -> list[Decl]:
    """Top-level declarations for one revision module.

    Default revisions are compiled in (and glob re-exported) whenever the
    target is one of their arches; the rest are opt-in by feature.
    """
    if default_arches:
        gate = any_of([target_arch(a) for a in default_arches])
        return [
            Decl(f"pub mod {rev_mod};", gate),
            Decl(f"pub use {rev_mod}::*;", gate),
        ]
    return [Decl(f"pub mod {rev_mod};", feature(rev_mod))]


def arch_decls(rust_arch: str) -> list[Decl]:
    gate = target_arch(rust_arch)
    return [
        Decl(f"mod {rust_arch};", gate),
        Decl(f"pub use {rust_arch}::*;", gate),
    ]


def header_decl(mod_name: str, header_path: str) -> Decl:
    # r# so headers named like keywords (e.g. "if") still work.
    return Decl(f"pub mod r#{mod_name};", feature(mod_name), doc=header_path)


class ModuleFile:
    """A generated .rs file, written declaration by declaration."""

    def __init__(self, path, append=False):
        self.path = Path(path)
        self._f = open(self.path, "a" if append else "w", encoding="utf-8")

    def emit(self, decls):
        for decl in decls:
            self._f.write(decl.render())
        self._f.flush()

    def close(self):
        self._f.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False
