"""Gated declaration rendering."""
from __future__ import annotations

import pytest

from module_tree import (
    Decl, ModuleFile, any_of, arch_decls, feature, header_decl, revision_decls, target_arch,
)


def test_any_of():
    assert any_of([target_arch("x86")]) == 'target_arch = "x86"'
    assert any_of([target_arch("mips"), target_arch("mips64")]) == (
        'any(target_arch = "mips", target_arch = "mips64")'
    )
    with pytest.raises(ValueError):
        any_of([])


def test_default_revision_gets_one_disjunctive_gate():
    decls = revision_decls("v4_4", ["mips", "mips64"])
    gate = 'any(target_arch = "mips", target_arch = "mips64")'
    assert decls == [
        Decl("pub mod v4_4;", gate),
        Decl("pub use v4_4::*;", gate),
    ]


def test_single_default_arch():
    text = "".join(d.render() for d in revision_decls("v3_2", ["arm"]))
    assert text == (
        '#[cfg(target_arch = "arm")]\n'
        "pub mod v3_2;\n"
        '#[cfg(target_arch = "arm")]\n'
        "pub use v3_2::*;\n"
    )


def test_non_default_revision_is_feature_gated():
    assert revision_decls("v5_11", []) == [Decl("pub mod v5_11;", feature("v5_11"))]


def test_arch_decls():
    text = "".join(d.render() for d in arch_decls("riscv64"))
    assert text == (
        '#[cfg(target_arch = "riscv64")]\n'
        "mod riscv64;\n"
        '#[cfg(target_arch = "riscv64")]\n'
        "pub use riscv64::*;\n"
    )


def test_header_decl_carries_path():
    assert header_decl("if_ether", "modules/if_ether.h").render() == (
        "/// modules/if_ether.h\n"
        '#[cfg(feature = "if_ether")]\n'
        "pub mod r#if_ether;\n"
    )


def test_ungated_decl():
    assert Decl("pub mod ctypes;").render() == "pub mod ctypes;\n"


def test_module_file(tmp_path):
    path = tmp_path / "mod.rs"
    path.write_text("old\n")
    with ModuleFile(path) as f:
        f.emit(arch_decls("arm"))
        # flushed as we go
        assert path.read_text().endswith("pub use arm::*;\n")
    assert not path.read_text().startswith("old")

    with ModuleFile(path, append=True) as f:
        f.emit([Decl("pub mod extra;")])
    assert path.read_text().endswith("pub use arm::*;\npub mod extra;\n")
