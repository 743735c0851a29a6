from __future__ import annotations

import sys
from pathlib import Path

import pytest

_REPO = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(_REPO / "tools"))

from gen_bindings import GenLayout  # noqa: E402
from gen_errors import CommandError  # noqa: E402
from linux_source import LinuxSource  # noqa: E402
from linux_versions import VersionTable  # noqa: E402

CARGO_TOML_PREFIX = """[package]
name = "linux-raw-sys"
version = "0.0.0"

[dependencies]
core = { version = "1.0.0", optional = true, package = "rustc-std-workspace-core" }
compiler_builtins = { version = "0.1.49", optional = true }

"""

LIB_RS_PREFIX = """#![no_std]

pub mod ctypes;

"""


class FakeLinuxSource(LinuxSource):
    """A kernel checkout whose arch/ directory is built from a dict.

    *arches* maps revision -> arch directory names; checkout() recreates
    arch/ for that revision (in the given, deliberately unsorted, order).
    """

    def __init__(self, linux_dir, arches):
        super().__init__(linux_dir)
        self.arches = arches
        self.calls = []

    def ensure_ready(self):
        self.calls.append(("ensure_ready",))
        self.linux_dir.mkdir(parents=True, exist_ok=True)

    def checkout(self, revision):
        self.calls.append(("checkout", revision))
        arch_root = self.linux_dir / "arch"
        if arch_root.exists():
            for d in arch_root.iterdir():
                if d.is_dir():
                    d.rmdir()
                else:
                    d.unlink()
        else:
            arch_root.mkdir(parents=True)
        for name in self.arches.get(revision, []):
            (arch_root / name).mkdir()
        (arch_root / "Kconfig").write_text("# not an arch\n")


class Recorder:
    """Fake header installer + translator that log every call."""

    def __init__(self, fail_on=None):
        self.installs = []
        self.translations = []
        self.fail_on = fail_on

    def install(self, linux_dir, linux_arch, dest_dir):
        self.installs.append(linux_arch)
        dest_dir = Path(dest_dir)
        assert not dest_dir.exists() or not any(dest_dir.iterdir()), \
            f"headers from a previous arch left in {dest_dir}"
        (dest_dir / "include").mkdir(parents=True, exist_ok=True)

    def translate(self, linux_include, header, mod_rs, mod_name, rust_arch, revision):
        assert Path(linux_include).is_dir()
        if self.fail_on == (revision, rust_arch, mod_name):
            raise CommandError(["bindgen", str(header)], 1)
        self.translations.append((revision, rust_arch, mod_name))
        Path(mod_rs).write_text(f"// {mod_name} for {rust_arch} on Linux {revision}\n")


@pytest.fixture
def crate(tmp_path: Path) -> GenLayout:
    """A crate root with gen/ inside it, ready for a generator run."""
    crate_dir = tmp_path / "linux-raw-sys"
    gen_dir = crate_dir / "gen"
    (crate_dir / "src").mkdir(parents=True)
    (gen_dir / "modules").mkdir(parents=True)
    (gen_dir / "include").mkdir()
    (crate_dir / "Cargo.toml").write_text(
        CARGO_TOML_PREFIX + "# The rest of this file is auto-generated!\nstale = []\n")
    (crate_dir / "src" / "lib.rs").write_text(
        LIB_RS_PREFIX + "// The rest of this file is auto-generated!\npub mod stale;\n")
    (crate_dir / "src" / "ctypes.rs").write_text("pub type c_int = i32;\n")
    for name in ("general.h", "errno.h"):
        (gen_dir / "modules" / name).write_text(f"/* {name} */\n")
    return GenLayout(gen_dir, crate_dir)


@pytest.fixture
def table() -> VersionTable:
    return VersionTable(
        revisions=("v2.6.32", "v4.2", "v5.4"),
        defaults=(("x86", "v2.6.32"), ("x86_64", "v2.6.32"), ("aarch64", "v4.2")),
        default_features=("general", "errno"),
    )


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def fake_source(crate: GenLayout) -> FakeLinuxSource:
    arches = ["x86", "hexagon", "arm64", "arm"]
    return FakeLinuxSource(crate.linux_dir, {
        "v2.6.32": arches,
        "v4.2": arches,
        "v5.4": arches,
    })
