#!/usr/bin/env python3
"""Regenerate the linux-raw-sys bindings tree.

Runs from the crate's gen/ directory.  For every Linux revision in
versions.yaml, checks out the kernel, installs the uapi headers for each
supported architecture and runs bindgen over every header in modules/.
The results land in ../src/<rev>/<arch>/<header>.rs, with the gated
module declarations in ../src/lib.rs and the feature list in
../Cargo.toml, both after their "auto-generated" marker lines.

The run is all-or-nothing: any failure aborts, and the next run starts
by wiping the previous output.
"""

import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

import click

from arch_map import rust_arches
from bindgen_helper import run_bindgen
from cargo_features import FeatureManifest
from gen_errors import ConfigError, FileError, GenError
from kernel_headers import install_headers
from linux_source import LinuxSource
from linux_versions import load_versions, module_name
from module_tree import ModuleFile, arch_decls, header_decl, revision_decls
from regen_region import (
    CARGO_TOML_MARKER, LIB_RS_MARKER, read_prefix, truncate_at_marker,
)


@dataclass(frozen=True)
class GenLayout:
    """Where the generator reads its inputs and writes the crate."""
    gen_dir: Path
    crate_dir: Path

    @classmethod
    def from_env(cls, gen_dir=None):
        gen_dir = Path(gen_dir or os.getcwd()).resolve()
        crate_dir = os.environ.get("LINUX_RAW_SYS_DIR")
        crate_dir = Path(crate_dir).resolve() if crate_dir else gen_dir.parent
        return cls(gen_dir, crate_dir)

    @property
    def linux_dir(self):
        return self.gen_dir / "linux"

    @property
    def modules_dir(self):
        return self.gen_dir / "modules"

    @property
    def include_dir(self):
        return self.gen_dir / "include"

    @property
    def rustfmt_config(self):
        return self.gen_dir / "bindgen-rustfmt.toml"

    @property
    def versions_file(self):
        return self.gen_dir / "versions.yaml"

    @property
    def src_dir(self):
        return self.crate_dir / "src"

    @property
    def lib_rs(self):
        return self.src_dir / "lib.rs"

    @property
    def cargo_toml(self):
        return self.crate_dir / "Cargo.toml"


class Generator:
    """Walks revisions x architectures x headers and writes the crate tree.

    The source provider, header installer and translator are injectable so
    the matrix logic can run against a fake kernel tree.
    """

    def __init__(self, layout, table, source=None, install=None, translate=None):
        self.layout = layout
        self.table = table
        self.source = source or LinuxSource(layout.linux_dir)
        self.install = install or install_headers
        self.translate = translate or self._run_bindgen
        self.features = FeatureManifest(table.default_features)
        self._cargo_toml = None
        self._where = {}

    def _run_bindgen(self, linux_include, header, mod_rs, mod_name, rust_arch, revision):
        run_bindgen(linux_include, header, mod_rs, mod_name, rust_arch, revision,
                    include_dir=self.layout.include_dir,
                    rustfmt_config=self.layout.rustfmt_config)

    def headers(self):
        """Header files to translate, sorted by name (never directory order)."""
        modules_dir = self.layout.modules_dir
        if not modules_dir.is_dir():
            raise ConfigError(f"header directory not found: {modules_dir}")
        return sorted(
            (p for p in modules_dir.iterdir() if p.is_file() and p.suffix == ".h"),
            key=lambda p: p.name,
        )

    def preflight(self):
        """Check everything that can be checked before touching any files."""
        scratch = FeatureManifest(self.table.default_features)
        for rev in self.table.revisions:
            scratch.observe(module_name(rev), "revision")
        headers = self.headers()
        if not headers:
            raise ConfigError(f"no headers in {self.layout.modules_dir}")
        for header in headers:
            scratch.observe(header.stem, "header")
        scratch.aggregate_lines()
        read_prefix(self.layout.lib_rs, LIB_RS_MARKER)
        read_prefix(self.layout.cargo_toml, CARGO_TOML_MARKER)

    def run(self):
        try:
            self.preflight()
            self.source.ensure_ready()
            self._clean_src()
            self._generate()
            self._where = {}
            # Leave the kernel checkout in a known state for the next run.
            self.source.checkout(self.table.revisions[0])
        except GenError as e:
            if not e.where:
                e.where = tuple(self._where.values())
            raise
        except OSError as e:
            err = FileError(e)
            err.where = tuple(self._where.values())
            raise err from e
        click.echo("All bindings generated!", err=True)

    def _clean_src(self):
        """Remove the revision modules left by a previous run."""
        for entry in sorted(self.layout.src_dir.iterdir()):
            if entry.is_dir():
                shutil.rmtree(entry)

    def _generate(self):
        truncate_at_marker(self.layout.lib_rs, LIB_RS_MARKER)
        truncate_at_marker(self.layout.cargo_toml, CARGO_TOML_MARKER)

        with tempfile.TemporaryDirectory(prefix="linux-raw-sys") as out_dir, \
                ModuleFile(self.layout.lib_rs, append=True) as lib_rs, \
                open(self.layout.cargo_toml, "a", encoding="utf-8") as cargo_toml:
            self._cargo_toml = cargo_toml
            cargo_toml.write("[features]\n")
            linux_headers = Path(out_dir) / "linux-headers"
            for revision in self.table.revisions:
                self._where = {"revision": f"Linux {revision}"}
                self._generate_revision(revision, lib_rs, linux_headers)
            self._where = {}
            cargo_toml.writelines(self.features.aggregate_lines())

    def _add_feature(self, name, kind):
        # Collect all unique feature names across all architectures.
        if self.features.observe(name, kind):
            self._cargo_toml.write(self.features.feature_line(name))
            self._cargo_toml.flush()

    def _generate_revision(self, revision, lib_rs, linux_headers):
        rev_mod = module_name(revision)
        self._add_feature(rev_mod, "revision")
        lib_rs.emit(revision_decls(rev_mod, self.table.defaults_for(revision)))

        src_vers = self.layout.src_dir / rev_mod
        src_vers.mkdir(parents=True, exist_ok=True)
        with ModuleFile(src_vers / "mod.rs") as vers_mod:
            self.source.checkout(revision)
            for linux_arch in self.source.arch_dirs():
                self._where.pop("arch", None)
                self._where["linux_arch"] = f"kernel arch {linux_arch}"
                arches = rust_arches(linux_arch)
                if not arches:
                    continue
                self._generate_linux_arch(revision, linux_arch, arches, vers_mod,
                                          src_vers, linux_headers)
            self._where.pop("linux_arch", None)

    def _generate_linux_arch(self, revision, linux_arch, arches, vers_mod, src_vers,
                             linux_headers):
        headers_made = False
        for rust_arch in arches:
            # Only build the default versions on their associated architectures.
            if not self.table.should_generate(rust_arch, revision):
                continue
            self._where["arch"] = f"architecture {rust_arch}"

            if not headers_made:
                self.install(self.layout.linux_dir, linux_arch, linux_headers)
                headers_made = True

            click.echo(
                f"Generating all bindings for Linux {revision} architecture {rust_arch}",
                err=True,
            )
            src_arch = src_vers / rust_arch
            src_arch.mkdir(parents=True, exist_ok=True)
            vers_mod.emit(arch_decls(rust_arch))
            with ModuleFile(src_arch / "mod.rs") as arch_mod:
                for header in self.headers():
                    mod_name = header.stem
                    self._where["header"] = f"header {header.name}"
                    self.translate(linux_headers / "include", header,
                                   src_arch / f"{mod_name}.rs", mod_name, rust_arch,
                                   revision)
                    rel = header.relative_to(self.layout.gen_dir).as_posix()
                    arch_mod.emit([header_decl(mod_name, rel)])
                    self._add_feature(mod_name, "header")
                self._where.pop("header", None)

        if headers_made:
            # The installed tree is per-arch; never let it leak into the next one.
            shutil.rmtree(linux_headers)


@click.command()
def main():
    """Regenerate linux-raw-sys bindings for every revision and architecture.

    Run from the crate's gen/ directory.  Takes no arguments.
    """
    try:
        layout = GenLayout.from_env()
        table = load_versions(layout.versions_file)
        Generator(layout, table).run()
    except GenError as e:
        click.echo(f"error: {e}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
