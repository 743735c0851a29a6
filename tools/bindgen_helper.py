"""Run bindgen over one public header for one target arch.

The option set is fixed so that output only depends on the header, the
arch and the kernel revision:

  - no layout tests or doc comments, to keep the generated files small
  - non-exhaustive Rust enums, Debug derives, pointer-typed array params
  - -nostdinc with only the installed kernel headers and our local
    include/ overrides on the search path, so host headers never leak in
  - NULL is blocklisted; every header that pulls in stddef.h defines it
"""

import os

import click

from _env import run
from arch_map import clang_arch

BINDGEN = os.environ.get("BINDGEN", "bindgen")


def bindgen_cmd(linux_include, header_name, mod_rs, rust_arch,
                include_dir="include", rustfmt_config="bindgen-rustfmt.toml"):
    return [
        BINDGEN, header_name,
        "-o", mod_rs,
        "--rustfmt-configuration-file", os.path.abspath(rustfmt_config),
        "--no-layout-tests",
        "--no-doc-comments",
        "--default-enum-style", "rust_non_exhaustive",
        "--use-array-pointers-in-arguments",
        "--blocklist-item", "NULL",
        "--use-core",
        "--ctypes-prefix", "crate::ctypes",
        "--",
        f"--target={clang_arch(rust_arch)}-unknown-linux",
        "-DBITS_PER_LONG=(__SIZEOF_LONG__*__CHAR_BIT__)",
        "-nostdinc",
        "-I", linux_include,
        "-I", include_dir,
    ]


def run_bindgen(linux_include, header_name, mod_rs, mod_name, rust_arch,
                linux_version, include_dir="include",
                rustfmt_config="bindgen-rustfmt.toml"):
    click.echo(
        f"Generating bindings for {mod_name} on Linux {linux_version} "
        f"architecture {rust_arch}",
        err=True,
    )
    run(bindgen_cmd(str(linux_include), str(header_name), str(mod_rs), rust_arch,
                    include_dir=str(include_dir), rustfmt_config=str(rustfmt_config)))
