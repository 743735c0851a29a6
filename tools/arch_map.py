"""Kernel architecture directory -> Rust target_arch mapping."""

from gen_errors import ConfigError

# Order matters: multi-arch entries list the 32-bit variant first.
LINUX_TO_RUST_ARCHES = {
    "arm": ("arm",),
    "arm64": ("aarch64",),
    "avr32": ("avr",),
    # hexagon gets build errors; disable it for now
    "hexagon": (),
    "mips": ("mips", "mips64"),
    "powerpc": ("powerpc", "powerpc64"),
    "riscv": ("riscv32", "riscv64"),
    "s390": ("s390x",),
    "sparc": ("sparc", "sparc64"),
    "x86": ("x86", "x86_64"),
}

# Present in some kernel revisions, no Rust target to generate for.
UNSUPPORTED_LINUX_ARCHES = frozenset({
    "alpha", "cris", "h8300", "m68k", "microblaze", "mn10300", "score",
    "blackfin", "frv", "ia64", "m32r", "m68knommu", "parisc", "sh", "um",
    "xtensa", "unicore32", "c6x", "nios2", "openrisc", "csky", "arc", "nds32",
    "metag", "tile",
})

RUST_ARCHES = frozenset(a for arches in LINUX_TO_RUST_ARCHES.values() for a in arches)


def rust_arches(linux_arch):
    """Return the Rust target_arch names generated from *linux_arch*.

    Raises ConfigError for a directory the tables do not know about; the
    table must be extended whenever the kernel grows a new arch/ entry.
    """
    if linux_arch in LINUX_TO_RUST_ARCHES:
        return LINUX_TO_RUST_ARCHES[linux_arch]
    if linux_arch in UNSUPPORTED_LINUX_ARCHES:
        return ()
    raise ConfigError(f"unrecognized arch: {linux_arch}")


def clang_arch(rust_arch):
    """Clang triple prefix for a Rust target_arch."""
    if rust_arch == "x86":
        return "i686"
    return rust_arch
