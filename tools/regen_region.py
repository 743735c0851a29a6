"""Files with a hand-written prefix and a generated tail.

Everything up to the marker line is kept verbatim; the marker is
rewritten and everything after it is left for the generator to append.
"""

from gen_errors import ConfigError

CARGO_TOML_MARKER = "# The rest of this file is auto-generated!\n"
LIB_RS_MARKER = "// The rest of this file is auto-generated!\n"


def read_prefix(path, marker):
    """Return the contents of *path* before *marker*."""
    try:
        with open(path, encoding="utf-8") as f:
            contents = f.read()
    except OSError as e:
        raise ConfigError(f"cannot read {path}: {e}") from e
    edit_at = contents.find(marker)
    if edit_at < 0:
        raise ConfigError(f"{path}: marker line {marker.strip()!r} not found")
    return contents[:edit_at]


def truncate_at_marker(path, marker):
    """Drop everything after *marker* in *path*, keeping the marker line."""
    prefix = read_prefix(path, marker)
    with open(path, "w", encoding="utf-8") as f:
        f.write(prefix)
        f.write(marker)
