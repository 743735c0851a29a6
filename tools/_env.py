"""Shared environment sanitization and process runner for the generator.

git, make and bindgen all inherit whatever the invoking shell exported.
Locale and timestamp variables leak into generated output (sorting, dates
in installed headers), so two machines regenerating the same revision could
produce different trees.

This module provides a whitelist-based approach: start from a clean env
with only functional vars and pin the determinism vars.
"""

import os
import subprocess

import click

from gen_errors import CommandError

# Vars passed through from the host environment when present.
_PASSTHROUGH = frozenset({
    "PATH",
    "HOME", "USER", "LOGNAME",
    "TMPDIR", "TEMP", "TMP",
    "TERM",
    "http_proxy", "https_proxy", "no_proxy",
    "HTTP_PROXY", "HTTPS_PROXY", "NO_PROXY",
    "GIT_SSL_CAINFO",
    "LIBCLANG_PATH", "RUSTFMT",
})

# Vars pinned to fixed values for determinism.
_DETERMINISM_PINS = {
    "LC_ALL": "C",
    "LANG": "C",
    "SOURCE_DATE_EPOCH": "315576000",
}


def clean_env():
    """Return a clean env dict for subprocess env= parameter.

    Copies only whitelisted vars from the host, then applies
    determinism pins.
    """
    env = {}
    for key in _PASSTHROUGH:
        val = os.environ.get(key)
        if val is not None:
            env[key] = val
    env.update(_DETERMINISM_PINS)
    return env


def run(cmd, cwd=None):
    """Run a command with the clean env, raising CommandError on failure."""
    cmd = [str(c) for c in cmd]
    click.echo(f"  + {' '.join(cmd)}", err=True)
    try:
        result = subprocess.run(cmd, cwd=cwd, env=clean_env())
    except FileNotFoundError as e:
        # A missing cwd raises the same error; only a missing tool is 127.
        if e.filename != cmd[0]:
            raise
        raise CommandError(cmd, 127) from None
    if result.returncode != 0:
        raise CommandError(cmd, result.returncode)
