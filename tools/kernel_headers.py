"""Install kernel headers via make headers_install.

Produces the exported uapi tree for one ARCH= that bindgen then reads
through <dest>/include.
"""

import os

from _env import run


def headers_install_cmd(linux_arch, dest_dir):
    return [
        "make", "headers_install",
        f"ARCH={linux_arch}",
        f"INSTALL_HDR_PATH={os.path.abspath(dest_dir)}",
    ]


def install_headers(linux_dir, linux_arch, dest_dir):
    """Run headers_install for *linux_arch* inside the kernel checkout."""
    os.makedirs(dest_dir, exist_ok=True)
    run(headers_install_cmd(linux_arch, dest_dir), cwd=linux_dir)
