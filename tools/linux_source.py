"""Linux kernel git checkout used as the header source.

The checkout is a treeless partial clone with a sparse checkout limited to
the directories headers_install needs, so switching between revisions
stays cheap.  It is the only mutable shared resource of a run: every
revision switch goes through checkout(), which cleans before and after.
"""

import os
from pathlib import Path

from _env import run

# Not the official git.kernel.org repo: its server doesn't support the
# tree:0 filter used for the partial clone.
LINUX_GIT_URL = "https://github.com/torvalds/linux.git"

SPARSE_CHECKOUT = """/*
!/*/
/include/
/arch/
/scripts/
/tools/"""


class LinuxSource:
    def __init__(self, linux_dir, url=LINUX_GIT_URL):
        self.linux_dir = Path(linux_dir)
        self.url = url

    def ensure_ready(self):
        """Clone (if needed) and configure the sparse checkout."""
        if not (self.linux_dir / ".git").exists():
            run(["git", "clone", self.url, "--filter=tree:0", "--no-checkout",
                 str(self.linux_dir)])
        run(["git", "sparse-checkout", "init"], cwd=self.linux_dir)
        (self.linux_dir / ".git" / "info" / "sparse-checkout").write_text(SPARSE_CHECKOUT)

    def checkout(self, revision):
        """Force the working tree to *revision*, dropping generated files."""
        run(["git", "clean", "-f", "-d"], cwd=self.linux_dir)
        run(["git", "checkout", revision, "-f"], cwd=self.linux_dir)
        run(["git", "clean", "-f", "-d"], cwd=self.linux_dir)

    def arch_dirs(self):
        """Kernel arch/ subdirectory names, sorted.

        Directory iteration order is filesystem dependent; sorting keeps
        the generated output identical across machines.
        """
        arch_root = self.linux_dir / "arch"
        return sorted(e.name for e in os.scandir(arch_root) if e.is_dir())
