"""Cargo [features] table accumulated across a generator run."""

from gen_errors import InvariantError

# Feature names owned by the aggregate bundles (or by the optional
# dependencies they enable); no revision or header may take them.
RESERVED_FEATURES = frozenset({
    "default", "std", "no_std", "rustc-dep-of-std", "core", "compiler_builtins",
})


class FeatureManifest:
    """Insertion-ordered set of feature names with their origin.

    observe() returns True the first time a name is seen; the caller
    emits exactly one manifest line for it at that point.
    """

    def __init__(self, default_features=()):
        self.default_features = tuple(default_features)
        self._kinds = {}

    def observe(self, name, kind):
        """Register *name* coming from *kind* ("revision" or "header")."""
        if name in RESERVED_FEATURES:
            raise InvariantError(f"{kind} feature {name!r} collides with a reserved feature")
        seen = self._kinds.get(name)
        if seen is None:
            self._kinds[name] = kind
            return True
        if seen != kind:
            raise InvariantError(f"{kind} feature {name!r} collides with a {seen} feature")
        return False

    def __contains__(self, name):
        return name in self._kinds

    def names(self):
        return list(self._kinds)

    @staticmethod
    def feature_line(name):
        return f"{name} = []\n"

    def aggregate_lines(self):
        """The trailing default/std/no_std/rustc-dep-of-std bundles."""
        missing = [f for f in self.default_features if f not in self]
        if missing:
            raise InvariantError(
                f"default features never generated: {', '.join(missing)}")
        default = ", ".join(f'"{f}"' for f in ("std",) + self.default_features)
        return [
            f"default = [{default}]\n",
            "std = []\n",
            "no_std = []\n",
            'rustc-dep-of-std = ["core", "compiler_builtins", "no_std"]\n',
        ]
