from dataclasses import dataclass
from datetime import datetime
import hashlib
import os


@dataclass(frozen=True)
class Version:
    """
    Semantic version information for benchly.

    Includes major, minor, and patch version numbers following semver,
    plus a source hash and release date.
    """
    major: int
    minor: int
    patch: int
    hash: str
    date: datetime

    def __str__(self) -> str:
        """Return the semantic version string (e.g., '0.3.0')."""
        return f"{self.major}.{self.minor}.{self.patch}"

    def full_version(self) -> str:
        """Return full version info including hash and date."""
        return (
            f"{self} (hash: {self.hash[:8]}, "
            f"date: {self.date_string()})"
        )

    def semver(self) -> tuple[int, int, int]:
        """Return semantic version as tuple (major, minor, patch)."""
        return (self.major, self.minor, self.patch)

    def hash_short(self, length: int = 8) -> str:
        """Return shortened hash (default 8 characters)."""
        return self.hash[:length]

    def date_string(self, fmt: str = "%Y-%m-%d") -> str:
        """Return the release date formatted with ``fmt``."""
        return self.date.strftime(fmt)


def _compute_source_hash() -> str:
    """
    Compute a hash of the benchly sources.

    Only ``.py`` files are hashed, in a stable order, so the value is the
    same for every install of the same source tree.
    """
    package_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
    hasher = hashlib.sha256()

    for root, dirs, files in os.walk(package_dir):
        dirs[:] = sorted(d for d in dirs if d not in ('__pycache__', '.pytest_cache'))

        for file in sorted(files):
            if not file.endswith('.py'):
                continue

            filepath = os.path.join(root, file)
            hasher.update(os.path.relpath(filepath, package_dir).encode())
            with open(filepath, 'rb') as f:
                hasher.update(f.read())

    return hasher.hexdigest()


# Current version instance
BENCHLY_VERSION = Version(
    major=0,
    minor=3,
    patch=0,
    hash=_compute_source_hash(),
    date=datetime(2026, 10, 12),
)
