"""Version indexes: where available versions and pinned manifests come from."""

from cartograph.index.base import VersionIndex
from cartograph.index.http import HttpIndex
from cartograph.index.local import LocalIndex

__all__ = ["VersionIndex", "HttpIndex", "LocalIndex"]
