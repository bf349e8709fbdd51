"""Release reconciliation and asset sync, independent of any provider."""

from .backend import PAGE_SIZE, ReleaseBackend
from .engine import reconcile
from .errors import ReleaseError
from .model import AssetDescriptor, DesiredRelease, LocalAsset, ReleaseAsset, RemoteRelease

__all__ = [
    "PAGE_SIZE",
    "AssetDescriptor",
    "DesiredRelease",
    "LocalAsset",
    "ReleaseAsset",
    "ReleaseBackend",
    "ReleaseError",
    "RemoteRelease",
    "reconcile",
]
