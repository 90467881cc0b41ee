"""Font Awesome Kit Self-Hosting
=============================

Downloads Font Awesome kit builds from the Font Awesome API and lays them out
for serving from your own storage:

- Obtains and caches access tokens from a long-lived API token
- Creates kit builds and polls them until ready
- Downloads the build zip and extracts css, webfonts and metadata
- Splits the icon metadata into per-icon SVG objects and per-family-style manifests
"""

__version__ = "0.1.0"

from .api import AccessTokenManager, KitBuild, QueryClient, create_kit_build, fetch_kit_metadata
from .core.config import KitSettings
from .core.exceptions import KitError
from .core.models import BuildStatus, KitMetadata, SelfHostingResult
from .selfhost import ArchiveFetcher, SelfHostingPipeline, SvgIcon
from .storage import FileSystem, LocalFileSystem, mkdir_all
from .styles import FamilyStyle, FamilyStyleCollection

__all__ = [
    "AccessTokenManager",
    "ArchiveFetcher",
    "BuildStatus",
    "FamilyStyle",
    "FamilyStyleCollection",
    "FileSystem",
    "KitBuild",
    "KitError",
    "KitMetadata",
    "KitSettings",
    "LocalFileSystem",
    "QueryClient",
    "SelfHostingPipeline",
    "SelfHostingResult",
    "SvgIcon",
    "create_kit_build",
    "fetch_kit_metadata",
    "mkdir_all",
]
