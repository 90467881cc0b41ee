"""Self-Hosting Module
===================

Fetches kit build archives and decomposes them into the self-hosting layout.
"""

from .fetcher import ArchiveFetcher
from .pipeline import SelfHostingPipeline, create_session
from .svg import SvgIcon

__all__ = [
    "ArchiveFetcher",
    "SelfHostingPipeline",
    "SvgIcon",
    "create_session",
]
