"""Core package for livexray: contracts, serializer, collector, assertions.

Import the pieces directly, e.g.:
    from livexray.core.collector import Collector, XrayContext
    from livexray.core.serializer import serialize
    from livexray.core.settings import settings, load_settings, Settings, get_logger
"""

from __future__ import annotations

__all__ = ["__doc__"]
