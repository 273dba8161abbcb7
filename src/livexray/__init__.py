"""livexray: a development-time bridge to inspect and drive a running app.

The client runtime (inside the inspected application) pushes snapshots of
its collector and polls for commands; the host process serves the HTTP
surface external callers talk to.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
