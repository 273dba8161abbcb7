"""Route modules mounted under the bridge prefix by `create_app`."""

from . import bridge, interact, state

__all__ = ["bridge", "interact", "state"]
