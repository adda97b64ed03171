"""Registry mapping modifier kinds to their behaviors."""

import logging
from typing import Dict, List, Optional

from dobag.modifiers.base import ModifierBehavior

logger = logging.getLogger(__name__)


class ModifierRegistry:
    """Lookup table of modifier behaviors keyed by kind.

    Populated once at startup and read-only afterwards. ``register`` builds a
    new table and swaps it in, so readers always see a complete mapping.
    """

    def __init__(self):
        self._behaviors: Dict[str, ModifierBehavior] = {}

    def register(self, kind: str, behavior: ModifierBehavior) -> None:
        """Register (or replace) the behavior for ``kind``. Last writer wins."""
        behaviors = dict(self._behaviors)
        if kind in behaviors:
            logger.debug(f"Replacing modifier behavior for kind '{kind}'")
        behaviors[kind] = behavior
        self._behaviors = behaviors
        logger.debug(f"Registered modifier kind '{kind}': {type(behavior).__name__}")

    def get(self, kind: str) -> Optional[ModifierBehavior]:
        """Get the behavior for ``kind``, or None if it is not registered."""
        return self._behaviors.get(kind)

    def get_available_types(self) -> List[str]:
        """Registered kinds in registration order."""
        return list(self._behaviors.keys())
