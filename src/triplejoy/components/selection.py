from dataclasses import dataclass
from typing import Optional, Tuple

@dataclass(slots=True)
class Selection:
    """At most one highlighted cell, owned by the session state entity."""
    position: Optional[Tuple[int, int]] = None
