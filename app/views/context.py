from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ViewContext:
    use_mock: bool
    actor_id: Optional[str] = None
    actor_email: Optional[str] = None
