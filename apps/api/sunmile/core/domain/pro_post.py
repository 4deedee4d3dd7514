from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sunmile.core.domain.professional import Professional


@dataclass
class ProPost:
    id: int
    professional_id: int
    title: str
    content: str
    image_urls: List[str] = field(default_factory=list)
    created_at: Optional[datetime] = None
    professional: Optional[Professional] = None
