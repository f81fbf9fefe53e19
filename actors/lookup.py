import logging
from typing import Dict, Optional

from django.db import DatabaseError

from .models import Actor

logger = logging.getLogger(__name__)


class ActorNameLookup:
    """
    address → display name. Misses and store errors both resolve to None;
    results are memoized per instance, so build one per request.
    """

    def __init__(self):
        self._cache: Dict[str, Optional[str]] = {}

    def __call__(self, address: Optional[str]) -> Optional[str]:
        if not address:
            return None
        key = address.lower()
        if key in self._cache:
            return self._cache[key]
        try:
            name = (
                Actor.objects.filter(address__iexact=address, is_active=True)
                .values_list("name", flat=True)
                .first()
            )
        except DatabaseError:
            logger.warning("[actors] name lookup failed address=%s", address, exc_info=True)
            name = None
        self._cache[key] = name
        return name
