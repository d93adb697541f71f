"""Promo code normalization and batch validation."""
import logging
from typing import Iterable, List, Mapping, Protocol

from errors import DuplicatePromoCode, InvalidPromoCode
from models import PromoCode

logger = logging.getLogger(__name__)


class PromoStore(Protocol):
    def resolve_codes(self, codes: List[str]) -> Mapping[str, PromoCode]:
        """Return promos by code, active or not. Unknown codes are absent."""
        ...


def normalize_code(code: str) -> str:
    return code.strip().upper()


def ensure_unique(codes: Iterable[str]) -> List[str]:
    """Normalize codes and refuse the first one seen twice."""
    seen: List[str] = []
    for raw in codes:
        code = normalize_code(raw)
        if code in seen:
            raise DuplicatePromoCode(code)
        seen.append(code)
    return seen


def resolve_promos(codes: List[str], store: PromoStore) -> List[PromoCode]:
    if not codes:
        return []

    found = store.resolve_codes(codes)
    invalid = [c for c in codes if c not in found or not found[c].is_active]
    if invalid:
        logger.info("refusing promo codes: %s", invalid)
        raise InvalidPromoCode(invalid)
    return [found[c] for c in codes]
