import logging
import re
from typing import Any, Dict, List

from pydantic import ValidationError

from cache import CollectionCache
from dizzylab_client import DEFAULT_PAGE_SIZE, DizzylabClient
from exceptions import InvalidArgument, MalformedResponse, StoreUnavailable
from extractor import extract
from models import Disc, DiscListResponse


logger = logging.getLogger(__name__)

ACCOUNT_ID_PATTERN = re.compile(r"[0-9]+")
DOT_SEGMENTS = (".", "..")


class DiscService:
    """Serves dizzylab collections through the cache and single discs straight from upstream"""

    def __init__(
        self,
        cache: CollectionCache,
        client: DizzylabClient,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self.cache = cache
        self.client = client
        self.page_size = page_size

    async def list_discs(self, account_id: str) -> List[Disc]:
        """Return an account's discs in upstream order, fetching on cache miss"""
        account_id = validate_account_id(account_id)

        try:
            entry = self.cache.get(account_id)
        except StoreUnavailable:
            logger.warning(
                "Cache read failed for account %s, fetching from upstream",
                account_id,
                exc_info=True,
            )
            entry = None

        if entry is not None:
            logger.debug("Cache hit for account %s", account_id)
            return list(entry.discs)

        logger.debug("Cache miss for account %s", account_id)
        payload = await self.client.fetch_collection(account_id, self.page_size)
        discs = normalize_discs(payload)

        try:
            self.cache.put(account_id, discs)
        except StoreUnavailable:
            logger.warning(
                "Cache write failed for account %s", account_id, exc_info=True
            )

        return discs

    async def get_disc(self, item_id: str) -> Disc:
        """Fetch and extract a single disc from its detail page; never cached"""
        item_id = validate_item_id(item_id)
        html = await self.client.fetch_detail_page(item_id)
        return extract(html, disc_id=item_id)


def validate_account_id(account_id: Any) -> str:
    """Accept only positive integer strings"""
    if not isinstance(account_id, str) or not ACCOUNT_ID_PATTERN.fullmatch(account_id):
        raise InvalidArgument("Invalid uid")
    if int(account_id) <= 0:
        raise InvalidArgument("Invalid uid")
    return account_id


def validate_item_id(item_id: Any) -> str:
    if not isinstance(item_id, str):
        raise InvalidArgument("Missing disc id")
    item_id = item_id.strip()
    if not item_id:
        raise InvalidArgument("Missing disc id")
    if "/" in item_id or item_id in DOT_SEGMENTS:
        raise InvalidArgument("Invalid disc id")
    return item_id


def normalize_discs(payload: Dict[str, Any]) -> List[Disc]:
    """Validate the listing payload's discs field, keeping upstream order"""
    try:
        listing = DiscListResponse.model_validate(payload)
    except ValidationError as exc:
        raise MalformedResponse("Listing payload has no discs array") from exc

    discs: List[Disc] = []
    for position, raw_disc in enumerate(listing.discs):
        try:
            disc = Disc.model_validate(raw_disc)
        except ValidationError as exc:
            logger.warning("Dropping malformed disc at position %d: %s", position, exc)
            continue
        if not disc.id:
            logger.warning("Dropping disc without id at position %d", position)
            continue
        discs.append(disc)
    return discs
