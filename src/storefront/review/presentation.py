"""Optimistic review merge for the product page.

After a shopper submits a review the page shows it straight away as a
pending entry, ahead of the server. Two collections are kept: reviews the
server confirmed and the local optimistic ones. The page renders their
union keyed by id, and an optimistic entry is dropped as soon as its id
shows up among the confirmed reviews.

Items may be mappings (JSON payloads) or objects with ``id`` and
``created_at`` attributes.
"""

from datetime import UTC, datetime

_EPOCH = datetime.min.replace(tzinfo=UTC)


def _get(item, key):
    if isinstance(item, dict):
        return item.get(key)
    return getattr(item, key, None)


def _key(item) -> str:
    return str(_get(item, "id"))


def _created(item) -> datetime:
    created = _get(item, "created_at") or _get(item, "createdAt")
    if isinstance(created, str):
        created = datetime.fromisoformat(created.replace("Z", "+00:00"))
    if created is None:
        return _EPOCH
    return created if created.tzinfo else created.replace(tzinfo=UTC)


def reconcile_pending(confirmed, pending) -> list:
    """Optimistic entries the server has not confirmed yet."""
    confirmed_ids = {_key(item) for item in confirmed}
    return [item for item in pending if _key(item) not in confirmed_ids]


def merge_reviews(confirmed, pending) -> list:
    """Keyed union of both collections, newest first. Confirmed copies win."""
    merged = {}
    for item in reconcile_pending(confirmed, pending):
        merged.setdefault(_key(item), item)
    for item in confirmed:
        merged[_key(item)] = item
    return sorted(merged.values(), key=_created, reverse=True)
