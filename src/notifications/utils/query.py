"""Paged reads over Protean query sets.

Audience and batch queries must not be capped by a provider's default page
size, so callers walk the result set explicitly.
"""

from collections.abc import Iterator

PAGE_SIZE = 200


def iterate_all(queryset, page_size: int = PAGE_SIZE) -> Iterator:
    """Yield every record of ``queryset``, one page at a time."""
    offset = 0
    while True:
        items = queryset.offset(offset).limit(page_size).all().items
        yield from items
        if len(items) < page_size:
            return
        offset += page_size
