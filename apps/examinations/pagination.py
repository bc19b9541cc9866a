"""
Cursor pagination for the GraphQL collections.

Cursors are base64-encoded primary keys. A page is cut from the ordered
queryset by locating the cursor row's position, so any sort order the
collection supports paginates consistently.
"""
import base64
import binascii
from dataclasses import dataclass
from typing import Any, List, Optional

from django.conf import settings

from .errors import ValidationFailed


def encode_cursor(pk):
    return base64.b64encode(str(pk).encode('utf-8')).decode('ascii')


def decode_cursor(cursor):
    try:
        return int(base64.b64decode(cursor.encode('ascii'), validate=True).decode('utf-8'))
    except (binascii.Error, UnicodeError, ValueError):
        raise ValidationFailed('Invalid cursor provided', path=['pagination'])


@dataclass
class Page:
    items: List[Any]
    total_count: int
    has_next_page: bool
    has_previous_page: bool

    @property
    def cursors(self):
        return [encode_cursor(item.pk) for item in self.items]

    @property
    def start_cursor(self) -> Optional[str]:
        return encode_cursor(self.items[0].pk) if self.items else None

    @property
    def end_cursor(self) -> Optional[str]:
        return encode_cursor(self.items[-1].pk) if self.items else None


def _page_size(value):
    default = getattr(settings, 'GRAPHQL_DEFAULT_PAGE_SIZE', 10)
    maximum = getattr(settings, 'GRAPHQL_MAX_PAGE_SIZE', 100)
    if value is None:
        return default
    if value < 1:
        raise ValidationFailed('Page size must be positive', path=['pagination'])
    return min(value, maximum)


def _position(ids, cursor):
    pk = decode_cursor(cursor)
    try:
        return ids.index(pk)
    except ValueError:
        raise ValidationFailed('Cursor does not belong to this collection', path=['pagination'])


def paginate(queryset, first=None, after=None, last=None, before=None):
    """
    Slice an ordered queryset Relay-style.

    `first`/`after` walk forward; `last`/`before` walk backward. When neither
    size is given the default page size applies from the start.
    """
    ids = list(queryset.values_list('pk', flat=True))
    total_count = len(ids)

    start = _position(ids, after) + 1 if after else 0
    end = _position(ids, before) if before else total_count
    if end < start:
        end = start

    if last is not None and first is None:
        size = _page_size(last)
        window_start = max(start, end - size)
        window_end = end
    else:
        size = _page_size(first)
        window_start = start
        window_end = min(end, start + size)

    page_ids = ids[window_start:window_end]
    objects = queryset.in_bulk(page_ids)
    items = [objects[pk] for pk in page_ids]

    return Page(
        items=items,
        total_count=total_count,
        has_next_page=window_end < total_count,
        has_previous_page=window_start > 0,
    )


def order_queryset(queryset, fields, sort_field=None, direction='ASC', default=None):
    """
    Order by a whitelisted sort key ({'TITLE': 'title', ...}), with the
    primary key as tie-breaker so cursors stay stable.
    """
    if sort_field is None:
        ordering = list(default or ['pk'])
    else:
        try:
            column = fields[sort_field]
        except KeyError:
            raise ValidationFailed(f"Unsupported sort field: {sort_field}", path=['sort'])
        prefix = '-' if str(direction).upper() == 'DESC' else ''
        ordering = [f"{prefix}{column}"]
    if 'pk' not in ordering and '-pk' not in ordering:
        ordering.append('pk')
    return queryset.order_by(*ordering)
