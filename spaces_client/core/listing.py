"""Sorting for file listings."""

from typing import Union

from .models import FileListing, SortOrder


def sort_files_by_date(
    files: list[FileListing],
    sort_by_date: Union[SortOrder, str, None] = SortOrder.ASC,
) -> list[FileListing]:
    """
    Order listings by last-modified date.

    Only SortOrder.DESC (or "DESC") sorts newest first; anything else,
    including None or an unknown string, sorts oldest first. sorted() is
    stable in both directions, so entries with the same timestamp keep the
    order the gateway returned them in.
    """
    descending = sort_by_date == SortOrder.DESC
    return sorted(
        files,
        key=lambda entry: entry.last_modified.timestamp(),
        reverse=descending,
    )
