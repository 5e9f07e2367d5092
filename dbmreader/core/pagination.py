from typing import Optional

from dbmreader.core.config import DOUBLE_PAGE_SPREADS


class DoublePageRule:
    """Pages the comic draws as a single combined image.

    The table is specific to the comic's pagination; nothing is inferred
    beyond the pairs it is given.
    """

    def __init__(self, spreads: Optional[dict[int, int]] = None):
        spreads = dict(DOUBLE_PAGE_SPREADS if spreads is None else spreads)
        overlap = set(spreads) & set(spreads.values())
        if overlap:
            raise ValueError(f"Pages {sorted(overlap)} cannot be both first and second half of a spread")
        self._spreads = spreads
        self._second_pages = frozenset(spreads.values())

    def is_second_page(self, page: int) -> bool:
        return page in self._second_pages

    def second_page_for(self, page: int) -> Optional[int]:
        return self._spreads.get(page)

    def __repr__(self):
        return f"DoublePageRule({self._spreads!r})"


DEFAULT_RULE = DoublePageRule()
