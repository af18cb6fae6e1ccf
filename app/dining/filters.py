"""Search and filter predicates for the browse view.

Filtering happens after the fetch. The three predicates are independent,
so applying them in any order yields the same intersection.
"""
from collections.abc import Iterable
from typing import Protocol

ALL = "all"


class Filterable(Protocol):
    restaurant_name: str
    location: str
    cuisine_type: str | None
    diet_type: str
    budget: str


def matches_search(request: Filterable, term: str | None) -> bool:
    """Case-insensitive substring match on restaurant, location or cuisine.

    An empty term matches everything. The term is used as typed, so
    surrounding spaces take part in the match.
    """
    if not term:
        return True
    needle = term.lower()
    haystacks = (request.restaurant_name, request.location, request.cuisine_type or "")
    return any(needle in value.lower() for value in haystacks)


def matches_choice(value: str, selected: str | None) -> bool:
    """Exact match unless the filter is "all" or unset."""
    if not selected or selected == ALL:
        return True
    return value == selected


def filter_requests(
    requests: Iterable[Filterable],
    search: str | None = None,
    diet: str | None = ALL,
    budget: str | None = ALL,
) -> list:
    """Keep the requests matching the search term and both choices."""
    return [
        r
        for r in requests
        if matches_search(r, search)
        and matches_choice(r.diet_type, diet)
        and matches_choice(r.budget, budget)
    ]
