from __future__ import annotations

import pytest

from proposal_docs.layout.errors import ConfigurationError
from proposal_docs.layout.pagination import paginate


def test_ten_items_capacity_eight() -> None:
    pages = paginate(list(range(10)), 8)
    assert [len(p.items) for p in pages] == [8, 2]
    assert [p.number for p in pages] == [1, 2]


@pytest.mark.parametrize("count", [1, 7, 8, 9, 16, 17, 33])
@pytest.mark.parametrize("capacity", [1, 3, 8])
def test_pages_concatenate_back_to_input(count: int, capacity: int) -> None:
    items = [f"svc-{i}" for i in range(count)]
    pages = paginate(items, capacity)

    assert [x for p in pages for x in p.items] == items
    assert all(len(p.items) == capacity for p in pages[:-1])
    assert 1 <= len(pages[-1].items) <= capacity


def test_empty_input_gives_one_empty_page() -> None:
    pages = paginate([], 8)
    assert len(pages) == 1
    assert pages[0].items == ()


@pytest.mark.parametrize("capacity", [0, -3, 2.5, True])
def test_invalid_capacity(capacity) -> None:
    with pytest.raises(ConfigurationError):
        paginate([1, 2, 3], capacity)
