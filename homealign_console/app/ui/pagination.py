from __future__ import annotations

import math
from dataclasses import dataclass

PAGE_SIZE = 10


@dataclass
class PaginationState:
    page: int = 1
    page_size: int = PAGE_SIZE
    total_count: int = 0

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_count / self.page_size)

    @property
    def last_page(self) -> int:
        return max(1, self.total_pages)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


def next_page(state: PaginationState) -> PaginationState:
    state.page = min(state.page + 1, state.last_page)
    return state


def prev_page(state: PaginationState) -> PaginationState:
    state.page = max(1, state.page - 1)
    return state


def goto_page(state: PaginationState, page: int) -> PaginationState:
    state.page = min(max(1, page), state.last_page)
    return state


def reset_page(state: PaginationState) -> PaginationState:
    state.page = 1
    return state
