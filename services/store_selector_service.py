"""
Store selector: searchable, incrementally loaded store picker used by
the product screens.

Searches are debounced. Each search starts a new generation; a response
that arrives for an older generation is discarded, so a slow stale
search can never overwrite a newer one.
"""

import asyncio
from typing import Optional

import structlog
from fastapi.concurrency import run_in_threadpool

from exceptions import AppError, BackendApiError, BackendUnauthorizedError, StoreNotFoundError
from models.store import StoreListItem
from utils.text_utils import normalize_search_term

logger = structlog.get_logger(__name__)


class StoreSelector:
    """
    Picker state.

    Args:
        stores: StoreService
        page_size: Stores fetched per page
        debounce_seconds: Delay before a search is sent
    """

    def __init__(self, stores, page_size: int = 50, debounce_seconds: float = 0.3):
        self.stores = stores
        self.page_size = page_size
        self.debounce_seconds = debounce_seconds

        self.items: list[StoreListItem] = []
        self.page = 0
        self.has_more = False
        self.search = ""
        self.loading = False
        self.error: Optional[str] = None
        self.selected: Optional[StoreListItem] = None
        self.opened = False
        self._generation = 0

    # ===================
    # LOADING
    # ===================

    async def open(self) -> None:
        """Load the first unfiltered page."""
        self.opened = True
        self.search = ""
        await self._load(1, append=False, generation=self._next_generation())

    async def search_for(self, term: Optional[str]) -> bool:
        """
        Debounced search from page 1.

        Returns:
            False if a newer search superseded this one
        """
        generation = self._next_generation()
        self.opened = True
        self.search = normalize_search_term(term)

        await asyncio.sleep(self.debounce_seconds)
        if generation != self._generation:
            logger.debug("selector_search_superseded", search=term, phase="debounce")
            return False

        return await self._load(1, append=False, generation=generation)

    async def load_more(self) -> bool:
        """Append the next page, if any."""
        if not self.has_more or self.loading:
            return False
        return await self._load(self.page + 1, append=True, generation=self._generation)

    async def _load(self, page: int, append: bool, generation: int) -> bool:
        self.loading = True
        self.error = None
        search = self.search

        try:
            response = await run_in_threadpool(self.stores.list_stores, page, self.page_size, search)
        except BackendUnauthorizedError:
            self.loading = False
            raise
        except AppError as e:
            if generation != self._generation:
                return False
            self.loading = False
            self.error = (
                e.display_message("Failed to load stores")
                if isinstance(e, BackendApiError) else e.message
            )
            logger.warning("selector_load_failed", page=page, search=search, error=self.error)
            return False

        if generation != self._generation:
            logger.debug("selector_response_discarded", page=page, search=search)
            return False

        self.items = self.items + response.stores if append else list(response.stores)
        self.page = page
        self.has_more = response.has_more
        self.loading = False
        return True

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    # ===================
    # SELECTION
    # ===================

    def select(self, store_id: str) -> StoreListItem:
        """
        Raises:
            StoreNotFoundError: store is not among the loaded items
        """
        for item in self.items:
            if item.id == store_id:
                self.selected = item
                logger.info("store_selected", store_id=store_id, store_name=item.store_name)
                return item
        raise StoreNotFoundError(store_id)

    def clear(self) -> None:
        self.selected = None

    # ===================
    # VIEW
    # ===================

    @property
    def empty_message(self) -> Optional[str]:
        if self.items or self.loading or self.error:
            return None
        if self.search:
            return "No stores found matching your search"
        return "No stores available"

    def view(self) -> dict:
        return {
            "stores": [item.model_dump(by_alias=True) for item in self.items],
            "selected": self.selected.model_dump(by_alias=True) if self.selected else None,
            "search": self.search,
            "page": self.page,
            "has_more": self.has_more,
            "loading": self.loading,
            "error": self.error,
            "empty_message": self.empty_message,
        }
