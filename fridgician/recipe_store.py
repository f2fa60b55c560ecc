import asyncio
import logging
from typing import Any, Callable, Iterable

import pydantic

from fridgician.errors import PersistenceCorruption
from fridgician.models import Comment, Recipe, RecipeDraft, dump_recipes, load_recipes
from fridgician.repository import Storage


logger = logging.getLogger(__name__)


STORAGE_KEY = "recipes"


class RecipeStore:
    """The recipe collection, newest first, written through to storage.

    Every mutation builds a new tuple in which only the matching recipe is
    replaced, writes it to storage, and only then swaps it in. A mutation
    for an id that is not in the collection does nothing.
    """

    def __init__(self, storage: Storage, *, key: str = STORAGE_KEY) -> None:
        self.storage = storage
        self.key = key
        self._recipes: tuple[Recipe, ...] = ()
        self._lock = asyncio.Lock()

    @property
    def recipes(self) -> tuple[Recipe, ...]:
        return self._recipes

    def favorites(self) -> tuple[Recipe, ...]:
        return tuple(r for r in self._recipes if r.is_favorited)

    def get(self, id: str) -> Recipe | None:
        return next((r for r in self._recipes if r.id == id), None)

    async def hydrate(self) -> None:
        try:
            self._recipes = await self._load()
        except PersistenceCorruption as e:
            logger.warning("Failed to read stored recipes, starting empty: %s", e)
            self._recipes = ()

    async def _load(self) -> tuple[Recipe, ...]:
        raw = await self.storage.get(self.key)
        if raw is None:
            return ()
        try:
            recipes = load_recipes(raw)
        except pydantic.ValidationError as e:
            raise PersistenceCorruption(str(e)) from e
        ids = [r.id for r in recipes]
        if len(set(ids)) != len(ids):
            raise PersistenceCorruption("Duplicate recipe ids.")
        return tuple(recipes)

    async def _commit(self, recipes: tuple[Recipe, ...]) -> None:
        await self.storage.set(self.key, dump_recipes(recipes))
        self._recipes = recipes

    async def _prepend(self, new: Iterable[Recipe]) -> tuple[Recipe, ...]:
        new = tuple(new)
        async with self._lock:
            await self._commit(new + self._recipes)
        return new

    async def _update(self, id: str, change: Callable[[Recipe], dict[str, Any]]) -> None:
        async with self._lock:
            for i, recipe in enumerate(self._recipes):
                if recipe.id == id:
                    updated = recipe.model_copy(update=change(recipe))
                    await self._commit(
                        self._recipes[:i] + (updated,) + self._recipes[i + 1 :]
                    )
                    return

    async def add_generated(self, drafts: Iterable[RecipeDraft]) -> tuple[Recipe, ...]:
        return await self._prepend(draft.enrich("ai") for draft in drafts)

    async def add_user_recipe(self, draft: RecipeDraft) -> Recipe:
        (recipe,) = await self._prepend([draft.enrich("user")])
        return recipe

    async def set_rating(self, id: str, value: int) -> None:
        await self._update(id, lambda _: {"rating": value})

    async def toggle_favorite(self, id: str) -> None:
        await self._update(id, lambda r: {"is_favorited": not r.is_favorited})

    async def add_comment(self, id: str, text: str) -> None:
        comment = Comment.local(text)
        await self._update(id, lambda r: {"comments": [*r.comments, comment]})
