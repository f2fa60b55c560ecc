import asyncio
import json
from types import SimpleNamespace
from typing import Any

import pytest

from fridgician.llm_service import RecipeGenerator


def recipe_json(name: str, **overrides: Any) -> dict[str, Any]:
    recipe: dict[str, Any] = {
        "recipeName": name,
        "description": f"A tasty {name.lower()}.",
        "cuisineType": "Home cooking",
        "cookingTime": "About 20 minutes",
        "ingredients": ["2 eggs", "1 tomato"],
        "instructions": ["Beat the eggs.", "Cook with the tomato."],
    }
    recipe.update(overrides)
    return recipe


THREE_RECIPES = [
    recipe_json("Tomato Egg Stir Fry"),
    recipe_json("Shakshuka"),
    recipe_json("Tomato Omelette"),
]


class FakeCompletions:
    def __init__(self, content: str | None = None, error: Exception | None = None) -> None:
        self.content = content
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        message = SimpleNamespace(content=self.content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeImages:
    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.fail_for = set() if fail_for is None else fail_for
        self.calls: list[dict[str, Any]] = []

    async def generate(self, **kwargs: Any) -> SimpleNamespace:
        self.calls.append(kwargs)
        await asyncio.sleep(0)
        if any(name in kwargs["prompt"] for name in self.fail_for):
            raise RuntimeError("Image model is busy.")
        return SimpleNamespace(data=[SimpleNamespace(b64_json="aW1hZ2U=")])


class FakeOpenAI:
    def __init__(
        self,
        recipes: Any = None,
        *,
        content: str | None = None,
        error: Exception | None = None,
        fail_images_for: set[str] | None = None,
    ) -> None:
        if content is None and recipes is not None:
            content = json.dumps({"recipes": recipes})
        self.chat = SimpleNamespace(completions=FakeCompletions(content, error))
        self.images = FakeImages(fail_images_for)


class MemoryStorage:
    def __init__(self, data: dict[str, str] | None = None) -> None:
        self.data = {} if data is None else data
        self.writes = 0

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.writes += 1
        self.data[key] = value


def generator_for(client: FakeOpenAI) -> RecipeGenerator:
    return RecipeGenerator(client)  # pyright: ignore[reportArgumentType]


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()
