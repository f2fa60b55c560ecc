import pytest

from conftest import THREE_RECIPES, FakeOpenAI, MemoryStorage, generator_for
from fridgician.errors import ValidationError
from fridgician.models import Constraints
from fridgician.recipe_store import RecipeStore
from fridgician.services import (
    comment_on_recipe,
    draft_from_upload,
    generate_recipes,
    parse_ingredients,
    rate_recipe,
    upload_recipe,
)


UPLOAD = {
    "recipe_name": "Grandma's Congee",
    "description": "Slow cooked rice porridge.",
    "cuisine_type": "Cantonese",
    "cooking_time": "About 1 hour",
    "ingredients_text": "1 cup rice\n\n  8 cups water  \n",
    "instructions_text": "Rinse the rice.\nSimmer for an hour.",
}


async def hydrated(storage: MemoryStorage) -> RecipeStore:
    store = RecipeStore(storage)
    await store.hydrate()
    return store


@pytest.mark.parametrize(
    "text,expected",
    (
        ("egg, tomato", ["egg", "tomato"]),
        ("egg\ntomato,\n, rice ", ["egg", "tomato", "rice"]),
        ("egg, egg, Egg", ["egg", "Egg"]),
        ("  ,\n ", []),
    ),
)
def test_parse_ingredients(text: str, expected: list[str]) -> None:
    assert parse_ingredients(text) == expected


@pytest.mark.asyncio
async def test_generate_recipes_scenario(storage: MemoryStorage) -> None:
    store = await hydrated(storage)
    await store.add_user_recipe(draft_from_upload(**UPLOAD))
    client = FakeOpenAI(THREE_RECIPES)

    got = await generate_recipes(
        ["egg", "tomato"],
        Constraints(),
        generator=generator_for(client),
        store=store,
    )

    assert len(got) == 3
    assert store.recipes[:3] == got
    assert store.recipes[3].source == "user"
    for recipe in got:
        assert recipe.source == "ai"
        assert recipe.rating == 0
        assert recipe.is_favorited is False
        assert recipe.comments == []
    prompt = client.chat.completions.calls[0]["messages"][-1]["content"]
    assert "cooked within" not in prompt


@pytest.mark.asyncio
async def test_generate_recipes_without_ingredients(storage: MemoryStorage) -> None:
    store = await hydrated(storage)
    client = FakeOpenAI(THREE_RECIPES)

    with pytest.raises(ValidationError, match="at least one ingredient"):
        await generate_recipes([], generator=generator_for(client), store=store)

    assert not client.chat.completions.calls
    assert storage.writes == 0


@pytest.mark.asyncio
async def test_blank_comment_never_reaches_store(storage: MemoryStorage) -> None:
    store = await hydrated(storage)
    recipe = await upload_recipe(draft_from_upload(**UPLOAD), store=store)
    writes = storage.writes

    for text in ("", "   \n"):
        with pytest.raises(ValidationError):
            await comment_on_recipe(recipe.id, text, store=store)

    assert store.recipes[0].comments == []
    assert storage.writes == writes


@pytest.mark.asyncio
async def test_comment_is_trimmed(storage: MemoryStorage) -> None:
    store = await hydrated(storage)
    recipe = await upload_recipe(draft_from_upload(**UPLOAD), store=store)
    await comment_on_recipe(recipe.id, "  So good  ", store=store)
    assert store.recipes[0].comments[0].text == "So good"


@pytest.mark.parametrize("value", (0, 6, -1))
@pytest.mark.asyncio
async def test_rating_out_of_range_rejected(storage: MemoryStorage, value: int) -> None:
    store = await hydrated(storage)
    recipe = await upload_recipe(draft_from_upload(**UPLOAD), store=store)
    with pytest.raises(ValidationError):
        await rate_recipe(recipe.id, value, store=store)
    assert store.recipes[0].rating == 0


@pytest.mark.asyncio
async def test_rating_in_range(storage: MemoryStorage) -> None:
    store = await hydrated(storage)
    recipe = await upload_recipe(draft_from_upload(**UPLOAD), store=store)
    await rate_recipe(recipe.id, 5, store=store)
    assert store.recipes[0].rating == 5


def test_draft_from_upload_splits_lines() -> None:
    got = draft_from_upload(**UPLOAD)
    assert got.ingredients == ["1 cup rice", "8 cups water"]
    assert got.instructions == ["Rinse the rice.", "Simmer for an hour."]
    assert got.image_url is None


def test_draft_from_upload_inlines_image() -> None:
    got = draft_from_upload(
        **UPLOAD,
        image=b"\x89PNG",
        image_filename="congee.PNG",
        image_content_type="image/png",
    )
    assert got.image_url == "data:image/png;base64,iVBORw=="


def test_draft_from_upload_rejects_unknown_image_type() -> None:
    with pytest.raises(ValidationError, match="Unsupported image format"):
        draft_from_upload(**UPLOAD, image=b"%PDF", image_filename="congee.pdf")


def test_draft_from_upload_reports_missing_fields() -> None:
    fields = {**UPLOAD, "cuisine_type": " ", "instructions_text": "\n\n"}
    with pytest.raises(ValidationError) as info:
        draft_from_upload(**fields)
    assert "cuisine type" in str(info.value)
    assert "instructions" in str(info.value)
