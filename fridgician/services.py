import base64
import re

from fridgician.errors import ValidationError
from fridgician.llm_service import RecipeGenerator
from fridgician.models import Constraints, Recipe, RecipeDraft
from fridgician.recipe_store import RecipeStore


ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}

MIN_RATING = 1
MAX_RATING = 5


def parse_ingredients(text: str) -> list[str]:
    ingredients: list[str] = []
    for part in re.split(r"[,\n]", text):
        part = part.strip()
        if part and part not in ingredients:
            ingredients.append(part)
    return ingredients


def _parse_lines(text: str) -> list[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def _allowed_image(filename: str) -> bool:
    if not filename or "." not in filename:
        return False
    ext = filename.rsplit(".", 1)[1].lower()
    return ext in ALLOWED_IMAGE_EXTENSIONS


def image_data_uri(data: bytes, content_type: str | None = None) -> str:
    content_type = content_type or "image/jpeg"
    return f"data:{content_type};base64,{base64.b64encode(data).decode('utf-8')}"


async def generate_recipes(
    ingredients: list[str],
    constraints: Constraints | None = None,
    *,
    generator: RecipeGenerator,
    store: RecipeStore,
) -> tuple[Recipe, ...]:
    if not ingredients:
        raise ValidationError("Please add at least one ingredient.")
    drafts = await generator.generate(ingredients, constraints)
    return await store.add_generated(drafts)


async def rate_recipe(id: str, value: int, *, store: RecipeStore) -> None:
    if not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError(
            f"Ratings go from {MIN_RATING} to {MAX_RATING} stars, got {value}."
        )
    await store.set_rating(id, value)


async def comment_on_recipe(id: str, text: str, *, store: RecipeStore) -> None:
    text = text.strip()
    if not text:
        raise ValidationError("A comment cannot be empty.")
    await store.add_comment(id, text)


def draft_from_upload(
    *,
    recipe_name: str,
    description: str,
    cuisine_type: str,
    cooking_time: str,
    ingredients_text: str,
    instructions_text: str,
    image: bytes | None = None,
    image_filename: str = "",
    image_content_type: str | None = None,
) -> RecipeDraft:
    fields = {
        "recipe name": recipe_name.strip(),
        "description": description.strip(),
        "cuisine type": cuisine_type.strip(),
        "cooking time": cooking_time.strip(),
    }
    ingredients = _parse_lines(ingredients_text)
    instructions = _parse_lines(instructions_text)

    missing = [name for name, value in fields.items() if not value]
    if not ingredients:
        missing.append("ingredients")
    if not instructions:
        missing.append("instructions")
    if missing:
        raise ValidationError(f"Please provide the {', '.join(missing)}.")

    image_url = None
    if image:
        if not _allowed_image(image_filename):
            raise ValidationError(
                "Unsupported image format. Allowed formats: PNG, JPG, JPEG, GIF, WEBP."
            )
        image_url = image_data_uri(image, image_content_type)

    return RecipeDraft(
        recipe_name=fields["recipe name"],
        description=fields["description"],
        cuisine_type=fields["cuisine type"],
        cooking_time=fields["cooking time"],
        ingredients=ingredients,
        instructions=instructions,
        image_url=image_url,
    )


async def upload_recipe(draft: RecipeDraft, *, store: RecipeStore) -> Recipe:
    return await store.add_user_recipe(draft)
