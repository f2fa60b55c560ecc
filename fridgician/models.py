from datetime import datetime, timezone
from enum import Enum
from typing import Literal, TypeAlias
import uuid

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


LOCAL_AUTHOR = "you"


Source: TypeAlias = Literal["ai", "user"]


class CookingTime(Enum):
    any = "any"
    quarter_hour = "15 minutes"
    half_hour = "30 minutes"
    hour = "1 hour"


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Constraints(_Model):
    max_cooking_time: CookingTime = CookingTime.any
    flavor_preference: str = ""
    equipment: str = ""
    serving_size: str = ""


class Comment(_Model):
    id: str
    author: str
    text: str
    timestamp: str

    @classmethod
    def local(cls, text: str) -> "Comment":
        now = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        return cls(
            id=uuid.uuid4().hex,
            author=LOCAL_AUTHOR,
            text=text,
            timestamp=now.replace("+00:00", "Z"),
        )


class _RecipeFields(_Model):
    recipe_name: str
    description: str
    cuisine_type: str
    cooking_time: str
    ingredients: list[str]
    instructions: list[str]
    image_url: str | None = None


class RecipeDraft(_RecipeFields):
    def with_image(self, image_url: str) -> "RecipeDraft":
        return self.model_copy(update={"image_url": image_url})

    def enrich(self, source: Source) -> "Recipe":
        return Recipe(
            id=uuid.uuid4().hex,
            source=source,
            is_favorited=False,
            rating=0,
            comments=[],
            **self.model_dump(),
        )


class Recipe(_RecipeFields):
    id: str
    source: Source
    is_favorited: bool = False
    rating: int = 0
    comments: list[Comment] = Field(default_factory=list)

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, name={self.recipe_name})>"


RECIPES = TypeAdapter(list[Recipe])


def dump_recipes(recipes: tuple[Recipe, ...] | list[Recipe]) -> str:
    return RECIPES.dump_json(
        list(recipes), by_alias=True, exclude_none=True
    ).decode("utf-8")


def load_recipes(raw: str | bytes) -> list[Recipe]:
    return RECIPES.validate_json(raw)
