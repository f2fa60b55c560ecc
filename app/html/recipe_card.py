from datetime import datetime
from urllib.parse import quote

from jinja2 import Environment

from fridgician.models import Comment, Recipe


PLACEHOLDER_URL = "https://placehold.co/400x250/f97316/ffffff?text={name}"

SOURCE_LABELS = {"ai": "AI generated", "user": "Shared by a cook"}


def format_timestamp(timestamp: str) -> str:
    try:
        when = datetime.fromisoformat(timestamp)
    except ValueError:
        return timestamp
    return when.strftime("%d %B %Y, %H:%M")


class RecipeCard:
    def __init__(
        self,
        recipe: Recipe,
        *,
        environment: Environment,
        template_name: str = "recipe-card.html",
        next: str = "/",
    ) -> None:
        self.recipe = recipe
        self.env = environment
        self.name = template_name
        self.next = next

    @property
    def title(self) -> str:
        return self.recipe.recipe_name

    @property
    def source_label(self) -> str:
        return SOURCE_LABELS[self.recipe.source]

    @property
    def image_src(self) -> str:
        if self.recipe.image_url:
            return self.recipe.image_url
        return PLACEHOLDER_URL.format(name=quote(self.recipe.recipe_name))

    @property
    def stars(self) -> list[bool]:
        return [star <= self.recipe.rating for star in range(1, 6)]

    @property
    def comments(self) -> list[tuple[Comment, str]]:
        return [(c, format_timestamp(c.timestamp)) for c in self.recipe.comments]

    def render(self) -> str:
        return self.env.get_template(self.name).render(card=self)
