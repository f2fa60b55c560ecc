from typing import Any

from fridgician.models import Constraints, CookingTime


SYSTEM_PROMPT = """
You are a world-class, creative, and detail-oriented assistant for creating
delicious and inspiring recipes from whatever a home cook has left in the fridge.
Your users are competent cooks but are not professionals.
Include every ingredient a recipe needs, with quantities, and keep each
instruction to a single clear step.
""".strip()

PREAMBLE = (
    "Freely come up with {count} diverse recipes that use some or all of these "
    "ingredients: {ingredients}."
)

COOKING_TIME = " Make sure every recipe can be cooked within {time}."

FLAVOR = ' Lean the flavour of the recipes towards "{flavor}".'

EQUIPMENT = " Prefer using the following cooking equipment: {equipment}."

SERVING_SIZE = (
    " Each recipe should serve {serving_size}, and adjust the quantity of every "
    "ingredient to suit that serving size."
)

FORMAT = (
    " For each recipe give a name, a short description, the cuisine type, the "
    "estimated cooking time, a list of all required ingredients with quantities "
    "and step by step cooking instructions. Respond with JSON that matches the "
    "provided structure."
)

IMAGE_PROMPT = (
    'A high quality, delicious looking, professional food photograph of "{name}".'
)


RECIPE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "recipeName": {
            "type": "string",
            "description": "The name of the recipe.",
        },
        "description": {
            "type": "string",
            "description": "A short, enticing description of the dish in 2-3 sentences.",
        },
        "cuisineType": {
            "type": "string",
            "description": "The cuisine, for example Italian, Mexican or Chinese.",
        },
        "cookingTime": {
            "type": "string",
            "description": "Estimated total time to make the dish, e.g. 'about 30 minutes'.",
        },
        "ingredients": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Every ingredient the recipe needs, with quantities.",
        },
        "instructions": {
            "type": "array",
            "items": {"type": "string"},
            "description": "Step by step cooking instructions.",
        },
    },
    "required": [
        "recipeName",
        "description",
        "cuisineType",
        "cookingTime",
        "ingredients",
        "instructions",
    ],
    "additionalProperties": False,
}

# Structured outputs want an object at the root so the array is wrapped.
RECIPES_RESPONSE_FORMAT: dict[str, Any] = {
    "type": "json_schema",
    "json_schema": {
        "name": "recipes",
        "strict": True,
        "schema": {
            "type": "object",
            "properties": {
                "recipes": {"type": "array", "items": RECIPE_SCHEMA},
            },
            "required": ["recipes"],
            "additionalProperties": False,
        },
    },
}


def build_constraints(constraints: Constraints) -> str:
    s = ""
    if constraints.max_cooking_time is not CookingTime.any:
        s += COOKING_TIME.format(time=constraints.max_cooking_time.value)

    if constraints.flavor_preference.strip():
        s += FLAVOR.format(flavor=constraints.flavor_preference.strip())

    if constraints.equipment.strip():
        s += EQUIPMENT.format(equipment=constraints.equipment.strip())

    if constraints.serving_size.strip():
        s += SERVING_SIZE.format(serving_size=constraints.serving_size.strip())

    return s


class GenerateRecipesPrompt:
    def __init__(
        self,
        ingredients: list[str],
        constraints: Constraints | None = None,
        *,
        count: int = 3,
    ) -> None:
        self.ingredients = ingredients
        self.constraints = Constraints() if constraints is None else constraints
        self.count = count

    def __str__(self) -> str:
        return (
            PREAMBLE.format(count=self.count, ingredients=", ".join(self.ingredients))
            + build_constraints(self.constraints)
            + FORMAT
        )


class RecipeImagePrompt:
    def __init__(self, recipe_name: str) -> None:
        self.recipe_name = recipe_name

    def __str__(self) -> str:
        return IMAGE_PROMPT.format(name=self.recipe_name)
