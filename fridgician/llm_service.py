import asyncio
import json
import logging
from typing import Any

import openai
import pydantic
from openai.types.chat import (
    ChatCompletionMessageParam,
    ChatCompletionSystemMessageParam,
    ChatCompletionUserMessageParam,
)

from fridgician.aopenai import IMAGE_MODEL, TEXT_MODEL, image_size, openai_client_factory
from fridgician.errors import GenerationFailure, ImageUnavailable, ValidationError
from fridgician.models import Constraints, RecipeDraft
from fridgician.prompts import (
    RECIPES_RESPONSE_FORMAT,
    SYSTEM_PROMPT,
    GenerateRecipesPrompt,
    RecipeImagePrompt,
)


logger = logging.getLogger(__name__)


def parse_drafts(content: str) -> list[RecipeDraft]:
    """Turn the text model's JSON into drafts.

    Accepts the wrapped ``{"recipes": [...]}`` shape or a bare array. Anything
    else that is valid JSON is treated as no recipes. Raises
    ``json.JSONDecodeError`` or ``pydantic.ValidationError`` on bad data.
    """
    data: Any = json.loads(content)
    if isinstance(data, dict):
        data = data.get("recipes")
    if not isinstance(data, list):
        return []
    return [RecipeDraft.model_validate(item) for item in data]


class RecipeGenerator:
    def __init__(
        self,
        openai_client: openai.AsyncClient | None = None,
        *,
        text_model: str = TEXT_MODEL,
        image_model: str = IMAGE_MODEL,
        aspect_ratio: str = "4:3",
        recipe_count: int = 3,
    ) -> None:
        self.openai_client = (
            openai_client_factory() if openai_client is None else openai_client
        )
        self.text_model = text_model
        self.image_model = image_model
        self.image_size = image_size(aspect_ratio)
        self.recipe_count = recipe_count

    async def generate(
        self,
        ingredients: list[str],
        constraints: Constraints | None = None,
    ) -> list[RecipeDraft]:
        if not ingredients:
            raise ValidationError("Please add at least one ingredient.")

        drafts = await self.recipe_drafts(ingredients, constraints)
        if not drafts:
            return []

        coros = [self.recipe_image(draft.recipe_name) for draft in drafts]
        images = await asyncio.gather(*coros, return_exceptions=True)

        merged: list[RecipeDraft] = []
        for draft, image in zip(drafts, images):
            if isinstance(image, BaseException):
                logger.warning(
                    "No image for recipe %r: %r", draft.recipe_name, image
                )
                merged.append(draft)
            else:
                merged.append(draft.with_image(image))
        return merged

    async def recipe_drafts(
        self,
        ingredients: list[str],
        constraints: Constraints | None = None,
    ) -> list[RecipeDraft]:
        prompt = GenerateRecipesPrompt(
            ingredients, constraints, count=self.recipe_count
        )
        system_message: ChatCompletionSystemMessageParam = {
            "role": "system",
            "content": SYSTEM_PROMPT,
        }
        user_message: ChatCompletionUserMessageParam = {
            "role": "user",
            "content": str(prompt),
        }
        messages: list[ChatCompletionMessageParam] = [system_message, user_message]

        try:
            resp = await self.openai_client.chat.completions.create(
                model=self.text_model,
                messages=messages,
                response_format=RECIPES_RESPONSE_FORMAT,  # pyright: ignore[reportArgumentType]
            )
            if not resp.choices:
                raise ValueError("No completion.")
            content = resp.choices[0].message.content
            if not content:
                raise ValueError("Empty completion.")
            drafts = parse_drafts(content.strip())
        except (openai.OpenAIError, ValueError, pydantic.ValidationError) as e:
            logger.exception("Error generating recipes")
            raise GenerationFailure() from e

        logger.info("Generated %d recipes", len(drafts))
        return drafts

    async def recipe_image(self, recipe_name: str) -> str:
        """Data uri of a single generated photo of the recipe."""
        resp = await self.openai_client.images.generate(
            model=self.image_model,
            prompt=str(RecipeImagePrompt(recipe_name)),
            n=1,
            size=self.image_size,  # pyright: ignore[reportArgumentType]
            output_format="jpeg",
        )
        if not resp.data or not resp.data[0].b64_json:
            raise ImageUnavailable(f"No image returned for {recipe_name!r}.")
        return f"data:image/jpeg;base64,{resp.data[0].b64_json}"
