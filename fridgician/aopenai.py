import os

import httpx
import openai


OPENAI_TOKEN = os.environ.get("OPENAI_API_KEY")
TEXT_MODEL = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
IMAGE_MODEL = os.environ.get("OPENAI_IMAGE_MODEL", "gpt-image-1")

# Closest size the image models offer for each aspect ratio.
IMAGE_SIZES = {
    "1:1": "1024x1024",
    "4:3": "1536x1024",
    "3:4": "1024x1536",
}


def openai_client_factory(
    token: str | None = None,
    *,
    timeout: float | None = None,
) -> openai.AsyncClient:
    token = OPENAI_TOKEN if token is None else token
    if timeout is None:
        return openai.AsyncClient(api_key=token)
    return openai.AsyncClient(
        api_key=token,
        http_client=httpx.AsyncClient(timeout=timeout),
    )


def image_size(aspect_ratio: str) -> str:
    try:
        return IMAGE_SIZES[aspect_ratio]
    except KeyError:
        raise ValueError(f"Unsupported aspect ratio: {aspect_ratio}") from None
