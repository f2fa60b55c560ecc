import contextlib
import functools
import logging
from typing import Any, Awaitable, Callable
from urllib.parse import urlsplit

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup
from rich.logging import RichHandler
from starlette.applications import Starlette
from starlette.datastructures import FormData, UploadFile
from starlette.requests import Request
from starlette.responses import HTMLResponse, RedirectResponse
from starlette.routing import Route

from app import config
from app.html.recipe_card import RecipeCard
from fridgician.aopenai import openai_client_factory
from fridgician.errors import GenerationFailure, ValidationError
from fridgician.llm_service import RecipeGenerator
from fridgician.models import Constraints, CookingTime, Recipe
from fridgician.recipe_store import RecipeStore
from fridgician.repository import SqliteStorage, Storage
from fridgician.services import (
    comment_on_recipe,
    draft_from_upload,
    generate_recipes,
    parse_ingredients,
    rate_recipe,
    upload_recipe,
)


CONFIG = config.Config()


logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )


def aHTMLResponse(route: Callable[..., Awaitable[str | tuple[str, int]]]):
    @functools.wraps(route)
    async def wrapper(*args: Any, **kwargs: Any) -> HTMLResponse:
        resp = await route(*args, **kwargs)
        if not isinstance(resp, tuple):
            html, code = resp, 200
        else:
            html, code = resp
        return HTMLResponse(html, status_code=code)

    return wrapper


def _field(form: FormData, name: str) -> str:
    value = form.get(name, "")
    return value if isinstance(value, str) else ""


def _next(form: FormData) -> str:
    next = _field(form, "next").replace("\\", "/")
    parts = urlsplit(next)
    if parts.scheme or parts.netloc or not next.startswith("/"):
        return "/"
    return next


def _constraints(form: FormData) -> Constraints:
    try:
        max_cooking_time = CookingTime(_field(form, "max_cooking_time") or "any")
    except ValueError:
        raise ValidationError("Unknown cooking time.") from None
    return Constraints(
        max_cooking_time=max_cooking_time,
        flavor_preference=_field(form, "flavor_preference"),
        equipment=_field(form, "equipment"),
        serving_size=_field(form, "serving_size"),
    )


def create_app(
    cfg: config.Config | None = None,
    *,
    storage: Storage | None = None,
    generator: RecipeGenerator | None = None,
) -> Starlette:
    cfg = CONFIG if cfg is None else cfg
    configure_logging(cfg.log_level)

    sqlite = SqliteStorage(cfg.db_url) if storage is None else None
    store = RecipeStore(storage if sqlite is None else sqlite, key=cfg.storage_key)

    templates = Environment(
        loader=FileSystemLoader(cfg.html_dir),
        autoescape=select_autoescape(),
    )

    def cards(recipes: tuple[Recipe, ...], next: str) -> list[Markup]:
        return [
            Markup(RecipeCard(r, environment=templates, next=next).render())
            for r in recipes
        ]

    def render_index(
        *,
        error: str | None = None,
        ingredients: str = "",
        constraints: Constraints | None = None,
    ) -> str:
        return templates.get_template("index.html").render(
            cards=cards(store.recipes, "/"),
            favorites_count=len(store.favorites()),
            cooking_times=list(CookingTime),
            constraints=Constraints() if constraints is None else constraints,
            ingredients=ingredients,
            error=error,
        )

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        if sqlite is not None:
            await sqlite.connect()
        try:
            await store.hydrate()
            if app.state.generator is None:
                app.state.generator = RecipeGenerator(
                    openai_client_factory(
                        cfg.openai_api_key, timeout=cfg.request_timeout
                    ),
                    text_model=cfg.text_model,
                    image_model=cfg.image_model,
                    aspect_ratio=cfg.image_aspect_ratio,
                    recipe_count=cfg.recipe_count,
                )
            yield
        finally:
            if sqlite is not None:
                await sqlite.disconnect()

    @aHTMLResponse
    async def homepage(request: Request) -> str:
        return render_index()

    async def generate(request: Request) -> HTMLResponse | RedirectResponse:
        async with request.form() as form:
            ingredients_text = _field(form, "ingredients")
            try:
                constraints = _constraints(form)
            except ValidationError as e:
                return HTMLResponse(
                    render_index(error=str(e), ingredients=ingredients_text),
                    status_code=400,
                )

        try:
            await generate_recipes(
                parse_ingredients(ingredients_text),
                constraints,
                generator=request.app.state.generator,
                store=store,
            )
        except ValidationError as e:
            html, code = render_index(error=str(e), constraints=constraints), 400
        except GenerationFailure as e:
            html, code = (
                render_index(
                    error=str(e),
                    ingredients=ingredients_text,
                    constraints=constraints,
                ),
                502,
            )
        else:
            return RedirectResponse("/", status_code=303)
        return HTMLResponse(html, status_code=code)

    @aHTMLResponse
    async def favorites(request: Request) -> str:
        recipes = store.favorites()
        return templates.get_template("favorites.html").render(
            cards=cards(recipes, "/favorites"),
            favorites_count=len(recipes),
        )

    async def upload(request: Request) -> HTMLResponse | RedirectResponse:
        match request.method.lower():
            case "get":
                return HTMLResponse(
                    templates.get_template("upload.html").render(
                        form={}, favorites_count=len(store.favorites())
                    )
                )
            case "post":
                async with request.form() as form:
                    fields = {
                        name: _field(form, name)
                        for name in (
                            "recipe_name",
                            "description",
                            "cuisine_type",
                            "cooking_time",
                            "ingredients_text",
                            "instructions_text",
                        )
                    }
                    image, filename, content_type = None, "", None
                    upload_file = form.get("image")
                    if isinstance(upload_file, UploadFile) and upload_file.size:
                        # Read while the form is open, the spooled file goes after.
                        image = await upload_file.read()
                        filename = upload_file.filename or ""
                        content_type = upload_file.content_type
                try:
                    draft = draft_from_upload(
                        **fields,
                        image=image,
                        image_filename=filename,
                        image_content_type=content_type,
                    )
                except ValidationError as e:
                    return HTMLResponse(
                        templates.get_template("upload.html").render(
                            form=fields,
                            error=str(e),
                            favorites_count=len(store.favorites()),
                        ),
                        status_code=400,
                    )
                recipe = await upload_recipe(draft, store=store)
                logger.info("Shared recipe %r", recipe.recipe_name)
                return RedirectResponse("/", status_code=303)
            case _:
                raise ValueError("Unsupported method.")

    async def rate(request: Request) -> HTMLResponse | RedirectResponse:
        id = request.path_params["id"]
        async with request.form() as form:
            next = _next(form)
            value = _field(form, "rating")
        try:
            try:
                rating = int(value)
            except ValueError:
                raise ValidationError("Pick a rating between 1 and 5 stars.") from None
            await rate_recipe(id, rating, store=store)
        except ValidationError as e:
            return HTMLResponse(render_index(error=str(e)), status_code=400)
        return RedirectResponse(next, status_code=303)

    async def toggle_favorite(request: Request) -> RedirectResponse:
        id = request.path_params["id"]
        async with request.form() as form:
            next = _next(form)
        await store.toggle_favorite(id)
        return RedirectResponse(next, status_code=303)

    async def comment(request: Request) -> HTMLResponse | RedirectResponse:
        id = request.path_params["id"]
        async with request.form() as form:
            next = _next(form)
            text = _field(form, "text")
        try:
            await comment_on_recipe(id, text, store=store)
        except ValidationError as e:
            return HTMLResponse(render_index(error=str(e)), status_code=400)
        return RedirectResponse(next, status_code=303)

    app = Starlette(
        debug=True if cfg.env == config.Env.local else False,
        routes=[
            Route("/", homepage),
            Route("/generate", generate, methods=["POST"]),
            Route("/favorites", favorites),
            Route("/upload", upload, methods=["GET", "POST"]),
            Route("/recipes/{id}/rating", rate, methods=["POST"]),
            Route("/recipes/{id}/favorite", toggle_favorite, methods=["POST"]),
            Route("/recipes/{id}/comments", comment, methods=["POST"]),
        ],
        lifespan=lifespan,
    )

    app.state.store = store
    app.state.generator = generator
    return app


app = create_app()
