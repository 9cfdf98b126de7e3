"""FastAPI application serving the catalog page."""

import logging
from contextlib import asynccontextmanager
from functools import partial
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse
from jinja2 import Environment, FileSystemLoader, select_autoescape

from oss_directory.application.catalog_service import CatalogQueryService
from oss_directory.domain.errors import QueryError, StoreUnavailable
from oss_directory.domain.query import CatalogQuery
from oss_directory.infrastructure.config import AppConfig
from oss_directory.infrastructure.database import CatalogDatabase
from oss_directory.web.labels import load_labels, resolve_locale
from oss_directory.web.presentation import (
    format_relative_time,
    generate_handle,
    get_repo_hoster,
    language_links,
    sort_options,
)

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"


def _get_env() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    env.filters["handle"] = generate_handle
    env.filters["hoster"] = get_repo_hoster
    return env


def create_app(service: CatalogQueryService, config: Optional[AppConfig] = None, lifespan=None) -> FastAPI:
    """
    Build the web application around a catalog query service.

    Args:
        service: Service answering catalog searches
        config: Application settings. If None, defaults are used.
        lifespan: Optional FastAPI lifespan handler
    """
    if config is None:
        config = AppConfig()

    app = FastAPI(
        title="OSS Directory",
        description="Searchable directory of open-source applications.",
        version="1.0.0",
        lifespan=lifespan,
    )
    template = _get_env().get_template("index.html")

    @app.get("/healthz")
    def health_check():
        return {"status": "ok"}

    @app.get("/", response_class=HTMLResponse)
    def index(
        request: Request,
        q: Optional[str] = Query(default=None, description="Keyword search"),
        tags: Optional[str] = Query(default=None, description="Comma-separated tags"),
        sort: Optional[str] = Query(default=None, description="Sort mode"),
        lang: Optional[str] = Query(default=None, description="Page language"),
    ):
        locale = resolve_locale(lang or config.default_locale)
        labels = load_labels(locale)
        query = CatalogQuery.from_params(q, tags, sort)

        try:
            entries = service.run(query)
        except QueryError as e:
            logger.error(f"Catalog query failed: {e}")
            return PlainTextResponse("Catalog query failed", status_code=500)

        html = template.render(
            locale=locale,
            labels=labels,
            keyword=q or "",
            tag_filter=tags or "",
            sort_options=sort_options(labels, query.sort_key),
            language_links=language_links(request.query_params.multi_items()),
            entries=entries,
            static_url=config.static_url,
            relative_time=partial(format_relative_time, locale=locale),
        )
        return HTMLResponse(html)

    return app


def build_app(config: Optional[AppConfig] = None) -> FastAPI:
    """Build the production application backed by PostgreSQL."""
    if config is None:
        config = AppConfig.from_env()

    database = CatalogDatabase(config.database)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            database.connect()
        except StoreUnavailable as e:
            logger.warning(f"Database not reachable at startup, connecting on first request: {e}")
        try:
            yield
        finally:
            database.close()

    return create_app(CatalogQueryService(database), config, lifespan=lifespan)
