"""Template cache construction and page rendering."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING

from jinja2 import (
    Environment,
    FileSystemLoader,
    Template,
    TemplateError,
    TemplateNotFound,
    TemplatesNotFound,
    nodes,
    select_autoescape,
)

from webapp.exceptions import TemplateCacheError, TemplateNotFoundError, TemplateRenderError
from webapp.schemas.template_data import TemplateData

if TYPE_CHECKING:
    from pathlib import Path

    from webapp.config import Settings

logger = logging.getLogger(__name__)

PAGE_SUFFIX = ".page.html"
LAYOUT_SUFFIX = ".layout.html"


def page_name(filename: str) -> str:
    """Strip the page suffix: ``home.page.html`` -> ``home``."""
    return filename[: -len(PAGE_SUFFIX)]


def create_environment(loader: FileSystemLoader) -> Environment:
    """Create a Jinja environment that resolves pages and layouts through ``loader``."""
    return Environment(
        loader=loader,
        autoescape=select_autoescape(["html"]),
        # Cached templates must not pick up edits to layouts on disk
        auto_reload=False,
    )


def _candidate_names(expr: nodes.Expr) -> list[str] | None:
    """Return the literal template names of an extends/include/import target.

    ``None`` means the name is computed at render time and cannot be checked.
    """
    if isinstance(expr, nodes.Const):
        value = expr.value
        if isinstance(value, str):
            return [value]
        if isinstance(value, (tuple, list)) and all(isinstance(v, str) for v in value):
            return list(value)
        return None
    if isinstance(expr, (nodes.Tuple, nodes.List)):
        names = [
            item.value
            for item in expr.items
            if isinstance(item, nodes.Const) and isinstance(item.value, str)
        ]
        if len(names) == len(expr.items):
            return names
    return None


def _exists(env: Environment, loader: FileSystemLoader, name: str) -> bool:
    try:
        loader.get_source(env, name)
    except TemplateNotFound:
        return False
    return True


def _compile_with_references(
    env: Environment, loader: FileSystemLoader, name: str, seen: set[str]
) -> Template:
    """Compile a template and, recursively, every template it extends or includes.

    Jinja resolves ``{% extends %}`` lazily at render time; walking the references
    here moves a missing or broken layout from request time to build time.
    Candidate lists only need one name to resolve, as with ``select_template``,
    and ``include ... ignore missing`` may resolve to nothing.
    """
    template = env.get_template(name)
    seen.add(name)
    source, _filename, _uptodate = loader.get_source(env, name)
    ast = env.parse(source)
    for node in ast.find_all((nodes.Extends, nodes.Include, nodes.Import, nodes.FromImport)):
        candidates = _candidate_names(node.template)
        if candidates is None:
            continue
        if any(candidate in seen for candidate in candidates):
            continue
        found = next((c for c in candidates if _exists(env, loader, c)), None)
        if found is None:
            if isinstance(node, nodes.Include) and node.ignore_missing:
                continue
            if len(candidates) == 1:
                raise TemplateNotFound(candidates[0])
            raise TemplatesNotFound(candidates)
        _compile_with_references(env, loader, found, seen)
    return template


def create_template_cache(template_dir: Path) -> dict[str, Template]:
    """Parse every page template in ``template_dir`` together with its layouts.

    Returns a mapping from page name to compiled template. Raises
    ``TemplateCacheError`` if the directory is missing or any page or layout
    fails to load or parse.
    """
    if not template_dir.is_dir():
        msg = f"Template directory does not exist: {template_dir}"
        raise TemplateCacheError(msg)

    loader = FileSystemLoader(str(template_dir))
    env = create_environment(loader)
    # Layouts are shared by every page, so one broken layout fails the whole build
    for layout_path in sorted(template_dir.glob(f"*{LAYOUT_SUFFIX}")):
        try:
            _compile_with_references(env, loader, layout_path.name, set())
        except (TemplateError, OSError) as exc:
            msg = f"Failed to parse layout {layout_path.name}: {exc}"
            raise TemplateCacheError(msg) from exc

    cache: dict[str, Template] = {}
    for page_path in sorted(template_dir.glob(f"*{PAGE_SUFFIX}")):
        try:
            cache[page_name(page_path.name)] = _compile_with_references(
                env, loader, page_path.name, set()
            )
        except (TemplateError, OSError) as exc:
            msg = f"Failed to parse template {page_path.name}: {exc}"
            raise TemplateCacheError(msg) from exc

    logger.debug("Parsed %d page templates from %s", len(cache), template_dir)
    return cache


def require_pages(template_cache: Mapping[str, Template], pages: Iterable[str]) -> None:
    """Raise ``TemplateCacheError`` unless every page in ``pages`` is cached."""
    missing = sorted(set(pages) - set(template_cache))
    if missing:
        msg = f"Template cache is missing pages: {', '.join(missing)}"
        raise TemplateCacheError(msg)


class TemplateRenderer:
    """Renders pages from the startup cache, or from a fresh parse when caching is off."""

    def __init__(self, settings: Settings, template_cache: Mapping[str, Template]) -> None:
        self._settings = settings
        self._template_cache: Mapping[str, Template] = MappingProxyType(dict(template_cache))

    @property
    def template_cache(self) -> Mapping[str, Template]:
        """Read-only view of the startup template cache."""
        return self._template_cache

    def add_default_data(self, template_data: TemplateData) -> TemplateData:
        """Return a copy of ``template_data`` with data shared by every page filled in."""
        data = {"site_name": self._settings.site_name, **template_data.data}
        return template_data.model_copy(update={"data": data})

    def render(self, page: str, template_data: TemplateData | None = None) -> str:
        """Render ``page`` to a string.

        The full body is produced before anything is returned, so a failure
        never leaves a partially written response.
        """
        if self._settings.use_cache:
            template_cache = self._template_cache
        else:
            template_cache = create_template_cache(self._settings.template_dir)

        template = template_cache.get(page)
        if template is None:
            msg = f"Could not get template {page!r} from template cache"
            raise TemplateNotFoundError(msg)

        context = self.add_default_data(template_data or TemplateData())
        # Templates can raise arbitrary Python errors (a filter's TypeError,
        # ZeroDivisionError); all of them are render failures.
        try:
            body = template.render(**context.model_dump())
        except Exception as exc:
            msg = f"Failed to render template {page!r}: {exc}"
            raise TemplateRenderError(msg) from exc

        logger.debug("Rendered page %s (cached=%s)", page, self._settings.use_cache)
        return body
