"""
Template renderers for Spindle Generator.

Two engines implement the ``render(template_id, context)`` interface:

- PlaceholderTemplateRenderer: ``{template_id}.txt`` files with literal
  ``$Placeholder`` tokens, replaced case-sensitively in a single pass.
- JinjaTemplateRenderer: ``{template_id}.j2`` files rendered by Jinja2, with
  the context keys available as variables (without the ``$``).

Both load templates through a Jinja2 FileSystemLoader rooted at the
template folder.
"""

import logging
import re
import threading
from typing import Dict, List, Mapping

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateNotFound,
    Undefined,
    UndefinedError,
    ext as jinja2_extensions,
)

from .domain.naming import (
    pluralize,
    to_camel_case,
    to_kebab_case,
    to_pascal_case,
    to_sentence_case,
    to_snake_case,
)
from .exceptions import ConfigurationError, MissingTemplateError, UnresolvedPlaceholderError

logger = logging.getLogger(__name__)

# Anything that looks like a placeholder; used to report leftovers in strict mode.
PLACEHOLDER_TOKEN = r"\$[A-Za-z_][A-Za-z0-9_]*"


class PlaceholderTemplateRenderer:
    """
    Renders ``$Placeholder`` templates by literal replacement.

    Keys are matched longest first, so ``$EntityNamePlural`` is never
    clobbered by ``$EntityName``, and replaced values are not scanned again.
    Placeholders with no value pass through unchanged unless ``strict`` is
    set, in which case rendering fails and names them.

    Args:
        template_folder: Folder with one ``{template_id}.txt`` per template
        strict: Fail on unresolved placeholders
        extension: Template file extension
    """

    def __init__(self, template_folder: str, strict: bool = False, extension: str = ".txt"):
        self.template_folder = template_folder
        self.strict = strict
        self.extension = extension
        self.environment = Environment(
            loader=FileSystemLoader(template_folder, encoding="utf-8"),
            keep_trailing_newline=True,
        )
        self._sources: Dict[str, str] = {}
        self._lock = threading.Lock()

    def source(self, template_id: str) -> str:
        """Raw template text, loaded once per renderer."""
        with self._lock:
            if template_id not in self._sources:
                try:
                    text, filename, _ = self.environment.loader.get_source(
                        self.environment, template_id + self.extension
                    )
                except TemplateNotFound as e:
                    raise MissingTemplateError(template_id, self.template_folder) from e
                logger.debug(f"Loaded template {filename}")
                self._sources[template_id] = text
            return self._sources[template_id]

    def render(self, template_id: str, context: Mapping[str, str]) -> str:
        text = self.source(template_id)

        keys = sorted(context, key=len, reverse=True)
        alternatives = [re.escape(key) for key in keys if key]
        alternatives.append(PLACEHOLDER_TOKEN)
        pattern = re.compile("|".join(alternatives))

        unresolved: List[str] = []

        def substitute(match):
            token = match.group(0)
            if token in context:
                return context[token]
            unresolved.append(token)
            return token

        rendered = pattern.sub(substitute, text)

        if unresolved:
            names = list(dict.fromkeys(unresolved))
            if self.strict:
                raise UnresolvedPlaceholderError(template_id, names)
            logger.debug(f"Template {template_id} left placeholders unresolved: {names}")

        return rendered


class JinjaTemplateRenderer:
    """
    Renders Jinja2 templates with the substitution context.

    Context keys lose their ``$`` prefix (``$EntityName`` becomes
    ``EntityName``). Naming filters (pluralize, camel, snake, kebab, pascal,
    sentence) are registered on the environment. In strict mode undefined
    variables raise UnresolvedPlaceholderError.
    """

    def __init__(self, template_folder: str, strict: bool = False, extension: str = ".j2"):
        self.template_folder = template_folder
        self.strict = strict
        self.extension = extension
        self.environment = Environment(
            loader=FileSystemLoader(template_folder, encoding="utf-8"),
            undefined=StrictUndefined if strict else Undefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            extensions=[
                jinja2_extensions.do,
                jinja2_extensions.loopcontrols,
            ],
        )
        self.environment.filters["pluralize"] = pluralize
        self.environment.filters["camel"] = to_camel_case
        self.environment.filters["pascal"] = to_pascal_case
        self.environment.filters["snake"] = to_snake_case
        self.environment.filters["kebab"] = to_kebab_case
        self.environment.filters["sentence"] = to_sentence_case

    def render(self, template_id: str, context: Mapping[str, str]) -> str:
        try:
            template = self.environment.get_template(template_id + self.extension)
        except TemplateNotFound as e:
            raise MissingTemplateError(template_id, self.template_folder) from e

        variables = {key.lstrip("$"): value for key, value in context.items()}
        try:
            return template.render(**variables)
        except UndefinedError as e:
            raise UnresolvedPlaceholderError(template_id, [str(e)]) from e


def create_renderer(config):
    """Build the renderer selected by ``template_engine``."""
    if config.template_engine == "placeholder":
        return PlaceholderTemplateRenderer(config.template_folder, strict=config.strict_templates)
    if config.template_engine == "jinja":
        return JinjaTemplateRenderer(config.template_folder, strict=config.strict_templates)
    raise ConfigurationError(f"Unknown template engine: {config.template_engine}")
