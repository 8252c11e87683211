"""Jinja2 templates used by submoduler-child

The config skeleton is rendered rather than dumped so that it can
carry comments for optional settings.
"""
from typing import Any

from jinja2 import DictLoader, Environment, StrictUndefined

CONFIG_TEMPLATE = """\
submoduler:
  childname: {{ child_name | tojson }}
  type: child

paths:
  lib: lib
  spec: spec

parent:
  # Path to parent submodule (relative or absolute)
  # path: ../parent
"""

RELEASE_BODY_TEMPLATE = """\
Automated release of {{ child_name }} {{ tag }} via Submoduler.
{% if version %}
Version: {{ version }}
{% endif %}"""

_environment = Environment(
    loader=DictLoader(
        {
            "submoduler.yml": CONFIG_TEMPLATE,
            "release_body.md": RELEASE_BODY_TEMPLATE,
        }
    ),
    undefined=StrictUndefined,
    keep_trailing_newline=True,
    autoescape=False,
)


def render(name: str, **context: Any) -> str:
    """Render a built-in template by name"""
    return _environment.get_template(name).render(**context)


def render_config(child_name: str) -> str:
    """Render the initial .submoduler.yml for a child"""
    return render("submoduler.yml", child_name=child_name)


def render_release_body(child_name: str, tag: str, version: str = "") -> str:
    """Render the body text of a hosted release"""
    return render("release_body.md", child_name=child_name, tag=tag, version=version).strip()
