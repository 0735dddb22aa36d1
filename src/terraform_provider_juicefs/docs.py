"""Render registry-style Markdown docs from the declared schemas."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Tuple

from jinja2 import Environment, FileSystemLoader

from .provider import Provider
from .schema import Schema

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

_TYPE_LABELS = {
    "string": "String",
    "bool": "Boolean",
    "list(string)": "List of String",
    "map(string)": "Map of String",
}


def _type_label(value: str) -> str:
    return _TYPE_LABELS.get(value, value)


def _sections(schema: Schema) -> List[Tuple[str, List[str]]]:
    required, optional, read_only = [], [], []
    for name in sorted(schema.attributes):
        attr = schema.attributes[name]
        if attr.required:
            required.append(name)
        elif attr.optional:
            optional.append(name)
        else:
            read_only.append(name)
    return [("Required", required), ("Optional", optional), ("Read-Only", read_only)]


def make_environment(templates_dir: Optional[Path] = None) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
        keep_trailing_newline=True,
    )
    env.filters["type_label"] = _type_label
    return env


def render_docs(
    provider: Provider, templates_dir: Optional[Path] = None
) -> Dict[Path, str]:
    """Return rendered pages keyed by their path relative to the docs root."""
    env = make_environment(templates_dir)
    pages: Dict[Path, str] = {}

    for type_name, resource in provider.resources().items():
        schema = resource.schema()
        template = env.get_template("resource.md.jinja2")
        short = type_name.split("_", 1)[-1]
        pages[Path("resources") / f"{short}.md"] = template.render(
            type_name=type_name, schema=schema, sections=_sections(schema)
        )

    for type_name, data_source in provider.data_sources().items():
        schema = data_source.schema()
        template = env.get_template("data_source.md.jinja2")
        short = type_name.split("_", 1)[-1]
        pages[Path("data-sources") / f"{short}.md"] = template.render(
            type_name=type_name, schema=schema, sections=_sections(schema)
        )

    return pages


def write_docs(pages: Dict[Path, str], output_dir: Path) -> List[Path]:
    written = []
    for rel_path, content in pages.items():
        out_path = output_dir / rel_path
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(content, encoding="utf-8")
        written.append(out_path)
    return written
