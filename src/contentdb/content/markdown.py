"""Markdown body rendering into a structured node tree.

The tree is what the presentation layer consumes: a ``root`` node whose
children are ``element`` nodes (``tag``, ``props``, ``children``), ``text``
nodes (``value``) and raw ``html`` nodes, plus a table of contents.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from markdown_it import MarkdownIt
from markdown_it.tree import SyntaxTreeNode

_md = MarkdownIt("commonmark", {"html": True}).enable(["table", "strikethrough"])

# Headings listed in the table of contents
TOC_DEPTH = 3

_SIMPLE_TAGS = {
    "paragraph": "p",
    "blockquote": "blockquote",
    "bullet_list": "ul",
    "ordered_list": "ol",
    "list_item": "li",
    "strong": "strong",
    "em": "em",
    "s": "del",
    "table": "table",
    "thead": "thead",
    "tbody": "tbody",
    "tr": "tr",
    "th": "th",
    "td": "td",
}


@dataclass
class MarkdownDocument:
    """Rendered markdown body and inferred metadata."""

    body: dict[str, Any]
    title: str
    description: str


def slugify(text: str) -> str:
    """Turn heading text into an anchor id."""
    slug = re.sub(r"[^\w\s-]", "", text.strip().lower())
    return re.sub(r"[\s_-]+", "-", slug).strip("-")


def empty_body() -> dict[str, Any]:
    return {"type": "root", "children": [], "toc": _toc([])}


def text_body(text: str) -> dict[str, Any]:
    """Wrap plain text as a body tree without interpreting it."""
    body = empty_body()
    if text:
        body["children"].append({"type": "text", "value": text})
    return body


def render_markdown(content: str) -> MarkdownDocument:
    """Parse markdown into a body tree.

    The first level-1 heading becomes the inferred title, the text of the
    first top-level paragraph the inferred description.

    Args:
        content: Markdown source without front matter.

    Returns:
        MarkdownDocument with the tree and inferred metadata.
    """
    tree = SyntaxTreeNode(_md.parse(content))
    converter = _Converter()
    children = converter.convert_children(tree)

    title = ""
    description = ""
    for node in children:
        if node.get("type") != "element":
            continue
        if not title and node["tag"] == "h1":
            title = node_text(node)
        elif not description and node["tag"] == "p":
            description = node_text(node)

    body = {"type": "root", "children": children, "toc": _toc(converter.headings)}
    return MarkdownDocument(body=body, title=title, description=description)


def node_text(node: dict[str, Any]) -> str:
    """Concatenate the text below a node."""
    if node.get("type") == "text":
        return node["value"]
    return "".join(node_text(child) for child in node.get("children", []))


class _Converter:
    def __init__(self) -> None:
        self.headings: list[tuple[int, str, str]] = []
        self._ids: dict[str, int] = {}

    def convert_children(self, node: SyntaxTreeNode) -> list[dict[str, Any]]:
        result: list[dict[str, Any]] = []
        for child in node.children:
            result.extend(self.convert(child))
        return result

    def convert(self, node: SyntaxTreeNode) -> list[dict[str, Any]]:
        kind = node.type

        if kind == "text":
            return [{"type": "text", "value": node.content}] if node.content else []
        if kind == "inline":
            return self.convert_children(node)
        if kind == "softbreak":
            return [{"type": "text", "value": "\n"}]
        if kind == "hardbreak":
            return [_element("br")]
        if kind == "hr":
            return [_element("hr")]
        if kind in ("html_block", "html_inline"):
            return [{"type": "html", "value": node.content}]
        if kind == "code_inline":
            return [_element("code", children=[{"type": "text", "value": node.content}])]
        if kind in ("fence", "code_block"):
            return [self._code(node)]
        if kind == "heading":
            return [self._heading(node)]
        if kind == "link":
            props = {"href": node.attrGet("href")}
            if node.attrGet("title"):
                props["title"] = node.attrGet("title")
            return [_element("a", props, self.convert_children(node))]
        if kind == "image":
            props = {"src": node.attrGet("src"), "alt": node.content}
            if node.attrGet("title"):
                props["title"] = node.attrGet("title")
            return [_element("img", props)]
        if kind == "paragraph" and node.hidden:
            # Tight list items render their paragraphs inline
            return self.convert_children(node)
        if kind == "ordered_list":
            start = node.attrGet("start")
            props = {"start": int(start)} if start and int(start) != 1 else {}
            return [_element("ol", props, self.convert_children(node))]
        if kind in ("th", "td"):
            style = node.attrGet("style")
            props = {"style": style} if style else {}
            return [_element(_SIMPLE_TAGS[kind], props, self.convert_children(node))]
        if kind in _SIMPLE_TAGS:
            return [_element(_SIMPLE_TAGS[kind], children=self.convert_children(node))]

        return self.convert_children(node)

    def _heading(self, node: SyntaxTreeNode) -> dict[str, Any]:
        children = self.convert_children(node)
        text = "".join(node_text(c) for c in children)
        anchor = self._unique_id(slugify(text) or "section")
        depth = int(node.tag[1:])
        self.headings.append((depth, anchor, text))
        return _element(node.tag, {"id": anchor}, children)

    def _code(self, node: SyntaxTreeNode) -> dict[str, Any]:
        language = node.info.strip().split(" ")[0] if node.info else ""
        props: dict[str, Any] = {"code": node.content}
        if language:
            props["language"] = language
        code = _element("code", children=[{"type": "text", "value": node.content}])
        return _element("pre", props, [code])

    def _unique_id(self, anchor: str) -> str:
        count = self._ids.get(anchor, 0)
        self._ids[anchor] = count + 1
        return anchor if count == 0 else f"{anchor}-{count}"


def _element(
    tag: str,
    props: dict[str, Any] | None = None,
    children: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    return {"type": "element", "tag": tag, "props": props or {}, "children": children or []}


def _toc(headings: list[tuple[int, str, str]]) -> dict[str, Any]:
    links: list[dict[str, Any]] = []
    for depth, anchor, text in headings:
        if depth < 2 or depth > TOC_DEPTH:
            continue
        link = {"id": anchor, "depth": depth, "text": text}
        if depth > 2 and links:
            links[-1].setdefault("children", []).append(link)
        else:
            links.append(link)
    return {"title": "", "searchDepth": 2, "depth": 2, "links": links}
