"""Minimal document model the views render into.

Elements carry attributes, children and event listeners. Listeners live on
the element they were attached to, so replacing an element's children makes
the old listeners unreachable. That is what lets repeated renders stay free
of duplicated handlers. Events bubble from the target up to the document.
"""
from __future__ import annotations

import html
import inspect
import re
from collections.abc import Awaitable, Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

Listener = Callable[["Event"], Awaitable[None] | None]

_SELECTOR_RE = re.compile(r"^(?P<tag>[a-zA-Z][\w-]*)?(?P<rest>(?:[.#][\w-]+)*)$")
_VOID_TAGS = frozenset({"img", "br", "hr", "input", "meta", "link"})


@dataclass
class Event:
    type: str
    target: Element | None = None
    detail: dict[str, Any] = field(default_factory=dict)
    current_target: Element | None = None
    propagation_stopped: bool = False

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


def _parse_selector(selector: str) -> tuple[str | None, str | None, set[str]]:
    match = _SELECTOR_RE.match(selector.strip())
    if not match:
        raise ValueError(f"Unsupported selector: {selector!r}")
    tag = match.group("tag")
    element_id = None
    classes: set[str] = set()
    for part in re.findall(r"[.#][\w-]+", match.group("rest")):
        if part[0] == "#":
            element_id = part[1:]
        else:
            classes.add(part[1:])
    return (tag.lower() if tag else None), element_id, classes


class Element:
    def __init__(
        self,
        tag: str,
        attrs: dict[str, Any] | None = None,
        children: list[Element] | None = None,
        text: str = "",
    ):
        self.tag = tag.lower()
        self.attrs: dict[str, str] = {
            key: str(value) for key, value in (attrs or {}).items() if value is not None
        }
        self.text = text
        self.parent: Element | None = None
        self.children: list[Element] = []
        self._listeners: dict[str, list[Listener]] = {}
        for child in children or []:
            self.append(child)

    def __repr__(self) -> str:
        return f"<Element {self.tag} {self.attrs!r}>"

    # ------------------------------------------------------------------
    # Attributes
    # ------------------------------------------------------------------

    def get_attribute(self, name: str) -> str | None:
        return self.attrs.get(name)

    def set_attribute(self, name: str, value: Any) -> None:
        self.attrs[name] = str(value)

    @property
    def id(self) -> str | None:
        return self.attrs.get("id")

    @property
    def class_list(self) -> list[str]:
        return self.attrs.get("class", "").split()

    def has_class(self, name: str) -> bool:
        return name in self.class_list

    def add_class(self, name: str) -> None:
        classes = self.class_list
        if name not in classes:
            classes.append(name)
            self.attrs["class"] = " ".join(classes)

    def remove_class(self, name: str) -> None:
        classes = [cls for cls in self.class_list if cls != name]
        if classes:
            self.attrs["class"] = " ".join(classes)
        else:
            self.attrs.pop("class", None)

    def toggle_class(self, name: str) -> bool:
        if self.has_class(name):
            self.remove_class(name)
            return False
        self.add_class(name)
        return True

    @property
    def dataset(self) -> dict[str, str]:
        return {key[5:]: value for key, value in self.attrs.items() if key.startswith("data-")}

    @property
    def value(self) -> str:
        return self.attrs.get("value", "")

    @value.setter
    def value(self, new_value: str) -> None:
        self.attrs["value"] = str(new_value)

    @property
    def text_content(self) -> str:
        return self.text + "".join(child.text_content for child in self.children)

    @text_content.setter
    def text_content(self, value: Any) -> None:
        self.replace_children()
        self.text = str(value)

    # ------------------------------------------------------------------
    # Tree
    # ------------------------------------------------------------------

    def append(self, child: Element) -> Element:
        if child.parent is not None:
            child.parent.children.remove(child)
        child.parent = self
        self.children.append(child)
        return child

    def _detach(self) -> None:
        self.parent = None
        self._listeners.clear()
        for child in self.children:
            child._detach()

    def replace_children(self, *nodes: Element) -> None:
        """Drop every child (and its listeners) and insert ``nodes``."""
        for child in self.children:
            child._detach()
        self.children = []
        self.text = ""
        for node in nodes:
            self.append(node)

    def replace_with(self, new: Element) -> Element:
        """Swap this element for ``new`` in its parent; listeners stay behind."""
        parent = self.parent
        if parent is None:
            raise ValueError("Cannot replace a detached element")
        if new.parent is not None:
            new.parent.children.remove(new)
        index = parent.children.index(self)
        parent.children[index] = new
        new.parent = parent
        self._detach()
        return new

    def clone(self, deep: bool = True) -> Element:
        """Copy without listeners, like ``cloneNode``."""
        copy = Element(self.tag, dict(self.attrs), text=self.text)
        if deep:
            for child in self.children:
                copy.append(child.clone(deep=True))
        return copy

    def iter_descendants(self) -> Iterator[Element]:
        for child in self.children:
            yield child
            yield from child.iter_descendants()

    def matches(self, selector: str) -> bool:
        tag, element_id, classes = _parse_selector(selector)
        if tag and self.tag != tag:
            return False
        if element_id and self.id != element_id:
            return False
        return classes.issubset(self.class_list)

    def query(self, selector: str) -> Element | None:
        for node in self.iter_descendants():
            if node.matches(selector):
                return node
        return None

    def query_all(self, selector: str) -> list[Element]:
        return [node for node in self.iter_descendants() if node.matches(selector)]

    def closest(self, selector: str) -> Element | None:
        node: Element | None = self
        while node is not None:
            if node.matches(selector):
                return node
            node = node.parent
        return None

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def add_event_listener(self, event_type: str, listener: Listener) -> None:
        listeners = self._listeners.setdefault(event_type, [])
        if listener not in listeners:
            listeners.append(listener)

    def remove_event_listener(self, event_type: str, listener: Listener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, ()))

    def total_listener_count(self, event_type: str) -> int:
        """Listeners for ``event_type`` on this element and all descendants."""
        return self.listener_count(event_type) + sum(
            node.listener_count(event_type) for node in self.iter_descendants()
        )

    async def dispatch_event(self, event: Event) -> Event:
        """Run listeners on the target, then on each ancestor.

        The ancestor path is fixed before the first listener runs, so a
        listener that re-renders its own ancestors does not cut bubbling short.
        """
        event.target = self
        path: list[Element] = []
        node: Element | None = self
        while node is not None:
            path.append(node)
            node = node.parent

        for node in path:
            if event.propagation_stopped:
                break
            event.current_target = node
            for listener in list(node._listeners.get(event.type, ())):
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
        event.current_target = None
        return event

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_html(self) -> str:
        attrs = "".join(f' {key}="{html.escape(value, quote=True)}"' for key, value in self.attrs.items())
        if self.tag in _VOID_TAGS:
            return f"<{self.tag}{attrs}>"
        inner = html.escape(self.text, quote=False) + "".join(child.to_html() for child in self.children)
        return f"<{self.tag}{attrs}>{inner}</{self.tag}>"


def el(tag: str, attrs: dict[str, Any] | None = None, *children: Element, text: str = "") -> Element:
    """Shorthand element factory for templates."""
    return Element(tag, attrs, list(children), text=text)


class Document(Element):
    """Root node holding ``<html>`` and ``<body>``."""

    def __init__(self, body_id: str = "") -> None:
        super().__init__("#document")
        self.document_element = self.append(Element("html", {"lang": "en", "dir": "ltr"}))
        self.body = self.document_element.append(Element("body", {"id": body_id} if body_id else None))

    def set_language_attributes(self, lang: str, direction: str) -> None:
        self.document_element.set_attribute("lang", lang)
        self.document_element.set_attribute("dir", direction)

    @property
    def lang(self) -> str | None:
        return self.document_element.get_attribute("lang")

    @property
    def dir(self) -> str | None:
        return self.document_element.get_attribute("dir")

    def to_html(self) -> str:
        return "<!DOCTYPE html>" + self.document_element.to_html()
