"""
scrape2epg.matcher - Declarative element matching over parsed pages

Adapters describe the structure they expect as Matcher data (tag name,
attribute equalities and an optional text pattern) instead of inline
navigation code, so the same description can be checked against fixtures.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Tuple, Union

from bs4 import BeautifulSoup
from bs4.element import Tag

from .utils import HtmlUtils


def parse_html(text: str) -> BeautifulSoup:
    return BeautifulSoup(text, "html.parser")


@dataclass(frozen=True)
class Matcher:
    """Element predicate: tag + attribute equality list + optional text regex

    For multi-valued attributes such as ``class`` a value matches when it
    equals one of the tokens or the whole space-joined value.
    """

    tag: str
    attrs: Tuple[Tuple[str, str], ...] = ()
    text: Optional[Pattern] = None
    has_attrs: Tuple[str, ...] = ()

    @classmethod
    def of(cls, tag: str, text: Union[str, Pattern, None] = None,
           has: Sequence[str] = (), **attrs: str) -> "Matcher":
        """Convenience constructor: ``Matcher.of("td", class_="time")``"""
        pattern = re.compile(text) if isinstance(text, str) else text
        normalized = tuple((name.rstrip("_").replace("_", "-"), value)
                           for name, value in sorted(attrs.items()))
        return cls(tag=tag, attrs=normalized, text=pattern, has_attrs=tuple(has))

    def matches(self, element) -> bool:
        if not isinstance(element, Tag) or element.name != self.tag:
            return False

        for name in self.has_attrs:
            if not element.has_attr(name):
                return False

        for name, wanted in self.attrs:
            actual = element.get(name)
            if actual is None:
                return False
            if isinstance(actual, list):
                if wanted not in actual and " ".join(actual) != wanted:
                    return False
            elif actual != wanted:
                return False

        if self.text is not None:
            if not self.text.search(HtmlUtils.clean_text(element.get_text(" "))):
                return False

        return True

    def find_all(self, root, recursive: bool = True) -> List[Tag]:
        """All matching descendants of root, in document order"""
        if root is None:
            return []
        return [el for el in root.find_all(self.tag, recursive=recursive) if self.matches(el)]

    def find(self, root, recursive: bool = True) -> Optional[Tag]:
        if root is None:
            return None
        for el in root.find_all(self.tag, recursive=recursive):
            if self.matches(el):
                return el
        return None


def select_path(root, path: Sequence[Matcher]) -> List[Tag]:
    """Apply matchers successively, each one searching inside the previous hits"""
    current = [root] if root is not None else []
    for matcher in path:
        found: List[Tag] = []
        seen = set()
        # Tag equality is structural, identical sibling rows must both survive
        for node in current:
            for hit in matcher.find_all(node):
                if id(hit) not in seen:
                    seen.add(id(hit))
                    found.append(hit)
        current = found
    return current


def text_of(element, separator: str = " ") -> str:
    """Visible text of an element with whitespace collapsed, '' for None"""
    if element is None:
        return ""
    return HtmlUtils.clean_text(element.get_text(separator))
