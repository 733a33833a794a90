"""Structural queries over a parsed HTML document."""
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

Node = Tag


class HtmlDocument:
    """A parsed HTML page queried with CSS selectors."""

    def __init__(self, html: str):
        self.soup = BeautifulSoup(html, "html.parser")

    def find_all(self, selector: str) -> List[Node]:
        return self.soup.select(selector)

    @staticmethod
    def find(node: Node, selector: str) -> Optional[Node]:
        return node.select_one(selector)

    @staticmethod
    def find_all_in(node: Node, selector: str) -> List[Node]:
        return node.select(selector)

    @staticmethod
    def text(node: Node) -> str:
        return node.get_text().strip()

    @staticmethod
    def has_class(node: Node, name: str) -> bool:
        return name in (node.get("class") or [])

    @staticmethod
    def attr(node: Node, name: str) -> Optional[str]:
        value = node.get(name)
        if isinstance(value, list):
            # multi-valued attributes such as rel come back as lists
            return " ".join(value)
        return value
