"""First-match-wins selector cascades over parsed pages.

Source markup is unknown and changes without notice, so every field and every
record container is described by an ordered table of CSS patterns, most specific
first. One generic evaluator walks those tables; adding a source means adding
rows, not code.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Pattern, Sequence, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag
from soupsieve import SelectorSyntaxError

logger = logging.getLogger(__name__)

Container = Union[BeautifulSoup, Tag]


@dataclass(frozen=True)
class Locator:
    selector: str
    attribute: Optional[str] = None
    pattern: Optional[str] = None

    def compiled_pattern(self) -> Optional[Pattern[str]]:
        return re.compile(self.pattern, re.IGNORECASE) if self.pattern else None


@dataclass(frozen=True)
class ContainerCascade:
    primary: Sequence[str]
    generic: Sequence[str] = ()
    # Generic patterns only count as a record list when repeated at least this often.
    min_generic_count: int = 6


def _select(container: Container, selector: str) -> List[Tag]:
    try:
        return container.select(selector)
    except (SelectorSyntaxError, ValueError, NotImplementedError) as exc:
        logger.warning("Skipping unusable selector %r: %s", selector, exc)
        return []


def _node_value(node: Tag, locator: Locator, pattern: Optional[Pattern[str]]) -> str:
    if locator.attribute:
        raw = node.get(locator.attribute)
        if isinstance(raw, list):
            raw = " ".join(raw)
        value = (raw or "").strip()
    else:
        value = node.get_text(" ", strip=True)
    if value and pattern is not None:
        match = pattern.search(value)
        if not match:
            return ""
        value = (match.group(1) if match.groups() else match.group(0)).strip()
    return value


def locate(container: Container, locators: Sequence[Locator]) -> str:
    """Return the first non-empty value produced by ``locators``, or ``""``."""
    for locator in locators:
        pattern = locator.compiled_pattern()
        for node in _select(container, locator.selector):
            value = _node_value(node, locator, pattern)
            if value:
                return value
    return ""


def locate_container(document: Container, cascade: ContainerCascade) -> List[Tag]:
    for selector in cascade.primary:
        elements = _select(document, selector)
        if elements:
            logger.debug("Found %s containers using selector %s", len(elements), selector)
            return elements

    for selector in cascade.generic:
        elements = _select(document, selector)
        if len(elements) >= cascade.min_generic_count:
            logger.debug("Found %s containers using generic selector %s", len(elements), selector)
            return elements
        if elements:
            logger.debug(
                "Ignoring generic selector %s: %s matches is below %s",
                selector,
                len(elements),
                cascade.min_generic_count,
            )
    return []


def absolute_url(base_url: str, href: Optional[str]) -> str:
    if not href:
        return ""
    if href.startswith(("http://", "https://")):
        return href
    return urljoin(base_url.rstrip("/") + "/", href)
