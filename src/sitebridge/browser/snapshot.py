"""Fetch a page through a session and describe its title, forms and links.

Only the returned markup is inspected; no script runs. Label lookup is
two independent strategies tried in order: an explicit
``<label for="...">`` anywhere in the document, then the nearest
enclosing ``<label>``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup, Tag

from sitebridge.browser.normalize import flatten_headers
from sitebridge.browser.proxy import final_url, send
from sitebridge.browser.urls import resolve_target_url
from sitebridge.exceptions import ValidationError
from sitebridge.models.snapshot import FieldDescriptor, FormDescriptor, LinkDescriptor, SnapshotResult

if TYPE_CHECKING:
    from sitebridge.store.session_store import Session

logger = logging.getLogger(__name__)

DEFAULT_MAX_LINKS = 200

FIELD_SELECTOR = "input, textarea, select"

LabelStrategy = Callable[[BeautifulSoup, Tag], str | None]


# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------


def _text(tag: Tag | None) -> str | None:
    if tag is None:
        return None
    return tag.get_text().strip() or None


def label_by_for_attribute(soup: BeautifulSoup, element: Tag) -> str | None:
    """Text of the first ``<label for=id>`` matching the element's id."""
    element_id = element.get("id")
    if not element_id:
        return None
    return _text(soup.find("label", attrs={"for": element_id}))


def label_by_ancestor(soup: BeautifulSoup, element: Tag) -> str | None:
    """Text of the nearest ``<label>`` wrapping the element."""
    return _text(element.find_parent("label"))


LABEL_STRATEGIES: tuple[LabelStrategy, ...] = (label_by_for_attribute, label_by_ancestor)


def resolve_label(
    soup: BeautifulSoup,
    element: Tag,
    strategies: Sequence[LabelStrategy] = LABEL_STRATEGIES,
) -> str | None:
    for strategy in strategies:
        label = strategy(soup, element)
        if label:
            return label
    return None


# ---------------------------------------------------------------------------
# Fields and forms
# ---------------------------------------------------------------------------


def _field_type(element: Tag) -> str:
    if element.name == "input":
        return (element.get("type") or "text").strip().lower() or "text"
    return element.name


def _field_value(element: Tag) -> str | None:
    value = element.get("value")
    if value is not None:
        return value
    if element.name == "select":
        option = element.find("option", selected=True) or element.find("option")
        if option is None:
            return None
        option_value = option.get("value")
        return option_value if option_value is not None else _text(option)
    return _text(element)


def extract_fields(soup: BeautifulSoup, form: Tag) -> list[FieldDescriptor]:
    """Named fields of *form* in document order; unnamed fields are skipped."""
    fields: list[FieldDescriptor] = []
    for element in form.select(FIELD_SELECTOR):
        name = element.get("name")
        if not name:
            continue
        fields.append(
            FieldDescriptor(
                name=name,
                type=_field_type(element),
                label=resolve_label(soup, element),
                value=_field_value(element),
            )
        )
    return fields


def _resolve_or_page(page_url: str, target: str | None) -> str:
    try:
        return resolve_target_url(page_url, target)
    except ValidationError:
        logger.debug("Unresolvable form action %r on %s; using page URL", target, page_url)
        return page_url


def extract_forms(soup: BeautifulSoup, page_url: str) -> list[FormDescriptor]:
    """Describe every ``<form>``; actions resolve against *page_url*."""
    forms: list[FormDescriptor] = []
    for index, form in enumerate(soup.find_all("form")):
        forms.append(
            FormDescriptor(
                id=form.get("id") or f"form-{index}",
                action=_resolve_or_page(page_url, form.get("action")),
                method=(form.get("method") or "GET").strip().upper() or "GET",
                fields=extract_fields(soup, form),
            )
        )
    return forms


# ---------------------------------------------------------------------------
# Links and title
# ---------------------------------------------------------------------------


def extract_links(soup: BeautifulSoup, page_url: str, limit: int = DEFAULT_MAX_LINKS) -> list[LinkDescriptor]:
    """First *limit* anchors with an ``href``, resolved against *page_url*."""
    links: list[LinkDescriptor] = []
    for anchor in soup.find_all("a", href=True):
        if len(links) >= limit:
            break
        href = anchor["href"]
        if not href.strip():
            continue
        try:
            resolved = resolve_target_url(page_url, href)
        except ValidationError:
            logger.debug("Skipping unresolvable link %r on %s", href, page_url)
            continue
        links.append(LinkDescriptor(href=resolved, text=anchor.get_text().strip()))
    return links


def extract_title(soup: BeautifulSoup) -> str | None:
    return _text(soup.find("title"))


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def take_snapshot(
    session: Session,
    target_url: str | None = None,
    *,
    max_links: int | None = None,
) -> SnapshotResult:
    """GET *target_url* through *session* and extract its structure.

    Error pages are parsed like any other page.

    Raises:
        ValidationError: If the target does not resolve to an absolute URL.
        NetworkError: If the fetch fails below the HTTP layer.
    """
    if max_links is None:
        from sitebridge.settings import get_settings

        max_links = get_settings().snapshot.max_links

    resolved = resolve_target_url(session.base_url, target_url)
    response = await send(session, "GET", resolved)
    html = response.text
    soup = parse_html(html)

    return SnapshotResult(
        url=final_url(response, resolved),
        status=response.status_code,
        status_text=response.reason_phrase,
        title=extract_title(soup),
        headers=flatten_headers(response.headers),
        html=html,
        forms=extract_forms(soup, resolved),
        links=extract_links(soup, resolved, max_links),
    )
