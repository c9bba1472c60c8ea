"""Unit tests for page snapshot extraction."""

from __future__ import annotations

import pytest

from sitebridge.browser.snapshot import (
    extract_forms,
    extract_links,
    extract_title,
    label_by_ancestor,
    label_by_for_attribute,
    parse_html,
    resolve_label,
    take_snapshot,
)
from sitebridge.models.snapshot import FieldDescriptor, SnapshotResult
from sitebridge.exceptions import NetworkError
from sitebridge.settings import get_settings

BASE = "https://x.test"


class TestExtractForms:
    def test_minimal_form(self):
        soup = parse_html('<form id="f1" action="/go" method="post"><input name="q" type="text"></form>')
        forms = extract_forms(soup, BASE)
        assert len(forms) == 1
        form = forms[0]
        assert form.id == "f1"
        assert form.action == "https://x.test/go"
        assert form.method == "POST"
        assert [(f.name, f.type, f.label, f.value) for f in form.fields] == [("q", "text", None, None)]

    def test_defaults(self):
        soup = parse_html("<form><input name='a'></form><form><input name='b'></form>")
        forms = extract_forms(soup, "https://x.test/signup")
        assert [f.id for f in forms] == ["form-0", "form-1"]
        assert all(f.action == "https://x.test/signup" for f in forms)
        assert all(f.method == "GET" for f in forms)
        assert forms[0].fields[0].type == "text"

    def test_fields_in_document_order_skipping_unnamed(self):
        soup = parse_html(
            """<form>
                 <textarea name="bio">  about me  </textarea>
                 <input type="submit" value="Send">
                 <select name="size"><option value="s">S</option><option value="m" selected>M</option></select>
                 <input name="token" type="HIDDEN" value="abc">
               </form>"""
        )
        fields = extract_forms(soup, BASE)[0].fields
        assert [(f.name, f.type, f.value) for f in fields] == [
            ("bio", "textarea", "about me"),
            ("size", "select", "m"),
            ("token", "hidden", "abc"),
        ]

    def test_select_without_selection_uses_first_option(self):
        soup = parse_html("<form><select name='c'><option>Red</option><option>Blue</option></select></form>")
        assert extract_forms(soup, BASE)[0].fields[0].value == "Red"

    def test_empty_value_attribute_kept(self):
        soup = parse_html("<form><input name='e' value=''></form>")
        assert extract_forms(soup, BASE)[0].fields[0].value == ""

    def test_absolute_action_kept(self):
        soup = parse_html("<form action='https://pay.test/charge'></form>")
        assert extract_forms(soup, BASE)[0].action == "https://pay.test/charge"


class TestLabels:
    HTML = """
        <label for="email">  Email  </label>
        <form>
          <input id="email" name="email">
          <label>Remember me <input id="remember" name="remember" type="checkbox"></label>
          <label for="both">Explicit</label>
          <label>Wrapping <input id="both" name="both"></label>
          <input id="orphan" name="orphan">
        </form>
    """

    def _field(self, soup, name):
        return soup.find(attrs={"name": name})

    def test_for_attribute_strategy(self):
        soup = parse_html(self.HTML)
        assert label_by_for_attribute(soup, self._field(soup, "email")) == "Email"
        assert label_by_for_attribute(soup, self._field(soup, "remember")) is None

    def test_ancestor_strategy(self):
        soup = parse_html(self.HTML)
        assert label_by_ancestor(soup, self._field(soup, "remember")) == "Remember me"
        assert label_by_ancestor(soup, self._field(soup, "email")) is None

    def test_explicit_label_takes_priority(self):
        soup = parse_html(self.HTML)
        assert resolve_label(soup, self._field(soup, "both")) == "Explicit"

    def test_no_label(self):
        soup = parse_html(self.HTML)
        assert resolve_label(soup, self._field(soup, "orphan")) is None

    def test_labels_flow_into_fields(self):
        soup = parse_html(self.HTML)
        labels = {f.name: f.label for f in extract_forms(soup, BASE)[0].fields}
        assert labels == {"email": "Email", "remember": "Remember me", "both": "Explicit", "orphan": None}


class TestExtractLinks:
    def test_anchor_without_href_dropped(self):
        soup = parse_html('<a href="/p">Click</a><a>no href</a>')
        links = extract_links(soup, BASE)
        assert [(link.href, link.text) for link in links] == [("https://x.test/p", "Click")]

    def test_capped_in_document_order(self):
        soup = parse_html("".join(f'<a href="/p{i}">{i}</a>' for i in range(250)))
        links = extract_links(soup, BASE)
        assert len(links) == 200
        assert links[0].href == "https://x.test/p0"
        assert links[-1].href == "https://x.test/p199"

    def test_custom_limit(self):
        soup = parse_html('<a href="/a">a</a><a href="/b">b</a>')
        assert len(extract_links(soup, BASE, limit=1)) == 1

    def test_unresolvable_href_skipped(self):
        soup = parse_html('<a href="http://[bad">x</a><a href="ok">ok</a>')
        assert [link.href for link in extract_links(soup, "https://x.test/dir/")] == ["https://x.test/dir/ok"]


class TestExtractTitle:
    @pytest.mark.parametrize(
        ("html", "expected"),
        [
            ("<title> Hello </title>", "Hello"),
            ("<title>   </title>", None),
            ("<p>none</p>", None),
            ("<title>First</title><title>Second</title>", "First"),
        ],
    )
    def test_title(self, html, expected):
        assert extract_title(parse_html(html)) == expected


class TestTakeSnapshot:
    async def test_page_snapshot(self, session):
        result = await take_snapshot(session, "/page")
        assert result.url == "https://x.test/page"
        assert result.status == 200
        assert result.title == "Sign in"
        assert "<form" in result.html
        assert result.headers["content-type"].startswith("text/html")

        login, search = result.forms
        assert login.id == "login"
        assert login.action == "https://x.test/session"
        assert login.method == "POST"
        assert [f.name for f in login.fields] == ["email", "password", "plan"]
        assert login.fields[0].label == "Email address"
        assert login.fields[1].label == "Password"
        assert login.fields[2].value == "pro"
        assert search.id == "form-1"
        assert search.action == "https://x.test/search"
        assert search.fields[0].value == "hello"

        assert [(link.href, link.text) for link in result.links] == [
            ("https://x.test/about", "About us"),
            ("https://other.test/x", "Elsewhere"),
        ]

    async def test_error_page_still_parsed(self, session):
        result = await take_snapshot(session, "/missing")
        assert result.status == 404
        assert result.title == "Not Found"
        assert [link.href for link in result.links] == ["https://x.test/"]

    async def test_max_links_from_settings(self, session, monkeypatch):
        monkeypatch.setenv("SITEBRIDGE_SNAPSHOT__MAX_LINKS", "1")
        get_settings.cache_clear()
        result = await take_snapshot(session, "/page")
        assert len(result.links) == 1

    async def test_snapshot_uses_session_cookies(self, session):
        await take_snapshot(session, "/redirect")
        assert [c.name for c in session.jar.snapshot()] == ["r"]

    async def test_network_failure(self, session):
        with pytest.raises(NetworkError):
            await take_snapshot(session, "/boom")


class TestSerialisedShape:
    def test_absent_label_and_value_omitted(self):
        assert FieldDescriptor(name="q", type="text").model_dump() == {"name": "q", "type": "text"}

    def test_present_label_and_value_kept(self):
        field = FieldDescriptor(name="q", type="text", label="Search", value="")
        assert field.model_dump(mode="json") == {"name": "q", "type": "text", "label": "Search", "value": ""}

    def test_missing_title_serialised_as_null(self):
        result = SnapshotResult(url=BASE, status=200, status_text="OK", headers={}, html="")
        assert "title" in result.model_dump(by_alias=True)
        assert result.model_dump(by_alias=True)["title"] is None
