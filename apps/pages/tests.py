from __future__ import annotations

import os
import threading
from unittest.mock import patch

import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "mmoweb.settings")
os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret")
django.setup()

from django.core.cache import cache
from django.test import Client, RequestFactory, SimpleTestCase, override_settings

from apps.backend.client import BackendError
from apps.backend.services import about
from apps.pages.subnav import (
    DEGRADED_NOTICE,
    PROBES,
    STATIC_ITEMS,
    AboutSubnav,
    NavItem,
    has_data,
    merge,
)
from apps.pages.units import UNITS, PageUnit
from apps.pages.views import content_context, content_namespace, load_content, render_unit

CACHE_KEY = "aboutSubnavItems_v1"


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeBackend:
    """Answers navigation probes from a table; unknown endpoints fail."""

    def __init__(self, answers=None):
        self.answers = dict(answers or {})
        self.calls = []
        self._lock = threading.Lock()

    def get(self, endpoint, params=None):
        with self._lock:
            self.calls.append((endpoint, dict(params or {})))
        key = (endpoint, tuple(sorted((params or {}).items())))
        if key not in self.answers:
            raise BackendError("Network error. Please check your internet connection.")
        answer = self.answers[key]
        if isinstance(answer, Exception):
            raise answer
        return answer


def _answer(endpoint, params=None):
    return (endpoint, tuple(sorted((params or {}).items())))


ALL_PRESENT = {
    _answer(about.ABOUT): {"success": True, "data": {"title": "About"}},
    _answer(about.ORGANIZATION_PROFILE): {"success": True, "data": {"mission": "x"}},
    _answer(about.TEAM_MEMBERS, {"role": "Board"}): {"success": True, "data": [{"name": "A"}]},
    _answer(about.TEAM_MEMBERS, {"role": "Executive"}): {"success": True, "data": [{"name": "B"}]},
}


class HasDataTests(SimpleTestCase):
    def test_shapes(self):
        self.assertTrue(has_data({"data": [1]}))
        self.assertFalse(has_data({"data": []}))
        self.assertTrue(has_data({"data": {}}))
        self.assertTrue(has_data([{"a": 1}]))
        self.assertFalse(has_data([]))
        self.assertFalse(has_data(None))
        self.assertFalse(has_data({"data": None}))


class MergeTests(SimpleTestCase):
    def test_static_items_follow_probed_ones(self):
        probed = [PROBES[0].item]
        self.assertEqual(merge(probed), [PROBES[0].item, *STATIC_ITEMS])

    def test_duplicates_are_dropped(self):
        probed = [STATIC_ITEMS[0]]
        self.assertEqual(merge(probed), [STATIC_ITEMS[0], STATIC_ITEMS[1]])


@override_settings(ABOUT_SUBNAV_TTL_SECONDS=600, ABOUT_SUBNAV_CACHE_KEY=CACHE_KEY)
class AboutSubnavTests(SimpleTestCase):
    def setUp(self):
        self.store = {}
        self.clock = FakeClock()

    def subnav(self, backend):
        return AboutSubnav(self.store, backend, clock=self.clock)

    def test_all_probes_present(self):
        backend = FakeBackend(ALL_PRESENT)
        state = self.subnav(backend).load()
        self.assertFalse(state.degraded)
        self.assertFalse(state.from_cache)
        self.assertEqual(
            [item.to for item in state.items],
            [
                "/about/organization-profile",
                "/about/mission-vision",
                "/about/board-directors",
                "/about/executive-team",
                "/about/strategic-units",
                "/about/organizational-structure",
            ],
        )
        self.assertEqual(len(backend.calls), 4)

    def test_empty_collections_are_left_out(self):
        answers = dict(ALL_PRESENT)
        answers[_answer(about.TEAM_MEMBERS, {"role": "Board"})] = {"success": True, "data": []}
        state = self.subnav(FakeBackend(answers)).load()
        self.assertNotIn("/about/board-directors", [item.to for item in state.items])
        self.assertFalse(state.degraded)

    def test_cache_entry_shape(self):
        self.subnav(FakeBackend(ALL_PRESENT)).load()
        entry = self.store[CACHE_KEY]
        self.assertEqual(entry["ts"], int(self.clock.now * 1000))
        self.assertEqual(
            entry["items"][0],
            {"to": "/about/organization-profile", "labelKey": "about.organizationProfile", "fallback": "Organization Profile"},
        )

    def test_second_load_within_ttl_uses_cache(self):
        first = self.subnav(FakeBackend(ALL_PRESENT)).load()

        self.clock.now += 599
        backend = FakeBackend()
        second = self.subnav(backend).load()
        self.assertTrue(second.from_cache)
        self.assertEqual(second.items, first.items)
        self.assertEqual(backend.calls, [])

    def test_entry_exactly_at_ttl_is_still_fresh(self):
        self.subnav(FakeBackend(ALL_PRESENT)).load()
        self.clock.now += 600
        backend = FakeBackend()
        self.assertTrue(self.subnav(backend).load().from_cache)
        self.assertEqual(backend.calls, [])

    def test_expired_entry_probes_again(self):
        self.subnav(FakeBackend(ALL_PRESENT)).load()

        self.clock.now += 601
        answers = {_answer(about.ABOUT): {"data": {"title": "About"}}}
        backend = FakeBackend(answers)
        state = self.subnav(backend).load()
        self.assertFalse(state.from_cache)
        self.assertEqual(len(backend.calls), 4)
        self.assertEqual(
            [item.to for item in state.items],
            ["/about/organization-profile", "/about/strategic-units", "/about/organizational-structure"],
        )
        self.assertEqual(self.store[CACHE_KEY]["ts"], int(self.clock.now * 1000))

    def test_all_probes_failing_is_degraded_and_not_cached(self):
        state = self.subnav(FakeBackend()).load()
        self.assertTrue(state.degraded)
        self.assertEqual(state.notice, DEGRADED_NOTICE)
        self.assertEqual(state.items, list(STATIC_ITEMS))
        self.assertNotIn(CACHE_KEY, self.store)

        # next load tries the backend again
        backend = FakeBackend(ALL_PRESENT)
        state = self.subnav(backend).load()
        self.assertFalse(state.degraded)
        self.assertEqual(len(backend.calls), 4)

    def test_malformed_cache_entry_is_ignored(self):
        for raw in ("junk", {"items": "x", "ts": 1}, {"items": [{"nope": 1}], "ts": self.clock.now * 1000}):
            with self.subTest(raw=raw):
                self.store[CACHE_KEY] = raw
                backend = FakeBackend(ALL_PRESENT)
                state = self.subnav(backend).load()
                self.assertFalse(state.from_cache)
                self.assertEqual(len(backend.calls), 4)

    def test_probes_run_with_their_parameters(self):
        backend = FakeBackend(ALL_PRESENT)
        self.subnav(backend).load()
        self.assertCountEqual(
            backend.calls,
            [
                (about.ABOUT, {}),
                (about.ORGANIZATION_PROFILE, {}),
                (about.TEAM_MEMBERS, {"role": "Board"}),
                (about.TEAM_MEMBERS, {"role": "Executive"}),
            ],
        )

    def test_nav_item_round_trip(self):
        item = NavItem("/about/x", "about.x", "X")
        self.assertEqual(NavItem.from_dict(item.as_dict()), item)


class PageUnitTests(SimpleTestCase):
    def test_overview_endpoint(self):
        self.assertEqual(UNITS["faq"].endpoint(), "faqs")
        self.assertEqual(UNITS["faq"].endpoint({}), "faqs")

    def test_detail_endpoint_fills_placeholder(self):
        self.assertEqual(UNITS["project_detail"].endpoint({"slugOrId": "abc123"}), "projects/abc123")

    def test_detail_endpoint_uses_generic_parameter(self):
        unit = PageUnit("x", "X", source="things", detail_source="things/slug/{slug}")
        self.assertEqual(unit.endpoint({"id": "a/b"}), "things/slug/a%2Fb")

    def test_templates(self):
        self.assertEqual(
            UNITS["our_story"].templates,
            ("pages/our_story.html", "pages/about/page.html", "pages/page.html"),
        )

    def test_content_namespace(self):
        self.assertEqual(content_namespace("jobs/published"), "jobs")
        self.assertEqual(content_namespace("/organization-profile/board"), "organization-profile")
        self.assertEqual(content_namespace("projects?status=ongoing"), "projects")


class ContentContextTests(SimpleTestCase):
    def test_collection(self):
        context = content_context({"data": [{"_id": "a1", "title": "T"}], "pagination": {"pages": 2}})
        self.assertEqual(context["items"], [{"_id": "a1", "title": "T", "pk": "a1"}])
        self.assertIsNone(context["item"])
        self.assertEqual(context["pagination"], {"pages": 2})

    def test_single_record(self):
        context = content_context({"data": {"id": 7, "title": "T"}})
        self.assertEqual(context["item"]["pk"], "7")
        self.assertEqual(context["items"], [])

    def test_nothing(self):
        context = content_context(None)
        self.assertEqual(context["items"], [])
        self.assertIsNone(context["item"])


@override_settings(BACKEND_CONTENT_CACHE_TTL=60)
class LoadContentTests(SimpleTestCase):
    def setUp(self):
        cache.clear()
        self.request = RequestFactory().get("/faq")

    @patch("apps.pages.views.content.fetch")
    def test_success_is_cached(self, fetch):
        fetch.return_value = {"data": [1], "pagination": None}
        self.assertEqual(load_content(self.request, "faqs"), ({"data": [1], "pagination": None}, None))
        self.assertEqual(load_content(self.request, "faqs")[0], {"data": [1], "pagination": None})
        fetch.assert_called_once()

    @patch("apps.pages.views.content.fetch")
    def test_failure_is_returned_and_not_cached(self, fetch):
        fetch.side_effect = BackendError("Server error. Please try again later.", status=500)
        payload, error = load_content(self.request, "faqs")
        self.assertIsNone(payload)
        self.assertEqual(error.status, 500)

        fetch.side_effect = None
        fetch.return_value = {"data": [1], "pagination": None}
        self.assertEqual(load_content(self.request, "faqs")[0]["data"], [1])
        self.assertEqual(fetch.call_count, 2)

    @patch("apps.pages.views.content.fetch")
    def test_parameters_are_part_of_the_key(self, fetch):
        fetch.side_effect = lambda client, endpoint, params: {"data": [params.get("page")], "pagination": None}
        self.assertEqual(load_content(self.request, "news", {"page": "1"})[0]["data"], ["1"])
        self.assertEqual(load_content(self.request, "news", {"page": "2"})[0]["data"], ["2"])
        self.assertEqual(fetch.call_count, 2)


@override_settings(ALLOWED_HOSTS=["testserver"])
class RenderUnitTests(SimpleTestCase):
    def setUp(self):
        self.client = Client()

    @patch("apps.pages.views.load_content")
    def test_backend_failure_shows_error(self, load):
        load.return_value = (None, BackendError("Server error. Please try again later.", status=500))
        resp = self.client.get("/faq")
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Server error. Please try again later.")

    @patch("apps.pages.views.load_content")
    def test_missing_detail_is_not_found(self, load):
        load.return_value = (None, BackendError("Resource not found.", status=404))
        resp = self.client.get("/projects/missing")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(load.call_args[0][1], "projects/missing")

    @patch("apps.pages.views.load_content")
    def test_entries_without_title_use_name(self, load):
        load.return_value = (
            {
                "data": [
                    {"_id": "p1", "name": {"en": "Clean water"}, "description": {"en": "Wells in Herat"}},
                    {"_id": "p2", "title": {"en": "School meals"}, "featuredImage": "uploads/meals.jpg"},
                ],
                "pagination": None,
            },
            None,
        )
        resp = self.client.get("/faq")
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Clean water")
        self.assertContains(resp, "Wells in Herat")
        self.assertContains(resp, "School meals")
        self.assertContains(resp, "uploads/meals.jpg")

    @patch("apps.pages.views.load_content")
    def test_unit_without_source_does_not_fetch(self, load):
        resp = self.client.get("/shop")
        self.assertEqual(resp.status_code, 200)
        load.assert_not_called()

    @patch("apps.pages.views.load_content", return_value=(None, None))
    def test_render_unit_directly(self, load):
        request = RequestFactory().get("/faq")
        request.session = {}
        resp = render_unit(request, UNITS["faq"])
        self.assertEqual(resp.status_code, 200)

    @patch("apps.pages.views.load_content", return_value=({"data": {"title": "Profile"}}, None))
    @patch("apps.pages.templatetags.pages_tags.AboutSubnav")
    def test_about_pages_carry_the_subnav(self, subnav, load):
        from apps.pages.subnav import SubnavState

        subnav.return_value.load.return_value = SubnavState(list(STATIC_ITEMS), degraded=True)
        resp = self.client.get("/about/organization-profile")
        self.assertContains(resp, "Strategic Units")
        self.assertContains(resp, DEGRADED_NOTICE)

    @patch("apps.pages.views.load_content")
    def test_search(self, load):
        load.return_value = ({"data": [{"_id": "n1", "title": {"en": "Flood relief"}}], "pagination": None}, None)
        resp = self.client.get("/search", {"q": "flood"})
        self.assertContains(resp, "Flood relief")
        self.assertEqual(load.call_args[0][1], "news")
        self.assertEqual(load.call_args[0][2]["search"], "flood")

    @patch("apps.pages.views.load_content")
    def test_search_without_query_does_not_fetch(self, load):
        resp = self.client.get("/search")
        self.assertEqual(resp.status_code, 200)
        load.assert_not_called()

    @patch("apps.pages.views.load_content")
    def test_search_error(self, load):
        load.return_value = (None, BackendError("Server error. Please try again later.", status=500))
        resp = self.client.get("/search", {"q": "flood"})
        self.assertContains(resp, "Error loading search results. Please try again.")

    def test_sitemap_lists_static_paths(self):
        resp = self.client.get("/sitemap")
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, 'href="/about/mission-vision"')
        self.assertContains(resp, 'href="/resources/jobs"')
        self.assertNotContains(resp, 'href="/not-found"')
