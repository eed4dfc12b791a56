from __future__ import annotations

import json
import os
from unittest.mock import Mock

import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "mmoweb.settings")
os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret")
django.setup()

from django.core.cache import cache
from django.template import Context, Template
from django.test import Client, RequestFactory, SimpleTestCase, override_settings

from apps.backend.client import BackendError
from apps.core.cache import ContentCache
from apps.core.exceptions import user_message
from apps.core.i18n import localize, normalize_language, resolve_language, text_direction
from apps.core.results import Result


class ResultTests(SimpleTestCase):
    def test_success_and_failure(self):
        ok = Result.success(2)
        self.assertTrue(ok)
        self.assertEqual(ok.map(lambda v: v * 2).value, 4)

        failed = Result.failure("nope")
        self.assertFalse(failed)
        self.assertEqual(failed.map(lambda v: v * 2).error, "nope")
        self.assertEqual(failed.unwrap_or(7), 7)
        self.assertEqual(Result.failure("").error, "unknown error")


class LocalizeTests(SimpleTestCase):
    def test_requested_variant(self):
        value = {"en": "Water", "per": "آب", "ps": "اوبه"}
        self.assertEqual(localize(value, "en"), "Water")
        self.assertEqual(localize(value, "dr"), "آب")
        self.assertEqual(localize(value, "ps"), "اوبه")

    def test_fallback_order(self):
        self.assertEqual(localize({"en": "", "per": "آب"}, "ps"), "آب")
        self.assertEqual(localize({"ps": "اوبه"}, "en"), "اوبه")
        self.assertEqual(localize({}, "en"), "")

    def test_scalars(self):
        self.assertEqual(localize(None), "")
        self.assertEqual(localize("plain"), "plain")
        self.assertEqual(localize(3), "3")
        self.assertEqual(localize(["a", "b"]), "a b")
        self.assertEqual(localize(True), "true")

    def test_template_tag_and_filter(self):
        out = Template('{% load core_tags %}{% localized value "ps" %}|{{ value|localize:"dr" }}').render(
            Context({"value": {"en": "Water", "per": "آب", "ps": "اوبه"}})
        )
        self.assertEqual(out, "اوبه|آب")

    def test_template_tag_uses_page_language(self):
        out = Template("{% load core_tags %}{% localized value %}").render(
            Context({"value": {"en": "Water", "per": "آب"}, "site_language": "dr"})
        )
        self.assertEqual(out, "آب")


class LanguageTests(SimpleTestCase):
    def setUp(self):
        self.factory = RequestFactory()

    def test_normalize(self):
        self.assertEqual(normalize_language("fa-AF"), "dr")
        self.assertEqual(normalize_language("en-US"), "en")
        self.assertEqual(normalize_language("ps"), "ps")
        self.assertIsNone(normalize_language("de"))
        self.assertIsNone(normalize_language(None))

    def test_direction(self):
        self.assertEqual(text_direction("dr"), "rtl")
        self.assertEqual(text_direction("en"), "ltr")

    def test_resolution_order(self):
        request = self.factory.get("/", {"lang": "ps"}, HTTP_ACCEPT_LANGUAGE="fa")
        request.session = {"i18nextLng": "en"}
        self.assertEqual(resolve_language(request), "ps")

        request = self.factory.get("/", HTTP_ACCEPT_LANGUAGE="de, fa;q=0.8, en;q=0.5")
        request.session = {}
        self.assertEqual(resolve_language(request), "dr")

        request = self.factory.get("/")
        request.session = {"i18nextLng": "ps"}
        self.assertEqual(resolve_language(request), "ps")

    @override_settings(SITE_DEFAULT_LANGUAGE="en")
    def test_default(self):
        request = self.factory.get("/")
        request.session = {}
        self.assertEqual(resolve_language(request), "en")


class ContentCacheTests(SimpleTestCase):
    def setUp(self):
        cache.clear()

    def test_read_through(self):
        fetch = Mock(return_value={"data": [1]})
        self.assertEqual(ContentCache.get_or_fetch("projects", fetch, namespace="projects"), {"data": [1]})
        self.assertEqual(ContentCache.get_or_fetch("projects", fetch, namespace="projects"), {"data": [1]})
        fetch.assert_called_once()

    def test_none_is_not_cached(self):
        fetch = Mock(return_value=None)
        ContentCache.get_or_fetch("k", fetch)
        ContentCache.get_or_fetch("k", fetch)
        self.assertEqual(fetch.call_count, 2)

    def test_errors_propagate_and_are_not_cached(self):
        fetch = Mock(side_effect=BackendError("down", status=503))
        with self.assertRaises(BackendError):
            ContentCache.get_or_fetch("k", fetch)
        fetch.side_effect = None
        fetch.return_value = "ok"
        self.assertEqual(ContentCache.get_or_fetch("k", fetch), "ok")

    def test_invalidate_namespace(self):
        fetch = Mock(side_effect=["old", "new"])
        self.assertEqual(ContentCache.get_or_fetch("jobs/published", fetch, namespace="jobs"), "old")
        ContentCache.invalidate("jobs")
        self.assertEqual(ContentCache.get_or_fetch("jobs/published", fetch, namespace="jobs"), "new")

    def test_invalidate_leaves_other_namespaces(self):
        fetch = Mock(return_value="cached")
        ContentCache.get_or_fetch("projects", fetch, namespace="projects")
        ContentCache.invalidate("jobs")
        ContentCache.get_or_fetch("projects", fetch, namespace="projects")
        fetch.assert_called_once()


class UserMessageTests(SimpleTestCase):
    def test_backend_errors_keep_their_text(self):
        self.assertEqual(user_message(BackendError("Resource not found.", status=404)), "Resource not found.")

    def test_other_errors_are_generic(self):
        self.assertEqual(user_message(RuntimeError("secret detail"), "Oops"), "Oops")


@override_settings(ALLOWED_HOSTS=["testserver"])
class MiddlewareTests(SimpleTestCase):
    def setUp(self):
        self.client = Client()

    def test_health_check(self):
        resp = self.client.get("/.well-known/health")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["ok"])

    def test_correlation_id_is_generated(self):
        resp = self.client.get("/.well-known/health")
        self.assertRegex(resp["X-Request-ID"], r"^[0-9a-f]{32}$")

    def test_correlation_id_is_reused(self):
        resp = self.client.get("/.well-known/health", HTTP_X_REQUEST_ID="proxy-id-12345")
        self.assertEqual(resp["X-Request-ID"], "proxy-id-12345")

    def test_unsafe_correlation_id_is_replaced(self):
        resp = self.client.get("/.well-known/health", HTTP_X_REQUEST_ID="bad id\n")
        self.assertNotEqual(resp["X-Request-ID"], "bad id\n")

    def test_security_headers(self):
        resp = self.client.get("/.well-known/health")
        self.assertEqual(resp["X-Content-Type-Options"], "nosniff")
        self.assertIn("nonce-", resp["Content-Security-Policy"])

    def test_language_choice_is_remembered(self):
        resp = self.client.get("/.well-known/health", {"lang": "ps"})
        self.assertEqual(resp.cookies["i18nextLng"].value, "ps")
        self.assertEqual(self.client.session["i18nextLng"], "ps")

    def test_favicon_redirect(self):
        resp = self.client.get("/favicon.ico")
        self.assertEqual(resp.status_code, 301)
        self.assertEqual(resp["Location"], "/static/favicon.svg")

    def test_bare_admin_prefix_redirects_to_back_office(self):
        resp = self.client.get("/admin")
        self.assertEqual(resp.status_code, 302)
        self.assertEqual(resp["Location"], "/admin/")


class BackendErrorMiddlewareTests(SimpleTestCase):
    def setUp(self):
        from apps.core.middleware.backend_errors import BackendErrorMiddleware

        self.middleware = BackendErrorMiddleware(lambda request: None)
        self.factory = RequestFactory()

    def test_backend_error_becomes_502(self):
        request = self.factory.get("/admin/jobs/")
        resp = self.middleware.process_exception(request, BackendError("Server error. Please try again later.", status=500))
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.content.decode(), "Server error. Please try again later.")

    def test_json_callers_get_json(self):
        request = self.factory.get("/admin/jobs/", HTTP_ACCEPT="application/json")
        resp = self.middleware.process_exception(request, BackendError("Resource not found.", status=404))
        self.assertEqual(json.loads(resp.content)["message"], "Resource not found.")

    def test_other_errors_pass_through(self):
        request = self.factory.get("/")
        self.assertIsNone(self.middleware.process_exception(request, RuntimeError("boom")))


class CoreHelperTests(SimpleTestCase):
    def test_event_formatter_appends_fields(self):
        import logging

        from apps.core.utils.logging import EventFormatter

        record = logging.LogRecord("apps.routing", logging.INFO, __file__, 1, "Route resolved", None, None)
        record.event = {"path": "/faq", "reason": "", "unit": None}
        self.assertEqual(EventFormatter("{message}", style="{").format(record), "Route resolved | path='/faq'")

    def test_csp_names_plain_http_backend(self):
        from apps.core.middleware.security_headers import build_csp

        csp = build_csp("abc", "http://backend.local")
        self.assertIn("script-src 'self' 'nonce-abc' https://cdn.jsdelivr.net", csp)
        self.assertIn("img-src 'self' data: https: http://backend.local", csp)
        self.assertNotIn("https://khwanzay.school", build_csp("abc", "https://khwanzay.school"))

    def test_render_first_falls_back_to_bare_page(self):
        from apps.core.views import render_first

        request = RequestFactory().get("/")
        resp = render_first(request, ["missing/one.html", "missing/two.html"], {"title": "FAQ <b>"}, status=200)
        self.assertEqual(resp.status_code, 200)
        self.assertIn("FAQ &lt;b&gt;", resp.content.decode())

    def test_json_404_handler(self):
        from apps.core.views import error_404_view

        request = RequestFactory().get("/missing", HTTP_ACCEPT="application/json")
        resp = error_404_view(request)
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(json.loads(resp.content)["error"], "not_found")
