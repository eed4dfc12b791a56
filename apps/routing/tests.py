from __future__ import annotations

import base64
import os
from io import StringIO
from unittest.mock import patch

import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "mmoweb.settings")
os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret")
django.setup()

from django.core.management import CommandError, call_command
from django.template import Context, Template
from django.test import Client, RequestFactory, SimpleTestCase, override_settings

from apps.core.results import Result
from apps.pages.units import UNITS, PageUnit
from apps.routing.crypto import (
    PathCipher,
    decrypt_path,
    encrypt_path,
    encrypted_route,
    from_urlsafe,
    original_path,
)
from apps.routing.resolvers import (
    NOT_FOUND,
    REDIRECT,
    RENDER,
    CanonicalResolver,
    EncryptedResolver,
    Resolution,
    resolve_target,
)
from apps.routing.routes import RouteEntry, RouteTable, normalize_path
from apps.routing.signals import log_navigation, route_resolved
from apps.routing.tables import (
    NOT_FOUND_PATH,
    FocusAreaAlias,
    build_canonical_table,
    build_encrypted_table,
)


class RouteTableTests(SimpleTestCase):
    def test_normalize_path(self):
        self.assertEqual(normalize_path(""), "/")
        self.assertEqual(normalize_path("about/our-story/"), "/about/our-story")
        self.assertEqual(normalize_path("/faq?x=1#top"), "/faq")
        self.assertEqual(normalize_path("//projects//ongoing"), "/projects/ongoing")

    def test_static_entries_win_over_parameters(self):
        table = RouteTable(
            [
                RouteEntry("/projects/:slugOrId", "detail"),
                RouteEntry("/projects/completed", "completed"),
            ]
        )
        self.assertEqual(table.lookup("/projects/completed").handler, "completed")
        match = table.lookup("/projects/abc123")
        self.assertEqual(match.handler, "detail")
        self.assertEqual(dict(match.params), {"slugOrId": "abc123"})

    def test_first_parametrized_match_wins(self):
        table = RouteTable([RouteEntry("/x/:a", "first"), RouteEntry("/x/:b", "second")])
        self.assertEqual(table.lookup("/x/1").handler, "first")

    def test_parameter_matches_one_segment_only(self):
        table = RouteTable([RouteEntry("/news/:slug", "news")])
        self.assertIsNone(table.lookup("/news"))
        self.assertIsNone(table.lookup("/news/a/b"))

    def test_reverse(self):
        table = RouteTable([RouteEntry("/projects/:slugOrId", "detail", "project_detail")])
        self.assertEqual(table.reverse("project_detail", slugOrId="a b"), "/projects/a%20b")
        with self.assertRaises(KeyError):
            table.reverse("project_detail")
        with self.assertRaises(KeyError):
            table.reverse("missing")


class CanonicalTableTests(SimpleTestCase):
    def setUp(self):
        self.resolver = CanonicalResolver(build_canonical_table())

    def test_every_static_path_renders_its_unit(self):
        table = build_canonical_table()
        for entry in table:
            if not entry.is_static:
                continue
            with self.subTest(path=entry.pattern):
                resolution = self.resolver.resolve(entry.pattern)
                self.assertEqual(resolution.kind, RENDER)
                self.assertIs(resolution.unit, entry.handler)
                self.assertIsInstance(resolution.unit, PageUnit)

    def test_static_paths_are_unique(self):
        paths = [entry.pattern for entry in build_canonical_table() if entry.is_static]
        self.assertEqual(len(paths), len(set(paths)))

    def test_trailing_slash_is_ignored(self):
        resolution = self.resolver.resolve("/about/our-story/")
        self.assertEqual(resolution.unit, UNITS["our_story"])

    def test_parametrized_detail(self):
        resolution = self.resolver.resolve("/projects/abc123")
        self.assertEqual(resolution.kind, RENDER)
        self.assertEqual(resolution.unit, UNITS["project_detail"])
        self.assertEqual(dict(resolution.params), {"slugOrId": "abc123"})

    def test_static_sibling_beats_detail(self):
        self.assertEqual(self.resolver.resolve("/projects/ongoing").unit, UNITS["projects_ongoing"])
        self.assertEqual(self.resolver.resolve("/programs/sitc").unit, UNITS["program_sitc"])

    def test_unknown_path_is_not_found(self):
        resolution = self.resolver.resolve("/definitely/not/here")
        self.assertEqual(resolution.kind, NOT_FOUND)
        self.assertEqual(resolve_target(resolution), NOT_FOUND_PATH)

    def test_not_found_path_renders_not_found_unit(self):
        resolution = self.resolver.resolve(NOT_FOUND_PATH)
        self.assertEqual(resolution.unit.status, 404)


class FocusAreaAliasTests(SimpleTestCase):
    def setUp(self):
        self.resolver = CanonicalResolver(build_canonical_table())

    def test_legacy_slug_redirects_to_focus_area(self):
        for slug in ("education", "health-care", "abc123"):
            with self.subTest(slug=slug):
                resolution = self.resolver.resolve(f"/what-we-do/{slug}")
                self.assertEqual(resolution.kind, REDIRECT)
                self.assertEqual(resolution.location, f"/what-we-do/focus-areas/{slug}")

    def test_reserved_children_render_their_own_pages(self):
        self.assertEqual(self.resolver.resolve("/what-we-do/focus-areas").unit, UNITS["focus_areas"])
        self.assertEqual(
            self.resolver.resolve("/what-we-do/geographic-coverage").unit,
            UNITS["geographic_coverage"],
        )
        self.assertEqual(
            self.resolver.resolve("/what-we-do/monitoring-evaluation").unit,
            UNITS["monitoring_evaluation"],
        )

    def test_focus_area_detail_is_not_redirected(self):
        resolution = self.resolver.resolve("/what-we-do/focus-areas/education")
        self.assertEqual(resolution.kind, RENDER)
        self.assertEqual(dict(resolution.params), {"slug": "education"})

    def test_other_shapes_go_to_not_found(self):
        alias = FocusAreaAlias()
        self.assertEqual(alias.target("/what-we-do"), NOT_FOUND_PATH)
        self.assertEqual(alias.target("/what-we-do/"), NOT_FOUND_PATH)
        self.assertEqual(alias.target("/what-we-do/a/b"), NOT_FOUND_PATH)
        self.assertEqual(alias.target("/what-we-do/focus-areas"), NOT_FOUND_PATH)
        self.assertEqual(alias.target("/elsewhere/x"), NOT_FOUND_PATH)


class PathCipherTests(SimpleTestCase):
    def test_round_trip(self):
        cipher = PathCipher("secret")
        for path in ("/", "/about/mission-vision", "/projects/abc123", "/news/دری"):
            with self.subTest(path=path):
                token = cipher.encrypt(path)
                self.assertEqual(cipher.decrypt(token).value, path)

    def test_token_is_url_safe(self):
        token = PathCipher("secret").encrypt("/resources/success-stories/" + "x" * 40)
        self.assertNotRegex(token, r"[+/=]")

    def test_token_is_openssl_salted_format(self):
        salt = b"12345678"
        token = PathCipher("secret").encrypt("/faq", salt=salt)
        raw = base64.b64decode(from_urlsafe(token))
        self.assertEqual(raw[:8], b"Salted__")
        self.assertEqual(raw[8:16], salt)
        self.assertEqual((len(raw) - 16) % 16, 0)

    def test_fixed_salt_is_deterministic(self):
        cipher = PathCipher("secret")
        self.assertEqual(cipher.encrypt("/faq", salt=b"abcdefgh"), cipher.encrypt("/faq", salt=b"abcdefgh"))
        self.assertNotEqual(cipher.encrypt("/faq", salt=b"abcdefgh"), cipher.encrypt("/faq", salt=b"hgfedcba"))

    def test_wrong_key_fails(self):
        token = PathCipher("secret").encrypt("/about/mission-vision")
        result = PathCipher("other").decrypt(token)
        if result.ok:
            # PKCS#7 can occasionally unpad garbage; it must not yield the path
            self.assertNotEqual(result.value, "/about/mission-vision")
        else:
            self.assertTrue(result.error)

    def test_garbage_tokens_fail(self):
        cipher = PathCipher("secret")
        for token in ("", "not*base64", "U2FsdGVk", "aGVsbG8gd29ybGQ"):
            with self.subTest(token=token):
                self.assertFalse(cipher.decrypt(token).ok)

    def test_empty_passphrase_rejected(self):
        with self.assertRaises(ValueError):
            PathCipher("")

    @override_settings(URL_ENCRYPTION_KEY="test-key")
    def test_site_helpers(self):
        route = encrypted_route("/faq")
        self.assertTrue(route.startswith("/e/"))
        self.assertEqual(encrypted_route(route), route)
        self.assertEqual(encrypted_route(""), "/")
        self.assertEqual(original_path(route).value, "/faq")
        self.assertEqual(original_path("/faq").value, "/faq")
        self.assertEqual(original_path("/e/" + encrypt_path("faq")).value, "/faq")
        self.assertEqual(decrypt_path(route[3:]).value, "/faq")


@override_settings(URL_ENCRYPTION_KEY="test-key")
class EncryptedResolverTests(SimpleTestCase):
    def setUp(self):
        self.resolver = EncryptedResolver(build_encrypted_table())

    def test_mission_vision_matches_canonical(self):
        canonical = CanonicalResolver(build_canonical_table()).resolve("/about/mission-vision")
        resolution = self.resolver.resolve(encrypted_route("/about/mission-vision"))
        self.assertEqual(resolution.kind, RENDER)
        self.assertIs(resolution.unit, canonical.unit)
        self.assertEqual(dict(resolution.params), {})

    def test_dynamic_path_hands_last_segment_over(self):
        resolution = self.resolver.resolve(encrypted_route("/projects/abc123"))
        self.assertEqual(resolution.kind, RENDER)
        self.assertEqual(resolution.unit, UNITS["projects"])
        self.assertEqual(dict(resolution.params), {"slugOrId": "abc123"})

    def test_exact_entry_wins_over_stripping(self):
        resolution = self.resolver.resolve(encrypted_route("/resources/news-events"))
        self.assertEqual(resolution.unit, UNITS["news_events"])
        self.assertEqual(dict(resolution.params), {})

    def test_unencrypted_paths_are_looked_up_directly(self):
        self.assertEqual(self.resolver.resolve("/about/team").unit, UNITS["team"])

    def test_encrypted_table_keeps_its_own_aliases(self):
        self.assertEqual(self.resolver.resolve(encrypted_route("/resources/rfq-rfp")).unit, UNITS["rfq_rfp"])
        self.assertEqual(self.resolver.resolve(encrypted_route("/about/coverage-area")).unit, UNITS["about"])

    def test_garbage_token_is_not_found(self):
        resolution = self.resolver.resolve("/e/garbage-token")
        self.assertEqual(resolution.kind, NOT_FOUND)

    def test_unknown_decrypted_path_is_not_found(self):
        self.assertEqual(self.resolver.resolve(encrypted_route("/nowhere")).kind, NOT_FOUND)
        self.assertEqual(self.resolver.resolve(encrypted_route("/nowhere/deeper")).kind, NOT_FOUND)

    def test_raising_decryptor_is_not_found(self):
        def explode(path):
            raise RuntimeError("boom")

        resolver = EncryptedResolver(build_encrypted_table(), decrypt=explode)
        resolution = resolver.resolve("/e/anything")
        self.assertEqual(resolution.kind, NOT_FOUND)
        self.assertEqual(resolution.reason, "boom")

    def test_fabricated_table(self):
        table = RouteTable([RouteEntry("/widgets", "widgets", param="widgetId")])
        resolver = EncryptedResolver(table, decrypt=lambda path: Result.success("/widgets/42"))
        # /widgets is not a dynamic prefix, so nothing is stripped
        self.assertEqual(resolver.resolve("/e/x").kind, NOT_FOUND)

        resolver = EncryptedResolver(
            RouteTable([RouteEntry("/news", "news", param="slug")]),
            decrypt=lambda path: Result.success("/news/hello-world"),
        )
        resolution = resolver.resolve("/e/x")
        self.assertEqual(resolution.unit, "news")
        self.assertEqual(dict(resolution.params), {"slug": "hello-world"})


@override_settings(URL_ENCRYPTION_KEY="test-key", ALLOWED_HOSTS=["testserver"])
class PageViewTests(SimpleTestCase):
    def setUp(self):
        self.client = Client()
        patcher = patch(
            "apps.pages.views.load_content",
            return_value=({"data": [{"_id": "1", "title": {"en": "First question"}}], "pagination": None}, None),
        )
        self.load_content = patcher.start()
        self.addCleanup(patcher.stop)

    def test_known_path_renders(self):
        resp = self.client.get("/faq")
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "First question")
        self.load_content.assert_called_once()
        self.assertEqual(self.load_content.call_args[0][1], "faqs")

    def test_scroll_reset_script_is_on_every_page(self):
        resp = self.client.get("/faq")
        self.assertContains(resp, 'scrollRestoration = "manual"')
        self.assertContains(resp, "popstate")

    def test_unknown_path_is_404(self):
        resp = self.client.get("/no-such-page")
        self.assertEqual(resp.status_code, 404)
        self.assertTemplateUsed(resp, "pages/not_found.html")

    def test_legacy_alias_redirects(self):
        resp = self.client.get("/what-we-do/education")
        self.assertEqual(resp.status_code, 302)
        self.assertEqual(resp["Location"], "/what-we-do/focus-areas/education")

    def test_trailing_slash_on_section_renders_overview(self):
        resp = self.client.get("/what-we-do/")
        self.assertEqual(resp.status_code, 200)

    def test_encrypted_link_renders_same_page(self):
        resp = self.client.get(encrypted_route("/faq"))
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "First question")

    def test_encrypted_garbage_is_404(self):
        resp = self.client.get("/e/not-a-token")
        self.assertEqual(resp.status_code, 404)

    def test_route_resolved_signal(self):
        seen = []

        def receiver(sender, resolution=None, encrypted=False, **kwargs):
            seen.append((resolution.kind, resolution.path, encrypted))

        route_resolved.connect(receiver, dispatch_uid="routing.tests.receiver")
        self.addCleanup(route_resolved.disconnect, dispatch_uid="routing.tests.receiver")

        self.client.get("/faq")
        self.client.get(encrypted_route("/faq"))
        self.assertEqual(seen, [(RENDER, "/faq", False), (RENDER, "/faq", True)])


class NavigationLoggingTests(SimpleTestCase):
    def setUp(self):
        patcher = patch("apps.pages.views.load_content", return_value=({"data": [], "pagination": None}, None))
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_log_keeps_request_path_and_route_path_apart(self):
        request = RequestFactory().get("/e/some-token")
        request.correlation_id = "req-12345678"
        with self.assertLogs("apps.routing.signals", "INFO") as logs:
            log_navigation(None, request=request, resolution=Resolution.render("/faq", UNITS["faq"]), encrypted=True)
        event = logs.records[0].event
        self.assertEqual(event["route_path"], "/faq")
        self.assertEqual(event["path"], "/e/some-token")
        self.assertEqual(event["request_id"], "req-12345678")
        self.assertTrue(event["encrypted"])

    def test_not_found_is_logged_as_warning(self):
        request = RequestFactory().get("/nowhere")
        with self.assertLogs("apps.routing.signals", "WARNING") as logs:
            log_navigation(None, request=request, resolution=Resolution.not_found("/nowhere"))
        self.assertEqual(logs.records[0].event["route_path"], "/nowhere")

    def test_resolutions_never_error(self):
        client = Client(raise_request_exception=False)
        self.assertEqual(client.get("/faq").status_code, 200)

        resp = client.get("/what-we-do/health")
        self.assertEqual(resp.status_code, 302)
        self.assertEqual(resp["Location"], "/what-we-do/focus-areas/health")

        self.assertEqual(client.get("/e/garbage").status_code, 404)
        self.assertEqual(client.get("/no-such-page").status_code, 404)


@override_settings(URL_ENCRYPTION_KEY="test-key")
class RoutingTemplateTagTests(SimpleTestCase):
    def test_route_url(self):
        out = Template("{% load routing_tags %}{% route_url 'project_detail' slugOrId='abc' %}").render(Context({}))
        self.assertEqual(out, "/projects/abc")

    def test_route_url_unknown_name_is_empty(self):
        out = Template("{% load routing_tags %}{% route_url 'nope' %}").render(Context({}))
        self.assertEqual(out, "")

    def test_encrypted_url(self):
        out = Template("{% load routing_tags %}{% encrypted_url '/faq' %}").render(Context({}))
        self.assertTrue(out.startswith("/e/"))
        self.assertEqual(original_path(out).value, "/faq")


@override_settings(URL_ENCRYPTION_KEY="test-key")
class EncryptPathCommandTests(SimpleTestCase):
    def test_encrypt_then_decrypt(self):
        out = StringIO()
        call_command("encrypt_path", "/about/mission-vision", stdout=out)
        route = out.getvalue().strip()
        self.assertTrue(route.startswith("/e/"))

        out = StringIO()
        call_command("encrypt_path", route, "--decrypt", stdout=out, no_color=True)
        self.assertEqual(out.getvalue().strip(), "/about/mission-vision")

    def test_decrypt_garbage_fails(self):
        with self.assertRaises(CommandError):
            call_command("encrypt_path", "garbage", "--decrypt", stdout=StringIO())
