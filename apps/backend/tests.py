from __future__ import annotations

import json
import os

import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "mmoweb.settings")
os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret")
django.setup()

import requests
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import RequestFactory, SimpleTestCase, override_settings

from apps.backend.client import (
    NETWORK_ERROR_MESSAGE,
    SERVER_ERROR_MESSAGE,
    SESSION_TOKEN_KEY,
    TIMEOUT_MESSAGE,
    BackendClient,
    BackendError,
    Pagination,
    as_list,
    client_for,
    record_id,
    unwrap,
    with_ids,
)
from apps.backend.media import image_url
from apps.backend.services import auth, complaints, content, donations, jobs, newsletter


def response(status=200, body=None, raw=None):
    resp = requests.Response()
    resp.status_code = status
    if raw is not None:
        resp._content = raw
    else:
        resp._content = json.dumps(body).encode("utf-8") if body is not None else b""
    resp.headers["Content-Type"] = "application/json"
    return resp


class StubSession:
    """Records calls and answers with queued responses or exceptions."""

    def __init__(self, *answers):
        self.answers = list(answers)
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        answer = self.answers.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer


def stub_client(*answers, **kwargs):
    session = StubSession(*answers)
    return BackendClient("https://api.example.org/bak", session=session, timeout=5, **kwargs), session


class PayloadHelperTests(SimpleTestCase):
    def test_unwrap(self):
        self.assertEqual(unwrap({"success": True, "data": [1]}), [1])
        self.assertEqual(unwrap([1]), [1])

    def test_as_list(self):
        self.assertEqual(as_list({"data": [1, 2]}), [1, 2])
        self.assertEqual(as_list({"data": {"items": [3]}}), [3])
        self.assertEqual(as_list({"data": {"a": 1}}), [{"a": 1}])
        self.assertEqual(as_list({"data": None}), [])
        self.assertEqual(as_list(None), [])

    def test_record_ids(self):
        self.assertEqual(record_id({"_id": "abc"}), "abc")
        self.assertEqual(record_id({"id": 4}), "4")
        self.assertEqual(record_id("x"), "")
        self.assertEqual(with_ids([{"_id": "a"}, "x"]), [{"_id": "a", "pk": "a"}, "x"])

    def test_pagination(self):
        self.assertEqual(
            Pagination.from_body({"pagination": {"current": 2, "pages": 5, "total": 48}}),
            Pagination(current=2, pages=5, total=48),
        )
        self.assertEqual(Pagination.from_body({"pagination": {"page": "3", "totalPages": "4"}}).pages, 4)
        self.assertEqual(Pagination.from_body([]), Pagination())


class BackendClientTests(SimpleTestCase):
    def test_get_returns_body(self):
        client, session = stub_client(response(body={"success": True, "data": [1]}))
        self.assertEqual(client.get("projects", {"page": 1, "search": "", "role": None}), {"success": True, "data": [1]})
        method, url, kwargs = session.calls[0]
        self.assertEqual((method, url), ("GET", "https://api.example.org/bak/projects"))
        self.assertEqual(kwargs["params"], {"page": 1})
        self.assertEqual(kwargs["timeout"], 5.0)

    def test_leading_slash_endpoints(self):
        client, session = stub_client(response(body={}))
        client.get("/organization-profile")
        self.assertEqual(session.calls[0][1], "https://api.example.org/bak/organization-profile")

    def test_headers(self):
        client, session = stub_client(response(body={}), token="tok", request_id="req-12345678")
        client.post("complaints", {"a": 1})
        headers = session.calls[0][2]["headers"]
        self.assertEqual(headers["Authorization"], "Bearer tok")
        self.assertEqual(headers["X-Request-ID"], "req-12345678")
        self.assertEqual(headers["Content-Type"], "application/json")
        self.assertEqual(session.calls[0][2]["json"], {"a": 1})

    def test_unsuccessful_envelope(self):
        client, _ = stub_client(response(body={"success": False, "message": "Email already subscribed"}))
        with self.assertRaises(BackendError) as ctx:
            client.post("newsletter/subscribe", {})
        self.assertEqual(ctx.exception.user_message, "Email already subscribed")

    def test_status_messages(self):
        cases = [
            (400, "Bad Request. Please check your input."),
            (401, "Unauthorized. Please login."),
            (403, "Forbidden. You do not have permission."),
            (404, "Resource not found."),
            (502, SERVER_ERROR_MESSAGE),
        ]
        for status, message in cases:
            with self.subTest(status=status):
                client, _ = stub_client(response(status, raw=b"<html>oops</html>"))
                with self.assertRaises(BackendError) as ctx:
                    client.get("x")
                self.assertEqual(ctx.exception.status, status)
                self.assertEqual(ctx.exception.user_message, message)
                self.assertEqual(ctx.exception.unauthorized, status == 401)

    def test_backend_message_wins(self):
        client, _ = stub_client(response(400, body={"message": "Invalid certificate id"}))
        with self.assertRaises(BackendError) as ctx:
            client.get("certificates/x")
        self.assertEqual(ctx.exception.user_message, "Invalid certificate id")

    def test_network_failures(self):
        client, _ = stub_client(requests.exceptions.Timeout())
        with self.assertRaisesMessage(BackendError, TIMEOUT_MESSAGE):
            client.get("x")

        client, _ = stub_client(requests.exceptions.ConnectionError())
        with self.assertRaisesMessage(BackendError, NETWORK_ERROR_MESSAGE):
            client.get("x")

    def test_invalid_json(self):
        client, _ = stub_client(response(200, raw=b"not json"))
        with self.assertRaisesMessage(BackendError, "Invalid response from server."):
            client.get("x")

    def test_empty_body(self):
        client, _ = stub_client(response(204))
        self.assertIsNone(client.delete("jobs/1"))

    def test_client_for_request(self):
        request = RequestFactory().get("/")
        request.session = {SESSION_TOKEN_KEY: "tok"}
        request.correlation_id = "abc12345"
        client = client_for(request)
        self.assertEqual(client.token, "tok")
        self.assertEqual(client.request_id, "abc12345")
        self.assertIsNone(client_for().token)


class ServiceTests(SimpleTestCase):
    def test_content_fetch_shape(self):
        client, _ = stub_client(
            response(body={"success": True, "data": [{"_id": "p1"}], "pagination": {"current": 1, "pages": 2, "total": 15}})
        )
        self.assertEqual(
            content.fetch(client, "projects"),
            {"data": [{"_id": "p1"}], "pagination": {"current": 1, "pages": 2, "total": 15}},
        )

    def test_login(self):
        client, session = stub_client(response(body={"success": True, "data": {"token": "t", "user": {"username": "admin"}}}))
        self.assertEqual(auth.login(client, "admin", "pw"), ("t", {"username": "admin"}))
        self.assertEqual(session.calls[0][2]["json"], {"username": "admin", "password": "pw"})

    def test_login_without_token(self):
        client, _ = stub_client(response(body={"success": True, "data": {}}))
        with self.assertRaisesMessage(BackendError, auth.INVALID_CREDENTIALS):
            auth.login(client, "admin", "pw")

    def test_complaint_payload(self):
        self.assertEqual(
            complaints.build_payload(name="N", email="e@x.org", type="other", message="m"),
            {"name": "N", "email": "e@x.org", "type": "feedback", "subject": "General Feedback", "message": "m"},
        )
        self.assertEqual(complaints.build_payload(name="N", email="e", type="complaint", message="m", subject="S")["type"], "complaint")

    def test_newsletter_tries_candidate_endpoints(self):
        client, session = stub_client(
            response(404, body={"message": "Not found"}),
            response(body={"items": [{"email": "a@example.org"}], "total": 1, "page": 1, "pages": 1}),
        )
        result = newsletter.list_subscribers(client, page=1, limit=20)
        self.assertEqual(result["data"], [{"email": "a@example.org"}])
        self.assertEqual(result["pagination"]["total"], 1)
        self.assertEqual(
            [call[1] for call in session.calls],
            ["https://api.example.org/bak/newsletter", "https://api.example.org/bak/newsletter/subscribers"],
        )

    def test_newsletter_all_endpoints_failing(self):
        client, _ = stub_client(*[response(500) for _ in newsletter.SUBSCRIBER_ENDPOINTS])
        with self.assertRaises(BackendError):
            newsletter.list_subscribers(client)

    def test_newsletter_subscribe_payload(self):
        client, session = stub_client(response(body={"success": True}))
        newsletter.subscribe(client, "a@example.org")
        self.assertEqual(
            session.calls[0][2]["json"],
            {"email": "a@example.org", "preferences": {"events": True, "news": True, "programs": True}},
        )

    def test_preset_amounts(self):
        client, _ = stub_client(response(body={"success": True, "data": {"presetAmounts": [10, "25", -1, "x"]}}))
        self.assertEqual(donations.preset_amounts(client), [10, 25])

        client, _ = stub_client(response(500))
        self.assertEqual(donations.preset_amounts(client), list(donations.DEFAULT_PRESET_AMOUNTS))

    def test_job_application_upload(self):
        client, session = stub_client(response(body={"success": True}))
        resume = SimpleUploadedFile("cv.pdf", b"%PDF-1.4", content_type="application/pdf")
        jobs.apply(client, {"firstName": "Sara", "lastName": "", "email": "s@x.org"}, resume=resume, opportunity_id="j1")
        method, url, kwargs = session.calls[0]
        self.assertEqual(url, "https://api.example.org/bak/opportunity/j1/apply")
        self.assertEqual(kwargs["data"], {"firstName": "Sara", "email": "s@x.org"})
        self.assertEqual(kwargs["files"]["resume"], ("cv.pdf", b"%PDF-1.4", "application/pdf"))
        self.assertEqual(kwargs["files"]["cv"], ("cv.pdf", b"%PDF-1.4", "application/pdf"))
        self.assertIsNone(kwargs["json"])


@override_settings(
    BACKEND_API_BASE_URL="https://khwanzay.school/bak",
    BACKEND_IMAGE_BASE_URL="https://khwanzay.school/bak/",
)
class ImageUrlTests(SimpleTestCase):
    def test_absolute_urls(self):
        self.assertEqual(image_url("https://cdn.example.org/a.jpg"), "https://cdn.example.org/a.jpg")
        self.assertEqual(
            image_url("https://museum.khwanzay.school/bak/includes/images/a.jpg"),
            "https://khwanzay.school/bak/includes/images/a.jpg",
        )

    def test_backend_paths(self):
        self.assertEqual(
            image_url("/bak/includes/images/a.jpg"),
            "https://khwanzay.school/bak/includes/images/a.jpg",
        )
        self.assertEqual(
            image_url("/includes/images/a.jpg"),
            "https://khwanzay.school/bak/includes/images/a.jpg",
        )

    def test_bare_file_names(self):
        self.assertEqual(image_url("a.jpg"), "https://khwanzay.school/bak/a.jpg")
        self.assertEqual(image_url("includes/images/a.jpg"), "https://khwanzay.school/bak/a.jpg")

    def test_objects_and_empty(self):
        self.assertEqual(image_url({"url": "https://cdn.example.org/a.jpg"}), "https://cdn.example.org/a.jpg")
        self.assertIsNone(image_url(None))
        self.assertIsNone(image_url({}))
        self.assertIsNone(image_url(42))
