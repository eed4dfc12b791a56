from __future__ import annotations

import os
from unittest.mock import patch

import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "mmoweb.settings")
os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret")
django.setup()

from django.test import Client, SimpleTestCase, override_settings
from django.urls import reverse

from apps.backend.client import SESSION_TOKEN_KEY, BackendError
from apps.dashboard.auth import SESSION_USER_KEY, login_url
from apps.dashboard.forms import BulkStatusForm, JobForm
from apps.dashboard.listing import ListPage, filter_items, list_page, page_number

JOBS_BODY = {
    "success": True,
    "data": [
        {
            "_id": "j1",
            "title": {"en": "Water engineer", "per": "مهندس آب", "ps": ""},
            "department": {"en": "WASH"},
            "employmentType": "Full-time",
            "status": "Published",
            "applicationDeadline": "2026-12-01T00:00:00.000Z",
        },
        {
            "_id": "j2",
            "title": {"en": "Teacher"},
            "department": {"en": "Education"},
            "employmentType": "Contract",
            "status": "Draft",
        },
    ],
    "pagination": {"current": 1, "pages": 1, "total": 2},
}


def job_form_data(**overrides):
    data = {
        "title_en": "Water engineer",
        "description_per": "شرح",
        "requirements_en": "Degree",
        "responsibilities_en": "Build wells",
        "location_ps": "کابل",
        "department_en": "WASH",
        "employment_type": "Full-time",
        "experience_level": "Mid-level",
        "application_deadline": "2026-12-01",
        "application_method": "Email",
        "number_of_positions": "2",
        "gender": "Any",
        "status": "Published",
        "featured": "on",
    }
    data.update(overrides)
    return data


class ListingTests(SimpleTestCase):
    def test_filter_items_searches_every_language(self):
        items = JOBS_BODY["data"]
        self.assertEqual([i["_id"] for i in filter_items(items, "water", ("title",))], ["j1"])
        self.assertEqual([i["_id"] for i in filter_items(items, "آب", ("title",))], ["j1"])
        self.assertEqual([i["_id"] for i in filter_items(items, "EDUCATION", ("title", "department"))], ["j2"])
        self.assertEqual(len(filter_items(items, "  ", ("title",))), 2)
        self.assertEqual(filter_items(items, "nothing", ("title",)), [])

    def test_page_number(self):
        self.assertEqual(page_number("3"), 3)
        self.assertEqual(page_number("0"), 1)
        self.assertEqual(page_number("x"), 1)
        self.assertEqual(page_number(None), 1)

    def test_list_page(self):
        page = list_page(JOBS_BODY, query="teacher", fields=("title",))
        self.assertEqual([item["pk"] for item in page.items], ["j2"])
        self.assertEqual(page.total, 2)
        self.assertFalse(page.has_next)

    def test_list_page_from_bare_array(self):
        page = list_page([{"id": 1}, {"id": 2}])
        self.assertEqual(page.total, 2)
        self.assertEqual(page.pages, 1)

    def test_navigation(self):
        page = ListPage(items=[], number=2, pages=3, total=50)
        self.assertTrue(page.has_previous)
        self.assertTrue(page.has_next)
        self.assertEqual((page.previous_number, page.next_number), (1, 3))


class JobFormTests(SimpleTestCase):
    def test_payload(self):
        form = JobForm(job_form_data())
        self.assertTrue(form.is_valid(), form.errors)
        payload = form.payload()
        self.assertEqual(payload["title"], {"en": "Water engineer", "per": "", "ps": ""})
        self.assertEqual(payload["description"]["per"], "شرح")
        self.assertEqual(payload["employmentType"], "Full-time")
        self.assertEqual(payload["numberOfPositions"], 2)
        self.assertEqual(payload["applicationDeadline"], "2026-12-01")
        self.assertEqual(payload["applicationEmail"], "")
        self.assertIs(payload["featured"], True)
        self.assertIs(payload["urgent"], False)

    def test_multilingual_field_needs_one_language(self):
        form = JobForm(job_form_data(title_en=""))
        self.assertFalse(form.is_valid())
        self.assertIn("Title is required in at least one language", form.errors["title_en"])

    def test_initial_from_backend_record(self):
        initial = JobForm.initial_from(JOBS_BODY["data"][0])
        self.assertEqual(initial["title_per"], "مهندس آب")
        self.assertEqual(initial["employment_type"], "Full-time")
        self.assertEqual(initial["application_deadline"], "2026-12-01")


class BulkStatusFormTests(SimpleTestCase):
    def test_accepts_submitted_ids(self):
        from django.http import QueryDict

        data = QueryDict("ids=r1&ids=r2&status=approved")
        form = BulkStatusForm(data)
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data["ids"], ["r1", "r2"])

    def test_requires_ids(self):
        from django.http import QueryDict

        form = BulkStatusForm(QueryDict("status=approved"))
        self.assertFalse(form.is_valid())


@override_settings(ALLOWED_HOSTS=["testserver"], DASHBOARD_SEARCH_DEBOUNCE_MS=500, DASHBOARD_PAGE_SIZE=20)
class DashboardViewTests(SimpleTestCase):
    def setUp(self):
        self.client = Client()

    def sign_in(self, token="tok", user=None):
        session = self.client.session
        session[SESSION_TOKEN_KEY] = token
        session[SESSION_USER_KEY] = {"username": "admin"} if user is None else user
        session.save()

    # -- auth -----------------------------------------------------------
    def test_login_required(self):
        resp = self.client.get(reverse("dashboard:job_list"))
        self.assertEqual(resp.status_code, 302)
        self.assertEqual(resp["Location"], login_url("/admin/jobs/"))

    @patch("apps.dashboard.views.backend_auth.login", return_value=("tok", {"username": "admin"}))
    def test_login_stores_token(self, login):
        resp = self.client.post(
            reverse("dashboard:login"),
            {"username": "admin", "password": "pw", "next": "/admin/jobs/"},
        )
        self.assertEqual(resp.status_code, 302)
        self.assertEqual(resp["Location"], "/admin/jobs/")
        self.assertEqual(self.client.session[SESSION_TOKEN_KEY], "tok")
        self.assertEqual(self.client.session[SESSION_USER_KEY], {"username": "admin"})
        self.assertEqual(login.call_args[0][1:], ("admin", "pw"))

    @patch("apps.dashboard.views.backend_auth.login", return_value=("tok", {}))
    def test_login_ignores_offsite_next(self, login):
        resp = self.client.post(
            reverse("dashboard:login"),
            {"username": "admin", "password": "pw", "next": "https://evil.example/"},
        )
        self.assertEqual(resp["Location"], reverse("dashboard:home"))

    @patch("apps.dashboard.views.backend_auth.login")
    def test_login_failure(self, login):
        login.side_effect = BackendError("Invalid username or password", status=401)
        resp = self.client.post(reverse("dashboard:login"), {"username": "admin", "password": "bad"})
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Invalid username or password")
        self.assertIsNone(self.client.session.get(SESSION_TOKEN_KEY))

    def test_login_page_redirects_when_signed_in(self):
        self.sign_in()
        resp = self.client.get(reverse("dashboard:login"))
        self.assertEqual(resp["Location"], reverse("dashboard:home"))

    @patch("apps.dashboard.views.backend_auth.logout")
    def test_logout(self, logout):
        self.sign_in()
        resp = self.client.post(reverse("dashboard:logout"))
        self.assertEqual(resp["Location"], reverse("dashboard:login"))
        self.assertIsNone(self.client.session.get(SESSION_TOKEN_KEY))
        logout.assert_called_once()

    @patch("apps.dashboard.views.jobs.list_jobs")
    def test_rejected_token_ends_session(self, list_jobs):
        self.sign_in()
        list_jobs.side_effect = BackendError("Unauthorized. Please login.", status=401)
        resp = self.client.get(reverse("dashboard:job_list"))
        self.assertEqual(resp.status_code, 302)
        self.assertTrue(resp["Location"].startswith("/admin/login/"))
        self.assertIsNone(self.client.session.get(SESSION_TOKEN_KEY))
        self.assertIsNone(self.client.session.get(SESSION_USER_KEY))

    @patch("apps.dashboard.views.registrations.statistics", return_value={"total": 3})
    @patch("apps.dashboard.views.certificates.statistics", return_value={"total": 2})
    @patch("apps.dashboard.views.jobs.job_stats", return_value={"total": 1})
    def test_home(self, *mocks):
        self.sign_in()
        resp = self.client.get(reverse("dashboard:home"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.context["stats"]["registrations"], {"total": 3})

    @patch("apps.dashboard.views.registrations.statistics", return_value={})
    @patch("apps.dashboard.views.certificates.statistics", return_value={})
    @patch("apps.dashboard.views.jobs.job_stats", return_value={})
    def test_header_falls_back_through_user_fields(self, *mocks):
        self.sign_in(user={"email": "ops@example.org"})
        resp = self.client.get(reverse("dashboard:home"))
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "ops@example.org")

        self.sign_in(user={})
        resp = self.client.get(reverse("dashboard:home"))
        self.assertEqual(resp.status_code, 200)

    # -- jobs -----------------------------------------------------------
    @patch("apps.dashboard.views.jobs.list_jobs", return_value=JOBS_BODY)
    def test_job_list(self, list_jobs):
        self.sign_in()
        resp = self.client.get(reverse("dashboard:job_list"))
        self.assertContains(resp, "Water engineer")
        self.assertContains(resp, "Teacher")
        self.assertContains(resp, 'data-debounce-ms="500"')

    @patch("apps.dashboard.views.jobs.list_jobs", return_value=JOBS_BODY)
    def test_search_makes_one_call_with_the_final_term(self, list_jobs):
        self.sign_in()
        resp = self.client.get(reverse("dashboard:job_list"), {"search": "water", "status": "all"})
        list_jobs.assert_called_once()
        kwargs = list_jobs.call_args.kwargs
        self.assertEqual(kwargs["search"], "water")
        self.assertEqual(kwargs["page"], 1)
        self.assertNotIn("status", kwargs)
        self.assertContains(resp, "Water engineer")
        self.assertNotContains(resp, "Teacher")

    @patch("apps.dashboard.views.jobs.list_jobs", return_value=JOBS_BODY)
    def test_filters_are_passed_through(self, list_jobs):
        self.sign_in()
        self.client.get(reverse("dashboard:job_list"), {"status": "Draft", "employmentType": "Contract", "page": "2"})
        kwargs = list_jobs.call_args.kwargs
        self.assertEqual((kwargs["status"], kwargs["employmentType"], kwargs["page"]), ("Draft", "Contract", 2))

    @patch("apps.dashboard.views.jobs.list_jobs")
    def test_backend_failure_shows_message(self, list_jobs):
        self.sign_in()
        list_jobs.side_effect = BackendError("Server error. Please try again later.", status=500)
        resp = self.client.get(reverse("dashboard:job_list"))
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Server error. Please try again later.")

    @patch("apps.dashboard.views.ContentCache.invalidate")
    @patch("apps.dashboard.views.jobs.create_job")
    def test_job_create(self, create_job, invalidate):
        self.sign_in()
        resp = self.client.post(reverse("dashboard:job_create"), job_form_data())
        self.assertEqual(resp["Location"], reverse("dashboard:job_list"))
        self.assertEqual(create_job.call_args[0][1]["title"]["en"], "Water engineer")
        invalidate.assert_called_once_with("jobs")

    @patch("apps.dashboard.views.jobs.create_job")
    def test_job_create_invalid(self, create_job):
        self.sign_in()
        resp = self.client.post(reverse("dashboard:job_create"), job_form_data(title_en=""))
        self.assertEqual(resp.status_code, 200)
        create_job.assert_not_called()

    @patch("apps.dashboard.views.jobs.get_job", return_value=JOBS_BODY["data"][0])
    def test_job_edit_prefills(self, get_job):
        self.sign_in()
        resp = self.client.get(reverse("dashboard:job_edit", args=["j1"]))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.context["form"].initial["title_en"], "Water engineer")

    @patch("apps.dashboard.views.ContentCache.invalidate")
    @patch("apps.dashboard.views.jobs.delete_job")
    def test_job_delete_returns_to_filtered_list(self, delete_job, invalidate):
        self.sign_in()
        resp = self.client.post(reverse("dashboard:job_delete", args=["j1"]), {"next": "/admin/jobs/?search=water"})
        self.assertEqual(resp["Location"], "/admin/jobs/?search=water")
        delete_job.assert_called_once()
        invalidate.assert_called_once_with("jobs")

    @patch("apps.dashboard.views.ContentCache.invalidate")
    @patch("apps.dashboard.views.jobs.delete_job")
    def test_failed_delete_does_not_invalidate(self, delete_job, invalidate):
        self.sign_in()
        delete_job.side_effect = BackendError("Resource not found.", status=404)
        self.client.post(reverse("dashboard:job_delete", args=["j1"]))
        invalidate.assert_not_called()

    @patch("apps.dashboard.views.jobs.update_job_status")
    def test_job_status(self, update):
        self.sign_in()
        self.client.post(reverse("dashboard:job_status", args=["j1"]), {"status": "Closed"})
        self.assertEqual(update.call_args[0][1:], ("j1", "Closed"))

    # -- certificates ---------------------------------------------------
    @patch("apps.dashboard.views.certificates.generate_id", return_value="MMO-2026-0001")
    def test_certificate_generate_id(self, generate):
        self.sign_in()
        resp = self.client.get(reverse("dashboard:certificate_create"), {"generate": "1"})
        self.assertEqual(resp.context["form"].initial["certificate_id"], "MMO-2026-0001")

    # -- newsletter -----------------------------------------------------
    @patch("apps.dashboard.views.newsletter.list_subscribers")
    def test_newsletter_list(self, list_subscribers):
        self.sign_in()
        list_subscribers.return_value = {
            "data": [{"_id": "s1", "email": "a@example.org"}, {"_id": "s2", "email": "b@example.org"}],
            "pagination": None,
        }
        resp = self.client.get(reverse("dashboard:newsletter_list"), {"search": "a@"})
        self.assertContains(resp, "a@example.org")
        self.assertNotContains(resp, "b@example.org")

    # -- registrations --------------------------------------------------
    @patch("apps.dashboard.views.registrations.bulk_update_status")
    def test_bulk_status(self, bulk):
        self.sign_in()
        resp = self.client.post(
            reverse("dashboard:registration_bulk_status"),
            {"ids": ["r1", "r2"], "status": "approved"},
        )
        self.assertEqual(resp["Location"], reverse("dashboard:registration_list"))
        self.assertEqual(list(bulk.call_args[0][1]), ["r1", "r2"])
        self.assertEqual(bulk.call_args[0][2], "approved")

    @patch("apps.dashboard.views.registrations.update_status")
    def test_registration_status(self, update):
        self.sign_in()
        self.client.post(
            reverse("dashboard:registration_status", args=["r1"]),
            {"status": "reviewed", "admin_notes": "Called"},
        )
        self.assertEqual(update.call_args[0][1:], ("r1", "reviewed", "Called"))

    @patch("apps.dashboard.views.registrations.export_csv", return_value=(b"firstName\nAhmad\n", "text/csv"))
    def test_registration_export(self, export):
        self.sign_in()
        resp = self.client.get(reverse("dashboard:registration_export"), {"status": "approved", "province": "all"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp["Content-Disposition"], 'attachment; filename="registrations.csv"')
        self.assertEqual(resp.content, b"firstName\nAhmad\n")
        self.assertEqual(export.call_args[0][1], {"status": "approved"})
