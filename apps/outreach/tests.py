from __future__ import annotations

import os
from unittest.mock import patch

import django

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "mmoweb.settings")
os.environ.setdefault("DJANGO_SECRET_KEY", "test-secret")
django.setup()

from django.core.cache import cache
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import Client, SimpleTestCase, override_settings
from django.urls import reverse

from apps.backend.client import BackendError
from apps.backend.services import complaints
from apps.outreach.forms import (
    ComplaintForm,
    DonationForm,
    JobApplicationForm,
    RegistrationForm,
)

NO_JOBS = ({"data": [], "pagination": None}, None)


def registration_data(**overrides):
    data = {
        "first_name": "Ahmad",
        "last_name": "Karimi",
        "email": "ahmad@example.org",
        "phone": "+93 700 123456",
        "province": "Kabul",
        "district": "District 5",
        "occupation": "Teacher",
        "organization": "",
        "interest_areas": ["volunteer", "internship"],
        "motivation": "I want to help my community grow.",
        "consent_to_contact": "on",
        "agree_to_terms": "on",
    }
    data.update(overrides)
    return data


def pdf(name="cv.pdf", size=10, content_type="application/pdf"):
    return SimpleUploadedFile(name, b"%PDF" + b"x" * size, content_type=content_type)


class DonationFormTests(SimpleTestCase):
    def data(self, **overrides):
        data = {
            "first_name": "Sara",
            "last_name": "Noori",
            "email": "sara@example.org",
            "amount": "60",
            "payment_method": "dbt",
            "period": "monthly",
        }
        data.update(overrides)
        return data

    def test_valid_payload(self):
        form = DonationForm(self.data(city="Herat", zip_code="3001"))
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(
            form.payload(),
            {
                "firstName": "Sara",
                "lastName": "Noori",
                "email": "sara@example.org",
                "amount": 60.0,
                "city": "Herat",
                "zipCode": "3001",
                "paymentMethod": "dbt",
                "period": "monthly",
            },
        )

    def test_amount_must_be_positive(self):
        for amount in ("0", "-5", "", "abc"):
            with self.subTest(amount=amount):
                form = DonationForm(self.data(amount=amount))
                self.assertFalse(form.is_valid())
                self.assertIn("Please enter a valid amount", form.errors["amount"])

    def test_payment_method_required(self):
        form = DonationForm(self.data(payment_method=""))
        self.assertFalse(form.is_valid())
        self.assertIn("Please select a payment method", form.errors["payment_method"])

    def test_period_defaults_to_one_time(self):
        form = DonationForm(self.data(period=""))
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.payload()["period"], "one_time")


class RegistrationFormTests(SimpleTestCase):
    def test_valid(self):
        form = RegistrationForm(registration_data())
        self.assertTrue(form.is_valid(), form.errors)
        payload = form.payload()
        self.assertEqual(payload["interestAreas"], ["volunteer", "internship"])
        self.assertIs(payload["consentToContact"], True)
        self.assertEqual(payload["organization"], "")

    def test_dari_names_are_letters(self):
        form = RegistrationForm(registration_data(first_name="احمد", last_name="کریمی"))
        self.assertTrue(form.is_valid(), form.errors)

    def test_invalid_names(self):
        for name in ("A", "R2-D2", "x" * 51):
            with self.subTest(name=name):
                form = RegistrationForm(registration_data(first_name=name))
                self.assertFalse(form.is_valid())
                self.assertIn("first_name", form.errors)

    def test_invalid_phone(self):
        form = RegistrationForm(registration_data(phone="call me"))
        self.assertFalse(form.is_valid())
        self.assertIn("Please enter a valid phone number", form.errors["phone"])

    def test_lengths(self):
        cases = {
            "district": "K",
            "occupation": "x" * 101,
            "organization": "x",
            "motivation": "too short",
        }
        for field, value in cases.items():
            with self.subTest(field=field):
                form = RegistrationForm(registration_data(**{field: value}))
                self.assertFalse(form.is_valid())
                self.assertIn(field, form.errors)

    def test_consents_and_interests_required(self):
        data = registration_data(interest_areas=[])
        data.pop("consent_to_contact")
        data.pop("agree_to_terms")
        form = RegistrationForm(data)
        self.assertFalse(form.is_valid())
        self.assertIn("Please select at least one interest area", form.errors["interest_areas"])
        self.assertIn("You must consent to be contacted", form.errors["consent_to_contact"])
        self.assertIn("You must agree to the terms and conditions", form.errors["agree_to_terms"])


@override_settings(JOB_APPLICATION_MAX_UPLOAD_MB=1)
class JobApplicationFormTests(SimpleTestCase):
    def data(self):
        return {
            "first_name": "Sara",
            "last_name": "Noori",
            "email": "sara@example.org",
            "phone": "0700123456",
            "position": "Field Officer",
        }

    def test_pdf_resume_accepted(self):
        form = JobApplicationForm(self.data(), {"resume": pdf()})
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.fields_payload()["position"], "Field Officer")
        self.assertEqual(form.fields_payload()["dateOfBirth"], "")

    def test_resume_required(self):
        form = JobApplicationForm(self.data(), {})
        self.assertFalse(form.is_valid())
        self.assertIn("resume", form.errors)

    def test_wrong_document_type(self):
        for upload in (pdf("cv.exe", content_type="application/octet-stream"), pdf("cv.pdf", content_type="image/png")):
            with self.subTest(name=upload.name):
                form = JobApplicationForm(self.data(), {"resume": upload})
                self.assertFalse(form.is_valid())
                self.assertIn("Only PDF, DOC and DOCX files are allowed.", form.errors["resume"])

    def test_document_too_large(self):
        form = JobApplicationForm(self.data(), {"resume": pdf(size=1024 * 1024 + 1)})
        self.assertFalse(form.is_valid())
        self.assertIn("resume", form.errors)


class ComplaintFormTests(SimpleTestCase):
    def test_payload_maps_types(self):
        form = ComplaintForm({"name": "N", "email": "n@example.org", "type": "suggestion", "message": "Hello"})
        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(
            form.payload(),
            {
                "name": "N",
                "email": "n@example.org",
                "type": "feedback",
                "subject": complaints.DEFAULT_SUBJECT,
                "message": "Hello",
            },
        )


@override_settings(ALLOWED_HOSTS=["testserver"])
class FormViewTests(SimpleTestCase):
    def setUp(self):
        cache.clear()
        self.client = Client()

    # -- donation -------------------------------------------------------
    @patch("apps.outreach.views.donations.preset_amounts", return_value=[25, 50])
    def test_donation_page_shows_presets(self, presets):
        resp = self.client.get("/donation")
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, 'data-amount="25"')
        self.assertContains(resp, 'data-amount="50"')

    @patch("apps.outreach.views.donations.submit_donation")
    @patch("apps.outreach.views.donations.preset_amounts", return_value=[20])
    def test_donation_success_redirects(self, presets, submit):
        resp = self.client.post(
            "/donation",
            {"first_name": "Sara", "last_name": "Noori", "email": "sara@example.org", "amount": "30", "payment_method": "cp"},
            follow=True,
        )
        self.assertRedirects(resp, "/donation")
        self.assertContains(resp, "Thank you for your donation!")
        self.assertEqual(submit.call_args[0][1]["amount"], 30.0)

    @patch("apps.outreach.views.donations.submit_donation")
    @patch("apps.outreach.views.donations.preset_amounts", return_value=[20])
    def test_donation_backend_error_keeps_form(self, presets, submit):
        submit.side_effect = BackendError("Bad Request. Please check your input.", status=400)
        resp = self.client.post(
            "/donation",
            {"first_name": "Sara", "last_name": "Noori", "email": "sara@example.org", "amount": "30", "payment_method": "cp"},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Bad Request. Please check your input.")
        self.assertContains(resp, 'value="Noori"')

    # -- jobs -----------------------------------------------------------
    @patch("apps.outreach.views.load_content")
    def test_jobs_page_lists_jobs(self, load):
        load.return_value = ({"data": [{"_id": "j1", "title": {"en": "Field Officer"}}], "pagination": None}, None)
        resp = self.client.get("/resources/jobs")
        self.assertContains(resp, "Field Officer")
        self.assertContains(resp, "?apply=j1#apply")
        self.assertEqual(load.call_args[0][1], "jobs/published")

    @patch("apps.outreach.views.load_content", return_value=NO_JOBS)
    def test_apply_preselects_job(self, load):
        resp = self.client.get("/resources/jobs", {"apply": "j1"})
        self.assertEqual(resp.context["form"].initial["opportunity_id"], "j1")

    @patch("apps.outreach.views.jobs.apply")
    def test_job_application_success(self, apply):
        resp = self.client.post(
            reverse("outreach:job_apply"),
            {
                "opportunity_id": "j1",
                "first_name": "Sara",
                "last_name": "Noori",
                "email": "sara@example.org",
                "phone": "0700123456",
                "resume": pdf(),
            },
        )
        self.assertEqual(resp.status_code, 302)
        self.assertEqual(resp["Location"], "/resources/jobs")
        self.assertEqual(apply.call_args.kwargs["opportunity_id"], "j1")
        self.assertEqual(apply.call_args.kwargs["resume"].name, "cv.pdf")

    @patch("apps.outreach.views.load_content", return_value=NO_JOBS)
    @patch("apps.outreach.views.jobs.apply")
    def test_job_application_invalid(self, apply, load):
        resp = self.client.post(reverse("outreach:job_apply"), {"first_name": "Sara"})
        self.assertEqual(resp.status_code, 400)
        apply.assert_not_called()

    def test_job_apply_get_redirects(self):
        resp = self.client.get(reverse("outreach:job_apply"))
        self.assertEqual(resp["Location"], "/resources/jobs")

    # -- complaints -----------------------------------------------------
    @patch("apps.outreach.views.complaints.submit")
    def test_complaint_success(self, submit):
        resp = self.client.post(
            "/complaints-feedback",
            {"name": "N", "email": "n@example.org", "type": "complaint", "message": "Something happened"},
        )
        self.assertEqual(resp.status_code, 302)
        self.assertEqual(submit.call_args.kwargs["type"], "complaint")

    # -- newsletter -----------------------------------------------------
    @patch("apps.outreach.views.newsletter.subscribe")
    def test_subscribe_returns_to_page(self, subscribe):
        resp = self.client.post(reverse("outreach:newsletter_subscribe"), {"email": "a@example.org", "next": "/faq"})
        self.assertEqual(resp["Location"], "/faq")
        self.assertEqual(subscribe.call_args[0][1], "a@example.org")

    @patch("apps.outreach.views.newsletter.subscribe")
    def test_subscribe_rejects_offsite_next(self, subscribe):
        resp = self.client.post(
            reverse("outreach:newsletter_subscribe"),
            {"email": "a@example.org", "next": "https://evil.example/"},
        )
        self.assertEqual(resp["Location"], "/")

    @patch("apps.outreach.views.newsletter.subscribe")
    def test_subscribe_invalid_email(self, subscribe):
        resp = self.client.post(reverse("outreach:newsletter_subscribe"), {"email": "nope"})
        self.assertEqual(resp.status_code, 302)
        subscribe.assert_not_called()

    def test_subscribe_requires_post(self):
        self.assertEqual(self.client.get(reverse("outreach:newsletter_subscribe")).status_code, 405)

    @patch("apps.outreach.views.newsletter.unsubscribe")
    def test_unsubscribe(self, unsubscribe):
        resp = self.client.post(reverse("outreach:newsletter_unsubscribe"), {"email": "a@example.org"})
        self.assertEqual(resp.status_code, 302)
        unsubscribe.assert_called_once()

    # -- registration ---------------------------------------------------
    def test_volunteer_page_renders_form(self):
        resp = self.client.get("/volunteer")
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, 'name="motivation"')

    @patch("apps.outreach.views.registrations.submit")
    def test_registration_success(self, submit):
        resp = self.client.post(reverse("outreach:registration"), registration_data(), follow=True)
        self.assertRedirects(resp, "/volunteer")
        self.assertContains(resp, "Registration submitted successfully! We will contact you soon.")
        self.assertEqual(submit.call_args[0][1]["firstName"], "Ahmad")

    @patch("apps.outreach.views.registrations.submit")
    def test_registration_invalid(self, submit):
        resp = self.client.post(reverse("outreach:registration"), registration_data(phone="x"))
        self.assertEqual(resp.status_code, 400)
        submit.assert_not_called()

    @patch("apps.outreach.views.registrations.submit")
    def test_registration_backend_error(self, submit):
        submit.side_effect = BackendError("Server error. Please try again later.", status=503)
        resp = self.client.post(reverse("outreach:registration"), registration_data())
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Server error. Please try again later.")
