# apps/outreach/views.py
"""
Public form flows.

Every submission follows post/redirect/get: success adds a message and
redirects, a backend failure adds an error message carrying the backend's
text and re-renders the bound form so nothing typed is lost.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from django.conf import settings
from django.contrib import messages
from django.http import HttpRequest, HttpResponse, HttpResponseRedirect
from django.utils.http import url_has_allowed_host_and_scheme
from django.utils.translation import gettext as _
from django.views.decorators.http import require_POST

from apps.backend.client import BackendError, client_for
from apps.backend.services import complaints, donations, jobs, newsletter, registrations
from apps.core.cache import ContentCache
from apps.core.utils.logging import log_event, request_context
from apps.core.views import render_first
from apps.outreach.forms import (
    ComplaintForm,
    DonationForm,
    JobApplicationForm,
    NewsletterForm,
    RegistrationForm,
)
from apps.pages.units import PageUnit, get_unit
from apps.pages.views import content_context, load_content

logger = logging.getLogger(__name__)

JOBS_PATH = "/resources/jobs"
VOLUNTEER_PATH = "/volunteer"


# ============================================================
# HELPERS
# ============================================================
def _render_unit_page(
    request: HttpRequest,
    unit: PageUnit,
    template: str,
    context: Dict[str, Any],
    *,
    status: int = 200,
) -> HttpResponse:
    base = {"unit": unit, "title": unit.title, "params": {}}
    base.update(context)
    return render_first(request, [template, *unit.templates], base, status=status)


def _backend_failed(request: HttpRequest, exc: BackendError, action: str) -> None:
    log_event(
        logger,
        "warning",
        f"{action} failed",
        status=exc.status,
        error=exc.user_message,
        **request_context(request),
    )
    messages.error(request, exc.user_message)


def _safe_next(request: HttpRequest, candidate: Optional[str], default: str = "/") -> str:
    if candidate and url_has_allowed_host_and_scheme(
        candidate, allowed_hosts={request.get_host()}, require_https=request.is_secure()
    ):
        return candidate
    return default


# ============================================================
# DONATION
# ============================================================
def donation_page(request: HttpRequest, *, unit: PageUnit, params: Mapping[str, str]) -> HttpResponse:
    client = client_for(request)
    presets = ContentCache.get_or_fetch(
        "donation-config",
        lambda: donations.preset_amounts(client),
        timeout=settings.BACKEND_CONTENT_CACHE_TTL,
        namespace="donation-config",
    )

    if request.method == "POST":
        form = DonationForm(request.POST)
        if form.is_valid():
            try:
                donations.submit_donation(client, form.payload())
            except BackendError as exc:
                _backend_failed(request, exc, "Donation")
            else:
                log_event(logger, "info", "Donation submitted", **request_context(request))
                messages.success(request, _("Thank you for your donation!"))
                return HttpResponseRedirect(request.path)
    else:
        form = DonationForm()

    return _render_unit_page(request, unit, "outreach/donation.html", {"form": form, "presets": presets})


# ============================================================
# JOBS
# ============================================================
def _jobs_context(request: HttpRequest, form: JobApplicationForm) -> Dict[str, Any]:
    unit = get_unit("jobs")
    payload, error = load_content(request, unit.source, {"page": request.GET.get("page")})
    context = content_context(payload)
    context.update({"form": form, "content_error": error.user_message if error else ""})
    return context


def jobs_page(request: HttpRequest, *, unit: PageUnit, params: Mapping[str, str]) -> HttpResponse:
    form = JobApplicationForm(initial={"opportunity_id": request.GET.get("apply", "")})
    return _render_unit_page(request, unit, "outreach/jobs.html", _jobs_context(request, form))


def job_apply(request: HttpRequest) -> HttpResponse:
    if request.method != "POST":
        return HttpResponseRedirect(JOBS_PATH)

    form = JobApplicationForm(request.POST, request.FILES)
    if form.is_valid():
        try:
            jobs.apply(
                client_for(request),
                form.fields_payload(),
                resume=form.cleaned_data["resume"],
                cover_letter_file=form.cleaned_data.get("cover_letter_file"),
                opportunity_id=form.cleaned_data.get("opportunity_id") or None,
            )
        except BackendError as exc:
            _backend_failed(request, exc, "Job application")
        else:
            log_event(logger, "info", "Job application submitted", **request_context(request))
            messages.success(request, _("Your application has been submitted successfully."))
            return HttpResponseRedirect(JOBS_PATH)
    else:
        messages.error(request, _("Please correct the errors below."))

    unit = get_unit("jobs")
    return _render_unit_page(request, unit, "outreach/jobs.html", _jobs_context(request, form), status=400 if form.errors else 200)


# ============================================================
# COMPLAINTS & FEEDBACK
# ============================================================
def complaints_page(request: HttpRequest, *, unit: PageUnit, params: Mapping[str, str]) -> HttpResponse:
    if request.method == "POST":
        form = ComplaintForm(request.POST)
        if form.is_valid():
            try:
                complaints.submit(client_for(request), **form.cleaned_data)
            except BackendError as exc:
                _backend_failed(request, exc, "Complaint submission")
            else:
                messages.success(request, _("Thank you! Your message has been received."))
                return HttpResponseRedirect(request.path)
    else:
        form = ComplaintForm()

    return _render_unit_page(request, unit, "outreach/complaints.html", {"form": form})


# ============================================================
# NEWSLETTER
# ============================================================
@require_POST
def newsletter_subscribe(request: HttpRequest) -> HttpResponse:
    form = NewsletterForm(request.POST)
    target = _safe_next(request, request.POST.get("next"))
    if not form.is_valid():
        messages.error(request, _("Please enter a valid email address."))
        return HttpResponseRedirect(target)
    try:
        newsletter.subscribe(client_for(request), form.cleaned_data["email"])
    except BackendError as exc:
        _backend_failed(request, exc, "Newsletter subscription")
    else:
        messages.success(request, _("You have subscribed to our newsletter."))
    return HttpResponseRedirect(target)


@require_POST
def newsletter_unsubscribe(request: HttpRequest) -> HttpResponse:
    form = NewsletterForm(request.POST)
    target = _safe_next(request, request.POST.get("next"))
    if not form.is_valid():
        messages.error(request, _("Please enter a valid email address."))
        return HttpResponseRedirect(target)
    try:
        newsletter.unsubscribe(client_for(request), form.cleaned_data["email"])
    except BackendError as exc:
        _backend_failed(request, exc, "Newsletter unsubscribe")
    else:
        messages.success(request, _("You have been unsubscribed."))
    return HttpResponseRedirect(target)


# ============================================================
# REGISTRATION
# ============================================================
def registration_page(request: HttpRequest, *, unit: PageUnit, params: Mapping[str, str]) -> HttpResponse:
    return _render_unit_page(request, unit, "outreach/registration.html", {"form": RegistrationForm()})


def registration(request: HttpRequest) -> HttpResponse:
    if request.method != "POST":
        return HttpResponseRedirect(VOLUNTEER_PATH)

    form = RegistrationForm(request.POST)
    if form.is_valid():
        try:
            registrations.submit(client_for(request), form.payload())
        except BackendError as exc:
            _backend_failed(request, exc, "Registration")
        else:
            log_event(logger, "info", "Registration submitted", **request_context(request))
            messages.success(request, _("Registration submitted successfully! We will contact you soon."))
            return HttpResponseRedirect(VOLUNTEER_PATH)

    unit = get_unit("volunteer")
    return _render_unit_page(
        request, unit, "outreach/registration.html", {"form": form}, status=400 if form.errors else 200
    )
