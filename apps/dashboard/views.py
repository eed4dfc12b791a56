# apps/dashboard/views.py
"""
Back-office screens.

Every screen runs the same cycle against the backend: fetch a page with the
current filters, narrow it with the search box, render, mutate on POST, then
redirect back so the list is fetched fresh. Backend failures become error
messages; a rejected token ends the session (see ``backend_login_required``).
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Sequence

from django.conf import settings
from django.contrib import messages
from django.http import Http404, HttpRequest, HttpResponse, HttpResponseRedirect
from django.shortcuts import render
from django.urls import reverse
from django.utils.http import url_has_allowed_host_and_scheme
from django.utils.translation import gettext as _
from django.views.decorators.http import require_http_methods, require_POST

from apps.backend.client import BackendClient, BackendError, client_for, record_id
from apps.backend.services import auth as backend_auth
from apps.backend.services import certificates, donations, jobs, newsletter, registrations
from apps.core.cache import ContentCache
from apps.core.utils.logging import log_event, request_context
from apps.dashboard.auth import backend_login_required, is_signed_in, sign_in, sign_out
from apps.dashboard.forms import (
    BulkStatusForm,
    CertificateForm,
    JobForm,
    JobStatusForm,
    LoginForm,
    RegistrationStatusForm,
)
from apps.dashboard.listing import ListPage, list_page, page_number

logger = logging.getLogger(__name__)

JOB_SEARCH_FIELDS = ("title", "description", "department")
CERTIFICATE_SEARCH_FIELDS = ("certificateId", "name", "recipientName", "courseTitle", "instructorName")
REGISTRATION_SEARCH_FIELDS = ("firstName", "lastName", "email", "province", "occupation", "organization")
SUBSCRIBER_SEARCH_FIELDS = ("email", "name")


# ============================================================
# HELPERS
# ============================================================
def _list_filters(request: HttpRequest, *names: str) -> Dict[str, Any]:
    """Backend filters from the query string; ``all`` means no filter."""
    filters: Dict[str, Any] = {}
    for name in names:
        value = (request.GET.get(name) or "").strip()
        if value and value != "all":
            filters[name] = value
    return filters


def _fetch(request: HttpRequest, action: str, call: Callable[[BackendClient], Any], default: Any = None) -> Any:
    """Run a backend read; failures other than 401 become an error message."""
    try:
        return call(client_for(request))
    except BackendError as exc:
        if exc.unauthorized:
            raise
        log_event(logger, "warning", f"{action} failed", status=exc.status, error=exc.user_message, **request_context(request))
        messages.error(request, exc.user_message)
        return default


def _mutate(request: HttpRequest, action: str, call: Callable[[BackendClient], Any], success: str, namespace: Optional[str] = None) -> bool:
    """Run a backend write and report the outcome as a message."""
    try:
        call(client_for(request))
    except BackendError as exc:
        if exc.unauthorized:
            raise
        log_event(logger, "warning", f"{action} failed", status=exc.status, error=exc.user_message, **request_context(request))
        messages.error(request, exc.user_message)
        return False
    if namespace:
        ContentCache.invalidate(namespace)
    log_event(logger, "info", action, **request_context(request))
    messages.success(request, success)
    return True


def _back(request: HttpRequest, default: str) -> HttpResponseRedirect:
    """Redirect to the list the POST came from, keeping its filters."""
    target = request.POST.get("next") or default
    if not url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}):
        target = default
    return HttpResponseRedirect(target)


def _list_context(request: HttpRequest, page: ListPage, **extra: Any) -> Dict[str, Any]:
    context = {
        "page": page,
        "items": page.items,
        "query": (request.GET.get("search") or "").strip(),
        "filters": request.GET,
        "debounce_ms": settings.DASHBOARD_SEARCH_DEBOUNCE_MS,
    }
    context.update(extra)
    return context


# ============================================================
# AUTH
# ============================================================
@require_http_methods(["GET", "POST"])
def login_view(request: HttpRequest) -> HttpResponse:
    if is_signed_in(request) and request.method == "GET":
        return HttpResponseRedirect(reverse("dashboard:home"))

    form = LoginForm(request.POST or None, initial={"next": request.GET.get("next", "")})
    if request.method == "POST" and form.is_valid():
        try:
            token, user = backend_auth.login(
                client_for(request),
                form.cleaned_data["username"],
                form.cleaned_data["password"],
            )
        except BackendError as exc:
            log_event(logger, "warning", "Back-office login failed", status=exc.status, **request_context(request))
            messages.error(request, exc.user_message)
        else:
            sign_in(request, token, user)
            log_event(logger, "info", "Back-office login", username=form.cleaned_data["username"], **request_context(request))
            target = form.cleaned_data.get("next") or ""
            if not url_has_allowed_host_and_scheme(target, allowed_hosts={request.get_host()}):
                target = reverse("dashboard:home")
            return HttpResponseRedirect(target)

    return render(request, "dashboard/login.html", {"form": form})


@require_POST
def logout_view(request: HttpRequest) -> HttpResponse:
    if is_signed_in(request):
        try:
            backend_auth.logout(client_for(request))
        except BackendError as exc:
            log_event(logger, "info", "Backend logout failed", error=exc.user_message)
    sign_out(request)
    messages.info(request, _("Logged out successfully"))
    return HttpResponseRedirect(reverse("dashboard:login"))


# ============================================================
# OVERVIEW
# ============================================================
@backend_login_required
def home(request: HttpRequest) -> HttpResponse:
    stats = {
        "jobs": _fetch(request, "Job statistics", jobs.job_stats, {}),
        "certificates": _fetch(request, "Certificate statistics", certificates.statistics, {}),
        "registrations": _fetch(request, "Registration statistics", registrations.statistics, {}),
    }
    return render(request, "dashboard/home.html", {"stats": stats})


# ============================================================
# JOBS
# ============================================================
@backend_login_required
def job_list(request: HttpRequest) -> HttpResponse:
    query = (request.GET.get("search") or "").strip()
    number = page_number(request.GET.get("page"))
    filters = _list_filters(request, "status", "employmentType")
    body = _fetch(
        request,
        "Job list",
        lambda c: jobs.list_jobs(c, page=number, limit=settings.DASHBOARD_PAGE_SIZE, search=query, **filters),
    )
    page = list_page(body, query=query, fields=JOB_SEARCH_FIELDS)
    return render(
        request,
        "dashboard/jobs/list.html",
        _list_context(request, page, statuses=jobs.STATUSES, employment_types=jobs.EMPLOYMENT_TYPES),
    )


def _job_form(request: HttpRequest, job_id: Optional[str] = None) -> HttpResponse:
    item: Dict[str, Any] = {}
    if job_id is not None:
        item = _fetch(request, "Job detail", lambda c: jobs.get_job(c, job_id))
        if not isinstance(item, dict):
            raise Http404("Job not found")

    form = JobForm(request.POST or None, initial=JobForm.initial_from(item) if item else None)
    if request.method == "POST" and form.is_valid():
        if job_id is None:
            saved = _mutate(request, "Job created", lambda c: jobs.create_job(c, form.payload()), _("Job created successfully"), "jobs")
        else:
            saved = _mutate(request, "Job updated", lambda c: jobs.update_job(c, job_id, form.payload()), _("Job updated successfully"), "jobs")
        if saved:
            return HttpResponseRedirect(reverse("dashboard:job_list"))

    return render(request, "dashboard/jobs/form.html", {"form": form, "item": item, "job_id": job_id})


@backend_login_required
@require_http_methods(["GET", "POST"])
def job_create(request: HttpRequest) -> HttpResponse:
    return _job_form(request)


@backend_login_required
@require_http_methods(["GET", "POST"])
def job_edit(request: HttpRequest, job_id: str) -> HttpResponse:
    return _job_form(request, job_id)


@backend_login_required
@require_POST
def job_delete(request: HttpRequest, job_id: str) -> HttpResponse:
    _mutate(request, "Job deleted", lambda c: jobs.delete_job(c, job_id), _("Job deleted successfully"), "jobs")
    return _back(request, reverse("dashboard:job_list"))


@backend_login_required
@require_POST
def job_status(request: HttpRequest, job_id: str) -> HttpResponse:
    form = JobStatusForm(request.POST)
    if form.is_valid():
        status = form.cleaned_data["status"]
        _mutate(
            request,
            "Job status changed",
            lambda c: jobs.update_job_status(c, job_id, status),
            _("Job status updated to %(status)s") % {"status": status},
            "jobs",
        )
    else:
        messages.error(request, _("Invalid status"))
    return _back(request, reverse("dashboard:job_list"))


# ============================================================
# CERTIFICATES
# ============================================================
@backend_login_required
def certificate_list(request: HttpRequest) -> HttpResponse:
    query = (request.GET.get("search") or "").strip()
    number = page_number(request.GET.get("page"))
    filters = _list_filters(request, "status")
    body = _fetch(
        request,
        "Certificate list",
        lambda c: certificates.list_certificates(c, page=number, limit=settings.DASHBOARD_PAGE_SIZE, search=query, **filters),
    )
    page = list_page(body, query=query, fields=CERTIFICATE_SEARCH_FIELDS)
    return render(request, "dashboard/certificates/list.html", _list_context(request, page, statuses=certificates.STATUSES))


def _certificate_form(request: HttpRequest, certificate_id: Optional[str] = None) -> HttpResponse:
    item: Dict[str, Any] = {}
    if certificate_id is not None:
        item = _fetch(request, "Certificate detail", lambda c: certificates.get_certificate(c, certificate_id))
        if not isinstance(item, dict):
            raise Http404("Certificate not found")

    initial = CertificateForm.initial_from(item) if item else {}
    if request.method == "GET" and request.GET.get("generate"):
        generated = _fetch(request, "Certificate id generation", certificates.generate_id, "")
        if generated:
            initial["certificate_id"] = generated

    form = CertificateForm(request.POST or None, initial=initial)
    if request.method == "POST" and form.is_valid():
        if certificate_id is None:
            saved = _mutate(
                request,
                "Certificate created",
                lambda c: certificates.create_certificate(c, form.payload()),
                _("Certificate created successfully"),
                "certificates",
            )
        else:
            saved = _mutate(
                request,
                "Certificate updated",
                lambda c: certificates.update_certificate(c, certificate_id, form.payload()),
                _("Certificate updated successfully"),
                "certificates",
            )
        if saved:
            return HttpResponseRedirect(reverse("dashboard:certificate_list"))

    return render(
        request,
        "dashboard/certificates/form.html",
        {"form": form, "item": item, "certificate_id": certificate_id},
    )


@backend_login_required
@require_http_methods(["GET", "POST"])
def certificate_create(request: HttpRequest) -> HttpResponse:
    return _certificate_form(request)


@backend_login_required
@require_http_methods(["GET", "POST"])
def certificate_edit(request: HttpRequest, certificate_id: str) -> HttpResponse:
    return _certificate_form(request, certificate_id)


@backend_login_required
@require_POST
def certificate_delete(request: HttpRequest, certificate_id: str) -> HttpResponse:
    _mutate(
        request,
        "Certificate deleted",
        lambda c: certificates.delete_certificate(c, certificate_id),
        _("Certificate deleted successfully"),
        "certificates",
    )
    return _back(request, reverse("dashboard:certificate_list"))


@backend_login_required
@require_POST
def certificate_toggle(request: HttpRequest, certificate_id: str) -> HttpResponse:
    _mutate(
        request,
        "Certificate status toggled",
        lambda c: certificates.toggle_status(c, certificate_id),
        _("Certificate status updated"),
        "certificates",
    )
    return _back(request, reverse("dashboard:certificate_list"))


# ============================================================
# DONATIONS (read-only)
# ============================================================
@backend_login_required
def donation_list(request: HttpRequest) -> HttpResponse:
    number = page_number(request.GET.get("page"))
    body = _fetch(
        request,
        "Donation list",
        lambda c: donations.list_donations(c, page=number, limit=settings.DASHBOARD_PAGE_SIZE),
    )
    return render(request, "dashboard/donations/list.html", _list_context(request, list_page(body)))


@backend_login_required
def donation_detail(request: HttpRequest, donation_id: str) -> HttpResponse:
    item = _fetch(request, "Donation detail", lambda c: donations.get_donation(c, donation_id))
    if not isinstance(item, dict):
        raise Http404("Donation not found")
    return render(request, "dashboard/donations/detail.html", {"item": item})


# ============================================================
# NEWSLETTER
# ============================================================
@backend_login_required
def newsletter_list(request: HttpRequest) -> HttpResponse:
    query = (request.GET.get("search") or "").strip()
    number = page_number(request.GET.get("page"))
    status = _list_filters(request, "status").get("status")
    result = _fetch(
        request,
        "Newsletter list",
        lambda c: newsletter.list_subscribers(c, page=number, limit=settings.DASHBOARD_PAGE_SIZE, status=status),
        {"data": [], "pagination": None},
    )
    page = list_page(
        result["data"],
        query=query,
        fields=SUBSCRIBER_SEARCH_FIELDS,
        pagination=result.get("pagination"),
    )
    return render(request, "dashboard/newsletter/list.html", _list_context(request, page))


# ============================================================
# REGISTRATIONS
# ============================================================
@backend_login_required
def registration_list(request: HttpRequest) -> HttpResponse:
    query = (request.GET.get("search") or "").strip()
    number = page_number(request.GET.get("page"))
    filters = _list_filters(request, "status", "province", "interestArea")
    body = _fetch(
        request,
        "Registration list",
        lambda c: registrations.list_registrations(c, page=number, limit=settings.DASHBOARD_PAGE_SIZE, search=query, **filters),
    )
    page = list_page(body, query=query, fields=REGISTRATION_SEARCH_FIELDS)
    return render(
        request,
        "dashboard/registrations/list.html",
        _list_context(request, page, statuses=registrations.STATUSES, interest_areas=registrations.INTEREST_AREAS),
    )


@backend_login_required
def registration_detail(request: HttpRequest, registration_id: str) -> HttpResponse:
    item = _fetch(request, "Registration detail", lambda c: registrations.get_registration(c, registration_id))
    if not isinstance(item, dict):
        raise Http404("Registration not found")
    item = {**item, "pk": record_id(item) or registration_id}
    form = RegistrationStatusForm(initial={"status": item.get("status", "pending"), "admin_notes": item.get("adminNotes", "")})
    return render(request, "dashboard/registrations/detail.html", {"item": item, "form": form})


@backend_login_required
@require_POST
def registration_status(request: HttpRequest, registration_id: str) -> HttpResponse:
    form = RegistrationStatusForm(request.POST)
    if form.is_valid():
        _mutate(
            request,
            "Registration status changed",
            lambda c: registrations.update_status(c, registration_id, form.cleaned_data["status"], form.cleaned_data["admin_notes"]),
            _("Registration status updated"),
        )
    else:
        messages.error(request, _("Invalid status"))
    return _back(request, reverse("dashboard:registration_detail", args=[registration_id]))


@backend_login_required
@require_POST
def registration_bulk_status(request: HttpRequest) -> HttpResponse:
    form = BulkStatusForm(request.POST)
    if form.is_valid():
        ids: Sequence[str] = form.cleaned_data["ids"]
        _mutate(
            request,
            "Registration bulk status",
            lambda c: registrations.bulk_update_status(c, ids, form.cleaned_data["status"]),
            _("%(count)d registrations updated") % {"count": len(ids)},
        )
    else:
        messages.error(request, _("Select at least one registration."))
    return _back(request, reverse("dashboard:registration_list"))


@backend_login_required
@require_POST
def registration_delete(request: HttpRequest, registration_id: str) -> HttpResponse:
    _mutate(
        request,
        "Registration deleted",
        lambda c: registrations.delete_registration(c, registration_id),
        _("Registration deleted successfully"),
    )
    return HttpResponseRedirect(reverse("dashboard:registration_list"))


@backend_login_required
def registration_export(request: HttpRequest) -> HttpResponse:
    filters = _list_filters(request, "status", "province", "interestArea")
    exported = _fetch(request, "Registration export", lambda c: registrations.export_csv(c, filters))
    if exported is None:
        return HttpResponseRedirect(reverse("dashboard:registration_list"))
    content, content_type = exported
    response = HttpResponse(content, content_type=content_type)
    response["Content-Disposition"] = 'attachment; filename="registrations.csv"'
    return response
