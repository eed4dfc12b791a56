"""
Back-office forms.

Multilingual backend fields (``{"en", "per", "ps"}``) are edited as one
input per language: ``title`` becomes ``title_en``, ``title_per`` and
``title_ps``, and is folded back into a dict by ``payload()``.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping

from django import forms
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from apps.backend.services import jobs, registrations

API_LANGUAGES = (("en", "English"), ("per", "Dari"), ("ps", "Pashto"))

EXPERIENCE_LEVELS = ("Entry-level", "Mid-level", "Senior-level", "Manager")
APPLICATION_METHODS = ("Email", "Portal", "Both")
GENDERS = ("Any", "Male", "Female")


def _choices(values: Iterable[str]) -> list:
    return [(value, value) for value in values]


class MultilingualMixin:
    """Declares per-language fields for every name in ``multilingual``."""

    multilingual: tuple = ()
    multilingual_required: tuple = ()
    textareas: tuple = ()

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        for name, label in self.multilingual:
            for code, language in API_LANGUAGES:
                widget = (
                    forms.Textarea(attrs={"rows": 3, "class": "form-control"})
                    if name in self.textareas
                    else forms.TextInput(attrs={"class": "form-control"})
                )
                if code in ("per", "ps"):
                    widget.attrs["dir"] = "rtl"
                self.fields[f"{name}_{code}"] = forms.CharField(
                    required=False, label=f"{label} ({language})", widget=widget
                )

    @classmethod
    def initial_from(cls, item: Mapping[str, Any]) -> Dict[str, Any]:
        """Form initial data from a backend record."""
        initial: Dict[str, Any] = {}
        for name, _label in cls.multilingual:
            value = item.get(name)
            for code, _language in API_LANGUAGES:
                if isinstance(value, dict):
                    initial[f"{name}_{code}"] = value.get(code, "")
                elif code == "en" and value:
                    initial[f"{name}_{code}"] = value
        return initial

    def clean(self):
        cleaned = super().clean()
        for name, label in self.multilingual:
            if name in self.multilingual_required and not any(
                (cleaned.get(f"{name}_{code}") or "").strip() for code, _language in API_LANGUAGES
            ):
                self.add_error(f"{name}_en", ValidationError(_("%(label)s is required in at least one language"), params={"label": label}))
        return cleaned

    def multilingual_payload(self) -> Dict[str, Dict[str, str]]:
        return {
            name: {code: (self.cleaned_data.get(f"{name}_{code}") or "").strip() for code, _language in API_LANGUAGES}
            for name, _label in self.multilingual
        }


# ============================================================
# AUTH
# ============================================================
class LoginForm(forms.Form):
    username = forms.CharField(
        max_length=150,
        label=_("Username"),
        widget=forms.TextInput(attrs={"autocomplete": "username", "class": "form-control"}),
    )
    password = forms.CharField(
        label=_("Password"),
        strip=False,
        widget=forms.PasswordInput(attrs={"autocomplete": "current-password", "class": "form-control"}),
    )
    next = forms.CharField(required=False, widget=forms.HiddenInput)


# ============================================================
# JOBS
# ============================================================
class JobForm(MultilingualMixin, forms.Form):
    multilingual = (
        ("title", "Title"),
        ("description", "Description"),
        ("requirements", "Requirements"),
        ("responsibilities", "Responsibilities"),
        ("location", "Location"),
        ("department", "Department"),
    )
    multilingual_required = ("title", "description", "requirements", "responsibilities", "location", "department")
    textareas = ("description", "requirements", "responsibilities")

    employment_type = forms.ChoiceField(label=_("Employment type"), choices=_choices(jobs.EMPLOYMENT_TYPES), initial="Full-time")
    experience_level = forms.ChoiceField(label=_("Experience level"), choices=_choices(EXPERIENCE_LEVELS), initial="Entry-level")
    application_deadline = forms.DateField(
        label=_("Application deadline"),
        widget=forms.DateInput(attrs={"type": "date", "class": "form-control"}),
        error_messages={"required": _("Application deadline is required")},
    )
    application_email = forms.EmailField(required=False, label=_("Application email"))
    application_method = forms.ChoiceField(label=_("Application method"), choices=_choices(APPLICATION_METHODS), initial="Both")
    number_of_positions = forms.IntegerField(label=_("Positions"), min_value=1, initial=1)
    gender = forms.ChoiceField(label=_("Gender"), choices=_choices(GENDERS), initial="Any")
    status = forms.ChoiceField(label=_("Status"), choices=_choices(jobs.STATUSES), initial="Draft")
    featured = forms.BooleanField(required=False, label=_("Featured"))
    urgent = forms.BooleanField(required=False, label=_("Urgent"))

    FLAT_FIELDS = {
        "employment_type": "employmentType",
        "experience_level": "experienceLevel",
        "application_email": "applicationEmail",
        "application_method": "applicationMethod",
        "number_of_positions": "numberOfPositions",
        "gender": "gender",
        "status": "status",
        "featured": "featured",
        "urgent": "urgent",
    }

    @classmethod
    def initial_from(cls, item: Mapping[str, Any]) -> Dict[str, Any]:
        initial = super().initial_from(item)
        for field, key in cls.FLAT_FIELDS.items():
            if key in item:
                initial[field] = item[key]
        deadline = item.get("applicationDeadline")
        if deadline:
            initial["application_deadline"] = str(deadline)[:10]
        return initial

    def payload(self) -> Dict[str, Any]:
        data = self.multilingual_payload()
        for field, key in self.FLAT_FIELDS.items():
            data[key] = self.cleaned_data.get(field)
        data["applicationEmail"] = data["applicationEmail"] or ""
        data["applicationDeadline"] = self.cleaned_data["application_deadline"].isoformat()
        return data


# ============================================================
# CERTIFICATES
# ============================================================
class CertificateForm(forms.Form):
    certificate_id = forms.CharField(max_length=100, label=_("Certificate ID"))
    name = forms.CharField(max_length=200, label=_("Certificate name"))
    recipient_name = forms.CharField(max_length=200, label=_("Recipient name"))
    course_title = forms.CharField(max_length=200, label=_("Course title"))
    completion_date = forms.DateField(label=_("Completion date"), widget=forms.DateInput(attrs={"type": "date"}))
    instructor_name = forms.CharField(max_length=200, required=False, label=_("Instructor"))
    description = forms.CharField(required=False, label=_("Description"), widget=forms.Textarea(attrs={"rows": 3}))

    KEYS = {
        "certificate_id": "certificateId",
        "name": "name",
        "recipient_name": "recipientName",
        "course_title": "courseTitle",
        "instructor_name": "instructorName",
        "description": "description",
    }

    @classmethod
    def initial_from(cls, item: Mapping[str, Any]) -> Dict[str, Any]:
        initial = {field: item.get(key, "") for field, key in cls.KEYS.items()}
        if item.get("completionDate"):
            initial["completion_date"] = str(item["completionDate"])[:10]
        return initial

    def payload(self) -> Dict[str, Any]:
        data = {key: (self.cleaned_data.get(field) or "").strip() for field, key in self.KEYS.items()}
        data["completionDate"] = self.cleaned_data["completion_date"].isoformat()
        return data


# ============================================================
# STATUS CHANGES
# ============================================================
class JobStatusForm(forms.Form):
    status = forms.ChoiceField(choices=_choices(jobs.STATUSES))


class RegistrationStatusForm(forms.Form):
    status = forms.ChoiceField(choices=_choices(registrations.STATUSES))
    admin_notes = forms.CharField(required=False, max_length=1000, widget=forms.Textarea(attrs={"rows": 3}))


class BulkStatusForm(forms.Form):
    ids = forms.MultipleChoiceField(error_messages={"required": _("Select at least one registration.")})
    status = forms.ChoiceField(choices=_choices(registrations.STATUSES))

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        # ids come from the current page; any non-empty value is accepted
        submitted = self.data.getlist("ids") if hasattr(self.data, "getlist") else self.data.get("ids") or []
        self.fields["ids"].choices = [(value, value) for value in submitted if value]
