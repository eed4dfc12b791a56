"""
Public forms: donation, job application, complaints and feedback,
newsletter, volunteer/partner registration.

Field names are the Python spelling of the backend payload keys; each form
has a ``payload()`` that produces the exact JSON the backend expects.
"""

from __future__ import annotations

import os
import re
from decimal import Decimal
from typing import Any, Dict

from django import forms
from django.conf import settings
from django.core.exceptions import ValidationError
from django.utils.translation import gettext_lazy as _

from apps.backend.services import complaints, donations, registrations

NAME_RE = re.compile(r"^[a-zA-Z\u0600-\u06FF\s\-'\.]+$")
PHONE_RE = re.compile(r"^[\+]?[(]?[0-9]{1,4}[)]?[-\s\.]?[(]?[0-9]{1,4}[)]?[-\s\.]?[0-9]{1,9}$")

ALLOWED_DOCUMENT_EXTENSIONS = (".pdf", ".doc", ".docx")
ALLOWED_DOCUMENT_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)


def _text(attrs: Dict[str, Any] | None = None) -> forms.TextInput:
    return forms.TextInput(attrs={"class": "form-control", **(attrs or {})})


def validate_length(value: str, low: int, high: int, label: str) -> str:
    value = (value or "").strip()
    if not low <= len(value) <= high:
        raise ValidationError(_("%(label)s must be %(low)s-%(high)s characters"), params={"label": label, "low": low, "high": high})
    return value


def validate_document(upload) -> None:
    """PDF or Word document within the configured size limit."""
    ext = os.path.splitext(upload.name or "")[1].lower()
    content_type = getattr(upload, "content_type", "") or ""
    if ext not in ALLOWED_DOCUMENT_EXTENSIONS or (content_type and content_type not in ALLOWED_DOCUMENT_TYPES):
        raise ValidationError(_("Only PDF, DOC and DOCX files are allowed."))
    limit_mb = settings.JOB_APPLICATION_MAX_UPLOAD_MB
    if upload.size > limit_mb * 1024 * 1024:
        raise ValidationError(_("File must be smaller than %(mb)s MB."), params={"mb": limit_mb})


# ============================================================
# DONATION
# ============================================================
class DonationForm(forms.Form):
    first_name = forms.CharField(max_length=50, label=_("First name"), widget=_text({"autocomplete": "given-name"}))
    last_name = forms.CharField(max_length=50, label=_("Last name"), widget=_text({"autocomplete": "family-name"}))
    email = forms.EmailField(label=_("Email"), widget=forms.EmailInput(attrs={"class": "form-control"}))
    amount = forms.DecimalField(
        label=_("Amount"),
        max_digits=10,
        decimal_places=2,
        error_messages={"required": _("Please enter a valid amount"), "invalid": _("Please enter a valid amount")},
    )
    city = forms.CharField(max_length=100, required=False, label=_("City"), widget=_text())
    zip_code = forms.CharField(max_length=20, required=False, label=_("ZIP code"), widget=_text())
    payment_method = forms.ChoiceField(
        label=_("Payment method"),
        choices=[
            ("dbt", _("Direct bank transfer")),
            ("cp", _("Cheque payment")),
            ("stripe", _("Card (Stripe)")),
            ("paypal", _("PayPal")),
        ],
        widget=forms.RadioSelect,
        error_messages={"required": _("Please select a payment method")},
    )
    period = forms.ChoiceField(
        label=_("Frequency"),
        choices=[("one_time", _("One time")), ("monthly", _("Monthly")), ("yearly", _("Yearly"))],
        initial="one_time",
        required=False,
    )

    def clean_amount(self) -> Decimal:
        amount = self.cleaned_data["amount"]
        if amount is None or amount <= 0:
            raise ValidationError(_("Please enter a valid amount"))
        return amount

    def clean_payment_method(self) -> str:
        method = self.cleaned_data.get("payment_method")
        if method not in donations.PAYMENT_METHODS:
            raise ValidationError(_("Please select a payment method"))
        return method

    def payload(self) -> Dict[str, Any]:
        data = self.cleaned_data
        return {
            "firstName": data["first_name"],
            "lastName": data["last_name"],
            "email": data["email"],
            "amount": float(data["amount"]),
            "city": data.get("city", ""),
            "zipCode": data.get("zip_code", ""),
            "paymentMethod": data["payment_method"],
            "period": data.get("period") or "one_time",
        }


# ============================================================
# JOB APPLICATION
# ============================================================
class JobApplicationForm(forms.Form):
    opportunity_id = forms.CharField(required=False, widget=forms.HiddenInput)
    position = forms.CharField(max_length=200, required=False, widget=forms.HiddenInput)
    first_name = forms.CharField(max_length=50, label=_("First name"), widget=_text())
    last_name = forms.CharField(max_length=50, label=_("Last name"), widget=_text())
    email = forms.EmailField(label=_("Email"), widget=forms.EmailInput(attrs={"class": "form-control"}))
    phone = forms.CharField(max_length=30, label=_("Phone"), widget=_text({"type": "tel"}))
    education = forms.CharField(max_length=200, required=False, label=_("Education"), widget=_text())
    date_of_birth = forms.DateField(required=False, label=_("Date of birth"), widget=forms.DateInput(attrs={"type": "date", "class": "form-control"}))
    gender = forms.ChoiceField(
        required=False,
        label=_("Gender"),
        choices=[("", "---"), ("male", _("Male")), ("female", _("Female")), ("other", _("Other"))],
    )
    cover_letter = forms.CharField(required=False, label=_("Cover letter"), widget=forms.Textarea(attrs={"rows": 5, "class": "form-control"}))
    resume = forms.FileField(label=_("CV / Resume"), validators=[validate_document])
    cover_letter_file = forms.FileField(required=False, label=_("Cover letter (file)"), validators=[validate_document])

    def clean_phone(self) -> str:
        phone = (self.cleaned_data.get("phone") or "").strip()
        if not PHONE_RE.match(phone):
            raise ValidationError(_("Please enter a valid phone number"))
        return phone

    def fields_payload(self) -> Dict[str, Any]:
        data = self.cleaned_data
        dob = data.get("date_of_birth")
        return {
            "firstName": data["first_name"],
            "lastName": data["last_name"],
            "email": data["email"],
            "phone": data["phone"],
            "coverLetter": data.get("cover_letter", ""),
            "position": data.get("position", ""),
            "education": data.get("education", ""),
            "dateOfBirth": dob.isoformat() if dob else "",
            "gender": data.get("gender", ""),
        }


# ============================================================
# COMPLAINTS & FEEDBACK
# ============================================================
class ComplaintForm(forms.Form):
    name = forms.CharField(max_length=100, label=_("Name"), widget=_text())
    email = forms.EmailField(label=_("Email"), widget=forms.EmailInput(attrs={"class": "form-control"}))
    type = forms.ChoiceField(
        label=_("Type"),
        choices=[(t, t.title()) for t in complaints.TYPES],
        initial="feedback",
    )
    subject = forms.CharField(max_length=200, required=False, label=_("Subject"), widget=_text())
    message = forms.CharField(label=_("Message"), widget=forms.Textarea(attrs={"rows": 6, "class": "form-control"}))

    def payload(self) -> Dict[str, Any]:
        data = self.cleaned_data
        return complaints.build_payload(
            name=data["name"],
            email=data["email"],
            type=data["type"],
            subject=data.get("subject", ""),
            message=data["message"],
        )


# ============================================================
# NEWSLETTER
# ============================================================
class NewsletterForm(forms.Form):
    email = forms.EmailField(label=_("Email"), widget=forms.EmailInput(attrs={"class": "form-control", "placeholder": _("Your email")}))
    next = forms.CharField(required=False, widget=forms.HiddenInput)


# ============================================================
# REGISTRATION
# ============================================================
class RegistrationForm(forms.Form):
    first_name = forms.CharField(label=_("First name"), widget=_text())
    last_name = forms.CharField(label=_("Last name"), widget=_text())
    email = forms.EmailField(
        label=_("Email"),
        widget=forms.EmailInput(attrs={"class": "form-control"}),
        error_messages={"required": _("Email is required"), "invalid": _("Please enter a valid email address")},
    )
    phone = forms.CharField(label=_("Phone"), widget=_text({"type": "tel"}), error_messages={"required": _("Phone number is required")})
    province = forms.CharField(max_length=100, label=_("Province"), widget=_text(), error_messages={"required": _("Province is required")})
    district = forms.CharField(label=_("District"), widget=_text(), error_messages={"required": _("District is required")})
    occupation = forms.CharField(label=_("Occupation"), widget=_text(), error_messages={"required": _("Occupation is required")})
    organization = forms.CharField(required=False, label=_("Organization"), widget=_text())
    interest_areas = forms.MultipleChoiceField(
        label=_("Areas of interest"),
        choices=registrations.INTEREST_AREAS,
        widget=forms.CheckboxSelectMultiple,
        error_messages={"required": _("Please select at least one interest area")},
    )
    skills = forms.CharField(required=False, label=_("Skills"), widget=forms.Textarea(attrs={"rows": 3, "class": "form-control"}))
    experience = forms.CharField(required=False, label=_("Experience"), widget=forms.Textarea(attrs={"rows": 3, "class": "form-control"}))
    available_hours = forms.ChoiceField(
        required=False,
        label=_("Availability"),
        choices=[("", "---"), *registrations.AVAILABLE_HOURS],
    )
    motivation = forms.CharField(
        label=_("Why do you want to join?"),
        widget=forms.Textarea(attrs={"rows": 4, "class": "form-control"}),
        error_messages={"required": _("Please tell us why you want to join")},
    )
    consent_to_contact = forms.BooleanField(
        label=_("I agree to be contacted"),
        error_messages={"required": _("You must consent to be contacted")},
    )
    agree_to_terms = forms.BooleanField(
        label=_("I agree to the terms and conditions"),
        error_messages={"required": _("You must agree to the terms and conditions")},
    )

    def _clean_name(self, field: str, label: str) -> str:
        value = (self.cleaned_data.get(field) or "").strip()
        if not 2 <= len(value) <= 50 or not NAME_RE.match(value):
            raise ValidationError(_("%(label)s must be 2-50 letters"), params={"label": label})
        return value

    def clean_first_name(self) -> str:
        return self._clean_name("first_name", "First name")

    def clean_last_name(self) -> str:
        return self._clean_name("last_name", "Last name")

    def clean_phone(self) -> str:
        phone = (self.cleaned_data.get("phone") or "").strip()
        if not PHONE_RE.match(phone):
            raise ValidationError(_("Please enter a valid phone number"))
        return phone

    def clean_district(self) -> str:
        return validate_length(self.cleaned_data.get("district"), 2, 100, "District")

    def clean_occupation(self) -> str:
        return validate_length(self.cleaned_data.get("occupation"), 2, 100, "Occupation")

    def clean_organization(self) -> str:
        value = (self.cleaned_data.get("organization") or "").strip()
        return validate_length(value, 2, 100, "Organization") if value else ""

    def clean_motivation(self) -> str:
        return validate_length(self.cleaned_data.get("motivation"), 10, 500, "Motivation")

    def payload(self) -> Dict[str, Any]:
        data = self.cleaned_data
        return {
            "firstName": data["first_name"],
            "lastName": data["last_name"],
            "email": data["email"],
            "phone": data["phone"],
            "province": data["province"],
            "district": data["district"],
            "occupation": data["occupation"],
            "organization": data.get("organization", ""),
            "interestAreas": list(data["interest_areas"]),
            "skills": data.get("skills", ""),
            "experience": data.get("experience", ""),
            "availableHours": data.get("available_hours", ""),
            "motivation": data["motivation"],
            "consentToContact": data["consent_to_contact"],
            "agreeToTerms": data["agree_to_terms"],
        }
