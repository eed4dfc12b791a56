from django.urls import path

from . import views

app_name = "dashboard"

urlpatterns = [
    path("", views.home, name="home"),
    path("login/", views.login_view, name="login"),
    path("logout/", views.logout_view, name="logout"),
    # Jobs
    path("jobs/", views.job_list, name="job_list"),
    path("jobs/new/", views.job_create, name="job_create"),
    path("jobs/<str:job_id>/edit/", views.job_edit, name="job_edit"),
    path("jobs/<str:job_id>/delete/", views.job_delete, name="job_delete"),
    path("jobs/<str:job_id>/status/", views.job_status, name="job_status"),
    # Certificates
    path("certificates/", views.certificate_list, name="certificate_list"),
    path("certificates/new/", views.certificate_create, name="certificate_create"),
    path("certificates/<str:certificate_id>/edit/", views.certificate_edit, name="certificate_edit"),
    path("certificates/<str:certificate_id>/delete/", views.certificate_delete, name="certificate_delete"),
    path("certificates/<str:certificate_id>/toggle/", views.certificate_toggle, name="certificate_toggle"),
    # Donations
    path("donations/", views.donation_list, name="donation_list"),
    path("donations/<str:donation_id>/", views.donation_detail, name="donation_detail"),
    # Newsletter
    path("newsletter/", views.newsletter_list, name="newsletter_list"),
    # Registrations
    path("registrations/", views.registration_list, name="registration_list"),
    path("registrations/bulk-status/", views.registration_bulk_status, name="registration_bulk_status"),
    path("registrations/export/", views.registration_export, name="registration_export"),
    path("registrations/<str:registration_id>/", views.registration_detail, name="registration_detail"),
    path("registrations/<str:registration_id>/status/", views.registration_status, name="registration_status"),
    path("registrations/<str:registration_id>/delete/", views.registration_delete, name="registration_delete"),
]
