from django.urls import path

from . import views

app_name = "outreach"

urlpatterns = [
    path("jobs/apply", views.job_apply, name="job_apply"),
    path("newsletter/subscribe", views.newsletter_subscribe, name="newsletter_subscribe"),
    path("newsletter/unsubscribe", views.newsletter_unsubscribe, name="newsletter_unsubscribe"),
    path("registration", views.registration, name="registration"),
]
