"""
apps.pages.units
================

Registry of page units: everything a public URL can render.

A unit names its template, the backend endpoint that feeds it (``source``
for overview pages, ``detail_source`` when the route captured a parameter)
and, for pages with forms, the view that takes over rendering.
"""

from __future__ import annotations

from dataclasses import dataclass
from string import Formatter
from typing import Dict, Mapping, Optional, Tuple
from urllib.parse import quote

NOT_FOUND = "not_found"


@dataclass(frozen=True)
class PageUnit:
    key: str
    title: str
    source: Optional[str] = None
    detail_source: Optional[str] = None
    view: Optional[str] = None
    section: str = ""
    status: int = 200

    @property
    def templates(self) -> Tuple[str, ...]:
        names = [f"pages/{self.key}.html"]
        if self.section:
            names.append(f"pages/{self.section}/page.html")
        names.append("pages/page.html")
        return tuple(names)

    def endpoint(self, params: Optional[Mapping[str, str]] = None) -> Optional[str]:
        """
        Backend endpoint for this render.

        With route parameters the ``detail_source`` template is filled in;
        a placeholder with no same-named parameter takes the only captured
        value (encrypted routes name their parameter generically).
        """
        if params and self.detail_source:
            fallback = next(iter(params.values()))
            names = {name for _, name, _, _ in Formatter().parse(self.detail_source) if name}
            values = {name: quote(str(params.get(name, fallback)), safe="") for name in names}
            return self.detail_source.format(**values)
        return self.source


def _unit(key: str, title: str, **kwargs) -> Tuple[str, PageUnit]:
    return key, PageUnit(key=key, title=title, **kwargs)


UNITS: Dict[str, PageUnit] = dict(
    [
        _unit("home", "Home", source="/home"),
        # About
        _unit("about", "About Us", source="/about", section="about"),
        _unit("our_story", "Our Story", source="about/our-story", section="about"),
        _unit("mission_vision", "Mission & Vision", source="/organization-profile/mission-vision", section="about"),
        _unit("organization_profile", "Organization Profile", source="/organization-profile", section="about"),
        _unit("strategic_units", "Strategic Units", source="/organization-profile/strategic-units", section="about"),
        _unit("board_directors", "Board of Directors", source="/organization-profile/board", section="about"),
        _unit("executive_team", "Executive Team", source="/organization-profile/executive", section="about"),
        _unit("goals_objectives", "Goals & Objectives", source="about/goals-objectives", section="about"),
        _unit("coverage_area", "Coverage Area", source="provinces", section="about"),
        _unit("strategic_partnerships", "Strategic Partnerships", source="partners", section="about"),
        _unit("departments", "Departments", source="about/departments", section="about"),
        _unit("org_structure", "Organizational Structure", source="/organization-profile/structure", section="about"),
        _unit("team", "Our Team", source="team-members", section="about"),
        _unit("volunteers", "Volunteers", source="volunteers", section="about"),
        # What we do
        _unit("what_we_do", "What We Do", source="focus-areas"),
        _unit("focus_areas", "Focus Areas", source="focus-areas", detail_source="focus-areas/slug/{slug}"),
        _unit("focus_area_detail", "Focus Area", detail_source="focus-areas/slug/{slug}"),
        _unit("monitoring_evaluation", "Monitoring & Evaluation", source="page-settings/monitoring-evaluation"),
        _unit("geographic_coverage", "Geographic Coverage", source="provinces"),
        # Projects & programs
        _unit("projects", "Projects", source="projects", detail_source="projects/{slugOrId}"),
        _unit("projects_completed", "Completed Projects", source="projects?status=completed"),
        _unit("projects_ongoing", "Ongoing Projects", source="projects?status=ongoing"),
        _unit("project_detail", "Project", detail_source="projects/{slugOrId}"),
        _unit("programs", "Programs", source="programs", detail_source="programs/slug/{slug}"),
        _unit("program_stay_in_afghanistan", "Stay in Afghanistan", source="programs/slug/stay-in-afghanistan"),
        _unit("program_sitc", "SITC", source="programs/slug/sitc"),
        _unit("program_taaban", "TAABAN", source="programs/slug/taaban"),
        _unit("program_emergency_response", "Emergency Response", source="programs/slug/emergency-response"),
        _unit("program_detail", "Program", detail_source="programs/slug/{slug}"),
        # Resources
        _unit("resources", "Resources", source="articles", detail_source="articles/{slug}"),
        _unit("news_events", "News & Events", source="news", detail_source="news/{slug}"),
        _unit("news_event_detail", "News & Events", detail_source="news/{slug}"),
        _unit("news_detail", "News", detail_source="news/{slug}"),
        _unit("event_detail_classic", "Event", detail_source="events/{slug}"),
        _unit("event_detail", "Event Details", source="events", detail_source="events/{slug}"),
        _unit("reports", "Reports & Publications", source="articles?category=reports"),
        _unit("annual_reports", "Annual Reports", source="annual-reports", detail_source="annual-reports/{slug}"),
        _unit("success_stories", "Success Stories", source="success-stories", detail_source="success-stories/{slugOrId}"),
        _unit("success_story_detail", "Success Story", detail_source="success-stories/{slugOrId}"),
        _unit("certificates", "Certificates", source="certificates?status=active"),
        _unit("case_studies", "Case Studies", source="case-studies", detail_source="case-studies/{id}"),
        _unit("case_study_detail", "Case Study", detail_source="case-studies/{id}"),
        _unit("competencies", "Competencies", source="competencies", detail_source="competencies/slug/{slugOrId}"),
        _unit("competency_detail", "Competency", detail_source="competencies/slug/{slugOrId}"),
        _unit("stakeholders", "Stakeholders", source="stakeholders"),
        _unit("rfq_rfp", "RFQ / RFP", source="rfqs"),
        _unit("policies", "Policies", source="policies"),
        _unit("jobs", "Jobs & Opportunities", source="jobs/published", view="apps.outreach.views.jobs_page"),
        # Legal & info
        _unit("terms_of_use", "Terms of Use", source="page-settings/terms-of-use"),
        _unit("privacy_policy", "Privacy Policy", source="page-settings/privacy-policy"),
        _unit("cookies_settings", "Cookie Settings"),
        _unit("sitemap", "Sitemap", view="apps.pages.views.sitemap"),
        _unit("faq", "FAQ", source="faqs"),
        _unit("ethics_compliance", "Ethics & Compliance", source="page-settings/ethics-compliance"),
        _unit("complaints_feedback", "Complaints & Feedback", view="apps.outreach.views.complaints_page"),
        # Events, causes, gallery, blog
        _unit("event_sidebar", "Events", source="events"),
        _unit("event_full", "Events", source="events"),
        _unit("cause_list", "Causes", source="programs"),
        _unit("cause_2", "Causes", source="programs"),
        _unit("cause_3", "Causes", source="programs"),
        _unit("cause_details", "Cause Details"),
        _unit("gallery_full", "Gallery", source="gallery"),
        _unit("gallery_3_column", "Gallery", source="gallery"),
        _unit("gallery_4_column", "Gallery", source="gallery"),
        _unit("gallery_detail", "Gallery", source="gallery", detail_source="gallery/{slug}"),
        _unit("blog_classic", "Blog", source="articles"),
        _unit("blog_2", "Blog", source="articles"),
        _unit("blog_3", "Blog", source="articles"),
        _unit("blog_details", "Blog Details", source="articles"),
        # Engagement & misc
        _unit("volunteer", "Volunteer", view="apps.outreach.views.registration_page"),
        _unit("donation", "Donate", view="apps.outreach.views.donation_page"),
        _unit("donation_checkout", "Donation Checkout", view="apps.outreach.views.donation_page"),
        _unit("account", "Account"),
        _unit("shop", "Shop"),
        _unit("product_details", "Product Details"),
        _unit("cart", "Cart"),
        _unit("check_out", "Checkout"),
        _unit("contact", "Contact Us", source="/website-config/contact"),
        _unit("search", "Search", view="apps.pages.views.search"),
        _unit(NOT_FOUND, "Page not found", status=404),
    ]
)


def get_unit(key: str) -> PageUnit:
    return UNITS[key]
