"""
apps.routing.tables
===================

The two public route tables.

The canonical table holds every public path; its entries are part of the
site's external contract (bookmarks, search indexes) and must not change.
The encrypted table is the smaller set reachable through ``/e/<token>``
links, with a few aliases of its own. It is deliberately not derived from
the canonical one.
"""

from __future__ import annotations

from typing import Mapping

from apps.pages.units import NOT_FOUND, UNITS, PageUnit
from apps.routing.routes import RouteEntry, RouteTable

NOT_FOUND_PATH = "/not-found"

# Static children of /what-we-do that the legacy alias must never shadow
RESERVED_WHAT_WE_DO = frozenset({"focus-areas", "geographic-coverage", "monitoring-evaluation"})


class FocusAreaAlias:
    """
    Redirect for legacy ``/what-we-do/<slug>`` bookmarks.

    ``/what-we-do/<slug>`` moves to ``/what-we-do/focus-areas/<slug>``; any
    other shape (wrong depth, empty or reserved slug) goes to not-found.
    """

    def __init__(self, prefix: str = "what-we-do", infix: str = "focus-areas") -> None:
        self.prefix = prefix
        self.infix = infix

    def target(self, path: str) -> str:
        parts = [part for part in (path or "").split("/") if part]
        if (
            len(parts) == 2
            and parts[0] == self.prefix
            and parts[1]
            and parts[1] not in RESERVED_WHAT_WE_DO
        ):
            return f"/{self.prefix}/{self.infix}/{parts[1]}"
        return NOT_FOUND_PATH

    def __repr__(self) -> str:
        return f"FocusAreaAlias(/{self.prefix}/:slug)"


def build_canonical_table(units: Mapping[str, PageUnit] = UNITS) -> RouteTable:
    u = units
    return RouteTable(
        [
            RouteEntry("/", u["home"], "home"),
            # About
            RouteEntry("/about/our-story", u["our_story"], "our_story"),
            RouteEntry("/about/mission-vision", u["mission_vision"], "mission_vision"),
            RouteEntry("/about/organization-profile", u["organization_profile"], "organization_profile"),
            RouteEntry("/about/strategic-units", u["strategic_units"], "strategic_units"),
            RouteEntry("/about/board-directors", u["board_directors"], "board_directors"),
            RouteEntry("/about/executive-team", u["executive_team"], "executive_team"),
            RouteEntry("/about/goals-objectives", u["goals_objectives"], "goals_objectives"),
            RouteEntry("/about/coverage-area", u["coverage_area"], "coverage_area"),
            RouteEntry("/about/strategic-partnerships", u["strategic_partnerships"], "strategic_partnerships"),
            RouteEntry("/about/departments", u["departments"], "departments"),
            RouteEntry("/about/organizational-structure", u["org_structure"], "org_structure"),
            # What we do
            RouteEntry("/what-we-do", u["what_we_do"], "what_we_do"),
            RouteEntry("/what-we-do/focus-areas", u["focus_areas"], "focus_areas"),
            RouteEntry("/what-we-do/focus-areas/:slug", u["focus_area_detail"], "focus_area_detail"),
            RouteEntry("/what-we-do/monitoring-evaluation", u["monitoring_evaluation"], "monitoring_evaluation"),
            RouteEntry("/what-we-do/geographic-coverage", u["geographic_coverage"], "geographic_coverage"),
            RouteEntry("/what-we-do/:slug", FocusAreaAlias(), "focus_area_alias"),
            # Projects & programs
            RouteEntry("/projects/completed", u["projects_completed"], "projects_completed"),
            RouteEntry("/projects/ongoing", u["projects_ongoing"], "projects_ongoing"),
            RouteEntry("/projects", u["projects"], "projects"),
            RouteEntry("/projects/:slugOrId", u["project_detail"], "project_detail"),
            RouteEntry("/programs", u["programs"], "programs"),
            RouteEntry("/programs/stay-in-afghanistan", u["program_stay_in_afghanistan"], "program_stay_in_afghanistan"),
            RouteEntry("/programs/sitc", u["program_sitc"], "program_sitc"),
            RouteEntry("/programs/taaban", u["program_taaban"], "program_taaban"),
            RouteEntry("/programs/emergency-response", u["program_emergency_response"], "program_emergency_response"),
            RouteEntry("/programs/:slug", u["program_detail"], "program_detail"),
            # Resources
            RouteEntry("/resources", u["resources"], "resources"),
            RouteEntry("/resources/news-events", u["news_events"], "news_events"),
            RouteEntry("/resources/news-events/:slug", u["news_event_detail"], "news_event_detail"),
            RouteEntry("/news/:slug", u["news_detail"], "news_detail"),
            RouteEntry("/events/:slug", u["event_detail_classic"], "event_detail_classic"),
            RouteEntry("/resources/events/:slug", u["event_detail"], "resource_event_detail"),
            RouteEntry("/resources/reports", u["reports"], "reports"),
            RouteEntry("/resources/annual-reports", u["annual_reports"], "annual_reports"),
            RouteEntry("/resources/success-stories", u["success_stories"], "success_stories"),
            RouteEntry("/resources/success-stories/:slugOrId", u["success_story_detail"], "success_story_detail"),
            RouteEntry("/resources/certificates", u["certificates"], "certificates"),
            RouteEntry("/about/team", u["team"], "team"),
            RouteEntry("/about/volunteers", u["volunteers"], "volunteers"),
            RouteEntry("/resources/case-studies", u["case_studies"], "case_studies"),
            RouteEntry("/resources/case-studies/:id", u["case_study_detail"], "case_study_detail"),
            RouteEntry("/competencies/:slugOrId", u["competency_detail"], "competency_detail"),
            RouteEntry("/competencies", u["competencies"], "competencies"),
            RouteEntry("/stakeholders", u["stakeholders"], "stakeholders"),
            RouteEntry("/resources/rfq", u["rfq_rfp"], "rfq"),
            RouteEntry("/resources/policies", u["policies"], "policies"),
            RouteEntry("/resources/jobs", u["jobs"], "jobs"),
            # Legal & info
            RouteEntry("/terms-of-use", u["terms_of_use"], "terms_of_use"),
            RouteEntry("/privacy", u["privacy_policy"], "privacy"),
            RouteEntry("/privacy-policy", u["privacy_policy"], "privacy_policy"),
            RouteEntry("/cookies", u["cookies_settings"], "cookies"),
            RouteEntry("/cookies-settings", u["cookies_settings"], "cookies_settings"),
            RouteEntry("/sitemap", u["sitemap"], "sitemap"),
            RouteEntry("/faq", u["faq"], "faq"),
            RouteEntry("/ethics-compliance", u["ethics_compliance"], "ethics_compliance"),
            RouteEntry("/complaints-feedback", u["complaints_feedback"], "complaints_feedback"),
            # Events, causes, gallery, blog
            RouteEntry("/event-sidebar", u["event_sidebar"], "event_sidebar"),
            RouteEntry("/event-full", u["event_full"], "event_full"),
            RouteEntry("/event-details", u["event_detail"], "event_details"),
            RouteEntry("/cause-list", u["cause_list"], "cause_list"),
            RouteEntry("/cause-2", u["cause_2"], "cause_2"),
            RouteEntry("/cause-3", u["cause_3"], "cause_3"),
            RouteEntry("/cause-details", u["cause_details"], "cause_details"),
            RouteEntry("/gallery-full", u["gallery_full"], "gallery_full"),
            RouteEntry("/gallery3-column", u["gallery_3_column"], "gallery_3_column"),
            RouteEntry("/gallery4-column", u["gallery_4_column"], "gallery_4_column"),
            RouteEntry("/gallery/:slug", u["gallery_detail"], "gallery_detail"),
            RouteEntry("/blog-classic", u["blog_classic"], "blog_classic"),
            RouteEntry("/blog-2", u["blog_2"], "blog_2"),
            RouteEntry("/blog-3", u["blog_3"], "blog_3"),
            RouteEntry("/blog-details", u["blog_details"], "blog_details"),
            # Engagement & misc
            RouteEntry("/volunteer", u["volunteer"], "volunteer"),
            RouteEntry("/donation", u["donation"], "donation"),
            RouteEntry("/donation-checkout", u["donation_checkout"], "donation_checkout"),
            RouteEntry("/account", u["account"], "account"),
            RouteEntry("/shop", u["shop"], "shop"),
            RouteEntry("/product-details", u["product_details"], "product_details"),
            RouteEntry("/cart", u["cart"], "cart"),
            RouteEntry("/check-out", u["check_out"], "check_out"),
            RouteEntry("/contact", u["contact"], "contact"),
            RouteEntry("/search", u["search"], "search"),
            RouteEntry(NOT_FOUND_PATH, u[NOT_FOUND], "not_found"),
        ]
    )


def build_encrypted_table(units: Mapping[str, PageUnit] = UNITS) -> RouteTable:
    u = units
    return RouteTable(
        [
            RouteEntry("/", u["home"]),
            RouteEntry("/about", u["about"]),
            RouteEntry("/about/coverage-area", u["about"]),
            RouteEntry("/about/mission-vision", u["mission_vision"]),
            RouteEntry("/about/organization-profile", u["organization_profile"]),
            RouteEntry("/about/strategic-units", u["strategic_units"]),
            RouteEntry("/about/board-directors", u["board_directors"]),
            RouteEntry("/about/executive-team", u["executive_team"]),
            RouteEntry("/about/organizational-structure", u["org_structure"]),
            RouteEntry("/about/team", u["team"]),
            RouteEntry("/about/volunteers", u["volunteers"]),
            RouteEntry("/what-we-do", u["what_we_do"]),
            RouteEntry("/what-we-do/focus-areas", u["focus_areas"], param="slug"),
            RouteEntry("/what-we-do/geographic-coverage", u["geographic_coverage"]),
            RouteEntry("/projects", u["projects"], param="slugOrId"),
            RouteEntry("/programs", u["programs"], param="slug"),
            RouteEntry("/resources", u["resources"]),
            RouteEntry("/resources/news-events", u["news_events"]),
            RouteEntry("/resources/reports", u["reports"]),
            RouteEntry("/resources/annual-reports", u["annual_reports"]),
            RouteEntry("/resources/success-stories", u["success_stories"], param="slugOrId"),
            RouteEntry("/resources/certificates", u["certificates"]),
            RouteEntry("/resources/case-studies", u["case_studies"], param="id"),
            RouteEntry("/competencies", u["competencies"], param="slugOrId"),
            RouteEntry("/stakeholders", u["stakeholders"]),
            RouteEntry("/resources/rfq-rfp", u["rfq_rfp"]),
            RouteEntry("/resources/policies", u["policies"]),
            RouteEntry("/resources/jobs", u["jobs"]),
            RouteEntry("/terms-of-use", u["terms_of_use"]),
            RouteEntry("/privacy-policy", u["privacy_policy"]),
            RouteEntry("/cookies-settings", u["cookies_settings"]),
            RouteEntry("/ethics-compliance", u["ethics_compliance"]),
            RouteEntry("/complaints-feedback", u["complaints_feedback"]),
            RouteEntry("/event-sidebar", u["event_sidebar"]),
            RouteEntry("/event-full", u["event_full"]),
            RouteEntry("/event-details", u["event_detail"]),
            RouteEntry("/cause-list", u["cause_list"]),
            RouteEntry("/cause-2", u["cause_2"]),
            RouteEntry("/cause-3", u["cause_3"]),
            RouteEntry("/cause-details", u["cause_details"]),
            RouteEntry("/gallery-full", u["gallery_full"]),
            RouteEntry("/gallery3-column", u["gallery_3_column"]),
            RouteEntry("/gallery4-column", u["gallery_4_column"]),
            RouteEntry("/gallery", u["gallery_detail"]),
            RouteEntry("/blog-classic", u["blog_classic"]),
            RouteEntry("/blog-2", u["blog_2"]),
            RouteEntry("/blog-3", u["blog_3"]),
            RouteEntry("/blog-details", u["blog_details"]),
            RouteEntry("/volunteer", u["volunteer"]),
            RouteEntry("/donation", u["donation"]),
            RouteEntry("/account", u["account"]),
            RouteEntry("/shop", u["shop"]),
            RouteEntry("/product-details", u["product_details"]),
            RouteEntry("/cart", u["cart"]),
            RouteEntry("/check-out", u["check_out"]),
            RouteEntry("/contact", u["contact"]),
            RouteEntry("/search", u["search"]),
            # Bases for dynamic detail paths
            RouteEntry("/news", u["news_detail"]),
            RouteEntry("/events", u["event_detail_classic"]),
            RouteEntry("/resources/events", u["event_detail"]),
            RouteEntry("/resources/procurements", u["rfq_rfp"]),
            RouteEntry("/resources/tenders", u["rfq_rfp"]),
            RouteEntry("/resources/rfp", u["rfq_rfp"]),
            RouteEntry("/resources/rfq", u["rfq_rfp"]),
        ]
    )
