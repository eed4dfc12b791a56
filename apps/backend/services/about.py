"""Endpoints behind the "about" section of the site.

Page units fetch these through ``content.fetch``; the about subnavigation
probes them to decide which entries to show.
"""

ABOUT = "/about"
ORGANIZATION_PROFILE = "/organization-profile"
TEAM_MEMBERS = "team-members"
