"""Upstream profiles: which quota account and timeout class each upstream uses.

Keys are upstream names passed to ResilientClient.for_upstream(). A quota of
None means the upstream is not metered locally.
"""

from typing import Dict, NamedTuple, Optional


class UpstreamProfile(NamedTuple):
    quota_account: Optional[str]
    slow: bool = False


UPSTREAM_PROFILES: Dict[str, UpstreamProfile] = {
    "census": UpstreamProfile(quota_account="census"),
    "eia": UpstreamProfile(quota_account=None),
    "noaa": UpstreamProfile(quota_account=None),
    "hud": UpstreamProfile(quota_account=None),
    "dot": UpstreamProfile(quota_account=None),
    "fema": UpstreamProfile(quota_account=None),
    "bjs": UpstreamProfile(quota_account=None),
    "fec": UpstreamProfile(quota_account="fec"),
    "congress": UpstreamProfile(quota_account="congress"),
    # College Scorecard shares the api.data.gov daily budget and is slow
    "dept_ed": UpstreamProfile(quota_account="data_gov", slow=True),
    "va": UpstreamProfile(quota_account=None),
    # USAspending frequently answers with 504s under load
    "usaspending": UpstreamProfile(quota_account=None, slow=True),
    "federal_register": UpstreamProfile(quota_account=None),
    "zip_lookup": UpstreamProfile(quota_account=None),
}
