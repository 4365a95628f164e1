# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
All Prometheus metric objects of the service.
Imported by services and middleware. Never instantiated in controllers.
"""
from prometheus_client import Counter, Histogram

# ── HTTP Metrics (used by middleware) ──
REQUEST_COUNT = Counter(
    "team_service_requests_total",
    "Total HTTP requests to the team service",
    ["method", "endpoint", "status"],
)
REQUEST_LATENCY = Histogram(
    "team_service_request_duration_seconds",
    "Request latency in seconds",
    ["method", "endpoint"],
)
HTTP_ERRORS = Counter(
    "team_service_http_errors_total",
    "Total HTTP error responses",
    ["method", "endpoint", "status"],
)

# ── Business Metrics (updated by service layer only) ──
TEAMS_CREATED = Counter(
    "teams_created_total",
    "Total teams created",
    ["leader_role"],
)
MEMBERS_ADDED = Counter(
    "team_members_added_total",
    "Total memberships committed",
    ["role"],
)
MEMBERS_REMOVED = Counter(
    "team_members_removed_total",
    "Total memberships removed by unassignment",
)
COMPOSITION_REJECTIONS = Counter(
    "team_composition_rejections_total",
    "Membership attempts refused by the composition rules",
    ["reason"],
)
ROSTER_CONFLICTS = Counter(
    "team_roster_conflicts_total",
    "Conditional roster writes that observed a newer roster and were retried",
)
JOIN_REQUESTS = Counter(
    "join_requests_total",
    "Join request transitions",
    ["transition"],
)
NOTIFICATIONS_SENT = Counter(
    "team_notifications_total",
    "Notification dispatch attempts",
    ["event", "outcome"],
)
ATTENDANCE_WRITES = Counter(
    "attendance_writes_total",
    "Attendance records written",
    ["present"],
)
