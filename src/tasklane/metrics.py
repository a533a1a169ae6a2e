from prometheus_client import Counter

invitations_created_total = Counter(
    "tasklane_invitations_created_total",
    "Number of organization invitations created"
)

invitation_transitions_total = Counter(
    "tasklane_invitation_transitions_total",
    "Number of invitation status transitions, by resulting status",
    ["status"]
)

access_denied_total = Counter(
    "tasklane_access_denied_total",
    "Number of denied authorization checks, by check",
    ["check"]
)

notification_failures_total = Counter(
    "tasklane_notification_failures_total",
    "Number of lifecycle notifications that could not be delivered",
    ["event"]
)
