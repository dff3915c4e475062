from prometheus_client import Counter

ACCESS_GRANTED_COUNTER = Counter(
    'acl_access_granted_total',
    'Total number of guarded calls allowed by the ACL'
)

ACCESS_DENIED_COUNTER = Counter(
    'acl_access_denied_total',
    'Total number of guarded calls rejected by the ACL'
)
