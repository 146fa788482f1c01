from typing import Any


def authorize(principal_id: Any, resource_owner_id: Any) -> bool:
    """True only when the requesting principal owns the resource."""
    if principal_id is None or resource_owner_id is None:
        return False
    return principal_id == resource_owner_id
