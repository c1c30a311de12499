"""Ownership authorizer.

Learn: A task may be read, changed or deleted only by the user recorded
as its owner. This is a pure decision; the caller turns DENY into a 403.
Callers must establish that the resource exists first, so "not found"
(404) and "not yours" (403) never blur together.
"""

import enum
import uuid


class Decision(enum.Enum):
    PERMIT = "permit"
    DENY = "deny"


def authorize(resource_owner_id: uuid.UUID, authenticated_user_id: uuid.UUID) -> Decision:
    if resource_owner_id == authenticated_user_id:
        return Decision.PERMIT
    return Decision.DENY
