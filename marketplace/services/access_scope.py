# marketplace/services/access_scope.py
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import false
from marketplace.models.user import Profile

@dataclass(frozen=True)
class AccessScope:
    """
    Read filter for list queries on catalog and booking tables.

    `unrestricted` -> every row.
    `owner_id` set -> only rows whose own `user_id` equals it.
    Neither -> nothing (anonymous session).
    """
    owner_id: Optional[int] = None
    unrestricted: bool = False

    @property
    def label(self):
        if self.unrestricted:
            return 'Superuser: All Platform Data'
        return 'Admin: Your Data Only'

    def allows(self, row):
        if self.unrestricted:
            return True
        return self.owner_id is not None and getattr(row, 'user_id', None) == self.owner_id

    def apply(self, query, model):
        """Filters a SQLAlchemy query on `model.user_id`. Bookings are matched on their own user_id."""
        if self.unrestricted:
            return query
        if self.owner_id is None:
            return query.filter(false())
        return query.filter(model.user_id == self.owner_id)

    def as_filter(self):
        # same shape as the `.match(condition)` dict used by list screens
        if self.unrestricted:
            return {}
        return {'user_id': self.owner_id}

NO_ACCESS = AccessScope()

def resolve(user_id, is_superuser):
    if is_superuser:
        return AccessScope(owner_id=user_id, unrestricted=True)
    if user_id is None:
        return NO_ACCESS
    return AccessScope(owner_id=user_id)

def resolve_for_user(user):
    """Scope for a logged-in user. A missing profile is treated as a plain owner."""
    if user is None or not getattr(user, 'is_authenticated', False):
        return NO_ACCESS
    profile = Profile.query.filter_by(user_id=user.id).first()
    return resolve(user.id, bool(profile and profile.superuser))
