from functools import wraps

from flask_jwt_extended import create_access_token, get_jwt, verify_jwt_in_request

from backend.errors import Unauthenticated


class Actor:
    """The authenticated caller as described by its token claims."""

    def __init__(self, id, username, role, zone_ref):
        self.id = id
        self.username = username
        self.role = role
        self.zone_ref = zone_ref

    @property
    def is_admin(self):
        return self.role in ('admin', 'superadmin')

    @property
    def is_superadmin(self):
        return self.role == 'superadmin'

    @classmethod
    def from_claims(cls, claims):
        try:
            return cls(
                id=int(claims['sub']),
                username=claims['username'],
                role=claims['role'],
                zone_ref=claims['zoneRef'],
            )
        except (KeyError, TypeError, ValueError):
            raise Unauthenticated("Invalid token")

    def __repr__(self):
        return f"<Actor {self.username} ({self.role})>"


def issue_token(user):
    """Sign a token carrying identity, role and owned zone."""
    return create_access_token(
        identity=str(user.id),
        additional_claims={
            "username": user.username,
            "role": user.role,
            "zoneRef": user.zone_ref,
        },
    )


def auth_required(view):
    """Verify the bearer token and pass the resulting Actor as first argument."""
    @wraps(view)
    def wrapper(*args, **kwargs):
        verify_jwt_in_request()
        actor = Actor.from_claims(get_jwt())
        return view(actor, *args, **kwargs)
    return wrapper
