"""
Exceptions for memberships app.
"""


class MembershipError(Exception):
    """Base exception for membership lifecycle errors."""

    pass


class InvalidMembershipTransition(MembershipError):
    """A transition was requested from a state that does not allow it."""

    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot move membership from '{current}' to '{target}'")
        self.current = current
        self.target = target
