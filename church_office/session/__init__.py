"""Session gate package."""

from church_office.session.gate import SessionGate, SessionUser

__all__ = ["SessionGate", "SessionUser"]
