"""Session-authenticated management dashboard."""

from guildhall.dashboard.app import TEMPLATE_DIR, create_dashboard
from guildhall.dashboard.members import format_member_for, list_members

__all__ = ["TEMPLATE_DIR", "create_dashboard", "format_member_for", "list_members"]
