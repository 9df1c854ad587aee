"""
Application Shell: routes, auth gating and navigation chrome.

Kept free of any UI framework so the redirect rules can be tested on
their own. The Streamlit front end carries the current route in the
`page` query parameter and asks `resolve_route` where to actually go.
"""

import html
from typing import NamedTuple, Optional

from expense_tracker.models import User


ROUTE_HOME = "/"
ROUTE_EXPENSES = "/expenses"
ROUTE_ACCOUNTS = "/accounts"
ROUTE_CATEGORIES = "/categories"
ROUTE_LOGIN = "/login"


class NavItem(NamedTuple):
    route: str
    label: str
    icon: str


NAV_ITEMS = (
    NavItem(ROUTE_HOME, "Dashboard", "📊"),
    NavItem(ROUTE_EXPENSES, "Expenses", "🧾"),
    NavItem(ROUTE_ACCOUNTS, "Accounts", "💳"),
    NavItem(ROUTE_CATEGORIES, "Categories", "🏷️"),
)

PROTECTED_ROUTES = frozenset(item.route for item in NAV_ITEMS)
KNOWN_ROUTES = PROTECTED_ROUTES | {ROUTE_LOGIN}


def normalize_route(path: Optional[str]) -> str:
    """'/expenses/' and 'expenses' both become '/expenses'."""
    if not path:
        return ROUTE_HOME
    path = "/" + path.strip().strip("/")
    return path


def resolve_route(path: Optional[str], user: Optional[User]) -> str:
    """
    Where the shell should render for a requested path.

    - unknown path → dashboard
    - protected page while signed out → login
    - login page while signed in → dashboard
    """
    route = normalize_route(path)
    if route not in KNOWN_ROUTES:
        route = ROUTE_HOME

    if user is None and route in PROTECTED_ROUTES:
        return ROUTE_LOGIN
    if user is not None and route == ROUTE_LOGIN:
        return ROUTE_HOME
    return route


def page_title(route: str) -> str:
    if route == ROUTE_LOGIN:
        return "Sign in"
    for item in NAV_ITEMS:
        if item.route == route:
            return item.label
    return "Dashboard"


def as_markup(text: str) -> str:
    """Escape untrusted text (model output, user names) for an HTML block."""
    return html.escape(text).replace("\n", "<br>")
