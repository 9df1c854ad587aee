"""
Streamlit Frontend for Expense Tracker

DESIGN PRINCIPLES:
1. Every page is a thin renderer over a page manager
2. Validation messages appear next to the form that caused them
3. Nothing on screen is hidden state: totals are recomputed each run
4. Signed-out users only ever see the login page

Routing: the current route lives in the `page` query parameter
(`?page=/expenses`). The shell decides where a request really lands.
"""

import asyncio
from datetime import date, datetime

import pandas as pd
import plotly.express as px
import streamlit as st

from expense_tracker.analytics import resolve_category_name
from expense_tracker.config import get_settings, validate_all_settings
from expense_tracker.log import configure_logging
from expense_tracker.models import AccountType, CategoryType, DateRange, ExpenseScope
from expense_tracker.orchestrator import (
    AccountManager,
    CategoryManager,
    DashboardFlow,
    ExpenseManager,
    FormState,
    LoginFlow,
    LoginMode,
    PageState,
    create_app_components,
)
from expense_tracker.shell import (
    NAV_ITEMS,
    ROUTE_ACCOUNTS,
    ROUTE_CATEGORIES,
    ROUTE_EXPENSES,
    ROUTE_HOME,
    ROUTE_LOGIN,
    as_markup,
    page_title,
    resolve_route,
)


# Page configuration
st.set_page_config(
    page_title="Expense Tracker",
    page_icon="💸",
    layout="wide",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
    .warning-box {
        padding: 16px;
        background-color: #fff3cd;
        border-radius: 10px;
        border-left: 5px solid #ffc107;
        margin: 10px 0;
    }
    .info-box {
        padding: 16px;
        background-color: #cce5ff;
        border-radius: 10px;
        border-left: 5px solid #004085;
        margin: 10px 0;
    }
    .avatar {
        display: inline-block;
        width: 40px;
        height: 40px;
        line-height: 40px;
        border-radius: 50%;
        background-color: #4f46e5;
        color: white;
        text-align: center;
        font-weight: bold;
    }
</style>
""", unsafe_allow_html=True)


RANGE_LABELS = {
    DateRange.WEEK: "This Week",
    DateRange.MONTH: "This Month",
    DateRange.YEAR: "This Year",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


def money(amount: float) -> str:
    return f"{get_settings().app.currency_symbol}{amount:,.2f}"


def get_components():
    """
    Application components for this browser session.

    Held in session_state (not cache_resource) so each visitor gets
    their own SessionContext.
    """
    if "components" not in st.session_state:
        session, repository, engine, validator = create_app_components()
        # A user change invalidates every loaded page
        session.subscribe(lambda _user: st.session_state.pop("managers", None))
        st.session_state.components = (session, repository, engine, validator)
    return st.session_state.components


def get_manager(route: str, factory):
    """One manager per page, kept until the user navigates away."""
    managers = st.session_state.setdefault("managers", {})
    if route not in managers:
        managers[route] = factory()
    return managers[route]


def navigate(route: str) -> None:
    st.query_params["page"] = route
    st.session_state.pop("managers", None)
    st.rerun()


def show_result(result, rerun: bool = False) -> None:
    """Show a FormResult now, or after the rerun when `rerun` is set."""
    if rerun:
        st.session_state.flash = (result.success, result.message)
        st.rerun()
    if result.success:
        st.success(result.message)
    else:
        st.error(result.message)


def render_flash() -> None:
    flash = st.session_state.pop("flash", None)
    if flash:
        success, message = flash
        (st.success if success else st.error)(message)


def main():
    """Main application entry point."""
    configure_logging(get_settings().app.debug_mode)

    try:
        session, repository, engine, validator = get_components()
    except Exception as e:
        st.error(f"Failed to initialize: {e}")
        render_connection_status()
        st.stop()

    requested = st.query_params.get("page", ROUTE_HOME)
    route = resolve_route(requested, session.current_user)
    if route != requested:
        st.query_params["page"] = route

    if st.session_state.get("last_route") != route:
        st.session_state.pop("managers", None)
        st.session_state.last_route = route

    if route == ROUTE_LOGIN:
        render_login_page(get_manager(route, lambda: LoginFlow(session)))
        return

    render_sidebar(session, route)
    render_flash()

    if route == ROUTE_EXPENSES:
        render_expenses_page(get_manager(
            route, lambda: ExpenseManager(repository, engine, validator)
        ))
    elif route == ROUTE_ACCOUNTS:
        render_accounts_page(get_manager(route, lambda: AccountManager(repository, validator)))
    elif route == ROUTE_CATEGORIES:
        render_categories_page(get_manager(route, lambda: CategoryManager(repository, validator)))
    else:
        render_dashboard_page(get_manager(route, lambda: DashboardFlow(repository, engine)))


def render_sidebar(session, route: str):
    """Navigation chrome: app name, links, user badge and sign-out."""
    st.sidebar.title("💸 Expense Tracker")
    st.sidebar.markdown("---")

    for item in NAV_ITEMS:
        label = f"{item.icon} {item.label}"
        if st.sidebar.button(label, key=f"nav-{item.route}", type="primary" if item.route == route else "secondary"):
            navigate(item.route)

    st.sidebar.markdown("---")
    user = session.current_user
    if user:
        st.sidebar.markdown(
            f'<span class="avatar">{as_markup(user.initial)}</span> '
            f"<strong>{as_markup(user.display_name or user.email)}</strong>",
            unsafe_allow_html=True,
        )
        if st.sidebar.button("🚪 Sign out"):
            run_async(session.sign_out())
            navigate(ROUTE_LOGIN)

    with st.sidebar.expander("⚙️ Connection status"):
        render_connection_status()


def render_connection_status():
    status = validate_all_settings()
    services = [
        ("Firebase (Auth + Firestore)", "firebase"),
        ("Gemini (AI)", "gemini"),
        ("App settings", "app"),
    ]
    for name, key in services:
        if status.get(key, False):
            st.success(f"✅ {name}")
        else:
            error = status.get(f"{key}_error", "Not configured")
            st.error(f"❌ {name} - {error}")


# =============================================================================
# LOGIN
# =============================================================================

def render_login_page(flow: LoginFlow):
    st.title("💸 Expense Tracker")
    signing_up = flow.mode == LoginMode.SIGN_UP
    st.subheader("Create your account" if signing_up else "Welcome back")

    with st.form("login-form"):
        display_name = st.text_input("Full name") if signing_up else ""
        email = st.text_input("Email")
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Sign up" if signing_up else "Sign in", type="primary")

    if submitted:
        with st.spinner("Please wait..."):
            ok, error, next_route = run_async(
                flow.submit(flow.mode, email, password, display_name)
            )
        if ok:
            navigate(next_route)
        else:
            st.error(error)

    toggle_label = "Already have an account? Sign in" if signing_up else "New here? Create an account"
    if st.button(toggle_label):
        flow.toggle_mode()
        st.rerun()


# =============================================================================
# DASHBOARD
# =============================================================================

def render_dashboard_page(flow: DashboardFlow):
    st.title(f"📊 {page_title(ROUTE_HOME)}")

    if flow.page_state == PageState.LOADING:
        with st.spinner("Loading your spending..."):
            run_async(flow.load())

    selected = st.radio(
        "Range",
        options=list(DateRange),
        index=list(DateRange).index(flow.date_range),
        format_func=lambda r: RANGE_LABELS[r],
        horizontal=True,
    )
    flow.set_range(selected)
    summary = flow.summary(datetime.now().astimezone())

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Total Spent", money(summary.total_spent))
    col2.metric("Personal", money(summary.personal_total))
    col3.metric("Other", money(summary.other_total))
    col4.metric("Transactions", summary.expense_count, help=f"Average {money(summary.average_expense)}")

    if summary.budget.exceeded:
        st.markdown(f"""
        <div class="warning-box">
            <h4>⚠️ Budget threshold crossed</h4>
            <p>You've spent {money(summary.budget.spent)}, above the
            {money(summary.budget.threshold)} threshold.</p>
        </div>
        """, unsafe_allow_html=True)

    chart_col, pie_col = st.columns([3, 2])
    with chart_col:
        st.markdown("### Last 7 days")
        trend = pd.DataFrame(
            {"Day": [d.label for d in summary.daily_trend],
             "Amount": [d.amount for d in summary.daily_trend]}
        )
        fig = px.line(trend, x="Day", y="Amount", markers=True)
        st.plotly_chart(fig, use_container_width=True)

    with pie_col:
        st.markdown("### By category")
        if summary.category_breakdown:
            breakdown = pd.DataFrame(
                {"Category": [c.name for c in summary.category_breakdown],
                 "Total": [c.total for c in summary.category_breakdown]}
            )
            fig = px.pie(breakdown, names="Category", values="Total", hole=0.4)
            st.plotly_chart(fig, use_container_width=True)
        else:
            st.info("No spending in this range yet.")

    if summary.top_category or summary.most_used_account:
        st.caption(
            f"Top category: **{summary.top_category or '-'}** · "
            f"Most used account: **{summary.most_used_account or '-'}**"
        )

    st.markdown("### Recent activity")
    if summary.recent_activity:
        for expense in summary.recent_activity:
            category = resolve_category_name(expense.category_id, flow.categories)
            st.markdown(
                f"- **{money(expense.amount)}** · {category} · "
                f"{expense.date.strftime('%d %b %Y')} · {expense.description}"
            )
    else:
        st.info("No expenses yet. Add one from the Expenses page.")

    st.markdown("### 🤖 AI insights")
    if st.button("✨ Get insights", type="primary"):
        with st.spinner("Analyzing your spending..."):
            run_async(flow.request_insights())
    if flow.insights:
        advice = as_markup(flow.insights)
        st.markdown(f"""
        <div class="info-box">
            <p>{advice}</p>
        </div>
        """, unsafe_allow_html=True)


# =============================================================================
# EXPENSES
# =============================================================================

def render_expenses_page(manager: ExpenseManager):
    st.title(f"🧾 {page_title(ROUTE_EXPENSES)}")

    if manager.page_state == PageState.LOADING:
        with st.spinner("Loading expenses..."):
            run_async(manager.load())

    if manager.requires_setup:
        st.warning("Create a category first, then come back to log expenses.")
        if st.button("🏷️ Go to Categories"):
            navigate(ROUTE_CATEGORIES)
        return

    st.markdown("### ✨ Quick add with AI")
    with st.form("ai-expense-form", clear_on_submit=True):
        text = st.text_input(
            "Describe the expense",
            placeholder="e.g., 450 on lunch yesterday with HDFC card",
        )
        ai_submitted = st.form_submit_button("Log with AI", type="primary")
    if ai_submitted:
        with st.spinner("Understanding your expense..."):
            result = run_async(manager.log_with_ai(text, today=date.today()))
        show_result(result)

    with st.expander("➕ Add manually", expanded=manager.form_state == FormState.ADD_FORM_OPEN):
        render_expense_form(manager)

    st.markdown("---")
    scope = st.radio(
        "Show",
        options=list(ExpenseScope),
        index=list(ExpenseScope).index(manager.scope_filter),
        format_func=lambda s: s.value.title(),
        horizontal=True,
    )
    manager.set_scope_filter(scope)

    expenses = manager.visible_expenses
    if not expenses:
        st.info("No expenses to show.")
        return

    for expense in expenses:
        col1, col2, col3, col4, col5 = st.columns([2, 2, 3, 2, 1])
        col1.write(expense.date.strftime("%d %b %Y"))
        col2.write(money(expense.amount))
        label = manager.category_name(expense)
        if expense.sub_category:
            label = f"{label} › {expense.sub_category}"
        col3.write(f"{label}  \n{expense.description}")
        col4.write(manager.account_name(expense) or "-")
        if col5.button("🗑️", key=f"del-expense-{expense.id}"):
            show_result(run_async(manager.delete_expense(expense.id)), rerun=True)


def render_expense_form(manager: ExpenseManager):
    accounts = {a.id: a for a in manager.accounts}
    categories = {c.id: c for c in manager.categories}

    with st.form("expense-form", clear_on_submit=True):
        col1, col2 = st.columns(2)
        with col1:
            amount = st.number_input(
                f"Amount ({get_settings().app.currency_symbol}) *",
                min_value=0.0,
                step=1.0,
                format="%.2f",
            )
            expense_date = st.date_input("Date *", value=date.today())
            description = st.text_input("Description")
        with col2:
            account_ids = list(accounts)
            account_id = st.selectbox(
                "Account *",
                options=account_ids,
                index=account_ids.index(manager.selected_account_id)
                if manager.selected_account_id in accounts else 0,
                format_func=lambda i: accounts[i].label,
            )
            category_ids = list(categories)
            category_id = st.selectbox(
                "Category *",
                options=category_ids,
                index=category_ids.index(manager.selected_category_id)
                if manager.selected_category_id in categories else 0,
                format_func=lambda i: categories[i].name,
            )
            sub_category = st.text_input("Subcategory (optional)")
            personal_expense = st.checkbox(
                "Personal expense",
                value=True,
                help="Untick for spending on behalf of someone else",
            )
        submitted = st.form_submit_button("Save expense", type="primary")

    if submitted:
        manager.selected_account_id = account_id
        manager.selected_category_id = category_id
        result = run_async(manager.add_expense(
            amount=amount,
            account_id=account_id,
            category_id=category_id,
            expense_date=expense_date,
            description=description,
            sub_category=sub_category,
            personal_expense=personal_expense,
        ))
        show_result(result)


# =============================================================================
# ACCOUNTS
# =============================================================================

def render_accounts_page(manager: AccountManager):
    st.title(f"💳 {page_title(ROUTE_ACCOUNTS)}")

    if manager.page_state == PageState.LOADING:
        with st.spinner("Loading accounts..."):
            run_async(manager.load())

    if st.button("➕ Add account"):
        manager.open_add_form()

    if manager.form_state == FormState.ADD_FORM_OPEN:
        with st.form("account-form"):
            name = st.text_input("Bank / wallet name *")
            nickname = st.text_input("Nickname", placeholder="e.g., Daily Use")
            account_type = st.selectbox(
                "Type",
                options=list(AccountType),
                index=list(AccountType).index(AccountType.DEBIT),
                format_func=lambda t: t.value.upper(),
            )
            last_four = st.text_input("Last 4 digits", max_chars=4)
            col1, col2 = st.columns(2)
            save = col1.form_submit_button("Save", type="primary")
            cancel = col2.form_submit_button("Cancel")
        if cancel:
            manager.close_add_form()
            st.rerun()
        if save:
            result = run_async(manager.add_account(name, account_type, nickname, last_four))
            show_result(result, rerun=result.success)

    for account in manager.accounts:
        col1, col2, col3 = st.columns([4, 2, 1])
        col1.markdown(f"**{account.label}**")
        col2.write(
            f"{account.type.value.upper()}"
            + (f" •••• {account.last_four}" if account.last_four else "")
        )
        if col3.button("🗑️", key=f"del-account-{account.id}"):
            show_result(run_async(manager.delete_account(account.id)), rerun=True)


# =============================================================================
# CATEGORIES
# =============================================================================

def render_categories_page(manager: CategoryManager):
    st.title(f"🏷️ {page_title(ROUTE_CATEGORIES)}")

    if manager.page_state == PageState.LOADING:
        with st.spinner("Loading categories..."):
            run_async(manager.load())

    with st.form("category-form", clear_on_submit=True):
        col1, col2 = st.columns([3, 1])
        name = col1.text_input("New category")
        category_type = col2.selectbox(
            "Type",
            options=list(CategoryType),
            format_func=lambda t: t.value.title(),
        )
        submitted = st.form_submit_button("Add category", type="primary")
    if submitted:
        result = run_async(manager.add_category(name, category_type))
        show_result(result)
        for issue in result.issues_for("name"):
            st.caption(f"⚠️ {issue.message}")

    for category in manager.categories:
        col1, col2, col3 = st.columns([4, 2, 1])
        if col1.button(category.name, key=f"select-{category.id}"):
            manager.select_category(category.id)
        col2.write(category.type.value.title())
        if col3.button("🗑️", key=f"del-category-{category.id}"):
            show_result(run_async(manager.delete_category(category.id)), rerun=True)

    selected = manager.selected_category
    if selected is None:
        return

    st.markdown(f"### {selected.name} › subcategories")
    if selected.sub_categories:
        st.write(", ".join(selected.sub_categories))
    else:
        st.caption("No subcategories yet.")

    with st.form("subcategory-form", clear_on_submit=True):
        sub_name = st.text_input("New subcategory")
        add_sub = st.form_submit_button("Add subcategory")
    if add_sub:
        show_result(run_async(manager.add_subcategory(selected.id, sub_name)), rerun=True)


if __name__ == "__main__":
    main()
