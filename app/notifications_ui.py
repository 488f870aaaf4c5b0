import streamlit as st

from app.error_ui import clear_field_errors, field_error, set_field_errors, show_error_ui
from app.frontend import fmt_date, fmt_enum
from backend.auth_session import AuthContext
from backend.error_handler import FormValidationError
from backend.logic.forms import ProfileForm
from backend.logic.records import NotificationPrefs
from backend.notifications import (
    get_user_notifications,
    mark_all_read,
    mark_read,
    save_notification_preferences,
    toggle_lead_day,
    unread_count,
)

LEAD_DAY_CHOICES = [30, 15, 7, 3, 1]
LEAD_DAYS_DRAFT_KEY = "lead_days_draft"
PROFILE_FORM_KEY = "profile_form"


def render(ctx: AuthContext, company_id: str) -> None:
    st.title("🔔 Notifications")
    try:
        notifications = get_user_notifications(ctx.client, ctx.user_id)
    except Exception as e:
        show_error_ui(e, context="notifications")
        return

    unread = unread_count(notifications)
    st.caption(f"{unread} unread")

    if notifications:
        if unread and st.button("Mark all as read"):
            try:
                mark_all_read(ctx.client, ctx.user_id)
            except Exception as e:
                show_error_ui(e, context="notifications_mark_all")
            else:
                st.rerun()
        for n in notifications:
            with st.container(border=True):
                marker = "🔵 " if not n.is_read else ""
                st.markdown(f"{marker}**{n.title}** · {fmt_enum(n.type)}")
                st.write(n.message)
                if n.due_date:
                    st.caption(f"Due {fmt_date(n.due_date)}")
                st.caption(fmt_date(n.created_at))
                if not n.is_read and st.button("Mark as read", key=f"read_{n.id}"):
                    try:
                        mark_read(ctx.client, n.id, ctx.user_id)
                    except Exception as e:
                        show_error_ui(e, context="notification_read")
                    else:
                        st.rerun()
    else:
        st.success("No notifications.")


def render_settings(ctx: AuthContext, company_id: str) -> None:
    st.title("Settings")
    _render_profile(ctx)
    st.divider()
    _render_preferences(ctx)


def _render_profile(ctx: AuthContext) -> None:
    st.subheader("Your profile")
    st.caption(ctx.email or "")
    with st.form(PROFILE_FORM_KEY):
        name = st.text_input("Name", value=ctx.profile.name or "")
        field_error(PROFILE_FORM_KEY, "name")
        phone = st.text_input("Phone", value=ctx.profile.phone or "", max_chars=10)
        field_error(PROFILE_FORM_KEY, "phone")
        submitted = st.form_submit_button("Save profile")

    if submitted:
        try:
            form = ProfileForm.from_dict({"name": name, "phone": phone}).validate()
            ctx.update_profile(form.to_payload())
        except FormValidationError as e:
            set_field_errors(PROFILE_FORM_KEY, e)
            show_error_ui(e, context="profile_update")
        except Exception as e:
            show_error_ui(e, context="profile_update")
        else:
            clear_field_errors(PROFILE_FORM_KEY)
            st.rerun()


def _render_preferences(ctx: AuthContext) -> None:
    st.subheader("Notifications")
    prefs = ctx.profile.notification_preferences

    email = st.toggle("Email", value=prefs.email)
    sms = st.toggle("SMS", value=prefs.sms)
    in_app = st.toggle("In-app", value=prefs.in_app)

    st.markdown("#### Remind me before a deadline")
    # unsaved selection; dropped on save and on sign-out
    lead_days = st.session_state.setdefault(LEAD_DAYS_DRAFT_KEY, list(prefs.lead_days))
    cols = st.columns(len(LEAD_DAY_CHOICES))
    for col, day in zip(cols, LEAD_DAY_CHOICES):
        label = f"{day} day" + ("s" if day != 1 else "")
        if col.button(("✅ " if day in lead_days else "") + label, key=f"lead_{day}"):
            prefs_now = toggle_lead_day(NotificationPrefs(lead_days=lead_days), day)
            st.session_state[LEAD_DAYS_DRAFT_KEY] = prefs_now.lead_days
            st.rerun()

    if st.button("Save settings", type="primary"):
        updated = NotificationPrefs(email=email, sms=sms, in_app=in_app, lead_days=lead_days)
        try:
            ctx.profile = save_notification_preferences(ctx.client, ctx.user_id, updated)
        except Exception as e:
            show_error_ui(e, context="notification_settings")
        else:
            st.session_state.pop(LEAD_DAYS_DRAFT_KEY, None)
            st.success("Settings saved.")
