# app/onboarding_ui.py
from datetime import date

import pandas as pd
import streamlit as st

from app.auth_supabase import get_auth_context, get_settings, get_store
from app.error_ui import clear_field_errors, field_error, set_field_errors, show_error_ui
from app.frontend import fmt_enum
from backend.error_handler import FormValidationError
from backend.logic.records import STATES, BusinessType
from backend.onboarding import OnboardingStep, OnboardingWizard

WIZARD_KEY = "onboarding_wizard"
STEP_TITLES = ["Company information", "Business details", "Your account", "Review"]


def _wizard() -> OnboardingWizard:
    if WIZARD_KEY not in st.session_state:
        st.session_state[WIZARD_KEY] = OnboardingWizard()
    return st.session_state[WIZARD_KEY]


def _submit(form_key: str, action, data) -> None:
    try:
        action(data)
    except FormValidationError as e:
        set_field_errors(form_key, e)
    else:
        clear_field_errors(form_key)
    st.rerun()


def _back_button(w: OnboardingWizard) -> None:
    if st.button("Back", key=f"back_{w.step.value}"):
        w.back()
        st.rerun()


def _company_info(w: OnboardingWizard) -> None:
    key = "onb_company"
    prev = w.company_info
    with st.form(key):
        name = st.text_input("Company name", value=prev.name if prev else "")
        field_error(key, "name")
        cin = st.text_input("CIN", value=prev.cin if prev else "", placeholder="L99999XX2023PLC123456")
        field_error(key, "cin")
        pan = st.text_input("PAN", value=prev.pan if prev else "", placeholder="AAAAA0000A")
        field_error(key, "pan")
        gstin = st.text_input("GSTIN (optional)", value=prev.gstin if prev else "", placeholder="22AAAAA0000A1Z5")
        field_error(key, "gstin")
        submitted = st.form_submit_button("Next", type="primary")
    if submitted:
        _submit(key, w.submit_company_info, {"name": name, "cin": cin, "pan": pan, "gstin": gstin})


def _business_details(w: OnboardingWizard) -> None:
    key = "onb_business"
    prev = w.business_details
    states = list(STATES)
    types = [b.value for b in BusinessType]
    with st.form(key):
        c1, c2 = st.columns(2)
        business_type = c1.selectbox(
            "Business type", types,
            index=types.index(prev.business_type) if prev else types.index(BusinessType.SERVICES.value),
            format_func=fmt_enum,
        )
        state = c2.selectbox(
            "State", states, index=states.index(prev.state) if prev else 0, format_func=lambda s: STATES[s]
        )
        c3, c4, c5 = st.columns(3)
        turnover = c3.number_input(
            "Annual turnover (₹)", min_value=0.0, step=100000.0,
            value=float(prev.annual_turnover) if prev else 0.0,
        )
        field_error(key, "annual_turnover")
        employees = c4.number_input("Employees", min_value=1, step=1, value=prev.employee_count if prev else 1)
        field_error(key, "employee_count")
        incorporated = c5.date_input(
            "Incorporation date", value=prev.incorporation_date if prev else date.today(), max_value=date.today()
        )
        line1 = st.text_input("Registered address line 1", value=prev.address_line1 if prev else "")
        field_error(key, "address_line1")
        line2 = st.text_input("Address line 2", value=prev.address_line2 if prev else "")
        c6, c7 = st.columns(2)
        city = c6.text_input("City", value=prev.city if prev else "")
        field_error(key, "city")
        pincode = c7.text_input("Pincode", value=prev.pincode if prev else "")
        field_error(key, "pincode")
        submitted = st.form_submit_button("Next", type="primary")
    _back_button(w)
    if submitted:
        _submit(
            key,
            w.submit_business_details,
            {
                "business_type": business_type,
                "state": state,
                "annual_turnover": turnover,
                "employee_count": employees,
                "incorporation_date": incorporated,
                "address_line1": line1,
                "address_line2": line2,
                "city": city,
                "pincode": pincode,
            },
        )


def _user_account(w: OnboardingWizard) -> None:
    key = "onb_account"
    prev = w.user_account
    with st.form(key):
        name = st.text_input("Your name", value=prev.name if prev else "")
        field_error(key, "name")
        email = st.text_input("Email", value=prev.email if prev else "")
        field_error(key, "email")
        phone = st.text_input("Phone (10 digits)", value=prev.phone if prev else "")
        field_error(key, "phone")
        password = st.text_input("Password", type="password")
        field_error(key, "password")
        confirm = st.text_input("Confirm password", type="password")
        field_error(key, "confirm_password")
        submitted = st.form_submit_button("Next", type="primary")
    _back_button(w)
    if submitted:
        _submit(
            key,
            w.submit_user_account,
            {"name": name, "email": email, "phone": phone, "password": password, "confirm_password": confirm},
        )


def _review(w: OnboardingWizard) -> None:
    info, details, account = w.company_info, w.business_details, w.user_account
    st.markdown(f"**{info.name}** · CIN {info.cin} · PAN {info.pan}")
    st.write(
        f"{fmt_enum(details.business_type)} in {STATES[details.state]} · "
        f"turnover ₹{float(details.annual_turnover):,.0f} · {details.employee_count} employees"
    )
    st.write(f"Primary contact: {account.name} ({account.email})")

    st.markdown("#### Compliances that apply to you")
    st.dataframe(
        pd.DataFrame(
            [
                {
                    "name": d.name,
                    "type": d.category.value,
                    "frequency": d.frequency.value,
                    "regulatory body": d.regulatory_body.value,
                    "why": d.justification,
                    "first due": p["next_due_date"],
                }
                for d, p in zip(w.drafts, w.planned)
            ]
        ),
        use_container_width=True,
        hide_index=True,
    )

    if st.button("Create account", type="primary"):
        with st.spinner("Setting up your company..."):
            try:
                ctx = get_auth_context()
                w.complete(ctx.client, get_store(), redirect_to=get_settings().app_url, sign_up=ctx.sign_up)
            except Exception as e:
                show_error_ui(e, context="onboarding_complete")
            else:
                st.rerun()
    _back_button(w)


def render() -> None:
    st.title("Register your company")
    w = _wizard()

    if w.step == OnboardingStep.PENDING_EMAIL_VERIFICATION:
        if w.result.session_started:
            st.success(f"Account created for {w.result.email}. You are signed in.")
            st.page_link("streamlit_app.py", label="Open the dashboard")
        else:
            st.success(
                f"Account requested for {w.result.email}. Confirm your email, then sign in: "
                f"your {w.result.compliances_staged} compliances are added on first sign-in."
            )
            st.page_link("streamlit_app.py", label="Go to sign in")
        if st.button("Register another company"):
            st.session_state.pop(WIZARD_KEY, None)
            st.rerun()
        return

    st.progress(w.step_number / len(STEP_TITLES), text=f"Step {w.step_number} of {len(STEP_TITLES)}: "
                f"{STEP_TITLES[w.step_number - 1]}")

    {
        OnboardingStep.COMPANY_INFO: _company_info,
        OnboardingStep.BUSINESS_DETAILS: _business_details,
        OnboardingStep.USER_ACCOUNT: _user_account,
        OnboardingStep.REVIEW: _review,
    }[w.step](w)
