import streamlit as st

from app.error_ui import clear_field_errors, field_error, set_field_errors, show_error_ui
from app.frontend import fmt_date, fmt_enum
from backend.auth_session import AuthContext
from backend.company import get_company, update_company
from backend.error_handler import FormValidationError
from backend.logic.forms import BusinessDetailsForm, CompanyInfoForm
from backend.logic.records import STATES, BusinessType
from backend.rbac import EDIT_COMPANY, has_permission

FORM_KEY = "company_form"


def render(ctx: AuthContext, company_id: str) -> None:
    st.title("Company")
    try:
        company = get_company(ctx.client, company_id)
    except Exception as e:
        show_error_ui(e, context="company")
        return
    if company is None:
        st.warning("Company not found.")
        return

    addr = company.registered_address
    if not has_permission(ctx.profile, EDIT_COMPANY):
        st.subheader(company.name)
        st.write(f"CIN {company.cin} · PAN {company.pan} · GSTIN {company.gstin or '—'}")
        st.write(
            f"{fmt_enum(company.business_type)} · {STATES.get(company.state, company.state)} · "
            f"incorporated {fmt_date(company.incorporation_date)}"
        )
        if addr:
            st.write(", ".join(p for p in [addr.line1, addr.line2, addr.city, addr.pincode] if p))
        return

    states = list(STATES)
    types = [b.value for b in BusinessType]
    with st.form("company_edit_form"):
        name = st.text_input("Company name", value=company.name)
        field_error(FORM_KEY, "name")
        c1, c2, c3 = st.columns(3)
        cin = c1.text_input("CIN", value=company.cin)
        pan = c2.text_input("PAN", value=company.pan)
        gstin = c3.text_input("GSTIN", value=company.gstin or "")
        for f in ("cin", "pan", "gstin"):
            field_error(FORM_KEY, f)
        c4, c5 = st.columns(2)
        business_type = c4.selectbox("Business type", types, index=types.index(company.business_type.value))
        state = c5.selectbox(
            "State", states, index=states.index(company.state) if company.state in states else 0,
            format_func=lambda s: STATES[s],
        )
        for f in ("business_type", "state"):
            field_error(FORM_KEY, f)
        c6, c7, c8 = st.columns(3)
        turnover = c6.number_input("Annual turnover (₹)", min_value=0.0, value=float(company.annual_turnover))
        employees = c7.number_input("Employees", min_value=1, value=max(company.employee_count, 1), step=1)
        incorporated = c8.date_input("Incorporation date", value=company.incorporation_date)
        for f in ("annual_turnover", "employee_count", "incorporation_date"):
            field_error(FORM_KEY, f)
        line1 = st.text_input("Address line 1", value=addr.line1 if addr else "")
        line2 = st.text_input("Address line 2", value=(addr.line2 or "") if addr else "")
        c9, c10 = st.columns(2)
        city = c9.text_input("City", value=addr.city if addr else "")
        pincode = c10.text_input("Pincode", value=addr.pincode if addr else "")
        for f in ("address_line1", "city", "pincode"):
            field_error(FORM_KEY, f)
        submitted = st.form_submit_button("Save", type="primary")

    if submitted:
        try:
            update_company(
                ctx.client,
                company_id,
                CompanyInfoForm.from_dict({"name": name, "cin": cin, "pan": pan, "gstin": gstin}),
                BusinessDetailsForm.from_dict(
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
                    }
                ),
                ctx.user_id,
            )
            clear_field_errors(FORM_KEY)
        except FormValidationError as e:
            set_field_errors(FORM_KEY, e)
            show_error_ui(e, context="company_update")
        except Exception as e:
            show_error_ui(e, context="company_update")
        else:
            st.success("Company details saved.")
