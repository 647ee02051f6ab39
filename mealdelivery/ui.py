import streamlit as st
from datetime import date, datetime, timezone
import logging
from pydantic import ValidationError

import db
from utils import SeniorIn, VolunteerIn, VolunteerUpdate, LANGUAGES
from mealdelivery import services
from mealdelivery.auth import AuthService, AuthError
from mealdelivery.config import load_settings, ConfigError
from mealdelivery.csv_import import (
    SeniorImporter, CsvFormatError, CsvValidationError, TEMPLATE_CSV, parse_csv,
)
from mealdelivery.reports import (
    ReportService, monthly_csv, accessibility_csv, delivery_csv, month_label,
)

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    "pending": "Pending",
    "delivered": "Delivered",
    "missed": "Missed",
    "no_contact": "No contact",
    "family_confirmed": "Family confirmed",
}


@st.cache_resource
def _bootstrap():
    """Validate configuration and prepare the store once per process."""
    settings = load_settings()
    logging.getLogger().setLevel(settings.log_level)
    db.configure(settings.db_path)
    db.init_db()
    AuthService(db, settings).ensure_bootstrap_admin()
    return settings


def _rerun():
    try:
        st.rerun()
    except AttributeError:
        st.stop()


def _senior_form(key: str, senior: dict = None):
    """Render the senior fields; returns a SeniorIn on submit, else None."""
    senior = senior or {}
    methods = ["doorstep", "phone_confirmed", "family_member"]
    with st.form(key):
        name = st.text_input("Name", value=senior.get("name", ""))
        address = st.text_input("Address", value=senior.get("address", ""))
        c1, c2, c3 = st.columns(3)
        age = c1.number_input("Age", min_value=0, max_value=120, value=int(senior.get("age") or 0))
        household = c2.selectbox("Household", ["single", "family"],
                                 index=0 if senior.get("household_type", "single") == "single" else 1)
        method = c3.selectbox("Delivery method", methods,
                              index=methods.index(senior.get("delivery_method") or "doorstep"))
        c4, c5, c6 = st.columns(3)
        adults = c4.number_input("Adults", min_value=0, value=int(senior.get("family_adults") or 1))
        children = c5.number_input("Children", min_value=0, value=int(senior.get("family_children") or 0))
        language = c6.text_input("Preferred language", value=senior.get("preferred_language") or "english")
        c7, c8, c9 = st.columns(3)
        building = c7.text_input("Building", value=senior.get("building") or "")
        unit = c8.text_input("Unit / Apt", value=senior.get("unit_apt") or "")
        zip_code = c9.text_input("Zip code", value=senior.get("zip_code") or "")
        phone = st.text_input("Phone", value=senior.get("phone") or "")
        emergency = st.text_input("Emergency contact", value=senior.get("emergency_contact") or "")
        dietary = st.text_input("Dietary restrictions", value=senior.get("dietary_restrictions") or "")
        access = st.text_input("Accessibility needs", value=senior.get("accessibility_needs") or "")
        health = st.text_input("Health conditions", value=senior.get("health_conditions") or "")
        race = st.text_input("Race / ethnicity", value=senior.get("race_ethnicity") or "")
        instructions = st.text_area("Special instructions", value=senior.get("special_instructions") or "")
        smartphone = st.checkbox("Has smartphone", value=bool(senior.get("has_smartphone")))
        translation = st.checkbox("Needs translation", value=bool(senior.get("needs_translation")))
        submitted = st.form_submit_button("Save senior")
    if not submitted:
        return None
    try:
        return SeniorIn(
            name=name, address=address, age=int(age), household_type=household, delivery_method=method,
            family_adults=int(adults), family_children=int(children), preferred_language=language.lower() or "english",
            building=building or None, unit_apt=unit or None, zip_code=zip_code or None, phone=phone or None,
            emergency_contact=emergency or None, dietary_restrictions=dietary or None,
            accessibility_needs=access or None, health_conditions=health or None, race_ethnicity=race or None,
            special_instructions=instructions or None, has_smartphone=smartphone, needs_translation=translation,
            active=senior.get("active", True),
        )
    except ValidationError as e:
        st.error(f"Validation error: {e}")
        return None


def _auth_views(auth: AuthService):
    view = st.sidebar.selectbox("Choose view", ["Sign in", "Sign up", "Reset password"])

    if view == "Sign in":
        st.header("Sign in")
        with st.form("signin_form"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            submitted = st.form_submit_button("Sign in")
        if submitted:
            try:
                st.session_state['user'] = auth.sign_in(email, password)
            except AuthError as e:
                st.error(str(e))
            else:
                _rerun()

    elif view == "Sign up":
        st.header("Volunteer to deliver meals")
        with st.form("signup_form"):
            name = st.text_input("Full name")
            email = st.text_input("Email")
            phone = st.text_input("Phone (optional)")
            languages = st.multiselect("Languages you speak", LANGUAGES, default=["english"])
            password = st.text_input("Password", type="password")
            confirm = st.text_input("Confirm password", type="password")
            submitted = st.form_submit_button("Sign up")
        if submitted:
            if password != confirm:
                st.error("Passwords do not match")
                return
            try:
                v = VolunteerIn(name=name, email=email, phone=phone or None, languages=languages)
            except ValidationError as e:
                st.error(f"Validation error: {e}")
                return
            try:
                st.session_state['user'] = auth.sign_up(v, password)
            except AuthError as e:
                st.error(str(e))
            else:
                st.success(f"Thanks {v.name}! You were registered.")
                _rerun()

    else:
        st.header("Reset password")
        with st.form("reset_request_form"):
            email = st.text_input("Email")
            requested = st.form_submit_button("Email me a reset code")
        if requested:
            if auth.request_password_reset(email):
                st.info("If the address is registered, a reset code is on its way.")
            else:
                st.warning("Email could not be sent (SMTP not configured or failed). Ask an admin for help.")
        with st.form("reset_confirm_form"):
            token = st.text_input("Reset code")
            new_password = st.text_input("New password", type="password")
            confirmed = st.form_submit_button("Set new password")
        if confirmed:
            try:
                auth.reset_password(token, new_password)
                st.success("Password updated. You can sign in now.")
            except AuthError as e:
                st.error(str(e))


def _checklist_view(tracker: services.DeliveryTracker):
    st.header(f"Today's deliveries — {tracker.today}")
    completed, total, pct = tracker.progress()
    st.progress(int(pct), text=f"{completed} of {total} delivered")
    if not tracker.seniors:
        st.info("No seniors are assigned to you yet.")
        return

    if st.button("Mark all delivered"):
        try:
            changed = tracker.complete_all()
            st.success(f"Marked {changed} deliveries as delivered")
        except Exception as e:
            st.error(f"Could not update deliveries: {e}")
        _rerun()

    for senior in tracker.seniors:
        sid = senior['id']
        status = tracker.status_for(sid)
        cols = st.columns([0.6, 3, 1.5])
        checked = cols[0].checkbox(
            f"Delivered to {senior['name']}",
            value=status.is_delivered,
            key=f"deliv_{tracker.today}_{sid}_{status.status}",
            label_visibility="collapsed",
        )
        cols[1].markdown(f"**{senior['name']}** — {senior['address']}")
        cols[2].write(STATUS_LABELS.get(status.status, status.status))
        if checked != status.is_delivered:
            try:
                tracker.toggle(sid, checked)
            except Exception as e:
                st.error(f"Could not update delivery for {senior['name']}: {e}")
            _rerun()

        with st.expander(f"Details for {senior['name']}"):
            if senior.get('phone'):
                st.write(f"Phone: {senior['phone']}")
            if senior.get('dietary_restrictions'):
                st.write(f"Dietary: {senior['dietary_restrictions']}")
            if senior.get('special_instructions'):
                st.write(f"Instructions: {senior['special_instructions']}")
            with st.form(f"status_form_{sid}"):
                options = list(services.DELIVERY_STATUSES)
                new_status = st.selectbox("Status", options, index=options.index(status.status)
                                          if status.status in options else 0,
                                          format_func=lambda s: STATUS_LABELS.get(s, s))
                notes = st.text_input("Notes", value=status.notes)
                save = st.form_submit_button("Save status")
            if save:
                try:
                    tracker.set_status(sid, new_status, notes)
                    st.success("Status saved")
                except Exception as e:
                    st.error(f"Could not save status: {e}")
                _rerun()


def _my_seniors_view(tracker: services.DeliveryTracker):
    st.header("My seniors")
    search = st.text_input("Search by name or address")
    status_filter = st.radio("Show", ["all", "completed", "pending"], horizontal=True)
    shown = services.filter_seniors(tracker.seniors, search, status_filter, tracker.statuses)
    completed, total, _ = tracker.progress()
    c1, c2, c3 = st.columns(3)
    c1.metric("Delivered", completed)
    c2.metric("Pending", total - completed)
    c3.metric("Dietary needs", sum(1 for s in tracker.seniors if s.get('dietary_restrictions')))
    rows = []
    for s in shown:
        ds = tracker.status_for(s['id'])
        rows.append({
            'name': s['name'],
            'address': s['address'],
            'phone': s.get('phone') or '',
            'language': s.get('preferred_language') or '',
            'dietary_restrictions': s.get('dietary_restrictions') or '',
            'status': STATUS_LABELS.get(ds.status, ds.status),
        })
    if rows:
        st.dataframe(rows, use_container_width=True)
    else:
        st.info("No seniors match the current filter.")


def _profile_view(auth: AuthService, user: services.CurrentUser):
    st.header("Profile")
    profile = db.get_volunteer(user.id) or {}
    with st.form("profile_form"):
        name = st.text_input("Name", value=profile.get('name', ''))
        phone = st.text_input("Phone", value=profile.get('phone') or '')
        address = st.text_input("Address", value=profile.get('address') or '')
        languages = st.multiselect("Languages", sorted(set(LANGUAGES) | set(profile.get('languages') or [])),
                                   default=profile.get('languages') or [])
        vehicles = ["none", "car", "truck", "van"]
        vehicle = st.selectbox("Vehicle", vehicles, index=vehicles.index(profile.get('vehicle_type') or "none"))
        capacity = st.number_input("Vehicle capacity", min_value=0, value=int(profile.get('vehicle_capacity') or 0))
        emergency = st.text_input("Emergency contact", value=profile.get('emergency_contact') or '')
        save = st.form_submit_button("Save profile")
    if save:
        try:
            upd = VolunteerUpdate(name=name, phone=phone or None, address=address or None, languages=languages,
                                  vehicle_type=vehicle, vehicle_capacity=int(capacity),
                                  emergency_contact=emergency or None)
            db.update_volunteer(user.id, upd.model_dump(exclude_none=True))
            st.success("Profile updated")
        except ValidationError as e:
            st.error(f"Validation error: {e}")
        except Exception as e:
            st.error(f"Could not update profile: {e}")

    st.subheader("Change password")
    with st.form("password_form"):
        current = st.text_input("Current password", type="password")
        new = st.text_input("New password", type="password")
        change = st.form_submit_button("Change password")
    if change:
        try:
            auth.change_password(user, current, new)
            st.success("Password changed")
        except AuthError as e:
            st.error(str(e))


def _admin_overview_tab():
    st.subheader("Overview")
    today = date.today()
    try:
        ov = ReportService(db).overview(today.year, today.month)
    except Exception as e:
        logger.exception("Could not load admin overview")
        st.error(f"Error loading overview: {e}")
        return
    m1, m2, m3 = st.columns(3)
    m1.metric("Total seniors", ov.total_seniors)
    m2.metric("Active volunteers", ov.active_volunteers)
    m3.metric(f"Deliveries in {ov.month}", ov.monthly_deliveries)
    m4, m5, m6 = st.columns(3)
    m4.metric("Completed", ov.completed_deliveries)
    m5.metric("Pending", ov.pending_deliveries)
    m6.metric("Success rate", f"{ov.success_rate}%")

    st.markdown("**Recent deliveries**")
    if not ov.recent_deliveries:
        st.info("No deliveries recorded this month yet")
        return
    for d in ov.recent_deliveries:
        status = STATUS_LABELS.get(d.get('status'), d.get('status'))
        st.write(f"{d.get('delivery_date')} · {d.get('senior_name') or 'Unknown'} · "
                 f"{d.get('volunteer_name') or 'Unassigned'} · {status}")


def _admin_seniors_tab():
    st.subheader("Seniors")
    show_inactive = st.checkbox("Include inactive seniors")
    seniors = db.list_seniors(None if show_inactive else True)
    search = st.text_input("Search seniors", key="senior_search")
    shown = services.search_records(seniors, search, ("name", "address", "phone"))
    active_count = sum(1 for s in seniors if s.get('active'))
    st.write(f"Showing {len(shown)} of {len(seniors)} (active: {active_count})")
    if shown:
        st.dataframe([{k: s.get(k) for k in ('id', 'name', 'age', 'address', 'phone', 'preferred_language',
                                               'delivery_method', 'active')} for s in shown],
                     use_container_width=True)

    with st.expander("Register a senior"):
        new = _senior_form("create_senior")
        if new:
            try:
                sid = db.create_senior(new.model_dump())
                st.success(f"Senior '{new.name}' created (id {sid}).")
            except Exception as e:
                st.error(f"Could not create senior: {e}")

    st.markdown("---")
    labels = {f"{s['name']} (id:{s['id']})": s for s in seniors}
    sel = st.selectbox("Select senior to edit", [""] + list(labels.keys()))
    if sel:
        senior = labels[sel]
        upd = _senior_form(f"edit_senior_{senior['id']}", senior)
        if upd:
            ok = db.update_senior(senior['id'], upd.model_dump())
            if ok:
                st.success("Senior updated")
            else:
                st.error("Update failed")
        c1, c2 = st.columns(2)
        if senior.get('active') and c1.button("Deactivate senior", key=f"deact_senior_{senior['id']}"):
            if db.deactivate_senior(senior['id']):
                st.success("Senior deactivated")
                _rerun()
        if c2.checkbox("Confirm delete senior (removes assignments & deliveries)",
                       key=f"confirm_del_senior_{senior['id']}"):
            if c2.button("Delete senior", key=f"del_senior_{senior['id']}"):
                if db.delete_senior(senior['id']):
                    st.success("Senior deleted")
                    _rerun()
                else:
                    st.error("Delete failed")


def _admin_import_tab(settings):
    st.subheader("Import seniors from CSV")
    st.download_button("Download template", data=TEMPLATE_CSV, file_name="seniors-import-template.csv",
                       mime="text/csv")
    upload = st.file_uploader("CSV file", type=["csv"])
    if not upload:
        return
    try:
        rows = parse_csv(upload.getvalue().decode("utf-8"))
    except (CsvFormatError, UnicodeDecodeError) as e:
        st.error(f"Error reading CSV file: {e}")
        return
    st.write(f"{len(rows)} rows found. Preview:")
    st.dataframe(rows[:5], use_container_width=True)
    if st.button("Import seniors"):
        try:
            result = SeniorImporter(db, batch_size=settings.import_batch_size).run(rows)
        except CsvValidationError as e:
            st.error("Validation errors found:\n" + "\n".join(e.errors))
            return
        if result.successful:
            st.success(f"Successfully imported {result.successful} out of {result.total} records.")
        if result.failed:
            st.error(f"{result.failed} records failed to import.")
            for err in result.errors:
                st.write(f"- {err}")


def _admin_volunteers_tab():
    st.subheader("Volunteers")
    volunteers = db.list_volunteers()
    c1, c2 = st.columns([3, 1])
    search = c1.text_input("Search volunteers", key="vol_search")
    status_filter = c2.selectbox("Status", ["all", "active", "inactive"])
    shown = services.search_records(volunteers, search, ("name", "email", "phone"))
    if status_filter != "all":
        shown = [v for v in shown if bool(v.get('active')) == (status_filter == "active")]
    st.write(f"Total volunteers: {len(volunteers)}")
    if shown:
        st.dataframe([{
            'id': v['id'], 'name': v['name'], 'email': v['email'], 'phone': v.get('phone') or '',
            'role': v.get('role'), 'languages': ', '.join(v.get('languages') or []), 'active': v.get('active'),
        } for v in shown], use_container_width=True)

    labels = {f"{v['name']} <{v['email']}>": v for v in volunteers}
    sel = st.selectbox("Select volunteer to edit", [""] + list(labels.keys()))
    if not sel:
        return
    vol = labels[sel]
    roles = ["volunteer", "admin", "super_admin"]
    with st.form(f"edit_vol_{vol['id']}"):
        name = st.text_input("Name", value=vol['name'])
        phone = st.text_input("Phone", value=vol.get('phone') or '')
        role = st.selectbox("Role", roles, index=roles.index(vol.get('role') or "volunteer"))
        active = st.checkbox("Active", value=bool(vol.get('active')))
        notes = st.text_area("Notes", value=vol.get('notes') or '')
        save = st.form_submit_button("Save volunteer")
    if save:
        try:
            upd = VolunteerUpdate(name=name, phone=phone or None, role=role, active=active, notes=notes or None)
            ok = db.update_volunteer(vol['id'], upd.model_dump(exclude_none=True))
            if role != "volunteer":
                db.upsert_admin(vol['email'], name, role=role, phone=phone or None)
            else:
                db.deactivate_admin(vol['email'])
            if ok:
                st.success("Volunteer updated")
            else:
                st.error("Update failed or no changes made")
        except ValidationError as e:
            st.error(f"Validation error: {e}")
    if vol.get('active') and st.button("Deactivate volunteer", key=f"deact_vol_{vol['id']}"):
        if db.deactivate_volunteer(vol['id']):
            st.success("Volunteer deactivated")
            _rerun()
    if st.checkbox("Confirm delete volunteer", key=f"confirm_del_vol_{vol['id']}"):
        if st.button("Delete Volunteer", key=f"del_vol_{vol['id']}"):
            if db.delete_volunteer(vol['id']):
                st.success("Volunteer deleted")
                _rerun()
            else:
                st.error("Delete failed")


def _admin_assignments_tab(user: services.CurrentUser):
    st.subheader("Assign seniors to volunteers")
    volunteers = db.list_volunteers(active=True)
    vol_map = {f"{v['name']} <{v['email']}>": v['id'] for v in volunteers}
    unassigned = services.unassigned_seniors(db)
    st.write(f"Unassigned seniors: {len(unassigned)}")
    if unassigned and vol_map:
        senior_map = {f"{s['name']} — {s['address']}": s['id'] for s in unassigned}
        with st.form("bulk_assign_form"):
            chosen = st.multiselect("Seniors", list(senior_map.keys()))
            vol_label = st.selectbox("Volunteer", list(vol_map.keys()))
            assign_date = st.date_input("Assignment date", value=date.today())
            submitted = st.form_submit_button("Assign")
        if submitted:
            if not chosen:
                st.warning("Select at least one senior")
            else:
                try:
                    n = db.bulk_assign_seniors([senior_map[c] for c in chosen], vol_map[vol_label],
                                               assign_date.isoformat(), user.id)
                    st.success(f"Assigned {n} seniors to {vol_label}")
                    _rerun()
                except Exception as e:
                    st.error(f"Assignment failed: {e}")

    st.markdown("---")
    status_filter = st.selectbox("Assignment status", ["active", "inactive", "completed", "all"])
    assignments = db.list_assignments(status=None if status_filter == "all" else status_filter)
    search = st.text_input("Search by senior or volunteer", key="assign_search")
    assignments = services.search_records(assignments, search, ("senior_name", "volunteer_name", "volunteer_email"))
    if not assignments:
        st.info("No assignments match.")
        return
    st.dataframe([{
        'id': a['id'], 'senior': a.get('senior_name'), 'address': a.get('senior_address'),
        'volunteer': a.get('volunteer_name'), 'date': a['assignment_date'], 'status': a['status'],
    } for a in assignments], use_container_width=True)

    labels = {f"#{a['id']} {a.get('senior_name')} → {a.get('volunteer_name')}": a for a in assignments}
    sel = st.selectbox("Select assignment to change", [""] + list(labels.keys()))
    if not sel:
        return
    a = labels[sel]
    vol_labels = list(vol_map.keys())
    current = next((k for k, vid in vol_map.items() if vid == a['volunteer_id']), None)
    statuses = ["active", "inactive", "completed"]
    with st.form(f"edit_assign_{a['id']}"):
        new_vol = st.selectbox("Volunteer", vol_labels, index=vol_labels.index(current) if current else 0)
        new_status = st.selectbox("Status", statuses, index=statuses.index(a['status']))
        notes = st.text_input("Notes", value=a.get('notes') or '')
        save = st.form_submit_button("Save assignment")
    if save:
        try:
            db.update_assignment(a['id'], {'volunteer_id': vol_map[new_vol], 'status': new_status,
                                           'notes': notes or None, 'assigned_by': user.id})
            st.success("Assignment updated")
            _rerun()
        except Exception as e:
            st.error(f"Could not update assignment: {e}")
    if st.checkbox("Confirm delete assignment", key=f"confirm_del_assign_{a['id']}"):
        if st.button("Delete assignment", key=f"del_assign_{a['id']}"):
            if db.delete_assignment(a['id']):
                st.success("Assignment deleted")
                _rerun()


def _admin_reports_tab():
    st.subheader("Reports")
    reports = ReportService(db)
    today = date.today()
    report_type = st.selectbox("Report type", ["monthly", "accessibility", "delivery"],
                               format_func=lambda r: {"monthly": "Monthly summary",
                                                      "accessibility": "Accessibility",
                                                      "delivery": "Delivery details"}[r])
    c1, c2 = st.columns(2)
    year = c1.number_input("Year", min_value=2000, max_value=2100, value=today.year)
    month = c2.number_input("Month", min_value=1, max_value=12, value=today.month)
    label = month_label(int(year), int(month))
    if not st.button("Generate report"):
        return
    try:
        if report_type == "monthly":
            stats = reports.monthly_stats(int(year), int(month))
            m1, m2, m3, m4 = st.columns(4)
            m1.metric("Seniors served", stats.seniors_served)
            m2.metric("Deliveries completed", stats.deliveries_completed)
            m3.metric("Total deliveries", stats.total_deliveries)
            m4.metric("Success rate", f"{stats.success_rate}%")
            st.write(f"Active volunteers: {stats.active_volunteers} — new volunteers: {stats.new_volunteers}")
            st.bar_chart({t['month']: t['completion_rate'] for t in stats.monthly_trends})
            st.download_button("Download CSV", data=monthly_csv(stats), file_name=f"monthly-report-{label}.csv")
        elif report_type == "accessibility":
            stats = reports.accessibility_stats()
            st.write(f"Total seniors: {stats.total_seniors}")
            st.write(f"Need translation: {stats.seniors_needing_translation}")
            st.write(f"With smartphones: {stats.seniors_with_smartphones} — without: {stats.seniors_without_smartphones}")
            st.write("Languages:", stats.language_breakdown)
            st.write("Delivery methods:", stats.delivery_method_breakdown)
            st.write("Volunteer languages:", stats.volunteer_languages)
            st.download_button("Download CSV", data=accessibility_csv(stats),
                               file_name=f"accessibility-report-{datetime.now(timezone.utc).date()}.csv")
        else:
            rows = reports.delivery_report(int(year), int(month))
            st.write(f"Results: {len(rows)}")
            if rows:
                st.dataframe([{k: d.get(k) for k in ('delivery_date', 'senior_name', 'volunteer_name', 'status',
                                                      'delivery_method', 'notes')} for d in rows],
                             use_container_width=True)
            st.download_button("Download CSV", data=delivery_csv(rows), file_name=f"delivery-report-{label}.csv")
    except Exception as e:
        logger.exception("Report generation failed")
        st.error(f"Error generating report: {e}")


def run():
    """Run the Streamlit UI; called from the root `app.py`."""
    st.set_page_config(page_title="Senior Meal Delivery", layout="centered")

    try:
        settings = _bootstrap()
    except ConfigError as e:
        st.error(str(e))
        st.stop()

    auth = AuthService(db, settings)
    st.title("Senior Meal Delivery")

    if 'user' not in st.session_state:
        st.session_state['user'] = None

    user = st.session_state['user']
    if user is not None:
        user = auth.reload(user)
        st.session_state['user'] = user

    if user is None:
        _auth_views(auth)
        return

    st.sidebar.write(f"Signed in as **{user.name}** ({user.role})")
    views = ["Checklist", "My seniors", "Profile"]
    if user.is_admin:
        views.append("Admin")
    view = st.sidebar.selectbox("Choose view", views)

    tracker = services.DeliveryTracker(db, user)
    if view in ("Checklist", "My seniors"):
        tracker.refresh()

    if view == "Checklist":
        _checklist_view(tracker)
    elif view == "My seniors":
        _my_seniors_view(tracker)
    elif view == "Profile":
        _profile_view(auth, user)
    else:
        st.header("Admin — Seniors, Volunteers & Reports")
        tabs = st.tabs(["Overview", "Seniors", "Import", "Volunteers", "Assignments", "Reports"])
        with tabs[0]:
            _admin_overview_tab()
        with tabs[1]:
            _admin_seniors_tab()
        with tabs[2]:
            _admin_import_tab(settings)
        with tabs[3]:
            _admin_volunteers_tab()
        with tabs[4]:
            _admin_assignments_tab(user)
        with tabs[5]:
            _admin_reports_tab()

    st.markdown("---")
    if st.sidebar.button("Sign out"):
        st.session_state['user'] = None
        _rerun()
