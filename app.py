"""Streamlit UI for the JobQuest job board."""
from __future__ import annotations

import sys
import time
from dataclasses import replace
from datetime import date
from pathlib import Path

import requests
import streamlit as st

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from jobquest.admin import (
    ADMIN_GUEST_STATUSES,
    AdminDashboard,
    GuestApplicationManagement,
    JobForm,
    JobManagement,
    UserManagement,
    job_image,
)
from jobquest.api import Backend, connect
from jobquest.apply_flow import ApplicationFlow, ApplyState, GuestForm
from jobquest.account import DELETE_CONFIRMATION, PREFERENCES, AccountSettings
from jobquest.auth import AuthSession, SignupForm, social_identity
from jobquest.config import ensure_dirs, http_timeout, load_settings
from jobquest.contact import ContactForm, submit_contact, subscribe_newsletter
from jobquest.errors import ApiError, PermissionDenied, ValidationError
from jobquest.formatting import DeadlineBucket, format_date, job_type_label, status_label
from jobquest.listings import JobCard, JobListing, SavedJobsListing, build_card, category_counts
from jobquest.log import get_logger
from jobquest.models import (
    APPLICATION_STATUSES,
    CONTACT_STATUSES,
    EXPERIENCE_LEVELS,
    JOB_CATEGORIES,
    JOB_STATUSES,
    JOB_TYPES,
    Job,
)
from jobquest.notices import Banner, live_banner
from jobquest.profile import EXPERIENCE_OPTIONS, ProfileEditor, resume_file, resume_url
from jobquest.saved_jobs import BookmarkStatus, SavedJobs
from jobquest.search import JobQuery
from jobquest.share import Provider, copy_locally, fetch_poster, poster_filename, poster_url
from jobquest.tracker import SORT_OPTIONS, MyApplications

log = get_logger(__name__)

SETTINGS = load_settings()

_DEADLINE_ICON: dict[DeadlineBucket, str] = {
    DeadlineBucket.EXPIRED: "⛔",
    DeadlineBucket.TODAY: "🔥",
    DeadlineBucket.ONE_DAY: "🔥",
    DeadlineBucket.URGENT: "⏰",
}

# ── Session services ─────────────────────────────────────────────────────


def _services() -> tuple[Backend, AuthSession, SavedJobs]:
    state = st.session_state
    if "backend" not in state:
        ensure_dirs()
        backend = connect()
        auth = AuthSession(backend.auth, backend.client)
        saved = SavedJobs(auth, backend.users, backend.client.store)
        auth.init()
        state["backend"], state["auth"], state["saved_jobs"] = backend, auth, saved
    return state["backend"], state["auth"], state["saved_jobs"]


def _listing(key: str, preset: str) -> JobListing:
    if key not in st.session_state:
        backend, _, _ = _services()
        st.session_state[key] = JobListing(backend.jobs, preset)
    return st.session_state[key]


@st.fragment(run_every=1)
def _show_banner() -> None:
    banner = live_banner(st.session_state)
    if banner is None:
        return
    c1, c2, c3 = st.columns([6, 1, 1])
    c1.warning(banner.message)
    if c2.button("Sign in", key="banner_sign_in"):
        st.session_state.pop("banner", None)
        st.switch_page(PAGES["account"])
    if c3.button("✕", key="banner_dismiss"):
        banner.dismiss()
        st.rerun()


def _copy(text: str, what: str) -> None:
    if copy_locally(text, SETTINGS["local_clipboard"]):
        st.toast(f"{what} copied to clipboard")
    st.info(f"Copy the {what.lower()} below:")
    st.code(text, language=None)


# ── Job cards ────────────────────────────────────────────────────────────


def _open_job(job_id: str) -> None:
    st.session_state["selected_job"] = job_id
    st.switch_page(PAGES["job"])


def _render_card(card: JobCard, key: str) -> None:
    _, _, saved = _services()
    job = card.job
    with st.container(border=True):
        top, mark = st.columns([5, 1])
        top.markdown(f"**{job.title}**  \n{job.company} · {job.location or 'Anywhere'}"
                     + (" · Remote" if job.is_remote else ""))
        if mark.button("★" if card.saved else "☆", key=f"{key}_save", help="Save job"):
            result = saved.toggle_bookmark(job.id)
            if result.status is BookmarkStatus.REQUIRES_AUTH:
                st.session_state["banner"] = result.banner
            elif result.status is BookmarkStatus.FAILED:
                st.session_state["flash_error"] = f"Could not update saved jobs: {result.error}"
            st.rerun()

        meta = [job_type_label(job.job_type)] if job.job_type else []
        if card.salary:
            meta.append(card.salary)
        meta.append(card.posted)
        st.caption(" · ".join(meta))
        if card.deadline:
            icon = _DEADLINE_ICON.get(card.deadline.bucket, "📅")
            st.caption(f"{icon} {card.deadline.text}")

        c1, c2 = st.columns(2)
        if c1.button("View", key=f"{key}_view", use_container_width=True):
            _open_job(job.id)
        with c2.popover("Share", use_container_width=True):
            st.link_button("Email", card.share.email, use_container_width=True)
            st.link_button("LinkedIn", card.share.linkedin, use_container_width=True)
            st.link_button("Twitter / X", card.share.twitter, use_container_width=True)
            st.link_button("WhatsApp", card.share.whatsapp, use_container_width=True)
            if st.button("Copy link", key=f"{key}_copy", use_container_width=True):
                _copy(card.share.url, "Link")


def _render_grid(cards: list[JobCard], key: str, columns: int = 3) -> None:
    if not cards:
        st.info("No jobs found.")
        return
    cols = st.columns(columns)
    for i, card in enumerate(cards):
        with cols[i % columns]:
            _render_card(card, f"{key}_{card.job.id}_{i}")


def _render_listing(listing: JobListing, query: JobQuery, key: str, text: str = "") -> None:
    _, _, saved = _services()
    query = replace(query, limit=listing.page_size)
    if listing.query != query or listing.error:
        with st.spinner("Loading jobs…"):
            listing.fetch(query)
    if listing.error:
        st.error(listing.error)
        if st.button("Retry", key=f"{key}_retry"):
            st.rerun()
        return
    _render_grid(listing.cards(saved, text), key)


def _pager(key: str, total_pages: int) -> int:
    if total_pages <= 1:
        return 1
    return int(st.number_input("Page", min_value=1, max_value=total_pages, value=1, key=key))


# ── Page: Jobs ───────────────────────────────────────────────────────────


def page_jobs() -> None:
    st.header("Find your next job")

    featured = _listing("listing_featured", "carousel")
    if featured.query is None:
        featured.fetch()
    if featured.jobs:
        st.subheader("Featured jobs")
        _, _, saved = _services()
        _render_grid(featured.cards(saved), "featured")
        st.divider()

    st.subheader("All jobs")
    listing = _listing("listing_all", "all_jobs")
    c1, c2 = st.columns([3, 1])
    text = c1.text_input("Filter this page", placeholder="title, company, skill…")
    category = c2.selectbox("Category", [""] + JOB_CATEGORIES,
                            format_func=lambda c: status_label(c) if c else "All categories")
    page = _pager("jobs_page", listing.total_pages)
    _render_listing(listing, JobQuery(page=page, category=category), "all", text)
    if listing.total:
        st.caption(f"{listing.total} jobs · page {listing.page} of {listing.total_pages}")


# ── Page: Search ─────────────────────────────────────────────────────────


def page_search() -> None:
    st.header("Search jobs")
    with st.form("search"):
        c1, c2 = st.columns(2)
        keyword = c1.text_input("Keyword")
        location = c2.text_input("Location")
        c1, c2, c3 = st.columns(3)
        category = c1.selectbox("Category", [""] + JOB_CATEGORIES, format_func=lambda c: status_label(c) or "Any")
        job_type = c2.selectbox("Job type", [""] + JOB_TYPES, format_func=lambda t: job_type_label(t) or "Any")
        experience = c3.selectbox("Experience", [""] + EXPERIENCE_LEVELS,
                                  format_func=lambda e: status_label(e) or "Any")
        c1, c2, c3 = st.columns(3)
        remote = c1.checkbox("Remote only")
        sort_by = c2.selectbox("Sort by", ["createdAt", "title"],
                               format_func=lambda s: "Date posted" if s == "createdAt" else "Title")
        sort_order = c3.selectbox("Order", ["desc", "asc"],
                                  format_func=lambda o: "Descending" if o == "desc" else "Ascending")
        submitted = st.form_submit_button("Search", type="primary")

    if submitted:
        st.session_state["search_query"] = JobQuery(
            search=keyword, location=location, category=category, job_type=job_type,
            experience_level=experience, remote=remote, sort_by=sort_by, sort_order=sort_order,
        )
    query = st.session_state.get("search_query")
    if query is None:
        st.info("Enter your search and press **Search**.")
        return

    listing = _listing("listing_search", "search_results")
    page = _pager("search_page", listing.total_pages)
    _render_listing(listing, replace(query, page=page), "search")
    if listing.total:
        st.caption(f"{listing.total} results")


# ── Page: Categories ─────────────────────────────────────────────────────


def page_categories() -> None:
    backend, _, _ = _services()
    st.header("Browse by category")
    if "category_counts" not in st.session_state:
        st.session_state["category_counts"] = category_counts(backend.jobs)
    counts: dict[str, int] = st.session_state["category_counts"]

    needle = st.text_input("Find a category").strip().lower()
    names = [c for c in JOB_CATEGORIES if needle in c or needle in status_label(c).lower()]
    if not names:
        st.info("No categories match.")
        return
    cols = st.columns(4)
    for i, name in enumerate(names):
        count = counts.get(name, 0)
        caption = f"{count:,} jobs" if count else "Explore opportunities"
        if cols[i % 4].button(f"{status_label(name)}  \n{caption}", key=f"category_{name}",
                              use_container_width=True):
            st.session_state["selected_category"] = name

    category = st.session_state.get("selected_category")
    if not category:
        return
    st.divider()
    st.subheader(status_label(category))
    listing = _listing("listing_category", "category")
    page = _pager("category_page", listing.total_pages)
    _render_listing(listing, JobQuery(page=page, category=category), "category")


# ── Page: Job details ────────────────────────────────────────────────────


def _flow(job: Job) -> ApplicationFlow:
    backend, auth, _ = _services()
    key = f"flow_{job.id}"
    flow = st.session_state.get(key)
    if flow is None or flow.state is ApplyState.CLOSED:
        flow = ApplicationFlow(job, auth, backend.guest_applications, backend.applications,
                               follow_up_seconds=SETTINGS["guest_follow_up_seconds"])
        st.session_state[key] = flow
    return flow


def _compose_buttons(flow: ApplicationFlow) -> None:
    if flow.notice:
        st.warning(flow.notice)
    cols = st.columns(4)
    for col, provider in zip(cols, Provider):
        if col.button(provider.label, key=f"compose_{provider.value}", disabled=not flow.providers_enabled,
                      use_container_width=True):
            result = flow.choose_provider(provider)
            if result.error:
                st.error(f"Could not record your application: {result.error}")
            if result.url:
                st.session_state["compose_url"] = (provider.label, result.url)
            if flow.state is ApplyState.CLOSED:
                st.rerun()
    if cols[3].button("Copy Email", key="copy_email", use_container_width=True):
        _copy(flow.copy_email_text(), "Email")
    if flow.auth.user is not None and st.button("Copy job details", key="copy_details"):
        _copy(flow.copy_details_text(), "Details")


def _apply_section(job: Job) -> None:
    flow = _flow(job)
    compose = st.session_state.pop("compose_url", None)
    if compose:
        st.success("Application recorded. Your e-mail is ready to send.")
        st.link_button(f"Open {compose[0]}", compose[1], type="primary")

    if flow.state is ApplyState.IDLE:
        if st.button("Apply now", type="primary"):
            flow.click_apply()
            st.rerun()
        return

    if flow.state is ApplyState.GUEST_FORM:
        st.subheader("Apply as a guest")
        with st.form("guest_apply"):
            c1, c2 = st.columns(2)
            first = c1.text_input("First name *")
            last = c2.text_input("Last name *")
            c1, c2 = st.columns(2)
            email = c1.text_input("Email *")
            phone = c2.text_input("Phone")
            cover = st.text_area("Cover letter (optional)")
            sent = st.form_submit_button("Submit application", type="primary")
        if sent:
            if flow.submit_guest(GuestForm(first, last, email, phone, cover)):
                st.rerun()
        if flow.error:
            st.error(flow.error)
        c1, c2 = st.columns(2)
        if c1.button("Have an account? Sign up instead"):
            flow.request_signup()
            st.switch_page(PAGES["account"])
        if c2.button("Cancel"):
            flow.close()
            st.rerun()
        return

    if flow.state is ApplyState.SUBMITTED_GUEST:
        st.success("Application submitted successfully!")
        time.sleep(flow.follow_up_seconds)
        flow.tick()
        st.rerun()

    if flow.state in (ApplyState.COMPOSE_CHOICE, ApplyState.EMAIL_CHOICE):
        if flow.state is ApplyState.EMAIL_CHOICE:
            st.info("Would you also like to e-mail the employer directly?")
        else:
            st.subheader("Send your application by e-mail")
        st.write(f"**Contact:** {job.contact or 'No contact email found'}")
        _compose_buttons(flow)
        if flow.error:
            st.error(flow.error)
        if st.button("Close"):
            flow.close()
            st.rerun()


def page_job() -> None:
    backend, _, saved = _services()
    job_id = st.query_params.get("id") or st.session_state.get("selected_job")
    if not job_id:
        st.info("Pick a job from **Jobs** or **Search** first.")
        return
    try:
        job = backend.jobs.get_job(job_id)
    except ApiError as exc:
        log.error("Loading job %s failed: %s", job_id, exc)
        st.error("Job not found" if exc.status == 404 else exc.message)
        return

    card = build_card(job, saved)
    st.header(job.title)
    st.markdown(f"**{job.company}** · {job.location or 'Anywhere'}" + (" · Remote" if job.is_remote else ""))
    c1, c2, c3 = st.columns(3)
    c1.metric("Salary", card.salary or "Not disclosed")
    c2.metric("Type", job_type_label(job.job_type) or "-")
    c3.metric("Deadline", card.deadline.text if card.deadline else "Open")
    st.caption(f"Posted {card.posted}")

    image = poster_url(job.image_url)
    if image:
        st.image(image)
        try:
            st.download_button("Download poster", fetch_poster(image, http_timeout()),
                               file_name=poster_filename(job, image))
        except requests.RequestException as exc:
            log.warning("Poster download failed for %s: %s", job.id, exc)

    if st.button("★ Saved" if card.saved else "☆ Save job"):
        result = saved.toggle_bookmark(job.id)
        if result.status is BookmarkStatus.REQUIRES_AUTH:
            st.session_state["banner"] = result.banner
        elif result.status is BookmarkStatus.FAILED:
            st.session_state["flash_error"] = f"Could not update saved jobs: {result.error}"
        st.rerun()

    st.subheader("Description")
    st.write(job.description or "-")
    for title, items in (("Requirements", job.requirements), ("Responsibilities", job.responsibilities),
                         ("Skills", job.skills), ("Benefits", job.benefits)):
        if items:
            st.subheader(title)
            st.markdown("\n".join(f"- {i}" for i in items))

    st.divider()
    _apply_section(job)


# ── Page: Saved ──────────────────────────────────────────────────────────


def page_saved() -> None:
    backend, auth, saved = _services()
    st.header("Saved jobs")
    if auth.user is None:
        st.info("Sign in to see your saved jobs.")
        return
    if not len(saved):
        st.info("You haven't saved any jobs yet.")
        return
    listing = SavedJobsListing(backend.jobs, saved)
    with st.spinner("Loading saved jobs…"):
        listing.fetch()
    if listing.error:
        st.warning(listing.error)
    text = st.text_input("Filter saved jobs")
    _render_grid(listing.cards(text), "saved")


# ── Page: Applications ───────────────────────────────────────────────────


def page_applications() -> None:
    backend, auth, _ = _services()
    st.header("My applications")
    if auth.user is None:
        st.info("Sign in to see your applications.")
        return

    tracker = MyApplications(backend.applications, auth)
    c1, c2, c3 = st.columns([2, 1, 1])
    text = c1.text_input("Search by job or company")
    status = c2.selectbox("Status", ["all"] + APPLICATION_STATUSES,
                          format_func=lambda s: "All Status" if s == "all" else status_label(s))
    sort = c3.selectbox("Sort", list(SORT_OPTIONS))
    tracker.refresh(status=status, sort=sort)
    if tracker.error:
        st.error(tracker.error)
        return

    cols = st.columns(len(tracker.stats))
    for col, (name, value) in zip(cols, tracker.stats.items()):
        col.metric(status_label(name), value)

    apps = tracker.search(text)
    if not apps:
        st.info("No applications yet.")
        return
    st.dataframe(tracker.to_frame(apps), use_container_width=True, hide_index=True)

    for app in apps:
        with st.expander(f"{app.job_title} · {app.company} · {status_label(app.status)}"):
            st.write(f"Applied {format_date(app.applied_at)} via {status_label(app.application_method)}")
            c1, c2 = st.columns(2)
            if app.status != "withdrawn" and c1.button("Withdraw", key=f"withdraw_{app.id}"):
                if tracker.withdraw(app.id):
                    st.rerun()
                st.error(tracker.error)
            if c2.button("Delete", key=f"delete_{app.id}"):
                if tracker.delete(app.id):
                    st.rerun()
                st.error(tracker.error)


# ── Page: Profile ────────────────────────────────────────────────────────


def page_profile() -> None:
    backend, auth, _ = _services()
    st.header("My profile")
    editor = ProfileEditor(backend.users, auth)
    opened = editor.open()
    if isinstance(opened, Banner):
        st.session_state["banner"] = opened
        return

    user = auth.user
    if auth.needs_profile:
        st.info("Complete your profile so employers can find you.")
    if user.resume and user.resume.get("filename"):
        st.link_button("View resume", resume_url(user.resume["filename"]))

    form = opened
    with st.form("profile"):
        c1, c2 = st.columns(2)
        form.first_name = c1.text_input("First name *", form.first_name)
        form.last_name = c2.text_input("Last name *", form.last_name)
        c1, c2 = st.columns(2)
        form.email = c1.text_input("Email *", form.email)
        form.phone = c2.text_input("Phone", form.phone)
        form.location = st.text_input("Location", form.location)
        levels = [""] + list(EXPERIENCE_OPTIONS)
        form.experience = st.selectbox(
            "Experience", levels, index=levels.index(form.experience) if form.experience in levels else 0,
            format_func=lambda e: EXPERIENCE_OPTIONS.get(e, "Select experience level"),
        )
        form.skills = st.text_input("Skills (comma separated)", form.skills)
        form.bio = st.text_area("Bio", form.bio)
        upload = st.file_uploader("Resume", type=["pdf", "doc", "docx"])
        saved = st.form_submit_button("Save profile", type="primary")

    if saved:
        files = resume_file(upload.name, upload.getvalue()) if upload else None
        try:
            editor.save(form, files)
            st.success("Profile saved.")
        except ValidationError as exc:
            for msg in exc.errors.values():
                st.error(msg)
        except ApiError:
            st.error(editor.error)


# ── Page: Account ────────────────────────────────────────────────────────


def _social_enabled() -> bool:
    return bool(SETTINGS["social_providers"])


def _account_settings(settings: AccountSettings) -> None:
    st.subheader("Preferences")
    current = settings.preferences()
    with st.form("preferences"):
        chosen = {key: st.toggle(label, current[key]) for key, label in PREFERENCES.items()}
        go = st.form_submit_button("Save preferences")
    if go:
        if settings.save_preferences(**chosen):
            st.success("Preferences saved!")
        else:
            st.error(settings.error)

    st.subheader("Delete account")
    with st.form("delete_account"):
        st.warning("This permanently deletes your account and all your data.")
        confirmation = st.text_input(f'Type "{DELETE_CONFIRMATION}" to confirm')
        go = st.form_submit_button("Delete my account")
    if go:
        try:
            if settings.delete_account(confirmation):
                if _social_enabled() and st.user.is_logged_in:
                    st.logout()
                st.rerun()
            st.error(settings.error)
        except ValidationError as exc:
            st.error(exc.errors["confirmation"])


def page_account() -> None:
    backend, auth, saved = _services()
    st.header("Account")

    if auth.user is not None:
        st.write(f"Signed in as **{auth.user.full_name or auth.user.email}** ({status_label(auth.user.role)})")
        settings = AccountSettings(backend.users, auth)
        st.caption(f"{len(saved)} saved jobs · {len(settings.applied_job_ids())} applied jobs")
        if st.button("Sign out"):
            auth.logout()
            st.session_state.pop("social_tried", None)
            if _social_enabled() and st.user.is_logged_in:
                st.logout()
            st.rerun()
        _account_settings(settings)
        return

    tab_in, tab_up, tab_reset = st.tabs(["Sign in", "Sign up", "Forgot password"])
    with tab_in:
        with st.form("signin"):
            email = st.text_input("Email")
            password = st.text_input("Password", type="password")
            go = st.form_submit_button("Sign in", type="primary")
        if go:
            try:
                auth.login(email, password)
                st.rerun()
            except ApiError as exc:
                st.error(exc.message)

    with tab_up:
        with st.form("signup"):
            c1, c2 = st.columns(2)
            form = SignupForm(
                first_name=c1.text_input("First name"),
                last_name=c2.text_input("Last name"),
                email=st.text_input("Email", key="signup_email"),
                password=st.text_input("Password", type="password", key="signup_password"),
                confirm_password=st.text_input("Confirm password", type="password"),
                accept_terms=st.checkbox("I accept the terms and conditions"),
            )
            go = st.form_submit_button("Create account", type="primary")
        if go:
            try:
                auth.signup(form)
                st.rerun()
            except ValidationError as exc:
                for msg in exc.errors.values():
                    st.error(msg)
            except ApiError as exc:
                st.error(exc.message or "Signup failed")

    with tab_reset:
        with st.form("forgot"):
            email = st.text_input("Email", key="forgot_email")
            go = st.form_submit_button("Send reset link")
        if go:
            try:
                auth.api.forgot_password(email.strip())
                st.success("If that address has an account, a reset link is on its way.")
            except ApiError as exc:
                st.error(exc.message)

        st.divider()
        with st.form("reset"):
            token = st.text_input("Reset token", st.query_params.get("token", ""))
            password = st.text_input("New password", type="password", key="reset_password")
            confirm = st.text_input("Confirm new password", type="password", key="reset_confirm")
            go = st.form_submit_button("Reset password")
        if go:
            try:
                st.success(auth.reset_password(token, password, confirm))
            except ValidationError as exc:
                for msg in exc.errors.values():
                    st.error(msg)
            except ApiError as exc:
                st.error(exc.message)

    if _social_enabled():
        st.divider()
        cols = st.columns(len(SETTINGS["social_providers"]))
        for col, provider in zip(cols, SETTINGS["social_providers"]):
            if col.button(f"Continue with {provider.title()}", key=f"social_{provider}",
                          use_container_width=True):
                st.login(provider)


# ── Page: Contact ────────────────────────────────────────────────────────


def page_contact() -> None:
    backend, _, _ = _services()
    st.header("Contact us")
    with st.form("contact"):
        c1, c2 = st.columns(2)
        form = ContactForm(
            first_name=c1.text_input("First name *"),
            last_name=c2.text_input("Last name *"),
            email=c1.text_input("Email *"),
            phone=c2.text_input("Phone"),
            subject=st.text_input("Subject *"),
            message=st.text_area("Message *"),
        )
        go = st.form_submit_button("Send message", type="primary")
    if go:
        try:
            st.success(submit_contact(backend.contact, form))
        except ValidationError as exc:
            for msg in exc.errors.values():
                st.error(msg)
        except ApiError as exc:
            st.error(exc.message)

    st.divider()
    st.subheader("Newsletter")
    with st.form("newsletter"):
        email = st.text_input("Your email")
        go = st.form_submit_button("Subscribe")
    if go:
        try:
            st.success(subscribe_newsletter(backend.newsletter, email))
        except ValidationError as exc:
            st.error(next(iter(exc.errors.values())))
        except ApiError as exc:
            st.error(exc.message)


# ── Page: Admin ──────────────────────────────────────────────────────────


def _admin_overview(dash: AdminDashboard) -> None:
    if dash.error:
        st.error(dash.error)
        if st.button("Retry"):
            dash.load()
            st.rerun()
        return
    stats = dash.statistics
    for section in ("users", "jobs", "companies", "guestApplications"):
        values = {k: v for k, v in (stats.get(section) or {}).items() if isinstance(v, (int, float))}
        if not values:
            continue
        st.markdown(f"**{status_label(section.replace('guestApplications', 'guest_applications'))}**")
        cols = st.columns(len(values))
        for col, (name, value) in zip(cols, values.items()):
            col.metric(name, value)


def _admin_users(view: UserManagement) -> None:
    c1, c2, c3 = st.columns([2, 1, 1])
    search = c1.text_input("Search users")
    role = c2.selectbox("Role", [""] + view.role_options(), format_func=lambda r: status_label(r) or "All Roles")
    status = c3.selectbox("Status", ["", "active", "inactive"], format_func=lambda s: status_label(s) or "All Status")
    page = _pager("users_page", view.total_pages)
    view.refresh(page, search, role, status)
    if view.error:
        st.error(view.error)
    st.caption(f"{view.total_users} users")
    st.dataframe(view.to_frame(), use_container_width=True, hide_index=True)

    for user in view.users:
        with st.expander(f"{user.full_name or user.email} · {status_label(user.role)}"):
            c1, c2 = st.columns(2)
            if view.can_toggle(user):
                label = "Deactivate" if user.is_active else "Activate"
                if c1.button(label, key=f"toggle_{user.id}"):
                    view.toggle_status(user)
                    st.rerun()
            if view.permissions.can_change_roles:
                options = view.role_options()
                role = c2.selectbox("Role", options, index=options.index(user.role) if user.role in options else 0,
                                    key=f"role_{user.id}", format_func=status_label)
                if role != user.role and c2.button("Apply role", key=f"apply_role_{user.id}"):
                    view.change_role(user, role)
                    st.rerun()


def _job_form(initial: JobForm, key: str) -> tuple[JobForm, dict | None] | None:
    with st.form(key):
        f = initial
        c1, c2 = st.columns(2)
        f.title = c1.text_input("Title *", f.title)
        f.company_name = c2.text_input("Company *", f.company_name)
        f.description = st.text_area("Description *", f.description)
        c1, c2, c3 = st.columns(3)
        f.location = c1.text_input("Location *", f.location)
        f.job_type = c2.selectbox("Job type", JOB_TYPES, index=JOB_TYPES.index(f.job_type)
                                  if f.job_type in JOB_TYPES else 0, format_func=job_type_label)
        f.category = c3.selectbox("Category", JOB_CATEGORIES, index=JOB_CATEGORIES.index(f.category)
                                  if f.category in JOB_CATEGORIES else 0, format_func=status_label)
        c1, c2, c3 = st.columns(3)
        f.salary_min = c1.number_input("Salary min", min_value=0.0, value=float(f.salary_min or 0)) or None
        f.salary_max = c2.number_input("Salary max", min_value=0.0, value=float(f.salary_max or 0)) or None
        f.currency = c3.text_input("Currency", f.currency)
        c1, c2, c3 = st.columns(3)
        f.is_remote = c1.checkbox("Remote", f.is_remote)
        f.featured = c2.checkbox("Featured", f.featured)
        f.urgent = c3.checkbox("Urgent", f.urgent)
        for name in ("requirements", "responsibilities", "skills", "benefits"):
            text = st.text_area(f"{name.capitalize()} (one per line)", "\n".join(getattr(f, name)))
            setattr(f, name, text.splitlines())
        deadline = st.date_input("Application deadline",
                                 value=date.fromisoformat(f.application_deadline) if f.application_deadline else None)
        f.application_deadline = deadline.isoformat() if deadline else ""
        f.link = st.text_input("Contact email", f.link)
        upload = st.file_uploader("Poster image", type=["png", "jpg", "jpeg", "gif", "webp"])
        go = st.form_submit_button("Save job", type="primary")
    if not go:
        return None
    image = job_image(upload.name, upload.getvalue(), SETTINGS["max_image_mb"]) if upload else None
    return f, image


def _admin_jobs(view: JobManagement, guests: GuestApplicationManagement) -> None:
    if not view.jobs and view.error is None:
        view.refresh()
    c1, c2, c3 = st.columns([2, 1, 1])
    search = c1.text_input("Search title or company")
    status = c2.selectbox("Status", ["all"] + JOB_STATUSES, format_func=status_label)
    category = c3.selectbox("Category", ["all"] + JOB_CATEGORIES, format_func=status_label)
    if view.error:
        st.error(view.error)

    with st.expander("Add job"):
        try:
            submitted = _job_form(JobForm(), "new_job")
            if submitted and view.save(submitted[0], image=submitted[1]):
                st.success("Job created.")
        except ValidationError as exc:
            for msg in exc.errors.values():
                st.error(msg)

    for job in view.filtered(search, status, category):
        with st.expander(f"{job.title} · {job.company} · {status_label(job.status)}"):
            c1, c2 = st.columns(2)
            new_status = c1.selectbox("Status", JOB_STATUSES, key=f"jstatus_{job.id}",
                                      index=JOB_STATUSES.index(job.status) if job.status in JOB_STATUSES else 0)
            if new_status != job.status and c1.button("Update status", key=f"jstatus_btn_{job.id}"):
                view.set_status(job.id, new_status)
                st.rerun()
            if c2.button("Delete", key=f"jdelete_{job.id}"):
                view.delete(job.id)
                st.rerun()
            if st.toggle("Guest applicants", key=f"jguests_{job.id}"):
                applicants = guests.for_job(job.id)
                if not applicants:
                    st.caption("No guest applications for this job.")
                for app in applicants:
                    st.write(f"{app.full_name} · {app.email} · {status_label(app.status)}")
            try:
                submitted = _job_form(JobForm.from_job(job), f"edit_{job.id}")
                if submitted and view.save(submitted[0], job.id, submitted[1]):
                    st.success("Job updated.")
            except ValidationError as exc:
                for msg in exc.errors.values():
                    st.error(msg)


def _admin_guests(view: GuestApplicationManagement) -> None:
    c1, c2 = st.columns([2, 1])
    search = c1.text_input("Search applicants")
    status = c2.selectbox("Status", ["all"] + ADMIN_GUEST_STATUSES, format_func=status_label, key="guest_status")
    page = _pager("guest_page", view.total_pages)
    view.refresh(page, status, search)
    if view.error:
        st.error(view.error)
    if view.stats:
        cols = st.columns(len(view.stats))
        for col, (name, value) in zip(cols, view.stats.items()):
            col.metric(name, value)
    if st.button("Export CSV"):
        try:
            path = view.export_csv(status)
            st.download_button("Download", path.read_bytes(), file_name=path.name, mime="text/csv")
        except ApiError as exc:
            st.error(exc.message)
    st.dataframe(view.to_frame(), use_container_width=True, hide_index=True)

    for app in view.applications:
        with st.expander(f"{app.full_name} · {app.job_title} · {status_label(app.status)}"):
            st.write(f"{app.email} · {app.phone or 'no phone'}")
            if app.cover_letter:
                st.text(app.cover_letter)
            new_status = st.selectbox("Status", ADMIN_GUEST_STATUSES, key=f"gstatus_{app.id}",
                                      index=ADMIN_GUEST_STATUSES.index(app.status)
                                      if app.status in ADMIN_GUEST_STATUSES else 0)
            notes = st.text_area("Notes", app.notes, key=f"gnotes_{app.id}")
            c1, c2 = st.columns(2)
            if c1.button("Save", key=f"gsave_{app.id}"):
                view.update_status(app.id, new_status, notes)
                st.rerun()
            if c2.button("Delete", key=f"gdelete_{app.id}"):
                view.delete(app.id)
                st.rerun()


def _admin_messages(dash: AdminDashboard) -> None:
    status = st.selectbox("Status", [""] + CONTACT_STATUSES, format_func=lambda s: status_label(s) or "All")
    if status != dash.contact_status:
        dash.reload_contacts(1, status)
    counts = {k: v for k, v in dash.contact_stats.items() if isinstance(v, int)}
    if counts:
        cols = st.columns(len(counts))
        for col, (name, value) in zip(cols, counts.items()):
            col.metric(status_label(name), value)
    for msg in dash.contacts:
        with st.expander(f"{msg.subject} · {msg.full_name} · {status_label(msg.status)}"):
            st.write(msg.message)
            st.caption(f"{msg.email} · {format_date(msg.created_at)}")
            if msg.reply:
                st.info(msg.reply)
            reply = st.text_area("Reply", key=f"reply_{msg.id}")
            c1, c2, c3 = st.columns(3)
            if c1.button("Send reply", key=f"send_{msg.id}"):
                try:
                    dash.reply_contact(msg.id, reply)
                    st.rerun()
                except ValidationError as exc:
                    st.error(exc.errors["reply"])
            new_status = c2.selectbox("Status", CONTACT_STATUSES, key=f"cstatus_{msg.id}",
                                      index=CONTACT_STATUSES.index(msg.status) if msg.status in CONTACT_STATUSES else 0)
            if new_status != msg.status:
                dash.set_contact_status(msg.id, new_status)
                st.rerun()
            if c3.button("Delete", key=f"cdelete_{msg.id}"):
                dash.delete_contact(msg.id)
                st.rerun()


def _admin_subscribers(dash: AdminDashboard) -> None:
    st.metric("Subscribers", dash.subscriber_total)
    for sub in dash.subscribers:
        c1, c2 = st.columns([4, 1])
        c1.write(f"{sub.email} · since {format_date(sub.subscribed_at)}")
        if c2.button("Remove", key=f"unsub_{sub.id}"):
            dash.delete_subscriber(sub.id)
            st.rerun()


def page_admin() -> None:
    backend, auth, _ = _services()
    st.header("Admin")
    if auth.user is None or not auth.user.is_admin:
        st.warning("Admin access required.")
        return

    state = st.session_state
    if "admin_dashboard" not in state:
        state["admin_dashboard"] = AdminDashboard(backend.admin, backend.newsletter, backend.contact)
        state["admin_users"] = UserManagement(backend.admin)
        state["admin_jobs"] = JobManagement(backend.jobs, backend.admin)
        state["admin_guests"] = GuestApplicationManagement(backend.admin, guests=backend.guest_applications)
        with st.spinner("Loading dashboard…"):
            state["admin_dashboard"].load()
        state["admin_users"].load_permissions()

    dash = state["admin_dashboard"]
    if st.button("Refresh"):
        dash.load()
        state["admin_jobs"].refresh()

    tabs = st.tabs(["Overview", "Users", "Jobs", "Guest applications", "Messages", "Subscribers"])
    try:
        with tabs[0]:
            _admin_overview(dash)
        with tabs[1]:
            _admin_users(state["admin_users"])
        with tabs[2]:
            _admin_jobs(state["admin_jobs"], state["admin_guests"])
        with tabs[3]:
            _admin_guests(state["admin_guests"])
        with tabs[4]:
            _admin_messages(dash)
        with tabs[5]:
            _admin_subscribers(dash)
    except PermissionDenied as exc:
        st.error(str(exc))


# ── Main ─────────────────────────────────────────────────────────────────


def _sidebar() -> None:
    _, auth, saved = _services()
    with st.sidebar:
        st.divider()
        if auth.user is None:
            st.markdown("Browsing as **guest**")
        else:
            st.markdown(f"Signed in as **{auth.user.full_name or auth.user.email}**")
            st.caption(f"{len(saved)} saved jobs")


def _wrap(page_fn):
    def run() -> None:
        _services()
        _sidebar()
        # filled after the page so banners it raises show in the same run
        banner_slot = st.container()
        error = st.session_state.pop("flash_error", None)
        if error:
            st.error(error)
        page_fn()
        with banner_slot:
            _show_banner()

    run.__name__ = page_fn.__name__
    return run


PAGES = {
    "jobs": st.Page(_wrap(page_jobs), title="Jobs", icon="💼", url_path="jobs", default=True),
    "search": st.Page(_wrap(page_search), title="Search", icon="🔍", url_path="search"),
    "categories": st.Page(_wrap(page_categories), title="Categories", icon="🗂️", url_path="categories"),
    "job": st.Page(_wrap(page_job), title="Job", icon="📄", url_path="job"),
    "saved": st.Page(_wrap(page_saved), title="Saved", icon="⭐", url_path="saved"),
    "applications": st.Page(_wrap(page_applications), title="My Applications", icon="📋",
                            url_path="applications"),
    "profile": st.Page(_wrap(page_profile), title="Profile", icon="👤", url_path="profile"),
    "account": st.Page(_wrap(page_account), title="Account", icon="🔑", url_path="account"),
    "contact": st.Page(_wrap(page_contact), title="Contact", icon="✉️", url_path="contact"),
    "admin": st.Page(_wrap(page_admin), title="Admin", icon="🛠️", url_path="admin"),
}


def _social_sign_in(auth: AuthSession) -> None:
    """Turn a finished st.login into a backend session."""
    if auth.user is not None or not _social_enabled() or not st.user.is_logged_in:
        return
    # one attempt per browser session
    if st.session_state.get("social_tried"):
        return
    st.session_state["social_tried"] = True
    identity = social_identity(st.user.to_dict())
    if identity is None:
        st.session_state["flash_error"] = "Your sign-in provider did not share an e-mail address."
        return
    try:
        auth.social_login(**identity)
    except ApiError as exc:
        log.error("Social sign-in with %s failed: %s", identity["provider"], exc)
        st.session_state["flash_error"] = exc.message


def main() -> None:
    _, auth, _ = _services()
    _social_sign_in(auth)
    visible = [p for k, p in PAGES.items() if k != "admin" or (auth.user is not None and auth.user.is_admin)]
    st.navigation(visible).run()


if __name__ == "__main__":
    main()
