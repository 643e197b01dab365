"""
Site Pages — Server-rendered HTML for the public site and admin shell.

Every page is wrapped by `render_page`, which injects the theme colours
from the document, the header, navigation, news ticker and footer. All
document text is escaped before it reaches the markup.
"""

from __future__ import annotations

import html
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from ..content.defaults import CLASS_LIST, SECTION_LIST
from ..editing.records import COLLECTIONS
from ..models.document import Faculty, SchoolDocument
from . import views


def e(value: Any) -> str:
    """Escape text or attribute values; None becomes an empty string."""
    return html.escape("" if value is None else str(value), quote=True)


def _paragraphs(text: str) -> str:
    return f'<p class="prose">{e(text)}</p>' if text else ""


def _pdf_link(url: Optional[str], label: str = "View PDF Document") -> str:
    if not url:
        return ""
    return f"""
        <div class="attachments">
            <h3>Attachments / PDFs</h3>
            <a class="button danger" href="{e(url)}" target="_blank" rel="noopener noreferrer">{e(label)}</a>
        </div>"""


def _empty(message: str) -> str:
    return f'<div class="empty">{e(message)}</div>'


def _cards(items: Iterable[str], empty_message: str) -> str:
    items = list(items)
    if not items:
        return _empty(empty_message)
    return f'<div class="grid">{"".join(items)}</div>'


def _person_card(person: Faculty) -> str:
    image = person.image or "https://via.placeholder.com/200"
    return f"""
        <div class="card person">
            <img src="{e(image)}" alt="{e(person.name)}">
            <h4>{e(person.name)}</h4>
            <p class="muted">{e(person.designation)}</p>
        </div>"""


# ── Layout ───────────────────────────────────────────────────────


def _nav(active_path: str, is_admin: bool) -> str:
    links = []
    for path, label in views.NAV_ROUTES:
        if path == "/login" and is_admin:
            continue
        css = "active" if path == active_path else ""
        links.append(f'<a class="{css}" href="{path}">{e(label)}</a>')
    return "\n".join(links)


def _ticker(document: SchoolDocument) -> str:
    ticker = document.ticker_config
    notices = "".join(
        f'<a href="/corner">{e(n.title)}</a>' for n in document.notices
    )
    return f"""
        <div class="ticker" style="background:{e(ticker.background_color)};color:{e(ticker.text_color)};font-size:{e(ticker.font_size)};font-weight:{e(ticker.font_weight)}">
            <span class="ticker-label">Latest News</span>
            <div class="ticker-track" style="animation-duration:{int(ticker.speed or 25)}s">
                <span>{e(document.marquee_text)}</span>
                {notices}
            </div>
        </div>"""


def render_page(
    document: SchoolDocument,
    title: str,
    content: str,
    active_path: str = "/",
    is_admin: bool = False,
) -> str:
    """Render a complete HTML page with theme styles."""
    theme = document.theme_config
    dark_class = "dark" if theme.is_dark_mode else ""
    logo_fit = "cover" if document.logo_fit == "cover" else "contain"
    admin_links = (
        '<a class="button" href="/admin">Dashboard</a>'
        '<form method="post" action="/logout"><button class="button danger">Logout</button></form>'
        if is_admin
        else ""
    )
    login_link = "" if is_admin else '<a class="button subtle" href="/login">Authorized Login Only</a>'
    year = datetime.now().year
    return f"""<!DOCTYPE html>
<html lang="en" class="{dark_class}">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{e(title)} — {e(document.school_name)}</title>
    <style>
        :root {{
            --primary-text: {e(theme.primary_text_color)};
            --secondary-text: {e(theme.secondary_text_color)};
            --heading: {e(theme.heading_color)};
            --nav-text: {e(theme.nav_text_color)};
            --footer-text: {e(theme.footer_text_color)};
            --accent: {e(theme.accent_color)};
            --surface: #ffffff;
            --bg: #f8fafc;
            --border: #e2e8f0;
        }}
        .dark {{
            --primary-text: #f1f5f9;
            --secondary-text: #94a3b8;
            --heading: #38bdf8;
            --surface: #0f172a;
            --bg: #020617;
            --border: #1e293b;
        }}

        * {{ box-sizing: border-box; margin: 0; padding: 0; }}

        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Helvetica, Arial, sans-serif;
            background: var(--bg);
            color: var(--primary-text);
            line-height: 1.6;
        }}

        header.site {{
            background: var(--heading);
            color: #fff;
            padding: 2rem 1rem;
            display: flex;
            gap: 2rem;
            align-items: center;
            flex-wrap: wrap;
        }}
        header.site img.logo {{
            width: 8rem; height: 8rem; border-radius: 50%;
            object-fit: {logo_fit};
            border: 4px solid rgba(255,255,255,0.5);
        }}
        header.site h1 {{ font-size: 2.2rem; text-transform: uppercase; }}
        header.site .actions {{ margin-left: auto; display: flex; gap: 0.5rem; }}

        nav.site {{
            background: #0f172a;
            display: flex;
            flex-wrap: wrap;
            position: sticky;
            top: 0;
        }}
        nav.site a {{ color: var(--nav-text); padding: 0.6rem 0.9rem; font-weight: 700; font-size: 0.85rem; }}
        nav.site a.active {{ color: var(--accent); background: rgba(255,255,255,0.1); }}

        .ticker {{ display: flex; overflow: hidden; white-space: nowrap; border-bottom: 1px solid var(--border); }}
        .ticker-label {{ background: var(--heading); color: #dc2626; padding: 0.6rem 1rem; text-transform: uppercase; }}
        .ticker-track {{ display: flex; gap: 2.5rem; padding: 0.6rem 1rem; animation: marquee linear infinite; }}
        .ticker-track a {{ color: inherit; }}
        @keyframes marquee {{ from {{ transform: translateX(100%); }} to {{ transform: translateX(-100%); }} }}

        main {{ max-width: 1100px; margin: 0 auto; padding: 3rem 1rem; }}
        main h1 {{ color: var(--heading); font-size: 2.4rem; text-transform: uppercase; margin-bottom: 1.5rem; }}
        main h2 {{ color: var(--heading); font-size: 1.6rem; margin: 2rem 0 1rem; text-transform: uppercase; }}
        main h3 {{ font-size: 1.1rem; margin: 1rem 0 0.5rem; }}

        .prose {{ white-space: pre-wrap; font-size: 1.1rem; }}
        .panel, .card {{
            background: var(--surface);
            border: 1px solid var(--border);
            border-radius: 1.5rem;
            padding: 1.5rem;
        }}
        .grid {{ display: grid; grid-template-columns: repeat(auto-fill, minmax(240px, 1fr)); gap: 1.5rem; }}
        .card.person {{ text-align: center; }}
        .card.person img {{ width: 8rem; height: 8rem; border-radius: 50%; object-fit: cover; margin-bottom: 1rem; }}
        .card .badge {{ font-size: 0.7rem; font-weight: 900; text-transform: uppercase; letter-spacing: 0.2em; }}
        .gallery img, .gallery video {{ width: 100%; aspect-ratio: 1; object-fit: cover; border-radius: 1.5rem; }}
        .stats {{ display: grid; grid-template-columns: repeat(4, 1fr); gap: 1rem; }}
        .stats .card strong {{ display: block; font-size: 2rem; color: var(--heading); }}
        .muted {{ color: var(--secondary-text); font-size: 0.8rem; text-transform: uppercase; }}
        .empty {{ padding: 3rem; border: 2px dashed var(--border); border-radius: 2rem; text-align: center; opacity: 0.6; }}
        .error {{ color: #ef4444; font-weight: 900; }}
        .notice.important {{ border-left: 4px solid #ef4444; }}

        .button {{
            display: inline-block;
            background: var(--accent);
            color: #fff;
            border: none;
            padding: 0.6rem 1.2rem;
            border-radius: 0.8rem;
            font-weight: 900;
            cursor: pointer;
        }}
        .button.danger {{ background: #dc2626; }}
        .button.subtle {{ background: rgba(255,255,255,0.1); }}

        form.stack {{ display: grid; gap: 0.8rem; max-width: 420px; }}
        form.stack input, form.filters select, form.filters input {{
            padding: 0.7rem; border-radius: 0.8rem; border: 1px solid var(--border);
        }}
        form.filters {{ display: flex; gap: 1rem; flex-wrap: wrap; margin-bottom: 2rem; }}

        footer.site {{
            background: #0f172a;
            color: var(--footer-text);
            padding: 3rem 1rem;
            margin-top: 4rem;
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(240px, 1fr));
            gap: 2rem;
        }}
        footer.site a {{ color: inherit; }}

        a {{ color: var(--heading); text-decoration: none; }}
        a:hover {{ text-decoration: underline; }}
    </style>
</head>
<body>
    <header class="site">
        <img class="logo" src="{e(document.logo_url)}" alt="Logo">
        <div>
            <h1>{e(document.school_name)}</h1>
            <p>{e(document.motto)}</p>
            <p>{e(views.identity_line(document))}</p>
        </div>
        <div class="actions">
            <button class="button subtle" id="theme-toggle" title="Toggle Day/Night Mode">{'☀️' if theme.is_dark_mode else '🌙'}</button>
            {admin_links}
        </div>
    </header>

    <nav class="site">
        {_nav(active_path, is_admin)}
    </nav>
    {_ticker(document)}

    <main>
        {content}
    </main>

    <footer class="site">
        <div>
            <h4>{e(document.school_name)}</h4>
            <p>{e(document.address)}</p>
            <p>Office Contact: {e(document.phone)} · {e(document.email)}</p>
        </div>
        <div>
            <h4>Quick Navigation</h4>
            <p><a href="/">Home Landing</a></p>
            <p><a href="/corner">Official Notice Board</a></p>
            <p><a href="/admission">Admission Portal</a></p>
            <p><a href="/teachers">Faculty Directory</a></p>
        </div>
        <div>
            <h4>Institutional Copyright</h4>
            <p>{e(document.school_name)}<br>All Rights Reserved &copy; {year}</p>
            {login_link}
        </div>
    </footer>

    <script>
        document.getElementById("theme-toggle").addEventListener("click", function () {{
            fetch("/api/theme/toggle", {{ method: "POST" }}).then(function () {{ location.reload(); }});
        }});
    </script>
</body>
</html>"""


# ── Public pages ─────────────────────────────────────────────────


def home_content(document: SchoolDocument) -> str:
    banner = document.banners[0] if document.banners else None
    banner_html = (
        f"""
        <section class="panel banner" style="background-image:url('{e(banner.image_url)}')">
            <h1>{e(banner.title)}</h1>
            <p>{e(banner.subtitle)}</p>
        </section>"""
        if banner
        else ""
    )
    stats = "".join(
        f'<div class="card"><strong>{e(count)}</strong><span class="muted">{e(label)}</span></div>'
        for label, count in views.home_stats(document)
    )
    messages = "".join(
        f"""
        <div class="card">
            <h3>{e(label)}</h3>
            {f'<p class="muted">{e(person.name)}</p>' if person else ''}
            <p>{e(msg or '')}</p>
        </div>"""
        for label, person, msg in views.home_messages(document)
    )
    news = _cards(
        (
            f"""
            <div class="card">
                <span class="badge">{e(n.date)}</span>
                <h3>{e(n.title)}</h3>
                <p>{e(n.content)}</p>
            </div>"""
            for n in document.news_events[:3]
        ),
        "No news yet",
    )
    notices = _cards(
        (
            f"""
            <div class="card notice{' important' if n.important else ''}">
                <span class="badge">{e(n.date)}</span>
                <h3><a href="/corner">{e(n.title)}</a></h3>
            </div>"""
            for n in document.notices[:4]
        ),
        "No notices",
    )
    return f"""
        {banner_html}
        <section class="stats">{stats}</section>
        <h2>Messages</h2>
        <div class="grid">{messages}</div>
        <h2>News &amp; Events</h2>
        {news}
        <h2>Notice Board</h2>
        {notices}
    """


def generic_content(title: str, body: str, pdf_url: Optional[str]) -> str:
    return f"""
        <h1>{e(title)}</h1>
        <div class="panel">
            {_paragraphs(body)}
            {_pdf_link(pdf_url)}
        </div>
    """


def administration_content(document: SchoolDocument) -> str:
    head = ""
    if document.head_teacher:
        head = f"""
        <h2>Head Teacher</h2>
        <div class="grid">{_person_card(document.head_teacher)}</div>"""
    sections = "".join(
        f"<h2>{e(title)}</h2><div class=\"grid\">{''.join(_person_card(m) for m in members)}</div>"
        for title, members in views.personnel_sections(document)
    )
    directory = ""
    if document.administration_pdf_url:
        directory = f"""
        <div class="panel">
            <h3>Full Administration Directory</h3>
            <a class="button" href="{e(document.administration_pdf_url)}" target="_blank" rel="noreferrer">Download Official PDF</a>
        </div>"""
    return f"""
        <h1>Administration</h1>
        <div class="panel">{_paragraphs(document.administration_content)}</div>
        {head}
        {sections}
        {directory}
    """


def academics_content(document: SchoolDocument) -> str:
    def file_card(item, action: str) -> str:
        return f"""
            <div class="card">
                <span class="badge">{e(item.target_class)}</span>
                <h3>{e(item.title)}</h3>
                <a class="button" href="{e(item.url)}" target="_blank" rel="noreferrer">{action}</a>
            </div>"""

    syllabuses = _cards(
        (file_card(s, "Download Syllabus") for s in document.syllabuses),
        "No syllabuses currently available",
    )
    routines = _cards(
        (file_card(r, "View Routine") for r in document.class_routines),
        "No schedules uploaded yet",
    )
    teachers = _cards(
        (
            f"""
            <div class="card">
                <span class="badge">{e(t.target_class)} • {e(t.section)}</span>
                <h3>{e(t.teacher_name)}</h3>
                <p class="muted">Assigned Faculty</p>
            </div>"""
            for t in document.class_teachers
        ),
        "No assignments configured",
    )
    return f"""
        <h1>Academic Center</h1>
        <div class="panel">{_paragraphs(document.academics_content)}</div>
        <h2>Course Syllabus</h2>
        {syllabuses}
        <h2>Academic Schedules</h2>
        {routines}
        <h2>Class Leadership</h2>
        {teachers}
    """


def admission_content(document: SchoolDocument) -> str:
    if document.is_admission_open:
        registration = f"""
            <p>New academic session registration is officially open.</p>
            <a class="button" href="{e(document.admission_form_url or '#')}" target="_blank" rel="noopener noreferrer">{e(document.admission_button_text or 'Apply Online Now')}</a>"""
    else:
        registration = """
            <p class="error">Registrations are currently closed.</p>
            <p class="muted">Please check back later or contact the office for more information.</p>"""
    return f"""
        {generic_content('Admission', document.admission_info, document.admission_pdf_url)}
        <div class="panel">
            <h2>Registration for Admission</h2>
            {registration}
        </div>
    """


def gallery_content(document: SchoolDocument) -> str:
    def tile(item) -> str:
        if item.type == "video":
            media = f'<video src="{e(item.url)}" controls></video>'
        else:
            media = f'<img src="{e(item.url)}" alt="{e(item.caption)}">'
        return f"""
            <figure class="gallery">
                {media}
                <figcaption>{e(item.caption)}</figcaption>
                <a href="{e(item.url)}" target="_blank" rel="noreferrer">View Full</a>
                <a href="{e(item.url)}" download="gallery-{e(item.id)}">Download</a>
            </figure>"""

    return f"""
        <h1>Institutional Gallery</h1>
        {_cards((tile(g) for g in document.gallery), 'No photos yet')}
    """


def teachers_content(document: SchoolDocument) -> str:
    return f"""
        <h1>Our Faculty</h1>
        {_cards((_person_card(f) for f in document.faculty), 'No teachers listed')}
    """


def _attachment(url: Optional[str], file_name: Optional[str]) -> str:
    if not url:
        return ""
    return f'<a class="button" href="{e(url)}" download="{e(file_name or "school-resource")}">Download</a>'


def corner_content(document: SchoolDocument, flt: views.StudentFilter) -> str:
    """Notice board with class/section/roll filters."""

    def options(values: List[str], selected: str) -> str:
        return "".join(
            f'<option value="{e(v)}"{" selected" if v == selected else ""}>{e(v)}</option>'
            for v in values
        )

    notices = _cards(
        (
            f"""
            <div class="card notice{' important' if n.important else ''}">
                <span class="badge">{e(n.date)}</span>
                <h3>{e(n.title)}</h3>
                <p>{e(n.content)}</p>
                {_attachment(n.attachment_url, n.file_name)}
            </div>"""
            for n in views.filter_notices(document, flt)
        ),
        "No notices for this selection",
    )
    exams = _cards(
        (
            f"""
            <div class="card">
                <span class="badge">{e(x.target_class)} • {e(x.target_section)}</span>
                <h3>{e(x.title)}</h3>
                <p>{e(x.subject)} · {e(x.date)}</p>
                {_attachment(x.attachment_url, x.file_name)}
            </div>"""
            for x in views.filter_exams(document, flt)
        ),
        "No exams scheduled",
    )
    results = _cards(
        (
            f"""
            <div class="card">
                <span class="badge">Roll {e(r.student_roll)}</span>
                <h3>{e(r.student_name)}</h3>
                <p>GPA {e(r.gpa)} · {e(r.target_class)} {e(r.target_section)}</p>
                {_attachment(r.attachment_url, r.file_name)}
            </div>"""
            for r in views.filter_results(document, flt)
        ),
        "No results found",
    )
    news = _cards(
        (
            f"""
            <div class="card">
                <span class="badge">{e(n.date)}</span>
                <h3>{e(n.title)}</h3>
                <p>{e(n.content)}</p>
            </div>"""
            for n in document.news_events
        ),
        "No events yet",
    )
    return f"""
        <h1>Digital Hub</h1>
        <form class="filters" method="get" action="/corner">
            <select name="class">{options(CLASS_LIST, flt.target_class)}</select>
            <select name="section">{options(SECTION_LIST, flt.section)}</select>
            <input type="text" name="roll" placeholder="Student Roll/ID..." value="{e(flt.roll)}">
            <button class="button" type="submit">Filter</button>
        </form>
        <h2>Events &amp; Highlights</h2>
        {news}
        <h2>Notices</h2>
        {notices}
        <h2>Exams</h2>
        {exams}
        <h2>Results</h2>
        {results}
    """


def office_login_content(error: Optional[str] = None) -> str:
    error_html = f'<p class="error">{e(error)}</p>' if error else ""
    return f"""
        <div class="panel">
            <h1>Protected Area</h1>
            <p class="muted">Enter Office Credentials to View Profiles</p>
            <form class="stack" method="post" action="/office-profiles">
                <input type="text" name="username" placeholder="Office User" required>
                <input type="password" name="password" placeholder="••••••••" required>
                {error_html}
                <button class="button" type="submit">Verify Identity</button>
            </form>
            <p class="muted">Access is limited to authorized school personnel only.</p>
        </div>
    """


def office_profiles_content(document: SchoolDocument) -> str:
    cards = _cards(
        (
            f"""
            <div class="card profile" data-type="{e(card.item.type)}">
                <span class="icon" style="background:{e(card.category.color)}">{card.category.icon}</span>
                <h3>{e(card.item.title)}</h3>
                <span class="badge">{e(card.label)}</span>
                <p>{e(card.item.description)}</p>
                <a class="button" href="{e(card.item.url)}" target="_blank" rel="noreferrer">Open</a>
            </div>"""
            for card in views.office_profile_cards(document)
        ),
        "No profiles currently listed",
    )
    return f"""
        <h1>Office Profiles</h1>
        <p class="muted">Governance &amp; Digital Portals</p>
        {cards}
        <form method="post" action="/office-profiles/logout"><button class="button subtle">Lock</button></form>
    """


# ── Login and admin shell ────────────────────────────────────────


def login_content(
    error: Optional[str] = None,
    reset_error: Optional[str] = None,
    reset_message: Optional[str] = None,
) -> str:
    error_html = f'<p class="error">{e(error)}</p>' if error else ""
    reset_html = f'<p class="error">{e(reset_error)}</p>' if reset_error else ""
    message_html = f"<p>{e(reset_message)}</p>" if reset_message else ""
    return f"""
        <div class="panel">
            <h1>Admin Login</h1>
            <form class="stack" method="post" action="/login">
                <input type="text" name="username" placeholder="Admin ID" required>
                <input type="password" name="password" placeholder="Password" required>
                {error_html}
                <button class="button" type="submit">Login</button>
            </form>
        </div>
        <div class="panel">
            <h2>Forgot Password?</h2>
            <form class="stack" method="post" action="/login/reset">
                <input type="text" name="reset_code" placeholder="Security Reset Code" required>
                <input type="password" name="new_password" placeholder="New Password" required>
                <input type="password" name="confirm_password" placeholder="Confirm Password" required>
                {reset_html}
                {message_html}
                <button class="button" type="submit">Reset Password</button>
            </form>
        </div>
    """


def admin_content(document: SchoolDocument, draft: Dict[str, Any], sync: Dict[str, Any]) -> str:
    """Dashboard shell: draft state, sync state and collection counts."""
    rows = "".join(
        f"<tr><td>{e(coll.label)}</td><td><code>{e(coll.key)}</code></td><td>{len(coll.items(document))}</td></tr>"
        for coll in COLLECTIONS.values()
    )
    last = sync.get("last_save") or {}
    return f"""
        <h1>Admin Dashboard</h1>
        <div class="panel">
            <p>Edit mode: <strong>{'on' if draft.get('edit_mode') else 'off'}</strong>
               · Unsaved changes: <strong>{'yes' if draft.get('dirty') else 'no'}</strong>
               · Revision: <strong>{document.revision}</strong></p>
            <p>Cloud: <strong>{'online' if sync.get('online') else 'offline'}</strong>
               · Last save: <strong>{e(last.get('status', 'none'))}</strong></p>
        </div>
        <h2>Collections</h2>
        <table class="panel">
            <tr><th>Section</th><th>API field</th><th>Items</th></tr>
            {rows}
        </table>
        <p class="muted">Edits are staged through <code>/api/admin/draft</code> and published with <code>/api/admin/commit</code>.</p>
    """
