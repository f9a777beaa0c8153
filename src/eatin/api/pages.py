"""Server-rendered HTML for the diary pages."""

from datetime import date
from html import escape

from eatin.domain.identity import Identity
from eatin.domain.models import Notice
from eatin.domain.visits import Visit
from eatin.services.auth_form import AuthFormController, AuthMode
from eatin.services.dashboard import DashboardController
from eatin.services.visits import MAX_RESTAURANT_NAME_LENGTH

_STYLE = """
      body { font-family: ui-sans-serif, system-ui, sans-serif; margin: 0;
             background: #f9fafb; color: #111827; }
      header { background: #fff; box-shadow: 0 1px 2px rgba(0,0,0,0.1);
               padding: 1.5rem 2rem; display: flex;
               justify-content: space-between; align-items: center; }
      main { max-width: 72rem; margin: 0 auto; padding: 2rem; }
      .grid { display: grid; grid-template-columns: 1fr 2fr; gap: 2rem; }
      .card { background: #fff; border: 1px solid #e5e7eb; border-radius: 0.5rem;
              padding: 1.5rem; margin-bottom: 1rem; }
      .center { min-height: 100vh; display: flex; align-items: center;
                justify-content: center; }
      label { display: block; font-weight: 600; margin: 0.75rem 0 0.25rem; }
      input, textarea { width: 100%; padding: 0.4rem 0.6rem; box-sizing: border-box; }
      button { padding: 0.4rem 0.8rem; margin-top: 0.75rem; }
      form.inline { display: inline; }
      .visit { border: 1px solid #e5e7eb; border-radius: 0.5rem; padding: 1rem;
               margin-bottom: 1rem; }
      .muted { color: #6b7280; }
      .error { color: #dc2626; }
      .success { color: #16a34a; }
"""


def _layout(title: str, body: str, head: str = "") -> str:
    return (
        "<!doctype html>\n"
        '<html lang="en">\n'
        "  <head>\n"
        '    <meta charset="utf-8" />\n'
        '    <meta name="viewport" content="width=device-width, initial-scale=1" />\n'
        f"    {head}\n"
        f"    <title>{escape(title)}</title>\n"
        f"    <style>{_STYLE}</style>\n"
        "  </head>\n"
        f"  <body>\n{body}\n  </body>\n"
        "</html>\n"
    )


def _notice(notice: Notice | None) -> str:
    if notice is None:
        return ""
    css = "error" if notice.is_error else "success"
    return f'<p class="{css}" role="status">{escape(notice.text)}</p>'


def format_visit_date(value: date) -> str:
    """Format a visit date like 'Monday, January 15, 2024'."""
    return f"{value:%A, %B} {value.day}, {value.year}"


def render_loading() -> str:
    """Placeholder shown while the session is still being resolved."""
    return _layout(
        "eatin",
        '<div class="center"><div>Loading...</div></div>',
        head='<meta http-equiv="refresh" content="1" />',
    )


def render_auth(form: AuthFormController) -> str:
    """Sign-in / sign-up page."""
    signing_in = form.mode is AuthMode.SIGN_IN
    title = "Sign in to your account" if signing_in else "Create your account"
    description = (
        "Welcome back! Please sign in to continue."
        if signing_in
        else "Join eatin to start tracking your dining experiences."
    )
    submit_label = "Sign in" if signing_in else "Sign up"
    switch_prompt = (
        "Don't have an account?" if signing_in else "Already have an account?"
    )
    switch_label = "Create an account" if signing_in else "Sign in instead"
    autocomplete = "current-password" if signing_in else "new-password"
    body = f"""
    <div class="center">
      <div style="max-width: 28rem; width: 100%;">
        <h1>eatin</h1>
        <p class="muted">your restaurant diary</p>
        <div class="card">
          <h2>{title}</h2>
          <p class="muted">{description}</p>
          <form method="post" action="/auth">
            <label for="email">Email address</label>
            <input id="email" name="email" type="email" autocomplete="email"
                   required value="{escape(form.email)}"
                   placeholder="Enter your email" />
            <label for="password">Password</label>
            <input id="password" name="password" type="password"
                   autocomplete="{autocomplete}" required
                   placeholder="Enter your password" />
            {_notice(form.notice)}
            <button type="submit">{submit_label}</button>
          </form>
          <p class="muted">{switch_prompt}</p>
          <form method="post" action="/auth/mode">
            <button type="submit">{switch_label}</button>
          </form>
        </div>
      </div>
    </div>"""
    return _layout("eatin - sign in", body)


def _visit_form(dashboard: DashboardController, today: date) -> str:
    form = dashboard.form
    editing = dashboard.editing_id is not None
    cancel = (
        '<form class="inline" method="post" action="/dashboard/edit/cancel">'
        '<button type="submit">Cancel</button></form>'
        if editing
        else ""
    )
    return f"""
          <div class="card">
            <h2>{"Edit Visit" if editing else "Add Restaurant Visit"}</h2>
            <p class="muted">Log where you ate and when</p>
            <form method="post" action="/dashboard/visits">
              <label for="restaurant">Restaurant Name</label>
              <input id="restaurant" name="restaurant_name" required
                     maxlength="{MAX_RESTAURANT_NAME_LENGTH}"
                     value="{escape(form.restaurant_name)}"
                     placeholder="e.g., Joe's Pizza" />
              <label for="date">Visit Date</label>
              <input id="date" name="visited_on" type="date" required
                     max="{today.isoformat()}" value="{escape(form.visited_on)}" />
              <label for="notes">Notes (optional)</label>
              <textarea id="notes" name="notes" rows="3"
                        placeholder="What did you eat? How was it?">{escape(form.notes)}</textarea>
              {_notice(dashboard.notice)}
              <button type="submit">{"Update" if editing else "Add Visit"}</button>
            </form>
            {cancel}
          </div>"""


def _stats(dashboard: DashboardController) -> str:
    stats = dashboard.stats
    return f"""
          <div class="card">
            <h2>Your Stats</h2>
            <div><strong>{stats.total_visits}</strong> restaurants visited</div>
            <div class="muted">{stats.distinct_restaurants} different places</div>
          </div>"""


def _delete_confirmation(visit: Visit) -> str:
    return f"""
            <div class="card" role="alertdialog">
              <p>Are you sure you want to delete this visit to
                 <strong>{escape(visit.restaurant_name)}</strong>?</p>
              <form class="inline" method="post" action="/dashboard/delete/confirm">
                <button type="submit">Delete</button>
              </form>
              <form class="inline" method="post" action="/dashboard/delete/cancel">
                <button type="submit">Keep it</button>
              </form>
            </div>"""


def _visit_item(visit: Visit) -> str:
    notes = f"<p>{escape(visit.notes)}</p>" if visit.notes else ""
    return f"""
            <div class="visit">
              <h3>{escape(visit.restaurant_name)}</h3>
              <p class="muted">{format_visit_date(visit.visited_on)}</p>
              {notes}
              <form class="inline" method="post"
                    action="/dashboard/visits/{visit.id}/edit">
                <button type="submit">Edit</button>
              </form>
              <form class="inline" method="post"
                    action="/dashboard/visits/{visit.id}/delete">
                <button type="submit" class="error">Delete</button>
              </form>
            </div>"""


def _visit_list(dashboard: DashboardController) -> str:
    visits = dashboard.visits
    pending = dashboard.pending_delete
    if visits:
        summary = f"{len(visits)} restaurants and counting"
        items = "".join(_visit_item(visit) for visit in visits)
    else:
        summary = "No visits yet. Add your first restaurant!"
        items = (
            '<div class="muted"><p>No restaurant visits yet.</p>'
            "<p>Add your first visit to get started!</p></div>"
        )
    confirmation = _delete_confirmation(pending) if pending else ""
    return f"""
          <div class="card">
            <h2>Your Restaurant Visits</h2>
            <p class="muted">{summary}</p>
            {confirmation}
            {items}
          </div>"""


def render_dashboard(
    identity: Identity, dashboard: DashboardController, today: date
) -> str:
    """Visit form, stats, and the visit list."""
    body = f"""
    <header>
      <h1>eatin</h1>
      <div>
        <span class="muted">{escape(identity.email or "")}</span>
        <form class="inline" method="post" action="/signout">
          <button type="submit">Sign out</button>
        </form>
      </div>
    </header>
    <main>
      <div class="grid">
        <div>{_visit_form(dashboard, today)}{_stats(dashboard)}
        </div>
        <div>{_visit_list(dashboard)}
        </div>
      </div>
    </main>"""
    return _layout("eatin - dashboard", body)
