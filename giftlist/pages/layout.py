"""
Shared HTML layout for the backoffice and the public gift list.
"""
from html import escape

from fastapi.responses import HTMLResponse


def format_price(price: float) -> str:
    return f"{price:.2f} €".replace(".", ",")


def render_page(title: str, body: str, backoffice: bool = False, status_code: int = 200) -> HTMLResponse:
    nav = ""
    if backoffice:
        nav = """
            <nav>
              <a href="/backoffice">🏠 Tableau de bord</a>
              <a href="/backoffice/gifts">🎁 Cadeaux</a>
              <a href="/backoffice/users">👥 Utilisateurs</a>
              <a href="/backoffice/persons">💰 Personnes</a>
              <form method="post" action="/backoffice/logout" style="display:inline;">
                <button type="submit" class="link">Déconnexion</button>
              </form>
            </nav>
        """

    html = f"""
    <!DOCTYPE html>
    <html lang="fr">
      <head>
        <meta charset="utf-8" />
        <meta name="viewport" content="width=device-width, initial-scale=1" />
        <title>{escape(title)}</title>
        <style>
          * {{ box-sizing: border-box; }}
          body {{
            font-family: system-ui, -apple-system, BlinkMacSystemFont, "Segoe UI", sans-serif;
            margin: 0;
            background: #f3f4f6;
            color: #111827;
          }}
          .page {{ max-width: 1100px; margin: 0 auto; padding: 1.5rem 1rem 3rem; }}
          header {{
            display: flex;
            justify-content: space-between;
            align-items: center;
            margin-bottom: 1.5rem;
          }}
          header h1 {{ font-size: 1.5rem; margin: 0; }}
          nav {{ display: flex; gap: 0.6rem; align-items: center; }}
          nav a {{ text-decoration: none; color: #1d4ed8; }}
          .grid {{ display: grid; grid-template-columns: repeat(auto-fill, minmax(280px, 1fr)); gap: 1rem; }}
          .card {{
            background: #fff;
            border-radius: 0.75rem;
            border: 2px solid #e5e7eb;
            padding: 1rem;
          }}
          .card.mine {{ border-color: #22c55e; }}
          .card.others {{ border-color: #f97316; }}
          .badge {{ font-weight: 700; font-size: 0.8rem; padding: 0.3rem 0.5rem; border-radius: 0.4rem; }}
          .badge.mine {{ background: #22c55e; color: #fff; }}
          .badge.others {{ background: #f97316; color: #fff; }}
          .chips a {{
            display: inline-block;
            margin: 0 0.3rem 0.3rem 0;
            padding: 0.3rem 0.7rem;
            border-radius: 999px;
            background: #e5e7eb;
            color: #374151;
            text-decoration: none;
            font-size: 0.85rem;
          }}
          .chips a.active {{ background: #2563eb; color: #fff; }}
          .card img {{ width: 100%; height: 180px; object-fit: contain; }}
          .price {{ font-size: 1.2rem; font-weight: 700; color: #2563eb; }}
          .muted {{ color: #6b7280; font-size: 0.85rem; }}
          button {{
            padding: 0.5rem 1rem;
            border-radius: 0.5rem;
            border: none;
            background: #16a34a;
            color: #fff;
            font-weight: 600;
            cursor: pointer;
          }}
          button.cancel {{ background: #dc2626; }}
          button.link {{ background: none; color: #1d4ed8; padding: 0; font-weight: 400; }}
          input, textarea, select {{ padding: 0.5rem; border-radius: 0.375rem; border: 1px solid #d1d5db; width: 100%; }}
          input[type="checkbox"] {{ width: auto; }}
          label {{ display: block; margin: 0.6rem 0 0.2rem; font-size: 0.9rem; font-weight: 600; }}
          form.inline {{ display: inline; }}
          .actions {{ display: flex; gap: 0.75rem; align-items: center; margin-top: 1rem; }}
          .notice {{ color: #16a34a; }}
          .warn {{ color: #ea580c; }}
          table {{ width: 100%; border-collapse: collapse; background: #fff; }}
          th, td {{ border: 1px solid #e5e7eb; padding: 0.4rem 0.6rem; text-align: left; }}
          .stats {{ display: flex; gap: 0.75rem; flex-wrap: wrap; }}
          .stat {{ flex: 0 0 180px; }}
          .stat .value {{ font-size: 1.6rem; font-weight: 700; }}
          .error {{ color: #dc2626; }}
          code {{ background: #f3f4f6; padding: 0.1rem 0.3rem; border-radius: 0.25rem; }}
        </style>
      </head>
      <body>
        <div class="page">
          <header>
            <h1>{escape(title)}</h1>
            {nav}
          </header>
          <main>
            {body}
          </main>
        </div>
      </body>
    </html>
    """
    return HTMLResponse(content=html, status_code=status_code)
