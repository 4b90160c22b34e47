"""Server-rendered pages: the backoffice screens and the invitee gift list."""
from __future__ import annotations

import html
import logging
import uuid
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from giftlist.auth.deps import get_gate_config
from giftlist.auth.gate import GateConfig, clear_session_cookie, set_session_cookie, verify_password
from giftlist.auth.sessions import SessionStore
from giftlist.db import get_db
from giftlist.pages.layout import format_price, render_page
from giftlist.redis_client import get_redis
from giftlist.repositories import GiftRepository, UserRepository
from giftlist.routes.backoffice import public_link
from giftlist.services.reservations import (
    ALL_CATEGORIES,
    ConfirmationRequired,
    GiftWithInterest,
    InvitationNotFound,
    ReservationService,
    ReservationState,
    SortOption,
    ViewOnlyUser,
    category_counts,
    filter_and_sort,
)
from giftlist.utils.errors import AppError

router = APIRouter(tags=["pages"], include_in_schema=False)
logger = logging.getLogger(__name__)

SORT_LABELS = {
    SortOption.DEFAULT: "Par défaut",
    SortOption.PRICE_ASC: "Prix croissant",
    SortOption.PRICE_DESC: "Prix décroissant",
    SortOption.CATEGORY: "Catégorie",
}


def _login_form(error: str = "") -> str:
    error_html = f'<p class="error">{html.escape(error)}</p>' if error else ""
    return f"""
    <div class="card" style="max-width:380px;margin:0 auto;">
      <p class="muted">Accès réservé à l'organisateur de la liste.</p>
      {error_html}
      <form method="post" action="/backoffice/login">
        <label>Mot de passe</label>
        <input type="password" name="password" required />
        <button type="submit" style="margin-top:0.75rem;">Se connecter</button>
      </form>
    </div>
    """


def _error_page(message: str, status_code: int) -> HTMLResponse:
    body = f'<div class="card"><p class="error">{html.escape(message)}</p></div>'
    return render_page("Liste de cadeaux", body, status_code=status_code)


# --- Backoffice ---

@router.get("/backoffice/login", response_class=HTMLResponse)
async def login_page():
    return render_page("Backoffice – Connexion", _login_form())


@router.post("/backoffice/login", response_class=HTMLResponse)
async def login_submit(
    request: Request,
    password: str = Form(""),
    redis: Redis = Depends(get_redis),
    config: GateConfig = Depends(get_gate_config),
):
    if not verify_password(password, config):
        logger.warning(f"Failed backoffice login from {request.client.host if request.client else 'unknown'}")
        return render_page(
            "Backoffice – Connexion",
            _login_form("Mot de passe incorrect"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    session_id = await SessionStore(redis, config.ttl_seconds).open()
    response = RedirectResponse(url=config.home_path, status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, session_id, config)
    return response


@router.post("/backoffice/logout")
async def logout_submit(
    request: Request,
    redis: Redis = Depends(get_redis),
    config: GateConfig = Depends(get_gate_config),
):
    await SessionStore(redis, config.ttl_seconds).close(request.cookies.get(config.cookie_name))
    response = RedirectResponse(url=config.login_path, status_code=status.HTTP_303_SEE_OTHER)
    clear_session_cookie(response, config)
    return response


@router.get("/backoffice", response_class=HTMLResponse)
async def dashboard_page(db: AsyncSession = Depends(get_db)):
    gift_repo = GiftRepository(db)
    user_repo = UserRepository(db)
    stats = [
        ("Cadeaux", await gift_repo.count_gifts()),
        ("Invités", await user_repo.count_users()),
        ("Réservations", await gift_repo.count_interests()),
    ]
    cards = "".join(
        f'<div class="card stat"><div class="muted">{label}</div><div class="value">{value}</div></div>'
        for label, value in stats
    )

    rows = ""
    for user in await user_repo.list_users():
        link = public_link(user.hex_key)
        access = "Lecture seule" if user.view_only else "Réservation"
        rows += f"""
        <tr>
          <td>{html.escape(user.name)}</td>
          <td>{access}</td>
          <td><a href="{html.escape(link)}">{html.escape(link)}</a></td>
        </tr>
        """
    if not rows:
        rows = '<tr><td colspan="3" class="muted">Aucun invité pour le moment.</td></tr>'

    body = f"""
    <div class="stats">{cards}</div>
    <h2>Invités</h2>
    <table>
      <thead><tr><th>Nom</th><th>Accès</th><th>Lien</th></tr></thead>
      <tbody>{rows}</tbody>
    </table>
    """
    return render_page("Backoffice", body, backoffice=True)


# --- Invitee gift list ---

def _list_url(hex_key: str, category: str, sort: SortOption) -> str:
    query = {}
    if category != ALL_CATEGORIES:
        query["category"] = category
    if sort is not SortOption.DEFAULT:
        query["sort"] = sort.value
    suffix = f"?{urlencode(query)}" if query else ""
    return f"/gifts/{quote(hex_key)}{suffix}"


def _gift_card(gift: GiftWithInterest, hex_key: str, viewer_id: uuid.UUID, view_only: bool) -> str:
    state = gift.state
    css = ""
    badge = ""
    if state is ReservationState.RESERVED_BY_ME:
        css = "mine"
        badge = '<span class="badge mine">VOUS AVEZ RÉSERVÉ CE CADEAU</span>'
    elif state is ReservationState.RESERVED_BY_OTHERS:
        css = "others"
        names = html.escape(", ".join(gift.reserver_names(exclude=viewer_id)))
        badge = f'<span class="badge others">DÉJÀ RÉSERVÉ PAR {names}</span>'

    image = f'<img src="{html.escape(gift.image_url)}" alt="" />' if gift.image_url else ""
    chips = "".join(f'<span class="muted">#{html.escape(c)} </span>' for c in gift.categories)

    action = ""
    if not view_only:
        label = "Annuler ma réservation" if state is ReservationState.RESERVED_BY_ME else "Je réserve"
        button_css = ' class="cancel"' if state is ReservationState.RESERVED_BY_ME else ""
        action = f"""
        <form method="post" action="/gifts/{hex_key}/toggle/{gift.id}">
          <button type="submit"{button_css}>{label}</button>
        </form>
        """

    return f"""
    <div class="card {css}">
      {badge}
      {image}
      <h3>{html.escape(gift.title)}</h3>
      <p class="muted">{html.escape(gift.description)}</p>
      <p class="price">{format_price(gift.price)}</p>
      <p>{chips}</p>
      <p><a href="{html.escape(gift.purchase_link)}" target="_blank" rel="noopener">Voir le produit</a></p>
      {action}
    </div>
    """


@router.get("/gifts/{hex_key}", response_class=HTMLResponse)
async def gift_list_page(
    hex_key: str,
    category: str = ALL_CATEGORIES,
    sort: SortOption = SortOption.DEFAULT,
    db: AsyncSession = Depends(get_db),
):
    service = ReservationService(db)
    try:
        viewer = await service.load_viewer(hex_key)
    except InvitationNotFound as exc:
        return _error_page(exc.message, exc.http_status)

    gifts = await service.list_for_viewer(viewer)
    shown = filter_and_sort(gifts, category=category, sort=sort)

    chips = [(ALL_CATEGORIES, f"Tous ({len(gifts)})")]
    chips += [(name, f"{name} ({count})") for name, count in category_counts(gifts)]
    chip_links = ""
    for value, label in chips:
        active = ' class="active"' if value == category else ""
        chip_links += f'<a href="{html.escape(_list_url(hex_key, value, sort))}"{active}>{html.escape(label)}</a>'
    sort_links = " · ".join(
        f'<a href="{html.escape(_list_url(hex_key, category, option))}">{label}</a>'
        if option is not sort
        else f"<strong>{label}</strong>"
        for option, label in SORT_LABELS.items()
    )

    cards = "".join(_gift_card(gift, hex_key, viewer.id, viewer.view_only) for gift in shown)
    if not cards:
        cards = '<p class="muted">Aucun cadeau dans cette catégorie.</p>'

    notice = ""
    if viewer.view_only:
        notice = '<p class="muted">Ce lien permet uniquement de consulter la liste.</p>'

    body = f"""
    <p>Bonjour {html.escape(viewer.name)} !</p>
    {notice}
    <div class="chips">{chip_links}</div>
    <p class="muted">Trier : {sort_links}</p>
    <div class="grid">{cards}</div>
    """
    return render_page("Liste de cadeaux", body)


@router.post("/gifts/{hex_key}/toggle/{gift_id}", response_class=HTMLResponse)
async def toggle_page(
    hex_key: str,
    gift_id: uuid.UUID,
    confirm: str = Form(""),
    db: AsyncSession = Depends(get_db),
):
    service = ReservationService(db)
    try:
        viewer = await service.load_viewer(hex_key)
        await service.toggle(viewer, gift_id, confirmed=confirm == "1")
    except ConfirmationRequired as exc:
        names = html.escape(", ".join(exc.reserved_by))
        body = f"""
        <div class="card">
          <p>Ce cadeau est déjà réservé par <strong>{names}</strong>.</p>
          <p>Voulez-vous quand même le réserver ?</p>
          <form method="post" action="/gifts/{hex_key}/toggle/{gift_id}">
            <input type="hidden" name="confirm" value="1" />
            <button type="submit">Oui, je le réserve aussi</button>
          </form>
          <p><a href="/gifts/{hex_key}">Annuler</a></p>
        </div>
        """
        return render_page("Confirmer la réservation", body, status_code=status.HTTP_409_CONFLICT)
    except (InvitationNotFound, ViewOnlyUser) as exc:
        return _error_page(exc.message, exc.http_status)
    except AppError as exc:
        logger.warning(f"Toggle failed for gift {gift_id}: {exc.code}")
        return _error_page("Échec de la mise à jour de l'intérêt", exc.http_status)

    return RedirectResponse(url=f"/gifts/{hex_key}", status_code=status.HTTP_303_SEE_OTHER)
