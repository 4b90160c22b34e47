"""Backoffice management screens: gifts, invitee links and the budget tracker.

Every path sits under ``/backoffice`` so the gate middleware covers it. Form
posts answer 303 back to the screen they came from; invalid input re-renders
the form with 400 and the message the organiser sees.
"""
from __future__ import annotations

import html
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Form
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette import status

from giftlist.db import get_db
from giftlist.models import PERSON_GIFT_STATUSES, Gift, Person
from giftlist.pages.layout import format_price, render_page
from giftlist.parsers import ProductScraper
from giftlist.parsers.errors import ScrapeError
from giftlist.repositories import GiftRepository, PersonRepository, UserRepository
from giftlist.routes.backoffice import public_link
from giftlist.routes.scrape import get_scraper
from giftlist.schemas.gifts import GiftCreate
from giftlist.services.budget import PersonSummary, group_by_status, summarize_all, summarize_person

router = APIRouter(prefix="/backoffice", tags=["pages"], include_in_schema=False)
logger = logging.getLogger(__name__)

GIFT_FIELD_LABELS = {
    "title": "Titre",
    "description": "Description",
    "purchase_link": "Lien d'achat",
    "image_url": "URL de l'image",
    "price": "Prix",
    "categories": "Catégories",
}
STATUS_ICONS = {"Idée": "💡", "Commandé": "📦", "Livré": "✅"}

BUDGET_ERROR = "Veuillez entrer un budget valide"
AMOUNT_ERROR = "Veuillez entrer un montant valide"
NAME_ERROR = "Veuillez entrer un nom"


def _see_other(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def _message(text: str, css: str = "error") -> str:
    return f'<p class="{css}">{html.escape(text)}</p>' if text else ""


def _not_found(what: str) -> HTMLResponse:
    body = f'<div class="card">{_message(f"{what} introuvable")}</div>'
    return render_page("Backoffice", body, backoffice=True, status_code=status.HTTP_404_NOT_FOUND)


def _parse_amount(raw: str) -> Optional[float]:
    """Read a euro amount typed as ``12.5`` or ``12,5``; None when invalid or negative."""
    try:
        value = float(raw.strip().replace(",", "."))
    except ValueError:
        return None
    if not value >= 0:
        return None
    return value


# --- Gifts ---

def _gift_values(gift: Optional[Gift] = None) -> dict[str, str]:
    if gift is None:
        return {key: "" for key in GIFT_FIELD_LABELS}
    return {
        "title": gift.title,
        "description": gift.description,
        "purchase_link": gift.purchase_link,
        "image_url": gift.image_url or "",
        "price": str(gift.price),
        "categories": ", ".join(gift.categories or []),
    }


def _validate_gift(values: dict[str, str]) -> tuple[Optional[GiftCreate], str]:
    payload = dict(values)
    payload["price"] = values["price"].replace(",", ".") or None
    try:
        return GiftCreate(**payload), ""
    except ValidationError as exc:
        fields = sorted({str(err["loc"][0]) for err in exc.errors() if err["loc"]})
        labels = ", ".join(GIFT_FIELD_LABELS.get(name, name) for name in fields)
        return None, f"Veuillez vérifier les champs : {labels}"


def _gift_form(action: str, values: dict[str, str], submit: str, error: str = "") -> str:
    v = {key: html.escape(value) for key, value in values.items()}
    return f"""
    <form method="post" action="{action}" class="card">
      {_message(error)}
      <label>Titre *</label>
      <input name="title" value="{v['title']}" placeholder="Titre du cadeau" required />
      <label>Description *</label>
      <textarea name="description" rows="3" placeholder="Courte description du cadeau" required>{v['description']}</textarea>
      <label>Lien d'achat *</label>
      <input name="purchase_link" type="url" value="{v['purchase_link']}" placeholder="https://exemple.com/produit" required />
      <label>URL de l'image (optionnel)</label>
      <input name="image_url" value="{v['image_url']}" placeholder="https://exemple.com/image.jpg" />
      <label>Prix (€) *</label>
      <input name="price" value="{v['price']}" inputmode="decimal" required />
      <label>Catégories (séparées par des virgules)</label>
      <input name="categories" value="{v['categories']}" placeholder="Électronique, Jeux, Livres" />
      <div class="actions">
        <button type="submit">{submit}</button>
        <a href="/backoffice/gifts">Annuler</a>
      </div>
    </form>
    """


def _import_form(url: str) -> str:
    return f"""
    <form method="get" action="/backoffice/gifts/new" class="card">
      <h3>🛒 Import depuis Amazon ou Fnac</h3>
      <p class="muted">Collez un lien Amazon ou Fnac pour remplir automatiquement les informations</p>
      <input name="url" type="url" value="{html.escape(url)}" placeholder="https://www.amazon.fr/... ou https://www.fnac.com/..." />
      <div class="actions"><button type="submit">Récupérer les informations</button></div>
    </form>
    """


def _submitted_gift(
    title: str, description: str, purchase_link: str, image_url: str, price: str, categories: str
) -> dict[str, str]:
    return {
        "title": title.strip(),
        "description": description.strip(),
        "purchase_link": purchase_link.strip(),
        "image_url": image_url.strip(),
        "price": price.strip(),
        "categories": categories,
    }


@router.get("/gifts", response_class=HTMLResponse)
async def gifts_page(db: AsyncSession = Depends(get_db)):
    rows = ""
    for gift in await GiftRepository(db).list_gifts():
        rows += f"""
        <tr>
          <td>{html.escape(gift.title)}</td>
          <td>{format_price(gift.price)}</td>
          <td>{html.escape(", ".join(gift.categories or []))}</td>
          <td><a href="{html.escape(gift.purchase_link)}" target="_blank" rel="noopener">Voir</a></td>
          <td>
            <a href="/backoffice/gifts/{gift.id}/edit">Modifier</a>
            <form method="post" action="/backoffice/gifts/{gift.id}/delete" class="inline">
              <button type="submit" class="link">Supprimer</button>
            </form>
          </td>
        </tr>
        """
    if not rows:
        rows = '<tr><td colspan="5" class="muted">Aucun cadeau pour le moment.</td></tr>'

    body = f"""
    <p><a href="/backoffice/gifts/new">➕ Nouveau cadeau</a></p>
    <table>
      <thead><tr><th>Titre</th><th>Prix</th><th>Catégories</th><th>Lien</th><th></th></tr></thead>
      <tbody>{rows}</tbody>
    </table>
    """
    return render_page("Backoffice – Cadeaux", body, backoffice=True)


@router.get("/gifts/new", response_class=HTMLResponse)
async def new_gift_page(url: str = "", scraper: ProductScraper = Depends(get_scraper)):
    values = _gift_values()
    error = notice = ""
    url = url.strip()
    if url:
        values["purchase_link"] = url
        try:
            record = await scraper.scrape(url)
        except ScrapeError as exc:
            error = exc.message
        else:
            values.update(
                title=record.title,
                description=record.description,
                image_url=record.image_url,
                price=str(record.price) if record.price else "",
                categories=", ".join(record.categories),
            )
            notice = f"Informations récupérées avec succès depuis {record.source} !"

    body = _import_form(url) + _message(notice, "notice") + _gift_form(
        "/backoffice/gifts/new", values, "Créer le cadeau", error
    )
    return render_page("Ajouter un nouveau cadeau", body, backoffice=True)


@router.post("/gifts/new", response_class=HTMLResponse)
async def create_gift_submit(
    title: str = Form(""),
    description: str = Form(""),
    purchase_link: str = Form(""),
    image_url: str = Form(""),
    price: str = Form(""),
    categories: str = Form(""),
    db: AsyncSession = Depends(get_db),
):
    values = _submitted_gift(title, description, purchase_link, image_url, price, categories)
    data, error = _validate_gift(values)
    if data is None:
        body = _gift_form("/backoffice/gifts/new", values, "Créer le cadeau", error)
        return render_page("Ajouter un nouveau cadeau", body, backoffice=True, status_code=status.HTTP_400_BAD_REQUEST)

    gift = await GiftRepository(db).create_gift(**data.model_dump())
    logger.info(f"Created gift {gift.id} '{gift.title}' from the backoffice form")
    return _see_other("/backoffice/gifts")


@router.get("/gifts/{gift_id}/edit", response_class=HTMLResponse)
async def edit_gift_page(gift_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    gift = await GiftRepository(db).get_gift(gift_id)
    if not gift:
        return _not_found("Cadeau")
    body = _gift_form(f"/backoffice/gifts/{gift_id}/edit", _gift_values(gift), "Mettre à jour")
    return render_page("Modifier le cadeau", body, backoffice=True)


@router.post("/gifts/{gift_id}/edit", response_class=HTMLResponse)
async def edit_gift_submit(
    gift_id: uuid.UUID,
    title: str = Form(""),
    description: str = Form(""),
    purchase_link: str = Form(""),
    image_url: str = Form(""),
    price: str = Form(""),
    categories: str = Form(""),
    db: AsyncSession = Depends(get_db),
):
    values = _submitted_gift(title, description, purchase_link, image_url, price, categories)
    data, error = _validate_gift(values)
    if data is None:
        body = _gift_form(f"/backoffice/gifts/{gift_id}/edit", values, "Mettre à jour", error)
        return render_page("Modifier le cadeau", body, backoffice=True, status_code=status.HTTP_400_BAD_REQUEST)

    if not await GiftRepository(db).update_gift(gift_id, **data.model_dump()):
        return _not_found("Cadeau")
    logger.info(f"Updated gift {gift_id} from the backoffice form")
    return _see_other("/backoffice/gifts")


@router.post("/gifts/{gift_id}/delete")
async def delete_gift_submit(gift_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await GiftRepository(db).delete_gift(gift_id):
        return _not_found("Cadeau")
    logger.info(f"Deleted gift {gift_id} from the backoffice form")
    return _see_other("/backoffice/gifts")


# --- Invitee links ---

async def _users_page(db: AsyncSession, error: str = "", status_code: int = 200) -> HTMLResponse:
    cards = ""
    for user in await UserRepository(db).list_users():
        link = html.escape(public_link(user.hex_key))
        view_only = '<p class="warn">👁️ Mode lecture seule</p>' if user.view_only else ""
        cards += f"""
        <div class="card">
          <h3>{html.escape(user.name)}</h3>
          {view_only}
          <p class="muted">Clé hexadécimale : <code>{html.escape(user.hex_key)}</code></p>
          <p class="muted">Lien d'accès : <a href="{link}">{link}</a></p>
          <form method="post" action="/backoffice/users/{user.id}/delete">
            <button type="submit" class="cancel">Supprimer</button>
          </form>
        </div>
        """
    if not cards:
        cards = '<p class="muted">Aucun utilisateur pour le moment</p>'

    body = f"""
    <form method="post" action="/backoffice/users" class="card">
      <h3>Générer un nouveau lien utilisateur</h3>
      {_message(error)}
      <label>Nom de l'utilisateur *</label>
      <input name="name" placeholder="Entrez le nom (ex: Maman, Papa, Soeur)" required />
      <label><input type="checkbox" name="view_only" value="1" /> 👁️ Mode lecture seule</label>
      <p class="muted">Cet utilisateur pourra voir la liste mais pas réserver de cadeau</p>
      <div class="actions"><button type="submit">Générer le lien</button></div>
    </form>
    <h2>Liens d'accès</h2>
    <div class="grid">{cards}</div>
    """
    return render_page("Gestion des utilisateurs", body, backoffice=True, status_code=status_code)


@router.get("/users", response_class=HTMLResponse)
async def users_page(db: AsyncSession = Depends(get_db)):
    return await _users_page(db)


@router.post("/users", response_class=HTMLResponse)
async def create_user_submit(
    name: str = Form(""),
    view_only: Optional[str] = Form(None),
    db: AsyncSession = Depends(get_db),
):
    if not name.strip():
        return await _users_page(db, NAME_ERROR, status.HTTP_400_BAD_REQUEST)
    user = await UserRepository(db).create_user(name=name.strip(), view_only=bool(view_only))
    logger.info(f"Created user {user.id} (view_only={user.view_only}) from the backoffice form")
    return _see_other("/backoffice/users")


@router.post("/users/{user_id}/delete")
async def delete_user_submit(user_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await UserRepository(db).delete_user(user_id):
        return _not_found("Utilisateur")
    return _see_other("/backoffice/users")


# --- Persons and budgets ---

def _budget_css(summary: PersonSummary) -> str:
    if summary.over_budget:
        return "error"
    if summary.low_budget:
        return "warn"
    return "notice"


def _status_options(selected: str) -> str:
    return "".join(
        f'<option value="{name}"{" selected" if name == selected else ""}>{STATUS_ICONS[name]} {name}</option>'
        for name in PERSON_GIFT_STATUSES
    )


async def _persons_page(db: AsyncSession, error: str = "", status_code: int = 200) -> HTMLResponse:
    repo = PersonRepository(db)
    persons = await repo.list_persons()
    gifts = await repo.list_gifts()
    summaries = [summarize_person(p, [g for g in gifts if g.person_id == p.id]) for p in persons]
    totals = summarize_all(summaries)

    stats = [
        ("💰 Budget total", format_price(totals.total_budget)),
        ("💸 Dépensé", format_price(totals.total_spent)),
        ("💵 Budget restant", format_price(totals.total_remaining)),
        (
            "🎁 Cadeaux",
            f"{totals.total_gifts} "
            f'<span class="muted">💡 {totals.total_ideas} · 📦 {totals.total_ordered} · ✅ {totals.total_delivered}</span>',
        ),
    ]
    cards = "".join(
        f'<div class="card stat"><div class="muted">{label}</div><div class="value">{value}</div></div>'
        for label, value in stats
    )

    rows = ""
    for summary in summaries:
        person = summary.person
        rows += f"""
        <tr>
          <td><a href="/backoffice/persons/{person.id}">{html.escape(person.name)}</a></td>
          <td>{format_price(person.budget)}</td>
          <td>{format_price(summary.total_spent)}</td>
          <td class="{_budget_css(summary)}">{format_price(summary.remaining_budget)} ({summary.budget_percentage:.0f}%)</td>
          <td>{len(summary.gifts)}</td>
          <td>
            <form method="post" action="/backoffice/persons/{person.id}/delete" class="inline">
              <button type="submit" class="link">Supprimer</button>
            </form>
          </td>
        </tr>
        """
    if not rows:
        rows = '<tr><td colspan="6" class="muted">Aucune personne pour le moment</td></tr>'

    body = f"""
    <div class="stats">{cards}</div>
    <form method="post" action="/backoffice/persons" class="card">
      <h3>Ajouter une personne</h3>
      {_message(error)}
      <label>Nom *</label>
      <input name="name" required />
      <label>Budget total (€) *</label>
      <input name="budget" inputmode="decimal" required />
      <div class="actions"><button type="submit">Ajouter</button></div>
    </form>
    <table>
      <thead><tr><th>Nom</th><th>Budget</th><th>Dépensé</th><th>Restant</th><th>Cadeaux</th><th></th></tr></thead>
      <tbody>{rows}</tbody>
    </table>
    """
    return render_page("Gestion des personnes", body, backoffice=True, status_code=status_code)


async def _person_page(
    db: AsyncSession, person: Person, error: str = "", status_code: int = 200
) -> HTMLResponse:
    gifts = await PersonRepository(db).list_gifts(person.id)
    summary = summarize_person(person, gifts)

    sections = ""
    for name, items in group_by_status(gifts).items():
        rows = ""
        for gift in items:
            note = f'<div class="muted">{html.escape(gift.note)}</div>' if gift.note else ""
            rows += f"""
            <tr>
              <td>{html.escape(gift.name)}{note}</td>
              <td>{format_price(gift.amount)}</td>
              <td>
                <form method="post" action="/backoffice/person-gifts/{gift.id}/status" class="inline">
                  <select name="status">{_status_options(gift.status)}</select>
                  <button type="submit" class="link">Changer</button>
                </form>
              </td>
              <td>
                <form method="post" action="/backoffice/person-gifts/{gift.id}/delete" class="inline">
                  <button type="submit" class="link">Supprimer</button>
                </form>
              </td>
            </tr>
            """
        if not rows:
            rows = '<tr><td colspan="4" class="muted">Aucun cadeau</td></tr>'
        sections += f"""
        <h3>{STATUS_ICONS.get(name, "")} {html.escape(name)} ({len(items)})</h3>
        <table><tbody>{rows}</tbody></table>
        """

    body = f"""
    <p><a href="/backoffice/persons">← Retour à la liste</a></p>
    <div class="card">
      <h3>Résumé du budget</h3>
      <p>Budget : {format_price(person.budget)} · Dépensé : {format_price(summary.total_spent)}</p>
      <p class="{_budget_css(summary)}">Restant : {format_price(summary.remaining_budget)} ({summary.budget_percentage:.0f}%)</p>
    </div>
    {_message(error)}
    <form method="post" action="/backoffice/persons/{person.id}" class="card">
      <label>Nom *</label>
      <input name="name" value="{html.escape(person.name)}" required />
      <label>Budget total (€) *</label>
      <input name="budget" value="{person.budget}" inputmode="decimal" required />
      <div class="actions"><button type="submit">Modifier</button></div>
    </form>
    {sections}
    <form method="post" action="/backoffice/persons/{person.id}/gifts" class="card">
      <h3>Ajouter un cadeau</h3>
      <label>Nom du cadeau *</label>
      <input name="name" required />
      <label>Montant (€) *</label>
      <input name="amount" inputmode="decimal" required />
      <label>Statut *</label>
      <select name="status">{_status_options(PERSON_GIFT_STATUSES[0])}</select>
      <label>URL de l'image (optionnel)</label>
      <input name="image_url" />
      <label>Note (optionnel)</label>
      <textarea name="note" rows="2"></textarea>
      <div class="actions"><button type="submit">Ajouter</button></div>
    </form>
    """
    return render_page(person.name, body, backoffice=True, status_code=status_code)


@router.get("/persons", response_class=HTMLResponse)
async def persons_page(db: AsyncSession = Depends(get_db)):
    return await _persons_page(db)


@router.post("/persons", response_class=HTMLResponse)
async def create_person_submit(
    name: str = Form(""),
    budget: str = Form(""),
    db: AsyncSession = Depends(get_db),
):
    amount = _parse_amount(budget)
    if not name.strip():
        return await _persons_page(db, NAME_ERROR, status.HTTP_400_BAD_REQUEST)
    if amount is None:
        return await _persons_page(db, BUDGET_ERROR, status.HTTP_400_BAD_REQUEST)
    person = await PersonRepository(db).create_person(name=name.strip(), budget=amount)
    logger.info(f"Created person {person.id} with a budget of {amount}")
    return _see_other("/backoffice/persons")


@router.get("/persons/{person_id}", response_class=HTMLResponse)
async def person_page(person_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    person = await PersonRepository(db).get_person(person_id)
    if not person:
        return _not_found("Personne")
    return await _person_page(db, person)


@router.post("/persons/{person_id}", response_class=HTMLResponse)
async def update_person_submit(
    person_id: uuid.UUID,
    name: str = Form(""),
    budget: str = Form(""),
    db: AsyncSession = Depends(get_db),
):
    repo = PersonRepository(db)
    person = await repo.get_person(person_id)
    if not person:
        return _not_found("Personne")
    amount = _parse_amount(budget)
    if not name.strip():
        return await _person_page(db, person, NAME_ERROR, status.HTTP_400_BAD_REQUEST)
    if amount is None:
        return await _person_page(db, person, BUDGET_ERROR, status.HTTP_400_BAD_REQUEST)
    await repo.update_person(person_id, name=name.strip(), budget=amount)
    return _see_other(f"/backoffice/persons/{person_id}")


@router.post("/persons/{person_id}/delete")
async def delete_person_submit(person_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    if not await PersonRepository(db).delete_person(person_id):
        return _not_found("Personne")
    logger.info(f"Deleted person {person_id} and their gifts")
    return _see_other("/backoffice/persons")


@router.post("/persons/{person_id}/gifts", response_class=HTMLResponse)
async def add_person_gift_submit(
    person_id: uuid.UUID,
    name: str = Form(""),
    amount: str = Form(""),
    status_name: str = Form(PERSON_GIFT_STATUSES[0], alias="status"),
    image_url: str = Form(""),
    note: str = Form(""),
    db: AsyncSession = Depends(get_db),
):
    repo = PersonRepository(db)
    person = await repo.get_person(person_id)
    if not person:
        return _not_found("Personne")
    value = _parse_amount(amount)
    if not name.strip():
        return await _person_page(db, person, NAME_ERROR, status.HTTP_400_BAD_REQUEST)
    if value is None:
        return await _person_page(db, person, AMOUNT_ERROR, status.HTTP_400_BAD_REQUEST)
    if status_name not in PERSON_GIFT_STATUSES:
        return await _person_page(db, person, "Statut inconnu", status.HTTP_400_BAD_REQUEST)

    await repo.add_gift(
        person_id,
        name=name.strip(),
        amount=value,
        status=status_name,
        image_url=image_url.strip() or None,
        note=note.strip() or None,
    )
    return _see_other(f"/backoffice/persons/{person_id}")


@router.post("/person-gifts/{gift_id}/status")
async def person_gift_status_submit(
    gift_id: uuid.UUID,
    status_name: str = Form("", alias="status"),
    db: AsyncSession = Depends(get_db),
):
    repo = PersonRepository(db)
    gift = await repo.get_gift(gift_id)
    if not gift:
        return _not_found("Cadeau")
    person_id = gift.person_id
    if status_name not in PERSON_GIFT_STATUSES:
        person = await repo.get_person(person_id)
        return await _person_page(db, person, "Statut inconnu", status.HTTP_400_BAD_REQUEST)
    await repo.update_gift(gift_id, status=status_name)
    return _see_other(f"/backoffice/persons/{person_id}")


@router.post("/person-gifts/{gift_id}/delete")
async def delete_person_gift_submit(gift_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    repo = PersonRepository(db)
    gift = await repo.get_gift(gift_id)
    if not gift:
        return _not_found("Cadeau")
    person_id = gift.person_id
    await repo.delete_gift(gift_id)
    return _see_other(f"/backoffice/persons/{person_id}")
