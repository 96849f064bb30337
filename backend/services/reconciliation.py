"""
Réconciliation stock / commandes.

Fonctions pures sur le mapping ``sizes`` d'un stock (taille -> quantité
disponible). Aucune ne modifie son entrée : elles renvoient un nouveau dict,
ou lèvent une erreur sans rien toucher.

Règle métier :
    une commande active "tient" qty unités de (stock, taille) ;
    sizes[taille] est ce qui reste disponible, jamais < 0.
"""

from __future__ import annotations

from typing import Mapping

from backend.services.errors import InsufficientStock, InvalidQuantity

Sizes = Mapping[str, int]


def available(sizes: Sizes | None, size: str) -> int:
    """Quantité disponible ; absente ou non numérique -> 0."""
    if not sizes:
        return 0
    raw = sizes.get(size)
    if isinstance(raw, bool) or raw is None:
        return 0
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 0


def _check_qty(qty: int) -> int:
    if isinstance(qty, bool) or not isinstance(qty, int):
        raise InvalidQuantity("qty must be an integer")
    if qty < 0:
        raise InvalidQuantity("qty must not be negative")
    return qty


def reserve(sizes: Sizes | None, size: str, want_qty: int = 1) -> dict[str, int]:
    want_qty = _check_qty(want_qty)
    updated = dict(sizes or {})
    if want_qty == 0:
        return updated

    current = available(sizes, size)
    if current < want_qty:
        raise InsufficientStock(current)

    updated[size] = current - want_qty
    return updated


def release(sizes: Sizes | None, size: str, qty: int) -> dict[str, int]:
    # pas de plafond : rendre plus que réservé n'est pas détecté
    qty = _check_qty(qty)
    updated = dict(sizes or {})
    updated[size] = available(sizes, size) + qty
    return updated


def adjust_on_qty_change(sizes: Sizes | None, size: str, old_qty: int, new_qty: int) -> dict[str, int]:
    """La commande tient déjà old_qty unités : déplace sa réservation vers new_qty."""
    diff = _check_qty(new_qty) - _check_qty(old_qty)
    if diff > 0:
        return reserve(sizes, size, diff)
    if diff < 0:
        return release(sizes, size, -diff)
    return dict(sizes or {})


def transfer_reservation(
    old_sizes: Sizes | None,
    old_size: str,
    old_qty: int,
    new_sizes: Sizes | None,
    new_size: str,
    new_qty: int,
    *,
    same_stock: bool = False,
) -> tuple[dict[str, int] | None, dict[str, int]]:
    """
    Changement d'article ou de taille.

    1) rend old_qty à (ancien stock, ancienne taille)
    2) réserve new_qty sur (nouveau stock, nouvelle taille)

    Si same_stock, l'étape 2 part de l'état APRÈS restitution et new_sizes est
    ignoré ; les deux éléments du tuple sont alors le même mapping.
    old_sizes None (ancien stock supprimé) -> pas de restitution.

    Les deux étapes sont calculées avant toute écriture : si la réservation
    échoue, rien n'a été rendu.
    """
    released = release(old_sizes, old_size, old_qty) if old_sizes is not None else None

    if same_stock:
        if released is None:
            raise ValueError("same_stock requires the old stock sizes")
        updated = reserve(released, new_size, new_qty)
        return updated, updated

    return released, reserve(new_sizes, new_size, new_qty)
