# src/delivery_ledger/catalog/catalog.py — live clients + materials

from __future__ import annotations

import logging
import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from delivery_ledger.domain.errors import DuplicateName, InvalidPrice, NotFound
from delivery_ledger.domain.models import ZERO, Client, Number, as_decimal

logger = logging.getLogger(__name__)


def _new_client_id() -> str:
    return uuid.uuid4().hex[:12]


def _clean_rate(material: str, value: Number) -> Decimal:
    try:
        rate = as_decimal(value)
    except ValueError:
        raise InvalidPrice(material, value) from None
    if rate < 0:
        raise InvalidPrice(material, value)
    return rate


class Catalog:
    """
    The live client/material catalog.

    Every client carries a rate for every material. Edits here never touch
    saved ledger records: those hold their own name and price snapshots.
    """

    def __init__(
        self,
        materials: Iterable[str] = (),
        clients: Iterable[Client] = (),
        id_factory: Callable[[], str] = _new_client_id,
    ):
        self._materials: List[str] = []
        for name in materials:
            if name in self._materials:
                raise DuplicateName("Material", name)
            self._materials.append(name)
        self._clients: List[Client] = [self._fill_rates(c) for c in clients]
        self._id_factory = id_factory

    # ---------- read view ----------
    @property
    def materials(self) -> Tuple[str, ...]:
        return tuple(self._materials)

    @property
    def clients(self) -> Tuple[Client, ...]:
        return tuple(self._clients)

    def get_client(self, client_id: str) -> Client:
        for client in self._clients:
            if client.id == client_id:
                return client
        raise NotFound("Client", client_id)

    def find_client_by_name(self, name: str) -> Optional[Client]:
        for client in self._clients:
            if client.name == name:
                return client
        return None

    def rate_for(self, client_id: str, material: str) -> Decimal:
        return self.get_client(client_id).rate_for(material)

    # ---------- materials ----------
    def add_material(self, name: str) -> str:
        name = self._clean_name(name, "Material")
        if name in self._materials:
            raise DuplicateName("Material", name)

        self._materials = self._materials + [name]
        self._clients = [
            replace(c, rates={**c.rates, name: ZERO}) for c in self._clients
        ]
        logger.info(f"Material added: {name}")
        return name

    def rename_material(self, old_name: str, new_name: str) -> str:
        new_name = self._clean_name(new_name, "Material")
        if old_name not in self._materials:
            raise NotFound("Material", old_name)
        if new_name in self._materials:
            raise DuplicateName("Material", new_name)

        self._materials = [new_name if m == old_name else m for m in self._materials]
        self._clients = [
            replace(c, rates={(new_name if m == old_name else m): r for m, r in c.rates.items()})
            for c in self._clients
        ]
        logger.info(f"Material renamed: {old_name} -> {new_name}")
        return new_name

    def delete_material(self, name: str) -> None:
        if name not in self._materials:
            raise NotFound("Material", name)

        self._materials = [m for m in self._materials if m != name]
        self._clients = [
            replace(c, rates={m: r for m, r in c.rates.items() if m != name})
            for c in self._clients
        ]
        logger.info(f"Material deleted: {name}")

    # ---------- clients ----------
    def add_client(self, name: str, rates: Optional[Mapping[str, Number]] = None) -> Client:
        name = self._clean_name(name, "Client")
        client = Client(id=self._id_factory(), name=name, rates=self._build_rates(rates or {}))
        self._clients = self._clients + [client]
        logger.info(f"Client added: {client.name} ({client.id})")
        return client

    def update_client(self, client_id: str, name: str, rates: Optional[Mapping[str, Number]] = None) -> Client:
        current = self.get_client(client_id)
        name = self._clean_name(name, "Client")
        new_rates = self._build_rates(rates if rates is not None else current.rates)

        updated = replace(current, name=name, rates=new_rates)
        self._clients = [updated if c.id == client_id else c for c in self._clients]
        logger.info(f"Client updated: {updated.name} ({client_id})")
        return updated

    def delete_client(self, client_id: str) -> Client:
        client = self.get_client(client_id)
        self._clients = [c for c in self._clients if c.id != client_id]
        logger.info(f"Client deleted: {client.name} ({client_id})")
        return client

    # ---------- helpers ----------
    def _build_rates(self, rates: Mapping[str, Number]) -> Dict[str, Decimal]:
        # unknown materials are ignored, missing ones default to 0
        return {m: _clean_rate(m, rates.get(m, ZERO)) for m in self._materials}

    def _fill_rates(self, client: Client) -> Client:
        return replace(client, rates=self._build_rates(client.rates))

    @staticmethod
    def _clean_name(name: str, kind: str) -> str:
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValueError(f"{kind} name must not be empty")
        return cleaned
