from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any

from orderassist.core.errors import PersistenceError, RetrievalError
from orderassist.sheets.gateway import SheetsGateway
from orderassist.sheets.rows import CUSTOMERS_SHEET, ORDERS_SHEET, SERVICES_SHEET

logger = logging.getLogger(__name__)

# snapshot attribute -> sheet name
KNOWLEDGE_TABLES: dict[str, str] = {
    "profile": "Profile",
    "services": SERVICES_SHEET,
    "portfolio": "PORTOFOLIO",
    "testimonials": "TESTIMONI",
    "skills": "SKILLS",
    "social_media": "SOSIAL MEDIA",
    "faq": "FAQ",
    "orders": ORDERS_SHEET,
    "customers": CUSTOMERS_SHEET,
}


@dataclass
class KnowledgeSnapshot:
    profile: list[list[Any]] = field(default_factory=list)
    services: list[list[Any]] = field(default_factory=list)
    portfolio: list[list[Any]] = field(default_factory=list)
    testimonials: list[list[Any]] = field(default_factory=list)
    skills: list[list[Any]] = field(default_factory=list)
    social_media: list[list[Any]] = field(default_factory=list)
    faq: list[list[Any]] = field(default_factory=list)
    orders: list[list[Any]] = field(default_factory=list)
    customers: list[list[Any]] = field(default_factory=list)

    def service_names(self) -> list[str]:
        return [str(row[0]) for row in self.services if row and str(row[0]).strip()]


class KnowledgeFetcher:
    """Reads every reference table for a turn, in parallel.

    A failed read fails the whole fetch; there is no partial snapshot.
    """

    def __init__(self, gateway: SheetsGateway, *, max_workers: int | None = None) -> None:
        self.gateway = gateway
        self.max_workers = max_workers or len(KNOWLEDGE_TABLES)

    def fetch(self, sheet_name: str) -> list[list[Any]]:
        try:
            return self.gateway.get_sheet_data(sheet_name)
        except PersistenceError as exc:
            raise RetrievalError(f"Failed to read {sheet_name}") from exc

    def fetch_all(self) -> KnowledgeSnapshot:
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                attr: pool.submit(self.fetch, sheet_name)
                for attr, sheet_name in KNOWLEDGE_TABLES.items()
            }
            # result() re-raises the first RetrievalError in table order
            values = {attr: future.result() for attr, future in futures.items()}
        logger.debug("Knowledge fetched tables=%s", ",".join(KNOWLEDGE_TABLES.values()))
        return KnowledgeSnapshot(**values)
