"""
Company lookup for import batches.

Uploads name their company the way users type it, so names are compared
with ``normalize_name`` (case and spacing ignored, accents kept).  Only active
companies accept imports.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from painel.models.base import Company
from painel.services.imports.parsers.base import normalize_name


async def find_company_id(session: AsyncSession, company_name: str) -> UUID | None:
    key = normalize_name(company_name)
    if not key:
        return None
    result = await session.execute(
        select(Company.id, Company.name).where(Company.active.is_(True)).order_by(Company.name)
    )
    for company_id, name in result.all():
        if normalize_name(name) == key:
            return company_id
    return None
