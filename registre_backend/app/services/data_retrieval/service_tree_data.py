# registre_backend/app/services/data_retrieval/service_tree_data.py

import logging
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ...models.services import Service
from ...schemas.registre import ServiceNode

logger = logging.getLogger(__name__)


class ServiceTreeData:
    """Loads a service and all its descendants in one recursive query."""

    async def load_service_sub_tree(
        self, root_id: int, session: AsyncSession
    ) -> Optional[ServiceNode]:
        sub_tree = (
            select(Service.id)
            .where(Service.id == root_id)
            .cte(name="sub_tree", recursive=True)
        )
        sub_tree = sub_tree.union_all(
            select(Service.id).where(Service.parent_id == sub_tree.c.id)
        )
        stmt = (
            select(Service)
            .where(Service.id.in_(select(sub_tree.c.id)))
            .order_by(Service.position, Service.id)
        )
        result = await session.execute(stmt)
        rows = result.scalars().all()

        nodes: Dict[int, ServiceNode] = {
            row.id: ServiceNode(
                id=row.id,
                service_rpsi_id=row.service_rpsi_id,
                libelle=row.libelle,
                abreviation=row.abreviation,
                service_hierarchie=row.service_hierarchie,
            )
            for row in rows
        }
        # rows are already in sibling order, so appending keeps it
        for row in rows:
            if row.id != root_id and row.parent_id in nodes:
                nodes[row.parent_id].sub_services.append(nodes[row.id])

        root = nodes.get(root_id)
        if root is None:
            logger.warning(f"Service {root_id} not found")
        else:
            logger.debug(f"Loaded {len(nodes)} services under {root_id}")
        return root
