"""Flattening of a service sub-tree into the export scope."""

import logging
from collections import deque
from typing import List, Optional

from ...core.exceptions import InvalidScopeError
from ...schemas.registre import FlattenedServiceView, ServiceNode

logger = logging.getLogger(__name__)


def project_service(node: ServiceNode) -> FlattenedServiceView:
    """Keep the fields of a service the register needs, drop its children."""
    return FlattenedServiceView(
        id=node.id,
        service_rpsi_id=node.service_rpsi_id,
        libelle=node.libelle,
        abreviation=node.abreviation,
        service_hierarchie=node.service_hierarchie,
    )


def flatten_service_tree(root: Optional[ServiceNode]) -> List[FlattenedServiceView]:
    """
    Return one projection per node: the root first, then breadth-first over
    each node's children in their stored order.

    The input tree is not modified. A node reached twice is emitted once.

    Raises:
        InvalidScopeError: if ``root`` is None.
    """
    if root is None:
        raise InvalidScopeError()

    result = [project_service(root)]
    seen = {id(root)}
    queue = deque([root])

    while queue:
        node = queue.popleft()
        for child in node.sub_services:
            if id(child) in seen:
                logger.warning(
                    f"Service {child.id} reached twice under {root.id}, skipping"
                )
                continue
            seen.add(id(child))
            result.append(project_service(child))
            queue.append(child)

    logger.debug(f"Flattened {len(result)} services under root {root.id}")
    return result
