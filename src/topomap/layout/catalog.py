"""
Entity Catalog - the estate the stack layout is drawn from.

A catalog lists entities, the dependencies between them, and the entities
that are deliberately left unconnected (orphaned or undiscovered). The
built-in demo catalog models a small web shop running on two datacenters
plus a separate internal tooling island.
"""

import logging
from pathlib import Path
from typing import List, Optional, Set, Tuple

import yaml
from pydantic import BaseModel, Field, ValidationError, model_validator

from ..core.exceptions import ConfigError, MalformedGraphError
from ..core.types import LayerType, NodeStatus, Severity, Technology

logger = logging.getLogger(__name__)


class CatalogEntity(BaseModel):
    """One entity of the estate, before it has a position."""
    id: str
    layer_type: LayerType
    label: str
    sub_label: Optional[str] = None
    status: Optional[NodeStatus] = None
    vulnerability: Optional[Severity] = None
    technology: Optional[Technology] = None
    notification_count: int = 0

    @model_validator(mode="after")
    def _derive_status(self) -> "CatalogEntity":
        # Open notifications mean something is on fire
        if self.status is None:
            self.status = NodeStatus.CRITICAL if self.notification_count else NodeStatus.HEALTHY
        return self


class EntityCatalog(BaseModel):
    """
    Entities, dependencies and isolated entities.

    Dependencies are (source_id, target_id) pairs, top layer first.
    """
    entities: List[CatalogEntity] = Field(default_factory=list)
    dependencies: List[Tuple[str, str]] = Field(default_factory=list)
    isolated: Set[str] = Field(default_factory=set)

    def entity_ids(self) -> Set[str]:
        return {entity.id for entity in self.entities}

    def check_integrity(self) -> "EntityCatalog":
        """
        Reject a catalog that cannot produce a well-formed graph.

        Raises:
            MalformedGraphError: duplicate entity ids, unknown ids in the
                dependency or isolated lists, or a dependency that touches
                an isolated entity.
        """
        ids: Set[str] = set()
        for entity in self.entities:
            if entity.id in ids:
                raise MalformedGraphError(f"duplicate entity id '{entity.id}'")
            ids.add(entity.id)

        unknown_isolated = self.isolated - ids
        if unknown_isolated:
            raise MalformedGraphError(
                f"isolated entities not in catalog: {', '.join(sorted(unknown_isolated))}"
            )

        for source, target in self.dependencies:
            for endpoint in (source, target):
                if endpoint not in ids:
                    raise MalformedGraphError(
                        f"dependency {source} -> {target} references unknown entity '{endpoint}'"
                    )
                if endpoint in self.isolated:
                    raise MalformedGraphError(
                        f"dependency {source} -> {target} touches isolated entity '{endpoint}'"
                    )
        return self

    @classmethod
    def from_yaml(cls, path: Path) -> "EntityCatalog":
        """
        Load a catalog from YAML.

        Expected format:
            entities:
              - {id: app-web, layer_type: application, label: web-shop}
            dependencies:
              - [app-web, svc-auth]
            isolated: [host-spare]

        Raises:
            ConfigError: unreadable file or schema mismatch.
        """
        if not path.exists():
            raise ConfigError(str(path), "file not found")

        try:
            data = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(str(path), f"invalid YAML: {e}") from e

        try:
            catalog = cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(str(path), str(e)) from e

        logger.info(f"Loaded catalog {path}: {len(catalog.entities)} entities")
        return catalog


# (id suffix, label, technology, processes)
_SERVICES = [
    ("auth", "auth-service", Technology.JAVA, 3),
    ("pay", "payment-gateway", Technology.JAVA, 3),
    ("ord", "order-service", Technology.JAVA, 2),
    ("inv", "inventory-service", Technology.NODEJS, 2),
    ("not", "notification-service", Technology.NODEJS, 1),
    ("usr", "user-profile", Technology.PYTHON, 2),
    ("ana", "analytics-worker", Technology.PYTHON, 1),
    ("rep", "reporting-api", Technology.GO, 1),
]

_SERVICE_CALLS = [
    ("svc-ord", "svc-pay"),
    ("svc-ord", "svc-inv"),
    ("svc-pay", "svc-usr"),
    ("svc-pay", "svc-not"),
    ("svc-rep", "svc-ana"),
]

_APP_CALLS = [
    ("app-web", "svc-auth"),
    ("app-web", "svc-ord"),
    ("app-web", "svc-usr"),
    ("app-mobile", "svc-auth"),
    ("app-mobile", "svc-pay"),
    ("app-backoffice", "svc-rep"),
]

_HOST_COUNT = 5

# Process ids that carry a known vulnerability in the demo estate
_VULNERABLE = {
    "proc-pay-1": Severity.CRITICAL,
    "proc-auth-0": Severity.HIGH,
    "proc-inv-1": Severity.MEDIUM,
    "proc-usr-0": Severity.LOW,
}


def default_catalog() -> EntityCatalog:
    """The demo estate shown on first load."""
    entities: List[CatalogEntity] = []
    dependencies: List[Tuple[str, str]] = []

    def add(entity_id: str, layer: LayerType, label: str, **attrs) -> None:
        entities.append(CatalogEntity(id=entity_id, layer_type=layer, label=label, **attrs))

    add("app-web", LayerType.APPLICATION, "web-shop", sub_label="Web application",
        technology=Technology.CONFLUENCE)
    add("app-mobile", LayerType.APPLICATION, "shop-mobile", sub_label="Mobile app",
        technology=Technology.APPLE, notification_count=1)
    add("app-backoffice", LayerType.APPLICATION, "backoffice-portal", sub_label="Web application",
        technology=Technology.NGINX)

    for i in range(_HOST_COUNT):
        add(f"host-{i}", LayerType.HOST, f"worker-node-{i + 1}", sub_label="Ready",
            technology=Technology.LINUX, notification_count=1 if i == 2 else 0)

    add("dc-east", LayerType.DATACENTER, "us-east-1", sub_label="AWS region", technology=Technology.AWS)
    add("dc-west", LayerType.DATACENTER, "westeurope", sub_label="Azure region", technology=Technology.AZURE)
    for i in range(_HOST_COUNT):
        dependencies.append((f"host-{i}", "dc-east" if i < 3 else "dc-west"))

    process_index = 0
    for i, (suffix, label, tech, process_count) in enumerate(_SERVICES):
        service_id = f"svc-{suffix}"
        add(service_id, LayerType.SERVICE, label, sub_label="ClusterIP", technology=tech,
            notification_count=2 if i == 0 else 0)

        for j in range(process_count):
            process_id = f"proc-{suffix}-{j}"
            add(process_id, LayerType.PROCESS, f"{label}-{j}", sub_label="Running",
                technology=Technology.DOCKER, vulnerability=_VULNERABLE.get(process_id))
            dependencies.append((service_id, process_id))
            dependencies.append((process_id, f"host-{process_index % _HOST_COUNT}"))
            process_index += 1

    dependencies.extend(_APP_CALLS)
    dependencies.extend(_SERVICE_CALLS)

    # kube-system style tooling island, disjoint from the shop
    add("app-status", LayerType.APPLICATION, "system-status-page", technology=Technology.NGINX)
    add("svc-probe", LayerType.SERVICE, "system-uptime-probe", technology=Technology.GO)
    add("proc-probe-0", LayerType.PROCESS, "system-uptime-probe-0", technology=Technology.DOCKER)
    add("host-edge", LayerType.HOST, "system-edge-node", technology=Technology.LINUX)
    dependencies.extend([
        ("app-status", "svc-probe"),
        ("svc-probe", "proc-probe-0"),
        ("proc-probe-0", "host-edge"),
    ])

    # Orphaned and undiscovered entities: never connected
    add("svc-legacy", LayerType.SERVICE, "legacy-soap-bridge", sub_label="Undiscovered",
        technology=Technology.JAVA, status=NodeStatus.WARNING)
    add("proc-cron", LayerType.PROCESS, "orphan-cron-job", sub_label="Orphaned",
        technology=Technology.PYTHON, vulnerability=Severity.HIGH)
    add("host-spare", LayerType.HOST, "spare-node", sub_label="Unmonitored",
        technology=Technology.WINDOWS)
    add("dc-lab", LayerType.DATACENTER, "on-prem-lab", sub_label="Unmonitored")

    return EntityCatalog(
        entities=entities,
        dependencies=dependencies,
        isolated={"svc-legacy", "proc-cron", "host-spare", "dc-lab"},
    )
