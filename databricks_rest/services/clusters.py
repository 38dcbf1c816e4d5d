"""Clusters API (/clusters/*)."""

from typing import List, Optional

from ..models import Cluster
from ..transport import DatabricksTransport


class ClusterService:
    def __init__(self, transport: DatabricksTransport):
        self.transport = transport
        self.logger = transport.logger

    def list_clusters(self) -> List[Cluster]:
        data = self.transport.get("/clusters/list")
        return [Cluster.from_dict(c) for c in data.get("clusters") or []]

    def get_cluster(self, cluster_id: str) -> Cluster:
        return Cluster.from_dict(self.transport.get("/clusters/get", {"cluster_id": cluster_id}))

    def get_cluster_by_name(self, name: str) -> Optional[Cluster]:
        """First cluster named ``name`` in listing order, or None."""
        for cluster in self.list_clusters():
            if cluster.cluster_name == name:
                return cluster
        return None

    def start_cluster(self, cluster_id: str) -> None:
        self.transport.post("/clusters/start", {"cluster_id": cluster_id})
        self.logger.info("Started cluster", cluster_id=cluster_id)

    def terminate_cluster(self, cluster_id: str) -> None:
        # /clusters/delete terminates; the cluster config is kept
        self.transport.post("/clusters/delete", {"cluster_id": cluster_id})
        self.logger.info("Terminated cluster", cluster_id=cluster_id)
