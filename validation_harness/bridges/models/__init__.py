from .cluster_state import ClusterState as ClusterState
