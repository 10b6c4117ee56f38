from .autolink import find_related, detect_clusters, suggest_connections, find_bridge_fossils, cluster_theme

__all__ = ["find_related", "detect_clusters", "suggest_connections", "find_bridge_fossils", "cluster_theme"]
