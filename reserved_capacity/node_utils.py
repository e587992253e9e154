"""
Node helpers
"""

from typing import Dict, Optional

from kubernetes import client


def is_ready_and_schedulable(node: client.V1Node) -> bool:
    """Node has a True Ready condition and is not cordoned"""
    if node.spec and node.spec.unschedulable:
        return False

    conditions = (node.status.conditions if node.status else None) or []
    for condition in conditions:
        if condition.type == "Ready":
            return condition.status == "True"
    return False


def format_label_selector(node_selector: Optional[Dict[str, str]]) -> Optional[str]:
    """Render {'a': 'b'} as 'a=b'; empty selects everything"""
    if not node_selector:
        return None
    return ",".join(f"{key}={value}" for key, value in sorted(node_selector.items()))
