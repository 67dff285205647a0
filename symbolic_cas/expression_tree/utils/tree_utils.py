"""
Tree Utility Functions

Traversal, path and resource-limit helpers for expression trees. Trees carry
no parent pointers, so anything that needs the enclosing context works with
explicit index paths from the root.
"""

from collections import deque
from typing import Callable, List, Optional, Tuple

from ..core.node import ExpressionNode
from ...config import ResourceLimits, DEFAULT_LIMITS
from ...errors import ResourceExceededError

Path = Tuple[int, ...]


def get_all_nodes(node: ExpressionNode, traversal_order: str = 'breadth_first') -> List[ExpressionNode]:
    """
    Get all nodes in the tree using specified traversal order.

    Args:
        node: Root node of the tree
        traversal_order: 'breadth_first' (default) or 'depth_first'

    Returns:
        List of all nodes in the tree
    """
    if traversal_order == 'breadth_first':
        return _breadth_first_traversal(node)
    elif traversal_order == 'depth_first':
        return list(node.walk())
    else:
        raise ValueError(f"Invalid traversal_order: {traversal_order}")


def _breadth_first_traversal(node: ExpressionNode) -> List[ExpressionNode]:
    """Breadth-first traversal (iterative, non-recursive)"""
    nodes_to_visit = deque([node])
    all_nodes = []

    while nodes_to_visit:
        current_node = nodes_to_visit.popleft()
        all_nodes.append(current_node)
        nodes_to_visit.extend(current_node.children)

    return all_nodes


def calculate_tree_depth(node: ExpressionNode) -> int:
    """
    Calculate the maximum depth of the tree.

    Returns:
        Maximum depth (leaf nodes have depth 1)
    """
    return node.depth()


def find_nodes(node: ExpressionNode, predicate: Callable[[ExpressionNode], bool]) -> List[ExpressionNode]:
    """Pre-order list of the nodes matching ``predicate``"""
    return [n for n in node.walk() if predicate(n)]


def find_nodes_by_operator(node: ExpressionNode, operator: str) -> List[ExpressionNode]:
    """
    Find all operator nodes with a specific operator symbol.

    Args:
        node: Root node of the tree
        operator: One of '+', '-', '*', '/', '^'

    Returns:
        List of nodes with the specified operator
    """
    return find_nodes(node, lambda n: n.is_operator(operator))


def get_node_path(root: ExpressionNode, target: ExpressionNode) -> Optional[Path]:
    """
    Locate the first node structurally equal to ``target``.

    Returns:
        Tuple of child indices leading from ``root`` to the match, or None
    """
    stack: List[Tuple[ExpressionNode, Path]] = [(root, ())]
    while stack:
        current_node, path = stack.pop()
        if current_node == target:
            return path
        for index in range(len(current_node.children) - 1, -1, -1):
            stack.append((current_node.children[index], path + (index,)))
    return None


def node_at_path(root: ExpressionNode, path: Path) -> ExpressionNode:
    current_node = root
    for index in path:
        current_node = current_node.operand_at(index)
    return current_node


def enclosing_nodes(root: ExpressionNode, path: Path) -> List[ExpressionNode]:
    """Ancestors of the node at ``path``, outermost first"""
    ancestors = []
    current_node = root
    for index in path:
        ancestors.append(current_node)
        current_node = current_node.operand_at(index)
    return ancestors


def replace_at_path(root: ExpressionNode, path: Path, replacement: ExpressionNode) -> ExpressionNode:
    """
    Replace the node at ``path`` with a deep copy of ``replacement``.

    Returns:
        The (possibly new) root of the tree
    """
    if not path:
        return replacement.copy()
    parent = node_at_path(root, path[:-1])
    parent.operand_at(path[-1])
    parent.children[path[-1]] = replacement.copy()
    return root


def check_limits(node: ExpressionNode, limits: ResourceLimits = DEFAULT_LIMITS, what: str = 'expression'):
    """
    Raise ResourceExceededError when a tree is deeper or larger than allowed.

    Both measures are computed iteratively so the check itself cannot
    overflow the interpreter stack.
    """
    size = 0
    depth = 0
    stack = [(node, 1)]
    while stack:
        current_node, level = stack.pop()
        size += 1
        if level > depth:
            depth = level
        if depth > limits.max_depth:
            raise ResourceExceededError(f"{what} depth", limits.max_depth)
        if size > limits.max_nodes:
            raise ResourceExceededError(f"{what} size", limits.max_nodes)
        for child in current_node.children:
            stack.append((child, level + 1))
