"""
Locations — Tree Builder

Turns the flat location list into the nested, alphabetically sorted
forest used by the directory pages and the admin location picker.
Pure functions: inputs are never mutated.

@file locations/tree.py
"""

import locale
from typing import Iterable, Mapping


def _sort_key(node: Mapping) -> tuple[str, str]:
    name = node.get('name') or ''
    return locale.strxfrm(name.casefold()), name


def _sort_children(nodes: list[dict]) -> None:
    nodes.sort(key=_sort_key)
    for node in nodes:
        if node['children']:
            _sort_children(node['children'])


def build_location_tree(nodes: Iterable[Mapping]) -> list[dict]:
    """
    Attach every node to its parent and return the roots.

    A node whose parent_id is missing, or points at a node that is not
    in ``nodes``, becomes a root. Children are sorted by name at every
    depth.
    """
    by_id: dict[str, dict] = {}
    ordered: list[dict] = []
    for node in nodes:
        copy = {key: value for key, value in node.items() if key != 'children'}
        copy['children'] = []
        by_id[str(node['id'])] = copy
        ordered.append(copy)

    roots: list[dict] = []
    for node in ordered:
        parent_id = node.get('parent_id')
        parent = by_id.get(str(parent_id)) if parent_id else None
        if parent is not None and parent is not node:
            parent['children'].append(node)
        else:
            roots.append(node)

    _sort_children(roots)
    return roots


def flatten_tree(roots: Iterable[Mapping]) -> list[dict]:
    """Pre-order walk returning node mappings without their children."""
    flat: list[dict] = []
    stack = list(reversed(list(roots)))
    while stack:
        node = stack.pop()
        flat.append({key: value for key, value in node.items() if key != 'children'})
        stack.extend(reversed(node.get('children') or []))
    return flat
