"""Naming conventions that decide what counts as a component or a hook."""
from typing import AbstractSet, Optional


def is_hook_name(name: Optional[str]) -> bool:
    """``use`` followed by an uppercase letter, e.g. ``useState``.

    ``use`` alone and ``user`` are not hooks.
    """
    if not name or len(name) <= 3 or not name.startswith('use'):
        return False
    return name[3].isupper()


def is_component_name(name: Optional[str]) -> bool:
    """Components are capitalized: ``Button``, ``UserForm``."""
    return bool(name) and name[0].isupper()


def is_ignored(name: str, ignored_hooks: AbstractSet[str]) -> bool:
    return name in ignored_hooks


def should_wrap_hook(name: Optional[str], ignored_hooks: AbstractSet[str]) -> bool:
    """Single predicate for "is this call rewritten".

    The runtime's own initializer is part of ``ignored_hooks`` (see
    ``TransformOptions``), so it never reaches the rewriter.
    """
    return is_hook_name(name) and not is_ignored(name, ignored_hooks)
