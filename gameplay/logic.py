"""
Boolean combinators shared by dialogue conditions and unlock requirements.

Both predicate families are trees whose inner nodes are AllOf/AnyOf and
whose leaves are family-specific. evaluate() walks the tree and hands
each leaf to a family-specific check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, ClassVar, Generic, Iterator, TypeVar

P = TypeVar('P')


@dataclass(frozen=True)
class AllOf(Generic[P]):
    """True when every item is true. Empty is true."""
    items: tuple[Any, ...] = ()

    type: ClassVar[str] = "and"


@dataclass(frozen=True)
class AnyOf(Generic[P]):
    """True when at least one item is true. Empty is false."""
    items: tuple[Any, ...] = ()

    type: ClassVar[str] = "or"


def all_of(*items: Any) -> AllOf:
    return AllOf(tuple(items))


def any_of(*items: Any) -> AnyOf:
    return AnyOf(tuple(items))


def evaluate(predicate: Any, check_leaf: Callable[[Any], bool]) -> bool:
    """
    Evaluate a predicate tree.

    Combinators short-circuit left to right.

    Args:
        predicate: AllOf, AnyOf or a leaf
        check_leaf: Evaluates a single leaf

    Returns:
        Truth value of the tree
    """
    if isinstance(predicate, AllOf):
        return all(evaluate(item, check_leaf) for item in predicate.items)
    if isinstance(predicate, AnyOf):
        return any(evaluate(item, check_leaf) for item in predicate.items)
    return check_leaf(predicate)


def iter_leaves(predicate: Any) -> Iterator[Any]:
    """Yield every leaf of a predicate tree in declaration order."""
    if isinstance(predicate, (AllOf, AnyOf)):
        for item in predicate.items:
            yield from iter_leaves(item)
    else:
        yield predicate


def strict_equals(left: Any, right: Any) -> bool:
    """Equality that does not conflate bool with int or int with float."""
    return type(left) is type(right) and left == right
