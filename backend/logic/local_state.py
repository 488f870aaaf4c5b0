from typing import Any, List, TypeVar

T = TypeVar("T")


def _id(item: Any) -> Any:
    return item.get("id") if isinstance(item, dict) else getattr(item, "id", None)


def prepend(items: List[T], created: T) -> List[T]:
    return [created] + list(items)


def replace(items: List[T], updated: T) -> List[T]:
    uid = _id(updated)
    return [updated if _id(i) == uid else i for i in items]


def remove(items: List[T], item_id: Any) -> List[T]:
    return [i for i in items if _id(i) != item_id]
