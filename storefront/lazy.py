from itertools import islice
from typing import Iterable, Iterator, TypeVar

T = TypeVar("T")


## первые k элементов без материализации всего списка (последние заказы/платежи на дашборде)
def take(items: Iterable[T], k: int) -> Iterator[T]:
    yield from islice(items, max(k, 0))


## лениво отдаёт заказы/платежи с указанным статусом
def iter_by_status(items: Iterable[T], status: str) -> Iterator[T]:
    for item in items:
        if getattr(item, "status", None) == status:
            yield item
