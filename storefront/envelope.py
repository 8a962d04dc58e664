"""
Разбор конвертов ответа бэкенда.

Бэкенд отвечает либо {success, data?, count?, ...}, либо «сырым» JSON.
Конверт декодируется один раз на границе в одну из четырёх форм,
дальше по коду ходит только полезная нагрузка.

Приоритет: data > count > весь конверт > сырое тело.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class DataEnvelope:
    success: Any
    data: Any


@dataclass(frozen=True)
class CountEnvelope:
    success: Any
    count: Any


@dataclass(frozen=True)
class BareEnvelope:
    body: dict


@dataclass(frozen=True)
class RawBody:
    body: Any


Envelope = Union[DataEnvelope, CountEnvelope, BareEnvelope, RawBody]


def decode_envelope(body: Any) -> Envelope:
    # решает наличие ключа, а не его значение: {"data": null} — это data-конверт
    if not isinstance(body, dict) or "success" not in body:
        return RawBody(body)
    if "data" in body:
        return DataEnvelope(body["success"], body["data"])
    if "count" in body:
        return CountEnvelope(body["success"], body["count"])
    return BareEnvelope(body)


def payload_of(envelope: Envelope) -> Any:
    if isinstance(envelope, DataEnvelope):
        return envelope.data
    if isinstance(envelope, CountEnvelope):
        return envelope.count
    return envelope.body


def unwrap(body: Any) -> Any:
    """Тело ответа -> то, что реально нужно вызывающему"""
    return payload_of(decode_envelope(body))
