"""
Контракт снапшота группы (JSON Schema)

Слой хранения передаёт группу движку пересчёта как JSON-совместимый dict:
группа + cost pool + заказы + позиции. Форма документа зафиксирована в
schema/group_snapshot.json (package data) и проверяется до построения
pydantic моделей, поэтому ошибки формы сообщаются по пути в документе
(orders/0/items/1/quantity), а не по полям моделей.

Связи между частями документа (group_id заказа, уникальность id) JSON Schema
не выражает: их проверяет модель Group.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Final

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

GROUP_SNAPSHOT_SCHEMA: Final[Path] = Path(__file__).parent / "schema" / "group_snapshot.json"


@lru_cache(maxsize=1)
def group_snapshot_validator() -> Draft202012Validator:
    """Валидатор контракта; схема читается и проходит meta-validation один раз."""
    with open(GROUP_SNAPSHOT_SCHEMA, "r", encoding="utf-8") as f:
        schema = json.load(f)
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def validate_group_snapshot(data: Dict[str, Any]) -> None:
    """
    Валидация снапшота группы.

    Args:
        data: Снапшот (dict из JSON)

    Raises:
        jsonschema.ValidationError: Наиболее релевантное нарушение (best_match)
    """
    error = best_match(group_snapshot_validator().iter_errors(data))
    if error is not None:
        raise error
