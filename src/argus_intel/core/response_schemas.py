"""
Response contracts for the content generation service.

Each analysis family is declared once, as a pydantic model in ``schemas``.
This module derives the Gemini ``response_schema`` (the OpenAPI subset the
API accepts) from that model, so the structural contract sent with a request
and the validator applied to its response cannot drift apart.

A field is listed as required when the model has no default for it, and is
marked ``nullable`` when its annotation admits ``None``. Required-but-nullable
fields (e.g. ``sslCertificate``) are therefore both.
"""

import types
from enum import Enum
from typing import Any, Dict, List, Literal, Type, Union, get_args, get_origin

from pydantic import BaseModel
from pydantic.fields import FieldInfo

from .schemas import EmailRecord, NetworkRecord, ReliabilityReview, WhoisRecord

_PRIMITIVES: Dict[type, str] = {
    str: "STRING",
    int: "INTEGER",
    float: "NUMBER",
    bool: "BOOLEAN",
}


def _unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        nullable = len(args) != len(get_args(annotation))
        if len(args) == 1:
            return args[0], nullable
        raise TypeError(f"Unsupported union in response schema: {annotation!r}")
    return annotation, False


def _schema_for_annotation(annotation: Any) -> Dict[str, Any]:
    annotation, nullable = _unwrap_optional(annotation)
    origin = get_origin(annotation)

    if isinstance(annotation, type) and issubclass(annotation, BaseModel):
        schema = build_response_schema(annotation)
    elif origin in (list, List):
        (item,) = get_args(annotation)
        schema = {"type": "ARRAY", "items": _schema_for_annotation(item)}
    elif origin is Literal:
        schema = {
            "type": "STRING",
            "format": "enum",
            "enum": [str(v) for v in get_args(annotation)],
        }
    elif isinstance(annotation, type) and issubclass(annotation, Enum):
        schema = {
            "type": "STRING",
            "format": "enum",
            "enum": [member.value for member in annotation],
        }
    elif annotation in _PRIMITIVES:
        schema = {"type": _PRIMITIVES[annotation]}
    else:
        raise TypeError(f"Unsupported type in response schema: {annotation!r}")

    if nullable:
        schema["nullable"] = True
    return schema


def _schema_for_field(field: FieldInfo) -> Dict[str, Any]:
    schema = _schema_for_annotation(field.annotation)
    extra = field.json_schema_extra if isinstance(field.json_schema_extra, dict) else {}
    if "wire_enum" in extra:
        schema["enum"] = list(extra["wire_enum"])
    if field.description:
        schema["description"] = field.description
    return schema


def build_response_schema(model: Type[BaseModel]) -> Dict[str, Any]:
    """
    Builds a Gemini response schema for a pydantic model.

    Args:
        model (Type[BaseModel]): The model describing one analysis family.

    Returns:
        Dict[str, Any]: An ``OBJECT`` schema keyed by the model's wire aliases.
    """
    properties: Dict[str, Any] = {}
    required: List[str] = []
    for name, field in model.model_fields.items():
        wire_name = field.alias or name
        properties[wire_name] = _schema_for_field(field)
        if field.is_required():
            required.append(wire_name)
    schema: Dict[str, Any] = {"type": "OBJECT", "properties": properties}
    if required:
        schema["required"] = required
    return schema


class ResponseContract:
    """Pairs a wire schema with the model that validates responses against it."""

    def __init__(self, name: str, model: Type[BaseModel]):
        self.name = name
        self.model = model
        self.schema = build_response_schema(model)

    def validate_payload(self, payload: Any) -> BaseModel:
        return self.model.model_validate(payload)

    def __repr__(self) -> str:
        return f"ResponseContract(name={self.name!r}, model={self.model.__name__})"


WHOIS_CONTRACT = ResponseContract("whois", WhoisRecord)
NETWORK_CONTRACT = ResponseContract("network", NetworkRecord)
EMAIL_CONTRACT = ResponseContract("email", EmailRecord)
RELIABILITY_CONTRACT = ResponseContract("reliability", ReliabilityReview)

CONTRACTS: Dict[str, ResponseContract] = {
    contract.name: contract
    for contract in (
        WHOIS_CONTRACT,
        NETWORK_CONTRACT,
        EMAIL_CONTRACT,
        RELIABILITY_CONTRACT,
    )
}
