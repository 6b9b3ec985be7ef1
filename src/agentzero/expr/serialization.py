"""JSON encoding of expression trees.

Every node is an object with a ``"node"`` discriminator::

    {"node": "binary", "operator": "BinaryGreaterInt",
     "left": {"node": "variable", "name": "x", "kind": "local", "type": "int"},
     "right": {"node": "literal", "value": 42, "type": "int"}}

Types are primitive names (``"int"``, ``"ulong"``, ``"double"``...) or
objects: ``{"kind": "enum", "name": "Color", "underlying": "byte"}`` and
``{"kind": "other", "name": "object"}``.

``text`` may be omitted and is then rendered from the children. Operator
nodes may omit ``type``; it defaults to the operator's result type.
References with the same ``id`` (or, without ids, the same ``name`` and
``kind``) denote one declaration.
"""

from __future__ import annotations

import json
import pathlib
import typing

from agentzero.errors import ExpressionFormatError
from agentzero.expr import types as t
from agentzero.expr.ast import (
    BinaryOp,
    Constant,
    DeclaredElement,
    ElementKind,
    Expression,
    Literal,
    NodeShape,
    UnaryOp,
    Unsupported,
    VariableRef,
)
from agentzero.expr.dsl import infer_literal_type, literal_text, operand_text
from agentzero.expr.operators import (
    SIGNATURES,
    Operator,
    OperatorResolution,
    OperatorTag,
    ResolveStatus,
)
from agentzero.expr.types import SourceType, TypeKind

JsonObject = dict[str, typing.Any]

_PRIMITIVES: dict[str, SourceType] = {
    source_type.name: source_type for source_type in t.PRIMITIVE_TYPES.values()
}


# ---------------------------------------------------------------------------
# decoding
# ---------------------------------------------------------------------------


def _require(data: JsonObject, key: str, where: str) -> typing.Any:
    try:
        return data[key]
    except KeyError:
        raise ExpressionFormatError(f"{where}: missing '{key}'") from None


def type_from_json(data: typing.Any, where: str = "type") -> SourceType:
    if isinstance(data, str):
        if data in _PRIMITIVES:
            return _PRIMITIVES[data]
        if data == "object":
            return t.OBJECT
        raise ExpressionFormatError(f"{where}: unknown type '{data}'")

    if not isinstance(data, dict):
        raise ExpressionFormatError(f"{where}: expected a type name or object")
    kind = _require(data, "kind", where)
    if kind == "enum":
        underlying = type_from_json(data.get("underlying", "int"), f"{where}.underlying")
        try:
            return t.enum_type(_require(data, "name", where), underlying)
        except ValueError as e:
            raise ExpressionFormatError(f"{where}: {e}") from None
    if kind == "other":
        return SourceType(TypeKind.OTHER, data.get("name", "object"))
    return type_from_json(kind, where)


def _type_code(name: str, where: str) -> TypeKind:
    try:
        return TypeKind(name)
    except ValueError:
        raise ExpressionFormatError(f"{where}: unknown type code '{name}'") from None


def _default_type_code(source_type: SourceType) -> TypeKind:
    return source_type.underlying.kind if source_type.is_enum else source_type.kind


class ExpressionDecoder:
    """Decodes one document; declarations are shared across the whole tree."""

    def __init__(self):
        self._elements: dict[tuple, DeclaredElement] = {}

    def decode(self, data: typing.Any, where: str = "$") -> Expression:
        if not isinstance(data, dict):
            raise ExpressionFormatError(f"{where}: expected an object")
        node = _require(data, "node", where)
        match node:
            case "literal":
                return self._literal(data, where)
            case "variable":
                return self._variable(data, where)
            case "unary":
                return self._unary(data, where)
            case "binary":
                return self._binary(data, where)
            case "unsupported":
                return self._unsupported(data, where)
            case _:
                raise ExpressionFormatError(f"{where}: unknown node kind '{node}'")

    def _constant(self, data: typing.Any, source_type: SourceType, where: str) -> Constant | None:
        if data is None:
            return None
        if not isinstance(data, dict) or "value" not in data:
            raise ExpressionFormatError(f"{where}: constant needs a 'value'")
        if "type_code" in data:
            type_code = _type_code(data["type_code"], where)
        else:
            type_code = _default_type_code(source_type)
        return Constant(data["value"], type_code)

    def _literal(self, data: JsonObject, where: str) -> Literal:
        value = _require(data, "value", where)
        if "type" in data:
            source_type = type_from_json(data["type"], f"{where}.type")
        else:
            try:
                source_type = infer_literal_type(value)
            except (TypeError, ValueError) as e:
                raise ExpressionFormatError(f"{where}: {e}") from None
        if "type_code" in data:
            type_code = _type_code(data["type_code"], where)
        else:
            type_code = _default_type_code(source_type)
        text = data.get("text") or literal_text(value, source_type)
        return Literal(Constant(value, type_code), source_type, text)

    def _element(self, data: JsonObject, source_type: SourceType, where: str) -> DeclaredElement:
        name = _require(data, "name", where)
        try:
            kind = ElementKind(data.get("kind", "local"))
        except ValueError:
            raise ExpressionFormatError(f"{where}: unknown element kind '{data['kind']}'") from None

        key = ("id", data["id"]) if "id" in data else (name, kind)
        element = self._elements.get(key)
        if element is None:
            element = DeclaredElement(name, kind, source_type)
            self._elements[key] = element
        elif element.type != source_type or element.name != name:
            raise ExpressionFormatError(
                f"{where}: declaration {key!r} used as both "
                f"{element.name}: {element.type} and {name}: {source_type}"
            )
        return element

    def _variable(self, data: JsonObject, where: str) -> VariableRef:
        source_type = type_from_json(_require(data, "type", where), f"{where}.type")
        constant = self._constant(data.get("constant"), source_type, f"{where}.constant")
        if data.get("resolved", True):
            element = self._element(data, source_type, where)
            text = data.get("text") or element.name
        else:
            element = None
            text = _require(data, "text", where)
        return VariableRef(element, source_type, text, constant)

    def _operator(self, data: typing.Any, where: str) -> OperatorResolution:
        if isinstance(data, str):
            try:
                return OperatorResolution.resolved(OperatorTag(data))
            except ValueError:
                raise ExpressionFormatError(f"{where}: unknown operator '{data}'") from None
        if not isinstance(data, dict):
            raise ExpressionFormatError(f"{where}: expected an operator name or object")

        try:
            status = ResolveStatus(data.get("status", "ok"))
        except ValueError:
            raise ExpressionFormatError(f"{where}: unknown status '{data['status']}'") from None
        if status is not ResolveStatus.OK:
            return OperatorResolution.failed(status)

        name = _require(data, "name", where)
        tag = None
        try:
            tag = OperatorTag(name)
        except ValueError:
            pass
        if "return_type" in data:
            return_type = type_from_json(data["return_type"], f"{where}.return_type")
        elif tag is not None:
            return_type = SIGNATURES[tag].result
        else:
            raise ExpressionFormatError(f"{where}: operator '{name}' needs a 'return_type'")
        predefined = bool(data.get("predefined", True))
        operator = Operator(name, return_type, tag if predefined else None, predefined)
        return OperatorResolution(ResolveStatus.OK, operator)

    def _operator_type(
        self, data: JsonObject, resolution: OperatorResolution, where: str
    ) -> SourceType:
        if "type" in data:
            return type_from_json(data["type"], f"{where}.type")
        if resolution.operator is not None:
            return resolution.operator.return_type
        raise ExpressionFormatError(f"{where}: unresolved operator node needs a 'type'")

    @staticmethod
    def _token(resolution: OperatorResolution, data: JsonObject) -> str:
        operator = resolution.operator
        if operator is not None and operator.tag is not None:
            return SIGNATURES[operator.tag].token
        return data.get("token", "?")

    def _unary(self, data: JsonObject, where: str) -> UnaryOp:
        resolution = self._operator(_require(data, "operator", where), f"{where}.operator")
        operand = self.decode(_require(data, "operand", where), f"{where}.operand")
        source_type = self._operator_type(data, resolution, where)
        text = data.get("text") or f"{self._token(resolution, data)}{operand_text(operand)}"
        constant = self._constant(data.get("constant"), source_type, f"{where}.constant")
        return UnaryOp(resolution, operand, source_type, text, constant)

    def _binary(self, data: JsonObject, where: str) -> BinaryOp:
        resolution = self._operator(_require(data, "operator", where), f"{where}.operator")
        left = self.decode(_require(data, "left", where), f"{where}.left")
        right = self.decode(_require(data, "right", where), f"{where}.right")
        source_type = self._operator_type(data, resolution, where)
        token = self._token(resolution, data)
        text = data.get("text") or f"{operand_text(left)} {token} {operand_text(right)}"
        constant = self._constant(data.get("constant"), source_type, f"{where}.constant")
        return BinaryOp(resolution, left, right, source_type, text, constant)

    def _unsupported(self, data: JsonObject, where: str) -> Unsupported:
        try:
            shape = NodeShape(data.get("shape", "other"))
        except ValueError:
            raise ExpressionFormatError(f"{where}: unknown shape '{data['shape']}'") from None
        source_type = type_from_json(_require(data, "type", where), f"{where}.type")
        children = tuple(
            self.decode(child, f"{where}.children[{index}]")
            for index, child in enumerate(data.get("children", ()))
        )
        constant = self._constant(data.get("constant"), source_type, f"{where}.constant")
        return Unsupported(shape, source_type, _require(data, "text", where), children, constant)


def expression_from_dict(data: typing.Any) -> Expression:
    """Decode a tree from parsed JSON.

    Raises:
        ExpressionFormatError: The data does not describe a valid tree.
    """
    return ExpressionDecoder().decode(data)


def loads_expression(text: str) -> Expression:
    try:
        data = json.loads(text)
        return expression_from_dict(data)
    except json.JSONDecodeError as e:
        raise ExpressionFormatError(f"invalid JSON: {e}") from e
    except RecursionError:
        raise ExpressionFormatError("expression tree is nested too deeply") from None


def load_expression(path: pathlib.Path | str) -> Expression:
    """Read a tree from a JSON file."""
    with pathlib.Path(path).open("r", encoding="utf-8") as fp:
        return loads_expression(fp.read())


# ---------------------------------------------------------------------------
# encoding
# ---------------------------------------------------------------------------


def type_to_json(source_type: SourceType) -> typing.Any:
    if source_type.is_enum:
        return {
            "kind": "enum",
            "name": source_type.name,
            "underlying": type_to_json(source_type.underlying),
        }
    if source_type.kind is TypeKind.OTHER:
        return {"kind": "other", "name": source_type.name}
    return source_type.name


def _constant_to_json(constant: Constant) -> JsonObject:
    return {"value": constant.value, "type_code": constant.type_code.value}


def _operator_to_json(resolution: OperatorResolution) -> typing.Any:
    operator = resolution.operator
    if resolution.status is not ResolveStatus.OK or operator is None:
        return {"status": resolution.status.value}
    if operator.tag is not None and operator.is_predefined and operator.name == operator.tag.value:
        return operator.name
    return {
        "name": operator.name,
        "return_type": type_to_json(operator.return_type),
        "predefined": operator.is_predefined,
    }


def expression_to_dict(node: Expression) -> JsonObject:
    """Encode *node*; the result round-trips through :func:`expression_from_dict`."""
    match node:
        case Literal(constant=constant, type=source_type, text=text):
            return {
                "node": "literal",
                "value": constant.value,
                "type": type_to_json(source_type),
                "type_code": constant.type_code.value,
                "text": text,
            }
        case VariableRef(element=element, type=source_type, text=text, constant=constant):
            data: JsonObject = {"node": "variable", "type": type_to_json(source_type), "text": text}
            if element is None:
                data["resolved"] = False
            else:
                data.update(name=element.name, kind=element.kind.value, id=element.element_id)
            if constant is not None:
                data["constant"] = _constant_to_json(constant)
            return data
        case UnaryOp(operator=resolution, operand=operand, type=source_type, text=text, constant=constant):
            data = {
                "node": "unary",
                "operator": _operator_to_json(resolution),
                "operand": expression_to_dict(operand),
                "type": type_to_json(source_type),
                "text": text,
            }
            if constant is not None:
                data["constant"] = _constant_to_json(constant)
            return data
        case BinaryOp(operator=resolution, left=left, right=right, type=source_type, text=text, constant=constant):
            data = {
                "node": "binary",
                "operator": _operator_to_json(resolution),
                "left": expression_to_dict(left),
                "right": expression_to_dict(right),
                "type": type_to_json(source_type),
                "text": text,
            }
            if constant is not None:
                data["constant"] = _constant_to_json(constant)
            return data
        case Unsupported(shape=shape, type=source_type, text=text, children=kids, constant=constant):
            data = {
                "node": "unsupported",
                "shape": shape.value,
                "type": type_to_json(source_type),
                "text": text,
                "children": [expression_to_dict(child) for child in kids],
            }
            if constant is not None:
                data["constant"] = _constant_to_json(constant)
            return data
        case _:
            raise TypeError(f"not an expression node: {node!r}")


def dump_expression(node: Expression, path: pathlib.Path | str) -> None:
    with pathlib.Path(path).open("w", encoding="utf-8") as fp:
        json.dump(expression_to_dict(node), fp, indent=2)
