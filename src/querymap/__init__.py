"""Bidirectional parse/serialize combinators for multi-valued query parameters."""

from querymap.combinators import (
    AlternativeParam,
    ArrayParam,
    BooleanParam,
    ConstantParam,
    DefaultParam,
    EnumParam,
    IntegerParam,
    NumberParam,
    ObjectParam,
    OptionalParam,
    RawParam,
    StringParam,
    TaggedUnionParam,
    alternative,
    array,
    constant,
    format_number,
    make_enum,
    object_param,
    optional,
    tagged_union,
    with_default,
)
from querymap.context import ParamContext, PartialResult
from querymap.errors import ErrorKind, MappingConfigError, ParamParseError
from querymap.mapping import (
    BoundParam,
    MappedParam,
    ParamMapping,
    PureParam,
    bind_param,
    map_param,
    pure,
)
from querymap.params import QueryParams
from querymap.result import (
    Failure,
    Result,
    Success,
    Warned,
    error,
    expect_data,
    success,
    warning,
)
from querymap.runner import format_query, parse_query, run_parse, run_serialize
from querymap.schema import mapping_from_json, mapping_to_json

__all__ = [
    "AlternativeParam",
    "ArrayParam",
    "BooleanParam",
    "BoundParam",
    "ConstantParam",
    "DefaultParam",
    "EnumParam",
    "ErrorKind",
    "Failure",
    "IntegerParam",
    "MappedParam",
    "MappingConfigError",
    "NumberParam",
    "ObjectParam",
    "OptionalParam",
    "ParamContext",
    "ParamMapping",
    "ParamParseError",
    "PartialResult",
    "PureParam",
    "QueryParams",
    "RawParam",
    "Result",
    "StringParam",
    "Success",
    "TaggedUnionParam",
    "Warned",
    "alternative",
    "array",
    "bind_param",
    "constant",
    "error",
    "expect_data",
    "format_number",
    "format_query",
    "make_enum",
    "map_param",
    "mapping_from_json",
    "mapping_to_json",
    "object_param",
    "optional",
    "parse_query",
    "pure",
    "run_parse",
    "run_serialize",
    "success",
    "tagged_union",
    "warning",
    "with_default",
]
