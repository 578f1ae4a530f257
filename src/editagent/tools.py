# editagent: Tool base class with reflective parameter schemas, and the per-session ToolRegistry.
# Each tool declares a typed `run` method; the JSON Schema, validation and argument coercion are derived from it.

import inspect
import types
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union, get_type_hints

from .context import Context
from .errors import InvalidParametersError, ToolExecutionError, UnknownToolError
from .models import ToolSpec

ERROR_PREFIX = "Error: "


def is_error_result(text: str) -> bool:
    """True when a tool result carries the error marker."""
    return text.startswith(ERROR_PREFIX)


# -----------------------------
# Reflection utilities
# -----------------------------

_type_map = {
    str: {"type": "string"},
    int: {"type": "integer"},
    bool: {"type": "boolean"},
    float: {"type": "number"},
}


def _unwrap_optional(ann: Any) -> Any:
    """Return T for Optional[T] / T | None, otherwise ann unchanged."""
    origin = getattr(ann, "__origin__", None)
    if origin is Union or isinstance(ann, types.UnionType):
        args = [a for a in ann.__args__ if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return ann


def _json_schema_for_annotation(ann: Any) -> Dict[str, Any]:
    """Map a Python annotation to a simple JSON Schema snippet."""
    return dict(_type_map.get(_unwrap_optional(ann), {"type": "string"}))


def _merge_schema(base: Dict[str, Any], override: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """Shallow-merge override fields into base JSON Schema for a parameter."""
    if not override:
        return base
    out = dict(base)
    out.update({k: v for k, v in override.items() if v is not None})
    return out


def _run_parameters(fn: Callable) -> List[inspect.Parameter]:
    # Skip first param (self)
    return list(inspect.signature(fn).parameters.values())[1:]


def _build_parameters_schema(fn: Callable, overrides: Optional[Mapping[str, Mapping[str, Any]]] = None) -> Dict[str, Any]:
    hints = get_type_hints(fn)
    props: Dict[str, Any] = {}
    required: List[str] = []
    for p in _run_parameters(fn):
        base = _json_schema_for_annotation(hints.get(p.name, str))
        props[p.name] = _merge_schema(base, (overrides or {}).get(p.name))
        if p.default is inspect.Parameter.empty:
            required.append(p.name)
    return {
        "type": "object",
        "properties": props,
        "required": required,
        "additionalProperties": False,
    }


def _matches_type(val: Any, ann: Any) -> bool:
    ann = _unwrap_optional(ann)
    if ann is bool:
        return isinstance(val, bool)
    if ann is int:
        return isinstance(val, int) and not isinstance(val, bool)
    if ann is float:
        return isinstance(val, (int, float)) and not isinstance(val, bool)
    if ann is str:
        return isinstance(val, str)
    return True


_json_type_names = {str: "a string", int: "an integer", bool: "a boolean", float: "a number"}


# -----------------------------
# Tool base class
# -----------------------------


class Tool:
    """
    A named, schema-described unit of local execution.

    Subclasses set `name` and `description` and implement `run(self, <typed params>) -> str`.
    Parameters without a default are required; required string parameters must be
    non-empty unless listed in `empty_allowed`.

    `execute` never raises for runtime conditions: validation failures,
    ToolExecutionError, OSError and anything unexpected come back as text
    starting with ERROR_PREFIX.
    """

    name: str = ""
    description: str = ""
    param_overrides: Mapping[str, Mapping[str, Any]] = types.MappingProxyType({})
    empty_allowed: Sequence[str] = ()

    def __init__(self, ctx: Optional[Context] = None) -> None:
        self.ctx = ctx or Context()

    def run(self, **kwargs: Any) -> str:
        raise NotImplementedError

    def parameter_schema(self) -> Dict[str, Any]:
        return _build_parameters_schema(type(self).run, overrides=self.param_overrides)

    def spec(self) -> ToolSpec:
        return ToolSpec(name=self.name, description=self.description, parameter_schema=self.parameter_schema())

    def validate(self, parameters: Optional[Dict[str, Any]]) -> None:
        """Raise InvalidParametersError when parameters do not fit the run signature. No side effects."""
        if parameters is None:
            raise InvalidParametersError("Parameters cannot be null")
        if not isinstance(parameters, dict):
            raise InvalidParametersError("Parameters must be an object")
        hints = get_type_hints(type(self).run)
        for p in _run_parameters(type(self).run):
            ann = hints.get(p.name, str)
            required = p.default is inspect.Parameter.empty
            if p.name not in parameters or parameters[p.name] is None:
                if required:
                    raise InvalidParametersError(f"'{p.name}' parameter is required")
                continue
            val = parameters[p.name]
            if not _matches_type(val, ann):
                expected = _json_type_names.get(_unwrap_optional(ann), "a string")
                raise InvalidParametersError(f"Parameter '{p.name}' must be {expected}")
            if required and isinstance(val, str) and not val.strip() and p.name not in self.empty_allowed:
                raise InvalidParametersError(f"'{p.name}' parameter is required and cannot be empty")

    def execute(self, parameters: Optional[Dict[str, Any]]) -> str:
        self.ctx.log(f"Executing {self.name} with parameters: {parameters}")
        try:
            self.validate(parameters)
        except InvalidParametersError as e:
            return f"{ERROR_PREFIX}{e}"
        known = {p.name for p in _run_parameters(type(self).run)}
        kwargs = {k: v for k, v in parameters.items() if k in known and v is not None}
        try:
            return self.run(**kwargs)
        except (InvalidParametersError, ToolExecutionError) as e:
            return f"{ERROR_PREFIX}{e}"
        except PermissionError as e:
            return f"{ERROR_PREFIX}Permission denied - {e}"
        except OSError as e:
            return f"{ERROR_PREFIX}{e}"
        except Exception as e:
            self.ctx.error_message(f"unexpected failure in {self.name}: {e}")
            return f"{ERROR_PREFIX}Unexpected error in {self.name}: {e}"


# -----------------------------
# Registry
# -----------------------------


class ToolRegistry:
    """
    Name -> Tool lookup owned by whoever builds a conversation.

    Registering a name twice replaces the earlier tool. Instances are independent,
    so two conversations in one process can expose different tool sets.
    """

    def __init__(self, tools: Optional[Sequence[Tool]] = None) -> None:
        self._tools: Dict[str, Tool] = {}
        for t in tools or ():
            self.register(t)

    def register(self, tool: Tool) -> None:
        if not tool.name or not tool.name.strip():
            raise ValueError("tool name must be non-empty")
        self._tools[tool.name] = tool

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def tool_names(self) -> List[str]:
        return sorted(self._tools)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def describe_all(self) -> List[ToolSpec]:
        """ToolSpecs for every registered tool, sorted by name."""
        return [self._tools[n].spec() for n in self.tool_names()]

    def invoke(self, name: str, parameters: Optional[Dict[str, Any]]) -> str:
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownToolError(name)
        return tool.execute(parameters if parameters is not None else {})


def default_registry(
    ctx: Optional[Context] = None,
    test_command: Optional[Sequence[str]] = None,
    test_timeout_sec: Optional[float] = None,
) -> ToolRegistry:
    """Registry with the four built-in tools: read_file, list_files, edit_file, run_tests."""
    from .exec_tools import RunTestsTool
    from .file_tools import EditFileTool, ListFilesTool, ReadFileTool

    run_tests = RunTestsTool(ctx, command=test_command)
    if test_timeout_sec is not None:
        run_tests.timeout_sec = float(test_timeout_sec)
    return ToolRegistry([ReadFileTool(ctx), ListFilesTool(ctx), EditFileTool(ctx), run_tests])
