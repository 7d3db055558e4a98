"""Base infrastructure for workflow nodes.

This module defines the declarative node description (properties with
defaults and display conditions), the per-item result types, the reducer
that assembles the output list, and the base class every node extends.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Union

from stepfun_nodes.errors import NodeApiError, NodeError, NodeOperationError
from stepfun_nodes.models import Item

logger = logging.getLogger(__name__)

# Error kinds reported on failed items
KIND_VALIDATION = "validation"
KIND_API = "api"

# Node registry
_registered_nodes: Dict[str, type] = {}


def register_node(name: str):
    """Decorator to register a node type.

    Args:
        name: The name of the node to register.
    """
    def decorator(cls):
        _registered_nodes[name] = cls
        logger.debug(f"Registered node: {name}")
        return cls
    return decorator


def get_node_class(name: str) -> type:
    """Return the node class registered under ``name``."""
    try:
        return _registered_nodes[name]
    except KeyError:
        raise ValueError(
            f"Unknown node type: {name}. Registered: "
            f"{', '.join(sorted(_registered_nodes))}"
        )


def list_nodes() -> List[str]:
    return sorted(_registered_nodes)


@dataclass
class NodeProperty:
    """One user-configurable node parameter.

    Attributes:
        name: Parameter name
        display_name: Label shown to users
        type: One of string, options, number
        default: Value used when the parameter is not set
        required: Whether an empty value is rejected
        options: Allowed (label, value) pairs for fixed option lists
        show: Display conditions, parameter name -> accepted values
        load_options_method: Name of the method loading options on demand
        min_value: Lower bound for numbers
        max_value: Upper bound for numbers
        precision: Decimal places numbers are rounded to
    """
    name: str
    display_name: str
    type: str = "string"
    default: Any = ""
    required: bool = False
    description: str = ""
    placeholder: str = ""
    options: List[tuple] = field(default_factory=list)
    show: Dict[str, List[Any]] = field(default_factory=dict)
    load_options_method: Optional[str] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    precision: Optional[int] = None

    def option_values(self) -> List[Any]:
        return [value for _, value in self.options]


@dataclass
class NodeDescription:
    """Registration metadata of a node."""
    name: str
    display_name: str
    description: str
    properties: List[NodeProperty]
    credentials: List[str] = field(default_factory=list)
    defaults: Dict[str, Any] = field(default_factory=dict)
    documentation_url: str = ""
    aliases: List[str] = field(default_factory=list)
    version: int = 1

    def get_property(self, name: str) -> NodeProperty:
        for prop in self.properties:
            if prop.name == name:
                return prop
        raise KeyError(f"Node {self.name} has no parameter {name}")


def visible_properties(
    properties: Iterable[NodeProperty],
    values: Dict[str, Any]
) -> List[NodeProperty]:
    """Return the properties relevant for the given parameter values.

    A property is relevant when every display condition matches the value
    of the referenced parameter, falling back to that parameter's default.

    Args:
        properties: All properties of a node
        values: Parameter values chosen by the user

    Returns:
        List[NodeProperty]: Properties that apply to the chosen mode
    """
    properties = list(properties)
    defaults = {prop.name: prop.default for prop in properties}
    visible = []
    for prop in properties:
        matches = all(
            values.get(key, defaults.get(key)) in accepted
            for key, accepted in prop.show.items()
        )
        if matches:
            visible.append(prop)
    return visible


def resolve_parameters(
    properties: Iterable[NodeProperty],
    values: Dict[str, Any]
) -> Dict[str, Any]:
    """Return the relevant parameters with defaults filled in."""
    return {
        prop.name: values.get(prop.name, prop.default)
        for prop in visible_properties(properties, values)
    }


@dataclass
class ItemSuccess:
    index: int
    item: Item


@dataclass
class ItemFailure:
    """Failure of a single item.

    Attributes:
        index: Index of the failing input item
        kind: KIND_VALIDATION or KIND_API
        payload: Error details forwarded to the user
        error: The exception to raise when the run aborts
    """
    index: int
    kind: str
    payload: Dict[str, Any]
    error: NodeError

    def to_item(self) -> Item:
        return Item(
            json={
                "error": str(self.error),
                "errorKind": self.kind,
                "details": self.payload,
            },
            paired_item=self.index,
        )


ItemResult = Union[ItemSuccess, ItemFailure]


def collect_results(
    results: Iterable[ItemResult],
    continue_on_fail: bool = False
) -> List[Item]:
    """Assemble the output items of a run.

    Results are consumed in order. Without continue-on-fail the first
    failure is raised and no further result is pulled from ``results``;
    with it every failure becomes an error item paired to its input.

    Raises:
        NodeError: The error of the first failing item.
    """
    output = []
    for result in results:
        if isinstance(result, ItemFailure):
            if not continue_on_fail:
                logger.error(
                    f"Item {result.index} failed ({result.kind}): "
                    f"{result.error}"
                )
                raise result.error
            logger.warning(
                f"Item {result.index} failed ({result.kind}), "
                f"continuing: {result.error}"
            )
            output.append(result.to_item())
        else:
            output.append(result.item)
    return output


class BaseNode(ABC):
    """Base class for workflow nodes.

    Subclasses provide a ``description`` and implement ``execute_item``,
    which turns one input item into one output item. Options loaded on
    demand are exposed through ``load_options_methods``.
    """

    description: NodeDescription
    load_options_methods: Dict[str, str] = {}

    def __init__(self):
        logger.info(f"Initializing {self.__class__.__name__}")

    def get_parameter(self, host, name: str, item_index: int) -> Any:
        """Resolve a parameter for one item and check it against its
        property definition.

        Raises:
            NodeOperationError: If the value does not satisfy the property.
        """
        prop = self.description.get_property(name)
        value = host.get_node_parameter(name, item_index, prop.default)
        if prop.type == "number":
            return self._coerce_number(prop, value, item_index)
        if prop.type == "options" and prop.options:
            if value not in prop.option_values():
                raise NodeOperationError(
                    f"Invalid value for {prop.display_name}: {value!r}. "
                    f"Must be one of: {prop.option_values()}",
                    item_index
                )
        if prop.required and (value is None or value == ""):
            raise NodeOperationError(
                f"{prop.display_name} is required", item_index
            )
        return value

    @staticmethod
    def _coerce_number(prop: NodeProperty, value: Any,
                       item_index: int) -> Optional[float]:
        if value is None or value == "":
            if prop.required:
                raise NodeOperationError(
                    f"{prop.display_name} is required", item_index
                )
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise NodeOperationError(
                f"{prop.display_name} must be a number, got {value!r}",
                item_index
            )
        if prop.precision is not None:
            number = round(number, prop.precision)
        if prop.min_value is not None and number < prop.min_value:
            raise NodeOperationError(
                f"{prop.display_name} must be at least {prop.min_value}",
                item_index
            )
        if prop.max_value is not None and number > prop.max_value:
            raise NodeOperationError(
                f"{prop.display_name} must be at most {prop.max_value}",
                item_index
            )
        return number

    def load_options(self, method_name: str, host) -> List[Dict[str, Any]]:
        """Run a load-options method by name."""
        try:
            attribute = self.load_options_methods[method_name]
        except KeyError:
            raise ValueError(
                f"{self.description.name} has no load options method "
                f"{method_name}"
            )
        return getattr(self, attribute)(host)

    def execute(self, host) -> List[Item]:
        """Process every input item.

        Credentials are resolved once per run. Items are processed in
        order, one at a time.

        Returns:
            List[Item]: One output item per input item
        """
        items = host.get_input_data()
        logger.info(
            f"Executing {self.description.name} on {len(items)} item(s)"
        )
        credential = None
        if self.description.credentials:
            credential = host.fetch_credentials(
                self.description.credentials[0]
            )
        results = self._iter_results(host, items, credential)
        output = collect_results(results, host.continue_on_fail)
        logger.info(
            f"{self.description.name} produced {len(output)} item(s)"
        )
        return output

    def _iter_results(self, host, items: List[Item],
                      credential: Any) -> Iterable[ItemResult]:
        for index, item in enumerate(items):
            try:
                output = self.execute_item(host, credential, item, index)
            except NodeOperationError as e:
                yield ItemFailure(
                    index, KIND_VALIDATION, {"message": str(e)}, e
                )
            except Exception as e:
                error = NodeApiError.from_exception(e, index)
                yield ItemFailure(index, KIND_API, error.payload, error)
            else:
                output.paired_item = index
                yield ItemSuccess(index, output)

    @abstractmethod
    def execute_item(self, host, credential: Any, item: Item,
                     item_index: int) -> Item:
        """Turn one input item into one output item."""
        pass
