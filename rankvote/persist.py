'''Snapshots of election objects as JSON-ready dictionaries.

The election state needs to survive between operations; this module turns the
election objects into plain dictionaries that can be written to any durable
store (a JSON file, a document database...) and rebuilds them from there.

A snapshot of an object is a dictionary with a ``class`` key holding the
scoped name of a rankvote class decorated with :func:`simple_serialization`,
plus the arguments to its constructor. JSON has no notion of tuples (ballots)
or of dictionaries keyed by anything but strings (the ballot store is keyed by
voter and epoch); such values are wrapped in a dictionary with a ``type`` key.

Snapshots are only ever rebuilt into rankvote classes: a class name from
outside the package is refused without importing anything.
'''

import importlib
import inspect
from typing import Any, Callable, Dict, Tuple

PACKAGE = 'rankvote'

ATOMIC_TYPES = (str, int, float, bool, type(None))
RESERVED_KEYS = frozenset(['class', 'type'])

SERIALIZABLE: Dict[str, type] = {}


class SnapshotError(ValueError):
    '''A value cannot be turned into a snapshot or rebuilt from one.

    :param value: The offending value.
    :param reason: What is wrong with the value.
    '''
    def __init__(self, value: Any, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f'invalid {PACKAGE} snapshot {value!r}: {reason}')


def simple_serialization(class_: type) -> type:
    '''A decorator to provide a simple to_dict() serialization method.

    The resulting method will serialize all object attributes corresponding
    to the class's constructor parameter names. Therefore, this decorator
    is only useful when the class stores all its original parameters
    unchanged (or in any other form acceptable to its constructor).

    The class is also registered so that :func:`from_dict` can rebuild it.

    :param class_: The class to add the method to.
    '''
    if class_.__init__ is object.__init__:
        param_names = []
    else:
        param_names = [
            name for name in inspect.signature(class_.__init__).parameters
            if name != 'self'
        ]
    class_name = scoped_class_name(class_)

    def to_dict(self) -> Dict[str, Any]:
        out_dict = {'class': class_name}
        for attr in param_names:
            out_dict[attr] = serialize_value(getattr(self, attr))
        return out_dict

    class_.to_dict = to_dict
    SERIALIZABLE[class_name] = class_
    return class_


def to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize an election object to a JSON-ready dictionary.

    :param obj: An election object or one of its components, decorated with
        :func:`simple_serialization`.
    :raises SnapshotError: If the object cannot be serialized.
    """
    if not hasattr(obj, 'to_dict'):
        raise SnapshotError(obj, f'not a serializable {PACKAGE} object')
    return obj.to_dict()


def from_dict(value: Dict[str, Any]) -> Any:
    """Rebuild an election object from a JSON-like dictionary.

    :param value: A dictionary created by :func:`to_dict`.
    :raises SnapshotError: If the dictionary is not a valid snapshot.
    """
    if not isinstance(value, dict) or 'class' not in value:
        raise SnapshotError(value, 'dict with a class key expected')
    return deserialize_object(value)


def serialize_value(value: Any) -> Any:
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    elif isinstance(value, ATOMIC_TYPES):
        return value
    elif isinstance(value, tuple):
        return {'type': 'tuple', 'value': [serialize_value(v) for v in value]}
    elif isinstance(value, list):
        return [serialize_value(v) for v in value]
    elif isinstance(value, dict):
        if (all(isinstance(key, str) for key in value)
                and not RESERVED_KEYS.intersection(value)):
            return {key: serialize_value(val) for key, val in value.items()}
        else:
            return {
                'type': 'dict',
                'items': [
                    [serialize_value(key), serialize_value(val)]
                    for key, val in value.items()
                ],
            }
    else:
        raise SnapshotError(value, 'cannot serialize')


def deserialize_value(value: Any) -> Any:
    if isinstance(value, dict):
        if 'class' in value:
            return deserialize_object(value)
        elif 'type' in value:
            return deserialize_typed(value)
        else:
            return {key: deserialize_value(val) for key, val in value.items()}
    elif isinstance(value, ATOMIC_TYPES):
        return value
    elif isinstance(value, list):
        return [deserialize_value(val) for val in value]
    else:
        raise SnapshotError(value, 'type unknown')


def deserialize_object(clsdef: Dict[str, Any]) -> Any:
    params = dict(clsdef)
    cls = get_class(params.pop('class'))
    params = {key: deserialize_value(val) for key, val in params.items()}
    try:
        return cls(**params)
    except TypeError as e:
        raise SnapshotError(clsdef, 'invalid constructor arguments') from e


def deserialize_typed(typedef: Dict[str, Any]) -> Any:
    typename = typedef['type']
    reader = TYPED_READERS.get(typename) if isinstance(typename, str) else None
    if reader is None:
        raise SnapshotError(typedef, 'unknown value type')
    try:
        return reader(typedef)
    except (KeyError, TypeError) as e:
        raise SnapshotError(typedef, 'invalid typed value contents') from e


def read_tuple(typedef: Dict[str, Any]) -> Tuple[Any, ...]:
    return tuple(deserialize_value(val) for val in typedef['value'])


def read_dict(typedef: Dict[str, Any]) -> Dict[Any, Any]:
    return {
        deserialize_value(key): deserialize_value(val)
        for key, val in typedef['items']
    }


TYPED_READERS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    'tuple': read_tuple,
    'dict': read_dict,
}


def get_class(name: Any) -> type:
    '''Return the serializable rankvote class with the given scoped name.

    The module defining the class is imported if needed; modules outside
    the rankvote package are never imported.

    :raises SnapshotError: If there is no such class.
    '''
    if not is_scoped_identifier(name) or not name.startswith(PACKAGE + '.'):
        raise SnapshotError(name, f'not a {PACKAGE} class name')
    if name not in SERIALIZABLE:
        module = name.rsplit('.', 1)[0]
        try:
            importlib.import_module(module)
        except ImportError as e:
            raise SnapshotError(name, 'module not found') from e
    if name not in SERIALIZABLE:
        raise SnapshotError(name, 'not a serializable class')
    return SERIALIZABLE[name]


def is_scoped_identifier(value: Any) -> bool:
    return (
        isinstance(value, str)
        and all(chunk.isidentifier() for chunk in value.split('.'))
    )


def scoped_class_name(class_: type) -> str:
    return '.'.join((class_.__module__, class_.__name__))
