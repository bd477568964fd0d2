'''Serialization of coalitionlib objects to and from JSON-ready dictionaries.

Configurable objects (engines, models, policies, configurations) get a
``to_dict()`` method from the :func:`simple_serialization` decorator; result
records are frozen dataclasses that are serialized field by field. Both
forms carry a ``class`` key with the scoped class name so that
:func:`from_dict` can reconstruct them.

Serialization is deterministic: the same object always produces the same
dictionary (set-like values are emitted in sorted order), so dumping it with
``json.dumps`` gives byte-identical output for identical inputs.
'''

import dataclasses
import importlib
import inspect
import sys
from decimal import Decimal
from fractions import Fraction
from typing import Any, Callable, Dict, List

TRUSTED_MODULES: List[str] = ['coalitionlib']
'''Packages whose classes and functions definitions may refer to.

Custom components defined elsewhere can only be deserialized after their
package is appended here.'''


class UntrustedObjectError(ValueError):
    '''A definition refers to an object outside the trusted modules.'''
    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(
            f'refusing to load {identifier!r}: not a coalitionlib object'
        )


def simple_serialization(class_: type) -> type:
    '''A decorator to provide a simple to_dict() serialization method.

    The resulting method serializes all object attributes named like the
    class's constructor parameters, so the class must keep its constructor
    arguments as attributes (possibly in another form its constructor
    accepts, such as a resolved component function instead of its name).

    :param class_: The class to add the method to.
    '''
    if hasattr(class_, 'serialize_params'):
        param_names = list(class_.serialize_params)
    else:
        param_names = [
            name for name in inspect.signature(class_.__init__).parameters
            if name not in ('self', 'args', 'kwargs')
        ]

    def to_dict(self) -> Dict[str, Any]:
        out_dict = {'class': scoped_class_name(self)}
        for attr in param_names:
            out_dict[attr] = serialize_value(getattr(self, attr))
        return out_dict

    class_.to_dict = to_dict
    return class_


def serialize_value(value: Any) -> Any:
    if hasattr(value, 'to_dict'):
        return value.to_dict()
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        out_dict = {'class': scoped_class_name(value)}
        for field in dataclasses.fields(value):
            if field.init:
                out_dict[field.name] = serialize_value(
                    getattr(value, field.name)
                )
        return out_dict
    elif isinstance(value, tuple(ATOMIC_TYPES)):
        return value
    elif type(value) in CONVERTIBLE_TYPES:
        return CONVERTIBLE_TYPES[type(value)](value)
    elif hasattr(value, 'items') and hasattr(value, 'keys'):
        if all(isinstance(key, str) for key in value.keys()):
            return {key: serialize_value(val) for key, val in value.items()}
        else:
            return {
                'type': 'dict',
                'keys': [serialize_value(key) for key in value.keys()],
                'values': [serialize_value(val) for val in value.values()],
            }
    elif hasattr(value, '__iter__'):
        return [serialize_value(val) for val in value]
    elif callable(value):
        return {'callable': '.'.join((value.__module__, value.__name__))}
    else:
        raise ValueError(f'cannot serialize {value!r} to dict format')


def deserialize_value(value: Any) -> Any:
    if isinstance(value, dict):
        if 'type' in value and is_scoped_identifier(value['type']):
            return deserialize_typed(value)
        elif 'class' in value and is_scoped_identifier(value['class']):
            return deserialize_class(value)
        elif 'callable' in value and is_scoped_identifier(value['callable']):
            return get_object(value['callable'])
        else:
            return {key: deserialize_value(val) for key, val in value.items()}
    elif isinstance(value, tuple(ATOMIC_TYPES)):
        return value
    elif isinstance(value, list):
        return [deserialize_value(val) for val in value]
    else:
        raise ValueError(f'cannot deserialize {value!r}, type unknown')


def deserialize_typed(typedef: Dict[str, Any]) -> Any:
    typeobj = get_object(typedef['type'])
    if typeobj is dict:
        return dict(zip(
            [deserialize_value(key) for key in typedef['keys']],
            [deserialize_value(val) for val in typedef['values']],
        ))
    elif 'value' in typedef:
        return typeobj(deserialize_value(typedef['value']))
    elif 'arguments' in typedef:
        return typeobj(*[
            deserialize_value(val) for val in typedef['arguments']
        ])
    else:
        raise ValueError(f'invalid typed value contents: {typedef!r}')


def deserialize_class(clsdef: Dict[str, Any]) -> Any:
    cls = get_object(clsdef['class'])
    if not isinstance(cls, type):
        raise UntrustedObjectError(clsdef['class'])
    params = {
        key: val for key, val in clsdef.items() if key != 'class'
    }
    if hasattr(cls, 'from_dict'):
        return cls.from_dict(params)
    return cls(**{
        key: deserialize_value(val) for key, val in params.items()
    })


def get_object(identifier: str) -> Any:
    '''Resolve a type, class or callable identifier found in a definition.

    Only the typed builtins and objects defined in the modules listed in
    `TRUSTED_MODULES` resolve; nothing else is imported.

    :raises UntrustedObjectError: For any other identifier.
    '''
    if '.' not in identifier:
        if identifier in TYPED_BUILTINS:
            return TYPED_BUILTINS[identifier]
        raise UntrustedObjectError(identifier)
    module, name = identifier.rsplit('.', 1)
    if not is_trusted_module(module):
        raise UntrustedObjectError(identifier)
    if module not in sys.modules:
        importlib.import_module(module)
    obj = getattr(sys.modules[module], name)
    if not is_trusted_module(getattr(obj, '__module__', None)):
        raise UntrustedObjectError(identifier)
    return obj


def is_trusted_module(module: Any) -> bool:
    return isinstance(module, str) and any(
        module == trusted or module.startswith(trusted + '.')
        for trusted in TRUSTED_MODULES
    )


def from_dict(value: Dict[str, Any]) -> Any:
    """Reconstruct a coalitionlib object from a JSON-like dictionary.

    :param value: A dictionary created by :func:`to_dict`.
    """
    if not isinstance(value, dict):
        raise ValueError(
            f'invalid coalitionlib object def: dict expected, got {value!r}'
        )
    elif 'class' not in value:
        raise ValueError('invalid coalitionlib object def: no class key')
    elif not is_scoped_identifier(value['class']):
        raise ValueError(f"invalid coalitionlib class def: {value['class']}")
    return deserialize_value(value)


def to_dict(obj: Any) -> Dict[str, Any]:
    """Serialize a coalitionlib object to a JSON-ready dictionary.

    :param obj: A configurable object with a `to_dict()` method or a result
        record (a dataclass).
    """
    return serialize_value(obj)


def is_scoped_identifier(value: Any) -> bool:
    return (
        isinstance(value, str)
        and not value.startswith('.')
        and all(chunk.isidentifier() for chunk in value.split('.'))
    )


def scoped_class_name(value: Any) -> str:
    cls = value.__class__
    return '.'.join((cls.__module__, cls.__qualname__))


def fraction_to_json(f: Fraction) -> Dict[str, Any]:
    return {'type': 'Fraction', 'arguments': list(f.as_integer_ratio())}


def decimal_to_json(d: Decimal) -> Dict[str, Any]:
    return {'type': 'Decimal', 'value': str(d)}


def tuple_to_json(seq: tuple) -> Dict[str, Any]:
    return {'type': 'tuple', 'value': [serialize_value(v) for v in seq]}


def frozenset_to_json(seq: frozenset) -> Dict[str, Any]:
    return {
        'type': 'frozenset',
        'value': [serialize_value(v) for v in sorted(seq, key=repr)],
    }


ATOMIC_TYPES: List[type] = [
    str, int, float, bool, type(None),
]

CONVERTIBLE_TYPES: Dict[type, Callable] = {
    Fraction: fraction_to_json,
    Decimal: decimal_to_json,
    tuple: tuple_to_json,
    frozenset: frozenset_to_json,
}

TYPED_BUILTINS: Dict[str, type] = {
    'Fraction': Fraction,
    'Decimal': Decimal,
    'tuple': tuple,
    'frozenset': frozenset,
    'dict': dict,
}
