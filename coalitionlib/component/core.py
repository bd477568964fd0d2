'''Common functionality for components.

Builds the registration decorator and the retrievers around a component
register. There should normally be no need to use these functions directly.
'''

from typing import Any, Callable, Dict, Tuple, Union


def register_functions(register: Dict[str, Callable],
                       kind: str,
                       ) -> Tuple[Callable, Callable, Callable]:
    '''Construct the marker, getter and constructer of a component register.

    :param register: Dictionary to hold the registered functions by name.
    :param kind: Human-readable name of the component kind, used in errors.
    :returns: A triple of functions:

        -   a decorator registering a function under its ``__name__``,
        -   a getter returning a registered function by its name,
        -   a constructer that also passes custom callables through.
    '''
    def mark(func: Callable) -> Callable:
        register[func.__name__] = func
        return func

    def get(name: str) -> Callable:
        try:
            return register[name]
        except (KeyError, TypeError):
            raise KeyError(
                f'unknown {kind}: {name!r}, available: '
                + ', '.join(sorted(register))
            )

    def construct(definition: Union[str, Callable[..., Any]]) -> Callable:
        if callable(definition):
            return definition
        return get(definition)

    mark.__doc__ = f'Register a {kind} function under its name.'
    get.__doc__ = f'Return a {kind} function by its name.'
    construct.__doc__ = (
        f'Get a {kind} function by name, or pass a custom callable through.'
    )
    return mark, get, construct
