import logging
import os
from glob import glob
from typing import Any, Callable, Dict, Iterable, List, Optional

from braceexpand import braceexpand

ENV_VAR_PREFIX = 'VARANNOT_'

logger = logging.getLogger('varannot')


def bash_expands(*expressions: str) -> List[str]:
    """
    expand a file glob expression, allowing bash-style brackets.

    Returns:
        list: a list of files

    Example:
        >>> bash_expands('./{test,doc}/*py')
        [...]
    """
    result = []
    for expression in expressions:
        eresult = []
        for name in braceexpand(expression):
            for fname in glob(name):
                eresult.append(fname)
        if not eresult:
            raise FileNotFoundError('The expression does not match any files', expression)
        result.extend(eresult)
    return [os.path.abspath(f) for f in result]


def filepath(path):
    try:
        file_list = bash_expands(path)
    except FileNotFoundError:
        raise TypeError('File does not exist', path)
    else:
        if not file_list:
            raise TypeError('File not found', path)
        elif len(file_list) > 1:
            raise TypeError('File pattern match multiple files and expected only one', path)
    return file_list[0]


def cast_null(input_value):
    value = str(input_value).lower()
    if value in ['none', 'null', '']:
        return None
    raise TypeError('casting to null/None failed', input_value)


def cast_boolean(input_value):
    value = str(input_value).lower()
    if value in ['t', 'true', '1', 'y', 'yes', '+']:
        return True
    elif value in ['f', 'false', '0', 'n', 'no', '-']:
        return False
    raise TypeError('casting to boolean failed', input_value)


def cast(value, cast_func):
    """
    cast a value to a given type

    Example:
        >>> cast('1', int)
        1
    """
    if cast_func == bool:
        value = cast_boolean(value)
    else:
        value = cast_func(value)
    return value


def soft_cast(value, cast_type):
    """
    cast a value to a given type, if the cast fails, cast to null

    Example:
        >>> soft_cast(None, int)
        None
        >>> soft_cast('', int)
        None
    """
    try:
        return cast(value, cast_type)
    except (TypeError, ValueError):
        pass
    return cast_null(value)


def get_env_variable(arg: str, default: Any, cast_type: Optional[Callable] = None) -> Any:
    """
    Args:
        arg: the argument/variable name
    Returns:
        the setting from the environment variable if given, otherwise the default value
    """
    if cast_type is None:
        cast_type = type(default)
    name = ENV_VAR_PREFIX + str(arg).upper()
    result = os.environ.get(name, None)
    if result is not None:
        return cast(result, cast_type)
    return default


def parse_params(params: Iterable[str], types: Dict[str, Callable]) -> Dict[str, Any]:
    """
    parse plugin style key=value parameters into a dictionary of typed values

    Args:
        params: the raw key=value strings
        types: the accepted keys and the type to cast each value to

    Raises:
        KeyError: a key is not one of the accepted keys
        ValueError: a parameter is not in key=value format or the value cannot be cast

    Example:
        >>> parse_params(['min=-2', 'step=0.5'], {'min': float, 'step': float})
        {'min': -2.0, 'step': 0.5}
    """
    result = {}
    for param in params:
        if '=' not in param:
            raise ValueError('expected parameter in key=value format', param)
        key, value = param.split('=', 1)
        key = key.strip()
        if key not in types:
            raise KeyError(f'unexpected parameter ({key}). Expected one of: {sorted(types)}')
        try:
            result[key] = cast(value.strip(), types[key])
        except TypeError as err:
            raise ValueError(str(err))
    return result


def log_arguments(args):
    """
    output the arguments to the console

    Args:
        args (Namespace): the namespace to print arguments for
    """
    logger.info('arguments')

    indent = ' '

    for arg, val in sorted(args.__dict__.items()):
        if isinstance(val, list):
            if len(val) <= 1:
                logger.info(f'{indent}{arg} = {val}')
                continue
            logger.info(f'{indent}{arg} = [')
            for v in val:
                logger.info(f'{indent * 2}{repr(v)}')
            logger.info(f'{indent}]')
        elif any([isinstance(val, typ) for typ in [str, int, float, bool, tuple]]) or val is None:
            logger.info(f'{indent}{arg} = {repr(val)}')
        else:
            logger.info(f'{indent}{arg} = {object.__repr__(val)}')
