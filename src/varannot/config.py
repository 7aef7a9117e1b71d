import argparse
from typing import Any, Dict, List

from .constants import SCORE_DEFAULTS
from .util import get_env_variable, parse_params

SCORE_PARAM_TYPES = {'per_bp': int, 'min': float, 'step': float, 'sentinel': int}
"""the key=value parameters accepted for the score files and the type of each"""


class CustomHelpFormatter(argparse.ArgumentDefaultsHelpFormatter):
    """
    subclass the default help formatter to stop default printing for required arguments
    """

    def _get_help_string(self, action):
        if action.required:
            return action.help
        return super(CustomHelpFormatter, self)._get_help_string(action)

    def add_arguments(self, actions):
        # sort the arguments alphanumerically so they print in the help that way
        actions = sorted(actions, key=lambda x: getattr(x, 'option_strings'))
        super(CustomHelpFormatter, self).add_arguments(actions)


def score_params(params: List[str]) -> Dict[str, Any]:
    """
    build the OffsetScoreStore keyword arguments from key=value parameters. Parameters not
    given fall back to the VARANNOT_<KEY> environment variables and then to the defaults

    Example:
        >>> score_params(['min=-2'])
        {'per_bp': 3, 'min_score': -2.0, 'step': 0.01, 'sentinel': 255}
    """
    values = {
        'per_bp': get_env_variable('per_bp', SCORE_DEFAULTS.PER_BP),
        'min': get_env_variable('min', SCORE_DEFAULTS.MIN),
        'step': get_env_variable('step', SCORE_DEFAULTS.STEP),
        'sentinel': get_env_variable('sentinel', SCORE_DEFAULTS.SENTINEL),
    }
    values.update(parse_params(params, SCORE_PARAM_TYPES))
    values['min_score'] = values.pop('min')
    return {key: values[key] for key in ['per_bp', 'min_score', 'step', 'sentinel']}
