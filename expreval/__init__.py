from .errors import *
from .tokens import *
from .parser import infix_to_rpn, parse
from .evaluator import evaluate, ResultHistory, RPNEvaluator
from .scanner import tokenize, Tokenizer
from .session import EvaluationOptions, History, Session, VariableTable

from .version import __version__, VERSION_STRING
from . import errors, evaluator, numeric, operations, parser, printer, scanner, session, tokens

import inspect

# The token model and the error hierarchy are part of the top-level API; they are separated into submodules solely to
# keep the file sizes manageable.
SUBMODULES_TO_SUBSUME = (errors, tokens)
for module_to_subsume in SUBMODULES_TO_SUBSUME:
    for name, obj in inspect.getmembers(module_to_subsume):
        if hasattr(obj, '__module__') and obj.__module__ == module_to_subsume.__name__:
            obj.__module__ = 'expreval'
    del module_to_subsume

del inspect, SUBMODULES_TO_SUBSUME
