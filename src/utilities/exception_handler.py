"""
Wrapper/decorator for entrypoint functions.

"""
import functools
import sys
import traceback
from utilities.logging import debug, error

def exception_handler(function):
    @functools.wraps(function)
    def inner_function(*args, **kwargs):
        try:
            return function(*args, **kwargs)
        except Exception as exception:
            error(f"During execution the following error occured: {str(exception.__doc__)} Arguments: {exception.args}")
            error(str(exception))
            debug(traceback.format_exc())
            sys.exit(getattr(exception, "exit_code", 1) or 1)
    return inner_function
