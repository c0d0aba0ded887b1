"""A module for abstracting printing.

There are several reasons for using this abstraction when printing results and errors:

#. to globally toggle ANSI color output without having to implement that logic in every print function;
#. to keep progress bars from `tqdm <https://github.com/tqdm/tqdm>`_ and ordinary output from garbling one another; and
#. to give the logging module a stream that honors the same color and quiet settings as the rest of the output.

"""

import sys
from abc import abstractmethod
from functools import wraps
from typing import Any, List, Optional

import colorama
from colorama import Fore, Style
from colorama.ansi import AnsiFore, AnsiStyle
from tqdm import tqdm
from typing_extensions import Protocol


class Writer(Protocol):
    """A protocol for basic IO writers that is a subset of :class:`typing.IO`."""

    @abstractmethod
    def write(self, s: str) -> int:
        """Writes a given string.

        Args:
            s: The string to write.

        Returns:
            int: The number of bytes written.

        """
        raise NotImplementedError()

    @abstractmethod
    def isatty(self) -> bool:
        """Returns whether this writer is a TTY."""
        raise NotImplementedError()

    @abstractmethod
    def flush(self) -> Any:
        """Flushes any buffered bytes, if necessary."""
        raise NotImplementedError()


class ANSIContext:
    """A context for printing to the terminal with ANSI color escapes."""

    def __init__(self, printer: 'Printer', fore: Optional[AnsiFore] = None, style: Optional[AnsiStyle] = None):
        self.printer: 'Printer' = printer
        self._fore: Optional[AnsiFore] = fore
        self._style: Optional[AnsiStyle] = style
        self._parent: Optional['ANSIContext'] = None

    @property
    def fore(self) -> Optional[AnsiFore]:
        """The computed foreground color of this context."""
        if self._fore is None and self._parent is not None:
            return self._parent.fore
        return self._fore

    @property
    def style(self) -> Optional[AnsiStyle]:
        """The computed style of this context."""
        if self._style is None and self._parent is not None:
            return self._parent.style
        return self._style

    def _codes(self, fore: Optional[AnsiFore], style: Optional[AnsiStyle]) -> str:
        codes = ''
        if style is not None:
            codes += style
        if fore is not None:
            codes += fore
        return codes

    def __enter__(self) -> 'Printer':
        stack = self.printer.contexts
        if stack:
            self._parent = stack[-1]
        stack.append(self)
        self.printer.raw_write(self._codes(self.fore, self.style))
        return self.printer

    def __exit__(self, exc_type, exc_val, exc_tb):
        stack = self.printer.contexts
        assert stack and stack[-1] is self
        stack.pop()
        self.printer.raw_write(Style.RESET_ALL)
        if self._parent is not None:
            self.printer.raw_write(self._codes(self._parent.fore, self._parent.style))
        self._parent = None


def only_ansi(func):
    """A decorator for :class:`Printer` methods that specifies it should only be called when outputting in color.

    If the :class:`Printer` implementing the decorated method has :attr:`Printer.ansi_color` set to :const:`False`,
    then this decorator will have the method automatically return a :class:`NullANSIContext`.

    """
    @wraps(func)
    def wrapper(self: 'Printer', *args, **kwargs):
        if self.ansi_color:
            return func(self, *args, **kwargs)
        else:
            return NullANSIContext(self)

    return wrapper


class NullANSIContext:
    """A "fake" :class:`ANSIContext` that has the same functions but does not actually emit any colors."""

    def __init__(self, printer: 'Printer'):
        self._printer = printer

    def __enter__(self):
        return self._printer

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass


class Printer(Writer):
    """An ANSI color and status printer."""

    def __init__(
            self,
            out_stream: Optional[Writer] = None,
            ansi_color: Optional[bool] = None,
            quiet: bool = False
    ):
        """Initializes a Printer.

        Args:
            out_stream: The stream to which to print. If omitted, it defaults to :attr:`sys.stdout`.
            ansi_color: Whether or not color should be enabled in the output. If omitted, it defaults to
                :meth:`out_stream.isatty<Writer.isatty>`.
            quiet: If :const:`True`, progress bars will be suppressed.

        """
        if out_stream is None:
            out_stream = sys.stdout
        self.out_stream: Writer = out_stream
        """The stream wrapped by this printer."""
        self.quiet: bool = quiet
        """Whether or not :mod:`tqdm` progress bars should be suppressed."""
        self.contexts: List[ANSIContext] = []
        """The stack of color contexts currently entered."""
        self._buffer: List[str] = []
        try:
            self.write_raw: bool = quiet or (
                out_stream.fileno() != sys.stderr.fileno() and out_stream.fileno() != sys.stdout.fileno()
            )
            """If :const:`True`, this printer *will not* buffer output and route full lines through
            :meth:`tqdm.tqdm.write`.

            This defaults to :const:`True` unless the printer is not quiet and wraps the same file as either
            :attr:`sys.stdout` or :attr:`sys.stderr`, which is where progress bars are drawn.

            """
        except (AttributeError, ValueError):
            self.write_raw = True
        self._ansi_color = None
        self.ansi_color = ansi_color
        if self.ansi_color:
            colorama.init()

    @property
    def ansi_color(self) -> bool:
        """Returns whether this printer has color enabled."""
        return self._ansi_color

    @ansi_color.setter
    def ansi_color(self, is_color: Optional[bool]):
        if is_color is None:
            self._ansi_color = self.isatty()
        else:
            self._ansi_color = is_color

    def tqdm(self, *args, **kwargs) -> tqdm:
        """Returns a :class:`tqdm.tqdm` object that is disabled if this printer is quiet."""
        if self.quiet:
            kwargs['disable'] = True
        return tqdm(*args, **kwargs)

    def raw_write(self, s: str) -> int:
        if self.write_raw:
            return self.out_stream.write(s)
        self._buffer.append(s)
        if '\n' in s:
            self._write_lines()
        return len(s)

    def _write_lines(self, final: bool = False):
        text = ''.join(self._buffer)
        if final and text and not text.endswith('\n'):
            text = f"{text}\n"
        *lines, partial = text.split('\n')
        for line in lines:
            tqdm.write(line, file=self.out_stream)
        self._buffer = [partial] if partial else []

    def write(self, s: str) -> int:
        return self.raw_write(s)

    def newline(self):
        self.raw_write('\n')

    def isatty(self) -> bool:
        try:
            return self.out_stream.isatty()
        except (AttributeError, ValueError):
            return False

    def flush(self, final: bool = False):
        """Flushes this printer.

        If :obj:`final` is :const:`True`, a trailing partial line still buffered for :mod:`tqdm` is written along
        with a final newline.

        """
        if self._buffer:
            self._write_lines(final=final)
        return self.out_stream.flush()

    def close(self):
        self.flush(final=True)

    @only_ansi
    def color(self, foreground_color: AnsiFore) -> ANSIContext:
        """Returns a new context for this printer with the given foreground color."""
        return ANSIContext(self, fore=foreground_color)

    @only_ansi
    def bright(self) -> ANSIContext:
        """Returns a new context for this printer with the bright style enabled."""
        return ANSIContext(self, style=Style.BRIGHT)

    @only_ansi
    def dim(self) -> ANSIContext:
        """Returns a new context for this printer with the dim style enabled."""
        return ANSIContext(self, style=Style.DIM)

    def error(self) -> ANSIContext:
        """Returns a context for printing error messages."""
        return self.color(Fore.RED)
