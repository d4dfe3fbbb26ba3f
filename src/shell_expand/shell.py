"""Main Shell class - the primary API for shell-expand.

Example usage:
    from shell_expand import Shell

    shell = Shell(variables={"name": "world"}, arrays={"files": ["a", "b"]})
    shell.expand("hello-$name")    # ["hello-world"]
    shell.expand("@files")         # ["a", "b"]
    shell.expand("{x,y}.txt")      # ["x.txt", "y.txt"]

    # With command substitution through /bin/sh
    shell = Shell(command_runner=run_command)
    shell.expand("@(echo a b c)[1]")  # ["b"]

    # Without a Shell, against any set of capabilities
    expand("$((2 ** 10))")         # ["1024"]
"""

import logging
import os
import subprocess
from typing import Callable, Optional

from .interpreter.expansion import expand_string
from .interpreter.types import ExpansionContext
from .parser.ranges import Forward, Key, Select, SelectAll, select
from .types import Array, Expander, ExpansionLimits

logger = logging.getLogger(__name__)


def expand(
    text: str,
    expander: Optional[Expander] = None,
    *,
    reverse_quoting: bool = False,
    limits: Optional[ExpansionLimits] = None,
) -> Array:
    """Expand a shell word.

    Args:
        text: The word to expand.
        expander: Capabilities for variable, array, tilde and command
            lookups. Without one, every lookup finds nothing.
        reverse_quoting: Treat quoted variables and command substitutions as
            unquoted and vice versa.
        limits: Expansion limits.

    Returns:
        The expanded words, in order.
    """
    ctx = ExpansionContext(
        expander=expander or Expander(),
        limits=limits or ExpansionLimits(),
    )
    return expand_string(ctx, text, reverse_quoting)


def run_command(command: str) -> Optional[str]:
    """Run a command substitution through /bin/sh and return its stdout."""
    try:
        completed = subprocess.run(
            ["/bin/sh", "-c", command],
            capture_output=True,
            text=True,
        )
    except OSError as error:
        logger.warning("command substitution failed to start: %s", error)
        return None
    return completed.stdout


class Shell:
    """In-memory variable store that provides expansion capabilities.

    Scalars, arrays and maps are kept in plain dicts; tilde expansion uses
    the configured home, working and previous directories.
    """

    def __init__(
        self,
        *,
        variables: Optional[dict[str, str]] = None,
        arrays: Optional[dict[str, list[str]]] = None,
        maps: Optional[dict[str, dict[str, str]]] = None,
        home: Optional[str] = None,
        cwd: Optional[str] = None,
        previous_dir: Optional[str] = None,
        command_runner: Optional[Callable[[str], Optional[str]]] = None,
        limits: Optional[ExpansionLimits] = None,
    ):
        """Initialize the shell.

        Args:
            variables: String variables.
            arrays: Array variables.
            maps: Associative arrays, selected by key.
            home: Directory for ~. Defaults to $HOME.
            cwd: Directory for ~+. Defaults to the process working directory.
            previous_dir: Directory for ~-.
            command_runner: Runs command substitutions. Without one, command
                substitutions expand to nothing.
            limits: Expansion limits.
        """
        self.variables = dict(variables or {})
        self.arrays = {name: list(values) for name, values in (arrays or {}).items()}
        self.maps = {name: dict(values) for name, values in (maps or {}).items()}
        self.home = home if home is not None else os.path.expanduser("~")
        self.cwd = cwd if cwd is not None else os.getcwd()
        self.previous_dir = previous_dir
        self.command_runner = command_runner
        self.limits = limits or ExpansionLimits()

    @property
    def expander(self) -> Expander:
        """The capabilities backed by this shell."""
        return Expander(
            tilde=self.tilde,
            array=self.array,
            string=self.string,
            command=self.command if self.command_runner is not None else None,
        )

    def expand(self, word: str, *, reverse_quoting: bool = False) -> Array:
        """Expand a shell word against this shell's variables."""
        return expand(
            word,
            self.expander,
            reverse_quoting=reverse_quoting,
            limits=self.limits,
        )

    # Capabilities

    def string(self, name: str, quoted: bool) -> Optional[str]:
        """Look up a string variable."""
        return self.variables.get(name)

    def array(self, name: str, selection: Select) -> Optional[Array]:
        """Look up an array or map variable and apply a selection."""
        if name in self.arrays:
            return select(self.arrays[name], selection)
        if name in self.maps:
            values = self.maps[name]
            if isinstance(selection, SelectAll):
                return list(values.values())
            if isinstance(selection, Key):
                return [values[selection.key]] if selection.key in values else []
            if isinstance(selection, Forward):
                key = str(selection.n)
                return [values[key]] if key in values else []
            return []
        return None

    def tilde(self, text: str) -> Optional[str]:
        """Expand ~, ~+, ~- and ~user prefixes."""
        prefix, sep, rest = text.partition("/")
        if prefix == "~":
            base: Optional[str] = self.home
        elif prefix == "~+":
            base = self.cwd
        elif prefix == "~-":
            base = self.previous_dir
        else:
            user = prefix[1:]
            expanded = os.path.expanduser(prefix)
            base = expanded if user and expanded != prefix else None
        if base is None:
            return None
        return base + sep + rest

    def command(self, command: str) -> Optional[str]:
        """Run a command substitution."""
        if self.command_runner is None:
            return None
        return self.command_runner(command)
