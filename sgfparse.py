#!/usr/bin/env python3
# -*- coding: utf-8 -*-

# sgfparse.py (Smart Game Format recursive-descent parser)
# Copyright © 2000-2021 David John Goodger (goodger@python.org)
#
# This library is free software; you can redistribute it and/or modify it
# under the terms of the GNU Lesser General Public License as published by the
# Free Software Foundation; either version 2 of the License, or (at your
# option) any later version.
#
# This library is distributed in the hope that it will be useful, but WITHOUT
# ANY WARRANTY; without even the implied warranty of MERCHANTABILITY or
# FITNESS FOR A PARTICULAR PURPOSE.  See the GNU Lesser General Public License
# for more details.
#
# You should have received a copy of the GNU Lesser General Public License
# (lgpl.txt) along with this library; if not, write to the Free Software
# Foundation, Inc., 59 Temple Place, Suite 330, Boston, MA  02111-1307  USA
# The license is currently available on the Internet at:
#     http://www.gnu.org/copyleft/lesser.html

"""
=========================================
 Smart Game Format Parser: sgfparse
=========================================

This module contains a strict, single-pass parser for SGF, the Smart Game
Format. SGF is a text only, tree based file format designed to store game
records of board games for two players, most commonly for the game of Go.
(See `the official SGF specification <https://www.red-bean.com/sgf/>`_.)

Given a string containing a complete SGF data instance, the `Parser` class
will create a `Collection` object consisting of one or more `GameTree`
instances (one per game), each containing a `Sequence` of `Node` instances and
zero or more branch `GameTree` objects (variations). Branches begin
immediately following the last `Node` of the sequence. Each `Node` contains
an ordered list of `Property` objects, each with an ID and one or more values.

The grammar accepted (character level)::

    Collection  := WS? GameTree+ WS?
    GameTree    := '(' Sequence GameTree* ')' WS?
    Sequence    := Node+
    Node        := ';' Property* WS?
    Property    := PropIdent PropValue+ WS?
    PropIdent   := [A-Z]+ WS?
    PropValue   := '[' ( [^\\]\\\\] | '\\\\' any-char )* ']' WS?
    WS          := [ \\t\\n\\r\\v]*

Any structural problem raises a `ParseError` whose message names what was
expected (e.g. "expected ')'"). The parser does not interpret property IDs or
values.

Tree traversal methods are provided through the `Cursor` class.

The default representation (using ``str()`` or ``print()``) of each class of
SGF objects is the Smart Game Format itself.

Command-line tools:

* DumpCLI: Parse an SGF file and print the resulting tree.
"""


# Revision History:
#
# * 1.0 (2026-10-19): First release. Strict single-pass parser, explicit
#   stack for nested game trees.


import sys
import warnings
import argparse
import datetime
import re
import textwrap


TEXT_ENCODING = 'UTF-8'
"""Encoding used to decode SGF data supplied as bytes."""

PRETTY_INDENT_SPACES = 2
"""Per-level indent for pretty-formatted output."""

END = ''
"""Returned by `Parser.peek()` & `Parser.read()` past the end of the data."""


class Error(Exception):
    """Base class for sgfparse exceptions."""
    pass

# Parsing Exceptions

class ParseError(Error):
    """Base class for parsing exceptions. The message is the whole report."""
    pass

class TreeParseError(ParseError):
    """Raised by `Parser.parse()`, `Parser.parse_game_tree()`,
    `Parser.parse_sequence()`."""
    pass

class NodePropertyParseError(ParseError):
    """Raised by `Parser.parse_property()`, `Parser.parse_property_id()`."""
    pass

class PropertyValueParseError(ParseError):
    """Raised by `Parser.parse_property_value()`."""
    pass

# Tree Construction Exceptions

class TreeConstructionError(Error):
    """Raised by `Collection()` & `GameTree()`."""
    pass

# Tree Navigation Exceptions

class TreeNavigationError(Error):
    """Base class for game tree navigation, and raised by `Cursor.next()`."""
    pass

class TreeEndError(TreeNavigationError):
    """Raised by `Cursor.next()`, `Cursor.previous()`."""
    pass

# Miscellaneous Exceptions

class PropertyError(Error):
    """Raised by `Property()`."""
    pass


def is_property_id_char(char):
    """Return True iff `char` is an ASCII uppercase letter, "A" to "Z"."""
    return 'A' <= char <= 'Z'


class Collection(list):

    """
    A `Collection` is a `list` of one or more `GameTree` objects.
    """

    path = None

    def __init__(self, gametrees=()):
        super().__init__(gametrees)
        if not self:
            raise TreeConstructionError(
                'A Collection requires at least one GameTree.')

    def __str__(self):
        """
        SGF text representation, accessed via `str(collection)`.
        Separates game trees with a blank line.
        """
        return '\n\n'.join(str(item) for item in self)

    def pretty(self):
        """
        Pretty-formatted SGF text representation. Separates game trees with a
        blank line.
        """
        return '\n\n'.join(item.pretty() for item in self) + '\n'

    def __repr__(self):
        return '{}({!r}, ...)'.format(self.__class__.__name__, self[0])

    def cursor(self, gamenum=0):
        """Returns a `Cursor` object for navigation of the given `GameTree`."""
        return Cursor(self[gamenum])

    @classmethod
    def load(cls, path=None, data=None, parser_class=None):
        """
        Return a `Collection` loaded from a filesystem `path` (`None` or "-"
        reads from <stdin>) or from `data` (`str` or `bytes`).

        The default `parser_class` is `Parser`.
        """
        if data is None:
            if path == '-':
                path = None
            if path:
                with open(path, 'rb') as src:
                    data = src.read()
            else:
                data = sys.stdin.buffer.read()
        if parser_class is None:
            parser_class = Parser
        collection = parser_class(data).parse()
        collection.path = path
        return collection


class GameTree:

    """
    An SGF game tree: a sequence of `Node` objects (game plays) and optional
    branches (game variations).

    Instance attributes:

    self.sequence : `Sequence`
       Game tree 'trunk' (main line of game or branch), all plays prior to any
       branches. Never empty.

    self.branches : list of `GameTree`
       Variations of a game, in source order. `self.branches[0]` is the main
       line continuation.
    """

    def __init__(self, sequence, branches=None):
        if not sequence:
            raise TreeConstructionError(
                'A GameTree requires a sequence of at least one Node.')
        if not isinstance(sequence, Sequence):
            sequence = Sequence(sequence)
        self.sequence = sequence
        self.branches = [] if branches is None else branches

    def __eq__(self, other):
        if not isinstance(other, GameTree):
            return NotImplemented
        pairs = [(self, other)]
        while pairs:
            mine, theirs = pairs.pop()
            if (mine.sequence != theirs.sequence
                    or len(mine.branches) != len(theirs.branches)):
                return False
            pairs.extend(zip(mine.branches, theirs.branches))
        return True

    def __str__(self):
        """
        Return an SGF representation of this `GameTree`, one node or branch
        per line. The first node follows "(" directly, as the grammar
        requires.
        """
        return self._sgf_text(0, 0)

    def pretty(self, indent=0):
        """Return a pretty-formatted SGF representation of this `GameTree`."""
        return self._sgf_text(indent, PRETTY_INDENT_SPACES)

    def _sgf_text(self, depth, indent_spaces):
        """
        Render this `GameTree` and its branches as SGF text, breaking lines
        between nodes and branches with `indent_spaces` per nesting level.
        Open game trees are kept on an explicit stack.
        """
        parts = []
        stack = [(self, depth)]
        while stack:
            item = stack.pop()
            if isinstance(item, str):
                parts.append(item)
                continue
            tree, depth = item
            separator = '\n' + ' ' * (depth + 1) * indent_spaces
            entries = [str(node) for node in tree.sequence]
            entries.extend((branch, depth + 1) for branch in tree.branches)
            pending = ['(']
            for index, entry in enumerate(entries):
                if index:
                    pending.append(separator)
                pending.append(entry)
            pending.append(')')
            stack.extend(reversed(pending))
        return ''.join(parts)

    def __repr__(self):
        # Only the first branch of each level is shown.
        parts = []
        closing = []
        tree = self
        while True:
            parts.append('{}(sequence=[{!r}, ...]'.format(
                tree.__class__.__name__, tree.sequence[0]))
            if not tree.branches:
                parts.append(')')
                break
            parts.append(', branches=[')
            closing.append(', ...])')
            tree = tree.branches[0]
        return ''.join(parts) + ''.join(closing)

    def trunk(self):
        """
        Return the main line of the game (nodes and, at each branching, the
        first variation) as a new `GameTree` without branches.
        """
        nodes = Sequence()
        tree = self
        while True:
            nodes.extend(tree.sequence)
            if not tree.branches:
                break
            tree = tree.branches[0]
        return GameTree(nodes)

    def property_search(self, property_id, getall=False):
        """
        Search this `GameTree` (pre-order: sequence first, then branches in
        order) for nodes containing `property_id`. Return a list of the
        matching `Node` objects: only the first match unless `getall` is true.
        """
        matches = []
        stack = [self]
        while stack:
            tree = stack.pop()
            for node in tree.sequence:
                if node.has_property(property_id):
                    matches.append(node)
                    if not getall:
                        return matches
            stack.extend(reversed(tree.branches))
        return matches


class Sequence(list):

    """
    A `list` of `Node` objects: consecutive plays with no branching.
    """

    def __str__(self):
        return '\n'.join(str(node) for node in self)

    def __repr__(self):
        return '{}({})'.format(self.__class__.__name__, list.__repr__(self))


class Node(list):

    """
    An SGF node (one move or play, or initial setup): an ordered `list` of
    `Property` objects.

    Example: Let ``node`` be a `Node` parsed from ';B[aa]BL[250]AB[dd][pp]':

    * node.get_property('BL').value =>  '250'
    * node.get_property('AB').values  =>  ('dd', 'pp')
    """

    def property_ids(self):
        """Return the property IDs of this node, in order."""
        return [prop.property_id for prop in self]

    def has_property(self, property_id):
        return any(prop.property_id == property_id for prop in self)

    def get_property(self, property_id, default=None):
        """Return the first `Property` with `property_id`, or `default`."""
        for prop in self:
            if prop.property_id == property_id:
                return prop
        return default

    def __str__(self):
        """Return an SGF text representation of this `Node`."""
        return ';' + ''.join(str(prop) for prop in self)

    def __repr__(self):
        return '{}({})'.format(
            self.__class__.__name__,
            ', '.join(prop.short_repr() for prop in self))


class Property:

    """
    An SGF property: an ID (uppercase letters) with one or more values.

    Instance attributes:

    - self.property_id : string -- e.g. "B", "AB".
    - self.values : tuple of strings -- Escape-processed values, in source
      order. Never empty.
    """

    chars_to_escape = ['\\', ']']
    """List of characters that need to be backslash-escaped."""

    chars_to_escape_pattern = re.compile(
        '(' + '|'.join(re.escape(char) for char in chars_to_escape) + ')')
    """Regexp pattern for isolating characters for backslash escaping."""

    def __init__(self, property_id, values):
        if not (property_id
                and all(is_property_id_char(char) for char in property_id)):
            raise PropertyError(
                f'Invalid SGF property ID: {property_id!r}')
        if isinstance(values, str):
            values = (values,)
        values = tuple(values)
        if not values:
            raise PropertyError(
                f'Property "{property_id}" requires at least one value.')
        self.property_id = property_id
        self.values = values

    @property
    def value(self):
        """The primary (first) value."""
        return self.values[0]

    @property
    def additional_values(self):
        """All values after the primary one (possibly empty)."""
        return self.values[1:]

    def __eq__(self, other):
        if not isinstance(other, Property):
            return NotImplemented
        return (self.property_id == other.property_id
                and self.values == other.values)

    def __hash__(self):
        return hash((self.property_id, self.values))

    def __str__(self):
        return '{}[{}]'.format(
            self.property_id,
            ']['.join(self.escape_text(value) for value in self.values))

    def __repr__(self):
        return '{}({!r}, {!r})'.format(
            self.__class__.__name__, self.property_id, list(self.values))

    def short_repr(self):
        """Scalar for single values, list otherwise: ``B='aa'``."""
        if len(self.values) == 1:
            return f'{self.property_id}={self.value!r}'
        return f'{self.property_id}={list(self.values)!r}'

    def escape_text(self, text):
        """Add backslash-escapes to property value characters that need them."""
        return self.chars_to_escape_pattern.sub(r'\\\1', text)


class Cursor:

    """
    `GameTree` navigation tool.

    Instance attributes:

    - self.game : `GameTree` -- The root `GameTree`.
    - self.gametree : `GameTree` -- The current `GameTree`.
    - self.node : `Node` -- The current Node.
    - self.nodenum : integer -- The offset of `self.node` from the root of
      `self.game`. The nodenum of the root node is 0.
    - self.index : integer -- The offset of `self.node` within
      `self.gametree.sequence`.
    - self.stack : list of `GameTree` -- A record of `GameTree` objects
      traversed.
    - self.children : list of `Node` -- All child nodes of the current node.
    - self.at_end : boolean -- Flags if we are at the end of a branch.
    - self.at_start : boolean -- Flags if we are at the start of the game.
    """

    def __init__(self, gametree):
        self.game = gametree
        self.reset()

    def reset(self):
        """Set `Cursor` to point to the start of the root `GameTree`."""
        self.gametree = self.game
        self.nodenum = 0
        self.index = 0
        self.stack = []
        self._update()

    def next(self, branch=0):
        """
        Move the `Cursor` to & return the next `Node`.

        Argument:

        * branch : integer, default 0 -- Branch number. A non-zero value is
          only valid at a branching, where branches exist.

        Raise `TreeEndError` if the end of a branch is exceeded.
        Raise `TreeNavigationError` if a non-existent branch is accessed.
        """
        if self.index + 1 < len(self.gametree.sequence):
            if branch != 0:
                raise TreeNavigationError('Nonexistent branch.')
            self.index += 1
        elif self.gametree.branches:
            if not 0 <= branch < len(self.gametree.branches):
                raise TreeNavigationError('Nonexistent branch.')
            self.stack.append(self.gametree)
            self.gametree = self.gametree.branches[branch]
            self.index = 0
        else:
            raise TreeEndError('End of branch.')
        self.nodenum += 1
        self._update()
        return self.node

    def previous(self):
        """
        Move the `Cursor` to & return the previous `Node`.

        Raise `TreeEndError` if the start of the game is exceeded.
        """
        if self.index > 0:
            self.index -= 1
        elif self.stack:
            self.gametree = self.stack.pop()
            self.index = len(self.gametree.sequence) - 1
        else:
            raise TreeEndError('Start of game.')
        self.nodenum -= 1
        self._update()
        return self.node

    def _update(self):
        """Set `self.node`, `self.children`, and the flags."""
        sequence = self.gametree.sequence
        self.node = sequence[self.index]
        if self.index + 1 < len(sequence):
            self.children = [sequence[self.index + 1]]
        else:
            self.children = [
                branch.sequence[0] for branch in self.gametree.branches]
        self.at_end = not self.children
        self.at_start = not self.stack and self.index == 0


class Parser:

    """
    Parser for SGF data. Creates a tree structure based on the SGF standard
    itself. `Parser.parse()` will return a `Collection` object for the
    entire data.

    Each grammar rule is a method that consumes exactly its own construct
    (plus trailing whitespace) and returns the finished object, or raises a
    `ParseError`. One character of lookahead decides every step; nothing is
    ever re-read.
    """

    encoding = TEXT_ENCODING
    """Used to decode `bytes` data."""

    whitespace = frozenset(' \t\n\r\v')
    """Characters skipped between syntactic units."""

    def __init__(self, data):
        if isinstance(data, bytes):
            data = data.decode(self.encoding)

        self.data = data
        """The complete SGF data instance (`str`)."""

        self.datalen = len(data)
        """Length of `self.data`."""

        self.index = 0
        """Current parsing position in `self.data`."""

    def peek(self, offset=0):
        """Return the character `offset` past the current position, or `END`."""
        position = self.index + offset
        if 0 <= position < self.datalen:
            return self.data[position]
        return END

    def read(self):
        """Return the current character and advance; `END` at end of data."""
        if self.index >= self.datalen:
            return END
        char = self.data[self.index]
        self.index += 1
        return char

    def skip_whitespace(self):
        while self.peek() in self.whitespace:
            self.index += 1

    def parse(self):
        """
        Parse the SGF data stored in `self.data`, and return a `Collection`.

        Raise `ParseError` (a subclass) at the first structural problem.
        """
        self.skip_whitespace()
        if self.peek() != '(':
            raise TreeParseError("expected '('")
        collection = Collection([self.parse_game_tree()])
        while (game := self.parse_one_game()) is not None:
            collection.append(game)
        self.skip_whitespace()
        return collection

    def parse_one_game(self):
        """
        Parse one game from `self.data`. Return a `GameTree` containing one
        game, or `None` if the end of `self.data` has been reached.
        """
        self.skip_whitespace()
        if self.peek() == END:
            return None
        if self.peek() != '(':
            raise TreeParseError("expected '('")
        return self.parse_game_tree()

    def parse_game_tree(self):
        """
        Parse and return one `GameTree` from `self.data`, including all of
        its branches.

        Called when "(" encountered, ends when the matching ")" is consumed.
        Open game trees are kept on an explicit stack, so nesting depth is
        not limited by the interpreter's recursion limit.

        Raise `TreeParseError` if a problem is encountered.
        """
        self.read()
        root = GameTree(self.parse_sequence())
        stack = [root]
        while stack:
            if self.peek() == '(':
                self.read()
                branch = GameTree(self.parse_sequence())
                stack[-1].branches.append(branch)
                stack.append(branch)
                continue
            if self.read() != ')':
                raise TreeParseError("expected ')'")
            self.skip_whitespace()
            stack.pop()
        return root

    def parse_sequence(self):
        """Parse and return a non-empty `Sequence` of `Node` objects."""
        if self.peek() != ';':
            raise TreeParseError("expected ';'")
        sequence = Sequence([self.parse_node()])
        while self.peek() == ';':
            sequence.append(self.parse_node())
        self.skip_whitespace()
        return sequence

    def parse_node(self):
        """
        Parse and return one `Node`, which can be empty.

        Called when ";" encountered (& is consumed).

        Per the SGF standard,

            Only one of each property is allowed per node, e.g. one cannot
            have two comments in one node

        However, some servers produce SGF files with multiple comments per
        node, so a repeated property ID only triggers a warning; both
        properties are kept.
        """
        self.read()
        node = Node()
        seen = {}
        while is_property_id_char(self.peek()):
            prop = self.parse_property()
            existing = seen.setdefault(prop.property_id, prop)
            if existing is not prop:
                warnings.warn(
                    f'Duplicate property ID "{prop.property_id}" in node '
                    f'(existing values: {list(existing.values)}; '
                    f'new values: {list(prop.values)}). Keeping both.')
            node.append(prop)
        self.skip_whitespace()
        return node

    def parse_property(self):
        """
        Parse and return one `Property`: an ID followed by one or more
        bracketed values.

        Raise `NodePropertyParseError` if no value follows the ID.
        """
        property_id = self.parse_property_id()
        if self.peek() != '[':
            raise NodePropertyParseError("expected '['")
        values = [self.parse_property_value()]
        while self.peek() == '[':
            values.append(self.parse_property_value())
        self.skip_whitespace()
        return Property(property_id, values)

    def parse_property_id(self):
        chars = []
        while is_property_id_char(self.peek()):
            chars.append(self.read())
        if not chars:
            raise NodePropertyParseError('expected propident')
        self.skip_whitespace()
        return ''.join(chars)

    def parse_property_value(self):
        """
        Parse and return one property value string.

        Called when "[" encountered (& is consumed), ends after the closing
        "]". A backslash is removed and the character following it is kept
        verbatim, whatever it is (including "]", "\\" and line breaks).

        Raise `PropertyValueParseError` if the data ends before "]".
        """
        self.read()
        value_parts = []
        while True:
            char = self.read()
            if char == ']':
                break
            elif char == '\\':
                value_parts.append(self.read())
            elif char == END:
                raise PropertyValueParseError("expected ']'")
            else:
                value_parts.append(char)
        self.skip_whitespace()
        return ''.join(value_parts)


def parse(data):
    """Parse SGF `data` (`str` or `bytes`) and return a `Collection`."""
    return Parser(data).parse()


class CLI:

    """
    Abstract base class that supports command-line interface tools.
    Subclasses must define:

    * An ``execute`` method as follows::

          def execute(self):
              # do everything here

    * `argument_specs`, the CLI arguments & options specifications, used as
      the arguments to `argparse.add_argument`::

          argument_specs = (
              (# Argument name or option flags (a tuple):
               ('name',),
               # Keyword arguments (a dictionary):
               {'default': None,
                'metavar': 'NAME',
                'help': ('Name that name.')}),
              # ...
              )

    * A class docstring that will be used as the description for the CLI
      --help.

    The command-line front end tool itself needs only two lines:

        import sgfparse
        sgfparse.DumpCLI().run()
    """

    def __init__(self, settings=None, argv=None):
        """Instantiate to process the command-line arguments."""
        if settings is None:
            settings = self.process_command_line(argv)
        self.settings = settings

    @classmethod
    def main(cls):
        """Console-script entry point."""
        cls().run()

    def run(self):
        try:
            self.execute()
        except Exception:
            print(
                '\n{}'.format(
                    datetime.datetime.now().isoformat(
                        sep=' ', timespec='seconds')),
                file=sys.stderr)
            raise

    help_option_spec = (
        ('--help', '-h',),
        {'action': 'help', 'help': 'Show this help message.'})

    @classmethod
    def process_command_line(cls, argv=None):
        """
        Return `settings`, a namespace of options & arguments to their values.

        `argv` is a list of arguments; pass `None` (the default) to use the
        command-line arguments (``sys.argv[1:]``).

        The subclass must declare `argument_specs`, the CLI arguments &
        options specifications. See the class docstring.
        """
        parser = argparse.ArgumentParser(
            description=textwrap.dedent(cls.__doc__),
            formatter_class=argparse.RawDescriptionHelpFormatter,
            # Help option added manually (below) for consistency:
            add_help=False,)
        for names, params in cls.argument_specs:
            parser.add_argument(*names, **params)
        names, params = cls.help_option_spec
        parser.add_argument(*names, **params)
        if argv is None:
            argv = sys.argv[1:]
        settings = parser.parse_args(argv)
        return settings


class DumpCLI(CLI):

    # Command-Line Interface implementation.

    """
    Parse an SGF (Smart Game Format) file and print the resulting game trees
    to standard output, as SGF text (one node per line) or as an object
    representation.

    If the file is not well-formed SGF, or is not text in `Parser.encoding`,
    the first error found is reported on standard error and the exit status
    is 1.
    """

    def execute(self):
        try:
            collection = Collection.load(self.settings.source_file)
        except (ParseError, UnicodeDecodeError) as error:
            path = self.settings.source_file or '<stdin>'
            sys.exit(f'Error parsing "{path}": {error}')
        if self.settings.main:
            collection = Collection(game.trunk() for game in collection)
        if self.settings.repr:
            print(repr(collection))
        elif self.settings.pretty_format:
            print(collection.pretty(), end='')
        else:
            print(collection)

    argument_specs = (
        (('source_file',),
         {'type': str,
          'nargs': '?',
          'default': None,
          'help': ('Path to the SGF file to parse. '
                   'Omit or use "-" to read from the standard input.')}),
        (('--main', '-m',),
         {'action': 'store_true',
          'default': False,
          'help': 'Output the main game only. Strip out all variations.'}),
        (('--pretty-format', '-p',),
         {'action': 'store_true',
          'default': False,
          'help': 'Pretty-format the output SGF.'}),
        (('--repr', '-r',),
         {'action': 'store_true',
          'default': False,
          'help': 'Output the object representation instead of SGF.'}),
        )


if __name__ == '__main__':
    DumpCLI().run()
