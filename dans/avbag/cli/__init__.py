"""
module supporting the command-line interface to the AV bag preprocessor, ``avbag``.

EXIT STATUS

Commands built into this cli infrastructure follow these conventions for exit status codes:

  0 - normal successful completion (even if individual bags failed to convert; see the log)
  1 - the state of the filesystem prevents the command from running (e.g. the staging directory
      is not empty)
  2 - an error was found in the option or argument values, preventing proper parsing or interpretation
  3 - a read error or inconsistency was found in the input data (e.g. the CSV mapping file)
  4 - error occured while writing output data
  6 - if a configuration error was detected
  10 - an unrecognized subcommand was requested

The value 200 is returned if any unexpected, uncaught exception bubbles to the top of the
execution stack.
"""
from ..utils.cli import CommandFailure
