"""
the framework behind the ``avbag`` command-line program:  the program-level options, the
exception that carries an exit status out of a command, and :py:class:`CLISuite`, which parses
the command line, loads the configuration, sets up logging and dispatches to a command.

A command is provided by a module (or object) with these attributes:

``default_name``
     the name the command is invoked as (e.g. ``convert``)
``help``, ``description``
     the one-line and the full description shown by ``-h``
``load_into(subparser)``
     a function that defines the command's arguments and options
``execute(args, config, log)``
     a function that runs the command with the parsed arguments, the loaded configuration and
     a Logger to use; it signals failure by raising :py:class:`CommandFailure`.
"""
import os, sys, logging
from argparse import ArgumentParser, HelpFormatter

from ..exceptions import StateException, ConfigurationException
from .. import config as cfgmod

EXPLAIN = cfgmod.NORMAL

def explain(log, message, *params):
    """
    log a message at the NORMAL level, between DEBUG and INFO.  Such messages narrate what the
    program is doing:  they always go to the log file but only reach the terminal with --verbose.
    """
    log.log(EXPLAIN, message, *params)

class _ParagraphHelpFormatter(HelpFormatter):
    # rewrap each blank-line-separated paragraph of a description on its own
    def _fill_text(self, text, width, indent):
        return "\n\n".join(super(_ParagraphHelpFormatter, self)._fill_text(p, width, indent)
                           for p in text.split("\n\n"))

def define_prog_opts(progname, description=None, epilog=None, parser=None, version=None):
    """
    define the options that apply to the program as a whole (as opposed to a particular command)

    :param str progname:    the program name to show in usage messages
    :param str description: the text that precedes the option descriptions in the help
    :param str epilog:      the text that follows the option descriptions in the help
    :param ArgumentParser parser:  the parser to add the options to; if not provided, a new one
                            is created
    :param str version:     the version to report with -V/--version; if not provided, that option
                            is not available
    :rtype: ArgumentParser
    """
    if not parser:
        parser = ArgumentParser(progname, None, description, epilog,
                                formatter_class=_ParagraphHelpFormatter)

    cmdhelp = "Run '%(prog)s CMD -h' for help specifically on CMD."
    parser.epilog = cmdhelp + "\n\n" + parser.epilog if parser.epilog else cmdhelp

    parser.add_argument("-w", "--workdir", type=str, dest='workdir', metavar='DIR', default="",
                        help="resolve relative input, output, staging and log paths against DIR; "+
                             "default: the current directory")
    parser.add_argument("-c", "--config", type=str, dest='conf', metavar='FILE',
                        help="read the configuration from FILE instead of the default file")
    parser.add_argument("-l", "--logfile", type=str, dest='logfile', metavar='FILE',
                        help="write log messages to FILE (within the working directory)")
    parser.add_argument("-q", "--quiet", action="store_true", dest='quiet',
                        help="print nothing to standard error")
    parser.add_argument("-D", "--debug", action="store_true", dest='debug',
                        help="include DEBUG messages in the log")
    parser.add_argument("-v", "--verbose", action="store_true", dest='verbose',
                        help="print the progress of each bag (and, with -D, DEBUG messages) to "+
                             "standard error")
    if version:
        parser.add_argument("-V", "--version", action="version", version="%(prog)s "+version)

    return parser

class CommandFailure(Exception):
    """
    raised by a command that could not complete; the program exits with the status it carries.
    See :py:mod:`dans.avbag.cli` for the meaning of the status values.
    """

    def __init__(self, cmdname, message, exstat=1, cause=None):
        """
        :param str cmdname:     the name of the command that failed
        :param str message:     what went wrong; if empty, the message of ``cause`` is used
        :param int exstat:      the exit status for the program
        :param Exception cause: the error that made the command fail, if any
        """
        if not message:
            message = str(cause) if cause else "Unknown command failure"
        super(CommandFailure, self).__init__(message)
        self.stat = exstat
        self.cmd = cmdname
        self.cause = cause

class CLISuite(object):
    """
    the driver for a program made up of one or more commands
    """

    def __init__(self, progname, defconffile=None, parser=None):
        """
        :param str progname:     the name of the program (used for its logger and default log file)
        :param str defconffile:  the configuration file to read when none is given with -c; it is
                                 ignored if it does not exist
        :param ArgumentParser parser:  the parser with the program-level options already defined
                                 (see :py:func:`define_prog_opts`)
        """
        self.suitename = progname
        self._defconffile = defconffile
        self.parser = parser or define_prog_opts(progname)
        self._subparser_src = self.parser.add_subparsers(title="commands", dest="cmd")
        self._cmds = {}

    def load_subcommand(self, cmdmod, cmdname=None):
        """
        make a command available to the program

        :param module|object cmdmod:  the command implementation (see the module documentation)
        :param str cmdname:  the name to invoke it as; by default, its ``default_name``
        :raises StateException:  if ``cmdmod`` does not look like a command
        """
        if not hasattr(cmdmod, "load_into") or not hasattr(cmdmod, "execute"):
            raise StateException("Not a command implementation: " + repr(cmdmod))
        if not cmdname:
            cmdname = cmdmod.default_name
        subparser = self._subparser_src.add_parser(cmdname, description=cmdmod.description,
                                                   help=cmdmod.help,
                                                   formatter_class=_ParagraphHelpFormatter)
        cmdmod.load_into(subparser)
        self._cmds[cmdname] = cmdmod

    def parse_args(self, args):
        return self.parser.parse_args(args)

    def load_config(self, args):
        """
        read the configuration file named with -c or, failing that, the default one

        :rtype: dict
        :raises CommandFailure:  (status 6) if the file cannot be read or parsed
        """
        try:
            if args.conf:
                return cfgmod.load_from_file(args.conf)
            if self._defconffile and os.path.isfile(self._defconffile):
                return cfgmod.load_from_file(self._defconffile)
            return {}
        except (IOError, ValueError, ConfigurationException) as ex:
            raise CommandFailure(args.cmd, "Unable to read configuration: "+str(ex), 6, ex)

    def configure_log(self, args, config):
        """
        send log messages to the log file and, unless -q was given, to standard error.  The log
        file is the one named with -l (placed in the working directory), else the configured
        ``logfile``, else ``<progname>.log``.

        :return:  the program's Logger
        """
        workdir = config.get('working_dir', os.getcwd())
        if args.logfile:
            config['logfile'] = os.path.join(workdir, args.logfile)
        else:
            config.setdefault('logfile', self.suitename + ".log")
        config.setdefault('logdir', workdir)
        cfgmod.configure_log(level=(args.debug and logging.DEBUG) or cfgmod.NORMAL, config=config)

        if not args.quiet:
            handler = logging.StreamHandler(sys.stderr)
            if args.verbose:
                handler.setLevel((args.debug and logging.DEBUG) or cfgmod.NORMAL)
                handler.setFormatter(logging.Formatter("%(name)s %(levelname)s: %(message)s"))
            else:
                handler.setLevel(logging.INFO)
                handler.setFormatter(logging.Formatter(self.suitename+" %(levelname)s: %(message)s"))
            logging.getLogger().addHandler(handler)

        log = logging.getLogger("cli."+self.suitename)
        log.setLevel(cfgmod.NORMAL)
        if args.verbose:
            log.info("FYI: Writing log messages to %s", cfgmod.global_logfile)
        return log

    def execute(self, args, config=None):
        """
        run the command selected on the command line

        :param list|Namespace args:  the command-line arguments (without the program name), either
                                     as a list of strings or already parsed
        :param dict config:  the configuration to use; if None, it is loaded from a file
        :return:  whatever the command returns
        :raises CommandFailure:  if the command is unknown, the working directory or configuration is
                                 unusable, or the command itself fails
        """
        argv = args if isinstance(args, list) else None
        if argv is not None:
            args = self.parse_args(argv)
        cmd = self._cmds.get(args.cmd)
        if cmd is None:
            raise CommandFailure(args.cmd, "Unrecognized command: "+str(args.cmd), 10)

        if config is None:
            config = self.load_config(args)

        if args.workdir:
            args.workdir = os.path.abspath(args.workdir)
            if not os.path.isdir(args.workdir):
                raise CommandFailure(args.cmd, "Working dir is not an existing directory: "+args.workdir, 2)
            config['working_dir'] = args.workdir
        else:
            config['working_dir'] = os.path.abspath(config.get('working_dir', os.getcwd()))

        try:
            proglog = self.configure_log(args, config)
            if argv:
                explain(proglog, "Executing: %s %s", self.suitename, " ".join(argv))
            return cmd.execute(args, config, proglog.getChild(args.cmd))
        except ConfigurationException as ex:
            raise CommandFailure(args.cmd, "Configuration error: "+str(ex), 6, ex)
