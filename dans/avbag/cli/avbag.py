"""
avbag command-line program for preprocessing bags that contain audio/video materials.
"""
import os, sys, logging

from ..utils import cli
from .. import def_etc_dir, __version__
from ..exceptions import ConfigurationException
from . import convert

description = "preprocess bags exported from the legacy archive that contain AV materials"
epilog = None
default_prog_name = "avbag"
default_conf_file = os.path.join(def_etc_dir, "avbag-config.yml") if def_etc_dir else None

def main(cmdname, args):
    """
    a function that executes the ``avbag`` command-line tool.
    """
    if not cmdname:
        cmdname = default_prog_name

    # set up the commands
    argparser = cli.define_prog_opts(cmdname, description, epilog, version=__version__)
    avbag = cli.CLISuite(cmdname, default_conf_file, argparser)
    avbag.load_subcommand(convert)

    # execute the commands
    avbag.execute(args)
    return args

def run(prog=None, args=None):
    """
    run the ``avbag`` tool as a script, exiting with the appropriate status
    """
    if prog is None:
        prog = os.path.splitext(os.path.basename(sys.argv[0]))[0]
    if args is None:
        args = sys.argv[1:]

    try:
        main(prog, args)
        sys.exit(0)
    except cli.CommandFailure as ex:
        logging.getLogger(f"{prog} {ex.cmd}").critical(str(ex))
        sys.exit(ex.stat)
    except ConfigurationException as ex:
        logging.getLogger(prog).critical("Config error: "+str(ex))
        sys.exit(6)
    except Exception as ex:
        logging.getLogger(prog).exception(ex)
        sys.exit(200)

if __name__ == "__main__":
    run()
