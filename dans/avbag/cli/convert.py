"""
CLI command that converts a directory of exported AV bags into their preprocessed revisions.
"""
import logging, os

from ..exceptions import ConfigurationException, StateException, PseudoFileSourcesException
from ..convert import PseudoFileSources, AVConverter
from ..utils.cli import CommandFailure, explain

default_name = "convert"
help = "convert exported AV bags into their preprocessed revisions"
description = """
  Convert the AV bags found in INPUT_DIR, writing the resulting bags to OUTPUT_DIR.

  Each bag is expected at INPUT_DIR/PARENT/BAG.  The placeholder files in the bag are replaced by
  their originals from the dark archive; a second revision is created without the placeholders and
  without the files that nobody may see or access; and, where streaming copies are available, a third
  revision adds them.  Bags whose PARENT already exists in OUTPUT_DIR are skipped.  The locations of
  the originals and the streaming copies are given by the pseudo_file_sources configuration.
"""

def load_into(subparser):
    """
    define the arguments and options of the convert command in the given (sub)parser
    """
    p = subparser
    p.description = description
    p.add_argument("inputdir", metavar="INPUT_DIR", type=str,
                   help="the directory containing the exported AV bags")
    p.add_argument("outputdir", metavar="OUTPUT_DIR", type=str,
                   help="the directory where the converted AV bags will be stored")
    p.add_argument("-s", "--staging-dir", metavar="DIR", type=str, dest="stagingdir",
                   help="the (empty) directory to assemble bags in, overriding the staging_dir "+
                        "configuration parameter")
    p.add_argument("-k", "--keep-input", action="store_true", dest="keepinput",
                   help="do not delete the input bags after they have been converted")

def _abspath(path, config):
    return os.path.join(config.get('working_dir', os.getcwd()), path)

def execute(args, config=None, log=None):
    """
    execute this command: convert all the bags in the input directory
    """
    cmd = default_name
    if not log:
        log = logging.getLogger(cmd)
    if not config:
        config = {}

    stagingdir = args.stagingdir or config.get('staging_dir')
    if not stagingdir:
        raise CommandFailure(cmd, "No staging directory given (use --staging-dir or set staging_dir)", 2)
    keep = args.keepinput or bool(config.get('keep_input', False))

    srccfg = config.get('pseudo_file_sources')
    if not srccfg:
        raise CommandFailure(cmd, "Missing required configuration: pseudo_file_sources", 6)
    srccfg = dict((k, _abspath(v, config)) for k, v in srccfg.items() if v)

    try:
        sources = PseudoFileSources(srccfg, log.getChild("sources"))
    except ConfigurationException as ex:
        raise CommandFailure(cmd, "Configuration error: "+str(ex), 6, ex)
    except PseudoFileSourcesException as ex:
        raise CommandFailure(cmd, "Unable to load pseudo file sources: "+str(ex), 3, ex)

    converter = AVConverter(_abspath(args.inputdir, config), _abspath(args.outputdir, config),
                            _abspath(stagingdir, config), sources, keep, log=log)
    explain(log, "Converting bags in %s", converter.inputdir)
    try:
        tally = converter.convert_all()
    except StateException as ex:
        raise CommandFailure(cmd, str(ex), 1, ex)

    print(converter.summarize(tally))
    return tally
