#! /usr/bin/env python3
"""
Preprocess bags containing AV materials:  substitute the archived originals for placeholder files
and produce the publishable and streaming revisions of each bag.

Execute this script with the -h option to display the list of options.
"""
# avbag [-h] [-w DIR] [-c CONFFILE] [-l LOGFILE] [-q] [-D] [-v] convert [-s DIR] [-k] INPUT_DIR OUTPUT_DIR
import sys, os
from dans.avbag.cli import avbag

prog = os.path.basename(sys.argv[0])
if prog.endswith('.py'):
    prog = prog[:-(len('.py'))]

avbag.run(prog, sys.argv[1:])
