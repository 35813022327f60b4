import os, sys, logging, argparse
import unittest as test
from pathlib import Path

import yaml

from dans.avbag.testing import *
from dans.avbag.cli import convert, avbag
from dans.avbag.utils.cli import CommandFailure
from dans.avbag import config as cfgmod

tmpd = None

def setUpModule():
    global tmpd
    ensure_tmpdir()
    tmpd = tmpdir()

def tearDownModule():
    rmtmpdir()

class TestConvertCmd(test.TestCase):

    def setUp(self):
        self.tf = Tempfiles()
        self.workdir = Path(self.tf.mkdir("work"))
        for d in ("input", "output", "staging"):
            (self.workdir / d).mkdir()
        make_source_files(self.workdir / "darkarchive", {"p1/a.mp4": b"0123456789"})
        (self.workdir / "springfield").mkdir()
        write_mapping_csv(self.workdir / "mapping.csv",
                          [("easy-file:1", "p1/a.mp4", "", "easy-dataset:1")])
        make_av_bag(self.workdir / "input" / "p1" / "bag-1", [
            pfile("data/a.mp4", "easy-file:1", b"", source="http://legacy/a.mp4"),
            pfile("data/b.txt", "easy-file:2", b"bbb"),
        ])

        self.config = {
            "working_dir": str(self.workdir),
            "pseudo_file_sources": {
                "darkarchive_dir": "darkarchive",
                "springfield_dir": "springfield",
                "path": "mapping.csv"
            }
        }
        self.parser = argparse.ArgumentParser()
        convert.load_into(self.parser)
        self.log = logging.getLogger("test.avbag.cli")

    def tearDown(self):
        self.tf.clean()

    def test_load_into(self):
        args = self.parser.parse_args("input output".split())
        self.assertEqual(args.inputdir, "input")
        self.assertEqual(args.outputdir, "output")
        self.assertIsNone(args.stagingdir)
        self.assertFalse(args.keepinput)

        args = self.parser.parse_args("-s stage -k input output".split())
        self.assertEqual(args.stagingdir, "stage")
        self.assertTrue(args.keepinput)

    def test_execute(self):
        args = self.parser.parse_args("-s staging input output".split())
        tally = convert.execute(args, self.config, self.log)
        self.assertEqual((tally.processed, tally.failed, tally.created, tally.done_before), (1, 0, 2, 0))
        self.assertTrue((self.workdir / "output" / "p1" / "bag-1" / "data" / "a.mp4").is_file())
        self.assertEqual(os.listdir(self.workdir / "input"), [])

    def test_execute_keep_input_via_config(self):
        self.config['staging_dir'] = "staging"
        self.config['keep_input'] = True
        args = self.parser.parse_args("input output".split())
        tally = convert.execute(args, self.config, self.log)
        self.assertEqual(tally.processed, 1)
        self.assertTrue((self.workdir / "input" / "p1" / "bag-1").is_dir())

    def test_no_staging_dir(self):
        args = self.parser.parse_args("input output".split())
        with self.assertRaises(CommandFailure) as cm:
            convert.execute(args, self.config, self.log)
        self.assertEqual(cm.exception.stat, 2)

    def test_no_sources(self):
        del self.config['pseudo_file_sources']
        args = self.parser.parse_args("-s staging input output".split())
        with self.assertRaises(CommandFailure) as cm:
            convert.execute(args, self.config, self.log)
        self.assertEqual(cm.exception.stat, 6)

        self.config['pseudo_file_sources'] = { "darkarchive_dir": "darkarchive" }
        with self.assertRaises(CommandFailure) as cm:
            convert.execute(args, self.config, self.log)
        self.assertEqual(cm.exception.stat, 6)

    def test_bad_sources(self):
        self.config['pseudo_file_sources']['path'] = "missing.csv"
        args = self.parser.parse_args("-s staging input output".split())
        with self.assertRaises(CommandFailure) as cm:
            convert.execute(args, self.config, self.log)
        self.assertEqual(cm.exception.stat, 3)

    def test_staging_not_empty(self):
        (self.workdir / "staging" / "junk").mkdir()
        args = self.parser.parse_args("-s staging input output".split())
        with self.assertRaises(CommandFailure) as cm:
            convert.execute(args, self.config, self.log)
        self.assertEqual(cm.exception.stat, 1)
        self.assertTrue((self.workdir / "input" / "p1" / "bag-1").is_dir())

class TestAVBagMain(test.TestCase):

    def setUp(self):
        self.tf = Tempfiles()
        self.workdir = Path(self.tf.mkdir("mainwork"))
        for d in ("input", "output", "staging", "springfield"):
            (self.workdir / d).mkdir()
        make_source_files(self.workdir / "darkarchive", {"p1/a.mp4": b"0123456789"})
        write_mapping_csv(self.workdir / "mapping.csv",
                          [("easy-file:1", "p1/a.mp4", "", "easy-dataset:1")])
        make_av_bag(self.workdir / "input" / "p1" / "bag-1", [
            pfile("data/a.mp4", "easy-file:1", b"", source="http://legacy/a.mp4"),
        ])
        self.conffile = self.workdir / "avbag.yml"
        with open(self.conffile, 'w') as fd:
            yaml.safe_dump({
                "logfile": "avbag-test.log",
                "staging_dir": "staging",
                "pseudo_file_sources": {
                    "darkarchive_dir": "darkarchive",
                    "springfield_dir": "springfield",
                    "path": "mapping.csv"
                }
            }, fd)

    def tearDown(self):
        rootlog = logging.getLogger()
        if cfgmod._log_handler:
            rootlog.removeHandler(cfgmod._log_handler)
        self.tf.clean()

    def test_main(self):
        avbag.main("avbag", ["-q", "-w", str(self.workdir), "-c", str(self.conffile),
                             "convert", "input", "output"])
        self.assertTrue((self.workdir / "output" / "p1").is_dir())
        self.assertEqual(len(os.listdir(self.workdir / "output")), 2)
        self.assertTrue((self.workdir / "avbag-test.log").is_file())

    def test_unknown_config(self):
        with self.assertRaises(CommandFailure) as cm:
            avbag.main("avbag", ["-q", "-w", str(self.workdir), "-c", str(self.workdir / "nope.yml"),
                                 "convert", "input", "output"])
        self.assertEqual(cm.exception.stat, 6)

    def test_run_exit_status(self):
        with self.assertRaises(SystemExit) as cm:
            avbag.run("avbag", ["-q", "-w", str(self.workdir), "-c", str(self.conffile),
                                "convert", "-s", "nothere", "input", "output"])
        self.assertEqual(cm.exception.code, 1)


if __name__ == '__main__':
    test.main()
