import os, sys, logging
import unittest as test
from pathlib import Path

from dans.avbag.testing import *
from dans.avbag.convert.sources import PseudoFileSources
from dans.avbag.exceptions import PseudoFileSourcesException, ConfigurationException

def setUpModule():
    ensure_tmpdir()

def tearDownModule():
    rmtmpdir()

class TestPseudoFileSources(test.TestCase):

    def setUp(self):
        self.tf = Tempfiles()
        self.avdir = Path(self.tf.mkdir("darkarchive"))
        self.sfdir = Path(self.tf.mkdir("springfield"))
        self.csvfile = self.tf.track("sources.csv")
        make_source_files(self.avdir, {
            "p1/x/a.mp4": b"0123456789",
            "p1/x/b.mp3": b"01234",
            "p2/c.wav": b"0"
        })
        make_source_files(self.sfdir, { "s/a.mp4": b"stream" })
        self.config = {
            "darkarchive_dir": str(self.avdir),
            "springfield_dir": str(self.sfdir),
            "path": self.csvfile
        }

    def tearDown(self):
        self.tf.clean()

    def test_load(self):
        write_mapping_csv(self.csvfile, [
            ("easy-file:1", "p1/x/a.mp4", "s/a.mp4", "easy-dataset:1"),
            ("easy-file:2", "p1/x/b.mp3", "", "easy-dataset:1"),
            ("easy-file:3", " p2/c.wav ", "", "easy-dataset:2"),
        ])
        srcs = PseudoFileSources(self.config)
        self.assertEqual(dict(srcs.get_darkarchive_files("p2")),
                         {"easy-file:3": self.avdir.resolve() / "p2/c.wav"})

        av = srcs.get_darkarchive_files("p1")
        self.assertEqual(dict(av), {
            "easy-file:1": self.avdir.resolve() / "p1/x/a.mp4",
            "easy-file:2": self.avdir.resolve() / "p1/x/b.mp3"
        })
        self.assertEqual(dict(srcs.get_springfield_files("p1")),
                         { "easy-file:1": self.sfdir.resolve() / "s/a.mp4" })
        self.assertEqual(list(srcs.get_darkarchive_files("p2").keys()), ["easy-file:3"])
        self.assertEqual(len(srcs.get_springfield_files("p2")), 0)

        # unknown parent
        self.assertEqual(len(srcs.get_darkarchive_files("goob")), 0)
        self.assertEqual(len(srcs.get_springfield_files("goob")), 0)

        # read-only
        with self.assertRaises(TypeError):
            av["easy-file:9"] = Path("/tmp")

    def test_incomplete_config(self):
        del self.config['springfield_dir']
        with self.assertRaises(ConfigurationException):
            PseudoFileSources(self.config)

    def test_missing_dirs(self):
        self.config['darkarchive_dir'] = self.tf("goob")
        self.config['springfield_dir'] = self.csvfile
        write_mapping_csv(self.csvfile, [])
        with self.assertRaises(PseudoFileSourcesException) as cm:
            PseudoFileSources(self.config)
        self.assertIn("Not existing or not a directory", str(cm.exception))
        self.assertIn("goob", str(cm.exception))
        self.assertIn("sources.csv", str(cm.exception))

    def test_missing_csv(self):
        with self.assertRaises(PseudoFileSourcesException) as cm:
            PseudoFileSources(self.config)
        self.assertIn("Does not exist or is not a file", str(cm.exception))

        self.config['path'] = str(self.avdir)
        with self.assertRaises(PseudoFileSourcesException) as cm:
            PseudoFileSources(self.config)
        self.assertIn("Does not exist or is not a file", str(cm.exception))

    def test_missing_header(self):
        write_mapping_csv(self.csvfile, [("easy-file:1", "p1/x/a.mp4", "")],
                          ["easy_file_id", "path_in_AV_dir", "path_in_streaming_dir"])
        with self.assertRaises(PseudoFileSourcesException) as cm:
            PseudoFileSources(self.config)
        self.assertIn("path_in_springfield_dir not found in actual CSV headers", str(cm.exception))

    def test_missing_values(self):
        write_mapping_csv(self.csvfile, [
            ("easy-file:1", "p1/x/a.mp4", "", ""),
            ("", "p1/x/b.mp3", "", ""),
            ("easy-file:3", "  ", "s/a.mp4", ""),
        ])
        log = logging.getLogger("avbag.test.sources")
        with self.assertLogs(log, logging.WARNING) as cm:
            with self.assertRaises(PseudoFileSourcesException) as ecm:
                PseudoFileSources(self.config, log)
        self.assertEqual(str(ecm.exception), "2 records have missing values. See warnings.")
        self.assertEqual(len(cm.output), 2)
        self.assertIn("No value in column path_in_AV_dir and/or easy_file_id", cm.output[0])

    def test_missing_files(self):
        write_mapping_csv(self.csvfile, [
            ("easy-file:1", "p1/x/a.mp4", "s/gone.mp4", ""),
            ("easy-file:2", "p1/x/gone.mp3", "", ""),
        ])
        with self.assertRaises(PseudoFileSourcesException) as cm:
            PseudoFileSources(self.config)
        msg = str(cm.exception)
        self.assertTrue(msg.startswith("Not existing files: "))
        self.assertIn("s/gone.mp4", msg)
        self.assertIn("p1/x/gone.mp3", msg)
        self.assertNotIn("a.mp4", msg)


if __name__ == '__main__':
    test.main()
