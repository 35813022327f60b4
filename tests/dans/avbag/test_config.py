import os, sys, logging, json
import unittest as test

from dans.avbag.testing import *
from dans.avbag import config
from dans.avbag.exceptions import ConfigurationException

tmpd = None

def setUpModule():
    global tmpd
    ensure_tmpdir()
    tmpd = tmpdir()

def tearDownModule():
    rmtmpdir()

class TestLoadConfig(test.TestCase):

    def setUp(self):
        self.tf = Tempfiles()

    def tearDown(self):
        self.tf.clean()

    def test_load_yaml(self):
        cfgfile = self.tf.track("conf.yml")
        with open(cfgfile, 'w') as fd:
            fd.write("staging_dir: /tmp/staging\n")
            fd.write("pseudo_file_sources:\n  path: ${AVBAG_TEST_CSV:-sources.csv}\n")
        cfg = config.load_from_file(cfgfile)
        self.assertEqual(cfg['staging_dir'], "/tmp/staging")
        self.assertEqual(cfg['pseudo_file_sources']['path'],
                         os.environ.get("AVBAG_TEST_CSV", "sources.csv"))

    def test_load_json(self):
        cfgfile = self.tf.track("conf.json")
        with open(cfgfile, 'w') as fd:
            json.dump({"keep_input": True, "logfile": "x.log"}, fd)
        cfg = config.load_from_file(cfgfile)
        self.assertEqual(cfg, {"keep_input": True, "logfile": "x.log"})

    def test_load_empty(self):
        cfgfile = self.tf.track("empty.yml")
        with open(cfgfile, 'w') as fd:
            fd.write("\n")
        self.assertEqual(config.load_from_file(cfgfile), {})

    def test_load_nondict(self):
        cfgfile = self.tf.track("list.yml")
        with open(cfgfile, 'w') as fd:
            fd.write("- a\n- b\n")
        with self.assertRaises(ConfigurationException):
            config.load_from_file(cfgfile)

class TestSubstitute(test.TestCase):

    def test_substitute(self):
        env = { "HOME": "/home/gurn", "EMPTY": "" }
        cfg = {
            "a": "${HOME}/av",
            "b": [ "${HOME}", 3, "${NOPE:-/tmp}" ],
            "c": { "d": "x${EMPTY}y" },
            "e": True
        }
        out = config.substitute_env_vars(cfg, env)
        self.assertEqual(out, {
            "a": "/home/gurn/av",
            "b": [ "/home/gurn", 3, "/tmp" ],
            "c": { "d": "xy" },
            "e": True
        })
        self.assertEqual(cfg['a'], "${HOME}/av")

    def test_unset(self):
        with self.assertRaises(ConfigurationException):
            config.substitute_env_vars({"a": "${NOPE}"}, {})

class TestMerge(test.TestCase):

    def test_merge(self):
        defc = { "a": 1, "b": { "c": 2, "d": 3 }, "e": [1] }
        prim = { "b": { "d": 4 }, "e": [2], "f": 5 }
        out = config.merge_config(prim, defc)
        self.assertEqual(out, { "a": 1, "b": { "c": 2, "d": 4 }, "e": [2], "f": 5 })
        self.assertEqual(defc['b']['d'], 3)

class TestConfigureLog(test.TestCase):

    def tearDown(self):
        rootlog = logging.getLogger()
        if config._log_handler:
            rootlog.removeHandler(config._log_handler)
            config._log_handler.close()
            config._log_handler = None

    def test_configure_log(self):
        config.configure_log(config={ "logdir": tmpd, "logfile": "test.log", "loglevel": "DEBUG" })
        self.assertEqual(config.global_logfile, os.path.join(tmpd, "test.log"))
        self.assertEqual(logging.getLogger().level, logging.DEBUG)
        logging.getLogger("avbag").info("hello")
        with open(config.global_logfile) as fd:
            content = fd.read()
        self.assertIn("logging to", content)
        self.assertIn("hello", content)

    def test_bad_level(self):
        with self.assertRaises(ConfigurationException):
            config.configure_log(config={ "logdir": tmpd, "loglevel": "LOUD" })

    def test_normal_level(self):
        self.assertEqual(logging.getLevelName(config.NORMAL), "NORMAL")
        self.assertTrue(logging.DEBUG < config.NORMAL < logging.INFO)


if __name__ == '__main__':
    test.main()
