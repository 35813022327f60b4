import os, sys
import unittest as test
from pathlib import Path

from lxml import etree

from dans.avbag.testing import *
from dans.avbag import filesxml
from dans.avbag.constants import FILES_NS, DCT_NS

def setUpModule():
    ensure_tmpdir()

def tearDownModule():
    rmtmpdir()

def parse(files):
    return etree.ElementTree(etree.fromstring(files_xml_text(files).encode('utf-8')))

class TestFilesXml(test.TestCase):

    def setUp(self):
        self.tf = Tempfiles()
        self.tree = parse([
            pfile("data/a.mp4", "easy-file:1", source="http://x/a.mp4",
                  accessible="RESTRICTED_REQUEST", visible=" ANONYMOUS "),
            pfile("data/b.txt", "easy-file:2", accessible="NONE", visible=None),
            pfile("data/c.txt", None, accessible=None, visible=None),
        ])

    def tearDown(self):
        self.tf.clean()

    def test_file_elements(self):
        els = filesxml.file_elements(self.tree)
        self.assertEqual(len(els), 3)
        self.assertEqual([filesxml.get_filepath(e) for e in els],
                         ["data/a.mp4", "data/b.txt", "data/c.txt"])
        self.assertEqual([filesxml.get_identifier(e) for e in els],
                         ["easy-file:1", "easy-file:2", None])

        # removing while looping over the list does not skip entries
        seen = []
        for el in filesxml.file_elements(self.tree):
            seen.append(filesxml.get_filepath(el))
            el.getparent().remove(el)
        self.assertEqual(len(seen), 3)
        self.assertEqual(filesxml.file_elements(self.tree), [])

    def test_rights(self):
        a, b, c = filesxml.file_elements(self.tree)
        self.assertEqual(filesxml.get_rights(a, "accessibleToRights"), "RESTRICTED_REQUEST")
        self.assertEqual(filesxml.get_rights(a, "visibleToRights"), "ANONYMOUS")
        self.assertIsNone(filesxml.get_rights(b, "visibleToRights"))

        self.assertFalse(filesxml.is_accessible_to_none(a))
        self.assertFalse(filesxml.is_visible_to_none(a))
        self.assertTrue(filesxml.is_accessible_to_none(b))
        self.assertTrue(filesxml.is_visible_to_none(b))
        self.assertTrue(filesxml.is_none(c, "accessibleToRights"))

    def test_none_is_exact(self):
        tree = parse([pfile("data/d.txt", "easy-file:4", accessible=" NONE ", visible="none")])
        d = filesxml.file_elements(tree)[0]
        self.assertFalse(filesxml.is_accessible_to_none(d))
        self.assertFalse(filesxml.is_visible_to_none(d))
        self.assertEqual(filesxml.get_rights(d, "accessibleToRights"), "NONE")

    def test_has_filepath_in(self):
        pred = filesxml.has_filepath_in(["data/b.txt", "data/./c.txt"])
        self.assertEqual([pred(e) for e in filesxml.file_elements(self.tree)], [False, True, True])

    def test_new_file_element(self):
        el = filesxml.new_file_element("data/a-streaming.mp4", "ANONYMOUS", "KNOWN")
        filesxml.append_file_elements(self.tree, [el])
        els = filesxml.file_elements(self.tree)
        self.assertEqual(len(els), 4)
        self.assertEqual(filesxml.get_filepath(els[3]), "data/a-streaming.mp4")
        self.assertEqual(filesxml.get_rights(els[3], "visibleToRights"), "KNOWN")
        self.assertIsNone(filesxml.get_identifier(els[3]))
        self.assertEqual(els[3].tag, "{%s}file" % FILES_NS)

    def test_serialize_node(self):
        text = filesxml.serialize_node(filesxml.file_elements(self.tree)[1])
        self.assertIn('filepath="data/b.txt"', text)
        self.assertIn("easy-file:2", text)

    def test_read_write(self):
        bagdir = Path(self.tf.mkdir("bag"))
        (bagdir / "metadata").mkdir()
        outfile = filesxml.write_files_xml(bagdir, self.tree)
        self.assertEqual(outfile, bagdir / "metadata" / "files.xml")
        with open(outfile, 'rb') as fd:
            self.assertTrue(fd.read().startswith(b"<?xml version='1.0' encoding='UTF-8'?>"))

        tree = filesxml.read_files_xml(bagdir)
        self.assertEqual(len(filesxml.file_elements(tree)), 3)
        self.assertEqual(filesxml.get_identifier(filesxml.file_elements(tree)[0]), "easy-file:1")

    def test_no_entities(self):
        xmlfile = Path(self.tf.track("evil.xml"))
        xmlfile.write_text('<?xml version="1.0"?>\n<!DOCTYPE x [<!ENTITY e SYSTEM "file:///etc/passwd">]>\n'
                           '<files xmlns="%s" xmlns:dct="%s"><file filepath="data/a.txt">'
                           '<dct:identifier>&e;</dct:identifier></file></files>\n' % (FILES_NS, DCT_NS))
        tree = filesxml.read_xml(xmlfile)
        ident = filesxml.get_identifier(filesxml.file_elements(tree)[0]) or ""
        self.assertNotIn("root:", ident)


if __name__ == '__main__':
    test.main()
