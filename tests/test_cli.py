import os
import pathlib
import tempfile
import unittest as ut
from unittest import mock

from click.testing import CliRunner

from polystore.cli import main
from polystore.clients import Clients


class TestCommandLine(ut.TestCase):

    def setUp(self):
        self._temp_dir = tempfile.TemporaryDirectory()
        self.temp_dir = pathlib.Path(self._temp_dir.name)
        self.dir_url = str(self.temp_dir / "work") + os.sep
        self.runner = CliRunner()
        self._patch = mock.patch.object(Clients, "from_config", return_value=Clients())
        self._patch.start()

    def tearDown(self):
        self._patch.stop()
        self._temp_dir.cleanup()

    def invoke(self, *args):
        return self.runner.invoke(main, list(args))

    def test_workflow(self):
        file_url = self.dir_url + "a.txt"
        result = self.invoke("mkdir", self.dir_url)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("was created", result.output)

        result = self.invoke("write", file_url, "hello")
        self.assertEqual(result.exit_code, 0, result.output)
        result = self.invoke("cat", file_url)
        self.assertEqual(result.output, "hello")

        self.assertEqual(self.invoke("exists", file_url).output.strip(), "yes")
        self.assertEqual(self.invoke("exists", self.dir_url + "b.txt").output.strip(), "no")

        result = self.invoke("cp", file_url, self.dir_url + "b.txt")
        self.assertEqual(result.exit_code, 0, result.output)
        result = self.invoke("ls", self.dir_url)
        self.assertEqual(result.output.splitlines(), [self.dir_url + "a.txt", self.dir_url + "b.txt"])

        result = self.invoke("rm", "--no-recurse", "--keep-going", self.dir_url)
        self.assertNotEqual(result.exit_code, 0)
        self.assertTrue((self.temp_dir / "work" / "a.txt").exists())

        result = self.invoke("rm", self.dir_url)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertFalse((self.temp_dir / "work").exists())

    def test_touch(self):
        file_url = str(self.temp_dir / "t.txt")
        result = self.invoke("touch", file_url)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue((self.temp_dir / "t.txt").exists())
        result = self.invoke("touch", "--no-overwrite", file_url)
        self.assertNotEqual(result.exit_code, 0)

    def test_cat_needs_file_url(self):
        result = self.invoke("cat", self.dir_url)
        self.assertNotEqual(result.exit_code, 0)
