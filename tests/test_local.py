import os
import pathlib
import tempfile
import unittest as ut

from polystore.base import AccessType
from polystore.exc import AlreadyExists, NotEmpty, UnknownUrlType
from polystore.local import LocalFileHandle, LocalDirectoryHandle, NetworkFileHandle, NetworkDirectoryHandle


class _Messages:

    def __init__(self):
        self.messages = []

    def __call__(self, message, label):
        self.messages.append((message, label))


class TestLocalFiles(ut.TestCase):

    def setUp(self):
        self._temp_dir = tempfile.TemporaryDirectory()
        self.temp_dir = pathlib.Path(self._temp_dir.name)

    def tearDown(self):
        self._temp_dir.cleanup()

    def test_create_write_read(self):
        handle = LocalFileHandle(str(self.temp_dir / "a.txt"))
        self.assertFalse(handle.exists())
        handle.create()
        self.assertTrue(handle.exists())
        self.assertEqual((self.temp_dir / "a.txt").read_bytes(), b"")
        handle.buffer.write(b"hello")
        handle.close()
        self.assertFalse(handle.is_open())
        self.assertEqual(handle.read_all_bytes(), b"hello")

    def test_open_modes(self):
        handle = LocalFileHandle(str(self.temp_dir / "a.txt"))
        handle.write_all_text("hello")
        buffer = handle.open(AccessType.READ)
        self.assertEqual(buffer.read(), b"hello")
        handle.close()
        handle.open(AccessType.APPEND).write(b" world")
        handle.close()
        self.assertEqual(handle.read_all_text(), "hello world")
        handle.open(AccessType.WRITE).write(b"bye")
        handle.close()
        self.assertEqual(handle.read_all_text(), "bye")

    def test_open_missing_file(self):
        handle = LocalFileHandle(str(self.temp_dir / "missing.txt"))
        self.assertEqual(handle.open().getvalue(), b"")
        handle.close()
        self.assertTrue(handle.exists())

    def test_create_without_overwrite(self):
        handle = LocalFileHandle(str(self.temp_dir / "a.txt"))
        handle.write_all_bytes(b"keep")
        messages = _Messages()
        with self.assertRaises(AlreadyExists):
            handle.create(overwrite=False, callback_label="test", callback=messages)
        self.assertEqual(handle.read_all_bytes(), b"keep")
        self.assertTrue(messages.messages[-1][0].startswith("ERROR - "))
        self.assertEqual(messages.messages[-1][1], "test")
        handle.create(overwrite=True)
        self.assertEqual(handle.read_all_bytes(), b"")

    def test_delete_is_idempotent(self):
        handle = LocalFileHandle(str(self.temp_dir / "a.txt"))
        handle.create().close(False)
        self.assertTrue(handle.delete())
        self.assertFalse(handle.exists())
        self.assertTrue(handle.delete())

    def test_flush_and_close_when_not_open(self):
        handle = LocalFileHandle(str(self.temp_dir / "a.txt"))
        messages = _Messages()
        handle.flush(callback=messages)
        handle.close(callback_label="x", callback=messages)
        self.assertEqual(len(messages.messages), 2)
        self.assertIn("not open", messages.messages[0][0])
        self.assertIn("already closed", messages.messages[1][0])
        self.assertEqual(messages.messages[1][1], "x")
        self.assertFalse(handle.exists())

    def test_directory_is_not_a_file(self):
        (self.temp_dir / "sub").mkdir()
        self.assertFalse(LocalFileHandle(str(self.temp_dir / "sub")).exists())
        self.assertTrue(LocalDirectoryHandle(str(self.temp_dir / "sub") + os.sep).exists())

    def test_identity(self):
        handle = LocalFileHandle(str(self.temp_dir / "sub" / "a.txt"))
        self.assertEqual(handle.name, "a.txt")
        self.assertEqual(handle.full_name, str(self.temp_dir / "sub" / "a.txt"))
        self.assertEqual(handle.parent, str(self.temp_dir / "sub") + os.sep)
        self.assertEqual(handle.root, self.temp_dir.anchor)

    def test_copy_and_move(self):
        source = LocalFileHandle(str(self.temp_dir / "a.txt"))
        source.write_all_bytes(b"data")
        target = LocalFileHandle(str(self.temp_dir / "b.txt"))
        source.copy_to(target)
        self.assertEqual(target.read_all_bytes(), b"data")
        self.assertRaises(AlreadyExists, source.copy_to, target, False)
        moved = LocalFileHandle(str(self.temp_dir / "c.txt"))
        target.move_to(moved)
        self.assertFalse(target.exists())
        self.assertEqual(moved.read_all_bytes(), b"data")

    def test_none_url(self):
        handle = LocalFileHandle(None)
        self.assertIsNone(handle.full_name)
        self.assertIsNone(handle.name)
        self.assertRaises(UnknownUrlType, handle.exists)


class TestLocalDirectories(ut.TestCase):

    def setUp(self):
        self._temp_dir = tempfile.TemporaryDirectory()
        self.temp_dir = pathlib.Path(self._temp_dir.name)
        self.root = LocalDirectoryHandle(str(self.temp_dir) + os.sep)

    def tearDown(self):
        self._temp_dir.cleanup()

    def test_full_name_has_separator(self):
        self.assertTrue(self.root.full_name.endswith(os.sep))
        self.assertEqual(self.root.subdir("x").full_name, str(self.temp_dir / "x") + os.sep)

    def test_create(self):
        directory = self.root.subdir("one/two")
        self.assertFalse(directory.exists())
        directory.create()
        self.assertTrue((self.temp_dir / "one" / "two").is_dir())
        directory.create()
        self.assertRaises(AlreadyExists, directory.create, True)

    def test_listing(self):
        self.root.child("b.txt").write_all_bytes(b"b")
        self.root.child("a.txt").write_all_bytes(b"a")
        self.root.subdir("sub").create()
        self.root.subdir("sub").child("c.txt").write_all_bytes(b"c")
        self.assertEqual([x.name for x in self.root.get_files()], ["a.txt", "b.txt"])
        directories = self.root.get_directories()
        self.assertEqual(len(directories), 1)
        self.assertEqual(directories[0].name, "sub")
        self.assertTrue(directories[0].full_name.endswith(os.sep))
        self.assertEqual(sorted(x.name for x in self.root.walk()), ["a.txt", "b.txt", "c.txt"])

    def test_delete_empty(self):
        directory = self.root.subdir("empty").create()
        self.assertTrue(directory.delete(recurse=False))
        self.assertFalse(directory.exists())
        self.assertTrue(directory.delete(recurse=False))

    def test_delete_not_empty(self):
        directory = self.root.subdir("full").create()
        directory.child("a.txt").write_all_bytes(b"a")
        self.assertRaises(NotEmpty, directory.delete, False)
        self.assertFalse(directory.delete(recurse=False, stop_on_error=False))
        self.assertTrue(directory.child("a.txt").exists())

    def test_delete_recursive(self):
        directory = self.root.subdir("full").create()
        directory.child("a.txt").write_all_bytes(b"a")
        directory.subdir("nested").create().child("b.txt").write_all_bytes(b"b")
        messages = _Messages()
        self.assertTrue(directory.delete(recurse=True, callback=messages))
        self.assertFalse((self.temp_dir / "full").exists())
        self.assertIn("deleted", messages.messages[-1][0])

    def test_copy_and_move(self):
        source = self.root.subdir("src").create()
        source.child("a.txt").write_all_bytes(b"a")
        source.subdir("nested").create().child("b.txt").write_all_bytes(b"b")
        copy = source.copy_to(self.root.subdir("copy"))
        self.assertEqual(copy.subdir("nested").child("b.txt").read_all_bytes(), b"b")
        self.assertTrue(source.exists())
        moved = copy.move_to(self.root.subdir("moved"))
        self.assertFalse(copy.exists())
        self.assertEqual(moved.child("a.txt").read_all_bytes(), b"a")

    def test_path_combine_replaces_bare_separator(self):
        self.assertEqual(
            LocalDirectoryHandle.combine_paths("base", "/", "file.txt"),
            os.path.join("base", "_/", "file.txt")
        )


class TestNetworkNaming(ut.TestCase):

    def test_file_identity(self):
        handle = NetworkFileHandle("\\\\server\\share\\dir\\file.txt")
        self.assertEqual(handle.full_name, "\\\\server\\share\\dir\\file.txt")
        self.assertEqual(handle.name, "file.txt")
        self.assertEqual(handle.parent, "\\\\server\\share\\dir\\")
        self.assertEqual(handle.root, "\\\\server\\share\\")
        self.assertEqual(handle.separator, "\\")

    def test_directory_identity(self):
        handle = NetworkDirectoryHandle("\\\\server\\share\\dir\\")
        self.assertEqual(handle.full_name, "\\\\server\\share\\dir\\")
        self.assertEqual(handle.name, "dir")
        self.assertEqual(handle.child("a.txt").full_name, "\\\\server\\share\\dir\\a.txt")
        self.assertIsInstance(handle.subdir("sub"), NetworkDirectoryHandle)

    def test_combine(self):
        self.assertEqual(
            NetworkDirectoryHandle.combine_paths("\\\\server\\share\\", "a", "b.txt"),
            "\\\\server\\share\\a\\b.txt"
        )
