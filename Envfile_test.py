# Envfile_test.py
import os, shutil, tempfile, unittest

from envfile import is_env_line, filter_env_lines, read_env_file, build_environment


class TestEnvFile(unittest.TestCase):
    def test_matching_lines(self):
        for line in ("KEY=VALUE", "KEY=", "=VALUE", "KEY=a#b", "KEY==x", "export K=V", " K = V "):
            self.assertTrue(is_env_line(line), line)

    def test_skipped_lines(self):
        for line in ("", "FOO", "#FOO=bar", "# comment", "K#=V", "   #X=1"):
            self.assertFalse(is_env_line(line), line)

    def test_filter_keeps_order_and_text(self):
        text = "\n#KEY1=IGNORED\nKEY1=VALUE1\nKEY2=VALUE2\n\nFOO\n"
        self.assertEqual(filter_env_lines(text), ["KEY1=VALUE1", "KEY2=VALUE2"])

    def test_only_linefeed_splits(self):
        self.assertEqual(filter_env_lines("A=1\r\nB=2"), ["A=1\r", "B=2"])

    def test_build_environment_last_wins(self):
        env = build_environment({"A": "base", "B": "keep"}, ["A=1", "C=x=y", "A=2"])
        self.assertEqual(env, {"A": "2", "B": "keep", "C": "x=y"})

    def test_build_environment_does_not_mutate_base(self):
        base = {"A": "base"}
        build_environment(base, ["A=1"])
        self.assertEqual(base, {"A": "base"})

    def test_read_env_file(self):
        tmp = tempfile.mkdtemp()
        try:
            path = os.path.join(tmp, "env")
            with open(path, "wb") as f:
                f.write(b"#X=1\nX=2\nNAME=caf\xc3\xa9\n")
            self.assertEqual(read_env_file(path), ["X=2", "NAME=café"])
        finally:
            shutil.rmtree(tmp)

    def test_read_env_file_missing(self):
        with self.assertRaises(OSError):
            read_env_file("/definitely-not-real-xyz/env")


if __name__ == "__main__":
    unittest.main(verbosity=2)
