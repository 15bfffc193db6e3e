import ipaddress
import shutil
import tempfile
import unittest
from pathlib import Path

from xunlei_installer.config import (
    Config,
    ValidationError,
    build_config,
    load_options_file,
    parse_host,
    parse_port,
)


class TestPortValidation(unittest.TestCase):
    def test_range_bounds(self):
        self.assertEqual(parse_port("1024"), 1024)
        self.assertEqual(parse_port("65535"), 65535)
        self.assertEqual(parse_port(5055), 5055)

    def test_out_of_range_names_range(self):
        for bad in ("1023", "65536", "0", "-1"):
            with self.assertRaises(ValidationError) as cm:
                parse_port(bad)
            self.assertIn("1024-65535", str(cm.exception))

    def test_not_a_number(self):
        with self.assertRaises(ValidationError) as cm:
            parse_port("http")
        self.assertIn("isn't a port number", str(cm.exception))


class TestHostValidation(unittest.TestCase):
    def test_accepts_ip_literals(self):
        self.assertEqual(parse_host("127.0.0.1"), ipaddress.ip_address("127.0.0.1"))
        self.assertEqual(parse_host("::1").version, 6)

    def test_rejects_names(self):
        for bad in ("not-an-ip", "localhost", "", "300.1.1.1"):
            with self.assertRaises(ValidationError):
                parse_host(bad)


class TestConfig(unittest.TestCase):
    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix="xunlei_config_"))

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def test_defaults(self):
        cfg = Config.from_values({})
        self.assertEqual(str(cfg.host), "0.0.0.0")
        self.assertEqual(cfg.port, 5055)
        self.assertEqual(cfg.config_path, "/opt/xunlei")
        self.assertEqual(cfg.download_path, "/tmp/downloads")
        self.assertFalse(cfg.has_auth)

    def test_auth_needs_both_fields(self):
        self.assertFalse(Config.from_values({"username": "admin"}).has_auth)
        self.assertTrue(Config.from_values({"username": "admin", "password": "secret"}).has_auth)

    def test_immutable(self):
        cfg = Config.from_values({})
        with self.assertRaises(Exception):
            cfg.port = 6000  # type: ignore[misc]

    def test_public_dict_hides_password(self):
        cfg = Config.from_values({"username": "admin", "password": "secret"})
        self.assertNotIn("secret", str(cfg.public_dict()))
        self.assertTrue(cfg.public_dict()["auth"])

    def test_unknown_keys_rejected(self):
        with self.assertRaises(ValidationError):
            Config.from_values({"prot": 6000})

    def test_options_file_and_cli_precedence(self):
        opts = self.test_dir / "xunlei.yaml"
        opts.write_text("port: 6000\nhost: 127.0.0.1\ndownload-path: /srv/dl\n", encoding="utf-8")

        self.assertEqual(load_options_file(str(opts))["download_path"], "/srv/dl")

        cfg = build_config({"port": "7000", "host": None}, str(opts))
        self.assertEqual(cfg.port, 7000)
        self.assertEqual(str(cfg.host), "127.0.0.1")
        self.assertEqual(cfg.download_path, "/srv/dl")

    def test_options_file_must_be_mapping(self):
        opts = self.test_dir / "bad.yml"
        opts.write_text("- 1\n- 2\n", encoding="utf-8")
        with self.assertRaises(ValidationError):
            load_options_file(str(opts))

    def test_options_file_invalid_port(self):
        opts = self.test_dir / "bad-port.yaml"
        opts.write_text("port: 80\n", encoding="utf-8")
        with self.assertRaises(ValidationError):
            build_config({}, str(opts))


if __name__ == "__main__":
    unittest.main()
