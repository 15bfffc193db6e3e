import os
import shlex
import shutil
import stat
import tempfile
import unittest
from pathlib import Path

from xunlei_installer.config import Config
from xunlei_installer.lib.env import Paths
from xunlei_installer.lib.systemd import (
    Systemctl,
    register_service,
    remove_unit_file,
    render_unit,
    unregister_service,
)

from .fakes import FakeServiceControl

LAUNCHER = ["/usr/local/bin/xunlei-installer"]


class TestRenderUnit(unittest.TestCase):
    def test_without_auth(self):
        cfg = Config.from_values({"port": 6000, "download_path": "/srv/dl", "config_path": "/srv/cfg"})
        unit = render_unit(cfg, LAUNCHER, 1000)
        self.assertIn("Description=Thunder remote download service", unit)
        self.assertIn(
            'ExecStart="/usr/local/bin/xunlei-installer" "launch" "--host" "0.0.0.0" "--port" "6000" '
            '"--download-path" "/srv/dl" "--config-path" "/srv/cfg"\n',
            unit,
        )
        self.assertIn("LimitNOFILE=1024", unit)
        self.assertIn("LimitNPROC=512", unit)
        self.assertIn("User=1000", unit)
        self.assertIn("WantedBy=multi-user.target", unit)
        self.assertNotIn("--username", unit)

    def test_with_auth(self):
        cfg = Config.from_values({"username": "admin", "password": "pw", "host": "::1"})
        unit = render_unit(cfg, LAUNCHER, 0)
        self.assertIn('"--host" "::1"', unit)
        self.assertIn('"--username" "admin" "--password" "pw"', unit)

    def test_partial_auth_is_dropped(self):
        cfg = Config.from_values({"username": "admin"})
        self.assertNotIn("--username", render_unit(cfg, LAUNCHER, 0))

    def test_spaces_and_specifiers_are_quoted(self):
        cfg = Config.from_values(
            {"download_path": "/srv/My Downloads", "username": "admin", "password": 'p%w "d\\'}
        )
        unit = render_unit(cfg, ["/opt/my venv/bin/xunlei-installer"], 0)
        exec_line = next(line for line in unit.splitlines() if line.startswith("ExecStart="))
        self.assertTrue(exec_line.startswith('ExecStart="/opt/my venv/bin/xunlei-installer" "launch"'))
        self.assertIn('"--download-path" "/srv/My Downloads"', exec_line)
        self.assertIn('"--password" "p%%w \\"d\\\\"', exec_line)

        args = shlex.split(exec_line[len("ExecStart="):].replace("%%", "%"))
        self.assertEqual(args[args.index("--download-path") + 1], "/srv/My Downloads")
        self.assertEqual(args[args.index("--password") + 1], 'p%w "d\\')


class TestRegistration(unittest.TestCase):
    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp(prefix="xunlei_systemd_"))
        self.paths = Paths().rebased(str(self.test_dir))
        self.config = Config.from_values({})

    def tearDown(self):
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def _register(self, control):
        return register_service(control=control, paths=self.paths, config=self.config, launcher=LAUNCHER, uid=1000)

    def test_register_writes_unit_and_starts(self):
        control = FakeServiceControl()
        unit = self._register(control)
        self.assertEqual(unit, Path(self.paths.unit_file))
        self.assertEqual(stat.S_IMODE(os.stat(unit).st_mode), 0o666)
        self.assertEqual(control.calls, [["daemon-reload"], ["enable", "xunlei"], ["start", "xunlei"]])

    def test_unsupported_skips_and_warns(self):
        control = FakeServiceControl(supported=False)
        with self.assertLogs("xunlei_installer.lib.systemd", level="WARNING") as logs:
            self.assertIsNone(self._register(control))
        self.assertIn("does not support systemctl", "\n".join(logs.output))
        self.assertFalse(os.path.lexists(self.paths.unit_file))
        self.assertEqual(control.calls, [])

    def test_failures_are_logged_and_sequence_continues(self):
        control = FakeServiceControl(failing=["daemon-reload"], broken=["enable"])
        with self.assertLogs("xunlei_installer.lib.systemd", level="ERROR"):
            self._register(control)
        self.assertEqual([c[0] for c in control.calls], ["daemon-reload", "enable", "start"])

    def test_unregister(self):
        control = FakeServiceControl(failing=["stop"])
        self.assertTrue(unregister_service(control=control))
        self.assertEqual(control.calls, [["disable", "xunlei"], ["stop", "xunlei"], ["daemon-reload"]])
        self.assertFalse(unregister_service(control=FakeServiceControl(supported=False)))

    def test_remove_unit_file(self):
        self._register(FakeServiceControl())
        remove_unit_file(self.paths)
        self.assertFalse(os.path.exists(self.paths.unit_file))
        remove_unit_file(self.paths)


class TestSystemctl(unittest.TestCase):
    def test_missing_binary_is_unsupported(self):
        self.assertFalse(Systemctl(binary="/nonexistent/bin/systemctl").probe())

    def test_non_zero_help_exit_is_unsupported(self):
        self.assertFalse(Systemctl(binary="false").probe())

    def test_run_failure_is_logged_and_returned(self):
        with self.assertLogs("xunlei_installer.lib.systemd", level="ERROR") as logs:
            res = Systemctl(binary="false").run(["daemon-reload"])
        self.assertIs(res.ok, False)
        self.assertEqual(res.argv, ["false", "daemon-reload"])
        self.assertIn("false daemon-reload", "\n".join(logs.output))

    def test_run_success(self):
        res = Systemctl(binary="true").run(["daemon-reload"])
        self.assertTrue(res.ok)


if __name__ == "__main__":
    unittest.main()
