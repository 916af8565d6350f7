import os
import tempfile
import unittest
from unittest.mock import patch

from filestore.__main__ import main
from filestore.config import get_settings
from filestore.dependencies import get_file_store, reset_file_store


class MainTests(unittest.TestCase):
    def setUp(self):
        get_settings.cache_clear()
        reset_file_store()
        self.env = patch.dict(os.environ, {}, clear=False)
        self.env.start()
        for key in ("DATABASE_URL", "USE_IN_MEMORY_BACKENDS", "PORT", "HOST"):
            os.environ.pop(key, None)

    def tearDown(self):
        reset_file_store()
        get_settings.cache_clear()
        self.env.stop()

    @patch("filestore.__main__.uvicorn.run")
    def test_initializes_store_then_serves(self, mock_run):
        with tempfile.TemporaryDirectory() as tmp:
            db_file = os.path.join(tmp, "single.db")
            code = main(["--db-file", db_file, "--port", "4321"])

            self.assertEqual(code, 0)
            self.assertTrue(os.path.exists(db_file))
            self.assertEqual(get_file_store().get().content, "")
            mock_run.assert_called_once()
            self.assertEqual(mock_run.call_args.kwargs["port"], 4321)
            reset_file_store()

    @patch("filestore.__main__.uvicorn.run")
    def test_port_defaults_to_3000(self, mock_run):
        with tempfile.TemporaryDirectory() as tmp:
            main(["--db-file", os.path.join(tmp, "single.db")])
            self.assertEqual(mock_run.call_args.kwargs["port"], 3000)
            reset_file_store()

    @patch("filestore.__main__.uvicorn.run")
    def test_port_from_environment(self, mock_run):
        os.environ["PORT"] = "8080"
        with tempfile.TemporaryDirectory() as tmp:
            main(["--db-file", os.path.join(tmp, "single.db")])
            self.assertEqual(mock_run.call_args.kwargs["port"], 8080)
            reset_file_store()

    @patch("filestore.__main__.uvicorn.run")
    def test_unopenable_database_exits_nonzero(self, mock_run):
        with tempfile.TemporaryDirectory() as tmp:
            db_file = os.path.join(tmp, "missing", "single.db")
            code = main(["--db-file", db_file])

        self.assertEqual(code, 1)
        mock_run.assert_not_called()

    @patch("filestore.__main__.uvicorn.run")
    @patch(
        "filestore.db.create_engine",
        side_effect=ModuleNotFoundError("No module named 'psycopg2'"),
    )
    def test_missing_database_driver_exits_nonzero(self, _mock_engine, mock_run):
        os.environ["DATABASE_URL"] = "postgresql://user@localhost/single"
        with self.assertLogs("filestore.__main__", level="CRITICAL") as logs:
            code = main([])

        self.assertEqual(code, 1)
        self.assertIn("psycopg2", logs.output[0])
        mock_run.assert_not_called()

    @patch("filestore.__main__.uvicorn.run")
    def test_start_is_logged_before_handing_off(self, mock_run):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertLogs("filestore.__main__", level="INFO") as logs:
                main(["--db-file", os.path.join(tmp, "single.db"), "--port", "4000"])
            reset_file_store()

        self.assertTrue(
            any("Starting server on 0.0.0.0:4000" in line for line in logs.output)
        )
        mock_run.assert_called_once()


if __name__ == "__main__":
    unittest.main()
