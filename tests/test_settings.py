"""Tests for settings persistence and the log facade."""

import logging

from archshape import log
from archshape import settings as settings_module
from archshape.settings import (
    ArchShapeSettings,
    ShapeCacheSettings,
    VoxelSettings,
    get_settings,
    set_settings,
)


class TestSettings:
    def test_defaults(self):
        settings = ArchShapeSettings()
        assert settings.voxel.resolution == 8
        assert settings.shape_cache.empty_retry_interval == 0.0
        assert settings.debug_state is False

    def test_save_load(self, tmp_path):
        settings = ArchShapeSettings(
            voxel=VoxelSettings(resolution=16),
            shape_cache=ShapeCacheSettings(empty_retry_interval=2.5),
            debug_state=True,
            log_level="DEBUG",
        )
        path = tmp_path / "conf" / "archshape.json"
        settings.save(path)
        assert ArchShapeSettings.load(path) == settings

    def test_missing_file_gives_defaults(self, tmp_path):
        assert ArchShapeSettings.load(tmp_path / "none.json") == ArchShapeSettings()

    def test_bad_file_gives_defaults(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{broken", encoding="utf-8")
        assert ArchShapeSettings.load(path) == ArchShapeSettings()

    def test_partial_dict(self):
        settings = ArchShapeSettings.from_dict({"voxel": {"resolution": 4}})
        assert settings.voxel.resolution == 4
        assert settings.log_level == "INFO"

    def test_set_settings_applies_log_level(self):
        previous = get_settings()
        try:
            set_settings(ArchShapeSettings(log_level="DEBUG"))
            assert get_settings().log_level == "DEBUG"
            assert log.is_debug_enabled()
        finally:
            set_settings(previous)
        assert not log.is_debug_enabled()

    def test_default_settings_apply_log_level(self, monkeypatch):
        monkeypatch.setattr(settings_module, "_settings", None)
        log.set_level(log.Level.WARN)
        assert get_settings().log_level == "INFO"
        assert logging.getLogger(log.LOGGER_NAME).level == logging.INFO


class TestLog:
    def setup_method(self):
        self.records = []
        log.set_level(log.Level.DEBUG)
        log.set_callback(lambda level, message: self.records.append((level, message)))

    def teardown_method(self):
        log.set_callback(None)
        log.set_level(log.Level.INFO)

    def test_levels(self):
        log.debug("d")
        log.info("i")
        log.warn("w")
        log.warning("w2")
        log.error("e")
        assert [level for level, _ in self.records] == [
            logging.DEBUG, logging.INFO, logging.WARNING, logging.WARNING, logging.ERROR,
        ]

    def test_exception_with_context(self):
        try:
            raise KeyError("slot")
        except KeyError as e:
            log.error(e, "Lookup failed")
        level, message = self.records[0]
        assert level == logging.ERROR
        assert message.startswith("Lookup failed: KeyError: 'slot'")
        assert "Traceback" in message

    def test_set_level_by_name(self):
        log.set_level("WARNING")
        log.info("hidden")
        log.warn("shown")
        assert [m for _, m in self.records] == ["shown"]

    def test_callback_removed(self):
        log.set_callback(None)
        log.info("nobody listens")
        assert self.records == []

    def test_setup_logging_file(self, tmp_path):
        path = tmp_path / "archshape.log"
        log.setup_logging(logging.INFO, str(path))
        try:
            log.info("to file")
        finally:
            for handler in list(logging.getLogger(log.LOGGER_NAME).handlers):
                if isinstance(handler, logging.StreamHandler):
                    handler.close()
                    logging.getLogger(log.LOGGER_NAME).removeHandler(handler)
        assert "to file" in path.read_text(encoding="utf-8")
